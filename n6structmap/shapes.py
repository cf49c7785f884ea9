# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
The *type-descriptor registry* of *n6structmap*.

Python values do not carry enough static information to be mapped
structurally (e.g., an empty `list` does not tell what its elements
should be), so the conversion engine works on *shapes* -- descriptors
derived from ordinary type annotations:

* `ScalarShape` -- `bool`, `int`, `float`, `complex`, `str`, `bytes`
  (including their subclasses, e.g.: `IntEnum` classes);
* `OpaqueShape` -- any other non-container class (e.g.: `datetime`,
  `Decimal`, `UUID`, a plain `Enum`...);
* `AnyShape` -- `Any`, `object`, unions of several types (the actual
  shape of such a value is determined from its runtime class);
* `PointerShape` -- `Optional[T]` (`None` is the *nil pointer*);
* `StructShape` -- dataclasses, named tuples and other classes that
  declare annotated attributes;
* `SliceShape` -- `list[T]`, `Sequence[T]`, `tuple[T, ...]` etc.;
* `MapShape` -- `dict[K, V]`, `Mapping[K, V]` etc.

Each shape has a `kind` (a `Kind` member) -- the conversion engine
switches over them -- and a `key`: two shapes describe *identical*
types if their keys are equal.

>>> shape_of(int)
<ScalarShape type=<class 'int'>, kind=<Kind.INT: 'int'>>
>>> shape_of(list[int]).kind, shape_of(list[int]).elem.kind
(<Kind.SLICE: 'slice'>, <Kind.INT: 'int'>)
>>> shape_of(Optional[str]).kind_name
'ptr'
>>> shape_of(Sequence[int]).key == shape_of(list[int]).key
True

Struct shapes resolve their fields lazily (on first use), so types
referring to themselves (e.g., a tree node whose `children` field is a
`list` of nodes) can be described as well.
"""

import copy
import dataclasses
import enum
import types
import typing
from collections.abc import (
    Mapping,
    MutableMapping,
    MutableSequence,
    Sequence,
)
from typing import (
    Any,
    ClassVar,
    NamedTuple,
    Optional,
    TypeVar,
    Union,
)

from pyramid.decorator import reify

from n6structmap.common_helpers import (
    ascii_str,
    attr_repr,
)
from n6structmap.interfaces import (
    TypeSpec,
    Value,
)


class Kind(enum.Enum):
    BOOL = 'bool'
    INT = 'int'
    FLOAT = 'float'
    COMPLEX = 'complex'
    STRING = 'string'
    BYTES = 'bytes'
    STRUCT = 'struct'
    SLICE = 'slice'
    MAP = 'map'
    POINTER = 'ptr'
    INTERFACE = 'interface'
    OPAQUE = 'opaque'


SCALAR_KINDS = frozenset({
    Kind.BOOL,
    Kind.INT,
    Kind.FLOAT,
    Kind.COMPLEX,
    Kind.STRING,
    Kind.BYTES,
})

# (note: `bool` must precede `int` as it is a subclass of `int`)
_SCALAR_BASE_TYPES_AND_KINDS = (
    (bool, Kind.BOOL),
    (int, Kind.INT),
    (float, Kind.FLOAT),
    (complex, Kind.COMPLEX),
    (str, Kind.STRING),
    ((bytes, bytearray), Kind.BYTES),
)

_UNION_ORIGINS = tuple(filter(None, [Union, getattr(types, 'UnionType', None)]))


#
# Shape classes
#

class Shape:

    """
    The base class of all shapes.

    Subclasses define the `kind` class attribute; instances expose the
    described type annotation as the `type` attribute.
    """

    kind: Kind

    def __init__(self, type_spec: TypeSpec):
        self.type = type_spec

    __repr__ = attr_repr('type', 'kind')

    @property
    def key(self) -> Any:
        return self.type

    @property
    def kind_name(self) -> str:
        return self.kind.value

    def zero(self) -> Value:
        """Get a new *zero value* of the described type."""
        raise NotImplementedError

    def copy_value(self, value: Value) -> Value:
        """Get a copy of `value` that can be stored in a destination."""
        return value


class ScalarShape(Shape):

    def __init__(self, type_spec: type, kind: Kind):
        assert kind in SCALAR_KINDS
        super().__init__(type_spec)
        self.kind = kind

    def zero(self) -> Value:
        try:
            return self.type()
        except (TypeError, ValueError):
            # (e.g., an `IntEnum` without a member equal to 0)
            return None

    def coerce(self, value: Value) -> Value:
        """
        Convert `value` (which is expected to be of the same kind) to
        the described type. Raise `TypeError` or `ValueError` if that
        is not possible.

        >>> class UserId(int):
        ...     pass
        ...
        >>> user_id = shape_of(UserId).coerce(42)
        >>> user_id, isinstance(user_id, UserId)
        (42, True)
        >>> class Color(str, enum.Enum):
        ...     RED = 'red'
        ...
        >>> shape_of(str).coerce(Color.RED)
        'red'
        >>> shape_of(Color).coerce('red')
        <Color.RED: 'red'>
        """
        if type(value) is self.type:
            return value
        if value is None:
            # (note: `bool(None)` would silently give `False`)
            raise TypeError('None is not a value of {}'.format(
                ascii_str(self.type.__qualname__)))
        if self.type is str:
            # (`str()` of a str-based enum member would give 'Cls.NAME')
            return str.__str__(value)
        return self.type(value)


class OpaqueShape(Shape):

    kind = Kind.OPAQUE

    @property
    def kind_name(self) -> str:
        cls = typing.get_origin(self.type) or self.type
        return ascii_str(getattr(cls, '__name__', cls))

    def zero(self) -> Value:
        cls = typing.get_origin(self.type) or self.type
        try:
            return cls()
        except (TypeError, ValueError):
            return None


class AnyShape(Shape):

    kind = Kind.INTERFACE

    @property
    def key(self) -> Any:
        return Any

    def zero(self) -> Value:
        return None


class PointerShape(Shape):

    kind = Kind.POINTER

    def __init__(self, type_spec: TypeSpec, elem: Shape):
        super().__init__(type_spec)
        self.elem = elem

    @property
    def key(self) -> Any:
        return (Kind.POINTER, self.elem.key)

    def zero(self) -> Value:
        return None


class SliceShape(Shape):

    kind = Kind.SLICE

    def __init__(self, type_spec: TypeSpec, elem: Shape, factory: type):
        super().__init__(type_spec)
        self.elem = elem
        self.factory = factory

    __repr__ = attr_repr('type', 'elem', 'factory')

    @property
    def key(self) -> Any:
        return (Kind.SLICE, self.factory, self.elem.key)

    @property
    def is_mutable(self) -> bool:
        return issubclass(self.factory, MutableSequence)

    def zero(self) -> Value:
        return self.factory()

    def copy_value(self, value: Value) -> Value:
        return copy.copy(value)

    def assemble(self, elements: list) -> Value:
        if type(elements) is self.factory:
            return elements
        return self.factory(elements)


class MapShape(Shape):

    kind = Kind.MAP

    def __init__(self, type_spec: TypeSpec, key_shape: Shape, value_shape: Shape, factory: type):
        super().__init__(type_spec)
        self.key_shape = key_shape
        self.value_shape = value_shape
        self.factory = factory

    __repr__ = attr_repr('type', 'key_shape', 'value_shape', 'factory')

    @property
    def key(self) -> Any:
        return (Kind.MAP, self.factory, self.key_shape.key, self.value_shape.key)

    def zero(self) -> Value:
        return self.factory()

    def copy_value(self, value: Value) -> Value:
        return copy.copy(value)


class FieldDescriptor(NamedTuple):
    name: str
    shape: Shape


class StructShape(Shape):

    """
    The shape of a *struct*, i.e., of an instance of a dataclass, of a
    named tuple class or of another class declaring annotated attributes.

    The `fields` (a tuple of `FieldDescriptor` instances, in declaration
    order) are resolved on first access.
    """

    kind = Kind.STRUCT

    def __init__(self, type_spec: type, registry: 'ShapeRegistry'):
        super().__init__(type_spec)
        self._registry = registry

    __repr__ = attr_repr('type')

    @property
    def name(self) -> str:
        return ascii_str(self.type.__name__)

    @property
    def is_named_tuple(self) -> bool:
        return issubclass(self.type, tuple)

    @property
    def is_mutable(self) -> bool:
        if self.is_named_tuple:
            return False
        if dataclasses.is_dataclass(self.type):
            return not self.type.__dataclass_params__.frozen
        return True

    @reify
    def fields(self) -> tuple[FieldDescriptor, ...]:
        cls = self.type
        hints = self._registry.get_type_hints(cls)
        if dataclasses.is_dataclass(cls):
            names = [f.name for f in dataclasses.fields(cls)]
        elif self.is_named_tuple:
            names = list(cls._fields)
        else:
            names = [name for name, hint in hints.items()
                     if not name.startswith('_')
                     and hint is not ClassVar
                     and typing.get_origin(hint) is not ClassVar]
        return tuple(
            FieldDescriptor(name, self._registry.shape_of(hints.get(name, Any)))
            for name in names)

    @reify
    def field_by_name(self) -> dict[str, FieldDescriptor]:
        return {field.name: field for field in self.fields}

    def zero(self) -> Value:
        """
        Make a new instance whose fields are set to their defaults or --
        if there are no defaults -- to the zero values of their shapes.

        Raise `TypeError` if the class cannot be instantiated that way.
        """
        cls = self.type
        if dataclasses.is_dataclass(cls):
            return cls(**{
                f.name: self.field_by_name[f.name].shape.zero()
                for f in dataclasses.fields(cls)
                if f.init
                and f.default is dataclasses.MISSING
                and f.default_factory is dataclasses.MISSING})
        if self.is_named_tuple:
            defaults = cls._field_defaults
            return cls(**{
                name: (defaults[name] if name in defaults
                       else self.field_by_name[name].shape.zero())
                for name in cls._fields})
        instance = cls()
        for field in self.fields:
            if not hasattr(instance, field.name):
                setattr(instance, field.name, field.shape.zero())
        return instance

    def copy_value(self, value: Value) -> Value:
        return copy.copy(value)

    def get_field_value(self, instance: Value, name: str) -> Value:
        return getattr(instance, name, None)

    def with_changes(self, instance: Value, changes: dict[str, Value]) -> Value:
        """
        Get a copy of an *immutable* struct `instance`, with the
        specified fields replaced.
        """
        assert not self.is_mutable
        if not changes:
            return instance
        if self.is_named_tuple:
            return instance._replace(**changes)
        return dataclasses.replace(instance, **changes)


#
# The registry

class ShapeRegistry:

    """
    A registry that makes shapes from type annotations and caches them.
    """

    def __init__(self):
        self._type_spec_to_shape: dict[TypeSpec, Shape] = {}

    def shape_of(self, type_spec: TypeSpec) -> Shape:
        try:
            return self._type_spec_to_shape[type_spec]
        except KeyError:
            pass
        except TypeError:
            # (unhashable annotation)
            return self._make_shape(type_spec)
        shape = self._make_shape(type_spec)
        return self._type_spec_to_shape.setdefault(type_spec, shape)

    @staticmethod
    def get_type_hints(cls: type) -> dict[str, TypeSpec]:
        try:
            return typing.get_type_hints(cls)
        except NameError as exc:
            raise TypeError('cannot resolve type annotations of {} ({})'.format(
                ascii_str(cls.__qualname__),
                ascii_str(exc))) from exc

    #
    # Non-public helpers

    def _make_shape(self, type_spec: TypeSpec) -> Shape:
        if type_spec is None:
            type_spec = type(None)
        if type_spec is Any or type_spec is object:
            return AnyShape(type_spec)
        if isinstance(type_spec, TypeVar):
            return AnyShape(type_spec)
        supertype = getattr(type_spec, '__supertype__', None)
        if supertype is not None:
            # (a `typing.NewType`)
            return self.shape_of(supertype)
        origin = typing.get_origin(type_spec)
        if origin is not None:
            return self._make_shape_from_generic(type_spec, origin, typing.get_args(type_spec))
        if not isinstance(type_spec, type):
            raise TypeError('{!a} is not a supported type annotation'.format(type_spec))
        return self._make_shape_from_class(type_spec)

    def _make_shape_from_generic(self, type_spec, origin, args):
        if origin in _UNION_ORIGINS:
            non_none_args = tuple(arg for arg in args if arg is not type(None))
            if len(non_none_args) == len(args):
                return AnyShape(type_spec)
            if len(non_none_args) == 1:
                return PointerShape(type_spec, self.shape_of(non_none_args[0]))
            return PointerShape(type_spec, AnyShape(Union[non_none_args]))
        if origin is typing.Annotated:
            return self.shape_of(args[0])
        if origin is typing.Literal:
            return self.shape_of(type(args[0]))
        if not isinstance(origin, type):
            return OpaqueShape(type_spec)
        if issubclass(origin, Mapping):
            key_spec, value_spec = args if len(args) == 2 else (Any, Any)
            return MapShape(type_spec,
                            self.shape_of(key_spec),
                            self.shape_of(value_spec),
                            factory=_get_concrete_factory(origin, dict))
        if issubclass(origin, tuple):
            if len(args) == 2 and args[1] is Ellipsis:
                return SliceShape(type_spec, self.shape_of(args[0]), factory=origin)
            # (a fixed-length tuple is not a slice)
            return OpaqueShape(type_spec)
        if issubclass(origin, Sequence) and not issubclass(origin, (str, bytes, bytearray)):
            elem_spec = args[0] if args else Any
            return SliceShape(type_spec,
                              self.shape_of(elem_spec),
                              factory=_get_concrete_factory(origin, list))
        if _looks_like_struct(origin):
            # (a parametrized generic struct class)
            return self.shape_of(origin)
        return OpaqueShape(type_spec)

    def _make_shape_from_class(self, cls):
        for base, kind in _SCALAR_BASE_TYPES_AND_KINDS:
            if issubclass(cls, base):
                return ScalarShape(cls, kind)
        if _looks_like_struct(cls):
            return StructShape(cls, self)
        if issubclass(cls, Mapping):
            key_spec, value_spec = _find_generic_args(cls, Mapping) or (Any, Any)
            return MapShape(cls,
                            self.shape_of(key_spec),
                            self.shape_of(value_spec),
                            factory=_get_concrete_factory(cls, dict))
        if issubclass(cls, Sequence):
            (elem_spec,) = _find_generic_args(cls, Sequence)[:1] or (Any,)
            if issubclass(cls, tuple):
                return SliceShape(cls, self.shape_of(elem_spec), factory=cls)
            return SliceShape(cls,
                              self.shape_of(elem_spec),
                              factory=_get_concrete_factory(cls, list))
        return OpaqueShape(cls)


def _looks_like_struct(cls):
    if dataclasses.is_dataclass(cls):
        return True
    if issubclass(cls, tuple):
        return hasattr(cls, '_fields')
    if cls.__module__ == 'builtins' or issubclass(cls, (enum.Enum, Mapping, Sequence)):
        return False
    return _has_annotations(cls)


def _has_annotations(cls):
    for klass in cls.__mro__:
        if klass is object:
            continue
        try:
            if getattr(klass, '__annotations__', None):
                return True
        except NameError:
            # (annotations referring to something undefined -- yet, they exist)
            return True
    return False


def _find_generic_args(cls, abc_base):
    for klass in cls.__mro__:
        for base in vars(klass).get('__orig_bases__', ()):
            origin = typing.get_origin(base)
            if isinstance(origin, type) and issubclass(origin, abc_base):
                return typing.get_args(base)
    return ()


def _get_concrete_factory(cls, default_factory):
    if issubclass(cls, (MutableMapping, MutableSequence, tuple)) and not _is_abstract(cls):
        return cls
    return default_factory


def _is_abstract(cls):
    return cls.__module__ in ('collections.abc', 'typing') or bool(
        getattr(cls, '__abstractmethods__', None))


default_registry = ShapeRegistry()


def shape_of(type_spec: TypeSpec) -> Shape:
    """Get the shape of the given type annotation (from the default registry)."""
    return default_registry.shape_of(type_spec)
