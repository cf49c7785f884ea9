# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
The conversion engine: a dispatcher that, for a pair of values and
their shapes (see: `n6structmap.shapes`), decides how to bridge them,
and the aggregate converters for structs, slices and maps.

Every conversion step returns a pair: the (possibly new) destination
value and a list of *unconverted field names* (the qualified names of
source fields that have no counterpart in the destination type).

>>> import dataclasses
>>> from n6structmap.shapes import shape_of
>>> @dataclasses.dataclass
... class Record:
...     id: int
...     tags: list[str]
...
>>> @dataclasses.dataclass
... class Response:
...     id: str = ''
...
>>> converter = StructuralConverter()
>>> converter.convert(Record(1, ['a']), shape_of(Record), None, shape_of(Response))
Traceback (most recent call last):
  ...
n6structmap.exceptions.ConversionError: Record.id: cannot convert int to string
"""

import contextlib
from collections.abc import (
    MutableMapping,
    MutableSequence,
)
from typing import (
    Generator,
    Optional,
)

from n6structmap.common_helpers import (
    ascii_str,
    attr_repr,
)
from n6structmap.config import MapperConfig
from n6structmap.exceptions import (
    ConversionError,
    ConverterError,
    CyclicReferenceError,
    MappingError,
)
from n6structmap.interfaces import (
    Value,
)
from n6structmap.log_helpers import get_logger
from n6structmap.shapes import (
    SCALAR_KINDS,
    Kind,
    MapShape,
    Shape,
    ShapeRegistry,
    SliceShape,
    StructShape,
    default_registry,
)


LOGGER = get_logger(__name__)


ConversionResult = tuple[Value, list[str]]


class ValueRef:

    """
    A value together with its shape -- what fallback converters get.

    The source reference is read-only; the destination one can be
    written with the `set()` method:

    >>> from n6structmap.shapes import shape_of
    >>> ref = ValueRef(42, shape_of(int), writable=True)
    >>> ref
    <ValueRef value=42, type=<class 'int'>, kind='int'>
    >>> ref.set(43)
    >>> ref.value
    43
    >>> ValueRef('x', shape_of(str)).set('y')
    Traceback (most recent call last):
      ...
    TypeError: cannot set the value of a read-only reference
    """

    def __init__(self, value: Value, shape: Shape, writable: bool = False):
        self._value = value
        self.shape = shape
        self.writable = writable

    __repr__ = attr_repr('value', 'type', 'kind')

    @property
    def value(self) -> Value:
        return self._value

    @property
    def type(self):
        return self.shape.type

    @property
    def kind(self) -> str:
        return self.shape.kind_name

    def set(self, value: Value) -> None:
        if not self.writable:
            raise TypeError('cannot set the value of a read-only reference')
        self._value = value


class StructuralConverter:

    """
    The conversion engine.

    An instance keeps the state of one mapping call: the configuration
    (mapping table and fallback converters), the shape registry and the
    set of the source aggregates whose conversion is in progress (for
    detection of cyclic value graphs). It should not be shared between
    concurrent calls.
    """

    def __init__(self,
                 config: Optional[MapperConfig] = None,
                 registry: Optional[ShapeRegistry] = None):
        self.config = config if config is not None else MapperConfig()
        self.registry = registry if registry is not None else default_registry
        self._active_source_ids = set()

    __repr__ = attr_repr('config', 'registry')

    #
    # The dispatcher

    def convert(self,
                source: Value,
                source_shape: Shape,
                destination: Value,
                destination_shape: Shape) -> ConversionResult:
        """
        Populate `destination` from `source`; return the new destination
        value and the list of unconverted field names.

        Raise `n6structmap.exceptions.MappingError` (typically,
        `ConversionError`) if the values cannot be bridged.
        """
        s = self._resolve_dynamic(source, source_shape)
        d = destination_shape

        if source is None and s.kind is Kind.INTERFACE:
            # (nil interface: nothing to copy)
            return destination, []

        if s.key == d.key or d.kind is Kind.INTERFACE:
            if source is None:
                return destination, []
            return s.copy_value(source), []

        if s.kind is d.kind and s.kind in SCALAR_KINDS:
            return self._coerce_scalar(source, s, d), []

        if s.kind is Kind.POINTER and d.kind is Kind.POINTER:
            s_elem = self._resolve_dynamic(source, s.elem)
            if self._kinds_match(s_elem, d.elem):
                if source is None:
                    # (nil pointer: the destination is left as it is)
                    return destination, []
                if destination is None:
                    destination = self._allocate(d.elem)
                return self.convert(source, s_elem, destination, d.elem)

        if d.kind is Kind.POINTER and s.kind is not Kind.POINTER:
            if self._kinds_match(s, d.elem):
                if source is None:
                    return destination, []
                if destination is None:
                    destination = self._allocate(d.elem)
                return self.convert(source, s, destination, d.elem)

        if s.kind is Kind.POINTER and d.kind is not Kind.POINTER:
            s_elem = self._resolve_dynamic(source, s.elem)
            if self._kinds_match(s_elem, d):
                if source is None:
                    return destination, []
                return self.convert(source, s_elem, destination, d)

        if s.kind is Kind.STRUCT and d.kind is Kind.STRUCT:
            return self.convert_struct(source, s, destination, d)

        if s.kind is Kind.SLICE and d.kind is Kind.SLICE:
            return self.convert_slice(source, s, destination, d)

        if (s.kind is Kind.MAP and d.kind is Kind.MAP
              and s.key_shape.key == d.key_shape.key):
            return self.convert_map(source, s, destination, d)

        handled, destination = self._try_fallback_converters(source, s, destination, d)
        if handled:
            return destination, []

        raise ConversionError(
            'cannot convert {} to {}'.format(s.kind_name, d.kind_name),
            source_type=s.type,
            destination_type=d.type)

    #
    # Aggregate converters

    def convert_struct(self,
                       source: Value,
                       source_shape: StructShape,
                       destination: Value,
                       destination_shape: StructShape) -> ConversionResult:
        s = source_shape
        d = destination_shape
        if source is None:
            return destination, []
        if destination is None:
            destination = self._allocate(d)
        resolve_field_name = self.config.resolve_field_name
        unconverted = []
        changes = {}
        with self._converting(source):
            for field in s.fields:
                dest_name = resolve_field_name(s.name, field.name)
                if dest_name is None:
                    continue
                qualified_name = '{}.{}'.format(s.name, field.name)
                dest_field = d.field_by_name.get(dest_name)
                if dest_field is None:
                    unconverted.append(qualified_name)
                    continue
                old_value = d.get_field_value(destination, dest_name)
                with MappingError.field_location(qualified_name):
                    new_value, nested_unconverted = self.convert(
                        s.get_field_value(source, field.name),
                        field.shape,
                        old_value,
                        dest_field.shape)
                unconverted.extend(nested_unconverted)
                if new_value is not old_value:
                    changes[dest_name] = new_value
        if d.is_mutable:
            for name, value in changes.items():
                setattr(destination, name, value)
        else:
            destination = d.with_changes(destination, changes)
        return destination, unconverted

    def convert_slice(self,
                      source: Value,
                      source_shape: SliceShape,
                      destination: Value,
                      destination_shape: SliceShape) -> ConversionResult:
        s = source_shape
        d = destination_shape
        if source is None:
            return destination, []
        if destination is None:
            destination = self._allocate(d)
        if isinstance(destination, MutableSequence):
            target = destination
        else:
            target = list(destination)
        unconverted = []
        with self._converting(source):
            for element in source:
                new_element, element_unconverted = self.convert(
                    element,
                    s.elem,
                    self._new_item_destination(d.elem),
                    d.elem)
                target.append(new_element)
                unconverted.extend(element_unconverted)
        if target is not destination:
            destination = d.assemble(target)
        return destination, unconverted

    def convert_map(self,
                    source: Value,
                    source_shape: MapShape,
                    destination: Value,
                    destination_shape: MapShape) -> ConversionResult:
        s = source_shape
        d = destination_shape
        if source is None:
            return destination, []
        if destination is None:
            destination = self._allocate(d)
        elif not isinstance(destination, MutableMapping):
            destination = d.factory(destination)
        unconverted = []
        with self._converting(source):
            for key, value in source.items():
                new_value, value_unconverted = self.convert(
                    value,
                    s.value_shape,
                    self._new_item_destination(d.value_shape),
                    d.value_shape)
                destination[key] = new_value
                unconverted.extend(value_unconverted)
        return destination, unconverted

    #
    # Non-public helpers

    def _resolve_dynamic(self, value: Value, shape: Shape) -> Shape:
        # an *interface* is described by the runtime class of its value
        # (a nil one stays an interface)
        if shape.kind is Kind.INTERFACE and value is not None:
            return self.registry.shape_of(type(value))
        return shape

    @staticmethod
    def _kinds_match(s: Shape, d: Shape) -> bool:
        # (an unresolved, i.e., nil, interface source matches any kind)
        return (s.kind is d.kind
                or d.kind is Kind.INTERFACE
                or s.kind is Kind.INTERFACE)

    @staticmethod
    def _allocate(shape: Shape) -> Value:
        try:
            return shape.zero()
        except (TypeError, ValueError) as exc:
            raise ConversionError(
                'cannot allocate a zero value of {} ({})'.format(
                    ascii_str(getattr(shape.type, '__qualname__', shape.type)),
                    ascii_str(exc)),
                destination_type=shape.type) from exc

    def _new_item_destination(self, shape: Shape) -> Value:
        # (a struct is allocated by `convert_struct()` only if needed)
        if shape.kind is Kind.STRUCT:
            return None
        return self._allocate(shape)

    @contextlib.contextmanager
    def _converting(self, source: Value) -> Generator[None, None, None]:
        source_id = id(source)
        if source_id in self._active_source_ids:
            raise CyclicReferenceError('cyclic reference to a {} value'.format(
                ascii_str(type(source).__name__)))
        self._active_source_ids.add(source_id)
        try:
            yield
        finally:
            self._active_source_ids.discard(source_id)

    def _coerce_scalar(self, source, s, d):
        try:
            return d.coerce(source)
        except (TypeError, ValueError) as exc:
            raise ConversionError(
                'cannot convert {} to {} ({!a} rejected by {})'.format(
                    s.kind_name,
                    d.kind_name,
                    source,
                    ascii_str(getattr(d.type, '__qualname__', d.type))),
                source_type=s.type,
                destination_type=d.type) from exc

    def _try_fallback_converters(self, source, s, destination, d):
        source_ref = ValueRef(source, s)
        dest_ref = ValueRef(destination, d, writable=True)
        for converter in self.config.converters:
            try:
                handled = converter(source_ref, dest_ref)
            except MappingError:
                raise
            except Exception as exc:
                raise ConverterError(ascii_str(exc)) from exc
            if handled:
                return True, dest_ref.value
            LOGGER.debug('Fallback converter %a declined to convert %a to %a',
                         converter, s.type, d.type)
        return False, destination

