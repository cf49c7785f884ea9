# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
This submodule contains static typing stuff (abstract interfaces and
type aliases) used throughout the `n6structmap` package (and, possibly,
in client code that defines its own fallback converters or options).

Note: the static typing stuff does *not* affect the runtime semantics;
in particular, it does *not* provide runtime type checks.
"""

from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Protocol,
)

if TYPE_CHECKING:
    from n6structmap.config import MapperConfig
    from n6structmap.converters import ValueRef


Value = Any

# A type annotation (e.g.: `int`, `list[Foo]`, `Optional[Bar]`...).
TypeSpec = Any


class FallbackConverter(Protocol):

    """
    An abstract interface of a *fallback converter*: a callable that
    is offered a source/destination pair only when no structural rule
    of the conversion engine applies.

    It takes two positional arguments -- both being instances of
    `n6structmap.converters.ValueRef` -- the source one (read-only) and
    the destination one (writable with its `set()` method).

    It should return:

    * a true value -- if it *handled* the pair (i.e., has set the
      destination value);

    * a false value (typically `False`) -- if it *declines* (then the
      next converter is tried, and if there is none, the conversion
      fails with `n6structmap.exceptions.ConversionError`).

    Any exception it raises aborts the whole mapping call (exceptions
    other than `n6structmap.exceptions.MappingError` are wrapped in
    `n6structmap.exceptions.ConverterError`).

    A generator function is *not* a valid fallback converter; a plain
    function is. For example:

        def datetime_to_timestamp(source, destination):
            if isinstance(source.value, datetime) and destination.type is int:
                destination.set(int(source.value.timestamp()))
                return True
            return False
    """

    def __call__(self, __source: 'ValueRef', __destination: 'ValueRef') -> bool:
        raise NotImplementedError


# An *option* takes a configuration and returns its (modified) copy.
Option = Callable[['MapperConfig'], 'MapperConfig']
