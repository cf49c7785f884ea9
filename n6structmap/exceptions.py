# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
The *n6structmap* package's public exception classes.
"""

import collections
import contextlib
from typing import (
    Any,
    Generator,
    Optional,
)

from n6structmap.common_helpers import (
    ascii_str,
    attr_repr,
)


class MappingError(ValueError):

    """
    The base class of exceptions raised when the given source value
    cannot be mapped onto the given destination value.

    An additional feature: the `field_location()` class method that
    returns a (single-use) context manager, which is used by the struct
    converter when entering conversion of a field; the method should
    be called with the *qualified field name* (`"OwnerType.FieldName"`)
    as the sole argument. Thanks to that, the `str()` representation of
    any `MappingError` raised within one or more `with` blocks of such
    context managers is automatically prepended with the *location
    path* pointing to the offending field:

    >>> with MappingError.field_location('User.group'):
    ...     with MappingError.field_location('Group.id'):
    ...         raise MappingError('cannot convert int to string')
    ...
    Traceback (most recent call last):
      ...
    n6structmap.exceptions.MappingError: User.group: Group.id: cannot convert int to string

    Exceptions of any other types pass through such `with` blocks
    intact.

    >>> with MappingError.field_location('User.group'):
    ...     raise KeyError('spam')
    ...
    Traceback (most recent call last):
      ...
    KeyError: 'spam'
    """

    def __init__(self, *args):
        super().__init__(*args)
        self._location_path = collections.deque()

    @classmethod
    @contextlib.contextmanager
    def field_location(cls, qualified_field_name, /):
        # type: (str) -> Generator[None, None, None]
        if not isinstance(qualified_field_name, str):
            raise TypeError('{!a} is not a field name (`str`)'.format(qualified_field_name))
        try:
            yield
        except MappingError as exc:
            exc._location_path.appendleft(qualified_field_name)
            raise

    @property
    def location_path(self):
        # type: () -> tuple[str, ...]
        return tuple(self._location_path)

    __repr__ = attr_repr('args', '_location_path')

    def __str__(self):
        return self._get_location_prefix() + super().__str__()

    def _get_location_prefix(self):
        return ''.join('{}: '.format(ascii_str(name)) for name in self._location_path)


class ShapeError(MappingError):
    """
    Raised when the top-level values cannot be mapped at all: they are
    not both structs or both slices, or the destination is not
    addressable (cannot be written to in place).
    """


class ConversionError(MappingError):

    """
    Raised when no conversion strategy (neither a structural rule nor
    any fallback converter) can bridge a source/destination pair.

    Instances expose the `source_type` and `destination_type` attributes
    (the type annotations the pair was described with).
    """

    def __init__(self, *args,
                 source_type: Any = None,
                 destination_type: Any = None):
        super().__init__(*args)
        self.source_type = source_type
        self.destination_type = destination_type


class ConverterError(MappingError):
    """
    Raised when a fallback converter fails (i.e., raises an exception
    which is not a `MappingError`); the original exception is chained
    as `__cause__`.
    """


class CyclicReferenceError(MappingError):
    """
    Raised when the source value graph refers back to an aggregate
    (struct, slice or map) whose conversion is still in progress.
    """


class MappingConfigError(MappingError):

    """
    Raised when a mapping table cannot be obtained from a configuration
    file (the file cannot be read, or the section is missing).
    """

    def __init__(self, *args, config_path: Optional[str] = None):
        super().__init__(*args)
        self.config_path = config_path
