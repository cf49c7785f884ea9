# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
The *n6structmap*'s entry point: `map_values()`.

>>> import dataclasses
>>> from typing import Optional
>>> @dataclasses.dataclass
... class UserRecord:
...     ID: int
...     Name: str
...     PasswordHash: bytes
...
>>> @dataclasses.dataclass
... class UserResponse:
...     ID: Optional[int] = None
...     Name: str = ''
...
>>> response = UserResponse()
>>> map_values(UserRecord(42, 'John', b'...'), response)
['UserRecord.PasswordHash']
>>> response
UserResponse(ID=42, Name='John')
"""

from collections.abc import (
    MutableMapping,
    MutableSequence,
)
from typing import Any

from n6structmap.common_helpers import type_name
from n6structmap.config import build_config
from n6structmap.converters import StructuralConverter
from n6structmap.exceptions import ShapeError
from n6structmap.interfaces import (
    Option,
    TypeSpec,
    Value,
)
from n6structmap.log_helpers import get_logger
from n6structmap.shapes import (
    Kind,
    ShapeRegistry,
    default_registry,
)


LOGGER = get_logger(__name__)


def map_values(source: Value,
               destination: Value,
               *options: Option,
               source_type: TypeSpec = None,
               destination_type: TypeSpec = None,
               registry: ShapeRegistry = default_registry) -> list[str]:
    """
    Populate `destination` from `source` (both being structs or both
    being slices); return the list of the qualified names of source
    fields that have no counterpart in the destination type.

    Args:
        `source`:
            The source value (it is never modified).
        `destination`:
            The destination value; it must be *addressable*, i.e., be
            a mutable struct (not a frozen dataclass or a named tuple)
            or a mutable sequence -- consistently with `destination_type`
            if that is given (e.g., a `list` cannot be described as a
            `tuple[...]`).
        Any number of positional args:
            Options (see: `n6structmap.config`), e.g., the result of
            `with_mapping(...)` or `with_converters(...)`.

    Kwargs (optional):
        `source_type`, `destination_type`:
            Type annotations describing the top-level values; they
            default to the runtime classes of the values (for a plain
            `list` it means `list[Any]`, so, e.g., to convert list
            elements into instances of a certain struct class, specify
            `destination_type=list[ThatClass]`).
        `registry`:
            The shape registry to be used (default: the package-wide
            one).

    Raises:
        `n6structmap.exceptions.ShapeError` -- if the destination is
        not addressable or the top-level shapes do not match;
        `n6structmap.exceptions.MappingError` (another subclass) -- if
        some part of the value cannot be converted;
        `TypeError` -- for programming errors (e.g., unresolvable
        annotations).
    """
    config = build_config(options)
    source_shape = registry.shape_of(
        source_type if source_type is not None else type(source))
    destination_shape = registry.shape_of(
        destination_type if destination_type is not None else type(destination))

    if not _is_addressable(destination, destination_shape):
        raise ShapeError('{} is not addressable'.format(type_name(destination)))

    if not (source_shape.kind is destination_shape.kind
            and source_shape.kind in (Kind.STRUCT, Kind.SLICE)):
        raise ShapeError('cannot map {} to {}'.format(type_name(source),
                                                      type_name(destination)))

    converter = StructuralConverter(config, registry)
    if source_shape.kind is Kind.STRUCT:
        convert = converter.convert_struct
    else:
        convert = converter.convert_slice

    LOGGER.debug('Mapping %a onto %a...', source_shape, destination_shape)
    _, unconverted = convert(source, source_shape, destination, destination_shape)
    if unconverted:
        LOGGER.debug('%d source field(s) not converted: %s',
                      len(unconverted), ', '.join(unconverted))
    return unconverted


def _is_addressable(destination: Value, destination_shape: Any) -> bool:
    # (the destination must be populated in place, never replaced)
    if destination_shape.kind is Kind.STRUCT:
        return (destination_shape.is_mutable
                and isinstance(destination, destination_shape.type))
    if destination_shape.kind is Kind.SLICE:
        return (destination_shape.is_mutable
                and isinstance(destination, MutableSequence))
    return isinstance(destination, (MutableSequence, MutableMapping))
