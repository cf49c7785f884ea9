# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
Mapper configuration and the *options* that build it.

A `MapperConfig` is immutable; each option is a function that takes a
configuration and returns its modified copy. Options are applied in the
order they were given, so -- for a particular setting -- the last one
wins:

>>> config = build_config([
...     with_mapping({'ID': 'UUID'}),
...     with_mapping({'Name': 'Title'}),
... ])
>>> config.mapping
{'Name': 'Title'}
>>> config.converters
()

A *mapping table* maps source field names -- either bare (`"Field"`)
or qualified with the source type name (`"Type.Field"`) -- to the names
of the destination fields; the qualified form takes precedence, and an
empty destination name means: *skip the field*:

>>> config = build_config([with_mapping({'ID': 'UUID', 'Group.ID': ''})])
>>> config.resolve_field_name('User', 'ID')
'UUID'
>>> config.resolve_field_name('Group', 'ID') is None
True
>>> config.resolve_field_name('Group', 'Name')
'Name'

A mapping table can also be read from the specified section of an INI
configuration file (see: `read_mapping_table()`).
"""

import configparser
import dataclasses
from collections.abc import (
    Iterable,
    Mapping,
)
from typing import Optional

from n6structmap.common_helpers import ascii_str
from n6structmap.exceptions import MappingConfigError
from n6structmap.interfaces import (
    FallbackConverter,
    Option,
)
from n6structmap.log_helpers import get_logger


LOGGER = get_logger(__name__)

DEFAULT_MAPPING_SECTION = 'mapping'


@dataclasses.dataclass(frozen=True)
class MapperConfig:

    mapping: Mapping[str, str] = dataclasses.field(default_factory=dict)
    converters: tuple[FallbackConverter, ...] = ()

    def resolve_field_name(self, source_type_name: str, field_name: str) -> Optional[str]:
        """
        Get the name of the destination field the given source field
        should be converted into, or `None` if it should be skipped.
        """
        mapping = self.mapping
        qualified_name = '{}.{}'.format(source_type_name, field_name)
        if qualified_name in mapping:
            dest_name = mapping[qualified_name]
        else:
            dest_name = mapping.get(field_name, field_name)
        return dest_name or None


def build_config(options: Iterable[Option]) -> MapperConfig:
    config = MapperConfig()
    for option in options:
        config = option(config)
        if not isinstance(config, MapperConfig):
            raise TypeError('option {!a} did not return a {}'.format(
                option, MapperConfig.__qualname__))
    return config


#
# Options

def with_mapping(table: Mapping[str, str]) -> Option:
    """
    Get an option that sets the mapping table (replacing any mapping
    table set by an earlier option).
    """
    table = dict(table)
    for source_name, dest_name in table.items():
        if not isinstance(source_name, str) or not isinstance(dest_name, str):
            raise TypeError('mapping table entries must be str -> str '
                            '(got: {!a} -> {!a})'.format(source_name, dest_name))

    def option(config: MapperConfig) -> MapperConfig:
        return dataclasses.replace(config, mapping=table)

    return option


def with_converters(*converters: FallbackConverter) -> Option:
    """
    Get an option that sets the fallback converters, to be tried in
    the given order (replacing any converters set by an earlier option).
    """
    for converter in converters:
        if not callable(converter):
            raise TypeError('{!a} is not a callable'.format(converter))

    def option(config: MapperConfig) -> MapperConfig:
        return dataclasses.replace(config, converters=converters)

    return option


def with_mapping_from_config(config_path: str,
                             section: str = DEFAULT_MAPPING_SECTION) -> Option:
    """
    Get an option that sets the mapping table read from the given
    section of the given INI file (see: `read_mapping_table()`).

    The file is read immediately (not when the option is applied).
    """
    return with_mapping(read_mapping_table(config_path, section))


def read_mapping_table(config_path: str,
                       section: str = DEFAULT_MAPPING_SECTION) -> dict[str, str]:
    """
    Read a mapping table from the given section of an INI file.

    Option names are the source field names (case is preserved);
    option values are the destination field names. For example:

        [mapping]
        ID = UUID
        Group1.ID = Name
        Password =

    (the last entry means that the `Password` field is to be skipped).

    Raise `n6structmap.exceptions.MappingConfigError` if the file
    cannot be read or parsed, or if it has no such section.
    """
    parser = configparser.ConfigParser(interpolation=None, default_section='')
    parser.optionxform = str
    try:
        with open(config_path, encoding='utf-8') as f:
            parser.read_file(f, source=config_path)
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        raise MappingConfigError(
            'cannot read mapping table from {} ({})'.format(
                ascii_str(config_path),
                ascii_str(exc)),
            config_path=config_path) from exc
    if not parser.has_section(section):
        raise MappingConfigError(
            'config file {} has no [{}] section'.format(
                ascii_str(config_path),
                ascii_str(section)),
            config_path=config_path)
    table = {name: value.strip() for name, value in parser.items(section)}
    LOGGER.debug('Mapping table read from %a [%s]: %a', config_path, section, table)
    return table
