# Copyright (c) 2025-2026 NASK. All rights reserved.

# Make the package's loggers silent unless the application configures
# logging on its own.
from n6structmap.log_helpers import install_null_handler
install_null_handler()

from n6structmap.config import (                # noqa: E402
    MapperConfig,
    read_mapping_table,
    with_converters,
    with_mapping,
    with_mapping_from_config,
)
from n6structmap.converters import (            # noqa: E402
    StructuralConverter,
    ValueRef,
)
from n6structmap.exceptions import (            # noqa: E402
    ConversionError,
    ConverterError,
    CyclicReferenceError,
    MappingConfigError,
    MappingError,
    ShapeError,
)
from n6structmap.mapper import map_values       # noqa: E402
from n6structmap.shapes import (                # noqa: E402
    Kind,
    ShapeRegistry,
    shape_of,
)

__all__ = [
    'ConversionError',
    'ConverterError',
    'CyclicReferenceError',
    'Kind',
    'MapperConfig',
    'MappingConfigError',
    'MappingError',
    'ShapeError',
    'ShapeRegistry',
    'StructuralConverter',
    'ValueRef',
    'map_values',
    'read_mapping_table',
    'shape_of',
    'with_converters',
    'with_mapping',
    'with_mapping_from_config',
]
