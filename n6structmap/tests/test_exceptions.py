# Copyright (c) 2025-2026 NASK. All rights reserved.

import unittest

from unittest_expander import (
    expand,
    foreach,
    param,
)

from n6structmap.exceptions import (
    ConversionError,
    ConverterError,
    CyclicReferenceError,
    MappingConfigError,
    MappingError,
    ShapeError,
)


@expand
class TestMappingError(unittest.TestCase):

    def test_without_location(self):
        exc = MappingError('cannot convert int to string')
        self.assertEqual(str(exc), 'cannot convert int to string')
        self.assertEqual(exc.location_path, ())
        self.assertIsInstance(exc, ValueError)

    def test_nested_field_locations(self):
        with self.assertRaises(ConversionError) as cm:
            with MappingError.field_location('User1.Group'):
                with MappingError.field_location('Group1.ID'):
                    raise ConversionError('cannot convert int to string',
                                          source_type=int,
                                          destination_type=str)
        exc = cm.exception
        self.assertEqual(exc.location_path, ('User1.Group', 'Group1.ID'))
        self.assertEqual(str(exc), 'User1.Group: Group1.ID: cannot convert int to string')
        self.assertEqual(exc.args, ('cannot convert int to string',))
        self.assertIs(exc.source_type, int)
        self.assertIs(exc.destination_type, str)

    def test_other_exceptions_pass_through_intact(self):
        with self.assertRaises(KeyError) as cm:
            with MappingError.field_location('User1.Group'):
                raise KeyError('spam')
        self.assertFalse(hasattr(cm.exception, '_location_path'))

    def test_no_exception(self):
        with MappingError.field_location('User1.Group'):
            pass

    @foreach(
        param(42),
        param(b'User1.Group'),
        param(None),
    )
    def test_non_str_field_name(self, field_name):
        with self.assertRaises(TypeError):
            with MappingError.field_location(field_name):
                pass

    def test_non_ascii_location(self):
        with self.assertRaises(MappingError) as cm:
            with MappingError.field_location('Użytkownik.ID'):
                raise MappingError('spam')
        self.assertEqual(str(cm.exception), 'U\\u017cytkownik.ID: spam')

    def test_repr(self):
        exc = MappingError('spam')
        with self.assertRaises(MappingError):
            with MappingError.field_location('A.b'):
                raise exc
        self.assertEqual(repr(exc),
                         "<MappingError args=('spam',), _location_path=deque(['A.b'])>")

    @foreach(
        param(ShapeError),
        param(ConversionError),
        param(ConverterError),
        param(CyclicReferenceError),
        param(MappingConfigError),
    )
    def test_subclasses(self, exc_class):
        self.assertTrue(issubclass(exc_class, MappingError))
        with self.assertRaises(MappingError) as cm:
            with exc_class.field_location('A.b'):
                raise exc_class('spam')
        self.assertIsInstance(cm.exception, exc_class)
        self.assertEqual(str(cm.exception), 'A.b: spam')

    def test_config_error_path(self):
        exc = MappingConfigError('cannot read', config_path='/etc/mapping.ini')
        self.assertEqual(exc.config_path, '/etc/mapping.ini')
