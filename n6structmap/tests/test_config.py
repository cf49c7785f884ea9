# Copyright (c) 2025-2026 NASK. All rights reserved.

import os.path as osp
import tempfile
import unittest
from unittest.mock import sentinel as sen

from unittest_expander import (
    expand,
    foreach,
    param,
)

from n6structmap.config import (
    MapperConfig,
    build_config,
    read_mapping_table,
    with_converters,
    with_mapping,
    with_mapping_from_config,
)
from n6structmap.exceptions import MappingConfigError


def _converter_a(source, destination):
    return False


def _converter_b(source, destination):
    return False


@expand
class Test__MapperConfig__resolve_field_name(unittest.TestCase):

    @foreach(
        param({}, 'User1', 'ID', 'ID'),
        param({'ID': 'UUID'}, 'User1', 'ID', 'UUID'),
        param({'ID': ''}, 'User1', 'ID', None),
        param({'Group1.ID': 'Name'}, 'Group1', 'ID', 'Name'),
        param({'Group1.ID': 'Name'}, 'User1', 'ID', 'ID'),
        param({'Group1.ID': ''}, 'Group1', 'ID', None),
        param({'ID': 'UUID', 'Group1.ID': 'Name'}, 'Group1', 'ID', 'Name'),
        param({'ID': 'UUID', 'Group1.ID': 'Name'}, 'User1', 'ID', 'UUID'),
        param({'ID': '', 'Group1.ID': 'Name'}, 'Group1', 'ID', 'Name'),
        param({'ID': 'UUID', 'Group1.ID': ''}, 'Group1', 'ID', None),
        param({'id': 'UUID'}, 'User1', 'ID', 'ID'),
    )
    def test(self, mapping, source_type_name, field_name, expected):
        config = MapperConfig(mapping=mapping)
        self.assertEqual(config.resolve_field_name(source_type_name, field_name), expected)


class Test__build_config(unittest.TestCase):

    def test_blank(self):
        config = build_config([])
        self.assertEqual(config, MapperConfig())
        self.assertEqual(config.mapping, {})
        self.assertEqual(config.converters, ())

    def test_options_applied_in_order(self):
        config = build_config([
            with_converters(_converter_a),
            with_mapping({'ID': 'UUID'}),
            with_converters(_converter_b, _converter_a),
            with_mapping({'Name': 'Title'}),
        ])
        self.assertEqual(config.mapping, {'Name': 'Title'})
        self.assertEqual(config.converters, (_converter_b, _converter_a))

    def test_custom_option(self):
        def option(config):
            return MapperConfig(mapping={'X': 'Y'}, converters=config.converters)
        config = build_config([with_converters(_converter_a), option])
        self.assertEqual(config.mapping, {'X': 'Y'})
        self.assertEqual(config.converters, (_converter_a,))

    def test_option_returning_something_else(self):
        with self.assertRaises(TypeError):
            build_config([lambda config: sen.not_a_config])

    def test_config_is_immutable(self):
        config = build_config([])
        with self.assertRaises(AttributeError):
            config.mapping = {'ID': 'UUID'}


class Test__with_mapping(unittest.TestCase):

    def test_table_is_copied(self):
        table = {'ID': 'UUID'}
        option = with_mapping(table)
        table['ID'] = ''
        self.assertEqual(option(MapperConfig()).mapping, {'ID': 'UUID'})

    def test_non_str_entries(self):
        with self.assertRaises(TypeError):
            with_mapping({'ID': None})
        with self.assertRaises(TypeError):
            with_mapping({1: 'ID'})


class Test__with_converters(unittest.TestCase):

    def test_non_callable(self):
        with self.assertRaises(TypeError):
            with_converters(_converter_a, 'not a converter')


class _MappingFileMixin:

    def setUp(self):
        tmp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(tmp_dir.cleanup)
        self.tmp_dir_path = tmp_dir.name

    def make_file(self, content, filename='mapping.ini'):
        path = osp.join(self.tmp_dir_path, filename)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path


class Test__read_mapping_table(_MappingFileMixin, unittest.TestCase):

    def test_default_section(self):
        path = self.make_file(
            '[mapping]\n'
            'ID = UUID\n'
            'Group1.ID = Name\n'
            'Password =\n'
            '\n'
            '[other]\n'
            'Name = Title\n')
        self.assertEqual(read_mapping_table(path), {
            'ID': 'UUID',
            'Group1.ID': 'Name',
            'Password': '',
        })

    def test_given_section_and_case_preserved(self):
        path = self.make_file(
            '[user_response]\n'
            'CreatedAt = created_at\n'
            'createdAt = created\n')
        self.assertEqual(read_mapping_table(path, section='user_response'), {
            'CreatedAt': 'created_at',
            'createdAt': 'created',
        })

    def test_no_interpolation(self):
        path = self.make_file(
            '[mapping]\n'
            'Ratio = percent%\n')
        self.assertEqual(read_mapping_table(path), {'Ratio': 'percent%'})

    def test_missing_section(self):
        path = self.make_file(
            '[other]\n'
            'ID = UUID\n')
        with self.assertRaises(MappingConfigError) as cm:
            read_mapping_table(path)
        self.assertEqual(cm.exception.config_path, path)
        self.assertIn('[mapping]', str(cm.exception))

    def test_missing_file(self):
        path = osp.join(self.tmp_dir_path, 'no-such-file.ini')
        with self.assertRaises(MappingConfigError) as cm:
            read_mapping_table(path)
        self.assertEqual(cm.exception.config_path, path)
        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_malformed_file(self):
        path = self.make_file('ID = UUID\n')
        with self.assertRaises(MappingConfigError):
            read_mapping_table(path)


class Test__with_mapping_from_config(_MappingFileMixin, unittest.TestCase):

    def test(self):
        path = self.make_file(
            '[mapping]\n'
            'ID = UUID\n')
        config = build_config([
            with_mapping({'Name': 'Title'}),
            with_mapping_from_config(path),
        ])
        self.assertEqual(config.mapping, {'ID': 'UUID'})
