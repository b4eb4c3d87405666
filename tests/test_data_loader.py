"""
Unit tests for loading regions, boundaries, chart configs and GeoJSON files.
"""

import json
import os
import shutil
import tempfile
import unittest

import pandas as pd

from geo_drilldown.data_loader import DataLoader
from geo_drilldown.exceptions import DataLoadError
from tests.fixtures import region_records


class TestDataLoader(unittest.TestCase):
    """Test cases for DataLoader."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.loader = DataLoader()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_file(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def write_csv(self, name, records):
        path = os.path.join(self.temp_dir, name)
        pd.DataFrame(records).to_csv(path, index=False)
        return path

    def test_load_regions_csv(self):
        path = self.write_csv('regions.csv', region_records())
        df = self.loader.load_regions(path)
        self.assertEqual(len(df), len(region_records()))
        self.assertEqual(self.loader.get_loading_statistics(), {'region': len(df)})

    def test_load_regions_json_records(self):
        path = self.write_file('regions.json', json.dumps(region_records()))
        df = self.loader.load_regions(path)
        self.assertIn('Maharashtra', df['name'].tolist())

    def test_load_regions_drops_duplicate_ids(self):
        records = region_records() + [dict(region_records()[1], name='Duplicate')]
        path = self.write_csv('regions.csv', records)
        with self.assertLogs('geo_drilldown.data_loader', level='WARNING'):
            df = self.loader.load_regions(path)
        self.assertEqual(len(df), len(region_records()))
        self.assertNotIn('Duplicate', df['name'].tolist())

    def test_missing_columns(self):
        path = self.write_csv('regions.csv', [{'id': 1, 'name': 'India'}])
        with self.assertRaises(DataLoadError) as cm:
            self.loader.load_regions(path)
        self.assertEqual(cm.exception.missing_columns, ['type'])

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.loader.load_regions(os.path.join(self.temp_dir, 'absent.csv'))

    def test_empty_file(self):
        path = self.write_file('regions.csv', '')
        with self.assertRaises(DataLoadError):
            self.loader.load_regions(path)

    def test_load_boundaries_parses_flags(self):
        path = self.write_file('boundaries.csv',
                               'id,region_id,name,is_default\n'
                               '100,1,India States,yes\n'
                               '101,1,India States (old),no\n'
                               '200,5,Maharashtra Districts,\n')
        df = self.loader.load_boundaries(path)
        self.assertEqual(df['is_default'].tolist(), [True, False, False])

    def test_load_boundaries_adds_optional_columns(self):
        path = self.write_csv('boundaries.csv', [{'id': 100, 'region_id': 1}])
        df = self.loader.load_boundaries(path)
        self.assertEqual(df['name'].tolist(), [''])
        self.assertEqual(df['is_default'].tolist(), [False])

    def test_load_boundaries_rejects_two_defaults(self):
        path = self.write_csv('boundaries.csv', [
            {'id': 100, 'region_id': 1, 'is_default': True},
            {'id': 101, 'region_id': 1, 'is_default': True},
        ])
        with self.assertRaises(DataLoadError):
            self.loader.load_boundaries(path)

    def test_load_chart_config(self):
        path = self.write_file('chart.json', json.dumps({
            'geographic_column': 'state_name',
            'district_column': 'district_name',
            'extra_config': {'filters': [{'column': 'state_name', 'operator': 'not_equals',
                                          'value': 'Bihar'}]}
        }))
        config = self.loader.load_chart_config(path)
        self.assertEqual(config.district_column, 'district_name')
        self.assertEqual(len(config.filters), 1)

    def test_load_chart_config_rejects_invalid_json(self):
        path = self.write_file('chart.json', '{"geographic_column": ')
        with self.assertRaises(DataLoadError):
            self.loader.load_chart_config(path)

        path = self.write_file('list.json', '[1, 2]')
        with self.assertRaises(DataLoadError):
            self.loader.load_chart_config(path)

    def test_load_column_values(self):
        path = self.write_csv('data.csv', [
            {'state_name': 'Maharashtra', 'population': 1},
            {'state_name': 'Maharashtra', 'population': 2},
            {'state_name': None, 'population': 3},
            {'state_name': 'Bihar', 'population': 4},
        ])
        self.assertEqual(self.loader.load_column_values(path, 'state_name'),
                         ['Maharashtra', 'Bihar'])
        with self.assertRaises(DataLoadError):
            self.loader.load_column_values(path, 'district_name')


if __name__ == '__main__':
    unittest.main()
