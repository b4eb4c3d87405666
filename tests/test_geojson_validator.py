"""
Unit tests for boundary upload validation.
"""

import json
import unittest

from geo_drilldown.exceptions import BoundaryUploadError
from geo_drilldown.utils.geojson_validator import BoundaryUploadValidator


def feature(**properties):
    return {'type': 'Feature', 'properties': properties, 'geometry': None}


def collection(*features):
    return {'type': 'FeatureCollection', 'features': list(features)}


class TestBoundaryUploadValidator(unittest.TestCase):
    """Test cases for BoundaryUploadValidator."""

    def setUp(self):
        self.validator = BoundaryUploadValidator()
        self.geojson = collection(feature(name='Pune'), feature(name='Nagpur'),
                                  feature(name='Mumbai Suburban'))

    def test_valid_upload(self):
        report = self.validator.validate(self.geojson, 'name')
        self.assertEqual(report.feature_count, 3)
        self.assertEqual(report.feature_keys, ['Pune', 'Nagpur', 'Mumbai Suburban'])
        self.assertFalse(report.data_checked)
        self.assertEqual(report.match_rate, 0.0)

    def test_accepts_json_text(self):
        report = self.validator.validate(json.dumps(self.geojson), 'name')
        self.assertEqual(report.feature_count, 3)

    def test_compares_against_data_values(self):
        report = self.validator.validate(self.geojson, 'name', ['Pune', 'Nagpur', 'Thane', None])
        self.assertTrue(report.data_checked)
        self.assertEqual(report.unmatched_feature_keys, ['Mumbai Suburban'])
        self.assertEqual(report.unmatched_data_values, ['Thane'])
        self.assertFalse(report.is_fully_matched)
        self.assertAlmostEqual(report.match_rate, 200 / 3)
        self.assertEqual(report.to_dict()['match_rate'], 66.67)

    def test_fully_matched(self):
        report = self.validator.validate(self.geojson, 'name',
                                         ['Pune', 'Nagpur', 'Mumbai Suburban'])
        self.assertTrue(report.is_fully_matched)
        self.assertEqual(report.match_rate, 100.0)

    def test_numeric_keys_match_string_values(self):
        geojson = collection(feature(code=27), feature(code=29))
        report = self.validator.validate(geojson, 'code', ['27', 29])
        self.assertTrue(report.is_fully_matched)

    def test_features_missing_key(self):
        geojson = collection(feature(name='Pune'), feature(title='Nagpur'), {'type': 'Feature'})
        with self.assertRaises(BoundaryUploadError) as cm:
            self.validator.validate(geojson, 'name')
        self.assertEqual(cm.exception.missing_feature_indexes, [1, 2])
        self.assertEqual(cm.exception.join_key, 'name')

    def test_duplicate_keys_are_reported(self):
        geojson = collection(feature(name='Pune'), feature(name='Pune'))
        with self.assertLogs('geo_drilldown.utils.geojson_validator', level='WARNING'):
            report = self.validator.validate(geojson, 'name')
        self.assertEqual(report.duplicate_keys, ['Pune'])

    def test_invalid_documents(self):
        invalid = [
            '{"type": ',
            {'type': 'Feature', 'properties': {}},
            collection(),
            {'type': 'FeatureCollection'},
            ['not', 'geojson'],
        ]
        for geojson in invalid:
            with self.subTest(geojson=geojson):
                with self.assertRaises(BoundaryUploadError):
                    self.validator.validate(geojson, 'name')

    def test_undecodable_bytes(self):
        with self.assertRaises(BoundaryUploadError):
            self.validator.validate(b'\xff\xfe{"type": "FeatureCollection"}', 'name')

    def test_join_key_required(self):
        with self.assertRaises(BoundaryUploadError):
            self.validator.validate(self.geojson, '')


if __name__ == '__main__':
    unittest.main()
