"""
Unit tests for engine configuration.
"""

import unittest

from geo_drilldown.config import DrillDownConfig, LEGACY_DRILL_FIELDS
from geo_drilldown.exceptions import ConfigurationError


class TestDrillDownConfig(unittest.TestCase):
    """Test cases for DrillDownConfig."""

    def test_defaults(self):
        config = DrillDownConfig()
        self.assertEqual(config.country_code, 'IND')
        self.assertIsNone(config.region_fuzzy_threshold)
        self.assertEqual(config.default_aggregate_function, 'sum')
        self.assertEqual(config.legacy_fields, LEGACY_DRILL_FIELDS)
        self.assertEqual(config.log_level, 'INFO')

    def test_country_and_log_level_are_normalized(self):
        config = DrillDownConfig(country_code=' ind ', log_level='debug')
        self.assertEqual(config.country_code, 'IND')
        self.assertEqual(config.log_level, 'DEBUG')

    def test_invalid_values_raise(self):
        invalid = [
            {'country_code': ''},
            {'region_fuzzy_threshold': 101},
            {'default_aggregate_function': 'median'},
            {'retry_attempts': 0},
            {'retry_base_delay': -1},
            {'log_level': 'VERBOSE'},
        ]
        for values in invalid:
            with self.subTest(values=values):
                with self.assertRaises(ConfigurationError):
                    DrillDownConfig(**values)

    def test_invalid_aggregate_lists_valid_values(self):
        with self.assertRaises(ConfigurationError) as cm:
            DrillDownConfig(default_aggregate_function='median')
        self.assertEqual(cm.exception.config_key, 'default_aggregate_function')
        self.assertIn('sum', cm.exception.valid_values)

    def test_dict_round_trip(self):
        config = DrillDownConfig(
            country_code='NPL', region_fuzzy_threshold=85,
            legacy_fields=('district_column', 'ward_column'), retry_base_delay=0.0
        )
        restored = DrillDownConfig.from_dict(config.to_dict())
        self.assertEqual(restored, config)
        self.assertIsInstance(restored.legacy_fields, tuple)


if __name__ == '__main__':
    unittest.main()
