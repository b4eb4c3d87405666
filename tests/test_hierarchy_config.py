"""
Unit tests for geographic hierarchy editing and validation.
"""

import unittest

from geo_drilldown.exceptions import HierarchyConfigError
from geo_drilldown.hierarchy.hierarchy_config import HierarchyConfigBuilder
from geo_drilldown.models import GeographicHierarchy, GeographicLevel
from tests.fixtures import CHAIN, CHAIN_WITH_WARDS


class TestHierarchyConfigBuilder(unittest.TestCase):
    """Test cases for HierarchyConfigBuilder."""

    def setUp(self):
        self.builder = HierarchyConfigBuilder(CHAIN_WITH_WARDS, "IND")
        self.base = self.builder.set_base_column(None, 'state_name')

    def test_set_base_column_on_empty(self):
        self.assertEqual(self.base.country_code, 'IND')
        self.assertEqual(self.base.base_level.column, 'state_name')
        self.assertEqual(self.base.base_level.region_type, 'country')
        self.assertEqual(self.base.base_level.label, 'Country')
        self.assertEqual(self.base.drill_down_levels, [])

    def test_set_base_column_without_chain_uses_default_label(self):
        hierarchy = HierarchyConfigBuilder().set_base_column(None, 'region')
        self.assertEqual(hierarchy.base_level.label, 'Region')

    def test_same_base_column_is_noop(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        self.assertIs(self.builder.set_base_column(hierarchy, 'state_name'), hierarchy)

    def test_changing_base_column_clears_levels(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        changed = self.builder.set_base_column(hierarchy, 'zone_name')
        self.assertEqual(changed.base_level.column, 'zone_name')
        self.assertEqual(changed.drill_down_levels, [])

    def test_set_level_column_types_level_by_chain(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        level = hierarchy.drill_down_levels[0]
        self.assertEqual(level.level, 1)
        self.assertEqual(level.column, 'district_name')
        self.assertEqual(level.region_type, 'state')
        self.assertEqual(level.label, 'State')

    def test_set_level_column_does_not_mutate_input(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        self.builder.set_level_column(hierarchy, 1, 'ward_name')
        self.assertEqual(hierarchy.depth, 1)
        self.assertEqual(self.base.depth, 0)

    def test_skipped_levels_are_padded_with_placeholders(self):
        hierarchy = self.builder.set_level_column(self.base, 1, 'ward_name')
        self.assertEqual([level.level for level in hierarchy.drill_down_levels], [1, 2])
        self.assertTrue(hierarchy.drill_down_levels[0].is_placeholder)
        self.assertEqual(hierarchy.drill_down_levels[0].region_type, 'state')
        self.assertFalse(hierarchy.is_complete())

        is_valid, issues = self.builder.validate(hierarchy)
        self.assertFalse(is_valid)
        self.assertIn("Drill-down level 1 has no column", issues)

    def test_level_beyond_chain_is_ignored(self):
        self.assertIs(self.builder.set_level_column(self.base, 3, 'block_name'), self.base)
        self.assertIs(self.builder.set_level_column(self.base, -1, 'block_name'), self.base)

    def test_empty_chain_ignores_level_edits(self):
        builder = HierarchyConfigBuilder([], "IND")
        base = builder.set_base_column(None, 'state_name')
        self.assertIs(builder.set_level_column(base, 0, 'district_name'), base)

    def test_duplicate_column_is_rejected(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        with self.assertLogs('geo_drilldown.hierarchy.hierarchy_config', level='WARNING'):
            self.assertIs(self.builder.set_level_column(hierarchy, 1, 'state_name'), hierarchy)

    def test_reassigning_same_level_is_allowed(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        updated = self.builder.set_level_column(hierarchy, 0, 'district_code')
        self.assertEqual(updated.drill_down_levels[0].column, 'district_code')

    def test_empty_column_clears_level_and_deeper(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        hierarchy = self.builder.set_level_column(hierarchy, 1, 'ward_name')
        cleared = self.builder.set_level_column(hierarchy, 0, '')
        self.assertEqual(cleared.drill_down_levels, [])

    def test_clear_level_column_truncates_to_index(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        hierarchy = self.builder.set_level_column(hierarchy, 1, 'ward_name')
        for index in range(3):
            with self.subTest(index=index):
                cleared = self.builder.clear_level_column(hierarchy, index)
                self.assertEqual(len(cleared.drill_down_levels), min(index, 2))
        self.assertIsNone(self.builder.clear_level_column(None, 0))

    def test_validate_complete_hierarchy(self):
        hierarchy = self.builder.set_level_column(self.base, 0, 'district_name')
        hierarchy = self.builder.set_level_column(hierarchy, 1, 'ward_name')
        self.assertEqual(self.builder.validate(hierarchy), (True, []))
        self.assertIs(self.builder.require_valid(hierarchy), hierarchy)

    def test_validate_reports_broken_invariants(self):
        hierarchy = GeographicHierarchy(
            country_code='IND',
            base_level=GeographicLevel(0, 'state_name', 'country'),
            drill_down_levels=[
                GeographicLevel(2, 'district_name', 'district'),
                GeographicLevel(2, 'state_name', 'district'),
            ]
        )
        is_valid, issues = HierarchyConfigBuilder(CHAIN).validate(hierarchy)
        self.assertFalse(is_valid)
        joined = ' | '.join(issues)
        self.assertIn("numbered 2, expected 1", joined)
        self.assertIn("Level 1 has region type 'district', expected 'state'", joined)
        self.assertIn("Column 'state_name' is used by more than one level", joined)

    def test_require_valid_raises(self):
        hierarchy = HierarchyConfigBuilder().set_base_column(None, '')
        with self.assertRaises(HierarchyConfigError) as cm:
            self.builder.require_valid(hierarchy)
        self.assertIn("Base level has no column", cm.exception.issues)

    def test_deeper_than_chain(self):
        hierarchy = GeographicHierarchy(
            country_code='IND',
            base_level=GeographicLevel(0, 'state_name', 'country'),
            drill_down_levels=[
                GeographicLevel(1, 'district_name', 'state'),
                GeographicLevel(2, 'ward_name', 'district'),
                GeographicLevel(3, 'block_name', ''),
            ]
        )
        is_valid, issues = HierarchyConfigBuilder(CHAIN).validate(hierarchy)
        self.assertFalse(is_valid)
        self.assertTrue(any("deeper than the region type chain" in i for i in issues))


if __name__ == '__main__':
    unittest.main()
