"""
Unit tests for preview payload synchronization.
"""

import unittest
from dataclasses import replace

from geo_drilldown.models import ChartFilter
from geo_drilldown.preview.payload_synchronizer import (
    PreviewPayloadSynchronizer, PreviewRequest, SyncStatus
)
from tests.fixtures import sample_chart_config


class TestPreviewRequest(unittest.TestCase):
    """Test cases for PreviewRequest."""

    def test_from_chart_defaults(self):
        request = PreviewRequest.from_chart(sample_chart_config())
        self.assertEqual(request.geographic_column, 'state_name')
        self.assertEqual(request.boundary_id, 100)
        self.assertEqual(request.value_column, 'population')
        self.assertEqual(request.missing_fields(), [])

    def test_aggregate_column_wins_over_value_column(self):
        config = sample_chart_config(aggregate_column='households')
        self.assertEqual(PreviewRequest.from_chart(config).value_column, 'households')

    def test_default_aggregate_function(self):
        config = sample_chart_config(aggregate_function=None)
        request = PreviewRequest.from_chart(config, default_aggregate_function='avg')
        self.assertEqual(request.aggregate_function, 'avg')

    def test_count_falls_back_to_geographic_column(self):
        config = sample_chart_config(value_column=None, aggregate_function='count')
        request = PreviewRequest.from_chart(config, geographic_column='district_name')
        self.assertEqual(request.value_column, 'district_name')
        self.assertEqual(request.missing_fields(), [])

    def test_missing_fields(self):
        config = sample_chart_config(selected_geojson_id=None, table_name='', value_column=None)
        self.assertEqual(PreviewRequest.from_chart(config).missing_fields(),
                         ['boundary_id', 'table_name', 'value_column'])

    def test_dependency_key_ignores_chart_filter_order(self):
        first = ChartFilter('state_name', 'not_equals', 'Bihar')
        second = ChartFilter('population', 'greater_than', 10)
        a = PreviewRequest.from_chart(sample_chart_config(filters=[first, second]))
        b = PreviewRequest.from_chart(sample_chart_config(filters=[second, first]))
        self.assertEqual(a.dependency_key(), b.dependency_key())

    def test_dependency_key_keeps_sort_order(self):
        by_name = {'column': 'state_name', 'direction': 'asc'}
        by_value = {'column': 'population', 'direction': 'desc'}
        a = PreviewRequest.from_chart(sample_chart_config(sort=[by_name, by_value]))
        b = PreviewRequest.from_chart(sample_chart_config(sort=[by_value, by_name]))
        self.assertNotEqual(a.dependency_key(), b.dependency_key())

    def test_to_payload(self):
        request = PreviewRequest.from_chart(
            sample_chart_config(), geographic_column='district_name', boundary_id=200,
            drill_filters={'state_name': 'Maharashtra'}
        )
        payload = request.to_payload().to_dict()
        self.assertEqual(payload['geojsonPreviewPayload'], {'geojsonId': 200})
        overlay = payload['dataOverlayPayload']
        self.assertEqual(overlay['geographic_column'], 'district_name')
        self.assertEqual(overlay['selected_geojson_id'], 200)
        self.assertEqual(overlay['filters'], {'state_name': 'Maharashtra'})


class TestPreviewPayloadSynchronizer(unittest.TestCase):
    """Test cases for PreviewPayloadSynchronizer."""

    def setUp(self):
        self.synchronizer = PreviewPayloadSynchronizer()
        self.request = PreviewRequest.from_chart(sample_chart_config())

    def test_second_recompute_is_unchanged(self):
        first = self.synchronizer.recompute(self.request)
        second = self.synchronizer.recompute(self.request)
        self.assertEqual(first.status, SyncStatus.EMITTED)
        self.assertIsNotNone(first.payload)
        self.assertEqual(second.status, SyncStatus.UNCHANGED)
        self.assertIsNone(second.payload)
        self.assertEqual(second.dependency_key, first.dependency_key)

    def test_changed_dependency_emits(self):
        self.synchronizer.recompute(self.request)
        changed = replace(self.request, drill_filters={'state_name': 'Maharashtra'})
        self.assertTrue(self.synchronizer.recompute(changed).emitted)
        self.assertTrue(self.synchronizer.recompute(self.request).emitted)

    def test_not_ready_forgets_last_key(self):
        self.synchronizer.recompute(self.request)
        result = self.synchronizer.recompute(replace(self.request, boundary_id=None))
        self.assertEqual(result.status, SyncStatus.NOT_READY)
        self.assertEqual(result.missing_fields, ['boundary_id'])
        self.assertIsNone(self.synchronizer.last_key)
        self.assertTrue(self.synchronizer.recompute(self.request).emitted)

    def test_reset(self):
        self.synchronizer.recompute(self.request)
        self.synchronizer.reset()
        self.assertIsNone(self.synchronizer.last_key)
        self.assertTrue(self.synchronizer.recompute(self.request).emitted)


if __name__ == '__main__':
    unittest.main()
