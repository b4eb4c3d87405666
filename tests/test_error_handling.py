"""
Unit tests for retry, error context and logging helpers.
"""

import asyncio
import logging
import os
import shutil
import tempfile
import unittest

from geo_drilldown.config import DrillDownConfig
from geo_drilldown.exceptions import DataLoadError, DataSourceError
from geo_drilldown.logging_config import DrillDownLogger, setup_logging
from geo_drilldown.utils.error_handler import (
    RetryConfig, create_error_context, log_error_details, retry_async
)


class FlakyOperation:
    """Fails with the given error a number of times, then returns a value."""

    def __init__(self, failures, error_type=ConnectionError, result='ok'):
        self.failures = failures
        self.error_type = error_type
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_type(f"failure {self.calls}")
        return self.result


class TestRetry(unittest.TestCase):
    """Test cases for retry_async and RetryConfig."""

    def setUp(self):
        self.logger = logging.getLogger('test_retry')
        self.retry_config = RetryConfig(max_attempts=3, base_delay=0.0)

    def test_delay_grows_and_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=3.0, backoff_factor=2.0)
        self.assertEqual(config.delay_for(1), 1.0)
        self.assertEqual(config.delay_for(2), 2.0)
        self.assertEqual(config.delay_for(3), 3.0)

    def test_should_retry(self):
        config = RetryConfig()
        self.assertTrue(config.should_retry(TimeoutError()))
        self.assertTrue(config.should_retry(DataSourceError("x")))
        self.assertFalse(config.should_retry(ValueError()))

    def test_succeeds_after_transient_failures(self):
        operation = FlakyOperation(failures=2)
        with self.assertLogs('test_retry', level='WARNING'):
            result = asyncio.run(
                retry_async(operation, 'get_regions', self.retry_config, self.logger)
            )
        self.assertEqual(result, 'ok')
        self.assertEqual(operation.calls, 3)

    def test_gives_up_after_max_attempts(self):
        operation = FlakyOperation(failures=5)
        with self.assertLogs('test_retry', level='ERROR'):
            with self.assertRaises(DataSourceError) as cm:
                asyncio.run(retry_async(operation, 'get_regions', self.retry_config, self.logger))
        self.assertEqual(cm.exception.attempts, 3)
        self.assertEqual(cm.exception.operation, 'get_regions')
        self.assertIsInstance(cm.exception.original_error, ConnectionError)

    def test_non_retryable_error_fails_immediately(self):
        operation = FlakyOperation(failures=5, error_type=ValueError)
        with self.assertLogs('test_retry', level='ERROR'):
            with self.assertRaises(DataSourceError) as cm:
                asyncio.run(retry_async(operation, 'fetch', self.retry_config, self.logger))
        self.assertEqual(operation.calls, 1)
        self.assertEqual(cm.exception.attempts, 1)
        self.assertIsInstance(cm.exception.original_error, ValueError)


class TestErrorContext(unittest.TestCase):
    """Test cases for error context helpers."""

    def test_create_error_context(self):
        context = create_error_context('load_regions', file_path='regions.csv')
        self.assertEqual(context['operation'], 'load_regions')
        self.assertEqual(context['file_path'], 'regions.csv')
        self.assertIn('timestamp', context)

    def test_log_error_details_uses_severity(self):
        logger = logging.getLogger('test_error_details')
        with self.assertLogs('test_error_details', level='ERROR') as cm:
            log_error_details(logger, DataLoadError("bad file", file_path='x.csv'),
                              {'operation': 'load'})
        self.assertIn('High severity error', cm.output[0])
        self.assertIn('DATA_LOAD_ERROR', cm.output[0])


class TestDrillDownLogger(unittest.TestCase):
    """Test cases for the structured drill-down logger."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        logger = logging.getLogger('geo_drilldown')
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_setup_logging_writes_file(self):
        log_file = os.path.join(self.temp_dir, 'logs', 'drill.log')
        logger = setup_logging(DrillDownConfig(log_level='DEBUG', log_file=log_file))
        self.assertIsInstance(logger, DrillDownLogger)
        self.assertEqual(logger.logger.level, logging.DEBUG)

        logger.info("session started")
        for handler in logger.logger.handlers:
            handler.flush()
        with open(log_file, encoding='utf-8') as f:
            self.assertIn("session started", f.read())

    def test_log_drill_transition(self):
        logger = DrillDownLogger(level='INFO')
        with self.assertLogs('geo_drilldown', level='INFO') as cm:
            logger.log_drill_transition('drill_into', 'drilled', 0, 1, 'Maharashtra')
        self.assertIn("drill_into 'Maharashtra': drilled (depth 0 -> 1)", cm.output[0])
        self.assertEqual(cm.records[0].event, 'drill_transition')

    def test_log_data_quality_warning(self):
        logger = DrillDownLogger(level='INFO')
        with self.assertLogs('geo_drilldown', level='WARNING') as cm:
            logger.log_data_quality_warning("branching types", {'parent_type': 'state'})
        self.assertIn("DATA QUALITY: branching types", cm.output[0])
        self.assertEqual(cm.records[0].context, {'parent_type': 'state'})


if __name__ == '__main__':
    unittest.main()
