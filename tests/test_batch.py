"""
Unit tests for batch forecast generation across areas.
"""

import unittest
from unittest.mock import Mock, patch
from datetime import datetime, timedelta
import tempfile
import shutil
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from aqforecast.api.batch import BatchForecastRunner
from aqforecast.data.storage import SQLiteStorage
from aqforecast.models.data_models import Reading, AreaMeta
from aqforecast.utils.config import Config
from aqforecast.utils.exceptions import DataStorageError


class TestBatchForecastRunner(unittest.TestCase):
    """Test cases for BatchForecastRunner."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.storage = SQLiteStorage(db_path=Path(self.temp_dir) / 'batch.db')
        self.now = datetime(2024, 6, 3, 8, 0)

        self.good_area = self.storage.add_area(AreaMeta(name='Koramangala', district='South', id='kor'))
        self.storage.store_readings('kor', [
            Reading(timestamp=self.now - timedelta(hours=i), aqi=75.0, pm25=30.0, pm10=45.0)
            for i in range(30)
        ])
        self.short_area = self.storage.add_area(AreaMeta(name='Whitefield', district='East', id='wf'))
        self.storage.store_readings('wf', [
            Reading(timestamp=self.now - timedelta(hours=i), aqi=75.0) for i in range(5)
        ])

        self.sleep = Mock()
        self.runner = BatchForecastRunner(self.storage, clock=lambda: self.now,
                                          delay_seconds=0.5, sleep=self.sleep)

        patcher_max = patch.object(Config, 'MAX_HOURS_AHEAD', 48)
        patcher_lookback = patch.object(Config, 'HISTORY_LOOKBACK_HOURS', 48)
        for patcher in (patcher_max, patcher_lookback):
            patcher.start()
            self.addCleanup(patcher.stop)

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_run_all_areas(self):
        """Test a short area is skipped and the rest succeed."""
        summary = self.runner.run(hours_ahead=24)

        self.assertTrue(summary['success'])
        self.assertEqual(summary['processed'], 1)
        self.assertEqual(summary['total'], 2)
        self.assertEqual(summary['errors'], ['Whitefield: Insufficient historical data'])
        self.assertEqual(summary['results'][0]['area'], 'Koramangala')
        self.assertEqual(summary['results'][0]['predictions_generated'], 24)
        self.assertEqual(summary['results'][0]['status'], 'success')
        self.assertEqual(summary['summary']['successful_areas'], 1)
        self.assertEqual(summary['summary']['failed_areas'], 1)
        self.assertAlmostEqual(summary['summary']['avg_confidence'], summary['results'][0]['avg_confidence'])

        self.assertEqual(len(self.storage.get_forecasts('kor')), 24)
        self.sleep.assert_called_once_with(0.5)

    def test_horizon_capped(self):
        """Test batch horizons never exceed the base cap."""
        summary = self.runner.run(hours_ahead=200)

        self.assertEqual(summary['results'][0]['predictions_generated'], 48)

    def test_failing_area_does_not_stop_batch(self):
        """Test storage errors are recorded per area."""
        with patch.object(self.storage, 'replace_forecasts', side_effect=DataStorageError('disk full')):
            summary = self.runner.run()

        self.assertEqual(summary['processed'], 0)
        self.assertIn('Koramangala: disk full', summary['errors'])
        self.assertEqual(len(summary['errors']), 2)
        self.assertEqual(summary['summary']['avg_confidence'], 0.0)
        self.sleep.assert_not_called()

    def test_no_areas(self):
        """Test an empty store."""
        empty = SQLiteStorage(db_path=Path(self.temp_dir) / 'empty.db')
        summary = BatchForecastRunner(empty, clock=lambda: self.now, sleep=self.sleep).run()

        self.assertEqual(summary['processed'], 0)
        self.assertEqual(summary['total'], 0)
        self.assertIsNone(summary['errors'])


if __name__ == '__main__':
    unittest.main()
