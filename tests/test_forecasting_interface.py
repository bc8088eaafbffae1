"""
Unit tests for the ForecastResult container.
Tests tabular export, persistence records and confidence summaries.
"""

import unittest
import json
import pandas as pd
from datetime import datetime, timedelta
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from aqforecast.model.forecast_generator import ForecastGenerator
from aqforecast.model.forecasting_interface import ForecastResult
from aqforecast.models.data_models import Reading, AreaMeta, WeatherSnapshot


class TestForecastResult(unittest.TestCase):
    """Test cases for ForecastResult."""

    def setUp(self):
        """Set up test fixtures."""
        self.now = datetime(2024, 11, 5, 10, 0)
        self.area = AreaMeta(name='BTM Layout', district='South', id='area-42')
        history = [
            Reading(timestamp=self.now - timedelta(hours=i), aqi=110.0, pm25=45.0, pm10=70.0)
            for i in range(24)
        ]
        self.result = ForecastGenerator().generate_result(history, WeatherSnapshot(), self.area, 24, now=self.now)

    def test_to_dataframe(self):
        """Test DataFrame export columns and ordering."""
        df = self.result.to_dataframe()

        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(len(df), 24)
        for column in ['horizon_hours', 'predicted_for', 'predicted_aqi', 'predicted_pm25',
                       'predicted_pm10', 'confidence_score', 'aqi_category', 'model_version']:
            self.assertIn(column, df.columns)
        self.assertEqual(df['horizon_hours'].tolist(), list(range(1, 25)))
        self.assertEqual(df['predicted_for'].iloc[0], self.now + timedelta(hours=1))

    def test_to_records(self):
        """Test persistence rows."""
        records = self.result.to_records()

        self.assertEqual(len(records), 24)
        first = records[0]
        self.assertEqual(first['area_id'], 'area-42')
        self.assertEqual(first['prediction_timestamp'], self.now.isoformat())
        self.assertEqual(first['predicted_for'], (self.now + timedelta(hours=1)).isoformat())
        self.assertEqual(json.loads(first['features_used'])['area_type'], 'south')

        overridden = self.result.to_records(area_id='other')
        self.assertEqual(overridden[0]['area_id'], 'other')

    def test_confidence_range(self):
        """Test min/max/avg confidence."""
        summary = self.result.confidence_range()
        scores = [f.confidence_score for f in self.result.forecasts]

        self.assertEqual(summary['min'], min(scores))
        self.assertEqual(summary['max'], max(scores))
        self.assertAlmostEqual(summary['avg'], sum(scores) / len(scores))

    def test_empty_result(self):
        """Test summaries of an empty result."""
        empty = ForecastResult(forecasts=[], area=self.area, created_at=self.now)

        self.assertIsNone(empty.model_version)
        self.assertEqual(empty.confidence_range(), {'min': 0.0, 'max': 0.0, 'avg': 0.0})
        self.assertEqual(empty.to_records(), [])

    def test_with_forecasts(self):
        """Test replacing forecasts keeps the original intact."""
        trimmed = self.result.with_forecasts(self.result.forecasts[:3], ai_enhanced=True)

        self.assertEqual(len(trimmed), 3)
        self.assertTrue(trimmed.metadata['ai_enhanced'])
        self.assertEqual(len(self.result), 24)
        self.assertFalse(self.result.metadata['ai_enhanced'])


if __name__ == '__main__':
    unittest.main()
