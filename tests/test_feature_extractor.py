"""
Unit tests for feature extraction.
Tests rolling averages, trends, temporal, seasonal and area features.
"""

import unittest
from datetime import datetime, timedelta
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from aqforecast.features.feature_extractor import (
    FeatureExtractor, extract_features, get_season, get_area_type
)
from aqforecast.models.data_models import Reading, AreaMeta, WeatherSnapshot
from aqforecast.utils.exceptions import InvalidInput


class TestFeatureExtractor(unittest.TestCase):
    """Test cases for FeatureExtractor."""

    def setUp(self):
        """Set up test fixtures."""
        # Wednesday afternoon in October
        self.now = datetime(2024, 10, 16, 13, 0)
        self.extractor = FeatureExtractor(clock=lambda: self.now)
        self.area = AreaMeta(name='Jayanagar', district='South Zone', latitude=12.93, longitude=77.58)
        self.weather = WeatherSnapshot(temperature=25.0, humidity=60.0, pressure=1013.0,
                                       wind_speed=2.0, wind_direction=180.0)
        self.history = [
            Reading(timestamp=self.now - timedelta(hours=i), aqi=100.0, pm25=40.0, pm10=60.0, no2=20.0)
            for i in range(30)
        ]

    def test_rolling_averages_use_first_24_readings(self):
        """Test 24h averages ignore readings beyond the window."""
        history = list(self.history)
        history[25] = Reading(timestamp=history[25].timestamp, aqi=900.0, pm25=900.0)

        features = self.extractor.extract(history, self.weather, self.area, 1)

        self.assertEqual(features.aqi_avg_24h, 100.0)
        self.assertEqual(features.pm25_avg_24h, 40.0)
        self.assertEqual(features.pm10_avg_24h, 60.0)
        self.assertEqual(features.no2_avg_24h, 20.0)

    def test_average_skips_missing_values(self):
        """Test null values are excluded from the mean."""
        history = [
            Reading(timestamp=self.now - timedelta(hours=i), aqi=(None if i % 2 else 80.0 + i))
            for i in range(24)
        ]
        features = self.extractor.extract(history, self.weather, self.area, 1)

        expected = sum(80.0 + i for i in range(0, 24, 2)) / 12
        self.assertAlmostEqual(features.aqi_avg_24h, expected)

    def test_average_of_all_missing_is_zero(self):
        """Test a field with no values averages to 0, not NaN."""
        history = [Reading(timestamp=self.now - timedelta(hours=i), aqi=50.0) for i in range(24)]
        features = self.extractor.extract(history, self.weather, self.area, 1)

        self.assertEqual(features.pm25_avg_24h, 0.0)
        self.assertEqual(features.no2_avg_24h, 0.0)

    def test_trend_is_newest_minus_oldest_of_three(self):
        """Test 3h trend calculation."""
        history = list(self.history)
        history[0] = Reading(timestamp=history[0].timestamp, aqi=130.0, pm25=50.0)
        history[1] = Reading(timestamp=history[1].timestamp, aqi=115.0, pm25=None)
        history[2] = Reading(timestamp=history[2].timestamp, aqi=100.0, pm25=35.0)

        features = self.extractor.extract(history, self.weather, self.area, 1)

        self.assertEqual(features.aqi_trend_3h, 30.0)
        self.assertEqual(features.pm25_trend_3h, 15.0)

    def test_trend_with_fewer_than_two_values_is_zero(self):
        """Test trend falls back to 0 with a single non-null value."""
        history = list(self.history)
        history[0] = Reading(timestamp=history[0].timestamp, aqi=None)
        history[1] = Reading(timestamp=history[1].timestamp, aqi=None)

        features = self.extractor.extract(history, self.weather, self.area, 1)
        self.assertEqual(features.aqi_trend_3h, 0.0)

    def test_temporal_features_from_target_time(self):
        """Test temporal features describe now + horizon."""
        features = self.extractor.extract(self.history, self.weather, self.area, 3)

        self.assertEqual(features.hour_of_day, 16)
        self.assertEqual(features.day_of_week, 3)
        self.assertEqual(features.month, 10)
        self.assertFalse(features.is_weekend)
        self.assertEqual(features.season, 'post_monsoon')

    def test_weekend_and_month_rollover(self):
        """Test horizon crossing into Saturday and a new month."""
        friday_night = datetime(2024, 5, 31, 23, 0)
        features = self.extractor.extract(self.history, self.weather, self.area, 1, now=friday_night)

        self.assertEqual(features.hour_of_day, 0)
        self.assertEqual(features.day_of_week, 6)
        self.assertTrue(features.is_weekend)
        self.assertEqual(features.month, 6)
        self.assertEqual(features.season, 'monsoon')

    def test_day_of_week_counts_from_sunday(self):
        """Test Sunday is 0 and Saturday is 6."""
        saturday_noon = datetime(2024, 10, 19, 12, 0)

        saturday = self.extractor.extract(self.history, self.weather, self.area, 1, now=saturday_noon)
        sunday = self.extractor.extract(self.history, self.weather, self.area, 24, now=saturday_noon)
        monday = self.extractor.extract(self.history, self.weather, self.area, 48, now=saturday_noon)

        self.assertEqual(saturday.day_of_week, 6)
        self.assertTrue(saturday.is_weekend)
        self.assertEqual(sunday.day_of_week, 0)
        self.assertTrue(sunday.is_weekend)
        self.assertEqual(monday.day_of_week, 1)
        self.assertFalse(monday.is_weekend)

    def test_default_clock_is_utc(self):
        """Test the default clock returns an aware UTC time."""
        now = FeatureExtractor().clock()

        self.assertIsNotNone(now.tzinfo)
        self.assertEqual(now.utcoffset(), timedelta(0))

    def test_weather_baseline_defaults(self):
        """Test missing weather values take baseline defaults."""
        features = self.extractor.extract(self.history, WeatherSnapshot(), self.area, 1)

        self.assertEqual(features.temperature, 25.0)
        self.assertEqual(features.humidity, 60.0)
        self.assertEqual(features.pressure, 1013.0)
        self.assertEqual(features.wind_speed, 2.0)
        self.assertEqual(features.wind_direction, 180.0)

    def test_invalid_horizon(self):
        """Test non-positive horizons are rejected."""
        with self.assertRaises(InvalidInput):
            self.extractor.extract(self.history, self.weather, self.area, 0)

    def test_convenience_function(self):
        """Test extract_features convenience wrapper."""
        features = extract_features(self.history, self.weather, self.area, 2, now=self.now)
        self.assertEqual(features.hour_of_day, 15)
        self.assertEqual(features.area_type, 'south')


class TestSeasonAndAreaClassification(unittest.TestCase):
    """Test cases for season and area type helpers."""

    def test_get_season(self):
        """Test month to season mapping."""
        for month in (12, 1, 2):
            self.assertEqual(get_season(month), 'winter')
        for month in (3, 4, 5):
            self.assertEqual(get_season(month), 'summer')
        for month in (6, 7, 8, 9):
            self.assertEqual(get_season(month), 'monsoon')
        for month in (10, 11):
            self.assertEqual(get_season(month), 'post_monsoon')

    def test_get_area_type(self):
        """Test district classification."""
        self.assertEqual(get_area_type('South Zone'), 'south')
        self.assertEqual(get_area_type('Unknown'), 'west')
        self.assertEqual(get_area_type('EAST'), 'east')
        self.assertEqual(get_area_type(''), 'west')
        self.assertEqual(get_area_type(None), 'west')

    def test_area_type_priority(self):
        """Test first match wins in central, north, south, east order."""
        self.assertEqual(get_area_type('North Central'), 'central')
        self.assertEqual(get_area_type('Northeast'), 'north')
        self.assertEqual(get_area_type('South East'), 'south')


if __name__ == '__main__':
    unittest.main()
