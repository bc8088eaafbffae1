"""
Feature extraction module for air quality forecasting.
Turns a rolling window of historical readings plus current weather into the
feature vector consumed by the component predictors.
"""

import pandas as pd
import numpy as np
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence
import logging

from ..models.data_models import Reading, AreaMeta, WeatherSnapshot, FeatureVector, utc_now
from ..utils.exceptions import InvalidInput

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


ROLLING_WINDOW_HOURS = 24
TREND_WINDOW_HOURS = 3

# Checked in order; first substring match wins
AREA_TYPE_KEYWORDS = ('central', 'north', 'south', 'east')
DEFAULT_AREA_TYPE = 'west'

WEEKEND_DAYS = (0, 6)


def get_season(month: int) -> str:
    """Classify a calendar month (1-12) into the regional season."""
    if month >= 12 or month <= 2:
        return 'winter'
    if 3 <= month <= 5:
        return 'summer'
    if 6 <= month <= 9:
        return 'monsoon'
    return 'post_monsoon'


def get_area_type(district: Optional[str]) -> str:
    """Coarse region classification from a free-text district name."""
    district_lower = (district or '').lower()
    for keyword in AREA_TYPE_KEYWORDS:
        if keyword in district_lower:
            return keyword
    return DEFAULT_AREA_TYPE


class FeatureExtractor:
    """
    Builds a FeatureVector for one target hour.

    History must be ordered newest-first: index 0 is the most recent reading.
    Absent numeric fields are skipped, and a window with no values at all
    averages to 0 rather than NaN.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the feature extractor.

        Args:
            clock: Callable returning the current time (UTC now if None)
        """
        self.clock = clock or utc_now

    def extract(self,
                history: Sequence[Reading],
                weather: WeatherSnapshot,
                area: AreaMeta,
                horizon_hours: int,
                now: Optional[datetime] = None) -> FeatureVector:
        """
        Extract features for the hour `horizon_hours` ahead of now.

        Args:
            history: Readings, newest first (at least 24 expected)
            weather: Current weather conditions
            area: Area metadata
            horizon_hours: Hours ahead of now the features target
            now: Reference time (reads the clock if None)

        Returns:
            FeatureVector for the target hour
        """
        if horizon_hours < 1:
            raise InvalidInput(f"horizon_hours must be >= 1, got {horizon_hours}")

        recent_24h = list(history[:ROLLING_WINDOW_HOURS])
        recent_3h = list(history[:TREND_WINDOW_HOURS])

        target_time = pd.Timestamp((now or self.clock()) + timedelta(hours=horizon_hours))
        # Sunday=0 numbering; pandas counts from Monday=0
        day_of_week = (int(target_time.dayofweek) + 1) % 7
        month = int(target_time.month)

        baseline = weather.with_defaults()

        features = FeatureVector(
            aqi_avg_24h=self.calculate_average(recent_24h, 'aqi'),
            pm25_avg_24h=self.calculate_average(recent_24h, 'pm25'),
            pm10_avg_24h=self.calculate_average(recent_24h, 'pm10'),
            no2_avg_24h=self.calculate_average(recent_24h, 'no2'),
            temperature=baseline['temperature'],
            humidity=baseline['humidity'],
            pressure=baseline['pressure'],
            wind_speed=baseline['wind_speed'],
            wind_direction=baseline['wind_direction'],
            hour_of_day=int(target_time.hour),
            day_of_week=day_of_week,
            month=month,
            is_weekend=day_of_week in WEEKEND_DAYS,
            season=get_season(month),
            aqi_trend_3h=self.calculate_trend(recent_3h, 'aqi'),
            pm25_trend_3h=self.calculate_trend(recent_3h, 'pm25'),
            area_type=get_area_type(area.district),
        )

        logger.debug(f"Extracted features for {area.name} at +{horizon_hours}h")
        return features

    @staticmethod
    def _field_series(readings: List[Reading], field: str) -> pd.Series:
        return pd.Series([getattr(r, field) for r in readings], dtype=float)

    def calculate_average(self, readings: List[Reading], field: str) -> float:
        """Mean of the non-null values of a field, 0 when none are present."""
        mean = self._field_series(readings, field).mean()
        return 0.0 if np.isnan(mean) else float(mean)

    def calculate_trend(self, readings: List[Reading], field: str) -> float:
        """Most recent minus oldest non-null value, 0 when fewer than two exist."""
        values = self._field_series(readings, field).dropna()
        if len(values) < 2:
            return 0.0
        return float(values.iloc[0] - values.iloc[-1])


def extract_features(history: Sequence[Reading],
                     weather: WeatherSnapshot,
                     area: AreaMeta,
                     horizon_hours: int,
                     now: Optional[datetime] = None) -> FeatureVector:
    """
    Convenience function to extract a feature vector.

    Args:
        history: Readings, newest first
        weather: Current weather conditions
        area: Area metadata
        horizon_hours: Hours ahead of now
        now: Reference time (current time if None)

    Returns:
        FeatureVector for the target hour
    """
    return FeatureExtractor().extract(history, weather, area, horizon_hours, now=now)
