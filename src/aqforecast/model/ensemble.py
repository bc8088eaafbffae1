"""
Ensemble combiner for the air quality forecasting platform.
Merges component predictions into a clamped point forecast with a
horizon- and condition-dependent confidence score.
"""

import numpy as np
from typing import Dict
import logging

from ..models.data_models import FeatureVector, ComponentPrediction, Forecast

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


MODEL_VERSION = "v1.0.0"

ENSEMBLE_WEIGHTS: Dict[str, float] = {
    'linear': 0.3,
    'seasonal': 0.4,
    'weather': 0.3,
}

AQI_MIN, AQI_MAX = 0, 500
CONFIDENCE_MIN, CONFIDENCE_MAX = 0.1, 1.0

# Horizon decay: 1 - h/48, never below the floor
CONFIDENCE_DECAY_HOURS = 48
CONFIDENCE_HORIZON_FLOOR = 0.3

EXTREME_WIND_PENALTY = 0.8
EXTREME_HUMIDITY_PENALTY = 0.9

SEASONAL_CONFIDENCE: Dict[str, float] = {
    'winter': 0.85,
    'summer': 0.8,
    'monsoon': 0.6,
    'post_monsoon': 0.9,
}


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round with halves going towards +inf, independent of float banker's rounding."""
    scale = 10 ** decimals
    return float(np.floor(value * scale + 0.5) / scale)


def calculate_confidence(features: FeatureVector, horizon_hours: int) -> float:
    """
    Heuristic reliability score for a forecast.

    Args:
        features: Feature vector the forecast was made from
        horizon_hours: Hours ahead of now

    Returns:
        Confidence in [0.1, 1.0], rounded to 2 decimals
    """
    confidence = 1.0
    confidence *= max(CONFIDENCE_HORIZON_FLOOR, 1 - horizon_hours / CONFIDENCE_DECAY_HOURS)

    if features.wind_speed > 10 or features.wind_speed < 0.5:
        confidence *= EXTREME_WIND_PENALTY
    if features.humidity > 90 or features.humidity < 20:
        confidence *= EXTREME_HUMIDITY_PENALTY

    confidence *= SEASONAL_CONFIDENCE[features.season]

    return round_half_up(min(CONFIDENCE_MAX, max(CONFIDENCE_MIN, confidence)), 2)


class EnsembleCombiner:
    """
    Weighted combination of the linear, seasonal and weather components.
    Weights are fixed module constants and sum to 1.0.
    """

    def __init__(self, model_version: str = MODEL_VERSION):
        """
        Initialize the combiner.

        Args:
            model_version: Version tag stamped on every forecast
        """
        self.model_version = model_version
        self.weights = np.array([ENSEMBLE_WEIGHTS['linear'],
                                 ENSEMBLE_WEIGHTS['seasonal'],
                                 ENSEMBLE_WEIGHTS['weather']])

    def _weighted(self, linear: ComponentPrediction, seasonal: ComponentPrediction,
                  weather: ComponentPrediction, field: str) -> float:
        values = np.array([getattr(linear, field), getattr(seasonal, field), getattr(weather, field)])
        return float(np.dot(self.weights, values))

    def combine(self,
                linear: ComponentPrediction,
                seasonal: ComponentPrediction,
                weather: ComponentPrediction,
                features: FeatureVector,
                horizon_hours: int) -> Forecast:
        """
        Combine component predictions into the forecast for one hour.

        Args:
            linear: Linear-trend component output
            seasonal: Seasonal component output
            weather: Weather-response component output
            features: Feature vector the components were run on
            horizon_hours: Hours ahead of now

        Returns:
            Forecast with aqi clamped to [0, 500] and particulates floored at 0
        """
        predicted_aqi = int(round_half_up(self._weighted(linear, seasonal, weather, 'aqi')))
        predicted_pm25 = round_half_up(self._weighted(linear, seasonal, weather, 'pm25'), 1)
        predicted_pm10 = round_half_up(self._weighted(linear, seasonal, weather, 'pm10'), 1)

        return Forecast(
            predicted_aqi=max(AQI_MIN, min(AQI_MAX, predicted_aqi)),
            predicted_pm25=max(0.0, predicted_pm25),
            predicted_pm10=max(0.0, predicted_pm10),
            confidence_score=calculate_confidence(features, horizon_hours),
            horizon_hours=horizon_hours,
            features_used=features,
            model_version=self.model_version,
        )
