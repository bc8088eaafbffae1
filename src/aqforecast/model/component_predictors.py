"""
Component predictors for the air quality ensemble.
Implements linear-trend, seasonal/temporal and weather-response models.
"""

from typing import Dict
import logging

from .base_model import BaseComponentPredictor
from ..models.data_models import FeatureVector, ComponentPrediction

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Rain-driven washout suppresses pollutants during the monsoon
SEASONAL_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    'winter': {'aqi': 1.3, 'pm25': 1.4, 'pm10': 1.3},
    'summer': {'aqi': 1.1, 'pm25': 1.2, 'pm10': 1.1},
    'monsoon': {'aqi': 0.7, 'pm25': 0.6, 'pm10': 0.7},
    'post_monsoon': {'aqi': 1.0, 'pm25': 1.0, 'pm10': 1.0},
}

# Traffic and activity cycle keyed by hour of day; unlisted hours use DEFAULT_HOURLY_MULTIPLIER
HOURLY_MULTIPLIERS: Dict[int, Dict[str, float]] = {
    # Morning rush
    7: {'aqi': 1.3, 'pm25': 1.4, 'pm10': 1.3},
    8: {'aqi': 1.4, 'pm25': 1.5, 'pm10': 1.4},
    9: {'aqi': 1.3, 'pm25': 1.4, 'pm10': 1.3},
    10: {'aqi': 1.2, 'pm25': 1.3, 'pm10': 1.2},
    # Evening rush
    18: {'aqi': 1.3, 'pm25': 1.4, 'pm10': 1.3},
    19: {'aqi': 1.4, 'pm25': 1.5, 'pm10': 1.4},
    20: {'aqi': 1.3, 'pm25': 1.4, 'pm10': 1.3},
    21: {'aqi': 1.2, 'pm25': 1.3, 'pm10': 1.2},
    # Night
    0: {'aqi': 0.8, 'pm25': 0.7, 'pm10': 0.8},
    1: {'aqi': 0.7, 'pm25': 0.6, 'pm10': 0.7},
    2: {'aqi': 0.7, 'pm25': 0.6, 'pm10': 0.7},
    3: {'aqi': 0.7, 'pm25': 0.6, 'pm10': 0.7},
    4: {'aqi': 0.8, 'pm25': 0.7, 'pm10': 0.8},
    5: {'aqi': 0.9, 'pm25': 0.8, 'pm10': 0.9},
}
DEFAULT_HOURLY_MULTIPLIER = {'aqi': 1.0, 'pm25': 1.0, 'pm10': 1.0}

WEEKEND_MULTIPLIER = 0.85

# PM10 follows the PM2.5 trend rather than its own
PM10_TREND_COUPLING = 1.2


def get_hourly_multiplier(hour: int) -> Dict[str, float]:
    """Activity multiplier for an hour of day."""
    return HOURLY_MULTIPLIERS.get(hour, DEFAULT_HOURLY_MULTIPLIER)


class LinearTrendPredictor(BaseComponentPredictor):
    """Extrapolates the 3-hour trend from the 24-hour baseline."""

    def __init__(self, **kwargs):
        super().__init__("LinearTrend", "linear", **kwargs)

    def predict(self, features: FeatureVector, horizon_hours: int) -> ComponentPrediction:
        # Trend impact saturates after a day
        trend_factor = min(horizon_hours / 24, 1)

        return ComponentPrediction(
            aqi=features.aqi_avg_24h + features.aqi_trend_3h * trend_factor,
            pm25=features.pm25_avg_24h + features.pm25_trend_3h * trend_factor,
            pm10=features.pm10_avg_24h + features.pm25_trend_3h * PM10_TREND_COUPLING * trend_factor,
        )


class SeasonalPredictor(BaseComponentPredictor):
    """Scales the baseline by season, hour-of-day and weekend effects."""

    def __init__(self, **kwargs):
        super().__init__("Seasonal", "seasonal", **kwargs)

    def predict(self, features: FeatureVector, horizon_hours: int) -> ComponentPrediction:
        seasonal = SEASONAL_MULTIPLIERS[features.season]
        hourly = get_hourly_multiplier(features.hour_of_day)
        weekend = WEEKEND_MULTIPLIER if features.is_weekend else 1.0

        return ComponentPrediction(
            aqi=features.aqi_avg_24h * seasonal['aqi'] * hourly['aqi'] * weekend,
            pm25=features.pm25_avg_24h * seasonal['pm25'] * hourly['pm25'] * weekend,
            pm10=features.pm10_avg_24h * seasonal['pm10'] * hourly['pm10'] * weekend,
        )


class WeatherResponsePredictor(BaseComponentPredictor):
    """Applies dispersion and trapping effects of current weather to the baseline."""

    def __init__(self, **kwargs):
        super().__init__("WeatherResponse", "weather", **kwargs)

    def weather_multiplier(self, features: FeatureVector) -> float:
        """Combined multiplier from wind, humidity, temperature and pressure."""
        # More wind disperses pollution
        wind_effect = max(0.5, 1 - (features.wind_speed - 2) * 0.1)
        humidity_effect = 1 + (features.humidity - 60) * 0.005
        temperature_effect = 1 + (features.temperature - 25) * 0.01
        # Low pressure traps pollutants
        pressure_effect = 1 + (1013 - features.pressure) * 0.001

        return wind_effect * humidity_effect * temperature_effect * pressure_effect

    def predict(self, features: FeatureVector, horizon_hours: int) -> ComponentPrediction:
        multiplier = self.weather_multiplier(features)

        return ComponentPrediction(
            aqi=features.aqi_avg_24h * multiplier,
            pm25=features.pm25_avg_24h * multiplier,
            pm10=features.pm10_avg_24h * multiplier,
        )


def create_predictor(model_type: str, **kwargs) -> BaseComponentPredictor:
    """
    Factory function to create component predictors.

    Args:
        model_type: Type of predictor ('linear', 'seasonal', 'weather')
        **kwargs: Predictor-specific parameters

    Returns:
        Component predictor instance
    """
    predictors = {
        'linear': LinearTrendPredictor,
        'seasonal': SeasonalPredictor,
        'weather': WeatherResponsePredictor,
    }

    if model_type not in predictors:
        raise ValueError(f"Unknown predictor type: {model_type}. Available: {list(predictors.keys())}")

    return predictors[model_type](**kwargs)
