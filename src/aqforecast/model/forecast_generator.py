"""
Forecast generator for the air quality forecasting platform.
Runs feature extraction, the three component predictors and the ensemble
combiner for every hour of the requested horizon.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Union, Any
import logging

from .component_predictors import create_predictor
from .ensemble import EnsembleCombiner, MODEL_VERSION
from .forecasting_interface import ForecastResult
from .validation import validate_history, validate_horizon, assess_data_quality
from ..features.feature_extractor import FeatureExtractor
from ..models.data_models import Reading, AreaMeta, WeatherSnapshot, Forecast, utc_now

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ForecastGenerator:
    """
    Multi-horizon air quality forecaster.

    Each hour is computed from the original history only; hour k never reads
    the forecast for hour k-1. Holds no per-call state, so a single instance
    can serve any number of areas.
    """

    def __init__(self,
                 model_version: str = MODEL_VERSION,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the forecast generator.

        Args:
            model_version: Version tag stamped on every forecast
            clock: Callable returning the current time (UTC now if None)
        """
        self.clock = clock or utc_now
        self.extractor = FeatureExtractor(clock=self.clock)
        self.linear = create_predictor('linear')
        self.seasonal = create_predictor('seasonal')
        self.weather = create_predictor('weather')
        self.combiner = EnsembleCombiner(model_version=model_version)

    @property
    def model_version(self) -> str:
        return self.combiner.model_version

    def generate(self,
                 history: Sequence[Union[Reading, Dict[str, Any]]],
                 weather: WeatherSnapshot,
                 area: AreaMeta,
                 hours_ahead: int = 24,
                 now: Optional[datetime] = None) -> List[Forecast]:
        """
        Generate hourly forecasts for hours 1..hours_ahead.

        Args:
            history: Historical readings, newest first (at least 24)
            weather: Current weather conditions
            area: Area metadata
            hours_ahead: Number of hours to forecast
            now: Reference time shared by every hour (reads the clock if None)

        Returns:
            Forecasts ordered by horizon_hours

        Raises:
            InsufficientHistory: If fewer than 24 readings are supplied
            InvalidInput: If hours_ahead is not positive or a timestamp is malformed
        """
        hours_ahead = validate_horizon(hours_ahead)
        readings = validate_history(history)
        now = now or self.clock()

        forecasts = [self.predict_hour(readings, weather, area, hour, now) for hour in range(1, hours_ahead + 1)]

        logger.info(f"Generated {len(forecasts)} hourly forecasts for {area.name}")
        return forecasts

    def predict_hour(self,
                     history: Sequence[Reading],
                     weather: WeatherSnapshot,
                     area: AreaMeta,
                     horizon_hours: int,
                     now: datetime) -> Forecast:
        """Forecast a single horizon hour."""
        features = self.extractor.extract(history, weather, area, horizon_hours, now=now)

        return self.combiner.combine(
            self.linear.predict(features, horizon_hours),
            self.seasonal.predict(features, horizon_hours),
            self.weather.predict(features, horizon_hours),
            features,
            horizon_hours,
        )

    def generate_result(self,
                        history: Sequence[Union[Reading, Dict[str, Any]]],
                        weather: WeatherSnapshot,
                        area: AreaMeta,
                        hours_ahead: int = 24,
                        now: Optional[datetime] = None) -> ForecastResult:
        """
        Generate forecasts wrapped in a ForecastResult with history metadata.

        Args:
            history: Historical readings, newest first
            weather: Current weather conditions
            area: Area metadata
            hours_ahead: Number of hours to forecast
            now: Reference time (reads the clock if None)

        Returns:
            ForecastResult for the area
        """
        hours_ahead = validate_horizon(hours_ahead)
        readings = validate_history(history)
        now = now or self.clock()
        forecasts = self.generate(readings, weather, area, hours_ahead, now=now)

        return ForecastResult(
            forecasts=forecasts,
            area=area,
            created_at=now,
            metadata={
                'hours_ahead': hours_ahead,
                'history_length': len(readings),
                'data_quality_score': assess_data_quality(readings),
                'model_version': self.model_version,
                'ai_enhanced': False,
            }
        )


# Convenience functions
def create_forecast_generator(model_version: str = MODEL_VERSION) -> ForecastGenerator:
    """
    Create a forecast generator.

    Args:
        model_version: Version tag stamped on every forecast

    Returns:
        ForecastGenerator instance
    """
    return ForecastGenerator(model_version=model_version)


def generate_forecasts(history: Sequence[Union[Reading, Dict[str, Any]]],
                       weather: WeatherSnapshot,
                       area: AreaMeta,
                       hours_ahead: int = 24,
                       now: Optional[datetime] = None) -> List[Forecast]:
    """
    Generate hourly forecasts with a default generator.

    Args:
        history: Historical readings, newest first
        weather: Current weather conditions
        area: Area metadata
        hours_ahead: Number of hours to forecast
        now: Reference time (current time if None)

    Returns:
        Forecasts ordered by horizon_hours
    """
    return ForecastGenerator().generate(history, weather, area, hours_ahead, now=now)
