"""
Batch forecast generation across every monitored area.
"""

import time
import numpy as np
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Any, Optional
import logging

from ..data.storage import ForecastStorage
from ..model.forecast_generator import ForecastGenerator
from ..model.validation import MIN_HISTORY_HOURS
from ..models.data_models import WeatherSnapshot, utc_now
from ..utils.config import Config

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class BatchForecastRunner:
    """
    Runs the forecast generator once per area, sequentially, and persists results.
    A failing area is recorded and skipped; it never stops the batch.
    """

    def __init__(self,
                 storage: ForecastStorage,
                 generator: Optional[ForecastGenerator] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 delay_seconds: Optional[float] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the batch runner.

        Args:
            storage: Store for areas, readings and forecasts
            generator: Forecast generator (created from Config if None)
            clock: Callable returning the current time (UTC now if None)
            delay_seconds: Pause between areas (Config.BATCH_DELAY_SECONDS if None)
            sleep: Sleep function used for the inter-area pause
        """
        self.storage = storage
        self.clock = clock or utc_now
        self.generator = generator or ForecastGenerator(model_version=Config.MODEL_VERSION, clock=self.clock)
        self.delay_seconds = Config.BATCH_DELAY_SECONDS if delay_seconds is None else delay_seconds
        self.sleep = sleep

    def run(self, hours_ahead: int = 24) -> Dict[str, Any]:
        """
        Generate and store forecasts for all areas.

        Args:
            hours_ahead: Requested horizon, capped at Config.MAX_HOURS_AHEAD

        Returns:
            Summary with per-area results and errors
        """
        areas = self.storage.list_areas()
        hours_ahead = min(hours_ahead, Config.MAX_HOURS_AHEAD)

        results: List[Dict[str, Any]] = []
        errors: List[str] = []

        logger.info(f"Starting batch prediction generation for {len(areas)} areas")

        for area in areas:
            try:
                now = self.clock()
                history = self.storage.get_recent_readings(
                    area.id, now - timedelta(hours=Config.HISTORY_LOOKBACK_HOURS)
                )

                if len(history) < MIN_HISTORY_HOURS:
                    errors.append(f"{area.name}: Insufficient historical data")
                    logger.warning(f"Skipping {area.name}: {len(history)} readings available")
                    continue

                weather = WeatherSnapshot.from_reading(history[0])
                result = self.generator.generate_result(history, weather, area, hours_ahead, now=now)
                self.storage.replace_forecasts(area.id, result.to_records(area.id), now)

                results.append({
                    'area': area.name,
                    'predictions_generated': len(result),
                    'avg_confidence': result.confidence_range()['avg'],
                    'status': 'success',
                })
                logger.info(f"Generated predictions for {area.name}")

                self.sleep(self.delay_seconds)

            except Exception as e:
                errors.append(f"{area.name}: {e}")
                logger.error(f"Error generating predictions for {area.name}: {e}")

        avg_confidence = float(np.mean([r['avg_confidence'] for r in results])) if results else 0.0

        return {
            'success': True,
            'processed': len(results),
            'total': len(areas),
            'results': results,
            'errors': errors or None,
            'summary': {
                'successful_areas': len(results),
                'failed_areas': len(errors),
                'avg_confidence': avg_confidence,
            },
        }
