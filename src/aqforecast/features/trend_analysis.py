"""
Trend and risk analysis over recent readings.
Feeds the AI enhancement prompt and the risk factor list returned to callers.
"""

import numpy as np
from typing import Dict, List, Any, Sequence
import logging

from ..models.data_models import Reading, WeatherSnapshot, Forecast

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEFAULT_TEMPERATURE = 25.0


def _values(readings: Sequence[Reading], field: str, fill: float) -> np.ndarray:
    return np.array([getattr(r, field) if getattr(r, field) is not None else fill for r in readings], dtype=float)


def calculate_detailed_trends(history: Sequence[Reading]) -> Dict[str, Any]:
    """
    3-hour trends and short-term weather stability.

    Unlike the feature extractor, absent values count as 0 here.

    Args:
        history: Readings, newest first

    Returns:
        Dictionary with aqi_trend_3h, pm25_trend_3h and weather_stability
    """
    aqi_3h = _values(history[:3], 'aqi', 0.0)
    pm25_3h = _values(history[:3], 'pm25', 0.0)

    aqi_trend = float(aqi_3h[0] - aqi_3h[-1]) if len(aqi_3h) > 1 else 0.0
    pm25_trend = float(pm25_3h[0] - pm25_3h[-1]) if len(pm25_3h) > 1 else 0.0

    temperatures = _values(history[:6], 'temperature', DEFAULT_TEMPERATURE)
    if len(temperatures) > 1:
        temp_variability = float(np.sum(np.diff(temperatures) ** 2)) / (len(temperatures) - 1)
    else:
        temp_variability = 0.0

    if temp_variability < 4:
        stability = 'stable'
    elif temp_variability < 10:
        stability = 'moderate'
    else:
        stability = 'unstable'

    return {
        'aqi_trend_3h': aqi_trend,
        'pm25_trend_3h': pm25_trend,
        'weather_stability': stability,
    }


def detect_risk_factors(history: Sequence[Reading],
                        weather: WeatherSnapshot,
                        forecasts: Sequence[Forecast]) -> List[str]:
    """
    Flag conditions that make the forecast less reliable or pollution more likely.

    Args:
        history: Readings, newest first
        weather: Current weather conditions
        forecasts: Forecast sequence being reported

    Returns:
        List of human-readable risk messages
    """
    risks = []

    if weather.wind_speed is not None and weather.wind_speed < 0.5:
        risks.append("Low wind conditions may trap pollutants")
    if weather.humidity is not None and weather.humidity > 85:
        risks.append("High humidity may enhance particulate matter formation")
    if weather.temperature is not None and weather.temperature > 35:
        risks.append("High temperature may increase photochemical reactions")

    if forecasts:
        avg_confidence = np.mean([f.confidence_score for f in forecasts])
        if avg_confidence < 0.7:
            risks.append("Lower than usual prediction confidence due to data variability")

    recent_aqi = _values(history[:6], 'aqi', 0.0)
    if len(recent_aqi) >= 2 and np.max(np.abs(np.diff(recent_aqi))) > 50:
        risks.append("Rapid AQI fluctuations detected - increased uncertainty")

    if risks:
        logger.info(f"Detected {len(risks)} risk factors")
    return risks
