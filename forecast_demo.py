#!/usr/bin/env python3
"""
Demo script to run the air quality forecaster on synthetic readings.
Shows the ensemble forecast, confidence decay and risk factors.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

import numpy as np
from datetime import datetime, timedelta

from aqforecast.features.trend_analysis import detect_risk_factors
from aqforecast.model.forecast_generator import ForecastGenerator
from aqforecast.models.data_models import Reading, AreaMeta, WeatherSnapshot
from aqforecast.utils.config import Config


def create_sample_readings(now: datetime, hours: int = 48):
    """Create two days of hourly readings, newest first."""
    np.random.seed(42)
    readings = []
    for i in range(hours):
        hour = (now - timedelta(hours=i)).hour
        traffic = 1.3 if hour in (8, 9, 19, 20) else 1.0
        readings.append(Reading(
            timestamp=now - timedelta(hours=i),
            aqi=float(90 * traffic + np.random.normal(0, 8)),
            pm25=float(38 * traffic + np.random.normal(0, 4)),
            pm10=float(65 * traffic + np.random.normal(0, 6)),
            no2=float(28 + np.random.normal(0, 3)),
            temperature=float(26 + 4 * np.sin(2 * np.pi * hour / 24)),
            humidity=float(65 + np.random.normal(0, 5)),
            pressure=1012.0,
            wind_speed=float(abs(2.5 + np.random.normal(0, 1))),
            wind_direction=200.0,
        ))
    return readings


def main():
    """Run the forecasting demo."""
    Config.configure_logging()
    print("Air Quality Forecast Demo")
    print("=" * 50)

    now = datetime.now().replace(minute=0, second=0, microsecond=0)
    history = create_sample_readings(now)
    area = AreaMeta(name="Koramangala", district="South Bengaluru", latitude=12.9352, longitude=77.6245)
    weather = WeatherSnapshot.from_reading(history[0])

    generator = ForecastGenerator()
    result = generator.generate_result(history, weather, area, hours_ahead=24, now=now)

    print(f"\nArea: {area.name} ({result.forecasts[0].features_used.area_type})")
    print(f"Data quality score: {result.metadata['data_quality_score']:.2f}")
    print(f"Confidence range: {result.confidence_range()}")

    print("\nForecast:")
    print(result.to_dataframe().to_string(index=False))

    risks = detect_risk_factors(history, weather, result.forecasts)
    print("\nRisk factors:")
    for risk in risks or ["none"]:
        print(f"   - {risk}")


if __name__ == "__main__":
    main()
