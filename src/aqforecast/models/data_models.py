"""
Data models for air quality forecasting platform.
"""

from dataclasses import dataclass, asdict, fields
from datetime import datetime, timezone
from typing import Dict, Any, Optional

import pandas as pd

from ..utils.exceptions import InvalidInput


POLLUTANT_FIELDS = ('aqi', 'pm25', 'pm10', 'no2', 'so2', 'co', 'o3')
WEATHER_FIELDS = ('temperature', 'humidity', 'pressure', 'wind_speed', 'wind_direction', 'visibility')

# Applied when the current weather snapshot has no value for a field
WEATHER_DEFAULTS = {
    'temperature': 25.0,
    'humidity': 60.0,
    'pressure': 1013.0,
    'wind_speed': 2.0,
    'wind_direction': 180.0,
}

AQI_CATEGORIES = {
    'GOOD': {'min': 0, 'max': 50, 'label': 'Good', 'color': 'green'},
    'MODERATE': {'min': 51, 'max': 100, 'label': 'Moderate', 'color': 'yellow'},
    'UNHEALTHY_SENSITIVE': {'min': 101, 'max': 150, 'label': 'Unhealthy for Sensitive Groups', 'color': 'orange'},
    'UNHEALTHY': {'min': 151, 'max': 200, 'label': 'Unhealthy', 'color': 'red'},
    'VERY_UNHEALTHY': {'min': 201, 'max': 300, 'label': 'Very Unhealthy', 'color': 'purple'},
    'HAZARDOUS': {'min': 301, 'max': 500, 'label': 'Hazardous', 'color': 'maroon'},
}


def get_aqi_category(aqi: float) -> Dict[str, Any]:
    """Look up the AQI band an index value falls in."""
    for key, category in AQI_CATEGORIES.items():
        if category['min'] <= aqi <= category['max']:
            return {'key': key, **category}
    return {'key': 'UNKNOWN', 'min': 0, 'max': 0, 'label': 'Unknown', 'color': 'gray'}


def parse_timestamp(value: Any) -> datetime:
    """
    Coerce a timestamp-like value into a datetime.

    Raises:
        InvalidInput: If the value is missing or cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if value is None:
        raise InvalidInput("Reading timestamp is missing")
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError) as e:
        raise InvalidInput(f"Malformed reading timestamp: {value!r}") from e
    if pd.isna(parsed):
        raise InvalidInput(f"Malformed reading timestamp: {value!r}")
    return parsed.to_pydatetime()


def utc_now() -> datetime:
    """Current time as a UTC-aware datetime."""
    return datetime.now(timezone.utc)


def to_utc_iso(value: Any) -> str:
    """
    Format a timestamp as naive UTC ISO-8601 text for storage.

    Aware values are converted to UTC; naive values are taken to be UTC already.
    """
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_convert('UTC').tz_localize(None)
    return ts.isoformat()


def _optional_float(record: Dict[str, Any], key: str) -> Optional[float]:
    value = record.get(key)
    if value is None or pd.isna(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Field '{key}' must be numeric, got {value!r}") from e


@dataclass(frozen=True)
class Reading:
    """Historical sensor/weather observation for an area."""
    timestamp: datetime
    aqi: Optional[float] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    no2: Optional[float] = None
    so2: Optional[float] = None
    co: Optional[float] = None
    o3: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    visibility: Optional[float] = None

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'Reading':
        """Build a reading from a database row or API payload."""
        values = {name: _optional_float(record, name) for name in POLLUTANT_FIELDS + WEATHER_FIELDS}
        return cls(timestamp=parse_timestamp(record.get('timestamp')), **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AreaMeta:
    """Monitored city area."""
    name: str
    district: str = ''
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'AreaMeta':
        return cls(
            name=record['name'],
            district=record.get('district') or '',
            latitude=_optional_float(record, 'latitude'),
            longitude=_optional_float(record, 'longitude'),
            id=record.get('id'),
        )


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current weather conditions used as the baseline for every horizon."""
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None

    @classmethod
    def from_reading(cls, reading: Reading) -> 'WeatherSnapshot':
        """Take the weather fields of the most recent reading."""
        return cls(
            temperature=reading.temperature,
            humidity=reading.humidity,
            pressure=reading.pressure,
            wind_speed=reading.wind_speed,
            wind_direction=reading.wind_direction,
        )

    def with_defaults(self) -> Dict[str, float]:
        """Weather values with missing fields replaced by their baseline defaults."""
        values = {}
        for f in fields(self):
            # Only None is missing; a measured 0 (calm wind) is kept, not treated as falsy and defaulted
            value = getattr(self, f.name)
            values[f.name] = float(value) if value is not None else WEATHER_DEFAULTS[f.name]
        return values


@dataclass(frozen=True)
class FeatureVector:
    """Engineered features for a single target hour."""
    # Historical air quality
    aqi_avg_24h: float
    pm25_avg_24h: float
    pm10_avg_24h: float
    no2_avg_24h: float

    # Weather
    temperature: float
    humidity: float
    pressure: float
    wind_speed: float
    wind_direction: float

    # Temporal
    hour_of_day: int
    day_of_week: int  # Sunday=0 .. Saturday=6
    month: int
    is_weekend: bool
    season: str

    # Trend
    aqi_trend_3h: float
    pm25_trend_3h: float

    # Location
    area_type: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComponentPrediction:
    """Unclamped output of a single component predictor."""
    aqi: float
    pm25: float
    pm10: float


@dataclass(frozen=True)
class Forecast:
    """Ensemble forecast for one horizon hour."""
    predicted_aqi: int
    predicted_pm25: float
    predicted_pm10: float
    confidence_score: float
    horizon_hours: int
    features_used: FeatureVector
    model_version: str

    @property
    def aqi_category(self) -> Dict[str, Any]:
        return get_aqi_category(self.predicted_aqi)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predicted_aqi': self.predicted_aqi,
            'predicted_pm25': self.predicted_pm25,
            'predicted_pm10': self.predicted_pm10,
            'confidence_score': self.confidence_score,
            'horizon_hours': self.horizon_hours,
            'features_used': self.features_used.to_dict(),
            'model_version': self.model_version,
        }
