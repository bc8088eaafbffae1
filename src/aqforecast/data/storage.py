"""
Data storage for the air quality forecasting platform.
Defines the store contract the handlers depend on and a SQLite implementation.
"""

import sqlite3
import uuid
import pandas as pd
from abc import ABC, abstractmethod
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any, Optional, Sequence, Union
import logging

from ..models.data_models import Reading, AreaMeta, to_utc_iso, utc_now
from ..utils.config import Config
from ..utils.exceptions import DataStorageError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


READING_COLUMNS = [
    'aqi', 'pm25', 'pm10', 'no2', 'so2', 'co', 'o3',
    'temperature', 'humidity', 'pressure', 'wind_speed', 'wind_direction', 'visibility',
]

SCHEMA = """
CREATE TABLE IF NOT EXISTS areas (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    latitude REAL,
    longitude REAL,
    district TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS air_quality_readings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    area_id TEXT NOT NULL REFERENCES areas(id) ON DELETE CASCADE,
    timestamp TEXT NOT NULL,
    aqi REAL, pm25 REAL, pm10 REAL, no2 REAL, so2 REAL, co REAL, o3 REAL,
    temperature REAL, humidity REAL, pressure REAL,
    wind_speed REAL, wind_direction REAL, visibility REAL,
    source TEXT DEFAULT 'openweather'
);

CREATE TABLE IF NOT EXISTS air_quality_predictions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    area_id TEXT NOT NULL REFERENCES areas(id) ON DELETE CASCADE,
    prediction_timestamp TEXT NOT NULL,
    predicted_for TEXT NOT NULL,
    predicted_aqi INTEGER,
    predicted_pm25 REAL,
    predicted_pm10 REAL,
    confidence_score REAL,
    model_version TEXT,
    features_used TEXT
);

CREATE INDEX IF NOT EXISTS idx_readings_area_timestamp
ON air_quality_readings(area_id, timestamp DESC);

CREATE INDEX IF NOT EXISTS idx_predictions_area_predicted_for
ON air_quality_predictions(area_id, predicted_for);
"""


class ForecastStorage(ABC):
    """Abstract store for areas, readings and forecasts."""

    @abstractmethod
    def list_areas(self) -> List[AreaMeta]:
        """List all monitored areas."""
        pass

    @abstractmethod
    def get_area(self, area_id: str) -> Optional[AreaMeta]:
        """Look up an area by id."""
        pass

    @abstractmethod
    def get_recent_readings(self, area_id: str, since: datetime) -> List[Reading]:
        """Readings for an area taken at or after `since`, newest first."""
        pass

    @abstractmethod
    def replace_forecasts(self, area_id: str, records: List[Dict[str, Any]], now: datetime) -> int:
        """Delete an area's forecasts targeting now or later and insert `records`."""
        pass


class SQLiteStorage(ForecastStorage):
    """
    SQLite-backed store.
    Timestamps are stored as naive UTC ISO-8601 text so range filters compare lexically.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        """
        Initialize SQLite storage.

        Args:
            db_path: Path to the SQLite database file (Config.DATABASE_PATH if None)
        """
        self.db_path = str(db_path or Config.DATABASE_PATH)
        self._initialize_database()
        logger.info(f"Initialized SQLite storage at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _initialize_database(self) -> None:
        try:
            with closing(self._connect()) as conn:
                conn.executescript(SCHEMA)
                conn.commit()
        except sqlite3.Error as e:
            raise DataStorageError(f"Failed to initialize database {self.db_path}: {e}") from e

    def add_area(self, area: AreaMeta) -> AreaMeta:
        """
        Insert an area, generating an id when it has none.

        Returns:
            The stored area
        """
        area_id = area.id or str(uuid.uuid4())
        try:
            with closing(self._connect()) as conn:
                conn.execute(
                    "INSERT INTO areas (id, name, latitude, longitude, district, created_at) VALUES (?, ?, ?, ?, ?, ?)",
                    (area_id, area.name, area.latitude, area.longitude, area.district, to_utc_iso(utc_now()))
                )
                conn.commit()
        except sqlite3.Error as e:
            raise DataStorageError(f"Failed to store area {area.name}: {e}") from e

        return AreaMeta(name=area.name, district=area.district, latitude=area.latitude,
                        longitude=area.longitude, id=area_id)

    def list_areas(self) -> List[AreaMeta]:
        df = self._query("SELECT * FROM areas ORDER BY name")
        return [AreaMeta.from_dict(row) for row in df.to_dict('records')]

    def get_area(self, area_id: str) -> Optional[AreaMeta]:
        df = self._query("SELECT * FROM areas WHERE id = ?", (area_id,))
        if df.empty:
            return None
        return AreaMeta.from_dict(df.iloc[0].to_dict())

    def store_readings(self, area_id: str, readings: Sequence[Reading], source: str = 'openweather') -> int:
        """
        Append readings for an area.

        Returns:
            Number of rows written
        """
        if not readings:
            logger.warning(f"No readings provided for area {area_id}")
            return 0

        df = pd.DataFrame([r.to_dict() for r in readings])
        df['timestamp'] = df['timestamp'].map(to_utc_iso)
        df['area_id'] = area_id
        df['source'] = source

        try:
            with closing(self._connect()) as conn:
                df.to_sql('air_quality_readings', conn, if_exists='append', index=False)
                conn.commit()
        except (sqlite3.Error, ValueError) as e:
            raise DataStorageError(f"Failed to store readings for area {area_id}: {e}") from e

        logger.info(f"Stored {len(df)} readings for area {area_id}")
        return len(df)

    def get_recent_readings(self, area_id: str, since: datetime) -> List[Reading]:
        df = self._query(
            "SELECT * FROM air_quality_readings WHERE area_id = ? AND timestamp >= ? ORDER BY timestamp DESC",
            (area_id, to_utc_iso(since))
        )
        return [Reading.from_dict(row) for row in df.to_dict('records')]

    def replace_forecasts(self, area_id: str, records: List[Dict[str, Any]], now: datetime) -> int:
        try:
            with closing(self._connect()) as conn:
                deleted = conn.execute(
                    "DELETE FROM air_quality_predictions WHERE area_id = ? AND predicted_for >= ?",
                    (area_id, to_utc_iso(now))
                ).rowcount
                if records:
                    pd.DataFrame(records).to_sql('air_quality_predictions', conn, if_exists='append', index=False)
                conn.commit()
        except (sqlite3.Error, ValueError) as e:
            raise DataStorageError(f"Failed to store predictions for area {area_id}: {e}") from e

        logger.info(f"Replaced {deleted} stale predictions with {len(records)} new ones for area {area_id}")
        return len(records)

    def get_forecasts(self, area_id: str) -> pd.DataFrame:
        """Stored predictions for an area ordered by target time."""
        return self._query(
            "SELECT * FROM air_quality_predictions WHERE area_id = ? ORDER BY predicted_for",
            (area_id,)
        )

    def _query(self, sql: str, params: tuple = ()) -> pd.DataFrame:
        try:
            with closing(self._connect()) as conn:
                return pd.read_sql_query(sql, conn, params=params)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise DataStorageError(f"Query failed: {e}") from e
