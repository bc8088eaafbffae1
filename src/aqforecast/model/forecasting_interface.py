"""
Standardized forecast result container for the air quality forecasting platform.
Provides tabular export, persistence records and confidence summaries.
"""

import json
import numpy as np
import pandas as pd
from typing import Dict, List, Any, Optional
from datetime import datetime, timedelta
from dataclasses import dataclass, field, replace

from ..models.data_models import AreaMeta, Forecast, to_utc_iso


@dataclass
class ForecastResult:
    """
    Ordered forecast sequence for one area plus generation metadata.
    Forecasts are ordered by increasing horizon_hours starting at 1.
    """
    forecasts: List[Forecast]
    area: AreaMeta
    created_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.forecasts)

    @property
    def model_version(self) -> Optional[str]:
        return self.forecasts[0].model_version if self.forecasts else None

    def predicted_for(self, forecast: Forecast) -> datetime:
        """Wall-clock time a forecast targets."""
        return self.created_at + timedelta(hours=forecast.horizon_hours)

    def confidence_range(self) -> Dict[str, float]:
        """Min, max and mean confidence over the sequence."""
        if not self.forecasts:
            return {'min': 0.0, 'max': 0.0, 'avg': 0.0}
        scores = np.array([f.confidence_score for f in self.forecasts])
        return {
            'min': float(scores.min()),
            'max': float(scores.max()),
            'avg': float(scores.mean()),
        }

    def with_forecasts(self, forecasts: List[Forecast], **metadata) -> 'ForecastResult':
        """Copy of this result with a replaced sequence and merged metadata."""
        return replace(self, forecasts=list(forecasts), metadata={**self.metadata, **metadata})

    def to_dataframe(self) -> pd.DataFrame:
        """Convert forecast result to DataFrame."""
        df = pd.DataFrame({
            'horizon_hours': [f.horizon_hours for f in self.forecasts],
            'predicted_for': [self.predicted_for(f) for f in self.forecasts],
            'predicted_aqi': [f.predicted_aqi for f in self.forecasts],
            'predicted_pm25': [f.predicted_pm25 for f in self.forecasts],
            'predicted_pm10': [f.predicted_pm10 for f in self.forecasts],
            'confidence_score': [f.confidence_score for f in self.forecasts],
            'aqi_category': [f.aqi_category['label'] for f in self.forecasts],
            'model_version': [f.model_version for f in self.forecasts],
        })
        return df

    def to_records(self, area_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Build prediction rows for persistence.

        Args:
            area_id: Area identifier (defaults to the area's own id)

        Returns:
            List of row dictionaries, one per forecast
        """
        area_id = area_id if area_id is not None else self.area.id
        return [
            {
                'area_id': area_id,
                'prediction_timestamp': to_utc_iso(self.created_at),
                'predicted_for': to_utc_iso(self.predicted_for(f)),
                'predicted_aqi': f.predicted_aqi,
                'predicted_pm25': f.predicted_pm25,
                'predicted_pm10': f.predicted_pm10,
                'confidence_score': f.confidence_score,
                'model_version': f.model_version,
                'features_used': json.dumps(f.features_used.to_dict()),
            }
            for f in self.forecasts
        ]
