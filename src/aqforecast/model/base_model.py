"""
Base model interface for the air quality forecasting platform.
Every component predictor is a pure function of a feature vector and a horizon.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any
import logging

from ..models.data_models import FeatureVector, ComponentPrediction

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class BaseComponentPredictor(ABC):
    """
    Abstract base class for ensemble component predictors.
    Implementations hold only constant tables, so one instance can be shared.
    """

    def __init__(self, model_name: str, model_type: str, **kwargs):
        """
        Initialize the component predictor.

        Args:
            model_name: Human-readable name for the predictor
            model_type: Ensemble slot this predictor fills ('linear', 'seasonal', 'weather')
            **kwargs: Additional predictor-specific parameters
        """
        self.model_name = model_name
        self.model_type = model_type
        self.parameters = kwargs

    @abstractmethod
    def predict(self, features: FeatureVector, horizon_hours: int) -> ComponentPrediction:
        """
        Predict aqi, pm25 and pm10 for the target hour.

        Args:
            features: Feature vector for the target hour
            horizon_hours: Hours ahead of now

        Returns:
            Unclamped component prediction
        """
        pass

    def get_model_parameters(self) -> Dict[str, Any]:
        """
        Get predictor parameters.

        Returns:
            Dictionary of predictor parameters
        """
        return self.parameters.copy()

    def __str__(self) -> str:
        return f"{self.model_type.title()}Predictor({self.model_name})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.model_name}', type='{self.model_type}')"
