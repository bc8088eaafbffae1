"""
API handlers for air quality forecasting platform.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Dict, Tuple, Any, Optional
import logging

from ..data.storage import ForecastStorage
from ..features.trend_analysis import detect_risk_factors
from ..model.ai_enhancement import AIEnhancer
from ..model.forecast_generator import ForecastGenerator
from ..model.forecasting_interface import ForecastResult
from ..model.validation import MIN_HISTORY_HOURS, validate_horizon
from ..models.data_models import WeatherSnapshot, utc_now
from ..utils.config import Config
from ..utils.exceptions import APIError, ForecastingError, InsufficientHistory, InvalidInput

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


TRUE_STRINGS = ('true', '1', 'yes', 'on')
FALSE_STRINGS = ('false', '0', 'no', 'off')


def parse_flag(value: Any) -> bool:
    """
    Interpret a boolean request flag.

    Raises:
        ValueError: If the value is neither a boolean nor a recognised string
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_STRINGS:
            return True
        if normalized in FALSE_STRINGS:
            return False
    raise ValueError(f"include_ai must be a boolean, got {value!r}")


class APIHandler(ABC):
    """Abstract base class for API handling."""

    @abstractmethod
    def validate_request(self, request: Dict[str, Any]) -> Tuple[bool, str]:
        """Validate incoming API request."""
        pass

    @abstractmethod
    def process_forecast_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Process forecast generation request."""
        pass

    @abstractmethod
    def format_response(self, data: Any, format_type: str) -> Any:
        """Format response data in specified format."""
        pass

    @abstractmethod
    def handle_error(self, error_code: int, error_message: str) -> Dict[str, Any]:
        """Handle and format error responses."""
        pass


class ForecastAPIHandler(APIHandler):
    """
    Single-area forecast endpoint.
    Loads history from the store, generates, optionally enhances, and persists.
    """

    def __init__(self,
                 storage: ForecastStorage,
                 generator: Optional[ForecastGenerator] = None,
                 enhancer: Optional[AIEnhancer] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage
        self.clock = clock or utc_now
        self.generator = generator or ForecastGenerator(model_version=Config.MODEL_VERSION, clock=self.clock)
        self.enhancer = enhancer or AIEnhancer()

    def validate_request(self, request: Dict[str, Any]) -> Tuple[bool, str]:
        if not isinstance(request, dict):
            return False, "Request body must be a JSON object"
        if not request.get('area_id'):
            return False, "Area ID is required"
        try:
            validate_horizon(request.get('hours_ahead', 24))
        except InvalidInput as e:
            return False, str(e)
        try:
            parse_flag(request.get('include_ai', True))
        except ValueError as e:
            return False, str(e)
        return True, ""

    def process_forecast_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        valid, message = self.validate_request(request)
        if not valid:
            raise APIError(message, status_code=400)

        area_id = request['area_id']
        area = self.storage.get_area(area_id)
        if area is None:
            raise APIError("Area not found", status_code=404)

        now = self.clock()
        history = self.storage.get_recent_readings(area_id, now - timedelta(hours=Config.HISTORY_LOOKBACK_HOURS))
        if len(history) < MIN_HISTORY_HOURS:
            raise InsufficientHistory(len(history), MIN_HISTORY_HOURS)

        weather = WeatherSnapshot.from_reading(history[0])
        use_ai = parse_flag(request.get('include_ai', True)) and self.enhancer.is_enabled
        cap = Config.MAX_ENHANCED_HOURS_AHEAD if use_ai else Config.MAX_HOURS_AHEAD
        hours_ahead = min(validate_horizon(request.get('hours_ahead', 24)), cap)

        logger.info(f"Generating predictions for {area.name} ({hours_ahead} hours ahead)")
        result = self.generator.generate_result(history, weather, area, hours_ahead, now=now)

        insights = None
        ai_risks = []
        if use_ai:
            enhancement = self.enhancer.enhance(history, weather, area, result.forecasts)
            result = result.with_forecasts(enhancement.forecasts,
                                           ai_enhanced=enhancement.applied,
                                           ai_error=enhancement.error)
            insights = enhancement.insights
            ai_risks = enhancement.risk_factors

        risk_factors = detect_risk_factors(history, weather, result.forecasts)
        risk_factors += [r for r in ai_risks if r not in risk_factors]

        self.storage.replace_forecasts(area_id, result.to_records(area_id), now)
        logger.info(f"Generated and stored {len(result)} predictions for {area.name}")

        response = self.format_response(result, 'json')
        response.update({
            'ai_insights': insights,
            'risk_factors': risk_factors,
        })
        return response

    def format_response(self, data: Any, format_type: str) -> Any:
        if not isinstance(data, ForecastResult):
            raise ValueError(f"Cannot format {type(data).__name__}")

        if format_type == 'json':
            return {
                'success': True,
                'area': data.area.name,
                'predictions_generated': len(data),
                'predictions': [f.to_dict() for f in data.forecasts],
                'model_version': data.model_version,
                'confidence_range': data.confidence_range(),
                'data_quality_score': data.metadata.get('data_quality_score'),
                'ai_enhanced': data.metadata.get('ai_enhanced', False),
            }
        if format_type == 'dataframe':
            return data.to_dataframe()
        if format_type == 'csv':
            return data.to_dataframe().to_csv(index=False)

        raise ValueError(f"Unknown format type: {format_type}")

    def handle_error(self, error_code: int, error_message: str) -> Dict[str, Any]:
        return {
            'success': False,
            'status_code': error_code,
            'error': error_message,
        }

    def handle(self, request: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        """
        Process a request and translate failures into error payloads.

        Returns:
            Tuple of (status_code, response_body)
        """
        try:
            return 200, self.process_forecast_request(request)
        except APIError as e:
            return e.status_code, self.handle_error(e.status_code, str(e))
        except ForecastingError as e:
            return 400, self.handle_error(400, str(e))
        except Exception as e:
            logger.error(f"Prediction generation error: {e}")
            body = self.handle_error(500, "Failed to generate predictions")
            body['details'] = str(e)
            return 500, body
