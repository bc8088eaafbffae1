"""
Optional AI enhancement stage for air quality forecasts.
Asks a hosted large language model for per-hour additive adjustments and a
narrative insight, and falls back to the baseline forecasts on any failure.
"""

import json
import math
import numbers
import requests
from dataclasses import dataclass, field, replace
from typing import Dict, List, Any, Optional, Sequence
import logging
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .ensemble import round_half_up, AQI_MIN, AQI_MAX, CONFIDENCE_MIN, CONFIDENCE_MAX
from ..features.trend_analysis import calculate_detailed_trends
from ..models.data_models import Reading, AreaMeta, WeatherSnapshot, Forecast
from ..utils.config import Config
from ..utils.exceptions import AIEnhancementError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


ENHANCED_VERSION_SUFFIX = "-ai-enhanced"
PROMPT_FORECAST_HOURS = 24

SYSTEM_PROMPT = (
    "You are an advanced air quality expert with deep knowledge of atmospheric science, "
    "meteorology, and pollution dynamics. Analyze the data and provide enhanced predictions "
    "with scientific reasoning."
)


@dataclass
class EnhancementResult:
    """Outcome of the enhancement stage; `applied` is False whenever the baseline was kept."""
    forecasts: List[Forecast]
    insights: Optional[str] = None
    risk_factors: List[str] = field(default_factory=list)
    applied: bool = False
    error: Optional[str] = None


def _delta(adjustment: Dict[str, Any], key: str) -> float:
    value = adjustment.get(key)
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0.0
    # json.loads accepts NaN and Infinity
    if not math.isfinite(value):
        return 0.0
    return float(value)


def apply_adjustments(forecasts: Sequence[Forecast], adjustments: Sequence[Dict[str, Any]]) -> List[Forecast]:
    """
    Apply additive per-hour adjustments to baseline forecasts.

    Args:
        forecasts: Baseline forecasts
        adjustments: Dicts with hour, aqi_adjustment, pm25_adjustment, confidence_adjustment

    Returns:
        New forecast list; hours without an adjustment are returned unchanged
    """
    by_hour = {}
    for adjustment in adjustments:
        if isinstance(adjustment, dict) and adjustment.get('hour') not in by_hour:
            by_hour[adjustment.get('hour')] = adjustment

    enhanced = []
    for forecast in forecasts:
        adjustment = by_hour.get(forecast.horizon_hours)
        if adjustment is None:
            enhanced.append(forecast)
            continue

        aqi = int(round_half_up(forecast.predicted_aqi + _delta(adjustment, 'aqi_adjustment')))
        pm25 = round_half_up(forecast.predicted_pm25 + _delta(adjustment, 'pm25_adjustment'), 1)
        confidence = forecast.confidence_score + _delta(adjustment, 'confidence_adjustment')

        enhanced.append(replace(
            forecast,
            predicted_aqi=max(AQI_MIN, min(AQI_MAX, aqi)),
            predicted_pm25=max(0.0, pm25),
            confidence_score=round_half_up(max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, confidence)), 2),
            model_version=f"{forecast.model_version}{ENHANCED_VERSION_SUFFIX}",
        ))

    return enhanced


class AIEnhancer:
    """
    Client for the chat-completions API used to post-adjust forecasts.
    Never raises from `enhance`: failures are logged and reported on the result.
    """

    def __init__(self,
                 api_key: Optional[str] = None,
                 model: Optional[str] = None,
                 api_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the AI enhancer.

        Args:
            api_key: API key (Config.OPENAI_API_KEY if None)
            model: Model name (Config.OPENAI_MODEL if None)
            api_url: Chat completions endpoint (Config.OPENAI_API_URL if None)
            timeout: Request timeout in seconds (Config.AI_REQUEST_TIMEOUT if None)
            session: Preconfigured requests session
        """
        self.api_key = api_key if api_key is not None else Config.OPENAI_API_KEY
        self.model = model or Config.OPENAI_MODEL
        self.api_url = api_url or Config.OPENAI_API_URL
        self.timeout = timeout if timeout is not None else Config.AI_REQUEST_TIMEOUT
        self.session = session or self._create_session()

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key)

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy."""
        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def enhance(self,
                history: Sequence[Reading],
                weather: WeatherSnapshot,
                area: AreaMeta,
                forecasts: Sequence[Forecast]) -> EnhancementResult:
        """
        Enhance baseline forecasts, falling back to them on any failure.

        Args:
            history: Readings, newest first
            weather: Current weather conditions
            area: Area metadata
            forecasts: Baseline forecasts from the generator

        Returns:
            EnhancementResult with adjusted or baseline forecasts
        """
        baseline = list(forecasts)

        if not self.is_enabled:
            return EnhancementResult(forecasts=baseline)

        try:
            prompt = self.build_prompt(history, weather, area, baseline)
            ai_result = self._request_completion(prompt)

            adjustments = ai_result.get('adjustments') or []
            if not isinstance(adjustments, list):
                raise AIEnhancementError("'adjustments' must be a list")

            risk_factors = ai_result.get('risk_factors') or []
            if not isinstance(risk_factors, list):
                risk_factors = [str(risk_factors)]

            enhanced = apply_adjustments(baseline, adjustments)
            logger.info(f"Applied {len(adjustments)} AI adjustments for {area.name}")

            return EnhancementResult(
                forecasts=enhanced,
                insights=ai_result.get('insights') or "AI analysis completed successfully",
                risk_factors=[str(r) for r in risk_factors],
                applied=True,
            )

        except Exception as e:
            logger.warning(f"AI enhancement failed for {area.name}, using base predictions: {e}")
            return EnhancementResult(forecasts=baseline, error=str(e))

    def _request_completion(self, prompt: str) -> Dict[str, Any]:
        """Send the prompt and decode the JSON object in the reply."""
        payload = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': prompt},
            ],
            'response_format': {'type': 'json_object'},
        }
        headers = {'Authorization': f"Bearer {self.api_key}"}

        response = self.session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        response.raise_for_status()

        try:
            content = response.json()['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise AIEnhancementError(f"Unexpected completion response shape: {e}") from e

        result = json.loads(content or "{}")
        if not isinstance(result, dict):
            raise AIEnhancementError("Completion content is not a JSON object")
        return result

    def build_prompt(self,
                     history: Sequence[Reading],
                     weather: WeatherSnapshot,
                     area: AreaMeta,
                     forecasts: Sequence[Forecast]) -> str:
        """Build the analysis prompt for the language model."""
        recent = list(history[:24])
        avg_aqi = sum(r.aqi or 0 for r in recent) / len(recent) if recent else 0.0
        trends = calculate_detailed_trends(history)

        forecast_lines = "\n".join(
            f"Hour {f.horizon_hours}: AQI {f.predicted_aqi}, PM2.5 {f.predicted_pm25}, Confidence {f.confidence_score}"
            for f in forecasts[:PROMPT_FORECAST_HOURS]
        )

        return f"""
Analyze this air quality data and enhance the predictions with expert insights:

LOCATION: {area.name}, {area.district} district
COORDINATES: {area.latitude}, {area.longitude}

CURRENT CONDITIONS:
- Average AQI (24h): {avg_aqi:.1f}
- Temperature: {weather.temperature}°C
- Humidity: {weather.humidity}%
- Wind Speed: {weather.wind_speed} m/s
- Wind Direction: {weather.wind_direction}°

TRENDS:
- AQI Trend (3h): {trends['aqi_trend_3h']}
- PM2.5 Trend (3h): {trends['pm25_trend_3h']}
- Weather Stability: {trends['weather_stability']}

BASE PREDICTIONS (next 24h):
{forecast_lines}

Please analyze and provide:
1. Enhanced predictions with adjustments based on atmospheric science
2. Risk factors and unusual patterns identified
3. Confidence adjustments based on data quality
4. Environmental insights for this specific location

Respond in JSON format:
{{
  "adjustments": [
    {{"hour": 1, "aqi_adjustment": 5, "pm25_adjustment": 2, "confidence_adjustment": 0.05, "reasoning": "..."}}
  ],
  "insights": "Comprehensive analysis including key findings, risk factors, and recommendations",
  "risk_factors": ["factor1", "factor2"],
  "confidence_notes": "Overall assessment of prediction reliability"
}}
"""
