"""
Input validation for forecast generation.
Enforces the history and horizon preconditions and scores history quality.
"""

from datetime import datetime
from typing import Any, List, Sequence, Union, Dict
import numbers
import logging

from ..models.data_models import Reading
from ..utils.exceptions import InsufficientHistory, InvalidInput

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


MIN_HISTORY_HOURS = 24

MISSING_VALUE_PENALTY = 0.5
OUTLIER_PENALTY = 0.3
VALID_RANGE = (0, 500)


def validate_horizon(hours_ahead: Any) -> int:
    """
    Validate a requested horizon.

    Raises:
        InvalidInput: If hours_ahead is not a positive integer
    """
    if isinstance(hours_ahead, bool) or not isinstance(hours_ahead, numbers.Integral):
        raise InvalidInput(f"hours_ahead must be an integer, got {hours_ahead!r}")
    if hours_ahead <= 0:
        raise InvalidInput(f"hours_ahead must be >= 1, got {hours_ahead}")
    return int(hours_ahead)


def validate_history(history: Sequence[Union[Reading, Dict[str, Any]]]) -> List[Reading]:
    """
    Validate and normalise historical readings.

    Args:
        history: Readings or raw reading records, newest first

    Returns:
        List of Reading objects in the same order

    Raises:
        InsufficientHistory: If fewer than 24 readings are supplied
        InvalidInput: If a reading has a malformed timestamp
    """
    if history is None:
        raise InsufficientHistory(0, MIN_HISTORY_HOURS)

    if len(history) < MIN_HISTORY_HOURS:
        raise InsufficientHistory(len(history), MIN_HISTORY_HOURS)

    readings = []
    for index, item in enumerate(history):
        if isinstance(item, Reading):
            if not isinstance(item.timestamp, datetime):
                raise InvalidInput(f"Reading {index} has a malformed timestamp: {item.timestamp!r}")
            readings.append(item)
        elif isinstance(item, dict):
            readings.append(Reading.from_dict(item))
        else:
            raise InvalidInput(f"Reading {index} has unsupported type {type(item).__name__}")

    if _is_oldest_first(readings):
        logger.warning("Historical readings appear to be oldest-first; expected newest-first ordering")

    return readings


def _is_oldest_first(readings: List[Reading]) -> bool:
    try:
        return readings[0].timestamp < readings[-1].timestamp
    except TypeError:
        # Mixed naive and aware timestamps cannot be ordered
        return False


def assess_data_quality(history: Sequence[Reading]) -> float:
    """
    Score the completeness and plausibility of historical readings.

    Args:
        history: Historical readings

    Returns:
        Score in [0, 1]; 0 for empty history
    """
    if not history:
        return 0.0

    missing_values = 0
    outliers = 0
    low, high = VALID_RANGE

    for reading in history:
        if reading.aqi is None or reading.pm25 is None:
            missing_values += 1
        for value in (reading.aqi, reading.pm25):
            if value is not None and (value > high or value < low):
                outliers += 1

    score = 1.0
    score -= (missing_values / len(history)) * MISSING_VALUE_PENALTY
    score -= (outliers / len(history)) * OUTLIER_PENALTY

    return max(0.0, min(1.0, score))
