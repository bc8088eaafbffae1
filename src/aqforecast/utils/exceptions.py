"""
Custom exceptions for the air quality forecasting platform.
"""

from typing import Optional


class AirQualityForecastingError(Exception):
    """Base exception for air quality forecasting platform."""
    pass


class ForecastingError(AirQualityForecastingError):
    """Exception raised during forecast generation."""
    pass


class InsufficientHistory(ForecastingError):
    """Raised when fewer historical readings are supplied than the forecaster requires."""

    def __init__(self, available: int, required: int):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient historical data for prediction "
            f"(minimum {required} hours required, got {available})"
        )


class InvalidInput(ForecastingError):
    """Exception raised for malformed forecasting inputs."""
    pass


class AIEnhancementError(AirQualityForecastingError):
    """Exception raised inside the AI enhancement stage."""
    pass


class DataStorageError(AirQualityForecastingError):
    """Exception raised in storage operations."""
    pass


class ConfigurationError(AirQualityForecastingError):
    """Exception raised for invalid configuration."""
    pass


class APIError(AirQualityForecastingError):
    """Exception raised in API operations."""

    def __init__(self, message: str, status_code: int = 400, details: Optional[str] = None):
        self.status_code = status_code
        self.details = details
        super().__init__(message)
