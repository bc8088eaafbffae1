import os
import logging
from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()


class Config:
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_API_URL = os.getenv('OPENAI_API_URL', 'https://api.openai.com/v1/chat/completions')
    OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-5')
    AI_REQUEST_TIMEOUT = float(os.getenv('AI_REQUEST_TIMEOUT', 30))

    MODEL_VERSION = os.getenv('MODEL_VERSION', 'v1.0.0')
    MAX_HOURS_AHEAD = int(os.getenv('MAX_HOURS_AHEAD', 48))
    MAX_ENHANCED_HOURS_AHEAD = int(os.getenv('MAX_ENHANCED_HOURS_AHEAD', 72))
    HISTORY_LOOKBACK_HOURS = int(os.getenv('HISTORY_LOOKBACK_HOURS', 48))
    BATCH_DELAY_SECONDS = float(os.getenv('BATCH_DELAY_SECONDS', 0.1))

    DATABASE_PATH = os.getenv('DATABASE_PATH', 'air_quality.db')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def ai_enabled(cls) -> bool:
        """Whether the AI enhancement stage has credentials to run."""
        return bool(cls.OPENAI_API_KEY)

    @classmethod
    def configure_logging(cls):
        """Apply LOG_LEVEL to the root logger"""
        logging.getLogger().setLevel(cls.LOG_LEVEL.upper())

    @classmethod
    def validate(cls):
        """Validate numeric settings"""
        if cls.MAX_HOURS_AHEAD <= 0 or cls.MAX_ENHANCED_HOURS_AHEAD <= 0:
            raise ConfigurationError("Forecast horizon caps must be positive")
        if cls.MAX_ENHANCED_HOURS_AHEAD < cls.MAX_HOURS_AHEAD:
            raise ConfigurationError("MAX_ENHANCED_HOURS_AHEAD cannot be below MAX_HOURS_AHEAD")
        if cls.HISTORY_LOOKBACK_HOURS <= 0:
            raise ConfigurationError("HISTORY_LOOKBACK_HOURS must be positive")
        if cls.BATCH_DELAY_SECONDS < 0 or cls.AI_REQUEST_TIMEOUT < 0:
            raise ConfigurationError("Delays and timeouts cannot be negative")
