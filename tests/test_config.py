"""
Unit tests for configuration settings.
"""

import unittest
import logging
from unittest.mock import patch
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from aqforecast.utils.config import Config
from aqforecast.utils.exceptions import ConfigurationError


class TestConfig(unittest.TestCase):
    """Test cases for Config."""

    def test_defaults_are_valid(self):
        """Test the shipped defaults pass validation."""
        with patch.multiple(Config, MAX_HOURS_AHEAD=48, MAX_ENHANCED_HOURS_AHEAD=72,
                            HISTORY_LOOKBACK_HOURS=48, BATCH_DELAY_SECONDS=0.1, AI_REQUEST_TIMEOUT=30.0):
            Config.validate()

    def test_invalid_settings(self):
        """Test each invalid setting is rejected."""
        cases = [
            {'MAX_HOURS_AHEAD': 0},
            {'MAX_ENHANCED_HOURS_AHEAD': 24},
            {'HISTORY_LOOKBACK_HOURS': -1},
            {'BATCH_DELAY_SECONDS': -0.5},
            {'AI_REQUEST_TIMEOUT': -1.0},
        ]
        base = dict(MAX_HOURS_AHEAD=48, MAX_ENHANCED_HOURS_AHEAD=72, HISTORY_LOOKBACK_HOURS=48,
                    BATCH_DELAY_SECONDS=0.1, AI_REQUEST_TIMEOUT=30.0)
        for override in cases:
            with patch.multiple(Config, **{**base, **override}):
                with self.assertRaises(ConfigurationError):
                    Config.validate()

    def test_ai_enabled(self):
        """Test AI stage toggles on the API key."""
        with patch.object(Config, 'OPENAI_API_KEY', None):
            self.assertFalse(Config.ai_enabled())
        with patch.object(Config, 'OPENAI_API_KEY', 'sk-test'):
            self.assertTrue(Config.ai_enabled())

    def test_configure_logging(self):
        """Test LOG_LEVEL is applied to the root logger."""
        root = logging.getLogger()
        previous = root.level
        self.addCleanup(root.setLevel, previous)

        with patch.object(Config, 'LOG_LEVEL', 'warning'):
            Config.configure_logging()

        self.assertEqual(root.level, logging.WARNING)


if __name__ == '__main__':
    unittest.main()
