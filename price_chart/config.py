# price_chart/config.py - Configuration and constants for the chart engine
"""
Configuration module for the price chart engine.
Handles environment variables, data source endpoints, display settings and
module-wide chart constants.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import pytz
from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Load environment variables from the project root .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


# Chart periods and the bar intervals they can be drawn with
PERIODS = ['1D', '5D', '1M', '3M', '6M', '1Y']
INTRADAY_PERIODS = {'1D'}

INTERVAL_SECONDS = {
    '1m': 60,
    '5m': 5 * 60,
    '15m': 15 * 60,
    '30m': 30 * 60,
    '1h': 60 * 60,
    '1d': 24 * 60 * 60,
}
INTERVALS = list(INTERVAL_SECONDS.keys())

DEFAULT_INTERVAL_FOR_PERIOD = {
    '1D': '5m',
    '5D': '30m',
    '1M': '1d',
    '3M': '1d',
    '6M': '1d',
    '1Y': '1d',
}

CHART_TYPES = ['line', 'area', 'candlestick']

# Headroom applied to the visible low/high when building the price domain
PRICE_HEADROOM = 0.02
# Half-width of the fallback price range when the domain collapses
DEGENERATE_PRICE_HALF_RANGE = 1.0
# Share of the plot height given to the volume band
VOLUME_BAND_RATIO = 0.18


class ChartSettings:
    """
    [CLASS SUMMARY]
    Purpose: Centralized configuration for the chart engine
    Responsibilities:
        - Locate the REST and WebSocket data servers
        - Define chart defaults (period, interval, size, bar cap)
        - Resolve the display timezone used for axis and tooltip labels
        - Configure logging
    Usage:
        settings = ChartSettings()
        url = settings.api_url
    """

    def __init__(self, config_override: Optional[Dict[str, Any]] = None):
        """
        [FUNCTION SUMMARY]
        Purpose: Initialize settings from environment variables and optional overrides
        Parameters:
            - config_override (dict, optional): Override default settings for testing
        Example: ChartSettings({'default_period': '5D'})
        """
        self.config_override = config_override or {}

        self._load_api_config()
        self._load_chart_config()
        self._load_display_config()
        self._setup_logging()

    def _get(self, key: str, env_name: str, default: Any) -> Any:
        if key in self.config_override:
            return self.config_override[key]
        return os.getenv(env_name, default)

    def _load_api_config(self):
        """
        [FUNCTION SUMMARY]
        Purpose: Load data server endpoints and request settings
        Sets: api_url, websocket_url, client_id, request_timeout
        """
        self.api_url = self._get('api_url', 'PRICE_CHART_API_URL', 'http://localhost:8200').rstrip('/')
        self.websocket_url = self._get(
            'websocket_url', 'PRICE_CHART_WS_URL', 'ws://localhost:8200/ws/{client_id}'
        )
        self.client_id = self._get('client_id', 'PRICE_CHART_CLIENT_ID', 'price_chart')
        self.request_timeout = float(self._get('request_timeout', 'PRICE_CHART_TIMEOUT', 10))

    def _load_chart_config(self):
        """
        [FUNCTION SUMMARY]
        Purpose: Load chart defaults and validate them against the known periods/intervals
        Raises: ConfigurationError for unknown period, interval or chart type
        """
        self.default_period = self._get('default_period', 'PRICE_CHART_PERIOD', '1D')
        self.default_interval = self._get(
            'default_interval', 'PRICE_CHART_INTERVAL',
            DEFAULT_INTERVAL_FOR_PERIOD.get(self.default_period, '5m')
        )
        self.default_chart_type = self._get('default_chart_type', 'PRICE_CHART_TYPE', 'candlestick')

        if self.default_period not in PERIODS:
            raise ConfigurationError(f"Unknown period: {self.default_period}", {'valid': PERIODS})
        if self.default_interval not in INTERVAL_SECONDS:
            raise ConfigurationError(f"Unknown interval: {self.default_interval}", {'valid': INTERVALS})
        if self.default_chart_type not in CHART_TYPES:
            raise ConfigurationError(f"Unknown chart type: {self.default_chart_type}", {'valid': CHART_TYPES})

        self.chart_width = int(self._get('chart_width', 'PRICE_CHART_WIDTH', 800))
        self.chart_height = int(self._get('chart_height', 'PRICE_CHART_HEIGHT', 400))
        self.max_bars = int(self._get('max_bars', 'PRICE_CHART_MAX_BARS', 2000))

        # Ticks are coalesced and merged on this cadence
        self.tick_flush_ms = int(self._get('tick_flush_ms', 'PRICE_CHART_TICK_FLUSH_MS', 250))

    def _load_display_config(self):
        """
        [FUNCTION SUMMARY]
        Purpose: Resolve the timezone used to format axis labels and tooltips
        Raises: ConfigurationError if the timezone name is unknown
        """
        tz_name = self._get('timezone', 'PRICE_CHART_TIMEZONE', 'UTC')
        try:
            self.display_timezone = pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError:
            raise ConfigurationError(f"Unknown timezone: {tz_name}")

    def _setup_logging(self):
        """
        [FUNCTION SUMMARY]
        Purpose: Configure logging level, format and optional log file
        Sets: logger_config, log_file
        """
        log_level = self._get('log_level', 'PRICE_CHART_LOG_LEVEL', 'INFO')

        self.logger_config = {
            'level': getattr(logging, str(log_level).upper(), logging.INFO),
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }

        log_file = self._get('log_file', 'PRICE_CHART_LOG_FILE', None)
        self.log_file = Path(log_file) if log_file else None
        self.max_log_size = 10 * 1024 * 1024  # 10 MB
        self.log_backup_count = 5

    def get_logger(self, name: str) -> logging.Logger:
        """
        [FUNCTION SUMMARY]
        Purpose: Create a configured logger for a module component
        Parameters:
            - name (str): Logger name (usually __name__ of the calling module)
        Returns: logging.Logger - Configured logger instance
        Example: logger = settings.get_logger('price_chart')
        """
        logger = logging.getLogger(name)
        logger.setLevel(self.logger_config['level'])

        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()

        formatter = logging.Formatter(
            self.logger_config['format'],
            datefmt=self.logger_config['datefmt']
        )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.logger_config['level'])
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if self.log_file:
            from logging.handlers import RotatingFileHandler
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=self.max_log_size,
                backupCount=self.log_backup_count
            )
            file_handler.setLevel(self.logger_config['level'])
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        return logger

    def to_dict(self) -> Dict[str, Any]:
        """
        [FUNCTION SUMMARY]
        Purpose: Export configuration as dictionary for debugging/inspection
        Returns: dict - All configuration values
        """
        return {
            'api_settings': {
                'api_url': self.api_url,
                'websocket_url': self.websocket_url,
                'client_id': self.client_id,
                'timeout': self.request_timeout,
            },
            'chart_settings': {
                'default_period': self.default_period,
                'default_interval': self.default_interval,
                'default_chart_type': self.default_chart_type,
                'size': (self.chart_width, self.chart_height),
                'max_bars': self.max_bars,
                'tick_flush_ms': self.tick_flush_ms,
            },
            'display': {
                'timezone': self.display_timezone.zone,
            },
            'logging': {
                'level': logging.getLevelName(self.logger_config['level']),
                'log_file': str(self.log_file) if self.log_file else None,
            }
        }


def setup_logging(settings: Optional[ChartSettings] = None) -> logging.Logger:
    """Install console (and optional file) handlers on the package logger"""
    settings = settings or get_config()
    return settings.get_logger('price_chart')


# Convenience function for getting config instance
_config_instance = None


def get_config(reset: bool = False, **overrides) -> ChartSettings:
    """
    [FUNCTION SUMMARY]
    Purpose: Get or create singleton configuration instance
    Parameters:
        - reset (bool): Force create new instance
        - **overrides: Configuration overrides
    Returns: ChartSettings - Configuration instance
    Example: settings = get_config(default_period='5D')
    """
    global _config_instance

    if _config_instance is None or reset or overrides:
        _config_instance = ChartSettings(overrides)

    return _config_instance
