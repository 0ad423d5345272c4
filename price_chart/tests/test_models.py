# price_chart/tests/test_models.py
"""
Test suite for data models, settings and exceptions
"""

import logging
import pytest
from datetime import datetime, timezone

from price_chart.config import ChartSettings, get_config
from price_chart.data.models import Bar, Tick, SeriesKey, ChartConfig, INDICATOR_SPECS
from price_chart.exceptions import (
    ChartError, ConfigurationError, DataFetchError, EmptySeriesError,
    RateLimitedError, RealTimeDisconnected
)


class TestBar:
    """Test bar parsing"""

    def test_from_iso_string(self):
        bar = Bar.from_dict({'timestamp': '2024-01-15T14:30:00Z', 'open': '1', 'high': 2,
                             'low': 0.5, 'close': 1.5, 'volume': None})
        assert bar.timestamp == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)
        assert bar.open == 1.0
        assert bar.volume == 0

    def test_from_epoch_ms(self):
        bar = Bar.from_dict({'timestamp': 1705329000000, 'open': 1, 'high': 2,
                             'low': 0.5, 'close': 1.5, 'volume': 10})
        assert bar.timestamp == datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)

    def test_is_finite(self):
        bar = Bar(datetime(2024, 1, 15, tzinfo=timezone.utc), 1, 2, float('nan'), 1, 0)
        assert not bar.is_finite()


class TestTickFromMessage:
    """Test live feed message parsing"""

    def test_trade(self):
        tick = Tick.from_message({'event_type': 'trade', 'symbol': 'aapl', 'price': 185.2,
                                  'size': 100, 'timestamp': 1705329000000})
        assert tick.symbol == 'AAPL'
        assert tick.price == 185.2
        assert tick.volume == 100

    def test_aggregate(self):
        tick = Tick.from_message({'event_type': 'aggregate', 'symbol': 'AAPL', 'close': 185.0,
                                  'volume': 5000, 'timestamp': 1705329000000})
        assert tick.price == 185.0
        assert tick.volume == 5000

    def test_unknown_event(self):
        assert Tick.from_message({'event_type': 'quote', 'symbol': 'AAPL'}) is None

    def test_missing_symbol(self):
        assert Tick.from_message({'event_type': 'trade', 'price': 1, 'timestamp': 0}) is None

    def test_malformed(self):
        assert Tick.from_message({'event_type': 'trade', 'symbol': 'AAPL',
                                  'price': 'abc', 'timestamp': 1705329000000}) is None


class TestSeriesKeyAndConfig:
    """Test key validation and chart config"""

    def test_key_normalizes_symbol(self):
        key = SeriesKey.create(' aapl ', '1D', '5m')
        assert key == SeriesKey('AAPL', '1D', '5m')

    def test_key_rejects_unknown_period(self):
        with pytest.raises(ConfigurationError):
            SeriesKey.create('AAPL', '2W', '5m')

    def test_config_rejects_chart_type(self):
        with pytest.raises(ConfigurationError):
            ChartConfig(chart_type='renko')

    def test_indicators_off_by_default(self):
        config = ChartConfig()
        assert set(config.indicator_toggles) == set(INDICATOR_SPECS)
        assert config.enabled_indicators() == []

    def test_master_toggle(self):
        config = ChartConfig()
        config.indicator_toggles['sma20'] = True
        assert config.enabled_indicators() == ['sma20']
        config.show_indicators = False
        assert config.enabled_indicators() == []

    @pytest.mark.parametrize('current,period,expected', [
        ('5m', '5D', '5m'),
        ('5m', '1M', '1d'),
        ('1d', '1D', '5m'),
        ('1d', '1Y', '1d'),
    ])
    def test_interval_for_period(self, current, period, expected):
        config = ChartConfig(interval=current)
        assert config.interval_for_period(period) == expected


class TestSettings:
    """Test configuration loading"""

    def test_overrides(self, settings):
        assert settings.api_url == 'http://test-server:8200'
        assert settings.chart_width == 800
        assert settings.display_timezone.zone == 'UTC'

    def test_invalid_period(self):
        with pytest.raises(ConfigurationError):
            ChartSettings({'default_period': '2W'})

    def test_invalid_timezone(self):
        with pytest.raises(ConfigurationError):
            ChartSettings({'timezone': 'Mars/Olympus'})

    def test_default_interval_follows_period(self):
        settings = ChartSettings({'default_period': '3M'})
        assert settings.default_interval == '1d'

    def test_to_dict(self, settings):
        data = settings.to_dict()
        assert data['chart_settings']['size'] == (800, 400)
        assert data['display']['timezone'] == 'UTC'

    def test_get_logger_replaces_handlers(self, settings):
        settings.get_logger("price_chart.test_logger")
        logger = settings.get_logger("price_chart.test_logger")
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO

    def test_get_config_overrides(self):
        config = get_config(default_period='5D', default_interval='30m')
        assert config.default_period == '5D'
        assert get_config() is config
        get_config(reset=True)


class TestExceptions:
    """Test exception formatting"""

    def test_details_in_str(self):
        error = DataFetchError("Failed", symbol='AAPL', status_code=400)
        assert str(error) == "Failed (symbol=AAPL, status_code=400)"
        assert error.message == "Failed"

    def test_rate_limited(self):
        error = RateLimitedError(retry_after=30, symbol='AAPL')
        assert error.retry_after == 30
        assert error.status_code == 429
        assert 'retry_after=30' in str(error)

    def test_status_errors_format_log_lines(self):
        empty = EmptySeriesError("No chart data available", {'symbol': 'AAPL', 'period': '1D'})
        offline = RealTimeDisconnected("Live feed offline", {'url': 'ws://feed'})
        assert str(empty) == "No chart data available (symbol=AAPL, period=1D)"
        assert str(offline) == "Live feed offline (url=ws://feed)"
        assert isinstance(empty, ChartError) and isinstance(offline, ChartError)
