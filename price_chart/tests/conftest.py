# price_chart/tests/conftest.py
"""
Shared fixtures: bar series builders and deterministic settings
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from price_chart.config import ChartSettings
from price_chart.data.models import Bar

SESSION_START = datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)  # Monday 09:30 New York


def make_bars(closes: Sequence[float], start: datetime = SESSION_START,
              minutes: int = 5, volumes: Optional[Sequence[float]] = None) -> List[Bar]:
    """Bars whose open is the previous close, with a 0.5 wick either side"""
    bars = []
    previous = closes[0] if closes else 0
    for i, close in enumerate(closes):
        open_ = previous
        bars.append(Bar(
            timestamp=start + timedelta(minutes=minutes * i),
            open=open_,
            high=max(open_, close) + 0.5,
            low=min(open_, close) - 0.5,
            close=close,
            volume=volumes[i] if volumes is not None else 1000 + 100 * i
        ))
        previous = close
    return bars


@pytest.fixture
def settings():
    """Settings independent of the developer's environment"""
    return ChartSettings({
        'api_url': 'http://test-server:8200',
        'websocket_url': 'ws://test-server:8200/ws/{client_id}',
        'client_id': 'test_client',
        'request_timeout': 5,
        'default_period': '1D',
        'default_interval': '5m',
        'default_chart_type': 'candlestick',
        'chart_width': 800,
        'chart_height': 400,
        'max_bars': 2000,
        'tick_flush_ms': 250,
        'timezone': 'UTC',
        'log_level': 'INFO',
    })


@pytest.fixture
def example_bars():
    """Two-bar example: closes [11, 9]"""
    return [
        Bar(SESSION_START, 10, 12, 9, 11, 100),
        Bar(SESSION_START + timedelta(minutes=5), 11, 11, 8, 9, 150),
    ]


@pytest.fixture
def trending_bars():
    """60 bars with a gentle zig-zag uptrend"""
    closes = [100 + i * 0.5 + (1.5 if i % 3 == 0 else -1.0) for i in range(60)]
    return make_bars(closes)
