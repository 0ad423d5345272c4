# price_chart/__init__.py - Public API for the price chart engine
"""
Interactive OHLCV Price Chart Engine

Computes technical indicators, maps series into pixel space, produces drawing
primitives per layer and merges live ticks into the active series.

Basic Usage:
    from price_chart import ChartOrchestrator, HistoricalDataClient

    chart = ChartOrchestrator('AAPL', HistoricalDataClient(), period='1M')
    chart.subscribe(lambda result: print(result.status, len(result.layers)))
    chart.request_series()

Indicators only:
    from price_chart import sma, rsi, bollinger

    bands = bollinger([11, 9], window=2)
"""

# Version info
__version__ = '0.1.0'

from .config import get_config, ChartSettings
from .exceptions import (
    ChartError,
    ConfigurationError,
    DataFetchError,
    NotFoundError,
    RateLimitedError,
    NetworkError,
    EmptySeriesError,
    RealTimeDisconnected
)
from .data import (
    Bar, Tick, Quote, SeriesKey, ChartConfig, CrosshairState,
    SeriesStore, TickBuffer, HistoricalDataClient
)
from .calculations import sma, ema, rsi, bollinger, compute_indicators
from .chart import ChartOrchestrator, ChartStatus, RenderResult

__all__ = [
    'get_config', 'ChartSettings',
    'ChartError', 'ConfigurationError', 'DataFetchError', 'NotFoundError',
    'RateLimitedError', 'NetworkError', 'EmptySeriesError', 'RealTimeDisconnected',
    'Bar', 'Tick', 'Quote', 'SeriesKey', 'ChartConfig', 'CrosshairState',
    'SeriesStore', 'TickBuffer', 'HistoricalDataClient',
    'sma', 'ema', 'rsi', 'bollinger', 'compute_indicators',
    'ChartOrchestrator', 'ChartStatus', 'RenderResult'
]
