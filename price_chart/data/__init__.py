# price_chart/data/__init__.py
"""
Series data, real-time merge and data-server clients for the chart engine
"""
from .models import (
    Bar, Tick, Quote, SeriesKey, ChartConfig, CrosshairState,
    BollingerBands, IndicatorSpec, INDICATOR_SPECS
)
from .series_store import SeriesStore, TickOutcome, bucket_start
from .tick_buffer import TickBuffer
from .rest_client import HistoricalDataClient

__all__ = [
    'Bar', 'Tick', 'Quote', 'SeriesKey', 'ChartConfig', 'CrosshairState',
    'BollingerBands', 'IndicatorSpec', 'INDICATOR_SPECS',
    'SeriesStore', 'TickOutcome', 'bucket_start',
    'TickBuffer', 'HistoricalDataClient'
]
