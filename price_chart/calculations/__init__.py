# price_chart/calculations/__init__.py
from .indicators import sma, ema, rsi, bollinger, compute_indicators, suffix_offset

__all__ = ['sma', 'ema', 'rsi', 'bollinger', 'compute_indicators', 'suffix_offset']
