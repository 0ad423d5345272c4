# price_chart/calculations/indicators.py
"""
Technical indicator calculations on closing prices

Every function is pure: it never mutates its input and returns a plain list
aligned to a suffix of the input. A window longer than the series gives an
empty result rather than an error, so an overlay can simply be skipped.
"""

import logging
from typing import Dict, List, Sequence, Union

import numpy as np
import pandas as pd

from ..data.models import BollingerBands, INDICATOR_SPECS

logger = logging.getLogger(__name__)

Prices = Union[Sequence[float], pd.Series, np.ndarray]
IndicatorValues = Union[List[float], BollingerBands]


def _as_series(prices: Prices) -> pd.Series:
    return pd.Series(np.asarray(prices, dtype=float))


def sma(prices: Prices, window: int) -> List[float]:
    """
    Simple moving average

    Returns n - window + 1 values; value[i] is the mean of prices[i:i+window].
    """
    if window < 1 or len(prices) < window:
        return []
    means = _as_series(prices).rolling(window).mean()
    return means.iloc[window - 1:].tolist()


def ema(prices: Prices, window: int) -> List[float]:
    """
    Exponential moving average seeded with the first price

    value[0] = prices[0]; value[i] = prices[i]*k + value[i-1]*(1-k), k = 2/(window+1).
    Same recurrence as pandas ewm(span=window, adjust=False).
    """
    if window < 1 or len(prices) < window:
        return []
    return _as_series(prices).ewm(span=window, adjust=False).mean().tolist()


def rsi(prices: Prices, window: int = 14) -> List[float]:
    """
    Relative Strength Index with Wilder smoothing

    The first value uses the plain average gain/loss of the first `window`
    price changes; each later change is folded in as
    avg = (avg * (window - 1) + change) / window.
    Returns n - window values in [0, 100]. When the average loss is zero
    the RSI is 100.
    """
    if window < 1 or len(prices) <= window:
        return []

    deltas = np.diff(np.asarray(prices, dtype=float))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = gains[:window].mean()
    avg_loss = losses[:window].mean()
    values = [_rsi_value(avg_gain, avg_loss)]

    for gain, loss in zip(gains[window:], losses[window:]):
        avg_gain = (avg_gain * (window - 1) + gain) / window
        avg_loss = (avg_loss * (window - 1) + loss) / window
        values.append(_rsi_value(avg_gain, avg_loss))

    return values


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


def bollinger(prices: Prices, window: int = 20, multiplier: float = 2.0) -> BollingerBands:
    """
    Bollinger Bands: SMA middle line +/- multiplier * population std-dev

    All three lines have n - window + 1 values.
    """
    middle = sma(prices, window)
    if not middle:
        return BollingerBands()

    std = _as_series(prices).rolling(window).std(ddof=0).iloc[window - 1:]
    std = std.clip(lower=0).fillna(0).tolist()

    upper = [m + multiplier * s for m, s in zip(middle, std)]
    lower = [m - multiplier * s for m, s in zip(middle, std)]
    return BollingerBands(upper=upper, middle=middle, lower=lower)


def compute_indicators(closes: Prices, enabled: Sequence[str]) -> Dict[str, IndicatorValues]:
    """
    Calculate every enabled indicator for a close series

    Indicators the series is too short for are left out of the result.

    Args:
        closes: Closing prices, oldest first
        enabled: Indicator names from INDICATOR_SPECS

    Returns:
        Mapping name -> values (list of floats, or BollingerBands)
    """
    results: Dict[str, IndicatorValues] = {}

    for name in enabled:
        spec = INDICATOR_SPECS.get(name)
        if spec is None:
            logger.warning(f"Unknown indicator requested: {name}")
            continue

        if name.startswith('sma'):
            values = sma(closes, spec.window)
        elif name.startswith('ema'):
            values = ema(closes, spec.window)
        elif name == 'rsi':
            values = rsi(closes, spec.window)
        elif name == 'bollinger':
            values = bollinger(closes, spec.window, spec.multiplier)
        else:
            continue

        if len(values) == 0:
            logger.debug(f"{spec.label} unavailable: {len(closes)} bars < window {spec.window}")
            continue

        results[name] = values

    return results


def suffix_offset(series_length: int, values: IndicatorValues) -> int:
    """Index of the first bar an indicator's values line up with"""
    return series_length - len(values)
