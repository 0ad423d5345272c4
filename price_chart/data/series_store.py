# price_chart/data/series_store.py
"""
Owns the active OHLCV series and merges real-time ticks into it
"""
import logging
from enum import Enum
from typing import List, Optional, Iterable
from datetime import datetime, timedelta

from .models import Bar, Tick, SeriesKey
from ..config import INTERVAL_SECONDS

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)


class TickOutcome(Enum):
    IGNORED = 'ignored'
    UPDATED = 'updated'
    APPENDED = 'appended'


def bucket_start(timestamp: datetime, interval: str) -> datetime:
    """
    Align a timestamp to the start of its interval bucket

    Buckets are counted on the timestamp's own wall clock, so '1d' buckets
    start at midnight of that timezone.
    """
    seconds = INTERVAL_SECONDS[interval]
    wall_clock = timestamp.replace(tzinfo=None)
    elapsed = int((wall_clock - _EPOCH).total_seconds())
    aligned = _EPOCH + timedelta(seconds=elapsed - (elapsed % seconds))
    return aligned.replace(tzinfo=timestamp.tzinfo)


def clean_bars(bars: Iterable[Bar]) -> List[Bar]:
    """
    Return bars sorted by time with the OHLC invariants enforced

    - non-finite bars are dropped
    - duplicate timestamps keep the last bar received
    - high/low are widened to contain open and close
    """
    by_time = {}
    dropped = 0
    for bar in bars:
        if not bar.is_finite():
            dropped += 1
            continue
        by_time[bar.timestamp] = bar

    if dropped:
        logger.warning(f"Dropped {dropped} bars with non-finite values")

    cleaned = []
    for timestamp in sorted(by_time):
        bar = by_time[timestamp]
        high = max(bar.high, bar.open, bar.close, bar.low)
        low = min(bar.low, bar.open, bar.close, bar.high)
        if high != bar.high or low != bar.low:
            logger.debug(f"Repaired OHLC range for bar at {timestamp}")
        cleaned.append(Bar(timestamp, bar.open, high, low, bar.close, max(bar.volume, 0)))
    return cleaned


class SeriesStore:
    """
    Holds the bars for exactly one series key

    The series is replaced wholesale when the key changes and mutated in
    place (last bar only, or one appended bar) when ticks arrive.
    """

    def __init__(self, max_bars: Optional[int] = None):
        """
        Args:
            max_bars: Maximum bars to keep; oldest bars are trimmed after appends
        """
        self.max_bars = max_bars
        self.key: Optional[SeriesKey] = None
        self.bars: List[Bar] = []
        self.last_updated: Optional[datetime] = None

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def is_loaded(self) -> bool:
        return self.key is not None

    def replace(self, key: SeriesKey, bars: Iterable[Bar], loaded_at: Optional[datetime] = None):
        """Install a freshly fetched series for a key"""
        self.key = key
        self.bars = clean_bars(bars)
        if self.max_bars and len(self.bars) > self.max_bars:
            self.bars = self.bars[-self.max_bars:]
        self.last_updated = loaded_at
        logger.info(f"Series replaced for {key.symbol} {key.period}/{key.interval}: {len(self.bars)} bars")

    def clear(self):
        self.key = None
        self.bars = []
        self.last_updated = None

    def closes(self) -> List[float]:
        return [bar.close for bar in self.bars]

    def apply_tick(self, tick: Tick) -> TickOutcome:
        """
        Merge a tick into the series

        Returns:
            IGNORED for another symbol or a tick older than the last bucket,
            UPDATED when the last bar absorbed the tick,
            APPENDED when the tick opened a new bucket
        """
        if self.key is None or tick.symbol.upper() != self.key.symbol:
            return TickOutcome.IGNORED

        bucket = bucket_start(tick.timestamp, self.key.interval)

        if not self.bars:
            self._append(Bar(bucket, tick.price, tick.price, tick.price, tick.price, tick.volume))
            self.last_updated = tick.timestamp
            return TickOutcome.APPENDED

        last = self.bars[-1]
        last_bucket = bucket_start(last.timestamp, self.key.interval)

        if bucket < last_bucket:
            logger.debug(f"Ignoring stale tick for {tick.symbol} at {tick.timestamp}")
            return TickOutcome.IGNORED

        if bucket == last_bucket:
            last.close = tick.price
            last.high = max(last.high, tick.price)
            last.low = min(last.low, tick.price)
            last.volume += tick.volume
            self.last_updated = tick.timestamp
            return TickOutcome.UPDATED

        self._append(Bar(bucket, tick.price, tick.price, tick.price, tick.price, tick.volume))
        self.last_updated = tick.timestamp
        logger.debug(f"Opened new {self.key.interval} bar for {tick.symbol} at {bucket}")
        return TickOutcome.APPENDED

    def _append(self, bar: Bar):
        self.bars.append(bar)
        if self.max_bars and len(self.bars) > self.max_bars:
            del self.bars[:len(self.bars) - self.max_bars]
