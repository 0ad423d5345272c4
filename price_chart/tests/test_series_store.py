# price_chart/tests/test_series_store.py
"""
Module: Series Store Tests
Purpose: Verify series replacement, validation and real-time tick merge
Features: Bucket alignment, in-bucket updates, boundary appends, stale ticks, bar cap
"""

import math
import pytest
from datetime import datetime, timedelta, timezone

from price_chart.data.models import Bar, Tick, SeriesKey
from price_chart.data.series_store import SeriesStore, TickOutcome, bucket_start, clean_bars
from price_chart.tests.conftest import make_bars, SESSION_START


@pytest.fixture
def key():
    return SeriesKey.create('aapl', '1D', '5m')


@pytest.fixture
def store(key):
    store = SeriesStore()
    store.replace(key, make_bars([100, 101, 102]))
    return store


def _tick(minutes: float, price: float, volume: float = 10, symbol: str = 'AAPL') -> Tick:
    return Tick(symbol, price, SESSION_START + timedelta(minutes=minutes), volume)


class TestBucketStart:
    """Test interval bucket alignment"""

    def test_five_minute_bucket(self):
        stamp = datetime(2024, 1, 15, 14, 37, 42, tzinfo=timezone.utc)
        assert bucket_start(stamp, '5m') == datetime(2024, 1, 15, 14, 35, tzinfo=timezone.utc)

    def test_aligned_timestamp_unchanged(self):
        assert bucket_start(SESSION_START, '5m') == SESSION_START

    def test_daily_bucket(self):
        stamp = datetime(2024, 1, 15, 20, 59, tzinfo=timezone.utc)
        assert bucket_start(stamp, '1d') == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_hourly_bucket(self):
        stamp = datetime(2024, 1, 15, 14, 59, 59, tzinfo=timezone.utc)
        assert bucket_start(stamp, '1h') == datetime(2024, 1, 15, 14, tzinfo=timezone.utc)


class TestCleanBars:
    """Test series validation on replace"""

    def test_sorted_and_deduplicated(self):
        bars = make_bars([100, 101, 102])
        duplicate = Bar(bars[1].timestamp, 1, 2, 0.5, 1.5, 5)
        cleaned = clean_bars([bars[2], bars[1], bars[0], duplicate])
        assert [b.timestamp for b in cleaned] == [b.timestamp for b in bars]
        assert cleaned[1].close == 1.5

    def test_ohlc_repaired(self):
        bar = Bar(SESSION_START, open=10, high=9, low=11, close=10.5, volume=-3)
        cleaned = clean_bars([bar])[0]
        assert cleaned.high >= max(cleaned.open, cleaned.close, cleaned.low)
        assert cleaned.low <= min(cleaned.open, cleaned.close, cleaned.high)
        assert cleaned.volume == 0

    def test_non_finite_dropped(self):
        bars = make_bars([100, 101, 102])
        bars[1].high = math.inf
        assert len(clean_bars(bars)) == 2

    def test_input_not_mutated(self):
        bar = Bar(SESSION_START, open=10, high=9, low=11, close=10.5, volume=1)
        clean_bars([bar])
        assert bar.high == 9


class TestSeriesStore:
    """Test replace and tick merge"""

    def test_replace(self, store, key):
        assert store.key == key
        assert store.is_loaded
        assert len(store) == 3
        assert store.closes() == [100, 101, 102]

    def test_tick_inside_bucket_updates_last_bar_only(self, store):
        before = [(b.open, b.high, b.low, b.close, b.volume) for b in store.bars[:-1]]
        last_volume = store.bars[-1].volume

        outcome = store.apply_tick(_tick(12, 110.0, volume=25))

        assert outcome == TickOutcome.UPDATED
        assert len(store) == 3
        last = store.bars[-1]
        assert last.close == 110.0
        assert last.high == 110.0
        assert last.volume == last_volume + 25
        assert [(b.open, b.high, b.low, b.close, b.volume) for b in store.bars[:-1]] == before

    def test_tick_below_low_extends_low(self, store):
        store.apply_tick(_tick(11, 90.0))
        assert store.bars[-1].low == 90.0
        assert store.bars[-1].close == 90.0

    def test_boundary_tick_appends_one_bar(self, store):
        outcome = store.apply_tick(_tick(15, 103.0, volume=7))
        assert outcome == TickOutcome.APPENDED
        assert len(store) == 4
        new = store.bars[-1]
        assert new.timestamp == SESSION_START + timedelta(minutes=15)
        assert (new.open, new.high, new.low, new.close, new.volume) == (103.0, 103.0, 103.0, 103.0, 7)

    def test_gap_still_appends_one_bar(self, store):
        store.apply_tick(_tick(47, 104.0))
        assert len(store) == 4
        assert store.bars[-1].timestamp == SESSION_START + timedelta(minutes=45)

    def test_stale_tick_ignored(self, store):
        snapshot = [b.to_dict() for b in store.bars]
        assert store.apply_tick(_tick(3, 50.0)) == TickOutcome.IGNORED
        assert [b.to_dict() for b in store.bars] == snapshot

    def test_other_symbol_ignored(self, store):
        assert store.apply_tick(_tick(12, 110.0, symbol='MSFT')) == TickOutcome.IGNORED

    def test_symbol_case_insensitive(self, store):
        assert store.apply_tick(_tick(12, 110.0, symbol='aapl')) == TickOutcome.UPDATED

    def test_no_series_loaded(self):
        store = SeriesStore()
        assert store.apply_tick(_tick(0, 100.0)) == TickOutcome.IGNORED
        assert len(store) == 0

    def test_empty_series_opens_first_bar(self, key):
        store = SeriesStore()
        store.replace(key, [])
        assert store.apply_tick(_tick(2, 100.0)) == TickOutcome.APPENDED
        assert store.bars[0].timestamp == SESSION_START

    def test_max_bars_trims_oldest(self, key):
        store = SeriesStore(max_bars=3)
        store.replace(key, make_bars([1, 2, 3, 4, 5]))
        assert store.closes() == [3, 4, 5]
        store.apply_tick(_tick(25, 6.0))
        assert len(store) == 3
        assert store.closes() == [4, 5, 6.0]

    def test_last_updated_follows_ticks(self, store):
        tick = _tick(12, 110.0)
        store.apply_tick(tick)
        assert store.last_updated == tick.timestamp

    def test_clear(self, store):
        store.clear()
        assert not store.is_loaded
        assert store.bars == []
