# price_chart/tests/test_live_feed.py
"""
Tests for live feed frame decoding and reconnect backoff
"""

import asyncio
import json
import pytest
from unittest.mock import patch

from price_chart.data.models import Tick
from price_chart.data.websocket_client import LivePriceClient, parse_feed_message, backoff_delay


class TestParseFeedMessage:
    """Test server frame decoding"""

    def test_trade_frame(self):
        frame = json.dumps({'type': 'market_data', 'data': {
            'event_type': 'trade', 'symbol': 'AAPL', 'price': 185.25,
            'size': 200, 'timestamp': 1705329000000
        }})
        kind, tick = parse_feed_message(frame)
        assert kind == 'market_data'
        assert isinstance(tick, Tick)
        assert tick.price == 185.25
        assert tick.volume == 200

    def test_unusable_market_data(self):
        frame = json.dumps({'type': 'market_data', 'data': {'event_type': 'quote', 'symbol': 'AAPL'}})
        assert parse_feed_message(frame) == ('market_data', None)

    def test_control_frame(self):
        kind, payload = parse_feed_message(json.dumps({'type': 'subscribed', 'symbols': ['AAPL']}))
        assert kind == 'subscribed'
        assert payload['symbols'] == ['AAPL']

    @pytest.mark.parametrize('frame', ['not json', '[1, 2]', ''])
    def test_garbage(self, frame):
        assert parse_feed_message(frame) == (None, None)


class TestBackoff:
    """Test reconnect delays"""

    def test_doubles(self):
        assert [backoff_delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped(self):
        assert backoff_delay(10) == 30.0


class _ServerStream:
    """Connection stand-in: yields frames, then ends the way a clean close does"""

    def __init__(self, frames):
        self.frames = frames

    def __aiter__(self):
        return self._frames()

    async def _frames(self):
        for frame in self.frames:
            yield frame


@pytest.fixture
def feed(settings):
    with patch('price_chart.data.websocket_client._FeedLoop'):
        client = LivePriceClient(settings=settings)
    client.running = True
    client.statuses = []
    client.ticks = []
    client.connection_status.connect(client.statuses.append)
    client.tick_received.connect(client.ticks.append)
    return client


class TestConsume:
    """Test the read loop against a server stream"""

    def test_clean_close_reports_offline(self, feed):
        feed.connection = _ServerStream([])
        asyncio.run(feed._consume())
        assert feed.statuses == [False]
        assert feed.connection is None

    def test_ticks_for_watched_symbol_only(self, feed):
        feed.watch('aapl')
        frames = [
            json.dumps({'type': 'market_data', 'data': {
                'event_type': 'trade', 'symbol': symbol, 'price': 10.0,
                'size': 1, 'timestamp': 1705329000000
            }})
            for symbol in ('AAPL', 'MSFT')
        ]
        feed.connection = _ServerStream(frames)
        asyncio.run(feed._consume())
        assert [tick.symbol for tick in feed.ticks] == ['AAPL']
        assert feed.statuses == [False]

    def test_close_after_stop_is_quiet(self, feed):
        feed.running = False
        feed.connection = _ServerStream([])
        asyncio.run(feed._consume())
        assert feed.statuses == []
