# price_chart/data/websocket_client.py
"""
Live price feed for the chart

The feed connection lives on a private asyncio loop in a QThread; ticks reach
the GUI thread as Qt signals. One chart watches one symbol at a time.
"""
import asyncio
import json
import logging
from typing import Optional

import websockets
from PyQt6.QtCore import QObject, QThread, pyqtSignal

from .models import Tick
from ..config import ChartSettings, get_config
from ..exceptions import RealTimeDisconnected

logger = logging.getLogger(__name__)

# Trades and minute aggregates
FEED_CHANNELS = ["T", "AM"]


def parse_feed_message(message: str):
    """
    Decode one server frame

    Returns:
        (kind, payload): kind is the frame 'type'; payload is a Tick for
        market_data frames, the raw dict otherwise. (None, None) for frames
        that are not JSON objects.
    """
    try:
        data = json.loads(message)
    except (TypeError, ValueError):
        logger.warning(f"Discarding non-JSON frame: {str(message)[:100]}")
        return None, None

    if not isinstance(data, dict):
        return None, None

    kind = data.get('type')
    if kind == 'market_data':
        return kind, Tick.from_message(data.get('data') or {})
    return kind, data


def backoff_delay(attempt: int, base: float = 1.0, cap: float = 30.0) -> float:
    """Seconds to wait before reconnect attempt number `attempt` (1-based)"""
    return min(base * (2 ** max(attempt - 1, 0)), cap)


class _FeedLoop(QThread):
    """Owns the asyncio loop the socket runs on"""

    def __init__(self):
        super().__init__()
        self.loop = asyncio.new_event_loop()

    def run(self):
        asyncio.set_event_loop(self.loop)
        logger.debug("Feed loop running")
        self.loop.run_forever()
        logger.debug("Feed loop exited")

    def submit(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def shutdown(self):
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.wait()


class LivePriceClient(QObject):
    """
    Real-time price provider

    Streams ticks for the watched symbol, reports connectivity changes and
    reconnects with exponential backoff. The chart keeps showing its last
    known series while the feed is down.
    """

    tick_received = pyqtSignal(object)  # Tick
    connection_status = pyqtSignal(bool)
    error_occurred = pyqtSignal(str)

    MAX_RECONNECT_ATTEMPTS = 10

    def __init__(self, server_url: Optional[str] = None, client_id: Optional[str] = None,
                 settings: Optional[ChartSettings] = None):
        super().__init__()
        settings = settings or get_config()

        client_id = client_id or settings.client_id
        self.server_url = (server_url or settings.websocket_url).format(client_id=client_id)
        self.symbol: Optional[str] = None
        self.connection = None
        self.running = False
        self.attempts = 0

        self.feed_loop = _FeedLoop()
        self.feed_loop.start()
        logger.info(f"Live feed client for {self.server_url}")

    # ------------------------------------------------------------------
    # GUI-thread API
    # ------------------------------------------------------------------

    def start(self):
        """Open the connection; the watched symbol is subscribed once connected"""
        if self.running:
            return
        self.running = True
        future = self.feed_loop.submit(self._run())
        future.add_done_callback(self._on_run_finished)

    def watch(self, symbol: str):
        """Switch the feed to a single symbol"""
        symbol = symbol.strip().upper()
        if symbol == self.symbol:
            return
        previous, self.symbol = self.symbol, symbol
        logger.info(f"Live feed watching {symbol} (was {previous})")

        if self.connection is None:
            return
        if previous:
            self.feed_loop.submit(self._send('unsubscribe', previous))
        self.feed_loop.submit(self._send('subscribe', symbol))

    def stop(self):
        """Close the connection and stop the loop thread"""
        self.running = False
        if self.connection is not None:
            future = self.feed_loop.submit(self._close())
            try:
                future.result(timeout=2)
            except Exception as e:
                logger.warning(f"Live feed did not close cleanly: {e}")
        self.feed_loop.shutdown()

    def _on_run_finished(self, future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Live feed task failed: {error}")
            self.error_occurred.emit(str(error))

    # ------------------------------------------------------------------
    # Feed loop
    # ------------------------------------------------------------------

    async def _run(self):
        while self.running:
            try:
                self.connection = await websockets.connect(self.server_url)
            except (OSError, websockets.WebSocketException) as e:
                self._report_down(f"Connection failed: {e}")
            else:
                self.attempts = 0
                self.connection_status.emit(True)
                logger.info("Live feed connected")
                await self._consume()

            if not self.running or not await self._wait_before_retry():
                break

    async def _consume(self):
        try:
            async for message in self.connection:
                await self._dispatch(message)
        except websockets.ConnectionClosed as e:
            self._report_down(f"Connection closed: {e}")
        else:
            # A clean close ends iteration without raising
            if self.running:
                self._report_down("Connection closed by server")
        finally:
            self.connection = None

    async def _dispatch(self, message: str):
        kind, payload = parse_feed_message(message)

        if kind == 'market_data':
            if payload is not None and payload.symbol == self.symbol:
                self.tick_received.emit(payload)
        elif kind == 'connected':
            if self.symbol:
                await self._send('subscribe', self.symbol)
        elif kind == 'error':
            message = payload.get('message', 'Unknown error')
            logger.error(f"Live feed server error: {message}")
            self.error_occurred.emit(message)
        elif kind in ('subscribed', 'unsubscribed'):
            logger.info(f"Live feed {kind}: {payload.get('symbols', [])}")

    async def _send(self, action: str, symbol: str):
        if self.connection is None:
            return
        request = {"action": action, "symbols": [symbol]}
        if action == 'subscribe':
            request["channels"] = FEED_CHANNELS
        await self.connection.send(json.dumps(request))

    async def _wait_before_retry(self) -> bool:
        if self.attempts >= self.MAX_RECONNECT_ATTEMPTS:
            self.error_occurred.emit("Live feed offline - max reconnection attempts reached")
            return False
        self.attempts += 1
        delay = backoff_delay(self.attempts)
        logger.info(f"Reconnecting in {delay}s (attempt {self.attempts})")
        await asyncio.sleep(delay)
        return self.running

    async def _close(self):
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
        self.connection_status.emit(False)

    def _report_down(self, reason: str):
        error = RealTimeDisconnected(reason, {'url': self.server_url})
        logger.warning(str(error))
        self.connection_status.emit(False)
        self.error_occurred.emit(error.message)
