# price_chart/chart/orchestrator.py
"""
Chart orchestrator: owns the chart state and runs the render pipeline

fetch -> merge real-time -> compute indicators -> compute scales ->
render layers -> attach interaction
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from .layout import ChartLayout, compute_layout
from ..calculations.indicators import compute_indicators
from ..config import (ChartSettings, CHART_TYPES, PERIODS, INTERVALS,
                      DEFAULT_INTERVAL_FOR_PERIOD, get_config)
from ..data.models import Bar, ChartConfig, CrosshairState, Quote, SeriesKey, Tick, INDICATOR_SPECS
from ..data.series_store import SeriesStore, TickOutcome
from ..data.tick_buffer import TickBuffer
from ..exceptions import (ChartError, ConfigurationError, DataFetchError,
                          EmptySeriesError, RealTimeDisconnected)
from ..interaction.crosshair import CrosshairController
from ..rendering.axis_renderer import render_axis
from ..rendering.crosshair_renderer import render_crosshair
from ..rendering.formatting import change_color, format_change_percent, format_price
from ..rendering.overlay_renderer import render_overlays
from ..rendering.price_renderer import render_price
from ..rendering.primitives import Layer
from ..rendering.scale import ScaleContext, build_scale_context
from ..rendering.volume_renderer import render_volume

logger = logging.getLogger(__name__)

LAYER_ORDER = ['price', 'indicators', 'volume', 'axis', 'crosshair']

LOADING_MESSAGE = "Loading chart data..."
EMPTY_MESSAGE = "No chart data available"


class ChartStatus(Enum):
    LOADING = 'loading'
    ERROR = 'error'
    EMPTY = 'empty'
    READY = 'ready'


@dataclass
class RenderResult:
    """Everything a host needs to paint one frame"""
    status: ChartStatus
    message: Optional[str] = None
    layers: List[Layer] = field(default_factory=list)
    header: Dict = field(default_factory=dict)
    footer: Dict = field(default_factory=dict)
    crosshair: CrosshairState = field(default_factory=CrosshairState)

    def layer(self, name: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.name == name:
                return layer
        return None

    @property
    def is_placeholder(self) -> bool:
        return self.status != ChartStatus.READY


class ChartOrchestrator:
    """
    Single owner of the chart's mutable state

    Every state change (data arrival, control change, pointer move, resize)
    re-runs the pipeline and pushes the RenderResult to subscribers.
    Historical fetches run synchronously unless a dispatcher is supplied; a
    dispatcher receives the request key and must answer through
    deliver_series() or deliver_error(). Answers for a key that is no longer
    active are discarded.
    """

    def __init__(self, symbol: str, provider, period: Optional[str] = None,
                 interval: Optional[str] = None, show_volume: bool = True,
                 show_indicators: bool = True, real_time: bool = True,
                 width: Optional[float] = None, height: Optional[float] = None,
                 chart_type: Optional[str] = None,
                 dispatcher: Optional[Callable[[SeriesKey], None]] = None,
                 fullscreen_handler: Optional[Callable[[bool], None]] = None,
                 settings: Optional[ChartSettings] = None):
        """
        Args:
            symbol: Ticker to chart
            provider: Historical data provider with get_historical_bars() and
                optionally get_quote()
            period, interval: Initial period/interval (settings defaults if omitted)
            show_volume, show_indicators, real_time: Initial toggles
            width, height: Surface size in pixels
            chart_type: 'line', 'area' or 'candlestick'
            dispatcher: Host hook for asynchronous fetches
            fullscreen_handler: Host hook called with the new fullscreen flag
        """
        self.settings = settings or get_config()
        self.provider = provider
        self.dispatcher = dispatcher
        self.fullscreen_handler = fullscreen_handler

        period = period or self.settings.default_period
        if interval is None:
            interval = (self.settings.default_interval if period == self.settings.default_period
                        else DEFAULT_INTERVAL_FOR_PERIOD.get(period, self.settings.default_interval))
        self.config = ChartConfig(
            period=period,
            interval=interval,
            chart_type=chart_type or self.settings.default_chart_type,
            show_volume=show_volume,
            show_indicators=show_indicators,
            real_time=real_time
        )
        self.symbol = symbol.strip().upper()
        self.width = width or self.settings.chart_width
        self.height = height or self.settings.chart_height
        self.tz = self.settings.display_timezone

        self.store = SeriesStore(max_bars=self.settings.max_bars)
        self.tick_buffer = TickBuffer()
        self.crosshair = CrosshairController(tz=self.tz)

        self.status = ChartStatus.LOADING
        self.message: Optional[str] = LOADING_MESSAGE
        self.quote: Optional[Quote] = None
        self._reference_price: Optional[float] = None
        self.connected = False
        self.is_fullscreen = False

        self.last_result: Optional[RenderResult] = None
        self._listeners: List[Callable[[RenderResult], None]] = []

        logger.info(f"[CHART] Orchestrator created for {self.symbol} "
                    f"{self.config.period}/{self.config.interval}")

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[[RenderResult], None]) -> Callable[[], None]:
        """Register a render listener; returns a callable that removes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> RenderResult:
        result = self.render()
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Render listener failed: {e}", exc_info=True)
        return result

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    @property
    def active_key(self) -> SeriesKey:
        return SeriesKey.create(self.symbol, self.config.period, self.config.interval)

    def set_symbol(self, symbol: str):
        symbol = symbol.strip().upper()
        if not symbol:
            raise ConfigurationError("Symbol must not be empty")
        if symbol == self.symbol and self.status != ChartStatus.ERROR:
            return
        self.symbol = symbol
        self.quote = None
        self._reference_price = None
        self.request_series()

    def set_period(self, period: str):
        """Change period, switching to the period's default interval when needed"""
        if period not in PERIODS:
            raise ConfigurationError(f"Unknown period: {period}", {'valid': PERIODS})
        if period == self.config.period and self.status != ChartStatus.ERROR:
            return
        self.config.interval = self.config.interval_for_period(period)
        self.config.period = period
        self.request_series()

    def set_interval(self, interval: str):
        if interval not in INTERVALS:
            raise ConfigurationError(f"Unknown interval: {interval}", {'valid': INTERVALS})
        if interval == self.config.interval and self.status != ChartStatus.ERROR:
            return
        self.config.interval = interval
        self.request_series()

    def set_chart_type(self, chart_type: str):
        if chart_type not in CHART_TYPES:
            raise ConfigurationError(f"Unknown chart type: {chart_type}", {'valid': CHART_TYPES})
        self.config.chart_type = chart_type
        self._notify()

    def toggle_indicator(self, name: str, enabled: Optional[bool] = None):
        if name not in INDICATOR_SPECS:
            raise ConfigurationError(f"Unknown indicator: {name}", {'valid': list(INDICATOR_SPECS)})
        current = self.config.indicator_toggles.get(name, False)
        self.config.indicator_toggles[name] = (not current) if enabled is None else enabled
        self._notify()

    def set_show_volume(self, show: bool):
        self.config.show_volume = show
        self._notify()

    def set_show_indicators(self, show: bool):
        self.config.show_indicators = show
        self._notify()

    def set_real_time(self, enabled: bool):
        self.config.real_time = enabled
        if not enabled:
            self.tick_buffer.clear()
        self._notify()

    def resize(self, width: float, height: float):
        self.width = width
        self.height = height
        self._notify()

    def toggle_fullscreen(self) -> bool:
        """Flip the fullscreen flag; the host viewport does the actual resizing"""
        self.is_fullscreen = not self.is_fullscreen
        if self.fullscreen_handler:
            self.fullscreen_handler(self.is_fullscreen)
        self._notify()
        return self.is_fullscreen

    # ------------------------------------------------------------------
    # Fetch lifecycle
    # ------------------------------------------------------------------

    def request_series(self) -> SeriesKey:
        """
        Start loading the active key

        The previous series is dropped immediately so nothing is drawn (or
        merged into) while the new one is outstanding.
        """
        key = self.active_key
        self.store.clear()
        self.tick_buffer.clear()
        self.crosshair.pointer_leave()
        self.status = ChartStatus.LOADING
        self.message = LOADING_MESSAGE
        logger.info(f"[CHART] Requesting {key.symbol} {key.period}/{key.interval}")
        self._notify()

        if self.dispatcher is not None:
            self.dispatcher(key)
            return key

        try:
            bars = self.provider.get_historical_bars(key.symbol, key.period, key.interval)
        except DataFetchError as e:
            self.deliver_error(key, e)
            return key
        except Exception as e:
            logger.error(f"[CHART] Unexpected error fetching {key.symbol}: {e}", exc_info=True)
            self.deliver_error(key, DataFetchError(f"Failed to load chart data: {e}", symbol=key.symbol))
            return key

        self.deliver_series(key, bars)
        self.refresh_quote()
        return key

    def refresh_quote(self) -> Optional[Quote]:
        """Fetch the header quote; failures leave the header on the series' own prices"""
        get_quote = getattr(self.provider, 'get_quote', None)
        if get_quote is None:
            return None
        symbol = self.symbol
        try:
            quote = get_quote(symbol)
        except DataFetchError as e:
            logger.warning(f"Quote unavailable for {symbol}: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected quote failure for {symbol}: {e}", exc_info=True)
            return None
        self.deliver_quote(symbol, quote)
        return quote

    def _is_stale(self, key: SeriesKey) -> bool:
        if key != self.active_key:
            logger.info(f"[CHART] Discarding stale response for {key.symbol} "
                        f"{key.period}/{key.interval}")
            return True
        return False

    def deliver_series(self, key: SeriesKey, bars: Sequence[Bar],
                       loaded_at: Optional[datetime] = None) -> bool:
        """Install a fetched series; returns False if the response is stale"""
        if self._is_stale(key):
            return False

        self.store.replace(key, bars, loaded_at or datetime.now(timezone.utc))
        if len(self.store) == 0:
            self.status = ChartStatus.EMPTY
            self.message = EMPTY_MESSAGE
            logger.info(str(EmptySeriesError(EMPTY_MESSAGE, {'symbol': key.symbol, 'period': key.period})))
        else:
            self.status = ChartStatus.READY
            self.message = None

        self._notify()
        return True

    def deliver_error(self, key: SeriesKey, error: Exception) -> bool:
        """Show a fetch failure; returns False if the response is stale"""
        if self._is_stale(key):
            return False

        self.store.clear()
        self.status = ChartStatus.ERROR
        self.message = error.message if isinstance(error, ChartError) else str(error)
        logger.error(f"[CHART] Failed to load {key.symbol}: {error}")

        self._notify()
        return True

    def deliver_quote(self, symbol: str, quote: Quote) -> bool:
        if symbol.upper() != self.symbol:
            return False
        self.quote = quote
        # Back out the previous close so ticks keep the change percent current
        ratio = 1 + quote.change_percent / 100.0
        self._reference_price = quote.current_price / ratio if ratio > 0 else None
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Real-time
    # ------------------------------------------------------------------

    def on_tick(self, tick: Tick):
        """Queue a live tick; merged on the next flush_ticks()"""
        if not self.config.real_time:
            return
        self.tick_buffer.push(tick)

    def flush_ticks(self) -> int:
        """Merge coalesced ticks and re-render once; returns the number merged"""
        ticks = self.tick_buffer.drain()
        if not ticks:
            return 0

        merged = 0
        for tick in ticks:
            if self.store.apply_tick(tick) != TickOutcome.IGNORED:
                merged += 1

        if merged:
            if self.status == ChartStatus.EMPTY and len(self.store) > 0:
                self.status = ChartStatus.READY
                self.message = None
            self._notify()
        return merged

    def set_connection_status(self, connected: bool):
        if connected == self.connected:
            return
        self.connected = connected
        if connected:
            logger.info(f"[CHART] Live feed connected for {self.symbol}")
        else:
            logger.warning(str(RealTimeDisconnected("Live feed offline, showing last known data",
                                                    {'symbol': self.symbol})))
        self._notify()

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def pointer_move(self, x: float, y: float) -> RenderResult:
        self.crosshair.pointer_move(x, y)
        return self._notify()

    def pointer_leave(self) -> RenderResult:
        self.crosshair.pointer_leave()
        return self._notify()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def render(self) -> RenderResult:
        """Run the pipeline for the current state"""
        layout = compute_layout(self.width, self.height, self.config.show_volume)
        header = self._header()
        footer = self._footer()

        if self.status != ChartStatus.READY:
            self.crosshair.update_context(None)
            return self._finish(RenderResult(self.status, self.message, header=header, footer=footer))

        bars = self.store.bars

        indicators = self._build(
            'indicators', compute_indicators, self.store.closes(), self.config.enabled_indicators()
        ) or {}

        try:
            ctx = build_scale_context(bars, layout.plot_width, layout.price_height, layout.padding)
        except ValueError as e:
            logger.warning(f"[CHART] Nothing to draw: {e}")
            self.crosshair.update_context(None)
            return self._finish(RenderResult(self.status, str(e), header=header, footer=footer))

        layers = [
            Layer('price', self._build('price', render_price, bars, ctx, self.config.chart_type)),
            Layer('indicators', self._build('indicators', render_overlays, indicators, len(bars), ctx)),
            Layer('volume', self._volume(bars, ctx, layout)),
            Layer('axis', self._build('axis', render_axis, bars, ctx, self.config.period,
                                      axis_y=layout.plot_bottom, tz=self.tz)),
        ]

        self.crosshair.update_context(ctx, hover_bottom=layout.plot_bottom)
        layers.append(Layer('crosshair', self._crosshair(bars, ctx, layout)))

        return self._finish(RenderResult(
            ChartStatus.READY, None, layers, header, footer, self.crosshair.state
        ))

    def _finish(self, result: RenderResult) -> RenderResult:
        self.last_result = result
        return result

    def _build(self, name: str, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"[CHART] {name} layer failed: {e}", exc_info=True)
            return []

    def _volume(self, bars: Sequence[Bar], ctx: ScaleContext, layout: ChartLayout) -> list:
        if not self.config.show_volume:
            return []
        return self._build('volume', render_volume, bars, ctx, layout.volume_top, layout.volume_height)

    def _crosshair(self, bars: Sequence[Bar], ctx: ScaleContext, layout: ChartLayout) -> list:
        tooltip = self.crosshair.tooltip(bars, self.config.period)
        lines = list(tooltip.values()) if tooltip else []
        return self._build('crosshair', render_crosshair, self.crosshair.state, ctx, lines,
                           layout.width, layout.height, layout.plot_bottom)

    def _header(self) -> Dict:
        price = None
        change_percent = None

        if self.store.bars:
            price = self.store.bars[-1].close
        elif self.quote is not None:
            price = self.quote.current_price

        if price is not None and self._reference_price:
            change_percent = (price / self._reference_price - 1) * 100.0
        elif self.quote is not None:
            change_percent = self.quote.change_percent
        elif len(self.store) > 1 and self.store.bars[0].close:
            change_percent = (price / self.store.bars[0].close - 1) * 100.0

        live = self.config.real_time and self.connected
        return {
            'symbol': self.symbol,
            'price': price,
            'price_text': format_price(price) if price is not None else '--',
            'change_percent': change_percent,
            'change_text': format_change_percent(change_percent) if change_percent is not None else '',
            'change_color': change_color(change_percent or 0),
            'live': live,
            'live_text': ('Live' if live else 'Offline') if self.config.real_time else '',
        }

    def _footer(self) -> Dict:
        updated = self.store.last_updated
        updated_text = updated.astimezone(self.tz).strftime('%H:%M:%S') if updated else None

        parts = [self.config.period, self.config.interval, f"{len(self.store)} points"]
        if updated_text:
            parts.append(f"Updated {updated_text}")

        return {
            'period': self.config.period,
            'interval': self.config.interval,
            'points': len(self.store),
            'last_updated': updated,
            'text': ' | '.join(parts),
        }
