# price_chart/interaction/crosshair.py
"""
Pointer tracking for the crosshair and tooltip
"""
import logging
from datetime import tzinfo
from enum import Enum
from typing import Dict, Optional, Sequence

from ..data.models import Bar, CrosshairState
from ..rendering.scale import ScaleContext
from ..rendering.formatting import format_price, format_tooltip_time, format_volume

logger = logging.getLogger(__name__)


class CrosshairMode(Enum):
    IDLE = 'idle'
    HOVERING = 'hovering'


class CrosshairController:
    """
    Idle / Hovering state machine driven by pointer events

    The nearest bar is recomputed on every move through the inverse x
    mapping of the current scale context. Events are handled synchronously.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz
        self.mode = CrosshairMode.IDLE
        self.state = CrosshairState()
        self.context: Optional[ScaleContext] = None
        self.hover_bottom: Optional[float] = None

    @property
    def is_hovering(self) -> bool:
        return self.mode == CrosshairMode.HOVERING

    def _inside(self, x: float, y: float) -> bool:
        ctx = self.context
        if ctx is None:
            return False
        bottom = ctx.bottom if self.hover_bottom is None else max(ctx.bottom, self.hover_bottom)
        return ctx.left <= x <= ctx.right and ctx.top <= y <= bottom

    def pointer_enter(self, x: float, y: float) -> CrosshairState:
        return self.pointer_move(x, y)

    def pointer_move(self, x: float, y: float) -> CrosshairState:
        if not self._inside(x, y):
            return self.pointer_leave()

        self.mode = CrosshairMode.HOVERING
        self.state = CrosshairState(
            pointer_x=x,
            pointer_y=y,
            nearest_index=self.context.index_at(x),
            visible=True
        )
        return self.state

    def pointer_leave(self) -> CrosshairState:
        self.mode = CrosshairMode.IDLE
        self.state = CrosshairState()
        return self.state

    def update_context(self, ctx: Optional[ScaleContext], hover_bottom: Optional[float] = None):
        """Install the scale of a new render pass and re-index the pointer against it"""
        self.context = ctx
        self.hover_bottom = hover_bottom
        if ctx is None:
            self.pointer_leave()
        elif self.is_hovering:
            self.pointer_move(self.state.pointer_x, self.state.pointer_y)

    def tooltip(self, bars: Sequence[Bar], period: str) -> Optional[Dict[str, str]]:
        """Formatted {timestamp, close, volume} for the hovered bar"""
        index = self.state.nearest_index
        if not self.state.visible or index is None or not 0 <= index < len(bars):
            return None

        bar = bars[index]
        return {
            'timestamp': format_tooltip_time(bar.timestamp, period, self.tz),
            'close': format_price(bar.close),
            'volume': f"Vol: {format_volume(bar.volume)}"
        }
