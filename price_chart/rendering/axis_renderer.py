# price_chart/rendering/axis_renderer.py
"""
Price gridlines and time labels
"""
import logging
from datetime import tzinfo
from typing import List, Optional, Sequence

from .primitives import Line, Text, degrades_to_empty
from .scale import ScaleContext
from .formatting import format_price, format_time_label
from ..data.models import Bar
from ..styles.chart import ChartStyles

logger = logging.getLogger(__name__)


def time_label_indices(point_count: int, steps: int) -> List[int]:
    """Bar indices floor((n - 1) * i / steps) for i = 0..steps, without repeats"""
    if point_count <= 0 or steps <= 0:
        return []
    indices = []
    for i in range(steps + 1):
        index = (point_count - 1) * i // steps
        if index not in indices:
            indices.append(index)
    return indices


@degrades_to_empty
def render_price_grid(ctx: ScaleContext, steps: int = 5, style=ChartStyles) -> List:
    """steps + 1 evenly spaced horizontal gridlines labelled with their price"""
    if ctx is None or steps <= 0:
        return []

    low, high = ctx.price_domain
    primitives = []
    for i in range(steps + 1):
        price = low + (high - low) * i / steps
        y = ctx.y_at(price)
        primitives.append(Line(ctx.left, y, ctx.right, y, style.CHART_GRID, opacity=style.GRID_OPACITY))
        primitives.append(Text(ctx.left - 6, y, format_price(price), style.CHART_TEXT,
                               size=style.AXIS_FONT_SIZE, anchor='right'))
    return primitives


@degrades_to_empty
def render_time_axis(bars: Sequence[Bar], ctx: ScaleContext, period: str, steps: int = 5,
                     axis_y: Optional[float] = None, tz: Optional[tzinfo] = None,
                     style=ChartStyles) -> List:
    """
    Evenly spaced time labels formatted for the period

    Args:
        axis_y: Surface y of the time axis; defaults to the bottom of the plot
        tz: Display timezone for the labels
    """
    if not bars or ctx is None:
        return []

    axis_y = ctx.bottom if axis_y is None else axis_y
    primitives = [Line(ctx.left, axis_y, ctx.right, axis_y, style.CHART_GRID)]

    for index in time_label_indices(len(bars), steps):
        x = ctx.x_at(index)
        primitives.append(Line(x, axis_y, x, axis_y + 5, style.CHART_GRID))
        primitives.append(Text(x, axis_y + 8, format_time_label(bars[index].timestamp, period, tz),
                               style.CHART_TEXT, size=style.AXIS_FONT_SIZE,
                               anchor='center', baseline='top'))
    return primitives


def render_axis(bars: Sequence[Bar], ctx: ScaleContext, period: str, price_steps: int = 5,
                time_steps: int = 5, axis_y: Optional[float] = None,
                tz: Optional[tzinfo] = None, style=ChartStyles) -> List:
    return (render_price_grid(ctx, price_steps, style)
            + render_time_axis(bars, ctx, period, time_steps, axis_y, tz, style))
