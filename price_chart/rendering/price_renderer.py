# price_chart/rendering/price_renderer.py
"""
Price series renderers: line, area and candlestick

Each returns surface-pixel primitives for one layer and draws nothing for an
empty series or a missing scale context.
"""
import logging
from typing import List, Sequence

from .primitives import Line, Polygon, Polyline, Rect, degrades_to_empty, is_finite
from .scale import ScaleContext
from ..data.models import Bar
from ..styles.chart import ChartStyles

logger = logging.getLogger(__name__)


def _close_points(bars: Sequence[Bar], ctx: ScaleContext) -> list:
    points = []
    for i, bar in enumerate(bars):
        if not is_finite(bar.close):
            continue
        points.append((ctx.x_at(i), ctx.y_at(bar.close)))
    return points


@degrades_to_empty
def render_line(bars: Sequence[Bar], ctx: ScaleContext, style=ChartStyles) -> List:
    """Single polyline through the closes"""
    if not bars or ctx is None:
        return []
    points = _close_points(bars, ctx)
    if not points:
        return []
    return [Polyline(points, style.LINE_COLOR, width=style.LINE_WIDTH)]


@degrades_to_empty
def render_area(bars: Sequence[Bar], ctx: ScaleContext, style=ChartStyles) -> List:
    """Close polyline over a fill reaching down to the plot floor"""
    if not bars or ctx is None:
        return []
    points = _close_points(bars, ctx)
    if not points:
        return []

    floor = ctx.bottom
    fill = [(points[0][0], floor)] + points + [(points[-1][0], floor)]
    return [
        Polygon(fill, style.LINE_COLOR, opacity=style.AREA_OPACITY),
        Polyline(points, style.LINE_COLOR, width=style.LINE_WIDTH),
    ]


def candle_width(ctx: ScaleContext, style=ChartStyles) -> float:
    return max(1.0, ctx.pixel_width / ctx.point_count * style.CANDLE_WIDTH_RATIO)


@degrades_to_empty
def render_candlestick(bars: Sequence[Bar], ctx: ScaleContext, style=ChartStyles) -> List:
    """
    One wick and one body per bar

    The wick spans high to low. The body spans open to close and is at
    least 1 pixel tall so unchanged bars stay visible.
    """
    if not bars or ctx is None:
        return []

    width = candle_width(ctx, style)
    primitives = []
    skipped = 0

    for i, bar in enumerate(bars):
        if not is_finite(bar.open, bar.high, bar.low, bar.close):
            skipped += 1
            continue

        x = ctx.x_at(i)
        color = style.CANDLE_BULL if bar.close >= bar.open else style.CANDLE_BEAR

        primitives.append(Line(x, ctx.y_at(bar.high), x, ctx.y_at(bar.low), color))

        y_open = ctx.y_at(bar.open)
        y_close = ctx.y_at(bar.close)
        body_height = max(1.0, abs(y_open - y_close))
        primitives.append(Rect(
            x - width / 2, min(y_open, y_close), width, body_height,
            fill_color=color, stroke_color=color
        ))

    if skipped:
        logger.warning(f"Skipped {skipped} candles with non-finite prices")
    return primitives


PRICE_RENDERERS = {
    'line': render_line,
    'area': render_area,
    'candlestick': render_candlestick,
}


def render_price(bars: Sequence[Bar], ctx: ScaleContext, chart_type: str, style=ChartStyles) -> List:
    renderer = PRICE_RENDERERS.get(chart_type)
    if renderer is None:
        logger.error(f"Unknown chart type: {chart_type}")
        return []
    return renderer(bars, ctx, style)
