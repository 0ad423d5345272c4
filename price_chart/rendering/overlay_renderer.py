# price_chart/rendering/overlay_renderer.py
"""
Indicator overlays on the price scale

Indicator values cover a suffix of the series. Value j of an indicator with
k values belongs to bar (n - k) + j, so the last value always sits on the
last bar.
"""
import logging
from typing import Dict, List, Sequence

from .primitives import Line, Polyline, Text, degrades_to_empty, is_finite
from .scale import ScaleContext
from ..calculations.indicators import suffix_offset
from ..data.models import BollingerBands, INDICATOR_SPECS
from ..styles.chart import ChartStyles

logger = logging.getLogger(__name__)


def aligned_points(values: Sequence[float], series_length: int, ctx: ScaleContext) -> list:
    """Surface points for an indicator line, shifted to its suffix offset"""
    offset = suffix_offset(series_length, values)
    if offset < 0:
        raise ValueError(f"{len(values)} indicator values for a {series_length}-bar series")

    return [
        (ctx.x_at(offset + j), ctx.y_at(value))
        for j, value in enumerate(values)
        if is_finite(value)
    ]


MARKER_HALF_WIDTH = 3.0


def _trace(points: list, color: str, dash=None, opacity: float = 1.0):
    """Polyline through the points; a lone value becomes a short level marker"""
    if not points:
        return None
    if len(points) == 1:
        x, y = points[0]
        return Line(x - MARKER_HALF_WIDTH, y, x + MARKER_HALF_WIDTH, y, color,
                    width=2.0, opacity=opacity)
    return Polyline(points, color, dash=dash, opacity=opacity)


def _indicator_style(name: str, style) -> dict:
    return style.INDICATOR_STYLES.get(name, {'color': style.CHART_TEXT, 'dash': None})


def _render_bollinger(bands: BollingerBands, series_length: int, ctx: ScaleContext, style) -> List:
    params = _indicator_style('bollinger', style)
    primitives = []
    for values in (bands.upper, bands.middle, bands.lower):
        trace = _trace(aligned_points(values, series_length, ctx), params['color'],
                       params.get('dash'), params.get('opacity', 1.0))
        if trace is not None:
            primitives.append(trace)
    return primitives


def _render_badge(name: str, values: Sequence[float], row: int, ctx: ScaleContext, style) -> Text:
    spec = INDICATOR_SPECS[name]
    params = _indicator_style(name, style)
    return Text(
        ctx.left + 6, ctx.top + 8 + row * 14,
        f"{spec.label} {spec.window}: {values[-1]:.1f}",
        params['color'], size=style.AXIS_FONT_SIZE
    )


@degrades_to_empty
def render_overlays(indicators: Dict[str, object], series_length: int, ctx: ScaleContext,
                    style=ChartStyles) -> List:
    """
    Draw every computed indicator

    Price-scale indicators become polylines; oscillators have no meaning on
    the price scale and are shown as a badge with their latest value.
    """
    if not indicators or ctx is None or series_length <= 0:
        return []

    primitives = []
    badges = 0

    for name, values in indicators.items():
        spec = INDICATOR_SPECS.get(name)
        if spec is None or len(values) == 0:
            continue

        try:
            if isinstance(values, BollingerBands):
                primitives.extend(_render_bollinger(values, series_length, ctx, style))
            elif spec.kind == 'oscillator':
                primitives.append(_render_badge(name, values, badges, ctx, style))
                badges += 1
            else:
                params = _indicator_style(name, style)
                trace = _trace(aligned_points(values, series_length, ctx),
                               params['color'], params.get('dash'))
                if trace is not None:
                    primitives.append(trace)
        except ValueError as e:
            logger.warning(f"Skipping {spec.label} overlay: {e}")

    return primitives

