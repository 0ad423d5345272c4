# price_chart/rendering/crosshair_renderer.py
"""
Crosshair guides and the inspection tooltip
"""
import logging
from typing import List, Optional, Sequence

from .primitives import Line, Rect, Text, degrades_to_empty
from .scale import ScaleContext
from ..data.models import CrosshairState
from ..styles.chart import ChartStyles

logger = logging.getLogger(__name__)


def tooltip_origin(pointer_x: float, pointer_y: float, surface_width: float,
                   surface_height: float, style=ChartStyles) -> tuple:
    """
    Top-left corner of the tooltip box

    The box sits up and to the right of the pointer, flips to the left near
    the right edge and is always kept inside the surface.
    """
    width, height, offset = style.TOOLTIP_WIDTH, style.TOOLTIP_HEIGHT, style.TOOLTIP_OFFSET

    x = pointer_x + offset
    if x + width > surface_width:
        x = pointer_x - offset - width
    y = pointer_y - offset - height / 2

    x = max(0.0, min(x, surface_width - width))
    y = max(0.0, min(y, surface_height - height))
    return x, y


@degrades_to_empty
def render_crosshair(state: CrosshairState, ctx: ScaleContext, tooltip_lines: Sequence[str],
                     surface_width: float, surface_height: float,
                     guide_bottom: Optional[float] = None, style=ChartStyles) -> List:
    """
    Horizontal guide at the pointer, vertical guide snapped to the nearest bar

    Args:
        state: Current crosshair state
        ctx: Scale context of the rendered series
        tooltip_lines: Text rows for the tooltip (time, close, volume)
        surface_width, surface_height: Size of the whole drawing surface
        guide_bottom: Lowest surface y of the vertical guide (covers the volume band)
    """
    if state is None or ctx is None or not state.visible or state.nearest_index is None:
        return []
    if not 0 <= state.nearest_index < ctx.point_count:
        return []

    x = ctx.x_at(state.nearest_index)
    y = state.pointer_y
    bottom = ctx.bottom if guide_bottom is None else guide_bottom

    primitives = [
        Line(ctx.left, y, ctx.right, y, style.CROSSHAIR_COLOR,
             dash=style.CROSSHAIR_DASH, opacity=style.CROSSHAIR_OPACITY),
        Line(x, ctx.top, x, bottom, style.CROSSHAIR_COLOR,
             dash=style.CROSSHAIR_DASH, opacity=style.CROSSHAIR_OPACITY),
    ]

    if tooltip_lines:
        box_x, box_y = tooltip_origin(x, y, surface_width, surface_height, style)
        primitives.append(Rect(box_x, box_y, style.TOOLTIP_WIDTH, style.TOOLTIP_HEIGHT,
                               fill_color=style.TOOLTIP_BACKGROUND, opacity=style.TOOLTIP_OPACITY))
        row_height = style.TOOLTIP_HEIGHT / (len(tooltip_lines) + 1)
        for row, text in enumerate(tooltip_lines, start=1):
            primitives.append(Text(box_x + 8, box_y + row * row_height, text,
                                   style.TOOLTIP_TEXT, size=style.TOOLTIP_FONT_SIZE))

    return primitives
