# price_chart/rendering/volume_renderer.py
"""
Volume bars drawn in a band beneath the price region
"""
import logging
from typing import List, Sequence

from .primitives import Rect, degrades_to_empty, is_finite
from .scale import ScaleContext
from ..data.models import Bar
from ..styles.chart import ChartStyles

logger = logging.getLogger(__name__)


@degrades_to_empty
def render_volume(bars: Sequence[Bar], ctx: ScaleContext, band_top: float, band_height: float,
                  style=ChartStyles) -> List:
    """
    One bar per point, scaled to the largest volume in the visible window

    Args:
        bars: Visible series
        ctx: Scale context of the price region (bars share its x mapping)
        band_top: Surface y of the top of the volume band
        band_height: Height of the band in pixels
    """
    if not bars or ctx is None or band_height <= 0:
        return []

    volumes = [bar.volume if is_finite(bar.volume) and bar.volume > 0 else 0 for bar in bars]
    max_volume = max(volumes)
    if max_volume <= 0:
        return []

    width = max(1.0, ctx.pixel_width / ctx.point_count * style.CANDLE_WIDTH_RATIO - style.VOLUME_GAP)
    band_bottom = band_top + band_height

    rects = []
    for i, volume in enumerate(volumes):
        if volume == 0:
            continue
        height = volume / max_volume * band_height
        rects.append(Rect(
            ctx.x_at(i) - width / 2, band_bottom - height, width, height,
            fill_color=style.VOLUME_COLOR, opacity=style.VOLUME_OPACITY
        ))
    return rects
