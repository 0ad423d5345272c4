# price_chart/rendering/__init__.py
"""
Geometry pipeline: scale mapping and per-layer renderers producing drawing primitives
"""
from .primitives import Polyline, Polygon, Rect, Line, Text, Layer
from .scale import ScaleContext, Padding, price_domain, build_scale_context
from .price_renderer import render_line, render_area, render_candlestick, render_price
from .volume_renderer import render_volume
from .overlay_renderer import render_overlays
from .axis_renderer import render_axis
from .crosshair_renderer import render_crosshair

__all__ = [
    'Polyline', 'Polygon', 'Rect', 'Line', 'Text', 'Layer',
    'ScaleContext', 'Padding', 'price_domain', 'build_scale_context',
    'render_line', 'render_area', 'render_candlestick', 'render_price',
    'render_volume', 'render_overlays', 'render_axis', 'render_crosshair'
]
