# price_chart/interaction/__init__.py
from .crosshair import CrosshairController, CrosshairMode

__all__ = ['CrosshairController', 'CrosshairMode']
