"""
Price Chart Styles Package
"""

from .base_styles import BaseStyles
from .chart import ChartStyles

__all__ = [
    'BaseStyles',
    'ChartStyles'
]
