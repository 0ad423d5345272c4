"""
Qt host for the price chart
"""

from .chart_widget import PriceChartWidget, ChartSurface, FetchWorker

__all__ = ['PriceChartWidget', 'ChartSurface', 'FetchWorker']
