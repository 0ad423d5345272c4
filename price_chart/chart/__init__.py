# price_chart/chart/__init__.py
"""
Chart orchestration: state ownership, fetch lifecycle and the render pipeline
"""
from .orchestrator import ChartOrchestrator, ChartStatus, RenderResult, LAYER_ORDER
from .layout import ChartLayout, compute_layout

__all__ = [
    'ChartOrchestrator', 'ChartStatus', 'RenderResult', 'LAYER_ORDER',
    'ChartLayout', 'compute_layout'
]
