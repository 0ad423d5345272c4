# price_chart/rendering/primitives.py
"""
Backend-neutral drawing primitives

Renderers emit these; the Qt widget (or any other 2D backend) paints them.
All coordinates are surface pixels with the origin at the top-left corner.
"""
import logging
import math
from dataclasses import dataclass, field
from functools import wraps
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Dash = Optional[Tuple[float, float]]


@dataclass
class Polyline:
    points: List[Point]
    color: str
    width: float = 1.0
    dash: Dash = None
    opacity: float = 1.0


@dataclass
class Polygon:
    """Closed, filled shape"""
    points: List[Point]
    fill_color: str
    opacity: float = 1.0


@dataclass
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill_color: str
    stroke_color: Optional[str] = None
    opacity: float = 1.0


@dataclass
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 1.0
    dash: Dash = None
    opacity: float = 1.0


@dataclass
class Text:
    x: float
    y: float
    text: str
    color: str
    size: float = 10
    anchor: str = 'left'  # left, center or right of x
    baseline: str = 'middle'  # top, middle or bottom of y


@dataclass
class Layer:
    """Named group of primitives drawn together in z-order"""
    name: str
    primitives: list = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.primitives)

    @property
    def is_empty(self) -> bool:
        return not self.primitives


def degrades_to_empty(func):
    """Decorator: a renderer that fails logs the problem and draws nothing"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} produced no output: {type(e).__name__}: {e}", exc_info=True)
            return []
    return wrapper


def is_finite(*values) -> bool:
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False
