# price_chart/rendering/scale.py
"""
Linear mapping between the data domain (price, bar index) and pixels

Local coordinates are relative to the plot rectangle; surface coordinates
add the padding offset and are what renderers emit.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

from ..config import PRICE_HEADROOM, DEGENERATE_PRICE_HALF_RANGE
from ..data.models import Bar

logger = logging.getLogger(__name__)


@dataclass
class Padding:
    top: float = 20
    right: float = 60
    bottom: float = 40
    left: float = 60


def _fallback_domain(center: float) -> Tuple[float, float]:
    return center - DEGENERATE_PRICE_HALF_RANGE, center + DEGENERATE_PRICE_HALF_RANGE


def price_domain(bars: Sequence[Bar]) -> Tuple[float, float]:
    """
    Visible price range with headroom: (min(low) * 0.98, max(high) * 1.02)

    A collapsed range falls back to a fixed band around its center.
    """
    if not bars:
        raise ValueError("price domain of an empty series")

    low = min(bar.low for bar in bars) * (1 - PRICE_HEADROOM)
    high = max(bar.high for bar in bars) * (1 + PRICE_HEADROOM)

    if not (math.isfinite(low) and math.isfinite(high)):
        raise ValueError(f"non-finite price domain ({low}, {high})")
    if high <= low:
        return _fallback_domain((high + low) / 2)
    return low, high


@dataclass
class ScaleContext:
    """Per-render-pass scale state; never stored between passes"""
    price_domain: Tuple[float, float]
    index_domain: Tuple[int, int]
    pixel_width: float
    pixel_height: float
    padding: Padding = field(default_factory=Padding)

    def __post_init__(self):
        low, high = self.price_domain
        if high <= low:
            self.price_domain = _fallback_domain((high + low) / 2)

    @property
    def point_count(self) -> int:
        return self.index_domain[1] - self.index_domain[0] + 1

    @property
    def left(self) -> float:
        return self.padding.left

    @property
    def top(self) -> float:
        return self.padding.top

    @property
    def right(self) -> float:
        return self.padding.left + self.pixel_width

    @property
    def bottom(self) -> float:
        return self.padding.top + self.pixel_height

    # Local mapping

    def scale_x(self, index: float) -> float:
        n = self.point_count
        if n <= 1:
            return self.pixel_width / 2
        return (index / (n - 1)) * self.pixel_width

    def scale_y(self, price: float) -> float:
        low, high = self.price_domain
        return self.pixel_height - ((price - low) / (high - low)) * self.pixel_height

    def unscale_x(self, x: float) -> int:
        """Nearest bar index for a local x, clamped to the index domain"""
        n = self.point_count
        if n <= 1 or self.pixel_width <= 0:
            return 0
        index = math.floor(x / self.pixel_width * (n - 1) + 0.5)
        return max(0, min(n - 1, index))

    def unscale_y(self, y: float) -> float:
        low, high = self.price_domain
        return low + (self.pixel_height - y) / self.pixel_height * (high - low)

    # Surface mapping

    def x_at(self, index: float) -> float:
        return self.padding.left + self.scale_x(index)

    def y_at(self, price: float) -> float:
        return self.padding.top + self.scale_y(price)

    def index_at(self, surface_x: float) -> int:
        return self.unscale_x(surface_x - self.padding.left)

    def price_at(self, surface_y: float) -> float:
        return self.unscale_y(surface_y - self.padding.top)

    def contains(self, surface_x: float, surface_y: float) -> bool:
        return (self.left <= surface_x <= self.right
                and self.top <= surface_y <= self.bottom)


def build_scale_context(bars: Sequence[Bar], pixel_width: float, pixel_height: float,
                        padding: Padding = None) -> ScaleContext:
    """
    Scale context for a series drawn into a plot rectangle

    Raises:
        ValueError: empty series, non-finite prices or a plot with no area
    """
    if pixel_width <= 0 or pixel_height <= 0:
        raise ValueError(f"plot area has no size ({pixel_width}x{pixel_height})")

    return ScaleContext(
        price_domain=price_domain(bars),
        index_domain=(0, len(bars) - 1),
        pixel_width=pixel_width,
        pixel_height=pixel_height,
        padding=padding or Padding()
    )
