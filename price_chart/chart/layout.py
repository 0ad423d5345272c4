# price_chart/chart/layout.py
"""
Splits the drawing surface into the price region and the volume band
"""
from dataclasses import dataclass

from ..config import VOLUME_BAND_RATIO
from ..rendering.scale import Padding


@dataclass
class ChartLayout:
    width: float
    height: float
    padding: Padding
    plot_width: float
    price_height: float
    volume_top: float
    volume_height: float

    @property
    def plot_bottom(self) -> float:
        """Surface y of the bottom of the plot (price region plus volume band)"""
        return self.volume_top + self.volume_height

    @property
    def is_drawable(self) -> bool:
        return self.plot_width > 0 and self.price_height > 0


def compute_layout(width: float, height: float, show_volume: bool,
                   padding: Padding = None) -> ChartLayout:
    """
    Layout for a surface of the given size

    With volume enabled the bottom VOLUME_BAND_RATIO of the plot height is
    given to the volume band.
    """
    padding = padding or Padding()
    plot_width = width - padding.left - padding.right
    plot_height = height - padding.top - padding.bottom

    volume_height = plot_height * VOLUME_BAND_RATIO if show_volume and plot_height > 0 else 0.0
    price_height = plot_height - volume_height

    return ChartLayout(
        width=width,
        height=height,
        padding=padding,
        plot_width=plot_width,
        price_height=price_height,
        volume_top=padding.top + price_height,
        volume_height=volume_height
    )
