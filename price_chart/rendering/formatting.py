# price_chart/rendering/formatting.py
"""
Label formatting shared by the axis, tooltip and header
"""
from datetime import datetime, timezone, tzinfo
from typing import Optional

from ..styles.base_styles import BaseStyles


def _localize(timestamp: datetime, tz: Optional[tzinfo]) -> datetime:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(tz) if tz is not None else timestamp


def format_time_label(timestamp: datetime, period: str, tz: Optional[tzinfo] = None) -> str:
    """
    Axis label for a bar timestamp

    1D -> '09:35', 5D -> 'Mon 14', 1M/3M -> 'Jan 14', longer -> "Jan '24"
    """
    local = _localize(timestamp, tz)
    if period == '1D':
        return local.strftime('%H:%M')
    if period == '5D':
        return f"{local:%a} {local.day}"
    if period in ('1M', '3M'):
        return f"{local:%b} {local.day}"
    return local.strftime("%b '%y")


def format_tooltip_time(timestamp: datetime, period: str, tz: Optional[tzinfo] = None) -> str:
    """Tooltip timestamp; adds the time of day wherever bars can be intraday"""
    local = _localize(timestamp, tz)
    if period == '1D':
        return local.strftime('%H:%M')
    if period == '5D':
        return f"{local:%a} {local.day} {local:%H:%M}"
    return f"{local:%b} {local.day}, {local.year}"


def format_price(price: float) -> str:
    return f"${price:,.2f}"


def format_volume(volume: float) -> str:
    if volume >= 1e9:
        return f"{volume / 1e9:.1f}B"
    if volume >= 1e6:
        return f"{volume / 1e6:.1f}M"
    if volume >= 1e3:
        return f"{volume / 1e3:.1f}K"
    return f"{volume:.0f}"


def format_change_percent(change_percent: float) -> str:
    return f"{change_percent:+.2f}%"


def change_color(change: float) -> str:
    if change > 0:
        return BaseStyles.POSITIVE
    if change < 0:
        return BaseStyles.NEGATIVE
    return BaseStyles.NEUTRAL
