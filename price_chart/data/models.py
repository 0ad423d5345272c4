# price_chart/data/models.py
"""
Chart data models
"""
import logging
import math
from typing import Dict, List, Optional, Any, NamedTuple
from datetime import datetime, timezone
from dataclasses import dataclass, field

from ..config import (PERIODS, INTERVAL_SECONDS, CHART_TYPES,
                      DEFAULT_INTERVAL_FOR_PERIOD)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string, epoch milliseconds or datetime into an aware UTC datetime"""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass
class Bar:
    """Single OHLCV bar"""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0

    @classmethod
    def from_dict(cls, data: Dict) -> 'Bar':
        """Build a bar from a REST payload row"""
        return cls(
            timestamp=parse_timestamp(data['timestamp']),
            open=float(data['open']),
            high=float(data['high']),
            low=float(data['low']),
            close=float(data['close']),
            volume=float(data.get('volume') or 0)
        )

    def to_dict(self) -> Dict:
        return {
            'timestamp': self.timestamp,
            'open': self.open,
            'high': self.high,
            'low': self.low,
            'close': self.close,
            'volume': self.volume
        }

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.open, self.high, self.low, self.close, self.volume))


@dataclass
class Tick:
    """Single real-time price update"""
    symbol: str
    price: float
    timestamp: datetime
    volume: float = 0

    @classmethod
    def from_message(cls, data: Dict[str, Any]) -> Optional['Tick']:
        """
        Convert a live feed market_data payload into a Tick

        Trade events carry {event_type: 'trade', symbol, price, size, timestamp(ms)}.
        Minute aggregates are accepted too, using their close and volume.
        Anything else returns None.
        """
        event_type = data.get('event_type')
        symbol = data.get('symbol', data.get('sym'))
        if not symbol:
            return None

        try:
            if event_type == 'trade':
                price = data['price']
                volume = data.get('size', 0)
            elif event_type == 'aggregate':
                price = data.get('close', data.get('c'))
                volume = data.get('volume', data.get('v', 0))
            else:
                return None

            timestamp = data.get('timestamp', data.get('t', data.get('s')))
            if price is None or timestamp is None:
                return None

            return cls(
                symbol=str(symbol).upper(),
                price=float(price),
                timestamp=parse_timestamp(timestamp),
                volume=float(volume or 0)
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed tick message: {e}")
            return None


@dataclass
class Quote:
    """Current price snapshot shown in the chart header"""
    symbol: str
    current_price: float
    change_percent: float = 0.0


def validate_period_interval(period: str, interval: str):
    if period not in PERIODS:
        raise ConfigurationError(f"Unknown period: {period}", {'valid': PERIODS})
    if interval not in INTERVAL_SECONDS:
        raise ConfigurationError(f"Unknown interval: {interval}", {'valid': list(INTERVAL_SECONDS)})


class SeriesKey(NamedTuple):
    """Request key identifying one series"""
    symbol: str
    period: str
    interval: str

    @classmethod
    def create(cls, symbol: str, period: str, interval: str) -> 'SeriesKey':
        validate_period_interval(period, interval)
        return cls(symbol.strip().upper(), period, interval)


@dataclass
class IndicatorSpec:
    """Static description of a toggleable indicator"""
    name: str
    label: str
    window: int
    kind: str  # 'price' overlays share the price scale, 'oscillator' does not
    multiplier: float = 0.0


INDICATOR_SPECS: Dict[str, IndicatorSpec] = {
    'sma20': IndicatorSpec('sma20', 'SMA 20', 20, 'price'),
    'sma50': IndicatorSpec('sma50', 'SMA 50', 50, 'price'),
    'ema20': IndicatorSpec('ema20', 'EMA 20', 20, 'price'),
    'rsi': IndicatorSpec('rsi', 'RSI', 14, 'oscillator'),
    'bollinger': IndicatorSpec('bollinger', 'Bollinger', 20, 'price', multiplier=2.0),
}


@dataclass
class BollingerBands:
    """Bollinger envelope, index-aligned lists of equal length"""
    upper: List[float] = field(default_factory=list)
    middle: List[float] = field(default_factory=list)
    lower: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.middle)


@dataclass
class ChartConfig:
    """User-controlled chart settings"""
    period: str = '1D'
    interval: str = '5m'
    chart_type: str = 'candlestick'
    indicator_toggles: Dict[str, bool] = field(
        default_factory=lambda: {name: False for name in INDICATOR_SPECS}
    )
    show_volume: bool = True
    show_indicators: bool = True
    real_time: bool = True

    def __post_init__(self):
        if self.chart_type not in CHART_TYPES:
            raise ConfigurationError(f"Unknown chart type: {self.chart_type}", {'valid': CHART_TYPES})
        validate_period_interval(self.period, self.interval)

    def enabled_indicators(self) -> List[str]:
        if not self.show_indicators:
            return []
        return [name for name, enabled in self.indicator_toggles.items() if enabled]

    def interval_for_period(self, period: str) -> str:
        """Keep the current interval unless it is too fine for the new period"""
        if period == '1D' and self.interval == '1d':
            return DEFAULT_INTERVAL_FOR_PERIOD[period]
        if period not in ('1D', '5D') and self.interval != '1d':
            return DEFAULT_INTERVAL_FOR_PERIOD[period]
        return self.interval


@dataclass
class CrosshairState:
    """Pointer inspection state"""
    pointer_x: Optional[float] = None
    pointer_y: Optional[float] = None
    nearest_index: Optional[int] = None
    visible: bool = False
