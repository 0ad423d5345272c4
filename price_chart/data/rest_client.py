# price_chart/data/rest_client.py
"""
REST client for the historical data server
Fetches OHLCV history and quote snapshots
All timestamps in UTC
"""
import logging
import requests
from typing import Dict, List, Optional, Any
from datetime import datetime, timedelta, timezone

from .models import Bar, Quote
from ..config import ChartSettings, get_config
from ..exceptions import DataFetchError, NotFoundError, RateLimitedError, NetworkError

logger = logging.getLogger(__name__)


# Calendar days of history requested for each chart period
PERIOD_DAYS = {
    '1D': 1,
    '5D': 5,
    '1M': 31,
    '3M': 92,
    '6M': 183,
    '1Y': 366,
}

# Server timeframe names for our interval codes
INTERVAL_TIMEFRAMES = {
    '1m': '1min',
    '5m': '5min',
    '15m': '15min',
    '30m': '30min',
    '1h': '1hour',
    '1d': '1day',
}


class HistoricalDataClient:
    """
    REST API client for the data server

    Implements the historical data provider used by the chart orchestrator:
    get_historical_bars() and get_quote(). Failures are raised as
    DataFetchError subclasses; an empty list is a valid "no data" answer.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 settings: Optional[ChartSettings] = None):
        settings = settings or get_config()
        self.base_url = (base_url or settings.api_url).rstrip('/')
        self.timeout = timeout or settings.request_timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

    def build_bars_request(self, symbol: str, period: str, interval: str,
                           now: Optional[datetime] = None) -> Dict[str, Any]:
        """Build the POST body for a period/interval history request"""
        end_date = now or datetime.now(timezone.utc)
        # Weekends and holidays leave gaps, so intraday periods look further back
        days = PERIOD_DAYS.get(period, 1)
        if period in ('1D', '5D'):
            days += 4
        start_date = end_date - timedelta(days=days)

        return {
            "symbol": symbol.upper(),
            "timeframe": INTERVAL_TIMEFRAMES.get(interval, interval),
            "start_date": start_date.strftime('%Y-%m-%d'),
            "end_date": end_date.strftime('%Y-%m-%d'),
            "use_cache": True,
            "validate": False
        }

    def get_historical_bars(self, symbol: str, period: str, interval: str) -> List[Bar]:
        """
        Fetch historical bars for a chart period

        Args:
            symbol: Stock symbol
            period: Chart period (1D, 5D, 1M, 3M, 6M, 1Y)
            interval: Bar interval (1m, 5m, 15m, 30m, 1h, 1d)

        Returns:
            List of bars (oldest to newest), possibly empty

        Raises:
            NotFoundError, RateLimitedError, NetworkError;
            DataFetchError for a payload that cannot be parsed
        """
        url = f"{self.base_url}/api/v1/bars"
        request_data = self.build_bars_request(symbol, period, interval)

        logger.info(f"Fetching bars: {url} with data: {request_data}")
        payload = self._request('POST', url, symbol, json=request_data)

        try:
            rows = payload.get('data') or []
            parsed = [Bar.from_dict(row) for row in rows]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed bars for {symbol}: {e}")
            raise DataFetchError("Malformed bars response", symbol=symbol)
        bars = self._trim_to_period(parsed, period)

        logger.info(f"Fetched {len(bars)} bars for {symbol} ({period}/{interval})")
        return bars

    def get_quote(self, symbol: str) -> Quote:
        """Fetch the latest price snapshot for the chart header"""
        url = f"{self.base_url}/api/v1/latest/{symbol.upper()}"
        payload = self._request('GET', url, symbol)

        try:
            data = payload.get('data', payload)
            price = data.get('currentPrice', data.get('price'))
            if price is None:
                raise DataFetchError("Quote response has no price", symbol=symbol)

            return Quote(
                symbol=symbol.upper(),
                current_price=float(price),
                change_percent=float(data.get('changePercent', data.get('change_percent', 0)) or 0)
            )
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"Malformed quote for {symbol}: {e}")
            raise DataFetchError("Malformed quote response", symbol=symbol)

    def _request(self, method: str, url: str, symbol: str, **kwargs) -> Dict:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            logger.error("Request timeout")
            raise NetworkError("Request timeout - server may be busy", symbol=symbol)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error requesting {url}: {e}")
            raise NetworkError(f"Connection failed: {e}", symbol=symbol)

        if response.status_code == 404:
            raise NotFoundError(symbol)
        if response.status_code == 429:
            retry_after = response.headers.get('Retry-After')
            raise RateLimitedError(
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                symbol=symbol
            )
        if response.status_code >= 500:
            logger.error(f"HTTP {response.status_code}: {response.text}")
            raise NetworkError(f"Server error: HTTP {response.status_code}",
                               symbol=symbol, status_code=response.status_code)
        if response.status_code != 200:
            logger.error(f"HTTP {response.status_code}: {response.text}")
            raise DataFetchError(f"Failed to fetch data: HTTP {response.status_code}",
                                 symbol=symbol, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            raise DataFetchError("Response is not valid JSON", symbol=symbol)

    @staticmethod
    def _trim_to_period(bars: List[Bar], period: str) -> List[Bar]:
        """Keep only the trading days that belong to the period"""
        if not bars or period not in ('1D', '5D'):
            return bars
        days_wanted = 1 if period == '1D' else 5
        trading_days = sorted({bar.timestamp.date() for bar in bars})[-days_wanted:]
        first_day = trading_days[0]
        return [bar for bar in bars if bar.timestamp.date() >= first_day]

    def close(self):
        self.session.close()
