# price_chart/exceptions.py - Custom exceptions for the chart engine
"""
Custom exception classes for the price chart engine.
Provides specific error types for data fetch, configuration and live feed failures.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ChartError(Exception):
    """
    [CLASS SUMMARY]
    Purpose: Base exception class for all chart engine errors
    Usage: Base class for inheritance, rarely raised directly
    Attributes:
        - message: Error description
        - details: Additional context dictionary
        - timestamp: When the error occurred (UTC)
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def __str__(self) -> str:
        """Format error message with details if available"""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(ChartError):
    """Raised for unknown periods, intervals, chart types or timezones"""


class DataFetchError(ChartError):
    """
    [CLASS SUMMARY]
    Purpose: Raised when the historical data provider cannot return a series
    Usage: The chart shows an inline error placeholder; no automatic retry
    Attributes:
        - symbol: Requested symbol
        - status_code: HTTP status if the server answered
    """

    def __init__(self, message: str, symbol: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        details = kwargs
        if symbol:
            details['symbol'] = symbol
        if status_code:
            details['status_code'] = status_code

        super().__init__(message, details)
        self.symbol = symbol
        self.status_code = status_code


class NotFoundError(DataFetchError):
    """Raised when the symbol or its history does not exist (HTTP 404)"""

    def __init__(self, symbol: str, message: Optional[str] = None, **kwargs):
        super().__init__(message or f"No data found for {symbol}",
                         symbol=symbol, status_code=404, **kwargs)


class RateLimitedError(DataFetchError):
    """
    [CLASS SUMMARY]
    Purpose: Raised when the data server rejects the request with HTTP 429
    Attributes:
        - retry_after: Seconds the server asked us to wait (if provided)
    """

    def __init__(self, message: str = "Rate limit exceeded",
                 retry_after: Optional[int] = None, **kwargs):
        if retry_after:
            kwargs['retry_after'] = retry_after
        super().__init__(message, status_code=429, **kwargs)
        self.retry_after = retry_after


class NetworkError(DataFetchError):
    """Raised for connection failures, timeouts and 5xx responses"""


class EmptySeriesError(ChartError):
    """
    A valid response with zero bars

    Not raised: the chart shows its empty placeholder and logs the formatted
    text of this error.
    """


class RealTimeDisconnected(ChartError):
    """
    The live price feed dropped

    Not raised: the feed reports it through connection_status and
    error_occurred, and the chart keeps its last known data.
    """
