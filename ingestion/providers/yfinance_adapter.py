"""
yfinance adapter - fetch adjusted close prices from Yahoo Finance.
Network IO allowed here, but minimal business logic.
"""

import logging
import time
import yfinance as yf
import pandas as pd
from yfinance.exceptions import YFException, YFRateLimitError, YFTzMissingError
from datetime import date, timedelta
from typing import Dict, Any, List, Sequence

from ingestion.transforms.normalizers import to_price_series
from ingestion.transforms.validators import validate_price_series


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30


class YFinanceError(Exception):
    """Raised when yfinance operations fail."""
    pass


class DataUnavailableError(YFinanceError):
    """Raised when a symbol has no data in the requested range."""
    pass


class NetworkError(YFinanceError):
    """Raised on transport failure or timeout talking to the provider."""
    pass


class _ProviderErrorLog(logging.Handler):
    """Collects error records logged by yfinance during one request."""

    def __init__(self):
        super().__init__(level=logging.ERROR)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def fetch_prices_window(
    ticker: str,
    start: date,
    end: date,
    timeout: int = DEFAULT_TIMEOUT_S
) -> List[Dict[str, Any]]:
    """
    Fetch price data for a ticker within date window.
    Returns raw data in provider format - no normalization.

    Args:
        ticker: Ticker symbol (e.g., 'HSBA.L', '^FTSE')
        start: Start date (inclusive)
        end: End date (inclusive)
        timeout: Request timeout in seconds

    Returns:
        List of raw price dictionaries in yfinance format

    Raises:
        YFinanceError: If inputs are invalid
        DataUnavailableError: If the provider returns no rows
        NetworkError: If the request fails or times out
    """
    # Validate inputs
    _validate_date_range(start, end)
    _validate_ticker(ticker)

    # yfinance uses exclusive end dates, so add 1 day
    yf_end = end + timedelta(days=1)

    # yfinance logs, rather than raises, transport failures in its timezone lookup
    error_log = _ProviderErrorLog()
    yf_logger = logging.getLogger('yfinance')
    yf_logger.addHandler(error_log)

    try:
        # auto_adjust=False keeps the 'Adj Close' column
        data = yf.Ticker(ticker).history(
            start=start.isoformat(),
            end=yf_end.isoformat(),
            auto_adjust=False,
            actions=False,
            timeout=timeout,
            raise_errors=True
        )
    except YFRateLimitError as e:
        raise NetworkError(f"Failed to fetch prices for {ticker}: {e}") from e
    except YFTzMissingError as e:
        if error_log.messages:
            raise NetworkError(
                f"Failed to fetch prices for {ticker}: {error_log.messages[-1]}"
            ) from e
        raise DataUnavailableError(
            f"No price data for {ticker} between {start} and {end}: {e}"
        ) from e
    except YFException as e:
        raise DataUnavailableError(
            f"No price data for {ticker} between {start} and {end}: {e}"
        ) from e
    except Exception as e:
        raise NetworkError(f"Failed to fetch prices for {ticker}: {str(e)}") from e
    finally:
        yf_logger.removeHandler(error_log)

    if data is None or len(data) == 0:
        raise DataUnavailableError(
            f"No price data for {ticker} between {start} and {end}"
        )

    # Keep yfinance field names - normalization happens later
    rows = []
    for date_idx, row in data.iterrows():
        row_dict = {'Date': date_idx.strftime('%Y-%m-%d')}

        for field in ['Open', 'High', 'Low', 'Close', 'Adj Close', 'Volume']:
            if field in data.columns and pd.notna(row[field]):
                row_dict[field] = float(row[field]) if field != 'Volume' else int(row[field])

        rows.append(row_dict)

    return rows


def fetch_adjusted_close_series(
    symbols: Sequence[str],
    start: date,
    end: date,
    timeout: int = DEFAULT_TIMEOUT_S,
    retries: int = 2,
    backoff_seconds: float = 1.0
) -> Dict[str, pd.Series]:
    """
    Fetch one adjusted close series per symbol.

    Symbols are fetched one after another; every symbol must succeed.
    NetworkError is retried with exponential backoff, DataUnavailableError
    is not.

    Args:
        symbols: Provider ticker symbols
        start: Start date (inclusive)
        end: End date (inclusive)
        timeout: Per-request timeout in seconds
        retries: Extra attempts after a NetworkError
        backoff_seconds: Initial delay between attempts (doubles each retry)

    Returns:
        Dictionary mapping symbol to a date-indexed adjusted close Series

    Raises:
        DataUnavailableError: If any symbol has no adjusted close data
        NetworkError: If any symbol still fails after all retries
    """
    series_by_symbol = {}

    for symbol in symbols:
        raw_rows = _fetch_with_retry(symbol, start, end, timeout, retries, backoff_seconds)
        series = to_price_series(raw_rows, symbol=symbol)

        if series.empty:
            raise DataUnavailableError(
                f"No adjusted close prices for {symbol} between {start} and {end}"
            )

        validate_price_series(series)
        series_by_symbol[symbol] = series
        logger.info(f"Fetched {len(series)} adjusted closes for {symbol}")

    return series_by_symbol


def _fetch_with_retry(
    symbol: str,
    start: date,
    end: date,
    timeout: int,
    retries: int,
    backoff_seconds: float
) -> List[Dict[str, Any]]:
    """Call fetch_prices_window, retrying only on NetworkError."""
    attempt = 0
    delay = backoff_seconds

    while True:
        try:
            return fetch_prices_window(symbol, start, end, timeout=timeout)
        except NetworkError as e:
            if attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                f"Network error fetching {symbol} (attempt {attempt} of {retries + 1}): {e}. "
                f"Retrying in {delay:.1f}s"
            )
            time.sleep(delay)
            delay *= 2


def _validate_date_range(start: date, end: date) -> None:
    """
    Validate date range parameters.

    Args:
        start: Start date
        end: End date

    Raises:
        YFinanceError: If validation fails
    """
    if start > end:
        raise YFinanceError(f"start date ({start}) must be <= end date ({end})")

    # Don't allow future dates
    today = date.today()
    if start > today or end > today:
        raise YFinanceError("Future dates not allowed for historical data")

    # Reasonable range limit (prevent excessive API calls)
    max_days = 365 * 10
    if (end - start).days > max_days:
        raise YFinanceError(f"Date range too long (max {max_days} days)")


def _validate_ticker(ticker: str) -> None:
    """
    Basic ticker validation.

    Args:
        ticker: Ticker symbol

    Raises:
        YFinanceError: If ticker is invalid
    """
    if not ticker or not isinstance(ticker, str):
        raise YFinanceError("Ticker must be non-empty string")

    if len(ticker) > 12:
        raise YFinanceError("Ticker too long (max 12 characters)")

    # Alphanumeric plus exchange suffix and index prefix characters
    allowed_chars = set('ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789.-^=')
    if not set(ticker.upper()).issubset(allowed_chars):
        raise YFinanceError(f"Ticker contains invalid characters: {ticker}")
