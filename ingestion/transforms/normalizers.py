"""
Normalizers for transforming provider data to canonical shape.
Pure functions - no IO, network, or side effects.
Minimal normalization - only when necessary.
"""

import pandas as pd
from datetime import date
from typing import Dict, Any, List


def to_price_series(raw_rows: List[Dict[str, Any]], *, symbol: str) -> pd.Series:
    """
    Transform provider-native price rows to a PriceSeries.

    Minimal normalization:
    - Date strings to timestamps (required for time alignment)
    - Keep only the adjusted close (rows without one are skipped)
    - Deduplication by date (keep last to handle corrections)
    - Chronological ordering

    Args:
        raw_rows: List of provider-specific price dictionaries
        symbol: Provider ticker symbol, used as the series name

    Returns:
        Series of adjusted closes indexed by a DatetimeIndex named 'Date'
    """
    closes = {}

    for raw in raw_rows:
        if 'Adj Close' not in raw:
            continue

        date_val = raw.get('Date', '')
        if isinstance(date_val, str):
            row_date = date.fromisoformat(date_val)
        else:
            row_date = date_val

        # Later rows overwrite earlier ones for the same date
        closes[pd.Timestamp(row_date)] = float(raw['Adj Close'])

    series = pd.Series(closes, name=symbol, dtype='float64')
    series.index = pd.DatetimeIndex(series.index, name='Date')

    return series.sort_index()
