"""
Price table assembly.
Aligns per-symbol price series on date and applies human-readable labels.
Pure functions - no IO, network, or side effects.
"""

import pandas as pd
from typing import Dict, Mapping

from ingestion.providers.yfinance_adapter import DataUnavailableError
from ingestion.transforms.validators import check_price_date_monotonicity


def assemble_price_table(
    series_by_symbol: Mapping[str, pd.Series],
    labels: Mapping[str, str]
) -> pd.DataFrame:
    """
    Build a PriceTable from per-symbol price series.

    Columns are selected by symbol name and renamed through ``labels``, so the
    result never depends on the order the series were fetched in. Dates are
    inner-joined: a row survives only if every series has a value on it.

    Args:
        series_by_symbol: Mapping of provider symbol to adjusted close Series
        labels: Ordered mapping of provider symbol to column label

    Returns:
        DataFrame indexed by 'Date' with one column per label, in label order.
        Disjoint date ranges give a zero-row table.

    Raises:
        DataUnavailableError: If a labelled symbol has no series
    """
    missing = [symbol for symbol in labels if symbol not in series_by_symbol]
    if missing:
        raise DataUnavailableError(f"No price series for symbols: {', '.join(missing)}")

    columns: Dict[str, pd.Series] = {
        label: series_by_symbol[symbol].rename(label)
        for symbol, label in labels.items()
    }

    table = pd.concat(columns.values(), axis=1, join='inner')
    table = table.dropna(how='any').sort_index()
    table.index = pd.DatetimeIndex(table.index, name='Date')

    check_price_date_monotonicity(table.index, name='price table')

    return table[list(labels.values())]
