"""
Returns calculation utilities.
Pure functions for monthly simple returns and wealth indices.
"""

import numpy as np
import pandas as pd


class ReturnsError(Exception):
    """Raised when returns calculation fails."""
    pass


class InvalidPriceError(ReturnsError):
    """Raised when a zero, negative, missing or non-finite price breaks a return."""
    pass


def month_end_prices(price_table: pd.DataFrame) -> pd.DataFrame:
    """
    Sample a daily PriceTable at month-end.

    Takes the last observed price in each calendar month. Months with no
    observation at all are dropped rather than filled.

    Args:
        price_table: Date-indexed table of prices, one column per asset

    Returns:
        Month-end indexed table of prices

    Raises:
        InvalidPriceError: If any price is zero, negative, missing or non-finite
    """
    _check_prices(price_table)

    if price_table.empty:
        return price_table.iloc[0:0].copy()

    sampled = price_table.resample('ME').last()
    sampled = sampled.dropna(how='any')
    sampled.index.name = 'Date'

    return sampled


def monthly_returns(price_table: pd.DataFrame) -> pd.DataFrame:
    """
    Convert a daily PriceTable into a MonthlyReturnTable.

    Each cell is (price[t] / price[t-1]) - 1 between consecutive month-end
    observations. The first month has no prior price and is dropped.

    Args:
        price_table: Date-indexed table of prices, one column per asset

    Returns:
        Month-end indexed table of simple returns with the same columns.
        An empty price table gives an empty return table.

    Raises:
        InvalidPriceError: If any price is zero, negative, missing or non-finite

    Example:
        Month-end closes 100, 110, 99 -> returns 0.10, -0.10
    """
    prices = month_end_prices(price_table)

    if len(prices) < 2:
        empty = pd.DataFrame(
            columns=price_table.columns,
            index=pd.DatetimeIndex([], name='Date'),
            dtype='float64'
        )
        return empty

    returns = prices / prices.shift(1) - 1
    returns = returns.iloc[1:].dropna(how='any')

    return returns


def wealth_index(returns: pd.DataFrame) -> pd.DataFrame:
    """
    Cumulative growth of 1 unit invested at the start of the return window.

    Formula: W_t = prod_{s<=t} (1 + R_s), with W_0 = 1

    A leading row of 1.0 is placed at the month-end before the first return,
    so every column starts at exactly 1.

    Args:
        returns: Month-end indexed simple returns (table or single series)

    Returns:
        Wealth index with one more row than ``returns`` (empty if no returns)
    """
    if len(returns) == 0:
        return returns.copy()

    wealth = (1 + returns).cumprod()

    start = returns.index[0] - pd.offsets.MonthEnd(1)
    if isinstance(returns, pd.Series):
        first = pd.Series([1.0], index=[start], name=returns.name)
    else:
        first = pd.DataFrame([[1.0] * returns.shape[1]], index=[start], columns=returns.columns)

    wealth = pd.concat([first, wealth])
    wealth.index = pd.DatetimeIndex(wealth.index, name='Date')

    return wealth


def _check_prices(price_table: pd.DataFrame) -> None:
    """Raise InvalidPriceError naming the first bad column and date."""
    values = price_table.to_numpy(dtype=float)

    bad = ~np.isfinite(values) | (values <= 0)
    if not bad.any():
        return

    row_idx, col_idx = np.argwhere(bad)[0]
    column = price_table.columns[col_idx]
    row_date = price_table.index[row_idx]
    value = values[row_idx, col_idx]

    raise InvalidPriceError(
        f"Invalid price for {column} on {pd.Timestamp(row_date).date()}: {value} "
        f"(prices must be positive and finite)"
    )
