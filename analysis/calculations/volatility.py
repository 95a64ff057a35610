"""
Volatility calculation utilities.
Pure functions for sample standard deviation and annualized volatility.
"""

import math
import numpy as np
import pandas as pd
from typing import Sequence


MONTHS_PER_YEAR = 12

# Standard deviations at or below this are treated as zero variance
ZERO_VARIANCE_TOL = 1e-12


class UndefinedStatisticError(Exception):
    """Raised when a statistic is undefined for the given data (e.g. zero variance)."""
    pass


def sample_std(values: Sequence[float], name: str = 'series') -> float:
    """
    Sample standard deviation (ddof=1) of a return series.

    Args:
        values: Returns in chronological order
        name: Column or portfolio name for error messages

    Returns:
        Sample standard deviation

    Raises:
        UndefinedStatisticError: If fewer than 2 values or any value is NaN/inf
    """
    values_array = np.asarray(values, dtype=float)

    if len(values_array) < 2:
        raise UndefinedStatisticError(
            f"{name}: need at least 2 returns for standard deviation, have {len(values_array)}"
        )

    if not np.all(np.isfinite(values_array)):
        raise UndefinedStatisticError(f"{name}: NaN or infinite values not allowed in returns")

    return float(np.std(values_array, ddof=1))


def annualize_volatility(std_dev: float, periods_per_year: int = MONTHS_PER_YEAR) -> float:
    """
    Scale a per-period standard deviation to annual.

    Formula: σ_annual = σ_period × √periods_per_year
    """
    return std_dev * math.sqrt(periods_per_year)


def annualized_volatility(
    returns: pd.DataFrame,
    periods_per_year: int = MONTHS_PER_YEAR
) -> pd.Series:
    """
    Annualized volatility for each column of a return table.

    Formula: σ = std(returns, ddof=1) × √periods_per_year

    Args:
        returns: Periodic simple returns, one column per asset
        periods_per_year: Annualization factor (12 for monthly returns)

    Returns:
        Series indexed by column name (empty if there are no returns)

    Raises:
        UndefinedStatisticError: If a column has fewer than 2 returns
    """
    if returns.empty:
        return pd.Series(dtype='float64', name='Annualized Volatility')

    vols = {
        column: annualize_volatility(sample_std(returns[column], name=column), periods_per_year)
        for column in returns.columns
    }

    return pd.Series(vols, name='Annualized Volatility', dtype='float64')
