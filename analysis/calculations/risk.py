"""
Risk/return statistics over a periodic return table.
Pure functions: annualized mean return, Sharpe ratio, correlation matrix.
"""

import math
import numpy as np
import pandas as pd

from analysis.calculations.volatility import (
    MONTHS_PER_YEAR,
    ZERO_VARIANCE_TOL,
    UndefinedStatisticError,
    sample_std,
)


def annualized_returns(
    returns: pd.DataFrame,
    periods_per_year: int = MONTHS_PER_YEAR
) -> pd.Series:
    """
    Arithmetic annualized mean return per column (mean × periods_per_year).

    Args:
        returns: Periodic simple returns, one column per asset
        periods_per_year: Annualization factor

    Returns:
        Series indexed by column name (empty if there are no returns)
    """
    if returns.empty:
        return pd.Series(dtype='float64', name='Annualized Return')

    return (returns.mean() * periods_per_year).rename('Annualized Return')


def sharpe_ratio(
    returns: pd.Series,
    risk_free_rate: float = 0.0,
    periods_per_year: int = MONTHS_PER_YEAR
) -> float:
    """
    Annualized Sharpe ratio of one return series.

    Formula: S = (mean(R) - r_f) / std(R) × √periods_per_year

    Args:
        returns: Periodic simple returns
        risk_free_rate: Risk-free rate per period (same frequency as returns)
        periods_per_year: Annualization factor

    Returns:
        Annualized Sharpe ratio

    Raises:
        UndefinedStatisticError: If the series has zero variance or < 2 values
    """
    name = returns.name if returns.name is not None else 'series'
    std_dev = sample_std(returns, name=name)

    if std_dev <= ZERO_VARIANCE_TOL:
        raise UndefinedStatisticError(
            f"Sharpe ratio undefined for {name}: returns have zero variance"
        )

    excess = float(np.mean(returns)) - risk_free_rate
    return excess / std_dev * math.sqrt(periods_per_year)


def sharpe_ratios(
    returns: pd.DataFrame,
    risk_free_rate: float = 0.0,
    periods_per_year: int = MONTHS_PER_YEAR
) -> pd.Series:
    """
    Annualized Sharpe ratio for every column of a return table.

    Args:
        returns: Periodic simple returns, one column per asset
        risk_free_rate: Risk-free rate per period
        periods_per_year: Annualization factor

    Returns:
        Series indexed by column name (empty if there are no returns)

    Raises:
        UndefinedStatisticError: If any column has zero variance
    """
    if returns.empty:
        return pd.Series(dtype='float64', name='Sharpe Ratio')

    ratios = {
        column: sharpe_ratio(returns[column], risk_free_rate, periods_per_year)
        for column in returns.columns
    }

    return pd.Series(ratios, name='Sharpe Ratio', dtype='float64')


def correlation_matrix(returns: pd.DataFrame) -> pd.DataFrame:
    """
    Pairwise Pearson correlation of all columns.

    The result is symmetric with a diagonal of exactly 1.0.

    Args:
        returns: Periodic simple returns, one column per asset

    Returns:
        Square DataFrame indexed and labelled by column name
        (empty if there are no returns)

    Raises:
        UndefinedStatisticError: If a column has zero variance or < 2 values
    """
    if returns.empty:
        return pd.DataFrame(dtype='float64')

    for column in returns.columns:
        if sample_std(returns[column], name=column) <= ZERO_VARIANCE_TOL:
            raise UndefinedStatisticError(
                f"Correlation undefined for {column}: returns have zero variance"
            )

    corr = returns.corr(method='pearson').to_numpy(copy=True)

    # Pin exact symmetry and unit diagonal against float round-off
    corr = (corr + corr.T) / 2
    np.fill_diagonal(corr, 1.0)

    return pd.DataFrame(corr, index=returns.columns, columns=returns.columns)
