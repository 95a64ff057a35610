"""
Fixed-weight portfolio evaluation.
Applies weight vectors to a periodic return table and summarizes the result.
"""

import logging
import warnings
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from analysis.calculations.volatility import (
    MONTHS_PER_YEAR,
    ZERO_VARIANCE_TOL,
    UndefinedStatisticError,
    annualize_volatility,
    sample_std,
)


logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-6

SUMMARY_COLUMNS = ['Annual Return', 'Annual Volatility', 'Sharpe Ratio']


class PortfolioError(Exception):
    """Raised when portfolio evaluation fails."""
    pass


class DimensionMismatchError(PortfolioError):
    """Raised when a weight vector does not match the number of assets."""
    pass


class WeightsNotNormalizedWarning(UserWarning):
    """Issued when portfolio weights do not sum to 1."""
    pass


@dataclass(frozen=True)
class PortfolioWeights:
    """Named, ordered weight vector (same order as the return table columns)."""
    name: str
    weights: Tuple[float, ...]

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise ValueError("portfolio name must be non-empty string")
        # Accept any sequence, store as tuple of floats
        object.__setattr__(self, 'weights', tuple(float(w) for w in self.weights))

    @property
    def total(self) -> float:
        return float(sum(self.weights))


@dataclass(frozen=True)
class PortfolioStatistics:
    """Annualized summary statistics for one portfolio."""
    name: str
    annual_return: float
    annual_volatility: float
    sharpe_ratio: float

    def as_row(self) -> Dict[str, float]:
        return {
            'Annual Return': self.annual_return,
            'Annual Volatility': self.annual_volatility,
            'Sharpe Ratio': self.sharpe_ratio,
        }


def portfolio_returns(returns: pd.DataFrame, portfolio: PortfolioWeights) -> pd.Series:
    """
    Periodic portfolio returns as the row-wise dot product with the weights.

    Args:
        returns: Periodic simple returns, one column per asset
        portfolio: Weight vector in column order

    Returns:
        Series with one return per row of ``returns``, named after the portfolio

    Raises:
        DimensionMismatchError: If the weight count differs from the column count
    """
    n_assets = returns.shape[1]
    if len(portfolio.weights) != n_assets:
        raise DimensionMismatchError(
            f"Portfolio '{portfolio.name}' has {len(portfolio.weights)} weights "
            f"but the return table has {n_assets} assets ({', '.join(map(str, returns.columns))})"
        )

    check_weights_normalized(portfolio)

    values = returns.to_numpy(dtype=float) @ np.asarray(portfolio.weights, dtype=float)

    return pd.Series(values, index=returns.index, name=portfolio.name)


def check_weights_normalized(portfolio: PortfolioWeights) -> bool:
    """
    Warn when weights do not sum to 1 within WEIGHT_SUM_TOLERANCE.

    Returns:
        True if the weights sum to 1, False otherwise
    """
    if abs(portfolio.total - 1.0) <= WEIGHT_SUM_TOLERANCE:
        return True

    message = f"Portfolio '{portfolio.name}' weights sum to {portfolio.total:.6f}, not 1"
    logger.warning(message)
    warnings.warn(message, WeightsNotNormalizedWarning)
    return False


def evaluate_portfolio(
    returns: pd.DataFrame,
    portfolio: PortfolioWeights,
    risk_free_rate: float = 0.0,
    periods_per_year: int = MONTHS_PER_YEAR
) -> PortfolioStatistics:
    """
    Annualized return, volatility and Sharpe ratio of a fixed-weight portfolio.

    Formulas:
        annual_return     = mean(R_p) × periods_per_year   (arithmetic)
        annual_volatility = std(R_p, ddof=1) × √periods_per_year
        sharpe_ratio      = (annual_return - r_f × periods_per_year) / annual_volatility

    Args:
        returns: Periodic simple returns, one column per asset
        portfolio: Weight vector in column order
        risk_free_rate: Risk-free rate per period
        periods_per_year: Annualization factor

    Returns:
        PortfolioStatistics (unrounded)

    Raises:
        DimensionMismatchError: If the weight count differs from the column count
        UndefinedStatisticError: If portfolio returns have zero variance or < 2 values
    """
    series = portfolio_returns(returns, portfolio)

    std_dev = sample_std(series, name=portfolio.name)
    if std_dev <= ZERO_VARIANCE_TOL:
        raise UndefinedStatisticError(
            f"Sharpe ratio undefined for portfolio '{portfolio.name}': returns have zero variance"
        )

    annual_return = float(series.mean()) * periods_per_year
    annual_volatility = annualize_volatility(std_dev, periods_per_year)
    sharpe = (annual_return - risk_free_rate * periods_per_year) / annual_volatility

    return PortfolioStatistics(
        name=portfolio.name,
        annual_return=annual_return,
        annual_volatility=annual_volatility,
        sharpe_ratio=sharpe
    )


def portfolio_return_table(
    returns: pd.DataFrame,
    portfolios: Iterable[PortfolioWeights]
) -> pd.DataFrame:
    """Portfolio return series side by side, one column per portfolio."""
    series = [portfolio_returns(returns, p) for p in portfolios]

    if not series:
        return pd.DataFrame(index=returns.index)

    return pd.concat(series, axis=1)


def portfolio_summary(
    returns: pd.DataFrame,
    portfolios: Iterable[PortfolioWeights],
    risk_free_rate: float = 0.0,
    periods_per_year: int = MONTHS_PER_YEAR,
    decimals: int = 4
) -> pd.DataFrame:
    """
    Summary table with one row per portfolio.

    Values are rounded to ``decimals`` places for reporting only; callers that
    need exact figures should use evaluate_portfolio.

    Returns:
        DataFrame indexed by 'Portfolio' with SUMMARY_COLUMNS
        (zero rows if ``returns`` has no rows)
    """
    portfolios = list(portfolios)

    if returns.empty:
        # Still enforce weight dimensions on an empty table
        for p in portfolios:
            portfolio_returns(returns, p)
        summary = pd.DataFrame(columns=SUMMARY_COLUMNS, dtype='float64')
        summary.index.name = 'Portfolio'
        return summary

    stats = [evaluate_portfolio(returns, p, risk_free_rate, periods_per_year) for p in portfolios]

    summary = pd.DataFrame(
        [s.as_row() for s in stats],
        index=pd.Index([s.name for s in stats], name='Portfolio'),
        columns=SUMMARY_COLUMNS
    )

    return summary.round(decimals)
