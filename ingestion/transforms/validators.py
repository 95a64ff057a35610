"""
Core validators for price series and price tables.
Pure functions - no IO, network, or side effects.
"""

import pandas as pd


class ValidationError(ValueError):
    """Raised when data validation fails."""
    pass


def validate_price_series(series: pd.Series) -> None:
    """
    Validate the structure of a single PriceSeries.

    Price values are checked when returns are computed, so a bad price
    surfaces as InvalidPriceError naming the asset and date.

    Args:
        series: Adjusted close prices indexed by date

    Raises:
        ValidationError: If validation fails
    """
    name = series.name

    if not isinstance(series.index, pd.DatetimeIndex):
        raise ValidationError(f"{name}: index must be DatetimeIndex, got {type(series.index).__name__}")

    check_price_date_monotonicity(series.index, name=name)

    for row_date, value in series.items():
        if not isinstance(value, (int, float)):
            raise ValidationError(f"{name} {row_date.date()}: price must be numeric, got {type(value)}")


def check_price_date_monotonicity(dates: pd.DatetimeIndex, name: str = '') -> None:
    """
    Check that dates are strictly increasing.

    Args:
        dates: Index of observation dates
        name: Series or table name for error messages

    Raises:
        ValidationError: If dates are not monotonic or have duplicates
    """
    if len(dates) <= 1:
        return

    if dates.has_duplicates:
        raise ValidationError(f"Duplicate date found for {name}")

    if not dates.is_monotonic_increasing:
        raise ValidationError(f"{name} dates not monotonic")
