"""
Tests for core validators - pure functions for data validation.
"""

import pytest
import pandas as pd

from ingestion.transforms.validators import (
    validate_price_series,
    check_price_date_monotonicity,
    ValidationError
)


def _series(values, dates=None, name='HSBA.L'):
    if dates is None:
        dates = pd.bdate_range('2024-01-15', periods=len(values))
    return pd.Series(values, index=pd.DatetimeIndex(dates, name='Date'), name=name, dtype='float64')


class TestValidatePriceSeries:
    """Tests for validate_price_series function."""

    def test_valid_series(self):
        """Positive, finite, increasing-date series passes."""
        validate_price_series(_series([100.0, 101.5, 99.8]))

    def test_price_values_not_checked(self):
        """Zero, negative and infinite prices are left to the return calculator."""
        validate_price_series(_series([100.0, 0.0, -1.0, float('inf')]))

    def test_non_datetime_index(self):
        """Integer-indexed series are rejected."""
        series = pd.Series([100.0, 101.0], name='HSBA.L')
        with pytest.raises(ValidationError, match="DatetimeIndex"):
            validate_price_series(series)

    def test_non_numeric_price(self):
        """Error message points at the offending symbol and date."""
        series = pd.Series(
            [100.0, 'n/a'],
            index=pd.DatetimeIndex(['2024-01-15', '2024-01-16'], name='Date'),
            name='BARC.L'
        )
        with pytest.raises(ValidationError, match="BARC.L 2024-01-16: price must be numeric"):
            validate_price_series(series)

    def test_unsorted_dates(self):
        with pytest.raises(ValidationError, match="not monotonic"):
            validate_price_series(_series([100.0, 101.0], dates=['2024-01-16', '2024-01-15']))


class TestDateMonotonicity:
    """Tests for check_price_date_monotonicity."""

    def test_increasing(self):
        """Strictly increasing dates pass."""
        check_price_date_monotonicity(pd.DatetimeIndex(['2024-01-15', '2024-01-16']))

    def test_single_and_empty(self):
        """Trivial indices pass."""
        check_price_date_monotonicity(pd.DatetimeIndex([]))
        check_price_date_monotonicity(pd.DatetimeIndex(['2024-01-15']))

    def test_duplicates(self):
        """Duplicate dates are rejected."""
        with pytest.raises(ValidationError, match="Duplicate date"):
            check_price_date_monotonicity(
                pd.DatetimeIndex(['2024-01-15', '2024-01-15']), name='HSBA.L'
            )

    def test_decreasing(self):
        """Out-of-order dates are rejected."""
        with pytest.raises(ValidationError, match="not monotonic"):
            check_price_date_monotonicity(pd.DatetimeIndex(['2024-01-16', '2024-01-15']))
