"""
Drawdown and recovery calculation utilities.
Pure functions for maximum drawdown analysis of wealth indices.
"""

import numpy as np
import pandas as pd
from typing import Dict, Union, Optional


class DrawdownError(Exception):
    """Raised when drawdown calculation fails."""
    pass


def drawdown_stats(wealth: pd.Series) -> Dict[str, Union[float, pd.Timestamp, int, None]]:
    """
    Calculate maximum drawdown statistics for a wealth index.

    Finds the largest peak-to-trough decline and recovery information.

    Args:
        wealth: Date-indexed wealth index (or prices) in chronological order

    Returns:
        Dictionary with drawdown statistics:
        - max_drawdown_pct: Largest decline as decimal (negative or 0;
          -1.0 when wealth reaches zero or below, e.g. a short position)
        - peak_date: Date of peak before max drawdown
        - trough_date: Date of lowest point
        - recovery_date: Date when wealth exceeded peak (None if no recovery)
        - drawdown_periods: Periods from peak to trough
        - recovery_periods: Periods from trough to recovery (None if no recovery)

    Raises:
        DrawdownError: If insufficient data, non-finite values or a
            non-positive starting value
    """
    if len(wealth) < 2:
        raise DrawdownError(f"{wealth.name}: insufficient data, need at least 2 points")

    values = wealth.to_numpy(dtype=float)

    if not np.all(np.isfinite(values)):
        raise DrawdownError(f"{wealth.name}: non-finite values not allowed")

    if values[0] <= 0:
        raise DrawdownError(f"{wealth.name}: starting value must be positive, got {values[0]}")

    dates = wealth.index

    # Wealth at or below zero is a total loss with no recovery
    wiped_out = np.flatnonzero(values <= 0)
    if len(wiped_out) > 0:
        trough_idx = int(wiped_out[0])
        peak_idx = int(np.argmax(values[:trough_idx]))
        return {
            'max_drawdown_pct': -1.0,
            'peak_date': dates[peak_idx],
            'trough_date': dates[trough_idx],
            'recovery_date': None,
            'drawdown_periods': trough_idx - peak_idx,
            'recovery_periods': None
        }

    # Track running maximum (peak)
    running_max = np.maximum.accumulate(values)

    drawdowns = (values / running_max) - 1

    trough_idx = int(np.argmin(drawdowns))
    max_drawdown_pct = float(drawdowns[trough_idx])

    # Peak is the first point reaching the running max in force at the trough
    peak_value = running_max[trough_idx]
    peak_idx = int(np.argmax(values[:trough_idx + 1] >= peak_value))

    recovery_idx: Optional[int] = None

    # Constant or ever-rising series: recovery is immediate
    if abs(max_drawdown_pct) < 1e-10:
        recovery_idx = peak_idx
    else:
        for i in range(trough_idx + 1, len(values)):
            if values[i] > peak_value:
                recovery_idx = i
                break

    return {
        'max_drawdown_pct': max_drawdown_pct,
        'peak_date': dates[peak_idx],
        'trough_date': dates[trough_idx],
        'recovery_date': dates[recovery_idx] if recovery_idx is not None else None,
        'drawdown_periods': trough_idx - peak_idx,
        'recovery_periods': (recovery_idx - trough_idx) if recovery_idx is not None else None
    }


def max_drawdowns(wealth: pd.DataFrame) -> pd.DataFrame:
    """
    Drawdown statistics for every column of a wealth table.

    Args:
        wealth: Date-indexed wealth indices, one column per asset or portfolio

    Returns:
        DataFrame indexed by column name with one row of drawdown_stats each
        (empty if the wealth table has fewer than 2 rows)
    """
    if len(wealth) < 2:
        return pd.DataFrame(columns=[
            'max_drawdown_pct', 'peak_date', 'trough_date',
            'recovery_date', 'drawdown_periods', 'recovery_periods'
        ])

    rows = {column: drawdown_stats(wealth[column]) for column in wealth.columns}

    table = pd.DataFrame.from_dict(rows, orient='index')
    table.index.name = 'Asset'

    return table
