"""
Chart rendering to image files.
Non-interactive: figures are saved and closed, never shown.
"""

import logging
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
import pandas as pd
from pathlib import Path
from typing import Any, Dict

from reports.atomic_writer import write_file_atomic


logger = logging.getLogger(__name__)

FIGURE_DPI = 150


def render_cumulative_returns(
    wealth: pd.DataFrame,
    output_path: Path,
    title: str = 'Cumulative Returns (Growth of 1)'
) -> Dict[str, Any]:
    """
    Line chart of wealth indices, one line per column.

    Args:
        wealth: Date-indexed wealth table starting at 1.0
        output_path: Destination PNG path
        title: Chart title

    Returns:
        Write result dictionary ('status' is 'completed' or 'failed')
    """
    fig, ax = plt.subplots(figsize=(12, 6))
    try:
        for column in wealth.columns:
            ax.plot(wealth.index, wealth[column], label=str(column), linewidth=1.8)

        ax.axhline(1.0, color='grey', linewidth=0.8, linestyle='--')
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xlabel('Date')
        ax.set_ylabel('Wealth index')
        if len(wealth.columns) > 0:
            ax.legend(loc='best')
        ax.grid(True, alpha=0.3)
        fig.tight_layout()

        result = write_file_atomic(Path(output_path), lambda path: fig.savefig(path, dpi=FIGURE_DPI, format='png'))
    finally:
        plt.close(fig)

    _log_result('cumulative returns chart', result)
    return result


def render_correlation_heatmap(
    corr: pd.DataFrame,
    output_path: Path,
    title: str = 'Correlation of Monthly Returns'
) -> Dict[str, Any]:
    """
    Colour-scaled, annotated heatmap of a correlation matrix.

    Args:
        corr: Square correlation matrix
        output_path: Destination PNG path
        title: Chart title

    Returns:
        Write result dictionary ('status' is 'completed' or 'failed')
    """
    fig, ax = plt.subplots(figsize=(8, 7))
    try:
        if not corr.empty:
            sns.heatmap(
                corr,
                annot=True,
                fmt='.2f',
                cmap='coolwarm',
                vmin=-1,
                vmax=1,
                center=0,
                square=True,
                cbar_kws={'shrink': .8},
                ax=ax
            )
        ax.set_title(title, fontsize=14, fontweight='bold')
        fig.tight_layout()

        result = write_file_atomic(Path(output_path), lambda path: fig.savefig(path, dpi=FIGURE_DPI, format='png'))
    finally:
        plt.close(fig)

    _log_result('correlation heatmap', result)
    return result


def _log_result(label: str, result: Dict[str, Any]) -> None:
    if result['status'] == 'completed':
        logger.info(f"Rendered {label} to {result['output_path']}")
    else:
        logger.error(f"Failed to render {label}: {result['error']}")
