"""
Filename and path policy for exported artifacts.
Deterministic path generation - same config, same file names.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, Optional


TABLE_ARTIFACTS = (
    'stock_prices',
    'monthly_returns',
    'sharpe_ratios',
    'volatility',
    'correlation_matrix',
    'portfolio_summary',
    'monthly_return_matrix',
    'portfolio_returns',
    'cumulative_returns',
    'asset_summary',
    'max_drawdowns',
)

CHART_ARTIFACTS = (
    'cumulative_returns_chart',
    'correlation_heatmap',
)

TABLE_EXTENSIONS = {
    'xlsx': '.xlsx',
    'csv': '.csv',
}


class PathPolicyError(Exception):
    """Raised when path policy validation fails."""
    pass


def create_output_paths(
    output_dir: Path,
    file_format: str = 'xlsx',
    run_label: Optional[str] = None,
    tables: Iterable[str] = TABLE_ARTIFACTS,
    charts: Iterable[str] = CHART_ARTIFACTS
) -> Dict[str, Path]:
    """
    Create all artifact paths for one pipeline run.

    Args:
        output_dir: Base output directory
        file_format: Table format ('xlsx' or 'csv')
        run_label: Optional subdirectory name (e.g. a date label)
        tables: Table artifact names
        charts: Chart artifact names

    Returns:
        Dictionary mapping artifact name to file path, plus 'output_dir'

    Raises:
        PathPolicyError: If format or names are invalid
    """
    if file_format not in TABLE_EXTENSIONS:
        raise PathPolicyError(
            f"Unknown table format: {file_format} (expected one of {', '.join(TABLE_EXTENSIONS)})"
        )

    base_dir = Path(output_dir)
    if run_label:
        base_dir = base_dir / normalize_artifact_name(run_label)

    extension = TABLE_EXTENSIONS[file_format]

    paths = {'output_dir': base_dir}
    for name in tables:
        paths[name] = base_dir / f'{normalize_artifact_name(name)}{extension}'
    for name in charts:
        paths[name] = base_dir / f'{normalize_artifact_name(name)}.png'

    return paths


def normalize_artifact_name(name: str) -> str:
    """
    Normalize an artifact name for filesystem safety.

    Args:
        name: Raw artifact name

    Returns:
        Lowercase name with unsafe characters replaced by underscores

    Raises:
        PathPolicyError: If name is empty or too long
    """
    if not name or not isinstance(name, str):
        raise PathPolicyError("Artifact name cannot be empty")

    if len(name) > 64:
        raise PathPolicyError(f"Artifact name too long (max 64 chars): {name}")

    # Allow: letters, numbers, underscores, hyphens
    return re.sub(r'[^a-z0-9_-]', '_', name.lower())
