"""
Spreadsheet export for pipeline tables.
One file per table; row labels are written as an explicit first column.
"""

import logging
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from reports.atomic_writer import write_file_atomic


logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Raised when a table cannot be prepared for export."""
    pass


def frame_for_export(table: Any, index_label: str) -> pd.DataFrame:
    """
    Turn a table or series into a flat frame with the row labels as a column.

    Args:
        table: DataFrame or Series to export
        index_label: Column name for the row labels if the index is unnamed

    Returns:
        DataFrame with a plain RangeIndex

    Raises:
        ExportError: If the object is not a DataFrame or Series
    """
    if isinstance(table, pd.Series):
        table = table.to_frame()

    if not isinstance(table, pd.DataFrame):
        raise ExportError(f"Cannot export {type(table).__name__}; expected DataFrame or Series")

    frame = table.copy()
    if frame.index.name is None:
        frame.index.name = index_label

    frame = frame.reset_index()

    # Spreadsheet cells hold plain dates, not timestamps
    for column in frame.columns:
        if pd.api.types.is_datetime64_any_dtype(frame[column]):
            frame[column] = frame[column].dt.date

    return frame


def export_table(
    table: Any,
    output_path: Path,
    file_format: str = 'xlsx',
    sheet_name: str = 'data',
    index_label: str = 'Label'
) -> Dict[str, Any]:
    """
    Write one table to a spreadsheet file atomically.

    Args:
        table: DataFrame or Series to write
        output_path: Destination file
        file_format: 'xlsx' (openpyxl) or 'csv'
        sheet_name: Worksheet name for xlsx output
        index_label: Column name for unnamed row labels

    Returns:
        Write result dictionary ('status' is 'completed' or 'failed')
    """
    try:
        frame = frame_for_export(table, index_label)
    except ExportError as e:
        return {'status': 'failed', 'error': str(e), 'output_path': str(output_path), 'bytes_written': 0}

    if file_format == 'xlsx':
        def write_fn(path: Path) -> None:
            with pd.ExcelWriter(path, engine='openpyxl') as writer:
                frame.to_excel(writer, sheet_name=sheet_name[:31], index=False)
    elif file_format == 'csv':
        def write_fn(path: Path) -> None:
            frame.to_csv(path, index=False)
    else:
        return {
            'status': 'failed',
            'error': f"Unknown table format: {file_format}",
            'output_path': str(output_path),
            'bytes_written': 0
        }

    return write_file_atomic(Path(output_path), write_fn)


def export_tables(
    tables: Mapping[str, Any],
    paths: Mapping[str, Path],
    file_format: str = 'xlsx',
    index_labels: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Write every table to its own file.

    Files are independent: a failure on one does not stop the others.

    Args:
        tables: Mapping of artifact name to DataFrame/Series
        paths: Mapping of artifact name to destination path
        file_format: 'xlsx' or 'csv'
        index_labels: Optional per-artifact row label column names

    Returns:
        Dictionary with overall status, per-artifact results and any errors
    """
    index_labels = index_labels or {}
    results = {}
    errors = {}

    for name, table in tables.items():
        if name not in paths:
            errors[name] = f"No output path for table {name}"
            continue

        result = export_table(
            table,
            paths[name],
            file_format=file_format,
            sheet_name=name,
            index_label=index_labels.get(name, 'Label')
        )
        results[name] = result

        if result['status'] == 'completed':
            logger.info(f"Wrote {name} to {result['output_path']}")
        else:
            errors[name] = result['error']
            logger.error(f"Failed to write {name}: {result['error']}")

    return {
        'status': 'completed' if not errors else 'failed',
        'results': results,
        'errors': errors,
        'written': {name: r['output_path'] for name, r in results.items() if r['status'] == 'completed'}
    }
