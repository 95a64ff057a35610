"""
Tests for spreadsheet export - one file per table, row labels kept.
"""

import pytest
import pandas as pd
from datetime import date
from unittest.mock import patch

from reports.table_exporter import frame_for_export, export_table, export_tables, ExportError


@pytest.fixture
def monthly_returns():
    index = pd.DatetimeIndex(['2023-01-31', '2023-02-28'], name='Date')
    return pd.DataFrame({'HSBC': [0.01, -0.02], 'FTSE100': [0.005, 0.0]}, index=index)


@pytest.fixture
def sharpe():
    return pd.Series({'HSBC': 0.8, 'FTSE100': 0.5}, name='Sharpe Ratio')


class TestFrameForExport:
    """Tests for frame_for_export."""

    def test_date_index_becomes_column(self, monthly_returns):
        frame = frame_for_export(monthly_returns, 'Label')

        assert list(frame.columns) == ['Date', 'HSBC', 'FTSE100']
        assert frame['Date'].tolist() == [date(2023, 1, 31), date(2023, 2, 28)]

    def test_series_with_unnamed_index(self, sharpe):
        frame = frame_for_export(sharpe, 'Asset')

        assert list(frame.columns) == ['Asset', 'Sharpe Ratio']
        assert frame['Asset'].tolist() == ['HSBC', 'FTSE100']

    def test_does_not_mutate_input(self, sharpe):
        frame_for_export(sharpe, 'Asset')

        assert sharpe.index.name is None

    def test_rejects_other_types(self):
        with pytest.raises(ExportError):
            frame_for_export([1, 2, 3], 'Label')


class TestExportTable:
    """Tests for export_table."""

    def test_xlsx_round_trip(self, tmp_path, monthly_returns):
        path = tmp_path / 'monthly_returns.xlsx'

        result = export_table(monthly_returns, path, file_format='xlsx', sheet_name='monthly_returns')

        assert result['status'] == 'completed'
        loaded = pd.read_excel(path, sheet_name='monthly_returns')
        assert list(loaded.columns) == ['Date', 'HSBC', 'FTSE100']
        assert loaded['HSBC'].tolist() == [0.01, -0.02]

    def test_csv_round_trip(self, tmp_path, sharpe):
        path = tmp_path / 'sharpe_ratios.csv'

        result = export_table(sharpe, path, file_format='csv', index_label='Asset')

        assert result['status'] == 'completed'
        loaded = pd.read_csv(path)
        assert loaded['Asset'].tolist() == ['HSBC', 'FTSE100']
        assert loaded['Sharpe Ratio'].tolist() == [0.8, 0.5]

    def test_unknown_format(self, tmp_path, sharpe):
        result = export_table(sharpe, tmp_path / 'x.parquet', file_format='parquet')

        assert result['status'] == 'failed'
        assert 'Unknown table format' in result['error']

    def test_empty_table(self, tmp_path):
        """Zero-row tables still produce a file with headers."""
        empty = pd.DataFrame(columns=['HSBC'], index=pd.DatetimeIndex([], name='Date'), dtype=float)
        path = tmp_path / 'empty.csv'

        result = export_table(empty, path, file_format='csv')

        assert result['status'] == 'completed'
        assert path.read_text().strip() == 'Date,HSBC'


class TestExportTables:
    """Tests for export_tables."""

    def test_one_file_per_table(self, tmp_path, monthly_returns, sharpe):
        paths = {
            'monthly_returns': tmp_path / 'monthly_returns.csv',
            'sharpe_ratios': tmp_path / 'sharpe_ratios.csv',
        }

        result = export_tables(
            {'monthly_returns': monthly_returns, 'sharpe_ratios': sharpe},
            paths,
            file_format='csv',
            index_labels={'sharpe_ratios': 'Asset'}
        )

        assert result['status'] == 'completed'
        assert result['errors'] == {}
        assert set(result['written']) == {'monthly_returns', 'sharpe_ratios'}
        assert pd.read_csv(paths['sharpe_ratios']).columns[0] == 'Asset'

    def test_default_index_label(self, tmp_path, sharpe):
        """Without index_labels an unnamed index is written as 'Label'."""
        path = tmp_path / 'sharpe_ratios.csv'

        result = export_tables({'sharpe_ratios': sharpe}, {'sharpe_ratios': path}, file_format='csv')

        assert result['status'] == 'completed'
        assert pd.read_csv(path).columns[0] == 'Label'

    def test_missing_path_reported(self, tmp_path, sharpe):
        result = export_tables({'sharpe_ratios': sharpe}, {}, file_format='csv')

        assert result['status'] == 'failed'
        assert 'sharpe_ratios' in result['errors']

    def test_one_failure_does_not_stop_others(self, tmp_path, monthly_returns, sharpe):
        paths = {
            'monthly_returns': tmp_path / 'monthly_returns.csv',
            'sharpe_ratios': tmp_path / 'sharpe_ratios.csv',
        }
        failed = {'status': 'failed', 'error': 'file locked', 'output_path': 'x', 'bytes_written': 0}

        with patch('reports.table_exporter.write_file_atomic', side_effect=[failed, {
            'status': 'completed', 'output_path': str(paths['sharpe_ratios']), 'bytes_written': 10
        }]):
            result = export_tables(
                {'monthly_returns': monthly_returns, 'sharpe_ratios': sharpe},
                paths,
                file_format='csv'
            )

        assert result['status'] == 'failed'
        assert result['errors'] == {'monthly_returns': 'file locked'}
        assert list(result['written']) == ['sharpe_ratios']
