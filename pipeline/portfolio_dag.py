"""
Portfolio analysis DAG - orchestrates the complete analysis pipeline.
Composes: Provider → Assemble → Returns → Risk / Portfolios → Export.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import pandas as pd

from ingestion.providers.yfinance_adapter import fetch_adjusted_close_series
from ingestion.transforms.assembler import assemble_price_table
from analysis.calculations.returns import monthly_returns, wealth_index
from analysis.calculations.volatility import annualized_volatility
from analysis.calculations.risk import annualized_returns, sharpe_ratios, correlation_matrix
from analysis.calculations.drawdown import max_drawdowns
from analysis.portfolio import portfolio_return_table, portfolio_summary
from reports.path_policy import create_output_paths
from reports.table_exporter import export_tables
from reports.charts import render_cumulative_returns, render_correlation_heatmap
from pipeline.config import AnalysisConfig


logger = logging.getLogger(__name__)

STAGES = (
    'fetch',
    'assemble',
    'returns',
    'risk_analysis',
    'portfolio_evaluation',
    'drawdown',
    'export',
)

INDEX_LABELS = {
    'sharpe_ratios': 'Asset',
    'volatility': 'Asset',
    'correlation_matrix': 'Asset',
    'asset_summary': 'Asset',
    'max_drawdowns': 'Asset',
    'portfolio_summary': 'Portfolio',
    'monthly_return_matrix': 'Period',
}


class PipelineError(Exception):
    """Raised when pipeline execution fails."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"Stage '{stage}' failed: {message}")


def compute_tables(
    config: AnalysisConfig,
    fetcher: Optional[Callable[..., Dict[str, pd.Series]]] = None
) -> Dict[str, Any]:
    """
    Run stages fetch → drawdown and return every computed table.

    Args:
        config: Pipeline configuration
        fetcher: Price fetcher (defaults to the yfinance adapter)

    Returns:
        Dictionary of artifact name to table, plus 'rows_fetched'

    Raises:
        PipelineError: Wrapping the first stage failure
    """
    fetcher = fetcher or fetch_adjusted_close_series
    tables: Dict[str, Any] = {}

    with _stage('fetch'):
        series_by_symbol = fetcher(
            config.tickers,
            config.start_date,
            config.end_date,
            timeout=config.fetch_timeout_s,
            retries=config.fetch_retries
        )
    rows_fetched = sum(len(s) for s in series_by_symbol.values())

    with _stage('assemble'):
        prices = assemble_price_table(series_by_symbol, config.labels)
    tables['stock_prices'] = prices
    logger.info(f"Assembled price table: {len(prices)} rows x {prices.shape[1]} assets")

    with _stage('returns'):
        returns = monthly_returns(prices)
    tables['monthly_returns'] = returns
    logger.info(f"Computed {len(returns)} monthly returns")

    with _stage('risk_analysis'):
        sharpe = sharpe_ratios(returns, risk_free_rate=config.risk_free_rate)
        vol = annualized_volatility(returns)
        corr = correlation_matrix(returns)
        asset_summary = pd.DataFrame({
            'Annualized Return': annualized_returns(returns),
            'Annualized Volatility': vol,
            'Sharpe Ratio': sharpe,
        })
    tables['sharpe_ratios'] = sharpe
    tables['volatility'] = vol
    tables['correlation_matrix'] = corr
    tables['asset_summary'] = asset_summary

    with _stage('portfolio_evaluation'):
        summary = portfolio_summary(
            returns,
            config.portfolios,
            risk_free_rate=config.risk_free_rate
        )
        port_returns = portfolio_return_table(returns, config.portfolios)
    tables['portfolio_summary'] = summary
    tables['portfolio_returns'] = port_returns

    matrix = returns.reset_index(drop=True)
    matrix.index.name = 'Period'
    tables['monthly_return_matrix'] = matrix

    with _stage('drawdown'):
        wealth = wealth_index(returns)
        portfolio_wealth = wealth_index(port_returns)
        all_wealth = pd.concat([wealth, portfolio_wealth], axis=1)
        drawdowns = max_drawdowns(all_wealth)
    tables['cumulative_returns'] = wealth
    tables['max_drawdowns'] = drawdowns

    return {'tables': tables, 'rows_fetched': rows_fetched}


def export_artifacts(config: AnalysisConfig, tables: Dict[str, Any]) -> Dict[str, Any]:
    """
    Write every table and render both charts.

    Returns:
        Dictionary with 'status', 'artifacts' (name → path) and 'errors'
    """
    paths = create_output_paths(config.output_dir, config.file_format, config.run_label)

    table_result = export_tables(
        tables,
        paths,
        file_format=config.file_format,
        index_labels=INDEX_LABELS
    )

    artifacts = dict(table_result['written'])
    errors = dict(table_result['errors'])

    chart_results = {
        'cumulative_returns_chart': render_cumulative_returns(
            tables['cumulative_returns'], paths['cumulative_returns_chart']
        ),
        'correlation_heatmap': render_correlation_heatmap(
            tables['correlation_matrix'], paths['correlation_heatmap']
        ),
    }

    for name, result in chart_results.items():
        if result['status'] == 'completed':
            artifacts[name] = result['output_path']
        else:
            errors[name] = result['error']

    return {
        'status': 'completed' if not errors else 'failed',
        'artifacts': artifacts,
        'errors': errors,
        'output_dir': str(paths['output_dir'])
    }


def run_portfolio_analysis(
    config: AnalysisConfig,
    fetcher: Optional[Callable[..., Dict[str, pd.Series]]] = None,
    export: bool = True
) -> Dict[str, Any]:
    """
    Run the complete portfolio analysis pipeline.

    Pipeline stages:
    1. Fetch adjusted closes from provider
    2. Assemble the aligned price table
    3. Compute monthly returns
    4. Risk/return statistics per asset
    5. Portfolio evaluation for each weight vector
    6. Drawdowns of assets and portfolios
    7. Export tables and charts

    Any stage failure stops the run. Tables computed before an export
    failure are still returned.

    Args:
        config: Pipeline configuration
        fetcher: Price fetcher (defaults to the yfinance adapter)
        export: Write artifacts to disk

    Returns:
        Dictionary with run results
    """
    run_id = uuid.uuid4().hex[:12]
    start_time = datetime.now()

    result = {
        'run_id': run_id,
        'start_date': config.start_date,
        'end_date': config.end_date,
        'symbols': list(config.tickers),
        'status': 'running',
        'failed_stage': None,
        'error_message': None,
        'rows_fetched': 0,
        'tables': {},
        'artifacts': {},
    }

    logger.info(
        f"Starting portfolio analysis run {run_id}: {', '.join(config.tickers)} "
        f"from {config.start_date} to {config.end_date}"
    )

    try:
        computed = compute_tables(config, fetcher=fetcher)
    except PipelineError as e:
        logger.error(str(e))
        return _finish(result, start_time, status='failed', stage=e.stage, message=str(e))

    result['tables'] = computed['tables']
    result['rows_fetched'] = computed['rows_fetched']

    if export:
        try:
            export_result = export_artifacts(config, computed['tables'])
        except Exception as e:
            logger.error(f"Export failed: {e}")
            return _finish(result, start_time, status='failed', stage='export',
                           message=f"Stage 'export' failed: {e}")

        result['artifacts'] = export_result['artifacts']
        result['output_dir'] = export_result['output_dir']

        if export_result['status'] != 'completed':
            failed = ', '.join(f"{name} ({err})" for name, err in export_result['errors'].items())
            logger.error(f"Export failed for: {failed}")
            return _finish(result, start_time, status='failed', stage='export',
                           message=f"Stage 'export' failed: {failed}")

    return _finish(result, start_time, status='completed')


class _stage:
    """Context manager that re-raises any failure as PipelineError for a stage."""

    def __init__(self, name: str):
        self.name = name

    def __enter__(self):
        logger.debug(f"Stage {self.name} started")
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is None or isinstance(exc, PipelineError):
            return False
        raise PipelineError(self.name, f"{type(exc).__name__}: {exc}") from exc


def _finish(
    result: Dict[str, Any],
    start_time: datetime,
    status: str,
    stage: Optional[str] = None,
    message: Optional[str] = None
) -> Dict[str, Any]:
    result['status'] = status
    result['failed_stage'] = stage
    result['error_message'] = message
    result['duration_seconds'] = (datetime.now() - start_time).total_seconds()

    if status == 'completed':
        logger.info(f"Run {result['run_id']} completed in {result['duration_seconds']:.1f}s")

    return result
