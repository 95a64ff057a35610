#!/usr/bin/env python3
"""
Main CLI for the portfolio analysis pipeline.
Usage: python cli.py run [options]
"""

import sys
import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from pipeline.config import ConfigError, load_config
from pipeline.portfolio_dag import run_portfolio_analysis


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description='Monthly risk/return analysis of UK bank stocks, indices and two fixed portfolios',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py run
  python cli.py run --config config/portfolio.yml
  python cli.py run --start 2022-01-01 --end 2023-12-31 --format csv
        """
    )

    subparsers = parser.add_subparsers(dest='command')

    run_parser = subparsers.add_parser('run', help='Fetch prices, analyze and export reports')
    run_parser.add_argument('--config',
                            help='Path to YAML config (default: ./config/portfolio.yml)')
    run_parser.add_argument('--start',
                            type=date.fromisoformat,
                            help='Start date (YYYY-MM-DD)')
    run_parser.add_argument('--end',
                            type=date.fromisoformat,
                            help='End date (YYYY-MM-DD)')
    run_parser.add_argument('--output-dir',
                            type=Path,
                            help='Directory for exported files')
    run_parser.add_argument('--format',
                            choices=['xlsx', 'csv'],
                            help='Table file format')
    run_parser.add_argument('--quiet', '-q',
                            action='store_true',
                            help='Minimal output (just success/failure)')
    run_parser.add_argument('--verbose', '-v',
                            action='store_true',
                            help='Debug logging')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command != 'run':
        parser.print_help()
        return 1

    _configure_logging(quiet=args.quiet, verbose=args.verbose)

    try:
        config = load_config(args.config)
        config = config.with_overrides(
            start_date=args.start,
            end_date=args.end,
            output_dir=args.output_dir,
            file_format=args.format
        )
    except ConfigError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"Running portfolio analysis for {', '.join(config.labels.values())}")
        print(f"Date range: {config.start_date} to {config.end_date}")
        print()

    result = run_portfolio_analysis(config)

    if result['status'] != 'completed':
        print(f"ERROR: Pipeline failed at stage '{result['failed_stage']}'", file=sys.stderr)
        print(f"   {result['error_message']}", file=sys.stderr)
        return 1

    if args.quiet:
        print(f"Portfolio analysis complete: {result.get('output_dir')}")
    else:
        _display_results(result)

    return 0


def _configure_logging(quiet: bool, verbose: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def _display_results(result: Dict[str, Any]) -> None:
    """Display run summary."""
    tables = result['tables']

    print("Pipeline Results:")
    print(f"   Status: {result['status'].upper()}")
    print(f"   Run ID: {result['run_id']}")
    print(f"   Duration: {result['duration_seconds']:.1f}s")
    print(f"   Prices fetched: {result['rows_fetched']}")
    print(f"   Trading days aligned: {len(tables['stock_prices'])}")
    print(f"   Monthly returns: {len(tables['monthly_returns'])}")
    print()

    asset_summary = tables['asset_summary']
    if not asset_summary.empty:
        print("Assets (annualized):")
        for asset, row in asset_summary.iterrows():
            print(f"   {asset:<10} return {row['Annualized Return']:+.2%}  "
                  f"vol {row['Annualized Volatility']:.2%}  sharpe {row['Sharpe Ratio']:.2f}")
        print()

    summary = tables['portfolio_summary']
    if not summary.empty:
        print("Portfolios (annualized):")
        for name, row in summary.iterrows():
            print(f"   {name:<13} return {row['Annual Return']:+.2%}  "
                  f"vol {row['Annual Volatility']:.2%}  sharpe {row['Sharpe Ratio']:.2f}")
        print()

    print(f"Files written to {result.get('output_dir')}:")
    for name, path in sorted(result['artifacts'].items()):
        print(f"   {name}: {path}")


if __name__ == '__main__':
    sys.exit(main())
