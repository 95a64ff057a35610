"""
Configuration for the portfolio analysis pipeline.
Immutable dataclass, loaded from YAML with environment overrides.
"""

import os
import yaml
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from dotenv import load_dotenv

from analysis.portfolio import PortfolioWeights

# Load environment variables
load_dotenv()


DEFAULT_CONFIG_PATH = './config/portfolio.yml'

DEFAULT_SYMBOLS: Tuple[Tuple[str, str], ...] = (
    ('HSBA.L', 'HSBC'),
    ('BARC.L', 'Barclays'),
    ('LLOY.L', 'Lloyds'),
    ('^FTSE', 'FTSE100'),
    ('^GSPC', 'S&P500'),
)

DEFAULT_PORTFOLIOS: Tuple[PortfolioWeights, ...] = (
    PortfolioWeights('conservative', (0.10, 0.10, 0.10, 0.40, 0.30)),
    PortfolioWeights('aggressive', (0.30, 0.25, 0.25, 0.10, 0.10)),
)

FILE_FORMATS = ('xlsx', 'csv')


class ConfigError(ValueError):
    """Raised when configuration is missing or invalid."""
    pass


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one portfolio analysis run."""
    symbols: Tuple[Tuple[str, str], ...] = DEFAULT_SYMBOLS
    start_date: date = date(2022, 1, 1)
    end_date: date = date(2023, 12, 31)
    risk_free_rate: float = 0.0
    portfolios: Tuple[PortfolioWeights, ...] = DEFAULT_PORTFOLIOS
    output_dir: Path = Path('./output')
    file_format: str = 'xlsx'
    fetch_timeout_s: int = 30
    fetch_retries: int = 2
    run_label: Optional[str] = field(default=None)

    def __post_init__(self):
        """Validate configuration."""
        if not self.symbols:
            raise ConfigError("symbols must not be empty")

        tickers = [symbol for symbol, _ in self.symbols]
        labels = [label for _, label in self.symbols]

        for ticker, label in self.symbols:
            if not ticker or not isinstance(ticker, str):
                raise ConfigError("symbol must be non-empty string")
            if not label or not isinstance(label, str):
                raise ConfigError(f"label for {ticker} must be non-empty string")

        if len(set(tickers)) != len(tickers):
            raise ConfigError(f"duplicate symbols: {tickers}")

        if len(set(labels)) != len(labels):
            raise ConfigError(f"duplicate labels: {labels}")

        if self.start_date > self.end_date:
            raise ConfigError("start_date must be <= end_date")

        names = [p.name for p in self.portfolios]
        if len(set(names)) != len(names):
            raise ConfigError(f"duplicate portfolio names: {names}")

        if self.file_format not in FILE_FORMATS:
            raise ConfigError(f"file_format must be one of {FILE_FORMATS}, got {self.file_format}")

        if self.fetch_timeout_s <= 0:
            raise ConfigError("fetch_timeout_s must be positive")

        if self.fetch_retries < 0:
            raise ConfigError("fetch_retries must be >= 0")

    @property
    def tickers(self) -> Tuple[str, ...]:
        return tuple(symbol for symbol, _ in self.symbols)

    @property
    def labels(self) -> Dict[str, str]:
        """Ordered mapping of provider symbol to column label."""
        return dict(self.symbols)

    def with_overrides(self, **changes: Any) -> 'AnalysisConfig':
        """Return a copy with the given fields replaced (None values ignored)."""
        changes = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **changes)


def load_config(config_path: Optional[str] = None) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file.

    Path resolution: argument, else PORTFOLIO_CONFIG_PATH, else
    ./config/portfolio.yml. If the default file does not exist the built-in
    defaults are used; an explicitly requested file must exist.

    Environment overrides: PORTFOLIO_OUTPUT_DIR, YF_TIMEOUT_S, YF_RETRIES.

    Args:
        config_path: Path to config file

    Returns:
        AnalysisConfig

    Raises:
        ConfigError: If config file cannot be loaded or is invalid
    """
    explicit = config_path is not None or os.getenv('PORTFOLIO_CONFIG_PATH') is not None
    if config_path is None:
        config_path = os.getenv('PORTFOLIO_CONFIG_PATH', DEFAULT_CONFIG_PATH)

    config_file = Path(config_path)
    raw: Dict[str, Any] = {}

    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config {config_path}: {e}") from e
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")

    if not isinstance(raw, dict):
        raise ConfigError(f"Config {config_path} must be a mapping")

    kwargs = _parse_config(raw)

    # Environment overrides
    if os.getenv('PORTFOLIO_OUTPUT_DIR'):
        kwargs['output_dir'] = Path(os.getenv('PORTFOLIO_OUTPUT_DIR'))
    if os.getenv('YF_TIMEOUT_S'):
        kwargs['fetch_timeout_s'] = _to_int(os.getenv('YF_TIMEOUT_S'), 'YF_TIMEOUT_S')
    if os.getenv('YF_RETRIES'):
        kwargs['fetch_retries'] = _to_int(os.getenv('YF_RETRIES'), 'YF_RETRIES')

    try:
        return AnalysisConfig(**kwargs)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config {config_path}: {e}") from e


def _parse_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map the YAML structure onto AnalysisConfig keyword arguments.

    Expected shape (all keys optional):
        symbols: {HSBA.L: HSBC, ...}  or  [{symbol: HSBA.L, label: HSBC}, ...]
        start_date: 2022-01-01
        end_date: 2023-12-31
        risk_free_rate: 0.0
        weights: {conservative: [..], aggressive: [..]}
        output: {dir: ./output, format: xlsx}
        fetch: {timeout_s: 30, retries: 2}
    """
    kwargs: Dict[str, Any] = {}

    if 'symbols' in raw:
        kwargs['symbols'] = _parse_symbols(raw['symbols'])

    for key in ('start_date', 'end_date'):
        if key in raw:
            kwargs[key] = _to_date(raw[key], key)

    if 'risk_free_rate' in raw:
        kwargs['risk_free_rate'] = float(raw['risk_free_rate'])

    if 'weights' in raw:
        weights = raw['weights']
        if not isinstance(weights, dict):
            raise ConfigError("weights must be a mapping of portfolio name to list")
        try:
            kwargs['portfolios'] = tuple(
                PortfolioWeights(str(name), tuple(values)) for name, values in weights.items()
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid weights: {e}") from e

    output = raw.get('output') or {}
    if 'dir' in output:
        kwargs['output_dir'] = Path(output['dir'])
    if 'format' in output:
        kwargs['file_format'] = str(output['format'])
    if 'run_label' in output:
        kwargs['run_label'] = str(output['run_label'])

    fetch = raw.get('fetch') or {}
    if 'timeout_s' in fetch:
        kwargs['fetch_timeout_s'] = _to_int(fetch['timeout_s'], 'fetch.timeout_s')
    if 'retries' in fetch:
        kwargs['fetch_retries'] = _to_int(fetch['retries'], 'fetch.retries')

    return kwargs


def _parse_symbols(raw_symbols: Any) -> Tuple[Tuple[str, str], ...]:
    if isinstance(raw_symbols, dict):
        return tuple((str(symbol), str(label)) for symbol, label in raw_symbols.items())

    if isinstance(raw_symbols, list):
        pairs = []
        for entry in raw_symbols:
            if not isinstance(entry, dict) or 'symbol' not in entry:
                raise ConfigError(f"Invalid symbol entry: {entry}")
            symbol = str(entry['symbol'])
            pairs.append((symbol, str(entry.get('label', symbol))))
        return tuple(pairs)

    raise ConfigError("symbols must be a mapping or a list")


def _to_date(value: Any, key: str) -> date:
    # PyYAML already parses unquoted ISO dates
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ConfigError(f"{key} must be YYYY-MM-DD, got {value}") from e


def _to_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value}") from e
