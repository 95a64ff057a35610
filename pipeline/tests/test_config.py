"""
Tests for pipeline configuration - defaults, YAML loading, env overrides.
"""

import pytest
from datetime import date
from pathlib import Path

from pipeline.config import (
    AnalysisConfig,
    ConfigError,
    load_config,
    DEFAULT_SYMBOLS
)
from analysis.portfolio import PortfolioWeights


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ('PORTFOLIO_CONFIG_PATH', 'PORTFOLIO_OUTPUT_DIR', 'YF_TIMEOUT_S', 'YF_RETRIES'):
        monkeypatch.delenv(key, raising=False)


class TestAnalysisConfig:
    """Tests for the AnalysisConfig dataclass."""

    def test_defaults(self):
        config = AnalysisConfig()

        assert config.tickers == ('HSBA.L', 'BARC.L', 'LLOY.L', '^FTSE', '^GSPC')
        assert list(config.labels.values()) == ['HSBC', 'Barclays', 'Lloyds', 'FTSE100', 'S&P500']
        assert config.risk_free_rate == 0.0
        assert [p.name for p in config.portfolios] == ['conservative', 'aggressive']
        assert all(len(p.weights) == 5 for p in config.portfolios)

    def test_immutable(self):
        config = AnalysisConfig()

        with pytest.raises(AttributeError):
            config.risk_free_rate = 0.01

    def test_with_overrides(self):
        config = AnalysisConfig()

        updated = config.with_overrides(start_date=date(2021, 1, 1), end_date=None)

        assert updated.start_date == date(2021, 1, 1)
        assert updated.end_date == config.end_date
        assert config.start_date == date(2022, 1, 1)

    def test_inverted_dates(self):
        with pytest.raises(ConfigError, match="start_date must be <= end_date"):
            AnalysisConfig(start_date=date(2024, 1, 1), end_date=date(2023, 1, 1))

    def test_empty_symbols(self):
        with pytest.raises(ConfigError, match="symbols must not be empty"):
            AnalysisConfig(symbols=())

    def test_duplicate_labels(self):
        with pytest.raises(ConfigError, match="duplicate labels"):
            AnalysisConfig(symbols=(('HSBA.L', 'HSBC'), ('HSBC', 'HSBC')))

    def test_duplicate_portfolio_names(self):
        with pytest.raises(ConfigError, match="duplicate portfolio names"):
            AnalysisConfig(portfolios=(PortfolioWeights('p', (1.0,)), PortfolioWeights('p', (1.0,))))

    def test_bad_format(self):
        with pytest.raises(ConfigError, match="file_format"):
            AnalysisConfig(file_format='pdf')

    def test_weight_length_not_checked_here(self):
        """Weight dimensions are enforced by the portfolio evaluator, not config."""
        config = AnalysisConfig(portfolios=(PortfolioWeights('short', (1.0,)),))

        assert config.portfolios[0].weights == (1.0,)


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml_file(self, tmp_path):
        config_file = tmp_path / 'portfolio.yml'
        config_file.write_text(
            "symbols:\n"
            "  HSBA.L: HSBC\n"
            "  ^FTSE: FTSE100\n"
            "start_date: 2021-06-01\n"
            "end_date: 2022-06-30\n"
            "risk_free_rate: 0.001\n"
            "weights:\n"
            "  balanced: [0.5, 0.5]\n"
            "output:\n"
            "  dir: reports_out\n"
            "  format: csv\n"
            "fetch:\n"
            "  timeout_s: 10\n"
            "  retries: 0\n"
        )

        config = load_config(str(config_file))

        assert config.symbols == (('HSBA.L', 'HSBC'), ('^FTSE', 'FTSE100'))
        assert config.start_date == date(2021, 6, 1)
        assert config.end_date == date(2022, 6, 30)
        assert config.risk_free_rate == 0.001
        assert config.portfolios == (PortfolioWeights('balanced', (0.5, 0.5)),)
        assert config.output_dir == Path('reports_out')
        assert config.file_format == 'csv'
        assert config.fetch_timeout_s == 10
        assert config.fetch_retries == 0

    def test_symbol_list_form(self, tmp_path):
        config_file = tmp_path / 'portfolio.yml'
        config_file.write_text(
            "symbols:\n"
            "  - {symbol: HSBA.L, label: HSBC}\n"
            "  - {symbol: LLOY.L}\n"
        )

        config = load_config(str(config_file))

        assert config.symbols == (('HSBA.L', 'HSBC'), ('LLOY.L', 'LLOY.L'))

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(str(tmp_path / 'nope.yml'))

    def test_missing_default_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.symbols == DEFAULT_SYMBOLS

    def test_env_path_and_overrides(self, tmp_path, monkeypatch):
        config_file = tmp_path / 'custom.yml'
        config_file.write_text("risk_free_rate: 0.002\n")
        monkeypatch.setenv('PORTFOLIO_CONFIG_PATH', str(config_file))
        monkeypatch.setenv('PORTFOLIO_OUTPUT_DIR', str(tmp_path / 'env_out'))
        monkeypatch.setenv('YF_TIMEOUT_S', '12')
        monkeypatch.setenv('YF_RETRIES', '4')

        config = load_config()

        assert config.risk_free_rate == 0.002
        assert config.output_dir == tmp_path / 'env_out'
        assert config.fetch_timeout_s == 12
        assert config.fetch_retries == 4

    def test_invalid_values(self, tmp_path):
        config_file = tmp_path / 'bad.yml'
        config_file.write_text("start_date: 2024-01-01\nend_date: 2023-01-01\n")

        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(str(config_file))

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / 'bad.yml'
        config_file.write_text("symbols: [unclosed\n")

        with pytest.raises(ConfigError, match="Failed to load config"):
            load_config(str(config_file))

    def test_bad_date_string(self, tmp_path):
        config_file = tmp_path / 'bad.yml'
        config_file.write_text("start_date: 'first of jan'\n")

        with pytest.raises(ConfigError, match="start_date must be YYYY-MM-DD"):
            load_config(str(config_file))

    def test_repository_default_file(self):
        """The shipped config/portfolio.yml matches the built-in defaults."""
        shipped = Path(__file__).parent.parent.parent / 'config' / 'portfolio.yml'

        config = load_config(str(shipped))

        assert config.symbols == DEFAULT_SYMBOLS
        assert config.portfolios == AnalysisConfig().portfolios
