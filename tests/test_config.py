"""Unit tests for AnalysisConfig."""

import pytest

from portfolio_frontier.cli.main import build_parser
from portfolio_frontier.config import AnalysisConfig
from portfolio_frontier.core.errors import InvalidParameterError


class TestPeriod:
    @pytest.mark.parametrize("code, label", [
        ("d", "Daily"), ("W", "Weekly"), (" m ", "Monthly"), ("weekly", "Weekly"),
    ])
    def test_valid_codes(self, code, label):
        config = AnalysisConfig()
        config.set_period(code)
        assert config.period_label == label

    def test_invalid_code(self):
        with pytest.raises(InvalidParameterError):
            AnalysisConfig().set_period("q")

    def test_export_file_name(self):
        config = AnalysisConfig()
        config.set_period("w")
        assert config.export_file_name() == "WeeklyReturnsVsRisk.csv"


class TestPortfolioCount:
    def test_default(self):
        assert AnalysisConfig().n_portfolios == 10

    @pytest.mark.parametrize("value", [0, -2, 1.5, True, "3"])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidParameterError):
            AnalysisConfig().set_n_portfolios(value)


class TestBenchmarks:
    def test_known_labels(self):
        assert AnalysisConfig().benchmark_labels() == {'DJI': 'Dow Jones', 'SP500': 'SP 500'}

    def test_unknown_column_uses_its_name(self):
        assert AnalysisConfig().benchmark_label('NASDAQ') == 'NASDAQ'


class TestDataPath:
    def test_explicit_file(self, tmp_path):
        config = AnalysisConfig()
        config.data_file = str(tmp_path / "returns.xlsx")
        assert config.data_path().name == "returns.xlsx"

    def test_period_file(self, tmp_path):
        (tmp_path / "dpartition.csv").write_text("x")
        config = AnalysisConfig()
        config.set_period("d")
        config.data_dir = str(tmp_path)
        assert config.data_path().name == "dpartition.csv"

    def test_output_path_created(self, tmp_path):
        config = AnalysisConfig()
        config.output_dir = str(tmp_path / "nested" / "out")
        assert config.output_path().is_dir()


class TestFromArgs:
    def test_defaults(self):
        config = AnalysisConfig.from_args(build_parser().parse_args([]))
        assert config.period == 'm'
        assert config.ddof == 1
        assert config.save_plots and not config.show_plots
        assert config.target_return is None

    def test_options(self):
        args = build_parser().parse_args([
            "-p", "w", "-k", "5", "--benchmarks", "SP500",
            "--target-return", "0.5", "--target-risk", "3",
            "--population-cov", "--no-plots", "--exclude", "Sector",
        ])
        config = AnalysisConfig.from_args(args)
        assert config.period_label == "Weekly"
        assert config.n_portfolios == 5
        assert config.benchmark_columns == ['SP500']
        assert config.exclude_columns == ['Sector']
        assert config.target_return == 0.5
        assert config.target_risk == 3.0
        assert config.ddof == 0
        assert not config.save_plots

    def test_invalid_portfolio_count(self):
        with pytest.raises(InvalidParameterError):
            AnalysisConfig.from_args(build_parser().parse_args(["-k", "0"]))
