"""
Analysis configuration.

Every session parameter lives on an AnalysisConfig instance that is passed
to the pipeline explicitly; nothing is read from module-level state.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from portfolio_frontier.core.errors import InvalidParameterError
from portfolio_frontier.core.loader import find_period_file


class AnalysisConfig:
    """
    Stores all configurable assumptions for the analysis.

    Attributes:
        period: Data frequency code, 'd', 'w' or 'm'
        data_file: Explicit return file (overrides the period file in data_dir)
        data_dir: Directory holding <period>partition.csv / .xlsx
        sheet_name: Sheet to read from Excel files
        date_column: Name of the date column
        benchmark_columns: Market index columns, mapped to display labels
        exclude_columns: Columns that are neither assets nor benchmarks
        n_portfolios: Number of frontier portfolios (k)
        target_return: Target return for the targeted portfolio, or None
        target_risk: Target risk for the targeted portfolio, or None
        ddof: 1 for sample covariance (T-1), 0 for population covariance
        tolerance: Convergence tolerance of the target-risk search
        max_iter: Iteration cap of each QP solve
        bisection_max_iter: Iteration cap of the target-risk search
        weight_threshold: Weights at or below this are not listed
        output_dir: Where plots and the stat table are written
        save_plots: If True, save figures as PNG
        show_plots: If True, show figures interactively
    """

    PERIODS = {
        'd': 'Daily',
        'w': 'Weekly',
        'm': 'Monthly',
    }

    BENCHMARK_LABELS = {
        'DJI': 'Dow Jones',
        'SP500': 'SP 500',
    }

    def __init__(self):
        """Initialize with default assumptions."""
        self.period = 'm'
        self.data_file: Optional[str] = None
        self.data_dir = '.'
        self.sheet_name: Optional[str] = None
        self.date_column = 'Date'
        self.benchmark_columns: List[str] = ['DJI', 'SP500']
        self.exclude_columns: List[str] = []
        self.n_portfolios = 10
        self.target_return: Optional[float] = None
        self.target_risk: Optional[float] = None
        self.ddof = 1
        self.tolerance = 1e-6
        self.max_iter = 500
        self.bisection_max_iter = 100
        self.weight_threshold = 1e-6
        self.output_dir = 'output'
        self.save_plots = True
        self.show_plots = False

    def set_period(self, code: str):
        """
        Set the data frequency from a code or a full name.

        Args:
            code: 'd', 'w', 'm' (case-insensitive) or 'daily', 'weekly', 'monthly'
        """
        value = str(code).strip().lower()
        for key, label in self.PERIODS.items():
            if value in (key, label.lower()):
                self.period = key
                return
        raise InvalidParameterError(f"Unknown period '{code}'. Use d, w or m")

    def set_n_portfolios(self, value):
        """Set k, rejecting anything that is not an integer >= 1."""
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidParameterError(f"Number of portfolios must be an integer >= 1, got {value!r}")
        self.n_portfolios = value

    @property
    def period_label(self) -> str:
        return self.PERIODS[self.period]

    def benchmark_label(self, column: str) -> str:
        return self.BENCHMARK_LABELS.get(column, column)

    def benchmark_labels(self) -> Dict[str, str]:
        return {col: self.benchmark_label(col) for col in self.benchmark_columns}

    def data_path(self) -> Path:
        """Return file to load: data_file if given, else the period file in data_dir."""
        if self.data_file:
            return Path(self.data_file)
        return find_period_file(self.data_dir, self.period)

    def export_file_name(self) -> str:
        return f"{self.period_label}ReturnsVsRisk.csv"

    def output_path(self) -> Path:
        path = Path(self.output_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @classmethod
    def from_args(cls, args) -> 'AnalysisConfig':
        """Build a configuration from parsed command-line arguments."""
        config = cls()
        config.set_period(args.period)
        config.data_file = args.file
        config.data_dir = args.data_dir
        config.sheet_name = args.sheet
        if args.benchmarks:
            config.benchmark_columns = list(args.benchmarks)
        if args.exclude:
            config.exclude_columns = list(args.exclude)
        config.set_n_portfolios(args.portfolios)
        config.target_return = args.target_return
        config.target_risk = args.target_risk
        config.ddof = 0 if args.population_cov else 1
        config.output_dir = args.output_dir
        config.save_plots = not args.no_plots
        config.show_plots = args.show_plots
        return config

    def print_config(self, logger: logging.Logger):
        """Log current configuration."""
        logger.info("=" * 60)
        logger.info("CURRENT ANALYSIS CONFIGURATION")
        logger.info("=" * 60)
        logger.info(f"Period: {self.period_label}")
        logger.info(f"Data file: {self.data_file or f'{self.period}partition in {self.data_dir}'}")
        logger.info(f"Benchmarks: {', '.join(self.benchmark_labels().values())}")
        logger.info(f"Covariance Type: {'Sample (N-1)' if self.ddof == 1 else 'Population (N)'}")
        logger.info(f"Optimal portfolios: {self.n_portfolios}")
        if self.target_return is not None:
            logger.info(f"Target return: {self.target_return:g}")
        if self.target_risk is not None:
            logger.info(f"Target risk: {self.target_risk:g}")
        logger.info("=" * 60)
