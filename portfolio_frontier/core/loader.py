"""
Data Loader Module for Portfolio Optimization
==============================================

Loads the tabular return dataset the analysis runs on:

- Column "Date" (configurable) with the period dates
- One column of period returns per asset
- Benchmark index return columns (by default DJI and SP500)

Excel and CSV files are supported. The loader only cleans and splits the
table; turning returns into moments is the estimator's job.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = ('.csv', '.xlsx', '.xls')


@dataclass(frozen=True)
class ReturnDataset:
    """
    Asset and benchmark returns aligned by date.

    Attributes:
        asset_returns: T x N DataFrame, one column per asset
        benchmark_returns: T x B DataFrame, one column per benchmark index
        dates: Period dates (None if the file has no date column)
    """

    asset_returns: pd.DataFrame
    benchmark_returns: pd.DataFrame
    dates: Optional[pd.Series] = None

    @property
    def asset_names(self) -> List[str]:
        return [str(col) for col in self.asset_returns.columns]

    @property
    def n_periods(self) -> int:
        return len(self.asset_returns)


class DataLoader:
    """
    Loads return datasets from Excel or CSV files.

    Example:
        >>> loader = DataLoader(benchmark_columns=['DJI', 'SP500'])
        >>> dataset = loader.load("mpartition.csv")
        >>> dataset.asset_names
        ['AAPL', 'AXP', 'BA', 'CAT']
    """

    def __init__(
        self,
        date_column: str = 'Date',
        benchmark_columns: Sequence[str] = ('DJI', 'SP500'),
        exclude_columns: Sequence[str] = ()
    ):
        """
        Args:
            date_column: Name of the date column (dropped from the asset set)
            benchmark_columns: Columns holding market index returns
            exclude_columns: Other columns that are neither assets nor benchmarks
        """
        self.date_column = date_column
        self.benchmark_columns = list(benchmark_columns)
        self.exclude_columns = list(exclude_columns)

    def load_file(self, file_path: str, sheet_name: Optional[str] = None) -> pd.DataFrame:
        """
        Load a raw table from file.

        Args:
            file_path: Path to Excel or CSV file
            sheet_name: Sheet name for Excel files (default: first sheet)

        Returns:
            DataFrame with loaded data
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = path.suffix.lower()
        if suffix in ('.xlsx', '.xls'):
            df = pd.read_excel(path, sheet_name=sheet_name if sheet_name else 0)
        elif suffix == '.csv':
            df = pd.read_csv(path)
        else:
            raise ValueError(f"Unsupported file type: {path.suffix}")

        logger.info("Loaded %d rows x %d columns from %s", df.shape[0], df.shape[1], path)
        return df

    def split(self, df: pd.DataFrame) -> ReturnDataset:
        """
        Split a raw table into asset and benchmark returns.

        Non-numeric columns are skipped; rows with any missing value are dropped.

        Raises:
            ValueError: If a benchmark column is missing or no asset columns remain
        """
        df = df.copy()

        dates = None
        if self.date_column in df.columns:
            dates = df.pop(self.date_column)

        missing = [col for col in self.benchmark_columns if col not in df.columns]
        if missing:
            raise ValueError(f"Benchmark column(s) not found: {missing}")

        df = df.drop(columns=[col for col in self.exclude_columns if col in df.columns])

        df = df.dropna(axis=1, how='all')

        numeric_cols = []
        for col in df.columns:
            try:
                df[col] = pd.to_numeric(df[col], errors='raise')
                numeric_cols.append(col)
            except (ValueError, TypeError):
                logger.info("Skipping non-numeric column: %s", col)
        df = df[numeric_cols]

        missing = [col for col in self.benchmark_columns if col not in df.columns]
        if missing:
            raise ValueError(f"Benchmark column(s) are empty or non-numeric: {missing}")

        valid = df.notna().all(axis=1)
        n_dropped = int((~valid).sum())
        if n_dropped:
            logger.warning("Dropping %d row(s) with missing values", n_dropped)
        df = df[valid]
        if dates is not None:
            dates = dates[valid].reset_index(drop=True)
        df = df.reset_index(drop=True)

        asset_cols = [col for col in df.columns if col not in self.benchmark_columns]
        if not asset_cols:
            raise ValueError("No asset return columns found")

        logger.info("Detected %d assets: %s", len(asset_cols), asset_cols)
        logger.info("Data points: %d observations", len(df))

        return ReturnDataset(
            asset_returns=df[asset_cols].astype(float),
            benchmark_returns=df[self.benchmark_columns].astype(float),
            dates=dates
        )

    def load(self, file_path: str, sheet_name: Optional[str] = None) -> ReturnDataset:
        """Load a file and split it into asset and benchmark returns."""
        return self.split(self.load_file(file_path, sheet_name))


def find_period_file(data_dir: str, period_code: str) -> Path:
    """
    Locate the return file for a period code, e.g. 'm' -> mpartition.csv.

    Raises:
        FileNotFoundError: If no supported file exists for the period
    """
    base = Path(data_dir) / f"{period_code}partition"
    for suffix in SUPPORTED_SUFFIXES:
        candidate = base.with_suffix(suffix)
        if candidate.exists():
            return candidate
    raise FileNotFoundError(
        f"No return file for period '{period_code}' in {data_dir} "
        f"(looked for {base.name}{{{','.join(SUPPORTED_SUFFIXES)}}})"
    )


def generate_sample_returns(
    n_assets: int = 6,
    n_periods: int = 60,
    seed: int = 42,
    benchmark_columns: Sequence[str] = ('DJI', 'SP500')
) -> pd.DataFrame:
    """
    Generate a synthetic return table for demonstration and testing.

    Returns are in percent per period, driven by one market factor so the
    benchmark columns correlate with the assets.

    Args:
        n_assets: Number of assets
        n_periods: Number of periods
        seed: Random seed for reproducibility
        benchmark_columns: Names of the benchmark columns to add

    Returns:
        DataFrame with Date, asset and benchmark columns
    """
    rng = np.random.default_rng(seed)

    if n_assets == 6:
        asset_names = ['AAPL', 'AXP', 'BA', 'CAT', 'CSCO', 'CVX']
    else:
        asset_names = [f'Stock_{i+1}' for i in range(n_assets)]

    market = rng.normal(0.8, 4.0, n_periods)
    betas = np.linspace(0.6, 1.4, n_assets)
    alphas = np.linspace(-0.2, 0.6, n_assets)
    noise = rng.normal(0.0, 3.0, (n_periods, n_assets))
    returns = alphas + np.outer(market, betas) + noise

    df = pd.DataFrame(returns, columns=asset_names)
    df.insert(0, 'Date', pd.date_range('2015-01-01', periods=n_periods, freq='MS'))
    for i, name in enumerate(benchmark_columns):
        df[name] = market * (0.95 + 0.05 * i) + rng.normal(0.0, 0.5, n_periods)

    return df
