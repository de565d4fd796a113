"""
Report tables for the frontier analysis.

The stat table collects (Portfolio, Return, Risk) rows for benchmarks, the
equal-weight portfolio, the individual assets and the optimal portfolios,
and is exported as delimited text. Weight tables list only the assets a
portfolio actually holds, in percent.
"""

import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Sequence

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

STAT_COLUMNS = ['Portfolio', 'Return', 'Risk']


class RiskReturnPoint(NamedTuple):
    """One labelled point on the risk-return plane."""

    risk: float
    ret: float
    label: str


def points_from_moments(risks: Sequence[float], returns: Sequence[float],
                        labels: Sequence[str]) -> List[RiskReturnPoint]:
    """Zip evaluator output with labels into plot/table points."""
    if not len(risks) == len(returns) == len(labels):
        raise ValueError(
            f"Length mismatch: {len(risks)} risks, {len(returns)} returns, {len(labels)} labels"
        )
    return [RiskReturnPoint(float(s), float(r), str(label))
            for s, r, label in zip(risks, returns, labels)]


def build_stat_table(points: Iterable[RiskReturnPoint]) -> pd.DataFrame:
    """Stat table with one row per point, columns Portfolio, Return, Risk."""
    rows = [{'Portfolio': p.label, 'Return': p.ret, 'Risk': p.risk} for p in points]
    return pd.DataFrame(rows, columns=STAT_COLUMNS)


def weight_table(weights: np.ndarray, asset_names: Sequence[str],
                 threshold: float = 1e-6) -> pd.DataFrame:
    """
    Sparse weight table: assets with weight above the threshold, in percent.

    Args:
        weights: Portfolio weights (length N)
        asset_names: Asset names aligned to the weights
        threshold: Weights at or below this are left out

    Returns:
        DataFrame indexed by asset name with a single 'Weight' column
    """
    weights = np.asarray(weights, dtype=float)
    if len(weights) != len(asset_names):
        raise ValueError(f"{len(weights)} weights for {len(asset_names)} assets")
    held = weights > threshold
    return pd.DataFrame(
        {'Weight': 100 * weights[held]},
        index=pd.Index([name for name, h in zip(asset_names, held) if h], name='Asset')
    )


def format_weight_table(table: pd.DataFrame) -> str:
    """Render a weight table for console output."""
    if table.empty:
        return "    (no holdings)"
    return table.to_string(float_format=lambda x: f"{x:8.2f}")


def export_stat_table(table: pd.DataFrame, file_path, delimiter: str = ',') -> Path:
    """
    Write the stat table as delimited text.

    Returns:
        The path written
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(path, sep=delimiter, index=False)
    logger.info("Stat table saved to: %s", path)
    return path
