"""Shared fixtures for the portfolio_frontier test suite."""

import itertools

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from portfolio_frontier.core.estimator import MomentEstimate
from portfolio_frontier.core.loader import DataLoader, generate_sample_returns
from portfolio_frontier.core.optimizer import PortfolioOptimizer


def simplex_grid(n_assets: int, steps: int) -> np.ndarray:
    """All long-only, fully-invested weight vectors on a grid of 1/steps."""
    rows = [
        np.array(combo) / steps
        for combo in itertools.product(range(steps + 1), repeat=n_assets)
        if sum(combo) == steps
    ]
    return np.vstack(rows)


# ---------------------------------------------------------------------------
# Moment estimates
# ---------------------------------------------------------------------------


@pytest.fixture
def diagonal_moments() -> MomentEstimate:
    """Three uncorrelated assets; asset B has the highest return and risk."""
    return MomentEstimate(
        ("A", "B", "C"),
        np.array([0.01, 0.02, 0.015]),
        np.diag([0.04, 0.09, 0.0625]),
    )


@pytest.fixture
def correlated_moments() -> MomentEstimate:
    """Four correlated assets with increasing expected returns."""
    return MomentEstimate(
        ("AAPL", "AXP", "BA", "CAT"),
        np.array([0.01, 0.015, 0.02, 0.025]),
        np.array([
            [0.04, 0.01, 0.02, 0.015],
            [0.01, 0.05, 0.02, 0.01],
            [0.02, 0.02, 0.06, 0.02],
            [0.015, 0.01, 0.02, 0.05],
        ]),
    )


@pytest.fixture
def diagonal_optimizer(diagonal_moments) -> PortfolioOptimizer:
    return PortfolioOptimizer(diagonal_moments)


@pytest.fixture
def correlated_optimizer(correlated_moments) -> PortfolioOptimizer:
    return PortfolioOptimizer(correlated_moments)


# ---------------------------------------------------------------------------
# Return datasets
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_frame() -> pd.DataFrame:
    """Synthetic monthly returns in percent: Date, six assets, DJI, SP500."""
    return generate_sample_returns(n_assets=6, n_periods=60, seed=7)


@pytest.fixture
def sample_dataset(sample_frame):
    return DataLoader().split(sample_frame)
