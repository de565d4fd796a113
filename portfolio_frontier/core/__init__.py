"""Core computational modules for the efficient frontier."""

from portfolio_frontier.core.errors import (
    AboveRangeWarning,
    BelowRangeWarning,
    ConvergenceError,
    DimensionMismatchError,
    FrontierRangeWarning,
    InfeasibleConstraintError,
    InsufficientDataError,
    InvalidParameterError,
    PortfolioFrontierError,
)
from portfolio_frontier.core.estimator import MomentEstimate, ReturnEstimator, compute_stats_from_returns
from portfolio_frontier.core.optimizer import Constraints, PortfolioOptimizer
from portfolio_frontier.core.targets import TargetMatcher, TargetResult
from portfolio_frontier.core.loader import DataLoader, ReturnDataset

__all__ = [
    "MomentEstimate",
    "ReturnEstimator",
    "compute_stats_from_returns",
    "Constraints",
    "PortfolioOptimizer",
    "TargetMatcher",
    "TargetResult",
    "DataLoader",
    "ReturnDataset",
    "PortfolioFrontierError",
    "InsufficientDataError",
    "InvalidParameterError",
    "DimensionMismatchError",
    "InfeasibleConstraintError",
    "ConvergenceError",
    "FrontierRangeWarning",
    "BelowRangeWarning",
    "AboveRangeWarning",
]
