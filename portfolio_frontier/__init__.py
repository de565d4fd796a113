"""
Portfolio Frontier - Mean-Variance Efficient Frontier Analysis
==============================================================

Estimates asset moments from historical returns, builds the long-only
efficient frontier and finds frontier portfolios for a target return or
a target risk.

Usage:
    from portfolio_frontier import ReturnEstimator, PortfolioOptimizer, TargetMatcher

    moments = ReturnEstimator().estimate(returns_df)
    optimizer = PortfolioOptimizer(moments)
    frontier = optimizer.estimate_frontier(20)
    result = TargetMatcher(optimizer).by_return(1.0)

Classes:
    ReturnEstimator - Mean vector and covariance matrix from a return sample
    PortfolioOptimizer - Portfolio evaluator and frontier builder
    TargetMatcher - Frontier portfolios for a target return or risk
    DataLoader - Return datasets from Excel/CSV
"""

from portfolio_frontier.core import (
    AboveRangeWarning,
    BelowRangeWarning,
    Constraints,
    ConvergenceError,
    DataLoader,
    DimensionMismatchError,
    InfeasibleConstraintError,
    InsufficientDataError,
    InvalidParameterError,
    MomentEstimate,
    PortfolioOptimizer,
    ReturnEstimator,
    TargetMatcher,
    TargetResult,
    compute_stats_from_returns,
)

__version__ = "1.0.0"

__all__ = [
    "ReturnEstimator",
    "MomentEstimate",
    "PortfolioOptimizer",
    "Constraints",
    "TargetMatcher",
    "TargetResult",
    "DataLoader",
    "compute_stats_from_returns",
    "InsufficientDataError",
    "InvalidParameterError",
    "DimensionMismatchError",
    "InfeasibleConstraintError",
    "ConvergenceError",
    "BelowRangeWarning",
    "AboveRangeWarning",
]
