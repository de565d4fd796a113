"""Visualization modules for the frontier analysis."""

from portfolio_frontier.visualization.plots import (
    plot_asset_universe,
    plot_optimal_portfolios,
    plot_targeted_portfolios
)

__all__ = [
    "plot_asset_universe",
    "plot_optimal_portfolios",
    "plot_targeted_portfolios",
]
