"""
Plotting Module for the Frontier Analysis
=========================================

Risk-return plots for the three stages of an analysis session:

- Asset universe: benchmarks, equal-weight portfolio and individual assets
- Optimal portfolios: frontier line with the numbered frontier portfolios
- Targeted portfolios: frontier line with the target-return and target-risk portfolios

Every function consumes labelled (risk, return) points only and returns the
matplotlib Figure, saving it when a path is given.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from portfolio_frontier.core.report import RiskReturnPoint


def _scatter_labelled(
    ax: Axes,
    points: Sequence[RiskReturnPoint],
    color: str,
    marker: str,
    size: int = 100,
    legend: Optional[str] = None,
    zorder: int = 5
):
    """Scatter points and annotate each one with its label."""
    if not points:
        return
    ax.scatter([p.risk for p in points], [p.ret for p in points],
               c=color, s=size, marker=marker, edgecolors='black',
               label=legend, zorder=zorder)
    for p in points:
        ax.annotate(p.label, (p.risk, p.ret),
                    xytext=(5, 5), textcoords='offset points',
                    fontsize=9, fontweight='bold')


def _plot_frontier_line(ax: Axes, frontier: Sequence[RiskReturnPoint]):
    if not frontier:
        return
    ax.plot([p.risk for p in frontier], [p.ret for p in frontier],
            'b-', linewidth=2, label='Efficient Frontier', zorder=2)


def _finish(fig: Figure, ax: Axes, title: str, save_path: Optional[str]) -> Figure:
    ax.set_xlabel('Risk (Standard Deviation)', fontsize=12)
    ax.set_ylabel('Mean Return', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.legend(loc='upper left', fontsize=10)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def plot_asset_universe(
    title: str,
    references: Sequence[RiskReturnPoint],
    assets: Sequence[RiskReturnPoint],
    figsize: Tuple[int, int] = (12, 8),
    save_path: Optional[str] = None
) -> Figure:
    """
    Distribution of risk and return across the universe.

    Args:
        title: Plot title
        references: Benchmarks and the equal-weight portfolio
        assets: Individual assets
        figsize: Figure size (width, height)
        save_path: If provided, save the figure to this path

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    _scatter_labelled(ax, references, 'gold', 'D', 150, 'Market / Equal-weight', zorder=6)
    _scatter_labelled(ax, assets, 'red', 'o', 60, 'Individual Assets')

    return _finish(fig, ax, title, save_path)


def plot_optimal_portfolios(
    title: str,
    frontier: Sequence[RiskReturnPoint],
    references: Sequence[RiskReturnPoint],
    assets: Sequence[RiskReturnPoint],
    figsize: Tuple[int, int] = (12, 8),
    save_path: Optional[str] = None
) -> Figure:
    """
    Efficient frontier with the numbered frontier portfolios.

    Args:
        title: Plot title
        frontier: Frontier portfolios ordered by risk, labelled 1..k
        references: Benchmarks and the equal-weight portfolio
        assets: Individual assets
        figsize: Figure size
        save_path: Optional save path

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    _plot_frontier_line(ax, frontier)
    _scatter_labelled(ax, references, 'gold', 'D', 150, 'Market / Equal-weight', zorder=6)
    _scatter_labelled(ax, frontier, 'blue', 's', 40, 'Optimal Portfolios', zorder=4)
    _scatter_labelled(ax, assets, 'red', 'o', 60, 'Individual Assets')

    return _finish(fig, ax, title, save_path)


def plot_targeted_portfolios(
    title: str,
    frontier: Sequence[RiskReturnPoint],
    references: Sequence[RiskReturnPoint],
    targeted: Sequence[RiskReturnPoint],
    assets: Sequence[RiskReturnPoint],
    figsize: Tuple[int, int] = (12, 8),
    save_path: Optional[str] = None
) -> Figure:
    """
    Efficient frontier with the portfolios matched to target return and risk.

    Args:
        title: Plot title
        frontier: Frontier portfolios ordered by risk
        references: Benchmarks and the equal-weight portfolio
        targeted: Target-return and target-risk portfolios
        assets: Individual assets
        figsize: Figure size
        save_path: Optional save path

    Returns:
        matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    _plot_frontier_line(ax, frontier)
    _scatter_labelled(ax, references, 'gold', 'D', 150, 'Market / Equal-weight', zorder=6)

    colors = plt.cm.Set1(np.linspace(0, 1, max(len(targeted), 1)))
    for i, point in enumerate(targeted):
        ax.scatter([point.risk], [point.ret], c=[colors[i]], s=200, marker='*',
                   edgecolors='black', label=point.label, zorder=7)

    _scatter_labelled(ax, assets, 'red', 'o', 60, 'Individual Assets')

    return _finish(fig, ax, title, save_path)
