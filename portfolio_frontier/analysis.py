"""
Frontier analysis pipeline.

The session runs in three stages, each usable on its own so the interactive
front end can pause and prompt between them:

1. Benchmarks: market indices, equal-weight portfolio and the individual assets
2. Frontier: k efficient portfolios, their weights and the exported stat table
3. Targets: frontier portfolios for a target return and a target risk
"""

import logging
from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from portfolio_frontier.config import AnalysisConfig
from portfolio_frontier.core.estimator import ReturnEstimator, series_moments
from portfolio_frontier.core.loader import DataLoader, ReturnDataset
from portfolio_frontier.core.optimizer import PortfolioOptimizer
from portfolio_frontier.core.report import (
    RiskReturnPoint,
    build_stat_table,
    export_stat_table,
    format_weight_table,
    points_from_moments,
    weight_table,
)
from portfolio_frontier.core.targets import TargetMatcher, TargetResult
from portfolio_frontier.visualization import (
    plot_asset_universe,
    plot_optimal_portfolios,
    plot_targeted_portfolios,
)

logger = logging.getLogger(__name__)


def load_dataset(config: AnalysisConfig) -> ReturnDataset:
    """Load the return dataset described by the configuration."""
    loader = DataLoader(
        date_column=config.date_column,
        benchmark_columns=config.benchmark_columns,
        exclude_columns=config.exclude_columns
    )
    return loader.load(str(config.data_path()), config.sheet_name)


class FrontierAnalysis:
    """
    Runs the frontier analysis for one return dataset.

    The moment estimate, optimizer and matcher are built once; stage results
    accumulate in `results` and the stat table rows in `stat_points`.
    """

    def __init__(self, config: AnalysisConfig, dataset: ReturnDataset):
        self.config = config
        self.dataset = dataset

        self.moments = ReturnEstimator(config.ddof).estimate(dataset.asset_returns)
        self.optimizer = PortfolioOptimizer(self.moments, max_iter=config.max_iter)
        self.matcher = TargetMatcher(
            self.optimizer,
            tolerance=config.tolerance,
            max_iter=config.bisection_max_iter
        )

        self.references: List[RiskReturnPoint] = []
        self.assets: List[RiskReturnPoint] = points_from_moments(
            self.moments.asset_risks, self.moments.mean, self.moments.asset_names
        )
        self.frontier: List[RiskReturnPoint] = []
        self.stat_points: List[RiskReturnPoint] = []
        self.results: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Stage 1: benchmarks
    # ------------------------------------------------------------------

    def benchmark_stage(self):
        """Market indices, equal-weight portfolio and assets on the risk-return plane."""
        labels = self.config.benchmark_labels()
        for column, label in labels.items():
            risk, ret = series_moments(self.dataset.benchmark_returns[column], self.config.ddof)
            self.references.append(RiskReturnPoint(risk, ret, label))

        equal_weight = self.optimizer.equal_weight_portfolio()
        risks, returns = self.optimizer.estimate_port_moments(equal_weight)
        self.references.append(RiskReturnPoint(float(risks[0]), float(returns[0]), 'Equal-weight'))

        self.stat_points = list(self.references) + list(self.assets)
        self.results['benchmarks'] = build_stat_table(self.stat_points)

        logger.info("\n--- %s Returns vs Risk ---", self.config.period_label)
        logger.info("\n%s", self.results['benchmarks'].to_string(index=False))

        fig = plot_asset_universe(
            f"{self.config.period_label} Returns vs Risk",
            self.references, self.assets
        )
        self._save_figure(fig, 'returns_vs_risk')
        return self.results['benchmarks']

    # ------------------------------------------------------------------
    # Stage 2: efficient frontier
    # ------------------------------------------------------------------

    def frontier_stage(self, n_portfolios: Optional[int] = None):
        """Build k frontier portfolios, report their weights and export the stat table."""
        if n_portfolios is not None:
            self.config.set_n_portfolios(n_portfolios)
        k = self.config.n_portfolios

        weights = self.optimizer.estimate_frontier(k)
        risks, returns = self.optimizer.estimate_port_moments(weights)
        labels = [str(i + 1) for i in range(len(weights))]
        self.frontier = points_from_moments(risks, returns, labels)

        for i, w in enumerate(weights):
            logger.info("optimal %d, return %5.2f, risk %5.2f", i + 1, returns[i], risks[i])
            table = weight_table(w, self.optimizer.asset_names, self.config.weight_threshold)
            logger.info("\n%s", format_weight_table(table))

        optimal = points_from_moments(risks, returns, [f"Optimal {label}" for label in labels])
        if not self.stat_points:
            self.stat_points = list(self.references) + list(self.assets)
        stat_table = build_stat_table(self.stat_points + optimal)

        logger.info(" Return and Risk for optimal portfolios vs others")
        logger.info("\n%s", stat_table.to_string(index=False))
        export_path = export_stat_table(
            stat_table, self.config.output_path() / self.config.export_file_name()
        )

        fig = plot_optimal_portfolios(
            f"{self.config.period_label} Optimal Portfolios vs. Market vs. Equal-weight",
            self.frontier, self.references, self.assets
        )
        self._save_figure(fig, 'optimal_portfolios')

        self.results['frontier'] = {
            'weights': weights,
            'risks': risks,
            'returns': returns,
            'stat_table': stat_table,
            'export_path': export_path
        }
        return self.results['frontier']

    def frontier_range(self) -> Dict[str, float]:
        """Risk and return at the two ends of the frontier."""
        limits = self.optimizer.estimate_frontier_limits()
        risks, returns = self.optimizer.estimate_port_moments(limits)
        frontier_range = {
            'min_risk': float(risks[0]),
            'max_risk': float(risks[1]),
            'min_return': float(returns[0]),
            'max_return': float(returns[1])
        }
        logger.info(
            "Frontier range: return %.4f to %.4f, risk %.4f to %.4f",
            frontier_range['min_return'], frontier_range['max_return'],
            frontier_range['min_risk'], frontier_range['max_risk']
        )
        return frontier_range

    # ------------------------------------------------------------------
    # Stage 3: targeted portfolios
    # ------------------------------------------------------------------

    def target_stage(
        self,
        target_return: Optional[float] = None,
        target_risk: Optional[float] = None
    ) -> Dict[str, TargetResult]:
        """Frontier portfolios for the target return and/or target risk."""
        if target_return is None:
            target_return = self.config.target_return
        if target_risk is None:
            target_risk = self.config.target_risk

        period = self.config.period_label
        targeted = {}
        points = []

        if target_return is not None:
            result = self.matcher.by_return(target_return)
            targeted['return'] = result
            points.append(RiskReturnPoint(result.risk, result.expected_return,
                                          f"{target_return:g}% Return"))
            self._log_target(f"{period} portfolio with {target_return:g}% target return", result)

        if target_risk is not None:
            result = self.matcher.by_risk(target_risk)
            targeted['risk'] = result
            points.append(RiskReturnPoint(result.risk, result.expected_return,
                                          f"{target_risk:g}% Risk"))
            self._log_target(f"{period} portfolio with {target_risk:g}% target risk", result)

        if targeted:
            if not self.frontier:
                weights = self.optimizer.estimate_frontier(self.config.n_portfolios)
                risks, returns = self.optimizer.estimate_port_moments(weights)
                self.frontier = points_from_moments(
                    risks, returns, [str(i + 1) for i in range(len(weights))]
                )
            fig = plot_targeted_portfolios(
                f"{period} Efficient Frontier with Targeted Portfolios",
                self.frontier, self.references, points, self.assets
            )
            self._save_figure(fig, 'targeted_portfolios')

        self.results['targets'] = targeted
        return targeted

    def _log_target(self, heading: str, result: TargetResult):
        logger.info(heading)
        if result.warning is not None:
            logger.info("  Note: %s", result.warning)
        logger.info("  return %.4f, risk %.4f", result.expected_return, result.risk)
        table = weight_table(result.weights, self.optimizer.asset_names, self.config.weight_threshold)
        logger.info("\n%s", format_weight_table(table))

    def _save_figure(self, fig: Figure, name: str):
        if self.config.save_plots:
            path = self.config.output_path() / f"{self.config.period_label}_{name}.png"
            fig.savefig(path, dpi=150, bbox_inches='tight')
            logger.info("Saved: %s", path.name)
        if not self.config.show_plots:
            plt.close(fig)


def run_analysis(config: AnalysisConfig, dataset: Optional[ReturnDataset] = None) -> Dict[str, Any]:
    """
    Run all three stages non-interactively.

    Args:
        config: Analysis configuration
        dataset: Preloaded dataset (default: load from config.data_path())

    Returns:
        Dictionary of stage results plus the analysis object under 'analysis'
    """
    if dataset is None:
        dataset = load_dataset(config)

    analysis = FrontierAnalysis(config, dataset)
    analysis.benchmark_stage()
    analysis.frontier_stage()
    analysis.results['range'] = analysis.frontier_range()
    if config.target_return is not None or config.target_risk is not None:
        analysis.target_stage()

    results = dict(analysis.results)
    results['analysis'] = analysis
    return results
