"""
Target Matching on the Efficient Frontier
=========================================

Locates frontier portfolios for a user-specified target:

- by_return: the minimum-risk portfolio whose return equals the target.
  Solved exactly on the continuous frontier, not interpolated between the
  discretized frontier points.
- by_risk: the maximum-return portfolio whose risk equals the target.
  Frontier risk rises monotonically with return above the minimum-variance
  portfolio, so this is a bisection over the return level.

Targets outside the frontier range are clamped to the nearer end and the
result carries a BelowRangeWarning or AboveRangeWarning instead of raising.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from portfolio_frontier.core.errors import (
    AboveRangeWarning,
    BelowRangeWarning,
    ConvergenceError,
    FrontierRangeWarning,
    InvalidParameterError,
)
from portfolio_frontier.core.optimizer import PortfolioOptimizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetResult:
    """
    A frontier portfolio matched to a target.

    Attributes:
        weights: Portfolio weights (length N)
        risk: Standard deviation of the portfolio
        expected_return: Expected return of the portfolio
        target: The requested return or risk
        kind: 'return' or 'risk'
        warning: Range warning when the target was clamped, else None
        iterations: Bisection steps used (0 for by_return and clamped results)
    """

    weights: np.ndarray
    risk: float
    expected_return: float
    target: float
    kind: str
    warning: Optional[FrontierRangeWarning] = None
    iterations: int = 0

    @property
    def clamped(self) -> bool:
        return self.warning is not None


class TargetMatcher:
    """
    Finds frontier portfolios for a target return or target risk.

    Attributes:
        optimizer: PortfolioOptimizer providing the frontier and the evaluator
        tolerance: Convergence tolerance on risk, same units as the data
        max_iter: Bisection iteration cap for by_risk
    """

    def __init__(self, optimizer: PortfolioOptimizer, tolerance: float = 1e-6, max_iter: int = 100):
        if tolerance <= 0:
            raise InvalidParameterError(f"tolerance must be positive, got {tolerance}")
        if max_iter < 1:
            raise InvalidParameterError(f"max_iter must be positive, got {max_iter}")
        self.optimizer = optimizer
        self.tolerance = tolerance
        self.max_iter = max_iter

    def _limits(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        limits = self.optimizer.estimate_frontier_limits()
        risks, returns = self.optimizer.estimate_port_moments(limits)
        return limits, risks, returns

    def _result(self, weights, target, kind, warning=None, iterations=0) -> TargetResult:
        risks, returns = self.optimizer.estimate_port_moments(weights)
        if warning is not None:
            logger.warning(str(warning))
        return TargetResult(
            weights=weights,
            risk=float(risks[0]),
            expected_return=float(returns[0]),
            target=float(target),
            kind=kind,
            warning=warning,
            iterations=iterations
        )

    def by_return(self, target_return: float) -> TargetResult:
        """
        Minimum-risk frontier portfolio with the target return.

        Args:
            target_return: Desired expected return

        Returns:
            TargetResult; clamped with a warning when the target is out of range
        """
        target = float(target_return)
        limits, _, returns = self._limits()
        ret_min, ret_max = returns

        if target < ret_min - self.optimizer.tolerance:
            return self._result(limits[0].copy(), target, 'return',
                                BelowRangeWarning(target, ret_min, 'return'))
        if target > ret_max + self.optimizer.tolerance:
            return self._result(limits[1].copy(), target, 'return',
                                AboveRangeWarning(target, ret_max, 'return'))

        level = float(np.clip(target, ret_min, ret_max))
        weights = self.optimizer.frontier_portfolio(level, limits)
        return self._result(weights, target, 'return')

    def by_risk(self, target_risk: float) -> TargetResult:
        """
        Maximum-return frontier portfolio with the target risk.

        Bisects the return level between the two frontier limits until the
        achieved risk is within tolerance of the target. Among portfolios of
        equal risk the search keeps the one with the higher return.

        Args:
            target_risk: Desired standard deviation

        Returns:
            TargetResult; clamped with a warning when the target is out of range

        Raises:
            ConvergenceError: If the bisection exceeds max_iter steps
        """
        target = float(target_risk)
        limits, risks, returns = self._limits()
        risk_min, risk_max = risks

        if target < risk_min - self.tolerance:
            return self._result(limits[0].copy(), target, 'risk',
                                BelowRangeWarning(target, risk_min, 'risk'))
        if target > risk_max + self.tolerance:
            return self._result(limits[1].copy(), target, 'risk',
                                AboveRangeWarning(target, risk_max, 'risk'))
        if target >= risk_max:
            return self._result(limits[1].copy(), target, 'risk')
        if target <= risk_min or returns[1] - returns[0] <= self.optimizer.tolerance:
            return self._result(limits[0].copy(), target, 'risk')

        lo, hi = float(returns[0]), float(returns[1])
        best = limits[0].copy()

        for iteration in range(1, self.max_iter + 1):
            mid = (lo + hi) / 2
            weights = self.optimizer.frontier_portfolio(mid, limits)
            risk = self.optimizer.portfolio_std(weights)

            if abs(risk - target) < self.tolerance:
                return self._result(weights, target, 'risk', iterations=iteration)

            if risk < target:
                lo, best = mid, weights
            else:
                hi = mid

            if hi - lo <= np.finfo(float).eps * max(1.0, abs(hi)):
                logger.debug("Return bracket exhausted after %d steps at risk %g", iteration, risk)
                return self._result(best, target, 'risk', iterations=iteration)

        raise ConvergenceError(
            f"Target risk search for {target:g} did not converge within {self.max_iter} iterations"
        )
