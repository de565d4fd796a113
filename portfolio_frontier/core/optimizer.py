"""
Portfolio Optimizer - Long-Only Mean-Variance Frontier
======================================================

This module implements the two numerical pieces of the frontier pipeline:

- Portfolio Evaluator: maps weight vectors to (risk, return)
      risk   = sqrt(w^T * Sigma * w)
      return = w^T * mu
- Frontier Builder: the discretized efficient frontier under the
  fully-invested, long-only constraints (sum(w) = 1, 0 <= w <= 1)

Each frontier point solves the convex quadratic program:

    minimize:   w^T * Sigma * w
    subject to: sum(w) = 1
                mu^T * w = target_return
                lower <= w <= upper

Solution strategy:
1. Closed form from the KKT system when only the equality constraints are
   active (two-fund separation). Used whenever the solution respects the bounds.
2. Full QP via scipy's SLSQP when a bound binds, started from the feasible
   mix of the two frontier limits at the requested return level. An early
   SLSQP stop is accepted only when the point passes a KKT check (scipy's
   linprog searches for valid multipliers); otherwise the solve is retried
   from equal weights and then raises ConvergenceError.

The maximum-return portfolio is a greedy fill by expected return. When the
top returns tie, the tied assets' combined weight is split by minimum
variance on that sub-problem alone.

Target returns are spaced evenly between the minimum-variance portfolio's
return and the maximum-return portfolio's return, so every requested level
is feasible by construction.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.optimize import linprog, minimize

from portfolio_frontier.core.errors import (
    ConvergenceError,
    DimensionMismatchError,
    InfeasibleConstraintError,
    InvalidParameterError,
)
from portfolio_frontier.core.estimator import MomentEstimate

logger = logging.getLogger(__name__)

_SOLVER_FTOL = 1e-12        # SLSQP function-value convergence tolerance
_FEASIBILITY_TOL = 1e-8     # slack allowed on budget and bound constraints
_MAX_CONDITION = 1e12       # KKT systems above this are treated as singular
_KKT_TOL = 1e-6            # relative gradient slack when certifying an early SLSQP stop


@dataclass(frozen=True)
class Constraints:
    """
    Per-asset bounds for a fully-invested portfolio (sum of weights == 1).

    The default is long-only with no leverage: 0 <= w_i <= 1.
    """

    lower_bound: float = 0.0
    upper_bound: float = 1.0

    def __post_init__(self):
        if self.lower_bound > self.upper_bound:
            raise InvalidParameterError(
                f"Lower bound {self.lower_bound} exceeds upper bound {self.upper_bound}"
            )

    def bounds(self, n_assets: int) -> List[Tuple[float, float]]:
        return [(self.lower_bound, self.upper_bound) for _ in range(n_assets)]

    def admits(self, n_assets: int) -> bool:
        """True if some weight vector within the bounds sums to one."""
        return (n_assets * self.lower_bound <= 1 + _FEASIBILITY_TOL and
                n_assets * self.upper_bound >= 1 - _FEASIBILITY_TOL)


def _objective_variance(w: np.ndarray, cov: np.ndarray) -> float:
    return float(w @ cov @ w)


def _gradient_variance(w: np.ndarray, cov: np.ndarray) -> np.ndarray:
    return 2.0 * cov @ w


def _solve_kkt(
    hessian: np.ndarray,
    linear: np.ndarray,
    a_eq: np.ndarray,
    b_eq: np.ndarray
) -> Optional[np.ndarray]:
    """
    Minimize 1/2 x^T H x + c^T x subject to A x = b via the KKT system:

        [ H  A^T ] [ x ]   [ -c ]
        [ A   0  ] [ y ] = [  b ]

    Returns None when the system is singular or ill-conditioned.
    """
    n, n_eq = len(linear), len(b_eq)
    kkt = np.zeros((n + n_eq, n + n_eq))
    kkt[:n, :n] = hessian
    kkt[:n, n:] = a_eq.T
    kkt[n:, :n] = a_eq
    rhs = np.concatenate([-linear, b_eq])

    if np.linalg.cond(kkt) > _MAX_CONDITION:
        return None
    try:
        solution = np.linalg.solve(kkt, rhs)
    except np.linalg.LinAlgError:
        return None

    x = solution[:n]
    return x if np.all(np.isfinite(x)) else None


class PortfolioOptimizer:
    """
    Evaluates portfolios and builds the efficient frontier for one moment estimate.

    The optimizer never mutates its MomentEstimate or Constraints, so the same
    instance can serve any number of requests.

    Attributes:
        moments (MomentEstimate): Mean vector and covariance matrix
        constraints (Constraints): Per-asset bounds
        tolerance (float): Return-level tolerance for boundary and tie detection
        max_iter (int): SLSQP iteration cap per solve

    Example:
        >>> moments = MomentEstimate(('A', 'B', 'C'), [0.01, 0.02, 0.015],
        ...                          np.diag([0.04, 0.09, 0.0625]))
        >>> optimizer = PortfolioOptimizer(moments)
        >>> risks, returns = optimizer.estimate_port_moments(optimizer.estimate_frontier(5))
    """

    def __init__(
        self,
        moments: MomentEstimate,
        constraints: Optional[Constraints] = None,
        tolerance: float = 1e-9,
        max_iter: int = 500
    ):
        self.moments = moments
        self.constraints = constraints if constraints is not None else Constraints()
        self.tolerance = tolerance
        self.max_iter = max_iter

        if max_iter < 1:
            raise InvalidParameterError(f"max_iter must be positive, got {max_iter}")
        if not self.constraints.admits(self.n_assets):
            raise InvalidParameterError(
                f"Bounds [{self.constraints.lower_bound}, {self.constraints.upper_bound}] "
                f"cannot hold a fully-invested portfolio of {self.n_assets} assets"
            )

    @property
    def asset_names(self) -> List[str]:
        return list(self.moments.asset_names)

    @property
    def n_assets(self) -> int:
        return self.moments.n_assets

    @property
    def expected_returns(self) -> np.ndarray:
        return self.moments.mean

    @property
    def cov_matrix(self) -> np.ndarray:
        return self.moments.cov

    # ------------------------------------------------------------------
    # Portfolio Evaluator
    # ------------------------------------------------------------------

    def _check_weights(self, weights) -> np.ndarray:
        w = np.asarray(weights, dtype=float)
        if w.shape != (self.n_assets,):
            raise DimensionMismatchError(
                f"Weight vector shape {w.shape} doesn't match {self.n_assets} assets"
            )
        return w

    def portfolio_return(self, weights: np.ndarray) -> float:
        """Expected portfolio return: mu_p = w^T * mu"""
        return float(np.dot(self._check_weights(weights), self.expected_returns))

    def portfolio_variance(self, weights: np.ndarray) -> float:
        """Portfolio variance: sigma_p^2 = w^T * Sigma * w"""
        w = self._check_weights(weights)
        return _objective_variance(w, self.cov_matrix)

    def portfolio_std(self, weights: np.ndarray) -> float:
        """Portfolio standard deviation (risk)."""
        return float(np.sqrt(max(self.portfolio_variance(weights), 0.0)))

    def portfolio_stats(self, weights: np.ndarray) -> Dict[str, float]:
        """
        Calculate all portfolio statistics.

        Returns:
            Dictionary containing mean, std and variance
        """
        var = self.portfolio_variance(weights)
        return {
            'mean': self.portfolio_return(weights),
            'std': float(np.sqrt(max(var, 0.0))),
            'variance': var
        }

    def estimate_port_moments(self, weights: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Risk and return for one or more portfolios.

        Weights are not checked against the constraints, so arbitrary vectors
        (single-asset or leveraged) can be evaluated too.

        Args:
            weights: Weight vector (N,) or matrix (k, N) with one portfolio per row

        Returns:
            Tuple of (risks, returns), each an array of length k (1 for a vector)

        Raises:
            DimensionMismatchError: If the weight length differs from N
        """
        w = np.asarray(weights, dtype=float)
        if w.ndim == 1:
            w = w.reshape(1, -1)
        if w.ndim != 2 or w.shape[1] != self.n_assets:
            raise DimensionMismatchError(
                f"Weights of shape {np.shape(weights)} don't match {self.n_assets} assets"
            )

        variances = np.einsum('ij,jk,ik->i', w, self.cov_matrix, w)
        risks = np.sqrt(np.clip(variances, 0.0, None))
        returns = w @ self.expected_returns
        return risks, returns

    # ------------------------------------------------------------------
    # Frontier Builder
    # ------------------------------------------------------------------

    def equal_weight_portfolio(self) -> np.ndarray:
        """Initial portfolio with 1/N in every asset."""
        return np.ones(self.n_assets) / self.n_assets

    def minimum_variance_portfolio(self) -> np.ndarray:
        """
        Global minimum-variance portfolio under the constraints.

        This is the leftmost point of the efficient frontier.
        """
        weights = self._closed_form()
        if weights is None:
            weights = self._solve_qp(self.equal_weight_portfolio(), None, "Minimum variance")
        return weights

    def maximum_return_portfolio(self) -> np.ndarray:
        """
        Maximum-return portfolio under the constraints.

        Fills assets in order of decreasing expected return. When several
        assets share the top return level, the minimum-variance mix among
        them is taken.

        Raises:
            ConvergenceError: If splitting the weight across tied assets fails
        """
        lower, upper = self.constraints.lower_bound, self.constraints.upper_bound
        weights = np.full(self.n_assets, lower, dtype=float)
        remaining = 1.0 - weights.sum()

        marginal = None
        for i in np.argsort(-self.expected_returns, kind='stable'):
            if remaining <= _FEASIBILITY_TOL:
                break
            step = min(upper - lower, remaining)
            weights[i] += step
            remaining -= step
            marginal = i

        # The last asset filled decides the solution; ties with it leave a choice
        if marginal is None:
            return weights
        ties = np.abs(self.expected_returns - self.expected_returns[marginal]) <= self.tolerance
        if np.count_nonzero(ties) > 1:
            weights = self._split_tied(weights, np.flatnonzero(ties))

        return weights

    def estimate_frontier_limits(self) -> np.ndarray:
        """
        The two ends of the efficient frontier.

        Returns:
            2 x N array: [minimum-variance portfolio, maximum-return portfolio]
        """
        return np.vstack([self.minimum_variance_portfolio(), self.maximum_return_portfolio()])

    def frontier_portfolio(
        self,
        target_return: float,
        limits: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """
        Minimum-variance portfolio with exactly the target return.

        Args:
            target_return: Return level within the frontier range
            limits: Precomputed estimate_frontier_limits() output

        Raises:
            InfeasibleConstraintError: If the target lies outside the frontier range
            ConvergenceError: If the QP solver hits its iteration cap
        """
        if limits is None:
            limits = self.estimate_frontier_limits()
        _, (ret_min, ret_max) = self.estimate_port_moments(limits)

        if target_return < ret_min - self.tolerance or target_return > ret_max + self.tolerance:
            raise InfeasibleConstraintError(
                f"Target return {target_return:g} is outside [{ret_min:g}, {ret_max:g}]"
            )

        span = ret_max - ret_min
        if span <= self.tolerance or target_return <= ret_min:
            return limits[0].copy()
        if target_return >= ret_max:
            return limits[1].copy()

        weights = self._closed_form(target_return)
        if weights is None:
            # The mix of the limits is feasible and hits the target exactly
            lam = (target_return - ret_min) / span
            x0 = (1 - lam) * limits[0] + lam * limits[1]
            weights = self._solve_qp(x0, target_return, f"Frontier point at {target_return:g}")
        return weights

    def estimate_frontier(self, n_portfolios: int = 10) -> np.ndarray:
        """
        Discretized efficient frontier.

        Loops over evenly spaced target returns from the minimum-variance
        portfolio's return to the maximum return.

        Args:
            n_portfolios: Number of portfolios k (k = 1 gives the minimum-variance portfolio)

        Returns:
            k x N array of weights, ordered by increasing risk and return. If the
            frontier is a single point (all return levels tie) one row is returned.

        Raises:
            InvalidParameterError: If n_portfolios is not an integer >= 1
        """
        if (isinstance(n_portfolios, bool) or not isinstance(n_portfolios, (int, np.integer))
                or n_portfolios < 1):
            raise InvalidParameterError(
                f"Number of portfolios must be an integer >= 1, got {n_portfolios!r}"
            )

        limits = self.estimate_frontier_limits()
        if n_portfolios == 1:
            return limits[:1].copy()

        _, (ret_min, ret_max) = self.estimate_port_moments(limits)
        if ret_max - ret_min <= self.tolerance:
            logger.info("All return levels coincide; frontier collapses to one portfolio")
            return limits[:1].copy()

        levels = np.linspace(ret_min, ret_max, n_portfolios)
        portfolios = [limits[0]]
        for level in levels[1:-1]:
            portfolios.append(self.frontier_portfolio(float(np.clip(level, ret_min, ret_max)), limits))
        portfolios.append(limits[1])

        logger.debug("Efficient frontier built with %d portfolios", len(portfolios))
        return np.vstack(portfolios)

    # ------------------------------------------------------------------
    # Solvers
    # ------------------------------------------------------------------


    def _within_bounds(self, weights: Optional[np.ndarray]) -> Optional[np.ndarray]:
        if weights is None:
            return None
        lower, upper = self.constraints.lower_bound, self.constraints.upper_bound
        if np.any(weights < lower - _FEASIBILITY_TOL) or np.any(weights > upper + _FEASIBILITY_TOL):
            return None
        return np.clip(weights, lower, upper)

    def _closed_form(self, target_return: Optional[float] = None) -> Optional[np.ndarray]:
        """
        Solve the equality-constrained problem from its KKT conditions.

        Returns None when the KKT system is singular or the solution violates
        a bound, in which case the full QP has to be solved.
        """
        rows = [np.ones(self.n_assets)]
        levels = [1.0]
        if target_return is not None:
            rows.append(self.expected_returns)
            levels.append(target_return)

        weights = _solve_kkt(2.0 * self.cov_matrix, np.zeros(self.n_assets),
                             np.vstack(rows), np.array(levels))
        return self._within_bounds(weights)

    def _split_tied(self, weights: np.ndarray, tied: np.ndarray) -> np.ndarray:
        """
        Minimum-variance split of the weight held in equally-returning assets.

        Every other asset keeps its greedy weight, so the portfolio return is
        unchanged and only the variance over the tied assets is minimized.
        """
        held = weights.copy()
        held[tied] = 0.0
        budget = float(weights[tied].sum())
        cov_tied = self.cov_matrix[np.ix_(tied, tied)]
        linear = 2.0 * self.cov_matrix[tied] @ held
        n_tied = len(tied)

        split = self._within_bounds(
            _solve_kkt(2.0 * cov_tied, linear, np.ones((1, n_tied)), np.array([budget]))
        )
        if split is None:
            # Equal split of the budget is interior whenever the greedy fill was feasible
            result = self._run_slsqp(
                lambda x: float(x @ cov_tied @ x + linear @ x),
                lambda x: 2.0 * cov_tied @ x + linear,
                np.full(n_tied, budget / n_tied),
                [{'type': 'eq',
                  'fun': lambda x: np.sum(x) - budget,
                  'jac': lambda x: np.ones_like(x)}]
            )
            if not result.success:
                raise ConvergenceError(
                    f"Maximum return split across tied assets failed: {result.message}"
                )
            split = np.clip(result.x, self.constraints.lower_bound, self.constraints.upper_bound)

        held[tied] = split
        return held

    def _run_slsqp(self, fun, jac, x0: np.ndarray, constraints: List[dict]):
        return minimize(
            fun,
            np.asarray(x0, dtype=float),
            jac=jac,
            method='SLSQP',
            bounds=self.constraints.bounds(len(x0)),
            constraints=constraints,
            options={'ftol': _SOLVER_FTOL, 'maxiter': self.max_iter}
        )

    def _solve_qp(
        self,
        x0: np.ndarray,
        target_return: Optional[float],
        label: str
    ) -> np.ndarray:
        """
        Minimize variance with SLSQP, optionally at a fixed return.

        A run that stops without success is kept only if its point is feasible
        and satisfies the KKT conditions. Otherwise the solve is repeated from
        the equal-weight portfolio before giving up.

        Raises:
            ConvergenceError: If SLSQP hits max_iter, or no start yields an optimum
        """
        mu = self.expected_returns
        cov = self.cov_matrix
        constraints = [{'type': 'eq',
                        'fun': lambda w: np.sum(w) - 1.0,
                        'jac': lambda w: np.ones_like(w)}]
        if target_return is not None:
            constraints.append({'type': 'eq',
                                'fun': lambda w: np.dot(w, mu) - target_return,
                                'jac': lambda w: mu})

        starts = [np.asarray(x0, dtype=float)]
        equal_weight = self.equal_weight_portfolio()
        if not np.allclose(starts[0], equal_weight):
            starts.append(equal_weight)

        message = ''
        for start in starts:
            result = self._run_slsqp(
                lambda w: _objective_variance(w, cov),
                lambda w: _gradient_variance(w, cov),
                start,
                constraints
            )
            weights = np.clip(result.x, self.constraints.lower_bound, self.constraints.upper_bound)

            # status 9: iteration limit reached
            if result.status == 9:
                raise ConvergenceError(
                    f"{label} optimization did not converge within {self.max_iter} iterations"
                )
            if result.success:
                return weights
            if self._is_feasible(weights, target_return) and self._satisfies_kkt(weights, target_return):
                logger.debug("%s optimization stopped early (%s); KKT conditions hold",
                             label, result.message)
                return weights

            logger.debug("%s optimization failed (%s)", label, result.message)
            message = result.message

        raise ConvergenceError(f"{label} optimization failed: {message}")

    def _is_feasible(self, weights: np.ndarray, target_return: Optional[float]) -> bool:
        if abs(weights.sum() - 1.0) > _FEASIBILITY_TOL:
            return False
        if target_return is not None:
            return abs(weights @ self.expected_returns - target_return) <= max(self.tolerance, 1e-8)
        return True

    def _satisfies_kkt(self, weights: np.ndarray, target_return: Optional[float]) -> bool:
        """
        First-order optimality of a feasible point of the variance QP.

        Searches for equality multipliers y (budget, plus return when fixed)
        with gradient == A^T y on assets inside their bounds, gradient >= A^T y
        at the lower bound and gradient <= A^T y at the upper bound.
        """
        lower, upper = self.constraints.lower_bound, self.constraints.upper_bound
        grad = _gradient_variance(weights, self.cov_matrix)
        columns = [np.ones(self.n_assets)]
        if target_return is not None:
            columns.append(self.expected_returns)
        basis = np.column_stack(columns)
        tol = _KKT_TOL * max(1.0, float(np.abs(grad).max()))

        not_upper = weights < upper - _FEASIBILITY_TOL
        not_lower = weights > lower + _FEASIBILITY_TOL
        a_ub = np.vstack([basis[not_upper], -basis[not_lower]])
        b_ub = np.concatenate([grad[not_upper] + tol, -grad[not_lower] + tol])
        if not len(b_ub):
            return True

        result = linprog(np.zeros(basis.shape[1]), A_ub=a_ub, b_ub=b_ub,
                         bounds=[(None, None)] * basis.shape[1], method='highs')
        return result.status == 0
