"""
Return Estimator - Sample Moments of Historical Returns
=======================================================

Turns a return sample (rows = periods, columns = assets) into the moment
estimate that every optimization in this package is built on:

- Mean vector: arithmetic mean of each asset column
- Covariance matrix: sample covariance (divide by T-1 by default)

The estimate is immutable once built. The asset order fixes the indexing of
every weight vector, mean vector and covariance matrix for the session.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from portfolio_frontier.core.errors import (
    DimensionMismatchError,
    InsufficientDataError,
    InvalidParameterError,
)

logger = logging.getLogger(__name__)

ReturnSample = Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]]


@dataclass(frozen=True)
class MomentEstimate:
    """
    Mean vector and covariance matrix for an ordered asset universe.

    Attributes:
        asset_names: Ordered, unique asset identifiers (length N)
        mean: Expected return per asset (length N)
        cov: Covariance matrix (N x N, symmetric)
        n_periods: Number of periods the estimate was built from (0 if given directly)
    """

    asset_names: Tuple[str, ...]
    mean: np.ndarray
    cov: np.ndarray
    n_periods: int = 0

    def __post_init__(self):
        mean = np.array(self.mean, dtype=float).flatten()
        cov = np.array(self.cov, dtype=float)
        names = tuple(str(name) for name in self.asset_names)
        n_assets = len(mean)

        if n_assets == 0:
            raise InvalidParameterError("Asset universe is empty")
        if len(names) != n_assets:
            raise DimensionMismatchError(
                f"{len(names)} asset names but {n_assets} expected returns"
            )
        if len(set(names)) != n_assets:
            raise InvalidParameterError(f"Asset names must be unique: {list(names)}")
        if cov.shape != (n_assets, n_assets):
            raise DimensionMismatchError(
                f"Covariance matrix shape {cov.shape} doesn't match "
                f"number of assets {n_assets}"
            )
        if not (np.all(np.isfinite(mean)) and np.all(np.isfinite(cov))):
            raise InvalidParameterError("Moment estimate contains NaN or Inf")

        if not np.array_equal(cov, cov.T):
            cov = (cov + cov.T) / 2

        eigenvalues = np.linalg.eigvalsh(cov)
        if np.any(eigenvalues < -1e-10):
            logger.warning(
                "Covariance matrix has negative eigenvalues (min = %.6e). "
                "Results may be unreliable.", eigenvalues.min()
            )

        mean.setflags(write=False)
        cov.setflags(write=False)
        object.__setattr__(self, 'asset_names', names)
        object.__setattr__(self, 'mean', mean)
        object.__setattr__(self, 'cov', cov)

    @property
    def n_assets(self) -> int:
        return len(self.asset_names)

    @property
    def asset_risks(self) -> np.ndarray:
        """Standard deviation of each asset: sqrt(diag(Sigma))."""
        return np.sqrt(np.clip(np.diag(self.cov), 0.0, None))

    def asset_table(self) -> pd.DataFrame:
        """Per-asset return and risk, indexed by asset name."""
        return pd.DataFrame(
            {'Return': self.mean, 'Risk': self.asset_risks},
            index=list(self.asset_names)
        )


class ReturnEstimator:
    """
    Estimates asset moments from a historical return sample.

    Example:
        >>> returns = pd.DataFrame({'A': [0.01, 0.03, -0.02], 'B': [0.02, -0.01, 0.00]})
        >>> estimate = ReturnEstimator().estimate(returns)
        >>> estimate.mean
        array([0.00666667, 0.00333333])
    """

    def __init__(self, ddof: int = 1):
        """
        Args:
            ddof: Delta degrees of freedom for the covariance (1 = sample, 0 = population)
        """
        if ddof not in (0, 1):
            raise InvalidParameterError(f"ddof must be 0 or 1, got {ddof}")
        self.ddof = ddof

    def estimate(
        self,
        returns: ReturnSample,
        asset_names: Optional[List[str]] = None
    ) -> MomentEstimate:
        """
        Compute the mean vector and covariance matrix.

        Args:
            returns: T x N return sample (DataFrame columns give asset names)
            asset_names: Optional names, required for arrays (default: Asset_1, ...)

        Returns:
            MomentEstimate

        Raises:
            InsufficientDataError: If the sample has fewer than two periods
            InvalidParameterError: If the sample contains missing values
        """
        if isinstance(returns, pd.DataFrame):
            if asset_names is None:
                asset_names = [str(col) for col in returns.columns]
            data = returns.to_numpy(dtype=float)
        else:
            data = np.array(returns, dtype=float)

        if data.ndim == 1:
            data = data.reshape(-1, 1)
        if data.ndim != 2:
            raise DimensionMismatchError(f"Return sample must be 2-D, got {data.ndim}-D")

        n_periods, n_assets = data.shape
        if n_periods < 2:
            raise InsufficientDataError(
                f"Need at least 2 return periods to estimate covariance, got {n_periods}"
            )
        if np.any(np.isnan(data)):
            raise InvalidParameterError("Return sample contains missing values")

        if asset_names is None:
            asset_names = [f"Asset_{i+1}" for i in range(n_assets)]

        mean = np.mean(data, axis=0)
        cov = np.atleast_2d(np.cov(data, rowvar=False, ddof=self.ddof))
        cov = (cov + cov.T) / 2

        logger.debug("Estimated moments for %d assets over %d periods", n_assets, n_periods)

        return MomentEstimate(tuple(asset_names), mean, cov, n_periods)


def compute_stats_from_returns(
    returns: ReturnSample,
    asset_names: Optional[List[str]] = None,
    ddof: int = 1
) -> Tuple[np.ndarray, np.ndarray, List[str]]:
    """
    Compute expected returns and covariance matrix from historical returns.

    Args:
        returns: 2D array of returns (rows = time periods, cols = assets)
        asset_names: Optional list of asset names
        ddof: 1 for sample covariance, 0 for population covariance

    Returns:
        Tuple of (expected_returns, cov_matrix, asset_names)
    """
    estimate = ReturnEstimator(ddof).estimate(returns, asset_names)
    return np.array(estimate.mean), np.array(estimate.cov), list(estimate.asset_names)


def series_moments(series: Union[pd.Series, Sequence[float]], ddof: int = 1) -> Tuple[float, float]:
    """
    Risk and return of a single return series, e.g. a market index.

    Returns:
        Tuple of (risk, return): sample standard deviation and mean
    """
    values = np.asarray(series, dtype=float)
    values = values[~np.isnan(values)]
    if len(values) < 2:
        raise InsufficientDataError(
            f"Need at least 2 observations for a standard deviation, got {len(values)}"
        )
    return float(np.std(values, ddof=ddof)), float(np.mean(values))
