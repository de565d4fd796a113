"""Unit tests for target-return and target-risk matching."""

import warnings

import numpy as np
import pytest

from portfolio_frontier.core.errors import (
    AboveRangeWarning,
    BelowRangeWarning,
    ConvergenceError,
    InvalidParameterError,
)
from portfolio_frontier.core.targets import TargetMatcher

from conftest import simplex_grid


@pytest.fixture
def matcher(correlated_optimizer) -> TargetMatcher:
    return TargetMatcher(correlated_optimizer, tolerance=1e-6)


@pytest.fixture
def frontier_ends(correlated_optimizer):
    limits = correlated_optimizer.estimate_frontier_limits()
    risks, returns = correlated_optimizer.estimate_port_moments(limits)
    return risks, returns


class TestByReturn:
    def test_hits_interior_target(self, matcher):
        result = matcher.by_return(0.02)
        assert result.expected_return == pytest.approx(0.02, abs=1e-6)
        assert result.kind == 'return'
        assert result.warning is None
        assert not result.clamped

    def test_minimum_risk_at_target(self, matcher, correlated_optimizer):
        result = matcher.by_return(0.02)
        risks, returns = correlated_optimizer.estimate_port_moments(simplex_grid(4, 20))
        # Grid portfolios at (or above) the target return cannot beat the frontier
        assert np.all(risks[returns >= 0.02] >= result.risk - 1e-6)

    def test_exact_rather_than_interpolated(self, matcher, correlated_optimizer):
        coarse_risks, coarse_returns = correlated_optimizer.estimate_port_moments(
            correlated_optimizer.estimate_frontier(2)
        )
        result = matcher.by_return(0.02)
        # The frontier is convex, so the chord between the ends lies above it
        assert result.risk < np.interp(0.02, coarse_returns, coarse_risks)

    def test_below_range(self, matcher, frontier_ends):
        _, returns = frontier_ends
        result = matcher.by_return(returns[0] - 0.01)
        assert isinstance(result.warning, BelowRangeWarning)
        assert result.clamped
        assert result.expected_return == pytest.approx(returns[0])
        assert result.warning.bound == pytest.approx(returns[0])

    def test_above_range(self, matcher, frontier_ends):
        _, returns = frontier_ends
        result = matcher.by_return(1.0)
        assert isinstance(result.warning, AboveRangeWarning)
        assert result.expected_return == pytest.approx(returns[1])
        np.testing.assert_allclose(result.weights, [0.0, 0.0, 0.0, 1.0])

    def test_range_warning_is_returned_not_raised(self, matcher):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = matcher.by_return(-5.0)
        assert "below the frontier minimum" in str(result.warning)

    def test_endpoint_targets(self, matcher, frontier_ends):
        _, returns = frontier_ends
        low = matcher.by_return(returns[0])
        high = matcher.by_return(returns[1])
        assert low.warning is None and high.warning is None
        assert high.expected_return == pytest.approx(returns[1])


class TestByRisk:
    def test_hits_interior_target(self, matcher):
        result = matcher.by_risk(0.2)
        assert result.risk == pytest.approx(0.2, abs=1e-6)
        assert result.kind == 'risk'
        assert result.warning is None
        assert result.iterations > 0

    def test_maximum_return_at_target(self, matcher, correlated_optimizer):
        result = matcher.by_risk(0.2)
        risks, returns = correlated_optimizer.estimate_port_moments(simplex_grid(4, 20))
        # No grid portfolio within the risk budget earns more
        assert np.all(returns[risks <= 0.2] <= result.expected_return + 1e-6)

    def test_weights_feasible(self, matcher):
        weights = matcher.by_risk(0.19).weights
        assert weights.sum() == pytest.approx(1.0)
        assert np.all(weights >= -1e-8)

    def test_below_range(self, matcher, frontier_ends):
        risks, returns = frontier_ends
        result = matcher.by_risk(0.01)
        assert isinstance(result.warning, BelowRangeWarning)
        assert result.risk == pytest.approx(risks[0])
        assert result.expected_return == pytest.approx(returns[0])

    def test_above_range(self, matcher, frontier_ends):
        risks, _ = frontier_ends
        result = matcher.by_risk(risks[1] + 0.5)
        assert isinstance(result.warning, AboveRangeWarning)
        assert result.risk == pytest.approx(risks[1])
        assert "above the frontier maximum" in str(result.warning)

    def test_target_at_minimum_risk(self, matcher, frontier_ends):
        risks, _ = frontier_ends
        result = matcher.by_risk(risks[0])
        assert result.warning is None
        assert result.risk == pytest.approx(risks[0])

    def test_iteration_cap(self, correlated_optimizer, frontier_ends):
        risks, _ = frontier_ends
        target = risks[0] + 0.9 * (risks[1] - risks[0])
        strict = TargetMatcher(correlated_optimizer, tolerance=1e-12, max_iter=1)
        with pytest.raises(ConvergenceError):
            strict.by_risk(target)

    def test_result_target_recorded(self, matcher):
        result = matcher.by_risk(0.2)
        assert result.target == 0.2


class TestTargetMatcherSetup:
    @pytest.mark.parametrize("tolerance", [0.0, -1e-6])
    def test_invalid_tolerance(self, correlated_optimizer, tolerance):
        with pytest.raises(InvalidParameterError):
            TargetMatcher(correlated_optimizer, tolerance=tolerance)

    def test_invalid_max_iter(self, correlated_optimizer):
        with pytest.raises(InvalidParameterError):
            TargetMatcher(correlated_optimizer, max_iter=0)
