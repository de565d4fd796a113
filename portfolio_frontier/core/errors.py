"""
Error and warning types raised or returned by the optimization core.

Fatal errors abort the current request; the two range warnings are never
raised, they travel with a clamped TargetResult so callers can display them.
"""


class PortfolioFrontierError(Exception):
    """Base class for all portfolio_frontier errors."""


class InsufficientDataError(PortfolioFrontierError, ValueError):
    """Fewer than two return periods, so the covariance is undefined."""


class InvalidParameterError(PortfolioFrontierError, ValueError):
    """A user-facing parameter (e.g. number of portfolios) is out of range."""


class DimensionMismatchError(PortfolioFrontierError, ValueError):
    """A weight vector or matrix does not match the asset universe size."""


class InfeasibleConstraintError(PortfolioFrontierError, RuntimeError):
    """No weight vector satisfies the constraints at the requested return."""


class ConvergenceError(PortfolioFrontierError, RuntimeError):
    """A solver or search exceeded its iteration cap."""


class FrontierRangeWarning(UserWarning):
    """A target lay outside the frontier range and the result was clamped."""

    def __init__(self, target: float, bound: float, kind: str):
        self.target = target
        self.bound = bound
        self.kind = kind
        super().__init__(self._message())

    def _message(self) -> str:
        return f"target {self.kind} {self.target:g} is outside the frontier; clamped to {self.bound:g}"


class BelowRangeWarning(FrontierRangeWarning):
    """Target below the minimum-variance end of the frontier."""

    def _message(self) -> str:
        return (f"target {self.kind} {self.target:g} is below the frontier minimum "
                f"{self.bound:g}; using the minimum-variance portfolio")


class AboveRangeWarning(FrontierRangeWarning):
    """Target above the maximum-return end of the frontier."""

    def _message(self) -> str:
        return (f"target {self.kind} {self.target:g} is above the frontier maximum "
                f"{self.bound:g}; using the maximum-return portfolio")
