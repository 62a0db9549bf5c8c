"""CMMM error classes.

Every error aborts a single estimate. None of them are retried.
"""


class CmmmError(Exception):
    """Base error for CMMM pool calculations."""

    pass


class InvalidWeightError(CmmmError):
    """Token weight is below the protocol minimum (or above 1)."""

    pass


class NonPositiveInvariantError(CmmmError):
    """Computed invariant is zero or negative."""

    pass


class ExceedsSwapBoundError(CmmmError):
    """Exact-out swap requests more than 30% of the output balance."""

    pass


class ExceedsInvariantBoundError(CmmmError):
    """Non-proportional join or exit moves the invariant outside [0.7, 3]."""

    pass


class SolverDidNotConverge(CmmmError):
    """Newton iteration for the proportional withdrawal did not converge."""

    pass


class InvalidBalanceError(CmmmError):
    """Token balance must be positive."""

    pass


class InvalidFeeError(CmmmError):
    """Fee must be in range [0, 1)."""

    pass


class TooManyTokensError(CmmmError):
    """Pool holds more tokens than the minimum weight allows."""

    pass


class LengthMismatchError(CmmmError):
    """Per-token input sequences have different lengths."""

    pass
