"""Engine configuration."""

from dataclasses import dataclass

from cmmm.math.fixed_point import DEFAULT_DIGITS


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for CMMM estimates.

    Attributes:
        digits: Decimal digits of on-chain balances and LP amounts (default: 9)
        solver_max_iterations: Newton rounds allowed in the proportional
            withdraw solver before giving up (default: 255)
        solver_max_backoff_halvings: How many times the solver may pull its
            iterate back below the singularity before giving up (default: 64)
        solver_tolerance: Relative step size at which the solver considers
            itself converged (default: 1e-12)
    """

    digits: int = DEFAULT_DIGITS

    # Proportional withdraw solver
    solver_max_iterations: int = 255
    solver_max_backoff_halvings: int = 64
    solver_tolerance: float = 1e-12


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
