"""Proportional withdrawal solver.

Given a withdrawal direction C = (c_1, ..., c_n) and an exact LP amount to
burn, find the scalar p such that withdrawing p * C costs exactly that LP
under the fee model of calc_lp_in_given_exact_tokens_out.

Call F(p) the LP it costs to withdraw p * C. With A_i the fee-adjusted
amount out per unit of p (A_i scales with p, so it is computed once):

    F(p) = lp_supply * (1 - prod(((b_i - p * A_i) / b_i) ^ w_i))

Newton's method iterates G(p) = p - f(p) / f'(p) on
f(p) = I1(p) - (lp_supply - lp_in) / lp_supply, where

    I1(p) = prod(((b_i - p * A_i) / b_i) ^ w_i)
    I2(p) = sum(A_i * w_i / (b_i - p * A_i))
    f'(p) = -I1(p) * I2(p)

G has a singularity at M = min(b_i / A_i): no more than the pool holds can
be withdrawn. G(p) < M when p is close enough to M, but can land at or past
M when p is too small. The solver therefore runs in two phases:

1. Bracket: starting at M/2, move towards M (3M/4, 7M/8, ...) until a p is
   found whose Newton step stays below M.
2. Newton: iterate p <- G(p) until the relative step is below tolerance.
   A step that lands at or past M resumes the same back-off schedule.

The back-off schedule is capped explicitly, and it stops as soon as M - offset
rounds to M. When a low-weight coin has to be almost drained, the root can sit
closer to M than float precision resolves; the solver then raises
SolverDidNotConverge instead of evaluating G at or past M.

Deep withdrawals (lp_in / lp_supply above about 0.97) are ill-conditioned:
the LP cost is so steep there that moving a large output by a few hundred raw
units shifts it by around 1e-3 relative. Floor rounding of the result alone
can therefore put the LP cost of the returned amounts about 1e-3 away from
lp_in, even though p itself is solved to the configured tolerance.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import structlog

from cmmm.math.fixed_point import DEFAULT_DIGITS, OnChainNumber, read_balance, unread_balance

from .bounds import (
    check_balance,
    check_same_length,
    check_swap_fee,
    check_token_count,
    check_weight,
)
from .errors import SolverDidNotConverge

logger = structlog.get_logger()

# Maximum Newton rounds
_SOLVER_MAX_ITERATIONS = 255

# Maximum times the iterate may be pulled back below the singularity
_SOLVER_MAX_BACKOFF_HALVINGS = 64

# Relative step size at which Newton's method is considered converged
_SOLVER_TOLERANCE = 1e-12


class _BackoffSchedule:
    """Successive restart points M - M/4, M - M/8, ... approaching M."""

    def __init__(self, m: float, max_halvings: int) -> None:
        self.m = m
        self.offset = m / 4
        self.remaining = max_halvings

    def next_point(self) -> float:
        if self.remaining <= 0:
            raise SolverDidNotConverge(
                "Withdraw solver exhausted its back-off schedule below the singularity"
            )
        self.remaining -= 1
        p = self.m - self.offset
        self.offset /= 2
        if p >= self.m:
            raise SolverDidNotConverge(
                "Withdraw solver back-off reached the singularity at float precision"
            )
        return p


def _intermediates(
    p: float,
    balances: Sequence[float],
    weights: Sequence[float],
    amounts: Sequence[float],
) -> tuple[float, float]:
    """Compute I1(p) and I2(p).

    Raises:
        SolverDidNotConverge: If p withdraws a whole balance or more
    """
    intermediate1 = 1.0
    intermediate2 = 0.0
    for balance_i, weight_i, a_i in zip(balances, weights, amounts):
        remaining = balance_i - p * a_i
        # Past the singularity at float precision: the power would go complex
        if remaining <= 0:
            raise SolverDidNotConverge(
                f"Withdraw solver iterate {p} drains a balance of {balance_i}"
            )
        intermediate1 *= (remaining / balance_i) ** weight_i
        intermediate2 += a_i * weight_i / remaining
    return intermediate1, intermediate2


def _newton_step(
    p: float,
    balances: Sequence[float],
    weights: Sequence[float],
    amounts: Sequence[float],
    lp_total_supply: float,
    lp_amount_in: float,
) -> float:
    """Compute G(p)."""
    intermediate1, intermediate2 = _intermediates(p, balances, weights, amounts)
    slope = lp_total_supply * intermediate1 * intermediate2
    if slope == 0:
        raise SolverDidNotConverge(f"Withdraw solver hit a flat step at {p}")
    return (
        lp_total_supply * intermediate1 * (1 + p * intermediate2) + lp_amount_in - lp_total_supply
    ) / slope


def calc_requested_tokens_out_given_exact_lp_in(
    balances: Sequence[int],
    requested_amounts_out: Sequence[int],
    weights: Sequence[float],
    lp_amount_in: int,
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
    max_iterations: int = _SOLVER_MAX_ITERATIONS,
    max_backoff_halvings: int = _SOLVER_MAX_BACKOFF_HALVINGS,
    tolerance: float = _SOLVER_TOLERANCE,
) -> list[OnChainNumber]:
    """Scale a requested withdrawal so that it costs exactly lp_amount_in.

    Only the direction of requested_amounts_out matters; the result is that
    vector scaled by the solved p.

    Args:
        balances: Pool balances, one per token
        requested_amounts_out: Withdrawal direction, one amount per token
        weights: Normalized weights, one per token
        lp_amount_in: Exact LP amount to burn
        lp_total_supply: Current LP supply
        swap_fee_percentage: Pool swap fee as a fraction
        digits: Decimal digits of balances, amounts and LP
        max_iterations: Newton rounds allowed
        max_backoff_halvings: Restarts below the singularity allowed
        tolerance: Relative step size at which iteration stops

    Returns:
        Amounts out, one per token, rounded down

    Raises:
        SolverDidNotConverge: If either iteration budget is exhausted
        InvalidBalanceError: If a pool balance or the LP supply is not positive
        InvalidWeightError: If a weight is outside [MIN_WEIGHT, 1]
        InvalidFeeError: If swap_fee_percentage is not in [0, 1)
        LengthMismatchError: If the per-token sequences differ in length
    """
    count = check_same_length(
        balances=balances, requested_amounts_out=requested_amounts_out, weights=weights
    )
    check_token_count(count)
    check_balance(lp_total_supply, "lp_total_supply")
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")
    for i in range(count):
        check_balance(balances[i], f"balances[{i}]")
        check_weight(weights[i], f"weights[{i}]")

    if lp_amount_in <= 0 or not any(amount > 0 for amount in requested_amounts_out):
        return [OnChainNumber(0) for _ in range(count)]

    read_balances = [read_balance(balance, digits) for balance in balances]
    read_requested = [read_balance(amount, digits) for amount in requested_amounts_out]
    read_lp_total_supply = read_balance(lp_total_supply, digits)
    read_lp_amount_in = read_balance(lp_amount_in, digits)

    # Pre-scale so that every requested / initial_scalar < balance / 2,
    # keeping the starting point away from the singularity
    initial_scalar = 1.0
    while any(
        requested * 2 >= initial_scalar * balance
        for requested, balance in zip(read_requested, read_balances)
    ):
        initial_scalar *= 2
    scaled_requested = [requested / initial_scalar for requested in read_requested]

    # sum(w_i * c_i / b_i) is 1 minus the fee-free invariant ratio per unit of p
    weighted_balance_sum = sum(
        weight * requested / balance
        for weight, requested, balance in zip(weights, scaled_requested, read_balances)
    )

    # A_i: fee-adjusted amount out per unit of p, same taxable split as the exit math
    amounts_out_with_fee = []
    m = math.inf
    for requested, balance in zip(scaled_requested, read_balances):
        if weighted_balance_sum < requested / balance:
            a_i = (requested - swap_fee_percentage * balance * weighted_balance_sum) / (
                1 - swap_fee_percentage
            )
        else:
            a_i = requested
        amounts_out_with_fee.append(a_i)
        if a_i > 0:
            m = min(m, balance / a_i)

    def step(p: float) -> float:
        return _newton_step(
            p,
            read_balances,
            weights,
            amounts_out_with_fee,
            read_lp_total_supply,
            read_lp_amount_in,
        )

    # Phase 1: find a starting point whose Newton step stays below M
    schedule = _BackoffSchedule(m, max_backoff_halvings)
    current_p = m / 2
    next_p = step(current_p)
    while next_p >= m:
        current_p = schedule.next_point()
        next_p = step(current_p)

    # Phase 2: Newton iteration
    for iteration in range(max_iterations):
        if abs(next_p - current_p) <= tolerance * abs(next_p):
            logger.debug(
                "withdraw_solver_converged",
                iterations=iteration,
                p=next_p,
                initial_scalar=initial_scalar,
                backoffs_used=max_backoff_halvings - schedule.remaining,
            )
            return [
                unread_balance(requested * next_p, digits) for requested in scaled_requested
            ]

        current_p = next_p
        next_p = step(current_p)
        while next_p >= m:
            logger.debug("withdraw_solver_backoff", p=next_p, singularity=m)
            current_p = schedule.next_point()
            next_p = step(current_p)

    logger.debug(
        "withdraw_solver_did_not_converge",
        iterations=max_iterations,
        p=next_p,
        previous_p=current_p,
    )
    raise SolverDidNotConverge(
        f"Withdraw solver did not converge after {max_iterations} iterations"
    )
