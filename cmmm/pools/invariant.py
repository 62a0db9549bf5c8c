"""Weighted geometric-mean invariant."""

from __future__ import annotations

from collections.abc import Sequence

from cmmm.math.fixed_point import DEFAULT_DIGITS, LocalNumber, read_balance

from .bounds import check_same_length, check_token_count, check_weight
from .errors import InvalidBalanceError, NonPositiveInvariantError


def calc_invariant(
    weights: Sequence[float],
    balances: Sequence[int],
    *,
    digits: int = DEFAULT_DIGITS,
) -> LocalNumber:
    """Calculate the pool invariant.

    Formula:
        invariant = prod(balance_i ^ weight_i)

    Args:
        weights: Normalized token weights (each >= MIN_WEIGHT)
        balances: On-chain token balances
        digits: Decimal digits of the balances

    Returns:
        The invariant as a float

    Raises:
        InvalidWeightError: If any weight is below MIN_WEIGHT
        InvalidBalanceError: If any balance is negative
        NonPositiveInvariantError: If the product is not positive
        TooManyTokensError: If there are more than MAX_WEIGHTED_TOKENS tokens
    """
    check_token_count(check_same_length(weights=weights, balances=balances))

    invariant = 1.0
    for i, (weight, balance) in enumerate(zip(weights, balances)):
        check_weight(weight, f"weights[{i}]")
        # A negative base with a fractional exponent would produce a complex number
        if balance < 0:
            raise InvalidBalanceError(f"balances[{i}] must be non-negative, got {balance}")
        invariant *= read_balance(balance, digits) ** weight

    if invariant <= 0:
        raise NonPositiveInvariantError(f"Invariant must be positive, got {invariant}")
    return LocalNumber(invariant)
