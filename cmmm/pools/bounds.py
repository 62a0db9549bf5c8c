"""Precondition checks shared by the swap and liquidity math."""

from __future__ import annotations

from collections.abc import Sequence

from cmmm.constants import (
    MAX_INVARIANT_RATIO,
    MAX_OUT_RATIO,
    MAX_WEIGHTED_TOKENS,
    MIN_INVARIANT_RATIO,
    MIN_WEIGHT,
)

from .errors import (
    ExceedsInvariantBoundError,
    ExceedsSwapBoundError,
    InvalidBalanceError,
    InvalidFeeError,
    InvalidWeightError,
    LengthMismatchError,
    TooManyTokensError,
)


def check_weight(weight: float, name: str = "weight") -> None:
    """Raise InvalidWeightError unless MIN_WEIGHT <= weight <= 1."""
    if not MIN_WEIGHT <= weight <= 1:
        raise InvalidWeightError(f"{name} must be in [{MIN_WEIGHT}, 1], got {weight}")


def check_swap_fee(fee: float, name: str = "swap_fee") -> None:
    """Raise InvalidFeeError unless 0 <= fee < 1."""
    if not 0 <= fee < 1:
        raise InvalidFeeError(f"{name} must be in range [0, 1), got {fee}")


def check_balance(balance: int, name: str = "balance") -> None:
    """Raise InvalidBalanceError unless balance > 0."""
    if balance <= 0:
        raise InvalidBalanceError(f"{name} must be positive, got {balance}")


def check_token_count(count: int) -> None:
    """Raise TooManyTokensError if count exceeds MAX_WEIGHTED_TOKENS."""
    if count > MAX_WEIGHTED_TOKENS:
        raise TooManyTokensError(
            f"Pool has {count} tokens, maximum is {MAX_WEIGHTED_TOKENS}"
        )


def check_same_length(**sequences: Sequence[object]) -> int:
    """Check that all per-token sequences have the same length.

    Returns:
        The common length

    Raises:
        LengthMismatchError: If any two lengths differ
    """
    lengths = {name: len(seq) for name, seq in sequences.items()}
    if len(set(lengths.values())) > 1:
        raise LengthMismatchError(f"Per-token inputs differ in length: {lengths}")
    return next(iter(lengths.values()), 0)


def check_out_ratio(amount_out: float, balance_out: float) -> None:
    """Raise ExceedsSwapBoundError if amount_out > MAX_OUT_RATIO * balance_out."""
    if amount_out > balance_out * MAX_OUT_RATIO:
        raise ExceedsSwapBoundError(
            f"Output {amount_out} exceeds {MAX_OUT_RATIO:.0%} of balance {balance_out}"
        )


def check_remaining_balance(amount_out: float, balance: float, name: str = "amount_out") -> None:
    """Raise InvalidBalanceError unless amount_out leaves a positive balance."""
    if amount_out >= balance:
        raise InvalidBalanceError(
            f"{name} of {amount_out} with fees drains the balance of {balance}"
        )


def check_invariant_growth(invariant_ratio: float) -> None:
    """Raise ExceedsInvariantBoundError if a join grows the invariant too much."""
    if invariant_ratio > MAX_INVARIANT_RATIO:
        raise ExceedsInvariantBoundError(
            f"Invariant ratio {invariant_ratio} exceeds maximum {MAX_INVARIANT_RATIO}"
        )


def check_invariant_shrink(invariant_ratio: float) -> None:
    """Raise ExceedsInvariantBoundError if an exit shrinks the invariant too much."""
    if invariant_ratio < MIN_INVARIANT_RATIO:
        raise ExceedsInvariantBoundError(
            f"Invariant ratio {invariant_ratio} is below minimum {MIN_INVARIANT_RATIO}"
        )
