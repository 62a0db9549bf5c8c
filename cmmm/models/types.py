"""Shared type definitions for pool snapshot models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from cmmm.constants import U64_MAX


def validate_u64(value: Any) -> int:
    """Validate that a value is a valid on-chain u64.

    Args:
        value: Value to validate (int or decimal string)

    Returns:
        The value as an int

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        raise ValueError(f"u64 must be int or decimal string, got {value!r}")

    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"u64 must be a decimal integer string: '{value}'") from err

    if not isinstance(value, int):
        raise ValueError(f"u64 must be int or decimal string, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"u64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"u64 overflow: {value} > 2^64-1")
    return value


# On-chain unsigned 64-bit integer (coin balances, LP supply)
OnChainUint = Annotated[
    int,
    BeforeValidator(validate_u64),
    Field(description="On-chain u64 as int or decimal string"),
]

# Fraction in [0, 1), used for every fee
FeeFraction = Annotated[float, Field(ge=0, lt=1)]
