"""Conversions between on-chain fixed-point integers and local floats.

On-chain balances are integers scaled by 10^digits (9 digits by default for
Sui coins). All pool math runs on double precision floats, so every value is
read into a float on the way in and floored back to an integer on the way
out. Round trips are lossy; the only rounding guarantee is the floor applied
by unread_balance.
"""

from __future__ import annotations

import math
from typing import NewType

__all__ = [
    "OnChainNumber",
    "LocalNumber",
    "DEFAULT_DIGITS",
    "FIXED_DIGITS",
    "read_balance",
    "unread_balance",
    "read_fixed",
]

# Scaled integer as stored on-chain (coin balances, LP supply)
OnChainNumber = NewType("OnChainNumber", int)

# Floating estimate used for intermediate math
LocalNumber = NewType("LocalNumber", float)

# Default number of decimal digits for coin balances and LP amounts
DEFAULT_DIGITS = 9

# Digits of the on-chain fixed-point type used for weights and fees (1.0 == 10^18)
FIXED_DIGITS = 18


def read_balance(x: int, digits: int = DEFAULT_DIGITS) -> LocalNumber:
    """Convert a scaled on-chain integer into a float.

    Python's int / int true division is correctly rounded even for integers
    wider than 53 bits, so no precision is lost before the float itself.

    Args:
        x: Scaled on-chain value
        digits: Number of decimal digits of the scaling

    Returns:
        x / 10^digits as a float
    """
    return LocalNumber(x / 10**digits)


def unread_balance(x: float, digits: int = DEFAULT_DIGITS) -> OnChainNumber:
    """Convert a float back into a scaled on-chain integer, rounding down.

    Args:
        x: Local floating value
        digits: Number of decimal digits of the scaling

    Returns:
        floor(x * 10^digits) as an int

    Raises:
        ValueError: If x is NaN
        OverflowError: If x is infinite
    """
    return OnChainNumber(math.floor(x * 10**digits))


def read_fixed(x: int) -> float:
    """Read an 18-digit on-chain fixed-point value (weights, fees) as a fraction."""
    return read_balance(x, FIXED_DIGITS)
