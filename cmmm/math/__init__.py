"""Numeric primitives for the CMMM engine.

This package provides the conversion layer between on-chain scaled integers
and the floating estimates used for all intermediate math.
"""

from cmmm.math.fixed_point import (
    DEFAULT_DIGITS,
    FIXED_DIGITS,
    LocalNumber,
    OnChainNumber,
    read_balance,
    read_fixed,
    unread_balance,
)

__all__ = [
    "DEFAULT_DIGITS",
    "FIXED_DIGITS",
    "LocalNumber",
    "OnChainNumber",
    "read_balance",
    "read_fixed",
    "unread_balance",
]
