"""Test helpers module for shared test utilities.

- constants: Coin types and common amounts
- factories: Pool snapshot factory functions
"""

from tests.helpers.constants import AFSUI, FIXED_ONE, ONE, SUI, UNKNOWN, USDC
from tests.helpers.factories import make_pool, make_raw_pool

__all__ = [
    # Constants
    "SUI",
    "USDC",
    "AFSUI",
    "UNKNOWN",
    "ONE",
    "FIXED_ONE",
    # Factories
    "make_pool",
    "make_raw_pool",
]
