"""Pydantic models for CMMM pool data."""

from cmmm.models.pool import PoolCoin, PoolSnapshot
from cmmm.models.types import FeeFraction, OnChainUint, validate_u64

__all__ = [
    # Types
    "FeeFraction",
    "OnChainUint",
    "validate_u64",
    # Pool models
    "PoolCoin",
    "PoolSnapshot",
]
