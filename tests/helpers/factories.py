"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_pool

    pool = make_pool(balances=[1000 * ONE, 2000 * ONE], weights=[0.5, 0.5])
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cmmm.models.pool import PoolCoin, PoolSnapshot
from tests.helpers.constants import AFSUI, FIXED_ONE, ONE, SUI, USDC

DEFAULT_COINS = (SUI, USDC, AFSUI)


def make_pool(
    balances: Sequence[int] = (1000 * ONE, 1000 * ONE),
    weights: Sequence[float] = (0.5, 0.5),
    lp_coin_supply: int = 1000 * ONE,
    swap_fee: float = 0.003,
    coin_types: Sequence[str] | None = None,
    decimals: Sequence[int | None] | None = None,
    object_id: str = "0x" + "1" * 64,
) -> PoolSnapshot:
    """Create a pool snapshot with sensible defaults.

    Args:
        balances: Pool balances (default: 1000 of each coin)
        weights: Normalized weights (default: 50/50)
        lp_coin_supply: LP supply (default: 1000)
        swap_fee: Pool swap fee as a fraction (default: 0.3%)
        coin_types: Coin types (default: SUI, USDC, AFSUI in order)
        decimals: Per-coin decimals (default: unknown)
        object_id: Pool object id

    Returns:
        PoolSnapshot ready for testing
    """
    if coin_types is None:
        coin_types = DEFAULT_COINS[: len(balances)]
    if decimals is None:
        decimals = [None] * len(balances)

    coins = tuple(
        PoolCoin(coin_type=coin_type, balance=balance, weight=weight, decimals=decimal)
        for coin_type, balance, weight, decimal in zip(coin_types, balances, weights, decimals)
    )
    return PoolSnapshot(
        object_id=object_id,
        coins=coins,
        lp_coin_supply=lp_coin_supply,
        swap_fee_percentage=swap_fee,
    )


def make_raw_pool(
    balances: Sequence[int] = (1000 * ONE, 2000 * ONE),
    weights: Sequence[int] = (FIXED_ONE // 2, FIXED_ONE // 2),
    lp_coin_supply: int | str = 1000 * ONE,
    swap_fee: int | str = 3 * FIXED_ONE // 1000,
    coin_types: Sequence[str] = DEFAULT_COINS,
) -> dict[str, Any]:
    """Create a pool object in its on-chain JSON layout (amounts as strings)."""
    return {
        "objectId": "0x" + "2" * 64,
        "lpCoinSupply": str(lp_coin_supply),
        "swapFee": str(swap_fee),
        "coins": {
            coin_type: {
                "balance": str(balance),
                "weight": str(weight),
                "tradeFeeIn": "0",
                "tradeFeeOut": "0",
                "depositFee": "0",
                "withdrawFee": "0",
            }
            for coin_type, balance, weight in zip(coin_types, balances, weights)
        },
    }
