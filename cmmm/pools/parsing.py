"""Pool snapshot parsing.

Casts the on-chain JSON layout of a pool object into a PoolSnapshot. Weights
and fees arrive as 18-digit fixed-point integers (1.0 == 10^18), balances and
LP supply as native scaled integers. Either may be an int or a decimal string.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from cmmm.math.fixed_point import DEFAULT_DIGITS, read_fixed
from cmmm.models.pool import PoolCoin, PoolSnapshot

logger = structlog.get_logger()

_FEE_FIELDS = {
    "tradeFeeIn": "trade_fee_in",
    "tradeFeeOut": "trade_fee_out",
    "depositFee": "deposit_fee",
    "withdrawFee": "withdraw_fee",
}


def _parse_fixed(raw: Any, object_id: str, field: str) -> float | None:
    """Parse an 18-digit fixed-point value into a fraction.

    Returns None if the value is not an integer.
    """
    try:
        return read_fixed(int(raw))
    except (ValueError, TypeError):
        logger.warning(
            "pool_invalid_fixed_point",
            object_id=object_id,
            field=field,
            raw_value=raw,
        )
        return None


def _parse_coin(coin_type: str, data: Mapping[str, Any], object_id: str) -> PoolCoin | None:
    """Parse one entry of the pool's coins mapping."""
    weight = _parse_fixed(data.get("weight"), object_id, f"{coin_type}.weight")
    if weight is None:
        return None

    fees: dict[str, float] = {}
    for raw_key, field in _FEE_FIELDS.items():
        if raw_key not in data:
            continue
        fee = _parse_fixed(data[raw_key], object_id, f"{coin_type}.{raw_key}")
        if fee is None:
            return None
        fees[field] = fee

    try:
        return PoolCoin(
            coin_type=coin_type,
            balance=data.get("balance", 0),
            weight=weight,
            decimals=data.get("decimals"),
            **fees,
        )
    except ValidationError as err:
        logger.debug(
            "pool_invalid_coin",
            object_id=object_id,
            coin_type=coin_type,
            errors=err.errors(include_url=False),
        )
        return None


def parse_pool_snapshot(
    raw: Mapping[str, Any],
    *,
    digits: int = DEFAULT_DIGITS,
) -> PoolSnapshot | None:
    """Parse a pool object from its on-chain JSON layout.

    Expected shape:
        {
            "objectId": "0x...",
            "lpCoinSupply": "1000000000000",
            "swapFee": "3000000000000000",
            "coins": {
                "0x2::sui::SUI": {
                    "balance": "500000000000",
                    "weight": "500000000000000000",
                    "tradeFeeIn": "0", ...
                },
                ...
            }
        }

    Coin order follows the mapping's insertion order, which matches the
    on-chain vector order when decoded from JSON.

    Args:
        raw: Pool object fields
        digits: Decimal digits of balances and LP amounts

    Returns:
        PoolSnapshot, or None if the data is malformed
    """
    object_id = str(raw.get("objectId", ""))

    coins_raw = raw.get("coins")
    if not isinstance(coins_raw, Mapping) or not coins_raw:
        logger.debug("pool_missing_coins", object_id=object_id)
        return None

    coins = []
    for coin_type, data in coins_raw.items():
        if not isinstance(data, Mapping):
            logger.debug("pool_invalid_coin_entry", object_id=object_id, coin_type=coin_type)
            return None
        coin = _parse_coin(coin_type, data, object_id)
        if coin is None:
            return None
        coins.append(coin)

    swap_fee = _parse_fixed(raw.get("swapFee", 0), object_id, "swapFee")
    if swap_fee is None:
        return None

    try:
        return PoolSnapshot(
            object_id=object_id,
            coins=tuple(coins),
            lp_coin_supply=raw.get("lpCoinSupply", 0),
            swap_fee_percentage=swap_fee,
            digits=digits,
        )
    except ValidationError as err:
        logger.debug(
            "pool_invalid_snapshot",
            object_id=object_id,
            errors=err.errors(include_url=False),
        )
        return None
