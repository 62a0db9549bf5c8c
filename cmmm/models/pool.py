"""Pydantic models for pool snapshots.

A snapshot is built by the fetch layer immediately before a calculation and
discarded after it. Models are frozen: the engine never mutates them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cmmm.constants import MAX_WEIGHTED_TOKENS, MIN_WEIGHT
from cmmm.math.fixed_point import DEFAULT_DIGITS
from cmmm.models.types import FeeFraction, OnChainUint


class PoolCoin(BaseModel):
    """A coin held by a pool, with its weight and fees.

    Attributes:
        coin_type: Fully qualified coin type (e.g., "0x2::sui::SUI")
        balance: Pool balance in the coin's native scaled units
        weight: Normalized weight (weights of a pool sum to 1)
        trade_fee_in: Fee charged when the coin is sold into the pool
        trade_fee_out: Fee charged when the coin is bought from the pool
        deposit_fee: Fee charged on deposits of this coin
        withdraw_fee: Fee charged on withdrawals of this coin
        decimals: Coin decimals, when known (used for display prices only)
    """

    coin_type: str = Field(alias="coinType", min_length=1)
    balance: OnChainUint
    weight: float = Field(ge=MIN_WEIGHT, le=1)
    trade_fee_in: FeeFraction = Field(default=0.0, alias="tradeFeeIn")
    trade_fee_out: FeeFraction = Field(default=0.0, alias="tradeFeeOut")
    deposit_fee: FeeFraction = Field(default=0.0, alias="depositFee")
    withdraw_fee: FeeFraction = Field(default=0.0, alias="withdrawFee")
    decimals: int | None = Field(default=None, ge=0, le=38)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PoolSnapshot(BaseModel):
    """Immutable view of a pool's state for one calculation.

    Attributes:
        object_id: On-chain pool object id
        coins: Pool coins in on-chain order
        lp_coin_supply: Total LP supply
        swap_fee_percentage: Pool-level swap fee used by swaps, joins and exits
        digits: Decimal digits of balances and LP amounts
    """

    object_id: str = Field(default="", alias="objectId")
    coins: tuple[PoolCoin, ...] = Field(min_length=1)
    lp_coin_supply: OnChainUint = Field(alias="lpCoinSupply")
    swap_fee_percentage: FeeFraction = Field(alias="swapFee")
    digits: int = Field(default=DEFAULT_DIGITS, ge=0, le=38)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("coins")
    @classmethod
    def _check_coin_count(cls, coins: tuple[PoolCoin, ...]) -> tuple[PoolCoin, ...]:
        if len(coins) > MAX_WEIGHTED_TOKENS:
            raise ValueError(f"Pool has {len(coins)} coins, maximum is {MAX_WEIGHTED_TOKENS}")
        return coins

    @model_validator(mode="after")
    def _check_unique_coins(self) -> PoolSnapshot:
        seen = [coin.coin_type for coin in self.coins]
        if len(set(seen)) != len(seen):
            raise ValueError(f"Duplicate coin types in pool {self.object_id}")
        return self

    @property
    def coin_types(self) -> list[str]:
        return [coin.coin_type for coin in self.coins]

    @property
    def balances(self) -> list[int]:
        return [coin.balance for coin in self.coins]

    @property
    def weights(self) -> list[float]:
        return [coin.weight for coin in self.coins]

    def get_coin(self, coin_type: str) -> PoolCoin | None:
        """Get a coin by type."""
        for coin in self.coins:
            if coin.coin_type == coin_type:
                return coin
        return None

    def index_of(self, coin_type: str) -> int | None:
        """Get a coin's position in the pool, or None if absent."""
        for i, coin in enumerate(self.coins):
            if coin.coin_type == coin_type:
                return i
        return None
