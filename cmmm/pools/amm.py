"""CMMM AMM class.

Pool-level quoting on top of the pure math functions. Methods take a
PoolSnapshot and coin types, look up balances and weights, and return None
when no estimate is available (unknown coin, self-swap, or any engine error),
logging the reason at debug level.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from cmmm.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from cmmm.models.pool import PoolCoin, PoolSnapshot

from .errors import CmmmError
from .liquidity_math import (
    calc_all_tokens_in_given_exact_lp_out,
    calc_lp_out_given_exact_tokens_in,
    calc_tokens_out_given_exact_lp_in,
)
from .parsing import parse_pool_snapshot
from .swap_math import (
    calc_in_given_out,
    calc_out_given_in,
    calc_price_impact_fully,
    calc_spot_price,
)
from .withdraw_solver import calc_requested_tokens_out_given_exact_lp_in

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapQuote:
    """Estimated swap through a CMMM pool.

    Attributes:
        pool_id: Pool object id
        coin_in: Coin type sent to the pool
        coin_out: Coin type taken from the pool
        amount_in: Amount sent, fee included
        amount_out: Amount received
    """

    pool_id: str
    coin_in: str
    coin_out: str
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class DepositQuote:
    """Estimated deposit into a CMMM pool.

    Attributes:
        lp_amount_out: LP minted
        lp_ratio: LP supply before / after the deposit (1.0 when nothing is minted)
    """

    lp_amount_out: int
    lp_ratio: float


class CmmmAMM:
    """Quotes swaps, deposits and withdrawals against pool snapshots."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        self.config = config

    def parse_pool(self, raw: Mapping[str, Any]) -> PoolSnapshot | None:
        """Parse an on-chain pool object using the configured digits."""
        return parse_pool_snapshot(raw, digits=self.config.digits)

    # -------------------------------------------------------------------------
    # Coin lookup
    # -------------------------------------------------------------------------

    def _get_pair(
        self,
        pool: PoolSnapshot,
        coin_in: str,
        coin_out: str,
    ) -> tuple[PoolCoin, PoolCoin] | None:
        """Get both sides of a swap, or None if the pair is not tradable."""
        if coin_in == coin_out:
            logger.debug("cmmm_amm_self_swap", pool_id=pool.object_id, coin=coin_in)
            return None

        pool_coin_in = pool.get_coin(coin_in)
        if pool_coin_in is None:
            logger.debug(
                "cmmm_amm_coin_not_found",
                pool_id=pool.object_id,
                coin=coin_in,
                role="input",
            )
            return None

        pool_coin_out = pool.get_coin(coin_out)
        if pool_coin_out is None:
            logger.debug(
                "cmmm_amm_coin_not_found",
                pool_id=pool.object_id,
                coin=coin_out,
                role="output",
            )
            return None

        return pool_coin_in, pool_coin_out

    def _amounts_by_index(
        self,
        pool: PoolSnapshot,
        amounts: Mapping[str, int],
    ) -> list[int] | None:
        """Order a coin -> amount mapping by pool position; missing coins are zero."""
        ordered = [0] * len(pool.coins)
        unknown = []
        for coin_type, amount in amounts.items():
            index = pool.index_of(coin_type)
            if index is None:
                unknown.append(coin_type)
                continue
            ordered[index] = amount

        if unknown:
            logger.debug("cmmm_amm_coin_not_found", pool_id=pool.object_id, coins=unknown)
            return None
        return ordered

    # -------------------------------------------------------------------------
    # Swaps
    # -------------------------------------------------------------------------

    def swap_amount_out_given_in(
        self,
        pool: PoolSnapshot,
        coin_in: str,
        amount_in: int,
        coin_out: str,
    ) -> SwapQuote | None:
        """Estimate the output of selling an exact amount of coin_in."""
        pair = self._get_pair(pool, coin_in, coin_out)
        if pair is None:
            return None
        pool_coin_in, pool_coin_out = pair

        try:
            amount_out = calc_out_given_in(
                pool_coin_in.balance,
                pool_coin_in.weight,
                pool_coin_out.balance,
                pool_coin_out.weight,
                amount_in,
                pool.swap_fee_percentage,
                digits=pool.digits,
            )
        except CmmmError as err:
            logger.debug(
                "cmmm_amm_swap_failed",
                pool_id=pool.object_id,
                coin_in=coin_in,
                coin_out=coin_out,
                amount_in=amount_in,
                error=str(err),
            )
            return None

        return SwapQuote(
            pool_id=pool.object_id,
            coin_in=coin_in,
            coin_out=coin_out,
            amount_in=amount_in,
            amount_out=amount_out,
        )

    def swap_amount_in_given_out(
        self,
        pool: PoolSnapshot,
        coin_out: str,
        amount_out: int,
        coin_in: str,
    ) -> SwapQuote | None:
        """Estimate the input needed to buy an exact amount of coin_out."""
        pair = self._get_pair(pool, coin_in, coin_out)
        if pair is None:
            return None
        pool_coin_in, pool_coin_out = pair

        try:
            amount_in = calc_in_given_out(
                pool_coin_in.balance,
                pool_coin_in.weight,
                pool_coin_out.balance,
                pool_coin_out.weight,
                amount_out,
                pool.swap_fee_percentage,
                digits=pool.digits,
            )
        except CmmmError as err:
            logger.debug(
                "cmmm_amm_swap_exact_output_failed",
                pool_id=pool.object_id,
                coin_in=coin_in,
                coin_out=coin_out,
                amount_out=amount_out,
                error=str(err),
            )
            return None

        return SwapQuote(
            pool_id=pool.object_id,
            coin_in=coin_in,
            coin_out=coin_out,
            amount_in=amount_in,
            amount_out=amount_out,
        )

    def spot_price(
        self,
        pool: PoolSnapshot,
        coin_in: str,
        coin_out: str,
        *,
        with_decimals: bool = False,
    ) -> float | None:
        """Get the spot price in units of coin_in per coin_out.

        With with_decimals, the price is converted from native scaled units
        to whole coins using each coin's decimals; this requires both coins
        to have known decimals.
        """
        pair = self._get_pair(pool, coin_in, coin_out)
        if pair is None:
            return None
        pool_coin_in, pool_coin_out = pair

        try:
            price = calc_spot_price(
                pool_coin_in.balance,
                pool_coin_in.weight,
                pool_coin_out.balance,
                pool_coin_out.weight,
                digits=pool.digits,
            )
        except CmmmError as err:
            logger.debug(
                "cmmm_amm_spot_price_failed",
                pool_id=pool.object_id,
                coin_in=coin_in,
                coin_out=coin_out,
                error=str(err),
            )
            return None

        if not with_decimals:
            return price

        if pool_coin_in.decimals is None or pool_coin_out.decimals is None:
            logger.debug(
                "cmmm_amm_missing_decimals",
                pool_id=pool.object_id,
                coin_in=coin_in,
                coin_out=coin_out,
            )
            return None
        return price * 10**pool_coin_out.decimals / 10**pool_coin_in.decimals

    def price_impact(
        self,
        pool: PoolSnapshot,
        coin_in: str,
        amount_in: int,
        coin_out: str,
    ) -> int | None:
        """Estimate the output lost to slippage when selling amount_in."""
        pair = self._get_pair(pool, coin_in, coin_out)
        if pair is None:
            return None
        pool_coin_in, pool_coin_out = pair

        try:
            return calc_price_impact_fully(
                pool_coin_in.balance,
                pool_coin_in.weight,
                pool_coin_out.balance,
                pool_coin_out.weight,
                amount_in,
                pool.swap_fee_percentage,
                digits=pool.digits,
            )
        except CmmmError as err:
            logger.debug(
                "cmmm_amm_price_impact_failed",
                pool_id=pool.object_id,
                coin_in=coin_in,
                coin_out=coin_out,
                error=str(err),
            )
            return None

    # -------------------------------------------------------------------------
    # Deposits
    # -------------------------------------------------------------------------

    def deposit_lp_mint_amount(
        self,
        pool: PoolSnapshot,
        amounts_in: Mapping[str, int],
    ) -> DepositQuote | None:
        """Estimate the LP minted for depositing the given coin amounts."""
        ordered = self._amounts_by_index(pool, amounts_in)
        if ordered is None:
            return None

        try:
            lp_amount_out = calc_lp_out_given_exact_tokens_in(
                pool.balances,
                pool.weights,
                ordered,
                pool.lp_coin_supply,
                pool.swap_fee_percentage,
                digits=pool.digits,
            )
        except CmmmError as err:
            logger.debug(
                "cmmm_amm_deposit_failed",
                pool_id=pool.object_id,
                error=str(err),
            )
            return None

        supply_after = pool.lp_coin_supply + lp_amount_out
        lp_ratio = pool.lp_coin_supply / supply_after if supply_after else 1.0
        return DepositQuote(lp_amount_out=lp_amount_out, lp_ratio=lp_ratio)

    def all_coin_deposit_amounts_in(
        self,
        pool: PoolSnapshot,
        lp_amount_out: int,
    ) -> dict[str, int] | None:
        """Get the balanced deposit that mints exactly lp_amount_out."""
        try:
            amounts = calc_all_tokens_in_given_exact_lp_out(
                pool.balances, lp_amount_out, pool.lp_coin_supply, digits=pool.digits
            )
        except CmmmError as err:
            logger.debug("cmmm_amm_deposit_failed", pool_id=pool.object_id, error=str(err))
            return None
        return dict(zip(pool.coin_types, amounts))

    # -------------------------------------------------------------------------
    # Withdrawals
    # -------------------------------------------------------------------------

    def withdraw_amounts_out(
        self,
        pool: PoolSnapshot,
        lp_amount_in: int,
        amounts_out_direction: Mapping[str, int],
    ) -> dict[str, int] | None:
        """Scale a withdrawal direction so that it burns exactly lp_amount_in.

        Coins absent from the direction are not withdrawn.
        """
        ordered = self._amounts_by_index(pool, amounts_out_direction)
        if ordered is None:
            return None

        try:
            amounts = calc_requested_tokens_out_given_exact_lp_in(
                pool.balances,
                ordered,
                pool.weights,
                lp_amount_in,
                pool.lp_coin_supply,
                pool.swap_fee_percentage,
                digits=pool.digits,
                max_iterations=self.config.solver_max_iterations,
                max_backoff_halvings=self.config.solver_max_backoff_halvings,
                tolerance=self.config.solver_tolerance,
            )
        except CmmmError as err:
            logger.debug(
                "cmmm_amm_withdraw_failed",
                pool_id=pool.object_id,
                lp_amount_in=lp_amount_in,
                error=str(err),
            )
            return None
        return dict(zip(pool.coin_types, amounts))

    def all_coin_withdraw_amounts_out(
        self,
        pool: PoolSnapshot,
        lp_amount_in: int,
    ) -> dict[str, int] | None:
        """Get the balanced withdrawal for burning lp_amount_in."""
        if lp_amount_in >= pool.lp_coin_supply:
            logger.debug(
                "cmmm_amm_withdraw_exceeds_supply",
                pool_id=pool.object_id,
                lp_amount_in=lp_amount_in,
                lp_coin_supply=pool.lp_coin_supply,
            )
            return None

        try:
            amounts = calc_tokens_out_given_exact_lp_in(
                pool.balances, lp_amount_in, pool.lp_coin_supply, digits=pool.digits
            )
        except CmmmError as err:
            logger.debug("cmmm_amm_withdraw_failed", pool_id=pool.object_id, error=str(err))
            return None
        return dict(zip(pool.coin_types, amounts))

    def multi_coin_withdraw_lp_ratio(self, pool: PoolSnapshot, lp_amount_in: int) -> float:
        """LP supply remaining after the burn, as a fraction of current supply."""
        return (pool.lp_coin_supply - lp_amount_in) / pool.lp_coin_supply

    def all_coin_withdraw_lp_ratio(self, pool: PoolSnapshot, lp_amount_in: int) -> float:
        """LP burned as a fraction of current supply."""
        return lp_amount_in / pool.lp_coin_supply
