"""Pytest configuration and fixtures."""

import pytest

from cmmm.models.pool import PoolSnapshot
from cmmm.pools import CmmmAMM
from tests.helpers import ONE, make_pool


@pytest.fixture
def amm() -> CmmmAMM:
    """AMM with the default engine configuration."""
    return CmmmAMM()


@pytest.fixture
def two_coin_pool() -> PoolSnapshot:
    """50/50 pool holding 1000 of each coin, 0.3% fee."""
    return make_pool()


@pytest.fixture
def three_coin_pool() -> PoolSnapshot:
    """50/30/20 pool with uneven balances, 0.3% fee."""
    return make_pool(
        balances=[1000 * ONE, 2000 * ONE, 500 * ONE],
        weights=[0.5, 0.3, 0.2],
        lp_coin_supply=10_000 * ONE,
    )
