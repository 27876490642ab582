"""Pytest configuration and fixtures."""

import pytest

from tswap.amm.pool import LiquidityPool
from tswap.env import Environment
from tswap.exchange import Exchange
from tswap.pools.registry import PoolRegistry
from tswap.tokens.erc20 import ERC20
from tests.helpers import LIQUIDITY_PROVIDER, ONE, bootstrap, make_exchange


@pytest.fixture
def exchange() -> Exchange:
    """Fresh exchange with a frozen clock."""
    return make_exchange()


@pytest.fixture
def env(exchange: Exchange) -> Environment:
    return exchange.env


@pytest.fixture
def weth(exchange: Exchange) -> ERC20:
    """The reference token."""
    return exchange.reference_token


@pytest.fixture
def registry(exchange: Exchange) -> PoolRegistry:
    return exchange.registry


@pytest.fixture
def pool_token(exchange: Exchange) -> ERC20:
    """An arbitrary token to pair against WETH."""
    return exchange.deploy_token("Pool Token", "PT")


@pytest.fixture
def pool(exchange: Exchange, pool_token: ERC20) -> LiquidityPool:
    """Empty pool for pool_token."""
    return exchange.create_pool(pool_token.address)


@pytest.fixture
def active_pool(pool: LiquidityPool) -> LiquidityPool:
    """Pool bootstrapped with 100 WETH and 100 PT by LIQUIDITY_PROVIDER."""
    bootstrap(pool, LIQUIDITY_PROVIDER, 100 * ONE, 100 * ONE)
    return pool
