"""tswap - constant-product pools against a single reference token."""

from tswap.amm.pool import LiquidityPool, PoolState
from tswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from tswap.env import Environment
from tswap.exchange import Exchange
from tswap.pools.registry import PoolRegistry
from tswap.tokens.erc20 import ERC20

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_POOL_CONFIG",
    "ERC20",
    "Environment",
    "Exchange",
    "LiquidityPool",
    "PoolConfig",
    "PoolRegistry",
    "PoolState",
    "__version__",
]
