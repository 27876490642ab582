"""AMM (Automated Market Maker) implementation."""

from tswap.amm.math import ConstantProductMath, constant_product
from tswap.amm.pool import LiquidityPool, PoolState

__all__ = [
    # Pricing math
    "ConstantProductMath",
    "constant_product",
    # Pool
    "LiquidityPool",
    "PoolState",
]
