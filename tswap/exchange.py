"""In-process exchange: environment, reference token, registry and tokens.

Exchange wires the collaborators together the way a deployment would and is
the object the HTTP layer serves.
"""

from __future__ import annotations

import os

import structlog

from tswap.amm.pool import LiquidityPool
from tswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from tswap.env import Environment
from tswap.models.types import normalize_address
from tswap.pools.registry import PoolRegistry
from tswap.tokens.erc20 import ERC20

logger = structlog.get_logger()


class Exchange:
    """A reference token, its pool registry and every deployed token.

    Args:
        env: Environment to run in (a fresh wall-clock one by default)
        reference_name: Name of the reference token
        reference_symbol: Symbol of the reference token
        config: Pool configuration for the registry
    """

    def __init__(
        self,
        env: Environment | None = None,
        reference_name: str = "Wrapped Ether",
        reference_symbol: str = "WETH",
        config: PoolConfig = DEFAULT_POOL_CONFIG,
    ) -> None:
        self.env = env or Environment()
        self.reference_token = ERC20(self.env, reference_name, reference_symbol)
        self.registry = PoolRegistry(self.env, self.reference_token, config)
        self._tokens: dict[str, ERC20] = {self.reference_token.address: self.reference_token}

    def deploy_token(self, name: str, symbol: str, decimals: int = 18) -> ERC20:
        """Deploy a new fungible token into this exchange."""
        token = ERC20(self.env, name, symbol, decimals)
        self._tokens[token.address] = token
        logger.info("token_deployed", token=token.address, symbol=symbol)
        return token

    def token(self, address: str) -> ERC20:
        """Look up a deployed token (or a pool's share token).

        Raises:
            KeyError: If no token lives at address
        """
        address = normalize_address(address)
        if address in self._tokens:
            return self._tokens[address]
        pool = self.registry.pool_at(address)
        if pool is not None and isinstance(pool.share_token, ERC20):
            return pool.share_token
        raise KeyError(address)

    def pool(self, address: str) -> LiquidityPool:
        """Look up a pool by address.

        Raises:
            KeyError: If no pool lives at address
        """
        pool = self.registry.pool_at(address)
        if pool is None:
            raise KeyError(address)
        return pool

    def create_pool(self, token_address: str) -> LiquidityPool:
        """Create the pool for a deployed token."""
        pool_address = self.registry.create_pool(self.token(token_address))
        return self.pool(pool_address)


def create_default_exchange() -> Exchange:
    """Create the exchange served by the API.

    Configuration via environment variables:
    - TSWAP_REFERENCE_NAME: Reference token name (default: Wrapped Ether)
    - TSWAP_REFERENCE_SYMBOL: Reference token symbol (default: WETH)
    - TSWAP_FEE_NUMERATOR / TSWAP_FEE_DENOMINATOR / TSWAP_MINIMUM_DEPOSIT
    """
    return Exchange(
        reference_name=os.environ.get("TSWAP_REFERENCE_NAME", "Wrapped Ether"),
        reference_symbol=os.environ.get("TSWAP_REFERENCE_SYMBOL", "WETH"),
        config=PoolConfig.from_env(),
    )
