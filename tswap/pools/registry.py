"""Pool registry: one pool per paired token.

PoolRegistry deploys a LiquidityPool for each token traded against the
registry's reference token and keeps both lookup directions:

- pools:  paired token -> pool address
- tokens: pool address -> paired token

Entries are only ever added. A token's pool is permanent once created.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from tswap.amm.pool import LiquidityPool
from tswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from tswap.env import Environment, derive_address
from tswap.errors import InvalidToken, PoolAlreadyExists
from tswap.models.events import PoolCreated
from tswap.models.types import is_valid_address, normalize_address
from tswap.tokens.base import TokenLike

logger = structlog.get_logger()


class PoolRegistry:
    """Directory and factory for reference-token pools.

    Args:
        env: Environment shared with every pool the registry creates
        reference_token: The asset every pool trades against
        config: Configuration handed to each new pool
        address: Fixed registry address; derived from the environment when omitted
    """

    def __init__(
        self,
        env: Environment,
        reference_token: TokenLike,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        address: str | None = None,
    ) -> None:
        self.env = env
        self._reference_token = reference_token
        self.config = config
        self.address = normalize_address(address) if address else env.new_address("registry")
        self._pools: dict[str, str] = {}
        self._tokens: dict[str, str] = {}
        self._instances: dict[str, LiquidityPool] = {}

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and normalize_address(token) in self._pools

    @property
    def reference_token(self) -> TokenLike:
        return self._reference_token

    def pool_address_for(self, token: str) -> str:
        """Deterministic address a pool for token is (or would be) deployed at."""
        return derive_address(["address", "address"], [self.address, normalize_address(token)])

    def create_pool(self, token: TokenLike) -> str:
        """Deploy the pool for a paired token.

        The share receipt is named after the token: "T-Swap <name>" with
        symbol "ts<symbol>" under the default configuration.

        Args:
            token: The paired token collaborator

        Returns:
            Address of the new pool

        Raises:
            InvalidToken: If token is the reference token or has no valid address
            PoolAlreadyExists: If token already has a pool
        """
        if not is_valid_address(normalize_address(token.address)):
            raise InvalidToken(f"Invalid token address: {token.address}")
        token_address = normalize_address(token.address)
        if token_address == normalize_address(self._reference_token.address):
            raise InvalidToken("Cannot pair the reference token with itself")

        with self.env.atomic():
            existing = self._pools.get(token_address)
            if existing is not None:
                raise PoolAlreadyExists(token_address, existing)

            pool = LiquidityPool(
                self.env,
                self.pool_address_for(token_address),
                self._reference_token,
                token,
                share_name=self.config.share_name_prefix + token.name,
                share_symbol=self.config.share_symbol_prefix + token.symbol,
                config=self.config,
            )
            journal = self.env.journal
            journal.write(self._pools, token_address, pool.address)
            journal.write(self._tokens, pool.address, token_address)
            journal.write(self._instances, pool.address, pool)
            self.env.emit(PoolCreated(emitter=self.address, paired_token=token_address, pool=pool.address))

        logger.debug("registry_size", registry=self.address[-8:], pools=len(self._pools))
        return pool.address

    def get_pool(self, token: str) -> str | None:
        """Pool address for a paired token, or None if it has no pool."""
        return self._pools.get(normalize_address(token))

    def get_token(self, pool: str) -> str | None:
        """Paired token for a pool address, or None if the pool is unknown."""
        return self._tokens.get(normalize_address(pool))

    def pool_at(self, pool: str) -> LiquidityPool | None:
        """Pool instance deployed at an address, or None if unknown."""
        return self._instances.get(normalize_address(pool))

    def pool_for(self, token: str) -> LiquidityPool | None:
        """Pool instance for a paired token, or None if it has no pool."""
        address = self.get_pool(token)
        return self._instances[address] if address is not None else None

    def all_pools(self) -> Iterator[LiquidityPool]:
        """Pools in creation order."""
        return iter(list(self._instances.values()))
