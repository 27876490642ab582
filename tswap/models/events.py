"""Pydantic models for the notifications emitted by pools and registries.

Events are observable records only; nothing in the exchange consumes them.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from tswap.models.types import Address, Uint256


class Event(BaseModel):
    """Base class for emitted events.

    Attributes:
        emitter: Address of the pool or registry that emitted the event
    """

    model_config = ConfigDict(frozen=True)

    emitter: Address


class LiquidityAdded(Event):
    """Liquidity provider deposited into a pool."""

    kind: Literal["liquidity_added"] = "liquidity_added"
    provider: Address
    reference_amount: Uint256
    paired_amount: Uint256


class LiquidityRemoved(Event):
    """Liquidity provider withdrew from a pool."""

    kind: Literal["liquidity_removed"] = "liquidity_removed"
    provider: Address
    reference_amount: Uint256
    paired_amount: Uint256


class Swap(Event):
    """Trader swapped one pool asset for the other."""

    kind: Literal["swap"] = "swap"
    caller: Address
    token_in: Address
    amount_in: Uint256
    token_out: Address
    amount_out: Uint256


class PoolCreated(Event):
    """Registry deployed a pool for a paired token."""

    kind: Literal["pool_created"] = "pool_created"
    paired_token: Address
    pool: Address


AnyEvent = LiquidityAdded | LiquidityRemoved | Swap | PoolCreated
