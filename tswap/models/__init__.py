"""Event models and shared types."""

from tswap.models.events import (
    AnyEvent,
    Event,
    LiquidityAdded,
    LiquidityRemoved,
    PoolCreated,
    Swap,
)
from tswap.models.types import Address, Uint256, is_valid_address, normalize_address

__all__ = [
    "Address",
    "Uint256",
    "normalize_address",
    "is_valid_address",
    "Event",
    "AnyEvent",
    "LiquidityAdded",
    "LiquidityRemoved",
    "Swap",
    "PoolCreated",
]
