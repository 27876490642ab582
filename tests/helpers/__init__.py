"""Test helpers module for shared test utilities.

- constants: Accounts, frozen time and common amounts
- factories: Environment, exchange and funding helpers
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    DEADLINE,
    LIQUIDITY_PROVIDER,
    NOW,
    ONE,
    STARTING_BALANCE,
    STRANGER,
)
from tests.helpers.factories import bootstrap, fund, make_env, make_exchange

__all__ = [
    # Constants
    "ALICE",
    "BOB",
    "LIQUIDITY_PROVIDER",
    "STRANGER",
    "NOW",
    "DEADLINE",
    "ONE",
    "STARTING_BALANCE",
    # Factories
    "make_env",
    "make_exchange",
    "fund",
    "bootstrap",
]
