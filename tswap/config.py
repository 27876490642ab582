"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from tswap.constants import (
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    MINIMUM_REFERENCE_DEPOSIT,
    SHARE_NAME_PREFIX,
    SHARE_SYMBOL_PREFIX,
)


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for pool pricing and share issuance.

    One instance is shared by a registry and every pool it creates, so all
    pools of a registry price trades identically for their whole lifetime.

    Attributes:
        fee_numerator: Retained part of the swap input (default: 997)
        fee_denominator: Scale of the fee fraction (default: 1000)
        minimum_reference_deposit: Smallest reference-token amount a deposit
            may carry (default: 1e9)
        share_name_prefix: Prepended to the paired token name for the share
            receipt name (default: "T-Swap ")
        share_symbol_prefix: Prepended to the paired token symbol for the
            share receipt symbol (default: "ts")
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    minimum_reference_deposit: int = MINIMUM_REFERENCE_DEPOSIT
    share_name_prefix: str = SHARE_NAME_PREFIX
    share_symbol_prefix: str = SHARE_SYMBOL_PREFIX

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive, got {self.fee_denominator}")
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, {self.fee_denominator}], got {self.fee_numerator}"
            )
        if self.minimum_reference_deposit < 0:
            raise ValueError(
                f"minimum_reference_deposit cannot be negative: {self.minimum_reference_deposit}"
            )

    @property
    def fee_bps(self) -> int:
        """Fee in basis points, e.g. 30 for 997/1000."""
        return (self.fee_denominator - self.fee_numerator) * 10000 // self.fee_denominator

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from environment variables, falling back to defaults.

        Configuration via environment variables:
        - TSWAP_FEE_NUMERATOR: Retained fee numerator (default: 997)
        - TSWAP_FEE_DENOMINATOR: Fee scale (default: 1000)
        - TSWAP_MINIMUM_DEPOSIT: Minimum reference deposit (default: 1e9)
        """
        return cls(
            fee_numerator=int(os.environ.get("TSWAP_FEE_NUMERATOR", str(FEE_NUMERATOR))),
            fee_denominator=int(os.environ.get("TSWAP_FEE_DENOMINATOR", str(FEE_DENOMINATOR))),
            minimum_reference_deposit=int(
                os.environ.get("TSWAP_MINIMUM_DEPOSIT", str(MINIMUM_REFERENCE_DEPOSIT))
            ),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
