"""Protocol constants for the tswap exchange.

Centralizes the fee scale, deposit floor and share-token naming rules.
"""

# Maximum uint256 value; every amount leaving the math layer must fit in it
UINT256_MAX = 2**256 - 1

# Fee-retained fraction of swap input: keep 997/1000 (0.3% fee)
FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000

# Floor on the reference-token amount of any deposit (1e9 wei-style units)
MINIMUM_REFERENCE_DEPOSIT = 1_000_000_000

# Liquidity share receipts are named after the paired token
SHARE_NAME_PREFIX = "T-Swap "
SHARE_SYMBOL_PREFIX = "ts"

# Decimals used by default for deployed tokens and share receipts
DEFAULT_DECIMALS = 18
