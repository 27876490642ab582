"""Token collaborators."""

from tswap.tokens.base import ShareTokenLike, TokenLike
from tswap.tokens.erc20 import ERC20

__all__ = ["ERC20", "TokenLike", "ShareTokenLike"]
