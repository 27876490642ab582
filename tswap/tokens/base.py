"""Collaborator interfaces required by pools.

Pools never reach into a token's storage. They only query balances and move
value through these calls, which must either complete or raise.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenLike(Protocol):
    """Fungible token a pool can hold and trade."""

    @property
    def address(self) -> str: ...

    @property
    def name(self) -> str: ...

    @property
    def symbol(self) -> str: ...

    def balance_of(self, account: str) -> int:
        """Current holdings of account."""
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Push amount from sender to recipient.

        Raises:
            InsufficientBalance: If sender holds less than amount
        """
        ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        """Pull amount from owner to recipient on spender's authority.

        Raises:
            InsufficientAllowance: If owner has not approved spender for amount
            InsufficientBalance: If owner holds less than amount
        """
        ...


@runtime_checkable
class ShareTokenLike(TokenLike, Protocol):
    """Fungible receipt representing ownership of a pool."""

    def total_supply(self) -> int: ...

    def mint(self, account: str, amount: int) -> None: ...

    def burn(self, account: str, amount: int) -> None:
        """Destroy amount of account's balance.

        Raises:
            InsufficientBalance: If account holds less than amount
        """
        ...
