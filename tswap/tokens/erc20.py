"""In-memory fungible token.

ERC20 keeps balances and allowances in plain dicts and writes them through the
environment's journal, so a transfer made inside a failed transaction is
undone together with the pool state around it.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from tswap.constants import DEFAULT_DECIMALS
from tswap.env import Environment
from tswap.errors import InsufficientAllowance, InsufficientBalance, ZeroAmount
from tswap.models.types import normalize_address
from tswap.safe_int import S

logger = structlog.get_logger()

# Called after every balance move as hook(sender, recipient, amount)
TransferHook = Callable[[str, str, int], None]


class ERC20:
    """Fungible token with balances, allowances, mint and burn.

    Args:
        env: Environment whose journal and lock guard this token's state
        name: Human-readable token name
        symbol: Ticker symbol
        decimals: Display decimals (informational only)
        address: Fixed address; derived from the environment when omitted
        on_transfer: Optional hook run after each transfer. Lets a test token
            call back into a pool mid-operation the way a hostile token could.
    """

    def __init__(
        self,
        env: Environment,
        name: str,
        symbol: str,
        decimals: int = DEFAULT_DECIMALS,
        address: str | None = None,
        on_transfer: TransferHook | None = None,
    ) -> None:
        self.env = env
        self._name = name
        self._symbol = symbol
        self.decimals = decimals
        self._address = normalize_address(address) if address else env.new_address(f"token:{symbol}")
        self.on_transfer = on_transfer
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._supply: dict[str, int] = {"total": 0}

    def __repr__(self) -> str:
        return f"ERC20({self._symbol}, {self._address})"

    @property
    def address(self) -> str:
        return self._address

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    # --- Views ---

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def total_supply(self) -> int:
        return self._supply["total"]

    # --- Mutations ---

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Authorize spender to pull up to amount of owner's tokens."""
        key = (normalize_address(owner), normalize_address(spender))
        with self.env.atomic():
            self.env.journal.write(self._allowances, key, S(amount).to_uint256())

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        with self.env.atomic():
            self._move(sender, recipient, amount)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        amount = S(amount).to_uint256()
        key = (normalize_address(owner), normalize_address(spender))
        with self.env.atomic():
            allowed = self._allowances.get(key, 0)
            if allowed < amount:
                raise InsufficientAllowance(
                    f"{self._symbol}: allowance {allowed} < {amount} for spender {spender}"
                )
            self.env.journal.write(self._allowances, key, allowed - amount)
            self._move(owner, recipient, amount)

    def mint(self, account: str, amount: int) -> None:
        if amount <= 0:
            raise ZeroAmount(f"{self._symbol}: cannot mint {amount}")
        account = normalize_address(account)
        with self.env.atomic():
            journal = self.env.journal
            journal.write(self._supply, "total", (S(self.total_supply()) + amount).to_uint256())
            journal.write(self._balances, account, self.balance_of(account) + amount)

    def burn(self, account: str, amount: int) -> None:
        amount = S(amount).to_uint256()
        account = normalize_address(account)
        with self.env.atomic():
            balance = self.balance_of(account)
            if balance < amount:
                raise InsufficientBalance(f"{self._symbol}: burn {amount} exceeds balance {balance}")
            journal = self.env.journal
            journal.write(self._balances, account, balance - amount)
            journal.write(self._supply, "total", self.total_supply() - amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        amount = S(amount).to_uint256()
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(f"{self._symbol}: transfer {amount} exceeds balance {balance}")
        journal = self.env.journal
        journal.write(self._balances, sender, balance - amount)
        journal.write(self._balances, recipient, self.balance_of(recipient) + amount)
        logger.debug(
            "token_transfer",
            token=self._symbol,
            sender=sender[-8:],
            recipient=recipient[-8:],
            amount=amount,
        )
        if self.on_transfer is not None:
            self.on_transfer(sender, recipient, amount)
