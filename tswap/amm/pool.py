"""Two-asset constant-product liquidity pool.

A LiquidityPool trades one arbitrary paired token against the registry's
reference token. Reserves are never stored: they are read from the token
collaborators as the pool's own balances. Liquidity shares are held in a
separate share token the pool mints and burns.

Every public mutation follows the same two phases inside one transaction:

1. validate, compute, update share supply and stage the event
2. move tokens through the collaborators

If anything in phase 2 raises, the environment's journal undoes phase 1, so
no partial deposit, withdrawal or swap is ever observable.
"""

from __future__ import annotations

from enum import Enum

import structlog

from tswap.amm.math import ConstantProductMath
from tswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from tswap.constants import DEFAULT_DECIMALS
from tswap.env import Environment
from tswap.errors import (
    DeadlineExpired,
    DepositBelowMinimum,
    InsufficientBalance,
    InvalidToken,
    OutputTooLow,
    SlippageExceeded,
    ZeroAmount,
)
from tswap.models.events import LiquidityAdded, LiquidityRemoved, Swap
from tswap.models.types import normalize_address
from tswap.tokens.base import ShareTokenLike, TokenLike
from tswap.tokens.erc20 import ERC20

logger = structlog.get_logger()

ONE_TOKEN = 10**DEFAULT_DECIMALS


class PoolState(str, Enum):
    """Whether the pool has outstanding liquidity."""

    EMPTY = "empty"
    ACTIVE = "active"


class LiquidityPool:
    """Constant-product pool of (reference token, paired token).

    Args:
        env: Environment providing clock, journal and lock
        address: Address the pool holds its reserves under
        reference_token: The registry-wide reference asset
        paired_token: The arbitrary asset traded against it
        share_name: Name for the share receipt token
        share_symbol: Symbol for the share receipt token
        config: Fee and deposit-floor configuration
        share_token: Pre-built share token; an ERC20 is created when omitted
    """

    def __init__(
        self,
        env: Environment,
        address: str,
        reference_token: TokenLike,
        paired_token: TokenLike,
        share_name: str,
        share_symbol: str,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        share_token: ShareTokenLike | None = None,
    ) -> None:
        self.env = env
        self.address = normalize_address(address)
        self._reference_token = reference_token
        self._paired_token = paired_token
        self.config = config
        self.math = ConstantProductMath(config)
        self.share_token: ShareTokenLike = share_token or ERC20(
            env,
            share_name,
            share_symbol,
            address=self.address,
        )

    def __repr__(self) -> str:
        return f"LiquidityPool({self.share_token.symbol}, {self.address})"

    # --- Views ---

    @property
    def reference_token(self) -> TokenLike:
        return self._reference_token

    @property
    def paired_token(self) -> TokenLike:
        return self._paired_token

    @property
    def minimum_reference_deposit(self) -> int:
        return self.config.minimum_reference_deposit

    @property
    def state(self) -> PoolState:
        return PoolState.ACTIVE if self.total_shares() > 0 else PoolState.EMPTY

    def total_shares(self) -> int:
        return self.share_token.total_supply()

    def shares_of(self, account: str) -> int:
        return self.share_token.balance_of(account)

    def get_reserves(self) -> tuple[int, int]:
        """Current (reference, paired) balances held by the pool."""
        return (
            self._reference_token.balance_of(self.address),
            self._paired_token.balance_of(self.address),
        )

    def get_paired_tokens_to_deposit_based_on_reference(self, reference_amount: int) -> int:
        """Paired amount a proportional deposit of reference_amount requires."""
        reference_reserve, paired_reserve = self.get_reserves()
        return self.math.quote(reference_amount, reference_reserve, paired_reserve)

    def get_price_of_one_reference_in_paired(self) -> int:
        """Paired tokens received for selling one whole reference token."""
        reference_reserve, paired_reserve = self.get_reserves()
        return self.math.get_output_amount_based_on_input(ONE_TOKEN, reference_reserve, paired_reserve)

    def get_price_of_one_paired_in_reference(self) -> int:
        """Reference tokens received for selling one whole paired token."""
        reference_reserve, paired_reserve = self.get_reserves()
        return self.math.get_output_amount_based_on_input(ONE_TOKEN, paired_reserve, reference_reserve)

    # --- Liquidity ---

    def deposit(
        self,
        caller: str,
        reference_amount: int,
        min_shares_to_mint: int,
        max_paired_to_deposit: int,
        deadline: int,
    ) -> int:
        """Add liquidity and mint shares to the caller.

        On an empty pool the caller sets the initial price: the pool takes
        reference_amount and exactly max_paired_to_deposit, and mints
        reference_amount shares. On an active pool the paired amount is
        derived from the reserve ratio and capped by max_paired_to_deposit.

        Args:
            caller: Account providing liquidity (must have approved the pool)
            reference_amount: Reference tokens to deposit
            min_shares_to_mint: Fewest shares the caller accepts
            max_paired_to_deposit: Most paired tokens the caller will provide
            deadline: Unix time after which the deposit is rejected

        Returns:
            Number of shares minted

        Raises:
            DeadlineExpired: If now > deadline
            ZeroAmount: If reference_amount is zero, or a bootstrap deposit
                provides no paired tokens
            DepositBelowMinimum: If reference_amount is under the pool floor
            SlippageExceeded: If the paired requirement or minted shares fall
                outside the caller's bounds
        """
        caller = normalize_address(caller)
        with self.env.atomic():
            self._check_deadline(deadline)
            _require_positive(reference_amount=reference_amount)
            if reference_amount < self.minimum_reference_deposit:
                raise DepositBelowMinimum(self.minimum_reference_deposit, reference_amount)

            total_shares = self.total_shares()
            if total_shares > 0:
                reference_reserve, paired_reserve = self.get_reserves()
                paired_amount = self.math.quote(reference_amount, reference_reserve, paired_reserve)
                if paired_amount > max_paired_to_deposit:
                    raise SlippageExceeded(
                        f"Deposit needs {paired_amount} paired tokens, max is {max_paired_to_deposit}"
                    )
                shares = self.math.shares_for_deposit(reference_amount, total_shares, reference_reserve)
                if shares < min_shares_to_mint:
                    raise SlippageExceeded(f"Deposit mints {shares} shares, min is {min_shares_to_mint}")
            else:
                _require_positive(max_paired_to_deposit=max_paired_to_deposit)
                paired_amount = max_paired_to_deposit
                shares = reference_amount
                logger.debug(
                    "pool_bootstrap",
                    pool=self.address[-8:],
                    reference_amount=reference_amount,
                    paired_amount=paired_amount,
                )

            self._add_liquidity_mint_and_transfer(caller, reference_amount, paired_amount, shares)
        return shares

    def _add_liquidity_mint_and_transfer(
        self,
        caller: str,
        reference_amount: int,
        paired_amount: int,
        shares: int,
    ) -> None:
        self.share_token.mint(caller, shares)
        self.env.emit(
            LiquidityAdded(
                emitter=self.address,
                provider=caller,
                reference_amount=reference_amount,
                paired_amount=paired_amount,
            )
        )
        self._reference_token.transfer_from(self.address, caller, self.address, reference_amount)
        self._paired_token.transfer_from(self.address, caller, self.address, paired_amount)

    def withdraw(
        self,
        caller: str,
        shares_to_burn: int,
        min_reference_out: int,
        min_paired_out: int,
        deadline: int,
    ) -> tuple[int, int]:
        """Burn shares and pay out the caller's portion of both reserves.

        Both payouts round down, so dust stays in the pool.

        Returns:
            Tuple of (reference_out, paired_out)

        Raises:
            DeadlineExpired: If now > deadline
            ZeroAmount: If any numeric argument is zero
            InsufficientBalance: If the caller holds fewer than shares_to_burn
            OutputTooLow: If either payout is below its minimum
        """
        caller = normalize_address(caller)
        with self.env.atomic():
            self._check_deadline(deadline)
            _require_positive(
                shares_to_burn=shares_to_burn,
                min_reference_out=min_reference_out,
                min_paired_out=min_paired_out,
            )
            total_shares = self.total_shares()
            if total_shares == 0:
                raise InsufficientBalance(f"Pool {self.address} has no outstanding shares")

            reference_reserve, paired_reserve = self.get_reserves()
            reference_out, paired_out = self.math.amounts_for_shares(
                shares_to_burn, total_shares, reference_reserve, paired_reserve
            )
            if reference_out < min_reference_out:
                raise OutputTooLow(reference_out, min_reference_out)
            if paired_out < min_paired_out:
                raise OutputTooLow(paired_out, min_paired_out)

            self.share_token.burn(caller, shares_to_burn)
            self.env.emit(
                LiquidityRemoved(
                    emitter=self.address,
                    provider=caller,
                    reference_amount=reference_out,
                    paired_amount=paired_out,
                )
            )
            self._reference_token.transfer(self.address, caller, reference_out)
            self._paired_token.transfer(self.address, caller, paired_out)
        return reference_out, paired_out

    # --- Swaps ---

    def swap(
        self,
        caller: str,
        input_token: str | TokenLike,
        input_amount: int,
        output_token: str | TokenLike,
        deadline: int,
        min_output_amount: int = 0,
    ) -> int:
        """Swap an exact input amount for as much output as the curve gives.

        Args:
            caller: Trader (must have approved the pool for input_amount)
            input_token: Token (or address) sent to the pool
            input_amount: Exact amount sent
            output_token: Token (or address) received
            deadline: Unix time after which the swap is rejected
            min_output_amount: Least output the caller accepts (0 = no bound)

        Returns:
            Output amount sent to the caller

        Raises:
            DeadlineExpired: If now > deadline
            ZeroAmount: If input_amount is zero or the pool is empty
            InvalidToken: If the tokens are equal or not both in this pool
            OutputTooLow: If the output is below min_output_amount
        """
        caller = normalize_address(caller)
        with self.env.atomic():
            self._check_deadline(deadline)
            _require_positive(input_amount=input_amount)
            self._require_active()
            token_in, token_out = self._resolve_pair(input_token, output_token)

            input_reserve = token_in.balance_of(self.address)
            output_reserve = token_out.balance_of(self.address)
            output_amount = self.math.get_output_amount_based_on_input(
                input_amount, input_reserve, output_reserve
            )
            if output_amount < min_output_amount:
                raise OutputTooLow(output_amount, min_output_amount)

            self._swap(caller, token_in, input_amount, token_out, output_amount)
        return output_amount

    def swap_exact_output(
        self,
        caller: str,
        input_token: str | TokenLike,
        output_token: str | TokenLike,
        output_amount: int,
        max_input_amount: int,
        deadline: int,
    ) -> int:
        """Swap for an exact output amount, paying the rounded-up input.

        Returns:
            Input amount taken from the caller

        Raises:
            DeadlineExpired: If now > deadline
            ZeroAmount: If output_amount is zero or the pool is empty
            InvalidToken: If the tokens are equal or not both in this pool
            InsufficientLiquidity: If output_amount would drain the reserve
            SlippageExceeded: If the required input exceeds max_input_amount
        """
        caller = normalize_address(caller)
        with self.env.atomic():
            self._check_deadline(deadline)
            _require_positive(output_amount=output_amount)
            self._require_active()
            token_in, token_out = self._resolve_pair(input_token, output_token)

            input_reserve = token_in.balance_of(self.address)
            output_reserve = token_out.balance_of(self.address)
            input_amount = self.math.get_input_amount_based_on_output(
                output_amount, input_reserve, output_reserve
            )
            if input_amount > max_input_amount:
                raise SlippageExceeded(f"Swap needs input {input_amount}, max is {max_input_amount}")

            self._swap(caller, token_in, input_amount, token_out, output_amount)
        return input_amount

    def sell_paired_tokens(self, caller: str, paired_amount: int, min_reference_out: int = 0) -> int:
        """Sell paired tokens for reference tokens, valid only in this block."""
        return self.swap(
            caller,
            self._paired_token,
            paired_amount,
            self._reference_token,
            deadline=self.env.now(),
            min_output_amount=min_reference_out,
        )

    def _swap(
        self,
        caller: str,
        token_in: TokenLike,
        input_amount: int,
        token_out: TokenLike,
        output_amount: int,
    ) -> None:
        self.env.emit(
            Swap(
                emitter=self.address,
                caller=caller,
                token_in=token_in.address,
                amount_in=input_amount,
                token_out=token_out.address,
                amount_out=output_amount,
            )
        )
        token_in.transfer_from(self.address, caller, self.address, input_amount)
        token_out.transfer(self.address, caller, output_amount)

    # --- Helpers ---

    def _require_active(self) -> None:
        if self.total_shares() == 0:
            raise ZeroAmount(f"Pool {self.address} has no liquidity")

    def _check_deadline(self, deadline: int) -> None:
        now = self.env.now()
        if now > deadline:
            raise DeadlineExpired(deadline, now)

    def _resolve(self, token: str | TokenLike) -> TokenLike:
        address = normalize_address(token if isinstance(token, str) else token.address)
        if address == normalize_address(self._reference_token.address):
            return self._reference_token
        if address == normalize_address(self._paired_token.address):
            return self._paired_token
        raise InvalidToken(f"Token {address} is not traded by pool {self.address}")

    def _resolve_pair(
        self,
        input_token: str | TokenLike,
        output_token: str | TokenLike,
    ) -> tuple[TokenLike, TokenLike]:
        token_in = self._resolve(input_token)
        token_out = self._resolve(output_token)
        if token_in is token_out:
            raise InvalidToken(f"Cannot swap {token_in.address} for itself")
        return token_in, token_out


def _require_positive(**amounts: int) -> None:
    for name, amount in amounts.items():
        if amount <= 0:
            raise ZeroAmount(f"{name} must be positive, got {amount}")
