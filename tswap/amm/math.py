"""Constant-product pricing math.

The pool keeps x * y = k and charges its fee on the input side:

    input_after_fee = amount_in * fee_numerator
    amount_out = (input_after_fee * reserve_out) / (reserve_in * fee_denominator + input_after_fee)

All functions are pure and work on unsigned integers. Products are formed at
full width through SafeInt and every division floors, except where rounding
up is what keeps the pool whole (get_input_amount_based_on_output).
"""

from __future__ import annotations

from tswap.config import DEFAULT_POOL_CONFIG, PoolConfig
from tswap.errors import InsufficientLiquidity, ZeroAmount
from tswap.safe_int import S, mul_div


class ConstantProductMath:
    """Pricing and share math for a fee-charging x * y = k pool.

    Formula: amount_out = (in * 997 * res_out) / (res_in * 1000 + in * 997)

    The 997/1000 factor is the default 0.3% fee; both parts come from the
    PoolConfig the instance was built with.
    """

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    @property
    def fee_numerator(self) -> int:
        return self.config.fee_numerator

    @property
    def fee_denominator(self) -> int:
        return self.config.fee_denominator

    def get_output_amount_based_on_input(
        self,
        input_amount: int,
        input_reserve: int,
        output_reserve: int,
    ) -> int:
        """Calculate output amount for an exact input.

        Args:
            input_amount: Amount of the input token sent to the pool
            input_reserve: Pool balance of the input token before the swap
            output_reserve: Pool balance of the output token before the swap

        Returns:
            Output token amount, rounded down

        Raises:
            ZeroAmount: If input_amount or output_reserve is zero
        """
        if input_amount == 0 or output_reserve == 0:
            raise ZeroAmount(
                f"input_amount={input_amount} and output_reserve={output_reserve} must be positive"
            )

        input_after_fee = S(input_amount) * S(self.fee_numerator)
        numerator = input_after_fee * S(output_reserve)
        denominator = S(input_reserve) * S(self.fee_denominator) + input_after_fee

        return (numerator // denominator).to_uint256()

    def get_input_amount_based_on_output(
        self,
        output_amount: int,
        input_reserve: int,
        output_reserve: int,
    ) -> int:
        """Calculate required input for an exact output.

        Formula: amount_in = (res_in * out * 1000) / ((res_out - out) * 997) + 1

        The +1 rounds in the pool's favor, so paying the returned amount
        always yields at least output_amount.

        Raises:
            ZeroAmount: If output_amount or input_reserve is zero
            InsufficientLiquidity: If output_amount drains the output reserve
        """
        if output_amount == 0 or input_reserve == 0:
            raise ZeroAmount(
                f"output_amount={output_amount} and input_reserve={input_reserve} must be positive"
            )
        if output_amount >= output_reserve:
            raise InsufficientLiquidity(
                f"Requested {output_amount} but only {output_reserve} in reserve"
            )

        numerator = S(input_reserve) * S(output_amount) * S(self.fee_denominator)
        denominator = (S(output_reserve) - S(output_amount)) * S(self.fee_numerator)

        return (numerator // denominator + 1).to_uint256()

    @staticmethod
    def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
        """Amount of b matching amount_a at the current reserve ratio (floor)."""
        return mul_div(amount_a, reserve_b, reserve_a)

    @staticmethod
    def shares_for_deposit(deposit: int, total_shares: int, reference_reserve: int) -> int:
        """Shares minted for a proportional deposit (floor)."""
        return mul_div(deposit, total_shares, reference_reserve)

    @staticmethod
    def amounts_for_shares(
        shares: int,
        total_shares: int,
        reference_reserve: int,
        paired_reserve: int,
    ) -> tuple[int, int]:
        """Reserve amounts redeemed by burning shares, both rounded down."""
        return (
            mul_div(shares, reference_reserve, total_shares),
            mul_div(shares, paired_reserve, total_shares),
        )


# Module-level instance with the default 0.3% fee
constant_product = ConstantProductMath()
