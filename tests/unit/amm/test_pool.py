"""Tests for LiquidityPool deposit, withdraw and swap."""

import pytest

from tswap.amm.pool import LiquidityPool, PoolState
from tswap.errors import (
    DeadlineExpired,
    DepositBelowMinimum,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidToken,
    OutputTooLow,
    SlippageExceeded,
    ZeroAmount,
)
from tswap.models.events import LiquidityAdded, LiquidityRemoved, Swap
from tests.helpers import (
    ALICE,
    BOB,
    DEADLINE,
    LIQUIDITY_PROVIDER,
    NOW,
    ONE,
    STRANGER,
    bootstrap,
    fund,
)


class TestBootstrapDeposit:
    """Tests for the first deposit into an empty pool."""

    def test_shares_equal_reference_amount(self, pool):
        shares = bootstrap(pool, LIQUIDITY_PROVIDER, 100 * ONE, 100 * ONE)
        assert shares == 100 * ONE
        assert pool.total_shares() == 100 * ONE
        assert pool.shares_of(LIQUIDITY_PROVIDER) == 100 * ONE

    def test_caller_sets_price(self, pool):
        bootstrap(pool, LIQUIDITY_PROVIDER, 50 * ONE, 200 * ONE)
        assert pool.get_reserves() == (50 * ONE, 200 * ONE)

    def test_state_transitions_to_active(self, pool):
        assert pool.state is PoolState.EMPTY
        bootstrap(pool, LIQUIDITY_PROVIDER, 10 * ONE, 10 * ONE)
        assert pool.state is PoolState.ACTIVE

    def test_emits_liquidity_added(self, pool, env):
        bootstrap(pool, LIQUIDITY_PROVIDER, 10 * ONE, 20 * ONE)
        [event] = env.events_of(LiquidityAdded)
        assert event.emitter == pool.address
        assert event.provider == LIQUIDITY_PROVIDER
        assert event.reference_amount == 10 * ONE
        assert event.paired_amount == 20 * ONE

    def test_requires_paired_tokens(self, pool, weth):
        fund(weth, LIQUIDITY_PROVIDER, 10 * ONE, spender=pool.address)
        with pytest.raises(ZeroAmount):
            pool.deposit(LIQUIDITY_PROVIDER, 10 * ONE, 0, 0, DEADLINE)
        assert pool.state is PoolState.EMPTY


class TestDepositValidation:
    """Precondition checks shared by both deposit regimes."""

    def test_deadline_expired(self, pool):
        with pytest.raises(DeadlineExpired) as exc_info:
            pool.deposit(LIQUIDITY_PROVIDER, 10 * ONE, 0, 10 * ONE, NOW - 1)
        assert exc_info.value.deadline == NOW - 1
        assert exc_info.value.now == NOW

    def test_deadline_equal_to_now_accepted(self, pool):
        fund(pool.reference_token, LIQUIDITY_PROVIDER, 10 * ONE, spender=pool.address)
        fund(pool.paired_token, LIQUIDITY_PROVIDER, 10 * ONE, spender=pool.address)
        assert pool.deposit(LIQUIDITY_PROVIDER, 10 * ONE, 0, 10 * ONE, NOW) == 10 * ONE

    def test_zero_amount(self, pool):
        with pytest.raises(ZeroAmount):
            pool.deposit(LIQUIDITY_PROVIDER, 0, 0, 10 * ONE, DEADLINE)

    def test_below_minimum(self, pool):
        minimum = pool.minimum_reference_deposit
        with pytest.raises(DepositBelowMinimum) as exc_info:
            pool.deposit(LIQUIDITY_PROVIDER, minimum - 1, 0, 10 * ONE, DEADLINE)
        assert exc_info.value.minimum == minimum
        assert exc_info.value.amount == minimum - 1

    def test_deadline_checked_before_amount(self, pool):
        with pytest.raises(DeadlineExpired):
            pool.deposit(LIQUIDITY_PROVIDER, 0, 0, 0, NOW - 1)


class TestProportionalDeposit:
    """Tests for deposits into an active pool."""

    def test_paired_amount_follows_ratio(self, active_pool):
        fund(active_pool.reference_token, ALICE, 10 * ONE, spender=active_pool.address)
        fund(active_pool.paired_token, ALICE, 50 * ONE, spender=active_pool.address)

        shares = active_pool.deposit(ALICE, 10 * ONE, 10 * ONE, 50 * ONE, DEADLINE)

        assert shares == 10 * ONE
        assert active_pool.get_reserves() == (110 * ONE, 110 * ONE)
        # Only the ratio-matching 10 PT was pulled
        assert active_pool.paired_token.balance_of(ALICE) == 40 * ONE

    def test_quote_matches_deposit(self, active_pool):
        assert active_pool.get_paired_tokens_to_deposit_based_on_reference(7 * ONE) == 7 * ONE

    def test_max_paired_exceeded(self, active_pool):
        fund(active_pool.reference_token, ALICE, 10 * ONE, spender=active_pool.address)
        fund(active_pool.paired_token, ALICE, 10 * ONE, spender=active_pool.address)
        with pytest.raises(SlippageExceeded):
            active_pool.deposit(ALICE, 10 * ONE, 0, 10 * ONE - 1, DEADLINE)

    def test_min_shares_not_met(self, active_pool):
        fund(active_pool.reference_token, ALICE, 10 * ONE, spender=active_pool.address)
        fund(active_pool.paired_token, ALICE, 10 * ONE, spender=active_pool.address)
        with pytest.raises(SlippageExceeded):
            active_pool.deposit(ALICE, 10 * ONE, 10 * ONE + 1, 10 * ONE, DEADLINE)

    def test_failed_transfer_rolls_back_everything(self, active_pool, env):
        """Paired pull fails after shares were minted and WETH was pulled."""
        weth, pt = active_pool.reference_token, active_pool.paired_token
        fund(weth, ALICE, 10 * ONE, spender=active_pool.address)
        fund(pt, ALICE, 10 * ONE)  # no approval
        events_before = len(env.events)

        with pytest.raises(InsufficientAllowance):
            active_pool.deposit(ALICE, 10 * ONE, 0, 10 * ONE, DEADLINE)

        assert active_pool.shares_of(ALICE) == 0
        assert active_pool.total_shares() == 100 * ONE
        assert weth.balance_of(ALICE) == 10 * ONE
        assert weth.allowance(ALICE, active_pool.address) == 10 * ONE
        assert active_pool.get_reserves() == (100 * ONE, 100 * ONE)
        assert len(env.events) == events_before


class TestWithdraw:
    """Tests for burning shares."""

    def test_partial_withdraw(self, active_pool, env):
        reference_out, paired_out = active_pool.withdraw(LIQUIDITY_PROVIDER, 25 * ONE, 1, 1, DEADLINE)

        assert (reference_out, paired_out) == (25 * ONE, 25 * ONE)
        assert active_pool.total_shares() == 75 * ONE
        assert active_pool.get_reserves() == (75 * ONE, 75 * ONE)
        assert active_pool.reference_token.balance_of(LIQUIDITY_PROVIDER) == 25 * ONE
        assert active_pool.state is PoolState.ACTIVE
        [event] = env.events_of(LiquidityRemoved)
        assert event.reference_amount == 25 * ONE

    def test_full_withdraw_empties_pool(self, active_pool):
        active_pool.withdraw(LIQUIDITY_PROVIDER, 100 * ONE, 1, 1, DEADLINE)
        assert active_pool.state is PoolState.EMPTY
        assert active_pool.get_reserves() == (0, 0)

    @pytest.mark.parametrize(
        "shares,min_ref,min_paired",
        [(0, 1, 1), (1, 0, 1), (1, 1, 0)],
    )
    def test_zero_arguments(self, active_pool, shares, min_ref, min_paired):
        with pytest.raises(ZeroAmount):
            active_pool.withdraw(LIQUIDITY_PROVIDER, shares, min_ref, min_paired, DEADLINE)

    def test_output_too_low(self, active_pool):
        with pytest.raises(OutputTooLow) as exc_info:
            active_pool.withdraw(LIQUIDITY_PROVIDER, 10 * ONE, 10 * ONE + 1, 1, DEADLINE)
        assert isinstance(exc_info.value, SlippageExceeded)
        assert active_pool.shares_of(LIQUIDITY_PROVIDER) == 100 * ONE

    def test_cannot_burn_shares_not_held(self, active_pool):
        with pytest.raises(InsufficientBalance):
            active_pool.withdraw(BOB, ONE, 1, 1, DEADLINE)
        assert active_pool.get_reserves() == (100 * ONE, 100 * ONE)

    def test_empty_pool(self, pool):
        with pytest.raises(InsufficientBalance):
            pool.withdraw(LIQUIDITY_PROVIDER, ONE, 1, 1, DEADLINE)

    def test_deadline_expired(self, active_pool):
        with pytest.raises(DeadlineExpired):
            active_pool.withdraw(LIQUIDITY_PROVIDER, ONE, 1, 1, NOW - 1)

    def test_residual_balance_goes_to_next_depositor(self, pool):
        """Tokens sent to an empty pool are owned by whoever bootstraps it."""
        fund(pool.paired_token, STRANGER, 5)
        pool.paired_token.transfer(STRANGER, pool.address, 5)

        shares = bootstrap(pool, LIQUIDITY_PROVIDER, 10**9, 10**9)

        assert shares == 10**9
        assert pool.get_reserves() == (10**9, 10**9 + 5)
        assert pool.withdraw(LIQUIDITY_PROVIDER, shares, 1, 1, DEADLINE) == (10**9, 10**9 + 5)


class TestSwap:
    """Tests for exact-input swaps."""

    def test_scenario_ten_in(self, active_pool, env):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 10 * ONE, spender=active_pool.address)

        out = active_pool.swap(ALICE, pt, 10 * ONE, weth, DEADLINE)

        assert out >= 9 * ONE
        assert weth.balance_of(ALICE) == out
        assert pt.balance_of(ALICE) == 0
        assert active_pool.get_reserves() == (100 * ONE - out, 110 * ONE)
        [event] = env.events_of(Swap)
        assert event.caller == ALICE
        assert event.token_in == pt.address
        assert event.amount_in == 10 * ONE
        assert event.token_out == weth.address
        assert event.amount_out == out

    def test_accepts_addresses(self, active_pool):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(weth, ALICE, ONE, spender=active_pool.address)
        out = active_pool.swap(ALICE, weth.address.upper().replace("0X", "0x"), ONE, pt.address, DEADLINE)
        assert pt.balance_of(ALICE) == out > 0

    def test_fees_accrue_to_provider(self, active_pool):
        """Full withdrawal after a swap returns more than the 200 deposited."""
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 10 * ONE, spender=active_pool.address)
        active_pool.swap(ALICE, pt, 10 * ONE, weth, DEADLINE)

        reference_out, paired_out = active_pool.withdraw(LIQUIDITY_PROVIDER, 100 * ONE, 1, 1, DEADLINE)

        assert reference_out + paired_out > 200 * ONE

    def test_same_token_rejected(self, active_pool):
        pt = active_pool.paired_token
        with pytest.raises(InvalidToken):
            active_pool.swap(ALICE, pt, ONE, pt, DEADLINE)

    def test_foreign_token_rejected(self, active_pool, exchange):
        other = exchange.deploy_token("Other", "OTH")
        with pytest.raises(InvalidToken):
            active_pool.swap(ALICE, other, ONE, active_pool.reference_token, DEADLINE)

    def test_zero_input(self, active_pool):
        with pytest.raises(ZeroAmount):
            active_pool.swap(ALICE, active_pool.paired_token, 0, active_pool.reference_token, DEADLINE)

    def test_empty_pool(self, pool):
        with pytest.raises(ZeroAmount):
            pool.swap(ALICE, pool.paired_token, ONE, pool.reference_token, DEADLINE)

    def test_donated_balance_in_empty_pool_cannot_be_swapped_out(self, pool):
        """Tokens sent straight to an empty pool stay there until it is bootstrapped."""
        pt, weth = pool.paired_token, pool.reference_token
        pt.mint(pool.address, 5 * ONE)
        fund(weth, ALICE, ONE, spender=pool.address)

        with pytest.raises(ZeroAmount):
            pool.swap(ALICE, weth, 1, pt, DEADLINE)
        with pytest.raises(ZeroAmount):
            pool.swap_exact_output(ALICE, weth, pt, ONE, ONE, DEADLINE)
        with pytest.raises(ZeroAmount):
            pool.sell_paired_tokens(ALICE, ONE)

        assert pool.state is PoolState.EMPTY
        assert pool.get_reserves() == (0, 5 * ONE)
        assert weth.balance_of(ALICE) == ONE
        assert pt.balance_of(ALICE) == 0

    def test_deadline_expired(self, active_pool):
        with pytest.raises(DeadlineExpired):
            active_pool.swap(ALICE, active_pool.paired_token, ONE, active_pool.reference_token, NOW - 1)

    def test_min_output(self, active_pool):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 10 * ONE, spender=active_pool.address)
        with pytest.raises(OutputTooLow):
            active_pool.swap(ALICE, pt, 10 * ONE, weth, DEADLINE, min_output_amount=10 * ONE)
        assert pt.balance_of(ALICE) == 10 * ONE

    def test_unapproved_input_rolls_back(self, active_pool, env):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 10 * ONE)
        events_before = len(env.events)
        with pytest.raises(InsufficientAllowance):
            active_pool.swap(ALICE, pt, 10 * ONE, weth, DEADLINE)
        assert weth.balance_of(ALICE) == 0
        assert active_pool.get_reserves() == (100 * ONE, 100 * ONE)
        assert len(env.events) == events_before

    def test_product_grows(self, active_pool):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 50 * ONE, spender=active_pool.address)
        ref_before, paired_before = active_pool.get_reserves()
        active_pool.swap(ALICE, pt, 50 * ONE, weth, DEADLINE)
        ref_after, paired_after = active_pool.get_reserves()
        assert ref_after * paired_after > ref_before * paired_before


class TestSwapExactOutput:
    """Tests for exact-output swaps."""

    def test_pays_rounded_up_input(self, active_pool):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(weth, ALICE, 20 * ONE, spender=active_pool.address)

        paid = active_pool.swap_exact_output(ALICE, weth, pt, 5 * ONE, 20 * ONE, DEADLINE)

        assert pt.balance_of(ALICE) == 5 * ONE
        assert weth.balance_of(ALICE) == 20 * ONE - paid
        assert paid == active_pool.math.get_input_amount_based_on_output(5 * ONE, 100 * ONE, 100 * ONE)

    def test_max_input_exceeded(self, active_pool):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(weth, ALICE, 20 * ONE, spender=active_pool.address)
        with pytest.raises(SlippageExceeded):
            active_pool.swap_exact_output(ALICE, weth, pt, 5 * ONE, 5 * ONE, DEADLINE)


class TestSellPairedTokens:
    """Tests for the one-directional convenience wrapper."""

    def test_sells_for_reference(self, active_pool):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 10 * ONE, spender=active_pool.address)
        out = active_pool.sell_paired_tokens(ALICE, 10 * ONE)
        assert weth.balance_of(ALICE) == out >= 9 * ONE

    def test_min_reference_out(self, active_pool):
        fund(active_pool.paired_token, ALICE, 10 * ONE, spender=active_pool.address)
        with pytest.raises(OutputTooLow):
            active_pool.sell_paired_tokens(ALICE, 10 * ONE, min_reference_out=10 * ONE)


class TestPrices:
    def test_prices_of_one_token(self, active_pool):
        expected = active_pool.math.get_output_amount_based_on_input(ONE, 100 * ONE, 100 * ONE)
        assert active_pool.get_price_of_one_reference_in_paired() == expected
        assert active_pool.get_price_of_one_paired_in_reference() == expected


class TestEffectsBeforeInteractions:
    """A token that calls back mid-transfer sees the pool's new accounting."""

    def test_deposit_callback_sees_minted_shares(self, active_pool: LiquidityPool, env):
        pt = active_pool.paired_token
        seen = []

        def observe(sender, recipient, amount):
            if recipient == active_pool.address:
                seen.append((active_pool.total_shares(), type(env.events[-1])))

        fund(active_pool.reference_token, ALICE, 10 * ONE, spender=active_pool.address)
        fund(pt, ALICE, 10 * ONE, spender=active_pool.address)
        pt.on_transfer = observe

        active_pool.deposit(ALICE, 10 * ONE, 0, 10 * ONE, DEADLINE)

        assert seen == [(110 * ONE, LiquidityAdded)]

    def test_swap_event_staged_before_transfers(self, active_pool: LiquidityPool, env):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        staged = []
        pt.on_transfer = lambda s, r, a: staged.append(type(env.events[-1]))
        fund(pt, ALICE, ONE, spender=active_pool.address)
        staged.clear()

        active_pool.swap(ALICE, pt, ONE, weth, DEADLINE)

        assert staged == [Swap]

    def test_hostile_callback_reverts_operation(self, active_pool: LiquidityPool, env):
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, ONE, spender=active_pool.address)

        def hostile(sender, recipient, amount):
            raise RuntimeError("callback failed")

        weth.on_transfer = hostile
        events_before = len(env.events)

        with pytest.raises(RuntimeError):
            active_pool.swap(ALICE, pt, ONE, weth, DEADLINE)

        weth.on_transfer = None
        assert pt.balance_of(ALICE) == ONE
        assert pt.allowance(ALICE, active_pool.address) == ONE
        assert active_pool.get_reserves() == (100 * ONE, 100 * ONE)
        assert len(env.events) == events_before

    def test_reentrant_swap_prices_against_updated_reserves(self, active_pool: LiquidityPool):
        """A swap re-entered from the input pull sees the staged swap's input."""
        pt, weth = active_pool.paired_token, active_pool.reference_token
        fund(pt, ALICE, 20 * ONE, spender=active_pool.address)
        fund(pt, BOB, 10 * ONE, spender=active_pool.address)
        outputs = []

        def reenter(sender, recipient, amount):
            if sender == ALICE and recipient == active_pool.address:
                pt.on_transfer = None
                outputs.append(active_pool.swap(BOB, pt, 10 * ONE, weth, DEADLINE))

        pt.on_transfer = reenter
        first = active_pool.swap(ALICE, pt, 10 * ONE, weth, DEADLINE)

        # The inner swap ran with ALICE's 10 PT already in the pool
        quoted_at_start = active_pool.math.get_output_amount_based_on_input(10 * ONE, 100 * ONE, 100 * ONE)
        assert first == quoted_at_start
        assert outputs[0] < quoted_at_start
