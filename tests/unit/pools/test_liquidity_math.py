"""Tests for weighted pool deposit and withdrawal math."""

import pytest

from cmmm.pools import (
    ExceedsInvariantBoundError,
    InvalidBalanceError,
    InvalidWeightError,
    LengthMismatchError,
    calc_all_tokens_in_given_exact_lp_out,
    calc_lp_in_given_exact_token_out,
    calc_lp_in_given_exact_tokens_out,
    calc_lp_out_add_token,
    calc_lp_out_given_exact_token_in,
    calc_lp_out_given_exact_tokens_in,
    calc_token_in_given_exact_lp_out,
    calc_token_out_given_exact_lp_in,
    calc_tokens_out_given_exact_lp_in,
)
from tests.helpers import ONE

BALANCES = [1000 * ONE, 2000 * ONE]
WEIGHTS = [0.5, 0.5]
SUPPLY = 1000 * ONE


class TestDepositExactTokens:
    """Tests for calc_lp_out_given_exact_tokens_in."""

    @pytest.mark.parametrize("fee", [0.0, 0.003, 0.3])
    def test_proportional_deposit_pays_no_fee(self, fee: float) -> None:
        """Adding 10% of every balance mints 10% of the supply, whatever the fee."""
        lp_out = calc_lp_out_given_exact_tokens_in(
            BALANCES, WEIGHTS, [100 * ONE, 200 * ONE], SUPPLY, fee
        )
        assert lp_out == pytest.approx(100 * ONE, abs=2)

    def test_single_sided_deposit_pays_fee(self) -> None:
        without_fee = calc_lp_out_given_exact_tokens_in(
            BALANCES, WEIGHTS, [100 * ONE, 0], SUPPLY, 0.0
        )
        with_fee = calc_lp_out_given_exact_tokens_in(
            BALANCES, WEIGHTS, [100 * ONE, 0], SUPPLY, 0.01
        )
        assert 0 < with_fee < without_fee

    def test_zero_amounts_mint_nothing(self) -> None:
        assert calc_lp_out_given_exact_tokens_in(BALANCES, WEIGHTS, [0, 0], SUPPLY, 0.003) == 0

    @pytest.mark.parametrize(
        "balances,weights,index",
        [
            ([1000 * ONE, 2000 * ONE], [0.5, 0.5], 0),
            ([1000 * ONE, 2000 * ONE], [0.5, 0.5], 1),
            ([1000 * ONE, 2000 * ONE, 500 * ONE], [0.25, 0.25, 0.5], 2),
            ([1000 * ONE, 2000 * ONE, 500 * ONE], [0.25, 0.25, 0.5], 0),
        ],
    )
    def test_single_nonzero_matches_single_token(
        self, balances: list[int], weights: list[float], index: int
    ) -> None:
        """A multi-token deposit of one token equals the single-token deposit."""
        amounts = [0] * len(balances)
        amounts[index] = 50 * ONE
        multi = calc_lp_out_given_exact_tokens_in(balances, weights, amounts, SUPPLY, 0.003)
        single = calc_lp_out_given_exact_token_in(
            balances[index], weights[index], 50 * ONE, SUPPLY, 0.003
        )
        assert multi == pytest.approx(single, abs=1)

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(LengthMismatchError):
            calc_lp_out_given_exact_tokens_in(BALANCES, WEIGHTS, [ONE], SUPPLY, 0.003)


class TestDepositSingleToken:
    """Tests for calc_lp_out_given_exact_token_in and calc_token_in_given_exact_lp_out."""

    def test_zero_amount_mints_nothing(self) -> None:
        assert calc_lp_out_given_exact_token_in(1000 * ONE, 0.5, 0, SUPPLY, 0.003) == 0

    def test_fee_free_inverse(self) -> None:
        """Without fees, token_in(lp_out) and lp_out(token_in) invert each other."""
        token_in = calc_token_in_given_exact_lp_out(1000 * ONE, 0.3, 50 * ONE, SUPPLY, 0.0)
        lp_out = calc_lp_out_given_exact_token_in(1000 * ONE, 0.3, token_in, SUPPLY, 0.0)
        assert lp_out == pytest.approx(50 * ONE, rel=1e-9)

    def test_fee_increases_token_in(self) -> None:
        without_fee = calc_token_in_given_exact_lp_out(1000 * ONE, 0.3, 50 * ONE, SUPPLY, 0.0)
        with_fee = calc_token_in_given_exact_lp_out(1000 * ONE, 0.3, 50 * ONE, SUPPLY, 0.01)
        assert with_fee > without_fee

    def test_full_weight_token_pays_no_fee(self) -> None:
        """A weight-1 token is the whole pool, so nothing is taxable."""
        token_in = calc_token_in_given_exact_lp_out(1000 * ONE, 1.0, 100 * ONE, SUPPLY, 0.1)
        assert token_in == pytest.approx(100 * ONE, abs=1)

    def test_invariant_growth_at_bound(self) -> None:
        """Minting twice the supply triples the invariant, which is allowed."""
        assert calc_token_in_given_exact_lp_out(1000 * ONE, 0.5, 2 * SUPPLY, SUPPLY, 0.0) > 0

    def test_invariant_growth_exceeded_raises(self) -> None:
        with pytest.raises(ExceedsInvariantBoundError):
            calc_token_in_given_exact_lp_out(1000 * ONE, 0.5, 5 * SUPPLY // 2, SUPPLY, 0.0)


class TestDepositAllTokens:
    """Tests for calc_all_tokens_in_given_exact_lp_out."""

    def test_proportional_amounts(self) -> None:
        amounts = calc_all_tokens_in_given_exact_lp_out(BALANCES, 100 * ONE, SUPPLY)
        assert amounts == [
            pytest.approx(100 * ONE, abs=1),
            pytest.approx(200 * ONE, abs=1),
        ]

    def test_deposit_mints_requested_lp(self) -> None:
        amounts = calc_all_tokens_in_given_exact_lp_out(BALANCES, 100 * ONE, SUPPLY)
        lp_out = calc_lp_out_given_exact_tokens_in(BALANCES, WEIGHTS, amounts, SUPPLY, 0.003)
        assert lp_out == pytest.approx(100 * ONE, rel=1e-8)


class TestAddToken:
    """Tests for calc_lp_out_add_token."""

    def test_regression(self) -> None:
        """1_000_000 * (1 / 0.8 - 1) = 250_000."""
        assert calc_lp_out_add_token(1_000_000, 0.2) == pytest.approx(250_000, abs=1)

    def test_whole_coins(self) -> None:
        assert calc_lp_out_add_token(1_000_000 * ONE, 0.2) == pytest.approx(
            250_000 * ONE, abs=1
        )

    def test_third_token(self) -> None:
        """Turning a 50/50 pool into thirds mints half the supply."""
        assert calc_lp_out_add_token(SUPPLY, 1 / 3) == pytest.approx(SUPPLY / 2, abs=1)

    @pytest.mark.parametrize("weight", [1.0, 0.001, 0.0])
    def test_invalid_weight_raises(self, weight: float) -> None:
        with pytest.raises(InvalidWeightError):
            calc_lp_out_add_token(SUPPLY, weight)


class TestWithdrawExactTokens:
    """Tests for calc_lp_in_given_exact_tokens_out."""

    @pytest.mark.parametrize("fee", [0.0, 0.003, 0.3])
    def test_proportional_withdrawal_pays_no_fee(self, fee: float) -> None:
        """Removing 10% of every balance burns 10% of the supply, whatever the fee."""
        lp_in = calc_lp_in_given_exact_tokens_out(
            BALANCES, WEIGHTS, [100 * ONE, 200 * ONE], SUPPLY, fee
        )
        assert lp_in == pytest.approx(100 * ONE, abs=2)

    def test_single_sided_withdrawal_pays_fee(self) -> None:
        without_fee = calc_lp_in_given_exact_tokens_out(
            BALANCES, WEIGHTS, [0, 100 * ONE], SUPPLY, 0.0
        )
        with_fee = calc_lp_in_given_exact_tokens_out(
            BALANCES, WEIGHTS, [0, 100 * ONE], SUPPLY, 0.01
        )
        assert with_fee > without_fee

    def test_fee_draining_balance_raises(self) -> None:
        """99.9% of one coin plus the fee on its taxable part exceeds the balance."""
        with pytest.raises(InvalidBalanceError):
            calc_lp_in_given_exact_tokens_out(
                [1000 * ONE, 1000 * ONE], WEIGHTS, [999 * ONE, 0], SUPPLY, 0.01
            )

    def test_zero_amounts_burn_nothing(self) -> None:
        assert calc_lp_in_given_exact_tokens_out(BALANCES, WEIGHTS, [0, 0], SUPPLY, 0.003) == 0

    @pytest.mark.parametrize(
        "balances,weights,index",
        [
            ([1000 * ONE, 2000 * ONE], [0.5, 0.5], 1),
            ([1000 * ONE, 2000 * ONE, 500 * ONE], [0.25, 0.25, 0.5], 0),
            ([1000 * ONE, 2000 * ONE, 500 * ONE], [0.25, 0.25, 0.5], 2),
        ],
    )
    def test_single_nonzero_matches_single_token(
        self, balances: list[int], weights: list[float], index: int
    ) -> None:
        """A multi-token withdrawal of one token equals the single-token withdrawal."""
        amounts = [0] * len(balances)
        amounts[index] = 50 * ONE
        multi = calc_lp_in_given_exact_tokens_out(balances, weights, amounts, SUPPLY, 0.003)
        single = calc_lp_in_given_exact_token_out(
            balances[index], weights[index], 50 * ONE, SUPPLY, 0.003
        )
        assert multi == pytest.approx(single, abs=1)


class TestWithdrawSingleToken:
    """Tests for calc_lp_in_given_exact_token_out and calc_token_out_given_exact_lp_in."""

    def test_zero_amount_burns_nothing(self) -> None:
        assert calc_lp_in_given_exact_token_out(1000 * ONE, 0.5, 0, SUPPLY, 0.003) == 0

    def test_fee_free_inverse(self) -> None:
        """Without fees, token_out(lp_in) and lp_in(token_out) invert each other."""
        token_out = calc_token_out_given_exact_lp_in(1000 * ONE, 0.3, 50 * ONE, SUPPLY, 0.0)
        lp_in = calc_lp_in_given_exact_token_out(1000 * ONE, 0.3, token_out, SUPPLY, 0.0)
        assert lp_in == pytest.approx(50 * ONE, rel=1e-9)

    def test_fee_draining_balance_raises(self) -> None:
        with pytest.raises(InvalidBalanceError):
            calc_lp_in_given_exact_token_out(1000 * ONE, 0.5, 999 * ONE, SUPPLY, 0.01)

    def test_large_exit_without_fee(self) -> None:
        """The same exit is fine when no fee pushes it past the balance."""
        lp_in = calc_lp_in_given_exact_token_out(1000 * ONE, 0.5, 999 * ONE, SUPPLY, 0.0)
        assert 0 < lp_in < SUPPLY

    def test_fee_reduces_token_out(self) -> None:
        without_fee = calc_token_out_given_exact_lp_in(1000 * ONE, 0.3, 50 * ONE, SUPPLY, 0.0)
        with_fee = calc_token_out_given_exact_lp_in(1000 * ONE, 0.3, 50 * ONE, SUPPLY, 0.01)
        assert with_fee < without_fee

    def test_invariant_shrink_within_bound(self) -> None:
        assert calc_token_out_given_exact_lp_in(1000 * ONE, 0.5, SUPPLY // 4, SUPPLY, 0.0) > 0

    def test_invariant_shrink_exceeded_raises(self) -> None:
        with pytest.raises(ExceedsInvariantBoundError):
            calc_token_out_given_exact_lp_in(1000 * ONE, 0.5, 31 * SUPPLY // 100, SUPPLY, 0.0)


class TestWithdrawAllTokens:
    """Tests for calc_tokens_out_given_exact_lp_in."""

    def test_proportional_amounts(self) -> None:
        amounts = calc_tokens_out_given_exact_lp_in(BALANCES, 100 * ONE, SUPPLY)
        assert amounts == [
            pytest.approx(100 * ONE, abs=1),
            pytest.approx(200 * ONE, abs=1),
        ]

    def test_withdrawal_burns_requested_lp(self) -> None:
        amounts = calc_tokens_out_given_exact_lp_in(BALANCES, 100 * ONE, SUPPLY)
        lp_in = calc_lp_in_given_exact_tokens_out(BALANCES, WEIGHTS, amounts, SUPPLY, 0.003)
        assert lp_in == pytest.approx(100 * ONE, rel=1e-8)
