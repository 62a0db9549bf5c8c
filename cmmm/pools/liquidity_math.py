"""Weighted pool deposit and withdrawal math.

About swap fees on joins and exits: any join or exit that is not perfectly
balanced is equivalent to a balanced join or exit followed by a series of
swaps. Those swaps would pay swap fees, so the unbalanced part should too.
Each token amount is split into a 'non-taxable' portion (its share of the
balanced operation) and a 'taxable' portion, and only the taxable portion
is charged the swap fee.

On exits there is no 'token in' to charge, so the fee is applied to the
token out instead, which results in slightly larger price impact.
"""

from __future__ import annotations

from collections.abc import Sequence

from cmmm.math.fixed_point import DEFAULT_DIGITS, OnChainNumber, read_balance, unread_balance

from .bounds import (
    check_balance,
    check_invariant_growth,
    check_invariant_shrink,
    check_remaining_balance,
    check_same_length,
    check_swap_fee,
    check_token_count,
    check_weight,
)
from .errors import InvalidWeightError

# =============================================================================
# Deposits
# =============================================================================


def calc_lp_out_given_exact_tokens_in(
    balances: Sequence[int],
    weights: Sequence[float],
    amounts_in: Sequence[int],
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate LP minted for depositing an arbitrary set of token amounts.

    Swap fees are charged on every token added in a larger proportion than
    the overall invariant increase.

    Args:
        balances: Pool balances, one per token
        weights: Normalized weights, one per token
        amounts_in: Deposit amounts, one per token (zero for tokens not deposited)
        lp_total_supply: Current LP supply
        swap_fee_percentage: Pool swap fee as a fraction
        digits: Decimal digits of balances, amounts and LP

    Returns:
        LP amount out, rounded down; never negative

    Raises:
        InvalidWeightError: If a weight is outside [MIN_WEIGHT, 1]
        InvalidBalanceError: If a pool balance is not positive
        InvalidFeeError: If swap_fee_percentage is not in [0, 1)
        LengthMismatchError: If the per-token sequences differ in length
    """
    count = check_same_length(balances=balances, weights=weights, amounts_in=amounts_in)
    check_token_count(count)
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")

    read_balances = []
    read_amounts = []
    balance_ratios_with_fee = []
    invariant_ratio_with_fees = 0.0
    for i in range(count):
        check_balance(balances[i], f"balances[{i}]")
        check_weight(weights[i], f"weights[{i}]")
        balance_i = read_balance(balances[i], digits)
        amount_i = read_balance(amounts_in[i], digits)
        balance_ratio_with_fee = (balance_i + amount_i) / balance_i

        read_balances.append(balance_i)
        read_amounts.append(amount_i)
        balance_ratios_with_fee.append(balance_ratio_with_fee)
        invariant_ratio_with_fees += balance_ratio_with_fee * weights[i]

    invariant_ratio = 1.0
    for i in range(count):
        balance_i = read_balances[i]
        amount_i = read_amounts[i]

        if balance_ratios_with_fee[i] > invariant_ratio_with_fees:
            # invariant_ratio_with_fees can dip below 1 through rounding when
            # the weights do not add up to exactly 1
            non_taxable_amount = 0.0
            if invariant_ratio_with_fees > 1:
                non_taxable_amount = balance_i * (invariant_ratio_with_fees - 1)
            swap_fee = (amount_i - non_taxable_amount) * swap_fee_percentage
            amount_in_without_fee = amount_i - swap_fee
        else:
            amount_in_without_fee = amount_i
            # Zero deposits leave the invariant ratio untouched
            if amount_in_without_fee == 0:
                continue

        balance_ratio = (balance_i + amount_in_without_fee) / balance_i
        invariant_ratio *= balance_ratio ** weights[i]

    if invariant_ratio <= 1:
        return OnChainNumber(0)
    return unread_balance(read_balance(lp_total_supply, digits) * (invariant_ratio - 1), digits)


def calc_lp_out_given_exact_token_in(
    balance: int,
    weight: float,
    amount_in: int,
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate LP minted for a single-token deposit.

    Same fee model as calc_lp_out_given_exact_tokens_in, with the other
    tokens' contribution to the invariant ratio taken as (1 - weight). That
    assumes weights sum to exactly 1; otherwise the two functions differ
    slightly.

    Returns:
        LP amount out, rounded down; never negative
    """
    check_balance(balance)
    check_weight(weight)
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")

    read_bal = read_balance(balance, digits)
    read_amount_in = read_balance(amount_in, digits)

    balance_ratio_with_fee = (read_bal + read_amount_in) / read_bal
    invariant_ratio_with_fees = balance_ratio_with_fee * weight + (1 - weight)

    if balance_ratio_with_fee > invariant_ratio_with_fees:
        non_taxable_amount = (
            read_bal * (invariant_ratio_with_fees - 1) if invariant_ratio_with_fees > 1 else 0.0
        )
        taxable_amount = read_amount_in - non_taxable_amount
        swap_fee = taxable_amount * swap_fee_percentage
        amount_in_without_fee = non_taxable_amount + taxable_amount - swap_fee
    else:
        amount_in_without_fee = read_amount_in
        if amount_in_without_fee == 0:
            return OnChainNumber(0)

    balance_ratio = (read_bal + amount_in_without_fee) / read_bal
    invariant_ratio = balance_ratio**weight

    if invariant_ratio <= 1:
        return OnChainNumber(0)
    return unread_balance(read_balance(lp_total_supply, digits) * (invariant_ratio - 1), digits)


def calc_token_in_given_exact_lp_out(
    balance: int,
    weight: float,
    lp_amount_out: int,
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate the single token deposit needed to mint an exact LP amount.

    Formula (before fees):
        amount_in = balance * (((lp_supply + lp_out) / lp_supply)^(1 / weight) - 1)

    Raises:
        ExceedsInvariantBoundError: If the invariant would grow more than 3x
    """
    check_balance(balance)
    check_balance(lp_total_supply, "lp_total_supply")
    check_weight(weight)
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")

    read_bal = read_balance(balance, digits)
    read_lp_amount_out = read_balance(lp_amount_out, digits)
    read_lp_total_supply = read_balance(lp_total_supply, digits)

    # Factor by which the invariant grows after minting lp_amount_out
    invariant_ratio = (read_lp_total_supply + read_lp_amount_out) / read_lp_total_supply
    check_invariant_growth(invariant_ratio)

    # Factor by which the token balance has to grow to match it
    balance_ratio = invariant_ratio ** (1 / weight)
    amount_in_without_fee = read_bal * (balance_ratio - 1)

    # The part not covered by the token's own weight is a virtual swap
    taxable_amount = amount_in_without_fee * (1 - weight)
    non_taxable_amount = amount_in_without_fee - taxable_amount
    taxable_amount_plus_fees = taxable_amount / (1 - swap_fee_percentage)

    return unread_balance(non_taxable_amount + taxable_amount_plus_fees, digits)


def calc_all_tokens_in_given_exact_lp_out(
    balances: Sequence[int],
    lp_amount_out: int,
    total_lp: int,
    *,
    digits: int = DEFAULT_DIGITS,
) -> list[OnChainNumber]:
    """Calculate a balanced deposit minting an exact LP amount.

    A proportional join never pays swap fees.

    Formula (per token):
        amount_in = balance * lp_out / total_lp
    """
    check_balance(total_lp, "total_lp")
    lp_ratio = read_balance(lp_amount_out, digits) / read_balance(total_lp, digits)
    return [
        unread_balance(read_balance(balance, digits) * lp_ratio, digits) for balance in balances
    ]


def calc_lp_out_add_token(
    total_supply: int,
    weight: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate LP minted when adding a new token to the pool.

    The weight is the token's normalized weight *after* it is added. For a
    two token 50:50 pool turned into a 33:33:33 pool, use 1/3.

    Formula:
        to_mint = total_supply * (1 / (1 - weight) - 1)

    Raises:
        InvalidWeightError: If weight is below MIN_WEIGHT or not below 1
    """
    check_weight(weight)
    if weight >= 1:
        raise InvalidWeightError(f"Added token weight must be below 1, got {weight}")

    # Growth in the sum of weights; normalized weights sum to 1
    weight_sum_ratio = 1 / (1 - weight)

    return unread_balance(read_balance(total_supply, digits) * (weight_sum_ratio - 1), digits)


# =============================================================================
# Withdrawals
# =============================================================================


def calc_lp_in_given_exact_tokens_out(
    balances: Sequence[int],
    weights: Sequence[float],
    amounts_out: Sequence[int],
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate LP burned for withdrawing an arbitrary set of token amounts.

    Tokens withdrawn in a larger proportion than the overall invariant
    decrease are charged swap fees. A perfectly proportional withdrawal pays
    no fee at all.

    Args:
        balances: Pool balances, one per token
        weights: Normalized weights, one per token
        amounts_out: Withdrawal amounts, one per token (zero for tokens not withdrawn)
        lp_total_supply: Current LP supply
        swap_fee_percentage: Pool swap fee as a fraction
        digits: Decimal digits of balances, amounts and LP

    Returns:
        LP amount in, rounded down

    Raises:
        InvalidWeightError: If a weight is outside [MIN_WEIGHT, 1]
        InvalidBalanceError: If a pool balance is not positive, or an amount
            out plus its fee drains the balance
        InvalidFeeError: If swap_fee_percentage is not in [0, 1)
        LengthMismatchError: If the per-token sequences differ in length
    """
    count = check_same_length(balances=balances, weights=weights, amounts_out=amounts_out)
    check_token_count(count)
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")

    read_balances = []
    read_amounts = []
    balance_ratios_without_fee = []
    invariant_ratio_without_fee = 0.0
    for i in range(count):
        check_balance(balances[i], f"balances[{i}]")
        check_weight(weights[i], f"weights[{i}]")
        balance_i = read_balance(balances[i], digits)
        amount_i = read_balance(amounts_out[i], digits)
        balance_ratio_without_fee = (balance_i - amount_i) / balance_i

        read_balances.append(balance_i)
        read_amounts.append(amount_i)
        balance_ratios_without_fee.append(balance_ratio_without_fee)
        invariant_ratio_without_fee += balance_ratio_without_fee * weights[i]

    invariant_ratio = 1.0
    for i in range(count):
        balance_i = read_balances[i]
        amount_i = read_amounts[i]

        if invariant_ratio_without_fee > balance_ratios_without_fee[i]:
            non_taxable_amount = balance_i * (1 - invariant_ratio_without_fee)
            taxable_amount = amount_i - non_taxable_amount
            taxable_amount_plus_fees = taxable_amount / (1 - swap_fee_percentage)
            amount_out_with_fee = non_taxable_amount + taxable_amount_plus_fees
        else:
            amount_out_with_fee = amount_i
            # Zero withdrawals leave the invariant ratio untouched
            if amount_out_with_fee == 0:
                continue

        check_remaining_balance(amount_out_with_fee, balance_i, f"amounts_out[{i}]")
        invariant_ratio *= ((balance_i - amount_out_with_fee) / balance_i) ** weights[i]

    return unread_balance(read_balance(lp_total_supply, digits) * (1 - invariant_ratio), digits)


def calc_lp_in_given_exact_token_out(
    balance: int,
    weight: float,
    amount_out: int,
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate LP burned for a single-token withdrawal.

    Returns:
        LP amount in, rounded down

    Raises:
        InvalidBalanceError: If amount_out, fees included, drains the balance
    """
    check_balance(balance)
    check_weight(weight)
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")

    read_bal = read_balance(balance, digits)
    read_amount_out = read_balance(amount_out, digits)

    balance_ratio_without_fee = (read_bal - read_amount_out) / read_bal
    invariant_ratio_without_fee = balance_ratio_without_fee * weight + (1 - weight)

    if invariant_ratio_without_fee > balance_ratio_without_fee:
        non_taxable_amount = read_bal * (1 - invariant_ratio_without_fee)
        taxable_amount = read_amount_out - non_taxable_amount
        taxable_amount_plus_fees = taxable_amount / (1 - swap_fee_percentage)
        amount_out_with_fee = non_taxable_amount + taxable_amount_plus_fees
    else:
        amount_out_with_fee = read_amount_out
        if amount_out_with_fee == 0:
            return OnChainNumber(0)

    check_remaining_balance(amount_out_with_fee, read_bal)
    balance_ratio = (read_bal - amount_out_with_fee) / read_bal
    invariant_ratio = balance_ratio**weight

    return unread_balance(read_balance(lp_total_supply, digits) * (1 - invariant_ratio), digits)


def calc_token_out_given_exact_lp_in(
    balance: int,
    weight: float,
    lp_amount_in: int,
    lp_total_supply: int,
    swap_fee_percentage: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate the single token received for burning an exact LP amount.

    Formula (before fees):
        amount_out = balance * (1 - ((lp_supply - lp_in) / lp_supply)^(1 / weight))

    Raises:
        ExceedsInvariantBoundError: If the invariant would shrink below 0.7x
    """
    check_balance(balance)
    check_balance(lp_total_supply, "lp_total_supply")
    check_weight(weight)
    check_swap_fee(swap_fee_percentage, "swap_fee_percentage")

    read_bal = read_balance(balance, digits)
    read_lp_amount_in = read_balance(lp_amount_in, digits)
    read_lp_total_supply = read_balance(lp_total_supply, digits)

    # Factor by which the invariant shrinks after burning lp_amount_in
    invariant_ratio = (read_lp_total_supply - read_lp_amount_in) / read_lp_total_supply
    check_invariant_shrink(invariant_ratio)

    # Factor by which the token balance has to shrink to match it
    balance_ratio = invariant_ratio ** (1 / weight)
    amount_out_without_fee = read_bal * (1 - balance_ratio)

    taxable_amount = amount_out_without_fee * (1 - weight)
    non_taxable_amount = amount_out_without_fee - taxable_amount
    taxable_amount_minus_fees = taxable_amount * (1 - swap_fee_percentage)

    return unread_balance(non_taxable_amount + taxable_amount_minus_fees, digits)


def calc_tokens_out_given_exact_lp_in(
    balances: Sequence[int],
    lp_amount_in: int,
    total_lp: int,
    *,
    digits: int = DEFAULT_DIGITS,
) -> list[OnChainNumber]:
    """Calculate a balanced withdrawal for burning an exact LP amount.

    Formula (per token):
        amount_out = balance * lp_in / total_lp
    """
    check_balance(total_lp, "total_lp")
    lp_ratio = read_balance(lp_amount_in, digits) / read_balance(total_lp, digits)
    return [
        unread_balance(read_balance(balance, digits) * lp_ratio, digits) for balance in balances
    ]
