"""Weighted pool swap math.

Single-asset-in, single-asset-out pricing for CMMM pools. Fees are passed in
and applied here (unlike Balancer, where the caller strips them first).

Known asymmetry: calc_in_given_out enforces the 30% output ratio bound, but
calc_out_given_in does NOT enforce the matching 30% input ratio bound. The
check is left out so that UIs can show estimates for oversized hypothetical
trades. The transaction itself still fails on-chain for such trades.
"""

from __future__ import annotations

from cmmm.math.fixed_point import (
    DEFAULT_DIGITS,
    LocalNumber,
    OnChainNumber,
    read_balance,
    unread_balance,
)

from .bounds import check_balance, check_out_ratio, check_swap_fee, check_weight


def _check_pair(
    balance_in: int,
    weight_in: float,
    balance_out: int,
    weight_out: float,
) -> None:
    check_weight(weight_in, "weight_in")
    check_weight(weight_out, "weight_out")
    check_balance(balance_in, "balance_in")
    check_balance(balance_out, "balance_out")


def calc_out_given_in(
    balance_in: int,
    weight_in: float,
    balance_out: int,
    weight_out: float,
    amount_in: int,
    swap_fee: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate how many tokens come out of the pool for an exact input.

    Formula:
        base = balance_in / (balance_in + amount_in * (1 - fee))
        amount_out = balance_out * (1 - base^(weight_in / weight_out))

    Args:
        balance_in: Pool balance of the input token
        weight_in: Weight of the input token
        balance_out: Pool balance of the output token
        weight_out: Weight of the output token
        amount_in: Input amount, fee included
        swap_fee: Swap fee as a fraction (e.g., 0.003 for 0.3%)
        digits: Decimal digits of balances and amounts

    Returns:
        Output amount, rounded down

    Raises:
        InvalidWeightError: If a weight is outside [MIN_WEIGHT, 1]
        InvalidBalanceError: If a pool balance is not positive
        InvalidFeeError: If swap_fee is not in [0, 1)
    """
    _check_pair(balance_in, weight_in, balance_out, weight_out)
    check_swap_fee(swap_fee)

    read_balance_in = read_balance(balance_in, digits)
    read_balance_out = read_balance(balance_out, digits)
    read_amount_in = read_balance(amount_in, digits)

    # No MAX_IN_RATIO check here, see module docstring
    amount_in_without_fee = read_amount_in * (1 - swap_fee)
    base = read_balance_in / (read_balance_in + amount_in_without_fee)
    exponent = weight_in / weight_out
    power = base**exponent

    return unread_balance(read_balance_out * (1 - power), digits)


def calc_in_given_out(
    balance_in: int,
    weight_in: float,
    balance_out: int,
    weight_out: float,
    amount_out: int,
    swap_fee: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate how many tokens must be sent to take an exact output.

    Formula:
        base = balance_out / (balance_out - amount_out)
        amount_in = balance_in * (base^(weight_out / weight_in) - 1) / (1 - fee)

    Args:
        balance_in: Pool balance of the input token
        weight_in: Weight of the input token
        balance_out: Pool balance of the output token
        weight_out: Weight of the output token
        amount_out: Requested output amount
        swap_fee: Swap fee as a fraction
        digits: Decimal digits of balances and amounts

    Returns:
        Input amount including the fee, rounded down

    Raises:
        ExceedsSwapBoundError: If amount_out > balance_out * 0.3
        InvalidWeightError: If a weight is outside [MIN_WEIGHT, 1]
        InvalidBalanceError: If a pool balance is not positive
        InvalidFeeError: If swap_fee is not in [0, 1)
    """
    _check_pair(balance_in, weight_in, balance_out, weight_out)
    check_swap_fee(swap_fee)

    read_balance_in = read_balance(balance_in, digits)
    read_balance_out = read_balance(balance_out, digits)
    read_amount_out = read_balance(amount_out, digits)

    check_out_ratio(read_amount_out, read_balance_out)

    base = read_balance_out / (read_balance_out - read_amount_out)
    exponent = weight_out / weight_in
    power = base**exponent

    # base >= 1, so power >= 1 and the ratio is never negative
    ratio = power - 1

    return unread_balance(read_balance_in * ratio / (1 - swap_fee), digits)


def calc_spot_price(
    balance_in: int,
    weight_in: float,
    balance_out: int,
    weight_out: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> LocalNumber:
    """Calculate the marginal price in units of coin-in per coin-out.

    Formula:
        spot_price = (balance_in / weight_in) / (balance_out / weight_out)
    """
    _check_pair(balance_in, weight_in, balance_out, weight_out)
    return LocalNumber(
        read_balance(balance_in, digits)
        / weight_in
        / (read_balance(balance_out, digits) / weight_out)
    )


def calc_ideal_out_given_in(
    balance_in: int,
    weight_in: float,
    balance_out: int,
    weight_out: float,
    amount_in: int,
    swap_fee: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate the output at spot price, i.e. without slippage.

    Trading fees are still taken into account.
    """
    check_swap_fee(swap_fee)
    amount_in_without_fee = read_balance(amount_in, digits) * (1 - swap_fee)
    price = calc_spot_price(balance_in, weight_in, balance_out, weight_out, digits=digits)
    # price = amount_in / amount_out at the margin, so amount_out = amount_in / price
    return unread_balance(amount_in_without_fee / price, digits)


def calc_price_impact_fully(
    balance_in: int,
    weight_in: float,
    balance_out: int,
    weight_out: float,
    amount_in: int,
    swap_fee: float,
    *,
    digits: int = DEFAULT_DIGITS,
) -> OnChainNumber:
    """Calculate the output lost to slippage for a trade.

    The weighted product curve is concave, so the result is never negative
    for valid inputs.

    Returns:
        ideal output minus actual output, in output token units
    """
    ideal = calc_ideal_out_given_in(
        balance_in, weight_in, balance_out, weight_out, amount_in, swap_fee, digits=digits
    )
    actual = calc_out_given_in(
        balance_in, weight_in, balance_out, weight_out, amount_in, swap_fee, digits=digits
    )
    return OnChainNumber(ideal - actual)
