"""Weighted CMMM pool math.

This package provides swap, deposit and withdrawal estimates for weighted
constant-mean market maker pools, mirroring the on-chain Move math with
double precision floats.
"""

# AMM class
from .amm import CmmmAMM, DepositQuote, SwapQuote

# Bounds
from .bounds import (
    check_balance,
    check_invariant_growth,
    check_invariant_shrink,
    check_out_ratio,
    check_remaining_balance,
    check_swap_fee,
    check_token_count,
    check_weight,
)

# Errors
from .errors import (
    CmmmError,
    ExceedsInvariantBoundError,
    ExceedsSwapBoundError,
    InvalidBalanceError,
    InvalidFeeError,
    InvalidWeightError,
    LengthMismatchError,
    NonPositiveInvariantError,
    SolverDidNotConverge,
    TooManyTokensError,
)

# Invariant
from .invariant import calc_invariant

# Liquidity math
from .liquidity_math import (
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

# Snapshot parsing
from .parsing import parse_pool_snapshot

# Swap math
from .swap_math import (
    calc_ideal_out_given_in,
    calc_in_given_out,
    calc_out_given_in,
    calc_price_impact_fully,
    calc_spot_price,
)

# Withdraw solver
from .withdraw_solver import calc_requested_tokens_out_given_exact_lp_in

__all__ = [
    # AMM class
    "CmmmAMM",
    "SwapQuote",
    "DepositQuote",
    # Invariant
    "calc_invariant",
    # Swap math
    "calc_out_given_in",
    "calc_in_given_out",
    "calc_spot_price",
    "calc_ideal_out_given_in",
    "calc_price_impact_fully",
    # Deposit math
    "calc_lp_out_given_exact_tokens_in",
    "calc_lp_out_given_exact_token_in",
    "calc_token_in_given_exact_lp_out",
    "calc_all_tokens_in_given_exact_lp_out",
    "calc_lp_out_add_token",
    # Withdrawal math
    "calc_lp_in_given_exact_tokens_out",
    "calc_lp_in_given_exact_token_out",
    "calc_token_out_given_exact_lp_in",
    "calc_tokens_out_given_exact_lp_in",
    "calc_requested_tokens_out_given_exact_lp_in",
    # Bounds
    "check_weight",
    "check_swap_fee",
    "check_balance",
    "check_token_count",
    "check_out_ratio",
    "check_invariant_growth",
    "check_invariant_shrink",
    "check_remaining_balance",
    # Parsing
    "parse_pool_snapshot",
    # Errors
    "CmmmError",
    "InvalidWeightError",
    "NonPositiveInvariantError",
    "ExceedsSwapBoundError",
    "ExceedsInvariantBoundError",
    "SolverDidNotConverge",
    "InvalidBalanceError",
    "InvalidFeeError",
    "TooManyTokensError",
    "LengthMismatchError",
]
