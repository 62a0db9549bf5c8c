"""Protocol bounds for weighted CMMM pools.

These mirror the limits enforced by the on-chain pool contracts. Each bound
is checked at the specific call sites that need it, not globally.
"""

# Minimum normalized weight of any token in a pool
MIN_WEIGHT = 0.01

# A minimum weight implies a maximum token count: the largest possible pool is
# one where every token sits exactly at MIN_WEIGHT.
MAX_WEIGHTED_TOKENS = 100

# Swap limits: amounts swapped may not exceed this fraction of the pool balance.
# The power function's precision degrades beyond these ratios.
MAX_IN_RATIO = 0.3
MAX_OUT_RATIO = 0.3

# Non-proportional exits cannot shrink the invariant below this ratio
MIN_INVARIANT_RATIO = 0.7

# Non-proportional joins cannot grow the invariant above this ratio
MAX_INVARIANT_RATIO = 3.0

# Largest value representable by a Sui Balance<T> (u64)
U64_MAX = 2**64 - 1
