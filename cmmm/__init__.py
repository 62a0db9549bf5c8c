"""Off-chain pricing engine for weighted constant-mean market maker pools.

The math mirrors the on-chain Move implementation approximately, using
double precision floats. Results are estimates for display and quoting,
not bit-exact reproductions of on-chain rounding.
"""

__version__ = "0.1.0"
