"""Shared parameters and inputs for the membership tests."""

from protocol.stark_info import StarkStruct

# Fewer queries and grinding bits than the defaults keep each proof fast;
# the protocol flow is identical.
TEST_STARK_STRUCT = StarkStruct(n_queries=8, pow_bits=4)

# Leaves of the depth-2 tree used across tests
LEAVES = [11, 22, 33, 44]
