"""Pytest configuration for the membership prover tests."""

import sys
from functools import lru_cache
from pathlib import Path

import pytest

# Add the repository root to the path so absolute imports work
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from protocol.setup_ctx import setup  # noqa: E402
from tests.membership_vectors import TEST_STARK_STRUCT  # noqa: E402


@lru_cache(maxsize=None)
def cached_keys(depth: int, public_leaf: bool = False):
    return setup(depth, stark_struct=TEST_STARK_STRUCT, public_leaf=public_leaf)


@pytest.fixture(scope="session")
def keys_for():
    """Return (pk, vk) for a depth, computed once per session."""
    return cached_keys
