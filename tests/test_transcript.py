"""Tests for the Fiat-Shamir transcript."""

import pytest

from primitives.field import GOLDILOCKS_PRIME
from primitives.transcript import Transcript


def _transcript(*inputs) -> Transcript:
    t = Transcript(arity=4)
    for data in inputs:
        t.put(list(data))
    return t


class TestTranscript:
    """Absorb / squeeze behaviour."""

    def test_deterministic(self) -> None:
        """Same inputs give the same challenges."""
        assert _transcript([1, 2, 3]).get_field() == _transcript([1, 2, 3]).get_field()

    def test_challenges_depend_on_every_input(self) -> None:
        base = _transcript([1, 2, 3], [4]).get_field()
        assert _transcript([1, 2, 3], [5]).get_field() != base
        assert _transcript([0, 2, 3], [4]).get_field() != base

    def test_successive_challenges_differ(self) -> None:
        t = _transcript([9])
        assert t.get_field() != t.get_field()

    def test_outputs_are_field_elements(self) -> None:
        t = _transcript([GOLDILOCKS_PRIME - 1] * 20)
        assert all(0 <= t.get_field() < GOLDILOCKS_PRIME for _ in range(40))

    def test_get_state_length(self) -> None:
        assert len(_transcript([1]).get_state(3)) == 3

    @pytest.mark.parametrize("n,n_bits", [(8, 9), (32, 10), (3, 63)])
    def test_permutations_in_range(self, n: int, n_bits: int) -> None:
        indices = _transcript([1, 2]).get_permutations(n, n_bits)
        assert len(indices) == n
        assert all(0 <= i < (1 << n_bits) for i in indices)

    @pytest.mark.parametrize("arity", [1, 5])
    def test_rejects_bad_arity(self, arity: int) -> None:
        with pytest.raises(ValueError):
            Transcript(arity=arity)
