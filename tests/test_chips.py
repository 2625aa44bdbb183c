"""Tests for the chips and the membership constraint module.

Gates are evaluated on the trace domain with ProverConstraintContext, the
same path the prover's constraint check takes.
"""

from typing import Dict, List

import numpy as np
import pytest

from chips.base import Table
from chips.layout import FIXED_COLUMNS, WITNESS_COLUMNS, CircuitLayout
from chips.poseidon_chip import PoseidonChip
from chips.selector_chip import select
from constraints import MerkleMembershipConstraints, ProverConstraintContext
from primitives.field import FF, GOLDILOCKS_PRIME
from primitives.poseidon import DEFAULT_PARAMS, compute_root, hash_two
from protocol.data import ProverData
from witness import MembershipWitness, MerkleMembershipWitness


def _failing_gates(layout: CircuitLayout, trace: Table, publics: Dict[str, int]) -> Dict[str, List[int]]:
    module = MerkleMembershipConstraints(layout)
    data = ProverData(
        columns=trace.to_columns(),
        constants=module.fixed_columns().to_columns(),
        public_inputs={k: FF(v) for k, v in publics.items()},
    )
    failing = {}
    for name, expr in module.named_constraints(ProverConstraintContext(data)):
        rows = np.nonzero(expr != 0)[0]
        if len(rows):
            failing[name] = [int(r) for r in rows]
    return failing


def _synthesize(layout: CircuitLayout, witness: MembershipWitness, check: bool = True) -> Table:
    counter = iter(range(1, 1 << 20))
    return MerkleMembershipWitness(layout, random_element=lambda: next(counter)).synthesize(witness, check=check)


@pytest.fixture
def depth2():
    layout = CircuitLayout(depth=2, blinding_rows=4)
    witness = MembershipWitness.from_leaves([11, 22, 33, 44], 2)
    root = compute_root(witness.leaf, witness.path_elements, witness.path_bits)
    return layout, witness, root


class TestLayout:
    """Row layout depends on depth only."""

    def test_block_size(self) -> None:
        layout = CircuitLayout(depth=3, blinding_rows=10)
        assert layout.block_size == DEFAULT_PARAMS.n_rounds + 1 == 31
        assert layout.terminal_row == 93
        assert layout.level_offset(2) == 62

    @pytest.mark.parametrize("depth,blinding,n_rows", [(0, 34, 64), (1, 34, 128), (3, 34, 128), (3, 10, 128), (0, 10, 16)])
    def test_domain_size(self, depth: int, blinding: int, n_rows: int) -> None:
        layout = CircuitLayout(depth=depth, blinding_rows=blinding)
        assert layout.n_rows == n_rows
        assert layout.n_rows >= layout.n_rows_used

    def test_rejects_negative_depth(self) -> None:
        with pytest.raises(ValueError):
            CircuitLayout(depth=-1, blinding_rows=4)

    def test_column_sets(self) -> None:
        assert len(WITNESS_COLUMNS) == 9
        assert ("__L1__", 0) in FIXED_COLUMNS


class TestSelector:
    """Branch-free ordering by the path bit."""

    def test_bit_zero_keeps_order(self) -> None:
        assert select(5, 9, 0) == (5, 9)

    def test_bit_one_swaps(self) -> None:
        assert select(5, 9, 1) == (9, 5)

    def test_non_boolean_bit_blends(self) -> None:
        """bit = 2 yields neither ordering; only the boolean gate catches it."""
        left, right = select(5, 9, 2)
        assert (left, right) == (13, 1)


class TestPoseidonChip:
    """The hash block reproduces the native permutation."""

    def test_output_matches_native_hash(self) -> None:
        chip = PoseidonChip()
        trace = Table(chip.rows, WITNESS_COLUMNS)
        out = chip.assign(trace, 0, 123, 456)
        assert out == hash_two(123, 456)
        assert trace.get("state", 0, chip.output_row) == out

    def test_cube_cells(self) -> None:
        chip = PoseidonChip()
        trace = Table(chip.rows, WITNESS_COLUMNS)
        chip.assign(trace, 0, 1, 2)
        s = trace.get("state", 1, 0)
        rc = DEFAULT_PARAMS.rc[0][1]
        assert trace.get("cube", 1, 0) == pow(s + rc, 3, GOLDILOCKS_PRIME)


class TestMembershipGates:
    """Every gate holds on an honest trace and catches its own violation."""

    @pytest.mark.parametrize("index", [0, 1, 2, 3])
    def test_honest_trace_satisfies_all_gates(self, index: int) -> None:
        layout = CircuitLayout(depth=2, blinding_rows=4)
        witness = MembershipWitness.from_leaves([11, 22, 33, 44], index)
        trace = _synthesize(layout, witness)
        root = trace.get("cur", 0, layout.terminal_row)
        assert _failing_gates(layout, trace, {"root": root}) == {}

    def test_depth_zero_root_is_leaf(self) -> None:
        layout = CircuitLayout(depth=0, blinding_rows=4)
        trace = _synthesize(layout, MembershipWitness(leaf=77))
        assert _failing_gates(layout, trace, {"root": 77}) == {}
        assert _failing_gates(layout, trace, {"root": 78}) == {"root": [0]}

    def test_wrong_root_fails_root_gate(self, depth2) -> None:
        layout, witness, root = depth2
        trace = _synthesize(layout, witness)
        failing = _failing_gates(layout, trace, {"root": (root + 1) % GOLDILOCKS_PRIME})
        assert failing == {"root": [layout.terminal_row]}

    def test_non_boolean_bit_fails_boolean_gate(self, depth2) -> None:
        layout, witness, _ = depth2
        witness.path_bits[0] = 2
        trace = _synthesize(layout, witness, check=False)
        root = trace.get("cur", 0, layout.terminal_row)
        assert _failing_gates(layout, trace, {"root": root}) == {"bit_boolean": [0]}

    def test_tampered_state_fails_round_gate(self, depth2) -> None:
        layout, witness, root = depth2
        trace = _synthesize(layout, witness)
        trace.assign("state", 0, 5, trace.get("state", 0, 5) + 1)
        failing = _failing_gates(layout, trace, {"root": root})
        # row 5 is inside the partial rounds; row 4 transitions into it
        assert 5 in failing["sbox_cube_0"]
        assert 4 in failing["partial_round_0"]

    def test_broken_chain_fails_chain_gate(self, depth2) -> None:
        layout, witness, root = depth2
        trace = _synthesize(layout, witness)
        row = layout.level_offset(1)
        trace.assign("cur", 0, row, trace.get("cur", 0, row) + 1)
        failing = _failing_gates(layout, trace, {"root": root})
        assert failing["chain"] == [row - 1]

    def test_nonzero_capacity_fails(self, depth2) -> None:
        layout, witness, root = depth2
        trace = _synthesize(layout, witness)
        trace.assign("state", 2, 0, 1)
        assert "capacity_zero" in _failing_gates(layout, trace, {"root": root})

    def test_public_leaf_gate(self, depth2) -> None:
        layout, witness, root = depth2
        public = CircuitLayout(depth=2, blinding_rows=4, public_leaf=True)
        trace = _synthesize(public, witness)
        assert _failing_gates(public, trace, {"root": root, "leaf": witness.leaf}) == {}
        assert _failing_gates(public, trace, {"root": root, "leaf": witness.leaf + 1}) == {"leaf": [0]}

    def test_fixed_columns_independent_of_witness(self, depth2) -> None:
        layout, _, _ = depth2
        a = MerkleMembershipConstraints(layout).fixed_columns()
        b = MerkleMembershipConstraints(layout).fixed_columns()
        assert a.values == b.values
        assert a.get("FINAL", 0, layout.terminal_row) == 1
        assert a.get("SEL", 0, layout.level_offset(1)) == 1
        assert a.get("CHAIN", 0, layout.level_offset(1) - 1) == 1
