"""MerkleMembership AIR constraint evaluation.

Gates (all must vanish on every row of the trace domain):
1. Selector: bit is boolean, state_0/state_1 are the ordered (left, right)
2. Capacity lane of every hash input is zero
3. Poseidon rounds: S-box helper cubes, full and partial round transitions
4. Chain: each level's output becomes the next row's running value
5. Root: the terminal running value equals the public root
6. Leaf (public-leaf mode only): row 0 running value equals the public leaf

All constraints combined with vc powers: sum(Ci * vc^i) = Q * Z_H
"""

from typing import List

from chips.base import Table
from chips.layout import FIXED_COLUMNS, CircuitLayout
from chips.merkle_path_chip import MerklePathChip
from .base import ConstraintContext, ConstraintModule, Gate


class MerkleMembershipConstraints(ConstraintModule):
    """Constraint evaluation for the MerkleMembership AIR."""

    degree = 4

    def __init__(self, layout: CircuitLayout) -> None:
        self.layout = layout
        self.path = MerklePathChip(layout)

    @property
    def public_names(self) -> List[str]:
        return ["root", "leaf"] if self.layout.public_leaf else ["root"]

    def fixed_columns(self) -> Table:
        """Assign every fixed column; the result depends on the layout only."""
        fixed = Table(self.layout.n_rows, FIXED_COLUMNS)
        self.path.assign_fixed(fixed)
        fixed.assign("FINAL", 0, self.layout.terminal_row, 1)
        if self.layout.public_leaf:
            fixed.assign("__L1__", 0, 0, 1)
        return fixed

    def named_constraints(self, ctx: ConstraintContext) -> List[Gate]:
        gates = self.path.gates(ctx)

        cur = ctx.col("cur")
        gates.append(("root", ctx.const("FINAL") * (cur - ctx.public("root"))))
        if self.layout.public_leaf:
            gates.append(("leaf", ctx.const("__L1__") * (cur - ctx.public("leaf"))))
        return gates
