"""Merkle path chip: depth levels of Selector + Hash, unrolled.

Each level's hash block starts with a selector row, and the CHAIN gate copies
the block's output (state_0 on its last row) into cur on the following row,
which is the next level's selector row or, after the last level, the
terminal row holding the computed root.
"""

from typing import List, Sequence

from chips.base import Chip, Gate, Table
from chips.layout import CircuitLayout
from chips.poseidon_chip import PoseidonChip
from chips.selector_chip import SelectorChip


class MerklePathChip(Chip):
    """Threads the running hash from the leaf (row 0) to the terminal row."""

    def __init__(self, layout: CircuitLayout) -> None:
        self.layout = layout
        self.selector = SelectorChip()
        self.hasher = PoseidonChip(layout.params)

    # --- Setup ---

    def assign_fixed(self, fixed: Table) -> None:
        for level in range(self.layout.depth):
            offset = self.layout.level_offset(level)
            self.selector.assign_fixed(fixed, offset)
            self.hasher.assign_fixed(fixed, offset)
            fixed.assign("CHAIN", 0, offset + self.hasher.output_row, 1)

    # --- Synthesis ---

    def assign(self, trace: Table, leaf: int, path_elements: Sequence[int],
               path_bits: Sequence[int]) -> int:
        """Assign every level and return the computed root.

        Levels are assigned strictly in order: level i + 1 consumes the
        output of level i.
        """
        running = int(leaf)
        for level, (sibling, bit) in enumerate(zip(path_elements, path_bits)):
            offset = self.layout.level_offset(level)
            left, right = self.selector.assign(trace, offset, running, sibling, bit)
            running = self.hasher.assign(trace, offset, left, right)

        trace.assign("cur", 0, self.layout.terminal_row, running)
        return running

    # --- Gates ---

    def gates(self, ctx) -> List[Gate]:
        sel = ctx.const("SEL")
        chain = ctx.const("CHAIN")

        gates = self.selector.gates(ctx)
        gates.append(("capacity_zero", sel * ctx.col("state", 2)))
        gates.extend(self.hasher.gates(ctx))
        gates.append(("chain", chain * (ctx.next_col("cur") - ctx.col("state", 0))))
        return gates
