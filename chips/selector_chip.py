"""Conditional selector chip.

Orders (current, sibling) by a direction bit without branching:

    left  = current + bit * (sibling - current)
    right = sibling + bit * (current - sibling)
    bit * (bit - 1) = 0

The outputs are not separate cells: they are the first two state lanes of
the hash block starting on the same row.
"""

from typing import List, Tuple

from chips.base import Chip, Gate, Table
from primitives.field import FF, GOLDILOCKS_PRIME

_P = GOLDILOCKS_PRIME
ONE = FF(1)


def select(current: int, sibling: int, bit: int) -> Tuple[int, int]:
    """The blend evaluated natively; agrees with the gates for any bit value."""
    left = (current + bit * (sibling - current)) % _P
    right = (sibling + bit * (current - sibling)) % _P
    return left, right


class SelectorChip(Chip):
    """Single-row chip gated by the SEL fixed column."""

    def assign_fixed(self, fixed: Table, row: int) -> None:
        fixed.assign("SEL", 0, row, 1)

    def assign(self, trace: Table, row: int, current: int, sibling: int, bit: int) -> Tuple[int, int]:
        """Write (current, sibling, bit) at row and return (left, right)."""
        trace.assign("cur", 0, row, current)
        trace.assign("sib", 0, row, sibling)
        trace.assign("bit", 0, row, bit)
        return select(int(current), int(sibling), int(bit))

    def gates(self, ctx) -> List[Gate]:
        sel = ctx.const("SEL")
        cur = ctx.col("cur")
        sib = ctx.col("sib")
        bit = ctx.col("bit")
        left = ctx.col("state", 0)
        right = ctx.col("state", 1)

        return [
            ("bit_boolean", sel * bit * (bit - ONE)),
            ("select_left", sel * (left - (cur + bit * (sib - cur)))),
            ("select_right", sel * (right - (sib + bit * (cur - sib)))),
        ]
