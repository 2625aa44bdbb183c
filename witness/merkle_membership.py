"""MerkleMembership AIR witness generation.

Synthesis runs the Merkle path chip level by level from the leaf, then fills
the rows after the terminal row with uniformly random values. Those blinding
rows make the trace polynomials' openings (at xi, xi * w and the FRI query
points) independent of the private witness.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from chips.base import Table
from chips.layout import WIDTH, WITNESS_COLUMNS, CircuitLayout
from chips.merkle_path_chip import MerklePathChip
from primitives.field import GOLDILOCKS_PRIME, is_canonical
from primitives.poseidon import DEFAULT_PARAMS, PoseidonParams, tree_levels

from .base import WitnessModule

logger = logging.getLogger(__name__)


def _random_element() -> int:
    return secrets.randbelow(GOLDILOCKS_PRIME)


@dataclass
class MembershipWitness:
    """Private inputs: the leaf and its authentication path, leaf to root."""
    leaf: int
    path_elements: List[int] = field(default_factory=list)
    path_bits: List[int] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.path_elements)

    @classmethod
    def from_leaves(cls, leaves: Sequence[int], index: int,
                    params: PoseidonParams = DEFAULT_PARAMS) -> "MembershipWitness":
        """Build the path for leaves[index] in the tree over all leaves."""
        levels = tree_levels(leaves, params)
        if not 0 <= index < len(leaves):
            raise IndexError(f"leaf index {index} out of range [0, {len(leaves)})")

        path_elements, path_bits = [], []
        idx = index
        for level in levels[:-1]:
            path_elements.append(level[idx ^ 1])
            path_bits.append(idx & 1)
            idx >>= 1
        return cls(leaf=levels[0][index], path_elements=path_elements, path_bits=path_bits)


class MerkleMembershipWitness(WitnessModule):
    """Witness generation for the MerkleMembership AIR."""

    def __init__(self, layout: CircuitLayout,
                 random_element: Optional[Callable[[], int]] = None) -> None:
        self.layout = layout
        self.path = MerklePathChip(layout)
        self.random_element = random_element or _random_element

    def validate(self, witness: MembershipWitness) -> None:
        """Check path length, that every bit is the integer 0 or 1, and that
        the leaf and siblings are canonical field elements.

        Raises:
            MalformedWitness: On the first violation found
        """
        from protocol.errors import MalformedWitness

        if len(witness.path_elements) != self.layout.depth:
            raise MalformedWitness(
                "path length does not match depth",
                {"expected": self.layout.depth, "actual": len(witness.path_elements)},
            )
        if len(witness.path_bits) != self.layout.depth:
            raise MalformedWitness(
                "path bit count does not match depth",
                {"expected": self.layout.depth, "actual": len(witness.path_bits)},
            )
        for level, bit in enumerate(witness.path_bits):
            if not is_canonical(bit) or int(bit) > 1:
                raise MalformedWitness("path bit is not boolean", {"level": level})
        for level, value in enumerate([witness.leaf] + list(witness.path_elements)):
            if not is_canonical(value):
                raise MalformedWitness("value is not a canonical field element", {"position": level})

    def synthesize(self, witness: MembershipWitness, check: bool = True) -> Table:
        """Assign the full trace.

        Args:
            witness: Private inputs
            check: Validate the witness first. Disabling this lets a
                non-boolean bit reach the gates, where it is caught by the
                constraint check instead.

        Returns:
            Table over all n_rows rows of the trace domain
        """
        if check:
            self.validate(witness)

        trace = Table(self.layout.n_rows, WITNESS_COLUMNS)
        self.path.assign(trace, witness.leaf, witness.path_elements, witness.path_bits)
        self._assign_blinding(trace)

        logger.debug("synthesized depth=%d trace over %d rows", self.layout.depth, trace.n_rows)
        return trace

    def _assign_blinding(self, trace: Table) -> None:
        """Fill rows after the terminal row with random, gate-consistent values."""
        for row in range(self.layout.terminal_row + 1, trace.n_rows):
            for name in ("cur", "sib", "bit"):
                trace.assign(name, 0, row, self.random_element())
            for i in range(WIDTH):
                s = self.random_element()
                trace.assign("state", i, row, s)
                # RC is zero outside hash blocks
                trace.assign("cube", i, row, pow(s, 3, GOLDILOCKS_PRIME))
