"""Row and column layout of the membership circuit.

Level i of the path occupies a block of B = n_rounds + 1 rows starting at
i * B: the first row holds the selector inputs and round 0, the next
n_rounds - 1 rows the remaining rounds, and the last row the hash output.
The terminal row T = depth * B holds the computed root. Rows after T are
blinding rows. Every quantity here depends on the depth and the hash
parameters only, never on witness values.
"""

from dataclasses import dataclass, field
from typing import List

from chips.base import ColumnKey
from primitives.poseidon import DEFAULT_PARAMS, PoseidonParams

# --- Columns ---

WIDTH = 3

WITNESS_COLUMNS: List[ColumnKey] = (
    [("cur", 0), ("sib", 0), ("bit", 0)]
    + [("state", i) for i in range(WIDTH)]
    + [("cube", i) for i in range(WIDTH)]
)

FIXED_COLUMNS: List[ColumnKey] = (
    [("SEL", 0), ("FULL", 0), ("PARTIAL", 0)]
    + [("RC", i) for i in range(WIDTH)]
    + [("CHAIN", 0), ("FINAL", 0), ("__L1__", 0)]
)

# Columns read at the next row by some gate
NEXT_ROW_COLUMNS: List[ColumnKey] = [("cur", 0)] + [("state", i) for i in range(WIDTH)]


@dataclass(frozen=True)
class CircuitLayout:
    """Shape of the circuit for one depth."""
    depth: int
    blinding_rows: int
    public_leaf: bool = False
    params: PoseidonParams = field(default=DEFAULT_PARAMS, repr=False)

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"depth must be non-negative, got {self.depth}")
        if self.params.t != WIDTH:
            raise ValueError(f"hash width must be {WIDTH}, got {self.params.t}")

    @property
    def block_size(self) -> int:
        return self.params.n_rounds + 1

    @property
    def terminal_row(self) -> int:
        return self.depth * self.block_size

    @property
    def n_rows_used(self) -> int:
        return self.terminal_row + 1 + self.blinding_rows

    @property
    def n_bits(self) -> int:
        n_bits = 1
        while (1 << n_bits) < self.n_rows_used:
            n_bits += 1
        return n_bits

    @property
    def n_rows(self) -> int:
        return 1 << self.n_bits

    def level_offset(self, level: int) -> int:
        return level * self.block_size
