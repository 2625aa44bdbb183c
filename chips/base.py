"""Base classes shared by all chips.

A chip contributes two things to a circuit:

- gates: named polynomial identities evaluated through a ConstraintContext,
  so the same expressions serve the prover (arrays over a domain) and the
  verifier (scalars at xi);
- assignment: code writing fixed columns at setup and witness columns at
  synthesis into a Table.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Tuple

from primitives.field import FF, GOLDILOCKS_PRIME

ColumnKey = Tuple[str, int]
Gate = Tuple[str, Any]  # (name, expression that must vanish on every row)


class Table:
    """Assignment of named columns over a fixed number of rows.

    Values are plain ints reduced mod p; conversion to galois arrays happens
    once, in to_columns().
    """

    def __init__(self, n_rows: int, columns: Iterable[ColumnKey]) -> None:
        self.n_rows = n_rows
        self.values: Dict[ColumnKey, List[int]] = {key: [0] * n_rows for key in columns}

    @property
    def columns(self) -> List[ColumnKey]:
        return list(self.values.keys())

    def assign(self, name: str, index: int, row: int, value: int) -> None:
        key = (name, index)
        if key not in self.values:
            raise KeyError(f"Unknown column {key}")
        if not 0 <= row < self.n_rows:
            raise IndexError(f"Row {row} out of range [0, {self.n_rows})")
        self.values[key][row] = int(value) % GOLDILOCKS_PRIME

    def get(self, name: str, index: int, row: int) -> int:
        return self.values[(name, index)][row]

    def to_columns(self) -> Dict[ColumnKey, FF]:
        """Return every column as an FF array of length n_rows."""
        return {key: FF(vals) for key, vals in self.values.items()}


class Chip(ABC):
    """A reusable unit of gate definitions plus assignment logic."""

    @abstractmethod
    def gates(self, ctx) -> List[Gate]:
        """Return this chip's (name, expression) pairs for the given context."""
        pass
