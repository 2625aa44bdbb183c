"""Chips - reusable gate sets with their assignment logic."""

from chips.base import Chip, ColumnKey, Gate, Table
from chips.layout import FIXED_COLUMNS, NEXT_ROW_COLUMNS, WITNESS_COLUMNS, CircuitLayout
from chips.merkle_path_chip import MerklePathChip
from chips.poseidon_chip import PoseidonChip
from chips.selector_chip import SelectorChip, select

__all__ = [
    "Chip",
    "ColumnKey",
    "Gate",
    "Table",
    "CircuitLayout",
    "WITNESS_COLUMNS",
    "FIXED_COLUMNS",
    "NEXT_ROW_COLUMNS",
    "PoseidonChip",
    "SelectorChip",
    "select",
    "MerklePathChip",
]
