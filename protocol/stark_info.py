"""STARK configuration for one circuit shape."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from chips.base import ColumnKey
from chips.layout import FIXED_COLUMNS, NEXT_ROW_COLUMNS, WITNESS_COLUMNS, CircuitLayout


# --- Data Structures ---
@dataclass(frozen=True)
class FriFoldStep:
    """FRI recursive folding layer configuration."""
    domain_bits: int


@dataclass(frozen=True)
class StarkStruct:
    """Tunable protocol parameters.

    Attributes:
        blowup_bits: log2(N_ext / N)
        n_queries: FRI query repetitions
        pow_bits: Proof-of-work bits ground before query derivation
        merkle_tree_arity: Children per Merkle node (2, 3 or 4)
        transcript_arity: Sponge arity of the Fiat-Shamir transcript
        final_degree_bits: log2 of the degree bound of the final FRI polynomial
        blinding_rows: Random rows appended to the trace; None means
            n_queries + 2, one per point at which the trace is ever opened
    """
    blowup_bits: int = 3
    n_queries: int = 32
    pow_bits: int = 8
    merkle_tree_arity: int = 4
    transcript_arity: int = 4
    final_degree_bits: int = 2
    blinding_rows: Optional[int] = None

    def __post_init__(self) -> None:
        if self.blowup_bits < 1:
            raise ValueError(f"blowup_bits must be >= 1, got {self.blowup_bits}")
        if self.n_queries < 1:
            raise ValueError(f"n_queries must be >= 1, got {self.n_queries}")
        if not 0 <= self.pow_bits <= 32:
            raise ValueError(f"pow_bits must be in [0, 32], got {self.pow_bits}")
        if self.merkle_tree_arity not in (2, 3, 4):
            raise ValueError(f"merkle_tree_arity must be 2, 3, or 4, got {self.merkle_tree_arity}")

    @property
    def n_blinding_rows(self) -> int:
        return self.n_queries + 2 if self.blinding_rows is None else self.blinding_rows


@dataclass(frozen=True)
class EvMap:
    """Maps an evaluation to its polynomial source.

    Attributes:
        type: Source type (cm=committed trace, const_=fixed, q=quotient piece)
        name: Column name
        index: Column index
        prime: Opening point offset, the evaluation is at xi * w^prime
    """

    class Type(Enum):
        """Evaluation source type."""
        cm = 0          # Committed polynomial
        const_ = 1      # Constant polynomial
        q = 2           # Quotient piece

    type: Type
    name: str
    index: int
    prime: int = 0

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.name, self.index, self.prime)


# --- StarkInfo ---
@dataclass(frozen=True)
class StarkInfo:
    """Everything prover and verifier must agree on for one depth."""
    name: str
    layout: CircuitLayout
    stark_struct: StarkStruct
    q_deg: int
    cm_pols_map: tuple[ColumnKey, ...] = tuple(WITNESS_COLUMNS)
    const_pols_map: tuple[ColumnKey, ...] = tuple(FIXED_COLUMNS)
    publics: tuple[str, ...] = ("root",)
    ev_map: tuple[EvMap, ...] = field(default=())
    fri_fold_steps: tuple[FriFoldStep, ...] = field(default=())

    @classmethod
    def build(cls, name: str, layout: CircuitLayout, stark_struct: StarkStruct,
              constraint_degree: int, publics: tuple[str, ...]) -> "StarkInfo":
        """Derive the opening map and FRI schedule from the layout."""
        # C(x) has degree <= deg * (N - 1), so Q = C / Z_H needs deg - 1 pieces
        q_deg = max(constraint_degree - 1, 1)
        if (1 << stark_struct.blowup_bits) < constraint_degree:
            raise ValueError(
                f"blowup 2^{stark_struct.blowup_bits} too small for constraint degree {constraint_degree}"
            )

        ev_map = [EvMap(EvMap.Type.cm, n, i, 0) for n, i in WITNESS_COLUMNS]
        ev_map += [EvMap(EvMap.Type.cm, n, i, 1) for n, i in NEXT_ROW_COLUMNS]
        ev_map += [EvMap(EvMap.Type.const_, n, i, 0) for n, i in FIXED_COLUMNS]
        ev_map += [EvMap(EvMap.Type.q, "Q", i, 0) for i in range(q_deg)]

        n_bits_ext = layout.n_bits + stark_struct.blowup_bits
        final_bits = stark_struct.final_degree_bits + stark_struct.blowup_bits
        steps = [FriFoldStep(n_bits_ext)]
        while steps[-1].domain_bits > final_bits:
            steps.append(FriFoldStep(steps[-1].domain_bits - 1))

        return cls(
            name=name,
            layout=layout,
            stark_struct=stark_struct,
            q_deg=q_deg,
            publics=tuple(publics),
            ev_map=tuple(ev_map),
            fri_fold_steps=tuple(steps),
        )

    # --- Derived sizes ---

    @property
    def n_bits(self) -> int:
        return self.layout.n_bits

    @property
    def n_bits_ext(self) -> int:
        return self.layout.n_bits + self.stark_struct.blowup_bits

    @property
    def extend(self) -> int:
        return 1 << self.stark_struct.blowup_bits

    @property
    def n_constants(self) -> int:
        return len(self.const_pols_map)

    @property
    def n_cm(self) -> int:
        return len(self.cm_pols_map)

    @property
    def n_fri_rounds(self) -> int:
        return len(self.fri_fold_steps) - 1

    @property
    def final_pol_size(self) -> int:
        return 1 << self.fri_fold_steps[-1].domain_bits

    def descriptor(self) -> list[int]:
        """Shape words absorbed into the transcript before any commitment."""
        ss = self.stark_struct
        return [
            self.layout.depth,
            int(self.layout.public_leaf),
            self.n_bits,
            ss.blowup_bits,
            ss.n_queries,
            ss.pow_bits,
            ss.merkle_tree_arity,
            ss.final_degree_bits,
        ]
