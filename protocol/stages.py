"""STARK prover stage orchestration."""

import logging
from typing import Dict, List, Sequence

import numpy as np

from chips.base import ColumnKey
from primitives.field import FF, GOLDILOCKS_PRIME, get_omega, to_ints
from primitives.merkle_tree import MerkleRoot, MerkleTree
from primitives.ntt import NTT
from primitives.polynomial import coset_to_coefficients, evaluate_at, to_coefficients
from protocol.stark_info import EvMap, StarkInfo

logger = logging.getLogger(__name__)

# --- Type Aliases ---
StageIndex = int


def stack_columns(columns: Dict[ColumnKey, FF], keys: Sequence[ColumnKey]) -> FF:
    """Arrange named columns as an (n_rows, n_cols) matrix in keys order."""
    n_rows = len(columns[keys[0]])
    matrix = FF.Zeros((n_rows, len(keys)))
    for i, key in enumerate(keys):
        matrix[:, i] = columns[key]
    return matrix


def unstack_columns(matrix: FF, keys: Sequence[ColumnKey]) -> Dict[ColumnKey, FF]:
    """Inverse of stack_columns."""
    return {key: matrix[:, i] for i, key in enumerate(keys)}


class Starks:
    """STARK proof orchestrator managing polynomial operations and commitments."""

    def __init__(self, stark_info: StarkInfo):
        self.stark_info = stark_info
        self.stage_trees: Dict[StageIndex, MerkleTree] = {}

    # --- Low-Degree Extension ---

    def interpolate(self, matrix: FF) -> FF:
        """Trace-domain values (N, n_cols) -> coefficients (N, n_cols)."""
        return to_coefficients(matrix)

    def extend_coefficients(self, coeffs: FF) -> FF:
        """Coefficients (n <= N_ext rows) -> values on the extended coset."""
        n_ext = 1 << self.stark_info.n_bits_ext
        padded = FF.Zeros((n_ext,) + coeffs.shape[1:])
        padded[:coeffs.shape[0]] = coeffs
        return NTT(n_ext).coset_ntt(padded)

    def merkelize(self, matrix_ext: FF) -> MerkleTree:
        """Commit to an (N_ext, n_cols) matrix, one leaf per row."""
        n_ext, n_cols = matrix_ext.shape
        tree = MerkleTree(arity=self.stark_info.stark_struct.merkle_tree_arity)
        tree.merkelize(to_ints(matrix_ext.reshape(-1)), n_ext, n_cols)
        return tree

    # --- Constant Polynomial Tree ---

    def build_const_tree(self, const_ext: FF) -> MerkleTree:
        """Build Merkle tree for constant polynomials."""
        return self.merkelize(const_ext)

    # --- Stage Commitment ---

    def commit_stage(self, step: StageIndex, matrix_ext: FF) -> MerkleRoot:
        """Build the Merkle tree of an already extended stage and return its root."""
        tree = self.merkelize(matrix_ext)
        self.stage_trees[step] = tree
        logger.debug("committed stage %d (%d columns)", step, matrix_ext.shape[1])
        return tree.get_root()

    def get_stage_tree(self, step: StageIndex) -> MerkleTree:
        return self.stage_trees[step]

    # --- Quotient ---

    def split_quotient(self, q_ext: FF) -> FF:
        """Interpolate Q on the extended coset and cut it into q_deg pieces.

        Q(x) = sum_i x^(i*N) * Q_i(x), each Q_i of degree < N.

        Returns:
            Coefficient matrix of shape (N, q_deg), column i holding Q_i

        Raises:
            ValueError: If Q has degree >= q_deg * N, which happens only when
                the constraint polynomial is not divisible by Z_H
        """
        n = 1 << self.stark_info.n_bits
        q_deg = self.stark_info.q_deg
        coeffs = coset_to_coefficients(q_ext)
        if np.any(coeffs[q_deg * n:] != 0):
            raise ValueError("quotient degree exceeds bound: constraints do not vanish on the trace domain")
        return coeffs[:q_deg * n].reshape(q_deg, n).T

    # --- Evaluations ---

    def compute_evals(
        self,
        xi: int,
        trace_coeffs: FF,
        const_coeffs: FF,
        q_coeffs: FF,
    ) -> List[int]:
        """Evaluate every ev_map entry, in ev_map order."""
        si = self.stark_info
        w = get_omega(si.n_bits)
        points = {prime: xi * pow(w, prime, GOLDILOCKS_PRIME) % GOLDILOCKS_PRIME
                  for prime in {e.prime for e in si.ev_map}}

        cache: Dict[tuple, FF] = {}

        def evaluated(kind: EvMap.Type, prime: int) -> FF:
            if (kind, prime) not in cache:
                source = {
                    EvMap.Type.cm: trace_coeffs,
                    EvMap.Type.const_: const_coeffs,
                    EvMap.Type.q: q_coeffs,
                }[kind]
                cache[(kind, prime)] = evaluate_at(source, points[prime])
            return cache[(kind, prime)]

        evals = []
        for entry in si.ev_map:
            col = column_index(si, entry)
            evals.append(int(evaluated(entry.type, entry.prime)[col]))
        return evals


def column_index(stark_info: StarkInfo, entry: EvMap) -> int:
    """Position of an ev_map entry's column within its committed matrix."""
    if entry.type == EvMap.Type.cm:
        return stark_info.cm_pols_map.index((entry.name, entry.index))
    if entry.type == EvMap.Type.const_:
        return stark_info.const_pols_map.index((entry.name, entry.index))
    return entry.index
