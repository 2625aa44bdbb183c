"""Poseidon permutation over the Goldilocks field.

Native (out-of-circuit) reference for the two-to-one hash used by the
membership circuit. The in-circuit gates in chips/poseidon_chip.py encode
exactly these rounds, so any value computed here can be reproduced by a
satisfying trace.

Parameters
----------
- width t = 3 (rate 2, capacity 1); inputs [a, b, 0], output state[0]
- S-box x^7, the smallest exponent coprime to p - 1
- R_F = 8 full rounds split 4 / 4 around R_P = 22 partial rounds
- Cauchy MDS matrix M[i][j] = 1 / (i + t + j)
- round constants: BLAKE2b of a domain tag, round and lane, reduced mod p
"""

import hashlib
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Sequence, Tuple

from primitives.field import GOLDILOCKS_PRIME

_P = GOLDILOCKS_PRIME

RC_DOMAIN_TAG = b"merkle-membership/poseidon/goldilocks/t3"


@dataclass(frozen=True)
class PoseidonParams:
    t: int  # state width
    R_F: int  # number of full rounds
    R_P: int  # number of partial rounds
    alpha: int  # S-box exponent
    mds: Tuple[Tuple[int, ...], ...]  # t x t
    rc: Tuple[Tuple[int, ...], ...]  # (R_F + R_P) x t

    def validate(self) -> None:
        if self.t < 2:
            raise ValueError("t must be >= 2")
        if self.R_F % 2 != 0:
            raise ValueError("R_F must be even (split half-before/after partial rounds)")
        if (_P - 1) % self.alpha == 0:
            raise ValueError(f"alpha={self.alpha} is not a permutation of GF(p)")
        if len(self.mds) != self.t or any(len(row) != self.t for row in self.mds):
            raise ValueError("mds must be t x t")
        if len(self.rc) != self.n_rounds or any(len(row) != self.t for row in self.rc):
            raise ValueError(f"rc must be (R_F+R_P) x t = {self.n_rounds} x {self.t}")

    @property
    def n_rounds(self) -> int:
        return self.R_F + self.R_P

    def is_full_round(self, r: int) -> bool:
        half = self.R_F // 2
        return r < half or r >= half + self.R_P


def _round_constant(tag: bytes, r: int, i: int) -> int:
    h = hashlib.blake2b(tag + r.to_bytes(4, "little") + i.to_bytes(4, "little"), digest_size=16)
    return int.from_bytes(h.digest(), "little") % _P


def _cauchy_mds(t: int) -> Tuple[Tuple[int, ...], ...]:
    # x_i = i, y_j = t + j; all x_i + y_j distinct and non-zero
    return tuple(
        tuple(pow(i + t + j, _P - 2, _P) for j in range(t))
        for i in range(t)
    )


@lru_cache(maxsize=None)
def generate_params(t: int = 3, R_F: int = 8, R_P: int = 22, alpha: int = 7,
                    tag: bytes = RC_DOMAIN_TAG) -> PoseidonParams:
    """Deterministically derive a parameter set."""
    params = PoseidonParams(
        t=t,
        R_F=R_F,
        R_P=R_P,
        alpha=alpha,
        mds=_cauchy_mds(t),
        rc=tuple(
            tuple(_round_constant(tag, r, i) for i in range(t))
            for r in range(R_F + R_P)
        ),
    )
    params.validate()
    return params


DEFAULT_PARAMS = generate_params()


# ---------------------------
# Permutation
# ---------------------------

def apply_round(state: Sequence[int], r: int, params: PoseidonParams = DEFAULT_PARAMS) -> List[int]:
    """One round: add constants, S-box (all lanes or lane 0), MDS mix."""
    x = [(int(s) + c) % _P for s, c in zip(state, params.rc[r])]
    if params.is_full_round(r):
        sbox = [pow(v, params.alpha, _P) for v in x]
    else:
        sbox = [pow(x[0], params.alpha, _P)] + x[1:]
    return [
        sum(m * s for m, s in zip(row, sbox)) % _P
        for row in params.mds
    ]


def permutation_trace(state: Sequence[int], params: PoseidonParams = DEFAULT_PARAMS) -> List[List[int]]:
    """Return the state before every round followed by the final state.

    The result has n_rounds + 1 entries; entry r is what the circuit holds on
    the r-th row of a hash block.
    """
    if len(state) != params.t:
        raise ValueError(f"state must have {params.t} elements, got {len(state)}")
    states = [[int(s) % _P for s in state]]
    for r in range(params.n_rounds):
        states.append(apply_round(states[-1], r, params))
    return states


def permute(state: Sequence[int], params: PoseidonParams = DEFAULT_PARAMS) -> List[int]:
    return permutation_trace(state, params)[-1]


def hash_two(a: int, b: int, params: PoseidonParams = DEFAULT_PARAMS) -> int:
    """Two-to-one compression: Perm([a, b, 0, ...])[0]."""
    return permute([a, b] + [0] * (params.t - 2), params)[0]


# ---------------------------
# Merkle helpers
# ---------------------------

def compute_root(leaf: int, path_elements: Sequence[int], path_bits: Sequence[int],
                 params: PoseidonParams = DEFAULT_PARAMS) -> int:
    """Hash from leaf to root; bit 0 keeps the running value on the left."""
    running = int(leaf) % _P
    for sibling, bit in zip(path_elements, path_bits):
        if int(bit) == 0:
            running = hash_two(running, sibling, params)
        else:
            running = hash_two(sibling, running, params)
    return running


def tree_levels(leaves: Sequence[int], params: PoseidonParams = DEFAULT_PARAMS) -> List[List[int]]:
    """Every level of a binary tree, leaves first and the root level last."""
    n = len(leaves)
    if n == 0 or n & (n - 1):
        raise ValueError(f"number of leaves must be a power of two, got {n}")
    levels = [[int(v) % _P for v in leaves]]
    while len(levels[-1]) > 1:
        prev = levels[-1]
        levels.append([hash_two(prev[i], prev[i + 1], params) for i in range(0, len(prev), 2)])
    return levels


def merkle_root(leaves: Sequence[int], params: PoseidonParams = DEFAULT_PARAMS) -> int:
    return tree_levels(leaves, params)[-1][0]
