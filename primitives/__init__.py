"""Primitives - Low-level cryptographic and mathematical building blocks."""

from primitives.field import (
    FF,
    GOLDILOCKS_PRIME,
    SHIFT,
    SHIFT_INV,
    W,
    batch_inverse,
    get_omega,
    get_omega_inv,
)
from primitives.merkle_tree import (
    LeafData,
    MerkleRoot,
    MerkleTree,
    QueryProof,
)
from primitives.ntt import NTT
from primitives.poseidon import (
    DEFAULT_PARAMS,
    PoseidonParams,
    compute_root,
    hash_two,
    merkle_root,
)
from primitives.sponge import HASH_SIZE
from primitives.transcript import Transcript

__all__ = [
    # Field
    "FF",
    "GOLDILOCKS_PRIME",
    "W",
    "SHIFT",
    "SHIFT_INV",
    "batch_inverse",
    "get_omega",
    "get_omega_inv",
    # NTT
    "NTT",
    # Merkle Tree
    "MerkleTree",
    "MerkleRoot",
    "QueryProof",
    "LeafData",
    "HASH_SIZE",
    # Transcript
    "Transcript",
    # Poseidon
    "PoseidonParams",
    "DEFAULT_PARAMS",
    "hash_two",
    "compute_root",
    "merkle_root",
]
