"""FRI folding protocol.

Binary folding over base-field evaluations. Layer j lives on the coset
SHIFT^(2^j) * <w_j>. A leaf of the layer-j tree at index g holds the pair
(f(x_g), f(-x_g)) = (pol[g], pol[g + n/2]), and folding with challenge beta
maps it to

    f_even(x_g^2) + beta * f_odd(x_g^2)

at index g of layer j + 1, where f(x) = f_even(x^2) + x * f_odd(x^2).
"""

from typing import List

from primitives.field import FF, GOLDILOCKS_PRIME, SHIFT, batch_inverse, get_omega, powers, to_ints
from primitives.merkle_tree import MerkleRoot, MerkleTree

# --- Type Aliases ---

EvalPoly = FF  # Polynomial in evaluation form

_TWO_INV = FF(2) ** -1


def _layer_shift(step: int) -> int:
    """Coset shift of the domain at fold step."""
    return int(SHIFT ** (1 << step))


def _fold_values(lo, hi, x_inv, challenge: FF):
    even = (lo + hi) * _TWO_INV
    odd = (lo - hi) * _TWO_INV * x_inv
    return even + challenge * odd


# --- FRI Protocol ---

class FRI:
    """FRI protocol: folding, commitment, and verification."""

    @staticmethod
    def fold(step: int, pol: EvalPoly, challenge: int, prev_bits: int, current_bits: int) -> EvalPoly:
        """Fold polynomial from 2^prev_bits to 2^current_bits points using challenge."""
        assert prev_bits - current_bits == 1, "only binary folding is supported"
        half = 1 << current_bits

        x = powers(get_omega(prev_bits), half, start=_layer_shift(step))
        x_inv = batch_inverse(x)
        return _fold_values(pol[:half], pol[half:], x_inv, FF(challenge))

    @staticmethod
    def merkelize(pol: EvalPoly, tree: MerkleTree, current_bits: int, next_bits: int) -> MerkleRoot:
        """Commit to FRI layer via Merkle tree, pairing g with g + n/2 in each leaf."""
        height = 1 << next_bits
        width = 1 << (current_bits - next_bits)
        values = to_ints(pol)
        leaves: List[int] = []
        for g in range(height):
            leaves.extend(values[g + i * height] for i in range(width))
        tree.merkelize(leaves, height, width)
        return tree.get_root()

    @staticmethod
    def verify_fold(
        step: int,
        prev_bits: int,
        challenge: int,
        idx: int,
        siblings: List[int],
    ) -> int:
        """Recompute the folded value at idx (index in the next layer) from a leaf."""
        x = _layer_shift(step) * pow(get_omega(prev_bits), idx, GOLDILOCKS_PRIME) % GOLDILOCKS_PRIME
        x_inv = FF(x) ** -1
        return int(_fold_values(FF(siblings[0]), FF(siblings[1]), x_inv, FF(challenge)))

    @staticmethod
    def leaf_position(query_idx: int, current_bits: int) -> tuple[int, int]:
        """Map an index of layer domain 2^current_bits to (leaf index, slot)."""
        half = 1 << (current_bits - 1)
        return query_idx % half, query_idx // half
