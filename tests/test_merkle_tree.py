"""Tests for the row-commitment Merkle tree and the sponge helpers."""

import pytest

from primitives.merkle_tree import MerkleTree
from primitives.sponge import HASH_SIZE, grinding, hash_seq, linear_hash, verify_grinding


def _rows(height: int, width: int) -> list:
    return [i * 31 + 7 for i in range(height * width)]


class TestMerkleTree:
    """Commitment and opening of row-major leaf data."""

    @pytest.mark.parametrize("arity", [2, 3, 4])
    @pytest.mark.parametrize("height", [1, 5, 16, 64])
    def test_every_leaf_opens(self, arity: int, height: int) -> None:
        """Every query proof verifies against the root."""
        width = 3
        tree = MerkleTree(arity=arity)
        tree.merkelize(_rows(height, width), height, width)
        root = tree.get_root()

        for idx in range(height):
            qp = tree.get_query_proof(idx)
            assert len(qp.v) == width
            assert len(qp.mp) == MerkleTree.proof_length(height, arity)
            assert tree.verify_group_proof(root, qp.mp, idx, qp.v)

    def test_single_leaf_root_is_leaf_hash(self) -> None:
        tree = MerkleTree(arity=4)
        tree.merkelize([1, 2], 1, 2)
        assert tree.get_root() == linear_hash([1, 2])

    def test_tampered_value_fails(self) -> None:
        tree = MerkleTree(arity=4)
        tree.merkelize(_rows(16, 2), 16, 2)
        qp = tree.get_query_proof(5)
        qp.v[1] += 1
        assert not tree.verify_group_proof(tree.get_root(), qp.mp, 5, qp.v)

    def test_wrong_index_fails(self) -> None:
        tree = MerkleTree(arity=2)
        tree.merkelize(_rows(8, 2), 8, 2)
        qp = tree.get_query_proof(3)
        assert not tree.verify_group_proof(tree.get_root(), qp.mp, 2, qp.v)

    def test_tampered_sibling_fails(self) -> None:
        tree = MerkleTree(arity=4)
        tree.merkelize(_rows(16, 2), 16, 2)
        qp = tree.get_query_proof(0)
        qp.mp[0][0] ^= 1
        assert not tree.verify_group_proof(tree.get_root(), qp.mp, 0, qp.v)

    def test_short_path_fails(self) -> None:
        """A path missing its top level cannot reach the root."""
        tree = MerkleTree(arity=2)
        tree.merkelize(_rows(8, 1), 8, 1)
        qp = tree.get_query_proof(6)
        assert not tree.verify_group_proof(tree.get_root(), qp.mp[:-1], 6, qp.v)

    def test_rejects_bad_arity(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree(arity=5)

    def test_rejects_size_mismatch(self) -> None:
        with pytest.raises(ValueError):
            MerkleTree().merkelize([1, 2, 3], 2, 2)

    def test_query_out_of_range(self) -> None:
        tree = MerkleTree()
        tree.merkelize(_rows(4, 1), 4, 1)
        with pytest.raises(ValueError):
            tree.get_query_proof(4)


class TestSponge:
    """Hash and grinding helpers."""

    def test_digest_size(self) -> None:
        assert len(linear_hash([1, 2, 3])) == HASH_SIZE
        assert len(hash_seq(list(range(16)))) == HASH_SIZE

    def test_leaf_and_node_hashes_are_separated(self) -> None:
        data = list(range(8))
        assert linear_hash(data) != hash_seq(data)

    @pytest.mark.parametrize("pow_bits", [0, 1, 6])
    def test_grinding_finds_valid_nonce(self, pow_bits: int) -> None:
        challenge = [1, 2, 3]
        nonce = grinding(challenge, pow_bits)
        assert verify_grinding(challenge, nonce, pow_bits)

    def test_grinding_returns_smallest_nonce(self) -> None:
        nonce = grinding([4, 5, 6], 8)
        assert all(not verify_grinding([4, 5, 6], n, 8) for n in range(nonce))

    def test_grinding_rejects_non_canonical_nonce(self) -> None:
        assert not verify_grinding([1, 2, 3], -1, 4)
