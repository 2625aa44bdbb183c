"""Tests for proof serialization and parsing."""

import struct

import pytest

from primitives.field import GOLDILOCKS_PRIME
from primitives.poseidon import merkle_root
from protocol.errors import ParameterMismatch, ProofFormatError
from protocol.proof import PROOF_MAGIC, from_bytes, proof_size, to_bytes
from protocol.prover import prove
from witness import MembershipWitness


@pytest.fixture(scope="module")
def depth1_proof(keys_for):
    pk, vk = keys_for(1)
    witness = MembershipWitness.from_leaves([3, 4], 1)
    return vk, prove(pk, witness, merkle_root([3, 4]))


def _words(data: bytes) -> list:
    return list(struct.unpack(f"<{len(data) // 8}Q", data))


def _pack(words: list) -> bytes:
    return struct.pack(f"<{len(words)}Q", *words)


class TestProofFormat:
    """Binary layout."""

    def test_size_is_fixed_by_shape(self, depth1_proof) -> None:
        vk, data = depth1_proof
        assert len(data) == proof_size(vk.stark_info) * 8

    def test_header(self, depth1_proof) -> None:
        vk, data = depth1_proof
        words = _words(data)
        assert words[:4] == [PROOF_MAGIC, 1, 0, vk.stark_info.n_bits]

    def test_parse_then_serialize_is_identity(self, depth1_proof) -> None:
        vk, data = depth1_proof
        proof = from_bytes(data, vk.stark_info)
        assert proof.depth == 1
        assert len(proof.queries) == vk.stark_info.stark_struct.n_queries
        assert to_bytes(proof) == data


class TestProofParsing:
    """Malformed input is rejected with a typed error."""

    def test_truncated(self, depth1_proof) -> None:
        vk, data = depth1_proof
        with pytest.raises(ProofFormatError):
            from_bytes(data[:-8], vk.stark_info)

    def test_trailing_bytes(self, depth1_proof) -> None:
        vk, data = depth1_proof
        with pytest.raises(ProofFormatError):
            from_bytes(data + b"\x00", vk.stark_info)

    def test_bad_magic(self, depth1_proof) -> None:
        vk, data = depth1_proof
        words = _words(data)
        words[0] ^= 1
        with pytest.raises(ProofFormatError):
            from_bytes(_pack(words), vk.stark_info)

    def test_non_canonical_element(self, depth1_proof) -> None:
        vk, data = depth1_proof
        words = _words(data)
        words[10] = GOLDILOCKS_PRIME
        with pytest.raises(ProofFormatError):
            from_bytes(_pack(words), vk.stark_info)

    def test_foreign_depth_header(self, depth1_proof) -> None:
        vk, data = depth1_proof
        words = _words(data)
        words[1] = 2
        with pytest.raises(ParameterMismatch):
            from_bytes(_pack(words), vk.stark_info)

    def test_proof_for_other_depth_is_rejected(self, depth1_proof, keys_for) -> None:
        _, data = depth1_proof
        _, vk0 = keys_for(0)
        with pytest.raises((ParameterMismatch, ProofFormatError)):
            from_bytes(data, vk0.stark_info)
