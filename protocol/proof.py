"""STARK proof data structures and serialization.

Binary layout: a flat sequence of little-endian u64 words.

    header        PROOF_MAGIC, depth, public_leaf, n_bits
    roots         trace root, quotient root             (HASH_SIZE words each)
    evals         one word per ev_map entry
    fri roots     one root per FRI round
    final_pol     2^final_domain_bits words
    nonce
    per query     const leaf + path, trace leaf + path, quotient leaf + path,
                  then leaf + path for every FRI round

All sizes follow from the StarkInfo, so the verifier parses with an exact
expected length and rejects anything else.
"""

import struct
from dataclasses import dataclass, field
from typing import List

from primitives.field import is_canonical
from primitives.merkle_tree import MerkleRoot, MerkleTree, QueryProof
from primitives.sponge import HASH_SIZE
from protocol.errors import ParameterMismatch, ProofFormatError
from protocol.stark_info import StarkInfo

PROOF_MAGIC = 0x4D4B4C4D454D4201  # "MKLMEMB" + version 1


# --- Data Classes ---

@dataclass
class QueryOpenings:
    """Openings of the three committed matrices at one query index."""
    const: QueryProof = field(default_factory=QueryProof)
    trace: QueryProof = field(default_factory=QueryProof)
    quotient: QueryProof = field(default_factory=QueryProof)
    fri: List[QueryProof] = field(default_factory=list)


@dataclass
class STARKProof:
    """Complete proof for one membership statement."""
    depth: int = 0
    public_leaf: bool = False
    n_bits: int = 0
    roots: List[MerkleRoot] = field(default_factory=list)
    evals: List[int] = field(default_factory=list)
    fri_roots: List[MerkleRoot] = field(default_factory=list)
    final_pol: List[int] = field(default_factory=list)
    nonce: int = 0
    queries: List[QueryOpenings] = field(default_factory=list)


# --- Shape ---

def _tree_levels(stark_info: StarkInfo, height_bits: int) -> int:
    return MerkleTree.proof_length(1 << height_bits, stark_info.stark_struct.merkle_tree_arity)


def _siblings_per_level(stark_info: StarkInfo) -> int:
    return (stark_info.stark_struct.merkle_tree_arity - 1) * HASH_SIZE


def proof_size(stark_info: StarkInfo) -> int:
    """Exact number of u64 words in a serialized proof."""
    ss = stark_info.stark_struct
    n_sib = _siblings_per_level(stark_info)
    n_words = 4 + 2 * HASH_SIZE + len(stark_info.ev_map)
    n_words += stark_info.n_fri_rounds * HASH_SIZE + stark_info.final_pol_size + 1

    stage_levels = _tree_levels(stark_info, stark_info.n_bits_ext)
    per_query = (stark_info.n_constants + stark_info.n_cm + stark_info.q_deg) + 3 * stage_levels * n_sib
    for step in stark_info.fri_fold_steps[1:]:
        per_query += 2 + _tree_levels(stark_info, step.domain_bits) * n_sib
    return n_words + ss.n_queries * per_query


# --- Serialization ---

def to_bytes(proof: STARKProof) -> bytes:
    """Serialize a proof to its binary form."""
    values: List[int] = [PROOF_MAGIC, proof.depth, int(proof.public_leaf), proof.n_bits]

    for root in proof.roots:
        values.extend(root[:HASH_SIZE])
    values.extend(proof.evals)
    for root in proof.fri_roots:
        values.extend(root[:HASH_SIZE])
    values.extend(proof.final_pol)
    values.append(proof.nonce)

    for q in proof.queries:
        for qp in [q.const, q.trace, q.quotient] + q.fri:
            values.extend(qp.v)
            for level in qp.mp:
                values.extend(level)

    return struct.pack(f'<{len(values)}Q', *values)


class _Reader:
    """Sequential word reader that rejects non-canonical field elements."""

    def __init__(self, values: List[int]) -> None:
        self.values = values
        self.pos = 0

    def take(self, n: int) -> List[int]:
        out = self.values[self.pos:self.pos + n]
        if len(out) != n:
            raise ProofFormatError("proof truncated", {"position": self.pos})
        for v in out:
            if not is_canonical(v):
                raise ProofFormatError("non-canonical field element", {"position": self.pos})
        self.pos += n
        return out

    def query_proof(self, width: int, levels: int, n_sib: int) -> QueryProof:
        v = self.take(width)
        return QueryProof(v=v, mp=[self.take(n_sib) for _ in range(levels)])


def from_bytes(data: bytes, stark_info: StarkInfo) -> STARKProof:
    """Deserialize a proof, checking it matches the shape stark_info expects.

    Raises:
        ParameterMismatch: If the header was produced for another depth or mode
        ProofFormatError: On any length or encoding error
    """
    expected = proof_size(stark_info)
    if len(data) != expected * 8:
        raise ProofFormatError("unexpected proof length", {"expected": expected * 8, "actual": len(data)})

    values = list(struct.unpack(f'<{expected}Q', data))
    if values[0] != PROOF_MAGIC:
        raise ProofFormatError("bad proof magic")
    depth, public_leaf, n_bits = values[1:4]
    layout = stark_info.layout
    if (depth, public_leaf, n_bits) != (layout.depth, int(layout.public_leaf), stark_info.n_bits):
        raise ParameterMismatch(
            "proof was produced for a different circuit",
            {"depth": depth, "expected_depth": layout.depth},
        )

    r = _Reader(values)
    r.pos = 4
    n_sib = _siblings_per_level(stark_info)

    proof = STARKProof(depth=depth, public_leaf=bool(public_leaf), n_bits=n_bits)
    proof.roots = [r.take(HASH_SIZE) for _ in range(2)]
    proof.evals = r.take(len(stark_info.ev_map))
    proof.fri_roots = [r.take(HASH_SIZE) for _ in range(stark_info.n_fri_rounds)]
    proof.final_pol = r.take(stark_info.final_pol_size)
    proof.nonce = r.take(1)[0]

    stage_levels = _tree_levels(stark_info, stark_info.n_bits_ext)
    for _ in range(stark_info.stark_struct.n_queries):
        q = QueryOpenings(
            const=r.query_proof(stark_info.n_constants, stage_levels, n_sib),
            trace=r.query_proof(stark_info.n_cm, stage_levels, n_sib),
            quotient=r.query_proof(stark_info.q_deg, stage_levels, n_sib),
        )
        for step in stark_info.fri_fold_steps[1:]:
            q.fri.append(r.query_proof(2, _tree_levels(stark_info, step.domain_bits), n_sib))
        proof.queries.append(q)

    return proof
