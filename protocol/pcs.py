"""FRI Polynomial Commitment Scheme."""

import logging
from dataclasses import dataclass, field
from typing import List

from primitives.field import FF, to_ints
from primitives.merkle_tree import MerkleRoot, MerkleTree, QueryProof
from primitives.sponge import grinding, linear_hash
from primitives.transcript import Transcript
from protocol.fri import FRI

logger = logging.getLogger(__name__)

# --- Type Aliases ---

EvalPoly = FF  # Polynomial in evaluation form
Nonce = int
QueryIndex = int


# --- Configuration ---

@dataclass
class FriPcsConfig:
    """FRI PCS parameters."""
    n_bits_ext: int
    fri_round_log_sizes: List[int]
    n_queries: int
    merkle_arity: int = 4
    pow_bits: int = 8
    transcript_arity: int = 4


@dataclass
class FriProof:
    """FRI proof: roots, final polynomial, grinding nonce, and query proofs."""
    fri_roots: List[MerkleRoot] = field(default_factory=list)
    final_pol: List[int] = field(default_factory=list)
    nonce: Nonce = 0
    query_proofs: List[List[QueryProof]] = field(default_factory=list)
    query_indices: List[QueryIndex] = field(default_factory=list)


def derive_query_indices(config: FriPcsConfig, challenge: List[int], nonce: Nonce) -> List[QueryIndex]:
    """Derive pseudorandom query indices from grinding output."""
    query_transcript = Transcript(arity=config.transcript_arity)
    query_transcript.put(challenge)
    query_transcript.put([nonce])
    return query_transcript.get_permutations(config.n_queries, config.fri_round_log_sizes[0])


# --- FRI PCS ---

class FriPcs:
    """FRI Polynomial Commitment Scheme."""

    def __init__(self, config: FriPcsConfig):
        self.config = config
        self.fri_trees = [
            MerkleTree(arity=config.merkle_arity)
            for _ in range(len(config.fri_round_log_sizes) - 1)
        ]

    def prove(self, polynomial: EvalPoly, transcript: Transcript) -> FriProof:
        """Generate FRI proof: commit-fold, finalize, grind, query."""
        cfg = self.config
        n_fri_rounds = len(cfg.fri_round_log_sizes) - 1

        # --- Commit-Fold Loop ---
        # Each iteration: merkelize -> commit root -> derive challenge -> fold
        fri_roots: List[MerkleRoot] = []
        current_pol = polynomial

        for fri_round in range(n_fri_rounds):
            prev_bits, curr_bits = cfg.fri_round_log_sizes[fri_round], cfg.fri_round_log_sizes[fri_round + 1]

            root = FRI.merkelize(current_pol, self.fri_trees[fri_round], prev_bits, curr_bits)
            fri_roots.append(list(root))
            transcript.put(root)

            challenge = transcript.get_field()
            current_pol = FRI.fold(fri_round, current_pol, challenge, prev_bits, curr_bits)

        # --- Finalize ---
        final_pol = to_ints(current_pol)
        transcript.put(linear_hash(final_pol))

        # --- Grinding (proof-of-work) ---
        grinding_challenge = transcript.get_state(3)
        nonce = grinding(grinding_challenge, cfg.pow_bits)

        # --- Query Phase ---
        query_indices = derive_query_indices(cfg, grinding_challenge, nonce)
        query_proofs = self._generate_query_proofs(query_indices)
        logger.debug("FRI: %d rounds, final size %d, nonce %d", n_fri_rounds, len(final_pol), nonce)

        return FriProof(
            fri_roots=fri_roots,
            final_pol=final_pol,
            nonce=nonce,
            query_proofs=query_proofs,
            query_indices=query_indices,
        )

    def _generate_query_proofs(self, query_indices: List[QueryIndex]) -> List[List[QueryProof]]:
        """Generate Merkle proofs for all queries at each FRI layer."""
        cfg = self.config
        query_proofs: List[List[QueryProof]] = []

        for fri_round in range(len(cfg.fri_round_log_sizes) - 1):
            domain_bits = cfg.fri_round_log_sizes[fri_round + 1]
            step_proofs = [
                self.fri_trees[fri_round].get_query_proof(idx % (1 << domain_bits))
                for idx in query_indices
            ]
            query_proofs.append(step_proofs)

        return query_proofs
