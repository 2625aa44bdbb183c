"""STARK proof verification.

The verifier checks that a proof demonstrates knowledge of an execution trace
satisfying the membership circuit, without ever seeing the trace.

Verification consists of several phases:
1. Fiat-Shamir transcript reconstruction - Re-derive all challenges from the commitments
2. Proof-of-work verification - Check the grinding nonce
3. Evaluation check - Verify C(xi) = Z_H(xi) * Q(xi)
4. Merkle verification - Opened rows are consistent with the committed roots
5. FRI verification - The batched polynomial F is close to low degree

All checks are run and every failure is logged before the result is returned.
"""

import logging
from typing import Dict, List, Optional

import numpy as np

from constraints import VerifierConstraintContext
from primitives.field import FF, GOLDILOCKS_PRIME, SHIFT, get_omega
from primitives.merkle_tree import MerkleRoot, MerkleTree, QueryProof
from primitives.polynomial import to_coefficients
from primitives.sponge import linear_hash, verify_grinding
from primitives.transcript import Transcript
from protocol.air_config import zerofier_at
from protocol.data import VerifierData
from protocol.errors import ParameterMismatch, ProofFormatError, VerificationFailure
from protocol.fri import FRI
from protocol.fri_polynomial import compute_fri_polynomial, opened_values_source
from protocol.pcs import FriPcsConfig, derive_query_indices
from protocol.proof import QueryOpenings, STARKProof, from_bytes
from protocol.prover import public_inputs
from protocol.setup_ctx import VerifyingKey
from protocol.stark_info import EvMap, StarkInfo

logger = logging.getLogger(__name__)


# --- Main Entry Point ---

def stark_verify(vk: VerifyingKey, proof: STARKProof, publics: Dict[str, int]) -> bool:
    """Verify a parsed STARK proof.

    Args:
        vk: Verifying key from setup()
        proof: Parsed proof, shape already checked by from_bytes()
        publics: Public inputs by name

    Returns:
        True if proof is valid, False otherwise
    """
    stark_info = vk.stark_info
    ss = stark_info.stark_struct

    # --- Reconstruct Fiat-Shamir transcript ---
    # Same absorption order as the prover, so the same challenges come out
    # exactly when the proof carries the same commitments.
    transcript = Transcript(arity=ss.transcript_arity)
    transcript.put(list(vk.verkey))
    transcript.put(stark_info.descriptor())
    transcript.put([publics[name] for name in stark_info.publics])

    transcript.put(proof.roots[0])
    vc = transcript.get_field()
    transcript.put(proof.roots[1])
    xi = transcript.get_field()
    transcript.put(proof.evals)
    alpha = transcript.get_field()

    fri_challenges: List[int] = []
    for root in proof.fri_roots:
        transcript.put(root)
        fri_challenges.append(transcript.get_field())

    transcript.put(linear_hash(proof.final_pol))
    grinding_challenge = transcript.get_state(3)

    # --- Verify proof-of-work ---
    if not verify_grinding(grinding_challenge, proof.nonce, ss.pow_bits):
        logger.warning("PoW verification failed")
        return False

    # --- Derive FRI query indices ---
    # Fixed only after every commitment is in the transcript.
    fri_config = FriPcsConfig(
        n_bits_ext=stark_info.n_bits_ext,
        fri_round_log_sizes=[step.domain_bits for step in stark_info.fri_fold_steps],
        n_queries=ss.n_queries,
        merkle_arity=ss.merkle_tree_arity,
        pow_bits=ss.pow_bits,
        transcript_arity=ss.transcript_arity,
    )
    fri_queries = derive_query_indices(fri_config, grinding_challenge, proof.nonce)

    # --- Run all verification checks ---
    is_valid = True

    # CHECK 1: Evaluation consistency
    # If every gate holds on the trace domain, C(x) is divisible by Z_H(x), and
    # the committed quotient pieces recombine to C(xi) / Z_H(xi).
    if not _verify_evaluations(vk, proof, publics, vc, xi):
        logger.warning("invalid evaluations at xi")
        is_valid = False

    # CHECK 2: Stage and constant Merkle trees
    # Opened rows must be the committed rows at the queried positions.
    for name, root, attr in (("constant", list(vk.verkey), "const"),
                             ("trace", proof.roots[0], "trace"),
                             ("quotient", proof.roots[1], "quotient")):
        if not _verify_stage_openings(stark_info, root, proof.queries, attr, fri_queries):
            logger.warning("%s Merkle tree verification failed", name)
            is_valid = False

    # CHECK 3: FRI
    # F recomputed from the opened rows must enter the first FRI layer, every
    # fold must be consistent, and the last layer must be of low degree.
    try:
        if not _verify_fri(stark_info, proof, fri_queries, fri_challenges, xi, alpha):
            is_valid = False
    except VerificationFailure as e:
        logger.warning("FRI verification failed: %s", e)
        is_valid = False

    return is_valid


def verify(vk: VerifyingKey, root: int, proof_bytes: bytes, leaf: Optional[int] = None) -> bool:
    """Check a serialized membership proof against a root.

    Never raises on bad input: a malformed, truncated or foreign proof and an
    ill-formed root all yield False.
    """
    try:
        publics = public_inputs(vk.stark_info, root, leaf)
        proof = from_bytes(proof_bytes, vk.stark_info)
    except (ParameterMismatch, ProofFormatError, TypeError) as e:
        logger.warning("rejecting proof: %s", e)
        return False

    try:
        return stark_verify(vk, proof, publics)
    except ZeroDivisionError:
        # A query point met an opening point; never happens for honest proofs
        logger.warning("query point coincides with an opening point")
        return False


# --- Verification Checks ---

def _verify_evaluations(vk: VerifyingKey, proof: STARKProof, publics: Dict[str, int], vc: int, xi: int) -> bool:
    """Check C(xi) = Z_H(xi) * sum_i xi^(i*N) * Q_i(xi)."""
    stark_info = vk.stark_info
    z_h = zerofier_at(xi, stark_info.n_bits)
    if z_h == 0:
        # xi fell in the trace domain; the identity says nothing there
        return False

    evals: Dict[tuple, FF] = {}
    q_evals: List[FF] = [FF(0)] * stark_info.q_deg
    for entry, v in zip(stark_info.ev_map, proof.evals):
        if entry.type == EvMap.Type.q:
            q_evals[entry.index] = FF(v)
        else:
            evals[entry.key] = FF(v)

    data = VerifierData(
        evals=evals,
        challenges={"vc": FF(vc)},
        public_inputs={name: FF(v) for name, v in publics.items()},
    )
    c_xi = vk.air.constraints.constraint_polynomial(VerifierConstraintContext(data))

    xi_n = FF(pow(xi, 1 << stark_info.n_bits, GOLDILOCKS_PRIME))
    q_xi = FF(0)
    for q_i in reversed(q_evals):
        q_xi = q_xi * xi_n + q_i

    return c_xi == FF(z_h) * q_xi


def _verify_stage_openings(
    stark_info: StarkInfo,
    root: MerkleRoot,
    queries: List[QueryOpenings],
    attr: str,
    fri_queries: List[int],
) -> bool:
    tree = MerkleTree(arity=stark_info.stark_struct.merkle_tree_arity)
    for query, idx in zip(queries, fri_queries):
        opening: QueryProof = getattr(query, attr)
        if not tree.verify_group_proof(root, opening.mp, idx, opening.v):
            return False
    return True


def _verify_fri(
    stark_info: StarkInfo,
    proof: STARKProof,
    fri_queries: List[int],
    fri_challenges: List[int],
    xi: int,
    alpha: int,
) -> bool:
    """Walk every query through the FRI layers.

    Raises:
        VerificationFailure: On the first inconsistency
    """
    steps = [step.domain_bits for step in stark_info.fri_fold_steps]
    w_ext = get_omega(stark_info.n_bits_ext)
    tree = MerkleTree(arity=stark_info.stark_struct.merkle_tree_arity)

    for k, (query, q) in enumerate(zip(proof.queries, fri_queries)):
        source = opened_values_source(stark_info, query.trace.v, query.const.v, query.quotient.v)
        x_q = FF(int(SHIFT) * pow(w_ext, q, GOLDILOCKS_PRIME) % GOLDILOCKS_PRIME)
        value = int(compute_fri_polynomial(stark_info, source, proof.evals, alpha, xi, x_q))

        idx = q
        for j in range(stark_info.n_fri_rounds):
            leaf_idx, slot = FRI.leaf_position(idx, steps[j])
            opening = query.fri[j]
            if opening.v[slot] != value:
                raise VerificationFailure("FRI layer value mismatch", {"query": k, "round": j})
            if not tree.verify_group_proof(proof.fri_roots[j], opening.mp, leaf_idx, opening.v):
                raise VerificationFailure("FRI Merkle path invalid", {"query": k, "round": j})
            value = FRI.verify_fold(j, steps[j], fri_challenges[j], leaf_idx, opening.v)
            idx = leaf_idx

        if proof.final_pol[idx] != value:
            raise VerificationFailure("final polynomial mismatch", {"query": k})

    # F has degree < N, so after the folds the final layer has degree < 2^(b_L - blowup)
    degree_bound = 1 << (steps[-1] - stark_info.stark_struct.blowup_bits)
    coeffs = to_coefficients(FF(proof.final_pol))
    if np.any(coeffs[degree_bound:] != 0):
        raise VerificationFailure("final polynomial degree too high")
    return True
