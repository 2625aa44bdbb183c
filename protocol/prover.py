"""Top-level STARK proof generation."""

import logging
from typing import Dict, Optional

import numpy as np

from chips.base import Table
from constraints import ProverConstraintContext
from primitives.field import FF, is_canonical
from primitives.transcript import Transcript
from protocol.data import ProverData
from protocol.errors import MembershipError, MembershipNotEstablished, ParameterMismatch, UnsatisfiedConstraint
from protocol.fri_polynomial import compute_fri_polynomial
from protocol.pcs import FriPcs, FriPcsConfig
from protocol.proof import QueryOpenings, STARKProof, to_bytes
from protocol.setup_ctx import ProvingKey
from protocol.stages import Starks, column_index, stack_columns, unstack_columns
from protocol.stark_info import EvMap, StarkInfo
from witness import MembershipWitness

logger = logging.getLogger(__name__)


# --- Helper Functions ---

def public_inputs(stark_info: StarkInfo, root: int, leaf: Optional[int] = None) -> Dict[str, int]:
    """Assemble the public inputs the circuit declares.

    Raises:
        ParameterMismatch: If the leaf is supplied in private-leaf mode (or
            missing in public-leaf mode), or a value is not a field element
    """
    values = {"root": root}
    if stark_info.layout.public_leaf:
        if leaf is None:
            raise ParameterMismatch("circuit has a public leaf but none was given")
        values["leaf"] = leaf
    elif leaf is not None:
        raise ParameterMismatch("circuit keeps the leaf private; do not pass it")

    for name, value in values.items():
        if not is_canonical(value):
            raise ParameterMismatch("public input is not a canonical field element", {"name": name})
    return {name: int(value) for name, value in values.items()}


def check_constraints(pk: ProvingKey, trace: Table, publics: Dict[str, int]) -> None:
    """Evaluate every gate on every row of the trace domain.

    Raises:
        UnsatisfiedConstraint: Naming the first failing gate and row
    """
    data = ProverData(
        columns=trace.to_columns(),
        constants=dict(pk.const_pols),
        public_inputs={name: FF(v) for name, v in publics.items()},
        extend=1,
    )
    for name, expr in pk.air.constraints.named_constraints(ProverConstraintContext(data)):
        failing = np.nonzero(expr != 0)[0]
        if len(failing) > 0:
            raise UnsatisfiedConstraint(name, int(failing[0]))


# --- Main Entry Point ---

def gen_proof(pk: ProvingKey, trace: Table, publics: Dict[str, int]) -> STARKProof:
    """Generate complete STARK proof.

    Args:
        pk: Proving key from setup()
        trace: Synthesized witness table over the full trace domain
        publics: Public inputs by name, as returned by public_inputs()

    Returns:
        STARKProof with all commitments, evaluations and query openings.

    Raises:
        UnsatisfiedConstraint: If the trace violates any gate; no proof
            destined to fail verification is ever produced
    """
    stark_info = pk.stark_info
    ss = stark_info.stark_struct

    # === INITIALIZATION ===

    # The trace domain H has N = 2^n_bits rows; polynomials are committed on
    # the coset SHIFT * <w_ext> of size N_ext = N * 2^blowup_bits, which never
    # meets H so the quotient can be computed point-wise there.
    n = 1 << stark_info.n_bits
    if trace.n_rows != n:
        raise ParameterMismatch("trace height does not match proving key", {"expected": n, "actual": trace.n_rows})

    # Refuse to prove a false statement. Gate name and row go to the caller
    # of gen_proof only; prove() flattens them away.
    check_constraints(pk, trace, publics)

    starks = Starks(stark_info)
    constraint_module = pk.air.constraints
    public_ff = {name: FF(v) for name, v in publics.items()}

    # Fiat-Shamir transcript. Seeded with the fixed-column commitment (verkey),
    # the circuit shape and the public inputs, so every challenge below is
    # bound to exactly this statement and this circuit.
    transcript = Transcript(arity=ss.transcript_arity)
    transcript.put(list(pk.verkey))
    transcript.put(stark_info.descriptor())
    transcript.put([publics[name] for name in stark_info.publics])

    # === STAGE 1: Witness commitment ===

    trace_matrix = stack_columns(trace.to_columns(), stark_info.cm_pols_map)
    trace_coeffs = starks.interpolate(trace_matrix)
    trace_ext = starks.extend_coefficients(trace_coeffs)
    root1 = starks.commit_stage(1, trace_ext)
    transcript.put(root1)

    # Constraint combination challenge: C(x) = sum_i vc^i * C_i(x)
    vc = transcript.get_field()

    # === STAGE 2: Quotient ===

    # Every gate vanishes on H, so C is divisible by Z_H(x) = x^N - 1.
    # Evaluate C on the extended coset and divide point-wise.
    data = ProverData(
        columns=unstack_columns(trace_ext, stark_info.cm_pols_map),
        constants=dict(pk.const_pols_ext),
        challenges={"vc": FF(vc)},
        public_inputs=public_ff,
        extend=stark_info.extend,
    )
    c_ext = constraint_module.constraint_polynomial(ProverConstraintContext(data))
    q_ext = c_ext * pk.helpers.zi

    # Q has degree < q_deg * N; commit to its N-sized pieces Q_i
    q_coeffs = starks.split_quotient(q_ext)
    q_pieces_ext = starks.extend_coefficients(q_coeffs)
    root2 = starks.commit_stage(2, q_pieces_ext)
    transcript.put(root2)

    # === STAGE 3: Evaluations at xi ===

    # Out-of-domain point. The verifier re-evaluates the constraints at xi
    # from these claimed values and checks C(xi) = Z_H(xi) * Q(xi).
    xi = transcript.get_field()
    evals = starks.compute_evals(xi, trace_coeffs, pk.const_coeffs, q_coeffs)
    transcript.put(evals)

    # === STAGE 4: FRI polynomial ===

    # F batches every claim (P_e(x) - v_e) / (x - z_e) with powers of alpha;
    # F is low degree only if all claimed evaluations are correct.
    alpha = transcript.get_field()
    sources = {
        EvMap.Type.cm: trace_ext,
        EvMap.Type.const_: None,
        EvMap.Type.q: q_pieces_ext,
    }

    def source(entry: EvMap) -> FF:
        if entry.type == EvMap.Type.const_:
            return pk.const_pols_ext[(entry.name, entry.index)]
        return sources[entry.type][:, column_index(stark_info, entry)]

    fri_pol = compute_fri_polynomial(stark_info, source, evals, alpha, xi, pk.helpers.x)

    # === STAGE 5: FRI ===

    fri_config = FriPcsConfig(
        n_bits_ext=stark_info.n_bits_ext,
        fri_round_log_sizes=[step.domain_bits for step in stark_info.fri_fold_steps],
        n_queries=ss.n_queries,
        merkle_arity=ss.merkle_tree_arity,
        pow_bits=ss.pow_bits,
        transcript_arity=ss.transcript_arity,
    )
    fri_proof = FriPcs(fri_config).prove(fri_pol, transcript)

    # === STAGE 6: Query openings ===

    # For every query, open the row of each committed matrix at the query
    # index so the verifier can recompute F there and check it against FRI.
    trace_tree = starks.get_stage_tree(1)
    quotient_tree = starks.get_stage_tree(2)
    queries = []
    for k, idx in enumerate(fri_proof.query_indices):
        queries.append(QueryOpenings(
            const=pk.const_tree.get_query_proof(idx),
            trace=trace_tree.get_query_proof(idx),
            quotient=quotient_tree.get_query_proof(idx),
            fri=[step_proofs[k] for step_proofs in fri_proof.query_proofs],
        ))

    logger.debug("generated proof depth=%d with %d queries", stark_info.layout.depth, len(queries))

    return STARKProof(
        depth=stark_info.layout.depth,
        public_leaf=stark_info.layout.public_leaf,
        n_bits=stark_info.n_bits,
        roots=[list(root1), list(root2)],
        evals=evals,
        fri_roots=fri_proof.fri_roots,
        final_pol=fri_proof.final_pol,
        nonce=fri_proof.nonce,
        queries=queries,
    )


def prove(pk: ProvingKey, witness: MembershipWitness, root: int, leaf: Optional[int] = None) -> bytes:
    """Prove that witness is a path from a leaf to root.

    Returns:
        Serialized proof

    Raises:
        MembershipNotEstablished: For every failure (malformed witness,
            unsatisfied constraint, parameter mismatch). The cause is chained
            for debugging but deliberately not distinguished.
    """
    try:
        publics = public_inputs(pk.stark_info, root, leaf)
        trace = pk.air.witness.synthesize(witness)
        proof = gen_proof(pk, trace, publics)
    except MembershipError as e:
        logger.debug("proof generation failed: %s", e)
        raise MembershipNotEstablished() from e
    return to_bytes(proof)
