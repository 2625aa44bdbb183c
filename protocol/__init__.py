"""Protocol - Setup, proving and verification of Merkle membership."""

from protocol.air_config import AirConfig, ProverHelpers
from protocol.errors import (
    MalformedWitness,
    MembershipError,
    MembershipNotEstablished,
    ParameterMismatch,
    ProofFormatError,
    UnsatisfiedConstraint,
    VerificationFailure,
)
from protocol.fri import FRI
from protocol.pcs import (
    EvalPoly,
    FriPcs,
    FriPcsConfig,
    FriProof,
    Nonce,
    QueryIndex,
)
from protocol.proof import STARKProof, from_bytes, to_bytes
from protocol.prover import gen_proof, prove
from protocol.setup_ctx import ProvingKey, VerifyingKey, setup
from protocol.stages import Starks
from protocol.stark_info import StarkInfo, StarkStruct
from protocol.verifier import stark_verify, verify

__all__ = [
    # Entry points
    "setup",
    "prove",
    "verify",
    "ProvingKey",
    "VerifyingKey",
    # FRI
    "FRI",
    "EvalPoly",
    # FRI PCS
    "FriPcs",
    "FriPcsConfig",
    "FriProof",
    "Nonce",
    "QueryIndex",
    # STARK
    "Starks",
    "gen_proof",
    "stark_verify",
    # Configuration and data structures
    "StarkInfo",
    "StarkStruct",
    "AirConfig",
    "ProverHelpers",
    "STARKProof",
    "to_bytes",
    "from_bytes",
    # Errors
    "MembershipError",
    "MalformedWitness",
    "UnsatisfiedConstraint",
    "ParameterMismatch",
    "ProofFormatError",
    "VerificationFailure",
    "MembershipNotEstablished",
]
