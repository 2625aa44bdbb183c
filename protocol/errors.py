"""Typed exceptions for membership proving and verification.

Every error carries a human message plus a small context dict (gate names,
rows, expected/actual sizes). Context is for local diagnostics only and is
never attached to what prove() surfaces to its caller.
"""

from typing import Any, Dict, Optional


class MembershipError(Exception):
    """Base error for setup, synthesis, proving and verification."""

    def __init__(self, msg: str, ctx: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(msg)
        self.msg = msg
        self.ctx: Dict[str, Any] = dict(ctx or {})

    def __str__(self) -> str:
        if self.ctx:
            return f"{self.msg} ctx={self.ctx}"
        return self.msg


class MalformedWitness(MembershipError, ValueError):
    """A path bit is not 0/1 or the path length differs from the depth."""


class UnsatisfiedConstraint(MembershipError):
    """The assigned trace violates a gate."""

    def __init__(self, gate: str, row: int) -> None:
        super().__init__(f"gate '{gate}' not satisfied", {"gate": gate, "row": row})
        self.gate = gate
        self.row = row


class ParameterMismatch(MembershipError, ValueError):
    """Depth, key or public input shape does not match the setup."""


class ProofFormatError(MembershipError, ValueError):
    """Proof bytes do not parse into the shape the verifying key expects."""


class VerificationFailure(MembershipError):
    """A structurally valid proof failed one of the verifier checks."""


class MembershipNotEstablished(MembershipError):
    """Uniform failure of prove(); the cause is chained but not described."""

    def __init__(self) -> None:
        super().__init__("membership not established")
