"""Data structures for constraint evaluation.

ProverData holds whole columns (base or extended domain) and VerifierData
holds evaluations at the out-of-domain point. Constraint modules read both
through a ConstraintContext, so the same gate code runs on each.

Usage:
    # Prover: constraint evaluation over the extended domain
    ctx = ProverConstraintContext(ProverData(columns=..., constants=..., extend=8))
    c = constraint_module.constraint_polynomial(ctx)

    # Verifier: constraint evaluation at a single point
    ctx = VerifierConstraintContext(VerifierData(evals=..., challenges=...))
    c_at_xi = constraint_module.constraint_polynomial(ctx)
"""

from dataclasses import dataclass, field

from primitives.field import FF

# Type aliases
FFPoly = FF    # Array of base field elements


@dataclass
class ProverData:
    """Polynomial data for constraint evaluation.

    Attributes:
        columns: Witness columns keyed by (name, index)
        constants: Fixed columns keyed by (name, index)
        challenges: Fiat-Shamir challenges keyed by name (e.g., 'vc')
        public_inputs: Public inputs keyed by name
        extend: Blowup factor (N_ext / N), 1 for base domain
    """
    columns: dict[tuple[str, int], FFPoly] = field(default_factory=dict)
    constants: dict[tuple[str, int], FFPoly] = field(default_factory=dict)
    challenges: dict[str, FF] = field(default_factory=dict)
    public_inputs: dict[str, FF] = field(default_factory=dict)
    extend: int = 1


@dataclass
class VerifierData:
    """Evaluation data for constraint verification.

    Evaluations are keyed by (name, index, offset) where offset indicates row
    shift; witness and fixed columns share the key space.

    Attributes:
        evals: Polynomial evaluations keyed by (name, index, offset)
        challenges: Fiat-Shamir challenges keyed by name
        public_inputs: Public inputs keyed by name
    """
    evals: dict[tuple[str, int, int], FF] = field(default_factory=dict)
    challenges: dict[str, FF] = field(default_factory=dict)
    public_inputs: dict[str, FF] = field(default_factory=dict)
