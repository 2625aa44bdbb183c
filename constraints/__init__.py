"""Constraint evaluation modules.

Each AIR has its own ConstraintModule that evaluates the constraint
polynomial directly in readable Python code.
"""

from chips.layout import CircuitLayout

from .base import (
    ConstraintContext,
    ConstraintModule,
    ProverConstraintContext,
    VerifierConstraintContext,
)
from .merkle_membership import MerkleMembershipConstraints

# Registry mapping AIR names to hand-written constraint module classes
CONSTRAINT_REGISTRY: dict[str, type[ConstraintModule]] = {
    "MerkleMembership": MerkleMembershipConstraints,
}


def get_constraint_module(air_name: str, layout: CircuitLayout) -> ConstraintModule:
    """Get constraint module instance for an AIR.

    Raises:
        KeyError: If no constraint module is registered for the AIR
    """
    if air_name in CONSTRAINT_REGISTRY:
        return CONSTRAINT_REGISTRY[air_name](layout)
    raise KeyError(
        f"No constraint module for AIR '{air_name}'. "
        f"Available: {list(CONSTRAINT_REGISTRY.keys())}"
    )


__all__ = [
    "ConstraintContext",
    "ProverConstraintContext",
    "VerifierConstraintContext",
    "ConstraintModule",
    "MerkleMembershipConstraints",
    "CONSTRAINT_REGISTRY",
    "get_constraint_module",
]
