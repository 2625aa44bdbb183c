"""Witness generation modules.

Each AIR has its own WitnessModule that assigns the witness columns directly
in readable Python code.
"""

from chips.layout import CircuitLayout

from .base import WitnessModule
from .merkle_membership import MembershipWitness, MerkleMembershipWitness

# Registry mapping AIR names to hand-written witness module classes
WITNESS_REGISTRY: dict[str, type[WitnessModule]] = {
    'MerkleMembership': MerkleMembershipWitness,
}


def get_witness_module(air_name: str, layout: CircuitLayout) -> WitnessModule:
    """Get witness module instance for an AIR.

    Raises:
        KeyError: If no witness module is registered for the AIR
    """
    if air_name in WITNESS_REGISTRY:
        return WITNESS_REGISTRY[air_name](layout)
    raise KeyError(
        f"No witness module for AIR '{air_name}'. "
        f"Available: {list(WITNESS_REGISTRY.keys())}"
    )


__all__ = [
    'WitnessModule',
    'MembershipWitness',
    'MerkleMembershipWitness',
    'WITNESS_REGISTRY',
    'get_witness_module',
]
