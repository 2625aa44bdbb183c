"""AIR configuration and precomputed prover data.

This module provides the configuration bundle for STARK proving/verification:

- AirConfig: Bundles StarkInfo (sizes, opening map, FRI schedule) with the
  constraint and witness modules of the circuit it describes.
- ProverHelpers: Precomputed zerofier and evaluation points needed for
  quotient computation.

Example:
    config = AirConfig.build(depth=2)
    pk, vk = setup(config)
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from chips.layout import CircuitLayout
from constraints import ConstraintModule, get_constraint_module
from primitives.field import FF, GOLDILOCKS_PRIME, SHIFT, batch_inverse, get_omega, powers
from protocol.stark_info import StarkInfo, StarkStruct
from witness import WitnessModule, get_witness_module

AIR_NAME = "MerkleMembership"


# --- Prover Helpers ---

class ProverHelpers:
    """Precomputed zerofier and evaluation points for constraint evaluation.

    Attributes:
        x: Coset evaluation points shift * w^i for i in [0, N_ext)
        zi: Inverse vanishing polynomial 1 / Z_H(x) at each x, where
            Z_H(x) = x^N - 1 vanishes on the trace domain
    """

    def __init__(self) -> None:
        self.x: Optional[FF] = None
        self.zi: Optional[FF] = None

    @classmethod
    def from_stark_info(cls, stark_info: StarkInfo) -> "ProverHelpers":
        helpers = cls()
        n = 1 << stark_info.n_bits
        n_ext = 1 << stark_info.n_bits_ext
        helpers.x = powers(get_omega(stark_info.n_bits_ext), n_ext, start=int(SHIFT))

        # x^N takes only extend distinct values on the coset: SHIFT^N * w_ext^(iN)
        extend = n_ext // n
        shift_n = pow(int(SHIFT), n, GOLDILOCKS_PRIME)
        period = powers(get_omega(stark_info.n_bits_ext - stark_info.n_bits), extend, start=shift_n)
        zi_period = batch_inverse(period - FF(1))
        helpers.zi = zi_period[np.arange(n_ext) % extend]
        return helpers


def zerofier_at(xi: int, n_bits: int) -> int:
    """Z_H(xi) = xi^N - 1 as a plain integer."""
    return (pow(int(xi), 1 << n_bits, GOLDILOCKS_PRIME) - 1) % GOLDILOCKS_PRIME


# --- AirConfig ---

@dataclass(frozen=True)
class AirConfig:
    """The constraint system for one depth, plus protocol parameters."""
    stark_info: StarkInfo
    constraints: ConstraintModule
    witness: WitnessModule

    @classmethod
    def build(
        cls,
        depth: int,
        stark_struct: Optional[StarkStruct] = None,
        public_leaf: bool = False,
    ) -> "AirConfig":
        stark_struct = stark_struct or StarkStruct()
        layout = CircuitLayout(
            depth=depth,
            blinding_rows=stark_struct.n_blinding_rows,
            public_leaf=public_leaf,
        )
        constraints = get_constraint_module(AIR_NAME, layout)
        stark_info = StarkInfo.build(
            AIR_NAME,
            layout,
            stark_struct,
            constraints.degree,
            tuple(constraints.public_names),
        )
        return cls(
            stark_info=stark_info,
            constraints=constraints,
            witness=get_witness_module(AIR_NAME, layout),
        )

    @property
    def layout(self) -> CircuitLayout:
        return self.stark_info.layout

    @property
    def depth(self) -> int:
        return self.stark_info.layout.depth
