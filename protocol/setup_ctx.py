"""Setup: derive proving and verifying keys for one depth.

Keys are computed once and are read-only afterwards: every array they hold
is flagged non-writeable and every mapping is a read-only view, so a single
ProvingKey can be shared by concurrently running provers.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from chips.base import ColumnKey
from primitives.field import FF
from primitives.merkle_tree import MerkleTree
from protocol.air_config import AirConfig, ProverHelpers
from protocol.stages import Starks, stack_columns
from protocol.stark_info import StarkInfo, StarkStruct

logger = logging.getLogger(__name__)


def _frozen(arr: FF) -> FF:
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class VerifyingKey:
    """What a verifier needs: the circuit description and the fixed-column commitment."""
    air: AirConfig
    verkey: Tuple[int, ...]

    @property
    def stark_info(self) -> StarkInfo:
        return self.air.stark_info

    @property
    def depth(self) -> int:
        return self.air.depth


@dataclass(frozen=True)
class ProvingKey:
    """Verifying key material plus the fixed columns in every form the prover uses.

    Attributes:
        const_pols: Fixed columns on the trace domain, keyed by (name, index)
        const_pols_ext: Fixed columns on the extended coset
        const_coeffs: Coefficient matrix (N, n_constants)
        const_tree: Merkle tree over const_pols_ext rows; root is verkey
        helpers: Extended-domain points and zerofier inverses
    """
    air: AirConfig
    verkey: Tuple[int, ...]
    const_pols: Mapping[ColumnKey, FF]
    const_pols_ext: Mapping[ColumnKey, FF]
    const_coeffs: FF
    const_tree: MerkleTree
    helpers: ProverHelpers

    @property
    def stark_info(self) -> StarkInfo:
        return self.air.stark_info

    @property
    def depth(self) -> int:
        return self.air.depth

    def verifying_key(self) -> VerifyingKey:
        return VerifyingKey(air=self.air, verkey=self.verkey)


def setup(
    depth: int,
    stark_struct: Optional[StarkStruct] = None,
    public_leaf: bool = False,
) -> Tuple[ProvingKey, VerifyingKey]:
    """Compile the constraint system for depth and derive (ProvingKey, VerifyingKey)."""
    air = AirConfig.build(depth, stark_struct=stark_struct, public_leaf=public_leaf)
    stark_info = air.stark_info
    starks = Starks(stark_info)

    fixed = air.constraints.fixed_columns().to_columns()
    const_matrix = stack_columns(fixed, stark_info.const_pols_map)
    const_coeffs = starks.interpolate(const_matrix)
    const_ext = starks.extend_coefficients(const_coeffs)
    const_tree = starks.build_const_tree(const_ext)

    helpers = ProverHelpers.from_stark_info(stark_info)
    _frozen(helpers.x)
    _frozen(helpers.zi)

    const_pols_ext = {key: _frozen(const_ext[:, i].copy()) for i, key in enumerate(stark_info.const_pols_map)}

    pk = ProvingKey(
        air=air,
        verkey=tuple(const_tree.get_root()),
        const_pols=MappingProxyType({key: _frozen(col) for key, col in fixed.items()}),
        const_pols_ext=MappingProxyType(const_pols_ext),
        const_coeffs=_frozen(const_coeffs),
        const_tree=const_tree,
        helpers=helpers,
    )
    logger.info(
        "setup depth=%d: N=2^%d, %d witness columns, %d fixed columns",
        depth, stark_info.n_bits, stark_info.n_cm, stark_info.n_constants,
    )
    return pk, pk.verifying_key()
