"""Hash permutation chip.

Arithmetizes Hash(a, b) = Poseidon([a, b, 0])[0] as one row per round plus
one output row. With x_k = state_k + RC_k and cube_k = x_k^3 committed as a
helper column, the S-box x_k^7 = cube_k^2 * x_k keeps every gate at degree 4:

    cube_k = (state_k + RC_k)^3                                  every row
    FULL    * (state_j' - sum_k M[j][k] * cube_k^2 * x_k)        full rounds
    PARTIAL * (state_j' - M[j][0] * cube_0^2 * x_0
                        - sum_{k>0} M[j][k] * x_k)               partial rounds

where state_j' is state_j on the next row.
"""

from typing import List

from chips.base import Chip, Gate, Table
from chips.layout import WIDTH
from primitives.field import FF, GOLDILOCKS_PRIME
from primitives.poseidon import DEFAULT_PARAMS, PoseidonParams, permutation_trace

_P = GOLDILOCKS_PRIME


class PoseidonChip(Chip):
    """Fixed-shape block computing one two-to-one Poseidon hash."""

    def __init__(self, params: PoseidonParams = DEFAULT_PARAMS) -> None:
        self.params = params
        self._mds = [[FF(m) for m in row] for row in params.mds]

    @property
    def rows(self) -> int:
        """Rows consumed per invocation, independent of the inputs."""
        return self.params.n_rounds + 1

    @property
    def output_row(self) -> int:
        """Offset of the row whose state_0 holds the output."""
        return self.params.n_rounds

    # --- Setup ---

    def assign_fixed(self, fixed: Table, offset: int) -> None:
        """Write round selectors and round constants for a block at offset."""
        for r in range(self.params.n_rounds):
            row = offset + r
            fixed.assign("FULL" if self.params.is_full_round(r) else "PARTIAL", 0, row, 1)
            for i in range(WIDTH):
                fixed.assign("RC", i, row, self.params.rc[r][i])

    # --- Synthesis ---

    def assign(self, trace: Table, offset: int, a: int, b: int) -> int:
        """Fill state and cube cells of the block and return Hash(a, b)."""
        states = permutation_trace([a, b, 0], self.params)
        for r, state in enumerate(states):
            row = offset + r
            rc = self.params.rc[r] if r < self.params.n_rounds else (0,) * WIDTH
            for i in range(WIDTH):
                trace.assign("state", i, row, state[i])
                trace.assign("cube", i, row, pow(state[i] + rc[i], 3, _P))
        return states[-1][0]

    # --- Gates ---

    def gates(self, ctx) -> List[Gate]:
        state = [ctx.col("state", i) for i in range(WIDTH)]
        next_state = [ctx.next_col("state", i) for i in range(WIDTH)]
        cube = [ctx.col("cube", i) for i in range(WIDTH)]
        x = [state[i] + ctx.const("RC", i) for i in range(WIDTH)]
        full = ctx.const("FULL")
        partial = ctx.const("PARTIAL")

        sbox = [cube[i] * cube[i] * x[i] for i in range(WIDTH)]

        gates: List[Gate] = []
        for i in range(WIDTH):
            gates.append((f"sbox_cube_{i}", cube[i] - x[i] * x[i] * x[i]))

        for j in range(WIDTH):
            mixed_full = self._mds[j][0] * sbox[0]
            mixed_partial = self._mds[j][0] * sbox[0]
            for k in range(1, WIDTH):
                mixed_full = mixed_full + self._mds[j][k] * sbox[k]
                mixed_partial = mixed_partial + self._mds[j][k] * x[k]
            gates.append((f"full_round_{j}", full * (next_state[j] - mixed_full)))
            gates.append((f"partial_round_{j}", partial * (next_state[j] - mixed_partial)))

        return gates
