"""
Fiat-Shamir transcript implementation using a duplex sponge.

This module implements challenge generation for non-interactive proofs.
"""
from typing import List, Optional

from primitives.field import GOLDILOCKS_PRIME
from primitives.sponge import HASH_SIZE, permute


class Transcript:
    """
    Fiat-Shamir transcript using a sponge construction.

    The transcript absorbs field elements and produces random challenges
    in a deterministic, pseudorandom manner.

    Attributes:
        arity: Determines sponge width (2, 3, or 4 -> 8, 12, 16)
        state: Current sponge state
        pending: Accumulator for absorbing elements
        out: Output buffer from the last permutation
    """

    def __init__(self, arity: int = 4):
        if arity not in [2, 3, 4]:
            raise ValueError(f"arity must be 2, 3, or 4, got {arity}")

        self.arity = arity

        # Buffer sizes based on arity
        self.transcript_state_size = HASH_SIZE
        self.transcript_pending_size = HASH_SIZE * (arity - 1)  # rate
        self.transcript_out_size = HASH_SIZE * arity  # full sponge width

        self.state = [0] * self.transcript_out_size
        self.pending = [0] * self.transcript_out_size
        self.out = [0] * self.transcript_out_size

        # Cursors
        self.pending_cursor = 0
        self.out_cursor = 0

    def put(self, input_data: List[int]) -> None:
        """Absorb a list of field elements."""
        for elem in input_data:
            self._add1(elem)

    def _add1(self, input_elem: int) -> None:
        """Add a single field element to pending buffer."""
        self.pending[self.pending_cursor] = int(input_elem) % GOLDILOCKS_PRIME
        self.pending_cursor += 1
        self.out_cursor = 0  # Invalidate cached output

        if self.pending_cursor == self.transcript_pending_size:
            self._update_state()

    def _update_state(self) -> None:
        """Run the permutation over pending (rate) + state (capacity)."""
        while self.pending_cursor < self.transcript_pending_size:
            self.pending[self.pending_cursor] = 0
            self.pending_cursor += 1

        inputs = self.pending[:self.transcript_pending_size] + self.state[:HASH_SIZE]
        self.out = permute(inputs)

        self.out_cursor = self.transcript_out_size
        self.pending = [0] * self.transcript_out_size
        self.pending_cursor = 0

        # Copy output to state for next round
        self.state = list(self.out)

    def _get_fields1(self) -> int:
        """Squeeze one field element from sponge."""
        if self.out_cursor == 0:
            self._update_state()

        # Read output buffer in reverse order
        idx = (self.transcript_out_size - self.out_cursor) % self.transcript_out_size
        result = self.out[idx]
        self.out_cursor -= 1

        return result

    def get_field(self) -> int:
        """Get one field element as a challenge."""
        return self._get_fields1()

    def get_state(self, n_outputs: Optional[int] = None) -> List[int]:
        """Flush pending input and return the first n_outputs state elements."""
        if self.pending_cursor > 0:
            self._update_state()

        if n_outputs is None:
            n_outputs = self.transcript_state_size

        return self.state[:n_outputs]

    def get_permutations(self, n: int, n_bits: int) -> List[int]:
        """
        Generate n permutation values, each using n_bits bits.

        This is used to derive query indices in FRI.

        Returns:
            List of n values, each in range [0, 2^n_bits)
        """
        # Use 63 bits per field (leaving 1 bit margin)
        n_fields = ((n * n_bits - 1) // 63) + 1

        fields = [self._get_fields1() for _ in range(n_fields)]

        result = []
        cur_bit = 0
        cur_field = 0

        for _ in range(n):
            a = 0
            for j in range(n_bits):
                bit = (fields[cur_field] >> cur_bit) & 1
                a += bit << j

                cur_bit += 1
                if cur_bit == 63:
                    cur_bit = 0
                    cur_field += 1

            result.append(a)

        return result
