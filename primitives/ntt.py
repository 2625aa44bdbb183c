"""Number Theoretic Transform for Goldilocks field.

Iterative radix-2 Cooley-Tukey over galois FieldArrays. Every butterfly layer
is a single vectorized operation over all columns, so a transform costs
log2(N) array passes rather than N^2 scalar multiplications.
"""

import numpy as np

from primitives.field import FF, GOLDILOCKS_PRIME, SHIFT, get_omega, get_omega_inv, powers

# --- NTT Engine ---

class NTT:
    """NTT engine for polynomial operations over Goldilocks field."""

    def __init__(self, domain_size: int) -> None:
        """Initialize NTT engine for given domain size."""
        assert domain_size > 0, "Domain size must be positive"
        assert (domain_size & (domain_size - 1)) == 0, "Domain size must be power of 2"

        self.n = domain_size
        self.n_bits = _log2(domain_size)

        # Bit-reversal permutation and per-layer twiddles
        self.rev = _bit_reverse_indices(self.n_bits)
        self.twiddles = _precompute_twiddles(get_omega(self.n_bits), self.n_bits)
        self.twiddles_inv = _precompute_twiddles(get_omega_inv(self.n_bits), self.n_bits)
        self.n_inv = FF(pow(domain_size, GOLDILOCKS_PRIME - 2, GOLDILOCKS_PRIME))

    def ntt(self, coeffs: FF) -> FF:
        """Forward NTT: coefficients -> evaluations at w^0 .. w^(N-1)."""
        return self._transform(coeffs, self.twiddles)

    def intt(self, evals: FF, extend: bool = False) -> FF:
        """Inverse NTT: evaluations -> coefficients.

        With extend=True the evaluations are taken to lie on the coset
        SHIFT * <w>, and the coefficients are unshifted accordingly.
        """
        coeffs = self._transform(evals, self.twiddles_inv) * self.n_inv
        if extend:
            coeffs = _scale_rows(coeffs, _shift_powers(self.n, inverse=True))
        return coeffs

    def coset_ntt(self, coeffs: FF) -> FF:
        """Evaluate coefficients on the coset SHIFT * <w>."""
        return self.ntt(_scale_rows(coeffs, _shift_powers(len(coeffs))))

    def extend_pol(self, src: FF, n_extended: int) -> FF:
        """Extend polynomial from domain N to the coset of size N_extended.

        Returns the evaluations on SHIFT * <w_ext>, not on <w_ext> itself, so
        that the extended domain never meets the trace domain.
        """
        assert n_extended >= self.n, "Extended size must be >= original size"
        assert n_extended % self.n == 0, "Extended size must be multiple of original size"

        coeffs = self.intt(src)
        padded = _zero_pad(coeffs, n_extended)
        return NTT(n_extended).coset_ntt(padded)

    # --- Internal ---

    def _transform(self, values: FF, twiddles: list) -> FF:
        """Run the butterfly network over the leading axis of values."""
        assert values.shape[0] == self.n, f"Expected {self.n} rows, got {values.shape[0]}"
        if self.n == 1:
            return values.copy()

        input_is_1d = values.ndim == 1
        a = values.reshape(self.n, -1)[self.rev]
        n_cols = a.shape[1]

        m = 1
        for layer in range(self.n_bits):
            blocks = a.reshape(self.n // (2 * m), 2 * m, n_cols)
            even = blocks[:, :m, :]
            odd = blocks[:, m:, :] * twiddles[layer]
            a = np.concatenate([even + odd, even - odd], axis=1).reshape(self.n, n_cols)
            m *= 2

        return a.reshape(self.n) if input_is_1d else a


# --- Helpers ---

def _log2(size: int) -> int:
    """Compute log2 of size (must be power of 2)."""
    assert size != 0
    res = 0
    while size != 1:
        size >>= 1
        res += 1
    return res


def _bit_reverse_indices(n_bits: int) -> np.ndarray:
    """Index array mapping i -> bit-reversal of i over n_bits bits."""
    n = 1 << n_bits
    rev = np.zeros(n, dtype=np.int64)
    for i in range(n):
        rev[i] = int(format(i, f"0{n_bits}b")[::-1], 2) if n_bits else 0
    return rev


def _precompute_twiddles(omega: int, n_bits: int) -> list:
    """Twiddles per layer: layer k holds w_{2^(k+1)}^j for j < 2^k, shaped for broadcasting."""
    twiddles = []
    for layer in range(n_bits):
        m = 1 << layer
        # w_{2m} = omega^(N / 2m)
        w_m = pow(omega, 1 << (n_bits - layer - 1), GOLDILOCKS_PRIME)
        twiddles.append(powers(w_m, m).reshape(1, m, 1))
    return twiddles


def _shift_powers(n: int, inverse: bool = False) -> FF:
    """Return SHIFT^k (or SHIFT^-k) for k < n."""
    shift = int(SHIFT ** -1) if inverse else int(SHIFT)
    return powers(shift, n)


def _scale_rows(values: FF, scale: FF) -> FF:
    """Multiply row k of values by scale[k] (1D or 2D input)."""
    if values.ndim == 1:
        return values * scale
    return values * scale.reshape(-1, 1)


def _zero_pad(values: FF, n_rows: int) -> FF:
    """Append zero rows up to n_rows."""
    shape = (n_rows,) + values.shape[1:]
    out = FF.Zeros(shape)
    out[:values.shape[0]] = values
    return out
