"""Abstract polynomial operations.

This module provides protocol-level polynomial operations without exposing
implementation details like NTT/INTT. The protocol layer should use these
abstractions rather than directly invoking NTT primitives.
"""

import galois

from primitives.field import FF
from primitives.ntt import NTT


def to_coefficients(evaluations: FF) -> FF:
    """Interpolate values on the subgroup of size len(evaluations)."""
    return NTT(evaluations.shape[0]).intt(evaluations)


def coset_to_coefficients(evaluations: FF) -> FF:
    """Interpolate values given on the coset SHIFT * <w>."""
    return NTT(evaluations.shape[0]).intt(evaluations, extend=True)


def evaluate_at(coefficients: FF, point) -> FF:
    """Evaluate polynomial(s) in ascending coefficient form at a single point.

    A 1D input yields a scalar, a 2D input of shape (N, n_cols) yields one
    value per column.
    """
    z = FF(int(point))
    if coefficients.ndim == 1:
        # Galois uses descending order, we store ascending
        return galois.Poly(coefficients[::-1], field=FF)(z)

    acc = FF.Zeros(coefficients.shape[1])
    for k in range(coefficients.shape[0] - 1, -1, -1):
        acc = acc * z + coefficients[k]
    return acc
