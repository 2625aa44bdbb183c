"""Base classes for constraint evaluation.

ConstraintContext provides a uniform interface for constraint evaluation that works
for both prover (returns arrays) and verifier (returns scalars). The same constraint
code can be used in both contexts thanks to galois broadcasting.

Example:
    def eval_constraint(ctx: ConstraintContext):
        a = ctx.col('a')
        b = ctx.col('b')
        return a * b - ctx.public('c')

    # Works for prover (arrays)
    prover_result = eval_constraint(ProverConstraintContext(prover_data))

    # Works for verifier (scalars)
    verifier_result = eval_constraint(VerifierConstraintContext(verifier_data))
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Tuple, Union

import numpy as np

from primitives.field import FF

if TYPE_CHECKING:
    from protocol.data import ProverData, VerifierData

FFPoly = FF    # Array of base field elements

Gate = Tuple[str, Union[FFPoly, FF]]


class ConstraintContext(ABC):
    """Uniform interface for constraint evaluation - works for prover and verifier."""

    @abstractmethod
    def col(self, name: str, index: int = 0) -> Union[FFPoly, FF]:
        """Get witness column at current row.

        Returns:
            Prover: array of values at all domain points
            Verifier: scalar evaluation at xi
        """
        pass

    @abstractmethod
    def next_col(self, name: str, index: int = 0) -> Union[FFPoly, FF]:
        """Get witness column at next row (offset +1).

        Returns:
            Prover: array shifted by -1 (circular)
            Verifier: evaluation at xi * omega
        """
        pass

    @abstractmethod
    def const(self, name: str, index: int = 0) -> Union[FFPoly, FF]:
        """Get fixed column at current row.

        Args:
            name: Constant name (e.g., '__L1__' for Lagrange polynomial)
            index: Column index for multi-column constants such as 'RC'
        """
        pass

    @abstractmethod
    def public(self, name: str) -> FF:
        """Get public input (always scalar)."""
        pass

    @abstractmethod
    def challenge(self, name: str) -> FF:
        """Get Fiat-Shamir challenge (always scalar)."""
        pass


class ProverConstraintContext(ConstraintContext):
    """Prover implementation - returns polynomial arrays.

    The prover evaluates constraints at all domain points simultaneously,
    producing arrays of constraint evaluations.
    """

    def __init__(self, data: "ProverData"):
        self._data = data

    def col(self, name: str, index: int = 0) -> FFPoly:
        return self._data.columns[(name, index)]

    def next_col(self, name: str, index: int = 0) -> FFPoly:
        # On extended domain, row offset is multiplied by extend factor
        extend = self._data.extend
        return np.roll(self.col(name, index), -extend)

    def const(self, name: str, index: int = 0) -> FFPoly:
        return self._data.constants[(name, index)]

    def public(self, name: str) -> FF:
        return self._data.public_inputs[name]

    def challenge(self, name: str) -> FF:
        return self._data.challenges[name]


class VerifierConstraintContext(ConstraintContext):
    """Verifier implementation - returns scalar evaluations.

    The verifier evaluates constraints at a single random point xi,
    checking that the constraint polynomial matches the quotient.
    """

    def __init__(self, data: "VerifierData"):
        self._data = data

    def col(self, name: str, index: int = 0) -> FF:
        # offset=0 means evaluation at xi
        return self._data.evals[(name, index, 0)]

    def next_col(self, name: str, index: int = 0) -> FF:
        # offset=1 means evaluation at xi * omega
        return self._data.evals[(name, index, 1)]

    def const(self, name: str, index: int = 0) -> FF:
        return self._data.evals[(name, index, 0)]

    def public(self, name: str) -> FF:
        return self._data.public_inputs[name]

    def challenge(self, name: str) -> FF:
        return self._data.challenges[name]


class ConstraintModule(ABC):
    """Per-AIR constraint evaluation. Used by both prover and verifier.

    Subclasses list their gates by name; the combined polynomial is the
    random linear combination of all of them under the 'vc' challenge.
    """

    # Highest total degree of any gate in trace/fixed columns
    degree: int = 2

    @abstractmethod
    def named_constraints(self, ctx: ConstraintContext) -> List[Gate]:
        """Return every gate as a (name, expression) pair."""
        pass

    def constraint_polynomial(self, ctx: ConstraintContext) -> Union[FFPoly, FF]:
        """Evaluate all constraints combined into single polynomial.

        Returns:
            Prover: array of constraint evaluations at all domain points
            Verifier: single constraint evaluation at xi
        """
        constraints = [expr for _, expr in self.named_constraints(ctx)]
        return self._combine_constraints(constraints, ctx.challenge('vc'))

    def _combine_constraints(self, constraints, vc):
        """Combine constraint list using standard accumulation pattern.

        Computes: ((constraints[0] * vc + constraints[1]) * vc + ...) + constraints[-1]
        """
        acc = constraints[0]
        for c in constraints[1:]:
            acc = acc * vc + c
        return acc
