"""Base class for witness generation."""

from abc import ABC, abstractmethod
from typing import Any

from chips.base import Table


class WitnessModule(ABC):
    """Per-AIR witness generation. Used by prover only.

    Unlike ConstraintModule, this is only used by the prover - the verifier
    checks constraints but never sees a witness.
    """

    @abstractmethod
    def validate(self, witness: Any) -> None:
        """Reject a witness whose shape or values cannot be assigned."""
        pass

    @abstractmethod
    def synthesize(self, witness: Any) -> Table:
        """Assign every witness column over the full trace domain."""
        pass
