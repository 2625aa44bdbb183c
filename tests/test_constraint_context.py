"""Tests for ConstraintContext ABC and implementations."""

import numpy as np
import pytest

from constraints.base import (
    ConstraintContext,
    ConstraintModule,
    ProverConstraintContext,
    VerifierConstraintContext,
)
from primitives.field import FF
from protocol.data import ProverData, VerifierData


def test_prover_context_col_returns_array() -> None:
    """ProverConstraintContext.col returns full array of values."""
    a_values = FF.Random(8)
    data = ProverData(columns={('a', 0): a_values})
    ctx = ProverConstraintContext(data)

    result = ctx.col('a')
    assert len(result) == 8
    assert np.array_equal(result, a_values)


def test_prover_context_col_with_index() -> None:
    """ProverConstraintContext.col supports index parameter for multi-column polynomials."""
    a0_values = FF.Random(8)
    a1_values = FF.Random(8)
    data = ProverData(columns={('a', 0): a0_values, ('a', 1): a1_values})
    ctx = ProverConstraintContext(data)

    assert np.array_equal(ctx.col('a', 0), a0_values)
    assert np.array_equal(ctx.col('a', 1), a1_values)


def test_prover_context_next_col_shifts() -> None:
    """ProverConstraintContext.next_col shifts values by -1 (circular)."""
    data = ProverData(columns={('a', 0): FF([1, 2, 3, 4, 5, 6, 7, 8])})
    ctx = ProverConstraintContext(data)

    # [1,2,3,4,5,6,7,8] -> [2,3,4,5,6,7,8,1]
    assert np.array_equal(ctx.next_col('a'), FF([2, 3, 4, 5, 6, 7, 8, 1]))


def test_prover_context_next_col_on_extended_domain() -> None:
    """On the extended domain the next row is extend positions away."""
    data = ProverData(columns={('a', 0): FF([1, 2, 3, 4, 5, 6, 7, 8])}, extend=4)
    ctx = ProverConstraintContext(data)

    assert np.array_equal(ctx.next_col('a'), FF([5, 6, 7, 8, 1, 2, 3, 4]))


def test_prover_context_const_and_public() -> None:
    """Fixed columns are arrays, public inputs and challenges are scalars."""
    const_values = FF.Random(8)
    data = ProverData(
        constants={('SEL', 0): const_values},
        challenges={'vc': FF(5)},
        public_inputs={'root': FF(99)},
    )
    ctx = ProverConstraintContext(data)

    assert np.array_equal(ctx.const('SEL'), const_values)
    assert ctx.challenge('vc') == FF(5)
    assert ctx.public('root') == FF(99)


def test_verifier_context_reads_offsets() -> None:
    """VerifierConstraintContext.col reads offset 0, next_col offset 1."""
    data = VerifierData(evals={('a', 0, 0): FF(3), ('a', 0, 1): FF(4), ('SEL', 0, 0): FF(1)})
    ctx = VerifierConstraintContext(data)

    assert ctx.col('a') == FF(3)
    assert ctx.next_col('a') == FF(4)
    assert ctx.const('SEL') == FF(1)


def test_verifier_context_missing_eval_raises() -> None:
    """Reading a column with no evaluation is a KeyError."""
    ctx = VerifierConstraintContext(VerifierData())
    with pytest.raises(KeyError):
        ctx.col('a')


def test_constraint_module_abc() -> None:
    """ConstraintModule is an abstract base class requiring named_constraints."""
    with pytest.raises(TypeError):
        ConstraintModule()


class _TwoGates(ConstraintModule):
    def named_constraints(self, ctx: ConstraintContext):
        return [
            ("product", ctx.col('a') * ctx.col('b') - ctx.col('c')),
            ("sum", ctx.col('a') + ctx.col('b') - ctx.col('d')),
        ]


def test_constraint_polynomial_combines_with_vc() -> None:
    """Gates are folded as C0 * vc + C1."""
    data = VerifierData(
        evals={('a', 0, 0): FF(2), ('b', 0, 0): FF(3), ('c', 0, 0): FF(7), ('d', 0, 0): FF(9)},
        challenges={'vc': FF(10)},
    )
    # product = 6 - 7 = -1, sum = 5 - 9 = -4
    expected = FF(0) - FF(1) * FF(10) - FF(4)
    assert _TwoGates().constraint_polynomial(VerifierConstraintContext(data)) == expected


def test_uniform_constraint_evaluation() -> None:
    """Same constraint code works for both prover and verifier contexts."""
    a_vals = FF([2, 3, 4, 5])
    b_vals = FF([3, 4, 5, 6])
    prover_data = ProverData(
        columns={('a', 0): a_vals, ('b', 0): b_vals, ('c', 0): a_vals * b_vals, ('d', 0): a_vals + b_vals},
        challenges={'vc': FF(17)},
    )
    prover_result = _TwoGates().constraint_polynomial(ProverConstraintContext(prover_data))
    assert np.all(prover_result == 0)

    verifier_data = VerifierData(
        evals={('a', 0, 0): FF(2), ('b', 0, 0): FF(3), ('c', 0, 0): FF(6), ('d', 0, 0): FF(5)},
        challenges={'vc': FF(17)},
    )
    assert _TwoGates().constraint_polynomial(VerifierConstraintContext(verifier_data)) == FF(0)
