"""FRI polynomial computation.

The FRI polynomial F combines all opened polynomials into a single
polynomial for the FRI proximity test:

    F(x) = sum_e alpha^e * (P_e(x) - v_e) / (x - xi * w^prime_e)

where e runs over the ev_map, P_e is the committed source polynomial and v_e
the claimed evaluation. F has degree < N exactly when every claim is true.

Like constraint evaluation, the function works on arrays (prover, over the
whole extended domain) and on scalars (verifier, at one query point), so
both sides run the same code.
"""

from typing import Callable, List, Sequence, Union

from primitives.field import FF, GOLDILOCKS_PRIME, get_omega
from protocol.stages import column_index
from protocol.stark_info import EvMap, StarkInfo


def compute_fri_polynomial(
    stark_info: StarkInfo,
    source: Callable[[EvMap], Union[FF, int]],
    evals: Sequence[int],
    alpha: int,
    xi: int,
    x: FF,
) -> FF:
    """Evaluate F at x.

    Args:
        stark_info: Supplies the ev_map
        source: Returns P_e at x for an ev_map entry (array or scalar)
        evals: Claimed evaluations v_e in ev_map order
        alpha: Batching challenge
        xi: Out-of-domain point
        x: Evaluation point(s), an FF scalar or array

    Raises:
        ZeroDivisionError: If x meets an opening point
    """
    w = get_omega(stark_info.n_bits)
    denominators_inv = {}
    for prime in sorted({e.prime for e in stark_info.ev_map}):
        z = FF(xi * pow(w, prime, GOLDILOCKS_PRIME) % GOLDILOCKS_PRIME)
        denominators_inv[prime] = (x - z) ** -1

    alpha_ff = FF(alpha)
    acc = None
    # Horner from the last entry: acc = sum_e alpha^e * term_e
    for entry, v in reversed(list(zip(stark_info.ev_map, evals))):
        term = (FF(int(source(entry))) if _is_scalar(x) else source(entry)) - FF(v)
        term = term * denominators_inv[entry.prime]
        acc = term if acc is None else acc * alpha_ff + term
    return acc


def opened_values_source(stark_info: StarkInfo, trace: List[int], consts: List[int],
                         quotient: List[int]) -> Callable[[EvMap], int]:
    """Build a source function over one query's opened leaf rows."""
    rows = {
        EvMap.Type.cm: trace,
        EvMap.Type.const_: consts,
        EvMap.Type.q: quotient,
    }
    return lambda entry: rows[entry.type][column_index(stark_info, entry)]


def _is_scalar(x) -> bool:
    return getattr(x, "ndim", 0) == 0
