"""
Set-membership by polynomial roots.

``select`` proves that ``x`` equals one of ``xs`` by constraining
``prod_i (xs_i - x) == 0``. The product is built left to right, one
multiplication gate per factor after the first, so a list of n candidates
costs n - 1 gates. Large anonymity sets belong in the curve tree, not here.
"""

from typing import Sequence

from ..exceptions import PreconditionViolation
from ..r1cs import ConstraintSystem, LinearCombination, LinearLike


def select(cs: ConstraintSystem, x: LinearLike, xs: Sequence[LinearLike]) -> None:
    """
    Constrain ``x`` to be a member of ``xs``.

    Args:
        cs: Prover or verifier
        x: Candidate value
        xs: Non-empty list of allowed values

    Raises:
        PreconditionViolation: If ``xs`` is empty
    """
    if len(xs) == 0:
        raise PreconditionViolation("select requires at least one candidate")

    x = LinearCombination.from_value(x)
    product = LinearCombination.from_value(xs[0]) - x
    for candidate in xs[1:]:
        _, _, out = cs.multiply(product, LinearCombination.from_value(candidate) - x)
        product = LinearCombination.from_value(out)
    cs.constrain(product)
