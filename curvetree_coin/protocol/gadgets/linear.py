"""
Linear relations over jointly opened vector-commitment entries.

Constraining a linear combination to zero is free; only the genuinely
multiplicative relation in ``product_of_sums_gadget`` costs a gate.
"""

from ..r1cs import ConstraintSystem, LinearLike


def equality_gadget(cs: ConstraintSystem, d1: LinearLike, d2: LinearLike) -> None:
    """``d1 == d2``."""
    cs.constrain(d1 - d2)


def vector_do_nothing_gadget(
    cs: ConstraintSystem,
    a1: LinearLike,
    a2: LinearLike,
    a3: LinearLike,
    a4: LinearLike,
    a5: LinearLike,
    d1: LinearLike,
    d2: LinearLike,
) -> None:
    """Opens a1..a5 without relating them; only ``d1 == d2`` is enforced."""
    equality_gadget(cs, d1, d2)


def chained_sum_gadget(
    cs: ConstraintSystem,
    a1: LinearLike,
    a2: LinearLike,
    a3: LinearLike,
    a4: LinearLike,
    a5: LinearLike,
    d1: LinearLike,
    d2: LinearLike,
) -> None:
    """
    Enforce ``a1 = a2 = a3``, ``a4 = a1 + a2 + a3``,
    ``d1 = a1 + a2 + a3 + a4 + a5`` and ``d1 = d2``.
    """
    equality_gadget(cs, a1, a2)
    equality_gadget(cs, a2, a3)
    equality_gadget(cs, a4, a1 + a2 + a3)
    equality_gadget(cs, d1, a1 + a2 + a3 + a4 + a5)
    equality_gadget(cs, d1, d2)


def product_of_sums_gadget(
    cs: ConstraintSystem,
    a1: LinearLike,
    a2: LinearLike,
    b1: LinearLike,
    b2: LinearLike,
    c1: LinearLike,
    c2: LinearLike,
) -> None:
    """``(a1 + a2) * (b1 + b2) == c1 + c2`` in one gate."""
    _, _, o = cs.multiply(a1 + a2, b1 + b2)
    cs.constrain(o - c1 - c2)
