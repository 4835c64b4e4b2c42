"""
⚠️ DRAFT — requires crypto review before production use

In-circuit select-and-rerandomize.

A point on curve C is handled by the constraint system over C's base
field (the scalar field of C's cycle partner), so its coordinates are
native circuit values.

``permissible_point_gadget`` (4 gates)
    x^2, x^3, y^2 = x^3 + a x + b, and w^2 = U(y). The last one proves
    permissibility, so x alone determines y.

``rerandomize_gadget`` (6 gates per 2-bit window)
    Proves P' = P + r * B_blinding with the window table of
    ``RerandomizationTable``. Per window: two boolean gates, one gate for
    b0*b1 (table entries are bilinear in the bits), and three gates for an
    incomplete affine addition acc + T written so every linear combination
    stays bounded in size:

        (lam, d, o1) = gate(lam, tx - ax)    =>  ax = tx - d,  ay = ty - o1
        lam^2        = gate(lam, lam)        =>  x3 = lam^2 + d - 2 tx
        o3           = gate(lam, ax - x3)    =>  y3 = o3 - ay

    The final accumulator must equal P' + sum_j O_j.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from ..curves import Point
from ..exceptions import (
    ConfigurationError,
    ProofGenerationError,
    ProtocolInvariantError,
    VerificationError,
)
from ..gadgets import select
from ..r1cs import ConstraintSystem, LinearCombination, LinearLike
from .parameters import SingleLayerParameters


def _check_field(cs: ConstraintSystem, layer: SingleLayerParameters) -> None:
    if cs.curve.order != layer.curve.p:
        raise ConfigurationError(
            f"{layer.curve.name} points need a circuit over its base field"
        )


def _allocate_bit(cs: ConstraintSystem, bit: Optional[int]) -> LinearCombination:
    assignment = None if bit is None else (1 - bit, bit)
    left, right, out = cs.allocate_multiplier(assignment)
    cs.constrain(out)
    cs.constrain(left + (right - 1))
    return LinearCombination.from_value(right)


def _lookup(coeffs: Tuple[int, int, int, int], b0, b1, b01) -> LinearCombination:
    c0, c1, c2, c3 = coeffs
    return b0 * c1 + b1 * c2 + b01 * c3 + c0


# ============================================================================
# PERMISSIBLE POINT
# ============================================================================


def permissible_point_gadget(
    cs: ConstraintSystem,
    layer: SingleLayerParameters,
    point: Optional[Point] = None,
) -> Tuple[LinearCombination, LinearCombination]:
    """
    Allocate an on-curve permissible point.

    Args:
        cs: Constraint system over ``layer.curve``'s base field
        layer: Parameters of the point's curve
        point: Witness (prover only)

    Returns:
        (x, y) as linear combinations

    Raises:
        ProofGenerationError: If the witness point is not permissible
    """
    _check_field(cs, layer)
    curve = layer.curve
    uh = layer.universal_hash

    if point is None:
        x = y = w = None
    else:
        if point.curve is not curve or not uh.is_permissible(point):
            raise ProofGenerationError("Witness point is not permissible")
        x, y = point.x, point.y
        w = uh.witness(point)

    x_l, x_r, x_sq = cs.allocate_multiplier(None if x is None else (x, x))
    cs.constrain(x_l - x_r)
    _, _, x_cu = cs.multiply(x_sq, x_l)

    y_l, y_r, y_sq = cs.allocate_multiplier(None if y is None else (y, y))
    cs.constrain(y_l - y_r)
    cs.constrain(y_sq - x_cu - x_l * curve.a - curve.b)

    w_l, w_r, w_sq = cs.allocate_multiplier(None if w is None else (w, w))
    cs.constrain(w_l - w_r)
    cs.constrain(w_sq - y_l * uh.alpha - uh.beta)

    return LinearCombination.from_value(x_l), LinearCombination.from_value(y_l)


# ============================================================================
# RERANDOMIZATION
# ============================================================================


def rerandomize_gadget(
    cs: ConstraintSystem,
    layer: SingleLayerParameters,
    x: LinearLike,
    y: LinearLike,
    rerandomized_point: Point,
    point: Optional[Point] = None,
    rerandomization: Optional[int] = None,
) -> None:
    """
    Constrain ``rerandomized_point == (x, y) + r * B_blinding``.

    Args:
        cs: Constraint system over ``layer.curve``'s base field
        layer: Parameters of the point's curve
        x, y: In-circuit coordinates of the original point
        rerandomized_point: Public rerandomized point
        point: Witness point (prover only)
        rerandomization: Witness scalar r (prover only)

    Raises:
        ProofGenerationError: If the prover hits an exceptional addition
        ProtocolInvariantError: If the witnesses do not match the public point
        VerificationError: If a verifier is given an exceptional public point
    """
    _check_field(cs, layer)
    curve = layer.curve
    p = curve.p
    table = layer.rerandomization_table
    proving = point is not None

    if proving:
        if rerandomization is None:
            raise ProofGenerationError("Prover needs the rerandomization scalar")
        r = rerandomization % curve.order
        if point + layer.pc_gens.B_blinding * r != rerandomized_point:
            raise ProtocolInvariantError("Rerandomized point does not match its witness")
        acc = point

    ax = LinearCombination.from_value(x)
    ay = LinearCombination.from_value(y)

    for j in range(table.windows):
        if proving:
            bit0 = (r >> (2 * j)) & 1
            bit1 = (r >> (2 * j + 1)) & 1
        else:
            bit0 = bit1 = None

        b0 = _allocate_bit(cs, bit0)
        b1 = _allocate_bit(cs, bit1)
        _, _, b01 = cs.multiply(b0, b1)

        tx = _lookup(table.x_coeffs[j], b0, b1, b01)
        ty = _lookup(table.y_coeffs[j], b0, b1, b01)

        if proving:
            T = table.entries[j][bit0 + 2 * bit1]
            if acc.is_identity or acc.x == T.x:
                raise ProofGenerationError("Exceptional case in incomplete addition")
            d = (T.x - acc.x) % p
            lam = (T.y - acc.y) * pow(d, -1, p) % p
            lam_var, d_var, o1 = cs.allocate_multiplier((lam, d))
            acc = acc + T
        else:
            lam_var, d_var, o1 = cs.allocate_multiplier(None)

        cs.constrain(tx - d_var - ax)
        cs.constrain(ty - o1 - ay)

        _, _, lam_sq = cs.multiply(lam_var, lam_var)
        x3 = lam_sq + d_var - tx * 2
        _, _, o3 = cs.multiply(lam_var, tx - d_var - x3)
        y3 = o3 - ty + o1

        ax, ay = x3, y3

    target = rerandomized_point + table.offset_sum
    if target.is_identity:
        if not proving:
            raise VerificationError()
        raise ProofGenerationError("Exceptional rerandomization target")
    if proving and acc != target:
        raise ProtocolInvariantError("Window accumulation does not reach the target")

    cs.constrain(ax - target.x)
    cs.constrain(ay - target.y)


# ============================================================================
# SELECT AND RERANDOMIZE
# ============================================================================


def single_level_select_and_rerandomize(
    cs: ConstraintSystem,
    layer: SingleLayerParameters,
    rerandomized_point: Point,
    xs: Sequence[LinearLike],
    point: Optional[Point] = None,
    rerandomization: Optional[int] = None,
) -> LinearCombination:
    """
    Prove that ``rerandomized_point`` rerandomizes a permissible point
    whose x-coordinate is one of ``xs``.

    Args:
        cs: Constraint system over ``layer.curve``'s base field
        layer: Parameters of the selected point's curve
        rerandomized_point: Public output point
        xs: Candidate x-coordinates (committed variables)
        point: Selected point (prover only)
        rerandomization: Scalar with ``rerandomized_point = point + r * B_blinding``

    Returns:
        The in-circuit x-coordinate of the selected point
    """
    x, y = permissible_point_gadget(cs, layer, point)
    select(cs, x, xs)
    rerandomize_gadget(cs, layer, x, y, rerandomized_point, point, rerandomization)
    return x
