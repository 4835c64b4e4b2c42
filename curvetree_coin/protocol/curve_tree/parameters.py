"""
Per-curve parameters for select-and-rerandomize.

``SingleLayerParameters`` bundles what a tree layer on one curve needs:
Pedersen and Bulletproof generators, the universal hash, and the
fixed-base table used to prove rerandomizations in-circuit.
``SelRerandParameters`` holds one layer per curve of the cycle.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..config import (
    DEFAULT_GENERATOR_CAPACITY,
    DOMAIN_SEPARATORS,
    MAX_PERMISSIBLE_ATTEMPTS,
    RERANDOMIZATION_SCALAR_BITS,
    RERANDOMIZATION_WINDOW_BITS,
)
from ..curves import PASTA_CYCLE, CurvePair, CurveParameters, Point, batch_sum
from ..exceptions import ConfigurationError, SecurityError
from ..r1cs import BulletproofGens, PedersenGens
from .permissible import UniversalHash, permissible_commitment


class RerandomizationTable:
    """
    Window table for proving ``P' = P + r * B_blinding``.

    Window j covers bits 2j, 2j+1 of r. Its entries are
    ``T_j(k) = O_j + k * 4^j * B_blinding`` for k in 0..3, where the O_j are
    hash-derived offsets that keep every incomplete addition away from its
    exceptional cases. Adding all windows yields ``P' + sum_j O_j``.

    ``x_coeffs[j]``/``y_coeffs[j]`` are (c0, c1, c2, c3) with
    ``coord(T_j(b0 + 2 b1)) = c0 + c1 b0 + c2 b1 + c3 b0 b1``.
    """

    def __init__(self, curve: CurveParameters, h: Point):
        p = curve.p
        domain = DOMAIN_SEPARATORS["rerandomization_offset"]
        self.windows = RERANDOMIZATION_SCALAR_BITS // RERANDOMIZATION_WINDOW_BITS
        self.entries: List[Tuple[Point, Point, Point, Point]] = []
        self.x_coeffs: List[Tuple[int, int, int, int]] = []
        self.y_coeffs: List[Tuple[int, int, int, int]] = []

        base = h
        offsets = []
        for j in range(self.windows):
            offset = curve.hash_to_curve(domain + j.to_bytes(4, "big"))
            offsets.append(offset)
            e1 = offset + base
            e2 = e1 + base
            e3 = e2 + base
            entry = (offset, e1, e2, e3)
            self.entries.append(entry)
            self.x_coeffs.append(_bilinear([e.x for e in entry], p))
            self.y_coeffs.append(_bilinear([e.y for e in entry], p))
            base = base + base
            base = base + base

        self.offset_sum = batch_sum(curve, offsets)


def _bilinear(v: Sequence[int], p: int) -> Tuple[int, int, int, int]:
    v00, v10, v01, v11 = v
    return (v00 % p, (v10 - v00) % p, (v01 - v00) % p, (v11 - v10 - v01 + v00) % p)


class SingleLayerParameters:
    """
    Everything a tree layer on ``curve`` needs.

    Args:
        curve: Curve of the layer's points
        capacity: Bulletproof generator capacity
    """

    def __init__(self, curve: CurveParameters, capacity: int = DEFAULT_GENERATOR_CAPACITY):
        self.curve = curve
        self.pc_gens = PedersenGens(curve)
        self.bp_gens = BulletproofGens(curve, capacity)
        self.universal_hash = UniversalHash.derive(curve)
        self._table = None

        B, B_blinding = self.pc_gens.B, self.pc_gens.B_blinding
        if B.is_identity or B_blinding.is_identity or B == B_blinding:
            raise SecurityError(
                f"Pedersen generators on {curve.name} must be distinct non-identity points"
            )

    @property
    def rerandomization_table(self) -> RerandomizationTable:
        if self._table is None:
            self._table = RerandomizationTable(self.curve, self.pc_gens.B_blinding)
        return self._table

    def commit(self, values: Sequence[int], blinding: int) -> Point:
        """Vector commitment over this layer's generators."""
        return self.bp_gens.commit_vec(values, blinding, self.pc_gens)

    def is_permissible(self, point: Point) -> bool:
        return self.universal_hash.is_permissible(point)

    def permissible_commitment(
        self, point: Point, max_attempts: int = MAX_PERMISSIBLE_ATTEMPTS
    ) -> Tuple[Point, int]:
        return permissible_commitment(
            point, self.pc_gens.B_blinding, self.universal_hash, max_attempts
        )


class SelRerandParameters:
    """
    Layer parameters for both curves of the cycle.

    Example:
        >>> params = SelRerandParameters.new(1024)
        >>> params.even_parameters.curve.name
        'pallas'
    """

    def __init__(
        self,
        curve_pair: CurvePair,
        even_parameters: SingleLayerParameters,
        odd_parameters: SingleLayerParameters,
    ):
        if even_parameters.curve is not curve_pair.even or odd_parameters.curve is not curve_pair.odd:
            raise ConfigurationError("Layer parameters do not match the curve pair")
        self.curve_pair = curve_pair
        self.even_parameters = even_parameters
        self.odd_parameters = odd_parameters

    @classmethod
    def new(
        cls,
        capacity: int = DEFAULT_GENERATOR_CAPACITY,
        curve_pair: CurvePair = PASTA_CYCLE,
    ) -> SelRerandParameters:
        return cls(
            curve_pair,
            SingleLayerParameters(curve_pair.even, capacity),
            SingleLayerParameters(curve_pair.odd, capacity),
        )

    def layer_for(self, curve: CurveParameters) -> SingleLayerParameters:
        if curve is self.curve_pair.even:
            return self.even_parameters
        if curve is self.curve_pair.odd:
            return self.odd_parameters
        raise ConfigurationError(f"{curve.name} is not part of this cycle")

    def layer_for_level(self, level: int) -> SingleLayerParameters:
        """Leaves (level 0) are on the even curve; curves alternate upward."""
        return self.even_parameters if level % 2 == 0 else self.odd_parameters
