"""
⚠️ DRAFT — requires crypto review before production use

Permissible points.

A point (x, y) is permissible under the universal hash U(v) = alpha*v + beta
when U(y) is a square and U(-y) is not. Exactly one of (x, y), (x, -y)
can pass, so inside a circuit the x-coordinate alone pins down the point:
that is what lets tree nodes commit to children by x-coordinate only.

Roughly a quarter of all points are permissible; ``permissible_commitment``
finds one by adding the blinding generator until the predicate holds and
reports how many times it was added.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from ..config import DOMAIN_SEPARATORS, MAX_PERMISSIBLE_ATTEMPTS
from ..curves import CurveParameters, Point
from ..exceptions import NotPermissible
from ..security import hash_to_scalar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UniversalHash:
    """U(v) = alpha * v + beta over the base field of ``curve``."""

    curve: CurveParameters
    alpha: int
    beta: int

    @classmethod
    def derive(cls, curve: CurveParameters) -> UniversalHash:
        """Nothing-up-my-sleeve coefficients from the curve name."""
        domain = DOMAIN_SEPARATORS["universal_hash"]
        alpha = hash_to_scalar(curve.name.encode() + b"/alpha", curve.p - 1, domain) + 1
        beta = hash_to_scalar(curve.name.encode() + b"/beta", curve.p, domain)
        return cls(curve=curve, alpha=alpha, beta=beta)

    def hash(self, value: int) -> int:
        return (self.alpha * value + self.beta) % self.curve.p

    def is_permissible(self, point: Point) -> bool:
        if point.is_identity or point.curve is not self.curve:
            return False
        return self.curve.is_square(self.hash(point.y)) and not self.curve.is_square(
            self.hash(-point.y)
        )

    def witness(self, point: Point) -> int:
        """Square root of U(y), the in-circuit permissibility witness."""
        root = self.curve.sqrt(self.hash(point.y))
        if root is None:
            raise NotPermissible("Point is not permissible")
        return root


def permissible_commitment(
    point: Point,
    h: Point,
    universal_hash: UniversalHash,
    max_attempts: int = MAX_PERMISSIBLE_ATTEMPTS,
) -> Tuple[Point, int]:
    """
    Pad ``point`` with multiples of ``h`` until it is permissible.

    Deterministic: the same inputs always give the same result.

    Args:
        point: Commitment to pad
        h: Blinding generator of the commitment scheme
        universal_hash: Predicate parameters for the point's curve
        max_attempts: Search bound

    Returns:
        (point + r*h, r)

    Raises:
        NotPermissible: If no r < max_attempts works
    """
    candidate = point
    for r in range(max_attempts):
        if universal_hash.is_permissible(candidate):
            if r:
                logger.debug("permissible after %d padding steps on %s", r, point.curve.name)
            return candidate, r
        candidate = candidate + h
    raise NotPermissible(
        f"No permissible point within {max_attempts} attempts; retry with fresh randomness"
    )
