"""
Pedersen and Bulletproof generators.

All generators are hash-to-curve outputs of public labels, so nobody knows
a discrete-log relation between any two of them.
"""

from __future__ import annotations

from typing import List, Sequence

from ..config import DEFAULT_GENERATOR_CAPACITY, GENERATOR_SEED_PREFIX
from ..curves import CurveParameters, Point, multiscalar_mul
from ..exceptions import ProofGenerationError


class PedersenGens:
    """
    Base points ``B`` (values) and ``B_blinding`` (blinding factors).

    Example:
        >>> gens = PedersenGens(PALLAS)
        >>> C = gens.commit(42, 7)
    """

    def __init__(self, curve: CurveParameters):
        self.curve = curve
        self.B = curve.hash_to_curve(GENERATOR_SEED_PREFIX + b"pedersen/B")
        self.B_blinding = curve.hash_to_curve(
            GENERATOR_SEED_PREFIX + b"pedersen/B_blinding"
        )

    def commit(self, value: int, blinding: int) -> Point:
        """``value * B + blinding * B_blinding``."""
        return multiscalar_mul(self.curve, [value, blinding], [self.B, self.B_blinding])


class BulletproofGens:
    """
    The ``G`` and ``H`` generator vectors of the inner-product argument.

    ``G`` doubles as the basis for vector commitments. Generators are
    derived lazily, up to ``capacity`` of each.
    """

    def __init__(self, curve: CurveParameters, capacity: int = DEFAULT_GENERATOR_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.curve = curve
        self.capacity = capacity
        self._G: List[Point] = []
        self._H: List[Point] = []

    def _ensure(self, n: int) -> None:
        if n > self.capacity:
            raise ProofGenerationError(
                f"Need {n} generators but capacity is {self.capacity}"
            )
        while len(self._G) < n:
            i = len(self._G).to_bytes(4, "big")
            self._G.append(self.curve.hash_to_curve(GENERATOR_SEED_PREFIX + b"bulletproof/G/" + i))
            self._H.append(self.curve.hash_to_curve(GENERATOR_SEED_PREFIX + b"bulletproof/H/" + i))

    def G(self, n: int) -> Sequence[Point]:
        self._ensure(n)
        return self._G[:n]

    def H(self, n: int) -> Sequence[Point]:
        self._ensure(n)
        return self._H[:n]

    def commit_vec(self, values: Sequence[int], blinding: int, pc_gens: PedersenGens) -> Point:
        """``sum(values[i] * G[i]) + blinding * B_blinding``."""
        G = self.G(len(values))
        return multiscalar_mul(
            self.curve, list(values) + [blinding], list(G) + [pc_gens.B_blinding]
        )
