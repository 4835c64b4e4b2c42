"""
Owner keys.

A public key is a Pedersen commitment on the odd curve to a PRF key:
``pk = prf_key * B + randomness * B_blinding``. Anyone can rerandomize it
by adding multiples of ``B_blinding``; only the holder of the secret key
can open the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..curves import Point
from ..curve_tree import SelRerandParameters
from ..exceptions import PreconditionViolation
from ..security import RandomnessSource


@dataclass(frozen=True)
class PublicKey:
    """Odd-curve commitment to a PRF key."""

    point: Point

    def to_bytes(self) -> bytes:
        return self.point.to_bytes()


@dataclass(frozen=True)
class SecretKey:
    """
    PRF key and commitment randomness.

    ``randomness`` must be non-zero: with zero randomness the public key
    ``prf_key * B`` is a deterministic function of the PRF key and stops
    hiding it.
    """

    prf_key: int
    randomness: int

    def __post_init__(self):
        if not isinstance(self.prf_key, int) or not isinstance(self.randomness, int):
            raise TypeError("Secret key components must be int")
        if self.randomness == 0:
            raise PreconditionViolation("Secret key randomness must be non-zero")

    def public_key(self, params: SelRerandParameters) -> PublicKey:
        return PublicKey(params.odd_parameters.pc_gens.commit(self.prf_key, self.randomness))

    def __repr__(self) -> str:
        return "SecretKey(<redacted>)"


def generate_keypair(
    params: SelRerandParameters,
    randomness_source: Optional[RandomnessSource] = None,
) -> Tuple[SecretKey, PublicKey]:
    """
    Generate a fresh key pair on the odd curve.

    Example:
        >>> params = SelRerandParameters.new()
        >>> sk, pk = generate_keypair(params)
    """
    rng = randomness_source or RandomnessSource()
    order = params.curve_pair.odd.order
    sk = SecretKey(
        prf_key=rng.get_random_scalar(order),
        randomness=rng.get_random_nonzero_scalar(order),
    )
    return sk, sk.public_key(params)
