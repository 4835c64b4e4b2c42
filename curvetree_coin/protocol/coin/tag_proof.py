"""
⚠️ DRAFT — requires crypto review before production use

Spending-tag binding proof.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

The spending tag is the zero-blinded commitment ``T = x^-1 * B`` where
``x`` is the value committed in the rerandomized public key
``V = x * B + s * B_blinding``. The R1CS proof shows that the values
committed in V and T multiply to one, but it cannot see T's blinding.
This Schnorr-style proof closes that gap by proving knowledge of (x, s)
with

    V = x * B + s * B_blinding    and    B = x * T

which forces T to be exactly ``x^-1 * B``.

Protocol (Non-Interactive via Fiat-Shamir):
    1. Nonces k_x, k_s <- Z_q \\ {0}
    2. Announcements A1 = k_x*B + k_s*B_blinding, A2 = k_x*T
    3. c = Hash(B, B_blinding, V, T, A1, A2, context) mod q
    4. z_x = k_x + c*x, z_s = k_s + c*s

    Verifier checks the recomputed challenge (constant time) and
        z_x*B + z_s*B_blinding == A1 + c*V
        z_x*T                  == A2 + c*B
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, Optional

from ..config import DOMAIN_SEPARATORS
from ..curves import Point, multiscalar_mul, scalar_from_bytes, scalar_to_bytes
from ..exceptions import CryptographicError, ProofGenerationError
from ..r1cs import PedersenGens
from ..security import RandomnessSource, constant_time_compare


def _compute_challenge(
    pc_gens: PedersenGens,
    public_key: Point,
    tag: Point,
    A1: Point,
    A2: Point,
    context: bytes,
) -> bytes:
    """Length-prefixed SHA3-512 over all public values; returns the digest."""
    h = hashlib.sha3_512()
    for part in (
        DOMAIN_SEPARATORS["tag_proof"],
        pc_gens.B.to_bytes(),
        pc_gens.B_blinding.to_bytes(),
        public_key.to_bytes(),
        tag.to_bytes(),
        A1.to_bytes(),
        A2.to_bytes(),
        context,
    ):
        h.update(len(part).to_bytes(4, "big"))
        h.update(part)
    return h.digest()


@dataclass
class TagProof:
    """Announcements, challenge and responses."""

    A1: Point
    A2: Point
    c: int
    z_x: int
    z_s: int

    @classmethod
    def create(
        cls,
        pc_gens: PedersenGens,
        public_key: Point,
        tag: Point,
        x: int,
        s: int,
        context: bytes,
        randomness_source: Optional[RandomnessSource] = None,
    ) -> TagProof:
        """
        Prove knowledge of (x, s) for ``public_key`` and ``tag``.

        Args:
            pc_gens: Odd-curve Pedersen generators
            public_key: V = x*B + s*B_blinding
            tag: T = x^-1 * B
            x: Ownership scalar (witness)
            s: Total blinding of V (witness)
            context: Bytes binding the proof to its spend

        Raises:
            ProofGenerationError: If the witness does not match the statement
        """
        curve = pc_gens.curve
        order = curve.order
        x %= order
        s %= order
        if x == 0:
            raise ProofGenerationError("Ownership scalar must be non-zero")
        if pc_gens.commit(x, s) != public_key or tag * x != pc_gens.B:
            raise ProofGenerationError("Tag proof witness does not match the statement")

        rng = randomness_source or RandomnessSource()
        k_x = rng.get_random_nonzero_scalar(order)
        k_s = rng.get_random_nonzero_scalar(order)

        A1 = pc_gens.commit(k_x, k_s)
        A2 = tag * k_x

        digest = _compute_challenge(pc_gens, public_key, tag, A1, A2, context)
        c = int.from_bytes(digest, "big") % order

        return cls(
            A1=A1,
            A2=A2,
            c=c,
            z_x=(k_x + c * x) % order,
            z_s=(k_s + c * s) % order,
        )

    def verify(
        self,
        pc_gens: PedersenGens,
        public_key: Point,
        tag: Point,
        context: bytes,
    ) -> bool:
        """
        Verify the binding between ``public_key`` and ``tag``.

        Returns:
            True if the proof is valid, False otherwise
        """
        curve = pc_gens.curve
        order = curve.order
        for P in (self.A1, self.A2, public_key, tag):
            if P.curve is not curve:
                return False
        if tag.is_identity or public_key.is_identity:
            return False

        digest = _compute_challenge(pc_gens, public_key, tag, self.A1, self.A2, context)
        expected_c = int.from_bytes(digest, "big") % order
        if not constant_time_compare(scalar_to_bytes(expected_c), scalar_to_bytes(self.c % order)):
            return False

        lhs1 = multiscalar_mul(
            curve,
            [self.z_x, self.z_s, -self.c % order],
            [pc_gens.B, pc_gens.B_blinding, public_key],
        )
        if lhs1 != self.A1:
            return False

        lhs2 = multiscalar_mul(curve, [self.z_x, -self.c % order], [tag, pc_gens.B])
        return lhs2 == self.A2

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self) -> Dict[str, bytes]:
        return {
            "A1": self.A1.to_bytes(),
            "A2": self.A2.to_bytes(),
            "c": scalar_to_bytes(self.c),
            "z_x": scalar_to_bytes(self.z_x),
            "z_s": scalar_to_bytes(self.z_s),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, bytes], pc_gens: PedersenGens) -> TagProof:
        curve = pc_gens.curve
        try:
            return cls(
                A1=Point.from_bytes(curve, data["A1"]),
                A2=Point.from_bytes(curve, data["A2"]),
                c=scalar_from_bytes(data["c"], curve.order),
                z_x=scalar_from_bytes(data["z_x"], curve.order),
                z_s=scalar_from_bytes(data["z_s"], curve.order),
            )
        except (KeyError, TypeError) as e:
            raise CryptographicError(f"Malformed tag proof: {e}") from e
