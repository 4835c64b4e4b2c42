"""
⚠️ DRAFT — requires crypto review before production use

Fiat-Shamir transcript.

A running SHA3-512 state absorbs length-prefixed ``(label, message)``
pairs. A challenge is the 64-byte digest of a copy of the state (plus a
challenge label) reduced modulo the requested field; the digest is then
absorbed, so later challenges depend on earlier ones.

A transcript is single-owner: the prover and verifier must perform the
exact same sequence of appends, so one instance is never shared between
proof sessions.
"""

import hashlib

from ..config import DOMAIN_SEPARATORS
from ..curves import Point, scalar_to_bytes
from ..exceptions import VerificationError


class Transcript:
    """
    Hash-chain Fiat-Shamir transcript.

    Args:
        label: Protocol label, absorbed first

    Example:
        >>> t = Transcript(b"example")
        >>> t.append_message(b"data", b"hello")
        >>> c = t.challenge_scalar(b"c", 2**255 - 19)
    """

    def __init__(self, label: bytes):
        self._hasher = hashlib.sha3_512()
        self._absorb(DOMAIN_SEPARATORS["transcript"], label)

    def _absorb(self, label: bytes, message: bytes) -> None:
        self._hasher.update(len(label).to_bytes(4, "big"))
        self._hasher.update(label)
        self._hasher.update(len(message).to_bytes(4, "big"))
        self._hasher.update(message)

    def append_message(self, label: bytes, message: bytes) -> None:
        if not isinstance(label, bytes) or not isinstance(message, bytes):
            raise TypeError("Transcript labels and messages must be bytes")
        self._absorb(label, message)

    def append_u64(self, label: bytes, value: int) -> None:
        self._absorb(label, value.to_bytes(8, "little"))

    def append_point(self, label: bytes, point: Point) -> None:
        self._absorb(label, point.to_bytes())

    def validate_and_append_point(self, label: bytes, point: Point) -> None:
        """Append a proof element that must not be the identity."""
        if point.is_identity:
            raise VerificationError()
        self._absorb(label, point.to_bytes())

    def append_scalar(self, label: bytes, value: int) -> None:
        self._absorb(label, scalar_to_bytes(value))

    def challenge_scalar(self, label: bytes, modulus: int) -> int:
        """Derive a challenge in [0, modulus) and ratchet the state."""
        fork = self._hasher.copy()
        fork.update(b"challenge")
        fork.update(len(label).to_bytes(4, "big"))
        fork.update(label)
        digest = fork.digest()
        self._absorb(b"challenge-output", digest)
        return int.from_bytes(digest, "big") % modulus
