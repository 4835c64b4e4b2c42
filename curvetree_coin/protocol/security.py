"""
⚠️ DRAFT — requires crypto review before production use

Randomness, hashing into scalar fields, and constant-time comparison for
the curve, transcript and coin layers.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.
"""

import os
import secrets
import hashlib
import hmac
from typing import Optional

from .config import HASH_FUNCTION, DOMAIN_SEPARATOR_PREFIX


# ============================================================================
# RANDOMNESS SOURCE (Fork-Safe)
# ============================================================================


class RandomnessSource:
    """
    Cryptographically secure randomness with fork detection.

    Prevents catastrophic randomness reuse if process forks. A source is
    borrowed by one protocol call at a time; it is not synchronized.

    Example:
        >>> rng = RandomnessSource()
        >>> scalar = rng.get_random_scalar(2**255)
        >>> # After fork, RNG automatically reinitializes
    """

    def __init__(self):
        self._pid = os.getpid()
        self._rng = secrets.SystemRandom()

    def _check_fork(self) -> None:
        if os.getpid() != self._pid:
            self.__init__()

    def get_random_scalar(self, max_value: int) -> int:
        """Uniform scalar in [0, max_value); blinding factors and rerandomizers."""
        if max_value <= 1:
            raise ValueError(f"max_value must be > 1, got {max_value}")
        self._check_fork()
        return self._rng.randrange(0, max_value)

    def get_random_nonzero_scalar(self, max_value: int) -> int:
        """
        Get random scalar in [1, max_value).

        Used for nonces and key randomness, where zero leaks the witness.
        """
        if max_value <= 2:
            raise ValueError(f"max_value must be > 2, got {max_value}")
        self._check_fork()
        return self._rng.randrange(1, max_value)

    def get_random_bytes(self, n: int) -> bytes:
        self._check_fork()
        return secrets.token_bytes(n)


# ============================================================================
# HASH FUNCTIONS
# ============================================================================


def _new_hash():
    if HASH_FUNCTION == "SHA3-512":
        return hashlib.sha3_512()
    return hashlib.sha512()


def hash_to_scalar(
    data: bytes, max_value: int, domain_sep: Optional[bytes] = None
) -> int:
    """
    Hash data to scalar in [0, max_value) with domain separation.

    The 512-bit digest is reduced modulo ``max_value``; for ~255-bit moduli
    the statistical distance from uniform is below 2^-256.

    Args:
        data: Data to hash (must be non-empty)
        max_value: Maximum value (exclusive, must be > 1)
        domain_sep: Optional domain separator (length-prefixed into the hash)

    Returns:
        Scalar in [0, max_value)

    Raises:
        ValueError: If inputs are invalid
        TypeError: If inputs are wrong type
    """
    if not isinstance(data, bytes):
        raise TypeError(f"data must be bytes, got {type(data)}")

    if not data:
        raise ValueError("Data cannot be empty")

    if max_value <= 1:
        raise ValueError(f"max_value must be > 1, got {max_value}")

    h = _new_hash()
    if domain_sep:
        if not isinstance(domain_sep, bytes):
            raise TypeError(f"domain_sep must be bytes, got {type(domain_sep)}")
        h.update(len(domain_sep).to_bytes(4, "big"))
        h.update(domain_sep)
    h.update(len(data).to_bytes(4, "big"))
    h.update(data)

    return int.from_bytes(h.digest(), "big") % max_value


def derive_bytes(label: bytes, counter: int) -> bytes:
    """
    Deterministic 64-byte stream block for nothing-up-my-sleeve derivations.

    Args:
        label: Public label (prefixed with the protocol domain)
        counter: Block counter

    Returns:
        64 bytes of hash output
    """
    h = _new_hash()
    tagged = DOMAIN_SEPARATOR_PREFIX + label
    h.update(len(tagged).to_bytes(4, "big"))
    h.update(tagged)
    h.update(counter.to_bytes(8, "big"))
    return h.digest()


# ============================================================================
# CONSTANT-TIME OPERATIONS
# ============================================================================


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """Compare challenge encodings without an early exit on the first mismatch."""
    return hmac.compare_digest(a, b)
