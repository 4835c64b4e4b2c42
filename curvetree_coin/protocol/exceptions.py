"""
⚠️ DRAFT — requires crypto review before production use

Custom exceptions for the coin protocol.

Verifiers only ever raise ``VerificationError`` for a rejected proof; the
message carries no reason, because a detailed failure is itself a leak.
"""


class PrivacyProtocolError(Exception):
    """Base exception for privacy protocol errors."""

    pass


class ProofGenerationError(PrivacyProtocolError):
    """Error during proof generation."""

    pass


class RangeProofError(ProofGenerationError):
    """Range gadget could not be constructed for the given value or width."""

    pass


class NotPermissible(ProofGenerationError):
    """Padding search exhausted; retry with fresh randomness."""

    pass


class UnspendableCoin(ProofGenerationError):
    """Ownership scalar is not invertible; the coin must be re-minted."""

    pass


class ProofVerificationError(PrivacyProtocolError):
    """Error during proof verification."""

    pass


class VerificationError(ProofVerificationError):
    """The proof is invalid."""

    def __init__(self, message: str = "invalid proof"):
        super().__init__(message)


class PreconditionViolation(PrivacyProtocolError, ValueError):
    """A caller broke an input precondition (e.g. empty candidate set)."""

    pass


class ProtocolInvariantError(PrivacyProtocolError):
    """Internal consistency check failed; indicates an integration bug."""

    pass


class ConfigurationError(PrivacyProtocolError):
    """Configuration error."""

    pass


class CryptographicError(PrivacyProtocolError):
    """Cryptographic operation error."""

    pass


class SecurityError(PrivacyProtocolError):
    """Security requirement violation."""

    pass
