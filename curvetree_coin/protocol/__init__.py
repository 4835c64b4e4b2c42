"""Public API for the curvetree-coin protocol.

Importing this package runs ``config.validate_config()`` once, so a
broken parameter set fails at import time rather than mid-proof.
"""
from __future__ import annotations

from .coin import (
    Coin,
    MintingOutput,
    MintProof,
    PermissibleCoin,
    PublicKey,
    SecretKey,
    SpendingInfo,
    SpendProof,
    create_mint_proof,
    create_spend_proof,
    generate_keypair,
    is_double_spend,
    verify_mint_proof,
    verify_spend_proof,
)
from .curve_tree import CurveTree, SelRerandParameters
from .curves import PALLAS, PASTA_CYCLE, VESTA, CurvePair, Point
from .exceptions import (
    NotPermissible,
    PreconditionViolation,
    PrivacyProtocolError,
    ProofGenerationError,
    ProtocolInvariantError,
    UnspendableCoin,
    VerificationError,
)
from .r1cs import Prover, Transcript, Verifier

__all__ = [
    "Coin",
    "CurvePair",
    "CurveTree",
    "MintProof",
    "MintingOutput",
    "NotPermissible",
    "PALLAS",
    "PASTA_CYCLE",
    "PermissibleCoin",
    "Point",
    "PreconditionViolation",
    "PrivacyProtocolError",
    "ProofGenerationError",
    "ProtocolInvariantError",
    "Prover",
    "PublicKey",
    "SecretKey",
    "SelRerandParameters",
    "SpendProof",
    "SpendingInfo",
    "Transcript",
    "UnspendableCoin",
    "VerificationError",
    "Verifier",
    "create_mint_proof",
    "create_spend_proof",
    "generate_keypair",
    "is_double_spend",
    "verify_mint_proof",
    "verify_spend_proof",
]
