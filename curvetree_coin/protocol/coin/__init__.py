"""
Coins: keys, minting, the permissible combiner and spending.
"""

from .blinding import BlindingTotal
from .coin import (
    Coin,
    MintingOutput,
    MintProof,
    PermissibleCoin,
    create_mint_proof,
    verify_mint,
    verify_mint_proof,
)
from .keys import PublicKey, SecretKey, generate_keypair
from .spend import (
    SpendingInfo,
    SpendOutput,
    SpendProof,
    create_spend_proof,
    is_double_spend,
    spend_context,
    verify_spend,
    verify_spend_proof,
)
from .tag_proof import TagProof

__all__ = [
    "BlindingTotal",
    "Coin",
    "MintProof",
    "MintingOutput",
    "PermissibleCoin",
    "PublicKey",
    "SecretKey",
    "SpendOutput",
    "SpendProof",
    "SpendingInfo",
    "TagProof",
    "create_mint_proof",
    "create_spend_proof",
    "generate_keypair",
    "is_double_spend",
    "spend_context",
    "verify_mint",
    "verify_mint_proof",
    "verify_spend",
    "verify_spend_proof",
]
