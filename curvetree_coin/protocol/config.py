"""
⚠️ DRAFT — requires crypto review before production use

Cryptographic configuration for the curve-tree coin protocol.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

The protocol needs a 2-cycle of prime-order curves: the base field of one
curve is the scalar field of the other. No OpenSSL named curve provides
that, so the Pasta cycle (Pallas/Vesta) is implemented directly on Python
integers in ``curves.py``.
"""

# ============================================================================
# CURVE SELECTION
# ============================================================================

# Even curve P0 holds coins and leaves, odd curve P1 holds public keys.
EVEN_CURVE_NAME = "pallas"
ODD_CURVE_NAME = "vesta"

# Both curves: y^2 = x^3 + 5, cofactor 1.
PASTA_A = 0
PASTA_B = 5

# Pallas base field / Vesta scalar field
PALLAS_P = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001
# Vesta base field / Pallas scalar field
VESTA_P = 0x40000000000000000000000000000000224698FC0994A8DD8C46EB2100000001

FIELD_BITS = 255
SCALAR_SIZE_BYTES = 32
POINT_SIZE_BYTES = 33  # Compressed point format

# ============================================================================
# GENERATOR SELECTION (Nothing-Up-My-Sleeve)
# ============================================================================

# Every generator is hash-to-curve of a public label (try-and-increment).
GENERATOR_SEED_PREFIX = b"CURVETREE_COIN_V1_GENERATOR_"

# ============================================================================
# HASH FUNCTIONS
# ============================================================================

# Wide output so reductions into ~255-bit fields have negligible bias.
HASH_FUNCTION = "SHA3-512"
HASH_OUTPUT_BITS = 512

DOMAIN_SEPARATOR_PREFIX = b"CURVETREE_COIN_V1_"

DOMAIN_SEPARATORS = {
    "value_commitment": DOMAIN_SEPARATOR_PREFIX + b"VALUE_COMMITMENT",
    "transcript": DOMAIN_SEPARATOR_PREFIX + b"TRANSCRIPT",
    "universal_hash": DOMAIN_SEPARATOR_PREFIX + b"UNIVERSAL_HASH",
    "rerandomization_offset": DOMAIN_SEPARATOR_PREFIX + b"RERAND_OFFSET",
    "tag_proof": DOMAIN_SEPARATOR_PREFIX + b"TAG_PROOF",
    "mint": DOMAIN_SEPARATOR_PREFIX + b"MINT",
    "spend_even": DOMAIN_SEPARATOR_PREFIX + b"SPEND_EVEN",
    "spend_odd": DOMAIN_SEPARATOR_PREFIX + b"SPEND_ODD",
}

# ============================================================================
# PROTOCOL PARAMETERS
# ============================================================================

# Coin values live in [0, 2^RANGE_PROOF_BITS).
RANGE_PROOF_BITS = 64

# Upper bound on the permissible-padding search (expected ~4 attempts).
MAX_PERMISSIBLE_ATTEMPTS = 256

# Rerandomization scalars are proven bit by bit, two bits per window.
RERANDOMIZATION_WINDOW_BITS = 2
RERANDOMIZATION_SCALAR_BITS = 256

DEFAULT_BRANCHING_FACTOR = 4
DEFAULT_TREE_DEPTH = 1

# Bulletproof generators per curve (G and H each).
DEFAULT_GENERATOR_CAPACITY = 2048

# ============================================================================
# SECURITY PARAMETERS
# ============================================================================

BLINDING_FACTOR_BITS = 254
CHALLENGE_SPACE_BITS = 254
RANDOMNESS_SOURCE = "secrets.SystemRandom"  # Cryptographically secure

# ============================================================================
# PROOF SERIALIZATION
# ============================================================================

SERIALIZATION_FORMAT = "CBOR"
PROOF_VERSION = 1  # Increment for breaking changes

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert CHALLENGE_SPACE_BITS >= 128, "Challenge space too small for security"
    assert HASH_OUTPUT_BITS >= 2 * FIELD_BITS, "Hash too narrow for unbiased reduction"
    assert PALLAS_P.bit_length() == FIELD_BITS, "Unexpected Pallas modulus"
    assert VESTA_P.bit_length() == FIELD_BITS, "Unexpected Vesta modulus"
    assert PALLAS_P != VESTA_P, "Cycle curves must have distinct fields"
    assert 0 < RANGE_PROOF_BITS < FIELD_BITS, "Range width must fit the field"
    assert MAX_PERMISSIBLE_ATTEMPTS >= 1, "Padding search needs at least one attempt"
    assert RERANDOMIZATION_WINDOW_BITS == 2, "Only 2-bit windows are supported"
    assert RERANDOMIZATION_SCALAR_BITS % RERANDOMIZATION_WINDOW_BITS == 0
    assert RERANDOMIZATION_SCALAR_BITS > FIELD_BITS, "Window table too short"
    assert DEFAULT_BRANCHING_FACTOR >= 1, "Branching factor must be positive"
    assert DEFAULT_GENERATOR_CAPACITY & (DEFAULT_GENERATOR_CAPACITY - 1) == 0
    assert SERIALIZATION_FORMAT == "CBOR", "Only CBOR serialization is supported"
    return True


# Auto-validate on import
validate_config()
