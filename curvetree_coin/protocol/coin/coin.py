"""
⚠️ DRAFT — requires crypto review before production use

Coins, minting and the permissible combiner.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

Minting (even curve P0 for values, odd curve P1 for keys):
    1. randomized_pk = pk + r_pk * B_blinding                      (P1)
    2. value_commitment = value * G[0] + r_v * B_blinding          (P0)
    3. range proof on the committed value variable itself

Combining a ``MintingOutput`` into an accumulator-ready coin:
    1. h = Hash(value_commitment) into P1's scalar field
       pre_pk = randomized_pk + h * B, padded to permissible_pk     (P1)
    2. pre_coin = value_commitment + x(permissible_pk) * G[1],
       padded to permissible_coin                                  (P0)

so ``permissible_coin = commit_vec([value, x(permissible_pk)], r_v + r_coin)``
and ``permissible_pk = (prf_key + h) * B + (s + r_pk + r_ppk) * B_blinding``.
Only ``permissible_coin`` is ever inserted into the curve tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

try:
    import cbor2
except ImportError:
    raise ImportError(
        "cbor2 is required for proof serialization. "
        "Install with: pip install cbor2"
    )

from ..config import (
    DOMAIN_SEPARATORS,
    MAX_PERMISSIBLE_ATTEMPTS,
    PROOF_VERSION,
    RANGE_PROOF_BITS,
)
from ..curve_tree import SelRerandParameters
from ..curves import Point
from ..exceptions import (
    CryptographicError,
    ProtocolInvariantError,
    RangeProofError,
    VerificationError,
)
from ..gadgets import range_proof
from ..r1cs import Prover, R1CSProof, Transcript, Variable, Verifier
from ..security import RandomnessSource, hash_to_scalar
from .keys import PublicKey


def _check_value(value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise RangeProofError(f"Coin value must be int, got {type(value)}")
    if not 0 <= value < (1 << RANGE_PROOF_BITS):
        raise RangeProofError(f"Coin value must be in [0, 2^{RANGE_PROOF_BITS})")


# ============================================================================
# DATA MODEL
# ============================================================================


@dataclass(frozen=True)
class MintingOutput:
    """Public result of minting: value commitment (P0), randomized pk (P1)."""

    value_commitment: Point
    public_key: Point

    def hash_of_value_commitment(self, params: SelRerandParameters) -> int:
        """
        Map the value commitment into the odd curve's scalar field.

        Uses the full 512-bit digest so the reduction bias is negligible.
        """
        return hash_to_scalar(
            self.value_commitment.to_bytes(),
            params.curve_pair.odd.order,
            DOMAIN_SEPARATORS["value_commitment"],
        )

    def combine_into_permissible(
        self,
        params: SelRerandParameters,
        max_attempts: int = MAX_PERMISSIBLE_ATTEMPTS,
    ) -> PermissibleCoin:
        """
        Fold value and public key into one permissible even-curve point.

        Deterministic for a given output and parameters.

        Raises:
            NotPermissible: If a padding search runs out of attempts
        """
        odd = params.odd_parameters
        even = params.even_parameters

        h = self.hash_of_value_commitment(params)
        pre_pk = self.public_key + odd.pc_gens.B * h
        permissible_pk, r_permissible_pk = odd.permissible_commitment(pre_pk, max_attempts)

        pk_x = params.curve_pair.odd_x_to_even_scalar(permissible_pk)
        prf_generator = even.bp_gens.G(2)[1]
        pre_coin = self.value_commitment + prf_generator * pk_x
        permissible_coin, r_permissible_coin = even.permissible_commitment(pre_coin, max_attempts)

        return PermissibleCoin(
            permissible_pk=permissible_pk,
            r_permissible_pk=r_permissible_pk,
            permissible_coin=permissible_coin,
            r_permissible_coin=r_permissible_coin,
        )

    def to_dict(self) -> Dict[str, bytes]:
        return {
            "value_commitment": self.value_commitment.to_bytes(),
            "public_key": self.public_key.to_bytes(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, bytes], params: SelRerandParameters) -> MintingOutput:
        try:
            return cls(
                value_commitment=Point.from_bytes(params.curve_pair.even, data["value_commitment"]),
                public_key=Point.from_bytes(params.curve_pair.odd, data["public_key"]),
            )
        except (KeyError, TypeError) as e:
            raise CryptographicError(f"Malformed minting output: {e}") from e


@dataclass(frozen=True)
class PermissibleCoin:
    """
    Accumulator-ready form of a coin.

    ``permissible_coin`` goes into the tree; the rest is the owner's
    bookkeeping, needed to open it later.
    """

    permissible_pk: Point
    r_permissible_pk: int
    permissible_coin: Point
    r_permissible_coin: int


@dataclass(frozen=True)
class Coin:
    """
    Private record of a minted coin.

    Attributes:
        value: Coin value in [0, 2^64)
        value_randomness: Blinding of the value commitment (P0 scalar)
        pk_randomness: Rerandomization applied to the recipient key (P1 scalar)
    """

    value: int
    value_randomness: int
    pk_randomness: int

    @classmethod
    def new(
        cls,
        value: int,
        pk: PublicKey,
        params: SelRerandParameters,
        randomness_source: Optional[RandomnessSource] = None,
    ) -> Tuple[Coin, MintingOutput]:
        """Create a coin and its public output without any proof."""
        _check_value(value)
        rng = randomness_source or RandomnessSource()
        pair = params.curve_pair

        pk_rerandomization = rng.get_random_scalar(pair.odd.order)
        randomized_pk = cls.rerandomized_pk(pk, pk_rerandomization, params)

        value_randomness = rng.get_random_scalar(pair.even.order)
        value_commitment = params.even_parameters.commit([value], value_randomness)

        coin = cls(
            value=value,
            value_randomness=value_randomness,
            pk_randomness=pk_rerandomization,
        )
        return coin, MintingOutput(value_commitment=value_commitment, public_key=randomized_pk.point)

    @classmethod
    def mint(
        cls,
        value: int,
        pk: PublicKey,
        params: SelRerandParameters,
        prover: Prover,
        randomness_source: Optional[RandomnessSource] = None,
    ) -> Tuple[Coin, MintingOutput, Variable]:
        """
        Create a coin and add its range proof to ``prover``.

        The range gadget consumes the committed variable itself, so the
        proof binds to the published value commitment.

        Returns:
            (coin, minting output, committed value variable)

        Raises:
            RangeProofError: If ``value`` is outside [0, 2^64)
            ProtocolInvariantError: If ``prover`` commits with other generators
        """
        coin, output = cls.new(value, pk, params, randomness_source)

        commitment, variables = prover.commit_vec(
            [value], coin.value_randomness, params.even_parameters.bp_gens
        )
        if commitment != output.value_commitment:
            raise ProtocolInvariantError("Prover commitment does not match the minted value commitment")
        range_proof(prover, variables[0], value, RANGE_PROOF_BITS)

        return coin, output, variables[0]

    @staticmethod
    def rerandomized_pk(
        pk: PublicKey, rerandomization: int, params: SelRerandParameters
    ) -> PublicKey:
        return PublicKey(pk.point + params.odd_parameters.pc_gens.B_blinding * rerandomization)


def verify_mint(
    verifier: Verifier, commitment: Point, n_bits: int = RANGE_PROOF_BITS
) -> Variable:
    """
    Verifier mirror of ``Coin.mint``: the same range gadget on an opaque
    length-1 vector commitment.
    """
    variables = verifier.commit_vec(1, commitment)
    range_proof(verifier, variables[0], None, n_bits)
    return variables[0]


# ============================================================================
# MINT PROOF
# ============================================================================


@dataclass
class MintProof:
    """Minting output plus the R1CS range proof over its value commitment."""

    minting_output: MintingOutput
    r1cs_proof: R1CSProof

    def serialize(self) -> bytes:
        """
        Serialize proof to bytes using CBOR.

        Returns:
            bytes: CBOR-encoded proof
        """
        data = {
            "v": PROOF_VERSION,
            "type": "mint",
            "output": self.minting_output.to_dict(),
            "proof": self.r1cs_proof.to_dict(),
        }
        try:
            return cbor2.dumps(data)
        except Exception as e:
            raise CryptographicError(f"Failed to serialize proof: {e}") from e

    @classmethod
    def deserialize(cls, data: bytes, params: SelRerandParameters) -> MintProof:
        """
        Deserialize proof from CBOR bytes.

        Raises:
            ValueError: If version or type is unsupported
            CryptographicError: If decoding fails
        """
        try:
            obj = cbor2.loads(data)
        except Exception as e:
            raise CryptographicError(f"Failed to deserialize proof: {e}") from e
        if not isinstance(obj, dict) or obj.get("type") != "mint":
            raise ValueError("Invalid proof format: not a mint proof")
        if obj.get("v", 1) != PROOF_VERSION:
            raise ValueError(f"Unsupported proof version: {obj.get('v')}")
        try:
            return cls(
                minting_output=MintingOutput.from_dict(obj["output"], params),
                r1cs_proof=R1CSProof.from_dict(obj["proof"], params.curve_pair.even),
            )
        except KeyError as e:
            raise CryptographicError(f"Malformed mint proof: {e}") from e


def create_mint_proof(
    value: int,
    pk: PublicKey,
    params: SelRerandParameters,
    randomness_source: Optional[RandomnessSource] = None,
) -> Tuple[Coin, MintingOutput, MintProof]:
    """
    Mint a coin for ``pk`` and prove its value is in range.

    Example:
        >>> sk, pk = generate_keypair(params)
        >>> coin, output, proof = create_mint_proof(42, pk, params)
        >>> verify_mint_proof(proof, params)
    """
    rng = randomness_source or RandomnessSource()
    even = params.even_parameters
    prover = Prover(even.pc_gens, Transcript(DOMAIN_SEPARATORS["mint"]), rng)

    coin, output, _ = Coin.mint(value, pk, params, prover, rng)
    prover.transcript.append_point(b"public-key", output.public_key)

    proof = prover.prove(even.bp_gens)
    return coin, output, MintProof(minting_output=output, r1cs_proof=proof)


def verify_mint_proof(proof: MintProof, params: SelRerandParameters) -> None:
    """
    Check a mint proof.

    Raises:
        VerificationError: If the proof is invalid
    """
    even = params.even_parameters
    output = proof.minting_output
    if output.value_commitment.curve is not even.curve:
        raise VerificationError()
    if output.public_key.curve is not params.curve_pair.odd:
        raise VerificationError()

    verifier = Verifier(even.pc_gens, Transcript(DOMAIN_SEPARATORS["mint"]))
    verify_mint(verifier, output.value_commitment)
    verifier.transcript.append_point(b"public-key", output.public_key)
    verifier.verify(proof.r1cs_proof, even.bp_gens)
