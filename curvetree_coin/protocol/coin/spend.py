"""
⚠️ DRAFT — requires crypto review before production use

Spending a coin.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

``SpendingInfo.prove_spend`` runs jointly on an even-curve and an
odd-curve prover:

    1. curve tree: select-and-rerandomize down to the coin's leaf
    2. even: re-open the rerandomized leaf as commit_vec([value, x(ppk)])
       with blinding r_v + r_coin + r_path; must equal the path's leaf
    3. even: select-and-rerandomize the permissible pk against the
       second coin variable, with a fresh rerandomization r_fresh
    4. odd: commit x = prf_key + Hash(value_commitment) with blinding
       s + r_pk + r_ppk + r_fresh; must equal the rerandomized pk
    5. odd: tag = commit(x^-1, 0), constrained by x * x^-1 = 1, plus a
       ``TagProof`` showing the tag carries no blinding
    6. output the path, the value variable and the tag

Equal x always gives equal tags, so a second spend of the same coin is
caught by looking the tag up in the set of seen tags.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

try:
    import cbor2
except ImportError:
    raise ImportError(
        "cbor2 is required for proof serialization. "
        "Install with: pip install cbor2"
    )

from ..config import DOMAIN_SEPARATORS, PROOF_VERSION
from ..curve_tree import (
    CurveTree,
    SelectAndRerandomizePath,
    SelRerandParameters,
    select_and_rerandomize_verifier_gadget,
    single_level_select_and_rerandomize,
)
from ..curves import Point
from ..exceptions import (
    CryptographicError,
    PreconditionViolation,
    ProtocolInvariantError,
    UnspendableCoin,
    VerificationError,
)
from ..r1cs import Prover, R1CSProof, Transcript, Variable, Verifier
from ..security import RandomnessSource
from .blinding import BlindingTotal
from .coin import Coin, MintingOutput, PermissibleCoin
from .keys import PublicKey, SecretKey
from .tag_proof import TagProof

logger = logging.getLogger(__name__)


def spend_context(root: Point, path: SelectAndRerandomizePath) -> bytes:
    """Bytes binding a tag proof to one membership path."""
    parts = [root.to_bytes()]
    parts += [P.to_bytes() for P in path.even_commitments]
    parts += [P.to_bytes() for P in path.odd_commitments]
    return b"".join(parts)


@dataclass
class SpendOutput:
    """Result of ``prove_spend``; everything but ``value_variable`` is public."""

    path: SelectAndRerandomizePath
    value_variable: Variable
    spending_tag: Point
    rerandomized_public_key: Point
    tag_proof: TagProof


@dataclass
class SpendingInfo:
    """
    All secret material needed to spend one coin. Single use.

    Attributes:
        index: Leaf index of ``permissible_coin.permissible_coin`` in the tree
        coin: Private coin record
        minting_output: Public minting output of the coin
        permissible_coin: Combined form (with padding randomness)
        randomized_pk: The public key as published in ``minting_output``
        sk: Owner's secret key
    """

    index: int
    coin: Coin
    minting_output: MintingOutput
    permissible_coin: PermissibleCoin
    randomized_pk: PublicKey
    sk: SecretKey
    _consumed: bool = field(default=False, init=False, repr=False)

    # ========================================================================
    # BLINDING TOTALS
    # ========================================================================

    def leaf_blinding(self, path_rerandomization: int, params: SelRerandParameters) -> BlindingTotal:
        """Total blinding of the rerandomized leaf."""
        return (
            BlindingTotal(params.curve_pair.even.order)
            .apply_commitment_randomness(self.coin.value_randomness)
            .apply_padding(self.permissible_coin.r_permissible_coin)
            .apply_path_rerandomization(path_rerandomization)
        )

    def ownership_blinding(self, fresh_rerandomization: int, params: SelRerandParameters) -> BlindingTotal:
        """Total blinding of the freshly rerandomized public key."""
        return (
            BlindingTotal(params.curve_pair.odd.order)
            .apply_commitment_randomness(self.sk.randomness)
            .apply_rerandomization(self.coin.pk_randomness)
            .apply_padding(self.permissible_coin.r_permissible_pk)
            .apply_rerandomization(fresh_rerandomization)
        )

    def ownership_scalar(self, params: SelRerandParameters) -> int:
        """x = prf_key + Hash(value_commitment) in the odd scalar field."""
        order = params.curve_pair.odd.order
        return (self.sk.prf_key + self.minting_output.hash_of_value_commitment(params)) % order

    # ========================================================================
    # PROVER
    # ========================================================================

    def prove_spend(
        self,
        even_prover: Prover,
        odd_prover: Prover,
        params: SelRerandParameters,
        curve_tree: CurveTree,
        randomness_source: Optional[RandomnessSource] = None,
    ) -> SpendOutput:
        """
        Add the spend relation to both provers.

        Raises:
            PreconditionViolation: If this info was already used, or the
                index is out of range
            UnspendableCoin: If x = 0
            ProtocolInvariantError: If the coin does not open the path leaf
                or the key does not open the rerandomized public key
        """
        if self._consumed:
            raise PreconditionViolation("SpendingInfo has already been used")
        self._consumed = True

        rng = randomness_source or RandomnessSource()
        pair = params.curve_pair
        even = params.even_parameters
        odd = params.odd_parameters
        permissible = self.permissible_coin

        if self.randomized_pk.point != self.minting_output.public_key:
            raise ProtocolInvariantError("Randomized key does not match the minting output")

        x = self.ownership_scalar(params)
        if x == 0:
            raise UnspendableCoin("Ownership scalar is zero; re-mint the coin")

        # 1. membership path
        path, path_rerandomization = curve_tree.select_and_rerandomize_prover_gadget(
            self.index, even_prover, odd_prover, rng
        )

        # 2. open the rerandomized leaf
        pk_x = pair.odd_x_to_even_scalar(permissible.permissible_pk)
        leaf_blinding = self.leaf_blinding(path_rerandomization, params)
        rerandomized_leaf, coin_variables = even_prover.commit_vec(
            [self.coin.value, pk_x], int(leaf_blinding), even.bp_gens
        )
        if rerandomized_leaf != path.get_rerandomized_leaf():
            raise ProtocolInvariantError("Coin does not open the membership path leaf")

        # 3. bind a fresh rerandomization of the permissible pk to the coin
        fresh = rng.get_random_scalar(pair.odd.order)
        rerandomized_pk = permissible.permissible_pk + odd.pc_gens.B_blinding * fresh
        single_level_select_and_rerandomize(
            even_prover,
            odd,
            rerandomized_pk,
            [coin_variables[1]],
            permissible.permissible_pk,
            fresh,
        )

        # 4. ownership
        ownership_blinding = self.ownership_blinding(fresh, params)
        committed_pk, x_var = odd_prover.commit(x, int(ownership_blinding))
        if committed_pk != rerandomized_pk:
            raise ProtocolInvariantError("Secret key does not open the rerandomized public key")

        # 5. spending tag
        x_inverse = pow(x, -1, pair.odd.order)
        spending_tag, x_inverse_var = odd_prover.commit(x_inverse, 0)
        _, _, product = odd_prover.multiply(x_var, x_inverse_var)
        odd_prover.constrain(product - 1)

        tag_proof = TagProof.create(
            odd.pc_gens,
            rerandomized_pk,
            spending_tag,
            x,
            int(ownership_blinding),
            spend_context(curve_tree.root, path),
            rng,
        )

        logger.debug(
            "spend relation built: %d even gates, %d odd gates",
            even_prover.multipliers_len(), odd_prover.multipliers_len(),
        )
        return SpendOutput(
            path=path,
            value_variable=coin_variables[0],
            spending_tag=spending_tag,
            rerandomized_public_key=rerandomized_pk,
            tag_proof=tag_proof,
        )


# ============================================================================
# VERIFIER
# ============================================================================


def verify_spend(
    even_verifier: Verifier,
    odd_verifier: Verifier,
    params: SelRerandParameters,
    root: Point,
    branching: int,
    depth: int,
    path: SelectAndRerandomizePath,
    rerandomized_public_key: Point,
    spending_tag: Point,
) -> Variable:
    """
    Verifier mirror of ``SpendingInfo.prove_spend``.

    Returns:
        The value variable of the spent coin, for further constraints

    Raises:
        VerificationError: If the public inputs are malformed
    """
    pair = params.curve_pair
    if rerandomized_public_key.curve is not pair.odd or spending_tag.curve is not pair.odd:
        raise VerificationError()

    rerandomized_leaf = select_and_rerandomize_verifier_gadget(
        root, path, even_verifier, odd_verifier, params, branching, depth
    )

    coin_variables = even_verifier.commit_vec(2, rerandomized_leaf)
    single_level_select_and_rerandomize(
        even_verifier, params.odd_parameters, rerandomized_public_key, [coin_variables[1]]
    )

    x_var = odd_verifier.commit(rerandomized_public_key)
    x_inverse_var = odd_verifier.commit(spending_tag)
    _, _, product = odd_verifier.multiply(x_var, x_inverse_var)
    odd_verifier.constrain(product - 1)

    return coin_variables[0]


# ============================================================================
# SPEND PROOF
# ============================================================================


@dataclass
class SpendProof:
    """Everything a verifier needs besides the tree root and shape."""

    path: SelectAndRerandomizePath
    rerandomized_public_key: Point
    spending_tag: Point
    tag_proof: TagProof
    even_proof: R1CSProof
    odd_proof: R1CSProof

    @property
    def tag_bytes(self) -> bytes:
        return self.spending_tag.to_bytes()

    def serialize(self) -> bytes:
        """
        Serialize proof to bytes using CBOR.

        Returns:
            bytes: CBOR-encoded proof
        """
        data = {
            "v": PROOF_VERSION,
            "type": "spend",
            "path": self.path.to_dict(),
            "rerandomized_public_key": self.rerandomized_public_key.to_bytes(),
            "spending_tag": self.spending_tag.to_bytes(),
            "tag_proof": self.tag_proof.to_dict(),
            "even_proof": self.even_proof.to_dict(),
            "odd_proof": self.odd_proof.to_dict(),
        }
        try:
            return cbor2.dumps(data)
        except Exception as e:
            raise CryptographicError(f"Failed to serialize proof: {e}") from e

    @classmethod
    def deserialize(cls, data: bytes, params: SelRerandParameters) -> SpendProof:
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
        if not isinstance(obj, dict) or obj.get("type") != "spend":
            raise ValueError("Invalid proof format: not a spend proof")
        if obj.get("v", 1) != PROOF_VERSION:
            raise ValueError(f"Unsupported proof version: {obj.get('v')}")

        pair = params.curve_pair
        try:
            return cls(
                path=SelectAndRerandomizePath.from_dict(obj["path"], params),
                rerandomized_public_key=Point.from_bytes(pair.odd, obj["rerandomized_public_key"]),
                spending_tag=Point.from_bytes(pair.odd, obj["spending_tag"]),
                tag_proof=TagProof.from_dict(obj["tag_proof"], params.odd_parameters.pc_gens),
                even_proof=R1CSProof.from_dict(obj["even_proof"], pair.even),
                odd_proof=R1CSProof.from_dict(obj["odd_proof"], pair.odd),
            )
        except (KeyError, TypeError) as e:
            raise CryptographicError(f"Malformed spend proof: {e}") from e


def _spend_transcripts(root: Point):
    even = Transcript(DOMAIN_SEPARATORS["spend_even"])
    odd = Transcript(DOMAIN_SEPARATORS["spend_odd"])
    even.append_point(b"root", root)
    odd.append_point(b"root", root)
    return even, odd


def create_spend_proof(
    spending_info: SpendingInfo,
    params: SelRerandParameters,
    curve_tree: CurveTree,
    randomness_source: Optional[RandomnessSource] = None,
) -> SpendProof:
    """
    Build and finish both R1CS proofs for one spend.

    Example:
        >>> proof = create_spend_proof(info, params, tree)
        >>> verify_spend_proof(proof, params, tree.root, tree.branching, tree.depth)
    """
    rng = randomness_source or RandomnessSource()
    even_transcript, odd_transcript = _spend_transcripts(curve_tree.root)
    even_prover = Prover(params.even_parameters.pc_gens, even_transcript, rng)
    odd_prover = Prover(params.odd_parameters.pc_gens, odd_transcript, rng)

    output = spending_info.prove_spend(even_prover, odd_prover, params, curve_tree, rng)

    even_proof = even_prover.prove(params.even_parameters.bp_gens)
    odd_proof = odd_prover.prove(params.odd_parameters.bp_gens)

    return SpendProof(
        path=output.path,
        rerandomized_public_key=output.rerandomized_public_key,
        spending_tag=output.spending_tag,
        tag_proof=output.tag_proof,
        even_proof=even_proof,
        odd_proof=odd_proof,
    )


def verify_spend_proof(
    proof: SpendProof,
    params: SelRerandParameters,
    root: Point,
    branching: int,
    depth: int,
) -> None:
    """
    Check a spend proof against a tree root.

    Raises:
        VerificationError: If the proof is invalid
    """
    odd = params.odd_parameters
    if not proof.tag_proof.verify(
        odd.pc_gens,
        proof.rerandomized_public_key,
        proof.spending_tag,
        spend_context(root, proof.path),
    ):
        raise VerificationError()

    even_transcript, odd_transcript = _spend_transcripts(root)
    even_verifier = Verifier(params.even_parameters.pc_gens, even_transcript)
    odd_verifier = Verifier(odd.pc_gens, odd_transcript)

    verify_spend(
        even_verifier,
        odd_verifier,
        params,
        root,
        branching,
        depth,
        proof.path,
        proof.rerandomized_public_key,
        proof.spending_tag,
    )

    even_verifier.verify(proof.even_proof, params.even_parameters.bp_gens)
    odd_verifier.verify(proof.odd_proof, odd.bp_gens)


def is_double_spend(spending_tag: Point, seen_tags: Iterable[bytes]) -> bool:
    """True if ``spending_tag`` was already revealed by an earlier spend."""
    return spending_tag.to_bytes() in set(seen_tags)
