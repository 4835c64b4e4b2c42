"""
End-to-end spend tests: mint, combine, accumulate, spend, verify.

One spend proof per tree shape is built per module and shared; the rest of
the checks run the spend relation on fresh provers without finishing a proof.
"""

import pytest

from curvetree_coin.protocol.coin import (
    PublicKey,
    SecretKey,
    SpendingInfo,
    SpendProof,
    TagProof,
    create_mint_proof,
    create_spend_proof,
    generate_keypair,
    is_double_spend,
    spend_context,
    verify_spend_proof,
)
from curvetree_coin.protocol.curve_tree import CurveTree, SelectAndRerandomizePath
from curvetree_coin.protocol.exceptions import (
    PreconditionViolation,
    ProtocolInvariantError,
    UnspendableCoin,
    VerificationError,
)
from curvetree_coin.protocol.r1cs import Prover, Transcript

BRANCHING = 2
DEPTH = 1


class Wallet:
    """Coins minted to one owner, accumulated in one tree."""

    def __init__(self, params, values=(17, 2**40 + 3), branching=BRANCHING, depth=DEPTH):
        self.params = params
        self.sk, self.pk = generate_keypair(params)
        self.coins = []
        for value in values:
            coin, output, _ = create_mint_proof(value, self.pk, params)
            permissible = output.combine_into_permissible(params)
            self.coins.append((coin, output, permissible))
        self.tree = CurveTree(
            [permissible.permissible_coin for _, _, permissible in self.coins],
            params,
            branching,
            depth,
        )

    def spending_info(self, coin_index, leaf_index=None, sk=None):
        coin, output, permissible = self.coins[coin_index]
        return SpendingInfo(
            index=coin_index if leaf_index is None else leaf_index,
            coin=coin,
            minting_output=output,
            permissible_coin=permissible,
            randomized_pk=PublicKey(output.public_key),
            sk=sk or self.sk,
        )

    def provers(self):
        even = Prover(self.params.even_parameters.pc_gens, Transcript(b"spend-test-even"))
        odd = Prover(self.params.odd_parameters.pc_gens, Transcript(b"spend-test-odd"))
        return even, odd

    def run_relation(self, info):
        even, odd = self.provers()
        return even, info.prove_spend(even, odd, self.params, self.tree)


@pytest.fixture(scope="module")
def wallet(sel_rerand_params):
    return Wallet(sel_rerand_params)


@pytest.fixture(scope="module")
def spend_proof(wallet):
    return create_spend_proof(wallet.spending_info(0), wallet.params, wallet.tree)


# ============================================================================
# FULL PROOF
# ============================================================================


class TestSpendProof:

    def test_verifies(self, wallet, spend_proof):
        verify_spend_proof(spend_proof, wallet.params, wallet.tree.root, BRANCHING, DEPTH)

    def test_serialization(self, wallet, spend_proof):
        restored = SpendProof.deserialize(spend_proof.serialize(), wallet.params)
        assert restored.tag_bytes == spend_proof.tag_bytes
        verify_spend_proof(restored, wallet.params, wallet.tree.root, BRANCHING, DEPTH)

    def test_deserialize_wrong_type(self, wallet):
        import cbor2

        with pytest.raises(ValueError, match="not a spend proof"):
            SpendProof.deserialize(cbor2.dumps({"type": "mint"}), wallet.params)

    def test_wrong_root(self, wallet, spend_proof):
        other_root = wallet.tree.levels[0][1].point
        with pytest.raises(VerificationError):
            verify_spend_proof(spend_proof, wallet.params, other_root, BRANCHING, DEPTH)

    def test_wrong_depth(self, wallet, spend_proof):
        with pytest.raises(VerificationError):
            verify_spend_proof(spend_proof, wallet.params, wallet.tree.root, BRANCHING, DEPTH + 1)

    def test_substituted_tag(self, wallet, spend_proof):
        odd = wallet.params.odd_parameters.pc_gens
        forged = SpendProof(
            path=spend_proof.path,
            rerandomized_public_key=spend_proof.rerandomized_public_key,
            spending_tag=spend_proof.spending_tag + odd.B,
            tag_proof=spend_proof.tag_proof,
            even_proof=spend_proof.even_proof,
            odd_proof=spend_proof.odd_proof,
        )
        with pytest.raises(VerificationError):
            verify_spend_proof(forged, wallet.params, wallet.tree.root, BRANCHING, DEPTH)

    def test_substituted_public_key(self, wallet, spend_proof):
        odd = wallet.params.odd_parameters.pc_gens
        forged = SpendProof(
            path=spend_proof.path,
            rerandomized_public_key=spend_proof.rerandomized_public_key + odd.B_blinding,
            spending_tag=spend_proof.spending_tag,
            tag_proof=spend_proof.tag_proof,
            even_proof=spend_proof.even_proof,
            odd_proof=spend_proof.odd_proof,
        )
        with pytest.raises(VerificationError):
            verify_spend_proof(forged, wallet.params, wallet.tree.root, BRANCHING, DEPTH)

    def test_exceptional_path_point_rejected(self, wallet, spend_proof):
        """A leaf that cancels the window offsets is rejected, not a prover error."""
        params = wallet.params
        odd = params.odd_parameters.pc_gens
        path = SelectAndRerandomizePath(
            [-params.even_parameters.rerandomization_table.offset_sum], []
        )

        order = params.curve_pair.odd.order
        x, s = 5, 7
        public_key = odd.commit(x, s)
        tag = odd.B * pow(x, -1, order)
        tag_proof = TagProof.create(
            odd, public_key, tag, x, s, spend_context(wallet.tree.root, path)
        )
        forged = SpendProof(
            path=path,
            rerandomized_public_key=public_key,
            spending_tag=tag,
            tag_proof=tag_proof,
            even_proof=spend_proof.even_proof,
            odd_proof=spend_proof.odd_proof,
        )
        with pytest.raises(VerificationError):
            verify_spend_proof(forged, params, wallet.tree.root, BRANCHING, DEPTH)

    def test_public_key_unlinkable(self, wallet, spend_proof):
        _, output, permissible = wallet.coins[0]
        assert spend_proof.rerandomized_public_key != output.public_key
        assert spend_proof.rerandomized_public_key != permissible.permissible_pk
        assert spend_proof.path.get_rerandomized_leaf() != permissible.permissible_coin


# ============================================================================
# SPEND RELATION
# ============================================================================


class TestSpendRelation:

    def test_value_variable_opens_to_value(self, wallet):
        even, output = wallet.run_relation(wallet.spending_info(1))
        coin, _, _ = wallet.coins[1]
        assert even.eval(output.value_variable) == coin.value

    def test_same_coin_same_tag(self, wallet, spend_proof):
        _, output = wallet.run_relation(wallet.spending_info(0))
        assert output.spending_tag == spend_proof.spending_tag
        assert is_double_spend(output.spending_tag, [spend_proof.tag_bytes])

    def test_different_coins_different_tags(self, wallet, spend_proof):
        _, output = wallet.run_relation(wallet.spending_info(1))
        assert output.spending_tag != spend_proof.spending_tag
        assert not is_double_spend(output.spending_tag, [spend_proof.tag_bytes])

    def test_info_is_single_use(self, wallet):
        info = wallet.spending_info(1)
        wallet.run_relation(info)
        with pytest.raises(PreconditionViolation):
            wallet.run_relation(info)

    def test_wrong_leaf_index(self, wallet):
        with pytest.raises(ProtocolInvariantError):
            wallet.run_relation(wallet.spending_info(0, leaf_index=1))

    def test_coin_not_in_tree(self, wallet):
        params = wallet.params
        coin, output, _ = create_mint_proof(17, wallet.pk, params)
        info = SpendingInfo(
            index=0,
            coin=coin,
            minting_output=output,
            permissible_coin=output.combine_into_permissible(params),
            randomized_pk=PublicKey(output.public_key),
            sk=wallet.sk,
        )
        with pytest.raises(ProtocolInvariantError):
            wallet.run_relation(info)

    def test_index_out_of_range(self, wallet):
        with pytest.raises(PreconditionViolation):
            wallet.run_relation(wallet.spending_info(0, leaf_index=5))

    def test_wrong_secret_key(self, wallet):
        other_sk, _ = generate_keypair(wallet.params)
        with pytest.raises(ProtocolInvariantError):
            wallet.run_relation(wallet.spending_info(0, sk=other_sk))

    def test_zero_ownership_scalar(self, wallet):
        _, output, _ = wallet.coins[0]
        order = wallet.params.curve_pair.odd.order
        h = output.hash_of_value_commitment(wallet.params)
        degenerate = SecretKey(prf_key=(-h) % order, randomness=1)
        with pytest.raises(UnspendableCoin):
            wallet.run_relation(wallet.spending_info(0, sk=degenerate))


# ============================================================================
# TWO-LEVEL TREE
# ============================================================================


@pytest.fixture(scope="module")
def deep_wallet(sel_rerand_params):
    return Wallet(sel_rerand_params, values=(1, 2, 3), branching=2, depth=2)


@pytest.fixture(scope="module")
def deep_spend_proof(deep_wallet):
    return create_spend_proof(deep_wallet.spending_info(2), deep_wallet.params, deep_wallet.tree)


class TestTwoLevelSpend:
    """The path crosses an odd-curve node before the leaf is opened."""

    def test_verifies(self, deep_wallet, deep_spend_proof):
        verify_spend_proof(deep_spend_proof, deep_wallet.params, deep_wallet.tree.root, 2, 2)

    def test_path_shape(self, deep_spend_proof):
        assert len(deep_spend_proof.path.even_commitments) == 1
        assert len(deep_spend_proof.path.odd_commitments) == 1

    def test_wrong_depth(self, deep_wallet, deep_spend_proof):
        with pytest.raises(VerificationError):
            verify_spend_proof(deep_spend_proof, deep_wallet.params, deep_wallet.tree.root, 2, 1)

    def test_substituted_odd_node(self, deep_wallet, deep_spend_proof):
        odd = deep_wallet.params.odd_parameters.pc_gens
        node = deep_spend_proof.path.odd_commitments[0]
        path = SelectAndRerandomizePath(
            list(deep_spend_proof.path.even_commitments), [node + odd.B_blinding]
        )
        forged = SpendProof(
            path=path,
            rerandomized_public_key=deep_spend_proof.rerandomized_public_key,
            spending_tag=deep_spend_proof.spending_tag,
            tag_proof=deep_spend_proof.tag_proof,
            even_proof=deep_spend_proof.even_proof,
            odd_proof=deep_spend_proof.odd_proof,
        )
        with pytest.raises(VerificationError):
            verify_spend_proof(forged, deep_wallet.params, deep_wallet.tree.root, 2, 2)

    def test_value_variable_opens_to_value(self, deep_wallet):
        even, output = deep_wallet.run_relation(deep_wallet.spending_info(1))
        assert even.eval(output.value_variable) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
