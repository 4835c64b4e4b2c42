"""
⚠️ DRAFT — requires crypto review before production use

Tests for owner keys and blinding-total bookkeeping.
"""

import pytest

from curvetree_coin.protocol.coin import BlindingTotal, PublicKey, SecretKey, generate_keypair
from curvetree_coin.protocol.curves import PALLAS, VESTA
from curvetree_coin.protocol.exceptions import PreconditionViolation


class TestKeys:

    def test_generate_keypair(self, sel_rerand_params):
        sk, pk = generate_keypair(sel_rerand_params)
        assert isinstance(pk, PublicKey)
        assert pk.point.curve is VESTA
        assert sk.randomness != 0
        assert sk.public_key(sel_rerand_params) == pk

    def test_public_key_is_commitment(self, sel_rerand_params):
        sk = SecretKey(prf_key=11, randomness=13)
        gens = sel_rerand_params.odd_parameters.pc_gens
        assert sk.public_key(sel_rerand_params).point == gens.B * 11 + gens.B_blinding * 13

    def test_zero_randomness_rejected(self):
        with pytest.raises(PreconditionViolation):
            SecretKey(prf_key=5, randomness=0)

    def test_non_int_rejected(self):
        with pytest.raises(TypeError):
            SecretKey(prf_key="5", randomness=1)

    def test_repr_redacts(self):
        sk = SecretKey(prf_key=123456789, randomness=987654321)
        assert "123456789" not in repr(sk)
        assert "redacted" in repr(sk)

    def test_keys_differ(self, sel_rerand_params):
        _, pk1 = generate_keypair(sel_rerand_params)
        _, pk2 = generate_keypair(sel_rerand_params)
        assert pk1 != pk2

    def test_to_bytes(self, sel_rerand_params):
        _, pk = generate_keypair(sel_rerand_params)
        assert pk.to_bytes() == pk.point.to_bytes()
        assert len(pk.to_bytes()) == 33


class TestBlindingTotal:

    def test_sum_and_kinds(self):
        total = (
            BlindingTotal(PALLAS.order)
            .apply_commitment_randomness(3)
            .apply_padding(4)
            .apply_path_rerandomization(5)
        )
        assert int(total) == 12
        assert total.kinds() == ("commitment", "padding", "path_rerandomization")

    def test_reduced_modulo(self):
        total = BlindingTotal(7).apply_rerandomization(5).apply_rerandomization(6)
        assert int(total) == 4

    def test_immutable(self):
        base = BlindingTotal(PALLAS.order)
        updated = base.apply_padding(9)
        assert int(base) == 0
        assert int(updated) == 9
        with pytest.raises(AttributeError):
            base.total = 1

    def test_repr_hides_values(self):
        total = BlindingTotal(PALLAS.order).apply_padding(424242)
        assert "424242" not in repr(total)

    def test_matches_commitment_opening(self, sel_rerand_params):
        """A padded, rerandomized commitment opens to the accumulated total."""
        layer = sel_rerand_params.even_parameters
        B_blinding = layer.pc_gens.B_blinding
        C = layer.commit([42], 100)
        padded, r_pad = layer.permissible_commitment(C)
        rerandomized = padded + B_blinding * 77

        total = (
            BlindingTotal(PALLAS.order)
            .apply_commitment_randomness(100)
            .apply_padding(r_pad)
            .apply_path_rerandomization(77)
        )
        assert layer.commit([42], int(total)) == rerandomized


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
