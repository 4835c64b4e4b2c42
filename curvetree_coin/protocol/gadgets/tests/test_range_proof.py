"""
⚠️ DRAFT — requires crypto review before production use

Tests for the bit-decomposition range gadget.
"""

import pytest

from curvetree_coin.protocol.curves import PALLAS
from curvetree_coin.protocol.exceptions import RangeProofError, VerificationError
from curvetree_coin.protocol.gadgets import range_proof
from curvetree_coin.protocol.r1cs import (
    BulletproofGens,
    PedersenGens,
    Prover,
    Transcript,
    Verifier,
)


@pytest.fixture(scope="module")
def gens():
    return PedersenGens(PALLAS), BulletproofGens(PALLAS, 128)


def range_roundtrip(gens, value, n_bits, witness=None):
    """Commit ``value``; prove the range with ``witness`` (defaults to value)."""
    pc_gens, bp_gens = gens
    prover = Prover(pc_gens, Transcript(b"range"))
    V, v = prover.commit(value, 12345)
    range_proof(prover, v, value if witness is None else witness, n_bits)
    assert prover.multipliers_len() == n_bits
    proof = prover.prove(bp_gens)

    verifier = Verifier(pc_gens, Transcript(b"range"))
    v = verifier.commit(V)
    range_proof(verifier, v, None, n_bits)
    verifier.verify(proof, bp_gens)


class TestRangeProof:

    @pytest.mark.parametrize("value", [0, 1, 200, 255])
    def test_8_bit_values(self, gens, value):
        range_roundtrip(gens, value, 8)

    @pytest.mark.parametrize("value", [0, 2**63, 2**64 - 1])
    def test_64_bit_boundaries(self, gens, value):
        range_roundtrip(gens, value, 64)

    def test_out_of_range_rejected_by_prover(self, gens):
        with pytest.raises(RangeProofError):
            range_roundtrip(gens, 256, 8)

    def test_negative_rejected_by_prover(self, gens):
        with pytest.raises(RangeProofError):
            range_roundtrip(gens, -1, 8)

    def test_lying_witness_fails(self, gens):
        """Bits of another value do not open the commitment."""
        with pytest.raises(VerificationError):
            range_roundtrip(gens, 300, 8, witness=44)

    @pytest.mark.parametrize("n_bits", [0, 255, 300])
    def test_unsupported_width(self, gens, n_bits):
        pc_gens, _ = gens
        prover = Prover(pc_gens, Transcript(b"range"))
        _, v = prover.commit(1, 1)
        with pytest.raises(RangeProofError):
            range_proof(prover, v, 1, n_bits)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
