"""
⚠️ DRAFT — requires crypto review before production use

Round-trip tests for the R1CS prover and verifier.

Every case runs the same gadget on a ``Prover`` and a ``Verifier``;
satisfied systems must verify, unsatisfied ones must fail with the bare
``VerificationError``.
"""

import pytest

from curvetree_coin.protocol.curves import PALLAS, VESTA
from curvetree_coin.protocol.exceptions import (
    CryptographicError,
    ProofGenerationError,
    VerificationError,
)
from curvetree_coin.protocol.gadgets import (
    chained_sum_gadget,
    equality_gadget,
    product_of_sums_gadget,
    vector_do_nothing_gadget,
)
from curvetree_coin.protocol.r1cs import (
    BulletproofGens,
    PedersenGens,
    Prover,
    R1CSProof,
    Transcript,
    Verifier,
)
from curvetree_coin.protocol.security import RandomnessSource


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(scope="module")
def pc_gens():
    return PedersenGens(PALLAS)


@pytest.fixture(scope="module")
def bp_gens():
    return BulletproofGens(PALLAS, 64)


def vector_proof(pc_gens, bp_gens, values, gadget, label=b"vector gadget"):
    """Commit ``values`` as one vector, run ``gadget`` and prove."""
    rng = RandomnessSource()
    prover = Prover(pc_gens, Transcript(label), rng)
    commitment, variables = prover.commit_vec(
        values, rng.get_random_scalar(PALLAS.order), bp_gens
    )
    gadget(prover, *variables)
    return commitment, prover.prove(bp_gens)


def vector_verify(pc_gens, bp_gens, length, commitment, proof, gadget, label=b"vector gadget"):
    verifier = Verifier(pc_gens, Transcript(label))
    variables = verifier.commit_vec(length, commitment)
    gadget(verifier, *variables)
    verifier.verify(proof, bp_gens)


def vector_roundtrip(pc_gens, bp_gens, values, gadget):
    commitment, proof = vector_proof(pc_gens, bp_gens, values, gadget)
    vector_verify(pc_gens, bp_gens, len(values), commitment, proof, gadget)


def veccom_equality(cs, a, d1, d2):
    equality_gadget(cs, d1, d2)


def product_of_sums(cs, a1, a2, b1, b2, c1, c2):
    product_of_sums_gadget(cs, a1, a2, b1, b2, c1, c2)


# ============================================================================
# VECTOR COMMITMENT GADGETS
# ============================================================================


class TestVectorCommitmentGadgets:
    """Linear relations over one jointly opened vector."""

    def test_veccom_equality(self, pc_gens, bp_gens):
        vector_roundtrip(pc_gens, bp_gens, [9, 4, 4], veccom_equality)

    def test_veccom_equality_fails(self, pc_gens, bp_gens):
        with pytest.raises(VerificationError):
            vector_roundtrip(pc_gens, bp_gens, [10, 5, 4], veccom_equality)

    def test_do_nothing(self, pc_gens, bp_gens):
        vector_roundtrip(pc_gens, bp_gens, [1, 2, 3, 4, 5, 4, 4], vector_do_nothing_gadget)

    def test_do_nothing_fails(self, pc_gens, bp_gens):
        with pytest.raises(VerificationError):
            vector_roundtrip(
                pc_gens, bp_gens, [1, 2, 3, 4, 5, 5, 4], vector_do_nothing_gadget
            )

    def test_chained_sum(self, pc_gens, bp_gens):
        vector_roundtrip(pc_gens, bp_gens, [5, 5, 5, 15, 7, 37, 37], chained_sum_gadget)

    def test_chained_sum_fails(self, pc_gens, bp_gens):
        with pytest.raises(VerificationError):
            vector_roundtrip(pc_gens, bp_gens, [1, 2, 3, 4, 5, 5, 4], chained_sum_gadget)

    @pytest.mark.parametrize("position", range(7))
    def test_chained_sum_single_flip_fails(self, pc_gens, bp_gens, position):
        values = [5, 5, 5, 15, 7, 37, 37]
        values[position] += 1
        with pytest.raises(VerificationError):
            vector_roundtrip(pc_gens, bp_gens, values, chained_sum_gadget)

    def test_product_of_sums(self, pc_gens, bp_gens):
        # (3 + 4) * (5 + 6) = 77 = 70 + 7
        vector_roundtrip(pc_gens, bp_gens, [3, 4, 5, 6, 70, 7], product_of_sums)

    def test_product_of_sums_fails(self, pc_gens, bp_gens):
        with pytest.raises(VerificationError):
            vector_roundtrip(pc_gens, bp_gens, [3, 4, 5, 6, 70, 8], product_of_sums)

    def test_no_gates_no_constraints(self, pc_gens, bp_gens):
        vector_roundtrip(pc_gens, bp_gens, [], lambda cs: None)

    def test_wrong_vector_length_fails(self, pc_gens, bp_gens):
        commitment, proof = vector_proof(pc_gens, bp_gens, [9, 4, 4], veccom_equality)
        with pytest.raises(VerificationError):
            vector_verify(
                pc_gens, bp_gens, 4, commitment, proof,
                lambda cs, a, d1, d2, extra: equality_gadget(cs, d1, d2),
            )


# ============================================================================
# RANDOMIZED SOUNDNESS
# ============================================================================


class TestRandomizedRoundTrip:
    """Satisfying witnesses verify; perturbed ones never do."""

    def test_chained_sum_random(self, pc_gens, bp_gens, randomized_trials):
        rng = RandomnessSource()
        for _ in range(randomized_trials):
            a = rng.get_random_scalar(PALLAS.order)
            a5 = rng.get_random_scalar(PALLAS.order)
            d = (6 * a + a5) % PALLAS.order
            values = [a, a, a, 3 * a, a5, d, d]
            vector_roundtrip(pc_gens, bp_gens, values, chained_sum_gadget)

            position = rng.get_random_scalar(7)
            values[position] += 1 + rng.get_random_scalar(1000)
            with pytest.raises(VerificationError):
                vector_roundtrip(pc_gens, bp_gens, values, chained_sum_gadget)

    def test_product_of_sums_random(self, pc_gens, bp_gens, randomized_trials):
        rng = RandomnessSource()
        order = PALLAS.order
        for _ in range(randomized_trials):
            a1, a2, b1, b2, c1 = (rng.get_random_scalar(order) for _ in range(5))
            c2 = ((a1 + a2) * (b1 + b2) - c1) % order
            vector_roundtrip(pc_gens, bp_gens, [a1, a2, b1, b2, c1, c2], product_of_sums)
            with pytest.raises(VerificationError):
                vector_roundtrip(
                    pc_gens, bp_gens, [a1, a2, b1, b2, c1, c2 + 1], product_of_sums
                )


# ============================================================================
# SINGLE COMMITMENTS AND GATES
# ============================================================================


class TestGates:
    """Gates on single commitments, on both curves."""

    @pytest.mark.parametrize("curve", [PALLAS, VESTA], ids=["pallas", "vesta"])
    def test_multiply_committed(self, curve):
        pc = PedersenGens(curve)
        bp = BulletproofGens(curve, 16)
        rng = RandomnessSource()

        prover = Prover(pc, Transcript(b"multiply"), rng)
        X, x = prover.commit(6, rng.get_random_scalar(curve.order))
        Y, y = prover.commit(7, rng.get_random_scalar(curve.order))
        _, _, o = prover.multiply(x, y)
        prover.constrain(o - 42)
        proof = prover.prove(bp)

        verifier = Verifier(pc, Transcript(b"multiply"))
        x = verifier.commit(X)
        y = verifier.commit(Y)
        _, _, o = verifier.multiply(x, y)
        verifier.constrain(o - 42)
        verifier.verify(proof, bp)

    def test_allocate_shares_a_gate(self, pc_gens, bp_gens):
        prover = Prover(pc_gens, Transcript(b"allocate"))
        left = prover.allocate(3)
        right = prover.allocate(4)
        assert prover.multipliers_len() == 1
        assert left.index == right.index
        prover.constrain(left + right - 7)
        proof = prover.prove(bp_gens)

        verifier = Verifier(pc_gens, Transcript(b"allocate"))
        left = verifier.allocate()
        right = verifier.allocate()
        verifier.constrain(left + right - 7)
        verifier.verify(proof, bp_gens)

    def test_prover_allocate_without_assignment(self, pc_gens):
        prover = Prover(pc_gens, Transcript(b"allocate"))
        with pytest.raises(ProofGenerationError):
            prover.allocate(None)
        with pytest.raises(ProofGenerationError):
            prover.allocate_multiplier(None)

    def test_eval(self, pc_gens, bp_gens):
        prover = Prover(pc_gens, Transcript(b"eval"))
        _, x = prover.commit(5, 1)
        _, variables = prover.commit_vec([2, 3], 1, bp_gens)
        assert prover.eval(x * 2 + variables[1] - 1) == 12

    def test_insufficient_generators(self, pc_gens):
        prover = Prover(pc_gens, Transcript(b"capacity"))
        for i in range(5):
            prover.allocate_multiplier((i, i))
        with pytest.raises(ProofGenerationError):
            prover.prove(BulletproofGens(PALLAS, 4))


# ============================================================================
# TRANSCRIPT BINDING, TAMPERING, SERIALIZATION
# ============================================================================


class TestProofIntegrity:
    """Proofs are bound to their transcript and resist tampering."""

    @pytest.fixture
    def proof_and_commitment(self, pc_gens, bp_gens):
        commitment, proof = vector_proof(
            pc_gens, bp_gens, [5, 5, 5, 15, 7, 37, 37], chained_sum_gadget
        )
        return proof, commitment

    def verify(self, pc_gens, bp_gens, proof, commitment, label=b"vector gadget"):
        vector_verify(pc_gens, bp_gens, 7, commitment, proof, chained_sum_gadget, label)

    def test_valid(self, pc_gens, bp_gens, proof_and_commitment):
        self.verify(pc_gens, bp_gens, *proof_and_commitment)

    def test_wrong_transcript_label(self, pc_gens, bp_gens, proof_and_commitment):
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, *proof_and_commitment, label=b"other")

    def test_wrong_commitment(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, proof, commitment + pc_gens.B_blinding)

    def test_tampered_t_x(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        proof.t_x = (proof.t_x + 1) % PALLAS.order
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, proof, commitment)

    def test_tampered_a_i(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        proof.A_I = proof.A_I + pc_gens.B
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, proof, commitment)

    def test_tampered_ipp(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        proof.ipp_proof.a = (proof.ipp_proof.a + 1) % PALLAS.order
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, proof, commitment)

    def test_identity_element_rejected(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        proof.S = PALLAS.identity
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, proof, commitment)

    def test_missing_t_commitment(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        proof.T = proof.T[:-1]
        with pytest.raises(VerificationError):
            self.verify(pc_gens, bp_gens, proof, commitment)

    def test_serialization_roundtrip(self, pc_gens, bp_gens, proof_and_commitment):
        proof, commitment = proof_and_commitment
        data = proof.serialize()
        assert isinstance(data, bytes)
        restored = R1CSProof.deserialize(data, PALLAS)
        assert restored == proof
        self.verify(pc_gens, bp_gens, restored, commitment)

    def test_deserialize_garbage(self):
        with pytest.raises(CryptographicError):
            R1CSProof.deserialize(b"\xff\x00garbage", PALLAS)

    def test_deserialize_wrong_curve(self, proof_and_commitment):
        proof, _ = proof_and_commitment
        data = proof.serialize()
        # Pallas encodings do not all decode on Vesta.
        with pytest.raises(CryptographicError):
            R1CSProof.deserialize(data, VESTA)

    def test_unsupported_version(self, proof_and_commitment):
        proof, _ = proof_and_commitment
        data = proof.to_dict()
        data["v"] = 99
        with pytest.raises(ValueError, match="Unsupported proof version"):
            R1CSProof.from_dict(data, PALLAS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
