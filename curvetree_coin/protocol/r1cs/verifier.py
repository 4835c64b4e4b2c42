"""
⚠️ DRAFT — requires crypto review before production use

R1CS verifier.

Replays the prover's transcript from the public commitments and checks

    t_x*B + t_x_blinding*B~ == x^2 (sum wV_i V_i + (wc + delta) B) + sum_d x^d T_d

and the inner-product relation on

    P = x A_I + x^2 A_O + x^3 S + sum_k x^-(k+2) VV_k
        + <x y^-n o wR, G> + <y^-n o (x wL + wO + sum_k x^(k+4) wVec_k) - 1, H>
        - e_blinding B~

Every failure raises the same bare ``VerificationError``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..curves import Point, multiscalar_mul
from ..exceptions import VerificationError
from .constraint_system import ConstraintSystem, t_commitment_powers
from .generators import BulletproofGens, PedersenGens
from .inner_product import inner_product
from .linear_combination import LinearCombination, LinearLike, Variable, VariableKind
from .proof import R1CSProof
from .transcript import Transcript

logger = logging.getLogger(__name__)


class Verifier(ConstraintSystem):
    """
    Commitment-only constraint system.

    Args:
        pc_gens: Pedersen generators
        transcript: Transcript owned by this verifier
    """

    def __init__(self, pc_gens: PedersenGens, transcript: Transcript):
        super().__init__(pc_gens, transcript)
        self.V: List[Point] = []
        self.V_vec: List[Point] = []

    # ========================================================================
    # COMMITMENTS
    # ========================================================================

    def commit(self, commitment: Point) -> Variable:
        if commitment.curve is not self.curve:
            raise VerificationError()
        index = len(self.V)
        self.V.append(commitment)
        self.transcript.append_point(b"V", commitment)
        return Variable(VariableKind.COMMITTED, index)

    def commit_vec(self, length: int, commitment: Point) -> List[Variable]:
        if commitment.curve is not self.curve or length < 0:
            raise VerificationError()
        index = len(self.V_vec)
        self.V_vec.append(commitment)
        self.vector_lengths.append(length)
        self.transcript.append_u64(b"vec-len", length)
        self.transcript.append_point(b"VV", commitment)
        return [Variable(VariableKind.VECTOR_COMMITTED, index, j) for j in range(length)]

    # ========================================================================
    # GATES
    # ========================================================================

    def multiply(
        self, left: LinearLike, right: LinearLike
    ) -> Tuple[Variable, Variable, Variable]:
        index = self._new_gate()
        l_var = Variable(VariableKind.MULTIPLIER_LEFT, index)
        r_var = Variable(VariableKind.MULTIPLIER_RIGHT, index)
        o_var = Variable(VariableKind.MULTIPLIER_OUTPUT, index)
        self.constrain(LinearCombination.from_value(left) - l_var)
        self.constrain(LinearCombination.from_value(right) - r_var)
        return l_var, r_var, o_var

    def allocate(self, assignment: Optional[int] = None) -> Variable:
        if self._pending_left is None:
            index = self._new_gate()
            self._pending_left = index
            return Variable(VariableKind.MULTIPLIER_LEFT, index)
        index = self._pending_left
        self._pending_left = None
        return Variable(VariableKind.MULTIPLIER_RIGHT, index)

    def allocate_multiplier(
        self, assignments: Optional[Tuple[int, int]] = None
    ) -> Tuple[Variable, Variable, Variable]:
        index = self._new_gate()
        return (
            Variable(VariableKind.MULTIPLIER_LEFT, index),
            Variable(VariableKind.MULTIPLIER_RIGHT, index),
            Variable(VariableKind.MULTIPLIER_OUTPUT, index),
        )

    # ========================================================================
    # VERIFICATION
    # ========================================================================

    def verify(self, proof: R1CSProof, bp_gens: BulletproofGens) -> None:
        """
        Check ``proof`` against the recorded constraints.

        Raises:
            VerificationError: If the proof is invalid (no reason given)
        """
        try:
            self._verify(proof, bp_gens)
        except VerificationError:
            logger.debug("R1CS proof rejected on %s", self.curve.name)
            raise
        except (ValueError, ZeroDivisionError) as e:
            logger.debug("R1CS proof rejected on %s", self.curve.name)
            raise VerificationError() from e

    def _verify(self, proof: R1CSProof, bp_gens: BulletproofGens) -> None:
        curve = self.curve
        order = curve.order
        tr = self.transcript
        B, B_blinding = self.pc_gens.B, self.pc_gens.B_blinding

        tr.append_u64(b"m", len(self.V))
        tr.append_u64(b"vec-m", len(self.V_vec))

        n = self._padded_size()
        if bp_gens.curve is not curve or n > bp_gens.capacity:
            raise VerificationError()
        G = list(bp_gens.G(n))
        H = list(bp_gens.H(n))

        num_vec = len(self.V_vec)
        powers = t_commitment_powers(num_vec)
        if len(proof.T) != len(powers):
            raise VerificationError()
        for P in [proof.A_I, proof.A_O, proof.S] + list(proof.T):
            if P.curve is not curve:
                raise VerificationError()

        tr.validate_and_append_point(b"A_I", proof.A_I)
        tr.validate_and_append_point(b"A_O", proof.A_O)
        tr.validate_and_append_point(b"S", proof.S)

        y = tr.challenge_scalar(b"y", order)
        z = tr.challenge_scalar(b"z", order)

        w = self._flattened_constraints(z, n, len(self.V))

        for T_d in proof.T:
            tr.validate_and_append_point(b"T", T_d)

        x = tr.challenge_scalar(b"x", order)

        tr.append_scalar(b"t_x", proof.t_x)
        tr.append_scalar(b"t_x_blinding", proof.t_x_blinding)
        tr.append_scalar(b"e_blinding", proof.e_blinding)

        w_challenge = tr.challenge_scalar(b"w", order)

        y_inv = pow(y, -1, order)
        y_inv_pows = [1] * n
        for i in range(1, n):
            y_inv_pows[i] = y_inv_pows[i - 1] * y_inv % order

        # ----------------------------------------------------------------
        # t(x) consistency
        # ----------------------------------------------------------------

        x2 = x * x % order
        delta = inner_product(
            [y_inv_pows[i] * w.wR[i] for i in range(n)], w.wL, order
        )
        t_scalars = [x2 * wv % order for wv in w.wV]
        t_points = list(self.V)
        t_scalars.append((x2 * (w.wc + delta) - proof.t_x) % order)
        t_points.append(B)
        t_scalars.append(-proof.t_x_blinding % order)
        t_points.append(B_blinding)
        for d, T_d in zip(powers, proof.T):
            t_scalars.append(pow(x, d, order))
            t_points.append(T_d)

        if not multiscalar_mul(curve, t_scalars, t_points).is_identity:
            raise VerificationError()

        # ----------------------------------------------------------------
        # Inner-product relation
        # ----------------------------------------------------------------

        ipp = proof.ipp_proof
        u_sq, u_inv_sq, s = ipp.verification_scalars(n, tr, order)
        a, b = ipp.a, ipp.b

        s_inv = list(reversed(s))
        vec_x_pows = [pow(x, k + 4, order) for k in range(num_vec)]

        g_scalars = []
        h_scalars = []
        for i in range(n):
            g_pub = x * y_inv_pows[i] * w.wR[i]
            g_scalars.append((g_pub - a * s[i]) % order)

            h_pub = x * w.wL[i] + w.wO[i]
            for k in range(num_vec):
                h_pub += vec_x_pows[k] * w.wVec[k][i]
            h_pub = y_inv_pows[i] * (h_pub - b * s_inv[i]) - 1
            h_scalars.append(h_pub % order)

        scalars = [x, x2, x2 * x % order]
        points = [proof.A_I, proof.A_O, proof.S]
        for k, VV in enumerate(self.V_vec):
            scalars.append(pow(x, -(k + 2), order))
            points.append(VV)
        scalars.append(w_challenge * (proof.t_x - a * b) % order)
        points.append(B)
        scalars.append(-proof.e_blinding % order)
        points.append(B_blinding)
        scalars.extend(u_sq)
        points.extend(ipp.L_vec)
        scalars.extend(u_inv_sq)
        points.extend(ipp.R_vec)
        scalars.extend(g_scalars)
        points.extend(G)
        scalars.extend(h_scalars)
        points.extend(H)

        for P in ipp.L_vec + ipp.R_vec:
            if P.curve is not curve:
                raise VerificationError()

        if not multiscalar_mul(curve, scalars, points).is_identity:
            raise VerificationError()
