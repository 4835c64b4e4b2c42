"""
⚠️ DRAFT — requires crypto review before production use

R1CS prover with single and vector Pedersen commitments.

Protocol (Fiat-Shamir over the prover's transcript):
    1. Commit A_I = <aL, G> + <aR, H> + i*B~, A_O = <aO, G> + o*B~ and
       S = <sL, G> + <sR, H> + s*B~; draw y, z.
    2. Flatten constraints with z and build the Laurent polynomials

           l(X) = (aL + y^-n o wR) X + aO X^2 + sL X^3 + sum_k v_k X^-(k+2)
           r(X) = wO - y^n + (y^n o aR + wL) X + y^n o sR X^3 + sum_k wVec_k X^(k+4)

       whose inner product has the constraint system at X^2.
    3. Commit every other coefficient of t(X) as T_d; draw x.
    4. Reveal t(x) and the combined blindings; draw w, Q = w*B and run the
       inner-product argument on l(x), r(x) over G and y^-n o H.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..curves import Point, multiscalar_mul
from ..exceptions import ProofGenerationError
from ..security import RandomnessSource
from .constraint_system import (
    ConstraintSystem,
    left_powers,
    right_powers,
    t_commitment_powers,
)
from .generators import BulletproofGens, PedersenGens
from .inner_product import InnerProductProof, inner_product
from .linear_combination import LinearCombination, LinearLike, Variable, VariableKind
from .proof import R1CSProof
from .transcript import Transcript

logger = logging.getLogger(__name__)


class Prover(ConstraintSystem):
    """
    Witness-tracking constraint system.

    Args:
        pc_gens: Pedersen generators
        transcript: Transcript owned by this prover
        randomness_source: Source for blindings (created if None)

    Example:
        >>> prover = Prover(PedersenGens(PALLAS), Transcript(b"demo"))
        >>> _, x = prover.commit(3, 11)
        >>> prover.constrain(x - 3)
        >>> proof = prover.prove(BulletproofGens(PALLAS, 8))
    """

    def __init__(
        self,
        pc_gens: PedersenGens,
        transcript: Transcript,
        randomness_source: Optional[RandomnessSource] = None,
    ):
        super().__init__(pc_gens, transcript)
        self.rng = randomness_source or RandomnessSource()
        self.v: List[int] = []
        self.v_blinding: List[int] = []
        self.vec_values: List[List[int]] = []
        self.vec_blindings: List[int] = []
        self.a_L: List[int] = []
        self.a_R: List[int] = []
        self.a_O: List[int] = []

    # ========================================================================
    # COMMITMENTS
    # ========================================================================

    def commit(self, value: int, blinding: int) -> Tuple[Point, Variable]:
        """
        Commit to a single value: ``value * B + blinding * B_blinding``.

        Returns:
            (commitment, variable)
        """
        order = self.curve.order
        index = len(self.v)
        self.v.append(value % order)
        self.v_blinding.append(blinding % order)

        V = self.pc_gens.commit(value, blinding)
        self.transcript.append_point(b"V", V)
        return V, Variable(VariableKind.COMMITTED, index)

    def commit_vec(
        self, values: Sequence[int], blinding: int, bp_gens: BulletproofGens
    ) -> Tuple[Point, List[Variable]]:
        """
        Commit to a vector: ``sum(values[i] * G[i]) + blinding * B_blinding``.

        Returns:
            (commitment, one variable per entry)
        """
        order = self.curve.order
        values = [v % order for v in values]
        index = len(self.vec_values)
        self.vec_values.append(values)
        self.vec_blindings.append(blinding % order)
        self.vector_lengths.append(len(values))

        V = bp_gens.commit_vec(values, blinding, self.pc_gens)
        self.transcript.append_u64(b"vec-len", len(values))
        self.transcript.append_point(b"VV", V)
        variables = [
            Variable(VariableKind.VECTOR_COMMITTED, index, j) for j in range(len(values))
        ]
        return V, variables

    # ========================================================================
    # GATES
    # ========================================================================

    def eval(self, lc: LinearLike) -> int:
        """Evaluate a linear combination on the current witness."""
        total = 0
        for var, coeff in LinearCombination.from_value(lc).terms:
            total += coeff * self._value(var)
        return total % self.curve.order

    def _value(self, var: Variable) -> int:
        kind = var.kind
        if kind is VariableKind.MULTIPLIER_LEFT:
            return self.a_L[var.index]
        if kind is VariableKind.MULTIPLIER_RIGHT:
            return self.a_R[var.index]
        if kind is VariableKind.MULTIPLIER_OUTPUT:
            return self.a_O[var.index]
        if kind is VariableKind.COMMITTED:
            return self.v[var.index]
        if kind is VariableKind.VECTOR_COMMITTED:
            return self.vec_values[var.index][var.position]
        return 1

    def _push_gate(self, left: int, right: int) -> int:
        order = self.curve.order
        index = self._new_gate()
        self.a_L.append(left % order)
        self.a_R.append(right % order)
        self.a_O.append(left * right % order)
        return index

    def multiply(
        self, left: LinearLike, right: LinearLike
    ) -> Tuple[Variable, Variable, Variable]:
        left = LinearCombination.from_value(left)
        right = LinearCombination.from_value(right)
        index = self._push_gate(self.eval(left), self.eval(right))

        l_var = Variable(VariableKind.MULTIPLIER_LEFT, index)
        r_var = Variable(VariableKind.MULTIPLIER_RIGHT, index)
        o_var = Variable(VariableKind.MULTIPLIER_OUTPUT, index)
        self.constrain(left - l_var)
        self.constrain(right - r_var)
        return l_var, r_var, o_var

    def allocate(self, assignment: Optional[int] = None) -> Variable:
        if assignment is None:
            raise ProofGenerationError("Prover cannot allocate without an assignment")
        order = self.curve.order

        if self._pending_left is None:
            index = self._push_gate(assignment, 0)
            self._pending_left = index
            return Variable(VariableKind.MULTIPLIER_LEFT, index)

        index = self._pending_left
        self._pending_left = None
        self.a_R[index] = assignment % order
        self.a_O[index] = self.a_L[index] * self.a_R[index] % order
        return Variable(VariableKind.MULTIPLIER_RIGHT, index)

    def allocate_multiplier(
        self, assignments: Optional[Tuple[int, int]] = None
    ) -> Tuple[Variable, Variable, Variable]:
        if assignments is None:
            raise ProofGenerationError("Prover cannot allocate without an assignment")
        index = self._push_gate(assignments[0], assignments[1])
        return (
            Variable(VariableKind.MULTIPLIER_LEFT, index),
            Variable(VariableKind.MULTIPLIER_RIGHT, index),
            Variable(VariableKind.MULTIPLIER_OUTPUT, index),
        )

    # ========================================================================
    # PROVING
    # ========================================================================

    def prove(self, bp_gens: BulletproofGens) -> R1CSProof:
        """
        Consume the constraint system and produce a proof.

        Args:
            bp_gens: Generators with capacity for the padded gate count

        Returns:
            R1CSProof

        Raises:
            ProofGenerationError: If generators are insufficient
        """
        curve = self.curve
        order = curve.order
        rng = self.rng
        tr = self.transcript
        B, B_blinding = self.pc_gens.B, self.pc_gens.B_blinding

        tr.append_u64(b"m", len(self.v))
        tr.append_u64(b"vec-m", len(self.vec_values))

        n1 = self.multipliers_len()
        n = self._padded_size()
        if bp_gens.curve is not curve:
            raise ProofGenerationError("Bulletproof generators are on the wrong curve")
        G = list(bp_gens.G(n))
        H = list(bp_gens.H(n))
        logger.debug(
            "proving on %s: %d gates (padded %d), %d commitments, %d vectors",
            curve.name, n1, n, len(self.v), len(self.vec_values),
        )

        pad = [0] * (n - n1)
        a_L = self.a_L + pad
        a_R = self.a_R + pad
        a_O = self.a_O + pad

        i_blinding = rng.get_random_scalar(order)
        o_blinding = rng.get_random_scalar(order)
        s_blinding = rng.get_random_scalar(order)
        s_L = [rng.get_random_scalar(order) for _ in range(n)]
        s_R = [rng.get_random_scalar(order) for _ in range(n)]

        A_I = multiscalar_mul(curve, [i_blinding] + a_L + a_R, [B_blinding] + G + H)
        A_O = multiscalar_mul(curve, [o_blinding] + a_O, [B_blinding] + G)
        S = multiscalar_mul(curve, [s_blinding] + s_L + s_R, [B_blinding] + G + H)

        tr.append_point(b"A_I", A_I)
        tr.append_point(b"A_O", A_O)
        tr.append_point(b"S", S)

        y = tr.challenge_scalar(b"y", order)
        z = tr.challenge_scalar(b"z", order)
        if y == 0:
            raise ProofGenerationError("Degenerate challenge")

        w = self._flattened_constraints(z, n, len(self.v))

        y_inv = pow(y, -1, order)
        y_pows = _powers(y, n, order)
        y_inv_pows = _powers(y_inv, n, order)

        num_vec = len(self.vec_values)
        l_poly: Dict[int, List[int]] = {
            1: [(a_L[i] + y_inv_pows[i] * w.wR[i]) % order for i in range(n)],
            2: a_O,
            3: s_L,
        }
        r_poly: Dict[int, List[int]] = {
            0: [(w.wO[i] - y_pows[i]) % order for i in range(n)],
            1: [(y_pows[i] * a_R[i] + w.wL[i]) % order for i in range(n)],
            3: [y_pows[i] * s_R[i] % order for i in range(n)],
        }
        for k, values in enumerate(self.vec_values):
            l_poly[-(k + 2)] = values + [0] * (n - len(values))
            r_poly[k + 4] = w.wVec[k]
        assert sorted(l_poly) == sorted(left_powers(num_vec))
        assert sorted(r_poly) == sorted(right_powers(num_vec))

        t_poly: Dict[int, int] = {}
        for a, l_coeffs in l_poly.items():
            for b, r_coeffs in r_poly.items():
                t_poly[a + b] = (t_poly.get(a + b, 0) + inner_product(l_coeffs, r_coeffs, order)) % order

        powers = t_commitment_powers(num_vec)
        tau = {d: rng.get_random_scalar(order) for d in powers}
        T = []
        for d in powers:
            T_d = multiscalar_mul(curve, [t_poly.get(d, 0), tau[d]], [B, B_blinding])
            T.append(T_d)
            tr.append_point(b"T", T_d)

        x = tr.challenge_scalar(b"x", order)
        if x == 0:
            raise ProofGenerationError("Degenerate challenge")

        x_pow = {d: pow(x, d, order) for d in set(t_poly) | set(l_poly) | set(r_poly)}

        l_x = [0] * n
        for a, coeffs in l_poly.items():
            xa = x_pow[a]
            for i in range(n):
                l_x[i] += coeffs[i] * xa
        l_x = [v % order for v in l_x]

        r_x = [0] * n
        for b, coeffs in r_poly.items():
            xb = x_pow[b]
            for i in range(n):
                r_x[i] += coeffs[i] * xb
        r_x = [v % order for v in r_x]

        t_x = inner_product(l_x, r_x, order)

        x2 = x_pow[2]
        t_x_blinding = sum(tau[d] * x_pow[d] for d in powers)
        t_x_blinding += x2 * inner_product(w.wV, self.v_blinding, order)
        t_x_blinding %= order

        e_blinding = x * (i_blinding + x * (o_blinding + x * s_blinding))
        for k, r_k in enumerate(self.vec_blindings):
            e_blinding += x_pow[-(k + 2)] * r_k
        e_blinding %= order

        tr.append_scalar(b"t_x", t_x)
        tr.append_scalar(b"t_x_blinding", t_x_blinding)
        tr.append_scalar(b"e_blinding", e_blinding)

        w_challenge = tr.challenge_scalar(b"w", order)
        Q = B * w_challenge

        ipp_proof = InnerProductProof.create(
            tr, curve, Q, [1] * n, y_inv_pows, G, H, l_x, r_x,
        )

        return R1CSProof(
            A_I=A_I,
            A_O=A_O,
            S=S,
            T=T,
            t_x=t_x,
            t_x_blinding=t_x_blinding,
            e_blinding=e_blinding,
            ipp_proof=ipp_proof,
        )


def _powers(base: int, n: int, modulus: int) -> List[int]:
    out = []
    acc = 1
    for _ in range(n):
        out.append(acc)
        acc = acc * base % modulus
    return out
