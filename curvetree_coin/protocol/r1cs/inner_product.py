"""
⚠️ DRAFT — requires crypto review before production use

Bulletproofs inner-product argument.

Proves knowledge of vectors ``a``, ``b`` with

    P = <a, G'> + <b, H'> + <a, b> * Q,    G'_i = g_i * G_i,  H'_i = h_i * H_i

in ``log2(n)`` rounds. Each round sends

    L = <a_lo, G'_hi> + <b_hi, H'_lo> + <a_lo, b_hi> * Q
    R = <a_hi, G'_lo> + <b_lo, H'_hi> + <a_hi, b_lo> * Q

and folds with the challenge u:

    a' = u * a_lo + u^-1 * a_hi      b' = u^-1 * b_lo + u * b_hi
    G' = u^-1 * G_lo + u * G_hi      H' = u * H_lo + u^-1 * H_hi

The prover keeps per-index scalar factors next to the folded points so
each fold costs one scalar multiplication per pair. The verifier never
folds: it expands the final generators with the s-vector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..curves import CurveParameters, Point, multiscalar_mul, scalar_from_bytes, scalar_to_bytes
from ..exceptions import CryptographicError, ProofGenerationError, VerificationError
from .transcript import Transcript


def inner_product(a: Sequence[int], b: Sequence[int], modulus: int) -> int:
    if len(a) != len(b):
        raise ValueError("inner_product of vectors with different lengths")
    return sum(x * y for x, y in zip(a, b)) % modulus


@dataclass
class InnerProductProof:
    """Round commitments plus the two final scalars."""

    L_vec: List[Point]
    R_vec: List[Point]
    a: int
    b: int

    # ========================================================================
    # PROVING
    # ========================================================================

    @classmethod
    def create(
        cls,
        transcript: Transcript,
        curve: CurveParameters,
        Q: Point,
        G_factors: Sequence[int],
        H_factors: Sequence[int],
        G: Sequence[Point],
        H: Sequence[Point],
        a: Sequence[int],
        b: Sequence[int],
    ) -> InnerProductProof:
        """
        Run the prover side, appending ``L``/``R`` to ``transcript``.

        Raises:
            ProofGenerationError: If the inputs are not a power-of-two length
        """
        n = len(G)
        if not (len(H) == len(a) == len(b) == len(G_factors) == len(H_factors) == n):
            raise ProofGenerationError("Inner-product inputs differ in length")
        if n == 0 or n & (n - 1):
            raise ProofGenerationError(f"Inner-product length {n} is not a power of two")

        order = curve.order
        transcript.append_u64(b"n", n)

        G = list(G)
        H = list(H)
        g_fac = [f % order for f in G_factors]
        h_fac = [f % order for f in H_factors]
        a = [x % order for x in a]
        b = [x % order for x in b]

        L_vec: List[Point] = []
        R_vec: List[Point] = []
        while n > 1:
            n //= 2
            a_lo, a_hi = a[:n], a[n:]
            b_lo, b_hi = b[:n], b[n:]

            c_L = inner_product(a_lo, b_hi, order)
            c_R = inner_product(a_hi, b_lo, order)

            L = multiscalar_mul(
                curve,
                [a_lo[i] * g_fac[n + i] for i in range(n)]
                + [b_hi[i] * h_fac[i] for i in range(n)]
                + [c_L],
                G[n:] + H[:n] + [Q],
            )
            R = multiscalar_mul(
                curve,
                [a_hi[i] * g_fac[i] for i in range(n)]
                + [b_lo[i] * h_fac[n + i] for i in range(n)]
                + [c_R],
                G[:n] + H[n:] + [Q],
            )
            L_vec.append(L)
            R_vec.append(R)
            transcript.append_point(b"L", L)
            transcript.append_point(b"R", R)

            u = transcript.challenge_scalar(b"u", order)
            u_inv = pow(u, -1, order)

            a = [(a_lo[i] * u + a_hi[i] * u_inv) % order for i in range(n)]
            b = [(b_lo[i] * u_inv + b_hi[i] * u) % order for i in range(n)]

            if n == 1:
                break

            # G'_i = (u^-1 g_lo) * (G_lo + (u g_hi / (u^-1 g_lo)) * G_hi)
            new_G, new_H = [], []
            new_g_fac, new_h_fac = [], []
            for i in range(n):
                gf = u_inv * g_fac[i] % order
                ratio = u * g_fac[n + i] * pow(gf, -1, order) % order
                new_G.append(G[i] + G[n + i] * ratio)
                new_g_fac.append(gf)

                hf = u * h_fac[i] % order
                ratio = u_inv * h_fac[n + i] * pow(hf, -1, order) % order
                new_H.append(H[i] + H[n + i] * ratio)
                new_h_fac.append(hf)
            G, H, g_fac, h_fac = new_G, new_H, new_g_fac, new_h_fac

        return cls(L_vec=L_vec, R_vec=R_vec, a=a[0], b=b[0])

    # ========================================================================
    # VERIFICATION HELPERS
    # ========================================================================

    def verification_scalars(
        self, n: int, transcript: Transcript, order: int
    ) -> Tuple[List[int], List[int], List[int]]:
        """
        Replay the challenges and expand them.

        Returns:
            ``(u_sq, u_inv_sq, s)`` where ``s_i`` is the product of
            ``u_j`` or ``u_j^-1`` by bit ``lg_n - 1 - j`` of ``i``

        Raises:
            VerificationError: If the proof shape does not match ``n``
        """
        lg_n = len(self.L_vec)
        if lg_n != len(self.R_vec) or n != 1 << lg_n or lg_n >= 32:
            raise VerificationError()

        transcript.append_u64(b"n", n)

        challenges = []
        for L, R in zip(self.L_vec, self.R_vec):
            transcript.validate_and_append_point(b"L", L)
            transcript.validate_and_append_point(b"R", R)
            u = transcript.challenge_scalar(b"u", order)
            if u == 0:
                raise VerificationError()
            challenges.append(u)

        challenges_inv = [pow(u, -1, order) for u in challenges]
        all_inv = 1
        for u_inv in challenges_inv:
            all_inv = all_inv * u_inv % order

        u_sq = [u * u % order for u in challenges]
        u_inv_sq = [u * u % order for u in challenges_inv]

        s = [all_inv]
        for i in range(1, n):
            lg_i = i.bit_length() - 1
            k = 1 << lg_i
            s.append(s[i - k] * u_sq[lg_n - 1 - lg_i] % order)

        return u_sq, u_inv_sq, s

    # ========================================================================
    # SERIALIZATION
    # ========================================================================

    def to_dict(self) -> Dict[str, object]:
        return {
            "L": [P.to_bytes() for P in self.L_vec],
            "R": [P.to_bytes() for P in self.R_vec],
            "a": scalar_to_bytes(self.a),
            "b": scalar_to_bytes(self.b),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object], curve: CurveParameters) -> InnerProductProof:
        try:
            return cls(
                L_vec=[Point.from_bytes(curve, x) for x in data["L"]],
                R_vec=[Point.from_bytes(curve, x) for x in data["R"]],
                a=scalar_from_bytes(data["a"], curve.order),
                b=scalar_from_bytes(data["b"], curve.order),
            )
        except (KeyError, TypeError) as e:
            raise CryptographicError(f"Malformed inner-product proof: {e}") from e
