"""
⚠️ DRAFT — requires crypto review before production use

Constraint-system capability shared by prover and verifier.

Gadgets are written once against ``ConstraintSystem``; the prover
subclass tracks witness values, the verifier subclass only counts gates
and records constraints. Both must see the identical sequence of calls.

Flattening follows Bulletproofs section 5.3: constraint ``q`` is weighted
by ``z^(q+1)`` and split into per-kind weight vectors ``wL, wR, wO, wV``,
``wVec_k`` (vector commitment k) and the constant ``wc``, such that the
system holds iff

    <wL, aL> + <wR, aR> + <wO, aO> + sum_k <wVec_k, v_k> = <wV, v> + wc
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..curves import CurveParameters
from .generators import PedersenGens
from .linear_combination import LinearCombination, LinearLike, Variable, VariableKind
from .transcript import Transcript


@dataclass
class FlattenedConstraints:
    wL: List[int]
    wR: List[int]
    wO: List[int]
    wV: List[int]
    wVec: List[List[int]]
    wc: int


def next_power_of_two(n: int) -> int:
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


def left_powers(num_vectors: int) -> List[int]:
    """Laurent powers of the left polynomial l(X)."""
    return [1, 2, 3] + [-(k + 2) for k in range(num_vectors)]


def right_powers(num_vectors: int) -> List[int]:
    """Laurent powers of the right polynomial r(X)."""
    return [0, 1, 3] + [k + 4 for k in range(num_vectors)]


def t_commitment_powers(num_vectors: int) -> List[int]:
    """Powers of t(X) = <l(X), r(X)> that get a T commitment (all but X^2)."""
    powers = {a + b for a in left_powers(num_vectors) for b in right_powers(num_vectors)}
    powers.discard(2)
    return sorted(powers)


class ConstraintSystem(ABC):
    """
    Abstract constraint system.

    Args:
        pc_gens: Pedersen generators of the curve the proof lives on
        transcript: Single-owner transcript for this proof session
    """

    def __init__(self, pc_gens: PedersenGens, transcript: Transcript):
        self.pc_gens = pc_gens
        self.curve: CurveParameters = pc_gens.curve
        self.transcript = transcript
        self.constraints: List[LinearCombination] = []
        self.vector_lengths: List[int] = []
        self._num_multipliers = 0
        self._pending_left: Optional[int] = None

        transcript.append_message(b"dom-sep", b"r1cs v1")

    # ------------------------------------------------------------------
    # Gadget-facing API
    # ------------------------------------------------------------------

    @abstractmethod
    def multiply(
        self, left: LinearLike, right: LinearLike
    ) -> Tuple[Variable, Variable, Variable]:
        """Allocate a gate for ``left * right`` and constrain its inputs."""

    @abstractmethod
    def allocate(self, assignment: Optional[int] = None) -> Variable:
        """Allocate one unconstrained wire; two calls share a gate."""

    @abstractmethod
    def allocate_multiplier(
        self, assignments: Optional[Tuple[int, int]] = None
    ) -> Tuple[Variable, Variable, Variable]:
        """Allocate a gate whose inputs are free (to be constrained by the caller)."""

    def constrain(self, lc: LinearLike) -> None:
        """Enforce ``lc == 0``."""
        self.constraints.append(LinearCombination.from_value(lc))

    def multipliers_len(self) -> int:
        return self._num_multipliers

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_gate(self) -> int:
        index = self._num_multipliers
        self._num_multipliers += 1
        return index

    def _padded_size(self) -> int:
        return next_power_of_two(max([self._num_multipliers, 1] + self.vector_lengths))

    def _flattened_constraints(self, z: int, n: int, m: int) -> FlattenedConstraints:
        order = self.curve.order
        wL = [0] * n
        wR = [0] * n
        wO = [0] * n
        wV = [0] * m
        wVec = [[0] * n for _ in self.vector_lengths]
        wc = 0

        exp_z = z
        for lc in self.constraints:
            for var, coeff in lc.terms:
                t = exp_z * coeff
                kind = var.kind
                if kind is VariableKind.MULTIPLIER_LEFT:
                    wL[var.index] += t
                elif kind is VariableKind.MULTIPLIER_RIGHT:
                    wR[var.index] += t
                elif kind is VariableKind.MULTIPLIER_OUTPUT:
                    wO[var.index] += t
                elif kind is VariableKind.COMMITTED:
                    wV[var.index] -= t
                elif kind is VariableKind.VECTOR_COMMITTED:
                    wVec[var.index][var.position] += t
                else:
                    wc -= t
            exp_z = exp_z * z % order

        return FlattenedConstraints(
            wL=[w % order for w in wL],
            wR=[w % order for w in wR],
            wO=[w % order for w in wO],
            wV=[w % order for w in wV],
            wVec=[[w % order for w in row] for row in wVec],
            wc=wc % order,
        )
