"""
Variables and linear combinations for rank-1 constraint systems.

A ``LinearCombination`` is a list of ``(Variable, coefficient)`` terms with
plain integer coefficients; reduction modulo the scalar field happens when
the constraint system flattens or evaluates it, so the same gadget code
runs unchanged on either curve of the cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, Union


class VariableKind(Enum):
    COMMITTED = "committed"
    VECTOR_COMMITTED = "vector_committed"
    MULTIPLIER_LEFT = "multiplier_left"
    MULTIPLIER_RIGHT = "multiplier_right"
    MULTIPLIER_OUTPUT = "multiplier_output"
    ONE = "one"


class _LinearOps:
    """Arithmetic shared by ``Variable`` and ``LinearCombination``."""

    def __add__(self, other):
        return LinearCombination.from_value(self)._combine(other, 1)

    def __radd__(self, other):
        return LinearCombination.from_value(other)._combine(self, 1)

    def __sub__(self, other):
        return LinearCombination.from_value(self)._combine(other, -1)

    def __rsub__(self, other):
        return LinearCombination.from_value(other)._combine(self, -1)

    def __neg__(self):
        return LinearCombination.from_value(self) * -1

    def __mul__(self, scalar):
        if not isinstance(scalar, int):
            return NotImplemented
        return LinearCombination(
            (var, coeff * scalar) for var, coeff in LinearCombination.from_value(self).terms
        )

    __rmul__ = __mul__


@dataclass(frozen=True)
class Variable(_LinearOps):
    """
    Handle to a value inside the constraint system.

    ``index`` numbers commitments or multiplication gates; for vector
    commitments ``position`` is the entry within the vector.
    """

    kind: VariableKind
    index: int = 0
    position: int = 0

    @classmethod
    def one(cls) -> Variable:
        return cls(VariableKind.ONE)

    def __repr__(self) -> str:
        if self.kind is VariableKind.ONE:
            return "Variable(one)"
        if self.kind is VariableKind.VECTOR_COMMITTED:
            return f"Variable({self.kind.value}, {self.index}, {self.position})"
        return f"Variable({self.kind.value}, {self.index})"


class LinearCombination(_LinearOps):
    """Weighted sum of variables; constants are terms on ``Variable.one()``."""

    __slots__ = ("terms",)

    def __init__(self, terms: Iterable[Tuple[Variable, int]] = ()):
        self.terms: List[Tuple[Variable, int]] = list(terms)

    @classmethod
    def from_value(cls, value: LinearLike) -> LinearCombination:
        if isinstance(value, LinearCombination):
            return value
        if isinstance(value, Variable):
            return cls([(value, 1)])
        if isinstance(value, int):
            return cls([(Variable.one(), value)])
        raise TypeError(f"Cannot build a linear combination from {type(value)}")

    def _combine(self, other, sign: int) -> LinearCombination:
        other = LinearCombination.from_value(other)
        if sign == 1:
            return LinearCombination(self.terms + other.terms)
        return LinearCombination(self.terms + [(v, -c) for v, c in other.terms])

    def __len__(self) -> int:
        return len(self.terms)

    def __repr__(self) -> str:
        return f"LinearCombination({self.terms!r})"


LinearLike = Union[LinearCombination, Variable, int]
