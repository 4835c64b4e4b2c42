"""
R1CS bulletproof backend.

Gadgets program against ``ConstraintSystem``; ``Prover`` and ``Verifier``
are its two implementations.
"""

from .constraint_system import ConstraintSystem, next_power_of_two
from .generators import BulletproofGens, PedersenGens
from .inner_product import InnerProductProof
from .linear_combination import LinearCombination, LinearLike, Variable, VariableKind
from .proof import R1CSProof
from .prover import Prover
from .transcript import Transcript
from .verifier import Verifier

__all__ = [
    "BulletproofGens",
    "ConstraintSystem",
    "InnerProductProof",
    "LinearCombination",
    "LinearLike",
    "PedersenGens",
    "Prover",
    "R1CSProof",
    "Transcript",
    "Variable",
    "VariableKind",
    "Verifier",
    "next_power_of_two",
]
