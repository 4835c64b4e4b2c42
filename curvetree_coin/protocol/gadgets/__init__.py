"""
Value-oblivious gadgets: the same call proves (on a ``Prover``) and checks
(on a ``Verifier``).
"""

from .linear import (
    chained_sum_gadget,
    equality_gadget,
    product_of_sums_gadget,
    vector_do_nothing_gadget,
)
from .range_proof import range_proof
from .select import select

__all__ = [
    "chained_sum_gadget",
    "equality_gadget",
    "product_of_sums_gadget",
    "range_proof",
    "select",
    "vector_do_nothing_gadget",
]
