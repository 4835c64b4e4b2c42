"""
⚠️ DRAFT — requires crypto review before production use

Range proof by bit decomposition.

For each bit b_i a gate with inputs (1 - b_i, b_i) is allocated and its
output constrained to zero, which forces b_i in {0, 1}; then
``v - sum 2^i b_i == 0``. One gate per bit, no other cost.
"""

from typing import Optional

from ..config import RANGE_PROOF_BITS
from ..exceptions import RangeProofError
from ..r1cs import ConstraintSystem, LinearCombination, LinearLike


def range_proof(
    cs: ConstraintSystem,
    v: LinearLike,
    value: Optional[int],
    n_bits: int = RANGE_PROOF_BITS,
) -> None:
    """
    Constrain ``v`` to lie in ``[0, 2^n_bits)``.

    Args:
        cs: Prover or verifier
        v: The committed quantity (use the committed variable itself so the
            proof binds to that opening)
        value: Witness for ``v`` on the prover side, None on the verifier side
        n_bits: Bit width

    Raises:
        RangeProofError: If the width does not fit the field, or a known
            value is outside the range
    """
    field_bits = cs.curve.order.bit_length()
    if not 0 < n_bits < field_bits:
        raise RangeProofError(f"Unsupported range width: {n_bits} bits")
    if value is not None and not 0 <= value < (1 << n_bits):
        raise RangeProofError(f"Value does not fit in {n_bits} bits")

    remainder = LinearCombination.from_value(v)
    exp_2 = 1
    for i in range(n_bits):
        assignment = None
        if value is not None:
            bit = (value >> i) & 1
            assignment = (1 - bit, bit)
        a, b, o = cs.allocate_multiplier(assignment)

        # a * b = 0 and a = 1 - b
        cs.constrain(o)
        cs.constrain(a + (b - 1))

        remainder = remainder - b * exp_2
        exp_2 *= 2

    cs.constrain(remainder)
