"""
Blinding-factor bookkeeping.

A commitment that has been padded and rerandomized several times opens to
the *sum* of every contribution. ``BlindingTotal`` records each one under a
named operation so the total used in a proof can be audited.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BlindingTotal:
    """
    Immutable running sum of blinding contributions modulo ``modulus``.

    Example:
        >>> total = BlindingTotal(order).apply_commitment_randomness(r)
        >>> total = total.apply_padding(r_pad).apply_path_rerandomization(rho)
        >>> int(total)  # r + r_pad + rho mod order
    """

    modulus: int
    total: int = 0
    contributions: Tuple[Tuple[str, int], ...] = ()

    def _apply(self, kind: str, value: int) -> BlindingTotal:
        value %= self.modulus
        return BlindingTotal(
            modulus=self.modulus,
            total=(self.total + value) % self.modulus,
            contributions=self.contributions + ((kind, value),),
        )

    def apply_commitment_randomness(self, value: int) -> BlindingTotal:
        """Randomness of the original commitment."""
        return self._apply("commitment", value)

    def apply_rerandomization(self, value: int) -> BlindingTotal:
        """A rerandomization by ``value * B_blinding``."""
        return self._apply("rerandomization", value)

    def apply_padding(self, value: int) -> BlindingTotal:
        """Padding added to reach a permissible point."""
        return self._apply("padding", value)

    def apply_path_rerandomization(self, value: int) -> BlindingTotal:
        """Rerandomization of the leaf by the curve-tree path."""
        return self._apply("path_rerandomization", value)

    def kinds(self) -> Tuple[str, ...]:
        return tuple(kind for kind, _ in self.contributions)

    def __int__(self) -> int:
        return self.total

    def __repr__(self) -> str:
        return f"BlindingTotal(kinds={self.kinds()})"
