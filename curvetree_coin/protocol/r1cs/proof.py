"""
R1CS proof object and its CBOR encoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

try:
    import cbor2
except ImportError:
    raise ImportError(
        "cbor2 is required for proof serialization. "
        "Install with: pip install cbor2"
    )

from ..config import PROOF_VERSION
from ..curves import CurveParameters, Point, scalar_from_bytes, scalar_to_bytes
from ..exceptions import CryptographicError
from .inner_product import InnerProductProof


@dataclass
class R1CSProof:
    """
    Bulletproofs R1CS proof with vector-commitment openings.

    Attributes:
        A_I: Commitment to the gate inputs
        A_O: Commitment to the gate outputs
        S: Commitment to the blinding vectors
        T: Commitments to t(X) coefficients, ordered by power (X^2 excluded)
        t_x: t(x)
        t_x_blinding: Blinding of t(x)
        e_blinding: Blinding of the evaluated P
        ipp_proof: Inner-product argument
    """

    A_I: Point
    A_O: Point
    S: Point
    T: List[Point]
    t_x: int
    t_x_blinding: int
    e_blinding: int
    ipp_proof: InnerProductProof

    def to_dict(self) -> Dict[str, object]:
        return {
            "v": PROOF_VERSION,
            "A_I": self.A_I.to_bytes(),
            "A_O": self.A_O.to_bytes(),
            "S": self.S.to_bytes(),
            "T": [P.to_bytes() for P in self.T],
            "t_x": scalar_to_bytes(self.t_x),
            "t_x_blinding": scalar_to_bytes(self.t_x_blinding),
            "e_blinding": scalar_to_bytes(self.e_blinding),
            "ipp": self.ipp_proof.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object], curve: CurveParameters) -> R1CSProof:
        if not isinstance(data, dict):
            raise ValueError("Invalid proof format: expected a map")
        version = data.get("v", PROOF_VERSION)
        if version != PROOF_VERSION:
            raise ValueError(
                f"Unsupported proof version: {version} (expected {PROOF_VERSION})"
            )
        try:
            return cls(
                A_I=Point.from_bytes(curve, data["A_I"]),
                A_O=Point.from_bytes(curve, data["A_O"]),
                S=Point.from_bytes(curve, data["S"]),
                T=[Point.from_bytes(curve, x) for x in data["T"]],
                t_x=scalar_from_bytes(data["t_x"], curve.order),
                t_x_blinding=scalar_from_bytes(data["t_x_blinding"], curve.order),
                e_blinding=scalar_from_bytes(data["e_blinding"], curve.order),
                ipp_proof=InnerProductProof.from_dict(data["ipp"], curve),
            )
        except (KeyError, TypeError) as e:
            raise CryptographicError(f"Malformed R1CS proof: {e}") from e

    def serialize(self) -> bytes:
        """
        Serialize proof to bytes using CBOR.

        Returns:
            bytes: CBOR-encoded proof
        """
        try:
            return cbor2.dumps(self.to_dict())
        except Exception as e:
            raise CryptographicError(f"Failed to serialize proof: {e}") from e

    @classmethod
    def deserialize(cls, data: bytes, curve: CurveParameters) -> R1CSProof:
        """
        Deserialize proof from CBOR bytes.

        Raises:
            ValueError: If version is unsupported or data is invalid
            CryptographicError: If decoding fails
        """
        try:
            obj = cbor2.loads(data)
        except Exception as e:
            raise CryptographicError(f"Failed to deserialize proof: {e}") from e
        return cls.from_dict(obj, curve)
