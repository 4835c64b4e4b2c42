"""
⚠️ DRAFT — requires crypto review before production use

Short-Weierstrass curve arithmetic for the Pallas/Vesta 2-cycle.

This is a PROTOTYPE implementation for testing and validation.
DO NOT use in production without security audit.

Both curves are ``y^2 = x^3 + 5`` with prime order:

    Pallas (even, P0): base field p, group order q
    Vesta  (odd,  P1): base field q, group order p

so an x-coordinate of one curve is a scalar of the other. ``CurvePair``
makes that relation explicit and is passed to every protocol function.

Implementation Details:
    - Affine ``Point`` objects at the API, Jacobian coordinates inside
      scalar multiplication (dbl-2009-l / madd-2007-bl / add-2007-bl, a = 0)
    - Pippenger bucket method for multiscalar multiplication
    - Compressed 33-byte encoding: 0x02|0x03 prefix (y parity) || x big-endian,
      identity encoded as 33 zero bytes
    - Generators via try-and-increment hash-to-curve over SHA3-512
    - Nothing here is constant time
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .config import (
    EVEN_CURVE_NAME,
    ODD_CURVE_NAME,
    PALLAS_P,
    PASTA_A,
    PASTA_B,
    POINT_SIZE_BYTES,
    SCALAR_SIZE_BYTES,
    VESTA_P,
)
from .exceptions import ConfigurationError, CryptographicError
from .security import derive_bytes

Jacobian = Tuple[int, int, int]

_JACOBIAN_IDENTITY: Jacobian = (1, 1, 0)


# ============================================================================
# CURVE PARAMETERS
# ============================================================================


class CurveParameters:
    """
    A prime-order short-Weierstrass curve ``y^2 = x^3 + a*x + b`` over F_p.

    Also carries field helpers for the base field (square roots, Legendre
    symbol), since the permissibility predicate and the in-circuit
    on-curve checks work on coordinates.

    Args:
        name: Human-readable curve name
        p: Base field modulus
        a: Curve coefficient a
        b: Curve coefficient b
        order: Prime group order (scalar field modulus)
    """

    def __init__(self, name: str, p: int, a: int, b: int, order: int):
        self.name = name
        self.p = p
        self.a = a % p
        self.b = b % p
        self.order = order

        # Tonelli-Shanks setup: p - 1 = 2^s * t with t odd
        s, t = 0, p - 1
        while t % 2 == 0:
            s, t = s + 1, t // 2
        z = 2
        while self.legendre(z) != p - 1:
            z += 1
        self._ts_s = s
        self._ts_t = t
        self._ts_c = pow(z, t, p)

        self.identity = Point(self, None, None)

    def __repr__(self) -> str:
        return f"CurveParameters({self.name})"

    # ------------------------------------------------------------------
    # Base-field helpers
    # ------------------------------------------------------------------

    def legendre(self, value: int) -> int:
        """Legendre symbol as a field element: 0, 1 or p - 1."""
        return pow(value % self.p, (self.p - 1) // 2, self.p)

    def is_square(self, value: int) -> bool:
        """True if ``value`` is a square in F_p (zero counts as a square)."""
        return self.legendre(value) != self.p - 1

    def sqrt(self, value: int) -> Optional[int]:
        """
        Square root in F_p via Tonelli-Shanks.

        Returns:
            A root, or None if ``value`` is not a square
        """
        p = self.p
        value %= p
        if value == 0:
            return 0
        if self.legendre(value) != 1:
            return None

        m = self._ts_s
        c = self._ts_c
        t = pow(value, self._ts_t, p)
        r = pow(value, (self._ts_t + 1) // 2, p)
        while t != 1:
            i, t2 = 1, t * t % p
            while t2 != 1:
                t2 = t2 * t2 % p
                i += 1
            b = pow(c, 1 << (m - i - 1), p)
            m = i
            c = b * b % p
            t = t * c % p
            r = r * b % p
        return r

    def curve_rhs(self, x: int) -> int:
        """x^3 + a*x + b in F_p."""
        return (x * x * x + self.a * x + self.b) % self.p

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------

    def is_on_curve(self, x: int, y: int) -> bool:
        return 0 <= x < self.p and 0 <= y < self.p and (y * y - self.curve_rhs(x)) % self.p == 0

    def point(self, x: int, y: int) -> Point:
        """
        Build a validated affine point.

        Raises:
            CryptographicError: If (x, y) is not on the curve
        """
        if not self.is_on_curve(x, y):
            raise CryptographicError(f"Point is not on {self.name}")
        return Point(self, x, y)

    def lift_x(self, x: int, odd_y: bool = False) -> Optional[Point]:
        """Point with the given x and y parity, or None if x is not a coordinate."""
        if not 0 <= x < self.p:
            return None
        y = self.sqrt(self.curve_rhs(x))
        if y is None:
            return None
        if (y & 1) != int(odd_y):
            y = (self.p - y) % self.p
        return Point(self, x, y)

    def hash_to_curve(self, label: bytes) -> Point:
        """
        Deterministic nothing-up-my-sleeve point from a public label.

        Try-and-increment over SHA3-512 with the even square root chosen.
        The expected number of attempts is 2; not constant time, which is
        fine for public generators.

        Args:
            label: Public label (curve name is mixed in automatically)

        Returns:
            A point with unknown discrete log relative to other labels
        """
        tagged = self.name.encode() + b"/" + label
        counter = 0
        while True:
            x = int.from_bytes(derive_bytes(tagged, counter), "big") % self.p
            point = self.lift_x(x, odd_y=False)
            if point is not None and not point.is_identity:
                return point
            counter += 1

    def decode_point(self, data: bytes) -> Point:
        """Alias of ``Point.from_bytes`` bound to this curve."""
        return Point.from_bytes(self, data)

    def random_scalar(self, rng) -> int:
        return rng.get_random_scalar(self.order)


# ============================================================================
# JACOBIAN ARITHMETIC (a = 0)
# ============================================================================


def _jac_double(P: Jacobian, p: int) -> Jacobian:
    X1, Y1, Z1 = P
    if Z1 == 0 or Y1 == 0:
        return _JACOBIAN_IDENTITY
    A = X1 * X1 % p
    B = Y1 * Y1 % p
    C = B * B % p
    D = 2 * ((X1 + B) * (X1 + B) - A - C) % p
    E = 3 * A % p
    F = E * E % p
    X3 = (F - 2 * D) % p
    Y3 = (E * (D - X3) - 8 * C) % p
    Z3 = 2 * Y1 * Z1 % p
    return (X3, Y3, Z3)


def _jac_add_affine(P: Jacobian, x2: int, y2: int, p: int) -> Jacobian:
    X1, Y1, Z1 = P
    if Z1 == 0:
        return (x2, y2, 1)
    Z1Z1 = Z1 * Z1 % p
    U2 = x2 * Z1Z1 % p
    S2 = y2 * Z1 * Z1Z1 % p
    if U2 == X1:
        if S2 == Y1:
            return _jac_double(P, p)
        return _JACOBIAN_IDENTITY
    H = (U2 - X1) % p
    HH = H * H % p
    I = 4 * HH % p
    J = H * I % p
    r = 2 * (S2 - Y1) % p
    V = X1 * I % p
    X3 = (r * r - J - 2 * V) % p
    Y3 = (r * (V - X3) - 2 * Y1 * J) % p
    Z3 = ((Z1 + H) * (Z1 + H) - Z1Z1 - HH) % p
    return (X3, Y3, Z3)


def _jac_add(P: Jacobian, Q: Jacobian, p: int) -> Jacobian:
    X1, Y1, Z1 = P
    X2, Y2, Z2 = Q
    if Z1 == 0:
        return Q
    if Z2 == 0:
        return P
    Z1Z1 = Z1 * Z1 % p
    Z2Z2 = Z2 * Z2 % p
    U1 = X1 * Z2Z2 % p
    U2 = X2 * Z1Z1 % p
    S1 = Y1 * Z2 * Z2Z2 % p
    S2 = Y2 * Z1 * Z1Z1 % p
    if U1 == U2:
        if S1 == S2:
            return _jac_double(P, p)
        return _JACOBIAN_IDENTITY
    H = (U2 - U1) % p
    I = 4 * H * H % p
    J = H * I % p
    r = 2 * (S2 - S1) % p
    V = U1 * I % p
    X3 = (r * r - J - 2 * V) % p
    Y3 = (r * (V - X3) - 2 * S1 * J) % p
    Z3 = ((Z1 + Z2) * (Z1 + Z2) - Z1Z1 - Z2Z2) * H % p
    return (X3, Y3, Z3)


def _jac_to_point(curve: CurveParameters, P: Jacobian) -> Point:
    X, Y, Z = P
    if Z == 0:
        return curve.identity
    p = curve.p
    z_inv = pow(Z, -1, p)
    z_inv2 = z_inv * z_inv % p
    return Point(curve, X * z_inv2 % p, Y * z_inv2 * z_inv % p)


def _jac_scalar_mul(point: Point, k: int) -> Jacobian:
    p = point.curve.p
    acc = _JACOBIAN_IDENTITY
    x, y = point.x, point.y
    for bit in bin(k)[2:]:
        acc = _jac_double(acc, p)
        if bit == "1":
            acc = _jac_add_affine(acc, x, y, p)
    return acc


# ============================================================================
# POINT
# ============================================================================


class Point:
    """
    Immutable affine point; ``x = y = None`` encodes the identity.

    Supports ``+``, ``-``, unary ``-`` and multiplication by an int scalar
    (reduced modulo the group order).
    """

    __slots__ = ("curve", "x", "y")

    def __init__(self, curve: CurveParameters, x: Optional[int], y: Optional[int]):
        self.curve = curve
        self.x = x
        self.y = y

    @property
    def is_identity(self) -> bool:
        return self.x is None

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.curve is other.curve and self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.curve.name, self.x, self.y))

    def __repr__(self) -> str:
        if self.is_identity:
            return f"Point({self.curve.name}, identity)"
        return f"Point({self.curve.name}, x={self.x:#x})"

    def __neg__(self) -> Point:
        if self.is_identity:
            return self
        return Point(self.curve, self.x, (-self.y) % self.curve.p)

    def __add__(self, other: Point) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        if other.curve is not self.curve:
            raise CryptographicError("Cannot add points on different curves")
        if self.is_identity:
            return other
        if other.is_identity:
            return self
        p = self.curve.p
        if self.x == other.x:
            if (self.y + other.y) % p == 0:
                return self.curve.identity
            lam = (3 * self.x * self.x + self.curve.a) * pow(2 * self.y, -1, p) % p
        else:
            lam = (other.y - self.y) * pow(other.x - self.x, -1, p) % p
        x3 = (lam * lam - self.x - other.x) % p
        y3 = (lam * (self.x - x3) - self.y) % p
        return Point(self.curve, x3, y3)

    def __sub__(self, other: Point) -> Point:
        return self + (-other)

    def __mul__(self, scalar: int) -> Point:
        if not isinstance(scalar, int):
            return NotImplemented
        k = scalar % self.curve.order
        if k == 0 or self.is_identity:
            return self.curve.identity
        return _jac_to_point(self.curve, _jac_scalar_mul(self, k))

    __rmul__ = __mul__

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        """Compressed 33-byte encoding."""
        if self.is_identity:
            return bytes(POINT_SIZE_BYTES)
        return bytes([2 | (self.y & 1)]) + self.x.to_bytes(POINT_SIZE_BYTES - 1, "big")

    @classmethod
    def from_bytes(cls, curve: CurveParameters, data: bytes) -> Point:
        """
        Decode and validate a compressed point.

        Raises:
            CryptographicError: If the encoding is malformed or off-curve
        """
        if not isinstance(data, (bytes, bytearray)) or len(data) != POINT_SIZE_BYTES:
            raise CryptographicError(
                f"Invalid point encoding: expected {POINT_SIZE_BYTES} bytes"
            )
        if data == bytes(POINT_SIZE_BYTES):
            return curve.identity
        prefix = data[0]
        if prefix not in (2, 3):
            raise CryptographicError(f"Invalid point prefix: {prefix:#x}")
        x = int.from_bytes(data[1:], "big")
        point = curve.lift_x(x, odd_y=(prefix == 3))
        if point is None:
            raise CryptographicError(f"Invalid point: x is not on {curve.name}")
        return point


# ============================================================================
# MULTISCALAR MULTIPLICATION
# ============================================================================


def _pippenger_window(n: int) -> int:
    return max(2, min(12, n.bit_length() - 4))


def multiscalar_mul(
    curve: CurveParameters, scalars: Iterable[int], points: Iterable[Point]
) -> Point:
    """
    Compute ``sum(s_i * P_i)`` with the Pippenger bucket method.

    Args:
        curve: Curve of every point (also fixes the identity for empty sums)
        scalars: Integer scalars, reduced modulo the group order
        points: Points on ``curve``

    Returns:
        The combined point

    Raises:
        ValueError: If the two sequences differ in length
    """
    scalars = list(scalars)
    points = list(points)
    if len(scalars) != len(points):
        raise ValueError(
            f"Length mismatch: {len(scalars)} scalars vs {len(points)} points"
        )

    order = curve.order
    p = curve.p
    pairs: List[Tuple[int, Point]] = []
    for s, P in zip(scalars, points):
        if P.curve is not curve:
            raise CryptographicError("Point on the wrong curve in multiscalar_mul")
        s %= order
        if s and not P.is_identity:
            pairs.append((s, P))

    if not pairs:
        return curve.identity

    if len(pairs) < 8:
        acc = _JACOBIAN_IDENTITY
        for s, P in pairs:
            acc = _jac_add(acc, _jac_scalar_mul(P, s), p)
        return _jac_to_point(curve, acc)

    c = _pippenger_window(len(pairs))
    mask = (1 << c) - 1
    windows = (order.bit_length() + c - 1) // c

    result = _JACOBIAN_IDENTITY
    for w in reversed(range(windows)):
        for _ in range(c):
            result = _jac_double(result, p)

        shift = w * c
        buckets = [_JACOBIAN_IDENTITY] * (mask + 1)
        for s, P in pairs:
            digit = (s >> shift) & mask
            if digit:
                buckets[digit] = _jac_add_affine(buckets[digit], P.x, P.y, p)

        running = _JACOBIAN_IDENTITY
        total = _JACOBIAN_IDENTITY
        for digit in range(mask, 0, -1):
            running = _jac_add(running, buckets[digit], p)
            total = _jac_add(total, running, p)
        result = _jac_add(result, total, p)

    return _jac_to_point(curve, result)


# ============================================================================
# SCALAR ENCODING
# ============================================================================


def scalar_to_bytes(value: int) -> bytes:
    """32-byte big-endian encoding of a reduced scalar."""
    return value.to_bytes(SCALAR_SIZE_BYTES, "big")


def scalar_from_bytes(data: bytes, modulus: int) -> int:
    """
    Decode a 32-byte big-endian scalar.

    Raises:
        CryptographicError: If the encoding is the wrong size or not reduced
    """
    if not isinstance(data, (bytes, bytearray)) or len(data) != SCALAR_SIZE_BYTES:
        raise CryptographicError(
            f"Invalid scalar encoding: expected {SCALAR_SIZE_BYTES} bytes"
        )
    value = int.from_bytes(data, "big")
    if value >= modulus:
        raise CryptographicError("Scalar is not reduced")
    return value


# ============================================================================
# CURVE CYCLE
# ============================================================================


@dataclass(frozen=True)
class CurvePair:
    """
    Explicit 2-cycle configuration.

    ``even.p == odd.order`` and ``odd.p == even.order``: a coordinate of a
    point on one curve is a scalar for the other one, which is how values
    cross between the two commitment spaces.
    """

    even: CurveParameters
    odd: CurveParameters

    def __post_init__(self):
        if self.even.p != self.odd.order or self.odd.p != self.even.order:
            raise ConfigurationError(
                f"{self.even.name}/{self.odd.name} do not form a 2-cycle"
            )

    def other(self, curve: CurveParameters) -> CurveParameters:
        """The cycle partner of ``curve``."""
        if curve is self.even:
            return self.odd
        if curve is self.odd:
            return self.even
        raise ConfigurationError(f"{curve.name} is not part of this cycle")

    def x_as_scalar(self, point: Point) -> int:
        """
        Re-interpret the x-coordinate of ``point`` as a scalar of the
        partner curve.

        Raises:
            CryptographicError: If the point is the identity
        """
        partner = self.other(point.curve)
        if point.is_identity:
            raise CryptographicError("The identity has no x-coordinate")
        # Equal fields, so this never fires for a validated point.
        if not 0 <= point.x < partner.order:
            raise CryptographicError("Coordinate out of the partner scalar field")
        return point.x

    def even_x_to_odd_scalar(self, point: Point) -> int:
        if point.curve is not self.even:
            raise ConfigurationError(f"Expected a {self.even.name} point")
        return self.x_as_scalar(point)

    def odd_x_to_even_scalar(self, point: Point) -> int:
        if point.curve is not self.odd:
            raise ConfigurationError(f"Expected a {self.odd.name} point")
        return self.x_as_scalar(point)

    def y_as_scalar(self, point: Point) -> int:
        partner = self.other(point.curve)
        if point.is_identity:
            raise CryptographicError("The identity has no y-coordinate")
        if not 0 <= point.y < partner.order:
            raise CryptographicError("Coordinate out of the partner scalar field")
        return point.y


# ============================================================================
# PASTA CURVES
# ============================================================================

PALLAS = CurveParameters(EVEN_CURVE_NAME, PALLAS_P, PASTA_A, PASTA_B, VESTA_P)
VESTA = CurveParameters(ODD_CURVE_NAME, VESTA_P, PASTA_A, PASTA_B, PALLAS_P)

PASTA_CYCLE = CurvePair(even=PALLAS, odd=VESTA)


def batch_sum(curve: CurveParameters, points: Sequence[Point]) -> Point:
    """Sum of points with one final inversion."""
    acc = _JACOBIAN_IDENTITY
    for P in points:
        if not P.is_identity:
            acc = _jac_add_affine(acc, P.x, P.y, curve.p)
    return _jac_to_point(curve, acc)
