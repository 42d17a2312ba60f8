"""Elliptic curves y^2 = x^3 + ax + b over prime fields and their chord-and-tangent group law.

Curves and points are immutable value types that validate themselves on construction: a singular curve, or a
coordinate pair off its curve, never becomes an object. Every arithmetic operation therefore starts from validated
inputs, which makes a vanishing slope denominator an internal invariant violation (`DivisionByZero`) rather than a
user error.

Scalar multiplication comes in two flavours and callers choose: `scalar_multiply` (double-and-add, not
constant-time, also behind `k * P`) and `scalar_multiply_secure` (Montgomery ladder, one addition and one doubling
per bit whatever the bit value).

Typical usage example:

    P = Point(1, 10, TEST_23)
    Q = point_add(P, point_double(P))
    R = scalar_multiply_secure(7, P)
    n = point_order(P)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from dataclasses import dataclass
from dataclasses import field as dc_field

from cryptomath import config
from cryptomath.errors import DivisionByZero
from cryptomath.errors import InvalidCurvePoint
from cryptomath.errors import NoModularInverse
from cryptomath.errors import SingularCurve
from cryptomath.field import is_quadratic_residue
from cryptomath.field import mod_add
from cryptomath.field import mod_inv
from cryptomath.field import mod_mul
from cryptomath.field import mod_sqrt
from cryptomath.field import mod_sub
from cryptomath.primality import is_probable_prime


@dataclass(frozen=True)
class Curve:
    """Short Weierstrass curve parameters, optionally with a generator for protocol use.

    Attributes:
        a: Coefficient of x, reduced into [0, p).
        b: Constant term, reduced into [0, p).
        p: The field prime. Must be an odd prime greater than 3.
        g: Affine coordinates of the generator, if any.
        n: Order of the generator. Checked against n * G = infinity.
        h: Cofactor, #E / n. Checked against the Hasse bound.
        name: Display name. Ignored by equality.
    """
    a: int
    b: int
    p: int
    g: tuple[int, int] | None = None
    n: int | None = None
    h: int | None = None
    name: str | None = dc_field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.p <= 3 or not is_probable_prime(self.p):
            raise ValueError("Field modulus must be an odd prime greater than 3")
        object.__setattr__(self, "a", self.a % self.p)
        object.__setattr__(self, "b", self.b % self.p)
        validate_curve_parameters(self)
        if self.g is not None:
            if self.n is None or self.n < 1:
                raise ValueError("A generator needs its order n")
            if not _satisfies(self, *self.g):
                raise InvalidCurvePoint("Generator is not on the curve")
            if not scalar_multiply(self.n, self.generator).is_infinity:
                raise ValueError(f"n * G is not the point at infinity, {self.n} is not the order of G")
            # #E = h * n must respect the Hasse bound |#E - (p + 1)| <= 2 sqrt(p).
            if self.h is not None and (self.h * self.n - self.p - 1)**2 > 4 * self.p:
                raise ValueError(f"Cofactor {self.h} and order {self.n} violate the Hasse bound")

    @property
    def generator(self) -> "Point":
        if self.g is None:
            raise ValueError(f"Curve {self} has no generator")
        return Point(self.g[0], self.g[1], self)

    @property
    def infinity(self) -> "Point":
        return Point(None, None, self)

    @property
    def byte_length(self) -> int:
        """Length of one encoded field element."""
        return (self.p.bit_length() + 7) // 8

    def __str__(self) -> str:
        if self.name:
            return self.name
        return f"y^2 = x^3 + {self.a}x + {self.b} (mod {self.p})"


@dataclass(frozen=True)
class Point:
    """An affine point (x, y) on `curve`, or the point at infinity when both coordinates are None."""
    x: int | None
    y: int | None
    curve: Curve = dc_field(repr=False)

    def __post_init__(self) -> None:
        if (self.x is None) != (self.y is None):
            raise InvalidCurvePoint("A point needs both coordinates, or neither for the point at infinity")
        if self.x is None:
            return
        if not (0 <= self.x < self.curve.p and 0 <= self.y < self.curve.p):
            raise InvalidCurvePoint("Coordinates must be reduced into [0, p)")
        if not _satisfies(self.curve, self.x, self.y):
            raise InvalidCurvePoint(f"({self.x}, {self.y}) is not on {self.curve}")

    @classmethod
    def infinity_on(cls, curve: Curve) -> "Point":
        return cls(None, None, curve)

    @property
    def is_infinity(self) -> bool:
        return self.x is None

    def __str__(self) -> str:
        if self.is_infinity:
            return "Point(∞)"
        return f"Point({self.x}, {self.y})"

    def __neg__(self) -> "Point":
        return point_negate(self)

    def __add__(self, other: "Point") -> "Point":
        if not isinstance(other, Point):
            return NotImplemented
        return point_add(self, other)

    def __sub__(self, other: "Point") -> "Point":
        if not isinstance(other, Point):
            return NotImplemented
        return point_add(self, point_negate(other))

    def __mul__(self, k: int) -> "Point":
        if not isinstance(k, int):
            return NotImplemented
        return scalar_multiply(k, self)

    __rmul__ = __mul__

    def to_bytes(self, compressed: bool = False) -> bytes:
        """SEC1 encoding: 0x04 || x || y, or 0x02/0x03 || x when compressed. Infinity is a single zero byte."""
        if self.is_infinity:
            return b"\x00"
        size = self.curve.byte_length
        xb = self.x.to_bytes(size, "big")
        if compressed:
            return bytes([2 + (self.y & 1)]) + xb
        return b"\x04" + xb + self.y.to_bytes(size, "big")

    @classmethod
    def from_bytes(cls, data: bytes, curve: Curve) -> "Point":
        """Decode a SEC1 point, validating it against `curve`.

        Raises:
            InvalidCurvePoint: On a malformed encoding or coordinates off the curve.
            NotImplementedError: For compressed points when p = 1 (mod 4).
        """
        size = curve.byte_length
        if data == b"\x00":
            return cls.infinity_on(curve)
        if len(data) == 1 + 2 * size and data[0] == 4:
            return cls(int.from_bytes(data[1:1 + size], "big"), int.from_bytes(data[1 + size:], "big"), curve)
        if len(data) == 1 + size and data[0] in (2, 3):
            return lift_x(int.from_bytes(data[1:], "big"), curve, odd=data[0] == 3)
        raise InvalidCurvePoint("Malformed SEC1 point encoding")


def _rhs(curve: Curve, x: int) -> int:
    """x^3 + ax + b mod p."""
    p = curve.p
    return mod_add(mod_add(mod_mul(mod_mul(x, x, p), x, p), mod_mul(curve.a, x, p), p), curve.b, p)


def _satisfies(curve: Curve, x: int, y: int) -> bool:
    return mod_mul(y, y, curve.p) == _rhs(curve, x)


def _discriminant(curve: Curve) -> int:
    p = curve.p
    four_a3 = mod_mul(4, mod_mul(mod_mul(curve.a, curve.a, p), curve.a, p), p)
    twenty_seven_b2 = mod_mul(27, mod_mul(curve.b, curve.b, p), p)
    return mod_add(four_a3, twenty_seven_b2, p)


def is_nonsingular(curve: Curve) -> bool:
    """True if 4a^3 + 27b^2 != 0 (mod p)."""
    return _discriminant(curve) != 0


def validate_curve_parameters(curve: Curve) -> None:
    """Reject a singular curve before any point arithmetic touches it.

    Raises:
        SingularCurve: If 4a^3 + 27b^2 = 0 (mod p).
    """
    if not is_nonsingular(curve):
        raise SingularCurve(f"{curve} is singular: 4a^3 + 27b^2 = 0 (mod {curve.p})")


def is_on_curve(point: Point) -> bool:
    """True if `point` satisfies its curve equation. The point at infinity always does."""
    if point.is_infinity:
        return True
    return _satisfies(point.curve, point.x, point.y)


def lift_x(x: int, curve: Curve, odd: bool) -> Point:
    """The point with abscissa `x` whose ordinate has the requested parity.

    Raises:
        InvalidCurvePoint: If no point with this abscissa exists.
        NotImplementedError: If p = 1 (mod 4).
    """
    if not 0 <= x < curve.p:
        raise InvalidCurvePoint("Coordinates must be reduced into [0, p)")
    y = mod_sqrt(_rhs(curve, x), curve.p)
    if y is None:
        raise InvalidCurvePoint(f"No point with x = {x} on {curve}")
    if (y & 1) != odd:
        y = (curve.p - y) % curve.p
    return Point(x, y, curve)


def _check_same_curve(p1: Point, p2: Point) -> None:
    if p1.curve != p2.curve:
        raise InvalidCurvePoint("Points lie on different curves")


def _slope(numerator: int, denominator: int, p: int) -> int:
    try:
        return mod_mul(numerator, mod_inv(denominator, p), p)
    except NoModularInverse as exc:
        raise DivisionByZero("Slope denominator vanished for validated points") from exc


def point_negate(point: Point) -> Point:
    """Reflection across the x-axis: -(x, y) = (x, p - y)."""
    if point.is_infinity:
        return point
    return Point(point.x, (point.curve.p - point.y) % point.curve.p, point.curve)


def point_add(p1: Point, p2: Point) -> Point:
    """Chord rule: P + Q.

    Raises:
        InvalidCurvePoint: If the points lie on different curves.
        DivisionByZero: If an internal invariant is broken.
    """
    _check_same_curve(p1, p2)
    if p1.is_infinity:
        return p2
    if p2.is_infinity:
        return p1
    curve = p1.curve
    if p1.x == p2.x and p1.y != p2.y:
        # Vertical chord, P = -Q.
        return curve.infinity
    if p1 == p2:
        return point_double(p1)
    p = curve.p
    lam = _slope(mod_sub(p2.y, p1.y, p), mod_sub(p2.x, p1.x, p), p)
    x3 = mod_sub(mod_sub(mod_mul(lam, lam, p), p1.x, p), p2.x, p)
    y3 = mod_sub(mod_mul(lam, mod_sub(p1.x, x3, p), p), p1.y, p)
    return Point(x3, y3, curve)


def point_double(point: Point) -> Point:
    """Tangent rule: 2P. A vertical tangent (y = 0) gives the point at infinity."""
    if point.is_infinity or point.y == 0:
        return point.curve.infinity
    curve = point.curve
    p = curve.p
    lam = _slope(mod_add(mod_mul(3, mod_mul(point.x, point.x, p), p), curve.a, p), mod_mul(2, point.y, p), p)
    x3 = mod_sub(mod_mul(lam, lam, p), mod_mul(2, point.x, p), p)
    y3 = mod_sub(mod_mul(lam, mod_sub(point.x, x3, p), p), point.y, p)
    return Point(x3, y3, curve)


def scalar_multiply(k: int, point: Point) -> Point:
    """Double-and-add: kP in O(log k) group operations.

    Adds only on set bits of `k`, so the running time leaks the Hamming weight of the scalar.

    Raises:
        ValueError: If `k` is negative.
    """
    if k < 0:
        raise ValueError("Scalar must be non-negative")
    result = point.curve.infinity
    addend = point
    while k:
        if k & 1:
            result = point_add(result, addend)
        addend = point_double(addend)
        k >>= 1
    return result


def scalar_multiply_secure(k: int, point: Point) -> Point:
    """Montgomery ladder: kP with exactly one addition and one doubling per bit of `k`.

    Keeps R1 = R0 + P after every bit. The bit value only decides which register receives which result.

    Raises:
        ValueError: If `k` is negative.
    """
    if k < 0:
        raise ValueError("Scalar must be non-negative")
    r0 = point.curve.infinity
    r1 = point
    for i in reversed(range(k.bit_length())):
        if (k >> i) & 1:
            r0 = point_add(r0, r1)
            r1 = point_double(r1)
        else:
            r1 = point_add(r0, r1)
            r0 = point_double(r0)
    return r0


def point_order(point: Point, max_order: int = config.POINT_ORDER_LIMIT) -> int | None:
    """Smallest m >= 1 with mP = infinity, by repeated addition.

    Linear in the order, so meant for small demonstration curves only.

    Args:
        point: The point.
        max_order: Give up past this order.

    Returns:
        The order, or None if it exceeds `max_order`.
    """
    current = point
    order = 1
    while order <= max_order:
        if current.is_infinity:
            return order
        current = point_add(current, point)
        order += 1
    return None


def _check_small(curve: Curve) -> None:
    if curve.p > config.POINT_COUNT_LIMIT:
        raise ValueError(f"Exhaustive point search is limited to p <= {config.POINT_COUNT_LIMIT}")


def count_points(curve: Curve) -> int:
    """#E(F_p), including the point at infinity, by Euler's criterion on every abscissa."""
    _check_small(curve)
    p = curve.p
    count = 1
    for x in range(p):
        rhs = _rhs(curve, x)
        if rhs == 0:
            count += 1
        elif is_quadratic_residue(rhs, p):
            count += 2
    return count


def enumerate_points(curve: Curve) -> list[Point]:
    """Every point of a small curve, infinity first, then ordered by (x, y)."""
    _check_small(curve)
    p = curve.p
    roots: dict[int, list[int]] = {}
    for y in range(p):
        roots.setdefault(y * y % p, []).append(y)
    points = [curve.infinity]
    for x in range(p):
        rhs = _rhs(curve, x)
        points.extend(Point(x, y, curve) for y in roots.get(rhs, []))
    return points


TEST_23 = Curve(0, 7, 23, name="E(F23): y^2 = x^3 + 7")
TEST_97 = Curve(2, 3, 97, name="E(F97): y^2 = x^3 + 2x + 3")
TOY_17 = Curve(2, 2, 17, g=(5, 1), n=19, h=1, name="E(F17): y^2 = x^3 + 2x + 2")
SECP256K1 = Curve(
    a=0,
    b=7,
    p=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
    g=(0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
       0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8),
    n=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
    h=1,
    name="secp256k1",
)
P256 = Curve(
    a=-3,
    b=0x5AC635D8AA3A93E7B3EBBD55769886BC651D06B0CC53B0F63BCE3C3E27D2604B,
    p=0xFFFFFFFF00000001000000000000000000000000FFFFFFFFFFFFFFFFFFFFFFFF,
    g=(0x6B17D1F2E12C4247F8BCE6E563A440F277037D812DEB33A0F4A13945D898C296,
       0x4FE342E2FE1A7F9B8EE7EB4A7C0F9E162BCE33576B315ECECBB6406837BF51F5),
    n=0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551,
    h=1,
    name="P-256",
)

CURVES: dict[str, Curve] = {
    "test-23": TEST_23,
    "test-97": TEST_97,
    "toy-17": TOY_17,
    "secp256k1": SECP256K1,
    "p256": P256,
}
