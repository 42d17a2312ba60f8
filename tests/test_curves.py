# pylint: disable=protected-access,missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import itertools
import math
import secrets

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
import pytest

from cryptomath import curves
from cryptomath.curves import Curve
from cryptomath.curves import Point
from cryptomath.errors import DivisionByZero
from cryptomath.errors import InvalidCurvePoint
from cryptomath.errors import SingularCurve

SMALL_CURVES = [curves.TEST_23, curves.TEST_97, curves.TOY_17]
REFERENCE_CURVES = [(curves.SECP256K1, ec.SECP256K1()), (curves.P256, ec.SECP256R1())]


def brute_force_count(curve):
    """Every (x, y) pair checked directly, plus the point at infinity."""
    p = curve.p
    return 1 + sum(1 for x in range(p) for y in range(p) if (y * y - x**3 - curve.a * x - curve.b) % p == 0)


@pytest.fixture(scope="module", params=SMALL_CURVES, ids=str)
def small_curve(request) -> Curve:
    return request.param


@pytest.fixture(scope="module")
def points(small_curve) -> list[Point]:
    return curves.enumerate_points(small_curve)


@pytest.fixture(scope="module", params=REFERENCE_CURVES, ids=lambda c: str(c[0]))
def reference_curve(request) -> tuple[Curve, ec.EllipticCurve]:
    return request.param


@pytest.mark.parametrize("a,b,p", [(0, 0, 23), (-3, 2, 23), (0, 0, 97)])
def test_singular_curve_rejected(a, b, p):
    with pytest.raises(SingularCurve):
        Curve(a, b, p)


@pytest.mark.parametrize("p", [21, 1, 2, 3, 97 * 89])
def test_curve_needs_prime_field(p):
    with pytest.raises(ValueError):
        Curve(1, 1, p)


def test_curve_reduces_coefficients():
    curve = Curve(-3, 30, 23)
    assert (curve.a, curve.b) == (20, 7)
    assert curves.is_nonsingular(curve)


def test_curve_generator_validated():
    with pytest.raises(InvalidCurvePoint):
        Curve(0, 7, 23, g=(1, 11), n=24)
    with pytest.raises(ValueError):
        Curve(0, 7, 23, g=(1, 10))
    with pytest.raises(ValueError):
        _ = curves.TEST_23.generator


@pytest.mark.parametrize("n,h", [(18, 1), (20, None), (0, None), (19, 2), (2, 1)])
def test_curve_generator_order_checked(n, h):
    with pytest.raises(ValueError):
        Curve(2, 2, 17, g=(5, 1), n=n, h=h)


def test_curve_lying_order_rejected():
    # (5, 0) has order 2 on y^2 = x^3 + 2x + 1 over F17.
    with pytest.raises(ValueError):
        Curve(2, 1, 17, g=(5, 0), n=19, h=1)
    honest = Curve(2, 1, 17, g=(5, 0), n=2)
    assert curves.point_order(honest.generator) == 2


def test_curve_value_semantics():
    assert curves.TEST_23 == Curve(0, 7, 23)
    assert hash(curves.TEST_23) == hash(Curve(0, 7, 23, name="other"))
    assert curves.TEST_23 != curves.TEST_97
    assert curves.SECP256K1.byte_length == 32
    assert curves.TEST_23.byte_length == 1
    assert str(Curve(2, 3, 97)) == "y^2 = x^3 + 2x + 3 (mod 97)"
    assert set(curves.CURVES) == {"test-23", "test-97", "toy-17", "secp256k1", "p256"}


@pytest.mark.parametrize("x,y", [(1, 11), (1, -13), (24, 0), (1, 33), (0, 0)])
def test_point_off_curve_rejected(x, y):
    with pytest.raises(InvalidCurvePoint):
        Point(x, y, curves.TEST_23)


@pytest.mark.parametrize("x,y", [(1, None), (None, 10)])
def test_point_half_infinity_rejected(x, y):
    with pytest.raises(InvalidCurvePoint):
        Point(x, y, curves.TEST_23)


def test_point_display():
    P = Point(1, 10, curves.TEST_23)
    assert str(P) == "Point(1, 10)"
    assert str(curves.TEST_23.infinity) == "Point(∞)"
    assert Point.infinity_on(curves.TEST_23).is_infinity
    assert curves.is_on_curve(P)
    assert curves.is_on_curve(curves.TEST_23.infinity)


def test_identity_and_inverse(points):
    inf = points[0]
    assert inf.is_infinity
    assert -inf == inf
    for P in points:
        assert P + inf == P
        assert inf + P == P
        assert (P + (-P)).is_infinity
        assert (P - P).is_infinity
        assert -(-P) == P


def test_commutativity(points):
    for P, Q in itertools.combinations(points, 2):
        assert curves.point_add(P, Q) == curves.point_add(Q, P)


def test_associativity(points):
    sample = points[:9]
    for P, Q, R in itertools.product(sample, repeat=3):
        assert (P + Q) + R == P + (Q + R)


def test_double_is_self_add(points):
    for P in points:
        assert curves.point_double(P) == curves.point_add(P, P)


def test_vertical_tangent(points):
    two_torsion = [P for P in points[1:] if P.y == 0]
    for P in two_torsion:
        assert curves.point_double(P).is_infinity
        assert curves.point_order(P) == 2


def test_no_division_by_zero_for_valid_points(points):
    # Every pair on the curve, including P + P and P + (-P).
    for P, Q in itertools.product(points, repeat=2):
        R = P + Q
        assert curves.is_on_curve(R)


def test_slope_division_by_zero():
    with pytest.raises(DivisionByZero) as exc:
        curves._slope(1, 0, 23)
    assert isinstance(exc.value, ZeroDivisionError)


def test_mixed_curves_rejected():
    with pytest.raises(InvalidCurvePoint):
        curves.point_add(Point(1, 10, curves.TEST_23), curves.TOY_17.generator)


def test_count_points(small_curve, points):
    count = curves.count_points(small_curve)
    assert count == brute_force_count(small_curve)
    assert count == len(points)
    assert len(set(points)) == len(points)
    # Hasse bound.
    assert abs(count - (small_curve.p + 1)) <= 2 * math.isqrt(small_curve.p) + 2


@pytest.mark.parametrize("curve,expected", [(curves.TEST_23, 24), (curves.TOY_17, 19)],
                         ids=str)
def test_count_points_known(curve, expected):
    assert curves.count_points(curve) == expected


def test_count_points_large_field_refused():
    with pytest.raises(ValueError):
        curves.count_points(curves.SECP256K1)
    with pytest.raises(ValueError):
        curves.enumerate_points(curves.P256)


def test_point_order_divides_group_order(small_curve, points):
    count = len(points)
    for P in points:
        order = curves.point_order(P)
        assert order is not None
        assert count % order == 0
        assert curves.scalar_multiply(order, P).is_infinity


def test_point_order_known():
    assert curves.point_order(curves.TOY_17.generator) == 19
    assert curves.point_order(Point(3, 6, curves.TEST_97)) == 5
    assert curves.point_order(curves.TEST_23.infinity) == 1


def test_point_order_limit():
    assert curves.point_order(curves.TOY_17.generator, max_order=18) is None
    assert curves.point_order(curves.SECP256K1.generator, max_order=50) is None


def test_toy_curve_multiples():
    G = curves.TOY_17.generator
    assert 2 * G == Point(6, 3, curves.TOY_17)
    assert 3 * G == Point(10, 6, curves.TOY_17)
    assert (19 * G).is_infinity
    assert 20 * G == G


@pytest.mark.parametrize("fun", [curves.scalar_multiply, curves.scalar_multiply_secure])
def test_scalar_multiply_matches_repeated_addition(fun):
    G = curves.TOY_17.generator
    acc = curves.TOY_17.infinity
    for k in range(0, 45):
        assert fun(k, G) == acc
        acc = acc + G


@pytest.mark.parametrize("fun", [curves.scalar_multiply, curves.scalar_multiply_secure])
def test_scalar_multiply_negative(fun):
    with pytest.raises(ValueError):
        fun(-1, curves.TOY_17.generator)


def test_scalar_multiply_of_infinity():
    inf = curves.TEST_23.infinity
    assert curves.scalar_multiply(5, inf).is_infinity
    assert curves.scalar_multiply_secure(5, inf).is_infinity


def test_operator_sugar():
    P = Point(1, 10, curves.TEST_23)
    assert 3 * P == P * 3 == curves.scalar_multiply(3, P)
    assert P + P == curves.point_double(P)


def test_multiplication_matches_reference(reference_curve):
    curve, ref = reference_curve
    G = curve.generator
    for k in [1, 2, 3, 0xFF, 2**128 + 1, curve.n - 1, secrets.randbelow(curve.n - 1) + 1]:
        expected = ec.derive_private_key(k, ref).public_key().public_numbers()
        fast = curves.scalar_multiply(k, G)
        assert (fast.x, fast.y) == (expected.x, expected.y)
        assert curves.scalar_multiply_secure(k, G) == fast
    assert curves.scalar_multiply(curve.n, G).is_infinity
    assert curves.scalar_multiply_secure(curve.n, G).is_infinity


@pytest.mark.parametrize("compressed,fmt", [(False, serialization.PublicFormat.UncompressedPoint),
                                            (True, serialization.PublicFormat.CompressedPoint)])
def test_sec1_matches_reference(reference_curve, compressed, fmt):
    curve, ref = reference_curve
    k = secrets.randbelow(curve.n - 1) + 1
    expected = ec.derive_private_key(k, ref).public_key().public_bytes(serialization.Encoding.X962, fmt)
    Q = curves.scalar_multiply(k, curve.generator)
    assert Q.to_bytes(compressed) == expected
    assert Point.from_bytes(expected, curve) == Q


def test_sec1_small_curve():
    P = Point(1, 10, curves.TEST_23)
    assert P.to_bytes() == bytes([4, 1, 10])
    assert P.to_bytes(compressed=True) == bytes([2, 1])
    assert Point.from_bytes(bytes([2, 1]), curves.TEST_23) == P
    assert Point.from_bytes(bytes([3, 1]), curves.TEST_23) == -P
    assert Point.from_bytes(b"\x00", curves.TEST_23).is_infinity
    assert curves.TEST_23.infinity.to_bytes() == b"\x00"


@pytest.mark.parametrize("data", [b"", b"\x04\x01", bytes([5, 1, 10]), bytes([4, 1, 11]), bytes([2, 0]), b"\x00\x00"])
def test_sec1_malformed(data):
    with pytest.raises(InvalidCurvePoint):
        Point.from_bytes(data, curves.TEST_23)


def test_lift_x():
    assert curves.lift_x(1, curves.TEST_23, odd=False) == Point(1, 10, curves.TEST_23)
    assert curves.lift_x(1, curves.TEST_23, odd=True) == Point(1, 13, curves.TEST_23)
    with pytest.raises(InvalidCurvePoint):
        curves.lift_x(0, curves.TEST_23, odd=False)
    with pytest.raises(InvalidCurvePoint):
        curves.lift_x(23, curves.TEST_23, odd=False)


def test_compressed_decoding_p_1_mod_4_unsupported():
    P = Point(3, 6, curves.TEST_97)
    assert Point.from_bytes(P.to_bytes(), curves.TEST_97) == P
    with pytest.raises(NotImplementedError):
        Point.from_bytes(P.to_bytes(compressed=True), curves.TEST_97)
