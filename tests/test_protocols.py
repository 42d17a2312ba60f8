# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import hashlib
import logging
import secrets

from cryptography import exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import utils
import pytest

from cryptomath import curves
from cryptomath import hashing
from cryptomath import protocols
from cryptomath.curves import Curve
from cryptomath.curves import Point
from cryptomath.errors import InvalidCurvePoint
from cryptomath.errors import InvalidSignature
from cryptomath.errors import KeyGenerationError

PROTOCOL_CURVES = [curves.TOY_17, curves.SECP256K1, curves.P256]
REFERENCE_CURVES = [(curves.SECP256K1, ec.SECP256K1()), (curves.P256, ec.SECP256R1())]
HASHES = {"sha256": hashes.SHA256, "sha384": hashes.SHA384, "sha512": hashes.SHA512}
MESSAGE = "The quick brown fox jumps over the lazy dog"

# RFC 6979, appendix A.2.5 (ECDSA, 256 bits, prime field).
RFC6979_X = 0xC9AFA9D845BA75166B5C215767B1D6934E50C3DB36E89B127B8A622B120F6721
RFC6979_UX = 0x60FED4BA255A9D31C961EB74C6356D68C049B8923B61FA6CE669622E60F29FB6
RFC6979_VECTORS = [
    ("sample", 0xA6E3C57DD01ABE90086538398355DD4C3B17AA873382B0F24D6129493D8AAD60,
     0xEFD48B2AACB6A8FD1140DD9CD45E81D69D2C877B56AAF991C34D0EA84EAF3716,
     0xF7CB1C942D657C41D436C7A1B6E29F65F3E900DBB9AFF4064DC4AB2F843ACDA8),
    ("test", 0xD16B6AE827F17175E040871A1C7EC3500192C4C92677336EC2537ACAEE0008E0,
     0xF1ABB023518351CD71D881567B1EA663ED3EFCF6C5132B354F28D3B0B7D38367,
     0x019F4113742A2B14BD25926B49C649155F267E60D3814B4C0CC84250E46F0083),
]


@pytest.fixture(scope="module", params=PROTOCOL_CURVES, ids=str)
def curve(request) -> Curve:
    return request.param


@pytest.fixture(scope="module", params=REFERENCE_CURVES, ids=lambda c: str(c[0]))
def reference_curve(request) -> tuple[Curve, ec.EllipticCurve]:
    return request.param


@pytest.fixture(scope="module", params=[True, False])
def constant_time(request) -> bool:
    return request.param


@pytest.fixture(scope="module")
def subgroup_curve() -> tuple[Curve, Point, Point]:
    """TEST_23 (24 points) with an order-3 generator, and a point of order 2 outside that subgroup."""
    points = curves.enumerate_points(curves.TEST_23)
    g = next(P for P in points if curves.point_order(P) == 3)
    t = next(P for P in points if curves.point_order(P) == 2)
    sub = Curve(0, 7, 23, g=(g.x, g.y), n=3, h=8)
    return sub, Point(g.x, g.y, sub), Point(t.x, t.y, sub)


def to_reference_public(point: Point, ref: ec.EllipticCurve) -> ec.EllipticCurvePublicKey:
    return ec.EllipticCurvePublicNumbers(point.x, point.y, ref).public_key()


def from_reference_public(key: ec.EllipticCurvePublicKey, curve: Curve) -> Point:
    numbers = key.public_numbers()
    return Point(numbers.x, numbers.y, curve)


def test_key_pair(curve, constant_time):
    pair = protocols.ecdh_generate_key_pair(curve, constant_time)
    assert 1 <= pair.private_key < curve.n
    assert pair.public_key == curves.scalar_multiply(pair.private_key, curve.generator)
    protocols.validate_public_key(pair.public_key, curve)
    assert "<hidden>" in repr(pair)


def test_key_pair_needs_generator():
    with pytest.raises(ValueError):
        protocols.ecdh_generate_key_pair(curves.TEST_23)


def test_private_key_from_csprng(mocker):
    mocker.patch("secrets.randbelow", return_value=4)
    assert protocols.generate_private_key(curves.TOY_17) == 5
    secrets.randbelow.assert_called_once_with(18)


def test_ecdh_agreement(curve, constant_time):
    alice = protocols.ecdh_generate_key_pair(curve)
    bob = protocols.ecdh_generate_key_pair(curve)
    s_a = protocols.compute_shared_point(alice.private_key, bob.public_key, curve, constant_time)
    s_b = protocols.compute_shared_point(bob.private_key, alice.public_key, curve, constant_time)
    assert s_a == s_b
    assert s_a == curves.scalar_multiply(alice.private_key * bob.private_key % curve.n, curve.generator)
    k_a = protocols.compute_shared_secret(alice.private_key, bob.public_key, curve, constant_time=constant_time)
    k_b = protocols.compute_shared_secret(bob.private_key, alice.public_key, curve, constant_time=constant_time)
    assert k_a == k_b
    assert len(k_a) == 32


def test_ecdh_secret_is_kdf_of_x(curve):
    alice = protocols.ecdh_generate_key_pair(curve)
    bob = protocols.ecdh_generate_key_pair(curve)
    z = protocols.compute_shared_point(alice.private_key, bob.public_key, curve).x.to_bytes(curve.byte_length, "big")
    assert protocols.compute_shared_secret(alice.private_key, bob.public_key, curve) == hashing.hkdf_sha256(z, 32)
    assert protocols.compute_shared_secret(alice.private_key, bob.public_key, curve, 16,
                                           kdf=lambda ikm, length: ikm[:length]) == z[:16]


def test_ecdh_matches_reference(reference_curve):
    curve, ref = reference_curve
    ours = protocols.ecdh_generate_key_pair(curve)
    theirs = ec.generate_private_key(ref)
    expected = theirs.exchange(ec.ECDH(), to_reference_public(ours.public_key, ref))
    peer = from_reference_public(theirs.public_key(), curve)
    shared = protocols.compute_shared_point(ours.private_key, peer, curve)
    assert shared.x.to_bytes(curve.byte_length, "big") == expected
    assert protocols.compute_shared_secret(ours.private_key, peer, curve) == hashing.hkdf_sha256(expected, 32)


def test_ecdh_rejects_bad_peer(curve):
    pair = protocols.ecdh_generate_key_pair(curve)
    with pytest.raises(InvalidCurvePoint):
        protocols.compute_shared_secret(pair.private_key, curve.infinity, curve)
    foreign = protocols.ecdh_generate_key_pair(curves.TOY_17 if curve != curves.TOY_17 else curves.P256)
    with pytest.raises(InvalidCurvePoint):
        protocols.validate_public_key(foreign.public_key, curve)


@pytest.mark.parametrize("private_key", [0, -1])
def test_ecdh_rejects_bad_private(private_key):
    peer = protocols.ecdh_generate_key_pair(curves.TOY_17).public_key
    with pytest.raises(ValueError):
        protocols.compute_shared_point(private_key, peer, curves.TOY_17)
    with pytest.raises(ValueError):
        protocols.compute_shared_point(curves.TOY_17.n, peer, curves.TOY_17)


def test_validate_public_key_subgroup(subgroup_curve):
    sub, g, t = subgroup_curve
    protocols.validate_public_key(g, sub)
    with pytest.raises(InvalidCurvePoint):
        protocols.validate_public_key(t, sub)
    with pytest.raises(InvalidCurvePoint):
        protocols.compute_shared_point(1, t, sub)


@pytest.mark.parametrize("constant_time", [True, False])
def test_ecdh_rejects_invalid_curve_point(constant_time):
    # Same field as TOY_17, but (5, 0) has order 2: d * Q would leak d mod 2.
    victim = protocols.ecdh_generate_key_pair(curves.TOY_17)
    weak = Curve(2, 1, 17, g=(5, 0), n=2)
    evil = Point(5, 0, weak)
    with pytest.raises(InvalidCurvePoint):
        protocols.compute_shared_point(victim.private_key, evil, curves.TOY_17, constant_time)
    with pytest.raises(InvalidCurvePoint):
        protocols.compute_shared_secret(victim.private_key, evil, curves.TOY_17, constant_time=constant_time)
    # Identical coordinates and equation, different declared group parameters.
    relabelled = Curve(2, 2, 17)
    with pytest.raises(InvalidCurvePoint):
        protocols.compute_shared_point(victim.private_key, Point(5, 1, relabelled), curves.TOY_17)


def test_ecdsa_roundtrip(curve, constant_time):
    pair = protocols.ecdh_generate_key_pair(curve)
    sig = protocols.ecdsa_sign(MESSAGE, pair.private_key, curve, constant_time=constant_time)
    sig.validate(curve.n)
    assert protocols.ecdsa_verify(MESSAGE, sig, pair.public_key, constant_time=constant_time)


def test_ecdsa_deterministic(curve):
    pair = protocols.ecdh_generate_key_pair(curve)
    assert protocols.ecdsa_sign(MESSAGE, pair.private_key, curve) == protocols.ecdsa_sign(
        MESSAGE, pair.private_key, curve, constant_time=True)
    assert protocols.ecdsa_sign(MESSAGE.encode("utf-8"), pair.private_key, curve) == protocols.ecdsa_sign(
        MESSAGE, pair.private_key, curve)


@pytest.mark.parametrize("hashf", list(HASHES))
def test_ecdsa_rejects_tampering(reference_curve, hashf):
    curve, _ = reference_curve
    pair = protocols.ecdh_generate_key_pair(curve)
    other = protocols.ecdh_generate_key_pair(curve)
    sig = protocols.ecdsa_sign(MESSAGE, pair.private_key, curve, hashf)
    assert protocols.ecdsa_verify(MESSAGE, sig, pair.public_key, hashf)
    assert not protocols.ecdsa_verify(MESSAGE + ".", sig, pair.public_key, hashf)
    assert not protocols.ecdsa_verify(MESSAGE, sig, other.public_key, hashf)
    assert not protocols.ecdsa_verify(MESSAGE, protocols.Signature(sig.r, (sig.s + 1) % curve.n), pair.public_key,
                                      hashf)


def test_ecdsa_out_of_range(curve):
    pair = protocols.ecdh_generate_key_pair(curve)
    sig = protocols.ecdsa_sign(MESSAGE, pair.private_key, curve)
    for bad in (protocols.Signature(0, sig.s), protocols.Signature(sig.r, 0), protocols.Signature(curve.n, sig.s),
                protocols.Signature(sig.r, curve.n + sig.s), protocols.Signature(-sig.r, sig.s)):
        assert not protocols.ecdsa_verify(MESSAGE, bad, pair.public_key)
        with pytest.raises(InvalidSignature):
            bad.validate(curve.n)


def test_ecdsa_bad_keys(curve):
    with pytest.raises(ValueError):
        protocols.ecdsa_sign(MESSAGE, 0, curve)
    with pytest.raises(ValueError):
        protocols.ecdsa_sign(MESSAGE, curve.n, curve)
    with pytest.raises(InvalidCurvePoint):
        protocols.ecdsa_verify(MESSAGE, protocols.Signature(1, 1), curve.infinity)


@pytest.mark.parametrize("message,k,r,s", RFC6979_VECTORS, ids=[v[0] for v in RFC6979_VECTORS])
def test_ecdsa_rfc6979_vectors(message, k, r, s):
    assert protocols.public_key_from_private(RFC6979_X, curves.P256).x == RFC6979_UX
    digest = hashlib.sha256(message.encode("ascii")).digest()
    assert next(protocols.rfc6979_nonces(RFC6979_X, digest, curves.P256.n)) == k
    assert protocols.ecdsa_sign(message, RFC6979_X, curves.P256) == protocols.Signature(r, s)


@pytest.mark.parametrize("hashf", list(HASHES))
def test_ecdsa_verified_by_reference(reference_curve, hashf):
    curve, ref = reference_curve
    pair = protocols.ecdh_generate_key_pair(curve)
    der = protocols.ecdsa_sign(MESSAGE, pair.private_key, curve, hashf).to_der()
    reference = to_reference_public(pair.public_key, ref)
    reference.verify(der, MESSAGE.encode("utf-8"), ec.ECDSA(HASHES[hashf]()))
    with pytest.raises(exceptions.InvalidSignature):
        reference.verify(der, b"tampered", ec.ECDSA(HASHES[hashf]()))


@pytest.mark.parametrize("hashf", list(HASHES))
def test_ecdsa_verifies_reference(reference_curve, hashf):
    curve, ref = reference_curve
    theirs = ec.generate_private_key(ref)
    der = theirs.sign(MESSAGE.encode("utf-8"), ec.ECDSA(HASHES[hashf]()))
    sig = protocols.Signature.from_der(der)
    assert protocols.ecdsa_verify(MESSAGE, sig, from_reference_public(theirs.public_key(), curve), hashf)


def test_ecdsa_retries_zero_r(mocker, cryptomath_logs):
    G = curves.TOY_17.generator
    k_zero = next(k for k in range(1, 19) if (k * G).x % 19 == 0)
    mocker.patch("cryptomath.protocols.rfc6979_nonces", return_value=iter([k_zero, 5, 7, 9]))
    sig = protocols.ecdsa_sign(MESSAGE, 3, curves.TOY_17)
    assert sig.r != 0 and sig.s != 0
    assert protocols.ecdsa_verify(MESSAGE, sig, 3 * G)
    assert any(r.levelno == logging.DEBUG and "r = 0" in r.getMessage() for r in cryptomath_logs.records)


def test_ecdsa_gives_up(mocker):
    G = curves.TOY_17.generator
    k_zero = next(k for k in range(1, 19) if (k * G).x % 19 == 0)
    mocker.patch("cryptomath.protocols.rfc6979_nonces", return_value=iter([k_zero]))
    with pytest.raises(KeyGenerationError):
        protocols.ecdsa_sign(MESSAGE, 3, curves.TOY_17)


def test_hash_to_int_truncates():
    digest = hashlib.sha256(MESSAGE.encode("utf-8")).digest()
    assert protocols.hash_to_int(MESSAGE, curves.TOY_17) == digest[0] >> 3
    assert protocols.hash_to_int(MESSAGE, curves.P256) == int.from_bytes(digest, "big")
    assert protocols.hash_to_int(MESSAGE, curves.P256, "sha512") == int.from_bytes(
        hashlib.sha512(MESSAGE.encode("utf-8")).digest()[:32], "big")


@pytest.mark.parametrize("r,s", [(1, 1), (127, 128), (2**255, 3), (curves.P256.n - 1, curves.P256.n - 2)])
def test_signature_der_matches_reference(r, s):
    sig = protocols.Signature(r, s)
    assert sig.to_der() == utils.encode_dss_signature(r, s)
    assert protocols.Signature.from_der(sig.to_der()) == sig


@pytest.mark.parametrize("data", [b"", b"garbage", b"\x01\x01\xff", utils.encode_dss_signature(1, 2) + b"\x00"])
def test_signature_der_malformed(data):
    with pytest.raises(InvalidSignature):
        protocols.Signature.from_der(data)


def test_signature_der_negative():
    with pytest.raises(InvalidSignature):
        protocols.Signature.from_der(protocols.Signature(-5, 3).to_der())
