"""ECDH key agreement and ECDSA signatures on curves that carry a generator.

ECDH: each party draws d in [1, n-1] and publishes Q = dG. Both arrive at the same point S = d_A(d_B G) =
d_B(d_A G), and a session key is derived from S.x through a key-derivation function (HKDF-SHA256 unless another
one is passed in).

ECDSA: nonces are deterministic per RFC 6979, i.e. derived from the private key and the message digest with
HMAC, so a weak random source can never cause nonce reuse. Signatures serialize to the usual DER
`SEQUENCE { r INTEGER, s INTEGER }`.

The fast double-and-add is the default scalar multiplication here. Pass `constant_time=True` to use the ladder.

Typical usage example:

    alice = ecdh_generate_key_pair(SECP256K1)
    bob = ecdh_generate_key_pair(SECP256K1)
    key = compute_shared_secret(alice.private_key, bob.public_key, SECP256K1)
    sig = ecdsa_sign("Hi there!", alice.private_key, SECP256K1)
    ecdsa_verify("Hi there!", sig, alice.public_key)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from collections.abc import Iterator
import hmac
from itertools import islice
import logging
import secrets
from typing import NamedTuple

from pyasn1 import error
from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.type import namedtype
from pyasn1.type import univ

from cryptomath import config
from cryptomath.curves import Curve
from cryptomath.curves import is_on_curve
from cryptomath.curves import Point
from cryptomath.curves import scalar_multiply
from cryptomath.curves import scalar_multiply_secure
from cryptomath.errors import InvalidCurvePoint
from cryptomath.errors import InvalidSignature
from cryptomath.errors import KeyGenerationError
from cryptomath.field import mod_inv
from cryptomath.hashing import hash_message
from cryptomath.hashing import HASH_TLL
from cryptomath.hashing import hkdf_sha256
from cryptomath.hashing import KDF

logger = logging.getLogger(__name__)


class ECDSASigValue(univ.Sequence):
    """ASN.1 layout of an ECDSA signature (RFC 3279)."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("r", univ.Integer()),
        namedtype.NamedType("s", univ.Integer()),
    )


class ECKeyPair(NamedTuple):
    """A private scalar and its public point Q = dG."""
    private_key: int
    public_key: Point

    def __repr__(self) -> str:
        return f"ECKeyPair(private_key=<hidden>, public_key={self.public_key})"


class Signature(NamedTuple):
    """An ECDSA signature (r, s)."""
    r: int
    s: int

    def in_range(self, n: int) -> bool:
        return 1 <= self.r < n and 1 <= self.s < n

    def validate(self, n: int) -> None:
        """Raises InvalidSignature unless both r and s are in [1, n-1]."""
        if not self.in_range(n):
            raise InvalidSignature("Signature components must be in range [1, n-1]")

    def to_der(self) -> bytes:
        payload = ECDSASigValue()
        payload["r"] = self.r
        payload["s"] = self.s
        return encoder.encode(payload)

    @classmethod
    def from_der(cls, data: bytes) -> "Signature":
        """Decode a DER signature.

        Raises:
            InvalidSignature: On malformed DER, trailing bytes or negative components.
        """
        try:
            payload, rest = decoder.decode(data, asn1Spec=ECDSASigValue())
            r, s = int(payload["r"]), int(payload["s"])
        except error.PyAsn1Error as exc:
            raise InvalidSignature("Malformed DER signature") from exc
        if rest:
            raise InvalidSignature("Trailing data after DER signature")
        if r < 0 or s < 0:
            raise InvalidSignature("Signature components must be positive")
        return cls(r, s)


def _require_generator(curve: Curve) -> Point:
    if curve.g is None or curve.n is None:
        raise ValueError(f"{curve} has no generator and cannot be used for ECDH/ECDSA")
    return curve.generator


def _multiply(k: int, point: Point, constant_time: bool) -> Point:
    return (scalar_multiply_secure if constant_time else scalar_multiply)(k, point)


def _check_private_key(private_key: int, curve: Curve) -> None:
    if not 1 <= private_key < curve.n:
        raise ValueError("Private key must be in range [1, n-1]")


def validate_public_key(point: Point, curve: Curve) -> None:
    """Full public-key validation: on `curve`, not infinity, and of order n.

    Raises:
        InvalidCurvePoint: If any check fails.
    """
    _require_generator(curve)
    if point.curve != curve:
        raise InvalidCurvePoint(f"Public key does not lie on {curve}")
    if point.is_infinity:
        raise InvalidCurvePoint("Public key is the point at infinity")
    if not is_on_curve(point):
        raise InvalidCurvePoint("Public key does not satisfy the curve equation")
    # With cofactor 1 every finite point already has order n.
    if curve.h != 1 and not scalar_multiply(curve.n, point).is_infinity:
        raise InvalidCurvePoint("Public key is not in the subgroup generated by G")


def generate_private_key(curve: Curve) -> int:
    """Uniform private scalar in [1, n-1] from the OS CSPRNG."""
    _require_generator(curve)
    return secrets.randbelow(curve.n - 1) + 1


def public_key_from_private(private_key: int, curve: Curve, constant_time: bool = False) -> Point:
    """Q = dG."""
    generator = _require_generator(curve)
    _check_private_key(private_key, curve)
    return _multiply(private_key, generator, constant_time)


def ecdh_generate_key_pair(curve: Curve, constant_time: bool = False) -> ECKeyPair:
    """Draw a fresh key pair on `curve`. ECDSA uses the same key shape."""
    d = generate_private_key(curve)
    return ECKeyPair(d, public_key_from_private(d, curve, constant_time))


def compute_shared_point(private_key: int, peer_public: Point, curve: Curve, constant_time: bool = False) -> Point:
    """S = d_self * Q_peer, after validating the peer's point against our own `curve`.

    The peer's point carries a curve of its own, which is never trusted: it must equal `curve`.

    Raises:
        InvalidCurvePoint: If the peer key is invalid or the shared point is the point at infinity.
    """
    validate_public_key(peer_public, curve)
    _check_private_key(private_key, curve)
    shared = _multiply(private_key, peer_public, constant_time)
    if shared.is_infinity:
        raise InvalidCurvePoint("Shared point is the point at infinity")
    return shared


def compute_shared_secret(private_key: int,
                          peer_public: Point,
                          curve: Curve,
                          length: int = config.SHARED_SECRET_LENGTH,
                          kdf: KDF = hkdf_sha256,
                          constant_time: bool = False) -> bytes:
    """Derive a `length`-byte session key from the x-coordinate of the shared point.

    Args:
        private_key: This party's private scalar.
        peer_public: The other party's public point.
        curve: The curve this party's key lives on. The peer's point is validated against it.
        length: Output length in bytes.
        kdf: `(ikm, length) -> bytes` key-derivation function.
        constant_time: Use the Montgomery ladder.

    Returns:
        The derived key.
    """
    shared = compute_shared_point(private_key, peer_public, curve, constant_time)
    z = shared.x.to_bytes(curve.byte_length, "big")
    return kdf(z, length)


def _bits2int(data: bytes, qlen: int) -> int:
    """Leftmost `qlen` bits of `data` as an integer."""
    v = int.from_bytes(data, "big")
    blen = len(data) * 8
    if blen > qlen:
        v >>= blen - qlen
    return v


def hash_to_int(message: str | bytes, curve: Curve, hashf: str = config.DEFAULT_HASH) -> int:
    """Digest of `message` truncated to the bit length of the group order."""
    return _bits2int(hash_message(message, hashf), curve.n.bit_length())


def rfc6979_nonces(private_key: int, digest: bytes, n: int, hashf: str = config.DEFAULT_HASH) -> Iterator[int]:
    """Deterministic ECDSA nonce candidates in [1, n-1] (RFC 6979, section 3.2).

    The first value is the nonce. Later values are only needed when a candidate produces r = 0 or s = 0.

    Args:
        private_key: The signing scalar.
        digest: The message digest.
        n: The group order.
        hashf: Hash function used inside HMAC. Should match the one that produced `digest`.
    """
    fun, hlen = HASH_TLL[hashf]
    qlen = n.bit_length()
    rlen = (qlen + 7) // 8
    x = private_key.to_bytes(rlen, "big")
    h1 = (_bits2int(digest, qlen) % n).to_bytes(rlen, "big")
    v = b"\x01" * hlen
    k = b"\x00" * hlen
    k = hmac.new(k, v + b"\x00" + x + h1, fun).digest()
    v = hmac.new(k, v, fun).digest()
    k = hmac.new(k, v + b"\x01" + x + h1, fun).digest()
    v = hmac.new(k, v, fun).digest()
    while True:
        t = b""
        while len(t) * 8 < qlen:
            v = hmac.new(k, v, fun).digest()
            t += v
        candidate = _bits2int(t, qlen)
        if 1 <= candidate < n:
            yield candidate
        k = hmac.new(k, v + b"\x00", fun).digest()
        v = hmac.new(k, v, fun).digest()


def ecdsa_sign(message: str | bytes,
               private_key: int,
               curve: Curve,
               hashf: str = config.DEFAULT_HASH,
               constant_time: bool = False) -> Signature:
    """Sign `message` with the private scalar `private_key`.

    Args:
        message: The message. Strings are hashed as UTF-8.
        private_key: The signing scalar in [1, n-1].
        curve: The curve, with generator.
        hashf: The hash function name.
        constant_time: Use the Montgomery ladder for kG.

    Returns:
        The signature (r, s).

    Raises:
        ValueError: If the key is out of range or the curve has no generator.
        KeyGenerationError: If no usable nonce turned up within the attempt cap.
    """
    generator = _require_generator(curve)
    _check_private_key(private_key, curve)
    n = curve.n
    digest = hash_message(message, hashf)
    h = _bits2int(digest, n.bit_length())
    for k in islice(rfc6979_nonces(private_key, digest, n, hashf), config.MAX_SIGN_ATTEMPTS):
        r = _multiply(k, generator, constant_time).x % n
        if r == 0:
            logger.debug("Nonce produced r = 0, drawing the next one")
            continue
        s = (mod_inv(k, n) * (h + r * private_key)) % n
        if s == 0:
            logger.debug("Nonce produced s = 0, drawing the next one")
            continue
        return Signature(r, s)
    raise KeyGenerationError(f"No valid signature after {config.MAX_SIGN_ATTEMPTS} nonces.")


def ecdsa_verify(message: str | bytes,
                 signature: Signature,
                 public_key: Point,
                 hashf: str = config.DEFAULT_HASH,
                 constant_time: bool = False) -> bool:
    """Verify an ECDSA signature.

    Args:
        message: The signed message.
        signature: The signature (r, s).
        public_key: The signer's public point. Its curve selects the group.
        hashf: The hash function name.
        constant_time: Use the Montgomery ladder.

    Returns:
        True if the signature is valid, False otherwise (including r or s out of range).

    Raises:
        InvalidCurvePoint: If the public key fails validation.
    """
    curve = public_key.curve
    generator = _require_generator(curve)
    validate_public_key(public_key, curve)
    n = curve.n
    r, s = signature
    if not signature.in_range(n):
        return False
    h = hash_to_int(message, curve, hashf)
    w = mod_inv(s, n)
    u1 = (h * w) % n
    u2 = (r * w) % n
    point = _multiply(u1, generator, constant_time) + _multiply(u2, public_key, constant_time)
    if point.is_infinity:
        return False
    return point.x % n == r
