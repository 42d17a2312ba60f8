"""Hash and key-derivation collaborators for the elliptic-curve protocols.

Both are thin, replaceable byte-to-byte transforms: a table of named digests and HKDF (RFC 5869). The protocols
accept any callable with the same shape in their place.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from collections.abc import Callable
import hashlib
import hmac
from math import ceil

# name: (constructor, digest length in bytes)
HASH_TLL = {
    "sha256": (hashlib.sha256, 32),
    "sha384": (hashlib.sha384, 48),
    "sha512": (hashlib.sha512, 64),
}

KDF = Callable[[bytes, int], bytes]


def to_bytes(message: str | bytes) -> bytes:
    """Strings are hashed as their UTF-8 encoding."""
    if isinstance(message, str):
        return message.encode("utf-8")
    return message


def hash_message(message: str | bytes, hashf: str = "sha256") -> bytes:
    """Digest `message` with the named hash function.

    Raises:
        ValueError: If the hash function is not in `HASH_TLL`.
    """
    try:
        fun, _ = HASH_TLL[hashf]
    except KeyError as exc:
        raise ValueError(f"Unsupported hash function {hashf!r}") from exc
    return fun(to_bytes(message)).digest()


def hkdf_sha256(ikm: bytes, length: int = 32, salt: bytes | None = None, info: bytes = b"") -> bytes:
    """HKDF-Extract-and-Expand with SHA-256 (RFC 5869).

    Args:
        ikm: Input keying material, e.g. the shared x-coordinate.
        length: Output length in bytes. At most 255 * 32.
        salt: Optional salt. Defaults to 32 zero bytes.
        info: Optional context string.

    Returns:
        `length` bytes of output keying material.

    Raises:
        ValueError: If `length` is out of range.
    """
    if not 0 < length <= 255 * 32:
        raise ValueError("Requested HKDF output length out of range")
    if salt is None:
        salt = b"\x00" * 32
    prk = hmac.new(salt, ikm, hashlib.sha256).digest()
    okm = b""
    t = b""
    for counter in range(1, ceil(length / 32) + 1):
        t = hmac.new(prk, t + info + bytes([counter]), hashlib.sha256).digest()
        okm += t
    return okm[:length]
