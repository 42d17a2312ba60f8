"""Textbook RSA: key value types, encryption, decryption and the message codec.

No padding scheme is applied, so encryption is deterministic and malleable. That is the point of a demonstrator
and is kept as is. The fast square-and-multiply is the default exponentiation, `constant_time=True` switches a call
to the Montgomery ladder.

Messages are converted to integers as base-256 big-endian numbers with one byte per symbol (Latin-1). A message
whose integer is not smaller than the modulus is rejected before encryption, never truncated.

Typical usage example:

    keys = keygen.generate_key_pair(1024)
    c = encrypt_string("Hi there!", keys.public_key)
    r = decrypt_string(c, keys.private_key)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
from typing import NamedTuple

from cryptomath.errors import InvalidCiphertext
from cryptomath.errors import MessageTooLarge
from cryptomath.numtheory import mod_pow
from cryptomath.numtheory import mod_pow_ct

STRING_ENCODING = "latin-1"


class RSAPublicKey(NamedTuple):
    """The public half of a key pair.

    Attributes:
        e: The public exponent.
        n: The modulus.
    """
    e: int
    n: int

    @property
    def bsize(self) -> int:
        """Modulus length in bytes."""
        return (self.n.bit_length() + 7) // 8


class RSAPrivateKey(NamedTuple):
    """The private half of a key pair.

    Attributes:
        d: The private exponent.
        n: The modulus.
    """
    d: int
    n: int

    @property
    def bsize(self) -> int:
        """Modulus length in bytes."""
        return (self.n.bit_length() + 7) // 8

    def __repr__(self) -> str:
        return f"RSAPrivateKey(d=<{self.d.bit_length()} bits>, n={self.n})"


class KeyPair(NamedTuple):
    """A complete RSA key pair together with its generating primes.

    p, q and phi are exposed for demonstration. Nothing in this package ever writes them anywhere.

    Attributes:
        public_key: (e, n).
        private_key: (d, n).
        p: Private prime 1.
        q: Private prime 2.
        phi: (p - 1) * (q - 1).
    """
    public_key: RSAPublicKey
    private_key: RSAPrivateKey
    p: int
    q: int
    phi: int

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key!r}, bits={self.public_key.n.bit_length()})"


def encrypt(message: int, public_key: RSAPublicKey, constant_time: bool = False) -> int:
    """Raw RSA encryption c = m**e mod n.

    Args:
        message: The int-marshalled message.
        public_key: The recipient's public key.
        constant_time: Use the Montgomery ladder instead of square-and-multiply.

    Returns:
        The ciphertext representative.

    Raises:
        MessageTooLarge: If the message is out of range for the key.
    """
    e, n = public_key
    if not 0 <= message < n:
        raise MessageTooLarge("Message representative must be in range [0, n-1]")
    return (mod_pow_ct if constant_time else mod_pow)(message, e, n)


def decrypt(ciphertext: int, private_key: RSAPrivateKey, constant_time: bool = False) -> int:
    """Raw RSA decryption m = c**d mod n.

    Args:
        ciphertext: The ciphertext representative.
        private_key: The recipient's private key.
        constant_time: Use the Montgomery ladder instead of square-and-multiply.

    Returns:
        The message representative.

    Raises:
        InvalidCiphertext: If the ciphertext is out of range for the key.
    """
    d, n = private_key
    if not 0 <= ciphertext < n:
        raise InvalidCiphertext("Ciphertext representative must be in range [0, n-1]")
    return (mod_pow_ct if constant_time else mod_pow)(ciphertext, d, n)


def encrypt_string(message: str, public_key: RSAPublicKey, constant_time: bool = False) -> int:
    """Encode `message` with `string_to_int` and encrypt it."""
    return encrypt(string_to_int(message), public_key, constant_time)


def decrypt_string(ciphertext: int, private_key: RSAPrivateKey, constant_time: bool = False) -> str:
    """Decrypt `ciphertext` and decode the result with `int_to_string`."""
    return int_to_string(decrypt(ciphertext, private_key, constant_time))


def max_message_bytes(public_key: RSAPublicKey) -> int:
    """Longest byte string guaranteed to encode below the modulus."""
    return (public_key.n.bit_length() - 1) // 8


def string_to_int(message: str) -> int:
    """Converts a string to its base-256 big-endian integer, one byte per symbol.

    Args:
        message: The string to convert.

    Returns:
        The representative integer.

    Raises:
        ValueError: If a symbol does not fit in one byte.
    """
    try:
        raw = message.encode(STRING_ENCODING)
    except UnicodeEncodeError as exc:
        raise ValueError("Message symbols must fit in one byte each") from exc
    return bytes_to_integer(raw)


def int_to_string(number: int) -> str:
    """Inverse of `string_to_int`. Zero decodes to a single NUL symbol.

    Args:
        number: The representative integer. Must be non-negative.

    Returns:
        The recovered string.
    """
    if number < 0:
        raise ValueError("Message representative must be non-negative")
    if number == 0:
        return "\0"
    return integer_to_bytes(number, (number.bit_length() + 7) // 8).decode(STRING_ENCODING)


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer in accordance to preset procedures.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int) -> bytes:
    """Converts an integer to a string, using a fixed-length byte representation.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)


def b64_enc(msg: int, msg_size: int) -> str:
    """Encodes an integer into a base64 string.

    Args:
        msg: The message to encode.
        msg_size: The size of the encoded message in bytes.

    Returns:
        A base64 encoded string.
    """
    return base64.b64encode(integer_to_bytes(msg, msg_size)).decode("ascii")


def b64_dec(msg: str) -> int:
    """Decodes a base64 encoded string into an int.

    Args:
        msg: The base64 encoded string.

    Returns:
        The decoded int.
    """
    return bytes_to_integer(base64.b64decode(msg.encode("ascii")))
