"""Public-key cryptography arithmetic in an Academic Sense.

Provides textbook RSA (key generation, encryption, decryption) on top of a small number-theory toolkit and
Miller-Rabin primality testing, and elliptic curves over prime fields with ECDH key agreement and ECDSA signatures.
Everything is computed with plain Python integers for demonstration. Nothing here is hardened for production use.

Typical usage example:

    keys = generate_key_pair(1024)
    c = encrypt_string("Hi there!", keys.public_key)
    r = decrypt_string(c, keys.private_key)
    alice = ecdh_generate_key_pair(SECP256K1)
    sig = ecdsa_sign("Hi there!", alice.private_key, SECP256K1)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptomath.curves import count_points
from cryptomath.curves import Curve
from cryptomath.curves import CURVES
from cryptomath.curves import P256
from cryptomath.curves import Point
from cryptomath.curves import point_add
from cryptomath.curves import point_double
from cryptomath.curves import point_order
from cryptomath.curves import scalar_multiply
from cryptomath.curves import scalar_multiply_secure
from cryptomath.curves import SECP256K1
from cryptomath.curves import TEST_23
from cryptomath.curves import TEST_97
from cryptomath.curves import TOY_17
from cryptomath.errors import CryptoMathError
from cryptomath.errors import DivisionByZero
from cryptomath.errors import InvalidCiphertext
from cryptomath.errors import InvalidCurvePoint
from cryptomath.errors import InvalidSignature
from cryptomath.errors import KeyGenerationError
from cryptomath.errors import MessageTooLarge
from cryptomath.errors import NoModularInverse
from cryptomath.errors import SingularCurve
from cryptomath.keygen import generate_key_pair
from cryptomath.keygen import generate_key_pair_async
from cryptomath.keygen import generate_prime
from cryptomath.keygen import generate_prime_async
from cryptomath.keygen import Progress
from cryptomath.numtheory import extended_gcd
from cryptomath.numtheory import gcd
from cryptomath.numtheory import mod_inverse
from cryptomath.numtheory import mod_pow
from cryptomath.numtheory import mod_pow_ct
from cryptomath.primality import check_prime
from cryptomath.primality import get_pre_primes
from cryptomath.primality import is_probable_prime
from cryptomath.protocols import compute_shared_secret
from cryptomath.protocols import ecdh_generate_key_pair
from cryptomath.protocols import ecdsa_sign
from cryptomath.protocols import ecdsa_verify
from cryptomath.protocols import ECKeyPair
from cryptomath.protocols import Signature
from cryptomath.rsa import decrypt
from cryptomath.rsa import decrypt_string
from cryptomath.rsa import encrypt
from cryptomath.rsa import encrypt_string
from cryptomath.rsa import KeyPair
from cryptomath.rsa import RSAPrivateKey
from cryptomath.rsa import RSAPublicKey

__version__ = "0.0.1"
__all__ = [
    "gcd",
    "extended_gcd",
    "mod_inverse",
    "mod_pow",
    "mod_pow_ct",
    "get_pre_primes",
    "is_probable_prime",
    "check_prime",
    "RSAPublicKey",
    "RSAPrivateKey",
    "KeyPair",
    "encrypt",
    "decrypt",
    "encrypt_string",
    "decrypt_string",
    "Progress",
    "generate_prime",
    "generate_prime_async",
    "generate_key_pair",
    "generate_key_pair_async",
    "Curve",
    "Point",
    "point_add",
    "point_double",
    "scalar_multiply",
    "scalar_multiply_secure",
    "point_order",
    "count_points",
    "CURVES",
    "TEST_23",
    "TEST_97",
    "TOY_17",
    "SECP256K1",
    "P256",
    "ECKeyPair",
    "Signature",
    "ecdh_generate_key_pair",
    "compute_shared_secret",
    "ecdsa_sign",
    "ecdsa_verify",
    "CryptoMathError",
    "MessageTooLarge",
    "InvalidCiphertext",
    "NoModularInverse",
    "SingularCurve",
    "InvalidCurvePoint",
    "DivisionByZero",
    "InvalidSignature",
    "KeyGenerationError",
]
