"""Tunable constants shared by the RSA and elliptic-curve engines.

Every value here is a default. Functions that consume one also accept it as a keyword argument, so callers can
override a setting for a single call without touching module state.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0

# RSA
PUBLIC_EXPONENT: int = 65537
KEY_SIZES: tuple[int, ...] = (512, 1024, 2048, 4096)
DEFAULT_KEY_SIZE: int = 1024
MIN_KEY_SIZE: int = 16
# Sizes below this still work, but warn. Demonstration only.
SECURE_KEY_SIZE: int = 1024
# |p - q| must be at least 2**(bits/2 - MIN_PQ_DIFFERENCE_BITS), otherwise Fermat factorization applies.
MIN_PQ_DIFFERENCE_BITS: int = 10
MAX_KEYGEN_ATTEMPTS: int = 32
PRIME_ATTEMPT_FACTOR: int = 5

# Primality
# (1/4)**40 == 2**-80
PRIMALITY_TEST_ROUNDS: int = 40
# Sieve bound for trial division, i.e. the first 36 primes.
SMALL_PRIME_LIMIT: int = 151

# Cooperative scheduling
YIELD_INTERVAL: int = 10
PROGRESS_INTERVAL: int = 10

# Elliptic curves
POINT_ORDER_LIMIT: int = 10000
DEFAULT_HASH: str = "sha256"
SHARED_SECRET_LENGTH: int = 32
# Deterministic nonce candidates tried before signing gives up.
MAX_SIGN_ATTEMPTS: int = 64
# Exhaustive point enumeration is only offered for fields up to this size.
POINT_COUNT_LIMIT: int = 1 << 20
