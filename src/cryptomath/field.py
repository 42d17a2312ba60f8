"""Arithmetic in the prime field F_p, as needed by the elliptic-curve group law.

All results are normalized into [0, p). Inversion delegates to the extended Euclidean algorithm in `numtheory`.
Square roots use the closed form for p = 3 (mod 4). The p = 1 (mod 4) case (Tonelli-Shanks) is a known limitation
and raises NotImplementedError instead of returning a wrong root.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from cryptomath import numtheory
from cryptomath.errors import NoModularInverse


def mod_add(a: int, b: int, p: int) -> int:
    return (a + b) % p


def mod_sub(a: int, b: int, p: int) -> int:
    return (a - b) % p


def mod_mul(a: int, b: int, p: int) -> int:
    return (a * b) % p


def mod_inv(a: int, p: int) -> int:
    """Field inverse of `a`.

    Raises:
        NoModularInverse: If `a` is zero modulo `p` (or shares a factor with a non-prime `p`).
    """
    inv = numtheory.mod_inverse(a, p)
    if inv is None:
        raise NoModularInverse(f"{a % p} has no inverse modulo {p}")
    return inv


def mod_pow(base: int, exponent: int, p: int) -> int:
    return numtheory.mod_pow(base, exponent, p)


def is_quadratic_residue(a: int, p: int) -> bool:
    """Euler's criterion: a nonzero `a` is a square mod odd prime `p` iff a**((p-1)/2) == 1. Zero counts as a square."""
    a %= p
    if a == 0:
        return True
    return mod_pow(a, (p - 1) // 2, p) == 1


def mod_sqrt(a: int, p: int) -> int | None:
    """Square root of `a` modulo an odd prime `p` with p = 3 (mod 4).

    Args:
        a: The field element.
        p: The field prime.

    Returns:
        A root x with x*x = a (mod p), or None if `a` is not a quadratic residue. The other root is p - x.

    Raises:
        NotImplementedError: If p = 1 (mod 4).
    """
    a %= p
    if a == 0:
        return 0
    if not is_quadratic_residue(a, p):
        return None
    if p % 4 != 3:
        raise NotImplementedError("Modular square root for p = 1 (mod 4) is not supported")
    return mod_pow(a, (p + 1) // 4, p)
