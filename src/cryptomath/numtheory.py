"""Elementary number theory on Python integers: gcd, inverses, exponentiation and the RSA totient.

Python's `int` is arbitrary precision, so the routines below work for any operand size. Both exponentiation
variants are exposed on purpose: `mod_pow` is the fast square-and-multiply, `mod_pow_ct` is the Montgomery ladder
whose operation sequence does not depend on the exponent bits. Callers pick one.

Typical usage example:

    d = mod_inverse(65537, (p - 1) * (q - 1))
    c = mod_pow(m, 65537, n)
    m = mod_pow_ct(c, d, n)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by the Euclidean algorithm.

    Args:
        a: The first integer. Sign is ignored.
        b: The second integer. Sign is ignored.

    Returns:
        The non-negative gcd of `a` and `b`. `gcd(0, 0)` is 0.
    """
    a, b = abs(a), abs(b)
    while b != 0:
        a, b = b, a % b
    return a


def extended_gcd(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*x + b*y = g = gcd(a, b). The back-substitution is carried forward in the loop instead of through
    recursion, which keeps the stack flat for multi-thousand-bit operands.

    Args:
        a: The first integer.
        b: The second integer.

    Returns:
        A tuple (g, x, y) of the gcd and the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    if r0 < 0:
        r0, s0, t0 = -r0, -s0, -t0
    return r0, s0, t0


def mod_inverse(a: int, n: int) -> int | None:
    """Modular multiplicative inverse of `a` modulo `n`.

    Args:
        a: The element to invert.
        n: The modulus. Must be positive.

    Returns:
        The inverse normalized into [0, n), or None if gcd(a, n) != 1.

    Raises:
        ValueError: If `n` is not positive.
    """
    if n <= 0:
        raise ValueError("Modulus must be positive")
    g, x, _ = extended_gcd(a % n, n)
    if g != 1:
        return None
    return x % n


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """Square-and-multiply modular exponentiation.

    Scans the exponent from the least significant bit, multiplying only on set bits. The number of multiplications
    therefore depends on the Hamming weight of the exponent: not constant-time.

    Args:
        base: The base. Reduced into [0, modulus) first.
        exponent: The exponent. Must be non-negative.
        modulus: The modulus. Must be positive.

    Returns:
        base**exponent mod modulus.

    Raises:
        ValueError: On a negative exponent or non-positive modulus.
    """
    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    if modulus == 1:
        return 0
    if exponent == 0:
        return 1
    result = 1
    base %= modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        base = (base * base) % modulus
        exponent >>= 1
    return result


def mod_pow_ct(base: int, exponent: int, modulus: int) -> int:
    """Montgomery-ladder modular exponentiation.

    Keeps the pair (r0, r1) with r1 = r0 * base and pushes every exponent bit, most significant first, through one
    multiplication and one squaring. Which register receives which result depends on the bit, the amount of work
    does not.

    Args:
        base: The base. Reduced into [0, modulus) first.
        exponent: The exponent. Must be non-negative.
        modulus: The modulus. Must be positive.

    Returns:
        base**exponent mod modulus.

    Raises:
        ValueError: On a negative exponent or non-positive modulus.
    """
    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    if modulus == 1:
        return 0
    r0, r1 = 1, base % modulus
    for i in reversed(range(exponent.bit_length())):
        if (exponent >> i) & 1:
            r0 = (r0 * r1) % modulus
            r1 = (r1 * r1) % modulus
        else:
            r1 = (r0 * r1) % modulus
            r0 = (r0 * r0) % modulus
    return r0


def are_coprime(a: int, b: int) -> bool:
    """True if gcd(a, b) == 1."""
    return gcd(a, b) == 1


def euler_totient(p: int, q: int) -> int:
    """Euler's totient of n = p*q, valid only when p and q are distinct primes."""
    return (p - 1) * (q - 1)


def random_range(low: int, high: int) -> int:
    """Uniform random integer in [low, high) from the OS CSPRNG.

    Args:
        low: Inclusive lower bound.
        high: Exclusive upper bound.

    Returns:
        The random integer.

    Raises:
        ValueError: If the range is empty.
    """
    if low >= high:
        raise ValueError("low must be less than high")
    return low + secrets.randbelow(high - low)
