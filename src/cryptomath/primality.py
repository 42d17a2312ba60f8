"""Probabilistic primality testing: a cached small-prime sieve for trial division and Miller-Rabin.

Trial division by the small primes rejects most composite candidates for the price of a few dozen remainders.
Whatever survives goes to Miller-Rabin with witnesses drawn from the OS CSPRNG.

Typical usage example:

    is_probable_prime(7919)
    check_prime(candidate)
    get_pre_primes(151)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets

from cryptomath import config
from cryptomath.numtheory import mod_pow

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


def _sieve(n: int = config.SMALL_PRIME_LIMIT) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = config.SMALL_PRIME_LIMIT, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    `_SMALL_PRIMES` is a read-mostly cache of sieve output: it is only ever replaced wholesale, never mutated, so
    concurrent readers always see a complete list.

    Args:
        n: The number up to which to generate primes. Must be >= 0.
            Ignored if smaller or equal than `_SMALL_PRIMES_CAP`, `change` is False and `_SMALL_PRIMES` is non-empty.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = config.SMALL_PRIME_LIMIT) -> bool:
    """Check the provided `no` against the known small primes.

    Args:
         no: The number to check.
         n: The sieve bound, passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise. A small prime itself passes.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > no:
            return True
        if no % prime == 0:
            return False
    return True


def _decompose(w: int) -> tuple[int, int]:
    """Split w - 1 into 2**r * d with d odd."""
    tw = w - 1
    r = (tw & -tw).bit_length() - 1
    return r, tw >> r


def is_probable_prime(n: int, rounds: int = config.PRIMALITY_TEST_ROUNDS) -> bool:
    """Miller-Rabin probabilistic primality test.

    A False answer is certain. A True answer is wrong with probability at most 4**-rounds.

    Args:
        n: The integer to test.
        rounds: Number of independent random witnesses. Must be >= 1.

    Returns:
        True if `n` is probably prime, False if it is definitely composite.

    Raises:
        ValueError: If `rounds` is less than 1.
    """
    if rounds < 1:
        raise ValueError("At least one Miller-Rabin round is required")
    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0:
        return False
    r, d = _decompose(n)
    for _ in range(rounds):
        a = secrets.randbelow(n - 3) + 2
        x = mod_pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(r - 1):
            x = (x * x) % n
            if x == n - 1:
                break
            if x == 1:
                # Nontrivial square root of 1.
                return False
        else:
            return False
    return True


def _default_rounds(candidate: int) -> int:
    # FIPS 186-5 Appendix C.1, floored at the configured default.
    bits = candidate.bit_length()
    if bits <= 512:
        iters = 40
    elif bits <= 1024:
        iters = 56
    elif bits <= 1536:
        iters = 64
    elif bits <= 2048:
        iters = 70
    else:
        iters = 74
    return max(iters, config.PRIMALITY_TEST_ROUNDS)


def check_prime(candidate: int, rounds: int | None = None, n: int = config.SMALL_PRIME_LIMIT) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    Args:
        candidate: The candidate prime to test.
        rounds: Number of Miller-Rabin rounds.
            If not provided, scales with the bit length of `candidate` and never drops below
            `config.PRIMALITY_TEST_ROUNDS`.
        n: The sieve bound, passed to `_trial_division()`.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if candidate in get_pre_primes(n):
        return True
    return is_probable_prime(candidate, rounds if rounds is not None else _default_rounds(candidate))
