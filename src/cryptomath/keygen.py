"""RSA key generation: random probable primes and validated key pairs.

Both searches are written once, as generators that yield at their cooperative suspension points. The synchronous
entry points simply run the generator to completion. The `*_async` entry points hand control back to the asyncio
event loop at every suspension point, so a UI or request loop stays responsive during multi-second generations.
Cancellation therefore only ever lands between two candidates, and since every value is rebuilt on each call
nothing is left half-done.

Typical usage example:

    p = generate_prime(512)
    keys = generate_key_pair(1024, on_progress=print)
    keys = await generate_key_pair_async(2048)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import asyncio
from collections.abc import Callable
from collections.abc import Generator
import logging
import secrets
from typing import NamedTuple, TypeVar
import warnings

from cryptomath import config
from cryptomath.errors import CompositeRejected
from cryptomath.errors import KeyGenerationError
from cryptomath.numtheory import are_coprime
from cryptomath.numtheory import euler_totient
from cryptomath.numtheory import mod_inverse
from cryptomath.primality import _trial_division
from cryptomath.primality import is_probable_prime
from cryptomath.rsa import KeyPair
from cryptomath.rsa import RSAPrivateKey
from cryptomath.rsa import RSAPublicKey

logger = logging.getLogger(__name__)

T = TypeVar("T")

STAGE_PRIME = "Generating prime"
STAGE_P = "Generating prime p"
STAGE_Q = "Generating prime q"
STAGE_MODULUS = "Computing modulus n"
STAGE_TOTIENT = "Computing totient"
STAGE_PRIVATE = "Computing private exponent d"
STAGE_COMPLETE = "Complete"


class Progress(NamedTuple):
    """Snapshot handed to progress callbacks during a prime search."""
    attempt: int
    is_prime: bool


ProgressCallback = Callable[[str, Progress | None], None]


def _validate_prime_size(bits: int) -> None:
    if bits < 2:
        raise ValueError("Prime size must be at least 2 bits.")


def _validate_key_size(bits: int, pub: int) -> None:
    if bits < config.MIN_KEY_SIZE:
        raise ValueError(f"Size must be at least {config.MIN_KEY_SIZE}.")
    if bits % 2 != 0:
        raise ValueError("Size must be an even number.")
    if pub % 2 == 0 or pub < 3:
        raise ValueError("Public exponent must be odd and at least 3.")
    if bits < config.SECURE_KEY_SIZE:
        warnings.warn(f"{bits}-bit RSA keys are insecure! Demonstration use only.", RuntimeWarning, stacklevel=3)


def _random_candidate(bits: int, top_bits: int = 1) -> int:
    """Random odd integer of exactly `bits` bits with the `top_bits` most significant bits set."""
    msk = ((1 << top_bits) - 1) << (bits - top_bits)
    return secrets.randbits(bits) | msk | 1


def _test_candidate(candidate: int, rounds: int, n: int = config.SMALL_PRIME_LIMIT) -> None:
    """Raise CompositeRejected unless `candidate` is a probable prime.

    Same two stages as `check_prime`, kept apart so the rejecting stage is known.
    """
    if not _trial_division(candidate, n):
        raise CompositeRejected(candidate, "trial division")
    if not is_probable_prime(candidate, rounds):
        raise CompositeRejected(candidate, "miller-rabin")


def _prime_search(bits: int,
                  rounds: int,
                  on_progress: ProgressCallback | None,
                  stage: str,
                  top_bits: int = 1) -> Generator[None, None, int]:
    """Generate-and-test loop behind `generate_prime`.

    Yields every `config.YIELD_INTERVAL` candidates and returns the prime.

    Raises:
        KeyGenerationError: If generation loops way beyond a reasonable time and a bit.
    """
    _validate_prime_size(bits)
    top_bits = min(top_bits, bits - 1)
    rep_cap = max(bits, 32) * config.PRIME_ATTEMPT_FACTOR
    for attempt in range(1, rep_cap + 1):
        candidate = _random_candidate(bits, top_bits)
        try:
            _test_candidate(candidate, rounds)
        except CompositeRejected:
            if on_progress is not None and attempt % config.PROGRESS_INTERVAL == 0:
                on_progress(stage, Progress(attempt, False))
            if attempt % config.YIELD_INTERVAL == 0:
                yield
            continue
        logger.debug("Found %d-bit prime after %d attempts", bits, attempt)
        if on_progress is not None:
            on_progress(stage, Progress(attempt, True))
        return candidate
    raise KeyGenerationError(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def _key_pair_search(bits: int, pub: int, rounds: int, on_progress: ProgressCallback | None,
                     max_attempts: int) -> Generator[None, None, KeyPair]:
    """Bounded retry loop behind `generate_key_pair`. Each failed validation restarts from fresh primes.

    Expects `bits` and `pub` to be validated already.
    """
    half = bits // 2
    min_diff = 1 << max(half - config.MIN_PQ_DIFFERENCE_BITS, 0)

    def report(stage: str) -> None:
        if on_progress is not None:
            on_progress(stage, None)

    for attempt in range(1, max_attempts + 1):
        report(STAGE_P)
        # Two forced top bits make n exactly `bits` long.
        p = yield from _prime_search(half, rounds, on_progress, STAGE_P, top_bits=2)
        report(STAGE_Q)
        q = yield from _prime_search(half, rounds, on_progress, STAGE_Q, top_bits=2)
        while q == p:  # (Un)Likely story.
            q = yield from _prime_search(half, rounds, on_progress, STAGE_Q, top_bits=2)
        if abs(p - q) < min_diff:
            logger.warning("p and q are too close, regenerating (attempt %d/%d)", attempt, max_attempts)
            yield
            continue
        report(STAGE_MODULUS)
        n = p * q
        report(STAGE_TOTIENT)
        phi = euler_totient(p, q)
        if not are_coprime(pub, phi):
            logger.warning("e and phi(n) are not coprime, regenerating (attempt %d/%d)", attempt, max_attempts)
            yield
            continue
        report(STAGE_PRIVATE)
        d = mod_inverse(pub, phi)
        if d is None:
            logger.warning("No modular inverse of e, regenerating (attempt %d/%d)", attempt, max_attempts)
            yield
            continue
        if (pub * d) % phi != 1:
            logger.warning("Key verification failed, regenerating (attempt %d/%d)", attempt, max_attempts)
            yield
            continue
        logger.debug("Generated %d-bit key pair after %d attempt(s)", n.bit_length(), attempt)
        report(STAGE_COMPLETE)
        return KeyPair(RSAPublicKey(pub, n), RSAPrivateKey(d, n), p, q, phi)
    raise KeyGenerationError(f"No valid {bits}-bit key pair after {max_attempts} attempts.")


def _drive(search: Generator[None, None, T]) -> T:
    """Run a search generator to completion without yielding anywhere."""
    while True:
        try:
            next(search)
        except StopIteration as done:
            return done.value


async def _drive_async(search: Generator[None, None, T]) -> T:
    """Run a search generator, handing control to the event loop at each of its suspension points."""
    try:
        while True:
            try:
                next(search)
            except StopIteration as done:
                return done.value
            await asyncio.sleep(0)
    finally:
        search.close()


def generate_prime(bits: int,
                   on_progress: ProgressCallback | None = None,
                   rounds: int = config.PRIMALITY_TEST_ROUNDS) -> int:
    """Generate a probable prime of exactly `bits` bits.

    Draws random odd candidates with the top bit forced set, trial-divides them by the small primes and runs
    Miller-Rabin on the survivors.

    Args:
        bits: The size of the prime in bits. Must be >= 2.
        on_progress: Optional `(stage, Progress)` callback, invoked at bounded frequency.
        rounds: Miller-Rabin rounds per surviving candidate.

    Returns:
        A probable prime number.

    Raises:
        ValueError: If `bits` is too small.
        KeyGenerationError: If the attempt cap is exhausted.
    """
    return _drive(_prime_search(bits, rounds, on_progress, STAGE_PRIME))


async def generate_prime_async(bits: int,
                               on_progress: ProgressCallback | None = None,
                               rounds: int = config.PRIMALITY_TEST_ROUNDS) -> int:
    """Cooperative variant of `generate_prime`, yielding to the event loop every few candidates."""
    return await _drive_async(_prime_search(bits, rounds, on_progress, STAGE_PRIME))


def generate_key_pair(bits: int = config.DEFAULT_KEY_SIZE,
                      on_progress: ProgressCallback | None = None,
                      pub: int = config.PUBLIC_EXPONENT,
                      rounds: int = config.PRIMALITY_TEST_ROUNDS,
                      max_attempts: int = config.MAX_KEYGEN_ATTEMPTS) -> KeyPair:
    """Generates an RSA key pair.

    Draws p and q of `bits / 2` bits each, rejecting pairs that are equal or closer than
    `2**(bits/2 - config.MIN_PQ_DIFFERENCE_BITS)`, then derives n, phi and d = e**-1 mod phi. Any failed check,
    including the final (e * d) mod phi == 1 verification, restarts the whole generation.

    Args:
        bits: The modulus size. Must be even and at least `config.MIN_KEY_SIZE`.
        on_progress: Optional `(stage, Progress | None)` callback.
        pub: The public exponent. Defaults (and recommended) to use 65537.
        rounds: Miller-Rabin rounds per surviving candidate.
        max_attempts: Cap on whole-generation restarts.

    Returns:
        The generated KeyPair, with a modulus of exactly `bits` bits.

    Raises:
        ValueError: If `bits` or `pub` do not meet requirements.
        KeyGenerationError: If every attempt failed validation.
    """
    _validate_key_size(bits, pub)
    return _drive(_key_pair_search(bits, pub, rounds, on_progress, max_attempts))


async def generate_key_pair_async(bits: int = config.DEFAULT_KEY_SIZE,
                                  on_progress: ProgressCallback | None = None,
                                  pub: int = config.PUBLIC_EXPONENT,
                                  rounds: int = config.PRIMALITY_TEST_ROUNDS,
                                  max_attempts: int = config.MAX_KEYGEN_ATTEMPTS) -> KeyPair:
    """Cooperative variant of `generate_key_pair`."""
    _validate_key_size(bits, pub)
    return await _drive_async(_key_pair_search(bits, pub, rounds, on_progress, max_attempts))
