"""Exception taxonomy for the number-theoretic engine.

Each failure kind gets its own class so callers can tell an oversized message from a bad ciphertext without parsing
messages. The classes also inherit from the closest built-in exception, so code that only knows about `ValueError`
keeps working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class CryptoMathError(Exception):
    """Base class of every error raised by cryptomath."""


class MessageTooLarge(CryptoMathError, ValueError):
    """The message representative is not in range [0, n-1]."""


class InvalidCiphertext(CryptoMathError, ValueError):
    """The ciphertext representative is not in range [0, n-1]."""


class NoModularInverse(CryptoMathError, ValueError):
    """The element shares a factor with the modulus and cannot be inverted."""


class CompositeRejected(CryptoMathError):
    """A prime candidate failed a test. Used for control flow inside the prime search only."""

    def __init__(self, candidate: int, stage: str) -> None:
        super().__init__(f"Candidate rejected by {stage}")
        self.candidate = candidate
        self.stage = stage


class SingularCurve(CryptoMathError, ValueError):
    """The curve discriminant 4a^3 + 27b^2 vanishes modulo p."""


class InvalidCurvePoint(CryptoMathError, ValueError):
    """The coordinates do not satisfy the curve equation, or the point is unusable as a key."""


class DivisionByZero(CryptoMathError, ZeroDivisionError):
    """A slope denominator had no inverse during point arithmetic.

    Unreachable for points that passed validation. Seeing this means an internal invariant is broken.
    """


class InvalidSignature(CryptoMathError, ValueError):
    """The signature encoding is malformed, or r/s lie outside [1, n-1]."""


class KeyGenerationError(CryptoMathError, RuntimeError):
    """A generation loop exhausted its attempt cap."""
