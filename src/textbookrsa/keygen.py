"""Core Key Generation Utility, mainly focusing on the generation of random large primes.

This module builds textbook RSA key pairs: two random probable primes of half the key size, the modulus and totient
derived from them, and the private exponent as the modular inverse of a fixed public exponent. Primality is decided
with a plain Miller-Rabin test, without trial division or FIPS 186-5 side conditions.

The random source can be swapped for anything offering `getrandbits` and `randrange`, which is how tests get
reproducible primes. The default is the operating system CSPRNG.

Typical usage example:

    is_probable_prime(2**127 - 1)
    p = random_prime(512)
    (n, e), (_, d) = generate_key_pair(1024)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import math
import secrets
import time
from typing import Protocol

from textbookrsa.arith import mod_inverse
from textbookrsa.errors import InvalidExponentChoice
from textbookrsa.errors import PrimeSearchAborted

PUBLIC_EXPONENT: int = 65537
DEFAULT_ROUNDS: int = 16
MINIMUM_KEY_BITS: int = 8

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """What the prime utilities need from a random number generator."""

    def getrandbits(self, k: int, /) -> int:
        ...

    def randrange(self, start: int, stop: int, /) -> int:
        ...


_SYSTEM_RANDOM: RandomSource = secrets.SystemRandom()


def _miller_rabin(w: int, iters: int, rng: RandomSource) -> bool:
    """Perform Miller-Rabin primality test.

    Args:
        w: Odd integer > 3 to be tested.
        iters: Number of Miller-Rabin iterations to perform.
        rng: Source of the random witnesses.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw >> a
    for _ in range(iters):
        b = rng.randrange(2, w - 1)
        z = pow(b, m, w)
        if z == 1 or z == tw:
            continue
        for _ in range(1, a):
            z = pow(z, 2, w)
            if z == tw:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def is_probable_prime(n: int, rounds: int = DEFAULT_ROUNDS, rng: RandomSource | None = None) -> bool:
    """Probabilistic primality check.

    A composite slips through with probability at most 4**-rounds.

    Args:
        n: The candidate to test.
        rounds: Number of random witnesses to try. Defaults to 16. Must be >= 1.
        rng: Source of the witnesses. Defaults to the system CSPRNG.

    Returns:
        True if `n` is probably prime, False if it is definitely composite.

    Raises:
        ValueError: If `rounds` is not positive.
    """
    if rounds < 1:
        raise ValueError("rounds must be >= 1")
    if n < 2:
        return False
    if n in (2, 3):
        return True
    if n % 2 == 0:
        return False
    return _miller_rabin(n, rounds, rng or _SYSTEM_RANDOM)


def random_prime(bits: int,
                 rng: RandomSource | None = None,
                 rounds: int = DEFAULT_ROUNDS,
                 max_attempts: int | None = None,
                 deadline: float | None = None) -> int:
    """Generate a random probable prime of exactly `bits` bits.

    Candidates get their top bit forced on (exact length) and their bottom bit forced on (odd) before testing.
    Without `max_attempts` or `deadline` the search has no upper bound and blocks until a prime turns up, which for
    large sizes can take a while.

    Args:
        bits: The size of the prime in bits. Must be >= 2.
        rng: The random source for candidates and witnesses. Defaults to the system CSPRNG.
        rounds: Miller-Rabin rounds per candidate. Defaults to 16.
        max_attempts: Optional cap on the number of candidates drawn.
        deadline: Optional `time.monotonic()` value after which the search gives up.

    Returns:
        A probable prime.

    Raises:
        ValueError: If `bits` is below 2.
        PrimeSearchAborted: If `max_attempts` or `deadline` was exceeded.
    """
    if bits < 2:
        raise ValueError("Prime size must be at least 2 bits.")
    rng = rng or _SYSTEM_RANDOM
    msk = (1 << bits - 1) | 1
    attempts = 0
    while True:
        if max_attempts is not None and attempts >= max_attempts:
            raise PrimeSearchAborted(f"No {bits}-bit prime found in {attempts} attempts.")
        if deadline is not None and time.monotonic() >= deadline:
            raise PrimeSearchAborted(f"Deadline passed after {attempts} attempts at a {bits}-bit prime.")
        attempts += 1
        candidate = rng.getrandbits(bits) | msk
        if is_probable_prime(candidate, rounds, rng):
            logger.debug("Found %d-bit prime after %d candidates.", bits, attempts)
            return candidate


def generate_primes(size: int, rng: RandomSource | None = None, deadline: float | None = None) -> tuple[int, int]:
    """Generates a pair of distinct primes for a `size`-bit modulus.

    Args:
        size: The key size to generate the prime pair for. Odd sizes are floored when halved.
        rng: The random source. Defaults to the system CSPRNG.
        deadline: Optional `time.monotonic()` value bounding the search.

    Returns:
        Two distinct probable primes of `size // 2` bits each.
    """
    p = random_prime(size // 2, rng, deadline=deadline)
    q = random_prime(size // 2, rng, deadline=deadline)
    while p == q:  # (Un)Likely story.
        logger.debug("Drew the same prime twice, redrawing q.")
        q = random_prime(size // 2, rng, deadline=deadline)
    return p, q


def generate_key_pair(size: int,
                      pub: int = PUBLIC_EXPONENT,
                      rng: RandomSource | None = None,
                      regenerate: bool = False,
                      timeout: float | None = None) -> tuple[tuple[int, int], tuple[int, int]]:
    """Generates an RSA key pair.

    Uses the Euler totient (p-1)(q-1) for the private exponent.

    Args:
        size: The key size in bits. Should be even for balanced primes. Must be >= 8.
        pub: The public exponent. Defaults to 65537. Has to be odd and at least 3.
        rng: The random source. Defaults to the system CSPRNG.
        regenerate: If True, draw fresh primes when `pub` is not coprime with the totient instead of raising.
        timeout: Optional number of seconds the whole generation may take.

    Returns:
        A tuple of (public, private) sub-tuples of (modulus, exponent).

    Raises:
        ValueError: If `size` is too small to yield two distinct primes or `pub` is even or below 3.
        InvalidExponentChoice: If `pub` shares a factor with the totient and `regenerate` is False.
        PrimeSearchAborted: If `timeout` ran out.
    """
    if size < MINIMUM_KEY_BITS:
        raise ValueError(f"Size must be at least {MINIMUM_KEY_BITS}.")
    if pub % 2 == 0 or pub < 3:
        raise ValueError("Public exponent does not meet requirements.")
    deadline = None if timeout is None else time.monotonic() + timeout
    while True:
        p, q = generate_primes(size, rng, deadline)
        n = p * q
        totient = (p - 1) * (q - 1)
        if math.gcd(pub, totient) == 1:
            break
        if not regenerate:
            raise InvalidExponentChoice(f"gcd({pub}, phi) != 1 for the generated primes, generate again.")
        logger.warning("Public exponent %d not coprime with totient, regenerating primes.", pub)
    d = mod_inverse(pub, totient)
    del p, q
    logger.info("Generated %d-bit key pair.", n.bit_length())
    return (n, pub), (n, d)
