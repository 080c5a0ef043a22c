"""Integer arithmetic helpers backing key generation.

Typical usage example:

    g, s, t = eea(240, 46)
    d = mod_inverse(65537, phi)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from textbookrsa.errors import NoInverseExists


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def mod_inverse(a: int, m: int) -> int:
    """Computes the modular inverse of `a` modulo `m`.

    Runs the iterative EEA over (m, a mod m); the coefficient belonging to `a` is the inverse once the gcd is known
    to be 1. `a` may be negative or larger than `m`, it is floor-reduced first.

    Args:
        a: The number to invert.
        m: The modulus. Must be > 0.

    Returns:
        The inverse `x` such that a*x = 1 (mod m), in range [0, m).

    Raises:
        ValueError: If `m` is not positive.
        NoInverseExists: If gcd(a, m) != 1.
    """
    if m <= 0:
        raise ValueError("Modulus must be > 0.")
    g, _, x = eea(m, a % m)
    if g != 1:
        raise NoInverseExists(f"No inverse of {a} modulo {m}: gcd is {g}.")
    if x < 0:
        x += m
    return x
