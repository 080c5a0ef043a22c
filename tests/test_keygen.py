# pylint: disable=protected-access,missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import math
import random

from cryptography.hazmat.primitives.asymmetric import rsa
import pytest
import sympy

from textbookrsa import keygen
from textbookrsa.errors import InvalidExponentChoice
from textbookrsa.errors import PrimeSearchAborted

# Reference primes from an independent implementation.
rsa_primes = {}
for target in (1024, 2048):
    numbers = rsa.generate_private_key(public_exponent=65537, key_size=target).private_numbers()
    rsa_primes[target] = (numbers.p, numbers.q)

base_primetest_cases = [
    # Edge Cases (neither)
    (-7, False),
    (0, False),
    (1, False),
    # Known Primes
    (2, True),
    (3, True),
    (5, True),
    (101, True),
    (3571, True),
    (9973, True),
    # Composite
    (4, False),
    (6, False),
    (9, False),
    # Fermat Pseudoprimes (numbers that fool naive tests)
    (341, False),  # 11 * 31
    (561, False),  # 3 * 11 * 17 (Carmichael number)
    (1105, False),  # 5 * 13 * 17 (Carmichael number)
    # Pseudo-prime (PsP)
    (121, False),
    (703, False),
    (781, False),
    (1541, False),
    (2047, False),
    (52633, False),
]

large_primetest_cases = [
    # Current Largest Known Prime
    pytest.param(2**136279841 - 1, True, marks=pytest.mark.extreme, id="LargeInt-MaxPrime"),
    # Mersenne
    (2**127 - 1, True),
    (2**521 - 1, True),
    (2**128 - 1, False),
    # Fermat number F7, composite
    (2**128 + 1, False),
    # RSA PRIMES
    (rsa_primes[1024][0], True),
    (rsa_primes[1024][1], True),
    (rsa_primes[2048][0], True),
    (rsa_primes[2048][1], True),
    # RSA non-PRIMES (low multiplier)
    (rsa_primes[1024][0] * 3, False),
    (rsa_primes[2048][1] * 3, False),
    # RSA Prime Composites
    (rsa_primes[1024][0] * rsa_primes[1024][1], False),
    (rsa_primes[1024][0] * rsa_primes[2048][1], False),
    (rsa_primes[2048][0] * rsa_primes[2048][1], False),
]

prime_sizes = [8, 16, 32, 64]


def id_generator(param):
    if isinstance(param, int) and param > 1000000:
        return f"LargeInt-{param.bit_length()}bits"
    return str(param)


@pytest.mark.parametrize("n,expected", base_primetest_cases + large_primetest_cases, ids=id_generator)
def test_is_probable_prime(n, expected):
    assert keygen.is_probable_prime(n) == expected


@pytest.mark.parametrize("n,expected", base_primetest_cases + large_primetest_cases, ids=id_generator)
def test_is_probable_prime_seeded(n, expected, seeded_rng):
    assert keygen.is_probable_prime(n, 8, seeded_rng) == expected


def test_is_probable_prime_exhaustive_small(seeded_rng):
    for n in range(10000):
        assert keygen.is_probable_prime(n, 16, seeded_rng) == sympy.isprime(n), n


@pytest.mark.parametrize("rounds", [0, -1])
def test_is_probable_prime_validates(rounds):
    with pytest.raises(ValueError):
        keygen.is_probable_prime(7, rounds)


def test_is_probable_prime_uses_given_source(mocker):
    rng = mocker.Mock(spec=random.Random)
    rng.randrange.return_value = 2
    assert keygen.is_probable_prime(101, 3, rng)
    assert rng.randrange.call_count == 3
    rng.randrange.assert_called_with(2, 100)


def test_miller_rabin_witness_range(mocker):
    # 49 = 7**2. 48 is -1 mod 49 and fools every round, 2 exposes it.
    rng = mocker.Mock(spec=random.Random)
    rng.randrange.side_effect = [48]
    assert keygen._miller_rabin(49, 1, rng)
    rng.randrange.side_effect = [2]
    assert not keygen._miller_rabin(49, 1, rng)


@pytest.mark.parametrize("bits", prime_sizes)
def test_random_prime_shape(bits):
    for _ in range(50):
        p = keygen.random_prime(bits)
        assert p.bit_length() == bits
        assert p & 1
        assert sympy.isprime(p)


@pytest.mark.parametrize("bits", [512, pytest.param(1024, marks=pytest.mark.slow)])
def test_random_prime_large(bits):
    p = keygen.random_prime(bits)
    assert p.bit_length() == bits
    assert sympy.isprime(p)


def test_random_prime_smallest():
    assert keygen.random_prime(2) == 3


def test_random_prime_seeded():
    assert keygen.random_prime(128, random.Random(7)) == keygen.random_prime(128, random.Random(7))


@pytest.mark.parametrize("bits", [1, 0, -5])
def test_random_prime_validates(bits):
    with pytest.raises(ValueError):
        keygen.random_prime(bits)


def test_random_prime_attempt_cap(mocker):
    mocker.patch("textbookrsa.keygen.is_probable_prime", return_value=False)
    with pytest.raises(PrimeSearchAborted):
        keygen.random_prime(256, max_attempts=10)
    assert keygen.is_probable_prime.call_count == 10


def test_random_prime_deadline(mocker):
    mocker.patch("textbookrsa.keygen.is_probable_prime", return_value=False)
    mocker.patch("time.monotonic", side_effect=[0.0, 1.0, 2.0, 3.0])
    with pytest.raises(PrimeSearchAborted):
        keygen.random_prime(256, deadline=2.5)
    assert keygen.is_probable_prime.call_count == 3


def test_random_prime_masks_candidate(mocker):
    rng = mocker.Mock(spec=random.Random)
    rng.getrandbits.return_value = 0
    mocker.patch("textbookrsa.keygen.is_probable_prime", return_value=True)
    assert keygen.random_prime(64, rng) == (1 << 63) | 1
    rng.getrandbits.assert_called_once_with(64)


def test_generate_primes_distinct(mocker):
    p, q = rsa_primes[1024]
    mocker.patch("textbookrsa.keygen.random_prime", side_effect=[p, p, q])
    rp, rq = keygen.generate_primes(1024)
    assert rp == p
    assert rq == q
    assert keygen.random_prime.call_count == 3


def test_generate_primes_halves_size(mocker):
    mocker.patch("textbookrsa.keygen.random_prime", side_effect=[11, 13])
    keygen.generate_primes(9)
    assert keygen.random_prime.call_args_list[0].args[0] == 4


@pytest.mark.parametrize("size", [7, 4, 0])
def test_generate_key_pair_validates(size):
    with pytest.raises(ValueError):
        keygen.generate_key_pair(size)


def test_generate_key_pair_functional(mocker):
    size = 2048
    src_pub = 65537
    src_p, src_q = rsa_primes[size]
    mocker.patch("textbookrsa.keygen.generate_primes", return_value=(src_p, src_q))
    (n, pub), (n2, d) = keygen.generate_key_pair(size, src_pub)
    assert n == n2 == src_p * src_q
    assert src_pub == pub
    assert d == pow(src_pub, -1, (src_p - 1) * (src_q - 1))


def test_generate_key_pair_invalid_exponent(mocker):
    mocker.patch("textbookrsa.keygen.generate_primes", return_value=(7, 11))
    with pytest.raises(InvalidExponentChoice):
        keygen.generate_key_pair(8, 3)
    assert keygen.generate_primes.call_count == 1


def test_generate_key_pair_regenerates(mocker, caplog):
    mocker.patch("textbookrsa.keygen.generate_primes", side_effect=[(7, 11), (5, 11)])
    with caplog.at_level(logging.WARNING, logger="textbookrsa.keygen"):
        (n, pub), (_, d) = keygen.generate_key_pair(8, 3, regenerate=True)
    assert keygen.generate_primes.call_count == 2
    assert (n, pub, d) == (55, 3, 27)
    assert "regenerating" in caplog.text


def test_generate_key_pair_timeout():
    with pytest.raises(PrimeSearchAborted):
        keygen.generate_key_pair(2048, timeout=0)


@pytest.mark.parametrize("size", [8, 16, 64, 512, 1024, pytest.param(2048, marks=pytest.mark.slow)])
def test_generate_key_pair_roundcryption(size):
    (n, e), (_, d) = keygen.generate_key_pair(size, regenerate=True)
    assert e == 65537
    for message in (0, 1, 2, n // 3, n - 1):
        assert pow(pow(message, e, n), d, n) == message


def test_generate_key_pair_inverse(seeded_rng):
    (n, e), (_, d) = keygen.generate_key_pair(64, rng=seeded_rng, regenerate=True)
    factors = sympy.factorint(n)
    assert len(factors) == 2
    p, q = factors
    assert p != q
    assert (e * d) % ((p - 1) * (q - 1)) == 1
    assert math.gcd(e, (p - 1) * (q - 1)) == 1


@pytest.mark.parametrize("pub", [0, 2, 4, 65536, 1, -3])
def test_generate_key_pair_validates_exponent(mocker, pub):
    mocker.patch("textbookrsa.keygen.generate_primes")
    with pytest.raises(ValueError):
        keygen.generate_key_pair(64, pub, regenerate=True)
    keygen.generate_primes.assert_not_called()
