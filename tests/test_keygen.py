# pylint: disable=protected-access,missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import concurrent.futures
import math

import pytest
import sympy

import magickeys
from magickeys import arith
from magickeys import keygen
from magickeys import GenerationExhausted
from magickeys import InvalidKeySize
from magickeys import MagicKey
from magickeys import NonInvertibleExponent

test_sizes = [
    512,
    1024,
    pytest.param(2048, marks=pytest.mark.slow),
    pytest.param(4096, marks=pytest.mark.slow),
]


class ExhaustedBackend(arith.NativeBackend):
    """Backend whose random source never lands on a usable prime."""

    def random_bits(self, bits: int) -> int:
        return (1 << bits) - 1

    def is_probable_prime(self, candidate: int) -> bool:
        return False


@pytest.mark.parametrize("size", test_sizes)
def test_draw_prime_size(size):
    half = size // 2
    p = keygen._draw_prime(half, 65537, arith.get_backend())
    assert p is not None
    assert p.bit_length() == half
    assert p >> (half - 2) == 0b11


@pytest.mark.parametrize("size", [512, 1024])
def test_draw_prime_isprime(size):
    p = keygen._draw_prime(size // 2, 65537, arith.get_backend())
    assert sympy.isprime(p)
    assert math.gcd(p - 1, 65537) == 1


def test_draw_prime_walks_to_next_prime(mocker):
    backend = arith.NativeBackend()
    start = sympy.prevprime(2**255 + 2**254 + 2**200)
    mocker.patch.object(backend, "random_bits", return_value=start + 1)
    expected = sympy.nextprime(start)
    while math.gcd(expected - 1, 65537) != 1:
        expected = sympy.nextprime(expected)
    assert keygen._draw_prime(256, 65537, backend) == expected


def test_draw_prime_round_fails_out_of_range():
    assert keygen._draw_prime(256, 65537, ExhaustedBackend()) is None


def test_draw_prime_rejects_close_prime(mocker):
    backend = arith.NativeBackend()
    p = keygen._draw_prime(256, 65537, backend)
    mocker.patch.object(backend, "random_bits", return_value=p)
    assert keygen._draw_prime(256, 65537, backend, prm_p=p) is None


@pytest.mark.parametrize("size", [512, 1024])
def test_generate_primes_conditions(size):
    p, q = keygen.generate_primes(size)
    assert p != q
    assert p.bit_length() == q.bit_length() == size // 2
    assert (p * q).bit_length() == size
    assert math.gcd(p - 1, 65537) == 1
    assert math.gcd(q - 1, 65537) == 1


def test_generate_primes_shares_round_budget(mocker):
    draw = mocker.patch("magickeys.keygen._draw_prime", side_effect=[None, None, 11, None, 13])
    assert keygen.generate_primes(512, rounds=5) == (11, 13)
    assert draw.call_count == 5


def test_generate_primes_exhausted(mocker):
    draw = mocker.patch("magickeys.keygen._draw_prime", side_effect=[11] + [None] * 99)
    with pytest.raises(GenerationExhausted):
        keygen.generate_primes(512)
    assert draw.call_count == keygen.GENERATION_ROUNDS


def test_generate_primes_exhausted_backend():
    with pytest.raises(GenerationExhausted):
        keygen.generate_primes(512, rounds=3, backend=ExhaustedBackend())


@pytest.mark.parametrize("size", [0, 256, 511, 513, 1023, 4097, 8192])
def test_generate_primes_validates_size(size):
    with pytest.raises(InvalidKeySize):
        keygen.generate_primes(size)


@pytest.mark.parametrize("pub", [1, 2, 65538, -3])
def test_generate_primes_validates_exponent(pub):
    with pytest.raises(ValueError):
        keygen.generate_primes(512, pub)


@pytest.mark.parametrize("size", [511, 4097])
def test_generate_invalid_size(size):
    with pytest.raises(InvalidKeySize):
        MagicKey.generate(size)


def test_generate_key_pair_functional(mocker):
    p, q = sympy.nextprime(2**255 + 2**254), sympy.nextprime(2**255 + 2**254 + 2**250)
    while math.gcd(p - 1, 65537) != 1:
        p = sympy.nextprime(p)
    while math.gcd(q - 1, 65537) != 1:
        q = sympy.nextprime(q)
    mocker.patch("magickeys.keygen.generate_primes", return_value=(p, q))
    n, e, d = keygen.generate_key_pair(512)
    assert n == p * q
    assert e == 65537
    assert d == pow(65537, -1, math.lcm(p - 1, q - 1))


def test_generate_key_pair_non_invertible(mocker):
    mocker.patch("magickeys.keygen.generate_primes", return_value=(7, 11))
    with pytest.raises(NonInvertibleExponent):
        keygen.generate_key_pair(512, 5)


def test_generate_key_pair_roundcryption():
    n, e, d = keygen.generate_key_pair(1024)
    message = 17092025232642
    assert pow(pow(message, e, n), d, n) == message


@pytest.mark.parametrize("size", test_sizes)
def test_generate(size):
    key = MagicKey.generate(size)
    assert key.size == size
    assert key.e == 65537
    assert key.is_private
    assert key.verify(b"payload", key.sign(b"payload"))


def test_generate_custom_exponent():
    key = MagicKey.generate(512, 3)
    assert key.e == 3
    assert pow(pow(42, key.e, key.n), key.d, key.n) == 42


def test_generate_keyword_arguments():
    key = MagicKey.generate(size_bits=512, e=3)
    assert key.size == 512
    assert key.e == 3
    key = magickeys.generate(size_bits=512, e=65537)
    assert key.size == 512
    assert key.e == 65537


def test_generate_concurrently():
    with concurrent.futures.ThreadPoolExecutor(max_workers=4) as pool:
        keys = list(pool.map(lambda _: MagicKey.generate(512), range(4)))
    assert len({key.n for key in keys}) == 4
    for key in keys:
        assert key.size == 512
