"""Big-integer capabilities used by key generation, signing and verification.

All arithmetic the rest of the package performs goes through an `IntegerBackend`. The default, `NativeBackend`,
wraps Python's arbitrary precision `int` and a probable-prime test built from a cached sieve of small primes, trial
division and the FIPS 186-5 Miller-Rabin test. Other backends (gmpy2, a hardware module, a deterministic test double)
only have to provide the same methods.

Typical usage example:

    backend = get_backend()
    backend.is_probable_prime(65537)
    backend.modinv(65537, 3120)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math
import secrets
from typing import Protocol

from magickeys.errors import NonInvertibleExponent

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
SIEVE_CAP: int = 10000


class IntegerBackend(Protocol):
    """The arithmetic a MagicKeys backend must supply."""

    def modexp(self, base: int, exponent: int, modulus: int) -> int:
        ...

    def modinv(self, value: int, modulus: int) -> int:
        ...

    def gcd(self, a: int, b: int) -> int:
        ...

    def lcm(self, a: int, b: int) -> int:
        ...

    def is_probable_prime(self, candidate: int) -> bool:
        ...

    def random_bits(self, bits: int) -> int:
        ...

    def to_bytes(self, value: int, length: int | None = None) -> bytes:
        ...

    def from_bytes(self, data: bytes) -> int:
        ...


def _sieve(limit: int = SIEVE_CAP) -> list[int]:
    """Sieve of Eratosthenes, primes up to and including `limit`."""
    if limit < 2:
        return []
    flags = bytearray([1]) * (limit + 1)
    flags[0:2] = b"\x00\x00"
    for p in range(2, math.isqrt(limit) + 1):
        if flags[p]:
            flags[p * p::p] = bytes(len(range(p * p, limit + 1, p)))
    return [no for no, flag in enumerate(flags) if flag]


def small_primes(bound: int = SIEVE_CAP) -> list[int]:
    """Returns the cached small primes, sieving again only when `bound` is beyond the cache.

    Args:
        bound: The number up to which primes are needed. Must be >= 0.

    Returns:
        Ascending primes covering at least `bound`. May extend past it.

    Raises:
        ValueError: If `bound` is negative.
    """
    if bound < 0:
        raise ValueError("bound must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if bound > _SMALL_PRIMES_CAP or not _SMALL_PRIMES:
        # Rebound whole, never mutated in place.
        _SMALL_PRIMES = _sieve(bound)
        _SMALL_PRIMES_CAP = bound
    return _SMALL_PRIMES


def _has_small_factor(candidate: int) -> bool:
    """True if some small prime p with p * p <= candidate divides it. Expects candidate >= 2."""
    for prime in small_primes():
        if prime * prime > candidate:
            return False
        if candidate % prime == 0:
            return True
    return False


def _miller_rabin(w: int, iters: int) -> bool:
    """Miller-Rabin probabilistic primality test (FIPS 186-5 B.3.1) with random bases.

    Args:
        w: The integer to test.
        iters: Number of random bases to try.

    Returns:
        False if a witness to compositeness was found, True otherwise.
    """
    if w < 5:
        return w in (2, 3)
    if not w & 1:
        return False
    d, s = w - 1, 0
    while not d & 1:
        d >>= 1
        s += 1
    for _ in range(iters):
        x = pow(secrets.randbelow(w - 3) + 2, d, w)
        if x == 1 or x == w - 1:
            continue
        for _ in range(s - 1):
            x = x * x % w
            if x == w - 1:
                break
        else:
            return False
    return True


# (bit length up to, iterations) per FIPS 186-5 Appendix C.1
_MR_ROUNDS: tuple[tuple[int, int], ...] = ((512, 40), (1024, 56), (1536, 64), (2048, 70))
_MR_ROUNDS_MAX: int = 74


def check_prime(candidate: int, iters: int | None = None) -> bool:
    """Probable-prime test: small-prime divisibility first, Miller-Rabin for the survivors.

    Args:
        candidate: The integer to test.
        iters: Miller-Rabin iterations. Taken from `_MR_ROUNDS` by bit length when omitted.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2 or _has_small_factor(candidate):
        return False
    if iters is None:
        bits = candidate.bit_length()
        iters = next((rounds for cap, rounds in _MR_ROUNDS if bits <= cap), _MR_ROUNDS_MAX)
    return _miller_rabin(candidate, iters)


class NativeBackend:
    """`IntegerBackend` on top of the builtin `int` and the `secrets` CSPRNG."""

    def modexp(self, base: int, exponent: int, modulus: int) -> int:
        return pow(base, exponent, modulus)

    def modinv(self, value: int, modulus: int) -> int:
        """Modular inverse of `value`.

        Raises:
            NonInvertibleExponent: If `value` and `modulus` are not coprime or `modulus` < 2.
        """
        if modulus < 2:
            raise NonInvertibleExponent(f"Modulus {modulus} admits no inverses.")
        try:
            return pow(value, -1, modulus)
        except ValueError as exc:
            raise NonInvertibleExponent("Value is not invertible for the given modulus.") from exc

    def gcd(self, a: int, b: int) -> int:
        return math.gcd(a, b)

    def lcm(self, a: int, b: int) -> int:
        return math.lcm(a, b)

    def is_probable_prime(self, candidate: int) -> bool:
        return check_prime(candidate)

    def random_bits(self, bits: int) -> int:
        # secrets is backed by os.urandom and safe to share between threads.
        return secrets.randbits(bits)

    def to_bytes(self, value: int, length: int | None = None) -> bytes:
        """Big-endian unsigned bytes, minimal length unless `length` is given."""
        if length is None:
            length = max(1, (value.bit_length() + 7) // 8)
        return value.to_bytes(length, byteorder="big", signed=False)

    def from_bytes(self, data: bytes) -> int:
        return int.from_bytes(data, byteorder="big", signed=False)


_DEFAULT_BACKEND: IntegerBackend = NativeBackend()


def get_backend() -> IntegerBackend:
    """Returns the process-wide default backend."""
    return _DEFAULT_BACKEND
