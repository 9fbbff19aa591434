"""Key pair generation for MagicKeys.

Searches two probable primes of half the requested modulus size and derives the private exponent modulo
lambda(n) = lcm(p - 1, q - 1). The search is bounded: every draw of a random starting point counts as one round and
the budget is shared by both primes, so a broken random source surfaces as `GenerationExhausted` instead of a hang.

Typical usage example:

    p, q = generate_primes(1024)
    n, e, d = generate_key_pair(2048)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from magickeys import arith
from magickeys.errors import GenerationExhausted
from magickeys.errors import InvalidKeySize
from magickeys.errors import NonInvertibleExponent

logger = logging.getLogger(__name__)

DEFAULT_EXPONENT: int = 65537
DEFAULT_KEY_SIZE: int = 512
MIN_KEY_SIZE: int = 512
MAX_KEY_SIZE: int = 4096
GENERATION_ROUNDS: int = 100
_MINIMUM_PRIME_SEPARATION: int = 100


def _validate(size: int, pub: int) -> None:
    if not MIN_KEY_SIZE <= size <= MAX_KEY_SIZE:
        raise InvalidKeySize(f"Key size must be within [{MIN_KEY_SIZE}, {MAX_KEY_SIZE}] bits, got {size}.")
    if size % 2 != 0:
        raise InvalidKeySize(f"Key size must be an even number of bits, got {size}.")
    if pub < 3 or pub % 2 == 0:
        raise ValueError("Public exponent must be odd and at least 3.")


def _draw_prime(size: int, pub: int, backend: arith.IntegerBackend, prm_p: int | None = None) -> int | None:
    """Runs a single round of the prime search.

    Draws a random starting point with the two top bits set (so that the product of two such primes has exactly
    `2 * size` bits) and walks upwards over odd numbers to the first probable prime `c` with `gcd(c - 1, pub) = 1`.

    Args:
        size: Bit length of the prime.
        pub: The public exponent the prime must be compatible with.
        backend: Arithmetic backend.
        prm_p: The first prime, when searching for the second one.

    Returns:
        The prime, or None if the round failed (walked out of the bit length, or landed too close to `prm_p`).
    """
    msk = (1 << size - 1) | (1 << size - 2) | 1
    candidate = backend.random_bits(size) | msk
    limit = 1 << size
    while candidate < limit:
        if backend.gcd(candidate - 1, pub) == 1 and backend.is_probable_prime(candidate):
            break
        candidate += 2
    else:
        return None
    if prm_p is not None and abs(prm_p - candidate) <= (1 << max(size - _MINIMUM_PRIME_SEPARATION, 0)):
        return None
    return candidate


def generate_primes(size: int = DEFAULT_KEY_SIZE,
                    pub: int = DEFAULT_EXPONENT,
                    rounds: int = GENERATION_ROUNDS,
                    backend: arith.IntegerBackend | None = None) -> tuple[int, int]:
    """Generates a pair of distinct primes suitable for a `size` bit modulus.

    Args:
        size: The modulus size in bits. Must be even and within [MIN_KEY_SIZE, MAX_KEY_SIZE].
        pub: The public exponent. Must be odd and at least 3.
        rounds: Round budget shared by both prime searches.
        backend: Arithmetic backend. Defaults to `arith.get_backend()`.

    Returns:
        The primes (p, q), each `size // 2` bits long.

    Raises:
        InvalidKeySize: If `size` is out of range or odd.
        ValueError: If `pub` is even or too small.
        GenerationExhausted: If `rounds` draws did not produce both primes.
    """
    _validate(size, pub)
    backend = backend or arith.get_backend()
    half = size // 2
    p = None
    q = None
    for rnd in range(1, rounds + 1):
        if p is None:
            p = _draw_prime(half, pub, backend)
        else:
            q = _draw_prime(half, pub, backend, p)
            if q is not None:
                logger.debug("Found %d bit prime pair after %d rounds.", half, rnd)
                return p, q
    logger.debug("Prime search for a %d bit key gave up after %d rounds.", size, rounds)
    raise GenerationExhausted(f"No suitable prime pair found within {rounds} rounds. Check the random number source.")


def generate_key_pair(size: int = DEFAULT_KEY_SIZE,
                      pub: int = DEFAULT_EXPONENT,
                      backend: arith.IntegerBackend | None = None) -> tuple[int, int, int]:
    """Generates the numbers of an RSA key pair.

    Args:
        size: The modulus size in bits.
        pub: The public exponent.
        backend: Arithmetic backend. Defaults to `arith.get_backend()`.

    Returns:
        The tuple (modulus, public exponent, private exponent).

    Raises:
        NonInvertibleExponent: If `pub` has no inverse modulo lambda(n).
    """
    backend = backend or arith.get_backend()
    p, q = generate_primes(size, pub, backend=backend)
    n = p * q
    lam = backend.lcm(p - 1, q - 1)
    try:
        d = backend.modinv(pub, lam)
    except (ValueError, ArithmeticError) as exc:
        raise NonInvertibleExponent("Public exponent is not invertible modulo lambda(n).") from exc
    del p, q
    return n, pub, d
