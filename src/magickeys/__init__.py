"""MagicKeys: RSA keys and signatures for MagicSignatures.

Provides the compact `RSA.<n>.<e>[.<d>]` key notation, key generation, RSASSA-PKCS1-v1_5/SHA-256 signing and
verification, as well as the URL-safe base64 codec everything is written in.

Typical usage example:

    key = MagicKey.generate(1024)
    sig = key.sign(b"Hi there!")
    pub = MagicKey.from_string(key.to_string())
    pub.verify(b"Hi there!", sig)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from magickeys.arith import IntegerBackend
from magickeys.arith import NativeBackend
from magickeys.arith import check_prime
from magickeys.b64url import b64url_decode
from magickeys.b64url import b64url_encode
from magickeys.errors import GenerationExhausted
from magickeys.errors import InvalidKey
from magickeys.errors import InvalidKeySize
from magickeys.errors import MagicKeyError
from magickeys.errors import MalformedKey
from magickeys.errors import MessageTooLarge
from magickeys.errors import MissingModulus
from magickeys.errors import NonInvertibleExponent
from magickeys.errors import PrivateKeyRequired
from magickeys.key import MagicKey
from magickeys.key import parse
from magickeys.key import parse_attributes
from magickeys.key import serialize
from magickeys.keygen import generate_key_pair
from magickeys.keygen import generate_primes
from magickeys.signature import emsa_encode
from magickeys.signature import sign
from magickeys.signature import verify

logging.getLogger(__name__).addHandler(logging.NullHandler())


def generate(size_bits: int = 512, e: int = 65537) -> MagicKey:
    """Generates a new private MagicKey. See `MagicKey.generate`."""
    return MagicKey.generate(size_bits, e)


__version__ = "0.1.0"
__all__ = [
    "MagicKey",
    "IntegerBackend",
    "NativeBackend",
    "b64url_encode",
    "b64url_decode",
    "parse",
    "parse_attributes",
    "serialize",
    "generate",
    "generate_key_pair",
    "generate_primes",
    "check_prime",
    "emsa_encode",
    "sign",
    "verify",
    "MagicKeyError",
    "MalformedKey",
    "MissingModulus",
    "InvalidKey",
    "InvalidKeySize",
    "GenerationExhausted",
    "NonInvertibleExponent",
    "PrivateKeyRequired",
    "MessageTooLarge",
]
