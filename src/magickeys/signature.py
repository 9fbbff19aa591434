"""MagicSignatures signing and verification.

Signatures are RSASSA-PKCS1-v1_5 (RFC 3447 section 8.2) over SHA-256: the DER encoded DigestInfo of the message digest
is framed as `00 01 FF..FF 00 DigestInfo`, filled out to the byte width of the modulus and raised to the private
exponent. Verification recomputes that block and compares it with the recovered one, never parsing attacker supplied
ASN.1.

Typical usage example:

    sig = sign(key, b"This is a message")
    verify(key.public_key(), b"This is a message", sig)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import hashlib
import hmac
import logging
from typing import TYPE_CHECKING

from pyasn1.codec.der import encoder
from pyasn1.type import univ
from pyasn1_modules import rfc8017

from magickeys import arith
from magickeys.b64url import b64url_decode
from magickeys.errors import InvalidKey
from magickeys.errors import MessageTooLarge
from magickeys.errors import PrivateKeyRequired

if TYPE_CHECKING:
    from magickeys.key import MagicKey

logger = logging.getLogger(__name__)

HASH_TLL = {
    "sha256": (hashlib.sha256, rfc8017.id_sha256, 32),
}
SIGNATURE_HASH: str = "sha256"
# 00 01, at least eight FF, 00
_MIN_PADDING: int = 11


def digest_info(message: bytes, hashf: str = SIGNATURE_HASH) -> bytes:
    """DER encodes the DigestInfo structure of the message digest.

    Args:
        message: The message to digest.
        hashf: Hash function name, a key of `HASH_TLL`.

    Returns:
        The encoded DigestInfo `T` of RFC 3447 section 9.2.
    """
    hasher, ident, _ = HASH_TLL[hashf]
    algid = rfc8017.DigestAlgorithm()
    algid["algorithm"] = ident
    algid["parameters"] = univ.Null("")
    payload = rfc8017.DigestInfo()
    payload["digestAlgorithm"] = algid
    payload["digest"] = hasher(message).digest()
    return encoder.encode(payload)


def emsa_encode(message: bytes | str, em_len: int, hashf: str = SIGNATURE_HASH) -> bytes:
    """EMSA-PKCS1-v1_5 encoding of a message.

    Args:
        message: The message. Strings are UTF-8 encoded.
        em_len: Intended length of the encoded block, the byte length of the modulus.
        hashf: Hash function name.

    Returns:
        The block `00 01 PS 00 T` of exactly `em_len` bytes.

    Raises:
        MessageTooLarge: If `em_len` cannot hold the DigestInfo plus the minimum padding.
    """
    if isinstance(message, str):
        message = message.encode("utf-8")
    encoded = digest_info(message, hashf)
    if em_len < len(encoded) + _MIN_PADDING:
        raise MessageTooLarge(f"Modulus of {em_len} bytes cannot hold a {len(encoded)} byte digest with padding.")
    ps = b"\xFF" * (em_len - len(encoded) - 3)
    return b"\x00\x01" + ps + b"\x00" + encoded


def _modulus_width(key: "MagicKey") -> int:
    if not key.n:
        raise InvalidKey("Key has no usable modulus.")
    return (key.n.bit_length() + 7) // 8


def sign(key: "MagicKey", message: bytes | str, backend: arith.IntegerBackend | None = None) -> bytes:
    """Signs the message with the private exponent of `key`.

    Args:
        key: A key holding `d`.
        message: The message. Strings are UTF-8 encoded.
        backend: Arithmetic backend. Defaults to `arith.get_backend()`.

    Returns:
        The signature, as many bytes as the modulus is wide.

    Raises:
        PrivateKeyRequired: If `key` has no private exponent.
        InvalidKey: If `key` has no usable modulus.
        MessageTooLarge: If the modulus is too small for the encoded digest.
    """
    if key.d is None:
        raise PrivateKeyRequired("Signing requires a private key.")
    backend = backend or arith.get_backend()
    k = _modulus_width(key)
    em = backend.from_bytes(emsa_encode(message, k))
    # 00 01 framing keeps the block below any modulus of k bytes.
    signature = backend.modexp(em, key.d, key.n)
    return backend.to_bytes(signature, k)


def verify(key: "MagicKey",
           message: bytes | str,
           signature: bytes | str,
           backend: arith.IntegerBackend | None = None) -> bool:
    """Verifies a signature against the message.

    A wrong signature is an ordinary outcome and yields False, whatever is wrong with it.

    Args:
        key: A key holding `n` and `e`, public-only suffices.
        message: The message. Strings are UTF-8 encoded.
        signature: The raw signature, or its base64url text.
        backend: Arithmetic backend. Defaults to `arith.get_backend()`.

    Returns:
        True if the signature is valid for the message, False otherwise.

    Raises:
        InvalidKey: If `key` has no usable modulus or exponent.
    """
    k = _modulus_width(key)
    if not key.e:
        raise InvalidKey("Key has no usable public exponent.")
    backend = backend or arith.get_backend()
    if isinstance(signature, str):
        signature = b64url_decode(signature)
    if len(signature) != k:
        logger.debug("Signature length %d does not match modulus width %d.", len(signature), k)
        return False
    s = backend.from_bytes(signature)
    if s >= key.n:
        logger.debug("Signature representative out of range.")
        return False
    recovered = backend.to_bytes(backend.modexp(s, key.e, key.n), k)
    try:
        expected = emsa_encode(message, k)
    except MessageTooLarge:
        logger.debug("Modulus too small to carry a signature.")
        return False
    return hmac.compare_digest(recovered, expected)
