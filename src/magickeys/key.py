"""The MagicKey entity and its compact notation.

A MagicKey is an RSA public key or key pair written as `RSA.<n>.<e>[.<d>]`, each integer as big-endian bytes in
URL-safe base64. The notation is often shown folded over several lines, so whitespace is ignored when parsing.

Typical usage example:

    key = MagicKey.from_string("RSA.mVgY...Hww==.AQAB.Lgy_...Q8Q==")
    sig = key.sign(b"This is a message")
    key.public_key().verify(b"This is a message", sig)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from collections.abc import Mapping
import logging
import warnings

from magickeys import arith
from magickeys import keygen
from magickeys import signature
from magickeys.b64url import b64url_decode
from magickeys.b64url import b64url_encode
from magickeys.errors import MalformedKey
from magickeys.errors import MissingModulus

logger = logging.getLogger(__name__)

KEY_TYPE: str = "RSA"
DEFAULT_EXPONENT: int = keygen.DEFAULT_EXPONENT
DATA_URI_PREFIXES: tuple[str, ...] = (
    "data:application/magic-public-key,",
    "data:application/magic-private-key,",
)


class MagicKey:
    """An RSA key in MagicSignatures form.

    Holds the modulus and public exponent, plus the private exponent for private keys. The attributes are plain
    integers the owner may rebind; `size` always follows the current modulus.

    Attributes:
        n: The modulus.
        e: The public exponent.
        d: The private exponent, None for public-only keys.
    """

    def __init__(self, n: int, e: int = DEFAULT_EXPONENT, d: int | None = None) -> None:
        self.n = n
        self.e = e
        self.d = d

    @property
    def size(self) -> int:
        """Bit length of the modulus."""
        return self.n.bit_length()

    @property
    def is_private(self) -> bool:
        return self.d is not None

    @classmethod
    def from_string(cls, text: str) -> "MagicKey":
        """See `parse`."""
        return parse(text)

    @classmethod
    def from_attributes(cls, attributes: Mapping) -> "MagicKey":
        """See `parse_attributes`."""
        return parse_attributes(attributes)

    @classmethod
    def generate(cls, size_bits: int = keygen.DEFAULT_KEY_SIZE, e: int = DEFAULT_EXPONENT) -> "MagicKey":
        """Generates a new private MagicKey.

        Args:
            size_bits: The size of the modulus in bits, within [512, 4096].
            e: The public exponent.

        Returns:
            A new private MagicKey.
        """
        n, e, d = keygen.generate_key_pair(size_bits, e)
        return cls(n, e, d)

    def public_key(self) -> "MagicKey":
        """Returns the public half of this key as a new MagicKey."""
        return type(self)(self.n, self.e)

    def sign(self, message: bytes | str) -> bytes:
        """Signs `message`, returning the raw signature. See `signature.sign`."""
        return signature.sign(self, message)

    def sign_b64(self, message: bytes | str, pad: bool = True) -> str:
        """Signs `message`, returning the base64url wire form of the signature."""
        return b64url_encode(self.sign(message), pad)

    def verify(self, message: bytes | str, sig: bytes | str) -> bool:
        """Verifies `sig` over `message`. See `signature.verify`."""
        return signature.verify(self, message, sig)

    def to_string(self, include_private: bool = False, pad: bool = True) -> str:
        """Serializes the key to compact notation. See `serialize`."""
        return serialize(self, include_private, pad)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        kind = "private" if self.is_private else "public"
        return f"<{type(self).__name__} {kind} {self.size} bits>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MagicKey):
            return NotImplemented
        return (self.n, self.e, self.d) == (other.n, other.e, other.d)

    __hash__ = None


def _strip(text: str) -> str:
    text = "".join(text.split())
    for prefix in DATA_URI_PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix):]
    return text


def parse(text: str) -> MagicKey:
    """Parses a key in compact notation.

    Whitespace anywhere in `text` is dropped, as is a leading `data:application/magic-*-key,` URI prefix and a single
    trailing period.

    Args:
        text: `RSA.<n>.<e>` for a public key or `RSA.<n>.<e>.<d>` for a private key.

    Returns:
        The parsed MagicKey.

    Raises:
        MalformedKey: On a wrong prefix, wrong number of components, or a component decoding to nothing.
    """
    if not isinstance(text, str):
        raise MalformedKey(f"Compact notation must be a string, not {type(text).__name__}.")
    parts = _strip(text).split(".")
    if len(parts) > 1 and parts[-1] == "":
        parts.pop()
    if parts[0] != KEY_TYPE:
        raise MalformedKey(f"Key does not start with {KEY_TYPE!r}.")
    if len(parts) not in (3, 4):
        raise MalformedKey(f"Expected 2 or 3 key components, got {len(parts) - 1}.")
    backend = arith.get_backend()
    numbers = []
    for name, part in zip("ned", parts[1:]):
        raw = b64url_decode(part)
        if not raw:
            raise MalformedKey(f"Key component {name!r} is empty.")
        numbers.append(backend.from_bytes(raw))
    key = MagicKey(*numbers)
    logger.debug("Parsed %r.", key)
    return key


def serialize(key: MagicKey, include_private: bool = False, pad: bool = True) -> str:
    """Writes a key in compact notation.

    Args:
        key: The key to serialize.
        include_private: Whether to emit the private exponent. Ignored for public-only keys.
        pad: Whether the base64url components keep their `=` padding.

    Returns:
        The compact notation string.
    """
    backend = arith.get_backend()
    numbers = [key.n, key.e]
    if include_private and key.d is not None:
        numbers.append(key.d)
    return ".".join([KEY_TYPE] + [b64url_encode(backend.to_bytes(no), pad) for no in numbers])


def _to_int(name: str, value: int | str | bytes) -> int:
    if isinstance(value, bool):
        raise MalformedKey(f"Attribute {name!r} must be an integer, not a boolean.")
    if isinstance(value, int):
        number = value
    elif isinstance(value, (bytes, bytearray)):
        number = arith.get_backend().from_bytes(bytes(value))
    elif isinstance(value, str):
        try:
            number = int(value.strip(), 10)
        except ValueError as exc:
            raise MalformedKey(f"Attribute {name!r} is not a decimal integer.") from exc
    else:
        raise MalformedKey(f"Attribute {name!r} has unsupported type {type(value).__name__}.")
    if number < 0:
        raise MalformedKey(f"Attribute {name!r} must not be negative.")
    return number


def parse_attributes(attributes: Mapping) -> MagicKey:
    """Builds a key from raw `n`, `e` and `d` attributes.

    Values may be integers, decimal strings or big-endian bytes. A `size` entry is informational only.

    Args:
        attributes: Mapping holding at least `n`.

    Returns:
        The MagicKey. `e` defaults to 65537, `d` to None.

    Raises:
        MissingModulus: If `n` is absent.
        MalformedKey: If a value cannot be read as a non-negative integer.
    """
    if attributes.get("n") is None:
        raise MissingModulus("Key attributes lack the modulus 'n'.")
    n = _to_int("n", attributes["n"])
    e = DEFAULT_EXPONENT if attributes.get("e") is None else _to_int("e", attributes["e"])
    d = None if attributes.get("d") is None else _to_int("d", attributes["d"])
    size = attributes.get("size")
    if size is not None:
        try:
            declared = _to_int("size", size)
        except MalformedKey:
            declared = None
        if declared != n.bit_length():
            warnings.warn(f"Ignoring size {size!r}, the modulus has {n.bit_length()} bits.", RuntimeWarning)
    return MagicKey(n, e, d)
