"""URL-safe base64 as used by MagicSignatures.

Encoding follows RFC 4648 section 5 with optional padding. Decoding is deliberately lenient: anything outside of the
URL-safe alphabet is thrown away before decoding, which lets folded or padded key material pass through untouched.

Typical usage example:

    b64url_encode(b"\\x01\\x00\\x01")
    b64url_decode("AQAB")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import re

_NON_ALPHABET = re.compile(rb"[^A-Za-z0-9_-]")


def b64url_encode(data: bytes | str, pad: bool = True) -> str:
    """Encodes bytes to URL-safe base64.

    Args:
        data: The payload. Strings are UTF-8 encoded first.
        pad: Whether to keep the trailing `=` padding. Defaults to True.

    Returns:
        The URL-safe base64 text.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    encoded = base64.urlsafe_b64encode(data).decode("ascii")
    if not pad:
        encoded = encoded.rstrip("=")
    return encoded


def b64url_decode(text: str | bytes) -> bytes:
    """Decodes URL-safe base64, with or without padding.

    Characters outside `[A-Za-z0-9_-]` (whitespace, `=`, standard alphabet `+` and `/`, ...) are silently dropped.
    A dangling final character that cannot form a byte on its own is dropped as well, so this never raises.

    Args:
        text: The URL-safe base64 text.

    Returns:
        The decoded bytes, possibly empty.
    """
    if isinstance(text, str):
        text = text.encode("ascii", errors="ignore")
    cleaned = _NON_ALPHABET.sub(b"", text)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += b"=" * (-len(cleaned) % 4)
    return base64.urlsafe_b64decode(cleaned)
