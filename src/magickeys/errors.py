"""Exceptions raised by MagicKeys.

Every error derives from `MagicKeyError` as well as from the builtin exception that best describes the failure, so
callers may catch either the specific class, the common base or the plain builtin.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class MagicKeyError(Exception):
    """Base class of all MagicKeys errors."""


class MalformedKey(MagicKeyError, ValueError):
    """The compact notation string could not be parsed."""


class MissingModulus(MagicKeyError, ValueError):
    """A key was requested from attributes lacking the modulus."""


class InvalidKey(MagicKeyError, ValueError):
    """The key is structurally unusable, e.g. the modulus is zero."""


class InvalidKeySize(MagicKeyError, ValueError):
    """Key generation was requested outside the supported size range."""


class GenerationExhausted(MagicKeyError, RuntimeError):
    """The prime search ran out of rounds."""


class NonInvertibleExponent(MagicKeyError, ArithmeticError):
    """The public exponent has no inverse modulo lambda(n)."""


class PrivateKeyRequired(MagicKeyError, RuntimeError):
    """Signing was attempted with a public-only key."""


class MessageTooLarge(MagicKeyError, RuntimeError):
    """The modulus is too small to hold the encoded digest."""
