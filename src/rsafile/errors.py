"""Exceptions raised by the RSA file utilities.

Every error derives from `RSAFileError` and from the builtin exception closest to its meaning, so callers may catch
either. Failures of the underlying streams are not wrapped and surface as plain `OSError`.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class RSAFileError(Exception):
    """Base class of all rsafile errors."""


class InsufficientKeyStrength(RSAFileError, ValueError):
    """Requested or supplied modulus is too small to be usable."""


class NoModularInverse(RSAFileError, ArithmeticError):
    """An inverse that must exist does not. Indicates a broken key generation invariant."""


class MalformedKeyFile(RSAFileError, IOError):
    """A key file could not be parsed."""


class MalformedCiphertextLine(RSAFileError, IOError):
    """A ciphertext line is not a hex integer in range of the modulus.

    Attributes:
        lineno: 1-based line number of the offending line.
    """

    def __init__(self, lineno: int, reason: str) -> None:
        super().__init__(f"Line {lineno}: {reason}")
        self.lineno = lineno


class SignatureMismatch(RSAFileError, RuntimeError):
    """The identity signature of a public key does not verify."""


class SearchExhausted(RSAFileError, RuntimeError):
    """A bounded probabilistic search ran out of attempts."""
