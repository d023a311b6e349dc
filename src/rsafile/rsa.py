"""Provides the RSA keys, their text files, and signing and verification of the owner identity.

A public key carries its modulus, exponent and a signature over the identity of its owner, which encryption checks
before writing any ciphertext. A private key is only the modulus and private exponent. Keys are written as hex text,
one value per line.

Typical usage example:

    pub, priv = generate(256, "alice")
    pub.export("rsa.pub")
    priv.export("rsa.priv")
    with open("notes.txt", "rb") as src, open("notes.enc", "w", encoding="ascii") as dst:
        pub.encrypt_stream(src, dst)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import os
import pathlib
import stat
import string
from typing import BinaryIO, Literal, TextIO, overload

from rsafile import blocks
from rsafile import keygen
from rsafile.errors import MalformedKeyFile
from rsafile.errors import SignatureMismatch
from rsafile.numtheory import pow_mod
from rsafile.randstate import RandState

logger = logging.getLogger(__name__)

IDENTITY_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
MAX_IDENTITY_LENGTH: int = 256
_IDENTITY_DIGITS = {char: value for value, char in enumerate(IDENTITY_ALPHABET)}


def identity_to_integer(identity: str) -> int:
    """Read an identity as a base-62 numeral (0-9, A-Z, a-z).

    Args:
        identity: The identity, e.g. a user name.

    Returns:
        The integer the identity spells.

    Raises:
        ValueError: If the identity is empty, too long or not base-62.
    """
    if not identity:
        raise ValueError("Identity must not be empty.")
    if len(identity) > MAX_IDENTITY_LENGTH:
        raise ValueError(f"Identity longer than {MAX_IDENTITY_LENGTH} characters.")
    value = 0
    for char in identity:
        digit = _IDENTITY_DIGITS.get(char)
        if digit is None:
            raise ValueError(f"Identity character {char!r} is not a base-62 digit.")
        value = value * 62 + digit
    return value


def integer_to_identity(value: int) -> str:
    """Base-62 numeral of a non-negative integer. Leading zero digits are not recovered."""
    if value < 0:
        raise ValueError("Value must be non-negative.")
    digits = []
    while True:
        value, digit = divmod(value, 62)
        digits.append(IDENTITY_ALPHABET[digit])
        if value == 0:
            break
    return "".join(reversed(digits))


def sign(message: int, d: int, n: int) -> int:
    """Textbook RSA signature s = message^d mod n."""
    return pow_mod(message, d, n)


def verify(message: int, signature: int, e: int, n: int) -> bool:
    """True if signature^e mod n equals the message exactly."""
    return pow_mod(signature, e, n) == message


def _read_key_lines(file: pathlib.Path, count: int) -> list[str]:
    with open(file, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    while lines and not lines[-1]:
        lines.pop()
    if len(lines) != count:
        raise MalformedKeyFile(f"Key file {file} has {len(lines)} lines, expected {count}.")
    return lines


def _parse_hex(text: str, name: str, file: pathlib.Path) -> int:
    if not blocks.HEX_PATTERN.fullmatch(text):
        raise MalformedKeyFile(f"Key file {file}: {name} is not a hexadecimal integer.")
    return int(text, 16)


class RSAKey:
    """The parts common to public and private keys.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
    """

    def __init__(self, mod: int, expo: int) -> None:
        self.mod = mod
        self.expo = expo

    @property
    def bits(self) -> int:
        return self.mod.bit_length()

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt/Sign/Verify).

        Args:
            message: The int-marshalled message.

        Returns:
            message^expo mod mod.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return pow_mod(message, self.expo, self.mod)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)


class RSAPubKey(RSAKey):
    """Public key with the signed identity of its owner.

    Attributes:
        mod: The modulus of the keypair.
        expo: The public exponent.
        signature: Signature over the identity, made with the private exponent.
        identity: The owner identity, a base-62 string.
    """

    def __init__(self, mod: int, expo: int, signature: int, identity: str) -> None:
        super().__init__(mod, expo)
        self.signature = signature
        self.identity = identity

    def verify_identity(self) -> bool:
        """Check the stored signature against the stored identity."""
        try:
            message = identity_to_integer(self.identity)
        except ValueError:
            return False
        return verify(message, self.signature, self.expo, self.mod)

    def encrypt_stream(self, infile: BinaryIO, outfile: TextIO) -> int:
        """Encrypt a binary stream into hex lines, after verifying the key.

        Returns:
            Number of blocks written.

        Raises:
            SignatureMismatch: If the identity signature does not verify. Nothing is written then.
        """
        if not self.verify_identity():
            raise SignatureMismatch(f"Invalid key: signature does not match identity {self.identity!r}.")
        return blocks.encrypt_stream(infile, outfile, self.mod, self.expo)

    def export(self, file: pathlib.Path) -> None:
        """Write the public key: n, e, signature in hex, then the identity."""
        with open(file, "w", encoding="utf-8") as f:
            f.write(f"{self.mod:x}\n{self.expo:x}\n{self.signature:x}\n{self.identity}\n")

    @classmethod
    def import_key(cls, file: pathlib.Path) -> "RSAPubKey":
        """Read a public key written by `export`.

        Raises:
            MalformedKeyFile: If the file does not hold a public key.
        """
        mod_t, expo_t, sig_t, identity = _read_key_lines(file, 4)
        mod = _parse_hex(mod_t, "modulus", file)
        expo = _parse_hex(expo_t, "exponent", file)
        signature = _parse_hex(sig_t, "signature", file)
        try:
            identity_to_integer(identity)
        except ValueError as err:
            raise MalformedKeyFile(f"Key file {file}: {err}") from err
        return cls(mod, expo, signature, identity)


class RSAPrivKey(RSAKey):
    """Private key, the modulus and the private exponent only."""

    def sign(self, message: int) -> int:
        """Signs an integer message using the private key."""
        return self.c_rsa(message)

    def sign_identity(self, identity: str) -> int:
        """Signs an identity, read as base-62."""
        return self.sign(identity_to_integer(identity))

    def decrypt_stream(self, infile: TextIO, outfile: BinaryIO) -> int:
        """Decrypt hex lines into a binary stream. Returns the number of blocks."""
        return blocks.decrypt_stream(infile, outfile, self.mod, self.expo)

    def export(self, file: pathlib.Path) -> None:
        """Write the private key, n and d in hex, readable by the owner only."""
        mode = stat.S_IRUSR | stat.S_IWUSR
        with os.fdopen(os.open(file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode), "w", encoding="utf-8") as f:
            # O_CREAT only applies the mode to new files.
            os.chmod(file, mode)
            f.write(f"{self.mod:x}\n{self.expo:x}\n")

    @classmethod
    def import_key(cls, file: pathlib.Path) -> "RSAPrivKey":
        """Read a private key written by `export`.

        Raises:
            MalformedKeyFile: If the file does not hold a private key.
        """
        mod_t, expo_t = _read_key_lines(file, 2)
        return cls(_parse_hex(mod_t, "modulus", file), _parse_hex(expo_t, "exponent", file))


@overload
def generate(bits: int,
             identity: str,
             iters: int = keygen.DEFAULT_ITERS,
             rng: RandState | None = None,
             expose_primes: Literal[False] = False) -> tuple[RSAPubKey, RSAPrivKey]:
    ...


@overload
def generate(bits: int,
             identity: str,
             iters: int = keygen.DEFAULT_ITERS,
             rng: RandState | None = None,
             expose_primes: Literal[True] = False) -> tuple[RSAPubKey, RSAPrivKey, int, int]:
    ...


def generate(
    bits: int,
    identity: str,
    iters: int = keygen.DEFAULT_ITERS,
    rng: RandState | None = None,
    expose_primes: bool = False
) -> tuple[RSAPubKey, RSAPrivKey] | tuple[RSAPubKey, RSAPrivKey, int, int]:
    """Generates a key pair and signs the owner identity.

    Args:
        bits: Minimum bit length of the modulus.
        identity: The owner identity, base-62.
        iters: Miller-Rabin confidence.
        rng: Random state. A fresh system-entropy state if omitted.
        expose_primes: Whether to return the primes p and q as well. Defaults to False.

    Returns:
        Tuple of (public key, private key), followed by p and q if exposed.

    Raises:
        ValueError: If the identity is not base-62 or does not fit below the modulus.
    """
    message = identity_to_integer(identity)
    (n, e), (_, d, p, q) = keygen.generate_key_pair(bits, iters, rng, expose_primes=True)
    if message >= n:
        raise ValueError(f"Identity {identity!r} is too long for a {n.bit_length()}-bit modulus.")
    priv = RSAPrivKey(n, d)
    pub = RSAPubKey(n, e, priv.sign(message), identity)
    logger.debug("Signed identity %r.", identity)
    if not expose_primes:
        del p, q
        return pub, priv
    return pub, priv, p, q
