"""Block oriented stream encryption with textbook RSA.

A byte stream is cut into chunks of at most k-1 bytes, where k = (bit length of n - 1) // 8. Each chunk gets a 0xFF
marker byte in front, is read as a big-endian integer, encrypted independently and written as one lowercase hex
integer per line. The marker keeps leading zero bytes of a chunk and keeps every block below n.

The format has no real padding: equal chunks encrypt to equal lines and nothing authenticates the ciphertext.

Typical usage example:

    with open("notes.txt", "rb") as src, open("notes.enc", "w", encoding="ascii") as dst:
        encrypt_stream(src, dst, n, e)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import re
from typing import BinaryIO, TextIO
import warnings

from rsafile.errors import InsufficientKeyStrength
from rsafile.errors import MalformedCiphertextLine
from rsafile.numtheory import pow_mod

logger = logging.getLogger(__name__)

MARKER: int = 0xFF
HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer, big-endian.

    Args:
        msg: The bytes to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int | None = None) -> bytes:
    """Converts an integer to a big-endian byte string.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string. Minimal length if None.

    Returns:
        The representative bytes.
    """
    if fixedlen is None:
        fixedlen = (msg.bit_length() + 7) // 8
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)


def block_size(mod: int) -> int:
    """Size k of a plaintext block, marker included, for modulus `mod`.

    Raises:
        InsufficientKeyStrength: If a block could not carry a single payload byte.
    """
    k = (mod.bit_length() - 1) // 8
    if k < 2:
        raise InsufficientKeyStrength(f"A {mod.bit_length()}-bit modulus is too small for block encryption.")
    return k


def encode_block(chunk: bytes) -> int:
    """Marker-prefixed integer representative of a payload chunk."""
    return bytes_to_integer(bytes([MARKER]) + chunk)


def decode_block(value: int) -> bytes:
    """Payload of a decrypted block, i.e. its minimal big-endian bytes without the leading marker."""
    return integer_to_bytes(value)[1:]


def encrypt_stream(infile: BinaryIO, outfile: TextIO, mod: int, expo: int) -> int:
    """Encrypt a binary stream into hex lines.

    Args:
        infile: Binary stream to read the plaintext from.
        outfile: Text stream to write one hex ciphertext per line to.
        mod: Public modulus.
        expo: Public exponent.

    Returns:
        Number of blocks written. Empty input writes nothing.
    """
    k = block_size(mod)
    warnings.warn("Block encryption is textbook RSA without padding! Please use with care.", RuntimeWarning)
    count = 0
    while True:
        chunk = infile.read(k - 1)
        if not chunk:
            break
        cipher = pow_mod(encode_block(chunk), expo, mod)
        outfile.write(f"{cipher:x}\n")
        count += 1
    logger.debug("Encrypted %d block(s) of up to %d payload bytes.", count, k - 1)
    return count


def decrypt_stream(infile: TextIO, outfile: BinaryIO, mod: int, expo: int) -> int:
    """Decrypt hex lines back into a binary stream.

    Blank lines are skipped.

    Args:
        infile: Text stream of hex ciphertexts, one per line.
        outfile: Binary stream to write the plaintext to.
        mod: Public modulus.
        expo: Private exponent.

    Returns:
        Number of blocks decrypted.

    Raises:
        MalformedCiphertextLine: If a line is not a hex integer in [0, mod).
    """
    block_size(mod)
    count = 0
    for lineno, line in enumerate(infile, start=1):
        text = line.strip()
        if not text:
            continue
        if not HEX_PATTERN.fullmatch(text):
            raise MalformedCiphertextLine(lineno, "not a hexadecimal integer")
        cipher = int(text, 16)
        if not 0 <= cipher < mod:
            raise MalformedCiphertextLine(lineno, "value out of range for the modulus")
        outfile.write(decode_block(pow_mod(cipher, expo, mod)))
        count += 1
    logger.debug("Decrypted %d block(s).", count)
    return count
