# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import io
import math
import warnings

import pytest

from rsafile import blocks
from rsafile.errors import InsufficientKeyStrength
from rsafile.errors import MalformedCiphertextLine
from rsafile.numtheory import pow_mod

pytestmark = pytest.mark.filterwarnings("ignore:Block encryption is textbook RSA:RuntimeWarning")


def encrypt(payload: bytes, mod: int, expo: int) -> str:
    out = io.StringIO()
    blocks.encrypt_stream(io.BytesIO(payload), out, mod, expo)
    return out.getvalue()


def decrypt(ciphertext: str, mod: int, expo: int) -> bytes:
    out = io.BytesIO()
    blocks.decrypt_stream(io.StringIO(ciphertext), out, mod, expo)
    return out.getvalue()


@pytest.mark.parametrize("bits,expected", [(17, 2), (24, 2), (25, 3), (256, 31), (257, 32), (2048, 255)])
def test_block_size(bits, expected):
    assert blocks.block_size(1 << (bits - 1)) == expected


@pytest.mark.parametrize("mod", [3233, 0xFFFF, 1 << 15, 1])
def test_block_size_too_small(mod):
    with pytest.raises(InsufficientKeyStrength):
        blocks.block_size(mod)


def test_block_below_modulus():
    for bits in range(17, 80):
        mod = 1 << (bits - 1)
        k = blocks.block_size(mod)
        assert blocks.encode_block(b"\xff" * (k - 1)) < mod


def test_encode_decode_block():
    assert blocks.encode_block(b"") == 0xFF
    assert blocks.encode_block(b"\x00\x01") == 0xFF0001
    assert blocks.decode_block(0xFF0001) == b"\x00\x01"
    assert blocks.decode_block(0xFF) == b""
    assert blocks.decode_block(0) == b""


def test_integer_bytes_helpers():
    assert blocks.bytes_to_integer(b"\x01\x00") == 256
    assert blocks.integer_to_bytes(256) == b"\x01\x00"
    assert blocks.integer_to_bytes(1, 4) == b"\x00\x00\x00\x01"
    assert blocks.integer_to_bytes(0) == b""


@pytest.mark.parametrize("payload", [
    b"",
    b"\x00",
    b"A",
    b"\x00\x00\x00",
    b"\xff" * 30,
    b"\x00" * 31,
    bytes(range(256)) * 3,
    "The quick brown fox jumps over the lazy dog. Zwölf Boxkämpfer jagen Viktor.".encode("utf-8"),
])
def test_roundtrip(keypair, payload):
    pubkey, priv = keypair
    ciphertext = encrypt(payload, pubkey.mod, pubkey.expo)
    assert decrypt(ciphertext, priv.mod, priv.expo) == payload


def test_roundtrip_around_block_boundaries(keypair):
    pubkey, priv = keypair
    k = blocks.block_size(pubkey.mod)
    for size in (k - 2, k - 1, k, 2 * (k - 1), 2 * (k - 1) + 1):
        payload = bytes((i * 7) % 256 for i in range(size))
        ciphertext = encrypt(payload, pubkey.mod, pubkey.expo)
        assert len(ciphertext.splitlines()) == math.ceil(size / (k - 1))
        assert decrypt(ciphertext, priv.mod, priv.expo) == payload


def test_encrypt_format(keypair):
    pubkey, _ = keypair
    k = blocks.block_size(pubkey.mod)
    payload = b"\x00hello"
    ciphertext = encrypt(payload, pubkey.mod, pubkey.expo)
    assert ciphertext.endswith("\n")
    (line,) = ciphertext.splitlines()
    assert line == line.lower()
    assert int(line, 16) == pow_mod(0xFF00 << 40 | int.from_bytes(b"hello", "big"), pubkey.expo, pubkey.mod)
    assert len(payload) < k


def test_encrypt_empty_writes_nothing(keypair):
    pubkey, _ = keypair
    out = io.StringIO()
    assert blocks.encrypt_stream(io.BytesIO(b""), out, pubkey.mod, pubkey.expo) == 0
    assert out.getvalue() == ""


def test_encrypt_counts_blocks(keypair):
    pubkey, priv = keypair
    k = blocks.block_size(pubkey.mod)
    out = io.StringIO()
    assert blocks.encrypt_stream(io.BytesIO(b"x" * (3 * (k - 1))), out, pubkey.mod, pubkey.expo) == 3
    sink = io.BytesIO()
    assert blocks.decrypt_stream(io.StringIO(out.getvalue()), sink, priv.mod, priv.expo) == 3


def test_encrypt_warns(keypair):
    pubkey, _ = keypair
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        with pytest.raises(RuntimeWarning, match="without padding"):
            encrypt(b"abc", pubkey.mod, pubkey.expo)


def test_encrypt_small_modulus():
    with pytest.raises(InsufficientKeyStrength):
        encrypt(b"A", 3233, 17)


def test_decrypt_marker_only_block(keypair):
    pubkey, priv = keypair
    ciphertext = f"{pow_mod(0xFF, pubkey.expo, pubkey.mod):x}\n"
    assert decrypt(ciphertext, priv.mod, priv.expo) == b""


def test_decrypt_skips_blank_lines(keypair):
    pubkey, priv = keypair
    ciphertext = encrypt(b"abc" * 40, pubkey.mod, pubkey.expo)
    spaced = "\n\n".join(ciphertext.splitlines()) + "\n\n"
    assert decrypt(spaced.upper(), priv.mod, priv.expo) == b"abc" * 40


@pytest.mark.parametrize("line,lineno", [("zz\n", 1), ("abc\nnot hex\n", 2), ("-1\n", 1), ("1 2\n", 1),
                                         ("0x1_f\n", 1), ("1_f\n", 1), ("+1f\n", 1)])
def test_decrypt_malformed(keypair, line, lineno):
    _, priv = keypair
    with pytest.raises(MalformedCiphertextLine) as exc:
        decrypt(line, priv.mod, priv.expo)
    assert exc.value.lineno == lineno
    assert isinstance(exc.value, IOError)


def test_decrypt_out_of_range(keypair):
    _, priv = keypair
    with pytest.raises(MalformedCiphertextLine, match="out of range"):
        decrypt(f"{priv.mod:x}\n", priv.mod, priv.expo)
