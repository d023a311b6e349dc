"""Textbook RSA from first principles with a simple block file format.

Provides prime generation, key pair construction, identity signing and verification, and stream encryption into one
hex ciphertext per line. All randomness comes from an explicit `RandState`.

Typical usage example:

    with RandState(2025) as rng:
        pub, priv = generate(256, "alice", rng=rng)
    with open("notes.txt", "rb") as src, open("notes.enc", "w", encoding="ascii") as dst:
        pub.encrypt_stream(src, dst)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsafile.blocks import decrypt_stream
from rsafile.blocks import encrypt_stream
from rsafile.errors import InsufficientKeyStrength
from rsafile.errors import MalformedCiphertextLine
from rsafile.errors import MalformedKeyFile
from rsafile.errors import NoModularInverse
from rsafile.errors import RSAFileError
from rsafile.errors import SearchExhausted
from rsafile.errors import SignatureMismatch
from rsafile.keygen import generate_key_pair
from rsafile.keygen import is_prime
from rsafile.keygen import make_prime
from rsafile.keygen import make_priv
from rsafile.keygen import make_pub
from rsafile.numtheory import gcd
from rsafile.numtheory import mod_inverse
from rsafile.numtheory import pow_mod
from rsafile.randstate import RandState
from rsafile.rsa import generate
from rsafile.rsa import RSAPrivKey
from rsafile.rsa import RSAPubKey
from rsafile.rsa import sign
from rsafile.rsa import verify

__version__ = "0.1.0"
__all__ = [
    "RandState",
    "RSAPrivKey",
    "RSAPubKey",
    "generate",
    "generate_key_pair",
    "gcd",
    "mod_inverse",
    "pow_mod",
    "is_prime",
    "make_prime",
    "make_pub",
    "make_priv",
    "sign",
    "verify",
    "encrypt_stream",
    "decrypt_stream",
    "RSAFileError",
    "InsufficientKeyStrength",
    "NoModularInverse",
    "MalformedKeyFile",
    "MalformedCiphertextLine",
    "SignatureMismatch",
    "SearchExhausted",
]
