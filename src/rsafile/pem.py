"""PKCS#1 PEM export of public key numbers.

The hex key files stay the native format. This module writes and reads the (n, e) pair as a PKCS#1 RSAPublicKey in
PEM armour, so standard tools can inspect a generated modulus. The identity signature is not part of PKCS#1 and is
not carried over.

Typical usage example:

    export_public_pem(pub, "rsa.pub.pem")
    n, e = import_public_pem("rsa.pub.pem")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import binascii
import pathlib

from pyasn1 import error
from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.codec.native import encoder as localize
from pyasn1_modules import rfc8017

from rsafile.errors import MalformedKeyFile
from rsafile.rsa import RSAKey

PEM_HEADER = "-----BEGIN RSA PUBLIC KEY-----"
PEM_FOOTER = "-----END RSA PUBLIC KEY-----"


def read_pem(file: pathlib.Path) -> bytes:
    """Reads a PKCS#1 public key PEM file.

    Args:
        file: The file to read.

    Returns:
        The DER payload.

    Raises:
        MalformedKeyFile: If the file has invalid PEM armour or base64.
    """
    with open(file, "r", encoding="ascii") as f:
        headline = f.readline().strip()
        if headline != PEM_HEADER:
            raise MalformedKeyFile(f"PEM Headline {headline} does not match {PEM_HEADER}")
        parcel = []
        while True:
            line = f.readline().strip()
            if not line:
                raise MalformedKeyFile(f"PEM File does not contain footer: {PEM_FOOTER}")
            if line == PEM_FOOTER:
                break
            parcel.append(line)
    try:
        return base64.b64decode("".join(parcel), validate=True)
    except binascii.Error as err:
        raise MalformedKeyFile(f"PEM File {file} is not valid base64.") from err


def write_pem(file: pathlib.Path, data: bytes) -> None:
    """Writes a PKCS#1 public key PEM file, 64 characters per line."""
    payload = base64.b64encode(data).decode()
    with open(file, "w", encoding="ascii") as f:
        f.write(PEM_HEADER + "\n")
        res = "\n".join(payload[i:i + 64] for i in range(0, len(payload), 64))
        res += "\n" if res else ""
        f.write(res)
        f.write(PEM_FOOTER + "\n")


def export_public_pem(key: RSAKey, file: pathlib.Path) -> None:
    """Export the modulus and exponent of `key` as a PKCS#1 RSAPublicKey."""
    keydata = rfc8017.RSAPublicKey()
    keydata["modulus"] = key.mod
    keydata["publicExponent"] = key.expo
    write_pem(file, encoder.encode(keydata))


def import_public_pem(file: pathlib.Path) -> tuple[int, int]:
    """Import (modulus, exponent) from a PKCS#1 RSAPublicKey PEM file.

    Raises:
        MalformedKeyFile: If the file is not a PKCS#1 public key.
    """
    payload = read_pem(file)
    try:
        keydata, _ = decoder.decode(payload, asn1Spec=rfc8017.RSAPublicKey())
    except error.PyAsn1Error as err:
        raise MalformedKeyFile(f"PEM File {file} does not hold an RSAPublicKey.") from err
    pykeyd = localize.encode(keydata)
    return pykeyd["modulus"], pykeyd["publicExponent"]
