# pylint: disable=missing-module-docstring
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import math

import pytest

from rsafile import numtheory


@pytest.mark.parametrize("a,b,expected", [(48, 18, 6), (17, 5, 1), (0, 0, 0), (7, 0, 7), (0, 9, 9), (3120, 17, 1),
                                          (2**64, 2**40 * 3, 2**40)])
def test_gcd(a, b, expected):
    assert numtheory.gcd(a, b) == expected


def test_gcd_leaves_inputs():
    a, b = 270, 192
    numtheory.gcd(a, b)
    assert (a, b) == (270, 192)


@pytest.mark.parametrize("a,b", [(240, 46), (46, 240), (17, 3120), (1, 1), (99, 0)])
def test_eea_bezout(a, b):
    g, s, t = numtheory.eea(a, b)
    assert g == math.gcd(a, b)
    assert a * s + b * t == g


def test_mod_inverse_coprime():
    for n in range(2, 80):
        for a in range(-n, n * 2):
            inv = numtheory.mod_inverse(a, n)
            if math.gcd(a, n) == 1:
                assert 0 <= inv < n
                assert (a * inv) % n == 1
            else:
                assert inv is None


def test_mod_inverse_textbook():
    assert numtheory.mod_inverse(17, 3120) == 2753
    assert numtheory.mod_inverse(3, 11) == 4


@pytest.mark.parametrize("a,n,expected", [(-17, 3120, 367), (-3, 7, 2), (-4, 6, None), (-3120, 3120, None), (-1, 2, 1)])
def test_mod_inverse_negative(a, n, expected):
    assert numtheory.mod_inverse(a, n) == expected


@pytest.mark.parametrize("a,n", [(6, 9), (0, 7), (3120, 3120), (10, 4)])
def test_mod_inverse_none(a, n):
    assert numtheory.mod_inverse(a, n) is None


def test_mod_inverse_validates():
    with pytest.raises(ValueError):
        numtheory.mod_inverse(3, 0)


@pytest.mark.parametrize("base,exponent,modulus,expected", [(4, 13, 497, 445), (65, 17, 3233, 2790),
                                                            (2790, 2753, 3233, 65), (5, 0, 7, 1), (5, 3, 1, 0),
                                                            (0, 5, 13, 0), (1234, 1, 1000, 234)])
def test_pow_mod(base, exponent, modulus, expected):
    assert numtheory.pow_mod(base, exponent, modulus) == expected


def test_pow_mod_matches_builtin():
    base = 0xC0FFEE ** 7
    exponent = 2**127 - 1
    modulus = 2**255 - 19
    assert numtheory.pow_mod(base, exponent, modulus) == pow(base, exponent, modulus)


@pytest.mark.parametrize("exponent,modulus", [(-1, 7), (3, 0), (3, -5)])
def test_pow_mod_validates(exponent, modulus):
    with pytest.raises(ValueError):
        numtheory.pow_mod(3, exponent, modulus)
