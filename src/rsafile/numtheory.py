"""Modular arithmetic primitives underlying every RSA operation.

Plain integer algorithms, none of which mutate their arguments: Euclid's gcd, the Extended Euclidean Algorithm,
modular inversion and square-and-multiply exponentiation.

Typical usage example:

    gcd(48, 18)
    d = mod_inverse(17, 3120)
    c = pow_mod(65, 17, 3233)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by the Euclidean algorithm.

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        gcd(a, b). `gcd(x, 0) == x`.
    """
    while b != 0:
        a, b = b, a % b
    return abs(a)


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such a that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def mod_inverse(a: int, n: int) -> int | None:
    """Modular inverse of `a` modulo `n`.

    Args:
        a: The value to invert.
        n: The modulus. Must be positive.

    Returns:
        t in [0, n) with a*t = 1 (mod n), or None if gcd(a, n) > 1 and no inverse exists.
    """
    if n <= 0:
        raise ValueError("Modulus must be positive.")
    g, _, t = eea(n, a % n)
    if g != 1:
        return None
    return t % n


def pow_mod(base: int, exponent: int, modulus: int) -> int:
    """Right-to-left square-and-multiply modular exponentiation.

    Args:
        base: The base.
        exponent: The exponent. Must be non-negative.
        modulus: The modulus. Must be positive.

    Returns:
        base**exponent mod modulus.
    """
    if exponent < 0:
        raise ValueError("Exponent must be non-negative.")
    if modulus < 1:
        raise ValueError("Modulus must be positive.")
    result = 1 % modulus
    square = base % modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * square) % modulus
        square = (square * square) % modulus
        exponent >>= 1
    return result
