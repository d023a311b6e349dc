"""Core Key Generation Utility, mainly focusing on the generation of random primes.

Generates textbook RSA key material: Miller-Rabin probable primes of an exact bit length, a modulus at least as long
as requested, a random public exponent coprime to the totient and the matching private exponent. Every search draws
from an explicit `RandState`. The searches are unbounded unless the caller injects `max_attempts`.

Typical usage example:

    with RandState(2025) as rng:
        p, q, n, e = make_pub(256, 50, rng)
        d = make_priv(e, p, q)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import itertools
import logging
from typing import Iterable, Literal, overload

from rsafile.errors import InsufficientKeyStrength
from rsafile.errors import NoModularInverse
from rsafile.errors import SearchExhausted
from rsafile.numtheory import gcd
from rsafile.numtheory import mod_inverse
from rsafile.numtheory import pow_mod
from rsafile.randstate import RandState

logger = logging.getLogger(__name__)

DEFAULT_ITERS: int = 50
MIN_MODULUS_BITS: int = 32

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses `_SMALL_PRIMES` as a cache. Regeneration occurs if the requested range is greater, forced by `change` or
    the cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order, at least up to `n` unless `change` is True.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Runs a fast pre-check before Miller-Rabin by using modulo division on our known frequent primes.

    Args:
         no: The number to check.
         n: The number up to which to generate primes. Passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _attempts(max_attempts: int | None) -> Iterable[int]:
    """Attempt counter for the probabilistic searches. Unbounded when `max_attempts` is None."""
    if max_attempts is None:
        return itertools.count()
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")
    return range(max_attempts)


def is_prime(n: int, iters: int = DEFAULT_ITERS, rng: RandState | None = None) -> bool:
    """Perform the Miller-Rabin primality test.

    Runs `iters - 1` witness rounds, which keeps the round count of previously generated keys.
    A composite passes with probability at most 4**-(iters - 1).

    Args:
        n: Integer to be tested.
        iters: Miller-Rabin confidence.
        rng: Source of the random witnesses. A fresh system-entropy state if omitted.

    Returns:
        True if `n` is probably prime, False if it is certainly composite.
    """
    if n in (2, 3):
        return True
    if n < 2 or n % 2 == 0:
        return False
    if rng is None:
        rng = RandState()
    n_minus_one = n - 1
    s = 0
    r = n_minus_one
    while r % 2 == 0:
        s += 1
        r //= 2
    for _ in range(1, iters):
        a = rng.randbelow(n - 3) + 2
        y = pow_mod(a, r, n)
        if y in (1, n_minus_one):
            continue
        for _ in range(1, s):
            y = pow_mod(y, 2, n)
            if y == 1:
                return False
            if y == n_minus_one:
                break
        if y != n_minus_one:
            return False
    return True


def make_prime(bits: int, iters: int = DEFAULT_ITERS, rng: RandState | None = None,
               max_attempts: int | None = None) -> int:
    """Generate a probable prime with exactly `bits` significant bits.

    Draws random candidates with the top bit set, discards those with small factors and tests the rest with
    `is_prime`.

    Args:
        bits: Bit length of the prime. Must be >= 2.
        iters: Miller-Rabin confidence.
        rng: Random state. A fresh system-entropy state if omitted.
        max_attempts: Candidate limit. Unbounded if None.

    Returns:
        A probable prime.

    Raises:
        SearchExhausted: If `max_attempts` candidates were drawn without finding a prime.
    """
    if bits < 2:
        raise ValueError("bits must be >= 2")
    if rng is None:
        rng = RandState()
    top = 1 << (bits - 1)
    for attempt in _attempts(max_attempts):
        candidate = rng.randbits(bits - 1) | top
        if _trial_division(candidate) and is_prime(candidate, iters, rng):
            logger.debug("Found %d-bit probable prime after %d candidate(s).", bits, attempt + 1)
            return candidate
    raise SearchExhausted(f"No {bits}-bit prime found in {max_attempts} candidates.")


def make_pub(bits: int, iters: int = DEFAULT_ITERS, rng: RandState | None = None,
             max_attempts: int | None = None) -> tuple[int, int, int, int]:
    """Generate the primes, public modulus and public exponent.

    Splits `bits` randomly between p and q, regenerating both until n = p*q has at least `bits` bits, then draws
    random `bits`-bit exponents until one is coprime to (p-1)(q-1).

    Args:
        bits: Minimum bit length of the modulus. Must be >= `MIN_MODULUS_BITS`.
        iters: Miller-Rabin confidence.
        rng: Random state. A fresh system-entropy state if omitted.
        max_attempts: Limit applied to every search involved. Unbounded if None.

    Returns:
        Tuple of (p, q, n, e).

    Raises:
        InsufficientKeyStrength: If `bits` is too small.
        SearchExhausted: If a bounded search ran out of attempts.
    """
    if bits < MIN_MODULUS_BITS:
        raise InsufficientKeyStrength(f"Modulus must be at least {MIN_MODULUS_BITS} bits, got {bits}.")
    if rng is None:
        rng = RandState()
    for _ in _attempts(max_attempts):
        pbits = rng.randbelow(bits // 2) + bits // 4
        qbits = bits - pbits
        p = make_prime(pbits, iters, rng, max_attempts)
        q = make_prime(qbits, iters, rng, max_attempts)
        n = p * q
        if p != q and n.bit_length() >= bits:
            break
        logger.debug("Rejected %d-bit modulus, retrying prime pair.", n.bit_length())
    else:
        raise SearchExhausted(f"No {bits}-bit modulus found in {max_attempts} prime pairs.")
    totient = (p - 1) * (q - 1)
    for attempt in _attempts(max_attempts):
        e = rng.randbits(bits)
        if e > 1 and gcd(e, totient) == 1:
            logger.debug("Found public exponent after %d candidate(s).", attempt + 1)
            return p, q, n, e
    raise SearchExhausted(f"No public exponent found in {max_attempts} candidates.")


def make_priv(e: int, p: int, q: int) -> int:
    """Derive the private exponent d = e^-1 mod (p-1)(q-1).

    Raises:
        NoModularInverse: If `e` is not coprime to the totient, which `make_pub` never produces.
    """
    d = mod_inverse(e, (p - 1) * (q - 1))
    if d is None:
        raise NoModularInverse("Public exponent is not invertible modulo the totient.")
    return d


@overload
def generate_key_pair(bits: int,
                      iters: int = DEFAULT_ITERS,
                      rng: RandState | None = None,
                      expose_primes: Literal[False] = False) -> tuple[tuple[int, int], tuple[int, int]]:
    ...


@overload
def generate_key_pair(bits: int,
                      iters: int = DEFAULT_ITERS,
                      rng: RandState | None = None,
                      expose_primes: Literal[True] = False) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    ...


def generate_key_pair(
    bits: int,
    iters: int = DEFAULT_ITERS,
    rng: RandState | None = None,
    expose_primes: bool = False
) -> tuple[tuple[int, int], tuple[int, int]] | tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Args:
        bits: Minimum bit length of the modulus.
        iters: Miller-Rabin confidence.
        rng: Random state. A fresh system-entropy state if omitted.
        expose_primes: Whether to return the primes as well or not. Defaults to False.

    Returns:
        A tuple of (public, private) sub-tuples (modulus, exponent) or if exposed for the private
        (modulus, exponent, p, q)
    """
    p, q, n, e = make_pub(bits, iters, rng)
    d = make_priv(e, p, q)
    logger.info("Generated %d-bit key pair.", n.bit_length())
    if not expose_primes:
        del p, q
        return (n, e), (n, d)
    return (n, e), (n, d, p, q)
