"""Explicit random state handle for the probabilistic searches.

Replaces a process-wide generator: every function needing randomness receives a `RandState`. A seeded state is a
Mersenne Twister and reproducible, an unseeded one draws from the operating system.

Typical usage example:

    with RandState(2025) as rng:
        p = make_prime(128, 50, rng)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import random
import secrets


class RandState:
    """Uniform random source.

    Not safe to share between threads. Give each worker its own, independently seeded, instance.

    Attributes:
        seed: The seed used, or None for system entropy.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._gen: random.Random | None = random.Random(seed) if seed is not None else secrets.SystemRandom()

    def _generator(self) -> random.Random:
        if self._gen is None:
            raise RuntimeError("Random state has been closed.")
        return self._gen

    def randbits(self, bits: int) -> int:
        """Uniform integer in [0, 2**bits)."""
        if bits < 0:
            raise ValueError("bits must be >= 0")
        if bits == 0:
            return 0
        return self._generator().getrandbits(bits)

    def randbelow(self, bound: int) -> int:
        """Uniform integer in [0, bound)."""
        if bound <= 0:
            raise ValueError("bound must be > 0")
        return self._generator().randrange(bound)

    def close(self) -> None:
        """Tear the state down. Further draws raise RuntimeError."""
        self._gen = None

    @property
    def closed(self) -> bool:
        return self._gen is None

    def __enter__(self) -> "RandState":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
