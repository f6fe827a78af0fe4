"""
Seeded RNG for deterministic, replayable simulations.
"""
from __future__ import annotations

import random
from typing import Iterable


class SeededRNG:
    """Wrapper around random.Random for reproducible simulations."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self._seed = seed

    @property
    def seed(self) -> int | None:
        return self._seed

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def choice(self, seq):
        return self._rng.choice(seq)

    def choices(self, population, weights=None, *, cum_weights=None, k=1):
        return self._rng.choices(population, weights=weights, cum_weights=cum_weights, k=k)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


class ScriptedRNG(SeededRNG):
    """
    Replays a fixed sequence of draws from random(), for golden-output tests.
    Other methods fall back to the seeded generator. Raises when exhausted
    unless a fallback seed was given.
    """

    def __init__(self, draws: Iterable[float], fallback_seed: int | None = None) -> None:
        super().__init__(fallback_seed)
        self._draws = list(draws)
        self._pos = 0
        self._fallback = fallback_seed is not None

    @property
    def consumed(self) -> int:
        return self._pos

    def random(self) -> float:
        if self._pos < len(self._draws):
            value = self._draws[self._pos]
            self._pos += 1
            return value
        if self._fallback:
            return super().random()
        raise IndexError(f"ScriptedRNG exhausted after {self._pos} draws")
