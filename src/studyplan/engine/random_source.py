"""Injectable randomness for the slot shuffle."""

from __future__ import annotations

import random
from typing import MutableSequence, Protocol, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    def next(self) -> float:
        """Return a float in [0, 1)."""
        ...


class SeededRandomSource:
    """``RandomSource`` backed by :class:`random.Random`; ``seed=None`` is non-deterministic."""

    def __init__(self, seed: int | str | None = None) -> None:
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()


def shuffle_in_place(items: MutableSequence[T], source: RandomSource) -> None:
    """Fisher-Yates shuffle driven by ``source.next()``."""
    for idx in range(len(items) - 1, 0, -1):
        pick = min(idx, int(source.next() * (idx + 1)))
        items[idx], items[pick] = items[pick], items[idx]
