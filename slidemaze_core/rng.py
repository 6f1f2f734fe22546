from __future__ import annotations

import math
from typing import List, Sequence, TypeVar

T = TypeVar('T')

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class SeededRandom:
    """Deterministic pseudo-random stream (Mulberry32) from a 32-bit integer seed."""

    def __init__(self, seed: int) -> None:
        self._state = int(seed) & _MASK32

    def next(self) -> float:
        """Returns the next float in [0, 1)."""
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def next_int(self, lo: int, hi: int) -> int:
        """Returns an integer in [lo, hi)."""
        return math.floor(self.next() * (hi - lo)) + lo

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Returns a shuffled copy of items (Fisher-Yates)."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i + 1)
            result[i], result[j] = result[j], result[i]
        return result
