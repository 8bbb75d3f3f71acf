from __future__ import annotations

import math
import random
from typing import TypeVar

T = TypeVar("T")


class RandomRangeSource:
    """Seeded source of uniform integers over inclusive ranges.

    All randomness in a quiz session (operands, distractor offsets, option
    order) is drawn from one instance, so a fixed seed replays a session.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    def next_int(self, lo: float, hi: float) -> int:
        """Return an integer uniformly drawn from ``[ceil(lo), floor(hi)]``."""

        lo_i = math.ceil(lo)
        hi_i = math.floor(hi)
        if lo_i > hi_i:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return self._rng.randint(lo_i, hi_i)

    def shuffle(self, values: list[T]) -> None:
        """Fisher-Yates shuffle in place."""

        for i in range(len(values) - 1, 0, -1):
            j = self.next_int(0, i)
            values[i], values[j] = values[j], values[i]
