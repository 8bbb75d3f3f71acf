from __future__ import annotations

import itertools
import logging

from .equations import Equation
from .random_source import RandomRangeSource

logger = logging.getLogger(__name__)

OptionSet = tuple[int, ...]


class OptionSetGenerator:
    """Builds the answer choices for a round: the answer plus nearby distractors.

    Distractors are the answer shifted by a random non-zero offset, kept
    strictly positive and distinct.  Sampling stops after ``max_attempts``
    draws; any options still missing are then taken by scanning outward from
    the answer, so generation always terminates.
    """

    def __init__(
        self,
        rng: RandomRangeSource,
        *,
        offset_span: int = 10,
        max_attempts: int = 1000,
    ) -> None:
        if offset_span < 1:
            raise ValueError("offset_span must be >= 1")
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        self._rng = rng
        self._offset_span = int(offset_span)
        self._max_attempts = int(max_attempts)

    def generate(self, equation: Equation, count: int = 4) -> OptionSet:
        if count < 1:
            raise ValueError("count must be >= 1")

        answer = equation.answer
        # dict keeps insertion order so the pre-shuffle order is reproducible.
        values: dict[int, None] = {answer: None}

        attempts = 0
        while len(values) < count and attempts < self._max_attempts:
            attempts += 1
            offset = self._rng.next_int(-self._offset_span, self._offset_span)
            if offset == 0:
                continue
            candidate = answer + offset
            if candidate <= 0:
                continue
            values.setdefault(candidate, None)

        if len(values) < count:
            logger.warning(
                "option sampling gave %d/%d values after %d draws for answer %d; filling nearby",
                len(values),
                count,
                attempts,
                answer,
            )
            self._fill_nearby(values, answer=answer, count=count)

        result = list(values)
        self._rng.shuffle(result)
        return tuple(result)

    @staticmethod
    def _fill_nearby(values: dict[int, None], *, answer: int, count: int) -> None:
        for distance in itertools.count(1):
            for candidate in (answer + distance, answer - distance):
                if len(values) >= count:
                    return
                if candidate > 0:
                    values.setdefault(candidate, None)
