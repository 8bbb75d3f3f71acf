from __future__ import annotations

from dataclasses import dataclass

from .random_source import RandomRangeSource

MAX_ADDEND = 10
MAX_SUM = 20


@dataclass(frozen=True, slots=True)
class Equation:
    a: int
    b: int
    answer: int
    operator: str = "+"

    @property
    def prompt(self) -> str:
        return f"{self.a} {self.operator} {self.b} = ?"


class EquationGenerator:
    """Generates addition problems with small addends and a sum of at most 20."""

    def __init__(self, rng: RandomRangeSource) -> None:
        self._rng = rng

    def next_equation(self) -> Equation:
        a = self._rng.next_int(1, MAX_ADDEND)
        # a <= 10 keeps max_b >= 10, so the range for b is never empty.
        max_b = min(MAX_ADDEND, MAX_SUM - a)
        b = self._rng.next_int(1, max_b)
        return Equation(a=a, b=b, answer=a + b)
