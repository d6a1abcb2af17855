"""Deterministic core for the addition drill.

Problem generation and answer parsing live here with no dependency on pygame,
so they can be exercised headlessly. Randomness is always injected: pass a
``SeededRng`` for a reproducible stream, or any object with ``randint`` and
``random`` to script exact draws in tests.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Protocol


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        """Return an integer in the closed range [a, b]."""
        ...

    def random(self) -> float:
        """Return a float in [0.0, 1.0)."""
        ...


class SeededRng:
    """Seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def random(self) -> float:
        return self._rng.random()


@dataclass(frozen=True, slots=True)
class Problem:
    """A single summation problem.

    ``terms`` is sorted descending so positive terms come first, which keeps
    running totals friendlier when adding by hand. It does not make the sum
    non-negative.
    """

    terms: tuple[int, ...]
    correct_answer: int
    digits: int

    def term_lines(self) -> list[str]:
        """Terms as strings right-aligned to the digit width."""
        return [str(t).rjust(self.digits) for t in self.terms]


def magnitude_range(digits: int) -> tuple[int, int]:
    """Closed range of magnitudes with exactly ``digits`` decimal digits."""
    return 10 ** (digits - 1), 10**digits - 1


def generate_problem(digits: int, term_count: int, *, rng: RandomSource) -> Problem:
    lo, hi = magnitude_range(digits)
    terms: list[int] = []
    for _ in range(term_count):
        magnitude = rng.randint(lo, hi)
        terms.append(magnitude if rng.random() >= 0.5 else -magnitude)
    terms.sort(reverse=True)
    return Problem(terms=tuple(terms), correct_answer=sum(terms), digits=digits)


class AdditionProblemGenerator:
    """Generates problems from a single injected random stream.

    Inputs are trusted; range checks belong to the configuration layer.
    """

    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    def generate(self, *, digits: int, term_count: int) -> Problem:
        return generate_problem(digits, term_count, rng=self._rng)


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_answer(raw: str) -> int | None:
    """Parse the leading ASCII integer of ``raw``.

    Trailing characters are ignored ("12abc" -> 12). Returns None when there is
    no leading integer at all, or when the digit run is too long for ``int``;
    None never equals a correct answer, so such input is simply scored wrong.
    """

    m = _LEADING_INT.match(raw)
    if m is None:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # Digit strings past sys.get_int_max_str_digits().
        return None
