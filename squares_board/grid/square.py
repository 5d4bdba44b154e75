"""
Numbering of the squares on a board

(placed in its own module as the service, db and api layers all need it)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from squares_board.core.exceptions import InvalidRequestError

# A board is always 10x10, numbered 1..100 in row-major order.
GRID_WIDTH = 10
SQUARE_COUNT = 100
# Row keys are zero-padded so lexicographic and numeric ordering agree.
KEY_WIDTH = 3
# ASCII digits only: int() would also take "1_0", "+5" or non-latin digits.
SQUARE_NUMBER_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class GridSquare:
    number: int

    @classmethod
    def from_key(cls, key: str) -> GridSquare:
        """'007' -> GridSquare(7)"""
        return cls(int(key))

    @property
    def key(self) -> str:
        return str(self.number).zfill(KEY_WIDTH)

    @property
    def row(self) -> int:
        return (self.number - 1) // GRID_WIDTH

    @property
    def col(self) -> int:
        return (self.number - 1) % GRID_WIDTH

    def is_within_bounds(self) -> bool:
        return 1 <= self.number <= SQUARE_COUNT


def all_squares() -> list[GridSquare]:
    return [GridSquare(number) for number in range(1, SQUARE_COUNT + 1)]


def square_key(number: int) -> str:
    return GridSquare(number).key


def normalize_square_keys(values: Iterable[int | str]) -> list[str]:
    """
    Turn whatever the client sent into canonical square keys.

    Entries are ints (not bools) or stripped strings of ASCII digits. Duplicates are dropped and the result is sorted ascending.
    Numbers outside 1..100 are kept: they simply don't exist on the board (which the caller reports as not found).
    """
    numbers: set[int] = set()
    for value in values:
        if isinstance(value, int) and not isinstance(value, bool):
            numbers.add(value)
            continue
        if not isinstance(value, str):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a square number.")
        text = value.strip()
        if not text:
            continue
        if not SQUARE_NUMBER_PATTERN.fullmatch(text):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a square number.")
        numbers.add(int(text))
    return [square_key(number) for number in sorted(numbers)]
