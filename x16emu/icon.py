"""The 96x96 window icon: three stacked chevrons above an "X" leg pattern."""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

WIDTH = 96
HEIGHT = 96

BACKGROUND = "."

PALETTE: dict[str, tuple[int, int, int, int]] = {
    ".": (0x00, 0x00, 0xAA, 0x00),
    "+": (0x88, 0x00, 0x00, 0xFF),
    "@": (0xCC, 0x44, 0xCC, 0xFF),
    "#": (0x00, 0x88, 0xFF, 0xFF),
    "$": (0xDD, 0x88, 0x55, 0xFF),
    "%": (0x00, 0xCC, 0x55, 0xFF),
    "&": (0xEE, 0xEE, 0x77, 0xFF),
    "*": (0xAA, 0xFF, 0xEE, 0xFF),
}

# Bands of the left half: (first row, last row, colour, first column,
# last column as a function of the row). The right half is the mirror image.
_BANDS: tuple[tuple[int, int, str, int, Callable[[int], int]], ...] = (
    (5, 17, "@", 4, lambda row: row),
    (18, 29, "#", 8, lambda row: row),
    (30, 41, "*", 11, lambda row: row),
    (42, 44, "%", 18, lambda row: 42),
    (45, 47, "%", 30, lambda row: 42),
    (48, 53, "%", 36, lambda row: 42),
    (54, 59, "&", 36, lambda row: 42),
    (60, 62, "&", 30, lambda row: 42),
    (63, 65, "&", 18, lambda row: 42),
    (66, 77, "$", 15, lambda row: 108 - row),
    (78, 90, "+", 12, lambda row: 108 - row),
)


@lru_cache(maxsize=None)
def _rows() -> tuple[str, ...]:
    rows = [[BACKGROUND] * WIDTH for _ in range(HEIGHT)]
    for first, last, colour, start, end_of in _BANDS:
        for row in range(first, last + 1):
            end = end_of(row)
            cells = rows[row]
            cells[start : end + 1] = colour * (end + 1 - start)
            cells[WIDTH - 1 - end : WIDTH - start] = colour * (end + 1 - start)
    return tuple("".join(cells) for cells in rows)


@lru_cache(maxsize=None)
def icon_pixels() -> bytes:
    """The icon as 96*96 palette indices, row by row; each index is a key of PALETTE."""
    return "".join(_rows()).encode("ascii")


@lru_cache(maxsize=None)
def icon_rgba() -> bytes:
    """The icon as 96*96 RGBA pixels, row by row, four bytes each."""
    return b"".join(bytes(PALETTE[chr(index)]) for index in icon_pixels())