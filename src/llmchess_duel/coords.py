"""
Grid <-> algebraic square translation for the browser board.

Row 0 is rank 8 and column 0 is file a, so (0, 0) -> "a8" and (7, 7) -> "h1".
"""
from __future__ import annotations

import re

from .errors import OutOfRangeError

FILES = "abcdefgh"
SQUARE_RE = re.compile(r"^[a-h][1-8]$")


def _check_index(name: str, value) -> int:
    # bool is an int subclass; JSON true/false must not pass as 1/0
    if isinstance(value, bool) or not isinstance(value, int):
        raise OutOfRangeError(f"{name} must be an integer in 0..7, got {value!r}")
    if not 0 <= value <= 7:
        raise OutOfRangeError(f"{name} must be in 0..7, got {value}")
    return value


def to_algebraic(row: int, col: int) -> str:
    """Return the square name for a zero-based (row, col) grid cell."""
    row = _check_index("row", row)
    col = _check_index("col", col)
    return f"{FILES[col]}{8 - row}"


def from_algebraic(square: str) -> tuple[int, int]:
    """Inverse of to_algebraic: "e4" -> (4, 4)."""
    if not isinstance(square, str) or not SQUARE_RE.match(square):
        raise OutOfRangeError(f"Not a square: {square!r}")
    return 8 - int(square[1]), FILES.index(square[0])


__all__ = ["to_algebraic", "from_algebraic", "OutOfRangeError"]
