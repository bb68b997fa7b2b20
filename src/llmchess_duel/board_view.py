"""Unicode board grid for the browser and the prompt."""
from __future__ import annotations

from typing import TYPE_CHECKING

import chess

if TYPE_CHECKING:  # pragma: no cover
    from .referee import Referee

EMPTY = "."
RANK_LABELS = "87654321"


def piece_glyph(piece: chess.Piece | None) -> str:
    if piece is None:
        return EMPTY
    return chess.UNICODE_PIECE_SYMBOLS[piece.symbol()]


def render_grid(referee: "Referee") -> list[list[str]]:
    """8x8 display symbols: row 0 = rank 8 (Black's back rank), column 0 = file a."""
    return [[piece_glyph(cell) for cell in row] for row in referee.board_matrix()]


def text_grid(grid: list[list[str]]) -> str:
    """Rank-labelled rows with a file footer, e.g. '8 | ♜  ♞  ♝ ...'."""
    lines = [f"{RANK_LABELS[r]} | " + "  ".join(grid[r]) for r in range(8)]
    lines.append("    " + "  ".join("abcdefgh"))
    return "\n".join(lines)
