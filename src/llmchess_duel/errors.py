"""Error taxonomy surfaced to the HTTP layer as 400 responses."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .elicitation import ElicitationOutcome


class ChessDuelError(Exception):
    """Base class; str(exc) is the user-facing message."""


class OutOfRangeError(ChessDuelError, ValueError):
    """Grid coordinate outside [0, 7] or a malformed square name."""


class NotYourTurnError(ChessDuelError):
    """Move or AI request made while the other side is to move."""


class IllegalMoveError(ChessDuelError):
    """Move rejected by the referee; the board is left untouched."""


class ElicitationExhausted(ChessDuelError):
    """The oracle never produced an applicable move within the attempt budget.

    The message stays generic; the per-attempt transcript lives on ``outcome``
    for logging only.
    """

    def __init__(self, outcome: "ElicitationOutcome", message: str = "AI failed to provide a valid move after multiple attempts."):
        super().__init__(message)
        self.outcome = outcome
