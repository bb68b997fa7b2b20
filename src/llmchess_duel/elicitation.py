"""
AI move elicitation: a bounded retry loop between the prompt builder, the oracle and the referee.

Each attempt ends in exactly one AttemptStatus. Every non-APPLIED status appends a
corrective note that is carried into all later prompts of the same turn. The board
is only mutated by the single successful Referee.apply_move call.
"""
from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from .config import SETTINGS
from .errors import IllegalMoveError, NotYourTurnError
from .prompting import PromptConfig, build_prompt
from .referee import Referee

log = logging.getLogger("elicitation")

SENTINEL = "none"

NOTE_EMPTY = "NOTE: Your previous response was invalid or empty. Please return valid JSON."
NOTE_UNPARSEABLE = "NOTE: Could not parse your JSON. Please output strictly valid JSON."


def illegal_move_note(from_square: str, to_square: str) -> str:
    return f'NOTE: Move {{from:"{from_square}",to:"{to_square}"}} is illegal or invalid. Please try again.'


class Oracle(Protocol):
    def request(self, prompt_text: str, side: str = "black") -> Optional[str]: ...


class AttemptStatus(str, enum.Enum):
    APPLIED = "applied"
    NO_RESPONSE = "no_response"
    UNPARSEABLE = "unparseable"
    ILLEGAL = "illegal"


class ExhaustionReason(str, enum.Enum):
    NO_PARSEABLE_OUTPUT = "no_parseable_output"
    ILLEGAL_MOVES_ONLY = "illegal_moves_only"
    NO_LEGAL_MOVES_CLAIMED = "no_legal_moves_claimed"


@dataclass(frozen=True)
class CandidateMove:
    from_square: str
    to_square: str

    @property
    def is_sentinel(self) -> bool:
        return self.from_square == SENTINEL and self.to_square == SENTINEL


@dataclass
class AttemptRecord:
    attempt: int
    prompt: str
    raw: Optional[str]
    status: AttemptStatus
    candidate: Optional[CandidateMove] = None


@dataclass
class ElicitationOutcome:
    applied: bool
    move: Optional[dict] = None
    reason: Optional[ExhaustionReason] = None
    attempts: list[AttemptRecord] = field(default_factory=list)

    @property
    def attempts_made(self) -> int:
        return len(self.attempts)


def parse_candidate(raw: str) -> Optional[CandidateMove]:
    """Parse the oracle substring; None unless it is an object with string 'from' and 'to'."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    src, dst = data.get("from"), data.get("to")
    if not isinstance(src, str) or not isinstance(dst, str):
        return None
    return CandidateMove(src, dst)


def _exhaustion_reason(attempts: list[AttemptRecord]) -> ExhaustionReason:
    judged = [a for a in attempts if a.status == AttemptStatus.ILLEGAL]
    if not judged:
        return ExhaustionReason.NO_PARSEABLE_OUTPUT
    if judged[-1].candidate is not None and judged[-1].candidate.is_sentinel:
        return ExhaustionReason.NO_LEGAL_MOVES_CLAIMED
    return ExhaustionReason.ILLEGAL_MOVES_ONLY


def _try_apply(referee: Referee, candidate: CandidateMove) -> Optional[dict]:
    legal = referee.legal_moves()
    found = any(m["from"] == candidate.from_square and m["to"] == candidate.to_square for m in legal)
    if not found:
        return None
    try:
        return referee.apply_move(candidate.from_square, candidate.to_square, promotion="q")
    except IllegalMoveError:
        log.error("Referee rejected listed move %s -> %s", candidate.from_square, candidate.to_square)
        return None


def elicit_ai_move(referee: Referee, oracle: Oracle, ai_color: str = "black",
                   max_attempts: Optional[int] = None, recent_count: Optional[int] = None,
                   prompt_cfg: Optional[PromptConfig] = None) -> ElicitationOutcome:
    """Ask the oracle for the side to move until a legal move is applied or the budget runs out.

    Raises NotYourTurnError, before any oracle call, when it is not ``ai_color`` to move.
    """
    side = referee.turn_color()
    if side != ai_color:
        raise NotYourTurnError(f"It is {side.capitalize()}'s turn, not AI's turn.")

    budget = SETTINGS.ai_move_attempts if max_attempts is None else max_attempts
    recent = SETTINGS.recent_moves if recent_count is None else recent_count
    notes: list[str] = []
    attempts: list[AttemptRecord] = []

    for attempt in range(1, budget + 1):
        prompt = build_prompt(referee, notes, recent_count=recent, cfg=prompt_cfg)
        raw = oracle.request(prompt, side=side)
        candidate = None

        if raw is None:
            status = AttemptStatus.NO_RESPONSE
            notes.append(NOTE_EMPTY)
        else:
            candidate = parse_candidate(raw)
            if candidate is None:
                status = AttemptStatus.UNPARSEABLE
                notes.append(NOTE_UNPARSEABLE)
            else:
                move = _try_apply(referee, candidate)
                if move is not None:
                    attempts.append(AttemptRecord(attempt, prompt, raw, AttemptStatus.APPLIED, candidate))
                    log.info("AI move %s applied on attempt %d/%d", move["san"], attempt, budget)
                    return ElicitationOutcome(applied=True, move=move, attempts=attempts)
                status = AttemptStatus.ILLEGAL
                notes.append(illegal_move_note(candidate.from_square, candidate.to_square))

        attempts.append(AttemptRecord(attempt, prompt, raw, status, candidate))
        log.warning("Attempt %d/%d failed: %s (raw=%r)", attempt, budget, status.value, raw)

    reason = _exhaustion_reason(attempts)
    log.error("Elicitation exhausted after %d attempts: %s", len(attempts), reason.value)
    return ElicitationOutcome(applied=False, reason=reason, attempts=attempts)
