"""
Prompt builders and config for LLM move requests using a modular template.

The user prompt carries the FEN, a numbered tail of recent moves, a text board
and a strict JSON reply schema. Retry notes from failed attempts are appended
verbatim and in order, so the oracle sees cumulative feedback. Output depends
only on the board and the notes (no clock, no randomness).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, TYPE_CHECKING

from .board_view import render_grid, text_grid

if TYPE_CHECKING:  # pragma: no cover
    from .referee import Referee

DEFAULT_SYSTEM = """You are an advanced Chess AI playing as {SIDE_TO_MOVE}.
You must ALWAYS produce a valid, legal chess move as a pair of squares (e.g. "e7","e5") if one exists.
Output ONLY valid JSON with "from" and "to" fields, nothing else.
If no legal moves are possible (checkmate/stalemate), return {"from":"none","to":"none"}.
Do not provide extraneous text or explanation."""

DEFAULT_TEMPLATE = """FEN: {FEN}

Moves so far (last {RECENT_COUNT} moves):
{RECENT_MOVES}

Current Board (Top=Black, Bottom=White):
{BOARD}

It is currently {SIDE_TO_MOVE}'s turn.
You MUST provide a strictly legal move for {SIDE_TO_MOVE} in JSON only.
Your JSON format must be EXACTLY:
{
  "from":"<square>",
  "to":"<square>"
}
No extra fields, no extra text. If no legal moves exist, output:
{
  "from":"none",
  "to":"none"
}
Always avoid illegal or repeated moves."""

NO_MOVES_YET = "No moves yet."


@dataclass
class PromptConfig:
    """Configuration for shaping move prompts using a custom template."""

    system_instructions: str = DEFAULT_SYSTEM
    template: str = DEFAULT_TEMPLATE


def render_custom_prompt(template: str, values: Dict[str, str]) -> str:
    """Replace known placeholders in the template. Unknown tokens (and JSON braces) are left intact."""
    rendered = template or ""
    for key, val in values.items():
        rendered = rendered.replace(f"{{{key}}}", val)
    return rendered


def recent_moves_text(history: list[dict], count: int) -> str:
    """Last `count` plies oldest-first, numbered by their true position in the game."""
    if count <= 0 or not history:
        return NO_MOVES_YET
    start = max(0, len(history) - count)
    lines = []
    for offset, mv in enumerate(history[start:]):
        color = "White" if mv["color"] == "w" else "Black"
        lines.append(f"{start + offset + 1}. {color} moved {mv['from']} -> {mv['to']}")
    return "\n".join(lines)


def system_prompt(side: str, cfg: Optional[PromptConfig] = None) -> str:
    cfg = cfg or PromptConfig()
    return render_custom_prompt(cfg.system_instructions, {"SIDE_TO_MOVE": side.capitalize()})


def build_prompt(referee: "Referee", notes: Iterable[str] = (), recent_count: int = 8,
                 cfg: Optional[PromptConfig] = None) -> str:
    """Base prompt for the side to move followed by every retry note, in order."""
    cfg = cfg or PromptConfig()
    values = {
        "FEN": referee.fen(),
        "RECENT_COUNT": str(recent_count),
        "RECENT_MOVES": recent_moves_text(referee.history(), recent_count),
        "BOARD": text_grid(render_grid(referee)),
        "SIDE_TO_MOVE": referee.turn_color().capitalize(),
    }
    prompt = render_custom_prompt(cfg.template, values)
    return prompt + "".join(f"\n{note}\n" for note in notes)
