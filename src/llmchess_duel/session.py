"""
GameSession: the one live game behind the HTTP API.

- Owns a Referee and a re-entrant lock; every read and every mutation takes the lock, so an
  AI turn that is waiting on the oracle cannot interleave with a user move or a reset.
- Turn gating: the user moves only on user_color's turn, the AI only on ai_color's turn.
- Optionally writes a chat-style JSON transcript of each AI turn for debugging.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime
from typing import Optional

from .board_view import render_grid
from .config import SETTINGS
from .coords import to_algebraic
from .elicitation import ElicitationOutcome, Oracle, elicit_ai_move
from .errors import NotYourTurnError
from .prompting import PromptConfig, system_prompt
from .referee import Referee


def _opposite(color: str) -> str:
    return "black" if color == "white" else "white"


class GameSession:
    def __init__(self, oracle: Oracle, user_color: str = "white", model_label: Optional[str] = None,
                 prompt_cfg: Optional[PromptConfig] = None, conversation_log_dir: Optional[str] = None):
        self.log = logging.getLogger("GameSession")
        self.oracle = oracle
        self.user_color = "black" if str(user_color).lower() == "black" else "white"
        self.ai_color = _opposite(self.user_color)
        self.model_label = str(model_label or getattr(oracle, "model", None) or "LLM")
        self.prompt_cfg = prompt_cfg or PromptConfig()
        self.conversation_log_dir = SETTINGS.conversation_log_dir if conversation_log_dir is None else conversation_log_dir
        self._lock = threading.RLock()
        self.ref = self._new_referee()

    def _new_referee(self) -> Referee:
        ref = Referee()
        if self.user_color == "white":
            ref.set_headers(white="Human", black=self.model_label)
        else:
            ref.set_headers(white=self.model_label, black="Human")
        return ref

    # ---------------- Views -----------------
    def get_view(self) -> dict:
        with self._lock:
            return {
                "board": render_grid(self.ref),
                "currentPlayer": self.ref.turn_color(),
                "history": self.ref.history(),
            }

    def pgn(self) -> str:
        with self._lock:
            return self.ref.pgn()

    # ---------------- Mutations -----------------
    def apply_user_move(self, from_rc: tuple[int, int], to_rc: tuple[int, int]) -> dict:
        """Play the user's move from grid coordinates (always promoting to a queen)."""
        with self._lock:
            side = self.ref.turn_color()
            if side != self.user_color:
                raise NotYourTurnError(f"It is not {self.user_color.capitalize()}'s turn.")
            from_sq = to_algebraic(*from_rc)
            to_sq = to_algebraic(*to_rc)
            move = self.ref.apply_move(from_sq, to_sq, promotion="q")
            self.log.info("User move %s (%s -> %s)", move["san"], from_sq, to_sq)
            return move

    def request_ai_move(self) -> ElicitationOutcome:
        with self._lock:
            ply = len(self.ref.board.move_stack) + 1
            outcome = elicit_ai_move(self.ref, self.oracle, ai_color=self.ai_color, prompt_cfg=self.prompt_cfg)
            self.dump_transcript(outcome, ply)
            return outcome

    def reset(self) -> None:
        with self._lock:
            self.ref = self._new_referee()
            self.log.info("Game reset")

    # ---------------- Transcripts -----------------
    def export_transcript(self, outcome: ElicitationOutcome) -> list[dict]:
        """Chat-style messages for one AI turn: system once, then user/assistant per attempt."""
        messages: list[dict] = [{"role": "system", "content": system_prompt(self.ai_color, self.prompt_cfg), "model": self.model_label}]
        for rec in outcome.attempts:
            messages.append({"role": "user", "content": rec.prompt, "attempt": rec.attempt})
            messages.append({"role": "assistant", "content": rec.raw, "attempt": rec.attempt, "status": rec.status.value})
        return messages

    def dump_transcript(self, outcome: ElicitationOutcome, ply: int) -> Optional[str]:
        if not self.conversation_log_dir:
            return None
        ts = datetime.now().strftime("%Y%m%d-%H%M%S")
        path = os.path.join(self.conversation_log_dir, f"conv_{ply:03d}_{ts}.json")
        data = {
            "ply": ply,
            "side": self.ai_color,
            "model": self.model_label,
            "applied": outcome.applied,
            "reason": outcome.reason.value if outcome.reason else None,
            "move": outcome.move,
            "messages": self.export_transcript(outcome),
        }
        try:
            os.makedirs(self.conversation_log_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            self.log.info("Wrote conversation log to %s", path)
        except OSError:
            self.log.exception("Failed writing conversation log")
            return None
        return path
