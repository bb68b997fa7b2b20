from __future__ import annotations
"""
Move oracle over an OpenAI-compatible chat-completions endpoint (configurable base URL).

One request() is exactly one round trip: SDK retries are disabled and the
elicitation loop owns the retry budget. Any failure comes back as None, never
as an exception. On success only the first {...} span of the reply is returned,
verbatim and unparsed; deciding whether it is a usable move is the caller's job.
"""
from typing import Optional
import logging
import re

from openai import OpenAI

from .config import SETTINGS
from .prompting import PromptConfig, system_prompt

log = logging.getLogger("llm_client")

# Lazy: stops at the first closing brace. Not a JSON grammar.
JSON_OBJECT_RE = re.compile(r"\{[\s\S]*?\}")


def extract_json_object(text: str) -> Optional[str]:
    """Return the first '{...}' substring of text, or None."""
    if not text:
        return None
    m = JSON_OBJECT_RE.search(text)
    return m.group(0) if m else None


class MoveOracle:
    """Asks the model for one move as {"from": ..., "to": ...}."""

    def __init__(self, model: Optional[str] = None, client: Optional[OpenAI] = None,
                 prompt_cfg: Optional[PromptConfig] = None, timeout_s: Optional[float] = None):
        self.model = model or SETTINGS.model
        self.prompt_cfg = prompt_cfg or PromptConfig()
        self.timeout_s = SETTINGS.oracle_timeout_s if timeout_s is None else timeout_s
        self._client = client

    def _get_client(self) -> OpenAI:
        # Built on first use so a missing key surfaces as a failed attempt, not an import error.
        if self._client is None:
            self._client = OpenAI(
                api_key=SETTINGS.llm_api_key or None,
                base_url=SETTINGS.api_base or None,
                max_retries=0,
            )
        return self._client

    def build_messages(self, prompt_text: str, side: str) -> list[dict]:
        return [
            {"role": "system", "content": system_prompt(side, self.prompt_cfg)},
            {"role": "user", "content": prompt_text},
        ]

    def request(self, prompt_text: str, side: str = "black") -> Optional[str]:
        """One oracle call; returns the JSON-looking substring of the reply or None."""
        log.info("[Oracle Prompt] => %s", prompt_text)
        try:
            rsp = self._get_client().chat.completions.create(
                model=self.model,
                messages=self.build_messages(prompt_text, side),
                temperature=SETTINGS.temperature,
                max_tokens=SETTINGS.max_tokens,
                timeout=self.timeout_s,
            )
        except Exception:  # noqa: BLE001
            log.exception("Oracle request failed")
            return None
        text = _extract_text(rsp).strip()
        log.info("[Oracle Raw Response] => %s", text)
        return extract_json_object(text)


def _extract_text(rsp) -> str:
    try:
        if hasattr(rsp, "choices") and rsp.choices:
            msg = rsp.choices[0].message
            content = getattr(msg, "content", None)
            if isinstance(content, str):
                return content
            if isinstance(content, list):
                parts = []
                for c in content:
                    if isinstance(c, dict):
                        if c.get("type") == "text" and isinstance(c.get("text"), str):
                            parts.append(c["text"])
                        continue
                    t = getattr(c, "text", None)
                    if isinstance(t, str):
                        parts.append(t)
                if parts:
                    return "\n".join(parts)
    except (AttributeError, IndexError, TypeError):
        log.exception("Failed to extract text from response")
    return ""
