"""
Configuration and environment loading for LLM Chess Duel.

- Loads settings.yml (YAML) from repo root if present; falls back to environment variables (.env honoured).
- Exposes SETTINGS with the oracle endpoint, sampling knobs, retry budget and server defaults.
"""
from dataclasses import dataclass
import logging
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger("config")


def _repo_root() -> str:
    # this file: src/llmchess_duel/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _load_yaml(path: str) -> dict:
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        log.exception("Failed to read %s; using environment only", path)
        return {}
    return data if isinstance(data, dict) else {}


_cfg = _load_yaml(os.path.join(_repo_root(), "settings.yml"))


def _get(name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in _cfg:
        val = _cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


@dataclass(frozen=True)
class Settings:
    # Auth / endpoint (OpenAI-compatible wire format)
    llm_api_key: str
    api_base: str
    model: str

    # Oracle sampling
    temperature: float
    max_tokens: int
    oracle_timeout_s: float

    # Elicitation
    ai_move_attempts: int
    recent_moves: int
    conversation_log_dir: str

    # HTTP server
    host: str
    port: int


SETTINGS = Settings(
    llm_api_key=_get("LLMCHESS_LLM_API_KEY", _get("OPENAI_API_KEY", "")),
    api_base=_get("LLMCHESS_LLM_BASE_URL", ""),
    model=_get("LLMCHESS_MODEL", "gpt-4o"),
    temperature=float(_get("LLMCHESS_TEMPERATURE", 0.2, cast=float)),
    max_tokens=int(_get("LLMCHESS_MAX_TOKENS", 100, cast=int)),
    oracle_timeout_s=float(_get("LLMCHESS_ORACLE_TIMEOUT_S", 30.0, cast=float)),
    ai_move_attempts=max(1, int(_get("LLMCHESS_AI_MOVE_ATTEMPTS", 3, cast=int))),
    recent_moves=max(0, int(_get("LLMCHESS_RECENT_MOVES", 8, cast=int))),
    conversation_log_dir=_get("LLMCHESS_CONVERSATION_LOG_DIR", ""),
    host=_get("LLMCHESS_HOST", "0.0.0.0"),
    port=int(_get("LLMCHESS_PORT", 3000, cast=int)),
)
