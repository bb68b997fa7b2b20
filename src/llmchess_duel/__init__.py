"""
LLM Chess Duel package: a human plays White in the browser, an LLM plays Black.

Components:
- coords/board_view: grid <-> algebraic translation and the Unicode board grid
- referee: python-chess board wrapper (legal moves, move application, verbose history, PGN)
- prompting: per-turn prompt build with cumulative retry notes
- llm_client: single-call OpenAI-compatible move oracle with JSON substring extraction
- elicitation: bounded retry loop turning oracle replies into an applied move
- session: the single live game and its turn gating, used by server.py
"""
# Package exports are intentionally minimal; import modules directly as needed.
