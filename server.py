"""
Flask API for a human (White) vs LLM (Black) chess game.

Endpoints:
- GET  /api/board    -> {board, currentPlayer, history}
- POST /api/move     -> submit {from:{row,col}, to:{row,col}} for the human side
- POST /api/ai-move  -> ask the LLM oracle for its move (bounded retries)
- POST /api/reset    -> start a fresh game
- GET  /api/pgn      -> PGN export of the current game
- GET  /             -> the browser board (public/)

Every error is a 400 with {"error": "<message>"}. One GameSession per app, injected via create_app().
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request, send_from_directory

from src.llmchess_duel.config import SETTINGS
from src.llmchess_duel.errors import ChessDuelError, ElicitationExhausted
from src.llmchess_duel.llm_client import MoveOracle
from src.llmchess_duel.session import GameSession

PUBLIC_DIR = Path(__file__).resolve().parent / "public"

log = logging.getLogger("server")


def _error(message: str):
    return jsonify({"error": message}), 400


def _grid_point(value) -> Optional[tuple]:
    if not isinstance(value, dict):
        return None
    return value.get("row"), value.get("col")


def create_app(session: Optional[GameSession] = None) -> Flask:
    app = Flask(__name__, static_folder=str(PUBLIC_DIR), static_url_path="")
    game = session or GameSession(MoveOracle())
    app.extensions["game_session"] = game

    @app.route("/", methods=["GET"])
    def index():
        return send_from_directory(PUBLIC_DIR, "index.html")

    @app.route("/api/board", methods=["GET"])
    def get_board():
        return jsonify(game.get_view())

    @app.route("/api/move", methods=["POST"])
    def user_move():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error("Missing from/to in request body.")
        src = _grid_point(data.get("from"))
        dst = _grid_point(data.get("to"))
        if src is None or dst is None:
            return _error("Missing from/to in request body.")
        try:
            game.apply_user_move(src, dst)
        except ChessDuelError as exc:
            log.info("Rejected user move %s -> %s: %s", src, dst, exc)
            return _error(str(exc))
        return jsonify(game.get_view())

    @app.route("/api/ai-move", methods=["POST"])
    def ai_move():
        try:
            outcome = game.request_ai_move()
        except ChessDuelError as exc:
            return _error(str(exc))
        if not outcome.applied:
            exc = ElicitationExhausted(outcome)
            log.error("AI move failed after %d attempts: %s", outcome.attempts_made, outcome.reason.value)
            return _error(str(exc))
        return jsonify(game.get_view())

    @app.route("/api/reset", methods=["POST"])
    def reset():
        game.reset()
        return jsonify(game.get_view())

    @app.route("/api/pgn", methods=["GET"])
    def pgn():
        return jsonify({"pgn": game.pgn()})

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = request.headers.get("Origin", "*")
        response.headers["Access-Control-Allow-Headers"] = "Content-Type, Authorization"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        # Prevent caching so the board always reflects the latest move
        response.headers["Cache-Control"] = "no-store, max-age=0"
        return response

    return app


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Play chess against an LLM in the browser.")
    ap.add_argument("--host", default=SETTINGS.host)
    ap.add_argument("--port", type=int, default=SETTINGS.port)
    ap.add_argument("--model", default=None, help="Oracle model name (overrides LLMCHESS_MODEL)")
    ap.add_argument("--log-level", default="INFO", help="Python logging level (e.g., INFO, DEBUG)")
    ap.add_argument("--debug", action="store_true", help="Run Flask in debug mode")
    args = ap.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    app = create_app(GameSession(MoveOracle(model=args.model)))
    log.info("Server running on http://%s:%d", args.host, args.port)
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)


if __name__ == "__main__":
    main()
