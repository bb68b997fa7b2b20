"""
Referee: the rules engine the rest of the package talks to.

- Owns a python-chess Board; every legality question and every mutation goes through it.
- legal_moves()/history() return chess.js-style verbose dicts (from/to/san/flags/...) so the
  HTTP layer and the elicitation loop can compare plain square strings.
- apply_move() is atomic: the board is pushed only when the move is legal.
- pgn() serializes the game with headers for download.
"""
from __future__ import annotations

import datetime
from typing import Optional

import chess
import chess.pgn

from .errors import IllegalMoveError


def _flags(board: chess.Board, mv: chess.Move) -> str:
    """chess.js move flags: n, c, b, e, p, k, q."""
    if board.is_kingside_castling(mv):
        return "k"
    if board.is_queenside_castling(mv):
        return "q"
    if board.is_en_passant(mv):
        return "e"
    flags = "c" if board.is_capture(mv) else "n"
    if mv.promotion:
        return flags + "p"
    piece = board.piece_at(mv.from_square)
    if piece and piece.piece_type == chess.PAWN and abs(mv.to_square - mv.from_square) == 16:
        return "b"
    return flags


def describe_move(board: chess.Board, mv: chess.Move) -> dict:
    """Verbose description of a legal move in the position *before* it is played."""
    piece = board.piece_at(mv.from_square)
    entry = {
        "color": "w" if board.turn == chess.WHITE else "b",
        "from": chess.square_name(mv.from_square),
        "to": chess.square_name(mv.to_square),
        "piece": chess.piece_symbol(piece.piece_type) if piece else "",
        "san": board.san(mv),
        "flags": _flags(board, mv),
    }
    if board.is_en_passant(mv):
        entry["captured"] = "p"
    else:
        captured = board.piece_at(mv.to_square)
        if captured and not board.is_castling(mv):
            entry["captured"] = chess.piece_symbol(captured.piece_type)
    if mv.promotion:
        entry["promotion"] = chess.piece_symbol(mv.promotion)
    return entry


class Referee:
    """Plain chess referee around python-chess Board and PGN export."""

    def __init__(self, starting_fen: str | None = None):
        self.board = chess.Board(fen=starting_fen) if starting_fen else chess.Board()
        self._headers: dict[str, str] = {}

    # ---------------- Header Management -----------------
    def set_headers(self, event: str = "LLM Chess Duel", site: str = "?", date: Optional[str] = None,
                    round_: str = "?", white: str = "?", black: str = "?") -> None:
        date = date or datetime.date.today().strftime("%Y.%m.%d")
        self._headers.update({
            "Event": event,
            "Site": site,
            "Date": date,
            "Round": round_,
            "White": white,
            "Black": black,
        })

    # ---------------- Read access -----------------
    def turn_color(self) -> str:
        return "white" if self.board.turn == chess.WHITE else "black"

    def fen(self) -> str:
        return self.board.fen()

    def legal_moves(self) -> list[dict]:
        """Verbose legal moves for the side to move. Promotions appear once per promotion piece."""
        return [describe_move(self.board, mv) for mv in self.board.legal_moves]

    def board_matrix(self) -> list[list[Optional[chess.Piece]]]:
        """8x8 rows, row 0 = rank 8, column 0 = file a; None for empty squares."""
        return [
            [self.board.piece_at(chess.square(col, 7 - row)) for col in range(8)]
            for row in range(8)
        ]

    def history(self) -> list[dict]:
        """Verbose move list, oldest first, with FENs before and after each move."""
        replay = self.board.root()
        moves: list[dict] = []
        for mv in self.board.move_stack:
            entry = describe_move(replay, mv)
            entry["lan"] = mv.uci()
            entry["before"] = replay.fen()
            replay.push(mv)
            entry["after"] = replay.fen()
            moves.append(entry)
        return moves

    # ---------------- Move Application -----------------
    def apply_move(self, from_square: str, to_square: str, promotion: str | None = "q") -> dict:
        """Play from->to if legal and return its verbose entry; raise IllegalMoveError otherwise.

        ``promotion`` is only attached when a pawn actually reaches the last rank.
        """
        try:
            from_sq = chess.parse_square(from_square)
            to_sq = chess.parse_square(to_square)
        except (TypeError, ValueError):
            raise IllegalMoveError("Illegal move.")
        piece = self.board.piece_at(from_sq)
        promo = None
        if promotion and piece and piece.piece_type == chess.PAWN and chess.square_rank(to_sq) in (0, 7):
            promo = chess.Piece.from_symbol(promotion).piece_type
        mv = chess.Move(from_sq, to_sq, promotion=promo)
        if mv not in self.board.legal_moves:
            raise IllegalMoveError("Illegal move.")
        entry = describe_move(self.board, mv)
        entry["lan"] = mv.uci()
        entry["before"] = self.board.fen()
        self.board.push(mv)
        entry["after"] = self.board.fen()
        return entry

    # ---------------- PGN / Status -----------------
    def pgn(self) -> str:
        game = chess.pgn.Game.from_board(self.board)
        for k, v in self._headers.items():
            game.headers[k] = v
        game.headers["Result"] = self.status()
        exporter = chess.pgn.StringExporter(headers=True, variations=False, comments=False)
        return game.accept(exporter)

    def status(self) -> str:
        if self.board.is_game_over():
            return self.board.result()
        return "*"
