import unittest
from unittest.mock import MagicMock

from server import create_app
from src.llmchess_duel.config import SETTINGS
from src.llmchess_duel.session import GameSession

E2_E4 = {"from": {"row": 6, "col": 4}, "to": {"row": 4, "col": 4}}
D2_D4 = {"from": {"row": 6, "col": 3}, "to": {"row": 4, "col": 3}}


class ServerTests(unittest.TestCase):
    def setUp(self):
        self.oracle = MagicMock()
        self.session = GameSession(self.oracle, model_label="test-model", conversation_log_dir="")
        self.client = create_app(self.session).test_client()

    def test_board_starting_position(self):
        rsp = self.client.get("/api/board")
        self.assertEqual(rsp.status_code, 200)
        data = rsp.get_json()
        self.assertEqual(data["currentPlayer"], "white")
        self.assertEqual(data["history"], [])
        self.assertEqual(data["board"][0], ["♜", "♞", "♝", "♛", "♚", "♝", "♞", "♜"])
        self.assertEqual(data["board"][7], ["♖", "♘", "♗", "♕", "♔", "♗", "♘", "♖"])
        self.assertEqual(sum(cell != "." for row in data["board"] for cell in row), 32)

    def test_legal_user_move(self):
        rsp = self.client.post("/api/move", json=E2_E4)
        self.assertEqual(rsp.status_code, 200)
        data = rsp.get_json()
        self.assertEqual(data["currentPlayer"], "black")
        self.assertEqual(len(data["history"]), 1)
        self.assertEqual(data["history"][0]["from"], "e2")
        self.assertEqual(data["history"][0]["to"], "e4")
        self.assertEqual(data["board"][4][4], "♙")

    def test_illegal_user_move(self):
        rsp = self.client.post("/api/move", json={"from": {"row": 7, "col": 0}, "to": {"row": 4, "col": 0}})
        self.assertEqual(rsp.status_code, 400)
        self.assertTrue(rsp.get_json()["error"])
        self.assertEqual(self.client.get("/api/board").get_json()["currentPlayer"], "white")

    def test_out_of_turn_user_move(self):
        self.client.post("/api/move", json=E2_E4)
        rsp = self.client.post("/api/move", json=D2_D4)
        self.assertEqual(rsp.status_code, 400)
        self.assertIn("turn", rsp.get_json()["error"])

    def test_missing_or_bad_fields(self):
        for body in [{}, {"from": {"row": 6, "col": 4}}, {"from": "e2", "to": "e4"}]:
            with self.subTest(body=body):
                rsp = self.client.post("/api/move", json=body)
                self.assertEqual(rsp.status_code, 400)
                self.assertEqual(rsp.get_json()["error"], "Missing from/to in request body.")
        rsp = self.client.post("/api/move", json={"from": {"row": 9, "col": 4}, "to": {"row": 4, "col": 4}})
        self.assertEqual(rsp.status_code, 400)
        rsp = self.client.post("/api/move", data="not json", content_type="text/plain")
        self.assertEqual(rsp.status_code, 400)

    def test_non_object_json_body(self):
        for body in [[1, 2], "e2e4", 5, None]:
            with self.subTest(body=body):
                rsp = self.client.post("/api/move", json=body)
                self.assertEqual(rsp.status_code, 400)
                self.assertEqual(rsp.get_json()["error"], "Missing from/to in request body.")
        self.assertEqual(self.client.get("/api/board").get_json()["currentPlayer"], "white")

    def test_ai_move_on_white_turn_rejected(self):
        rsp = self.client.post("/api/ai-move")
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.get_json()["error"], "It is White's turn, not AI's turn.")
        self.oracle.request.assert_not_called()

    def test_ai_move_applied(self):
        self.client.post("/api/move", json=E2_E4)
        self.oracle.request.return_value = '{"from":"e7","to":"e5"}'
        rsp = self.client.post("/api/ai-move")
        self.assertEqual(rsp.status_code, 200)
        data = rsp.get_json()
        self.assertEqual(data["currentPlayer"], "white")
        self.assertEqual([m["san"] for m in data["history"]], ["e4", "e5"])

    def test_ai_move_exhausted(self):
        self.client.post("/api/move", json=E2_E4)
        self.oracle.request.return_value = '{"from":"e7","to":"e4"}'
        rsp = self.client.post("/api/ai-move")
        self.assertEqual(rsp.status_code, 400)
        self.assertEqual(rsp.get_json()["error"], "AI failed to provide a valid move after multiple attempts.")
        self.assertEqual(self.oracle.request.call_count, SETTINGS.ai_move_attempts)
        data = self.client.get("/api/board").get_json()
        self.assertEqual(data["currentPlayer"], "black")
        self.assertEqual(len(data["history"]), 1)

    def test_reset_is_idempotent(self):
        self.client.post("/api/move", json=E2_E4)
        first = self.client.post("/api/reset").get_json()
        second = self.client.post("/api/reset").get_json()
        self.assertEqual(first, second)
        self.assertEqual(first["currentPlayer"], "white")
        self.assertEqual(first["history"], [])

    def test_pgn_export(self):
        self.client.post("/api/move", json=E2_E4)
        pgn = self.client.get("/api/pgn").get_json()["pgn"]
        self.assertIn("1. e4", pgn)
        self.assertIn('[Black "test-model"]', pgn)

    def test_index_serves_board_page(self):
        rsp = self.client.get("/")
        self.assertEqual(rsp.status_code, 200)
        self.assertIn(b"chessboard", rsp.data)
        rsp.close()


if __name__ == "__main__":
    unittest.main()
