import unittest

from src.llmchess_duel.board_view import EMPTY, render_grid, text_grid
from src.llmchess_duel.referee import Referee


class BoardViewTests(unittest.TestCase):
    def test_starting_grid(self):
        grid = render_grid(Referee())
        self.assertEqual(len(grid), 8)
        self.assertTrue(all(len(row) == 8 for row in grid))
        self.assertEqual(grid[0], ["♜", "♞", "♝", "♛", "♚", "♝", "♞", "♜"])
        self.assertEqual(grid[1], ["♟"] * 8)
        for row in grid[2:6]:
            self.assertEqual(row, [EMPTY] * 8)
        self.assertEqual(grid[6], ["♙"] * 8)
        self.assertEqual(grid[7], ["♖", "♘", "♗", "♕", "♔", "♗", "♘", "♖"])
        self.assertEqual(sum(cell != EMPTY for row in grid for cell in row), 32)

    def test_grid_follows_moves(self):
        ref = Referee()
        ref.apply_move("e2", "e4")
        grid = render_grid(ref)
        self.assertEqual(grid[6][4], EMPTY)
        self.assertEqual(grid[4][4], "♙")

    def test_text_grid_labels(self):
        lines = text_grid(render_grid(Referee())).splitlines()
        self.assertEqual(len(lines), 9)
        self.assertEqual(lines[0], "8 | ♜  ♞  ♝  ♛  ♚  ♝  ♞  ♜")
        self.assertEqual(lines[3], "5 | .  .  .  .  .  .  .  .")
        self.assertEqual(lines[7], "1 | ♖  ♘  ♗  ♕  ♔  ♗  ♘  ♖")
        self.assertEqual(lines[8], "    a  b  c  d  e  f  g  h")


if __name__ == "__main__":
    unittest.main()
