"""
Tests for the window-counting evaluation.
"""

from connect4ai.ai.heuristic import (NUM_WINDOWS, WIN_SCORE, count_windows, evaluate,
                                     has_connect, is_game_over)
from connect4ai.game.board import Board
from connect4ai.utils import Player


def board(*bottom_rows):
    """Board whose lowest rows are given, top first; the rest is empty."""
    rows = ["......."] * (6 - len(bottom_rows)) + list(bottom_rows)
    return Board.from_rows(rows)


class TestHeuristic:

    def test_window_count(self):
        # 24 horizontal, 21 vertical, 12 + 12 diagonal
        assert NUM_WINDOWS == 69

    def test_empty_board_scores_zero(self):
        assert evaluate(Board(), Player.ONE) == 0
        assert evaluate(Board(), Player.TWO) == 0

    def test_single_disc_scores_zero(self):
        assert evaluate(board("...X..."), Player.ONE) == 0

    def test_two_in_a_window(self):
        position = board("XX.....")
        assert count_windows(position, Player.ONE, 2) == 1
        assert evaluate(position, Player.ONE) == 1000
        assert evaluate(position, Player.TWO) == -100

    def test_three_in_a_window(self):
        position = board(".OOO...")
        # ".OOO" and "OOO." are open threes, "OO.." is an open two
        assert count_windows(position, Player.TWO, 3) == 2
        assert count_windows(position, Player.TWO, 2) == 1
        assert evaluate(position, Player.TWO) == 2 * 100000 + 1000
        assert evaluate(position, Player.ONE) == -2 * 10000 - 100

    def test_blocked_window_does_not_count(self):
        assert count_windows(board("XXO...."), Player.ONE, 2) == 0

    def test_accepts_raw_grid(self):
        position = board("XX.....")
        assert evaluate(position.grid, Player.ONE) == evaluate(position, Player.ONE)

    def test_connect_scores_win(self):
        position = board("OOO....", "XXXX...")
        assert has_connect(position, Player.ONE)
        assert not has_connect(position, Player.TWO)
        assert evaluate(position, Player.ONE) == WIN_SCORE
        assert evaluate(position, Player.TWO) == -WIN_SCORE

    def test_game_over(self, draw_board):
        assert not is_game_over(Board())
        assert is_game_over(board("XXXX..."))
        assert is_game_over(draw_board)
