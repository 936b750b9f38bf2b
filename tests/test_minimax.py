"""
Tests for alpha-beta minimax and the minimax player.
"""

import math
import random

import pytest

from connect4ai.ai.heuristic import WIN_SCORE, evaluate, has_connect, is_game_over
from connect4ai.ai.minimax import (MinimaxPlayer, SearchStats, choose_minimax_action,
                                   minimax, score_actions)
from connect4ai.errors import NoValidAction
from connect4ai.game.board import Board
from connect4ai.utils import Player


def plain_minimax(board, depth, maximizing, player):
    """Minimax without pruning."""
    if depth == 0 or is_game_over(board):
        return evaluate(board, player)
    mover = player if maximizing else player.other()
    values = [plain_minimax(board.next_board(c, mover), depth - 1, not maximizing, player)
              for c in board.get_valid_actions()]
    return max(values) if maximizing else min(values)


def hands_opponent_a_win(board, column, player):
    """True if playing ``column`` does not win and lets the opponent win next move."""
    child = board.next_board(column, player)
    if has_connect(child, player):
        return False
    opponent = player.other()
    return any(has_connect(child.next_board(reply, opponent), opponent)
               for reply in child.get_valid_actions())


class TestMinimax:

    @pytest.mark.parametrize("depth", [1, 2, 3])
    def test_pruning_preserves_value(self, random_boards, depth):
        for position in random_boards:
            for player in (Player.ONE, Player.TWO):
                for maximizing in (True, False):
                    expected = plain_minimax(position, depth, maximizing, player)
                    actual = minimax(position, depth, -math.inf, math.inf, maximizing, player)
                    assert actual == expected

    def test_pruning_visits_fewer_nodes(self):
        stats = SearchStats()
        minimax(Board(), 4, -math.inf, math.inf, True, Player.ONE, stats)
        # An unpruned 4-ply search from the empty board visits 1 + 7 + 49 + 343 + 2401 nodes
        assert 0 < stats.nodes < 2801

    def test_search_does_not_modify_board(self, random_boards):
        position = random_boards[5]
        before = position.get_state()
        choose_minimax_action(position, 3, Player.ONE, random.Random(0))
        assert (position.grid == before).all()

    @pytest.mark.parametrize("depth", [1, 2, 3])
    def test_takes_immediate_win(self, depth):
        position = Board.from_rows([".......", ".......", ".......",
                                    ".......", "OOO....", "XXX...."])
        assert choose_minimax_action(position, depth, Player.ONE, random.Random(0)) == 3
        assert dict(score_actions(position, depth, Player.ONE))[3] == WIN_SCORE

    @pytest.mark.parametrize("depth", [1, 2])
    def test_blocks_open_three(self, depth):
        position = Board.from_rows([".......", ".......", ".......",
                                    ".......", "X......", "OOO...X"])
        assert choose_minimax_action(position, depth, Player.ONE, random.Random(0)) == 3

    def test_plays_for_player_two(self):
        position = Board.from_rows([".......", ".......", ".......",
                                    "......X", "XXX...X", "OOO...X"])
        assert choose_minimax_action(position, 2, Player.TWO, random.Random(0)) == 3

    def test_never_hands_opponent_a_win_when_avoidable(self, random_boards):
        # Depth 2 sees the reply; at depth 1 an own open three (+100000) can
        # outscore blocking the opponent's (+10000)
        for position in random_boards:
            for player in (Player.ONE, Player.TWO):
                columns = position.get_valid_actions()
                safe = [c for c in columns if not hands_opponent_a_win(position, c, player)]
                if not safe or len(safe) == len(columns):
                    continue
                action = choose_minimax_action(position, 2, player, random.Random(0))
                assert action in safe

    def test_ties_broken_at_random(self):
        # Every first move scores 0 at depth 1
        choices = {choose_minimax_action(Board(), 1, Player.ONE, random.Random(seed))
                   for seed in range(50)}
        assert len(choices) > 1

    def test_full_board_has_no_action(self, draw_board):
        with pytest.raises(NoValidAction):
            choose_minimax_action(draw_board, 2, Player.ONE)

    def test_depth_must_be_positive(self):
        with pytest.raises(ValueError):
            score_actions(Board(), 0, Player.ONE)
        with pytest.raises(ValueError):
            MinimaxPlayer(depth=0)


class TestMinimaxPlayer:

    def test_get_move_counts_nodes(self):
        player = MinimaxPlayer(depth=2, seed=3)
        move = player.get_move(Board(), Player.ONE)
        assert move in range(7)
        assert player.nodes_evaluated > 7

    def test_same_seed_same_move(self, random_boards):
        position = random_boards[3]
        first = MinimaxPlayer(depth=2, seed=11).get_move(position, Player.ONE)
        second = MinimaxPlayer(depth=2, seed=11).get_move(position, Player.ONE)
        assert first == second
