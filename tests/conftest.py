"""
Shared fixtures for the Connect Four test suite.
"""

import random
import sys
from pathlib import Path

import pytest

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from connect4ai.ai.heuristic import is_game_over
from connect4ai.debug import debug, DebugLevel
from connect4ai.game.board import Board
from connect4ai.utils import Player

# Full board with no four in a row anywhere: X where (col // 2 + row) is even
DRAW_ROWS = [
    "XXOOXXO",
    "OOXXOOX",
    "XXOOXXO",
    "OOXXOOX",
    "XXOOXXO",
    "OOXXOOX",
]


@pytest.fixture(autouse=True)
def quiet_logging():
    debug.configure(level=DebugLevel.ERROR)
    yield
    debug.configure(level=DebugLevel.ERROR)


def random_board(rng: random.Random, max_moves: int = 20) -> Board:
    """Play random legal moves from an empty board, stopping before a finished game."""
    board = Board()
    player = Player.ONE
    for _ in range(rng.randint(0, max_moves)):
        column = rng.choice(board.get_valid_actions())
        child = board.next_board(column, player)
        if is_game_over(child):
            break
        board = child
        player = player.other()
    return board


@pytest.fixture
def draw_board():
    return Board.from_rows(DRAW_ROWS)


@pytest.fixture
def random_boards():
    """Twenty reproducible mid-game positions."""
    rng = random.Random(1234)
    return [random_board(rng) for _ in range(20)]
