"""
utils.py - Constants, enumerations and small helpers shared across the engine

Cells hold signed integers: EMPTY is 0, player one is +1 and player two is -1.
The signed layout lets a board be handed to the value network directly and
lets the "inverted" view be produced by negation.
"""

from enum import Enum, auto
from typing import Optional

import numpy as np

# Game constants
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of discs in a row to win

# Rewards, always relative to Player.ONE
WIN_REWARD = 1.0
LOSS_REWARD = -1.0
DRAW_REWARD = 0.0
STEP_REWARD = 0.0


class Player(Enum):
    """Enumeration representing players and cell states."""
    EMPTY = 0
    ONE = 1
    TWO = -1

    def other(self) -> 'Player':
        """Get the opposing player (EMPTY maps to itself)."""
        if self == Player.ONE:
            return Player.TWO
        elif self == Player.TWO:
            return Player.ONE
        return Player.EMPTY

    @property
    def label(self) -> str:
        return "1" if self == Player.ONE else "2" if self == Player.TWO else "-"

    def __str__(self):
        if self == Player.EMPTY:
            return "."
        elif self == Player.ONE:
            return "X"
        return "O"


class GameResult(Enum):
    """Enumeration representing the game outcome."""
    IN_PROGRESS = auto()
    PLAYER_ONE_WIN = auto()
    PLAYER_TWO_WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        return self != GameResult.IN_PROGRESS

    @classmethod
    def win_for(cls, player: Player) -> 'GameResult':
        if player == Player.ONE:
            return cls.PLAYER_ONE_WIN
        if player == Player.TWO:
            return cls.PLAYER_TWO_WIN
        raise ValueError(f"No win result for {player!r}")

    @property
    def winner(self) -> Optional[Player]:
        if self == GameResult.PLAYER_ONE_WIN:
            return Player.ONE
        if self == GameResult.PLAYER_TWO_WIN:
            return Player.TWO
        return None


class Direction(Enum):
    """Axes along which four discs can line up."""
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_DOWN = auto()  # Top-left to bottom-right
    DIAGONAL_UP = auto()    # Bottom-left to top-right


# (row step, col step) walking forward along each axis
DIRECTION_VECTORS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN: (1, 1),
    Direction.DIAGONAL_UP: (-1, 1),
}


def is_valid_position(row: int, col: int) -> bool:
    """Check if a position is within the board boundaries."""
    return 0 <= row < ROWS and 0 <= col < COLS


def invert_grid(grid: np.ndarray) -> np.ndarray:
    """Return a copy of the grid with the two players swapped."""
    return -grid


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render a grid as ASCII art with column numbers underneath.

    Args:
        grid: ROWS x COLS array of cell values

    Returns:
        Multi-line string representation of the board
    """
    border = "+" + "-" * (COLS * 2 + 1) + "+"
    lines = [border]
    for row in range(ROWS):
        cells = " ".join(str(Player(int(grid[row, col]))) for col in range(COLS))
        lines.append(f"| {cells} |")
    lines.append(border)
    lines.append("  " + " ".join(str(col) for col in range(COLS)))
    return "\n".join(lines)
