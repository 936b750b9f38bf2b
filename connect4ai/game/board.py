"""
board.py - Board representation and column-drop mechanics for Connect Four

The Board owns a ROWS x COLS numpy grid. Row 0 is the top of the board and
discs fall toward row ROWS - 1, so within every column the occupied cells are
always a contiguous run ending at the bottom row.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from connect4ai.debug import debug
from connect4ai.errors import InvalidAction
from connect4ai.utils import ROWS, COLS, Player, invert_grid, render_board_ascii


class Board:
    """
    A Connect Four grid plus the position of the most recent drop.

    Boards are cheap to copy; search code works on copies so that sibling
    branches never observe each other's moves.
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Create a board.

        Args:
            grid: Optional ROWS x COLS array to start from (copied)
        """
        if grid is None:
            self.grid = np.zeros((ROWS, COLS), dtype=np.int8)
        else:
            grid = np.asarray(grid)
            if grid.shape != (ROWS, COLS):
                raise ValueError(f"Expected grid of shape {(ROWS, COLS)}, got {grid.shape}")
            self.grid = grid.astype(np.int8, copy=True)
        self.last_move: Optional[Tuple[int, int]] = None

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> 'Board':
        """
        Build a board from a picture, top row first. 'X' is player one,
        'O' is player two, anything else is empty.

        Example:
            Board.from_rows([".......",
                             ".......",
                             ".......",
                             ".......",
                             "...O...",
                             "..XXX.."])
        """
        if len(rows) != ROWS:
            raise ValueError(f"Expected {ROWS} rows, got {len(rows)}")

        values = {"X": Player.ONE.value, "O": Player.TWO.value}
        grid = np.zeros((ROWS, COLS), dtype=np.int8)
        for r, line in enumerate(rows):
            if len(line) != COLS:
                raise ValueError(f"Row {r} should have {COLS} cells: {line!r}")
            for c, char in enumerate(line):
                grid[r, c] = values.get(char.upper(), Player.EMPTY.value)
        return cls(grid)

    def reset(self) -> None:
        """Clear every cell."""
        self.grid.fill(Player.EMPTY.value)
        self.last_move = None

    def copy(self) -> 'Board':
        """Return an independent copy of this board."""
        new_board = Board.__new__(Board)
        new_board.grid = self.grid.copy()
        new_board.last_move = self.last_move
        return new_board

    def inverted(self) -> 'Board':
        """Return a copy with player one and player two swapped."""
        new_board = Board.__new__(Board)
        new_board.grid = invert_grid(self.grid)
        new_board.last_move = self.last_move
        return new_board

    def cell(self, row: int, col: int) -> Player:
        return Player(int(self.grid[row, col]))

    def get_drop_row(self, column: int) -> int:
        """
        Get the row a disc dropped into ``column`` would land on.

        Returns:
            Lowest empty row index, or -1 if the column is full
        """
        for row in range(ROWS - 1, -1, -1):
            if self.grid[row, column] == Player.EMPTY.value:
                return row
        return -1

    def is_valid_action(self, column) -> bool:
        """Check that ``column`` is an in-range integer whose top cell is empty."""
        if isinstance(column, (bool, np.bool_)) or not isinstance(column, (int, np.integer)):
            return False
        if not (0 <= column < COLS):
            return False
        return self.grid[0, column] == Player.EMPTY.value

    def get_valid_actions(self) -> List[int]:
        """Columns whose top cell is empty, in ascending order."""
        return [col for col in range(COLS) if self.grid[0, col] == Player.EMPTY.value]

    def is_full(self) -> bool:
        """True when the top row has no empty cell."""
        return bool(np.all(self.grid[0] != Player.EMPTY.value))

    def count_discs(self) -> int:
        return int(np.count_nonzero(self.grid))

    def drop(self, column: int, player: Player) -> int:
        """
        Drop a disc for ``player`` into ``column``.

        Args:
            column: Column index (0-indexed)
            player: Player.ONE or Player.TWO

        Returns:
            The row the disc landed on

        Raises:
            InvalidAction: If the column is out of range or full
        """
        if player == Player.EMPTY:
            raise ValueError("Cannot drop an EMPTY disc")
        if isinstance(column, (bool, np.bool_)) or not isinstance(column, (int, np.integer)):
            raise InvalidAction(column, "column must be an integer")
        if not (0 <= column < COLS):
            raise InvalidAction(column, f"column out of range [0, {COLS})")

        row = self.get_drop_row(column)
        if row < 0:
            raise InvalidAction(column, "column is full")

        self.grid[row, column] = player.value
        self.last_move = (row, int(column))
        debug.trace(f"Placed {player.name} at ({row}, {column})", "board")
        return row

    def next_board(self, column: int, player: Player) -> 'Board':
        """Return a copy of this board with one more disc dropped."""
        child = self.copy()
        child.drop(column, player)
        return child

    def get_state(self) -> np.ndarray:
        """Value copy of the grid."""
        return self.grid.copy()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Board(discs={self.count_discs()}, last_move={self.last_move})"
