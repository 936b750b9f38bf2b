"""
win_detector.py - Win detection pivoting on the most recent disc

Only windows that contain the disc just placed can have become a win, so
instead of rescanning the board we examine, on each of the four axes, the
four length-CONNECT_N windows in which that disc is the first, second, third
or fourth cell. That is at most 16 windows per move.
"""

from typing import List, Tuple

import numpy as np

from connect4ai.utils import CONNECT_N, DIRECTION_VECTORS, Player, is_valid_position

Window = Tuple[Tuple[int, int], ...]


def _pivot_windows(row: int, col: int):
    """Yield every in-bounds window of CONNECT_N cells that contains (row, col)."""
    for dr, dc in DIRECTION_VECTORS.values():
        for offset in range(CONNECT_N):
            start_r, start_c = row - offset * dr, col - offset * dc
            end_r = start_r + (CONNECT_N - 1) * dr
            end_c = start_c + (CONNECT_N - 1) * dc
            if not (is_valid_position(start_r, start_c) and is_valid_position(end_r, end_c)):
                continue
            yield tuple((start_r + k * dr, start_c + k * dc) for k in range(CONNECT_N))


def _window_owned_by(grid: np.ndarray, window: Window, value: int) -> bool:
    return all(grid[r, c] == value for r, c in window)


def find_winning_windows(grid: np.ndarray, row: int, col: int) -> List[Window]:
    """
    Evaluate every candidate window through (row, col).

    Args:
        grid: Board grid after the disc was placed
        row: Row of the disc just placed
        col: Column of the disc just placed

    Returns:
        All windows fully owned by the disc's player (empty if none)
    """
    value = int(grid[row, col])
    if value == Player.EMPTY.value:
        return []
    return [w for w in _pivot_windows(row, col) if _window_owned_by(grid, w, value)]


def check_win(grid: np.ndarray, row: int, col: int) -> bool:
    """Short-circuiting variant of find_winning_windows for search and training."""
    value = int(grid[row, col])
    if value == Player.EMPTY.value:
        return False
    return any(_window_owned_by(grid, w, value) for w in _pivot_windows(row, col))


def winning_cells(grid: np.ndarray, row: int, col: int) -> List[Tuple[int, int]]:
    """Distinct cells belonging to any winning window through (row, col), sorted."""
    cells = {cell for window in find_winning_windows(grid, row, col) for cell in window}
    return sorted(cells)
