"""
heuristic.py - Window-counting position evaluation for minimax leaves

A window is any run of CONNECT_N cells on one axis. A window is "open" for a
player when it holds only that player's discs and empty cells. Open windows
closer to completion are worth two orders of magnitude more per extra disc:

    ours:   k=2 -> +1000,  k=3 -> +100000
    theirs: k=2 -> -100,   k=3 -> -10000

A finished game is scored before any window counting: a complete window for
the evaluated player is worth WIN_SCORE, one for the opponent -WIN_SCORE,
so the search always prefers a real win over any open position.
"""

from typing import Union

import numpy as np

from connect4ai.game.board import Board
from connect4ai.utils import ROWS, COLS, CONNECT_N, DIRECTION_VECTORS, Player

WIN_SCORE = 10 ** 9


def _enumerate_windows():
    rows, cols = [], []
    for dr, dc in DIRECTION_VECTORS.values():
        for r in range(ROWS):
            for c in range(COLS):
                end_r = r + (CONNECT_N - 1) * dr
                end_c = c + (CONNECT_N - 1) * dc
                if not (0 <= end_r < ROWS and 0 <= end_c < COLS):
                    continue
                rows.append([r + i * dr for i in range(CONNECT_N)])
                cols.append([c + i * dc for i in range(CONNECT_N)])
    return np.array(rows), np.array(cols)


# Fancy-index arrays selecting all 69 windows of a 6x7 board at once
WINDOW_ROWS, WINDOW_COLS = _enumerate_windows()
NUM_WINDOWS = len(WINDOW_ROWS)


def _as_grid(board: Union[Board, np.ndarray]) -> np.ndarray:
    return board.grid if isinstance(board, Board) else np.asarray(board)


def count_windows(board: Union[Board, np.ndarray], player: Player, target_count: int) -> int:
    """
    Count windows holding exactly ``target_count`` of ``player``'s discs with
    every remaining cell empty.

    Args:
        board: Board or raw grid
        player: Player whose discs are counted
        target_count: Number of discs required (1..CONNECT_N)

    Returns:
        Number of qualifying windows
    """
    windows = _as_grid(board)[WINDOW_ROWS, WINDOW_COLS]
    player_counts = np.count_nonzero(windows == player.value, axis=1)
    empty_counts = np.count_nonzero(windows == Player.EMPTY.value, axis=1)
    matches = (player_counts == target_count) & (empty_counts == CONNECT_N - target_count)
    return int(np.count_nonzero(matches))


def has_connect(board: Union[Board, np.ndarray], player: Player) -> bool:
    """True if ``player`` owns a complete window anywhere on the board."""
    return count_windows(board, player, CONNECT_N) > 0


def is_game_over(board: Union[Board, np.ndarray]) -> bool:
    """True if either player owns a complete window or the board is full."""
    grid = _as_grid(board)
    return (has_connect(grid, Player.ONE)
            or has_connect(grid, Player.TWO)
            or bool(np.all(grid[0] != Player.EMPTY.value)))


def evaluate(board: Union[Board, np.ndarray], player: Player) -> int:
    """
    Score a position for ``player``.

    For each window size k from 2 to CONNECT_N - 1 our open windows add
    10^(2k-1) and the opponent's subtract 10^(2k-2).

    Returns:
        Integer score, higher is better for ``player``
    """
    grid = _as_grid(board)
    opponent = player.other()

    if has_connect(grid, player):
        return WIN_SCORE
    if has_connect(grid, opponent):
        return -WIN_SCORE

    score = 0
    for k in range(2, CONNECT_N):
        score += 10 ** (2 * k - 1) * count_windows(grid, player, k)
        score -= 10 ** (2 * k - 2) * count_windows(grid, opponent, k)
    return score
