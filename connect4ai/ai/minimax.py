"""
minimax.py - Depth-limited minimax with alpha-beta pruning for Connect Four

Search nodes are plain arguments: every child is a fresh copy of its parent
board with one more disc, so sibling branches never share state. Moves are
tried in ascending column order and leaves are scored by the window-counting
heuristic from the point of view of the player the search is run for.
"""

import math
import random
from typing import List, Optional, Tuple

from connect4ai.ai.heuristic import evaluate, is_game_over
from connect4ai.debug import debug
from connect4ai.errors import NoValidAction
from connect4ai.game.board import Board
from connect4ai.utils import Player


class SearchStats:
    """Counts the nodes visited by one search."""

    def __init__(self):
        self.nodes = 0


def minimax(board: Board, depth: int, alpha: float, beta: float,
            maximizing: bool, player: Player,
            stats: Optional[SearchStats] = None) -> float:
    """
    Minimax algorithm with alpha-beta pruning.

    Args:
        board: Position to evaluate (not modified)
        depth: Remaining search depth
        alpha: Best value the maximizer can already guarantee
        beta: Best value the minimizer can already guarantee
        maximizing: True if ``player`` moves at this node
        player: The player the search maximizes for

    Returns:
        The minimax value of the position for ``player``
    """
    if stats is not None:
        stats.nodes += 1

    if depth == 0 or is_game_over(board):
        return evaluate(board, player)

    if maximizing:
        max_value = -math.inf
        for column in board.get_valid_actions():
            value = minimax(board.next_board(column, player), depth - 1,
                            alpha, beta, False, player, stats)
            max_value = max(max_value, value)
            alpha = max(alpha, value)
            if alpha >= beta:
                break
        return max_value

    opponent = player.other()
    min_value = math.inf
    for column in board.get_valid_actions():
        value = minimax(board.next_board(column, opponent), depth - 1,
                        alpha, beta, True, player, stats)
        min_value = min(min_value, value)
        beta = min(beta, value)
        if beta <= alpha:
            break
    return min_value


def score_actions(board: Board, depth: int, player: Player,
                  stats: Optional[SearchStats] = None) -> List[Tuple[int, float]]:
    """
    Value every legal root move for ``player``.

    Each move is searched once with a full (-inf, +inf) window as a
    minimizing node at ``depth - 1``.

    Returns:
        (column, value) pairs in ascending column order
    """
    if depth < 1:
        raise ValueError(f"Search depth must be at least 1, got {depth}")

    return [
        (column, minimax(board.next_board(column, player), depth - 1,
                         -math.inf, math.inf, False, player, stats))
        for column in board.get_valid_actions()
    ]


def choose_minimax_action(board: Board, depth: int, player: Player,
                          rng: Optional[random.Random] = None,
                          stats: Optional[SearchStats] = None) -> int:
    """
    Pick the best move for ``player``, breaking exact ties uniformly at random.

    Raises:
        NoValidAction: If the board has no legal moves
    """
    scored = score_actions(board, depth, player, stats)
    if not scored:
        raise NoValidAction("Minimax called on a board with no valid actions")

    best_value = max(value for _, value in scored)
    best_columns = [column for column, value in scored if value == best_value]
    rng = rng if rng is not None else random
    action = rng.choice(best_columns)

    debug.trace(f"Minimax depth {depth} for {player.name}: scores={scored}, "
                f"ties={best_columns}, chose {action}", "search")
    return action


class MinimaxPlayer:
    """
    A Connect Four player that uses minimax with alpha-beta pruning.

    Ties between equally valued moves are broken at random so that the
    player cannot be beaten by replaying the same line.
    """

    def __init__(self, depth: int = 4, seed: Optional[int] = None):
        """
        Initialize the minimax player.

        Args:
            depth: Search depth in plies (higher = stronger but slower)
            seed: Seed for the tie-breaking random source
        """
        if depth < 1:
            raise ValueError(f"Search depth must be at least 1, got {depth}")
        self.depth = depth
        self.rng = random.Random(seed)
        self.nodes_evaluated = 0

    def get_move(self, board: Board, player: Player) -> int:
        """
        Get the best move for ``player`` on ``board``.

        Args:
            board: Current position (not modified)
            player: Side to move

        Returns:
            The chosen column index
        """
        stats = SearchStats()
        debug.start_timer("minimax")
        action = choose_minimax_action(board, self.depth, player, self.rng, stats)
        debug.end_timer("minimax", "search")
        self.nodes_evaluated = stats.nodes
        debug.debug(f"Minimax depth {self.depth} chose column {action} "
                    f"after {stats.nodes} nodes", "search")
        return action
