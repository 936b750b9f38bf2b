"""
strategies.py - Opponent strategies selectable by the interfaces

Every strategy answers the same question: given a board, its legal columns
and the side to move, which column to play. The game engine and the search
know nothing about strategies; the CLI picks one per player and asks it for
a move each turn.
"""

import random
from enum import Enum
from typing import Dict, List, Optional

from connect4ai.ai.dqn import DQNModel
from connect4ai.ai.minimax import MinimaxPlayer
from connect4ai.debug import debug
from connect4ai.errors import NoValidAction
from connect4ai.game.board import Board
from connect4ai.utils import Player


class Strategy:
    """Base class for move-choosing strategies."""

    name = "strategy"

    def choose_action(self, board: Board, valid_actions: List[int], player: Player) -> int:
        raise NotImplementedError

    def __call__(self, board: Board, valid_actions: List[int], player: Player) -> int:
        return self.choose_action(board, valid_actions, player)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RandomStrategy(Strategy):
    """Uniformly random legal move."""

    name = "random"

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def choose_action(self, board: Board, valid_actions: List[int], player: Player) -> int:
        if not valid_actions:
            raise NoValidAction("Random strategy has no valid action to choose")
        return self.rng.choice(valid_actions)


class MinimaxStrategy(Strategy):
    """Alpha-beta minimax at a fixed depth with random tie-breaking."""

    name = "minimax"

    def __init__(self, depth: int, seed: Optional[int] = None):
        self.player = MinimaxPlayer(depth=depth, seed=seed)

    @property
    def depth(self) -> int:
        return self.player.depth

    def choose_action(self, board: Board, valid_actions: List[int], player: Player) -> int:
        return self.player.get_move(board, player)

    def __repr__(self) -> str:
        return f"MinimaxStrategy(depth={self.depth})"


class LearnedPolicyStrategy(Strategy):
    """Greedy move of a trained DQN, always queried as if it were Player.ONE."""

    name = "dqn"

    def __init__(self, model: DQNModel):
        self.model = model

    @classmethod
    def from_file(cls, path: str) -> 'LearnedPolicyStrategy':
        return cls(DQNModel.load(path))

    def choose_action(self, board: Board, valid_actions: List[int], player: Player) -> int:
        if not valid_actions:
            raise NoValidAction("Learned policy has no valid action to choose")

        grid = board.grid if player == Player.ONE else board.inverted().grid
        q_values = self.model.predict(grid)[0]
        action = max(valid_actions, key=lambda a: q_values[a])
        debug.debug(f"DQN chose column {action} for {player.name}", "ai")
        return action


class Difficulty(Enum):
    """Named opponents offered to players, weakest first."""
    PLAYER = "player"
    ROOKIE = "rookie"      # random
    EASY = "easy"          # 1-ply minimax
    NORMAL = "normal"      # deep Q-learning
    HARD = "hard"          # 2-ply minimax
    EXPERT = "expert"      # 4-ply minimax
    EXTREME = "extreme"    # 6-ply minimax


MINIMAX_DEPTHS: Dict[Difficulty, int] = {
    Difficulty.EASY: 1,
    Difficulty.HARD: 2,
    Difficulty.EXPERT: 4,
    Difficulty.EXTREME: 6,
}


def create_strategy(difficulty: Difficulty, model: Optional[DQNModel] = None,
                    seed: Optional[int] = None) -> Optional[Strategy]:
    """
    Build the strategy behind a difficulty name.

    Args:
        difficulty: Selected difficulty
        model: Trained network, required for Difficulty.NORMAL
        seed: Seed for the strategy's random source

    Returns:
        A Strategy, or None for a human player
    """
    if difficulty == Difficulty.PLAYER:
        return None
    if difficulty == Difficulty.ROOKIE:
        return RandomStrategy(seed)
    if difficulty == Difficulty.NORMAL:
        if model is None:
            raise ValueError("The 'normal' opponent needs a trained model (--model)")
        return LearnedPolicyStrategy(model)
    return MinimaxStrategy(MINIMAX_DEPTHS[difficulty], seed)
