"""
rules.py - Game state machine and Gymnasium environment for Connect Four

This module provides:
1. ConnectFourGame, the turn-taking engine used by the CLI, the minimax
   strategies and the DQN agent
2. ConnectFourEnv, a gymnasium-compatible single-agent wrapper around it
"""

import random
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from connect4ai.debug import debug
from connect4ai.errors import InvalidAction
from connect4ai.game.board import Board
from connect4ai.game.win_detector import check_win, winning_cells
from connect4ai.utils import (ROWS, COLS, Player, GameResult, WIN_REWARD, LOSS_REWARD,
                              DRAW_REWARD, STEP_REWARD)


class TrainingStep(NamedTuple):
    """Outcome of a move in training mode. Reward is relative to Player.ONE."""
    reward: float
    next_state: np.ndarray
    done: bool


class MoveResult(NamedTuple):
    """Outcome of a move in interactive mode."""
    board: np.ndarray
    turn: Player
    winner: GameResult
    drop_row: int
    winning_cells: List[Tuple[int, int]]

    @property
    def done(self) -> bool:
        return self.winner.is_game_over()


class ConnectFourGame:
    """
    Connect Four engine: a board, whose turn it is, and the result so far.

    In interactive mode Player.ONE always starts and ``step`` returns a
    MoveResult for presentation. In training mode the first mover is a coin
    flip and ``step`` returns a TrainingStep with a reward for Player.ONE.
    """

    def __init__(self, training: bool = False, rng: Optional[random.Random] = None):
        """
        Initialize a new game.

        Args:
            training: Select training-mode first mover and return values
            rng: Random source for the first-mover coin flip
        """
        debug.debug(f"Initializing ConnectFourGame (training={training})", "game")
        self.training = training
        self.rng = rng if rng is not None else random.Random()
        self.board = Board()
        self.turn = Player.ONE
        self.result = GameResult.IN_PROGRESS
        self.history: List[int] = []
        self.reset()

    def reset(self, first_player: Optional[Player] = None) -> Player:
        """
        Clear the board and choose who moves first.

        Args:
            first_player: Force the first mover (overrides the mode default)

        Returns:
            The player that moves first
        """
        self.board.reset()
        self.result = GameResult.IN_PROGRESS
        self.history = []

        if first_player is not None:
            if first_player == Player.EMPTY:
                raise ValueError("first_player must be Player.ONE or Player.TWO")
            self.turn = first_player
        elif self.training:
            self.turn = Player.ONE if self.rng.random() < 0.5 else Player.TWO
        else:
            self.turn = Player.ONE

        debug.debug(f"Game reset, {self.turn.name} moves first", "game")
        return self.turn

    @property
    def current_player(self) -> Player:
        return self.turn

    def step(self, action: int) -> Union[TrainingStep, MoveResult]:
        """
        Drop a disc for the current player and classify the new position.

        A win by the disc just placed takes priority over a full board.

        Args:
            action: Column to drop into (0-indexed)

        Returns:
            TrainingStep in training mode, MoveResult otherwise

        Raises:
            InvalidAction: If the game is over or the column is illegal
        """
        if self.result.is_game_over():
            raise InvalidAction(action, f"game is over ({self.result.name})")

        mover = self.turn
        drop_row = self.board.drop(action, mover)
        column = int(action)
        self.history.append(column)
        self.turn = mover.other()

        cells: List[Tuple[int, int]] = []
        if self.training:
            won = check_win(self.board.grid, drop_row, column)
        else:
            cells = winning_cells(self.board.grid, drop_row, column)
            won = bool(cells)

        if won:
            self.result = GameResult.win_for(mover)
            debug.info(f"{mover.name} wins with a disc at ({drop_row}, {column})", "game")
        elif self.board.is_full():
            self.result = GameResult.DRAW
            debug.info("Game ends in a draw", "game")

        if self.training:
            return TrainingStep(self._reward(), self.get_state(), self.result.is_game_over())

        return MoveResult(self.get_state(), self.turn, self.result, drop_row, cells)

    def _reward(self) -> float:
        if self.result == GameResult.PLAYER_ONE_WIN:
            return WIN_REWARD
        if self.result == GameResult.PLAYER_TWO_WIN:
            return LOSS_REWARD
        if self.result == GameResult.DRAW:
            return DRAW_REWARD
        return STEP_REWARD

    def get_valid_actions(self) -> List[int]:
        if self.result.is_game_over():
            return []
        return self.board.get_valid_actions()

    def get_state(self) -> np.ndarray:
        """Value copy of the grid."""
        return self.board.get_state()

    def get_inverted_state(self) -> np.ndarray:
        """Value copy of the grid with the two players swapped."""
        return self.board.inverted().grid

    def get_state_for(self, player: Player) -> np.ndarray:
        """Grid as seen by ``player``: its own discs are +1."""
        return self.get_state() if player == Player.ONE else self.get_inverted_state()

    def is_game_over(self) -> bool:
        return self.result.is_game_over()

    def get_winner(self) -> Optional[Player]:
        return self.result.winner

    def render(self) -> str:
        return self.board.render()


Opponent = Callable[[Board, List[int], Player], int]


class ConnectFourEnv(gym.Env):
    """
    Single-agent Gymnasium environment: the agent plays Player.ONE and an
    opponent callable answers every move as Player.TWO.

    Observations are float32 arrays of shape (ROWS, COLS, 1) with the
    agent's discs as +1. Rewards follow the engine's training rewards.
    """

    metadata = {'render_modes': ['ansi', 'human'], 'render_fps': 4}

    def __init__(self, opponent: Optional[Opponent] = None,
                 render_mode: Optional[str] = None,
                 reward_invalid_move: float = -1.0):
        """
        Args:
            opponent: Callable (board, valid_actions, player) -> column; a
                uniformly random opponent when None
            render_mode: "ansi" or "human"
            reward_invalid_move: Reward returned when the agent picks an
                illegal column (the episode is truncated)
        """
        debug.debug("Initializing ConnectFourEnv", "env")
        self.action_space = spaces.Discrete(COLS)
        self.observation_space = spaces.Box(low=-1.0, high=1.0, shape=(ROWS, COLS, 1),
                                            dtype=np.float32)
        self.opponent = opponent
        self.render_mode = render_mode
        self.reward_invalid_move = reward_invalid_move
        self.game = ConnectFourGame(training=True)

    def reset(self, seed: Optional[int] = None,
              options: Optional[Dict[str, Any]] = None) -> Tuple[np.ndarray, Dict]:
        super().reset(seed=seed)

        first = Player.ONE if self.np_random.random() < 0.5 else Player.TWO
        if options and 'first_player' in options:
            first = options['first_player']
        self.game.reset(first_player=first)

        if first == Player.TWO:
            self._opponent_move()

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        if not self.game.board.is_valid_action(action) or self.game.is_game_over():
            debug.warning(f"Invalid action: {action}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, True, info

        reward, _, done = self.game.step(int(action))
        if not done:
            reward, _, done = self._opponent_move()

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), float(reward), done, False, self._get_info()

    def _opponent_move(self) -> TrainingStep:
        valid_actions = self.game.get_valid_actions()
        if self.opponent is None:
            action = int(self.np_random.choice(valid_actions))
        else:
            action = self.opponent(self.game.board.copy(), valid_actions, Player.TWO)
        return self.game.step(action)

    def render(self) -> Optional[str]:
        if self.render_mode == "ansi":
            return self.game.render()
        if self.render_mode == "human":
            print(self.game.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.game.get_state().astype(np.float32).reshape(ROWS, COLS, 1)

    def _get_info(self) -> Dict[str, Any]:
        return {
            'valid_actions': self.game.get_valid_actions(),
            'result': self.game.result.name,
            'moves_made': len(self.game.history),
            'last_move': self.game.board.last_move,
        }
