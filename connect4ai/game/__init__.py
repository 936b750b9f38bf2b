"""
connect4ai.game - Core game mechanics for Connect Four

This package contains the board representation, win detection and the
turn-taking game engine.
"""

from connect4ai.game.board import Board
from connect4ai.game.rules import ConnectFourGame, ConnectFourEnv, MoveResult, TrainingStep

__all__ = ['Board', 'ConnectFourGame', 'ConnectFourEnv', 'MoveResult', 'TrainingStep']
