"""
connect4ai - Connect Four engine with minimax and deep Q-learning opponents

This package provides the game state machine, a depth-limited alpha-beta
minimax player, a DQN agent trained through self-play, and a terminal
interface for playing against any of them.
"""

__version__ = '0.1.0'
