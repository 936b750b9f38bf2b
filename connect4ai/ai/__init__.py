"""
connect4ai.ai - Computer opponents for Connect Four

This package provides the minimax search, the DQN agent with its replay
memory and trainer, and the strategy classes the interfaces select from.
"""

from connect4ai.ai.agent import DQNAgent
from connect4ai.ai.config import TrainingConfig
from connect4ai.ai.dqn import DQNModel
from connect4ai.ai.minimax import MinimaxPlayer, minimax
from connect4ai.ai.replay_buffer import ReplayMemory, Transition
from connect4ai.ai.trainer import Trainer

__all__ = ['DQNAgent', 'DQNModel', 'MinimaxPlayer', 'ReplayMemory', 'Trainer',
           'TrainingConfig', 'Transition', 'minimax']
