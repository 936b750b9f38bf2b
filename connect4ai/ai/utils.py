"""
utils.py - Tensor conversion helpers for the value network

The network sees boards as float tensors of shape (batch, ROWS, COLS, 1)
with the side to move as +1, the opponent as -1 and empty cells as 0.
"""

from typing import List, Tuple

import numpy as np
import torch

from connect4ai.debug import debug
from connect4ai.utils import ROWS, COLS


def states_to_tensor(states) -> torch.Tensor:
    """
    Stack one or many grids into a (batch, ROWS, COLS, 1) float tensor.

    Args:
        states: A single ROWS x COLS grid or a sequence of them
    """
    array = np.asarray(states, dtype=np.float32)
    if array.ndim == 2 or (array.ndim == 3 and array.shape == (ROWS, COLS, 1)):
        array = array[np.newaxis]
    return torch.from_numpy(array.reshape(-1, ROWS, COLS, 1).copy())


def preprocess_batch(batch: List[Tuple]) -> Tuple[torch.Tensor, ...]:
    """
    Convert a list of transitions into training tensors.

    Args:
        batch: List of (state, action, reward, next_state, done) tuples

    Returns:
        states (B, ROWS, COLS, 1), actions (B,), rewards (B,),
        next_states (B, ROWS, COLS, 1), dones (B,)
    """
    debug.trace(f"Preprocessing batch of size {len(batch)}", "ai")
    states, actions, rewards, next_states, dones = zip(*batch)

    return (
        states_to_tensor(np.stack(states)),
        torch.tensor(actions, dtype=torch.long),
        torch.tensor(rewards, dtype=torch.float32),
        states_to_tensor(np.stack(next_states)),
        torch.tensor(dones, dtype=torch.float32),
    )
