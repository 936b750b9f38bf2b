"""
replay_buffer.py - Circular experience replay memory for DQN training

Transitions are written into a fixed list of slots at a cursor that wraps
around, so the oldest experience is overwritten once the memory is full.
Batches are drawn uniformly without replacement from the slots written so
far.
"""

import random
from typing import Any, List, NamedTuple, Optional

import numpy as np

from connect4ai.debug import debug
from connect4ai.errors import SampleTooLarge


class Transition(NamedTuple):
    """One recorded experience. Player.ONE is to move in both states."""
    state: np.ndarray
    action: int
    reward: float
    next_state: np.ndarray
    done: bool


class ReplayMemory:
    """
    Fixed-capacity circular buffer of transitions.

    The logical length grows with each append until it reaches capacity and
    then stays there while the write cursor keeps overwriting the oldest slot.
    """

    def __init__(self, capacity: int = 10000, rng: Optional[random.Random] = None):
        """
        Initialize the replay memory.

        Args:
            capacity: Maximum number of transitions to keep
            rng: Random source used for sampling
        """
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")

        debug.debug(f"Initializing ReplayMemory with capacity {capacity}", "ai")
        self.capacity = capacity
        self.rng = rng if rng is not None else random.Random()
        self._slots: List[Optional[Any]] = [None] * capacity
        self._indices = list(range(capacity))
        self._cursor = 0
        self._length = 0

    def append(self, transition: Any) -> None:
        """Store a transition, replacing the oldest one when full."""
        self._slots[self._cursor] = transition
        self._cursor = (self._cursor + 1) % self.capacity
        self._length = min(self._length + 1, self.capacity)

    def sample(self, batch_size: int) -> List[Any]:
        """
        Draw a uniform random batch without replacement.

        Args:
            batch_size: Number of transitions to return

        Returns:
            List of stored transitions

        Raises:
            SampleTooLarge: If batch_size exceeds the capacity or the number
                of transitions written so far
        """
        if batch_size > self.capacity:
            raise SampleTooLarge(batch_size, self.capacity)
        if batch_size > self._length:
            raise SampleTooLarge(batch_size, self._length)

        # Only the first _length slots have ever been written
        indices = self._indices[:self._length]
        self.rng.shuffle(indices)
        debug.trace(f"Sampling {batch_size} of {self._length} transitions", "ai")
        return [self._slots[i] for i in indices[:batch_size]]

    def is_full(self) -> bool:
        return self._length == self.capacity

    def clear(self) -> None:
        debug.debug("Clearing replay memory", "ai")
        self._slots = [None] * self.capacity
        self._cursor = 0
        self._length = 0

    def __len__(self) -> int:
        return self._length
