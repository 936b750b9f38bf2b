"""
config.py - Hyperparameters for DQN self-play training

TrainingConfig gathers every tunable constant of the agent and the trainer
in one object that is passed in at construction, so runs can be reproduced
from the parameters recorded with each training job.
"""

from typing import Any, Dict, Optional


class TrainingConfig:
    """
    Configuration for the DQN agent and trainer.

    Attributes:
        num_episodes: Episodes in the main training loop
        replay_buffer_size: Replay memory capacity (also the warm-up length)
        batch_size: Transitions per gradient step
        gamma: Discount factor for future rewards
        learning_rate: Adam learning rate for the online network
        sync_every_frames: Frames between target-network syncs
        epsilon_init: Exploration rate at frame 0
        epsilon_final: Exploration rate after decay
        epsilon_decay_frames: Frames over which epsilon decays linearly
        average_window: Episodes in the running reward average
        model_dir: Directory for checkpoints and the final model
        save_interval: Episodes between checkpoints (0 disables them)
        seed: Seed for every random source (None for nondeterministic runs)
    """

    def __init__(self,
                 num_episodes: int = 1000,
                 replay_buffer_size: int = 10000,
                 batch_size: int = 16,
                 gamma: float = 0.99,
                 learning_rate: float = 1e-3,
                 sync_every_frames: int = 1000,
                 epsilon_init: float = 0.7,
                 epsilon_final: float = 0.01,
                 epsilon_decay_frames: int = 100000,
                 average_window: int = 100,
                 model_dir: str = 'models',
                 save_interval: int = 0,
                 seed: Optional[int] = None):
        self.num_episodes = num_episodes
        self.replay_buffer_size = replay_buffer_size
        self.batch_size = batch_size
        self.gamma = gamma
        self.learning_rate = learning_rate
        self.sync_every_frames = sync_every_frames
        self.epsilon_init = epsilon_init
        self.epsilon_final = epsilon_final
        self.epsilon_decay_frames = epsilon_decay_frames
        self.average_window = average_window
        self.model_dir = model_dir
        self.save_interval = save_interval
        self.seed = seed
        self.validate()

    @property
    def epsilon_increment(self) -> float:
        """Per-frame change of epsilon during the decay phase (negative)."""
        return (self.epsilon_final - self.epsilon_init) / self.epsilon_decay_frames

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.num_episodes < 0:
            raise ValueError("num_episodes must be non-negative")
        if self.replay_buffer_size < 1:
            raise ValueError("replay_buffer_size must be positive")
        if not (1 <= self.batch_size <= self.replay_buffer_size):
            raise ValueError("batch_size must be between 1 and replay_buffer_size")
        if not (0.0 <= self.gamma <= 1.0):
            raise ValueError("gamma must be in [0, 1]")
        if self.learning_rate <= 0:
            raise ValueError("learning_rate must be positive")
        if self.sync_every_frames < 1:
            raise ValueError("sync_every_frames must be positive")
        if not (0.0 <= self.epsilon_final <= 1.0 and 0.0 <= self.epsilon_init <= 1.0):
            raise ValueError("epsilon values must be in [0, 1]")
        if self.epsilon_decay_frames < 1:
            raise ValueError("epsilon_decay_frames must be positive")
        if self.average_window < 1:
            raise ValueError("average_window must be positive")
        if self.save_interval < 0:
            raise ValueError("save_interval must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'num_episodes': self.num_episodes,
            'replay_buffer_size': self.replay_buffer_size,
            'batch_size': self.batch_size,
            'gamma': self.gamma,
            'learning_rate': self.learning_rate,
            'sync_every_frames': self.sync_every_frames,
            'epsilon_init': self.epsilon_init,
            'epsilon_final': self.epsilon_final,
            'epsilon_decay_frames': self.epsilon_decay_frames,
            'average_window': self.average_window,
            'model_dir': self.model_dir,
            'save_interval': self.save_interval,
            'seed': self.seed,
        }

    def __repr__(self) -> str:
        settings = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"TrainingConfig({settings})"
