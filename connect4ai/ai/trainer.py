"""
trainer.py - DQN self-play training loop for Connect Four

Training runs in three phases:
1. Warm-up: the agent plays until the replay memory is full, without any
   gradient updates
2. Main loop: for each episode, alternate one gradient step on a sampled
   batch with one agent step until the episode ends, copying the online
   network into the target network every ``sync_every_frames`` frames
3. The online network is saved to ``model_dir``
"""

import os
import random
import time
from collections import deque
from datetime import datetime
from typing import Any, Dict, Optional

import numpy as np
import torch

from connect4ai.ai.agent import DQNAgent
from connect4ai.ai.config import TrainingConfig
from connect4ai.data.data_manager import JobRegistry
from connect4ai.debug import debug


class RunningAverage:
    """Average of the most recent ``window`` values."""

    def __init__(self, window: int = 100):
        self.values = deque(maxlen=window)

    def append(self, value: float) -> None:
        self.values.append(value)

    def average(self) -> float:
        if not self.values:
            return 0.0
        return float(np.mean(self.values))

    def __len__(self) -> int:
        return len(self.values)


class Trainer:
    """
    Orchestrates warm-up, episodic training, target syncs and checkpoints.
    """

    def __init__(self, config: Optional[TrainingConfig] = None,
                 agent: Optional[DQNAgent] = None,
                 registry: Optional[JobRegistry] = None):
        """
        Initialize the trainer.

        Args:
            config: Hyperparameters (the agent's config is used if None)
            agent: Pre-built agent, e.g. loaded from a saved model
            registry: Job registry to record progress in (no recording if None)
        """
        if config is None:
            config = agent.config if agent is not None else TrainingConfig()
        self.config = config

        if config.seed is not None:
            random.seed(config.seed)
            np.random.seed(config.seed)
            torch.manual_seed(config.seed)

        self.agent = agent if agent is not None else DQNAgent(config=config)
        self.registry = registry
        self.job_id: Optional[int] = None
        self.start_time = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.episode_count = 0
        self.rewards = RunningAverage(config.average_window)
        self.last_loss = 0.0
        self.model_path: Optional[str] = None

        debug.info(f"Initialized Trainer with {config}", "training")

    def warm_up(self) -> None:
        """Fill the replay memory with experience before any training."""
        memory = self.agent.replay_memory
        capacity = memory.capacity
        report_every = max(1, capacity // 10)

        debug.start_timer("warm_up")
        while not memory.is_full():
            self.agent.step()
            if len(memory) % report_every == 0:
                debug.info(f"Initializing replay memory: {len(memory)}/{capacity}", "training")
        debug.end_timer("warm_up", "training")

    def train_episode(self) -> float:
        """
        Train until the current episode finishes.

        Returns:
            Player.ONE's final reward for the episode
        """
        done = False
        reward = 0.0
        while not done:
            self.last_loss = self.agent.train_on_replay_batch()
            reward, done = self.agent.step()

            if self.agent.frame_count % self.config.sync_every_frames == 0:
                self.agent.sync_target_network()
        return reward

    def train(self) -> Dict[str, Any]:
        """
        Run warm-up and the full episode loop, then save the online network.

        Returns:
            Summary statistics of the run
        """
        config = self.config
        debug.info(f"Starting training for {config.num_episodes} episodes", "training")

        if self.registry is not None:
            self.job_id = self.registry.create_job(config.to_dict())

        self.warm_up()

        start = time.time()
        prev_time = start
        prev_frames = self.agent.frame_count

        for episode in range(1, config.num_episodes + 1):
            self.episode_count = episode
            reward = self.train_episode()
            self.rewards.append(reward)

            now = time.time()
            elapsed = now - prev_time
            fps = (self.agent.frame_count - prev_frames) / elapsed if elapsed > 0 else 0.0
            prev_time, prev_frames = now, self.agent.frame_count

            debug.info(f"Episode #{episode}: Frame count={self.agent.frame_count} "
                       f"Average reward={self.rewards.average():.2f} "
                       f"Epsilon={self.agent.epsilon:.3f} Loss={self.last_loss:.4f} "
                       f"FPS={fps:.1f}", "training")

            if self.registry is not None and self.job_id is not None:
                self.registry.add_episode_log(self.job_id, {
                    'episode': episode,
                    'reward': float(reward),
                    'average_reward': self.rewards.average(),
                    'epsilon': self.agent.epsilon,
                    'loss': self.last_loss,
                    'frame_count': self.agent.frame_count,
                })
                self.registry.update_job_progress(self.job_id, episode)

            if config.save_interval and episode % config.save_interval == 0:
                self.save_checkpoint(episode)

        self.save_checkpoint(self.episode_count, final=True)
        if self.registry is not None and self.job_id is not None:
            self.registry.complete_job(self.job_id)

        debug.info(f"Training completed in {time.time() - start:.1f}s", "training")
        return self.get_summary()

    def save_checkpoint(self, episode: int, final: bool = False) -> str:
        """
        Save the online network under ``model_dir``.

        Returns:
            Path of the written file
        """
        if final:
            name = f"final_model_{self.start_time}.pt"
        else:
            name = f"model_{self.start_time}_ep{episode}.pt"

        path = os.path.join(self.config.model_dir, name)
        self.agent.save(path)
        self.model_path = path

        if self.registry is not None and self.job_id is not None:
            self.registry.register_model(self.job_id, episode, path, is_final=final)

        debug.info(f"Saved checkpoint: {path}", "training")
        return path

    def interrupt(self) -> str:
        """Save the current network as final and mark the job interrupted."""
        path = self.save_checkpoint(self.episode_count, final=True)
        if self.registry is not None and self.job_id is not None:
            self.registry.complete_job(self.job_id, status="interrupted")
        return path

    def get_summary(self) -> Dict[str, Any]:
        return {
            'job_id': self.job_id,
            'episodes': self.episode_count,
            'frame_count': self.agent.frame_count,
            'average_reward': self.rewards.average(),
            'final_epsilon': self.agent.epsilon,
            'last_loss': self.last_loss,
            'model_path': self.model_path,
        }


def train(config: Optional[TrainingConfig] = None,
          model_path: Optional[str] = None,
          registry: Optional[JobRegistry] = None) -> Dict[str, Any]:
    """
    Convenience function: build an agent (optionally from a saved model) and train it.

    Args:
        config: Hyperparameters
        model_path: Saved model to continue training from
        registry: Job registry for progress records

    Returns:
        Training summary
    """
    config = config if config is not None else TrainingConfig()
    agent = DQNAgent.load(model_path, config=config) if model_path else None
    return Trainer(config=config, agent=agent, registry=registry).train()
