"""
agent.py - Self-play DQN agent for Connect Four

The agent always learns as Player.ONE. Player.TWO is part of the
environment: it answers every move with the greedy action of the same online
network evaluated on the inverted board. Only Player.ONE's decisions are
stored, so every recorded transition starts and ends with Player.ONE to move.
"""

import random
from typing import Optional, Tuple

import numpy as np
import torch
import torch.nn.functional as F
import torch.optim as optim

from connect4ai.ai.config import TrainingConfig
from connect4ai.ai.dqn import DQNModel
from connect4ai.ai.replay_buffer import ReplayMemory, Transition
from connect4ai.ai.utils import preprocess_batch
from connect4ai.debug import debug
from connect4ai.errors import NoValidAction
from connect4ai.game.rules import ConnectFourGame
from connect4ai.utils import Player


class DQNAgent:
    """
    Epsilon-greedy DQN agent with an online and a target network.

    Attributes:
        game: Training-mode engine the agent plays on
        online_network: Network that is trained and used to act
        target_network: Delayed copy used for Bellman targets
        replay_memory: Recorded transitions
        frame_count: Number of calls to ``step`` so far
        epsilon: Exploration rate used by the latest ``step``
    """

    def __init__(self, game: Optional[ConnectFourGame] = None,
                 config: Optional[TrainingConfig] = None,
                 online_network: Optional[DQNModel] = None,
                 replay_memory: Optional[ReplayMemory] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the agent and start the first episode.

        Args:
            game: Engine to play on (a training-mode engine is created if None)
            config: Hyperparameters (defaults if None)
            online_network: Pre-trained network to continue from
            replay_memory: Memory to record into (sized from config if None)
            rng: Random source for exploration
        """
        debug.debug("Initializing DQNAgent", "ai")
        self.config = config if config is not None else TrainingConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.game = game if game is not None else ConnectFourGame(training=True, rng=self.rng)

        self.online_network = online_network if online_network is not None else DQNModel()
        self.target_network = DQNModel(**self.online_network.config())
        self.target_network.copy_weights_from(self.online_network)
        self.target_network.eval()
        for param in self.target_network.parameters():
            param.requires_grad_(False)

        self.optimizer = optim.Adam(self.online_network.parameters(),
                                    lr=self.config.learning_rate)
        self.replay_memory = (replay_memory if replay_memory is not None
                              else ReplayMemory(self.config.replay_buffer_size, rng=self.rng))

        self.frame_count = 0
        self.epsilon = self.config.epsilon_init
        self.reset()

    def reset(self) -> Player:
        """
        Start a new episode.

        If Player.TWO was drawn to move first it plays one greedy move right
        away (not recorded), so that ``step`` always begins with Player.ONE.

        Returns:
            The player that moved first
        """
        first_player = self.game.reset()
        if first_player == Player.TWO:
            self.game.step(self.get_best_action(invert=True))
        return first_player

    def epsilon_at(self, frame: int) -> float:
        """Linearly decayed exploration rate for ``frame``, floored at epsilon_final."""
        if frame >= self.config.epsilon_decay_frames:
            return self.config.epsilon_final
        return self.config.epsilon_init + self.config.epsilon_increment * frame

    def step(self) -> Tuple[float, bool]:
        """
        Play one ply pair (Player.ONE, then Player.TWO's reply) and record it.

        Returns:
            (reward, done) for Player.ONE after the pair
        """
        self.epsilon = self.epsilon_at(self.frame_count)
        self.frame_count += 1

        if self.rng.random() < self.epsilon:
            action = self.get_random_action()
        else:
            action = self.get_best_action(invert=False)

        state = self.game.get_state()
        reward, next_state, done = self.game.step(action)

        if done:
            self.replay_memory.append(Transition(state, action, reward, next_state, done))
            self.reset()
            return reward, done

        # The opponent never explores
        reply = self.get_best_action(invert=True)
        reward, next_state, done = self.game.step(reply)

        self.replay_memory.append(Transition(state, action, reward, next_state, done))
        if done:
            self.reset()
        return reward, done

    def get_random_action(self) -> int:
        valid_actions = self.game.get_valid_actions()
        if not valid_actions:
            raise NoValidAction("No valid actions to choose from")
        return self.rng.choice(valid_actions)

    def get_best_action(self, invert: bool = False) -> int:
        """
        Greedy action of the online network among the legal columns.

        Args:
            invert: Evaluate the inverted board (Player.TWO's point of view)

        Raises:
            NoValidAction: If the current board has no legal moves
        """
        valid_actions = self.game.get_valid_actions()
        if not valid_actions:
            raise NoValidAction("Best action requested on a board with no valid actions")

        state = self.game.get_inverted_state() if invert else self.game.get_state()
        q_values = self.online_network.predict(state)[0]

        # First maximum wins ties
        best_action = max(valid_actions, key=lambda a: q_values[a])
        debug.trace(f"Q-values {np.round(q_values, 3).tolist()} -> {best_action}", "ai")
        return best_action

    def train_on_batch(self, batch) -> float:
        """
        One gradient step of the online network on a batch of transitions.

        The prediction is the online value of the stored action; the target is
        reward + gamma * max_a target(next_state, a) * (1 - done).

        Returns:
            Mean squared error before the update
        """
        states, actions, rewards, next_states, dones = preprocess_batch(batch)

        self.online_network.train()
        predicted = self.online_network(states).gather(1, actions.unsqueeze(1)).squeeze(1)

        with torch.no_grad():
            next_max = self.target_network(next_states).max(dim=1).values
            targets = rewards + self.config.gamma * next_max * (1.0 - dones)

        loss = F.mse_loss(predicted, targets)

        self.optimizer.zero_grad()
        loss.backward()
        self.optimizer.step()
        return loss.item()

    def train_on_replay_batch(self) -> float:
        """Sample ``batch_size`` transitions from memory and train on them."""
        return self.train_on_batch(self.replay_memory.sample(self.config.batch_size))

    def sync_target_network(self) -> None:
        debug.debug(f"Syncing target network at frame {self.frame_count}", "ai")
        self.target_network.copy_weights_from(self.online_network)

    def save(self, path: str) -> None:
        """Persist the online network."""
        self.online_network.save(path)

    @classmethod
    def load(cls, path: str, **kwargs) -> 'DQNAgent':
        """Create an agent whose online and target networks start from ``path``."""
        return cls(online_network=DQNModel.load(path), **kwargs)
