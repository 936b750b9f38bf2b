"""
Tests for the DQN network and the self-play agent.
"""

import random

import numpy as np
import pytest
import torch

from connect4ai.ai.agent import DQNAgent
from connect4ai.ai.config import TrainingConfig
from connect4ai.ai.dqn import DQNModel
from connect4ai.ai.replay_buffer import Transition
from connect4ai.errors import NoValidAction
from connect4ai.utils import ROWS, COLS, Player, GameResult


@pytest.fixture
def config(tmp_path):
    return TrainingConfig(replay_buffer_size=64, batch_size=8, epsilon_decay_frames=100,
                          model_dir=str(tmp_path), seed=0)


@pytest.fixture
def agent(config):
    torch.manual_seed(0)
    return DQNAgent(config=config, rng=random.Random(0))


def constant_model(bias):
    """Network whose output ignores the board."""
    model = DQNModel()
    with torch.no_grad():
        model.fc2.weight.zero_()
        model.fc2.bias.copy_(torch.tensor(bias, dtype=torch.float32))
    return model


def same_weights(a, b):
    return all(torch.equal(a.state_dict()[k], b.state_dict()[k]) for k in a.state_dict())


class TestDQNModel:

    def test_output_shape(self):
        model = DQNModel()
        assert model.predict(np.zeros((ROWS, COLS))).shape == (1, COLS)
        assert model(torch.zeros(5, ROWS, COLS, 1)).shape == (5, COLS)

    def test_save_and_load(self, tmp_path):
        model = DQNModel(hidden_size=32)
        path = str(tmp_path / "nested" / "model.pt")
        model.save(path)

        loaded = DQNModel.load(path)
        assert loaded.hidden_size == 32
        grid = np.random.RandomState(0).randint(-1, 2, size=(ROWS, COLS))
        assert np.allclose(model.predict(grid), loaded.predict(grid))


class TestDQNAgent:

    def test_epsilon_schedule(self, agent):
        assert agent.epsilon_at(0) == pytest.approx(0.7)
        assert agent.epsilon_at(50) == pytest.approx((0.7 + 0.01) / 2)
        assert agent.epsilon_at(100) == pytest.approx(0.01)
        assert agent.epsilon_at(10 ** 6) == pytest.approx(0.01)

    def test_episode_starts_with_player_one_to_move(self, agent):
        for _ in range(10):
            agent.reset()
            assert agent.game.current_player == Player.ONE
            assert not agent.game.is_game_over()

    def test_step_records_one_transition(self, agent):
        reward, done = agent.step()
        assert agent.frame_count == 1
        assert len(agent.replay_memory) == 1
        assert reward in (-1.0, 0.0, 1.0)

        transition = agent.replay_memory.sample(1)[0]
        assert isinstance(transition, Transition)
        assert transition.action in range(COLS)
        assert transition.done == done

    def test_transitions_start_with_player_one_to_move(self, agent):
        for _ in range(60):
            agent.step()

        for transition in agent.replay_memory.sample(len(agent.replay_memory)):
            for state in (transition.state, transition.next_state):
                ones = np.count_nonzero(state == Player.ONE.value)
                twos = np.count_nonzero(state == Player.TWO.value)
                if state is transition.next_state and transition.done:
                    continue
                # Player.ONE moves next: either it started, or Player.TWO is one disc ahead
                assert twos - ones in (0, 1)
            if not transition.done:
                assert transition.reward == 0.0

    def test_best_action_skips_full_columns(self, config):
        model = constant_model([10.0, 0.0, 0.0, 0.0, 0.0, 5.0, 0.0])
        agent = DQNAgent(config=config, online_network=model, rng=random.Random(0))
        assert agent.get_best_action() == 0

        agent.game.reset(first_player=Player.ONE)
        for _ in range(ROWS):
            agent.game.step(0)
        assert agent.get_best_action() == 5
        assert agent.get_best_action(invert=True) == 5

    def test_best_action_first_maximum_wins(self, config):
        model = constant_model([0.0, 3.0, 0.0, 3.0, 0.0, 0.0, 0.0])
        agent = DQNAgent(config=config, online_network=model, rng=random.Random(0))
        assert agent.get_best_action() == 1

    def test_best_action_without_moves(self, agent):
        agent.game.result = GameResult.DRAW
        with pytest.raises(NoValidAction):
            agent.get_best_action()

    def test_training_reduces_loss(self, config):
        torch.manual_seed(1)
        config.learning_rate = 1e-2
        agent = DQNAgent(config=config, rng=random.Random(1))
        rng = np.random.RandomState(1)
        batch = [Transition(rng.randint(-1, 2, size=(ROWS, COLS)), i % COLS, 1.0,
                            rng.randint(-1, 2, size=(ROWS, COLS)), True)
                 for i in range(8)]

        first = agent.train_on_batch(batch)
        for _ in range(100):
            last = agent.train_on_batch(batch)
        assert last < first

    def test_loss_matches_bellman_targets(self, config):
        torch.manual_seed(2)
        config.gamma = 0.5
        agent = DQNAgent(config=config, rng=random.Random(2))
        # Target weights differ from the online ones
        with torch.no_grad():
            for param in agent.target_network.parameters():
                param.add_(0.5)

        rng = np.random.RandomState(2)
        batch = [Transition(rng.randint(-1, 2, size=(ROWS, COLS)), action, reward,
                            rng.randint(-1, 2, size=(ROWS, COLS)), done)
                 for action, reward, done in [(0, 0.0, False), (3, 1.0, True),
                                              (6, -1.0, False), (2, 0.0, True)]]

        online_q = agent.online_network.predict([t.state for t in batch])
        target_q = agent.target_network.predict([t.next_state for t in batch])
        expected = np.mean([
            (online_q[i, t.action]
             - (t.reward + config.gamma * target_q[i].max() * (1.0 - float(t.done)))) ** 2
            for i, t in enumerate(batch)
        ])

        assert agent.train_on_batch(batch) == pytest.approx(expected, rel=1e-4)

    def test_training_leaves_target_network_alone(self, agent):
        for _ in range(20):
            agent.step()
        target_before = {k: v.clone() for k, v in agent.target_network.state_dict().items()}

        agent.train_on_replay_batch()

        for key, value in agent.target_network.state_dict().items():
            assert torch.equal(value, target_before[key])
        assert not same_weights(agent.online_network, agent.target_network)

        agent.sync_target_network()
        assert same_weights(agent.online_network, agent.target_network)

    def test_load_continues_from_saved_network(self, agent, config, tmp_path):
        path = str(tmp_path / "agent.pt")
        agent.save(path)
        loaded = DQNAgent.load(path, config=config)
        assert same_weights(loaded.online_network, agent.online_network)
        assert same_weights(loaded.target_network, agent.online_network)
