"""
Tests for the terminal game loop with scripted input.
"""

import itertools

import pytest

from connect4ai.ai.strategies import MinimaxStrategy, RandomStrategy
from connect4ai.interfaces.cli import GameCLI
from connect4ai.utils import GameResult


def scripted_cli(moves):
    inputs = iter(moves)
    output = []
    cli = GameCLI(input_func=lambda prompt: next(inputs), output_func=output.append)
    return cli, output


class TestGameCLI:

    def test_two_humans_play_to_a_win(self):
        cli, output = scripted_cli(["0", "0", "1", "1", "2", "2", "3"])
        result = cli.play_game(None, None)

        assert result.winner == GameResult.PLAYER_ONE_WIN
        assert result.winning_cells == [(5, 0), (5, 1), (5, 2), (5, 3)]
        assert "Player 1 (X) wins!" in output[-1]

    def test_bad_input_is_reprompted(self):
        cli, output = scripted_cli(["abc", "9", "0", "0", "1", "1", "2", "2", "3"])
        result = cli.play_game(None, None)

        assert result.winner == GameResult.PLAYER_ONE_WIN
        assert "Invalid input. Please enter a column number." in output
        assert "Column must be between 0 and 6." in output

    def test_full_column_is_reprompted(self):
        moves = ["0"] * 6 + ["0", "1", "1", "2", "2", "3", "3", "4"]
        cli, output = scripted_cli(moves)
        cli.play_game(None, None)
        assert any(line.startswith("Column 0 is full") for line in output)

    def test_quit(self):
        cli, output = scripted_cli(["3", "q"])
        assert cli.play_game(None, None) is None
        assert output[-1] == "Quitting game."

    def test_human_against_computer(self):
        # The human cycles through the columns, skipping full ones
        cli, output = scripted_cli(itertools.cycle("6543210"))
        result = cli.play_game(None, MinimaxStrategy(depth=2, seed=0))
        assert result is not None
        assert result.done

    def test_computer_game(self):
        cli, output = scripted_cli([])
        result = cli.play_game(RandomStrategy(seed=1), MinimaxStrategy(depth=1, seed=2))
        assert result.done
        assert output[-1].startswith("Game over!")

    def test_simulate_tally(self):
        cli, output = scripted_cli([])
        tally = cli.simulate(RandomStrategy(seed=3), RandomStrategy(seed=4), games=5)

        assert sum(tally.values()) == 5
        assert output[-1] == GameCLI.format_tally(tally)

    def test_simulate_needs_computers(self):
        cli, _ = scripted_cli([])
        with pytest.raises(ValueError):
            cli.simulate(None, RandomStrategy(), games=1)
