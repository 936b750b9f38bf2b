"""
cli.py - Command-line interface for playing Connect Four

This module lets two seats, each a human or a computer strategy, play a game
in the terminal, and runs batches of computer-vs-computer games to compare
strategies.
"""

import time
from typing import Callable, Dict, Optional

from connect4ai.ai.strategies import Strategy
from connect4ai.debug import debug
from connect4ai.game.rules import ConnectFourGame, MoveResult
from connect4ai.utils import COLS, Player, render_board_ascii


class GameCLI:
    """Terminal game loop driving a ConnectFourGame in interactive mode."""

    def __init__(self, input_func: Callable[[str], str] = input,
                 output_func: Callable[[str], None] = print,
                 move_delay: float = 0.0):
        """
        Initialize the CLI.

        Args:
            input_func: Reads a line of human input (``input`` by default)
            output_func: Writes a line of output (``print`` by default)
            move_delay: Seconds to pause after each computer move
        """
        self.game = ConnectFourGame()
        self.input = input_func
        self.output = output_func
        self.move_delay = move_delay

    def get_human_move(self, player: Player) -> Optional[int]:
        """
        Ask a human for a column until a legal one is entered.

        Returns:
            Column index, or None if the player quits
        """
        valid_actions = self.game.get_valid_actions()
        while True:
            prompt = f"Player {player.label} ({player}) to move (columns 0-{COLS - 1}, q to quit): "
            user_input = self.input(prompt).strip().lower()

            if user_input == 'q':
                return None

            try:
                move = int(user_input)
            except ValueError:
                self.output("Invalid input. Please enter a column number.")
                continue

            if move in valid_actions:
                return move
            if 0 <= move < COLS:
                self.output(f"Column {move} is full. Valid options: {valid_actions}")
            else:
                self.output(f"Column must be between 0 and {COLS - 1}.")

    def get_strategy_move(self, strategy: Strategy, player: Player) -> int:
        move = strategy(self.game.board.copy(), self.game.get_valid_actions(), player)
        debug.debug(f"{strategy!r} plays column {move} for {player.name}", "cli")
        return move

    def play_game(self, p1: Optional[Strategy], p2: Optional[Strategy]) -> Optional[MoveResult]:
        """
        Play one game, printing the board after every move.

        Args:
            p1: Strategy for Player.ONE, or None for a human
            p2: Strategy for Player.TWO, or None for a human

        Returns:
            The last MoveResult, or None if a human quit
        """
        seats = {Player.ONE: p1, Player.TWO: p2}
        self.game.reset()
        self.output(self.game.render())

        result = None
        while not self.game.is_game_over():
            player = self.game.current_player
            strategy = seats[player]

            if strategy is None:
                move = self.get_human_move(player)
                if move is None:
                    self.output("Quitting game.")
                    return None
            else:
                move = self.get_strategy_move(strategy, player)
                self.output(f"Player {player.label} plays column {move}")
                if self.move_delay:
                    time.sleep(self.move_delay)

            result = self.game.step(move)
            self.output(self.game.render())

        self.output(self.describe_result(result))
        return result

    @staticmethod
    def describe_result(result: MoveResult) -> str:
        winner = result.winner.winner
        if winner is None:
            return "Game over! It's a draw!"

        # Show only the winning discs
        grid = result.board.copy()
        cells = set(result.winning_cells)
        for row in range(grid.shape[0]):
            for col in range(grid.shape[1]):
                if (row, col) not in cells:
                    grid[row, col] = Player.EMPTY.value
        return (f"Game over! Player {winner.label} ({winner}) wins!\n"
                f"Winning line:\n{render_board_ascii(grid)}")

    def simulate(self, p1: Strategy, p2: Strategy, games: int) -> Dict[str, int]:
        """
        Play ``games`` computer-vs-computer games without rendering.

        Returns:
            Tally with keys "p1", "p2" and "draws"
        """
        if p1 is None or p2 is None:
            raise ValueError("Simulation needs two computer players")

        seats = {Player.ONE: p1, Player.TWO: p2}
        tally = {'p1': 0, 'p2': 0, 'draws': 0}

        debug.start_timer("simulate")
        for game_number in range(1, games + 1):
            self.game.reset()
            while not self.game.is_game_over():
                player = self.game.current_player
                self.game.step(self.get_strategy_move(seats[player], player))

            winner = self.game.get_winner()
            if winner == Player.ONE:
                tally['p1'] += 1
            elif winner == Player.TWO:
                tally['p2'] += 1
            else:
                tally['draws'] += 1
            debug.info(f"Game {game_number}/{games}: {self.format_tally(tally)}", "cli")
        debug.end_timer("simulate", "cli")

        self.output(self.format_tally(tally))
        return tally

    @staticmethod
    def format_tally(tally: Dict[str, int]) -> str:
        return f"P1: {tally['p1']} | P2: {tally['p2']} | Draws: {tally['draws']}"
