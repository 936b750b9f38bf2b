"""
errors.py - Exception types raised by the Connect Four engine
"""


class Connect4Error(Exception):
    """Base class for all engine errors."""


class InvalidAction(Connect4Error, ValueError):
    """A move was requested for a column that is out of range or full."""

    def __init__(self, action, reason: str = "invalid column"):
        self.action = action
        self.reason = reason
        super().__init__(f"Invalid action {action!r}: {reason}")


class SampleTooLarge(Connect4Error, ValueError):
    """A replay sample asked for more transitions than are available."""

    def __init__(self, batch_size: int, available: int):
        self.batch_size = batch_size
        self.available = available
        super().__init__(f"batch_size {batch_size} exceeds available transitions {available}")


class NoValidAction(Connect4Error, RuntimeError):
    """An action was requested on a board with no legal moves."""
