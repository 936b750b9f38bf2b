"""
debug.py - Logging facade for the Connect Four engine

Every module logs through the shared ``debug`` instance, tagging messages with
a component name ("board", "game", "env", "search", "ai", "training",
"data", "cli") so that noisy parts of the system can be filtered without
touching the code.
"""

import logging
import sys
import time
from enum import Enum
from typing import Dict, Iterable, Optional, Set


class DebugLevel(Enum):
    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5


# TRACE sits just below DEBUG so it only shows when explicitly requested
TRACE_LEVEL = logging.DEBUG - 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

LEVEL_MAP = {
    DebugLevel.NONE: logging.CRITICAL + 10,
    DebugLevel.ERROR: logging.ERROR,
    DebugLevel.WARNING: logging.WARNING,
    DebugLevel.INFO: logging.INFO,
    DebugLevel.DEBUG: logging.DEBUG,
    DebugLevel.TRACE: TRACE_LEVEL,
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class DebugManager:
    """Component-aware wrapper around the ``connect4ai`` logger."""

    def __init__(self, logger_name: str = "connect4ai"):
        self._level = DebugLevel.INFO
        self._enabled = True
        self._components: Set[str] = set()  # Empty set means all components
        self._timers: Dict[str, float] = {}
        self._file_handler: Optional[logging.FileHandler] = None
        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(LEVEL_MAP[self._level])

        # Avoid stacking console handlers when the module is reloaded
        if not any(getattr(h, "_connect4ai_console", False) for h in self._logger.handlers):
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
            console._connect4ai_console = True
            self._logger.addHandler(console)

    @property
    def level(self) -> DebugLevel:
        return self._level

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def configure(self, level: Optional[DebugLevel] = None,
                  enabled: Optional[bool] = None,
                  log_file: Optional[str] = None,
                  components: Optional[Iterable[str]] = None) -> None:
        """
        Update logging settings. Arguments left as None keep their value.

        Args:
            level: Minimum level to emit
            enabled: Master switch for all output
            log_file: Path of an additional log file ("" removes it)
            components: Components to emit (empty for all)
        """
        if level is not None:
            self._level = level
            self._logger.setLevel(LEVEL_MAP[level])

        if enabled is not None:
            self._enabled = enabled

        if log_file is not None:
            if self._file_handler is not None:
                self._logger.removeHandler(self._file_handler)
                self._file_handler.close()
                self._file_handler = None
            if log_file:
                self._file_handler = logging.FileHandler(log_file)
                self._file_handler.setFormatter(
                    logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
                self._logger.addHandler(self._file_handler)

        if components is not None:
            self._components = set(components)

    def is_enabled_for(self, level: DebugLevel, component: Optional[str] = None) -> bool:
        """Check whether a message at this level/component would be emitted."""
        if not self._enabled or level == DebugLevel.NONE:
            return False
        if level.value > self._level.value:
            return False
        if component and self._components and component not in self._components:
            return False
        return True

    def log(self, level: DebugLevel, message: str, component: Optional[str] = None) -> None:
        if not self.is_enabled_for(level, component):
            return

        if component:
            message = f"[{component}] {message}"
        self._logger.log(LEVEL_MAP[level], message)

    def error(self, message: str, component: Optional[str] = None) -> None:
        self.log(DebugLevel.ERROR, message, component)

    def warning(self, message: str, component: Optional[str] = None) -> None:
        self.log(DebugLevel.WARNING, message, component)

    def info(self, message: str, component: Optional[str] = None) -> None:
        self.log(DebugLevel.INFO, message, component)

    def debug(self, message: str, component: Optional[str] = None) -> None:
        self.log(DebugLevel.DEBUG, message, component)

    def trace(self, message: str, component: Optional[str] = None) -> None:
        self.log(DebugLevel.TRACE, message, component)

    def start_timer(self, name: str) -> None:
        """Start a named wall-clock timer."""
        self._timers[name] = time.perf_counter()

    def end_timer(self, name: str, component: Optional[str] = None) -> Optional[float]:
        """
        Stop a named timer and log its duration at DEBUG level.

        Returns:
            Elapsed seconds, or None if the timer was never started
        """
        started = self._timers.pop(name, None)
        if started is None:
            self.warning(f"Timer '{name}' not started", "debug")
            return None

        elapsed = time.perf_counter() - started
        self.debug(f"Timer [{name}]: {elapsed:.6f}s", component)
        return elapsed

    def set_from_string(self, level_str: str) -> bool:
        """
        Set the level from a command-line string such as "info" or "trace".

        Returns:
            True if the string named a known level
        """
        try:
            level = DebugLevel[level_str.strip().upper()]
        except KeyError:
            self.warning(f"Unknown debug level: {level_str}")
            return False

        self.configure(level=level)
        return True


debug = DebugManager()
