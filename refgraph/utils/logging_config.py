"""
Console and file logging for the refgraph logger tree, driven by the
``logging`` section of the engine settings.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

from refgraph.models import LoggingConfig

colorama.init(autoreset=True)

ROOT_LOGGER_NAME = "refgraph"

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"


class LogLevel(str, Enum):
    """Console verbosity presets accepted in settings.yaml."""

    MINIMAL = "minimal"  # warnings and errors
    NORMAL = "normal"  # engine progress
    DETAILED = "detailed"  # per-candidate and per-merge debug lines
    FULL = "full"  # debug with timestamps and module names


class ColoredFormatter(logging.Formatter):
    """Colours the level name and shortens ``refgraph.`` module names for the console."""

    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def format(self, record):
        levelname, name = record.levelname, record.name
        record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{Style.RESET_ALL}"
        if name.startswith(f"{ROOT_LOGGER_NAME}."):
            record.name = name[len(ROOT_LOGGER_NAME) + 1:]
        try:
            return super().format(record)
        finally:
            # Records are shared with the file handler.
            record.levelname, record.name = levelname, name


def resolve_log_level(level: LogLevel, verbose: bool = False, debug: bool = False) -> int:
    """Map a preset and the CLI flags to a stdlib logging level."""
    level = LogLevel(level)
    if debug or verbose or level in (LogLevel.DETAILED, LogLevel.FULL):
        return logging.DEBUG
    if level == LogLevel.NORMAL:
        return logging.INFO
    return logging.WARNING


def _console_handler(log_level: int, with_context: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if with_context:
        handler.setFormatter(
            ColoredFormatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%H:%M:%S")
        )
    else:
        handler.setFormatter(ColoredFormatter("%(levelname)-8s | %(message)s"))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    config: Optional[LoggingConfig] = None,
    verbose: bool = False,
    debug: bool = False,
) -> logging.Logger:
    """
    Configure the refgraph logger tree; calling it again replaces the handlers.

    Args:
        config: Logging section of the engine settings (defaults when None)
        verbose: --verbose flag, forces debug output
        debug: --debug flag, debug output with timestamps and module names

    Returns:
        The ``refgraph`` logger
    """
    config = config or LoggingConfig()
    level = LogLevel(config.level)
    log_level = resolve_log_level(level, verbose, debug)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if config.log_to_file else log_level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    logger.addHandler(_console_handler(log_level, with_context=debug or level == LogLevel.FULL))
    if config.log_to_file:
        logger.addHandler(_file_handler(config.log_file))
    return logger
