"""Logging configuration for the CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from rich.console import Console
from rich.logging import RichHandler


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if isinstance(resolved, int):
        return resolved
    raise ValueError(f"Unsupported log level: {level}")


def configure_logging(
    level: Union[str, int] = "WARNING",
    log_file: Union[str, Path, None] = None,
) -> logging.Logger:
    """Send package logs to stderr through rich, and optionally to a file.

    Logs go to stderr; stdout carries only the chat transcript.
    """
    logger = logging.getLogger("gemini_chat")
    logger.setLevel(_resolve_level(level))
    logger.handlers.clear()
    logger.propagate = False

    stderr_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    stderr_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(stderr_handler)

    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
