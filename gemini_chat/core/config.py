"""Credential persistence and runtime settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigIOError, ConfigNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT = 30.0
# Roughly a few hundred thousand tokens of plain text; well under the
# request size limit of every supported model.
DEFAULT_MAX_HISTORY_CHARS = 500_000
CONFIG_PATH = Path.home() / ".gemini_chat_config"

# Supported models
SUPPORTED_MODELS = [
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.0-flash",  # default
    "gemini-2.0-flash-lite",
    "gemini-1.5-pro",
    "gemini-1.5-flash",
]

# A single system instruction keeps answers readable in a terminal.
SYSTEM_PROMPT = (
    "You are an AI assistant running in a terminal (CLI) environment. "
    "Optimise all answers for 80-column readability, prefer plain text "
    "or concise bullet lists over heavy markup, and wrap code snippets in "
    "fenced blocks when helpful."
)

_KEY_NAME = "API_KEY"


@dataclass(frozen=True)
class Credential:
    """The API key authorising requests to the remote service."""

    key: str

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("API key must not be empty")
        if "\n" in self.key or "\r" in self.key:
            raise ValueError("API key must be a single line")

    def __repr__(self) -> str:
        return f"Credential(key='{mask_key(self.key)}')"


def mask_key(key: str) -> str:
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}…{key[-4:]}"


@dataclass(frozen=True)
class Settings:
    """Everything the session loop needs to know, resolved once at startup."""

    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    max_history_chars: Optional[int] = DEFAULT_MAX_HISTORY_CHARS
    system_prompt: Optional[str] = SYSTEM_PROMPT
    api_key: Optional[str] = None


class ConfigStore:
    """Reads and writes ``API_KEY=<value>`` to a single file in the home dir."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else CONFIG_PATH

    def load(self) -> Credential:
        """Return the stored credential.

        Raises :class:`ConfigNotFoundError` when the file is missing, empty or
        has no key in it, and :class:`ConfigIOError` when it cannot be read.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFoundError(f"no config file at {self.path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigIOError(f"cannot read {self.path}: {exc}") from exc

        # Only "\n" ends an entry; str.splitlines() would also break on
        # form feeds and Unicode separators that may be part of the key.
        for line in text.split("\n"):
            if line.endswith("\r"):
                line = line[:-1]
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            name, sep, value = line.partition("=")
            if not sep or name.strip() != _KEY_NAME:
                continue
            if value:
                logger.debug("Loaded API key from %s", self.path)
                return Credential(value)

        raise ConfigNotFoundError(f"no {_KEY_NAME} entry in {self.path}")

    def save(self, credential: Credential) -> None:
        """Persist *credential*, replacing any previous file in one step."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(f"{_KEY_NAME}={credential.key}\n")
                fh.flush()
                os.fsync(fh.fileno())
            # O_CREAT's mode is ignored when the temp file already existed.
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            try:
                tmp_path.unlink(missing_ok=True)
            except OSError as cleanup_exc:
                logger.warning("Could not remove %s: %s", tmp_path, cleanup_exc)
            raise ConfigIOError(f"cannot write {self.path}: {exc}") from exc
        logger.debug("Saved API key to %s", self.path)
