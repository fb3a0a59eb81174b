"""In-memory dialogue history for one run of the CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from .errors import RequestTooLargeError


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    role: Role
    text: str


class Conversation:
    """Ordered, append-only log of turns.

    Turns can only be added with :meth:`append` and read back through
    :meth:`snapshot`; nothing removes or reorders them.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        if not isinstance(turn, Turn):
            raise TypeError(f"expected Turn, got {type(turn).__name__}")
        self._turns.append(turn)

    def add_user(self, text: str) -> Turn:
        turn = Turn(Role.USER, text)
        self.append(turn)
        return turn

    def add_assistant(self, text: str) -> Turn:
        turn = Turn(Role.ASSISTANT, text)
        self.append(turn)
        return turn

    def snapshot(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    def to_dict(self) -> dict:
        return {
            "turns": [{"role": t.role.value, "text": t.text} for t in self._turns],
            "saved_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        }

    def save(self, path: Union[str, Path]) -> Path:
        """Write the transcript to *path* as JSON and return the path."""
        path = Path(path).expanduser()
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(self.to_dict(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        tmp_path.replace(path)
        return path


def fit_history(turns: Sequence[Turn], max_chars: Optional[int]) -> Tuple[Turn, ...]:
    """Return the newest turns whose combined text fits in *max_chars*.

    The window always ends with the newest turn and starts with a user turn.
    Older turns that do not fit are left out of the request only; the
    conversation itself keeps them.
    """
    turns = tuple(turns)
    if not max_chars or not turns:
        return turns

    newest = turns[-1]
    if len(newest.text) > max_chars:
        raise RequestTooLargeError(
            f"message is {len(newest.text)} characters, the limit is {max_chars}"
        )

    start = len(turns)
    used = 0
    while start > 0 and used + len(turns[start - 1].text) <= max_chars:
        start -= 1
        used += len(turns[start].text)

    window = turns[start:]
    while len(window) > 1 and window[0].role is not Role.USER:
        window = window[1:]
    return window
