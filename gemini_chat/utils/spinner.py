"""Spinner shown while a request is in flight, backed by yaspin."""
from __future__ import annotations

from yaspin import yaspin

from .ansi import console


class Spinner:
    """Display a small spinner next to a prefix while work is done.

    Usable as a context manager so the spinner stops even when the wrapped
    call raises.
    """

    def __init__(self, prefix: str = "", text: str = "thinking"):
        self._prefix = prefix
        self._started = False
        # spinner after the text so prefix stays at the start
        self._spinner = yaspin(text=text, side="right")

    def start(self) -> None:
        if self._started:
            return
        console.print(self._prefix, end="")
        console.file.flush()
        self._spinner.start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._spinner.stop()
        console.print("\r", end="")
        console.file.flush()
        self._started = False

    def __enter__(self) -> "Spinner":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
