"""Transcript styling on top of :mod:`rich`.

Every helper here escapes the text it is given, so user input, model
replies and file paths are always printed literally and never parsed as
rich markup.
"""

import os

from rich.console import Console
from rich.markup import escape


console = Console()


class Ansi:
    """Style names used by the chat transcript."""

    BOLD = "bold"

    FG_GREEN = "green"
    FG_CYAN = "cyan"
    FG_YELLOW = "yellow"
    FG_RED = "red"

    @staticmethod
    def style(text: str, *codes: str) -> str:
        """Return *text* escaped and, unless ``NO_COLOR`` is set, wrapped in *codes*."""
        text = escape(text)
        if not codes or os.getenv("NO_COLOR") is not None:
            return text
        return f"[{' '.join(codes)}]{text}[/]"


USER_LABEL = Ansi.style("You", Ansi.FG_CYAN, Ansi.BOLD)
ASSISTANT_LABEL = Ansi.style("AI", Ansi.FG_GREEN, Ansi.BOLD)
ERROR_LABEL = Ansi.style("error", Ansi.FG_RED, Ansi.BOLD)


def speaker_line(label: str, text: str) -> str:
    """``You: ...`` / ``AI: ...`` transcript line."""
    return f"{label}: {escape(text)}"


def error_line(text: str) -> str:
    return f"{ERROR_LABEL}: {escape(text)}"


def notice(text: str) -> str:
    """Bracketed status message such as ``[model switched to ...]``."""
    return escape(f"[{text}]")
