from .ansi import (
    Ansi,
    USER_LABEL,
    ASSISTANT_LABEL,
    ERROR_LABEL,
    console,
    error_line,
    notice,
    speaker_line,
)
from .log import configure_logging
from .spinner import Spinner

__all__ = [
    "Ansi",
    "USER_LABEL",
    "ASSISTANT_LABEL",
    "ERROR_LABEL",
    "console",
    "error_line",
    "notice",
    "speaker_line",
    "configure_logging",
    "Spinner",
]
