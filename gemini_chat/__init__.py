"""Simple interactive CLI for chatting with Google Gemini models.

Features
--------
1. API key persistence: the key is asked for once and stored in ~/.gemini_chat_config
   (override with --config or GEMINI_CHAT_CONFIG; GEMINI_API_KEY skips the file entirely).
2. Conversation memory: every request carries the dialogue so far, trimmed from the
   oldest end when it grows past --max-history-chars.
3. Model switching: change the model mid-conversation with the `/model` command (or via `--model`).

Type `exit` to quit. Slash commands:

    /help              - show this help
    /exit              - quit
    /model [NAME]      - switch model (interactive picker without NAME)
    /models            - list supported models
    /history           - print the conversation so far
    /save PATH         - write the conversation to PATH as JSON

Run `python -m gemini_chat` or the `gemini-chat` console script.
"""
# Re-export useful symbols for convenience
from .core import (
    ConfigStore,
    Conversation,
    Credential,
    Role,
    Settings,
    SUPPORTED_MODELS,
    SYSTEM_PROMPT,
    Turn,
)
from .core.client import GeminiClient
from .core.transport import TransportClient
from .cli import ChatCLI, SessionState, run_cli

__all__ = [
    "ConfigStore",
    "Conversation",
    "Credential",
    "Role",
    "Settings",
    "SUPPORTED_MODELS",
    "SYSTEM_PROMPT",
    "Turn",
    "GeminiClient",
    "TransportClient",
    "ChatCLI",
    "SessionState",
    "run_cli",
]
