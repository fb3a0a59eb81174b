from .config import (
    ConfigStore,
    Credential,
    Settings,
    SUPPORTED_MODELS,
    SYSTEM_PROMPT,
)
from .conversation import Conversation, Role, Turn

__all__ = [
    "ConfigStore",
    "Credential",
    "Settings",
    "SUPPORTED_MODELS",
    "SYSTEM_PROMPT",
    "Conversation",
    "Role",
    "Turn",
]
