"""Gemini ``generateContent`` client: encode, send, decode."""

from __future__ import annotations

import logging
from typing import Optional, Sequence
from urllib.parse import quote

from . import codec
from .config import DEFAULT_BASE_URL, DEFAULT_MODEL, Credential
from .conversation import Turn, fit_history
from .transport import TransportClient

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


class GeminiClient:
    """Thin wrapper that turns a history of turns into one reply string."""

    def __init__(
        self,
        transport: TransportClient,
        credential: Credential,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        system_prompt: Optional[str] = None,
        max_history_chars: Optional[int] = None,
    ):
        self.transport = transport
        self.credential = credential
        self.model = model
        self.base_url = base_url
        self.system_prompt = system_prompt
        self.max_history_chars = max_history_chars

    @property
    def endpoint(self) -> str:
        return (
            f"{self.base_url.rstrip('/')}/{quote(self.model, safe='')}:generateContent"
            f"?key={quote(self.credential.key, safe='')}"
        )

    def generate(self, turns: Sequence[Turn]) -> str:
        """Return the model's reply to *turns*.

        Raises :class:`~gemini_chat.core.errors.TransportError`,
        :class:`~gemini_chat.core.errors.DecodeError` or
        :class:`~gemini_chat.core.errors.RequestTooLargeError`.
        """
        window = fit_history(turns, self.max_history_chars)
        if len(window) < len(turns):
            logger.info(
                "History trimmed to the newest %d of %d turns", len(window), len(turns)
            )

        body = codec.encode(window, self.system_prompt)
        logger.debug("Sending %d turns (%d bytes) to %s", len(window), len(body), self.model)
        raw = self.transport.send(self.endpoint, body, JSON_HEADERS)
        return codec.decode(raw)
