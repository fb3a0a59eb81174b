"""Encode conversations for ``generateContent`` and decode its replies.

Request shape::

    {"contents": [{"role": "user", "parts": [{"text": "Hello"}]},
                  {"role": "model", "parts": [{"text": "Hi there"}]}],
     "systemInstruction": {"parts": [{"text": "..."}]}}

The reply text lives at ``candidates[0].content.parts[0].text``. Every step
of that path is checked; anything unexpected is reported as malformed
instead of falling back to a default.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from .conversation import Role, Turn
from .errors import EmptyCandidatesError, MalformedResponseError

# Gemini calls the assistant side of the dialogue "model".
_WIRE_ROLES = {
    Role.USER: "user",
    Role.ASSISTANT: "model",
}


def _text_content(text: str) -> dict:
    return {"parts": [{"text": text}]}


def encode(turns: Sequence[Turn], system_instruction: Optional[str] = None) -> bytes:
    """Serialise *turns* into a request body.

    Output is byte-for-byte stable for the same input (sorted keys, compact
    separators).
    """
    contents = []
    for turn in turns:
        entry = _text_content(turn.text)
        entry["role"] = _WIRE_ROLES[Role(turn.role)]
        contents.append(entry)

    payload: dict = {"contents": contents}
    if system_instruction:
        payload["systemInstruction"] = _text_content(system_instruction)

    return json.dumps(
        payload, ensure_ascii=False, sort_keys=True, separators=(",", ":")
    ).encode("utf-8")


def _field(obj: Any, name: str, expected: type, where: str) -> Any:
    if not isinstance(obj, dict):
        raise MalformedResponseError(f"{where} is not an object")
    if name not in obj:
        raise MalformedResponseError(f"{where} has no '{name}' field")
    value = obj[name]
    if not isinstance(value, expected):
        raise MalformedResponseError(
            f"{where}.{name} should be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _first(items: list, where: str) -> Any:
    if not items:
        raise MalformedResponseError(f"{where} is empty")
    return items[0]


def _parse(raw: bytes) -> Any:
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as exc:
        raise MalformedResponseError(f"response is not valid JSON: {exc}") from exc


def decode(raw: bytes) -> str:
    """Return the reply text contained in a ``generateContent`` response."""
    data = _parse(raw)

    candidates = _field(data, "candidates", list, "response")
    if not candidates:
        raise EmptyCandidatesError("the model returned no candidates")

    candidate = candidates[0]
    content = _field(candidate, "content", dict, "candidates[0]")
    parts = _field(content, "parts", list, "candidates[0].content")
    part = _first(parts, "candidates[0].content.parts")
    return _field(part, "text", str, "candidates[0].content.parts[0]")


def extract_error_message(raw: bytes) -> Optional[str]:
    """Pull ``error.message`` out of a provider error body, if there is one."""
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
        return None

    error = data["error"]
    message = error.get("message")
    status = error.get("status")
    if isinstance(message, str) and message:
        if isinstance(status, str) and status:
            return f"{status}: {message}"
        return message
    return None
