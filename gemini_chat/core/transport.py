"""Synchronous HTTP POST on top of :mod:`httpx`."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

from .config import DEFAULT_TIMEOUT
from .errors import HTTPStatusError, NetworkUnreachableError, TransportTimeoutError

logger = logging.getLogger(__name__)


class TransportClient:
    """Send one request, get raw bytes back or a typed transport error.

    There is no retry here; a failed exchange is reported to the user and
    the chat loop waits for the next input.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def send(self, url: str, body: bytes, headers: Mapping[str, str]) -> bytes:
        try:
            response = self._client.post(url, content=body, headers=dict(headers))
        except httpx.TimeoutException as exc:
            raise TransportTimeoutError(
                f"no response within {self.timeout:g}s"
            ) from exc
        except httpx.TransportError as exc:
            raise NetworkUnreachableError(
                f"cannot reach {_host(url)}: {exc}"
            ) from exc

        logger.debug("POST %s -> %s", _host(url), response.status_code)
        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.content)
        return response.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TransportClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _host(url: str) -> str:
    """Return only the host part so query-string credentials never leak."""
    try:
        return httpx.URL(url).host or url.split("?", 1)[0]
    except httpx.InvalidURL:
        return url.split("?", 1)[0]
