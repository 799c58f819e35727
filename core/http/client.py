"""
HTTP Client

Thin requests-based HTTP client for the JSON-RPC history service used by
ownership discovery. One session is reused across pages and closed by the
owner of the client.
"""

from __future__ import annotations

import json as _json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """Status, body and headers of a completed request."""
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return _json.loads(self.content)

    def raise_for_status(self) -> None:
        """
        Raises:
            HttpError: Carrying this response, if the status is not 2xx
        """
        if not self.ok:
            raise HttpError(f"HTTP {self.status_code} from {self.url or 'server'}", response=self)


class HttpError(Exception):
    """
    Request failed.

    `response` is set when the server answered with a non-2xx status and
    None when no answer arrived at all.
    """

    def __init__(self, message: str, response: Optional[HttpResponse] = None) -> None:
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None


class HttpClient:
    """
    POST-only client over a lazily created requests session.

    Usage:
        client = HttpClient(timeout=10)
        response = client.post(endpoint, json=payload)
        response.raise_for_status()
        client.close()
    """

    def __init__(self, *, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def post(
        self,
        url: str,
        *,
        json: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        POST `json` to `url`.

        Raises:
            HttpError: If no response was received (connection, timeout)
        """
        try:
            raw = self.session.post(
                url,
                json=json,
                headers=headers or {},
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"POST {url} failed: {e}")
            raise HttpError(str(e)) from e

        return HttpResponse(
            status_code=raw.status_code,
            content=raw.content,
            headers=dict(raw.headers),
            url=str(raw.url),
            elapsed_ms=raw.elapsed.total_seconds() * 1000,
        )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
