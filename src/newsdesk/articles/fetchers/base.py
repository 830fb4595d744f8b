"""Common fetcher contract and HTTP client policy."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import httpx

from newsdesk.articles.models import ArticleSaveCandidate

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; NewsdeskBot/0.1)"


class Fetcher(Protocol):
    """Interface for external news sources."""

    name: str

    def fetch(self, interest_id: str, keywords: Sequence[str]) -> list[ArticleSaveCandidate]:
        """Return candidates matching ``keywords``; expected failures yield ``[]``."""
        raise NotImplementedError

    def close(self) -> None:
        """Release the underlying HTTP client."""
        raise NotImplementedError


def build_http_client(
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Client with a bounded timeout so one slow source cannot stall a collection cycle."""

    base_headers = {"User-Agent": DEFAULT_USER_AGENT}
    if headers:
        base_headers.update(headers)
    return httpx.Client(
        timeout=httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 10.0)),
        headers=base_headers,
        transport=transport,
        follow_redirects=True,
    )
