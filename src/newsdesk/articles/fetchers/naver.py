"""Naver news search API fetcher."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from newsdesk.articles.fetchers.base import DEFAULT_TIMEOUT_SECONDS, build_http_client
from newsdesk.articles.fetchers.cleaning import html_to_text, parse_published_at
from newsdesk.articles.models import ArticleSaveCandidate

logger = logging.getLogger(__name__)

NAVER_NEWS_SEARCH_URL = "https://openapi.naver.com/v1/search/news.json"
NAVER_SOURCE_NAME = "Naver"
PAGE_SIZE = 100
# The API rejects start offsets above this value.
MAX_START = 1000


class NaverNewsFetcher:
    """Query the Naver news search API once per keyword, newest first."""

    name = NAVER_SOURCE_NAME

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        max_items: int = 1000,
        client: httpx.Client | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.max_items = max_items
        self._client = client or build_http_client(timeout_seconds=timeout_seconds)
        self._headers = {
            "X-Naver-Client-Id": client_id,
            "X-Naver-Client-Secret": client_secret,
        }

    def fetch(self, interest_id: str, keywords: Sequence[str]) -> list[ArticleSaveCandidate]:
        results: list[ArticleSaveCandidate] = []
        for keyword in keywords:
            query = keyword.strip()
            if query:
                results.extend(self._fetch_keyword(interest_id, query))
        return results

    def close(self) -> None:
        self._client.close()

    def _fetch_keyword(self, interest_id: str, query: str) -> list[ArticleSaveCandidate]:
        results: list[ArticleSaveCandidate] = []
        start = 1
        while start <= min(self.max_items, MAX_START):
            display = min(PAGE_SIZE, self.max_items - start + 1)
            items = self._request_page(query=query, start=start, display=display)
            if items is None:
                break
            results.extend(_to_candidate(item, interest_id=interest_id) for item in items)
            if len(items) < display:
                break
            start += display
        logger.info("Naver returned %d items for keyword %s", len(results), query)
        return results

    def _request_page(self, *, query: str, start: int, display: int) -> list[dict] | None:
        try:
            response = self._client.get(
                NAVER_NEWS_SEARCH_URL,
                params={"query": query, "display": display, "start": start, "sort": "date"},
                headers=self._headers,
            )
        except httpx.TimeoutException:
            logger.warning("Timeout querying Naver for %s (start=%d)", query, start)
            return None
        except httpx.HTTPError as error:
            logger.warning("HTTP error querying Naver for %s: %s", query, error)
            return None
        if not response.is_success:
            logger.warning("Naver answered HTTP %d for %s", response.status_code, query)
            return None

        try:
            payload = response.json()
        except ValueError as error:
            logger.warning("Malformed Naver payload for %s: %s", query, error)
            return None
        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            logger.warning("Naver payload for %s has no items list", query)
            return None
        return [item for item in items if isinstance(item, dict)]


def _to_candidate(item: dict, *, interest_id: str) -> ArticleSaveCandidate:
    link = item.get("originallink") or item.get("link")
    return ArticleSaveCandidate(
        interest_id=interest_id,
        source=NAVER_SOURCE_NAME,
        original_link=str(link) if link else None,
        title=html_to_text(item.get("title")),
        summary=html_to_text(item.get("description")),
        published_at=parse_published_at(item.get("pubDate")),
    )
