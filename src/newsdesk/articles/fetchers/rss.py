"""RSS/Atom feed fetcher with keyword filtering."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx
from defusedxml import ElementTree

from newsdesk.articles.fetchers.base import DEFAULT_TIMEOUT_SECONDS, build_http_client
from newsdesk.articles.fetchers.cleaning import html_to_text, matches_keywords, parse_published_at
from newsdesk.articles.models import ArticleSaveCandidate

logger = logging.getLogger(__name__)


class RssFetcher:
    """Fetch one feed and keep items mentioning any of the keywords."""

    def __init__(
        self,
        source_name: str,
        feed_url: str,
        *,
        client: httpx.Client | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.name = source_name
        self.feed_url = feed_url
        self._client = client or build_http_client(timeout_seconds=timeout_seconds)

    def fetch(self, interest_id: str, keywords: Sequence[str]) -> list[ArticleSaveCandidate]:
        raw_xml = self._request_feed()
        if raw_xml is None:
            return []
        try:
            root = ElementTree.fromstring(raw_xml)
        except ElementTree.ParseError as error:
            logger.warning("Malformed feed %s from %s: %s", self.name, self.feed_url, error)
            return []

        candidates = [
            candidate
            for candidate in _parse_items(root, source_name=self.name, interest_id=interest_id)
            if matches_keywords(keywords, candidate.title, candidate.summary)
        ]
        logger.info(
            "Feed %s matched %d items for keywords %s",
            self.name,
            len(candidates),
            ", ".join(keywords),
        )
        return candidates

    def close(self) -> None:
        self._client.close()

    def _request_feed(self) -> str | None:
        try:
            response = self._client.get(self.feed_url)
        except httpx.TimeoutException:
            logger.warning("Timeout fetching feed %s (%s)", self.name, self.feed_url)
            return None
        except httpx.HTTPError as error:
            logger.warning("HTTP error fetching feed %s (%s): %s", self.name, self.feed_url, error)
            return None
        if not response.is_success:
            logger.warning(
                "Feed %s (%s) answered HTTP %d",
                self.name,
                self.feed_url,
                response.status_code,
            )
            return None
        return response.text


def _parse_items(
    root: ElementTree.Element,
    *,
    source_name: str,
    interest_id: str,
) -> list[ArticleSaveCandidate]:
    results: list[ArticleSaveCandidate] = []
    for item in root.iter():
        tag = _local_name(item.tag)
        if tag == "item":
            link = _child_text(item, "link")
            summary = _child_text(item, "description")
            raw_published_at = _child_text(item, "pubDate") or _child_text(item, "date")
        elif tag == "entry":
            link = _atom_link(item)
            summary = _child_text(item, "summary") or _child_text(item, "content")
            raw_published_at = _child_text(item, "published") or _child_text(item, "updated")
        else:
            continue

        results.append(
            ArticleSaveCandidate(
                interest_id=interest_id,
                source=source_name,
                original_link=link,
                title=html_to_text(_child_text(item, "title")),
                summary=html_to_text(summary),
                published_at=parse_published_at(raw_published_at),
            ),
        )
    return results


def _atom_link(entry: ElementTree.Element) -> str | None:
    for child in entry:
        if _local_name(child.tag) != "link":
            continue
        rel = child.attrib.get("rel", "").strip().lower()
        href = child.attrib.get("href", "").strip()
        if href and (not rel or rel == "alternate"):
            return href
    return None


def _child_text(element: ElementTree.Element, name: str) -> str | None:
    target = name.lower()
    for child in element:
        if _local_name(child.tag) != target:
            continue
        full_text = "".join(child.itertext()).strip()
        if full_text:
            return full_text
    return None


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    if "}" in tag:
        return tag.rsplit("}", 1)[1].lower()
    return tag.lower()
