"""Text normalization shared by fetchers."""

from __future__ import annotations

import html
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from newsdesk.articles.storage.common import utc_now

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def html_to_text(raw_html: str | None) -> str:
    """Convert HTML markup into normalized plain text."""

    if not raw_html:
        return ""
    no_scripts = _SCRIPT_STYLE_RE.sub(" ", raw_html)
    stripped = _TAG_RE.sub(" ", no_scripts)
    unescaped = html.unescape(stripped)
    normalized = _WHITESPACE_RE.sub(" ", unescaped)
    return normalized.strip()


def matches_keywords(keywords: Sequence[str], *texts: str) -> bool:
    """Case-insensitive substring match of any keyword in any text.

    No keywords means no filtering.
    """

    needles = [keyword.strip().casefold() for keyword in keywords if keyword.strip()]
    if not needles:
        return True
    haystacks = [text.casefold() for text in texts if text]
    return any(needle in haystack for needle in needles for haystack in haystacks)


def parse_published_at(raw_value: str | None) -> datetime:
    """Parse RFC-822 or ISO-8601 dates; unparseable input falls back to now."""

    if not raw_value:
        return utc_now()

    try:
        parsed = parsedate_to_datetime(raw_value)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)
    except (TypeError, ValueError):
        pass

    try:
        iso = datetime.fromisoformat(raw_value)
        if iso.tzinfo is None:
            return iso.replace(tzinfo=UTC)
        return iso.astimezone(UTC)
    except ValueError:
        return utc_now()
