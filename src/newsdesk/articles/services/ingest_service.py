"""Batch ingestion with link-based deduplication."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from newsdesk.articles.errors import InterestNotFoundError
from newsdesk.articles.models import (
    MAX_LINK_CHARS,
    MAX_SOURCE_CHARS,
    ArticleDraft,
    ArticleSaveCandidate,
    IngestionResult,
)
from newsdesk.articles.repository import SQLiteRepository

logger = logging.getLogger(__name__)


class ArticleIngestionService:
    """Persist the net-new part of one fetched batch for one interest."""

    def __init__(self, repository: SQLiteRepository) -> None:
        self.repository = repository

    def ingest(
        self,
        records: Sequence[ArticleSaveCandidate],
        interest_id: str | None,
    ) -> IngestionResult:
        result = IngestionResult(received_count=len(records))
        if not records:
            return result
        if interest_id is None or not self.repository.interest_exists(interest_id):
            raise InterestNotFoundError(interest_id)

        drafts: list[ArticleDraft] = []
        seen_links: set[str] = set()
        for record in records:
            link = (record.original_link or "").strip()
            if not link or len(link) > MAX_LINK_CHARS:
                result.invalid_count += 1
                continue
            if link in seen_links:
                result.duplicate_count += 1
                continue
            seen_links.add(link)
            drafts.append(_to_draft(record, link=link, interest_id=interest_id))

        if not drafts:
            logger.info("Ingestion batch has no valid records (%d invalid)", result.invalid_count)
            return result

        existing = self.repository.find_existing_links(seen_links)
        new_drafts = [draft for draft in drafts if draft.original_link not in existing]
        if new_drafts:
            result.stored_ids = self.repository.insert_articles(new_drafts)
        result.duplicate_count += len(drafts) - result.stored_count

        logger.info(
            "Ingested batch for interest %s: stored=%d duplicates=%d invalid=%d",
            interest_id,
            result.stored_count,
            result.duplicate_count,
            result.invalid_count,
        )
        return result


def _to_draft(record: ArticleSaveCandidate, *, link: str, interest_id: str) -> ArticleDraft:
    return ArticleDraft(
        interest_id=interest_id,
        source=record.source.strip()[:MAX_SOURCE_CHARS],
        original_link=link,
        title=record.title,
        summary=record.summary,
        published_at=record.published_at,
    )
