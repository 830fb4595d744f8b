"""Reconcile daily snapshots back into the article store."""

from __future__ import annotations

import logging
from datetime import date, timedelta

from newsdesk.articles.backup.base import BackupStore
from newsdesk.articles.errors import InvalidRestoreRangeError
from newsdesk.articles.models import ArticleDraft, ArticleSnapshotRecord, RestoreDayResult
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.backup_service import day_bounds

logger = logging.getLogger(__name__)


class ArticleRestoreService:
    """Insert snapshot articles whose links are missing from the store.

    Re-running over the same range restores nothing new.
    """

    def __init__(self, *, repository: SQLiteRepository, store: BackupStore) -> None:
        self.repository = repository
        self.store = store

    def restore(self, from_date: date, to_date: date) -> list[RestoreDayResult]:
        if from_date > to_date:
            raise InvalidRestoreRangeError(from_date, to_date)

        results: list[RestoreDayResult] = []
        day = from_date
        while day <= to_date:
            results.append(self.restore_day(day))
            day += timedelta(days=1)
        return results

    def restore_day(self, day: date) -> RestoreDayResult:
        restore_date, _ = day_bounds(day)
        records = self.store.load(day)
        if not records:
            logger.info("No snapshot records for %s", day.isoformat())
            return RestoreDayResult(restore_date=restore_date, restored_article_ids=[])

        existing = self.repository.find_existing_links({record.original_link for record in records})
        missing = [record for record in records if record.original_link not in existing]
        restored_ids: list[str] = []
        if missing:
            known_interests = self._known_interests(missing)
            restored_ids = self.repository.insert_articles(
                [_to_draft(record, known_interests) for record in missing],
            )

        logger.info(
            "Restored %d of %d snapshot articles for %s",
            len(restored_ids),
            len(records),
            day.isoformat(),
        )
        return RestoreDayResult(restore_date=restore_date, restored_article_ids=restored_ids)

    def _known_interests(self, records: list[ArticleSnapshotRecord]) -> set[str]:
        referenced = {record.interest_id for record in records if record.interest_id}
        return {
            interest_id for interest_id in referenced if self.repository.interest_exists(interest_id)
        }


def _to_draft(record: ArticleSnapshotRecord, known_interests: set[str]) -> ArticleDraft:
    # Interests deleted since the snapshot leave the restored article unassigned.
    interest_id = record.interest_id if record.interest_id in known_interests else None
    return ArticleDraft(
        interest_id=interest_id,
        source=record.source,
        original_link=record.original_link,
        title=record.title,
        summary=record.summary,
        published_at=record.published_at,
        comment_count=record.comment_count,
        view_count=record.view_count,
    )
