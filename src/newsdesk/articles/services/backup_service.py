"""Daily snapshot of published articles."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta

from newsdesk.articles.backup.base import BackupStore
from newsdesk.articles.models import ArticleSnapshotRecord, BackupResult
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.storage.common import utc_now

logger = logging.getLogger(__name__)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC ``[day 00:00, day+1 00:00)`` interval."""

    start = datetime.combine(day, time.min, tzinfo=UTC)
    return start, start + timedelta(days=1)


class ArticleBackupService:
    """Export non-deleted articles of one publication day to the snapshot store."""

    def __init__(
        self,
        *,
        repository: SQLiteRepository,
        store: BackupStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.repository = repository
        self.store = store
        self.clock = clock

    def backup_day(self, day: date) -> BackupResult:
        start, end = day_bounds(day)
        articles = self.repository.list_articles_published_between(start, end)
        records = [ArticleSnapshotRecord.from_article(article) for article in articles]
        logger.info("Backing up %d articles published on %s", len(records), day.isoformat())
        self.store.save(day, records)
        logger.info("Backup for %s finished", day.isoformat())
        return BackupResult(backup_date=day, article_count=len(records))

    def backup_yesterday(self) -> BackupResult | None:
        """Scheduled entry point; failures are logged, never raised."""

        yesterday = self.clock().astimezone(UTC).date() - timedelta(days=1)
        try:
            return self.backup_day(yesterday)
        except Exception:  # noqa: BLE001
            logger.exception("Backup for %s failed", yesterday.isoformat())
            return None
