from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime
from pathlib import Path

import allure
import pytest

from newsdesk.articles.backup import LocalBackupStore
from newsdesk.articles.errors import BackupLoadError, InvalidRestoreRangeError
from newsdesk.articles.models import (
    ArticleDraft,
    ArticleSearchRequest,
    ArticleSnapshotRecord,
    InterestView,
)
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.backup_service import ArticleBackupService
from newsdesk.articles.services.restore_service import ArticleRestoreService

pytestmark = [
    allure.epic("Article Pipeline"),
    allure.feature("Snapshot Restore"),
]

DAY = date(2025, 7, 1)
PUBLISHED_AT = datetime(2025, 7, 1, 10, 0, tzinfo=UTC)


class _RecordingStore:
    def __init__(self, snapshots: dict[date, list[ArticleSnapshotRecord]] | None = None) -> None:
        self.snapshots = snapshots or {}
        self.loaded: list[date] = []

    def load(self, day: date) -> list[ArticleSnapshotRecord]:
        self.loaded.append(day)
        return list(self.snapshots.get(day, []))

    def save(self, day: date, records: Sequence[ArticleSnapshotRecord]) -> None:
        self.snapshots[day] = list(records)


class _BrokenStore(_RecordingStore):
    def load(self, day: date) -> list[ArticleSnapshotRecord]:
        raise BackupLoadError(f"articles-{day.isoformat()}.json")


def _snapshot(link: str, *, interest_id: str | None = None) -> ArticleSnapshotRecord:
    return ArticleSnapshotRecord(
        article_id="6f1c1e9a-3f53-4f0e-9a57-0b4f1f4d7a10",
        source="Naver",
        original_link=link,
        title="Snapshot title",
        summary="Snapshot summary",
        published_at=PUBLISHED_AT,
        comment_count=3,
        view_count=7,
        interest_id=interest_id,
    )


def _live_links(repository: SQLiteRepository) -> list[str]:
    page = repository.search_articles(ArticleSearchRequest(), limit=100)
    return sorted(article.original_link for article in page)


def test_restore_reinserts_only_the_wiped_article(
    tmp_path: Path,
    repository: SQLiteRepository,
    interest: InterestView,
    store_articles: Callable[..., list[str]],
    make_draft: Callable[..., ArticleDraft],
) -> None:
    _, wiped, _ = store_articles(
        *(
            make_draft(f"https://news.example/{name}", interest_id=interest.interest_id, published_at=PUBLISHED_AT)
            for name in ("A", "B", "C")
        ),
    )
    store = LocalBackupStore(tmp_path / "backup")
    ArticleBackupService(repository=repository, store=store).backup_day(DAY)
    repository.hard_delete(wiped)

    (result,) = ArticleRestoreService(repository=repository, store=store).restore(DAY, DAY)

    assert result.restored_article_count == 1
    assert result.restore_date == datetime(2025, 7, 1, tzinfo=UTC)
    restored = repository.get_article(result.restored_article_ids[0])
    assert restored is not None
    assert restored.original_link == "https://news.example/B"
    assert restored.interest_id == interest.interest_id
    assert _live_links(repository) == [
        "https://news.example/A",
        "https://news.example/B",
        "https://news.example/C",
    ]
    assert result.to_payload()["restoredArticleCount"] == 1


def test_restore_twice_restores_nothing_new(repository: SQLiteRepository) -> None:
    store = _RecordingStore(
        {DAY: [_snapshot("https://news.example/A"), _snapshot("https://news.example/B")]},
    )
    service = ArticleRestoreService(repository=repository, store=store)

    first = service.restore(DAY, DAY)
    second = service.restore(DAY, DAY)

    assert [result.restored_article_count for result in first] == [2]
    assert [result.restored_article_count for result in second] == [0]
    assert _live_links(repository) == ["https://news.example/A", "https://news.example/B"]


def test_restore_returns_one_result_per_day_including_empty_days(
    repository: SQLiteRepository,
) -> None:
    store = _RecordingStore({date(2025, 7, 2): [_snapshot("https://news.example/A")]})

    results = ArticleRestoreService(repository=repository, store=store).restore(
        date(2025, 7, 1),
        date(2025, 7, 3),
    )

    assert [result.restore_date.date() for result in results] == [
        date(2025, 7, 1),
        date(2025, 7, 2),
        date(2025, 7, 3),
    ]
    assert [result.restored_article_count for result in results] == [0, 1, 0]


def test_restore_rejects_inverted_range_before_loading(repository: SQLiteRepository) -> None:
    store = _RecordingStore()

    with pytest.raises(InvalidRestoreRangeError):
        ArticleRestoreService(repository=repository, store=store).restore(
            date(2025, 7, 3),
            date(2025, 7, 1),
        )

    assert store.loaded == []


def test_restore_leaves_unknown_interest_unassigned(
    repository: SQLiteRepository,
    interest: InterestView,
) -> None:
    store = _RecordingStore(
        {
            DAY: [
                _snapshot("https://news.example/known", interest_id=interest.interest_id),
                _snapshot("https://news.example/orphan", interest_id="deleted-interest"),
            ],
        },
    )

    (result,) = ArticleRestoreService(repository=repository, store=store).restore(DAY, DAY)

    restored = {
        article.original_link: article
        for article in (repository.get_article(article_id) for article_id in result.restored_article_ids)
        if article is not None
    }
    assert restored["https://news.example/known"].interest_id == interest.interest_id
    assert restored["https://news.example/orphan"].interest_id is None
    assert restored["https://news.example/orphan"].view_count == 7


def test_restore_does_not_resurrect_soft_deleted_article(
    repository: SQLiteRepository,
    store_articles: Callable[..., list[str]],
    make_draft: Callable[..., ArticleDraft],
) -> None:
    (article_id,) = store_articles(make_draft("https://news.example/A", published_at=PUBLISHED_AT))
    repository.soft_delete(article_id)
    store = _RecordingStore({DAY: [_snapshot("https://news.example/A")]})

    (result,) = ArticleRestoreService(repository=repository, store=store).restore(DAY, DAY)

    assert result.restored_article_count == 0


def test_restore_propagates_load_failures(repository: SQLiteRepository) -> None:
    with pytest.raises(BackupLoadError):
        ArticleRestoreService(repository=repository, store=_BrokenStore()).restore(DAY, DAY)
