"""Controllers for article and interest CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path

from newsdesk.articles.backup import build_backup_store
from newsdesk.articles.fetchers import Fetcher, build_fetchers
from newsdesk.articles.models import (
    ArticleSearchRequest,
    ArticleView,
    SortDirection,
    SortKey,
    parse_after,
)
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.backup_service import ArticleBackupService
from newsdesk.articles.services.collect_service import ArticleCollectionService
from newsdesk.articles.services.restore_service import ArticleRestoreService
from newsdesk.articles.services.search_service import ArticleSearchService
from newsdesk.articles.services.view_service import ArticleModerationService
from newsdesk.articles.storage.common import utc_now
from newsdesk.config import Settings
from newsdesk.scheduler import build_scheduler, run_collection


@dataclass(slots=True)
class CollectCommand:
    """CLI inputs for one collection run."""

    db_path: Path | None


@dataclass(slots=True)
class SearchCommand:
    """CLI inputs for article search."""

    db_path: Path | None
    keyword: str | None = None
    interest_id: str | None = None
    sources: tuple[str, ...] = ()
    date_from: datetime | None = None
    date_to: datetime | None = None
    order_by: SortKey = SortKey.PUBLISH_DATE
    direction: SortDirection | None = None
    cursor: str | None = None
    after: str | None = None
    limit: int | None = None
    viewer_id: str | None = None


@dataclass(slots=True)
class SourcesCommand:
    """CLI inputs for distinct source listing."""

    db_path: Path | None


@dataclass(slots=True)
class BackupCommand:
    """CLI inputs for a one-day backup; no date means yesterday (UTC)."""

    db_path: Path | None
    day: date | None = None


@dataclass(slots=True)
class RestoreCommand:
    """CLI inputs for snapshot restore."""

    db_path: Path | None
    from_date: date
    to_date: date


@dataclass(slots=True)
class ViewCommand:
    """CLI inputs for view registration."""

    db_path: Path | None
    article_id: str
    viewer_id: str


@dataclass(slots=True)
class DeleteCommand:
    """CLI inputs for soft delete or purge."""

    db_path: Path | None
    article_id: str
    hard: bool = False


@dataclass(slots=True)
class InterestAddCommand:
    """CLI inputs for interest creation."""

    db_path: Path | None
    name: str
    keywords: tuple[str, ...]


@dataclass(slots=True)
class InterestListCommand:
    """CLI inputs for interest listing."""

    db_path: Path | None


@dataclass(slots=True)
class ServeCommand:
    """CLI inputs for the scheduler process."""

    db_path: Path | None
    run_now: bool = False


class ArticlesCliController:
    """Coordinates article command execution."""

    def collect(self, command: CollectCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository, _fetchers(settings) as fetchers:
            service = ArticleCollectionService(repository=repository, fetchers=fetchers)
            summary = service.run()

        lines = [
            "Collection completed: "
            f"interests={summary.interests_count} "
            f"fetch_calls={summary.fetch_calls} "
            f"failed={summary.failed_fetches} "
            f"stored={summary.stored_count}",
        ]
        lines.extend(
            f"  interest={name} stored={count}"
            for name, count in sorted(summary.stored_by_interest.items())
        )
        return lines

    def search(self, command: SearchCommand) -> list[str]:
        settings = _settings(command.db_path)
        request = ArticleSearchRequest(
            keyword=command.keyword,
            interest_id=command.interest_id,
            source_in=command.sources,
            publish_date_from=command.date_from,
            publish_date_to=command.date_to,
            order_by=command.order_by,
            direction=command.direction,
            cursor=command.cursor,
            after=parse_after(command.after),
            limit=command.limit or settings.search.default_limit,
            viewer_id=command.viewer_id,
        )
        with _repository(settings) as repository:
            page = ArticleSearchService(repository, settings.search).search(request)

        lines = [_format_article(article) for article in page.content]
        lines.append(
            f"Page: size={page.size} total={page.total_elements} "
            f"has_next={'yes' if page.has_next else 'no'}",
        )
        if page.next_cursor is not None:
            next_after = page.next_after.isoformat() if page.next_after is not None else "-"
            lines.append(f"Next: cursor={page.next_cursor} after={next_after}")
        return lines

    def sources(self, command: SourcesCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository:
            sources = ArticleSearchService(repository, settings.search).list_sources()
        if not sources:
            return ["No sources."]
        return sources

    def backup(self, command: BackupCommand) -> list[str]:
        settings = _settings(command.db_path)
        day = command.day or (utc_now().date() - timedelta(days=1))
        with _repository(settings) as repository:
            service = ArticleBackupService(
                repository=repository,
                store=build_backup_store(settings.backup),
            )
            result = service.backup_day(day)
        return [
            f"Backup completed: date={result.backup_date.isoformat()} "
            f"articles={result.article_count} backend={settings.backup.backend}",
        ]

    def restore(self, command: RestoreCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository:
            service = ArticleRestoreService(
                repository=repository,
                store=build_backup_store(settings.backup),
            )
            results = service.restore(command.from_date, command.to_date)

        lines = [
            f"restore_date={result.restore_date.date().isoformat()} "
            f"restored={result.restored_article_count}"
            for result in results
        ]
        total = sum(result.restored_article_count for result in results)
        lines.append(f"Restore completed: days={len(results)} restored={total}")
        return lines

    def view(self, command: ViewCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository:
            record = ArticleModerationService(repository).register_view(
                command.viewer_id,
                command.article_id,
            )
        return [
            f"View registered: id={record.view_id} viewer={record.viewer_id} "
            f"article={record.article.article_id} view_count={record.article.view_count}",
        ]

    def delete(self, command: DeleteCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository:
            service = ArticleModerationService(repository)
            if command.hard:
                service.hard_delete(command.article_id)
            else:
                service.soft_delete(command.article_id)
        action = "purged" if command.hard else "deleted"
        return [f"Article {action}: {command.article_id}"]

    def add_interest(self, command: InterestAddCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository:
            interest = repository.add_interest(command.name, command.keywords)
        return [
            f"Interest added: id={interest.interest_id} name={interest.name} "
            f"keywords={', '.join(interest.keywords) or '-'}",
        ]

    def list_interests(self, command: InterestListCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _repository(settings) as repository:
            interests = repository.list_interests()
        if not interests:
            return ["No interests."]
        return [
            f"{interest.interest_id} name={interest.name} "
            f"keywords={', '.join(interest.keywords) or '-'}"
            for interest in interests
        ]

    def serve(self, command: ServeCommand) -> None:
        """Run the blocking scheduler until interrupted."""

        settings = _settings(command.db_path)
        with _repository(settings) as repository, _fetchers(settings) as fetchers:
            collection = ArticleCollectionService(repository=repository, fetchers=fetchers)
            backup = ArticleBackupService(
                repository=repository,
                store=build_backup_store(settings.backup),
            )
            scheduler = build_scheduler(settings=settings, collection=collection, backup=backup)
            if command.run_now:
                run_collection(collection)
            try:
                scheduler.start()
            except (KeyboardInterrupt, SystemExit):
                scheduler.shutdown(wait=False)


def _settings(db_path: Path | None) -> Settings:
    settings = Settings.from_env(db_path=db_path)
    settings.validate()
    return settings


@contextmanager
def _repository(settings: Settings) -> Iterator[SQLiteRepository]:
    repository = SQLiteRepository(settings.db_path)
    try:
        repository.init_schema()
        yield repository
    finally:
        repository.close()


@contextmanager
def _fetchers(settings: Settings) -> Iterator[list[Fetcher]]:
    fetchers = build_fetchers(settings.collection)
    try:
        yield fetchers
    finally:
        for fetcher in fetchers:
            fetcher.close()


def _format_article(article: ArticleView) -> str:
    viewed = " viewed" if article.viewed_by_me else ""
    return (
        f"{article.article_id} {article.published_at.isoformat()} [{article.source}] "
        f"{article.title} comments={article.comment_count} views={article.view_count}{viewed}"
    )
