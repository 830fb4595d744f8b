"""Domain models for collection, search, backup and restore."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID

from newsdesk.articles.errors import InvalidCursorError

MAX_SOURCE_CHARS = 30
MAX_LINK_CHARS = 500


class SortKey(str, Enum):
    """Supported article sort keys."""

    PUBLISH_DATE = "publishDate"
    COMMENT_COUNT = "commentCount"
    VIEW_COUNT = "viewCount"


class SortDirection(str, Enum):
    """Sort direction for article search."""

    ASC = "ASC"
    DESC = "DESC"


DEFAULT_DIRECTIONS: dict[SortKey, SortDirection] = {
    SortKey.PUBLISH_DATE: SortDirection.DESC,
    SortKey.COMMENT_COUNT: SortDirection.DESC,
    SortKey.VIEW_COUNT: SortDirection.DESC,
}


@dataclass(slots=True)
class ArticleSaveCandidate:
    """Article payload produced by a fetcher, not yet persisted."""

    interest_id: str | None
    source: str
    original_link: str | None
    title: str
    summary: str
    published_at: datetime


@dataclass(slots=True)
class ArticleDraft:
    """Validated article row ready for insertion."""

    interest_id: str | None
    source: str
    original_link: str
    title: str
    summary: str
    published_at: datetime
    comment_count: int = 0
    view_count: int = 0


@dataclass(slots=True)
class ArticleView:
    """Read projection of a stored article."""

    article_id: str
    interest_id: str | None
    source: str
    original_link: str
    title: str
    summary: str
    published_at: datetime
    comment_count: int
    view_count: int
    viewed_by_me: bool = False

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.article_id,
            "interestId": self.interest_id,
            "source": self.source,
            "sourceUrl": self.original_link,
            "title": self.title,
            "publishDate": self.published_at.isoformat(),
            "summary": self.summary,
            "commentCount": self.comment_count,
            "viewCount": self.view_count,
            "viewedByMe": self.viewed_by_me,
        }


@dataclass(slots=True)
class ArticleSnapshotRecord:
    """Self-contained article projection stored in daily backup snapshots."""

    article_id: str
    source: str
    original_link: str
    title: str
    summary: str
    published_at: datetime
    comment_count: int = 0
    view_count: int = 0
    interest_id: str | None = None

    @classmethod
    def from_article(cls, article: ArticleView) -> ArticleSnapshotRecord:
        return cls(
            article_id=article.article_id,
            source=article.source,
            original_link=article.original_link,
            title=article.title,
            summary=article.summary,
            published_at=article.published_at,
            comment_count=article.comment_count,
            view_count=article.view_count,
            interest_id=article.interest_id,
        )

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.article_id,
            "interestId": self.interest_id,
            "source": self.source,
            "sourceUrl": self.original_link,
            "title": self.title,
            "publishDate": self.published_at.isoformat(),
            "summary": self.summary,
            "commentCount": self.comment_count,
            "viewCount": self.view_count,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> ArticleSnapshotRecord:
        published_raw = payload["publishDate"]
        if not isinstance(published_raw, str):
            raise TypeError("Snapshot publishDate must be an ISO string")
        published_at = datetime.fromisoformat(published_raw)
        if published_at.tzinfo is None:
            published_at = published_at.replace(tzinfo=UTC)
        interest_id = payload.get("interestId")
        return cls(
            article_id=str(payload["id"]),
            source=str(payload["source"]),
            original_link=str(payload["sourceUrl"]),
            title=str(payload.get("title") or ""),
            summary=str(payload.get("summary") or ""),
            published_at=published_at,
            comment_count=int(payload.get("commentCount") or 0),  # type: ignore[arg-type]
            view_count=int(payload.get("viewCount") or 0),  # type: ignore[arg-type]
            interest_id=str(interest_id) if interest_id else None,
        )


@dataclass(slots=True)
class SearchCursor:
    """Position of the last-seen row in one sort order."""

    article_id: str
    after: datetime | None = None


@dataclass(slots=True)
class ArticleSearchRequest:
    """Filters, ordering and cursor for one article search."""

    keyword: str | None = None
    interest_id: str | None = None
    source_in: tuple[str, ...] = ()
    publish_date_from: datetime | None = None
    publish_date_to: datetime | None = None
    order_by: SortKey = SortKey.PUBLISH_DATE
    direction: SortDirection | None = None
    cursor: str | None = None
    after: datetime | None = None
    limit: int = 50
    viewer_id: str | None = None

    @property
    def effective_direction(self) -> SortDirection:
        return self.direction or DEFAULT_DIRECTIONS[self.order_by]

    def parsed_cursor(self) -> SearchCursor | None:
        """Validate the opaque cursor pair; a malformed cursor fails the request."""

        if self.cursor is None or not self.cursor.strip():
            return None
        article_id = parse_article_id(self.cursor, field_name="cursor")
        if self.order_by == SortKey.PUBLISH_DATE:
            if self.after is None:
                raise InvalidCursorError(
                    "Parameter 'after' is required with 'cursor' when ordering by publishDate.",
                )
            return SearchCursor(article_id=article_id, after=self.after)
        return SearchCursor(article_id=article_id)


@dataclass(slots=True)
class ArticlePage:
    """One page of search results with cursor for the next page."""

    content: list[ArticleView]
    next_cursor: str | None
    next_after: datetime | None
    has_next: bool
    total_elements: int

    @property
    def size(self) -> int:
        return len(self.content)

    def to_payload(self) -> dict[str, object]:
        return {
            "content": [article.to_payload() for article in self.content],
            "nextCursor": self.next_cursor,
            "nextAfter": self.next_after.isoformat() if self.next_after is not None else None,
            "size": self.size,
            "totalElements": self.total_elements,
            "hasNext": self.has_next,
        }


@dataclass(slots=True)
class IngestionResult:
    """Outcome of one ingestion batch."""

    received_count: int = 0
    invalid_count: int = 0
    duplicate_count: int = 0
    stored_ids: list[str] = field(default_factory=list)

    @property
    def stored_count(self) -> int:
        return len(self.stored_ids)


@dataclass(slots=True)
class CollectionSummary:
    """Aggregated counters of one collection run."""

    interests_count: int = 0
    fetch_calls: int = 0
    failed_fetches: int = 0
    stored_count: int = 0
    stored_by_interest: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class RestoreDayResult:
    """Per-day result of a snapshot restore."""

    restore_date: datetime
    restored_article_ids: list[str]

    @property
    def restored_article_count(self) -> int:
        return len(self.restored_article_ids)

    def to_payload(self) -> dict[str, object]:
        return {
            "restoreDate": self.restore_date.isoformat(),
            "restoredArticleIds": list(self.restored_article_ids),
            "restoredArticleCount": self.restored_article_count,
        }


@dataclass(slots=True)
class BackupResult:
    """Outcome of one daily backup."""

    backup_date: date
    article_count: int


@dataclass(slots=True)
class InterestView:
    """Interest with its collection keywords."""

    interest_id: str
    name: str
    keywords: list[str]


@dataclass(slots=True)
class ArticleViewRecord:
    """Registered view of an article by one viewer."""

    view_id: str
    viewer_id: str
    viewed_at: datetime
    article: ArticleView

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.view_id,
            "viewedBy": self.viewer_id,
            "createdAt": self.viewed_at.isoformat(),
            "articleId": self.article.article_id,
            "source": self.article.source,
            "sourceUrl": self.article.original_link,
            "articleTitle": self.article.title,
            "articlePublishedDate": self.article.published_at.isoformat(),
            "articleSummary": self.article.summary,
            "articleCommentCount": self.article.comment_count,
            "articleViewCount": self.article.view_count,
        }


def parse_article_id(value: str, *, field_name: str = "id") -> str:
    """Normalize an article identifier or raise ``InvalidCursorError``."""

    try:
        return str(UUID(value.strip()))
    except (AttributeError, ValueError) as error:
        raise InvalidCursorError(f"Malformed {field_name}: {value!r}") from error


def parse_after(value: str | None) -> datetime | None:
    """Parse the ``after`` cursor half; naive timestamps are taken as UTC."""

    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as error:
        raise InvalidCursorError(f"Malformed after: {value!r}") from error
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
