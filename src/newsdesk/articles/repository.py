"""SQLModel-backed storage facade for articles, interests and views."""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, delete, select

from newsdesk.articles.errors import ArticleNotFoundError, DuplicateArticleViewError
from newsdesk.articles.models import (
    ArticleDraft,
    ArticleSearchRequest,
    ArticleView,
    ArticleViewRecord,
    InterestView,
)
from newsdesk.articles.search import build_filters, build_ordering
from newsdesk.articles.storage.alembic_runner import upgrade_head
from newsdesk.articles.storage.common import (
    build_sqlite_engine,
    to_db_datetime,
    to_utc_aware_datetime,
    utc_now,
)
from newsdesk.articles.storage.sqlmodel_models import (
    ORIGINAL_LINK_CONSTRAINT,
    Article,
    ArticleViewRow,
    Interest,
    InterestKeyword,
)

logger = logging.getLogger(__name__)
MASKED_TITLE = "[deleted article]"
MASKED_SUMMARY = "This article has been deleted."


class SQLiteRepository:
    """Facade that persists articles using SQLModel and Alembic."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.engine = build_sqlite_engine(db_path=db_path)

    def close(self) -> None:
        self.engine.dispose()

    def init_schema(self) -> None:
        upgrade_head(self.db_path)

    def add_interest(self, name: str, keywords: Sequence[str]) -> InterestView:
        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("Interest name must not be empty.")
        unique_keywords = list(dict.fromkeys(kw.strip() for kw in keywords if kw.strip()))

        interest_id = str(uuid4())
        with Session(self.engine) as session:
            session.add(
                Interest(
                    id=interest_id,
                    name=normalized_name,
                    created_at=to_db_datetime(utc_now()),
                ),
            )
            # Parent row must exist before keyword rows reference it.
            session.flush()
            session.add_all(
                InterestKeyword(interest_id=interest_id, name=keyword)
                for keyword in unique_keywords
            )
            session.commit()
        return InterestView(interest_id=interest_id, name=normalized_name, keywords=unique_keywords)

    def list_interests(self) -> list[InterestView]:
        with Session(self.engine) as session:
            interests = session.exec(select(Interest).order_by(col(Interest.name))).all()
            keyword_rows = session.exec(
                select(InterestKeyword).order_by(col(InterestKeyword.id)),
            ).all()

        keywords_by_interest: dict[str, list[str]] = {}
        for row in keyword_rows:
            keywords_by_interest.setdefault(row.interest_id, []).append(row.name)
        return [
            InterestView(
                interest_id=interest.id,
                name=interest.name,
                keywords=keywords_by_interest.get(interest.id, []),
            )
            for interest in interests
        ]

    def interest_exists(self, interest_id: str) -> bool:
        with Session(self.engine) as session:
            return session.get(Interest, interest_id) is not None

    def find_existing_links(self, links: Collection[str]) -> set[str]:
        """Return the subset of ``links`` already stored, deleted rows included."""

        if not links:
            return set()
        with Session(self.engine) as session:
            rows = session.exec(
                select(Article.original_link).where(col(Article.original_link).in_(set(links))),
            ).all()
        return set(rows)

    def insert_articles(self, drafts: Sequence[ArticleDraft]) -> list[str]:
        """Insert drafts in one batch and return the ids of stored rows.

        A unique-link conflict means a concurrent batch stored some links first:
        the batch is retried without those links. Other integrity errors propagate.
        """

        pending = _first_per_link(drafts)
        while pending:
            rows = [_to_article_row(draft) for draft in pending]
            article_ids = [row.id for row in rows]
            with Session(self.engine) as session:
                session.add_all(rows)
                try:
                    session.commit()
                    return article_ids
                except IntegrityError as error:
                    session.rollback()
                    if not _is_link_conflict(error):
                        raise
                    conflict = error

            existing = self.find_existing_links([draft.original_link for draft in pending])
            remaining = [draft for draft in pending if draft.original_link not in existing]
            if len(remaining) == len(pending):
                raise conflict
            logger.warning(
                "Skipped %d articles already stored by a concurrent batch",
                len(pending) - len(remaining),
            )
            pending = remaining
        return []

    def search_articles(self, request: ArticleSearchRequest, *, limit: int) -> list[ArticleView]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Article)
                .where(*build_filters(request))
                .order_by(*build_ordering(request))
                .limit(limit),
            ).all()
        return [_to_article_view(row) for row in rows]

    def count_articles(self, request: ArticleSearchRequest) -> int:
        with Session(self.engine) as session:
            return session.exec(
                select(func.count())
                .select_from(Article)
                .where(*build_filters(request, include_cursor=False)),
            ).one()

    def list_sources(self) -> list[str]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Article.source)
                .where(col(Article.is_deleted) == False)  # noqa: E712
                .distinct()
                .order_by(col(Article.source)),
            ).all()
        return list(rows)

    def list_articles_published_between(self, start: datetime, end: datetime) -> list[ArticleView]:
        """Non-deleted articles published in ``[start, end)``."""

        with Session(self.engine) as session:
            rows = session.exec(
                select(Article)
                .where(
                    col(Article.is_deleted) == False,  # noqa: E712
                    col(Article.published_at) >= to_db_datetime(start),
                    col(Article.published_at) < to_db_datetime(end),
                )
                .order_by(col(Article.published_at), col(Article.id)),
            ).all()
        return [_to_article_view(row) for row in rows]

    def get_article(self, article_id: str) -> ArticleView | None:
        with Session(self.engine) as session:
            row = session.get(Article, article_id)
            if row is None:
                return None
            return _to_article_view(row)

    def viewed_article_ids(self, viewer_id: str, article_ids: Collection[str]) -> set[str]:
        if not article_ids:
            return set()
        with Session(self.engine) as session:
            rows = session.exec(
                select(ArticleViewRow.article_id).where(
                    ArticleViewRow.viewed_by == viewer_id,
                    col(ArticleViewRow.article_id).in_(set(article_ids)),
                ),
            ).all()
        return set(rows)

    def register_view(self, viewer_id: str, article_id: str) -> ArticleViewRecord:
        """Record one view and bump the article's counter in the same transaction."""

        view_id = str(uuid4())
        viewed_at = utc_now()
        with Session(self.engine) as session:
            article = session.get(Article, article_id)
            if article is None or article.is_deleted:
                raise ArticleNotFoundError(article_id)
            try:
                session.add(
                    ArticleViewRow(
                        id=view_id,
                        article_id=article_id,
                        viewed_by=viewer_id,
                        viewed_at=to_db_datetime(viewed_at),
                    ),
                )
                session.flush()
                session.exec(
                    sa_update(Article)
                    .where(col(Article.id) == article_id)
                    .values(view_count=col(Article.view_count) + 1),
                )
                session.commit()
            except IntegrityError as error:
                session.rollback()
                raise DuplicateArticleViewError(viewer_id, article_id) from error

        stored = self.get_article(article_id)
        if stored is None:
            raise ArticleNotFoundError(article_id)
        return ArticleViewRecord(
            view_id=view_id,
            viewer_id=viewer_id,
            viewed_at=viewed_at,
            article=stored,
        )

    def remove_view(self, viewer_id: str, article_id: str) -> bool:
        with Session(self.engine) as session:
            result = session.exec(
                delete(ArticleViewRow).where(
                    col(ArticleViewRow.viewed_by) == viewer_id,
                    col(ArticleViewRow.article_id) == article_id,
                ),
            )
            if result.rowcount == 0:
                session.rollback()
                return False
            session.exec(
                sa_update(Article)
                .where(col(Article.id) == article_id, col(Article.view_count) > 0)
                .values(view_count=col(Article.view_count) - 1),
            )
            session.commit()
        return True

    def soft_delete(self, article_id: str) -> None:
        """Hide an article; its link stays reserved so it is never re-ingested."""

        with Session(self.engine) as session:
            row = session.get(Article, article_id)
            if row is None or row.is_deleted:
                raise ArticleNotFoundError(article_id)
            row.is_deleted = True
            row.title = MASKED_TITLE
            row.summary = MASKED_SUMMARY
            session.add(row)
            session.commit()

    def hard_delete(self, article_id: str) -> None:
        with Session(self.engine) as session:
            row = session.get(Article, article_id)
            if row is None:
                raise ArticleNotFoundError(article_id)
            session.exec(delete(ArticleViewRow).where(col(ArticleViewRow.article_id) == article_id))
            session.delete(row)
            session.commit()


def _to_article_row(draft: ArticleDraft) -> Article:
    return Article(
        id=str(uuid4()),
        interest_id=draft.interest_id,
        source=draft.source,
        original_link=draft.original_link,
        title=draft.title,
        summary=draft.summary,
        published_at=to_db_datetime(draft.published_at),
        comment_count=draft.comment_count,
        view_count=draft.view_count,
        is_deleted=False,
        created_at=to_db_datetime(utc_now()),
    )


def _to_article_view(row: Article) -> ArticleView:
    return ArticleView(
        article_id=row.id,
        interest_id=row.interest_id,
        source=row.source,
        original_link=row.original_link,
        title=row.title,
        summary=row.summary,
        published_at=to_utc_aware_datetime(row.published_at),
        comment_count=row.comment_count,
        view_count=row.view_count,
    )


def _is_link_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return "articles.original_link" in message or ORIGINAL_LINK_CONSTRAINT in message


def _first_per_link(drafts: Sequence[ArticleDraft]) -> list[ArticleDraft]:
    seen: set[str] = set()
    unique: list[ArticleDraft] = []
    for draft in drafts:
        if draft.original_link in seen:
            continue
        seen.add(draft.original_link)
        unique.append(draft)
    return unique
