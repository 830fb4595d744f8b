"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from newsdesk.articles.models import ArticleDraft, ArticleSaveCandidate, InterestView
from newsdesk.articles.repository import SQLiteRepository

DEFAULT_PUBLISHED_AT = datetime(2025, 7, 1, 9, 30, tzinfo=UTC)


@pytest.fixture()
def repository(tmp_path: Path) -> Iterator[SQLiteRepository]:
    repo = SQLiteRepository(tmp_path / "newsdesk.db")
    repo.init_schema()
    yield repo
    repo.close()


@pytest.fixture()
def interest(repository: SQLiteRepository) -> InterestView:
    return repository.add_interest("Economy", ["stocks", "bonds"])


@pytest.fixture()
def make_candidate() -> Callable[..., ArticleSaveCandidate]:
    def _make(
        link: str | None,
        *,
        interest_id: str | None = None,
        source: str = "Naver",
        title: str = "Title",
        summary: str = "Summary",
        published_at: datetime = DEFAULT_PUBLISHED_AT,
    ) -> ArticleSaveCandidate:
        return ArticleSaveCandidate(
            interest_id=interest_id,
            source=source,
            original_link=link,
            title=title,
            summary=summary,
            published_at=published_at,
        )

    return _make


@pytest.fixture()
def store_articles(repository: SQLiteRepository) -> Callable[..., list[str]]:
    """Insert drafts directly and return their ids in insertion order."""

    def _store(*drafts: ArticleDraft) -> list[str]:
        return repository.insert_articles(list(drafts))

    return _store


def draft(  # noqa: PLR0913
    link: str,
    *,
    interest_id: str | None = None,
    source: str = "Naver",
    title: str = "Title",
    summary: str = "Summary",
    published_at: datetime = DEFAULT_PUBLISHED_AT,
    comment_count: int = 0,
    view_count: int = 0,
) -> ArticleDraft:
    return ArticleDraft(
        interest_id=interest_id,
        source=source,
        original_link=link,
        title=title,
        summary=summary,
        published_at=published_at,
        comment_count=comment_count,
        view_count=view_count,
    )


@pytest.fixture()
def make_draft() -> Callable[..., ArticleDraft]:
    return draft
