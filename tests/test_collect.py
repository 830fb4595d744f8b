from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

import allure
import pytest

from newsdesk.articles.models import ArticleSaveCandidate
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.collect_service import ArticleCollectionService
from newsdesk.scheduler import run_collection

pytestmark = [
    allure.epic("Article Pipeline"),
    allure.feature("Scheduled Collection"),
]

PUBLISHED_AT = datetime(2025, 7, 1, 9, 30, tzinfo=UTC)


class _StaticFetcher:
    def __init__(self, name: str) -> None:
        self.name = name
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    def fetch(self, interest_id: str, keywords: Sequence[str]) -> list[ArticleSaveCandidate]:
        self.calls.append((interest_id, tuple(keywords)))
        return [
            ArticleSaveCandidate(
                interest_id=interest_id,
                source=self.name,
                original_link=f"https://{self.name.lower()}.example/{keyword}",
                title=f"{keyword} headline",
                summary="",
                published_at=PUBLISHED_AT,
            )
            for keyword in keywords
        ]


class _BrokenFetcher:
    name = "Broken"

    def fetch(self, interest_id: str, keywords: Sequence[str]) -> list[ArticleSaveCandidate]:
        raise RuntimeError("source outage")


def test_collection_isolates_failing_fetcher(
    repository: SQLiteRepository,
    caplog: pytest.LogCaptureFixture,
) -> None:
    economy = repository.add_interest("Economy", ["stocks", "bonds"])
    repository.add_interest("Sports", ["soccer"])
    healthy = _StaticFetcher("Naver")
    service = ArticleCollectionService(
        repository=repository,
        fetchers=[_BrokenFetcher(), healthy],
    )

    with caplog.at_level(logging.ERROR):
        summary = service.run()

    assert summary.interests_count == 2
    assert summary.fetch_calls == 6
    assert summary.failed_fetches == 3
    assert summary.stored_count == 3
    assert summary.stored_by_interest == {"Economy": 2, "Sports": 1}
    assert (economy.interest_id, ("stocks",)) in healthy.calls
    assert (economy.interest_id, ("bonds",)) in healthy.calls
    assert "Fetcher Broken failed" in caplog.text


def test_second_collection_stores_nothing_new(repository: SQLiteRepository) -> None:
    repository.add_interest("Economy", ["stocks"])
    service = ArticleCollectionService(
        repository=repository,
        fetchers=[_StaticFetcher("Naver"), _StaticFetcher("Chosun")],
    )

    first = service.run()
    second = service.run()

    assert first.stored_count == 2
    assert second.stored_count == 0


def test_collection_without_interests_calls_no_fetcher(repository: SQLiteRepository) -> None:
    fetcher = _StaticFetcher("Naver")

    summary = ArticleCollectionService(repository=repository, fetchers=[fetcher]).run()

    assert summary.fetch_calls == 0
    assert fetcher.calls == []


def test_scheduled_collection_swallows_run_failures(caplog: pytest.LogCaptureFixture) -> None:
    class _ExplodingService:
        def run(self) -> None:
            raise RuntimeError("database locked")

    with caplog.at_level(logging.ERROR):
        run_collection(_ExplodingService())  # type: ignore[arg-type]

    assert "Collection run failed" in caplog.text
