"""One collection cycle over all interests and fetchers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from newsdesk.articles.fetchers.base import Fetcher
from newsdesk.articles.models import CollectionSummary
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.ingest_service import ArticleIngestionService

logger = logging.getLogger(__name__)


class ArticleCollectionService:
    """Call every fetcher for every (interest, keyword) pair and ingest the results.

    A failing fetcher is logged and skipped; the next scheduled run is the retry.
    """

    def __init__(
        self,
        *,
        repository: SQLiteRepository,
        fetchers: Sequence[Fetcher],
        ingestion: ArticleIngestionService | None = None,
    ) -> None:
        self.repository = repository
        self.fetchers = list(fetchers)
        self.ingestion = ingestion or ArticleIngestionService(repository)

    def run(self) -> CollectionSummary:
        interests = self.repository.list_interests()
        summary = CollectionSummary(interests_count=len(interests))

        for interest in interests:
            stored_for_interest = 0
            for keyword in interest.keywords:
                for fetcher in self.fetchers:
                    summary.fetch_calls += 1
                    try:
                        records = fetcher.fetch(interest.interest_id, [keyword])
                        result = self.ingestion.ingest(records, interest.interest_id)
                    except Exception:  # noqa: BLE001
                        summary.failed_fetches += 1
                        logger.exception(
                            "Fetcher %s failed for interest %s keyword %s",
                            fetcher.name,
                            interest.name,
                            keyword,
                        )
                        continue
                    stored_for_interest += result.stored_count
            summary.stored_by_interest[interest.name] = stored_for_interest
            summary.stored_count += stored_for_interest

        logger.info(
            "Collection finished: interests=%d fetch_calls=%d failed=%d stored=%d by_interest=%s",
            summary.interests_count,
            summary.fetch_calls,
            summary.failed_fetches,
            summary.stored_count,
            summary.stored_by_interest,
        )
        return summary
