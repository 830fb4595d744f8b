"""Cursor-paginated article search."""

from __future__ import annotations

import logging
from dataclasses import replace

from newsdesk.articles.models import ArticlePage, ArticleSearchRequest, SortKey
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.config import SearchSettings

logger = logging.getLogger(__name__)


class ArticleSearchService:
    """Run one search page and the matching total count."""

    def __init__(
        self,
        repository: SQLiteRepository,
        settings: SearchSettings | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings or SearchSettings()

    def search(self, request: ArticleSearchRequest) -> ArticlePage:
        limit = self._effective_limit(request.limit)
        request = replace(request, limit=limit)

        # One extra row tells whether another page exists.
        rows = self.repository.search_articles(request, limit=limit + 1)
        has_next = len(rows) > limit
        content = rows[:limit]

        if request.viewer_id and content:
            viewed = self.repository.viewed_article_ids(
                request.viewer_id,
                [article.article_id for article in content],
            )
            for article in content:
                article.viewed_by_me = article.article_id in viewed

        next_cursor = None
        next_after = None
        if has_next:
            last = content[-1]
            next_cursor = last.article_id
            if request.order_by == SortKey.PUBLISH_DATE:
                next_after = last.published_at

        total = self.count(request)
        logger.info(
            "Search returned %d of %d articles (order=%s %s, has_next=%s)",
            len(content),
            total,
            request.order_by.value,
            request.effective_direction.value,
            has_next,
        )
        return ArticlePage(
            content=content,
            next_cursor=next_cursor,
            next_after=next_after,
            has_next=has_next,
            total_elements=total,
        )

    def count(self, request: ArticleSearchRequest) -> int:
        """Total matches for the filters, independent of the cursor."""

        return self.repository.count_articles(request)

    def list_sources(self) -> list[str]:
        return self.repository.list_sources()

    def _effective_limit(self, limit: int | None) -> int:
        if limit is None or limit <= 0:
            return self.settings.default_limit
        return min(limit, self.settings.max_limit)
