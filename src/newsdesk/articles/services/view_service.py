"""View registration and article moderation."""

from __future__ import annotations

import logging

from newsdesk.articles.models import ArticleViewRecord, parse_article_id
from newsdesk.articles.repository import SQLiteRepository

logger = logging.getLogger(__name__)


class ArticleModerationService:
    """Register views and soft or hard delete articles."""

    def __init__(self, repository: SQLiteRepository) -> None:
        self.repository = repository

    def register_view(self, viewer_id: str, article_id: str) -> ArticleViewRecord:
        record = self.repository.register_view(viewer_id.strip(), parse_article_id(article_id))
        logger.info("Viewer %s viewed article %s", record.viewer_id, record.article.article_id)
        return record

    def remove_view(self, viewer_id: str, article_id: str) -> bool:
        return self.repository.remove_view(viewer_id.strip(), parse_article_id(article_id))

    def soft_delete(self, article_id: str) -> None:
        normalized = parse_article_id(article_id)
        self.repository.soft_delete(normalized)
        logger.info("Soft-deleted article %s", normalized)

    def hard_delete(self, article_id: str) -> None:
        normalized = parse_article_id(article_id)
        self.repository.hard_delete(normalized)
        logger.info("Purged article %s", normalized)
