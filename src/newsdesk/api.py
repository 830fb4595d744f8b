"""HTTP surface for article search, restore, views and moderation."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Annotated, Any

from fastapi import FastAPI, Header, Query, Request, Response, status
from fastapi.responses import JSONResponse

from newsdesk import __version__
from newsdesk.articles.backup import BackupStore, build_backup_store
from newsdesk.articles.errors import (
    ArticleNotFoundError,
    BackupStorageError,
    DuplicateArticleViewError,
    InterestNotFoundError,
    InvalidCursorError,
    InvalidRestoreRangeError,
    NewsdeskError,
)
from newsdesk.articles.models import ArticleSearchRequest, SortDirection, SortKey, parse_after
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.restore_service import ArticleRestoreService
from newsdesk.articles.services.search_service import ArticleSearchService
from newsdesk.articles.services.view_service import ArticleModerationService
from newsdesk.config import Settings

logger = logging.getLogger(__name__)

VIEWER_HEADER = "Newsdesk-Request-User-ID"
ERROR_STATUS: dict[type[NewsdeskError], int] = {
    InvalidCursorError: status.HTTP_400_BAD_REQUEST,
    InvalidRestoreRangeError: status.HTTP_400_BAD_REQUEST,
    ArticleNotFoundError: status.HTTP_404_NOT_FOUND,
    InterestNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateArticleViewError: status.HTTP_409_CONFLICT,
    BackupStorageError: status.HTTP_502_BAD_GATEWAY,
}


def create_app(
    settings: Settings,
    *,
    repository: SQLiteRepository | None = None,
    backup_store: BackupStore | None = None,
) -> FastAPI:
    """Build the API app; the repository schema is migrated on creation."""

    if repository is None:
        repository = SQLiteRepository(settings.db_path)
    repository.init_schema()
    store = backup_store or build_backup_store(settings.backup)

    search = ArticleSearchService(repository, settings.search)
    restore = ArticleRestoreService(repository=repository, store=store)
    moderation = ArticleModerationService(repository)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        repository.close()

    app = FastAPI(title="newsdesk", version=__version__, lifespan=lifespan)

    @app.exception_handler(NewsdeskError)
    async def newsdesk_error_handler(_: Request, error: NewsdeskError) -> JSONResponse:
        status_code = _status_for(error)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s", error)
        return JSONResponse(
            status_code=status_code,
            content={"error": type(error).__name__, "message": str(error)},
        )

    @app.get("/api/articles")
    def search_articles(  # noqa: PLR0913
        keyword: str | None = None,
        interest_id: Annotated[str | None, Query(alias="interestId")] = None,
        source_in: Annotated[list[str] | None, Query(alias="sourceIn")] = None,
        publish_date_from: Annotated[datetime | None, Query(alias="publishDateFrom")] = None,
        publish_date_to: Annotated[datetime | None, Query(alias="publishDateTo")] = None,
        order_by: Annotated[SortKey, Query(alias="orderBy")] = SortKey.PUBLISH_DATE,
        direction: SortDirection | None = None,
        cursor: str | None = None,
        after: str | None = None,
        limit: Annotated[int, Query(ge=1)] = settings.search.default_limit,
        viewer_id: Annotated[str | None, Query(alias="viewerId")] = None,
    ) -> dict[str, Any]:
        page = search.search(
            ArticleSearchRequest(
                keyword=keyword,
                interest_id=interest_id,
                source_in=tuple(source_in or ()),
                publish_date_from=publish_date_from,
                publish_date_to=publish_date_to,
                order_by=order_by,
                direction=direction,
                cursor=cursor,
                after=parse_after(after),
                limit=limit,
                viewer_id=viewer_id,
            ),
        )
        return page.to_payload()

    @app.get("/api/articles/sources")
    def list_sources() -> list[str]:
        return search.list_sources()

    @app.get("/api/articles/restore")
    def restore_articles(
        from_date: Annotated[date, Query(alias="from")],
        to_date: Annotated[date, Query(alias="to")],
    ) -> list[dict[str, Any]]:
        return [result.to_payload() for result in restore.restore(from_date, to_date)]

    @app.post("/api/articles/{article_id}/article-views")
    def register_view(
        article_id: str,
        viewer_id: Annotated[str, Header(alias=VIEWER_HEADER)],
    ) -> dict[str, Any]:
        return moderation.register_view(viewer_id, article_id).to_payload()

    @app.delete("/api/articles/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
    def soft_delete(article_id: str) -> Response:
        moderation.soft_delete(article_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/api/articles/{article_id}/hard", status_code=status.HTTP_204_NO_CONTENT)
    def hard_delete(article_id: str) -> Response:
        moderation.hard_delete(article_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def _status_for(error: NewsdeskError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR
