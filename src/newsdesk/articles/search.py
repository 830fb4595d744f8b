"""Filter, cursor and ordering clauses for article search."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import col

from newsdesk.articles.models import (
    ArticleSearchRequest,
    SearchCursor,
    SortDirection,
    SortKey,
)
from newsdesk.articles.storage.common import to_db_datetime
from newsdesk.articles.storage.sqlmodel_models import Article

FilterClause = Callable[[ArticleSearchRequest], "ColumnElement[bool] | None"]

SORT_COLUMNS = {
    SortKey.PUBLISH_DATE: Article.published_at,
    SortKey.COMMENT_COUNT: Article.comment_count,
    SortKey.VIEW_COUNT: Article.view_count,
}


def keyword_clause(request: ArticleSearchRequest) -> ColumnElement[bool] | None:
    keyword = (request.keyword or "").strip()
    if not keyword:
        return None
    return or_(
        col(Article.title).icontains(keyword, autoescape=True),
        col(Article.summary).icontains(keyword, autoescape=True),
    )


def interest_clause(request: ArticleSearchRequest) -> ColumnElement[bool] | None:
    if request.interest_id is None:
        return None
    return col(Article.interest_id) == request.interest_id


def source_clause(request: ArticleSearchRequest) -> ColumnElement[bool] | None:
    if not request.source_in:
        return None
    return col(Article.source).in_(request.source_in)


def publish_date_clause(request: ArticleSearchRequest) -> ColumnElement[bool] | None:
    bounds: list[ColumnElement[bool]] = []
    if request.publish_date_from is not None:
        bounds.append(col(Article.published_at) >= to_db_datetime(request.publish_date_from))
    if request.publish_date_to is not None:
        bounds.append(col(Article.published_at) <= to_db_datetime(request.publish_date_to))
    if not bounds:
        return None
    return and_(*bounds)


FILTER_CLAUSES: tuple[FilterClause, ...] = (
    keyword_clause,
    interest_clause,
    source_clause,
    publish_date_clause,
)


def cursor_clause(
    cursor: SearchCursor,
    *,
    order_by: SortKey,
    direction: SortDirection,
) -> ColumnElement[bool]:
    """Rows strictly after the cursor position in the requested order.

    Timestamp ordering compares the ``(published_at, id)`` pair. Count orderings
    only carry the id, so they page by id alone.
    """

    article_id = col(Article.id)
    ascending = direction == SortDirection.ASC
    id_after = article_id > cursor.article_id if ascending else article_id < cursor.article_id
    if order_by != SortKey.PUBLISH_DATE or cursor.after is None:
        return id_after

    published_at = col(Article.published_at)
    after = to_db_datetime(cursor.after)
    return or_(
        published_at > after if ascending else published_at < after,
        and_(published_at == after, id_after),
    )


def build_filters(
    request: ArticleSearchRequest,
    *,
    include_cursor: bool = True,
) -> list[ColumnElement[bool]]:
    """Conjunction of the request's predicates; soft-deleted rows are always excluded."""

    clauses: list[ColumnElement[bool]] = [col(Article.is_deleted) == False]  # noqa: E712
    for build in FILTER_CLAUSES:
        clause = build(request)
        if clause is not None:
            clauses.append(clause)
    if include_cursor:
        cursor = request.parsed_cursor()
        if cursor is not None:
            clauses.append(
                cursor_clause(
                    cursor,
                    order_by=request.order_by,
                    direction=request.effective_direction,
                ),
            )
    return clauses


def build_ordering(request: ArticleSearchRequest) -> list[ColumnElement[object]]:
    """Primary sort key, then id in the same direction as the tie-breaker."""

    primary = col(SORT_COLUMNS[request.order_by])
    article_id = col(Article.id)
    if request.effective_direction == SortDirection.ASC:
        return [primary.asc(), article_id.asc()]
    return [primary.desc(), article_id.desc()]
