"""CLI entrypoint for newsdesk."""

import logging
import os
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import ParamSpec, TypeVar

import rich_click as click
import uvicorn

from newsdesk import __version__
from newsdesk.api import create_app
from newsdesk.articles.controllers import (
    ArticlesCliController,
    BackupCommand,
    CollectCommand,
    DeleteCommand,
    InterestAddCommand,
    InterestListCommand,
    RestoreCommand,
    SearchCommand,
    ServeCommand,
    SourcesCommand,
    ViewCommand,
)
from newsdesk.articles.errors import InvalidCursorError, NewsdeskError
from newsdesk.articles.models import SortDirection, SortKey
from newsdesk.config import Settings

click.rich_click.USE_MARKDOWN = True
ARTICLES_CONTROLLER = ArticlesCliController()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

P = ParamSpec("P")
R = TypeVar("R")


def _configure_logging() -> None:
    level_name = os.getenv("NEWSDESK_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise click.BadParameter(
            f"Unknown log level {level_name!r}.",
            param_hint="NEWSDESK_LOG_LEVEL",
        )
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _handle_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Turn domain and configuration errors into CLI errors."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except InvalidCursorError as error:
            raise click.UsageError(str(error)) from error
        except (NewsdeskError, ValueError) as error:
            raise click.ClickException(str(error)) from error

    return wrapper


db_path_option = click.option(
    "--db-path",
    type=click.Path(path_type=Path),
    default=None,
    help="SQLite DB path.",
)


@click.group()
@click.version_option(version=__version__, prog_name="newsdesk")
def newsdesk() -> None:
    """Newsdesk article collection, search and backup CLI."""

    _configure_logging()


@newsdesk.group()
def articles() -> None:
    """Article commands."""


@newsdesk.group()
def interests() -> None:
    """Interest commands."""


@articles.command("collect")
@db_path_option
@_handle_errors
def articles_collect(db_path: Path | None) -> None:
    """Run one collection cycle over all interests and fetchers."""

    _emit_lines(ARTICLES_CONTROLLER.collect(CollectCommand(db_path=db_path)))


@articles.command("search")
@db_path_option
@click.option("--keyword", default=None, help="Substring matched against title or summary.")
@click.option("--interest-id", default=None, help="Only articles of this interest.")
@click.option("--source", "sources", multiple=True, help="Allowed source. Can be repeated.")
@click.option(
    "--from",
    "date_from",
    type=click.DateTime(),
    default=None,
    help="Earliest publish date (inclusive, UTC).",
)
@click.option(
    "--to",
    "date_to",
    type=click.DateTime(),
    default=None,
    help="Latest publish date (inclusive, UTC).",
)
@click.option(
    "--order-by",
    type=click.Choice([key.value for key in SortKey]),
    default=SortKey.PUBLISH_DATE.value,
    show_default=True,
)
@click.option(
    "--direction",
    type=click.Choice([direction.value for direction in SortDirection]),
    default=None,
    help="Sort direction. Defaults to DESC.",
)
@click.option("--cursor", default=None, help="Article id from the previous page.")
@click.option("--after", default=None, help="Publish date from the previous page.")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Page size.")
@click.option("--viewer-id", default=None, help="Resolve viewed-by-me for this viewer.")
@_handle_errors
def articles_search(  # noqa: PLR0913
    db_path: Path | None,
    keyword: str | None,
    interest_id: str | None,
    sources: tuple[str, ...],
    date_from: datetime | None,
    date_to: datetime | None,
    order_by: str,
    direction: str | None,
    cursor: str | None,
    after: str | None,
    limit: int | None,
    viewer_id: str | None,
) -> None:
    """Search articles with cursor pagination."""

    _emit_lines(
        ARTICLES_CONTROLLER.search(
            SearchCommand(
                db_path=db_path,
                keyword=keyword,
                interest_id=interest_id,
                sources=sources,
                date_from=date_from,
                date_to=date_to,
                order_by=SortKey(order_by),
                direction=SortDirection(direction) if direction else None,
                cursor=cursor,
                after=after,
                limit=limit,
                viewer_id=viewer_id,
            ),
        ),
    )


@articles.command("sources")
@db_path_option
@_handle_errors
def articles_sources(db_path: Path | None) -> None:
    """List distinct sources of stored articles."""

    _emit_lines(ARTICLES_CONTROLLER.sources(SourcesCommand(db_path=db_path)))


@articles.command("backup")
@db_path_option
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Publication day to back up. Defaults to yesterday (UTC).",
)
@_handle_errors
def articles_backup(db_path: Path | None, day: datetime | None) -> None:
    """Snapshot one day of articles to the backup store."""

    _emit_lines(
        ARTICLES_CONTROLLER.backup(
            BackupCommand(db_path=db_path, day=day.date() if day else None),
        ),
    )


@articles.command("restore")
@db_path_option
@click.option(
    "--from",
    "from_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    required=True,
    help="First day to restore.",
)
@click.option(
    "--to",
    "to_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    required=True,
    help="Last day to restore (inclusive).",
)
@_handle_errors
def articles_restore(db_path: Path | None, from_date: datetime, to_date: datetime) -> None:
    """Re-insert snapshot articles missing from the store."""

    _emit_lines(
        ARTICLES_CONTROLLER.restore(
            RestoreCommand(db_path=db_path, from_date=from_date.date(), to_date=to_date.date()),
        ),
    )


@articles.command("view")
@db_path_option
@click.argument("article_id")
@click.option("--viewer-id", required=True, help="Viewer registering the view.")
@_handle_errors
def articles_view(db_path: Path | None, article_id: str, viewer_id: str) -> None:
    """Register one view of an article."""

    _emit_lines(
        ARTICLES_CONTROLLER.view(
            ViewCommand(db_path=db_path, article_id=article_id, viewer_id=viewer_id),
        ),
    )


@articles.command("delete")
@db_path_option
@click.argument("article_id")
@_handle_errors
def articles_delete(db_path: Path | None, article_id: str) -> None:
    """Soft delete an article; its link stays reserved."""

    _emit_lines(ARTICLES_CONTROLLER.delete(DeleteCommand(db_path=db_path, article_id=article_id)))


@articles.command("purge")
@db_path_option
@click.argument("article_id")
@_handle_errors
def articles_purge(db_path: Path | None, article_id: str) -> None:
    """Remove an article and its view records."""

    _emit_lines(
        ARTICLES_CONTROLLER.delete(
            DeleteCommand(db_path=db_path, article_id=article_id, hard=True),
        ),
    )


@interests.command("add")
@db_path_option
@click.argument("name")
@click.option("--keyword", "keywords", multiple=True, help="Collection keyword. Can be repeated.")
@_handle_errors
def interests_add(db_path: Path | None, name: str, keywords: tuple[str, ...]) -> None:
    """Create an interest with its collection keywords."""

    _emit_lines(
        ARTICLES_CONTROLLER.add_interest(
            InterestAddCommand(db_path=db_path, name=name, keywords=keywords),
        ),
    )


@interests.command("list")
@db_path_option
@_handle_errors
def interests_list(db_path: Path | None) -> None:
    """List interests and keywords."""

    _emit_lines(ARTICLES_CONTROLLER.list_interests(InterestListCommand(db_path=db_path)))


@newsdesk.command("serve")
@db_path_option
@click.option("--run-now", is_flag=True, help="Run one collection before the first trigger.")
@_handle_errors
def serve(db_path: Path | None, run_now: bool) -> None:
    """Run scheduled collection and daily backup until interrupted."""

    ARTICLES_CONTROLLER.serve(ServeCommand(db_path=db_path, run_now=run_now))


@newsdesk.command("api")
@db_path_option
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=click.IntRange(min=1, max=65535), default=8000, show_default=True)
@_handle_errors
def api(db_path: Path | None, host: str, port: int) -> None:
    """Serve the HTTP API with uvicorn."""

    settings = Settings.from_env(db_path=db_path)
    settings.validate()
    uvicorn.run(create_app(settings), host=host, port=port)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    newsdesk()
