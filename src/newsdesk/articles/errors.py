"""Error taxonomy for the article pipeline."""

from __future__ import annotations

from datetime import date


class NewsdeskError(Exception):
    """Base error for article pipeline failures."""


class InterestNotFoundError(NewsdeskError):
    """Ingestion batch references an interest that does not exist."""

    def __init__(self, interest_id: str | None) -> None:
        super().__init__(f"Interest not found: {interest_id}")
        self.interest_id = interest_id


class ArticleNotFoundError(NewsdeskError):
    """Article does not exist or is soft-deleted."""

    def __init__(self, article_id: str) -> None:
        super().__init__(f"Article not found: {article_id}")
        self.article_id = article_id


class DuplicateArticleViewError(NewsdeskError):
    """Viewer already registered a view of the article."""

    def __init__(self, viewer_id: str, article_id: str) -> None:
        super().__init__(f"View already registered: viewer={viewer_id} article={article_id}")
        self.viewer_id = viewer_id
        self.article_id = article_id


class InvalidCursorError(NewsdeskError):
    """Search cursor could not be parsed; the request is rejected."""


class InvalidRestoreRangeError(NewsdeskError):
    """Restore range start is after its end."""

    def __init__(self, from_date: date, to_date: date) -> None:
        super().__init__(
            f"Invalid restore range: from={from_date.isoformat()} is after to={to_date.isoformat()}",
        )
        self.from_date = from_date
        self.to_date = to_date


class BackupStorageError(NewsdeskError):
    """Snapshot storage I/O failure for one object key."""

    action = "access"

    def __init__(self, key: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to {self.action} backup {key}{detail}")
        self.key = key


class BackupLoadError(BackupStorageError):
    """Snapshot could not be read or decoded."""

    action = "load"


class BackupSaveError(BackupStorageError):
    """Snapshot could not be encoded or written."""

    action = "save"
