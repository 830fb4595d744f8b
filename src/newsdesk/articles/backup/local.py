"""Filesystem snapshot store."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path

from newsdesk.articles.backup.base import build_backup_key, decode_snapshot, encode_snapshot
from newsdesk.articles.errors import BackupLoadError, BackupSaveError
from newsdesk.articles.models import ArticleSnapshotRecord
from newsdesk.articles.storage.common import utc_now

logger = logging.getLogger(__name__)


def _utc_today() -> date:
    return utc_now().date()


class LocalBackupStore:
    """Store one JSON file per day under ``directory``.

    Writes go to ``<file>.tmp`` first; the previous snapshot is kept as
    ``<file>.bak`` before the temporary file atomically replaces it.
    """

    def __init__(self, directory: Path, *, today: Callable[[], date] = _utc_today) -> None:
        self.directory = directory
        self._today = today

    def path_for(self, day: date) -> Path:
        return self.directory / build_backup_key(day)

    def load(self, day: date) -> list[ArticleSnapshotRecord]:
        path = self.path_for(day)
        if not path.exists():
            return []
        try:
            return decode_snapshot(path.read_bytes())
        except (OSError, ValueError) as error:
            raise BackupLoadError(str(path), error) from error

    def save(self, day: date, records: Sequence[ArticleSnapshotRecord]) -> None:
        if day > self._today():
            raise ValueError(f"Cannot back up a future date: {day.isoformat()}")

        path = self.path_for(day)
        temp_path = path.with_name(f"{path.name}.tmp")
        backup_path = path.with_name(f"{path.name}.bak")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(encode_snapshot(records))
            if path.exists():
                os.replace(path, backup_path)
            os.replace(temp_path, path)
        except OSError as error:
            raise BackupSaveError(str(path), error) from error
        logger.debug("Wrote %d snapshot records to %s", len(records), path)
