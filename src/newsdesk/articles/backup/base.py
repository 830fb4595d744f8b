"""Snapshot storage contract, object keys and JSON codec."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date
from typing import Protocol

from newsdesk.articles.models import ArticleSnapshotRecord

SNAPSHOT_PREFIX = "articles-"
SNAPSHOT_SUFFIX = ".json"


class BackupStore(Protocol):
    """Durable storage of whole-day article snapshots keyed by calendar date."""

    def load(self, day: date) -> list[ArticleSnapshotRecord]:
        """Return the snapshot for ``day``, or ``[]`` when none was saved."""
        raise NotImplementedError

    def save(self, day: date, records: Sequence[ArticleSnapshotRecord]) -> None:
        """Replace the snapshot for ``day`` with ``records``."""
        raise NotImplementedError


def build_backup_key(day: date, *, base_directory: str = "") -> str:
    """Deterministic object key, e.g. ``backups/articles-2025-07-01.json``."""

    file_name = f"{SNAPSHOT_PREFIX}{day.isoformat()}{SNAPSHOT_SUFFIX}"
    prefix = base_directory.strip().strip("/")
    if not prefix:
        return file_name
    return f"{prefix}/{file_name}"


def encode_snapshot(records: Sequence[ArticleSnapshotRecord]) -> bytes:
    payload = [record.to_payload() for record in records]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_snapshot(raw: bytes | str) -> list[ArticleSnapshotRecord]:
    """Decode a snapshot; raises ``ValueError`` on malformed content."""

    try:
        payload = json.loads(raw)
        if not isinstance(payload, list):
            raise TypeError("Snapshot must be a JSON array")
        return [ArticleSnapshotRecord.from_payload(item) for item in payload]
    except (KeyError, TypeError) as error:
        raise ValueError(f"Malformed snapshot record: {error}") from error
