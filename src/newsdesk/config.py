"""Runtime configuration for collection, search and backup."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

BACKUP_BACKENDS = frozenset({"local", "s3"})
DEFAULT_RSS_FEEDS: tuple[tuple[str, str], ...] = (
    ("Chosun", "https://www.chosun.com/arc/outboundfeeds/rss/?outputType=xml"),
    ("Hankyung", "https://www.hankyung.com/feed/all-news"),
    ("Yonhap", "http://www.yonhapnewstv.co.kr/browse/feed/"),
)


@dataclass(slots=True)
class CollectionSettings:
    """Fetcher and collection-cycle settings."""

    interval_minutes: int = 60
    request_timeout_seconds: float = 10.0
    rss_feeds: tuple[tuple[str, str], ...] = DEFAULT_RSS_FEEDS
    naver_client_id: str | None = None
    naver_client_secret: str | None = None
    naver_max_items: int = 1000

    @property
    def naver_enabled(self) -> bool:
        return bool(self.naver_client_id and self.naver_client_secret)


@dataclass(slots=True)
class BackupSettings:
    """Snapshot storage settings."""

    backend: str = "local"
    local_dir: Path = Path("backup")
    bucket_name: str | None = None
    base_directory: str = ""
    endpoint_url: str | None = None
    region_name: str = "us-east-1"
    cron_hour: int = 0
    cron_minute: int = 0


@dataclass(slots=True)
class SearchSettings:
    """Article search defaults."""

    default_limit: int = 50
    max_limit: int = 100


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    db_path: Path = Path(".newsdesk.db")
    collection: CollectionSettings = field(default_factory=CollectionSettings)
    backup: BackupSettings = field(default_factory=BackupSettings)
    search: SearchSettings = field(default_factory=SearchSettings)

    @classmethod
    def from_env(cls, db_path: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        return cls(
            db_path=db_path or Path(os.getenv("NEWSDESK_DB_PATH", ".newsdesk.db")),
            collection=CollectionSettings(
                interval_minutes=int(os.getenv("NEWSDESK_COLLECTION_INTERVAL_MINUTES", "60")),
                request_timeout_seconds=float(
                    os.getenv("NEWSDESK_FETCH_TIMEOUT_SECONDS", "10.0"),
                ),
                rss_feeds=_collect_rss_feeds(),
                naver_client_id=os.getenv("NEWSDESK_NAVER_CLIENT_ID") or None,
                naver_client_secret=os.getenv("NEWSDESK_NAVER_CLIENT_SECRET") or None,
                naver_max_items=int(os.getenv("NEWSDESK_NAVER_MAX_ITEMS", "1000")),
            ),
            backup=BackupSettings(
                backend=os.getenv("NEWSDESK_BACKUP_BACKEND", "local").strip().lower(),
                local_dir=Path(os.getenv("NEWSDESK_BACKUP_DIR", "backup")),
                bucket_name=os.getenv("NEWSDESK_BACKUP_S3_BUCKET") or None,
                base_directory=os.getenv("NEWSDESK_BACKUP_S3_BASE_DIRECTORY", ""),
                endpoint_url=os.getenv("NEWSDESK_BACKUP_S3_ENDPOINT_URL") or None,
                region_name=os.getenv("NEWSDESK_BACKUP_S3_REGION", "us-east-1"),
                cron_hour=int(os.getenv("NEWSDESK_BACKUP_CRON_HOUR", "0")),
                cron_minute=int(os.getenv("NEWSDESK_BACKUP_CRON_MINUTE", "0")),
            ),
            search=SearchSettings(
                default_limit=int(os.getenv("NEWSDESK_SEARCH_DEFAULT_LIMIT", "50")),
                max_limit=int(os.getenv("NEWSDESK_SEARCH_MAX_LIMIT", "100")),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error if any setting is out of range."""

        if self.collection.interval_minutes <= 0:
            raise ValueError("NEWSDESK_COLLECTION_INTERVAL_MINUTES must be > 0.")
        if self.collection.request_timeout_seconds <= 0:
            raise ValueError("NEWSDESK_FETCH_TIMEOUT_SECONDS must be > 0.")
        if self.collection.naver_max_items <= 0:
            raise ValueError("NEWSDESK_NAVER_MAX_ITEMS must be > 0.")
        for _, feed_url in self.collection.rss_feeds:
            _validate_feed_url(feed_url)

        if self.backup.backend not in BACKUP_BACKENDS:
            raise ValueError(
                f"Invalid NEWSDESK_BACKUP_BACKEND: {self.backup.backend!r}. "
                f"Expected one of: {', '.join(sorted(BACKUP_BACKENDS))}.",
            )
        if self.backup.backend == "s3" and not self.backup.bucket_name:
            raise ValueError("NEWSDESK_BACKUP_S3_BUCKET is required for the s3 backup backend.")
        if not 0 <= self.backup.cron_hour <= 23:  # noqa: PLR2004
            raise ValueError("NEWSDESK_BACKUP_CRON_HOUR must be within 0..23.")
        if not 0 <= self.backup.cron_minute <= 59:  # noqa: PLR2004
            raise ValueError("NEWSDESK_BACKUP_CRON_MINUTE must be within 0..59.")

        if self.search.default_limit <= 0 or self.search.max_limit <= 0:
            raise ValueError("Search limits must be > 0.")
        if self.search.default_limit > self.search.max_limit:
            raise ValueError(
                "NEWSDESK_SEARCH_DEFAULT_LIMIT must not exceed NEWSDESK_SEARCH_MAX_LIMIT.",
            )


def _collect_rss_feeds() -> tuple[tuple[str, str], ...]:
    raw = os.getenv("NEWSDESK_RSS_FEEDS")
    if raw is None:
        return DEFAULT_RSS_FEEDS

    feeds: list[tuple[str, str]] = []
    seen: set[str] = set()
    for part in raw.split(","):
        token = part.strip()
        if not token:
            continue
        if "|" not in token:
            raise ValueError(
                f"Invalid NEWSDESK_RSS_FEEDS entry: {token!r}. Expected format '<source>|<feed_url>'.",
            )
        source_name, feed_url = (value.strip() for value in token.split("|", 1))
        if not source_name:
            raise ValueError(f"Invalid NEWSDESK_RSS_FEEDS entry: {token!r}. Source name is empty.")
        _validate_feed_url(feed_url)
        if feed_url in seen:
            continue
        seen.add(feed_url)
        feeds.append((source_name, feed_url))
    return tuple(feeds)


def _validate_feed_url(value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            "Invalid RSS feed URL: "
            f"{value!r}. Expected an absolute URL with http:// or https:// scheme.",
        )
