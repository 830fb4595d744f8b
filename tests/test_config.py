from __future__ import annotations

from pathlib import Path

import allure
import pytest

from newsdesk.config import (
    DEFAULT_RSS_FEEDS,
    BackupSettings,
    CollectionSettings,
    SearchSettings,
    Settings,
)

pytestmark = [
    allure.epic("Platform"),
    allure.feature("Configuration"),
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "NEWSDESK_DB_PATH",
        "NEWSDESK_RSS_FEEDS",
        "NEWSDESK_BACKUP_BACKEND",
        "NEWSDESK_BACKUP_S3_BUCKET",
        "NEWSDESK_NAVER_CLIENT_ID",
        "NEWSDESK_NAVER_CLIENT_SECRET",
        "NEWSDESK_SEARCH_DEFAULT_LIMIT",
        "NEWSDESK_SEARCH_MAX_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_from_env_defaults_are_valid() -> None:
    settings = Settings.from_env()
    settings.validate()

    assert settings.db_path == Path(".newsdesk.db")
    assert settings.collection.rss_feeds == DEFAULT_RSS_FEEDS
    assert settings.collection.interval_minutes == 60
    assert not settings.collection.naver_enabled
    assert settings.backup.backend == "local"
    assert settings.search.default_limit == 50
    assert settings.search.max_limit == 100


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NEWSDESK_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("NEWSDESK_COLLECTION_INTERVAL_MINUTES", "15")
    monkeypatch.setenv("NEWSDESK_NAVER_CLIENT_ID", "id")
    monkeypatch.setenv("NEWSDESK_NAVER_CLIENT_SECRET", "secret")
    monkeypatch.setenv("NEWSDESK_BACKUP_BACKEND", " S3 ")
    monkeypatch.setenv("NEWSDESK_BACKUP_S3_BUCKET", "news-backups")
    monkeypatch.setenv("NEWSDESK_BACKUP_CRON_HOUR", "3")
    monkeypatch.setenv("NEWSDESK_SEARCH_DEFAULT_LIMIT", "20")

    settings = Settings.from_env()
    settings.validate()

    assert settings.db_path == tmp_path / "env.db"
    assert settings.collection.interval_minutes == 15
    assert settings.collection.naver_enabled
    assert settings.backup.backend == "s3"
    assert settings.backup.bucket_name == "news-backups"
    assert settings.backup.cron_hour == 3
    assert settings.search.default_limit == 20


def test_explicit_db_path_wins_over_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NEWSDESK_DB_PATH", str(tmp_path / "env.db"))

    assert Settings.from_env(db_path=tmp_path / "cli.db").db_path == tmp_path / "cli.db"


def test_rss_feeds_env_is_parsed_and_deduplicated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "NEWSDESK_RSS_FEEDS",
        "Chosun|https://chosun.example/rss, ,Mirror|https://chosun.example/rss,"
        "Yonhap | https://yonhap.example/rss",
    )

    assert Settings.from_env().collection.rss_feeds == (
        ("Chosun", "https://chosun.example/rss"),
        ("Yonhap", "https://yonhap.example/rss"),
    )


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ("https://chosun.example/rss", "Expected format"),
        ("|https://chosun.example/rss", "Source name is empty"),
        ("Chosun|ftp://chosun.example/rss", "Invalid RSS feed URL"),
    ],
)
def test_rss_feeds_env_rejects_malformed_entries(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
    message: str,
) -> None:
    monkeypatch.setenv("NEWSDESK_RSS_FEEDS", raw)

    with pytest.raises(ValueError, match=message):
        Settings.from_env()


@pytest.mark.parametrize(
    ("settings", "message"),
    [
        (Settings(backup=BackupSettings(backend="ftp")), "Invalid NEWSDESK_BACKUP_BACKEND"),
        (Settings(backup=BackupSettings(backend="s3")), "NEWSDESK_BACKUP_S3_BUCKET is required"),
        (Settings(backup=BackupSettings(cron_hour=24)), "NEWSDESK_BACKUP_CRON_HOUR"),
        (Settings(backup=BackupSettings(cron_minute=-1)), "NEWSDESK_BACKUP_CRON_MINUTE"),
        (
            Settings(collection=CollectionSettings(interval_minutes=0)),
            "NEWSDESK_COLLECTION_INTERVAL_MINUTES",
        ),
        (
            Settings(collection=CollectionSettings(naver_max_items=0)),
            "NEWSDESK_NAVER_MAX_ITEMS",
        ),
        (Settings(search=SearchSettings(default_limit=0)), "Search limits"),
        (
            Settings(search=SearchSettings(default_limit=200, max_limit=100)),
            "must not exceed",
        ),
    ],
    ids=[
        "unknown-backend",
        "s3-without-bucket",
        "cron-hour",
        "cron-minute",
        "interval",
        "naver-max-items",
        "zero-limit",
        "default-above-max",
    ],
)
def test_validate_rejects_out_of_range_settings(settings: Settings, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        settings.validate()


def test_naver_requires_both_credentials() -> None:
    assert not CollectionSettings(naver_client_id="id").naver_enabled
    assert not CollectionSettings(naver_client_secret="secret").naver_enabled
    assert CollectionSettings(naver_client_id="id", naver_client_secret="secret").naver_enabled
