from __future__ import annotations

from datetime import UTC
from pathlib import Path

import allure
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from newsdesk.articles.backup import LocalBackupStore
from newsdesk.articles.repository import SQLiteRepository
from newsdesk.articles.services.backup_service import ArticleBackupService
from newsdesk.articles.services.collect_service import ArticleCollectionService
from newsdesk.config import BackupSettings, CollectionSettings, Settings
from newsdesk.scheduler import BACKUP_JOB_ID, COLLECT_JOB_ID, build_scheduler, run_collection

pytestmark = [
    allure.epic("Article Pipeline"),
    allure.feature("Scheduling"),
]


def test_scheduler_registers_collection_and_backup_jobs(
    repository: SQLiteRepository,
    tmp_path: Path,
) -> None:
    settings = Settings(
        collection=CollectionSettings(interval_minutes=30),
        backup=BackupSettings(cron_hour=2, cron_minute=15),
    )
    collection = ArticleCollectionService(repository=repository, fetchers=[])
    backup = ArticleBackupService(repository=repository, store=LocalBackupStore(tmp_path))

    scheduler = build_scheduler(
        settings=settings,
        collection=collection,
        backup=backup,
        scheduler=BackgroundScheduler(timezone=UTC),
    )

    collect_job = scheduler.get_job(COLLECT_JOB_ID)
    backup_job = scheduler.get_job(BACKUP_JOB_ID)
    assert collect_job is not None
    assert backup_job is not None
    assert isinstance(collect_job.trigger, IntervalTrigger)
    assert collect_job.trigger.interval.total_seconds() == 30 * 60
    assert collect_job.func is run_collection
    assert collect_job.args == (collection,)
    assert collect_job.max_instances == 1
    assert isinstance(backup_job.trigger, CronTrigger)
    fields = {field.name: str(field) for field in backup_job.trigger.fields}
    assert fields["hour"] == "2"
    assert fields["minute"] == "15"
    assert backup_job.func == backup.backup_yesterday


def test_rebuilding_replaces_existing_jobs(repository: SQLiteRepository, tmp_path: Path) -> None:
    scheduler = BackgroundScheduler(timezone=UTC)
    scheduler.start(paused=True)
    collection = ArticleCollectionService(repository=repository, fetchers=[])
    backup = ArticleBackupService(repository=repository, store=LocalBackupStore(tmp_path))

    try:
        for _ in range(2):
            build_scheduler(
                settings=Settings(),
                collection=collection,
                backup=backup,
                scheduler=scheduler,
            )

        assert sorted(job.id for job in scheduler.get_jobs()) == [BACKUP_JOB_ID, COLLECT_JOB_ID]
    finally:
        scheduler.shutdown(wait=False)
