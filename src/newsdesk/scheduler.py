"""APScheduler wiring for periodic collection and daily backup."""

from __future__ import annotations

import logging
from datetime import UTC

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from newsdesk.articles.services.backup_service import ArticleBackupService
from newsdesk.articles.services.collect_service import ArticleCollectionService
from newsdesk.config import Settings

logger = logging.getLogger(__name__)

COLLECT_JOB_ID = "collect_articles"
BACKUP_JOB_ID = "backup_articles"


def run_collection(service: ArticleCollectionService) -> None:
    """Scheduled collection entry point; a failed run waits for the next trigger."""

    try:
        service.run()
    except Exception:  # noqa: BLE001
        logger.exception("Collection run failed")


def build_scheduler(
    *,
    settings: Settings,
    collection: ArticleCollectionService,
    backup: ArticleBackupService,
    scheduler: BaseScheduler | None = None,
) -> BaseScheduler:
    """Register the interval collection job and the daily cron backup job."""

    scheduler = scheduler or BlockingScheduler(timezone=UTC)
    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    scheduler.add_job(
        run_collection,
        trigger=IntervalTrigger(minutes=settings.collection.interval_minutes, timezone=UTC),
        args=[collection],
        id=COLLECT_JOB_ID,
        name="Article collection",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        backup.backup_yesterday,
        trigger=CronTrigger(
            hour=settings.backup.cron_hour,
            minute=settings.backup.cron_minute,
            timezone=UTC,
        ),
        id=BACKUP_JOB_ID,
        name="Daily article backup",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info(
        "Scheduled collection every %d minutes and backup daily at %02d:%02d UTC",
        settings.collection.interval_minutes,
        settings.backup.cron_hour,
        settings.backup.cron_minute,
    )
    return scheduler


def _job_listener(event: JobExecutionEvent) -> None:
    if event.exception is not None:
        logger.error("Scheduler job %s failed: %s", event.job_id, event.exception)
    else:
        logger.debug("Scheduler job %s executed", event.job_id)
