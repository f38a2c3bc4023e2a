"""APScheduler cron loop running scheduled sync invocations."""

from __future__ import annotations

import logging

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from scripts.groupsync.config import SyncConfig
from scripts.groupsync.synchronizer import ScheduledInvocation, handle_invocation

logger = logging.getLogger("groupsync.scheduler")

JOB_ID = "okta_group_sync"


def _run_scheduled_sync(config: SyncConfig) -> None:
    handle_invocation(ScheduledInvocation(), config)


def _on_job_error(event) -> None:
    """Log job execution errors."""
    logger.error(
        "Job %s raised an exception: %s",
        event.job_id,
        event.exception,
    )


def build_scheduler(config: SyncConfig) -> BlockingScheduler:
    scheduler = BlockingScheduler()
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_job(
        _run_scheduled_sync,
        CronTrigger.from_crontab(config.scheduler.cron),
        args=[config],
        id=JOB_ID,
        max_instances=1,
        misfire_grace_time=config.scheduler.misfire_grace_time,
    )
    return scheduler


def start_scheduler(config: SyncConfig) -> None:
    """Start the blocking scheduler; returns only on shutdown."""
    scheduler = build_scheduler(config)
    logger.info("Starting scheduler with cron %r", config.scheduler.cron)
    scheduler.start()
