"""
SCHEDULER BOOTSTRAP

Initializes and manages the APScheduler instance.
Scheduler is orchestration-only and contains no business logic.
"""

import logging
from typing import Tuple

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from autoledger.config import settings
from autoledger.scheduler.jobs import capture_snapshots_job, run_automations_job

_logger = logging.getLogger(__name__)

_SCHEDULER: AsyncIOScheduler | None = None


def parse_run_time(value: str) -> Tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)"""
    try:
        hour_s, minute_s = value.strip().split(":")
        hour, minute = int(hour_s), int(minute_s)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid run time {value!r}, expected HH:MM")
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid run time {value!r}, expected HH:MM")
    return hour, minute


def build_scheduler() -> AsyncIOScheduler:
    """
    Create the scheduler with all jobs registered (not started).
    """
    timezone = pytz.timezone(settings.TIMEZONE)
    scheduler = AsyncIOScheduler(timezone=timezone)

    # ------------------------------------------------------------
    # AUTOMATION RUN JOB
    # Daily @ AUTOMATION_RUN_TIME
    # ------------------------------------------------------------
    hour, minute = parse_run_time(settings.AUTOMATION_RUN_TIME)
    scheduler.add_job(
        run_automations_job,
        trigger=CronTrigger(hour=hour, minute=minute, timezone=timezone),
        id="run_automations_job",
        name="Recurring Automations",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    # ------------------------------------------------------------
    # DAILY SNAPSHOT JOB
    # Daily @ SNAPSHOT_RUN_TIME
    # ------------------------------------------------------------
    hour, minute = parse_run_time(settings.SNAPSHOT_RUN_TIME)
    scheduler.add_job(
        capture_snapshots_job,
        trigger=CronTrigger(hour=hour, minute=minute, timezone=timezone),
        id="capture_snapshots_job",
        name="Daily Snapshots",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )

    return scheduler


def start_scheduler() -> AsyncIOScheduler:
    """
    Start the scheduler; must be called from a running event loop.
    """
    global _SCHEDULER

    if _SCHEDULER is not None:
        return _SCHEDULER

    scheduler = build_scheduler()
    scheduler.start()
    _SCHEDULER = scheduler

    for job in scheduler.get_jobs():
        _logger.info(f"Scheduled {job.name} - next run: {job.next_run_time}")
    return scheduler


def shutdown_scheduler():
    """
    Shutdown the scheduler safely.
    """
    global _SCHEDULER

    if _SCHEDULER:
        _SCHEDULER.shutdown(wait=False)
        _SCHEDULER = None
        _logger.info("Scheduler shut down")


def scheduler_running() -> bool:
    return bool(_SCHEDULER and _SCHEDULER.running)
