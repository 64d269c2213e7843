"""
SCHEDULER JOB DEFINITIONS

Jobs are thin wrappers that:
- Log execution
- Call existing services
- Send notifications

Idempotency is enforced by the services, so a job that fires twice
(restart, misfire catch-up) does no harm.
NO business logic is allowed here.
"""

import logging

from autoledger.services.automation_service import run_due_automations
from autoledger.services.snapshot_service import capture_daily_snapshots
from autoledger.utils.notifications import notify_run_summary

_logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# AUTOMATION RUN JOB (DAILY)
# -------------------------------------------------------------------

async def run_automations_job():
    """
    Execute due automations for today and alert on blocking errors.
    """
    _logger.info("Running automation job")

    try:
        summary = await run_due_automations()
    except Exception as exc:
        _logger.exception(f"Automation job failed: {exc}")
        return

    if summary.blocking_errors:
        _logger.warning(f"Automation job finished with {len(summary.blocking_errors)} blocking errors")
        await notify_run_summary(summary)


# -------------------------------------------------------------------
# DAILY SNAPSHOT JOB
# -------------------------------------------------------------------

async def capture_snapshots_job():
    """
    Capture today's net worth snapshot for every user.
    """
    _logger.info("Running daily snapshot job")

    try:
        summary = await capture_daily_snapshots()
    except Exception as exc:
        _logger.exception(f"Snapshot job failed: {exc}")
        return

    if summary.errors:
        _logger.warning(f"Snapshot job finished with {len(summary.errors)} user errors")
