"""
Automation Service
Entry point that turns due automations into ledger transactions.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoledger.config import settings
from autoledger.domain.models import RunSummary
from autoledger.domain.services.automation_runner import AutomationRunner
from autoledger.domain.services.calendar_engine import occurrences, validate_cadence
from autoledger.infrastructure.db import database
from autoledger.infrastructure.db.repositories.automation_repository import AutomationRepository
from autoledger.infrastructure.db.unit_of_work import SqlAlchemyUnitOfWork
from autoledger.utils.time import today_local

logger = logging.getLogger(__name__)


async def run_due_automations(
    as_of: Optional[date] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> RunSummary:
    """
    Execute every due occurrence of every active automation up to as_of.

    Args:
        as_of: Inclusive end of the run window (defaults to today in TIMEZONE)
        session_factory: Session factory override (tests, scripts)

    Returns:
        RunSummary with counts and per-automation errors
    """
    as_of = as_of or today_local()
    factory = session_factory or database.async_session_factory

    async with factory() as session:
        runner = AutomationRunner(
            SqlAlchemyUnitOfWork(session),
            catchup_months=settings.AUTOMATION_CATCHUP_MONTHS,
        )
        summary = await runner.run(as_of)

    logger.info(
        f"Automation run {as_of}: processed={summary.automations_processed} "
        f"skipped={summary.automations_skipped} created={summary.transactions_created} "
        f"errors={len(summary.errors)} blocking={len(summary.blocking_errors)}"
    )
    return summary


async def preview_occurrences(session: AsyncSession, automation_id: str, from_date: date, to_date: date):
    """
    Upcoming occurrence dates for one automation, without side effects.

    Returns:
        (automation, dates) or (None, []) when the automation does not exist
    """
    automation = await AutomationRepository(session).get(automation_id)
    if automation is None:
        return None, []

    cadence = validate_cadence(automation.cadence_type, automation.anchor_day, automation.anchor_month)
    dates = occurrences(cadence, automation.anchor_day, from_date, to_date, automation.anchor_month)
    return automation, dates
