"""
Snapshot Service
Writes the daily per-user net worth read model.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoledger.domain.models import SnapshotRunSummary
from autoledger.domain.services.snapshot_aggregator import FxRateProvider, SnapshotAggregator
from autoledger.infrastructure.db import database
from autoledger.infrastructure.db.unit_of_work import SqlAlchemySnapshotSource
from autoledger.infrastructure.market_data.provider_factory import get_fx_provider
from autoledger.utils.time import today_local

logger = logging.getLogger(__name__)


async def capture_daily_snapshots(
    snapshot_date: Optional[date] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    fx_provider: Optional[FxRateProvider] = None,
) -> SnapshotRunSummary:
    """
    Upsert one DailySnapshot per user for snapshot_date.

    Re-running for the same date overwrites the earlier snapshot.
    """
    snapshot_date = snapshot_date or today_local()
    factory = session_factory or database.async_session_factory
    fx_provider = fx_provider or get_fx_provider()

    async with factory() as session:
        aggregator = SnapshotAggregator(SqlAlchemySnapshotSource(session), fx_provider)
        summary = await aggregator.capture(snapshot_date)

    logger.info(
        f"Snapshots {snapshot_date}: users={summary.users_processed} errors={len(summary.errors)}"
    )
    return summary
