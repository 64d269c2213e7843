"""
Daily Snapshot Repository
Upsert-by-(user_id, date) read model
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.models import DailySnapshot
from autoledger.infrastructure.db.database import translate_storage_errors
from autoledger.infrastructure.db.models import DailySnapshotModel


class SnapshotRepository:
    """Repository for DailySnapshot"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_storage_errors
    async def upsert(self, snapshot: DailySnapshot) -> int:
        """Insert or replace the snapshot for (user_id, date)"""
        result = await self.session.execute(
            select(DailySnapshotModel).where(
                DailySnapshotModel.user_id == snapshot.user_id,
                DailySnapshotModel.date == snapshot.date,
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            model = DailySnapshotModel(user_id=snapshot.user_id, date=snapshot.date)
            self.session.add(model)

        model.account_balances = {k: float(v) for k, v in snapshot.account_balances.items()}
        model.total_accounts_eur = snapshot.total_accounts_eur
        model.total_investments_eur = snapshot.total_investments_eur
        model.net_worth_eur = snapshot.net_worth_eur
        model.income_eur = snapshot.income_eur
        model.expenses_eur = snapshot.expenses_eur
        model.eur_usd_rate = snapshot.eur_usd_rate

        await self.session.flush()
        return model.id

    @translate_storage_errors
    async def get_for(self, user_id: str, on: date) -> Optional[DailySnapshot]:
        result = await self.session.execute(
            select(DailySnapshotModel)
            .where(DailySnapshotModel.user_id == user_id, DailySnapshotModel.date == on)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    @staticmethod
    def _to_domain(model: DailySnapshotModel) -> DailySnapshot:
        """Convert database model to domain entity"""
        return DailySnapshot(
            user_id=model.user_id,
            date=model.date,
            account_balances={k: Decimal(str(v)) for k, v in (model.account_balances or {}).items()},
            total_accounts_eur=Decimal(str(model.total_accounts_eur)),
            total_investments_eur=Decimal(str(model.total_investments_eur)),
            net_worth_eur=Decimal(str(model.net_worth_eur)),
            income_eur=Decimal(str(model.income_eur)),
            expenses_eur=Decimal(str(model.expenses_eur)),
            eur_usd_rate=Decimal(str(model.eur_usd_rate)),
        )
