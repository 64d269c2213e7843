"""
Unit of Work
Groups the repositories that share one AsyncSession so the runner can
commit or roll back each occurrence as a whole.
"""

from datetime import date
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.errors import TransientStorageError
from autoledger.domain.models import Account, DailySnapshot, InvestmentPosition, LedgerTransaction
from autoledger.infrastructure.db.repositories.account_repository import AccountRepository
from autoledger.infrastructure.db.repositories.automation_repository import AutomationRepository
from autoledger.infrastructure.db.repositories.execution_repository import ExecutionRepository
from autoledger.infrastructure.db.repositories.investment_repository import InvestmentRepository
from autoledger.infrastructure.db.repositories.snapshot_repository import SnapshotRepository
from autoledger.infrastructure.db.repositories.transaction_repository import TransactionRepository


class SqlAlchemyUnitOfWork:
    """Repositories bound to a single session"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.automations = AutomationRepository(session)
        self.accounts = AccountRepository(session)
        self.investments = InvestmentRepository(session)
        self.transactions = TransactionRepository(session)
        self.executions = ExecutionRepository(session)
        self.snapshots = SnapshotRepository(session)

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise TransientStorageError(f"commit failed: {exc}") from exc

    async def rollback(self) -> None:
        await self.session.rollback()


class SqlAlchemySnapshotSource(SqlAlchemyUnitOfWork):
    """Read side of the snapshot aggregator plus the snapshot upsert"""

    async def list_user_ids(self) -> List[str]:
        return await self.accounts.list_user_ids()

    async def list_accounts(self, user_id: str) -> List[Account]:
        return await self.accounts.list_active_for_user(user_id)

    async def list_investments(self, user_id: str) -> List[InvestmentPosition]:
        return await self.investments.list_active_for_user(user_id)

    async def list_transactions(self, user_id: str, on: date) -> List[LedgerTransaction]:
        return await self.transactions.list_for_user_on(user_id, on)

    async def upsert_snapshot(self, snapshot: DailySnapshot) -> None:
        await self.snapshots.upsert(snapshot)
