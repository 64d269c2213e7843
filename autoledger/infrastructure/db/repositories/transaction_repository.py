"""
Ledger Transaction Repository
Insert-only ledger entries
"""

from datetime import date
from decimal import Decimal
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.models import LedgerTransaction, TransactionType
from autoledger.infrastructure.db.database import translate_storage_errors
from autoledger.infrastructure.db.models import LedgerTransactionModel


class TransactionRepository:
    """Repository for LedgerTransaction"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    @translate_storage_errors
    async def add(self, transaction: LedgerTransaction) -> str:
        """
        Insert a ledger transaction

        Returns:
            ID of created record
        """
        model = LedgerTransactionModel(
            user_id=transaction.user_id,
            transaction_type=TransactionType(transaction.transaction_type).value,
            amount=transaction.amount,
            currency=transaction.currency,
            date=transaction.date,
            account_id=transaction.account_id,
            to_account_id=transaction.to_account_id,
            investment_id=transaction.investment_id,
            category_id=transaction.category_id,
            note=transaction.note,
            automation_id=transaction.automation_id,
            execution_key=transaction.execution_key,
        )
        if transaction.id:
            model.id = transaction.id
        self.session.add(model)
        await self.session.flush()
        return model.id

    @translate_storage_errors
    async def list_for_user_on(self, user_id: str, on: date) -> List[LedgerTransaction]:
        result = await self.session.execute(
            select(LedgerTransactionModel)
            .where(LedgerTransactionModel.user_id == user_id, LedgerTransactionModel.date == on)
            .order_by(LedgerTransactionModel.created_at)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @translate_storage_errors
    async def list_for_automation(self, automation_id: str) -> List[LedgerTransaction]:
        result = await self.session.execute(
            select(LedgerTransactionModel)
            .where(LedgerTransactionModel.automation_id == automation_id)
            .order_by(LedgerTransactionModel.date)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @translate_storage_errors
    async def count_for_automation(self, automation_id: str) -> int:
        result = await self.session.execute(
            select(func.count(LedgerTransactionModel.id))
            .where(LedgerTransactionModel.automation_id == automation_id)
        )
        return int(result.scalar() or 0)

    @staticmethod
    def _to_domain(model: LedgerTransactionModel) -> LedgerTransaction:
        """Convert database model to domain entity"""
        return LedgerTransaction(
            id=model.id,
            user_id=model.user_id,
            transaction_type=TransactionType(model.transaction_type),
            amount=Decimal(str(model.amount)),
            currency=model.currency,
            date=model.date,
            note=model.note or "",
            account_id=model.account_id,
            to_account_id=model.to_account_id,
            investment_id=model.investment_id,
            category_id=model.category_id,
            automation_id=model.automation_id,
            execution_key=model.execution_key,
        )
