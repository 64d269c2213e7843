"""
Automation Execution Repository
The execution ledger: one row per realized (automation, occurrence date).

The unique constraint uq_automation_execution_occurrence is the only
synchronization between concurrent runners.
"""

from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.errors import DuplicateError
from autoledger.domain.models import ExecutionRecord
from autoledger.infrastructure.db.database import translate_storage_errors
from autoledger.infrastructure.db.models import AutomationExecutionModel


class ExecutionRepository:
    """Repository for ExecutionRecord"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    @translate_storage_errors
    async def has_executed(self, automation_id: str, occurrence_date: date) -> bool:
        result = await self.session.execute(
            select(AutomationExecutionModel.id)
            .where(
                AutomationExecutionModel.automation_id == automation_id,
                AutomationExecutionModel.occurrence_date == occurrence_date,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    @translate_storage_errors
    async def record_execution(
        self,
        automation_id: str,
        occurrence_date: date,
        transaction_id: str,
    ) -> ExecutionRecord:
        """
        Insert the execution record

        Raises:
            DuplicateError: (automation_id, occurrence_date) already recorded.
                The session must be rolled back by the caller.
        """
        model = AutomationExecutionModel(
            automation_id=automation_id,
            occurrence_date=occurrence_date,
            transaction_id=transaction_id,
        )
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateError(
                f"Execution already recorded for {automation_id} on {occurrence_date}",
                automation_id=automation_id,
                occurrence_date=occurrence_date,
            ) from exc

        return self._to_domain(model)

    @translate_storage_errors
    async def list_for_automation(self, automation_id: str) -> List[ExecutionRecord]:
        result = await self.session.execute(
            select(AutomationExecutionModel)
            .where(AutomationExecutionModel.automation_id == automation_id)
            .order_by(AutomationExecutionModel.occurrence_date)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @staticmethod
    def _to_domain(model: AutomationExecutionModel) -> ExecutionRecord:
        """Convert database model to domain entity"""
        return ExecutionRecord(
            automation_id=model.automation_id,
            occurrence_date=model.occurrence_date,
            transaction_id=model.transaction_id,
            executed_at=model.executed_at,
        )
