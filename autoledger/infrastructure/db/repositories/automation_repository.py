"""
Automation Repository
Load automations for the runner and persist checkpoints
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.models import Automation, AutomationKind, CadenceType
from autoledger.infrastructure.db.database import translate_storage_errors
from autoledger.infrastructure.db.models import AutomationModel


class AutomationRepository:
    """Repository for Automation"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    @translate_storage_errors
    async def create(self, automation: Automation) -> str:
        """
        Create new automation

        Args:
            automation: Automation domain object (id may be empty)

        Returns:
            ID of created record
        """
        model = AutomationModel(
            user_id=automation.user_id,
            name=automation.name,
            automation_type=AutomationKind(automation.kind).value,
            amount=automation.amount,
            currency=automation.currency,
            cadence_type=CadenceType(automation.cadence_type).value,
            anchor_day=automation.anchor_day,
            anchor_month=automation.anchor_month,
            account_id=automation.account_id,
            to_account_id=automation.to_account_id,
            investment_id=automation.investment_id,
            category_id=automation.category_id,
            note=automation.note,
            is_active=automation.is_active,
            last_executed_through=automation.last_executed_through,
            next_execution_date=automation.next_execution_date,
        )
        if automation.id:
            model.id = automation.id
        if automation.created_at is not None:
            model.created_at = automation.created_at

        self.session.add(model)
        await self.session.flush()
        return model.id

    @translate_storage_errors
    async def get(self, automation_id: str) -> Optional[Automation]:
        result = await self.session.execute(
            select(AutomationModel)
            .where(AutomationModel.id == automation_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    @translate_storage_errors
    async def list_active(self) -> List[Automation]:
        """All active automations, oldest first"""
        result = await self.session.execute(
            select(AutomationModel)
            .where(AutomationModel.is_active.is_(True))
            .order_by(AutomationModel.created_at, AutomationModel.id)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @translate_storage_errors
    async def update_checkpoint(
        self,
        automation_id: str,
        last_executed_through: date,
        next_execution_date: Optional[date],
    ) -> None:
        await self.session.execute(
            update(AutomationModel)
            .where(AutomationModel.id == automation_id)
            .values(
                last_executed_through=last_executed_through,
                next_execution_date=next_execution_date,
            )
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _to_domain(model: AutomationModel) -> Automation:
        """Convert database model to domain entity"""
        anchor_month = model.anchor_month
        if anchor_month is None and model.cadence_type == CadenceType.YEARLY.value and model.created_at:
            # Legacy rows: yearly month implied by creation date
            anchor_month = model.created_at.month

        try:
            kind = AutomationKind(model.automation_type)
        except ValueError:
            kind = model.automation_type

        return Automation(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            kind=kind,
            amount=Decimal(str(model.amount)),
            currency=model.currency,
            cadence_type=model.cadence_type,
            anchor_day=model.anchor_day,
            anchor_month=anchor_month,
            account_id=model.account_id,
            to_account_id=model.to_account_id,
            investment_id=model.investment_id,
            category_id=model.category_id,
            note=model.note,
            is_active=model.is_active,
            last_executed_through=model.last_executed_through,
            next_execution_date=model.next_execution_date,
            created_at=model.created_at,
        )
