"""
Investment Repository
Position reads (row-locked for buys) and cost-basis updates
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.models import InvestmentPosition
from autoledger.infrastructure.db.database import translate_storage_errors
from autoledger.infrastructure.db.models import InvestmentModel


class InvestmentRepository:
    """Repository for InvestmentPosition"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    @translate_storage_errors
    async def create(
        self,
        user_id: str,
        symbol: str,
        quantity: Decimal = Decimal("0"),
        avg_purchase_price: Decimal = Decimal("0"),
        current_price: Optional[Decimal] = None,
        currency: str = "EUR",
        name: Optional[str] = None,
        investment_id: Optional[str] = None,
    ) -> str:
        model = InvestmentModel(
            user_id=user_id,
            symbol=symbol,
            name=name,
            quantity=quantity,
            avg_purchase_price=avg_purchase_price,
            current_price=current_price,
            currency=currency,
        )
        if investment_id:
            model.id = investment_id
        self.session.add(model)
        await self.session.flush()
        return model.id

    @translate_storage_errors
    async def get(self, investment_id: str) -> Optional[InvestmentPosition]:
        result = await self.session.execute(
            select(InvestmentModel)
            .where(InvestmentModel.id == investment_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    @translate_storage_errors
    async def get_for_update(self, investment_id: str) -> Optional[InvestmentPosition]:
        """Load a position with SELECT ... FOR UPDATE (no-op on SQLite)"""
        result = await self.session.execute(
            select(InvestmentModel)
            .where(InvestmentModel.id == investment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    @translate_storage_errors
    async def list_active_for_user(self, user_id: str) -> List[InvestmentPosition]:
        result = await self.session.execute(
            select(InvestmentModel)
            .where(InvestmentModel.user_id == user_id, InvestmentModel.is_active.is_(True))
            .order_by(InvestmentModel.symbol)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @translate_storage_errors
    async def update_position(
        self,
        investment_id: str,
        quantity: Decimal,
        avg_purchase_price: Decimal,
    ) -> None:
        await self.session.execute(
            update(InvestmentModel)
            .where(InvestmentModel.id == investment_id)
            .values(quantity=quantity, avg_purchase_price=avg_purchase_price)
            .execution_options(synchronize_session=False)
        )

    @translate_storage_errors
    async def set_current_price(self, investment_id: str, price: Optional[Decimal]) -> None:
        await self.session.execute(
            update(InvestmentModel)
            .where(InvestmentModel.id == investment_id)
            .values(current_price=price)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _to_domain(model: InvestmentModel) -> InvestmentPosition:
        """Convert database model to domain entity"""
        return InvestmentPosition(
            id=model.id,
            user_id=model.user_id,
            symbol=model.symbol,
            name=model.name,
            quantity=Decimal(str(model.quantity)),
            avg_purchase_price=Decimal(str(model.avg_purchase_price)),
            current_price=Decimal(str(model.current_price)) if model.current_price is not None else None,
            currency=model.currency,
            is_active=model.is_active,
        )
