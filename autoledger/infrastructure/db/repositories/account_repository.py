"""
Account Repository
Balance reads and atomic balance increments
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import distinct, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.errors import FailedPrecondition
from autoledger.domain.models import Account
from autoledger.infrastructure.db.database import translate_storage_errors
from autoledger.infrastructure.db.models import AccountModel


class AccountRepository:
    """Repository for Account"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    @translate_storage_errors
    async def create(
        self,
        user_id: str,
        name: str,
        balance: Decimal = Decimal("0"),
        currency: str = "EUR",
        account_id: Optional[str] = None,
        is_active: bool = True,
    ) -> str:
        model = AccountModel(
            user_id=user_id,
            name=name,
            balance=balance,
            currency=currency,
            is_active=is_active,
        )
        if account_id:
            model.id = account_id
        self.session.add(model)
        await self.session.flush()
        return model.id

    @translate_storage_errors
    async def get(self, account_id: str) -> Optional[Account]:
        result = await self.session.execute(
            select(AccountModel)
            .where(AccountModel.id == account_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    @translate_storage_errors
    async def list_active_for_user(self, user_id: str) -> List[Account]:
        result = await self.session.execute(
            select(AccountModel)
            .where(AccountModel.user_id == user_id, AccountModel.is_active.is_(True))
            .order_by(AccountModel.created_at, AccountModel.id)
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @translate_storage_errors
    async def list_user_ids(self) -> List[str]:
        """Distinct owners of at least one account"""
        result = await self.session.execute(
            select(distinct(AccountModel.user_id)).order_by(AccountModel.user_id)
        )
        return list(result.scalars().all())

    @translate_storage_errors
    async def adjust_balance(self, account_id: str, delta: Decimal) -> Decimal:
        """
        Add delta to the stored balance in a single UPDATE

        Args:
            account_id: Account to change
            delta: Signed amount

        Returns:
            Balance after the change

        Raises:
            FailedPrecondition: account does not exist
        """
        result = await self.session.execute(
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(balance=AccountModel.balance + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise FailedPrecondition(f"Account {account_id} not found")

        balance = await self.session.scalar(
            select(AccountModel.balance).where(AccountModel.id == account_id)
        )
        return Decimal(str(balance))

    @staticmethod
    def _to_domain(model: AccountModel) -> Account:
        """Convert database model to domain entity"""
        return Account(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            balance=Decimal(str(model.balance)),
            currency=model.currency,
            is_active=model.is_active,
        )
