"""
LEDGER EFFECT APPLIER
Transaction -> balance / position deltas

RESPONSIBILITIES:
- Translate a ledger transaction into account balance deltas
- Maintain investment quantity and weighted-average purchase price

RULES:
- Balance deltas go through adjust_balance (atomic increment in storage),
  never load-then-store of a cached balance
- Investment preconditions are checked before any account is touched
- All writes happen inside the caller's unit of work; a failure part way
  (e.g. missing transfer destination) is undone by the caller's rollback
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional, Protocol

from autoledger.domain.errors import ConfigurationError, FailedPrecondition
from autoledger.domain.models import InvestmentPosition, LedgerTransaction, TransactionType

logger = logging.getLogger(__name__)


class AccountRepository(Protocol):
    """Protocol for account balance mutation - ASYNC"""

    async def adjust_balance(self, account_id: str, delta: Decimal) -> Decimal:
        """Add delta to the stored balance, return the new balance"""
        ...


class InvestmentRepository(Protocol):
    """Protocol for investment position access - ASYNC"""

    async def get_for_update(self, investment_id: str) -> Optional[InvestmentPosition]:
        """Load a position, locking it for the current unit of work"""
        ...

    async def update_position(
        self,
        investment_id: str,
        quantity: Decimal,
        avg_purchase_price: Decimal,
    ) -> None:
        """Persist new quantity and average price"""
        ...


@dataclass(frozen=True)
class PositionChange:
    investment_id: str
    purchased_quantity: Decimal
    quantity: Decimal
    avg_purchase_price: Decimal


@dataclass
class AppliedEffect:
    """What apply() changed, for logging and tests"""
    balances: Dict[str, Decimal] = field(default_factory=dict)
    position: Optional[PositionChange] = None


def weighted_average_buy(
    investment_id: str,
    quantity: Decimal,
    avg_purchase_price: Decimal,
    amount: Decimal,
    price: Decimal,
) -> PositionChange:
    """
    Weighted-average cost after buying `amount` worth at `price`

    new_qty = qty + amount / price
    new_avg = (qty * avg + amount) / new_qty
    """
    purchased = amount / price
    new_quantity = quantity + purchased
    new_avg = (quantity * avg_purchase_price + amount) / new_quantity
    return PositionChange(
        investment_id=investment_id,
        purchased_quantity=purchased,
        quantity=new_quantity,
        avg_purchase_price=new_avg,
    )


class LedgerEffectApplier:
    """Applies the balance/position side effects of one ledger transaction"""

    def __init__(self, accounts: AccountRepository, investments: InvestmentRepository):
        self.accounts = accounts
        self.investments = investments

    async def apply(self, transaction: LedgerTransaction) -> AppliedEffect:
        """
        Apply the effects of a transaction

        Raises:
            FailedPrecondition: referenced account/investment missing, or no usable price
            ConfigurationError: transaction type cannot be produced by an automation
        """
        tx_type = transaction.transaction_type
        amount = transaction.amount
        effect = AppliedEffect()

        if tx_type == TransactionType.INCOME:
            target = transaction.to_account_id or transaction.account_id
            effect.balances[target] = await self._adjust(transaction, target, amount)

        elif tx_type == TransactionType.EXPENSE:
            effect.balances[transaction.account_id] = await self._adjust(
                transaction, transaction.account_id, -amount
            )

        elif tx_type == TransactionType.TRANSFER:
            effect.balances[transaction.account_id] = await self._adjust(
                transaction, transaction.account_id, -amount
            )
            effect.balances[transaction.to_account_id] = await self._adjust(
                transaction, transaction.to_account_id, amount
            )

        elif tx_type == TransactionType.INVESTMENT_BUY:
            effect.position = await self._buy(transaction)
            effect.balances[transaction.account_id] = await self._adjust(
                transaction, transaction.account_id, -amount
            )

        else:
            raise ConfigurationError(
                f"Unsupported transaction type for automation: {tx_type.value}",
                automation_id=transaction.automation_id,
                occurrence_date=transaction.date,
            )

        logger.debug(f"Applied {tx_type.value} {amount} {transaction.currency}: {effect}")
        return effect

    async def _adjust(self, transaction: LedgerTransaction, account_id: Optional[str], delta: Decimal) -> Decimal:
        if not account_id:
            raise FailedPrecondition(
                f"{transaction.transaction_type.value} transaction has no account",
                automation_id=transaction.automation_id,
                occurrence_date=transaction.date,
            )
        return await self.accounts.adjust_balance(account_id, delta)

    async def _buy(self, transaction: LedgerTransaction) -> PositionChange:
        position = await self.investments.get_for_update(transaction.investment_id)
        if position is None:
            raise FailedPrecondition(
                f"Investment {transaction.investment_id} not found",
                automation_id=transaction.automation_id,
                occurrence_date=transaction.date,
            )

        price = position.current_price
        if price is None or price <= Decimal("0"):
            raise FailedPrecondition(
                f"No current price for investment {position.symbol} ({position.id})",
                automation_id=transaction.automation_id,
                occurrence_date=transaction.date,
            )

        change = weighted_average_buy(
            investment_id=position.id,
            quantity=position.quantity,
            avg_purchase_price=position.avg_purchase_price,
            amount=transaction.amount,
            price=price,
        )
        await self.investments.update_position(
            position.id,
            quantity=change.quantity,
            avg_purchase_price=change.avg_purchase_price,
        )
        return change
