"""
SNAPSHOT AGGREGATOR
Committed balances + day's transactions -> daily read model

RESPONSIBILITIES:
- Value accounts and investments in EUR
- Sum the day's income and expenses
- Upsert one snapshot per (user_id, date)

RULES:
- Read-only with respect to accounts, investments and transactions
- Transfers are internal movements: neither income nor expense
- investment_sell counts as income, investment_buy as expense
- Investments without a current price are valued at cost basis
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol

from autoledger.domain.errors import FailedPrecondition
from autoledger.domain.models import (
    Account,
    DailySnapshot,
    InvestmentPosition,
    LedgerTransaction,
    SnapshotRunSummary,
    TransactionType,
)

logger = logging.getLogger(__name__)

INCOME_TYPES = (TransactionType.INCOME, TransactionType.INVESTMENT_SELL)
EXPENSE_TYPES = (TransactionType.EXPENSE, TransactionType.INVESTMENT_BUY)


class FxRateProvider(Protocol):
    async def get_rate(self, base: str, quote: str) -> Optional[Decimal]:
        ...


class SnapshotSource(Protocol):
    """Read side plus snapshot upsert, sharing one storage transaction"""

    async def list_user_ids(self) -> List[str]:
        ...

    async def list_accounts(self, user_id: str) -> List[Account]:
        ...

    async def list_investments(self, user_id: str) -> List[InvestmentPosition]:
        ...

    async def list_transactions(self, user_id: str, on: date) -> List[LedgerTransaction]:
        ...

    async def upsert_snapshot(self, snapshot: DailySnapshot) -> None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


def to_eur(amount: Decimal, currency: str, eur_usd_rate: Decimal) -> Decimal:
    """Convert to EUR; USD uses the EUR/USD rate, anything else is taken at face value"""
    code = (currency or "EUR").upper()
    if code == "USD":
        return amount / eur_usd_rate
    if code != "EUR":
        logger.warning(f"No conversion for {code}; counting at face value")
    return amount


def build_snapshot(
    user_id: str,
    snapshot_date: date,
    accounts: Iterable[Account],
    investments: Iterable[InvestmentPosition],
    transactions: Iterable[LedgerTransaction],
    eur_usd_rate: Decimal,
) -> DailySnapshot:
    """Aggregate one user's committed state into a daily snapshot"""
    account_balances: Dict[str, Decimal] = {}
    total_accounts = Decimal("0")
    for account in accounts:
        account_balances[account.id] = account.balance
        total_accounts += to_eur(account.balance, account.currency, eur_usd_rate)

    total_investments = Decimal("0")
    for position in investments:
        total_investments += to_eur(position.market_value, position.currency, eur_usd_rate)

    income = Decimal("0")
    expenses = Decimal("0")
    for tx in transactions:
        amount_eur = to_eur(tx.amount, tx.currency, eur_usd_rate)
        if tx.transaction_type in INCOME_TYPES:
            income += amount_eur
        elif tx.transaction_type in EXPENSE_TYPES:
            expenses += amount_eur

    return DailySnapshot(
        user_id=user_id,
        date=snapshot_date,
        account_balances=account_balances,
        total_accounts_eur=total_accounts,
        total_investments_eur=total_investments,
        net_worth_eur=total_accounts + total_investments,
        income_eur=income,
        expenses_eur=expenses,
        eur_usd_rate=eur_usd_rate,
    )


class SnapshotAggregator:
    """Writes one snapshot per user for a given date"""

    def __init__(self, source: SnapshotSource, fx_provider: FxRateProvider):
        self.source = source
        self.fx_provider = fx_provider

    async def capture(self, snapshot_date: date) -> SnapshotRunSummary:
        summary = SnapshotRunSummary(date=snapshot_date)
        eur_usd_rate = await self.fx_provider.get_rate("EUR", "USD")
        if eur_usd_rate is None or eur_usd_rate <= 0:
            raise FailedPrecondition("no EUR/USD rate available for snapshot valuation")
        user_ids = await self.source.list_user_ids()
        logger.info(f"Capturing snapshots for {len(user_ids)} users on {snapshot_date} (EUR/USD {eur_usd_rate})")

        for user_id in user_ids:
            try:
                snapshot = build_snapshot(
                    user_id=user_id,
                    snapshot_date=snapshot_date,
                    accounts=await self.source.list_accounts(user_id),
                    investments=await self.source.list_investments(user_id),
                    transactions=await self.source.list_transactions(user_id, snapshot_date),
                    eur_usd_rate=eur_usd_rate,
                )
                await self.source.upsert_snapshot(snapshot)
                await self.source.commit()
            except Exception as exc:
                logger.exception(f"Snapshot for user {user_id} failed")
                await self.source.rollback()
                summary.errors.append({"user_id": user_id, "message": str(exc) or type(exc).__name__})
                continue
            summary.users_processed += 1

        return summary
