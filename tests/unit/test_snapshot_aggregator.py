"""
Unit Tests for SnapshotAggregator
"""

from datetime import date
from decimal import Decimal

import pytest

from autoledger.domain.errors import FailedPrecondition
from autoledger.domain.models import Account, InvestmentPosition, LedgerTransaction, TransactionType
from autoledger.domain.services.snapshot_aggregator import SnapshotAggregator, build_snapshot, to_eur

DAY = date(2024, 3, 1)


class FixedRateProvider:
    def __init__(self, rate):
        self.rate = rate
        self.calls = 0

    async def get_rate(self, base, quote):
        self.calls += 1
        return self.rate


class MockSnapshotSource:
    """Mock source for testing"""

    def __init__(self):
        self.accounts = {}
        self.investments = {}
        self.transactions = {}
        self.snapshots = {}
        self.fail_for = set()
        self.commits = 0
        self.rollbacks = 0

    async def list_user_ids(self):
        return sorted(self.accounts)

    async def list_accounts(self, user_id):
        if user_id in self.fail_for:
            raise RuntimeError("read failed")
        return self.accounts.get(user_id, [])

    async def list_investments(self, user_id):
        return self.investments.get(user_id, [])

    async def list_transactions(self, user_id, on):
        return [t for t in self.transactions.get(user_id, []) if t.date == on]

    async def upsert_snapshot(self, snapshot):
        self.snapshots[(snapshot.user_id, snapshot.date)] = snapshot

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


def account(account_id, balance, currency="EUR", user_id="u1"):
    return Account(id=account_id, user_id=user_id, name=account_id, balance=Decimal(balance), currency=currency)


def tx(tx_type, amount, currency="EUR", on=DAY):
    return LedgerTransaction(
        user_id="u1",
        transaction_type=tx_type,
        amount=Decimal(amount),
        currency=currency,
        date=on,
        note="",
    )


def test_to_eur_converts_usd_only():
    rate = Decimal("1.25")
    assert to_eur(Decimal("125"), "USD", rate) == Decimal("100")
    assert to_eur(Decimal("125"), "EUR", rate) == Decimal("125")
    assert to_eur(Decimal("125"), "GBP", rate) == Decimal("125")


def test_build_snapshot_totals():
    position = InvestmentPosition(
        id="inv1",
        user_id="u1",
        symbol="VWCE",
        quantity=Decimal("4"),
        avg_purchase_price=Decimal("90"),
        currency="EUR",
        current_price=Decimal("100"),
    )
    unpriced = InvestmentPosition(
        id="inv2",
        user_id="u1",
        symbol="AAPL",
        quantity=Decimal("2"),
        avg_purchase_price=Decimal("50"),
        currency="USD",
    )

    snapshot = build_snapshot(
        user_id="u1",
        snapshot_date=DAY,
        accounts=[account("checking", "1000"), account("brokerage", "250", currency="USD")],
        investments=[position, unpriced],
        transactions=[
            tx(TransactionType.INCOME, "3000"),
            tx(TransactionType.INVESTMENT_SELL, "125", currency="USD"),
            tx(TransactionType.EXPENSE, "40"),
            tx(TransactionType.INVESTMENT_BUY, "100"),
            tx(TransactionType.TRANSFER, "500"),
        ],
        eur_usd_rate=Decimal("1.25"),
    )

    assert snapshot.total_accounts_eur == Decimal("1200")
    assert snapshot.total_investments_eur == Decimal("480")
    assert snapshot.net_worth_eur == Decimal("1680")
    assert snapshot.income_eur == Decimal("3100")
    assert snapshot.expenses_eur == Decimal("140")
    assert snapshot.account_balances == {"checking": Decimal("1000"), "brokerage": Decimal("250")}


@pytest.mark.asyncio
async def test_capture_one_snapshot_per_user_and_isolates_failures():
    source = MockSnapshotSource()
    source.accounts = {"u1": [account("a", "10")], "u2": [account("b", "20", user_id="u2")]}
    source.fail_for = {"u2"}
    fx = FixedRateProvider(Decimal("1.10"))

    summary = await SnapshotAggregator(source, fx).capture(DAY)

    assert fx.calls == 1
    assert summary.users_processed == 1
    assert list(source.snapshots) == [("u1", DAY)]
    assert summary.errors == [{"user_id": "u2", "message": "read failed"}]
    assert source.rollbacks == 1


@pytest.mark.asyncio
async def test_capture_requires_rate():
    source = MockSnapshotSource()
    source.accounts = {"u1": [account("a", "10")]}

    with pytest.raises(FailedPrecondition):
        await SnapshotAggregator(source, FixedRateProvider(None)).capture(DAY)
