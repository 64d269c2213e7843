from datetime import date, datetime
from decimal import Decimal

import pytest

from autoledger.domain.errors import DuplicateError, FailedPrecondition
from autoledger.domain.models import (
    Automation,
    AutomationKind,
    CadenceType,
    DailySnapshot,
    LedgerTransaction,
    TransactionType,
)
from autoledger.infrastructure.db.models import AutomationModel
from autoledger.infrastructure.db.repositories.account_repository import AccountRepository
from autoledger.infrastructure.db.repositories.automation_repository import AutomationRepository
from autoledger.infrastructure.db.repositories.execution_repository import ExecutionRepository
from autoledger.infrastructure.db.repositories.investment_repository import InvestmentRepository
from autoledger.infrastructure.db.repositories.snapshot_repository import SnapshotRepository
from autoledger.infrastructure.db.repositories.transaction_repository import TransactionRepository


@pytest.mark.asyncio
@pytest.mark.integration
async def test_account_adjust_balance_is_incremental(db_session):
    repo = AccountRepository(db_session)
    account_id = await repo.create(user_id="u1", name="Checking", balance=Decimal("100.00"))

    assert await repo.adjust_balance(account_id, Decimal("-30.50")) == Decimal("69.50")
    assert await repo.adjust_balance(account_id, Decimal("10")) == Decimal("79.50")
    await db_session.commit()

    account = await repo.get(account_id)
    assert account.balance == Decimal("79.50")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_adjust_unknown_account(db_session):
    with pytest.raises(FailedPrecondition):
        await AccountRepository(db_session).adjust_balance("missing", Decimal("1"))


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_user_ids_distinct(db_session):
    repo = AccountRepository(db_session)
    await repo.create(user_id="u2", name="A")
    await repo.create(user_id="u1", name="B")
    await repo.create(user_id="u1", name="C")

    assert await repo.list_user_ids() == ["u1", "u2"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_automation_roundtrip_and_checkpoint(db_session):
    accounts = AccountRepository(db_session)
    account_id = await accounts.create(user_id="u1", name="Checking")
    repo = AutomationRepository(db_session)
    automation_id = await repo.create(
        Automation(
            id="",
            user_id="u1",
            name="Gym",
            kind=AutomationKind.EXPENSE,
            amount=Decimal("29.90"),
            currency="EUR",
            cadence_type=CadenceType.MONTHLY,
            anchor_day=31,
            account_id=account_id,
        )
    )
    await db_session.commit()

    active = await repo.list_active()
    assert [a.id for a in active] == [automation_id]
    assert active[0].kind == AutomationKind.EXPENSE
    assert active[0].amount == Decimal("29.90")

    await repo.update_checkpoint(automation_id, date(2024, 3, 15), date(2024, 3, 31))
    await db_session.commit()

    automation = await repo.get(automation_id)
    assert automation.last_executed_through == date(2024, 3, 15)
    assert automation.next_execution_date == date(2024, 3, 31)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_yearly_without_anchor_month_falls_back_to_created_at(db_session):
    db_session.add(
        AutomationModel(
            id="legacy",
            user_id="u1",
            name="Insurance",
            automation_type="expense",
            amount=Decimal("300"),
            currency="EUR",
            cadence_type="yearly",
            anchor_day=10,
            anchor_month=None,
            created_at=datetime(2023, 7, 2, 12, 0),
        )
    )
    await db_session.commit()

    automation = await AutomationRepository(db_session).get("legacy")
    assert automation.anchor_month == 7


@pytest.mark.asyncio
@pytest.mark.integration
async def test_execution_ledger_rejects_duplicates(db_session):
    accounts = AccountRepository(db_session)
    account_id = await accounts.create(user_id="u1", name="Checking")
    automation_id = await AutomationRepository(db_session).create(
        Automation(
            id="auto1",
            user_id="u1",
            name="Rent",
            kind=AutomationKind.EXPENSE,
            amount=Decimal("50"),
            currency="EUR",
            cadence_type=CadenceType.MONTHLY,
            anchor_day=1,
            account_id=account_id,
        )
    )
    transactions = TransactionRepository(db_session)
    tx_id = await transactions.add(
        LedgerTransaction(
            user_id="u1",
            transaction_type=TransactionType.EXPENSE,
            amount=Decimal("50"),
            currency="EUR",
            date=date(2024, 2, 1),
            note="Auto: Rent",
            account_id=account_id,
            automation_id=automation_id,
            execution_key="auto1_2024-02-01",
        )
    )
    executions = ExecutionRepository(db_session)
    record = await executions.record_execution(automation_id, date(2024, 2, 1), tx_id)
    await db_session.commit()

    assert record.transaction_id == tx_id
    assert await executions.has_executed(automation_id, date(2024, 2, 1)) is True
    assert await executions.has_executed(automation_id, date(2024, 3, 1)) is False

    with pytest.raises(DuplicateError):
        await executions.record_execution(automation_id, date(2024, 2, 1), tx_id)
    await db_session.rollback()

    assert len(await executions.list_for_automation(automation_id)) == 1
    stored = await transactions.list_for_automation(automation_id)
    assert stored[0].execution_key == "auto1_2024-02-01"
    assert stored[0].transaction_type == TransactionType.EXPENSE


@pytest.mark.asyncio
@pytest.mark.integration
async def test_investment_position_update(db_session):
    repo = InvestmentRepository(db_session)
    investment_id = await repo.create(user_id="u1", symbol="VWCE", current_price=Decimal("100"))

    await repo.update_position(investment_id, quantity=Decimal("2.5"), avg_purchase_price=Decimal("98.5"))
    await db_session.commit()

    position = await repo.get_for_update(investment_id)
    assert position.quantity == Decimal("2.5")
    assert position.avg_purchase_price == Decimal("98.5")
    assert position.current_price == Decimal("100")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_snapshot_upsert_overwrites(db_session):
    repo = SnapshotRepository(db_session)

    def snapshot(net_worth):
        return DailySnapshot(
            user_id="u1",
            date=date(2024, 3, 1),
            account_balances={"a": Decimal(net_worth)},
            total_accounts_eur=Decimal(net_worth),
            total_investments_eur=Decimal("0"),
            net_worth_eur=Decimal(net_worth),
            income_eur=Decimal("0"),
            expenses_eur=Decimal("0"),
            eur_usd_rate=Decimal("1.08"),
        )

    first_id = await repo.upsert(snapshot("100"))
    second_id = await repo.upsert(snapshot("150"))
    await db_session.commit()

    assert first_id == second_id
    stored = await repo.get_for("u1", date(2024, 3, 1))
    assert stored.net_worth_eur == Decimal("150")
    assert stored.account_balances == {"a": Decimal("150.0")}
