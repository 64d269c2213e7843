from datetime import date
from decimal import Decimal

import pytest

from autoledger.domain.models import Automation, AutomationKind, CadenceType
from autoledger.infrastructure.db.repositories.account_repository import AccountRepository
from autoledger.infrastructure.db.repositories.automation_repository import AutomationRepository
from autoledger.infrastructure.db.repositories.investment_repository import InvestmentRepository
from autoledger.infrastructure.db.repositories.snapshot_repository import SnapshotRepository
from autoledger.infrastructure.market_data.static_provider import StaticFxRateProvider
from autoledger.services.automation_service import run_due_automations
from autoledger.services.snapshot_service import capture_daily_snapshots


@pytest.mark.asyncio
@pytest.mark.integration
async def test_snapshot_after_automation_run(db_session, session_factory):
    accounts = AccountRepository(db_session)
    checking = await accounts.create(user_id="u1", name="Checking", balance=Decimal("1000"))
    await accounts.create(user_id="u1", name="US account", balance=Decimal("550"), currency="USD")
    await InvestmentRepository(db_session).create(
        user_id="u1",
        symbol="VWCE",
        quantity=Decimal("3"),
        avg_purchase_price=Decimal("90"),
        current_price=Decimal("110"),
    )
    await AutomationRepository(db_session).create(
        Automation(
            id="salary",
            user_id="u1",
            name="Salary",
            kind=AutomationKind.INCOME,
            amount=Decimal("2000"),
            currency="EUR",
            cadence_type=CadenceType.MONTHLY,
            anchor_day=1,
            to_account_id=checking,
            last_executed_through=date(2024, 2, 29),
        )
    )
    await db_session.commit()

    await run_due_automations(date(2024, 3, 1), session_factory=session_factory)
    fx = StaticFxRateProvider({("EUR", "USD"): Decimal("1.10")})
    summary = await capture_daily_snapshots(date(2024, 3, 1), session_factory=session_factory, fx_provider=fx)

    assert summary.users_processed == 1
    async with session_factory() as session:
        snapshot = await SnapshotRepository(session).get_for("u1", date(2024, 3, 1))

    # 3000 EUR + 550 USD / 1.10
    assert snapshot.total_accounts_eur == Decimal("3500")
    assert snapshot.total_investments_eur == Decimal("330")
    assert snapshot.net_worth_eur == Decimal("3830")
    assert snapshot.income_eur == Decimal("2000")
    assert snapshot.expenses_eur == Decimal("0")
