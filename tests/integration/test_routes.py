from datetime import date, timedelta
from decimal import Decimal

import pytest

from autoledger.config import settings
from autoledger.domain.models import Automation, AutomationKind, CadenceType
from autoledger.infrastructure.db.repositories.account_repository import AccountRepository
from autoledger.infrastructure.db.repositories.automation_repository import AutomationRepository
from autoledger.infrastructure.db.repositories.snapshot_repository import SnapshotRepository
from autoledger.utils.time import today_local


async def seed(session, **overrides):
    account_id = await AccountRepository(session).create(user_id="u1", name="Checking", balance=Decimal("500"))
    values = dict(
        id="rent",
        user_id="u1",
        name="Rent",
        kind=AutomationKind.EXPENSE,
        amount=Decimal("50"),
        currency="EUR",
        cadence_type=CadenceType.MONTHLY,
        anchor_day=1,
        account_id=account_id,
        last_executed_through=date(2024, 1, 1),
    )
    values.update(overrides)
    await AutomationRepository(session).create(Automation(**values))
    await session.commit()
    return account_id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_ready(client):
    response = await client.get("/ready")

    assert response.status_code == 200
    assert response.json()["db_connected"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_run_endpoint_returns_summary(client, db_session):
    await seed(db_session)

    response = await client.post("/api/v1/automations/run", params={"as_of": "2024-03-15"})

    assert response.status_code == 200
    body = response.json()
    assert body["as_of"] == "2024-03-15"
    assert body["transactions_created"] == 2
    assert body["automations_processed"] == 1
    assert body["errors"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_run_endpoint_reports_configuration_errors(client, db_session):
    await seed(db_session, anchor_day=0)

    response = await client.post("/api/v1/automations/run", params={"as_of": "2024-03-15"})

    body = response.json()
    assert body["transactions_created"] == 0
    assert body["errors"][0]["error_type"] == "ConfigurationError"
    assert body["errors"][0]["blocking"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_run_endpoint_rejects_bad_date(client):
    response = await client.post("/api/v1/automations/run", params={"as_of": "15.03.2024"})

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_preview_lists_upcoming_dates(client, db_session):
    await seed(db_session, cadence_type=CadenceType.WEEKLY, anchor_day=3)

    response = await client.get("/api/v1/automations/rent/preview", params={"days": 14})

    assert response.status_code == 200
    upcoming = [date.fromisoformat(d) for d in response.json()["upcoming"]]
    today = today_local()
    assert len(upcoming) == 2
    assert all(today <= d <= today + timedelta(days=13) for d in upcoming)
    assert all(d.weekday() == 2 for d in upcoming)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_preview_unknown_automation(client):
    response = await client.get("/api/v1/automations/nope/preview")

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_preview_invalid_cadence(client, db_session):
    await seed(db_session, anchor_day=45)

    response = await client.get("/api/v1/automations/rent/preview")

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_snapshot_endpoint_upserts(client, db_session, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "FX_PROVIDER", "static")
    await seed(db_session)

    first = await client.post("/api/v1/snapshots/run", params={"date": "2024-03-01"})
    second = await client.post("/api/v1/snapshots/run", params={"date": "2024-03-01"})

    assert first.status_code == 200
    assert second.json() == {"date": "2024-03-01", "users_processed": 1, "errors": []}

    async with session_factory() as session:
        snapshot = await SnapshotRepository(session).get_for("u1", date(2024, 3, 1))
    assert snapshot.net_worth_eur == Decimal("500")
    assert snapshot.eur_usd_rate == Decimal(str(settings.EUR_USD_FALLBACK_RATE))
