from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from autoledger.api.routes import automations, health, snapshots
from autoledger.infrastructure.db import database
from autoledger.infrastructure.db.database import Base, get_db
from autoledger.infrastructure.db import models  # noqa: F401


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def app(session_factory, monkeypatch) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["health"])
    app.include_router(automations.router, prefix="/api/v1/automations", tags=["automations"])
    app.include_router(snapshots.router, prefix="/api/v1/snapshots", tags=["snapshots"])

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    # Services open their own sessions through the module-level factory
    monkeypatch.setattr(database, "async_session_factory", session_factory)
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
