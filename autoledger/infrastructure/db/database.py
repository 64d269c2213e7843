"""
Database Configuration
SQLAlchemy async setup (PostgreSQL in production, SQLite for tests)
"""

import functools
import os
from typing import AsyncGenerator

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from autoledger.config import settings
from autoledger.domain.errors import TransientStorageError


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def to_async_url(url: str) -> str:
    """Map a plain database URL to its async driver"""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    async_url = to_async_url(url)
    if async_url.startswith("postgresql"):
        return create_async_engine(
            async_url,
            echo=echo,
            pool_size=10,
            max_overflow=20,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,
        )
    return create_async_engine(async_url, echo=echo)


# Avoid creating the async engine during Alembic autogenerate runs
ALEMBIC_MODE = os.getenv("ALEMBIC_MODE") == "1" or os.getenv("ALEMBIC_CONTEXT") == "1"

if not ALEMBIC_MODE:
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
else:
    engine = None
    async_session_factory = None


def translate_storage_errors(func):
    """Re-raise connection/timeout failures as TransientStorageError"""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
            raise TransientStorageError(f"{func.__qualname__}: {exc}") from exc

    return wrapper


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session
    Use in FastAPI routes as:
    async def my_route(db: AsyncSession = Depends(get_db))
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Initialize database (create tables)"""
    if os.getenv("AUTO_CREATE_TABLES", "false").lower() not in ("1", "true", "yes", "on"):
        return
    async with engine.begin() as conn:
        # Import all models here to ensure they're registered
        from autoledger.infrastructure.db import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connections"""
    if engine is not None:
        await engine.dispose()
