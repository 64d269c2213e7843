"""
FastAPI Main Application
Runs recurring automations and daily snapshots (API + scheduler)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from autoledger.api.routes import automations, health, snapshots
from autoledger.config import settings
from autoledger.core.logging import setup_logging
from autoledger.infrastructure.db.database import close_db, init_db
from autoledger.scheduler.scheduler import scheduler_running, shutdown_scheduler, start_scheduler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of database and scheduler
    """
    # ===================
    # STARTUP
    # ===================
    logger.info("Starting autoledger")
    await init_db()
    logger.info("Database initialized")

    if settings.SCHEDULER_ENABLED:
        try:
            start_scheduler()
        except ValueError as e:
            logger.error(f"Failed to start scheduler: {e}")
    else:
        logger.info("Scheduler disabled")

    logger.info(f"API Server: http://{settings.API_HOST}:{settings.API_PORT}")

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("Shutting down autoledger")
    shutdown_scheduler()
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI app
app = FastAPI(
    title="autoledger",
    description="Recurring financial automations and daily net worth snapshots",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(automations.router, prefix="/api/v1/automations", tags=["automations"])
app.include_router(snapshots.router, prefix="/api/v1/snapshots", tags=["snapshots"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "autoledger",
        "version": "0.1.0",
        "scheduler": "running" if scheduler_running() else "disabled",
        "docs": "/docs",
    }
