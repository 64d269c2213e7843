"""
Automation API Routes
Trigger a run and preview upcoming occurrences

Date Rules:
- If `as_of` is provided, occurrences up to and including that date run
- If `as_of` is omitted, today in the configured TIMEZONE is used
"""

from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from autoledger.domain.errors import ConfigurationError
from autoledger.infrastructure.db.database import get_db
from autoledger.services.automation_service import preview_occurrences, run_due_automations
from autoledger.utils.time import today_local

router = APIRouter()


# -------------------------------------------------------------------
# Response models
# -------------------------------------------------------------------

class RunErrorResponse(BaseModel):
    automation_id: str
    message: str
    error_type: str
    retryable: bool
    blocking: bool
    occurrence_date: Optional[date] = None


class RunSummaryResponse(BaseModel):
    as_of: date
    automations_processed: int
    automations_skipped: int
    transactions_created: int
    errors: List[RunErrorResponse]


class PreviewResponse(BaseModel):
    automation_id: str
    name: str
    is_active: bool
    last_executed_through: Optional[date] = None
    upcoming: List[date]


# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------

@router.post("/run", response_model=RunSummaryResponse)
async def run_automations(as_of: Optional[date] = Query(None, description="YYYY-MM-DD, defaults to today")):
    """Run all due automations up to as_of"""
    summary = await run_due_automations(as_of)
    return RunSummaryResponse(
        as_of=summary.as_of,
        automations_processed=summary.automations_processed,
        automations_skipped=summary.automations_skipped,
        transactions_created=summary.transactions_created,
        errors=[RunErrorResponse(**e.to_dict()) for e in summary.errors],
    )


@router.get("/{automation_id}/preview", response_model=PreviewResponse)
async def preview_automation(
    automation_id: str,
    days: int = Query(31, ge=1, le=366),
    db: AsyncSession = Depends(get_db),
):
    """Upcoming occurrence dates in the next `days` days (no side effects)"""
    today = today_local()
    try:
        automation, dates = await preview_occurrences(
            db, automation_id, today, today + timedelta(days=days - 1)
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if automation is None:
        raise HTTPException(status_code=404, detail="Automation not found")

    return PreviewResponse(
        automation_id=automation.id,
        name=automation.name,
        is_active=automation.is_active,
        last_executed_through=automation.last_executed_through,
        upcoming=dates,
    )
