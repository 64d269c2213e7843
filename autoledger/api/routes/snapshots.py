"""
Snapshot API Routes
Capture the daily net worth snapshot on demand
"""

from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from autoledger.domain.errors import FailedPrecondition
from autoledger.services.snapshot_service import capture_daily_snapshots

router = APIRouter()


class SnapshotRunResponse(BaseModel):
    date: date
    users_processed: int
    errors: List[Dict[str, str]]


@router.post("/run", response_model=SnapshotRunResponse)
async def run_snapshots(snapshot_date: Optional[date] = Query(None, alias="date")):
    """Upsert today's (or the given date's) snapshot for every user"""
    try:
        summary = await capture_daily_snapshots(snapshot_date)
    except FailedPrecondition as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return SnapshotRunResponse(**summary.to_dict())
