"""Dashboard statistics endpoint."""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from carelog.api.dependencies import SettingsDep, normalize_records
from carelog.models.stats import AggregateStats, DateRange
from carelog.services.aggregator import aggregate

router = APIRouter(prefix="/children/{child_id}", tags=["stats"])


class StatsRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    start: Optional[datetime] = Field(None, description="Range start (inclusive)")
    end: Optional[datetime] = Field(None, description="Range end (inclusive)")
    limit: Optional[int] = Field(None, ge=0, description="Size of the latest events list")


@router.post("/stats", response_model=AggregateStats)
async def get_stats(child_id: str, payload: StatsRequest, settings: SettingsDep) -> AggregateStats:
    """
    Return counts per event type, the sleep summary and the latest events.

    - No bounds: every record in the payload
    - `start` / `end`: only events starting within the bounds
    """
    date_range = None
    if payload.start or payload.end:
        try:
            date_range = DateRange(start=payload.start, end=payload.end)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail="'end' must be >= 'start'") from exc

    result = normalize_records(payload.records, child_id, settings)
    return aggregate(
        result.events,
        limit=payload.limit if payload.limit is not None else settings.latest_events_limit,
        date_range=date_range,
    )
