"""Normalization endpoint: raw records in, canonical events out."""

from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from carelog.api.dependencies import SettingsDep, normalize_records
from carelog.models.event import CanonicalEvent
from carelog.services.normalizer import RejectedRecord

router = APIRouter(prefix="/children/{child_id}/events", tags=["events"])


class NormalizeRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    event_type: Optional[str] = Field(None, description="Type to assume for untyped records")


class NormalizeResponse(BaseModel):
    events: list[CanonicalEvent]
    rejected: list[RejectedRecord]


@router.post("/normalize", response_model=NormalizeResponse)
async def normalize_events(
    child_id: str, payload: NormalizeRequest, settings: SettingsDep
) -> NormalizeResponse:
    """Normalize a batch of raw records and report the ones that were rejected."""
    result = normalize_records(payload.records, child_id, settings, payload.event_type)
    return NormalizeResponse(events=result.events, rejected=result.rejected)
