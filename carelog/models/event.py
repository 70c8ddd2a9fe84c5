"""Canonical event: the normalized form of any tracked child-care occurrence."""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .details import EventDetails, empty_details
from .vocabulary import EVENT_TYPES, EventType, SleepQuality


class Measurement(BaseModel):
    value: float
    unit: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("measurement value must be a finite number")
        return value


class CanonicalEvent(BaseModel):
    """One normalized event. Immutable once built."""
    id: str
    child_id: str
    event_type: EventType
    start: datetime
    end: Optional[datetime] = None
    measurement: Optional[Measurement] = None
    quality: Optional[SleepQuality] = None
    notes: Optional[str] = None
    details: EventDetails
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    model_config = {"frozen": True}

    @field_validator("start", "end")
    @classmethod
    def _to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are UTC; everything is stored in UTC.
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @model_validator(mode="before")
    @classmethod
    def _default_details(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("details") is None and data.get("event_type") in EVENT_TYPES:
            data = {**data, "details": empty_details(data["event_type"])}
        return data

    @model_validator(mode="after")
    def _check_order(self) -> "CanonicalEvent":
        if self.end is not None and self.end < self.start:
            raise ValueError("end must not be before start")
        if self.details.kind != self.event_type:
            raise ValueError(f"{self.details.kind} details on a {self.event_type} event")
        return self

    @property
    def effective_end(self) -> datetime:
        return self.end if self.end is not None else self.start

    @property
    def duration_minutes(self) -> float:
        """Elapsed minutes between start and end (0 for instantaneous events)."""
        return (self.effective_end - self.start).total_seconds() / 60

