"""Aggregated statistics returned to the dashboard."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .event import CanonicalEvent


class DateRange(BaseModel):
    """Inclusive bounds on event start. Either side may be left open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    model_config = {"frozen": True}

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "DateRange":
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("'end' must be >= 'start'")
        return self

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True


class QualityDistribution(BaseModel):
    poor: int = 0
    fair: int = 0
    good: int = 0
    excellent: int = 0


class SleepSummary(BaseModel):
    total_sleep_time: float = Field(0, description="Total minutes slept")
    average_sleep_duration: float = Field(0, description="Average minutes per sleep event")
    quality_distribution: QualityDistribution = Field(default_factory=QualityDistribution)
    total_events: int = 0


class GrowthSummary(BaseModel):
    count: int = 0
    latest_weight: Optional[float] = None
    weight_gain: Optional[float] = None


class TemperatureSummary(BaseModel):
    count: int = 0
    average: Optional[float] = None
    highest: Optional[float] = None
    lowest: Optional[float] = None


class TypeBreakdown(BaseModel):
    """Per-type detail for the report header and dashboard cards."""
    feeding_by_type: dict[str, int] = Field(default_factory=dict)
    diaper_by_type: dict[str, int] = Field(default_factory=dict)
    medication_by_name: dict[str, int] = Field(default_factory=dict)
    growth: GrowthSummary = Field(default_factory=GrowthSummary)
    temperature: TemperatureSummary = Field(default_factory=TemperatureSummary)


class AggregateStats(BaseModel):
    event_counts: dict[str, int] = Field(default_factory=dict)
    sleep_stats: SleepSummary = Field(default_factory=SleepSummary)
    latest_events: list[CanonicalEvent] = Field(default_factory=list)
    breakdown: TypeBreakdown = Field(default_factory=TypeBreakdown)
