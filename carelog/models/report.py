"""Report rows handed to the PDF renderer, and the header summary."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReportRow(BaseModel):
    """One flattened, render-ready line of an exportable report."""
    date: date
    start: datetime
    end: datetime
    type: str
    child_id: str
    value: Optional[float] = None
    notes: str

    model_config = {"frozen": True}


class ReportSummary(BaseModel):
    """Headline figures printed above the detailed table."""
    report_type: str
    total_entries: int = 0

    # feeding
    total_amount: Optional[float] = None
    average_amount: Optional[float] = None

    # sleeping
    total_sleep_hours: Optional[float] = None
    average_sleep_hours_per_day: Optional[float] = None

    # growth
    starting_weight: Optional[float] = None
    current_weight: Optional[float] = None
    weight_gain: Optional[float] = None

    # temperature
    average_temperature: Optional[float] = None
    highest_temperature: Optional[float] = None
    lowest_temperature: Optional[float] = None


class DailyEntry(BaseModel):
    """One line of the daily report, already worded for parents."""
    event_id: str
    start: datetime
    end: datetime
    description: str
    notes: Optional[str] = None


class DailyReport(BaseModel):
    """What happened on one calendar day, grouped the way carers read it."""
    child_id: Optional[str] = None
    date: date
    meals: list[DailyEntry] = Field(default_factory=list)
    sleep: list[DailyEntry] = Field(default_factory=list)
    diaper_changes: list[DailyEntry] = Field(default_factory=list)
    medications: list[DailyEntry] = Field(default_factory=list)
