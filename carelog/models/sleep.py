from typing import Optional

from pydantic import BaseModel, Field


class SleepScore(BaseModel):
    """Composite sleep score for one child over a set of sleep events."""
    duration_score: float = Field(0, ge=0, le=40)
    quality_score: float = Field(0, ge=0, le=40)
    consistency_score: float = Field(0, ge=0, le=20)
    total: int = Field(0, ge=0, le=100)
    label: str = "Very Poor"

    # Diagnostics, useful for explaining the score to parents
    recommended_hours: Optional[float] = None
    average_daily_hours: Optional[float] = None
    std_dev_minutes: Optional[float] = None
    days: int = 0
    average_daily_duration: Optional[str] = Field(None, description="Average sleep per day, e.g. \"13 hr 5 min\"")
    nap_count: int = 0
