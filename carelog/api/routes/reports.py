"""Report endpoints: rows for the PDF export and the daily summary."""

from datetime import date, datetime
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from carelog.api.dependencies import SettingsDep, normalize_records
from carelog.models.report import DailyReport, ReportRow, ReportSummary
from carelog.models.stats import DateRange
from carelog.services.normalizer import NormalizationError
from carelog.services.report_transformer import ALL_TYPES, daily_report, summarize_report, to_report_rows

router = APIRouter(prefix="/children/{child_id}/reports", tags=["reports"])


class ReportRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    report_type: str = ALL_TYPES
    start_date: datetime
    end_date: datetime


class ReportResponse(BaseModel):
    rows: list[ReportRow]
    summary: ReportSummary


class DailyReportRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    day: Optional[date] = Field(None, description="Calendar day of the report (default: today)")


@router.post("/rows", response_model=ReportResponse)
async def get_report_rows(child_id: str, payload: ReportRequest, settings: SettingsDep) -> ReportResponse:
    """Return the rows and header figures of a report over `[start_date, end_date]`."""
    try:
        date_range = DateRange(start=payload.start_date, end=payload.end_date)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="'end_date' must be >= 'start_date'") from exc

    result = normalize_records(payload.records, child_id, settings)
    try:
        rows = list(
            to_report_rows(result.events, payload.report_type, date_range=date_range, tz=settings.tz)
        )
    except NormalizationError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown report type '{payload.report_type}'") from exc

    summary = summarize_report(rows, payload.report_type, date_range.start, date_range.end)
    return ReportResponse(rows=rows, summary=summary)


@router.post("/daily", response_model=DailyReport)
async def get_daily_report(child_id: str, payload: DailyReportRequest, settings: SettingsDep) -> DailyReport:
    """Retourne le récapitulatif d'une journée : repas, sommeil, changes et médicaments."""
    result = normalize_records(payload.records, child_id, settings)
    day = payload.day or datetime.now(settings.tz).date()
    return daily_report(result.events, day, tz=settings.tz, child_id=child_id)
