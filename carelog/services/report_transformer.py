"""Flat report rows for exportable (PDF) reports."""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from carelog.config import default_timezone
from carelog.models.event import CanonicalEvent
from carelog.models.report import DailyEntry, DailyReport, ReportRow, ReportSummary
from carelog.models.stats import DateRange
from carelog.services.interfaces import ReportRenderer
from carelog.services.normalizer import resolve_event_type
from carelog.services.sleep_scorer import format_sleep_duration, round_half_up

logger = logging.getLogger(__name__)

ALL_TYPES = "all"


def resolve_report_type(report_type: Optional[str]) -> Optional[str]:
    """Canonical event type a report is restricted to, or None for every type."""
    if report_type is None or report_type == ALL_TYPES:
        return None
    return resolve_event_type(report_type, "reportType")


def day_bounds(day: date, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """First and last instant of a calendar day in ``tz``."""
    tz = tz or default_timezone()
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def to_report_row(event: CanonicalEvent, tz: tzinfo) -> ReportRow:
    minutes = event.duration_minutes
    if event.event_type == "sleeping":
        value = minutes
    else:
        value = event.measurement.value if event.measurement is not None else None

    # Non-sleep events get the duration sentence too, as the exported reports always did.
    notes = event.notes if event.notes and event.notes.strip() else f"Duration: {round_half_up(minutes)} minutes"

    return ReportRow(
        date=event.start.astimezone(tz).date(),
        start=event.start,
        end=event.effective_end,
        type=event.event_type,
        child_id=event.child_id,
        value=value,
        notes=notes,
    )


def _rows(
    events: Iterable[CanonicalEvent],
    event_type: Optional[str],
    date_range: Optional[DateRange],
    tz: tzinfo,
) -> Iterator[ReportRow]:
    for event in events:
        if event_type is not None and event.event_type != event_type:
            continue
        if date_range is not None and not date_range.contains(event.start):
            continue
        yield to_report_row(event, tz)


def to_report_rows(
    events: Iterable[CanonicalEvent],
    report_type: Optional[str] = None,
    *,
    date_range: Optional[DateRange] = None,
    tz: Optional[tzinfo] = None,
) -> Iterator[ReportRow]:
    """
    Turn events into report rows, lazily and in input order.

    The result is a single-pass iterator: it is consumed by one iteration.
    ``report_type`` is checked now, so an unknown type raises
    ``NormalizationError`` before any row is requested.
    """
    event_type = resolve_report_type(report_type)
    return _rows(events, event_type, date_range, tz or default_timezone())


def summarize_report(
    rows: Iterable[ReportRow],
    report_type: Optional[str],
    start_date: datetime,
    end_date: datetime,
) -> ReportSummary:
    """Headline figures for a report, computed in one pass over ``rows``."""
    event_type = resolve_report_type(report_type)
    count = 0
    amount_total = 0.0
    sleep_minutes = 0.0
    first_weight: Optional[float] = None
    last_weight: Optional[float] = None
    temperatures: list[float] = []

    for row in rows:
        count += 1
        if event_type == "feeding":
            amount_total += row.value or 0
        elif event_type == "sleeping":
            sleep_minutes += (row.end - row.start).total_seconds() / 60
        elif event_type == "growth" and row.value is not None:
            if first_weight is None:
                first_weight = row.value
            last_weight = row.value
        elif event_type == "temperature" and row.value is not None:
            temperatures.append(row.value)

    summary = ReportSummary(report_type=event_type or ALL_TYPES, total_entries=count)
    if event_type == "feeding":
        summary.total_amount = amount_total
        summary.average_amount = amount_total / count if count else 0
    elif event_type == "sleeping":
        period_days = (end_date - start_date).total_seconds() / 86400
        summary.total_sleep_hours = sleep_minutes / 60
        summary.average_sleep_hours_per_day = (
            summary.total_sleep_hours / period_days if period_days > 0 else None
        )
    elif event_type == "growth" and first_weight is not None:
        summary.starting_weight = first_weight
        summary.current_weight = last_weight
        summary.weight_gain = last_weight - first_weight
    elif event_type == "temperature" and temperatures:
        summary.average_temperature = sum(temperatures) / len(temperatures)
        summary.highest_temperature = max(temperatures)
        summary.lowest_temperature = min(temperatures)
    return summary


def export_report(
    events: Iterable[CanonicalEvent],
    renderer: ReportRenderer,
    *,
    report_type: str,
    start_date: datetime,
    end_date: datetime,
    child_name: str = "Child",
    tz: Optional[tzinfo] = None,
) -> bytes:
    """Build the rows for ``[start_date, end_date]`` and hand them to the renderer."""
    date_range = DateRange(start=start_date, end=end_date)
    rows = to_report_rows(events, report_type, date_range=date_range, tz=tz)
    resolved = resolve_report_type(report_type) or ALL_TYPES
    logger.info(
        "Rendering %s report for %s (%s to %s)",
        resolved, child_name, date_range.start.isoformat(), date_range.end.isoformat(),
    )
    return renderer(resolved, rows, date_range.start, date_range.end, child_name)


# ─── Daily report ─────────────────────────────────────────────────────────────

MILK_FEEDINGS = frozenset({"formula", "breast_milk", "cow_milk"})

PORTION_LABELS: dict[str, str] = {
    "none": "None of it",
    "some": "Some of it",
    "half": "Half of it",
    "most": "Most of it",
    "all": "All of it",
}


def format_portion(portion: str) -> str:
    return PORTION_LABELS.get(portion, portion)


def _describe_meal(event: CanonicalEvent) -> str:
    details = event.details
    if details.feeding_type in MILK_FEEDINGS:
        label = details.feeding_type.replace("_", " ")
        if event.measurement is None:
            return label
        return f"{label} - {event.measurement.value:g}{event.measurement.unit or 'ml'}"
    label = details.food_description or details.feeding_type or "Food"
    if details.portion_consumed:
        return f"{label}: {format_portion(details.portion_consumed)}"
    return label


def _describe_medication(event: CanonicalEvent) -> str:
    details = event.details
    text = " ".join(part for part in (details.medication or "Medication", details.dosage) if part)
    return f"{text} ({details.reason})" if details.reason else text


def _entry(event: CanonicalEvent, description: str) -> DailyEntry:
    return DailyEntry(
        event_id=event.id,
        start=event.start,
        end=event.effective_end,
        description=description,
        notes=event.notes,
    )


def daily_report(
    events: Iterable[CanonicalEvent],
    day: date,
    *,
    tz: Optional[tzinfo] = None,
    child_id: Optional[str] = None,
) -> DailyReport:
    """
    Meals, sleep, diaper changes and medications of one calendar day.

    A sleep belongs to the day when it starts or ends within it, so the
    night that began the evening before is listed too. Every other event
    belongs to the day it starts in. Entries are in chronological order.
    """
    start, end = day_bounds(day, tz)
    window = DateRange(start=start, end=end)
    report = DailyReport(child_id=child_id, date=day)

    for event in sorted(events, key=lambda e: e.start):
        if event.event_type == "sleeping":
            if window.contains(event.start) or window.contains(event.effective_end):
                report.sleep.append(_entry(event, format_sleep_duration(event.duration_minutes)))
            continue
        if not window.contains(event.start):
            continue
        if event.event_type == "feeding":
            report.meals.append(_entry(event, _describe_meal(event)))
        elif event.event_type == "diaper":
            report.diaper_changes.append(_entry(event, (event.details.diaper_type or "unknown").capitalize()))
        elif event.event_type == "medication":
            report.medications.append(_entry(event, _describe_medication(event)))

    logger.debug(
        "Daily report for %s: %d meal(s), %d sleep(s), %d diaper change(s), %d medication(s)",
        day.isoformat(), len(report.meals), len(report.sleep),
        len(report.diaper_changes), len(report.medications),
    )
    return report
