"""Unit tests for report rows, report summaries and the export hand-off."""

from datetime import date, datetime, timedelta, timezone

import pytest

from carelog.models.stats import DateRange
from carelog.services.normalizer import NormalizationError, normalize
from carelog.services.report_transformer import (
    daily_report,
    day_bounds,
    export_report,
    format_portion,
    summarize_report,
    to_report_row,
    to_report_rows,
)

UTC = timezone.utc
T0 = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


def _event(event_id: str, event_type: str, hours: float = 0, minutes: float = 0, **fields):
    start = T0 + timedelta(hours=hours)
    return normalize({
        "id": event_id,
        "childId": "c1",
        "eventType": event_type,
        "startTime": start.isoformat(),
        "endTime": (start + timedelta(minutes=minutes)).isoformat(),
        **fields,
    })


# ─── Rows ────────────────────────────────────────────────────────────────────

def test_sleep_row_value_is_duration():
    row = to_report_row(_event("s1", "sleeping", 0, 90), UTC)
    assert row.value == 90
    assert row.type == "sleeping"
    assert row.date == date(2024, 3, 1)
    assert row.end - row.start == timedelta(minutes=90)


def test_measurement_row_value():
    row = to_report_row(_event("f1", "feeding", amount=120, unit="ml"), UTC)
    assert row.value == 120
    assert row.child_id == "c1"


def test_row_without_measurement():
    assert to_report_row(_event("d1", "diaperChange"), UTC).value is None


@pytest.mark.parametrize(
    "event_type, minutes, expected",
    [("sleeping", 90, "Duration: 90 minutes"), ("feeding", 20, "Duration: 20 minutes"), ("diaper", 0, "Duration: 0 minutes")],
)
def test_notes_fallback(event_type, minutes, expected):
    assert to_report_row(_event("e1", event_type, 0, minutes), UTC).notes == expected


def test_notes_fallback_rounds_half_up():
    assert to_report_row(_event("e1", "sleeping", 0, 89.5), UTC).notes == "Duration: 90 minutes"


def test_notes_kept():
    assert to_report_row(_event("e1", "sleeping", 0, 90, notes="woke twice"), UTC).notes == "woke twice"


def test_row_date_in_report_timezone():
    event = _event("s1", "sleeping", 15.5, 60)  # 23:30 UTC
    assert to_report_row(event, UTC).date == date(2024, 3, 1)
    assert to_report_row(event, timezone(timedelta(hours=2))).date == date(2024, 3, 2)


def test_rows_keep_input_order():
    events = [_event("b", "feeding", 3), _event("a", "feeding", 1), _event("c", "diaper", 2)]
    assert [r.start for r in to_report_rows(events, tz=UTC)] == [e.start for e in events]


def test_rows_filtered_by_type_alias():
    events = [_event("s1", "sleeping", 0, 60), _event("f1", "feeding", 1), _event("s2", "sleep", 2, 30)]
    rows = list(to_report_rows(events, "sleep", tz=UTC))
    assert [r.value for r in rows] == [60, 30]


def test_rows_all_types():
    events = [_event("s1", "sleeping", 0, 60), _event("f1", "feeding", 1)]
    assert len(list(to_report_rows(events, "all", tz=UTC))) == 2


def test_rows_filtered_by_date_range():
    events = [_event("f1", "feeding", 0), _event("f2", "feeding", 24), _event("f3", "feeding", 72)]
    window = DateRange(start=T0 + timedelta(hours=1), end=T0 + timedelta(hours=48))
    rows = list(to_report_rows(events, "feeding", date_range=window, tz=UTC))
    assert [r.start for r in rows] == [T0 + timedelta(hours=24)]


def test_unknown_report_type_fails_before_iteration():
    consumed = []

    def events():
        consumed.append(True)
        yield _event("f1", "feeding")

    with pytest.raises(NormalizationError):
        to_report_rows(events(), "bath")
    assert consumed == []


def test_rows_are_lazy_and_single_pass():
    consumed = []

    def events():
        for i in range(3):
            consumed.append(i)
            yield _event(str(i), "feeding", i)

    rows = to_report_rows(events(), tz=UTC)
    assert consumed == []
    assert next(rows).start == T0
    assert consumed == [0]
    assert len(list(rows)) == 2
    assert list(rows) == []


def test_day_bounds():
    start, end = day_bounds(date(2024, 3, 1), UTC)
    assert start == datetime(2024, 3, 1, tzinfo=UTC)
    assert end == datetime(2024, 3, 1, 23, 59, 59, 999999, tzinfo=UTC)


def test_empty_input_gives_no_rows():
    window = DateRange(start=T0, end=T0 + timedelta(days=1))
    assert list(to_report_rows([])) == []
    assert list(to_report_rows([], "sleep", tz=UTC)) == []
    assert list(to_report_rows([], "feeding", date_range=window, tz=UTC)) == []


def test_summary_of_no_rows():
    summary = summarize_report(to_report_rows([], "feeding", tz=UTC), "feeding", T0, T0 + timedelta(days=1))
    assert summary.total_entries == 0
    assert summary.total_amount == 0
    assert summary.average_amount == 0


# ─── Summary ─────────────────────────────────────────────────────────────────

def test_summary_feeding():
    events = [_event("f1", "feeding", amount=100), _event("f2", "feeding", 3, amount=150)]
    summary = summarize_report(to_report_rows(events, "feeding", tz=UTC), "feeding", T0, T0 + timedelta(days=1))
    assert summary.report_type == "feeding"
    assert summary.total_entries == 2
    assert summary.total_amount == 250
    assert summary.average_amount == 125


def test_summary_sleeping():
    events = [_event("s1", "sleeping", 0, 60), _event("s2", "sleeping", 24, 120)]
    summary = summarize_report(
        to_report_rows(events, "sleeping", tz=UTC), "sleep", T0, T0 + timedelta(days=2)
    )
    assert summary.report_type == "sleeping"
    assert summary.total_sleep_hours == 3
    assert summary.average_sleep_hours_per_day == 1.5


def test_summary_sleeping_empty_period():
    rows = to_report_rows([_event("s1", "sleeping", 0, 60)], "sleeping", tz=UTC)
    assert summarize_report(rows, "sleeping", T0, T0).average_sleep_hours_per_day is None


def test_summary_growth():
    events = [
        _event("w1", "growth", 0, weight=6.0),
        _event("w2", "growth", 24),
        _event("w3", "growth", 48, weight=6.4),
    ]
    summary = summarize_report(to_report_rows(events, "growthTracking", tz=UTC), "growth", T0, T0 + timedelta(days=3))
    assert summary.starting_weight == 6.0
    assert summary.current_weight == 6.4
    assert summary.weight_gain == pytest.approx(0.4)


def test_summary_temperature():
    events = [
        _event("t1", "temperature", 0, temperature=37.0),
        _event("t2", "temperature", 1),
        _event("t3", "temperature", 2, temperature=39.0),
    ]
    summary = summarize_report(to_report_rows(events, "temperature", tz=UTC), "temperature", T0, T0)
    assert summary.total_entries == 3
    assert summary.average_temperature == 38.0
    assert summary.highest_temperature == 39.0
    assert summary.lowest_temperature == 37.0


def test_summary_temperature_keeps_zero_reading():
    events = [_event("t1", "temperature", 0, temperature=0), _event("t2", "temperature", 1, temperature=38.0)]
    summary = summarize_report(to_report_rows(events, "temperature", tz=UTC), "temperature", T0, T0)
    assert summary.lowest_temperature == 0
    assert summary.average_temperature == 19.0


def test_summary_all_types_counts_only():
    events = [_event("f1", "feeding", amount=100), _event("s1", "sleeping", 1, 60)]
    summary = summarize_report(to_report_rows(events, tz=UTC), "all", T0, T0 + timedelta(days=1))
    assert summary.report_type == "all"
    assert summary.total_entries == 2
    assert summary.total_amount is None
    assert summary.total_sleep_hours is None


# ─── Export ──────────────────────────────────────────────────────────────────

def test_export_report_hands_rows_to_renderer():
    received = {}

    def renderer(report_type, rows, start_date, end_date, child_name):
        received.update(
            report_type=report_type, rows=list(rows), start=start_date, end=end_date, child_name=child_name
        )
        return b"%PDF-1.4"

    events = [_event("s1", "sleep", 0, 60), _event("f1", "feeding", 1), _event("s2", "sleeping", 72, 30)]
    pdf = export_report(
        events,
        renderer,
        report_type="sleep",
        start_date=T0,
        end_date=T0 + timedelta(days=1),
        child_name="Lena",
        tz=UTC,
    )
    assert pdf == b"%PDF-1.4"
    assert received["report_type"] == "sleeping"
    assert received["child_name"] == "Lena"
    assert [r.value for r in received["rows"]] == [60]
    assert received["end"] - received["start"] == timedelta(days=1)


def test_export_report_rejects_inverted_range():
    with pytest.raises(ValueError):
        export_report(
            [], lambda *args: b"", report_type="all", start_date=T0, end_date=T0 - timedelta(days=1)
        )


# ─── Daily report ────────────────────────────────────────────────────────────

def _at(event_id: str, event_type: str, start: str, end: str = None, **fields):
    record = {"id": event_id, "childId": "c1", "eventType": event_type, "startTime": start, **fields}
    if end is not None:
        record["endTime"] = end
    return normalize(record)


def test_daily_report_groups_the_day():
    events = [
        _at("s2", "sleeping", "2024-03-01T23:00:00Z", "2024-03-02T06:00:00Z"),
        _at("f1", "feeding", "2024-03-01T07:30:00Z", type="formula", amount=120, unit="ml"),
        _at("s1", "sleeping", "2024-02-29T20:00:00Z", "2024-03-01T07:00:00Z"),
        _at("f2", "feeding", "2024-03-01T12:00:00Z", type="solid", foodDescription="Carrots", portionConsumed="half"),
        _at("d1", "diaperChange", "2024-03-01T08:00:00Z", type="wet"),
        _at("m1", "medication", "2024-03-01T09:00:00Z", medicationName="Paracetamol", dosage="2.5 ml", reason="fever"),
        _at("s3", "sleeping", "2024-03-02T13:00:00Z", "2024-03-02T14:00:00Z"),
        _at("f3", "feeding", "2024-03-02T07:30:00Z", type="breast_milk"),
        _at("w1", "growth", "2024-03-01T10:00:00Z", weight=6.2),
    ]
    report = daily_report(events, date(2024, 3, 1), tz=UTC, child_id="c1")

    assert report.date == date(2024, 3, 1)
    assert report.child_id == "c1"
    assert [(e.event_id, e.description) for e in report.sleep] == [("s1", "11 hr"), ("s2", "7 hr")]
    assert [(e.event_id, e.description) for e in report.meals] == [
        ("f1", "formula - 120ml"),
        ("f2", "Carrots: Half of it"),
    ]
    assert [e.description for e in report.diaper_changes] == ["Wet"]
    assert [e.description for e in report.medications] == ["Paracetamol 2.5 ml (fever)"]


def test_daily_report_uses_report_timezone():
    feeding = _at("f1", "feeding", "2024-03-01T23:30:00Z", type="breast_milk")
    assert daily_report([feeding], date(2024, 3, 1), tz=UTC).meals
    assert daily_report([feeding], date(2024, 3, 2), tz=timezone(timedelta(hours=2))).meals
    assert not daily_report([feeding], date(2024, 3, 1), tz=timezone(timedelta(hours=2))).meals


def test_daily_report_unnamed_entries():
    events = [
        _at("d1", "diaper", "2024-03-01T08:00:00Z"),
        _at("m1", "medication", "2024-03-01T09:00:00Z"),
        _at("f1", "feeding", "2024-03-01T10:00:00Z"),
    ]
    report = daily_report(events, date(2024, 3, 1), tz=UTC)
    assert report.diaper_changes[0].description == "Unknown"
    assert report.medications[0].description == "Medication"
    assert report.meals[0].description == "Food"


def test_daily_report_empty():
    report = daily_report([], date(2024, 3, 1), tz=UTC)
    assert report.meals == report.sleep == report.diaper_changes == report.medications == []


@pytest.mark.parametrize("portion, label", [("none", "None of it"), ("all", "All of it"), ("a spoon", "a spoon")])
def test_format_portion(portion, label):
    assert format_portion(portion) == label
