"""Normalization of raw event records into canonical events.

Every historical source used its own field names for the same concepts
(``startTime`` vs ``changeTime``, ``diaperChange`` vs ``diaper``...). This
module is the only place those names are interpreted: downstream services only
ever see ``CanonicalEvent``.

Failures come in two severities:

- structural (no usable start time, unknown type, bad measurement): the record
  is rejected with a ``NormalizationError`` naming the offending field;
- auxiliary (malformed ``details`` JSON, unknown sleep quality): the event is
  kept and the detail is dropped, with a warning in the logs.
"""

import json
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from carelog.models.details import DETAILS_ADAPTER, details_to_payload, empty_details
from carelog.models.event import CanonicalEvent, Measurement
from carelog.models.stats import DateRange
from carelog.models.vocabulary import EVENT_TYPES, SLEEP_QUALITIES
from carelog.services.interfaces import EventSource

logger = logging.getLogger(__name__)

# ─── Resolution tables ────────────────────────────────────────────────────────

# Canonical type for every raw spelling found in stored events.
TYPE_ALIASES: dict[str, str] = {
    **{event_type: event_type for event_type in EVENT_TYPES},
    "diaperChange": "diaper",
    "growthTracking": "growth",
    "sleep": "sleeping",
}

# Raw keys that may hold the start of an event, highest priority first.
START_TIME_FIELDS: tuple[str, ...] = ("startTime", "timestamp", "changeTime", "administrationTime")
END_TIME_FIELD = "endTime"

TYPE_FIELDS: tuple[str, ...] = ("eventType", "event_type")
ID_FIELDS: tuple[str, ...] = ("id", "_id")
CHILD_ID_FIELDS: tuple[str, ...] = ("childId", "child_id")
DETAILS_FIELDS: tuple[str, ...] = ("details", "data")


@dataclass(frozen=True)
class MeasurementSource:
    """Where the measurement of one event type lives in a raw record."""
    value_keys: tuple[str, ...]
    unit_key: Optional[str] = None
    default_unit: Optional[str] = None


MEASUREMENT_SOURCES: dict[str, MeasurementSource] = {
    "sleeping": MeasurementSource(("value",), default_unit="min"),
    "feeding": MeasurementSource(("amount", "value"), unit_key="unit"),
    "growth": MeasurementSource(("weight", "value"), unit_key="weightUnit", default_unit="kg"),
    "temperature": MeasurementSource(("temperature", "value"), unit_key="unit", default_unit="C"),
    "medication": MeasurementSource(("value",), unit_key="unit"),
    "diaper": MeasurementSource(("value",), unit_key="unit"),
    "appointment": MeasurementSource(("value",), unit_key="unit"),
}


# ─── Errors & batch results ───────────────────────────────────────────────────

class NormalizationError(ValueError):
    """A raw record cannot be turned into a canonical event."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class RejectedRecord(BaseModel):
    index: int
    field: str
    reason: str


@dataclass
class NormalizationResult:
    events: list[CanonicalEvent] = field(default_factory=list)
    rejected: list[RejectedRecord] = field(default_factory=list)


# ─── Field readers ────────────────────────────────────────────────────────────

def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Optional[tuple[str, Any]]:
    for key in keys:
        if _present(record.get(key)):
            return key, record[key]
    return None


def resolve_event_type(raw_type: Any, field: str = "eventType") -> str:
    """Map a raw type string to its canonical event type."""
    if isinstance(raw_type, str) and raw_type in TYPE_ALIASES:
        return TYPE_ALIASES[raw_type]
    raise NormalizationError(field, f"unknown event type {raw_type!r}")


def parse_timestamp(value: Any, field: str) -> datetime:
    """Parse a raw timestamp into an aware UTC datetime. Naive values are UTC."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as exc:
            raise NormalizationError(field, f"not an ISO-8601 timestamp: {value!r}") from exc
    else:
        raise NormalizationError(field, f"unsupported timestamp type {type(value).__name__}")

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_details(value: Any) -> dict[str, Any]:
    """Decode an auxiliary payload. Anything unusable becomes an empty payload."""
    if not _present(value):
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError as exc:
            logger.warning("Malformed details payload ignored (%s)", exc)
            return {}
        if isinstance(decoded, dict):
            return decoded
        logger.warning("Details payload is a JSON %s, not an object; ignored", type(decoded).__name__)
        return {}
    logger.warning("Details payload of type %s ignored", type(value).__name__)
    return {}


def _as_number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise NormalizationError(field, f"expected a number, got {type(value).__name__}")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError) as exc:
        raise NormalizationError(field, f"not a number: {value!r}") from exc
    if not math.isfinite(number):
        raise NormalizationError(field, f"measurement must be finite, got {value!r}")
    return number


def _read_measurement(
    event_type: str, record: Mapping[str, Any], payload: Mapping[str, Any]
) -> Optional[Measurement]:
    source = MEASUREMENT_SOURCES[event_type]
    found = _first_present(record, source.value_keys) or _first_present(payload, source.value_keys)
    if found is None:
        return None
    key, value = found

    unit = source.default_unit
    if source.unit_key:
        unit_found = _first_present(record, (source.unit_key,)) or _first_present(payload, (source.unit_key,))
        if unit_found is not None:
            unit = str(unit_found[1]).strip()
    return Measurement(value=_as_number(value, key), unit=unit)


def _read_quality(
    record: Mapping[str, Any], payload: Mapping[str, Any], event_id: str
) -> Optional[str]:
    found = _first_present(record, ("quality",)) or _first_present(payload, ("quality",))
    if found is None:
        return None
    quality = str(found[1]).strip().lower()
    if quality in SLEEP_QUALITIES:
        return quality
    logger.warning("Unknown sleep quality %r on event %s treated as unrated", found[1], event_id)
    return None


def _read_details(
    event_type: str, record: Mapping[str, Any], payload: Mapping[str, Any], event_id: str
):
    # Structured top-level fields win over the same key in the payload.
    merged = {**payload, **{k: v for k, v in record.items() if v is not None}, "kind": event_type}
    try:
        return DETAILS_ADAPTER.validate_python(merged)
    except ValidationError as exc:
        logger.warning(
            "Invalid %s details on event %s dropped (%d error(s))",
            event_type, event_id, exc.error_count(),
        )
        return empty_details(event_type)


def _read_notes(record: Mapping[str, Any]) -> Optional[str]:
    notes = record.get("notes")
    if not _present(notes):
        return None
    return str(notes).strip()


# ─── Public API ───────────────────────────────────────────────────────────────

def normalize(
    raw: Mapping[str, Any],
    expected_type: Optional[str] = None,
    *,
    child_id: Optional[str] = None,
) -> CanonicalEvent:
    """
    Convert one raw record into a canonical event.

    Args:
        raw: The record as stored, any historical shape.
        expected_type: Event type known to the caller (e.g. the collection the
            record was fetched from). Used when the record carries no type.
        child_id: Child the record was fetched for. Used when the record
            carries no child reference.

    Returns:
        The canonical event, with ``raw`` kept for traceability.

    Raises:
        NormalizationError: on any structural problem, naming the field.
    """
    if not isinstance(raw, Mapping):
        raise NormalizationError("record", f"expected a mapping, got {type(raw).__name__}")

    found_type = _first_present(raw, TYPE_FIELDS)
    expected = resolve_event_type(expected_type, "expectedType") if expected_type is not None else None
    if found_type is not None:
        event_type = resolve_event_type(found_type[1], found_type[0])
        if expected is not None and expected != event_type:
            raise NormalizationError(
                found_type[0], f"record is a {event_type!r} event, expected {expected!r}"
            )
    elif expected is not None:
        event_type = expected
    else:
        raise NormalizationError("eventType", "missing and no expected type supplied")

    found_id = _first_present(raw, ID_FIELDS)
    if found_id is None:
        raise NormalizationError("id", "missing")
    event_id = str(found_id[1])

    found_child = _first_present(raw, CHILD_ID_FIELDS)
    if found_child is not None:
        record_child = str(found_child[1])
        if child_id is not None and record_child != child_id:
            raise NormalizationError(found_child[0], f"belongs to child {record_child!r}, not {child_id!r}")
    elif child_id is not None:
        record_child = child_id
    else:
        raise NormalizationError("childId", "missing")

    found_start = _first_present(raw, START_TIME_FIELDS)
    if found_start is None:
        raise NormalizationError("startTime", f"none of {', '.join(START_TIME_FIELDS)} is set")
    start = parse_timestamp(found_start[1], found_start[0])

    end = start
    if _present(raw.get(END_TIME_FIELD)):
        end = parse_timestamp(raw[END_TIME_FIELD], END_TIME_FIELD)
        if end < start:
            raise NormalizationError(END_TIME_FIELD, "ends before it starts")

    found_details = _first_present(raw, DETAILS_FIELDS)
    payload = parse_details(found_details[1]) if found_details is not None else {}

    return CanonicalEvent(
        id=event_id,
        child_id=record_child,
        event_type=event_type,
        start=start,
        end=end,
        measurement=_read_measurement(event_type, raw, payload),
        quality=_read_quality(raw, payload, event_id) if event_type == "sleeping" else None,
        notes=_read_notes(raw),
        details=_read_details(event_type, raw, payload, event_id),
        raw=dict(raw),
    )


def normalize_batch(
    records: Iterable[Mapping[str, Any]],
    expected_type: Optional[str] = None,
    *,
    child_id: Optional[str] = None,
    strict: bool = False,
) -> NormalizationResult:
    """Normalize many records. Failures are skipped and reported unless ``strict``."""
    result = NormalizationResult()
    for index, record in enumerate(records):
        try:
            result.events.append(normalize(record, expected_type, child_id=child_id))
        except NormalizationError as exc:
            if strict:
                raise
            logger.warning("Skipping record #%d (%s)", index, exc)
            result.rejected.append(RejectedRecord(index=index, field=exc.field, reason=exc.reason))
    logger.debug(
        "Normalized %d record(s), rejected %d", len(result.events), len(result.rejected)
    )
    return result


def load_events(
    source: EventSource,
    child_id: str,
    event_type: Optional[str] = None,
    date_range: Optional[DateRange] = None,
    *,
    strict: bool = False,
) -> NormalizationResult:
    """Fetch the raw records of one child from storage and normalize them."""
    records = source(child_id, event_type, date_range)
    return normalize_batch(records, event_type, child_id=child_id, strict=strict)


def to_record(event: CanonicalEvent) -> dict[str, Any]:
    """Rebuild a raw record that normalizes back to ``event``."""
    record: dict[str, Any] = {
        "id": event.id,
        "childId": event.child_id,
        "eventType": event.event_type,
        "startTime": event.start.isoformat(),
        "endTime": event.effective_end.isoformat(),
        "details": details_to_payload(event.details),
    }
    if event.measurement is not None:
        record["value"] = event.measurement.value
        unit_key = MEASUREMENT_SOURCES[event.event_type].unit_key
        if unit_key and event.measurement.unit is not None:
            record[unit_key] = event.measurement.unit
    if event.quality is not None:
        record["quality"] = event.quality
    if event.notes is not None:
        record["notes"] = event.notes
    return record
