"""Dashboard statistics over one child's canonical events."""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from typing import Optional

from carelog.config import get_settings
from carelog.models.event import CanonicalEvent
from carelog.models.stats import (
    AggregateStats,
    DateRange,
    GrowthSummary,
    QualityDistribution,
    SleepSummary,
    TemperatureSummary,
    TypeBreakdown,
)

logger = logging.getLogger(__name__)

# Unrated sleep is assumed unremarkable rather than left out of the histogram.
DEFAULT_SLEEP_QUALITY = "good"
UNKNOWN_LABEL = "unknown"


def latest_events(events: Iterable[CanonicalEvent], limit: int) -> list[CanonicalEvent]:
    """Most recent events first; equal start times are ordered by id."""
    if limit < 0:
        raise ValueError("limit must be >= 0")
    # Two stable sorts: id ascending, then start descending.
    ordered = sorted(events, key=lambda e: e.id)
    ordered.sort(key=lambda e: e.start, reverse=True)
    return ordered[:limit]


def _summarize_sleep(sleep_events: list[CanonicalEvent]) -> SleepSummary:
    total_minutes = sum(e.duration_minutes for e in sleep_events)
    count = len(sleep_events)
    distribution: Counter = Counter(e.quality or DEFAULT_SLEEP_QUALITY for e in sleep_events)
    return SleepSummary(
        total_sleep_time=total_minutes,
        average_sleep_duration=total_minutes / count if count else 0,
        quality_distribution=QualityDistribution(**distribution),
        total_events=count,
    )


def _count_labels(labels: Iterable[Optional[str]]) -> dict[str, int]:
    return dict(Counter(label or UNKNOWN_LABEL for label in labels))


def _summarize_growth(growth_events: list[CanonicalEvent]) -> GrowthSummary:
    measured = sorted(
        (e for e in growth_events if e.measurement is not None), key=lambda e: e.start
    )
    if not measured:
        return GrowthSummary(count=len(growth_events))
    latest = measured[-1].measurement.value
    gain = latest - measured[0].measurement.value if len(measured) > 1 else None
    return GrowthSummary(count=len(growth_events), latest_weight=latest, weight_gain=gain)


def _summarize_temperature(temperature_events: list[CanonicalEvent]) -> TemperatureSummary:
    readings = [e.measurement.value for e in temperature_events if e.measurement is not None]
    if not readings:
        return TemperatureSummary(count=len(temperature_events))
    return TemperatureSummary(
        count=len(temperature_events),
        average=sum(readings) / len(readings),
        highest=max(readings),
        lowest=min(readings),
    )


def _breakdown(by_type: dict[str, list[CanonicalEvent]]) -> TypeBreakdown:
    return TypeBreakdown(
        feeding_by_type=_count_labels(e.details.feeding_type for e in by_type.get("feeding", [])),
        diaper_by_type=_count_labels(e.details.diaper_type for e in by_type.get("diaper", [])),
        medication_by_name=_count_labels(e.details.medication for e in by_type.get("medication", [])),
        growth=_summarize_growth(by_type.get("growth", [])),
        temperature=_summarize_temperature(by_type.get("temperature", [])),
    )


def aggregate(
    events: Iterable[CanonicalEvent],
    *,
    limit: Optional[int] = None,
    date_range: Optional[DateRange] = None,
) -> AggregateStats:
    """
    Compute dashboard statistics for one child.

    Args:
        events: Canonical events of a single child, in any order.
        limit: Size of the "latest activity" list. Defaults to LATEST_EVENTS_LIMIT.
        date_range: Optional inclusive bounds on event start.

    Returns:
        Counts per event type, the sleep summary, the latest events and the
        per-type breakdown. Empty input gives empty counts and zero sums.
    """
    if limit is None:
        limit = get_settings().latest_events_limit

    selected = [e for e in events if date_range is None or date_range.contains(e.start)]

    by_type: dict[str, list[CanonicalEvent]] = defaultdict(list)
    for event in selected:
        by_type[event.event_type].append(event)
    event_counts = {event_type: len(items) for event_type, items in by_type.items()}

    stats = AggregateStats(
        event_counts=event_counts,
        sleep_stats=_summarize_sleep(by_type.get("sleeping", [])),
        latest_events=latest_events(selected, limit),
        breakdown=_breakdown(by_type),
    )
    logger.debug("Aggregated %d event(s) across %d type(s)", len(selected), len(stats.event_counts))
    return stats
