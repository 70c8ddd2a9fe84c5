"""Sleep score for one child: duration fit, subjective quality, consistency.

The score is out of 100:

- duration (40 pts): average sleep per day against the age recommendation,
  full marks within one hour, minus 10 points per extra hour off;
- quality (40 pts): mean of the parents' ratings (poor 10 ... excellent 40);
- consistency (20 pts): spread of the daily totals, full marks up to a
  30 minute standard deviation, minus one point per extra 15 minutes.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, tzinfo
from typing import Optional

from carelog.config import default_timezone
from carelog.models.event import CanonicalEvent
from carelog.models.sleep import SleepScore

logger = logging.getLogger(__name__)

# (age upper bound in months, exclusive; recommended hours of sleep per day)
_RECOMMENDED_HOURS_BY_AGE: tuple[tuple[int, float], ...] = (
    (4, 14.0),     # 0-3 months: 14-17 h
    (12, 13.0),    # 4-11 months: 12-15 h
    (24, 12.0),    # 1-2 years: 11-14 h
    (36, 11.0),    # 2-3 years: 10-13 h
    (60, 10.5),    # 3-5 years: 10-13 h
    (144, 9.5),    # 6-12 years: 9-12 h
)
_TEEN_RECOMMENDED_HOURS = 8.5

QUALITY_POINTS: dict[str, int] = {"poor": 10, "fair": 20, "good": 30, "excellent": 40}
DEFAULT_QUALITY = "good"

DURATION_MAX_POINTS = 40
DURATION_TOLERANCE_HOURS = 1
DURATION_PENALTY_PER_HOUR = 10

CONSISTENCY_MAX_POINTS = 20
CONSISTENCY_TOLERANCE_MINUTES = 30
CONSISTENCY_MINUTES_PER_POINT = 15

NAP_MAX_MINUTES = 180
DAYTIME_HOURS = (9, 19)

_SCORE_LABELS: tuple[tuple[int, str], ...] = (
    (90, "Excellent"),
    (75, "Very Good"),
    (60, "Good"),
    (45, "Fair"),
    (30, "Poor"),
)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ─── Helpers ──────────────────────────────────────────────────────────────────

def recommended_sleep_hours(age_months: float) -> float:
    """Recommended hours of sleep per day for a child of ``age_months``."""
    if age_months < 0:
        raise ValueError("age_months must be >= 0")
    for upper_bound, hours in _RECOMMENDED_HOURS_BY_AGE:
        if age_months < upper_bound:
            return hours
    return _TEEN_RECOMMENDED_HOURS


def age_in_months(birth_date: date, on: date) -> int:
    """Completed months of age on a given day."""
    months = (on.year - birth_date.year) * 12 + (on.month - birth_date.month)
    if on.day < birth_date.day:
        months -= 1
    return max(months, 0)


def describe_sleep_score(score: float) -> str:
    for threshold, label in _SCORE_LABELS:
        if score >= threshold:
            return label
    return "Very Poor"


def format_sleep_duration(minutes: float) -> str:
    """Format minutes as ``45 min``, ``2 hr`` or ``2 hr 15 min``."""
    minutes = max(0.0, minutes)
    hours = int(minutes // 60)
    rest = round_half_up(minutes % 60)
    if rest == 60:
        hours, rest = hours + 1, 0
    if hours == 0:
        return f"{rest} min"
    if rest == 0:
        return f"{hours} hr"
    return f"{hours} hr {rest} min"


def is_nap(event: CanonicalEvent, tz: Optional[tzinfo] = None) -> bool:
    """A nap is shorter than three hours, or starts during the day."""
    if event.duration_minutes < NAP_MAX_MINUTES:
        return True
    start_hour = event.start.astimezone(tz or default_timezone()).hour
    return DAYTIME_HOURS[0] <= start_hour < DAYTIME_HOURS[1]


def daily_sleep_minutes(events: Iterable[CanonicalEvent], tz: tzinfo) -> dict[date, float]:
    """Total minutes slept per calendar day of the sleep start, in ``tz``."""
    per_day: dict[date, float] = defaultdict(float)
    for event in events:
        per_day[event.start.astimezone(tz).date()] += event.duration_minutes
    return dict(per_day)


def duration_points(average_daily_hours: float, recommended_hours: float) -> float:
    excess = abs(average_daily_hours - recommended_hours) - DURATION_TOLERANCE_HOURS
    if excess <= 0:
        return float(DURATION_MAX_POINTS)
    return max(0.0, DURATION_MAX_POINTS - excess * DURATION_PENALTY_PER_HOUR)


def consistency_points(std_dev_minutes: float) -> float:
    excess = std_dev_minutes - CONSISTENCY_TOLERANCE_MINUTES
    if excess <= 0:
        return float(CONSISTENCY_MAX_POINTS)
    return max(0.0, CONSISTENCY_MAX_POINTS - excess / CONSISTENCY_MINUTES_PER_POINT)


# ─── Public API ───────────────────────────────────────────────────────────────

def score_sleep(
    events: Iterable[CanonicalEvent],
    age_months: float,
    *,
    tz: Optional[tzinfo] = None,
) -> SleepScore:
    """
    Score one child's sleep.

    Args:
        events: The child's sleep events. Other event types are ignored.
        age_months: Age of the child, used for the recommended duration.
        tz: Timezone used to assign sleeps to calendar days. Defaults to
            CARELOG_TIMEZONE so every date grouping uses the same convention.

    Returns:
        The composite score. No sleep events gives a zero score.
    """
    recommended = recommended_sleep_hours(age_months)
    sleeps = [e for e in events if e.event_type == "sleeping"]
    if not sleeps:
        return SleepScore(recommended_hours=recommended, label=describe_sleep_score(0))

    tz = tz or default_timezone()
    per_day = list(daily_sleep_minutes(sleeps, tz).values())
    mean_minutes = sum(per_day) / len(per_day)
    average_daily_hours = mean_minutes / 60

    # Straight mean over events, independent of the per-day grouping
    quality = sum(QUALITY_POINTS[e.quality or DEFAULT_QUALITY] for e in sleeps) / len(sleeps)

    variance = sum((minutes - mean_minutes) ** 2 for minutes in per_day) / len(per_day)
    std_dev = math.sqrt(variance)

    duration = duration_points(average_daily_hours, recommended)
    naps = sum(1 for e in sleeps if is_nap(e, tz))
    consistency = consistency_points(std_dev)
    total = min(100, max(0, round_half_up(duration + quality + consistency)))

    logger.debug(
        "Sleep score %d (duration %.1f, quality %.1f, consistency %.1f) over %d day(s)",
        total, duration, quality, consistency, len(per_day),
    )
    return SleepScore(
        duration_score=duration,
        quality_score=quality,
        consistency_score=consistency,
        total=total,
        label=describe_sleep_score(total),
        recommended_hours=recommended,
        average_daily_hours=average_daily_hours,
        std_dev_minutes=std_dev,
        days=len(per_day),
        average_daily_duration=format_sleep_duration(mean_minutes),
        nap_count=naps,
    )
