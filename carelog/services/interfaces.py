"""Collaborators the analytics core talks to but does not implement."""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Optional, Protocol

from carelog.models.report import ReportRow
from carelog.models.stats import DateRange


class EventSource(Protocol):
    """Storage query returning the raw records of one child."""

    def __call__(
        self,
        child_id: str,
        event_type: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> Iterable[Mapping[str, Any]]: ...


class ReportRenderer(Protocol):
    """PDF renderer. ``rows`` may be a single-pass iterator."""

    def __call__(
        self,
        report_type: str,
        rows: Iterable[ReportRow],
        start_date: datetime,
        end_date: datetime,
        child_name: str,
    ) -> bytes: ...
