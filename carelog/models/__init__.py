from .details import (
    AppointmentDetails, DiaperDetails, EventDetails, FeedingDetails,
    GrowthDetails, MedicationDetails, SleepDetails, TemperatureDetails,
)
from .event import CanonicalEvent, Measurement
from .report import DailyEntry, DailyReport, ReportRow, ReportSummary
from .sleep import SleepScore
from .stats import AggregateStats, DateRange, QualityDistribution, SleepSummary, TypeBreakdown
from .vocabulary import EVENT_TYPES, SLEEP_QUALITIES, EventType, SleepQuality

__all__ = [
    "CanonicalEvent", "Measurement", "EventType", "SleepQuality",
    "EVENT_TYPES", "SLEEP_QUALITIES",
    "EventDetails", "SleepDetails", "FeedingDetails", "DiaperDetails",
    "MedicationDetails", "GrowthDetails", "TemperatureDetails", "AppointmentDetails",
    "AggregateStats", "DateRange", "QualityDistribution", "SleepSummary", "TypeBreakdown",
    "SleepScore", "ReportRow", "ReportSummary", "DailyEntry", "DailyReport",
]
