"""Closed vocabularies shared by the event models and the services."""

from typing import Literal, get_args

EventType = Literal[
    "sleeping",
    "feeding",
    "diaper",
    "growth",
    "medication",
    "temperature",
    "appointment",
]

SleepQuality = Literal["poor", "fair", "good", "excellent"]

EVENT_TYPES: tuple[str, ...] = get_args(EventType)
SLEEP_QUALITIES: tuple[str, ...] = get_args(SleepQuality)
