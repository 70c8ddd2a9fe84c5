"""Per-type auxiliary payloads carried by canonical events.

Historical sources stored extra information either as top-level fields or as a
JSON string in ``details``. Both shapes are validated into one of the variants
below, selected by the ``kind`` discriminator (the canonical event type).
Values that end up in ``CanonicalEvent.measurement`` (amount, weight,
temperature and their units) are not repeated here.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, field_validator

from .vocabulary import SLEEP_QUALITIES, SleepQuality


class _Details(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}


class SleepDetails(_Details):
    kind: Literal["sleeping"] = "sleeping"
    quality: Optional[SleepQuality] = None
    sleep_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("type", "sleepType", "sleep_type"), serialization_alias="type"
    )
    duration: Optional[float] = Field(None, ge=0, description="Declared duration in minutes")

    @field_validator("quality", mode="before")
    @classmethod
    def _lowercase_quality(cls, value: Any) -> Optional[str]:
        # Sources wrote "Good" as well as "good"; anything unknown is unrated.
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        return value if value in SLEEP_QUALITIES else None


class FeedingDetails(_Details):
    kind: Literal["feeding"] = "feeding"
    feeding_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("type", "method", "feedingType", "feeding_type"),
        serialization_alias="type",
    )
    food_description: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("foodDescription", "food_description"),
        serialization_alias="foodDescription",
    )
    portion_consumed: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("portionConsumed", "portion_consumed"),
        serialization_alias="portionConsumed",
    )


class DiaperDetails(_Details):
    kind: Literal["diaper"] = "diaper"
    diaper_type: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("type", "diaperType", "diaper_type"),
        serialization_alias="type",
    )
    consistency: Optional[str] = None
    color: Optional[str] = None


class MedicationDetails(_Details):
    kind: Literal["medication"] = "medication"
    medication: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("medication", "medicationName", "name"),
        serialization_alias="medication",
    )
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    reason: Optional[str] = None

    @field_validator("dosage", mode="before")
    @classmethod
    def _dosage_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class GrowthDetails(_Details):
    kind: Literal["growth"] = "growth"
    height: Optional[float] = Field(None, gt=0)
    height_unit: Optional[str] = Field(
        None, validation_alias=AliasChoices("heightUnit", "height_unit"), serialization_alias="heightUnit"
    )
    head_circumference: Optional[float] = Field(
        None,
        gt=0,
        validation_alias=AliasChoices("headCircumference", "head_circumference"),
        serialization_alias="headCircumference",
    )


class TemperatureDetails(_Details):
    kind: Literal["temperature"] = "temperature"
    method: Optional[str] = None


class AppointmentDetails(_Details):
    kind: Literal["appointment"] = "appointment"
    title: Optional[str] = None
    location: Optional[str] = None
    doctor: Optional[str] = None


EventDetails = Annotated[
    Union[
        SleepDetails,
        FeedingDetails,
        DiaperDetails,
        MedicationDetails,
        GrowthDetails,
        TemperatureDetails,
        AppointmentDetails,
    ],
    Field(discriminator="kind"),
]

DETAILS_ADAPTER: TypeAdapter = TypeAdapter(EventDetails)

_EMPTY_BY_KIND = {
    "sleeping": SleepDetails,
    "feeding": FeedingDetails,
    "diaper": DiaperDetails,
    "medication": MedicationDetails,
    "growth": GrowthDetails,
    "temperature": TemperatureDetails,
    "appointment": AppointmentDetails,
}


def empty_details(event_type: str) -> _Details:
    """Return the payload variant for ``event_type`` with every field unset."""
    return _EMPTY_BY_KIND[event_type]()


def details_to_payload(details: _Details) -> dict[str, Any]:
    """Dump a variant back to the camelCase shape the sources used."""
    return details.model_dump(by_alias=True, exclude={"kind"}, exclude_none=True)
