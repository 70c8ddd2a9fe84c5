"""Reusable FastAPI dependencies (settings, record normalization)."""

import logging
from typing import Annotated, Any, Optional

from fastapi import Depends, HTTPException

from carelog.config import Settings, get_settings
from carelog.services.normalizer import (
    NormalizationError, NormalizationResult, normalize_batch, resolve_event_type,
)

logger = logging.getLogger(__name__)


def settings_dependency() -> Settings:
    """Provide the process settings; overridden in tests."""
    return get_settings()


SettingsDep = Annotated[Settings, Depends(settings_dependency)]


def normalize_records(
    records: list[dict[str, Any]],
    child_id: str,
    settings: Settings,
    expected_type: Optional[str] = None,
) -> NormalizationResult:
    """
    Normalize request records for one child.

    Invalid records are skipped and reported, unless STRICT_NORMALIZATION is
    set, in which case the first one fails the request with a 422.
    """
    try:
        if expected_type is not None:
            resolve_event_type(expected_type, "eventType")
        return normalize_batch(
            records, expected_type, child_id=child_id, strict=settings.strict_normalization
        )
    except NormalizationError as exc:
        logger.info("Rejected batch for child %s: %s", child_id, exc)
        raise HTTPException(
            status_code=422, detail={"field": exc.field, "reason": exc.reason}
        ) from exc
