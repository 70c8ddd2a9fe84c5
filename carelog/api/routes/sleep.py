"""Sleep score endpoint."""

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from carelog.api.dependencies import SettingsDep, normalize_records
from carelog.models.sleep import SleepScore
from carelog.services.sleep_scorer import age_in_months, score_sleep

router = APIRouter(prefix="/children/{child_id}/sleep", tags=["sleep"])


class SleepScoreRequest(BaseModel):
    records: list[dict[str, Any]] = Field(default_factory=list)
    age_months: Optional[float] = Field(None, ge=0)
    birth_date: Optional[date] = None
    on: Optional[date] = Field(None, description="Day the age is computed for (default: today)")


@router.post("/score", response_model=SleepScore)
async def get_sleep_score(
    child_id: str, payload: SleepScoreRequest, settings: SettingsDep
) -> SleepScore:
    """Score the child's sleep. The age comes from `age_months` or `birth_date`."""
    if payload.age_months is not None:
        age_months = payload.age_months
    elif payload.birth_date is not None:
        on = payload.on or date.today()
        if on < payload.birth_date:
            raise HTTPException(status_code=400, detail="'on' must be >= 'birth_date'")
        age_months = age_in_months(payload.birth_date, on)
    else:
        raise HTTPException(status_code=422, detail="Either 'age_months' or 'birth_date' is required")

    result = normalize_records(payload.records, child_id, settings, expected_type="sleeping")
    return score_sleep(result.events, age_months, tz=settings.tz)
