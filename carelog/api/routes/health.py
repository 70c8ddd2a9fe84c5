"""Healthcheck endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel

from carelog.api.dependencies import SettingsDep

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timezone: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Retourne l'état du service et le fuseau utilisé pour les regroupements par jour."""
    return HealthResponse(status="ok", timezone=settings.timezone_name)
