"""CareLog analytics API application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()  # load .env before anything reads os.getenv()

from fastapi import FastAPI

from carelog.api.routes import (
    events_router, health_router, reports_router, sleep_router, stats_router,
)
from carelog.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective settings at startup."""
    logger.info(
        "CareLog analytics started (timezone=%s, latest_events_limit=%d, strict=%s)",
        settings.timezone_name, settings.latest_events_limit, settings.strict_normalization,
    )
    yield
    logger.info("CareLog analytics stopped")


app = FastAPI(
    title="CareLog Analytics API",
    description=(
        "Child-care event analytics: record normalization, dashboard statistics, "
        "sleep scoring and report rows for the PDF export."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(events_router)
app.include_router(stats_router)
app.include_router(sleep_router)
app.include_router(reports_router)
