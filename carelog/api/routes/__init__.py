"""Package routes : exporte tous les routeurs FastAPI."""

from .events import router as events_router
from .health import router as health_router
from .reports import router as reports_router
from .sleep import router as sleep_router
from .stats import router as stats_router

__all__ = ["health_router", "events_router", "stats_router", "sleep_router", "reports_router"]
