"""API route modules for the ElderCare notification API."""

from app.routes.health import router as health_router
from app.routes.cron import router as cron_router
from app.routes.alerts import router as alerts_router


def register_routes(app) -> None:
    """Register all route modules with the FastAPI app."""
    app.include_router(health_router)
    app.include_router(cron_router, prefix="/cron", tags=["cron"])
    app.include_router(alerts_router, prefix="/alerts", tags=["alerts"])
