"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.config import NotificationSettings, cron_secret
from app.db import mongo_check
from app.models.health import HealthStatus

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
def health_check() -> HealthStatus:
    """Check API and database health status."""
    ok, summary, err = mongo_check()
    settings = NotificationSettings.from_env()
    return HealthStatus(
        time=datetime.now(timezone.utc),
        mongo="ok" if ok else "error",
        mongo_host=summary.get("host"),
        mongo_db=summary.get("db"),
        mongo_error=err,
        emailConfigured=settings.email_configured,
        smsConfigured=settings.sms_configured,
        cronSecretConfigured=bool(cron_secret()),
    )
