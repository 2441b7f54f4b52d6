"""Cron trigger for the daily notification sweep."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.auth import CronAuthError, check_cron_secret
from app.config import NotificationSettings
from app.db import CareStore
from app.dependencies import get_settings, get_store
from app.models.sweep import CronChannels, CronData, CronResponse
from app.services.sweep import DailySweep, SweepAlreadyRunning

logger = logging.getLogger("eldercare")

router = APIRouter()


def _error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.post("/daily-check", response_model=CronResponse)
@router.get("/daily-check", response_model=CronResponse)
def daily_check(
    secret: Optional[str] = Query(default=None),
    store: CareStore = Depends(get_store),
    settings: NotificationSettings = Depends(get_settings),
):
    """Run one notification sweep. GET and POST behave identically."""
    try:
        check_cron_secret(secret)
    except CronAuthError as e:
        return _error(e.status_code, e.error)

    logger.info("[CRON] Starting daily check")
    try:
        result = DailySweep(store, settings).run()
    except SweepAlreadyRunning as e:
        logger.warning("[CRON] %s", e)
        return _error(409, str(e))
    except Exception as e:
        logger.exception("[CRON] Daily check failed")
        return _error(500, str(e) or e.__class__.__name__)

    logger.info(
        "[CRON] Daily check completed: %d processed, %d sent, %d failed",
        result.processed,
        result.successful,
        result.failed,
    )
    response = CronResponse(
        data=CronData(
            timestamp=datetime.now(timezone.utc),
            eventsProcessed=result.processed,
            eventsSkipped=result.skipped,
            notificationsSent=result.successful,
            notificationsFailed=result.failed,
            channels=CronChannels(
                emailConfigured=settings.email_configured,
                smsConfigured=settings.sms_configured,
            ),
            alerts=result.alerts,
        )
    )
    return JSONResponse(content=response.model_dump(mode="json"))
