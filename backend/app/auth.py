from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import HTTPException, Query

from app.config import cron_secret

logger = logging.getLogger("eldercare")


class CronAuthError(Exception):
    def __init__(self, status_code: int, error: str):
        super().__init__(error)
        self.status_code = status_code
        self.error = error


def check_cron_secret(secret: Optional[str]) -> None:
    """
    Missing CRON_SECRET configuration -> 500.
    Missing or mismatched `secret` query parameter -> 401.
    """
    expected = cron_secret()
    if not expected:
        logger.error("[CRON] CRON_SECRET not configured in environment")
        raise CronAuthError(500, "Server configuration error")
    if secret is None or not hmac.compare_digest(secret.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("[CRON] Invalid cron secret attempted")
        raise CronAuthError(401, "Unauthorized")


def require_cron_secret(secret: Optional[str] = Query(default=None)) -> None:
    """Dependency variant for routes that answer with plain HTTP errors."""
    try:
        check_cron_secret(secret)
    except CronAuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.error)
