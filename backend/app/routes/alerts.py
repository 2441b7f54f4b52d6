"""Alert-log browsing and test-notification routes."""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.auth import require_cron_secret
from app.config import NotificationSettings
from app.db import CareStore
from app.dependencies import get_settings, get_store
from app.models.alert import (
    AlertLogItem,
    TestChannelResult,
    TestNotificationRequest,
    TestNotificationResponse,
)
from app.models.sweep import DeliveryResult
from app.services.email_chain import EmailMessage, EmailProviderChain
from app.services.sms import SmsProvider
from app.services.templates import BRAND, wrap_html

router = APIRouter()

TEST_SUBJECT = f"{BRAND} test notification"
TEST_TEXT = f"{BRAND}: this is a test notification. No action is needed."


def _serialize_dt(value) -> Optional[datetime]:
    return value if isinstance(value, datetime) else None


def _to_item(doc: dict) -> AlertLogItem:
    return AlertLogItem(
        id=str(doc.get("_id", "")),
        type=doc.get("type", ""),
        elderlyName=doc.get("elderlyName", ""),
        message=doc.get("message", ""),
        channel=doc.get("channel"),
        status=doc.get("status", ""),
        error=doc.get("error"),
        createdAt=_serialize_dt(doc.get("createdAt")) or datetime.now(timezone.utc),
    )


def _channel_result(result: DeliveryResult) -> TestChannelResult:
    return TestChannelResult(
        success=result.success,
        configured=not result.not_configured,
        provider=result.provider,
        error=result.error,
    )


@router.get("/recent", response_model=List[AlertLogItem])
def recent_alerts(
    limit: int = Query(default=20, ge=1, le=100),
    store: CareStore = Depends(get_store),
) -> List[AlertLogItem]:
    """Newest alert-log entries first."""
    return [_to_item(doc) for doc in store.recent_alert_logs(limit)]


@router.post("/test", response_model=TestNotificationResponse)
def test_notification(
    payload: TestNotificationRequest,
    _: None = Depends(require_cron_secret),
    settings: NotificationSettings = Depends(get_settings),
) -> TestNotificationResponse:
    """Send a test message through the email chain and/or the SMS provider."""
    email = (payload.email or "").strip()
    phone = (payload.phone or "").strip()
    if not email and not phone:
        raise HTTPException(status_code=400, detail="email or phone is required")

    response = TestNotificationResponse(timestamp=datetime.now(timezone.utc))
    if email:
        result = EmailProviderChain(settings).send(
            EmailMessage(
                to=email,
                subject=TEST_SUBJECT,
                html=wrap_html("Test notification", "#4f46e5", f"<p>{TEST_TEXT}</p>"),
                text=TEST_TEXT,
                title=TEST_SUBJECT,
            )
        )
        response.email = _channel_result(result)
    if phone:
        response.sms = _channel_result(SmsProvider(settings).send(phone, TEST_TEXT))
    return response
