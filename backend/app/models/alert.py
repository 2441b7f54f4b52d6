"""Alert-log Pydantic models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class AlertStatus(str, Enum):
    SENT = "SENT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class AlertChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class AlertLogEntry(BaseModel):
    """One persisted delivery outcome. Insert-only."""

    type: str
    subjectId: str
    elderlyName: str
    message: str
    channel: Optional[AlertChannel] = None
    status: AlertStatus
    error: Optional[str] = None
    eventDate: str
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_document(self) -> dict:
        doc = self.model_dump()
        doc["status"] = self.status.value
        doc["channel"] = self.channel.value if self.channel else None
        return doc


class AlertLogItem(BaseModel):
    id: str
    type: str
    elderlyName: str
    message: str
    channel: Optional[str] = None
    status: str
    error: Optional[str] = None
    createdAt: datetime


class TestNotificationRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class TestChannelResult(BaseModel):
    success: bool
    configured: bool
    provider: Optional[str] = None
    error: Optional[str] = None


class TestNotificationResponse(BaseModel):
    timestamp: datetime
    email: Optional[TestChannelResult] = None
    sms: Optional[TestChannelResult] = None
