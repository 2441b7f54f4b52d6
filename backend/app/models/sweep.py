"""Delivery and sweep result Pydantic models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.events import DueEventType


class DeliveryResult(BaseModel):
    success: bool
    provider: Optional[str] = None
    error: Optional[str] = None
    not_configured: bool = False


class AlertOutcome(BaseModel):
    type: DueEventType
    subjectId: str
    elderlyName: str
    message: str
    emailSent: bool = False
    smsSent: bool = False
    emailError: Optional[str] = None
    smsError: Optional[str] = None
    skipped: bool = False

    @property
    def delivered(self) -> bool:
        return self.emailSent or self.smsSent


class SweepResult(BaseModel):
    processed: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    alerts: List[AlertOutcome] = Field(default_factory=list)


class CronChannels(BaseModel):
    emailConfigured: bool
    smsConfigured: bool


class CronData(BaseModel):
    timestamp: datetime
    eventsProcessed: int
    eventsSkipped: int
    notificationsSent: int
    notificationsFailed: int
    channels: CronChannels
    alerts: List[AlertOutcome]


class CronResponse(BaseModel):
    success: bool = True
    message: str = "Daily check completed"
    data: CronData
