"""Pydantic models for the ElderCare notification API."""

from app.models.events import (
    DueEventType,
    Contact,
    DueEvent,
)
from app.models.alert import (
    AlertStatus,
    AlertChannel,
    AlertLogEntry,
    AlertLogItem,
    TestNotificationRequest,
    TestChannelResult,
    TestNotificationResponse,
)
from app.models.sweep import (
    DeliveryResult,
    AlertOutcome,
    SweepResult,
    CronChannels,
    CronData,
    CronResponse,
)
from app.models.health import HealthStatus

__all__ = [
    # Events
    "DueEventType",
    "Contact",
    "DueEvent",
    # Alert log
    "AlertStatus",
    "AlertChannel",
    "AlertLogEntry",
    "AlertLogItem",
    "TestNotificationRequest",
    "TestChannelResult",
    "TestNotificationResponse",
    # Sweep
    "DeliveryResult",
    "AlertOutcome",
    "SweepResult",
    "CronChannels",
    "CronData",
    "CronResponse",
    # Health
    "HealthStatus",
]
