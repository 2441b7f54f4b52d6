"""Due-event Pydantic models produced by the event collector."""

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DueEventType(str, Enum):
    BIRTHDAY = "BIRTHDAY"
    ANNIVERSARY = "ANNIVERSARY"
    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    ACTIVITY_REMINDER = "ACTIVITY_REMINDER"
    MISSING_LOG_WARNING = "MISSING_LOG_WARNING"


class Contact(BaseModel):
    name: str = ""
    relation: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def reachable(self) -> bool:
        return bool(self.email or self.phone)


class DueEvent(BaseModel):
    """One notification-worthy occurrence found during a sweep. Never persisted."""

    type: DueEventType
    subject_id: str
    subject_name: str
    event_date: date
    value: int = 0
    details: Dict[str, Any] = Field(default_factory=dict)
    contacts: List[Contact] = Field(default_factory=list)

    # Filled by app.services.templates.render_event
    title: str = ""
    message: str = ""
    html: str = ""

    @property
    def emails(self) -> List[str]:
        return [c.email for c in self.contacts if c.email]

    @property
    def phones(self) -> List[str]:
        return [c.phone for c in self.contacts if c.phone]
