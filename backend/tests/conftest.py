"""Shared fixtures: an in-memory care store and provider settings."""

from __future__ import annotations

import time
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pytest

from app.config import EmailApiSettings, NotificationSettings, SmsSettings, SmtpSettings

TODAY = date(2025, 3, 15)


def set_timezone(monkeypatch, name: str) -> None:
    monkeypatch.setenv("TZ", name)
    time.tzset()


@pytest.fixture(autouse=True)
def utc_timezone(monkeypatch):
    """Run every test on a UTC server clock unless it switches zones itself."""
    if not hasattr(time, "tzset"):
        yield
        return
    set_timezone(monkeypatch, "UTC")
    yield
    monkeypatch.undo()
    time.tzset()


def make_profile(
    pid: str,
    *,
    first: str = "Somchai",
    last: str = "Jaidee",
    dob: Optional[datetime] = None,
    registered: Optional[datetime] = None,
    email: Optional[str] = "coordinator@example.com",
    phone: Optional[str] = None,
    guardian_email: Optional[str] = None,
    guardian_phone: Optional[str] = None,
    active: bool = True,
) -> Dict[str, Any]:
    return {
        "_id": pid,
        "firstName": first,
        "lastName": last,
        "dateOfBirth": dob,
        "registrationDate": registered,
        "isActive": active,
        "keyCoordinatorName": "Coordinator",
        "keyCoordinatorRelation": "Child",
        "keyCoordinatorEmail": email,
        "keyCoordinatorPhone": phone,
        "legalGuardianName": "Guardian" if (guardian_email or guardian_phone) else None,
        "legalGuardianEmail": guardian_email,
        "legalGuardianPhone": guardian_phone,
    }


class FakeStore:
    """In-memory stand-in for CareStore with the same method surface."""

    def __init__(
        self,
        profiles: Optional[List[dict]] = None,
        appointments: Optional[List[dict]] = None,
        activities: Optional[List[dict]] = None,
        log_dates: Optional[Dict[Any, datetime]] = None,
    ):
        self.profiles = profiles or []
        self.appointments = appointments or []
        self.activities = activities or []
        self.log_dates = log_dates or {}
        self.alert_logs: List[dict] = []
        self.fail_reads = False
        self.fail_inserts = False
        self.closed = False

    def _check(self) -> None:
        if self.fail_reads:
            raise RuntimeError("database unavailable")

    def active_profiles(self) -> List[dict]:
        self._check()
        return [p for p in self.profiles if p.get("isActive")]

    def pending_appointments(self, today: date, max_days_ahead: int = 30) -> List[dict]:
        self._check()
        return [a for a in self.appointments if not a.get("isCompleted")]

    def active_activities(self) -> List[dict]:
        self._check()
        return [a for a in self.activities if a.get("isActive", True)]

    def latest_log_dates(self, profile_ids: list) -> Dict[Any, datetime]:
        self._check()
        return {pid: self.log_dates[pid] for pid in profile_ids if pid in self.log_dates}

    def insert_alert_log(self, entry: dict) -> None:
        if self.fail_inserts:
            raise RuntimeError("insert failed")
        self.alert_logs.append(dict(entry))

    def has_sent_alert(self, event_type: str, subject_id: str, event_date: str) -> bool:
        return any(
            log["type"] == event_type
            and log["subjectId"] == subject_id
            and log["eventDate"] == event_date
            and log["status"] == "SENT"
            for log in self.alert_logs
        )

    def recent_alert_logs(self, limit: int = 20) -> List[dict]:
        ordered = sorted(self.alert_logs, key=lambda log: log["createdAt"], reverse=True)
        return ordered[:limit]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def unconfigured_settings() -> NotificationSettings:
    return NotificationSettings()


@pytest.fixture
def api_settings() -> NotificationSettings:
    """Template API email and SMS configured, no SMTP."""
    return NotificationSettings(
        email_api=EmailApiSettings(
            api_key="key",
            api_secret="secret",
            template_id="tpl-123",
        ),
        sms=SmsSettings(api_key="key", api_secret="secret", sender="ElderCare"),
        from_address="noreply@eldercare.test",
        timeout_seconds=5,
    )


@pytest.fixture
def smtp_and_api_settings(api_settings: NotificationSettings) -> NotificationSettings:
    api_settings.smtp = SmtpSettings(
        host="smtp.eldercare.test",
        port=587,
        user="mailer@eldercare.test",
        password="pw",
    )
    return api_settings
