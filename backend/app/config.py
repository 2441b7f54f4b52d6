from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_EMAIL_API_URL = "https://email-api.thaibulksms.com/email/v1/send_template"
DEFAULT_SMS_API_URL = "https://api-v2.thaibulksms.com/sms"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_bool(name: str, default: bool = False) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


def env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, str(default)))
    except ValueError:
        return default


def cron_secret() -> Optional[str]:
    return _env("CRON_SECRET")


class SmtpSettings(BaseModel):
    host: Optional[str] = None
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    secure: bool = False

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)


class EmailApiSettings(BaseModel):
    url: str = DEFAULT_EMAIL_API_URL
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    template_id: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret and self.template_id)


class SmsSettings(BaseModel):
    url: str = DEFAULT_SMS_API_URL
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    sender: Optional[str] = None
    country_code: str = "66"

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_secret)


class NotificationSettings(BaseModel):
    """Provider configuration, snapshotted once per sweep."""

    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    email_api: EmailApiSettings = Field(default_factory=EmailApiSettings)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    from_address: Optional[str] = None
    from_name: str = "ElderCare"
    timeout_seconds: float = 15.0
    dedup_enabled: bool = True
    missing_log_threshold_days: int = 3
    max_workers: int = 1

    @property
    def sender_address(self) -> Optional[str]:
        return self.from_address or self.smtp.user

    @property
    def email_api_configured(self) -> bool:
        return self.email_api.has_credentials and bool(self.from_address)

    @property
    def email_configured(self) -> bool:
        return self.smtp.configured or self.email_api_configured

    @property
    def sms_configured(self) -> bool:
        return self.sms.configured

    @classmethod
    def from_env(cls) -> "NotificationSettings":
        port = env_int("SMTP_PORT", 587)
        secure_raw = _env("SMTP_SECURE")
        # Implicit TLS on 465 unless SMTP_SECURE says otherwise.
        secure = env_bool("SMTP_SECURE") if secure_raw is not None else port == 465

        return cls(
            smtp=SmtpSettings(
                host=_env("SMTP_HOST"),
                port=port,
                user=_env("SMTP_USER"),
                password=_env("SMTP_PASS"),
                secure=secure,
            ),
            email_api=EmailApiSettings(
                url=_env("EMAIL_API_URL") or DEFAULT_EMAIL_API_URL,
                api_key=_env("EMAIL_API_KEY") or _env("SMS_API_KEY"),
                api_secret=_env("EMAIL_API_SECRET") or _env("SMS_API_SECRET"),
                template_id=_env("EMAIL_TEMPLATE_ID"),
            ),
            sms=SmsSettings(
                url=_env("SMS_API_URL") or DEFAULT_SMS_API_URL,
                api_key=_env("SMS_API_KEY"),
                api_secret=_env("SMS_API_SECRET"),
                sender=_env("SMS_SENDER"),
                country_code=_env("SMS_COUNTRY_CODE") or "66",
            ),
            from_address=_env("EMAIL_FROM_ADDRESS"),
            from_name=_env("EMAIL_FROM_NAME") or "ElderCare",
            timeout_seconds=env_float("NOTIFY_TIMEOUT_SECONDS", 15.0),
            dedup_enabled=env_bool("ALERT_DEDUP_ENABLED", default=True),
            missing_log_threshold_days=max(1, env_int("MISSING_LOG_THRESHOLD_DAYS", 3)),
            max_workers=max(1, env_int("SWEEP_MAX_WORKERS", 1)),
        )
