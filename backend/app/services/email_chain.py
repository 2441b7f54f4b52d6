"""
Email provider chain.

Providers are tried in order (SMTP relay, then the hosted template API) until
one delivers. A provider without configuration is skipped; when none is
configured the chain fails with a not-configured result and does no I/O.
"""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Callable, List, Optional

from app.config import NotificationSettings
from app.models.sweep import DeliveryResult
from app.services.http_client import post_json

logger = logging.getLogger("eldercare")

NOT_CONFIGURED = "Email not configured"


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str
    title: str = ""


@dataclass
class EmailProvider:
    name: str
    is_configured: Callable[[], bool]
    send: Callable[[EmailMessage], None]


def send_via_smtp(settings: NotificationSettings, message: EmailMessage) -> None:
    """Relay one message through the configured SMTP server. Raises on any failure."""
    smtp = settings.smtp
    mime = MIMEMultipart("alternative")
    mime["From"] = formataddr((settings.from_name, settings.sender_address or ""))
    mime["To"] = message.to
    mime["Subject"] = message.subject
    mime.attach(MIMEText(message.text, "plain", "utf-8"))
    mime.attach(MIMEText(message.html, "html", "utf-8"))

    if smtp.secure:
        server = smtplib.SMTP_SSL(smtp.host, smtp.port, timeout=settings.timeout_seconds)
    else:
        server = smtplib.SMTP(smtp.host, smtp.port, timeout=settings.timeout_seconds)
    with server:
        if not smtp.secure:
            server.ehlo()
            if server.has_extn("starttls"):
                server.starttls()
                server.ehlo()
        server.login(smtp.user, smtp.password)
        server.send_message(mime)


def send_via_template_api(settings: NotificationSettings, message: EmailMessage) -> None:
    """Send one message through the hosted send-template endpoint. Raises on any failure."""
    api = settings.email_api
    body = {
        "template_uuid": api.template_id,
        "subject": message.subject,
        "mail_from": {"name": settings.from_name, "email": settings.from_address},
        "mail_to": [{"email": message.to}],
        "payload": {
            "message": message.text,
            "title": message.title or message.subject,
        },
    }
    post_json(
        api.url,
        body,
        username=api.api_key,
        password=api.api_secret,
        timeout=settings.timeout_seconds,
    )


class EmailProviderChain:
    def __init__(
        self,
        settings: NotificationSettings,
        providers: Optional[List[EmailProvider]] = None,
    ):
        self.settings = settings
        self.providers = providers if providers is not None else self.default_providers(settings)

    @staticmethod
    def default_providers(settings: NotificationSettings) -> List[EmailProvider]:
        return [
            EmailProvider(
                name="smtp",
                is_configured=lambda: settings.smtp.configured,
                send=lambda message: send_via_smtp(settings, message),
            ),
            EmailProvider(
                name="template_api",
                is_configured=lambda: settings.email_api_configured,
                send=lambda message: send_via_template_api(settings, message),
            ),
        ]

    @property
    def is_configured(self) -> bool:
        return any(provider.is_configured() for provider in self.providers)

    def send(self, message: EmailMessage) -> DeliveryResult:
        errors: List[str] = []
        attempted = False
        for provider in self.providers:
            if not provider.is_configured():
                continue
            attempted = True
            try:
                provider.send(message)
            except Exception as e:
                logger.warning(
                    "[EMAIL/%s] Send to %s failed: %s", provider.name.upper(), message.to, e
                )
                errors.append(f"{provider.name}: {e}")
                continue
            logger.info("[EMAIL/%s] Sent to %s: %s", provider.name.upper(), message.to, message.subject)
            return DeliveryResult(success=True, provider=provider.name)

        if not attempted:
            logger.info("[EMAIL] Not configured - skipping send to %s", message.to)
            return DeliveryResult(success=False, error=NOT_CONFIGURED, not_configured=True)
        return DeliveryResult(success=False, error="; ".join(errors))
