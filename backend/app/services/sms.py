"""Bulk-SMS provider: one HTTP call per message, no fallback."""

import logging
import re
from typing import List, Union

from app.config import NotificationSettings
from app.models.sweep import DeliveryResult
from app.services.http_client import DeliveryError, post_json

logger = logging.getLogger("eldercare")

NOT_CONFIGURED = "SMS not configured"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str, country_code: str = "66") -> str:
    """Convert a local or formatted number to international digits.

    "081-234-5678" -> "66812345678"; "+66 81 234 5678" -> "66812345678".
    """
    cleaned = _NON_DIGITS.sub("", phone or "")
    if cleaned.startswith("0"):
        cleaned = country_code + cleaned[1:]
    if not cleaned.startswith(country_code):
        cleaned = country_code + cleaned
    return cleaned


class SmsProvider:
    def __init__(self, settings: NotificationSettings):
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return self.settings.sms.configured

    def send(self, to: Union[str, List[str]], message: str) -> DeliveryResult:
        if not self.is_configured:
            logger.info("[SMS] Not configured - skipping send")
            return DeliveryResult(success=False, error=NOT_CONFIGURED, not_configured=True)

        sms = self.settings.sms
        numbers = [to] if isinstance(to, str) else list(to)
        msisdn = [normalize_phone(n, sms.country_code) for n in numbers]
        body = {"msisdn": msisdn, "message": message}
        if sms.sender:
            body["sender"] = sms.sender

        try:
            post_json(
                sms.url,
                body,
                username=sms.api_key,
                password=sms.api_secret,
                timeout=self.settings.timeout_seconds,
            )
        except DeliveryError as e:
            logger.warning("[SMS] Send to %d recipient(s) failed: %s", len(msisdn), e)
            return DeliveryResult(success=False, provider="sms_api", error=str(e))

        logger.info("[SMS] Sent to %d recipient(s)", len(msisdn))
        return DeliveryResult(success=True, provider="sms_api")
