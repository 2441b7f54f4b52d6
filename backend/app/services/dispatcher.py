"""Channel dispatcher: delivers one due event on every channel it has contacts for."""

import logging
from typing import Callable, List, Optional, Tuple

from app.models.alert import AlertChannel, AlertStatus
from app.models.events import DueEvent
from app.models.sweep import AlertOutcome, DeliveryResult
from app.services.alert_log import AlertLogGate
from app.services.email_chain import EmailMessage, EmailProviderChain
from app.services.sms import SmsProvider

logger = logging.getLogger("eldercare")


def _channel_status(results: List[DeliveryResult]) -> AlertStatus:
    if any(r.success for r in results):
        return AlertStatus.SENT
    if results and all(r.not_configured for r in results):
        return AlertStatus.SKIPPED
    return AlertStatus.FAILED


def _channel_error(results: List[DeliveryResult]) -> Optional[str]:
    errors: List[str] = []
    for result in results:
        if not result.success and result.error and result.error not in errors:
            errors.append(result.error)
    return "; ".join(errors) or None


def _safe(send: Callable[[], DeliveryResult], channel: AlertChannel) -> DeliveryResult:
    try:
        return send()
    except Exception as e:
        logger.exception("[%s] Unexpected provider error", channel.value.upper())
        return DeliveryResult(success=False, error=f"{e.__class__.__name__}: {e}")


class ChannelDispatcher:
    """Email and SMS are attempted independently; each channel is logged once per event."""

    def __init__(self, email: EmailProviderChain, sms: SmsProvider, gate: AlertLogGate):
        self.email = email
        self.sms = sms
        self.gate = gate

    def dispatch(self, event: DueEvent) -> AlertOutcome:
        outcome = AlertOutcome(
            type=event.type,
            subjectId=event.subject_id,
            elderlyName=event.subject_name,
            message=event.message,
        )
        if not event.contacts:
            logger.warning(
                "[SWEEP] %s for %s has no reachable contact", event.type.value, event.subject_id
            )
            return outcome

        emails = event.emails
        if emails:
            outcome.emailSent, outcome.emailError = self._deliver(
                event, AlertChannel.EMAIL, [lambda to=to: self._send_email(event, to) for to in emails]
            )

        phones = event.phones
        if phones:
            outcome.smsSent, outcome.smsError = self._deliver(
                event, AlertChannel.SMS, [lambda to=to: self.sms.send(to, event.message) for to in phones]
            )
        return outcome

    def _send_email(self, event: DueEvent, to: str) -> DeliveryResult:
        return self.email.send(
            EmailMessage(
                to=to,
                subject=event.title,
                html=event.html,
                text=event.message,
                title=event.title,
            )
        )

    def _deliver(
        self,
        event: DueEvent,
        channel: AlertChannel,
        sends: List[Callable[[], DeliveryResult]],
    ) -> Tuple[bool, Optional[str]]:
        results = [_safe(send, channel) for send in sends]
        status = _channel_status(results)
        error = _channel_error(results)
        self.gate.record(event, channel, status, error)
        return status == AlertStatus.SENT, error
