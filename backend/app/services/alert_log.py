"""Alert-log gate: best-effort audit trail plus same-day dedup lookup."""

import logging
from typing import Optional

from app.models.alert import AlertChannel, AlertLogEntry, AlertStatus
from app.models.events import DueEvent

logger = logging.getLogger("eldercare")

ALREADY_NOTIFIED = "already notified today"


class AlertLogGate:
    def __init__(self, store):
        self.store = store

    def record(
        self,
        event: DueEvent,
        channel: Optional[AlertChannel],
        status: AlertStatus,
        error: Optional[str] = None,
    ) -> None:
        """Insert one alert-log entry. Insert failures are logged, never raised."""
        entry = AlertLogEntry(
            type=event.type.value,
            subjectId=event.subject_id,
            elderlyName=event.subject_name,
            message=event.message,
            channel=channel,
            status=status,
            error=error,
            eventDate=event.event_date.isoformat(),
        )
        try:
            self.store.insert_alert_log(entry.to_document())
        except Exception:
            logger.exception(
                "[ALERT_LOG] Failed to record %s/%s for %s",
                event.type.value,
                channel.value if channel else "-",
                event.subject_id,
            )

    def already_notified(self, event: DueEvent) -> bool:
        """True when a SENT entry exists for this event's (type, subject, day).

        A failing lookup counts as "not notified" so the sweep still delivers.
        """
        try:
            return self.store.has_sent_alert(
                event.type.value, event.subject_id, event.event_date.isoformat()
            )
        except Exception:
            logger.exception("[ALERT_LOG] Dedup lookup failed for %s", event.subject_id)
            return False
