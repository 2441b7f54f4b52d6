"""
Daily notification sweep.

collect -> dedup gate -> dispatch -> aggregate, run once per cron call.
Only one sweep runs per process at a time.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import List, Optional, Set, Tuple

from app.config import NotificationSettings
from app.models.alert import AlertStatus
from app.models.events import DueEvent
from app.models.sweep import AlertOutcome, SweepResult
from app.services.aggregator import aggregate
from app.services.alert_log import ALREADY_NOTIFIED, AlertLogGate
from app.services.collector import EventCollector
from app.services.dispatcher import ChannelDispatcher
from app.services.email_chain import EmailProviderChain
from app.services.sms import SmsProvider

logger = logging.getLogger("eldercare")

_sweep_lock = threading.Lock()


class SweepAlreadyRunning(RuntimeError):
    pass


def is_sweep_running() -> bool:
    return _sweep_lock.locked()


class DailySweep:
    def __init__(
        self,
        store,
        settings: Optional[NotificationSettings] = None,
        *,
        email: Optional[EmailProviderChain] = None,
        sms: Optional[SmsProvider] = None,
    ):
        self.settings = settings or NotificationSettings.from_env()
        self.gate = AlertLogGate(store)
        self.collector = EventCollector(
            store, missing_log_threshold_days=self.settings.missing_log_threshold_days
        )
        self.dispatcher = ChannelDispatcher(
            email or EmailProviderChain(self.settings),
            sms or SmsProvider(self.settings),
            self.gate,
        )

    def run(self, today: Optional[date] = None) -> SweepResult:
        if not _sweep_lock.acquire(blocking=False):
            raise SweepAlreadyRunning("Daily check already running")
        try:
            return self._run(today or date.today())
        finally:
            _sweep_lock.release()

    def _run(self, today: date) -> SweepResult:
        events = self.collector.collect(today)
        outcomes: List[Optional[AlertOutcome]] = [
            self._skip_if_notified(pair) for pair in self._dedup(events)
        ]
        pending = [(i, events[i]) for i, outcome in enumerate(outcomes) if outcome is None]

        workers = min(self.settings.max_workers, max(1, len(pending)))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                sent = list(pool.map(self.dispatcher.dispatch, [event for _, event in pending]))
        else:
            sent = [self.dispatcher.dispatch(event) for _, event in pending]
        for (index, _), outcome in zip(pending, sent):
            outcomes[index] = outcome

        result = aggregate(outcomes)
        logger.info(
            "[SWEEP] Processed=%d successful=%d failed=%d skipped=%d",
            result.processed,
            result.successful,
            result.failed,
            result.skipped,
        )
        return result

    @staticmethod
    def _dedup(events: List[DueEvent]) -> List[Tuple[DueEvent, bool]]:
        """Pair each event with whether it repeats an earlier one in this sweep."""
        seen: Set[Tuple[str, str, str]] = set()
        pairs = []
        for event in events:
            key = (event.type.value, event.subject_id, event.event_date.isoformat())
            pairs.append((event, key in seen))
            seen.add(key)
        return pairs

    def _skip_if_notified(self, pair: Tuple[DueEvent, bool]) -> Optional[AlertOutcome]:
        event, repeated = pair
        if not repeated and not (self.settings.dedup_enabled and self.gate.already_notified(event)):
            return None
        self.gate.record(event, None, AlertStatus.SKIPPED, ALREADY_NOTIFIED)
        return AlertOutcome(
            type=event.type,
            subjectId=event.subject_id,
            elderlyName=event.subject_name,
            message=event.message,
            skipped=True,
        )


def run_daily_sweep(
    store,
    settings: Optional[NotificationSettings] = None,
    *,
    today: Optional[date] = None,
) -> SweepResult:
    return DailySweep(store, settings).run(today)
