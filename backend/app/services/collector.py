"""Event collector: finds today's birthdays, anniversaries, reminders and warnings."""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Set

from app.models.events import Contact, DueEvent, DueEventType
from app.services.dates import as_date, calculate_age, same_month_day, years_elapsed
from app.services.templates import render_event

logger = logging.getLogger("eldercare")

MAX_REMIND_DAYS = 30


def _date_field(doc: Dict[str, Any], field: str) -> Optional[date]:
    """Read a date field; a value that cannot be parsed is logged and treated as unset."""
    raw = doc.get(field)
    value = as_date(raw)
    if value is None and raw not in (None, ""):
        logger.warning("[SWEEP] Ignoring unreadable %s on %s: %r", field, doc.get("_id"), raw)
    return value


def _int_list(values: Any) -> Optional[Set[int]]:
    try:
        return {int(v) for v in values}
    except (TypeError, ValueError):
        return None


def profile_name(profile: Dict[str, Any]) -> str:
    first = (profile.get("firstName") or "").strip()
    last = (profile.get("lastName") or "").strip()
    return f"{first} {last}".strip() or str(profile.get("_id", ""))


def profile_contacts(
    profile: Dict[str, Any],
    *,
    coordinator: bool = True,
    guardian: bool = True,
) -> List[Contact]:
    """Build the reachable contacts (key coordinator, legal guardian) of a profile."""
    prefixes = []
    if coordinator:
        prefixes.append("keyCoordinator")
    if guardian:
        prefixes.append("legalGuardian")

    contacts: List[Contact] = []
    for prefix in prefixes:
        contact = Contact(
            name=(profile.get(f"{prefix}Name") or "").strip(),
            relation=profile.get(f"{prefix}Relation") or None,
            email=(profile.get(f"{prefix}Email") or "").strip() or None,
            phone=(profile.get(f"{prefix}Phone") or "").strip() or None,
        )
        if contact.reachable:
            contacts.append(contact)
    return contacts


class EventCollector:
    """Builds the list of due events for one calendar day.

    Store errors propagate: a sweep with a failing store produces no events.
    """

    def __init__(self, store, *, missing_log_threshold_days: int = 3):
        self.store = store
        self.missing_log_threshold_days = missing_log_threshold_days

    def collect(self, today: date) -> List[DueEvent]:
        profiles = self.store.active_profiles()
        by_id = {str(p["_id"]): p for p in profiles}

        events: List[DueEvent] = []
        events.extend(self.birthdays(profiles, today))
        events.extend(self.anniversaries(profiles, today))
        events.extend(self.appointment_reminders(by_id, today))
        events.extend(self.activity_reminders(by_id, today))
        events.extend(self.missing_log_warnings(profiles, today))

        for event in events:
            render_event(event)
        logger.info("[SWEEP] Collected %d due events for %s", len(events), today.isoformat())
        return events

    def birthdays(self, profiles: List[Dict[str, Any]], today: date) -> List[DueEvent]:
        events = []
        for profile in profiles:
            dob = _date_field(profile, "dateOfBirth")
            if dob is None or not same_month_day(dob, today):
                continue
            events.append(
                DueEvent(
                    type=DueEventType.BIRTHDAY,
                    subject_id=str(profile["_id"]),
                    subject_name=profile_name(profile),
                    event_date=today,
                    value=calculate_age(dob, today),
                    contacts=profile_contacts(profile),
                )
            )
        return events

    def anniversaries(self, profiles: List[Dict[str, Any]], today: date) -> List[DueEvent]:
        events = []
        for profile in profiles:
            registered = _date_field(profile, "registrationDate")
            if registered is None or not same_month_day(registered, today):
                continue
            years = years_elapsed(registered, today)
            if years < 1:
                continue
            events.append(
                DueEvent(
                    type=DueEventType.ANNIVERSARY,
                    subject_id=str(profile["_id"]),
                    subject_name=profile_name(profile),
                    event_date=today,
                    value=years,
                    contacts=profile_contacts(profile),
                )
            )
        return events

    def appointment_reminders(
        self, profiles_by_id: Dict[str, Dict[str, Any]], today: date
    ) -> List[DueEvent]:
        events = []
        for appt in self.store.pending_appointments(today, MAX_REMIND_DAYS):
            if appt.get("isCompleted"):
                continue
            appt_date = _date_field(appt, "date")
            if appt_date is None:
                continue
            remind_days = appt.get("remindDaysBefore")
            try:
                remind_days = 1 if remind_days is None else int(remind_days)
            except (TypeError, ValueError):
                logger.warning(
                    "[SWEEP] Skipping appointment %s: bad remindDaysBefore %r",
                    appt.get("_id"),
                    remind_days,
                )
                continue
            if today + timedelta(days=remind_days) != appt_date:
                continue

            profile = profiles_by_id.get(str(appt.get("elderlyId")))
            if profile is None:
                logger.info(
                    "[SWEEP] Skipping appointment %s: profile missing or inactive", appt.get("_id")
                )
                continue

            events.append(
                DueEvent(
                    type=DueEventType.APPOINTMENT_REMINDER,
                    subject_id=str(appt["_id"]),
                    subject_name=profile_name(profile),
                    event_date=today,
                    value=remind_days,
                    details={
                        "title": appt.get("title"),
                        "date": appt_date,
                        "time": appt.get("time"),
                        "location": appt.get("location"),
                        "doctorName": appt.get("doctorName"),
                    },
                    contacts=profile_contacts(
                        profile,
                        coordinator=appt.get("notifyCoordinator", True) is not False,
                        guardian=appt.get("notifyGuardian", True) is not False,
                    ),
                )
            )
        return events

    def activity_reminders(
        self, profiles_by_id: Dict[str, Dict[str, Any]], today: date
    ) -> List[DueEvent]:
        weekday = today.isoweekday()
        events = []
        for activity in self.store.active_activities():
            days = _int_list(activity.get("daysOfWeek") or [])
            if days is None:
                logger.warning(
                    "[SWEEP] Skipping activity %s: bad daysOfWeek %r",
                    activity.get("_id"),
                    activity.get("daysOfWeek"),
                )
                continue
            if days and weekday not in days:
                continue
            profile = profiles_by_id.get(str(activity.get("elderlyId")))
            if profile is None:
                continue
            events.append(
                DueEvent(
                    type=DueEventType.ACTIVITY_REMINDER,
                    subject_id=str(activity["_id"]),
                    subject_name=profile_name(profile),
                    event_date=today,
                    details={"title": activity.get("title"), "time": activity.get("time")},
                    contacts=profile_contacts(profile),
                )
            )
        return events

    def missing_log_warnings(self, profiles: List[Dict[str, Any]], today: date) -> List[DueEvent]:
        latest = self.store.latest_log_dates([p["_id"] for p in profiles])
        latest_by_id = {str(key): value for key, value in latest.items()}

        events = []
        for profile in profiles:
            days = self._days_without_log(profile, latest_by_id.get(str(profile["_id"])), today)
            if days is None or days < self.missing_log_threshold_days:
                continue
            events.append(
                DueEvent(
                    type=DueEventType.MISSING_LOG_WARNING,
                    subject_id=str(profile["_id"]),
                    subject_name=profile_name(profile),
                    event_date=today,
                    value=days,
                    contacts=profile_contacts(profile),
                )
            )
        return events

    @staticmethod
    def _days_without_log(profile: Dict[str, Any], last_log: Any, today: date) -> Optional[int]:
        # Never logged: measure from registration.
        reference = as_date(last_log) or _date_field(profile, "registrationDate")
        if reference is None:
            return None
        return max(0, (today - reference).days)
