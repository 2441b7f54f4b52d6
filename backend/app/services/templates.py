"""Rendering of subject line, plain text and HTML for each due-event type."""

from html import escape
from typing import Callable, Dict, Tuple

from app.models.events import DueEvent, DueEventType
from app.services.dates import as_date

BRAND = "ElderCare"

_FOOTER = (
    '<hr style="border: none; border-top: 1px solid #e5e7eb; margin: 20px 0;">'
    '<p style="font-size: 12px; color: #9ca3af;">'
    f"This message was sent automatically by {BRAND}."
    "</p>"
)

Rendered = Tuple[str, str, str]


def wrap_html(heading: str, color: str, body_html: str, background: str = "#f9fafb") -> str:
    return (
        f'<div style="font-family: sans-serif; padding: 20px; background: {background}; '
        f'border-radius: 8px;">'
        f'<h2 style="color: {color};">{escape(heading)}</h2>'
        f"{body_html}"
        f"{_FOOTER}"
        "</div>"
    )


def _birthday(event: DueEvent) -> Rendered:
    name = event.subject_name
    title = f"Birthday: {name}"
    text = f"{BRAND}: Today is {name}'s birthday ({event.value} years). Please send them your best wishes."
    html = wrap_html(
        "Birthday reminder",
        "#4f46e5",
        f"<p>Today is <strong>{escape(name)}</strong>'s birthday "
        f"(<strong>{event.value}</strong> years).</p>"
        "<p>Please send them your best wishes.</p>",
    )
    return title, text, html


def _anniversary(event: DueEvent) -> Rendered:
    name = event.subject_name
    years = event.value
    unit = "year" if years == 1 else "years"
    title = f"{years}-year anniversary: {name}"
    text = f"{BRAND}: Today marks {years} {unit} since {name} joined our care. Thank you for your trust."
    html = wrap_html(
        "Care anniversary",
        "#059669",
        f"<p>Today marks <strong>{years} {unit}</strong> since "
        f"<strong>{escape(name)}</strong> joined our care.</p>"
        "<p>Thank you for your trust.</p>",
    )
    return title, text, html


def _appointment(event: DueEvent) -> Rendered:
    name = event.subject_name
    details = event.details
    appt_title = str(details.get("title") or "Appointment")
    appt_date = as_date(details.get("date"))
    date_str = appt_date.strftime("%A %d %B %Y") if appt_date else ""
    time_str = details.get("time")
    location = details.get("location")

    when = date_str + (f" at {time_str}" if time_str else "")
    where = f" ({location})" if location else ""
    title = f"Appointment reminder: {name} - {appt_title}"
    text = f'{BRAND}: {name} has "{appt_title}" on {when}{where}. Please get ready in time.'
    lines = [
        f"<p><strong>{escape(name)}</strong> has <strong>\"{escape(appt_title)}\"</strong></p>",
        f"<p>Date: {escape(when)}</p>",
    ]
    if location:
        lines.append(f"<p>Location: {escape(str(location))}</p>")
    if details.get("doctorName"):
        lines.append(f"<p>Doctor: {escape(str(details['doctorName']))}</p>")
    lines.append("<p>Please prepare documents in advance.</p>")
    html = wrap_html("Appointment reminder", "#dc2626", "".join(lines))
    return title, text, html


def _activity(event: DueEvent) -> Rendered:
    name = event.subject_name
    activity = str(event.details.get("title") or "Activity")
    time_str = event.details.get("time")
    title = f"Today's activity: {name} - {activity}"
    text = f'{BRAND}: {name} has "{activity}" today' + (f" at {time_str}." if time_str else ".")
    body = f"<p><strong>{escape(name)}</strong> has <strong>\"{escape(activity)}\"</strong> today.</p>"
    if time_str:
        body += f"<p>Time: {escape(str(time_str))}</p>"
    html = wrap_html("Daily activity", "#2563eb", body)
    return title, text, html


def _missing_log(event: DueEvent) -> Rendered:
    name = event.subject_name
    days = event.value
    title = f"No daily log: {name} ({days}+ days)"
    text = f"{BRAND}: {name} has had no daily log for {days} days. Please check and record today's health log."
    html = wrap_html(
        "Missing daily log",
        "#dc2626",
        f"<p><strong>{escape(name)}</strong> has had no daily log for "
        f"<strong>{days} days</strong>.</p>"
        "<p>Please check and record today's health log.</p>",
        background="#fef2f2",
    )
    return title, text, html


_RENDERERS: Dict[DueEventType, Callable[[DueEvent], Rendered]] = {
    DueEventType.BIRTHDAY: _birthday,
    DueEventType.ANNIVERSARY: _anniversary,
    DueEventType.APPOINTMENT_REMINDER: _appointment,
    DueEventType.ACTIVITY_REMINDER: _activity,
    DueEventType.MISSING_LOG_WARNING: _missing_log,
}


def render_event(event: DueEvent) -> DueEvent:
    """Fill title, message and html on the event in place and return it."""
    title, text, html = _RENDERERS[event.type](event)
    event.title = title
    event.message = text
    event.html = html
    return event
