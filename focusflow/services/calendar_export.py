# focusflow/services/calendar_export.py

from datetime import datetime, timedelta, timezone
from typing import Optional

from icalendar import Calendar, Event

from focusflow.core.models import ExportFormat

PRODID = "-//FocusFlow//Calendar Export//EN"
EVENT_SUMMARY = "Sample Calendar Event"
EVENT_DESCRIPTION = "This is a sample calendar event from FocusFlow"

FILENAMES = {
    ExportFormat.GOOGLE: "google-calendar.ics",
    ExportFormat.ICAL: "focusflow-calendar.ics",
}


def export_filename(export_format: ExportFormat) -> str:
    return FILENAMES[ExportFormat(export_format)]


def build_calendar(now: Optional[datetime] = None) -> bytes:
    """Single-event calendar: one hour starting this time tomorrow (UTC)"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = (now + timedelta(days=1)).replace(microsecond=0)

    calendar = Calendar()
    calendar.add("prodid", PRODID)
    calendar.add("version", "2.0")

    event = Event()
    event.add("uid", f"{start.strftime('%Y%m%dT%H%M%SZ')}@focusflow")
    event.add("dtstamp", now.replace(microsecond=0))
    event.add("dtstart", start)
    event.add("dtend", start + timedelta(hours=1))
    event.add("summary", EVENT_SUMMARY)
    event.add("description", EVENT_DESCRIPTION)
    calendar.add_component(event)

    return calendar.to_ical()
