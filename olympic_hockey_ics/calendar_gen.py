"""ICS calendar generation from calendar events."""

from __future__ import annotations

from icalendar import Calendar, Event

from olympic_hockey_ics import CalendarEvent, CalendarMetadata, EmptyScheduleError
from olympic_hockey_ics.config import TournamentConfig


def create_calendar(
    events: list[CalendarEvent],
    metadata: CalendarMetadata,
    config: TournamentConfig | None = None,
) -> Calendar:
    """Create an ICS calendar holding one VEVENT per game."""
    if not events:
        raise EmptyScheduleError("Refusing to build a calendar with no events")

    config = config or TournamentConfig()
    cal = Calendar()
    cal.add("prodid", f"-//Olympic Hockey ICS Feed//{config.calendar_name}//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", metadata.name)
    cal.add("x-wr-timezone", metadata.timezone)
    # Refresh interval hint for calendar clients (6 hours)
    cal.add("x-published-ttl", "PT6H")
    if metadata.source_url:
        cal.add("url", metadata.source_url)

    for event in events:
        cal.add_component(_create_event(event))

    return cal


def _create_event(event: CalendarEvent) -> Event:
    """Create a VEVENT from a materialized game."""
    vevent = Event()
    vevent.add("uid", event.uid)
    vevent.add("dtstamp", event.last_modified)
    vevent.add("created", event.created_at)
    vevent.add("last-modified", event.last_modified)
    vevent.add("dtstart", event.start_utc)
    vevent.add("dtend", event.end_utc)
    vevent.add("summary", event.summary)
    vevent.add("description", event.description)
    vevent.add("location", event.location)
    if event.url:
        vevent.add("url", event.url)
    vevent.add("status", event.status)
    # Games block time in the subscriber's calendar
    vevent.add("transp", event.transparency)
    vevent.add("categories", list(event.categories))
    return vevent


def emit(
    events: list[CalendarEvent],
    metadata: CalendarMetadata,
    config: TournamentConfig | None = None,
) -> str:
    """Serialize events to ICS text.

    Output is byte-identical for identical input apart from DTSTAMP,
    CREATED and LAST-MODIFIED.
    """
    return create_calendar(events, metadata, config).to_ical().decode("utf-8")
