"""Turn game records into timestamped calendar events."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Iterable

import pytz

from olympic_hockey_ics import (
    CalendarEvent,
    EmptyScheduleError,
    GameRecord,
    InvalidGameTimeError,
    teams,
)
from olympic_hockey_ics.config import TournamentConfig

LOGGER = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*(?:([ap])\.?m\.?)?\s*$", re.IGNORECASE)


def parse_date(date_str: str) -> tuple[int, int, int]:
    """Split a ``DD/MM/YYYY`` date into (day, month, year).

    Day-first always: 06/02/2026 is 6 February. ``YYYY/MM/DD`` is also
    accepted since its leading year leaves no ambiguity.
    """
    parts = re.split(r"[/-]", date_str.strip())
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise InvalidGameTimeError(f"Invalid date format: {date_str!r}")

    if len(parts[0]) == 4:
        year, month, day = (int(p) for p in parts)
    else:
        day, month, year = (int(p) for p in parts)

    if not 1 <= day <= 31:
        raise InvalidGameTimeError(f"Day out of range in {date_str!r}")
    if not 1 <= month <= 12:
        raise InvalidGameTimeError(f"Month out of range in {date_str!r}")
    try:
        datetime(year, month, day)
    except ValueError as exc:
        raise InvalidGameTimeError(f"Invalid date {date_str!r}: {exc}") from exc
    return day, month, year


def parse_time(time_str: str) -> tuple[int, int]:
    """Split ``HH:MM`` or ``H:MM am/pm`` into 24-hour (hour, minute)."""
    m = _TIME_RE.match(time_str)
    if not m:
        raise InvalidGameTimeError(f"Invalid time format: {time_str!r}")

    hour, minute = int(m.group(1)), int(m.group(2))
    period = (m.group(3) or "").lower()
    if period:
        if not 1 <= hour <= 12:
            raise InvalidGameTimeError(f"Hour out of range in {time_str!r}")
        if period == "p" and hour != 12:
            hour += 12
        elif period == "a" and hour == 12:
            hour = 0

    if not 0 <= hour <= 23:
        raise InvalidGameTimeError(f"Hour out of range in {time_str!r}")
    if not 0 <= minute <= 59:
        raise InvalidGameTimeError(f"Minute out of range in {time_str!r}")
    return hour, minute


def to_utc(date_str: str, time_str: str, tz_name: str = "Europe/Rome") -> datetime:
    """Read a local wall-clock date and time in ``tz_name`` as a UTC instant.

    Milano Cortina 2026 falls entirely in Italian winter time, so for the
    default zone this amounts to subtracting one hour.
    """
    day, month, year = parse_date(date_str)
    hour, minute = parse_time(time_str)
    local = pytz.timezone(tz_name).localize(datetime(year, month, day, hour, minute))
    return local.astimezone(timezone.utc)


def materialize(
    record: GameRecord,
    source_url: str,
    config: TournamentConfig | None = None,
    now: datetime | None = None,
) -> CalendarEvent:
    """Build the calendar event for one game.

    Raises :class:`InvalidGameTimeError` if the record's date or time is
    unusable.
    """
    config = config or TournamentConfig()
    now = now or datetime.now(timezone.utc)

    if record.start_utc is not None:
        start = record.start_utc.astimezone(timezone.utc)
    else:
        start = to_utc(record.date_str, record.time_str, config.timezone)
    end = start + config.game_duration

    opponent = teams.normalize(record.opponent)
    label = config.competition
    description = (
        f"{label} - {record.round}\n\n"
        f"Opponent: {opponent}\n"
        f"Venue: {record.venue}\n\n"
        f"Source: {source_url}"
    )

    return CalendarEvent(
        uid=f"{record.id}@{config.uid_domain}",
        start_utc=start,
        end_utc=end,
        summary=f"{config.team_name} vs {opponent} ({label})",
        description=description,
        location=f"{record.venue}, {config.tournament_name}",
        url=source_url,
        created_at=now,
        last_modified=now,
        categories=tuple(config.categories),
    )


def materialize_all(
    records: Iterable[GameRecord],
    source_url: str,
    config: TournamentConfig | None = None,
) -> list[CalendarEvent]:
    """Materialize every usable record, skipping the ones that fail.

    Raises :class:`EmptyScheduleError` if no record could be materialized.
    """
    config = config or TournamentConfig()
    now = datetime.now(timezone.utc)
    events = []
    for record in records:
        try:
            events.append(materialize(record, source_url, config, now))
        except InvalidGameTimeError as exc:
            LOGGER.warning("Skipping game %s vs %s: %s", record.date_str, record.opponent, exc)

    if not events:
        raise EmptyScheduleError("No game could be turned into a calendar event")
    return events
