"""Olympic Hockey ICS: shared data models and errors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

DEFAULT_VENUE = "Milano Cortina 2026"

PRELIMINARY = "Preliminary"
QUALIFYING = "Qualifying"
QUARTERFINAL = "Quarterfinal"
SEMIFINAL = "Semifinal"
FINAL = "Final"

# Priority order used when several round keywords appear in one span
ROUNDS = (QUALIFYING, QUARTERFINAL, SEMIFINAL, FINAL, PRELIMINARY)


class ScheduleError(Exception):
    """Base class for schedule pipeline failures."""


class EmptyScheduleError(ScheduleError):
    """No game survived extraction or materialization.

    Raised instead of producing an empty calendar so callers can fall back
    to another source or to placeholder data.
    """


class InvalidGameTimeError(ScheduleError, ValueError):
    """A game's date or time string could not be turned into an instant."""


class FetchError(ScheduleError):
    """Every source URL and fetch method failed."""


@dataclass
class GameCandidate:
    """A game pulled out of a schedule document, possibly a duplicate."""

    date_str: str
    time_str: str
    opponent: str
    venue: str = DEFAULT_VENUE
    round: str = PRELIMINARY
    raw_text: str = ""
    # Exact kickoff instant when the source publishes one (JSON feed)
    start_utc: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.date_str and self.time_str and self.opponent)


@dataclass
class GameRecord(GameCandidate):
    """A deduplicated game with a stable identifier."""

    id: str = ""


@dataclass
class CalendarEvent:
    """A game ready to be written as a VEVENT."""

    uid: str
    start_utc: datetime
    end_utc: datetime
    summary: str
    description: str
    location: str
    url: str
    created_at: datetime
    last_modified: datetime
    status: str = "CONFIRMED"
    transparency: str = "OPAQUE"
    categories: tuple[str, ...] = ("Hockey", "Olympics")


@dataclass
class CalendarMetadata:
    """Calendar-level properties of the emitted document."""

    name: str
    source_url: str
    timezone: str = "Europe/Rome"
