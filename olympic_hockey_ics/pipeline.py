"""End-to-end schedule -> calendar pipeline."""

from __future__ import annotations

import logging

from olympic_hockey_ics import (
    CalendarMetadata,
    EmptyScheduleError,
    GameCandidate,
    GameRecord,
)
from olympic_hockey_ics.api_feed import parse_feed
from olympic_hockey_ics.calendar_gen import emit
from olympic_hockey_ics.config import TournamentConfig
from olympic_hockey_ics.dedupe import dedupe
from olympic_hockey_ics.materialize import materialize_all
from olympic_hockey_ics.scanner import scan_html

LOGGER = logging.getLogger(__name__)


def games_from_html(
    html: str,
    source_url: str = "",
    config: TournamentConfig | None = None,
    source_kind: str | None = None,
) -> list[GameRecord]:
    """Scan an HTML schedule page and return deduplicated games.

    Raises :class:`EmptyScheduleError` when nothing was found.
    """
    config = config or TournamentConfig()
    candidates = scan_html(html, config, source_kind=source_kind, source_url=source_url)
    records = dedupe(candidates, config.id_prefix)
    LOGGER.info("Found %d unique %s games", len(records), config.team_name)
    if not records:
        raise EmptyScheduleError(f"No {config.team_name} games found on {source_url or 'page'}")
    return records


def games_from_feed(payload: object, config: TournamentConfig | None = None) -> list[GameRecord]:
    """Read and deduplicate games from the JSON feed.

    Raises :class:`EmptyScheduleError` when the feed has no usable game.
    """
    config = config or TournamentConfig()
    records = dedupe(parse_feed(payload, config), config.id_prefix)
    if not records:
        raise EmptyScheduleError(f"No upcoming {config.team_name} games in feed")
    return records


def render_calendar(
    records: list[GameRecord],
    source_url: str,
    config: TournamentConfig | None = None,
) -> str:
    """Materialize and serialize games into ICS text."""
    config = config or TournamentConfig()
    events = materialize_all(records, source_url, config)
    metadata = CalendarMetadata(
        name=config.calendar_name,
        source_url=source_url,
        timezone=config.timezone,
    )
    return emit(events, metadata, config)


def placeholder_games(config: TournamentConfig | None = None) -> list[GameRecord]:
    """Opponent-TBD preliminary games used when no real schedule is available.

    Dates are 6, 8 and 10 February at 20:00 local.
    """
    config = config or TournamentConfig()
    candidates = [
        GameCandidate(
            date_str=f"{day:02d}/02/{config.year}",
            time_str="20:00",
            opponent="TBD",
            venue=config.default_venue,
            raw_text=f"{config.team_name} vs TBD - Preliminary Round",
        )
        for day in (6, 8, 10)
    ]
    return dedupe(candidates, config.id_prefix)
