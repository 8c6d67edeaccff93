"""IIHF JSON game feed parser."""

from __future__ import annotations

import json
import logging
import re
from datetime import timezone

from olympic_hockey_ics import GameCandidate, teams
from olympic_hockey_ics.config import TournamentConfig
from olympic_hockey_ics.extractors import parse_timestamp, round_from_phase

LOGGER = logging.getLogger(__name__)

_LOCAL_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})")


def _team_code(team: object) -> str:
    if isinstance(team, dict):
        return str(team.get("TeamCode") or "").strip().upper()
    return ""


def parse_feed(payload: object, config: TournamentConfig | None = None) -> list[GameCandidate]:
    """Read tracked-team games from the feed.

    ``payload`` is the decoded JSON array or its raw text. TBD games,
    games that are not upcoming and games against a TBD opponent are
    skipped; entries with unusable timestamps are logged and skipped.
    """
    config = config or TournamentConfig()
    if isinstance(payload, (str, bytes)):
        payload = json.loads(payload)
    if not isinstance(payload, list):
        LOGGER.warning("Expected a JSON array of games, got %s", type(payload).__name__)
        return []

    LOGGER.info("Parsing %d games from feed", len(payload))
    tracked = config.team_code
    games: list[GameCandidate] = []

    for game in payload:
        if not isinstance(game, dict):
            continue
        if game.get("GameIsTBD") or str(game.get("Status") or "").upper() != "UPCOMING":
            continue

        home = _team_code(game.get("HomeTeam"))
        guest = _team_code(game.get("GuestTeam"))
        if tracked not in (home, guest):
            continue

        opponent_code = guest if home == tracked else home
        if not opponent_code or opponent_code == "TBD":
            continue

        number = game.get("GameNumber")
        local = _LOCAL_RE.match(str(game.get("GameDateTime") or ""))
        if not local:
            LOGGER.warning("Invalid local date for game %s: %r", number, game.get("GameDateTime"))
            continue
        year, month, day, hour, minute = local.groups()

        start = parse_timestamp(str(game.get("GameDateTimeUTC") or ""))
        if start is None:
            LOGGER.warning("Invalid UTC date for game %s: %r", number, game.get("GameDateTimeUTC"))
            continue
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)

        round_name = round_from_phase(game.get("PhaseId")).value
        venue = str(game.get("Venue") or "").strip() or config.default_venue
        games.append(GameCandidate(
            date_str=f"{day}/{month}/{year}",
            time_str=f"{hour}:{minute}",
            opponent=teams.expand(opponent_code),
            venue=venue,
            round=round_name,
            raw_text=f"{home} vs {guest} - {round_name}",
            start_utc=start.astimezone(timezone.utc),
        ))
        LOGGER.debug("Game %s: %s vs %s (%s)", number, home, guest, round_name)

    LOGGER.info("Found %d %s games in feed", len(games), tracked)
    return games
