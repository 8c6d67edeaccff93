"""Duplicate removal and stable game identifiers."""

from __future__ import annotations

import hashlib
import logging
from typing import Iterable

from olympic_hockey_ics import GameCandidate, GameRecord

LOGGER = logging.getLogger(__name__)

ID_PREFIX = "mc2026-can-men-"


def game_key(game: GameCandidate) -> str:
    """Lookup key two sightings of the same game share."""
    return f"{game.date_str}|{game.time_str}|{game.opponent}".lower()


def game_id(
    date_str: str,
    time_str: str,
    opponent: str,
    venue: str,
    round_name: str,
    prefix: str = ID_PREFIX,
) -> str:
    """Content-derived id, identical across runs for the same game."""
    uid_string = f"{date_str}-{time_str}-{opponent}-{venue}-{round_name}"
    digest = hashlib.md5(uid_string.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}{digest}"


def to_record(game: GameCandidate, prefix: str = ID_PREFIX) -> GameRecord:
    return GameRecord(
        date_str=game.date_str,
        time_str=game.time_str,
        opponent=game.opponent,
        venue=game.venue,
        round=game.round,
        raw_text=game.raw_text,
        start_utc=game.start_utc,
        id=game_id(game.date_str, game.time_str, game.opponent, game.venue, game.round, prefix),
    )


def dedupe(candidates: Iterable[GameCandidate], prefix: str = ID_PREFIX) -> list[GameRecord]:
    """Collapse candidates to one record per date, time and opponent.

    The first sighting in scan order wins; incomplete candidates are
    dropped. Running the result through again changes nothing.
    """
    records: list[GameRecord] = []
    seen: set[str] = set()

    for game in candidates:
        if not game.is_complete:
            LOGGER.debug("Dropping incomplete candidate: %r", game.raw_text)
            continue
        key = game_key(game)
        if key in seen:
            continue
        seen.add(key)
        records.append(to_record(game, prefix))

    return records
