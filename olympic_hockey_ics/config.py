"""Tournament configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping

from olympic_hockey_ics import DEFAULT_VENUE

DEFAULT_SOURCE_URLS = (
    "https://www.hockeycanada.ca/en-ca/team-canada/men/olympics/2026/stats/schedule",
    "https://www.iihf.com/en/events/2026/olympic-m/schedule",
)


@dataclass
class TournamentConfig:
    """Everything that pins a run to one team in one tournament."""

    team_code: str = "CAN"
    team_name: str = "Canada"
    team_aliases: tuple[str, ...] = ("Team Canada",)
    year: int = 2026
    tournament_name: str = "Milano Cortina 2026"
    default_venue: str = DEFAULT_VENUE
    competition: str = "Men's Olympic Hockey"
    timezone: str = "Europe/Rome"
    id_prefix: str = "mc2026-can-men-"
    uid_domain: str = "olympic-hockey-ics.github.io"
    calendar_name: str = "Canada Men's Olympic Hockey (Milano Cortina 2026)"
    categories: tuple[str, ...] = ("Hockey", "Olympics")
    game_duration: timedelta = timedelta(hours=2, minutes=30)
    source_urls: tuple[str, ...] = DEFAULT_SOURCE_URLS
    output_file: str = "canada-mens-olympic-hockey-2026.ics"
    cache_key: str = "canada-men-2026"

    @property
    def team_names(self) -> tuple[str, ...]:
        """Every spelling that identifies the tracked team in prose."""
        return (self.team_name, *self.team_aliases)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "TournamentConfig":
        kwargs: dict[str, object] = {}
        for name in (
            "team_code",
            "team_name",
            "tournament_name",
            "default_venue",
            "competition",
            "timezone",
            "id_prefix",
            "uid_domain",
            "calendar_name",
            "output_file",
            "cache_key",
        ):
            value = mapping.get(name)
            if isinstance(value, str) and value.strip():
                kwargs[name] = value.strip()

        for name in ("team_aliases", "categories", "source_urls"):
            value = mapping.get(name)
            if isinstance(value, (list, tuple)):
                kwargs[name] = tuple(str(v).strip() for v in value if str(v).strip())

        year = mapping.get("year")
        if isinstance(year, int):
            kwargs["year"] = year

        minutes = mapping.get("game_duration_minutes")
        if isinstance(minutes, int) and minutes > 0:
            kwargs["game_duration"] = timedelta(minutes=minutes)

        if "team_code" in kwargs:
            kwargs["team_code"] = str(kwargs["team_code"]).upper()

        return cls(**kwargs)


def load_config(path: str | Path = "tournament.json") -> TournamentConfig:
    """Load the tournament config, honouring a SOURCE_URL override.

    A missing file yields the built-in defaults.
    """
    path = Path(path)
    if path.exists():
        with open(path, encoding="utf-8") as f:
            config = TournamentConfig.from_mapping(json.load(f))
    else:
        config = TournamentConfig()

    override = os.environ.get("SOURCE_URL", "").strip()
    if override:
        config.source_urls = (override,)
    return config
