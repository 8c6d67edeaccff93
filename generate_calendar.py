#!/usr/bin/env python3
"""
Olympic Hockey Calendar Generator

Scrapes the Milano Cortina 2026 men's hockey schedule for the tracked team
and writes a subscribable ICS calendar. Falls back to the last good
calendar, then to placeholder games, when the schedule can't be scraped.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from olympic_hockey_ics import GameRecord, ScheduleError
from olympic_hockey_ics.cache import load_cached_calendar, save_to_cache, validate_ics
from olympic_hockey_ics.config import TournamentConfig, load_config
from olympic_hockey_ics.fetch import fetch_schedule
from olympic_hockey_ics.pipeline import (
    games_from_feed,
    games_from_html,
    placeholder_games,
    render_calendar,
)


def scrape_games(config: TournamentConfig) -> tuple[list[GameRecord], str]:
    """Fetch the schedule and return (games, source url)."""
    result = fetch_schedule(config.source_urls)
    print(f"  Fetched {len(result.body)} bytes from {result.url}")
    if result.is_json:
        return games_from_feed(result.body, config), result.url
    return games_from_html(result.body, result.url, config), result.url


def print_games(games: list[GameRecord]) -> None:
    for i, game in enumerate(games, 1):
        print(f"    {i}. {game.round}: {game.date_str} {game.time_str} vs {game.opponent}")


def write_calendar(path: Path, ics_bytes: bytes) -> None:
    if not validate_ics(ics_bytes):
        raise ScheduleError("Generated ICS failed validation")
    path.write_bytes(ics_bytes)
    print(f"  Saved {path} ({len(ics_bytes)} bytes, {ics_bytes.count(b'BEGIN:VEVENT')} events)")


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config()
    output_path = Path(config.output_file)
    cache_dir = Path("cache")

    print(f"\nFetching {config.team_name} schedule ({config.tournament_name})...")
    try:
        games, source_url = scrape_games(config)
        print(f"  Found {len(games)} {config.team_name} games")
        print_games(games)

        ics_bytes = render_calendar(games, source_url, config).encode("utf-8")
        write_calendar(output_path, ics_bytes)

        # Cache the successful result
        save_to_cache(cache_dir, config.cache_key, ics_bytes)
        print("Done")
        return 0

    except (ScheduleError, ValueError) as e:
        print(f"  ERROR: {e}")

    cached = load_cached_calendar(cache_dir, config.cache_key)
    if cached:
        print("  Using cached calendar")
        output_path.write_bytes(cached)
        return 0

    print("  WARNING: no games scraped and no cache, using placeholder games")
    games = placeholder_games(config)
    print_games(games)
    try:
        ics_bytes = render_calendar(games, next(iter(config.source_urls), ""), config).encode("utf-8")
        write_calendar(output_path, ics_bytes)
    except ScheduleError as e:
        print(f"  ERROR: could not produce a calendar: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
