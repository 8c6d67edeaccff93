"""Tests for the JSON game feed parser."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from olympic_hockey_ics import GameCandidate
from olympic_hockey_ics.api_feed import parse_feed
from olympic_hockey_ics.config import TournamentConfig

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def _entry(**overrides: object) -> dict:
    entry = {
        "GameNumber": 99,
        "HomeTeam": {"TeamCode": "CAN"},
        "GuestTeam": {"TeamCode": "LAT"},
        "GameDateTime": "2026-02-14T16:40:00",
        "GameDateTimeUTC": "2026-02-14T15:40:00Z",
        "PhaseId": "PreliminaryPhase",
        "Status": "UPCOMING",
        "GameIsTBD": False,
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def feed_text() -> str:
    return (FIXTURE_DIR / "iihf_games.json").read_text(encoding="utf-8")


@pytest.fixture
def games(feed_text: str) -> list[GameCandidate]:
    return parse_feed(feed_text)


class TestParseFeed:
    def test_only_upcoming_tracked_games(self, games: list[GameCandidate]) -> None:
        assert [g.opponent for g in games] == ["Switzerland", "Czechia"]

    def test_tracked_team_as_guest(self, games: list[GameCandidate]) -> None:
        game = games[1]
        assert game.opponent == "Czechia"
        assert game.round == "Quarterfinal"
        assert game.start_utc == datetime(2026, 2, 12, 15, 40, tzinfo=timezone.utc)
        assert game.raw_text == "CZE vs CAN - Quarterfinal"

    def test_local_date_and_time(self, games: list[GameCandidate]) -> None:
        assert (games[1].date_str, games[1].time_str) == ("12/02/2026", "16:40")

    def test_venue(self, games: list[GameCandidate]) -> None:
        assert games[0].venue == "Milano Santa Giulia"
        assert games[1].venue == "Milano Cortina 2026"

    def test_tbd_game_excluded(self) -> None:
        assert parse_feed([_entry(GameIsTBD=True)]) == []

    def test_finished_game_excluded(self) -> None:
        assert parse_feed([_entry(Status="FINAL")]) == []

    def test_status_case_insensitive(self) -> None:
        assert len(parse_feed([_entry(Status="upcoming")])) == 1

    def test_tbd_opponent_excluded(self) -> None:
        assert parse_feed([_entry(GuestTeam={"TeamCode": "TBD"})]) == []
        assert parse_feed([_entry(GuestTeam=None)]) == []

    def test_other_teams_excluded(self) -> None:
        assert parse_feed([_entry(HomeTeam={"TeamCode": "SWE"})]) == []

    def test_bad_timestamp_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        games = parse_feed([_entry(GameDateTimeUTC="TBD"), _entry(GameNumber=100)])
        assert len(games) == 1
        assert "Invalid UTC date" in caplog.text

    def test_non_iso_timestamp_skipped(self) -> None:
        assert parse_feed([_entry(GameDateTimeUTC="Game 7")]) == []
        assert parse_feed([_entry(GameDateTimeUTC="Feb 14, 3:40 PM")]) == []

    def test_bad_local_date_skipped(self) -> None:
        assert parse_feed([_entry(GameDateTime="")]) == []

    def test_naive_utc_timestamp(self) -> None:
        games = parse_feed([_entry(GameDateTimeUTC="2026-02-14T15:40:00")])
        assert games[0].start_utc == datetime(2026, 2, 14, 15, 40, tzinfo=timezone.utc)

    def test_accepts_decoded_json(self, feed_text: str) -> None:
        assert len(parse_feed(json.loads(feed_text))) == 2

    def test_non_list_payload(self) -> None:
        assert parse_feed({"games": []}) == []

    def test_other_tracked_team(self) -> None:
        config = TournamentConfig(team_code="LAT", team_name="Latvia")
        games = parse_feed([_entry()], config)
        assert games[0].opponent == "Canada"
