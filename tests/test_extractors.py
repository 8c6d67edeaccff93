"""Tests for team lookups and field extractors."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from olympic_hockey_ics import FINAL, PRELIMINARY, QUALIFYING, QUARTERFINAL, SEMIFINAL, teams
from olympic_hockey_ics.extractors import (
    extract_date,
    extract_opponent_code,
    extract_opponent_name,
    extract_round,
    extract_time,
    extract_times,
    extract_venue,
    looks_like_schedule,
    parse_timestamp,
    round_from_phase,
)

TRACKED_NAMES = ("Canada", "Team Canada")


# --- Team lookup tests ---


class TestTeams:
    def test_expand_known_code(self) -> None:
        assert teams.expand("CZE") == "Czechia"
        assert teams.expand("swe") == "Sweden"

    def test_expand_unknown_code_unchanged(self) -> None:
        assert teams.expand("XYZ") == "XYZ"
        assert teams.expand("TBD") == "TBD"

    def test_normalize_code(self) -> None:
        assert teams.normalize("USA") == "United States"
        assert teams.normalize("RUS") == "ROC"
        assert teams.normalize("cze") == "Czechia"
        assert teams.normalize("Swe") == "Sweden"

    def test_normalize_alias(self) -> None:
        assert teams.normalize("Czech Republic") == "Czechia"
        assert teams.normalize("korea") == "South Korea"

    def test_normalize_canonical_case(self) -> None:
        assert teams.normalize("sweden") == "Sweden"

    def test_normalize_unknown_unchanged(self) -> None:
        assert teams.normalize("Narnia") == "Narnia"

    def test_is_team_code(self) -> None:
        assert teams.is_team_code("fin")
        assert not teams.is_team_code("CET")

    def test_lookup_tables_are_read_only(self) -> None:
        with pytest.raises(TypeError):
            teams.TEAM_NAMES["XXX"] = "Nowhere"  # type: ignore[index]

    def test_known_names_longest_first(self) -> None:
        names = teams.known_names()
        assert names.index("United States of America".lower()) < names.index("United States")
        assert "us" not in names


# --- Date and time tests ---


class TestDates:
    def test_month_day(self) -> None:
        found = extract_date("Thursday, Feb. 12, 2026", 2026)
        assert found is not None
        assert found.value == "12/02/2026"
        assert found.pattern == "month-day"

    def test_day_month_without_year(self) -> None:
        found = extract_date("12 February", 2026)
        assert found is not None
        assert found.value == "12/02/2026"
        assert found.pattern == "day-month"

    def test_iso_date(self) -> None:
        found = extract_date("2026-02-12", 2026)
        assert found is not None
        assert found.value == "12/02/2026"

    def test_numeric_is_day_first(self) -> None:
        found = extract_date("06/02/2026", 2026)
        assert found is not None
        assert found.value == "06/02/2026"
        assert found.pattern == "numeric"

    def test_numeric_month_first_when_unambiguous(self) -> None:
        found = extract_date("02/14/2026", 2026)
        assert found is not None
        assert found.value == "14/02/2026"

    def test_other_year_ignored(self) -> None:
        assert extract_date("Feb 12, 2025", 2026) is None

    def test_impossible_date_ignored(self) -> None:
        assert extract_date("31/02/2026", 2026) is None

    def test_no_date(self) -> None:
        assert extract_date("Canada vs Sweden", 2026) is None

    def test_earliest_date_wins(self) -> None:
        found = extract_date("12/02/2026 21:10 CAN vs SUI (updated Feb 3)", 2026)
        assert found is not None
        assert found.value == "12/02/2026"
        assert found.pattern == "numeric"

    def test_weekday_row(self) -> None:
        found = extract_date("SAT 14 FEB 21:10 CAN SUI", 2026)
        assert found is not None
        assert found.value == "14/02/2026"


class TestTimes:
    def test_24_hour(self) -> None:
        found = extract_time("Puck drop 16:40 CET")
        assert found is not None
        assert found.value == "16:40"
        assert found.pattern == "24h"

    def test_seconds_dropped(self) -> None:
        found = extract_time("16:40:00")
        assert found is not None
        assert found.value == "16:40"

    def test_12_hour(self) -> None:
        found = extract_time("9:10 p.m.")
        assert found is not None
        assert found.value == "21:10"
        assert found.pattern == "12h"

    def test_midnight_and_noon(self) -> None:
        values = [t.value for t in extract_times("12:00 am then 12:30 PM")]
        assert values == ["00:00", "12:30"]

    def test_invalid_time(self) -> None:
        assert extract_time("25:00") is None
        assert extract_time("no time here") is None


class TestTimestamps:
    def test_iso_utc(self) -> None:
        assert parse_timestamp("2026-02-12T15:40:00Z") == datetime(
            2026, 2, 12, 15, 40, tzinfo=timezone.utc
        )

    def test_offset_kept(self) -> None:
        parsed = parse_timestamp("2026-02-14T20:40:00+01:00")
        assert parsed is not None
        assert parsed.astimezone(timezone.utc).hour == 19

    def test_unparseable(self) -> None:
        assert parse_timestamp("") is None
        assert parse_timestamp("TBD") is None
        assert parse_timestamp("Game 7") is None
        assert parse_timestamp("Feb 12 at 21:10") is None


# --- Opponent tests ---


class TestOpponents:
    def test_code_pair(self) -> None:
        found = extract_opponent_code("CAN vs SWE", "CAN")
        assert found is not None
        assert found.value == "Sweden"
        assert found.pattern == "code-pair"

    def test_code_pair_tracked_second(self) -> None:
        found = extract_opponent_code("FIN - CAN", "CAN")
        assert found is not None
        assert found.value == "Finland"

    def test_code_scan(self) -> None:
        found = extract_opponent_code("Group A: CAN SUI", "CAN")
        assert found is not None
        assert found.value == "Switzerland"
        assert found.pattern == "code-scan"

    def test_code_scan_disabled(self) -> None:
        assert extract_opponent_code("Group A: CAN SUI", "CAN", scan_all=False) is None

    def test_non_team_tokens_skipped(self) -> None:
        assert extract_opponent_code("FEB 12 CET CAN", "CAN") is None
        assert extract_opponent_code("SAT 14 FEB CAN", "CAN") is None

    def test_known_code_preferred(self) -> None:
        found = extract_opponent_code("LIVE CAN XYZ SUI", "CAN")
        assert found is not None
        assert found.value == "Switzerland"

    def test_unknown_code_fallback(self) -> None:
        found = extract_opponent_code("CAN XYZ", "CAN")
        assert found is not None
        assert found.value == "XYZ"

    def test_name_after(self) -> None:
        found = extract_opponent_name("Canada vs. Sweden", TRACKED_NAMES, "CAN")
        assert found is not None
        assert found.value == "Sweden"
        assert found.pattern == "name-after"

    def test_name_before(self) -> None:
        found = extract_opponent_name("Czech Republic vs Canada", TRACKED_NAMES, "CAN")
        assert found is not None
        assert found.value == "Czech Republic"
        assert found.pattern == "name-before"

    def test_trailing_words_trimmed(self) -> None:
        found = extract_opponent_name("Canada - United States Milano Rho", TRACKED_NAMES)
        assert found is not None
        assert found.value == "United States"

    def test_leading_words_trimmed(self) -> None:
        found = extract_opponent_name("12:10 PM Czechia vs. Canada", TRACKED_NAMES)
        assert found is not None
        assert found.value == "Czechia"

    def test_no_opponent(self) -> None:
        assert extract_opponent_name("Canada roster announced", TRACKED_NAMES) is None


# --- Venue and round tests ---


class TestVenueAndRound:
    def test_known_venue(self) -> None:
        found = extract_venue("Milano Santa Giulia Arena, Milan")
        assert found is not None
        assert found.value == "Milano Santa Giulia"

    def test_no_venue(self) -> None:
        assert extract_venue("Canada vs Sweden") is None

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Quarterfinal 2", QUARTERFINAL),
            ("Semi-Final", SEMIFINAL),
            ("Gold Medal Game", FINAL),
            ("Qualification playoff", QUALIFYING),
            ("Group A", PRELIMINARY),
        ],
    )
    def test_round_keywords(self, text: str, expected: str) -> None:
        assert extract_round(text).value == expected

    def test_round_from_context(self) -> None:
        found = extract_round("Canada vs Sweden", "Quarterfinals")
        assert found.value == QUARTERFINAL
        assert found.pattern.startswith("context:")

    def test_round_default(self) -> None:
        found = extract_round("Canada vs Sweden")
        assert found.value == PRELIMINARY
        assert found.pattern == "default"

    def test_round_from_phase(self) -> None:
        assert round_from_phase("QuarterfinalPhase").value == QUARTERFINAL
        assert round_from_phase("SemiFinalPhase").value == SEMIFINAL
        assert round_from_phase("BronzeMedalGame").value == FINAL
        assert round_from_phase(None).value == PRELIMINARY

    def test_looks_like_schedule(self) -> None:
        assert looks_like_schedule("12 Feb 2026 CAN vs SUI", 2026)
        assert not looks_like_schedule("Team roster and staff", 2026)
