"""Field extractors for dates, times, opponents, venues and rounds.

Every extractor takes a text span and returns a :class:`FieldMatch` naming
the value found and the pattern that found it, or ``None``. They never
raise: a miss is a normal outcome and the caller decides whether the
candidate is still usable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from dateutil import parser as dateparser

from olympic_hockey_ics import (
    FINAL,
    PRELIMINARY,
    QUALIFYING,
    QUARTERFINAL,
    SEMIFINAL,
    teams,
)


@dataclass(frozen=True)
class FieldMatch:
    value: str
    pattern: str


MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

_MONTH_NAMES = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)

_DATE_PATTERNS = (
    (
        "month-day",
        re.compile(
            rf"\b(?P<month>{_MONTH_NAMES})\.?\s+(?P<day>\d{{1,2}})(?:st|nd|rd|th)?\b"
            rf"(?:,?\s+(?P<year>\d{{4}})\b)?",
            re.IGNORECASE,
        ),
    ),
    (
        "day-month",
        re.compile(
            rf"\b(?P<day>\d{{1,2}})(?:st|nd|rd|th)?\s+(?P<month>{_MONTH_NAMES})\b\.?"
            rf"(?:,?\s+(?P<year>\d{{4}})\b)?",
            re.IGNORECASE,
        ),
    ),
    ("year-month-day", re.compile(r"\b(?P<year>\d{4})[/-](?P<month>\d{1,2})[/-](?P<day>\d{1,2})\b")),
    ("numeric", re.compile(r"\b(?P<first>\d{1,2})[/-](?P<second>\d{1,2})[/-](?P<year>\d{4})\b")),
)

_TIME_RE = re.compile(
    r"(?<![\d:])(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::\d{2})?(?![\d:])"
    r"(?:\s*(?P<period>[ap])\.?m\b\.?)?",
    re.IGNORECASE,
)

_CODE_PAIR_RE = re.compile(r"\b([A-Z]{3})\s*(?:vs\.?|VS\.?|v\.?|[-–—])\s*([A-Z]{3})\b")
_CODE_RE = re.compile(r"\b[A-Z]{3}\b")
_LOOSE_CODE_PAIR_RE = re.compile(r"\b[A-Z]{3}\b.*?\b[A-Z]{3}\b", re.DOTALL)

# Uppercase tokens that show up in schedule markup but are not teams
NON_TEAM_TOKENS = frozenset({
    *(m.upper() for m in MONTHS),
    "MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN",
    "CET", "UTC", "GMT", "EST", "EDT", "PST", "PDT", "CST", "MST",
    "MEN", "THE", "AND", "ALL", "NHL",
})

_SEPARATOR = r"\s+(?:(?i:vs?)\.?|[-–])\s+"
_TEAM_WORDS = r"[A-Z][\w.'’]*(?:\s+(?:of\s+)?[A-Z][\w.'’]*)*"
_PUNCTUATION = " \t\n.,;:!?-–()[]\"'"

KNOWN_VENUES = (
    "Milano Santa Giulia",
    "Santa Giulia",
    "Milano Rho",
    "Fiera Milano",
    "Milano Cortina",
    "PalaItalia",
    "Palasport",
    "Arena",
    "Stadium",
    "Pala",
)

_ROUND_PATTERNS = (
    (QUALIFYING, re.compile(r"\b(?:qualifying|qualification|qual)\b", re.IGNORECASE)),
    (QUARTERFINAL, re.compile(r"\b(?:quarter[\s-]?finals?|qf|q\.f\.?)(?!\w)", re.IGNORECASE)),
    (SEMIFINAL, re.compile(r"\b(?:semi[\s-]?finals?|sf|s\.f\.?)(?!\w)", re.IGNORECASE)),
    (FINAL, re.compile(r"\b(?:finals?|gold(?:\s+medal)?|bronze(?:\s+medal)?)\b", re.IGNORECASE)),
    (PRELIMINARY, re.compile(r"\b(?:preliminary|prelim|group|pool)\b", re.IGNORECASE)),
)


def _valid_date(year: int, month: int, day: int) -> bool:
    try:
        datetime(year, month, day)
    except ValueError:
        return False
    return True


def extract_date(text: str, year: int) -> FieldMatch | None:
    """Find the earliest date in ``text`` that falls in ``year``.

    Numeric dates are read day-first when both parts could be a month
    (06/02/2026 is 6 February). A second part above 12 can only be a day,
    so 02/14/2026 is read month-first.
    """
    # Pattern order breaks ties between matches at the same position
    matches = sorted(
        ((m.start(), order, name, m)
         for order, (name, pattern) in enumerate(_DATE_PATTERNS)
         for m in pattern.finditer(text)),
        key=lambda found: found[:2],
    )
    for _, _, name, m in matches:
        found_year = int(m.group("year")) if m.group("year") else year
        if found_year != year:
            continue

        if name == "numeric":
            first, second = int(m.group("first")), int(m.group("second"))
            if first <= 12 < second:
                month, day = first, second
            else:
                day, month = first, second
        elif name == "year-month-day":
            month, day = int(m.group("month")), int(m.group("day"))
        else:
            month = MONTHS[m.group("month")[:3].lower()]
            day = int(m.group("day"))

        if not (1 <= day <= 31 and 1 <= month <= 12):
            continue
        if not _valid_date(year, month, day):
            continue
        return FieldMatch(f"{day:02d}/{month:02d}/{year}", name)
    return None


def extract_times(text: str) -> list[FieldMatch]:
    """Every valid clock time in ``text``, as 24-hour HH:MM."""
    times = []
    for m in _TIME_RE.finditer(text):
        hour, minute = int(m.group("hour")), int(m.group("minute"))
        period = (m.group("period") or "").lower()
        if period:
            if not 1 <= hour <= 12:
                continue
            if period == "p" and hour != 12:
                hour += 12
            elif period == "a" and hour == 12:
                hour = 0
        if hour > 23 or minute > 59:
            continue
        times.append(FieldMatch(f"{hour:02d}:{minute:02d}", "12h" if period else "24h"))
    return times


def extract_time(text: str) -> FieldMatch | None:
    """Find the first clock time in ``text``; 12am is 00:00, 12pm is 12:00."""
    times = extract_times(text)
    return times[0] if times else None


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, or None if ``value`` isn't one."""
    if not value or not value.strip():
        return None
    try:
        return dateparser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None


def extract_opponent_code(
    text: str, tracked_code: str, scan_all: bool = True
) -> FieldMatch | None:
    """Find the opponent of ``tracked_code`` among 3-letter team codes.

    A ``CAN vs SWE`` style pair wins; otherwise, with ``scan_all``, the
    first known team code that is not the tracked team, then the first
    other uppercase token.
    """
    tracked = tracked_code.upper()

    def usable(code: str) -> bool:
        return code != tracked and code not in NON_TEAM_TOKENS

    for m in _CODE_PAIR_RE.finditer(text):
        left, right = m.group(1), m.group(2)
        if left == tracked and usable(right):
            return FieldMatch(teams.expand(right), "code-pair")
        if right == tracked and usable(left):
            return FieldMatch(teams.expand(left), "code-pair")

    if not scan_all:
        return None
    codes = [c for c in _CODE_RE.findall(text) if usable(c)]
    # Known team codes beat other uppercase tokens
    chosen = [c for c in codes if teams.is_team_code(c)] or codes
    if chosen:
        return FieldMatch(teams.expand(chosen[0]), "code-scan")
    return None


def _tracked_pattern(tracked_names: Iterable[str], tracked_code: str | None) -> str:
    names = sorted({n for n in tracked_names if n}, key=len, reverse=True)
    alternatives = [f"(?i:{'|'.join(re.escape(n) for n in names)})"] if names else []
    if tracked_code:
        alternatives.append(re.escape(tracked_code.upper()))
    return r"\b(?:" + "|".join(alternatives) + r")\b"


def _trim_team(phrase: str, leading: bool) -> str:
    """Cut words that ran into the captured team phrase.

    ``leading`` means the team is the first thing after the separator, so
    extra words trail it; otherwise extra words precede it.
    """
    phrase = phrase.strip(_PUNCTUATION)
    lower = phrase.lower()
    for name in teams.known_names():
        name_lower = name.lower()
        if leading and lower.startswith(name_lower):
            end = len(name_lower)
            if end == len(lower) or not lower[end].isalnum():
                return phrase[:end].strip(_PUNCTUATION)
        if not leading and lower.endswith(name_lower):
            start = len(lower) - len(name_lower)
            if start == 0 or not lower[start - 1].isalnum():
                return phrase[start:].strip(_PUNCTUATION)
    return phrase


def extract_opponent_name(
    text: str,
    tracked_names: Iterable[str],
    tracked_code: str | None = None,
) -> FieldMatch | None:
    """Find the opponent in prose such as "Canada vs. Sweden"."""
    tracked_names = tuple(tracked_names)
    tracked = _tracked_pattern(tracked_names, tracked_code)
    tracked_lower = {n.lower() for n in tracked_names}
    if tracked_code:
        tracked_lower.add(tracked_code.lower())

    candidates = (
        ("name-after", re.compile(rf"{tracked}{_SEPARATOR}(?P<team>{_TEAM_WORDS})"), True),
        ("name-before", re.compile(rf"(?P<team>{_TEAM_WORDS}){_SEPARATOR}{tracked}"), False),
    )
    for name, pattern, leading in candidates:
        for m in pattern.finditer(text):
            team = _trim_team(m.group("team"), leading)
            if not team or team.lower() in tracked_lower:
                continue
            if teams.normalize(team).lower() in tracked_lower:
                continue
            return FieldMatch(team, name)
    return None


def extract_venue(text: str) -> FieldMatch | None:
    lower = text.lower()
    for venue in KNOWN_VENUES:
        if venue.lower() in lower:
            return FieldMatch(venue, venue.lower())
    return None


def _match_round(text: str) -> FieldMatch | None:
    for round_name, pattern in _ROUND_PATTERNS:
        m = pattern.search(text)
        if m:
            return FieldMatch(round_name, m.group(0).lower())
    return None


def extract_round(text: str, context: str | None = None) -> FieldMatch:
    """Classify the tournament round of ``text``.

    Falls back to ``context`` (caption, heading, enclosing element) and
    finally to the preliminary round, so this always returns a match.
    """
    found = _match_round(text)
    if found:
        return found
    if context:
        found = _match_round(context)
        if found:
            return FieldMatch(found.value, f"context:{found.pattern}")
    return FieldMatch(PRELIMINARY, "default")


def round_from_phase(phase_id: str | None) -> FieldMatch:
    """Classify an explicit phase identifier such as ``QuarterfinalPhase``."""
    phase = (phase_id or "").lower()
    if "qualification" in phase or "qualifying" in phase:
        return FieldMatch(QUALIFYING, "phase")
    if "quarter" in phase:
        return FieldMatch(QUARTERFINAL, "phase")
    if "semi" in phase:
        return FieldMatch(SEMIFINAL, "phase")
    if "final" in phase or "gold" in phase or "bronze" in phase:
        return FieldMatch(FINAL, "phase")
    if "prelim" in phase:
        return FieldMatch(PRELIMINARY, "phase")
    return FieldMatch(PRELIMINARY, "default")


def looks_like_schedule(text: str, year: int) -> bool:
    """Cheap test for date-, time- or team-pair-looking content."""
    return bool(
        extract_date(text, year)
        or extract_time(text)
        or _LOOSE_CODE_PAIR_RE.search(text)
    )
