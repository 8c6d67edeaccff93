"""Schedule page scanner.

Turns an HTML schedule page into game candidates for the tracked team by
running a cascade of strategies, each tried in order and each adding to
the same list:

1. tables whose text looks like a schedule, row by row
2. containers whose class or id says schedule/game/match/event/fixture
3. JSON-LD ``SportsEvent`` blocks
4. loose text search, only when the first three found nothing
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterator

import pytz
from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PreformattedString

from olympic_hockey_ics import GameCandidate, teams
from olympic_hockey_ics.config import TournamentConfig
from olympic_hockey_ics.extractors import (
    FieldMatch,
    extract_date,
    extract_opponent_code,
    extract_opponent_name,
    extract_round,
    extract_time,
    extract_times,
    extract_venue,
    looks_like_schedule,
    parse_timestamp,
)

LOGGER = logging.getLogger(__name__)

# Source kinds: pages that name teams by 3-letter code, and pages that spell them out
CODES = "structured-codes"
PROSE = "prose"

LABEL_KEYWORDS = ("schedule", "game", "match", "event", "fixture")
CONTEXT_KEYWORDS = ("round", "phase")
EVENT_TYPES = {"SportsEvent", "Event"}
_HAS_TIME_RE = re.compile(r"[T ]\d{2}:?\d{2}")

SKIP_TAGS = {"script", "style", "noscript", "template", "head"}
CONTAINER_SKIP_TAGS = {"html", "body", "table", "thead", "tbody", "tfoot"}
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "br", "caption", "dd", "div",
    "dl", "dt", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
    "li", "main", "nav", "ol", "p", "section", "table", "tbody", "thead", "tr", "ul",
}

# How many lines either side of a team mention the text fallback looks at
PROXIMITY = 3


def detect_source_kind(url: str) -> str:
    """IIHF pages name teams by code; everything else is treated as prose."""
    return CODES if "iihf.com" in (url or "").lower() else PROSE


def _clean(text: str) -> str:
    return " ".join(text.split())


@dataclass
class ScanContext:
    """Tracked-team knowledge shared by every strategy in one scan."""

    config: TournamentConfig
    source_kind: str = PROSE
    _name_re: re.Pattern = field(init=False, repr=False)
    _code_re: re.Pattern = field(init=False, repr=False)

    def __post_init__(self) -> None:
        names = sorted(set(self.config.team_names), key=len, reverse=True)
        self._name_re = re.compile(
            r"\b(?:" + "|".join(re.escape(n) for n in names) + r")\b", re.IGNORECASE
        )
        self._code_re = re.compile(rf"\b{re.escape(self.config.team_code)}\b")

    def mentions_team(self, text: str) -> bool:
        return bool(self._code_re.search(text) or self._name_re.search(text))

    def team_mentions(self, text: str, limit: int = 5) -> list[str]:
        """Short snippets starting at each tracked-team mention."""
        snippets = []
        for pattern in (self._code_re, self._name_re):
            for m in pattern.finditer(text):
                snippets.append(_clean(text[m.start():m.end() + 30]))
                if len(snippets) >= limit:
                    return snippets
        return snippets

    def is_tracked(self, name: str) -> bool:
        name = name.strip()
        if name.upper() == self.config.team_code:
            return True
        tracked = {n.lower() for n in self.config.team_names}
        return name.lower() in tracked or teams.normalize(name).lower() in tracked

    def find_opponent(self, text: str, loose: bool = False) -> FieldMatch | None:
        """Opponent for a span, using code or prose patterns by source kind.

        ``loose`` tries code pairs and prose regardless of source kind but
        skips the bare code scan, which is too eager on running text.
        """
        code = self.config.team_code
        if loose:
            return (
                extract_opponent_code(text, code, scan_all=False)
                or extract_opponent_name(text, self.config.team_names, code)
            )
        if self.source_kind == CODES:
            found = extract_opponent_code(text, code)
            if found:
                return found
        return extract_opponent_name(text, self.config.team_names, code)

    def candidate_from_text(
        self,
        text: str,
        context: str | None = None,
        date_str: str | None = None,
        time_str: str | None = None,
    ) -> GameCandidate | None:
        """Build a candidate from one span, or None if a required field is missing.

        ``date_str`` and ``time_str`` fill in for a span that lacks its own.
        """
        date = extract_date(text, self.config.year)
        time = extract_time(text)
        opponent = self.find_opponent(text)

        date_value = date.value if date else date_str
        time_value = time.value if time else time_str
        if not (date_value and time_value and opponent):
            return None

        venue = extract_venue(text)
        round_match = extract_round(text, context)
        LOGGER.debug(
            "Candidate %s %s vs %s (date=%s, time=%s, opponent=%s, round=%s)",
            date_value,
            time_value,
            opponent.value,
            date.pattern if date else "neighbour",
            time.pattern if time else "neighbour",
            opponent.pattern,
            round_match.pattern,
        )
        return GameCandidate(
            date_str=date_value,
            time_str=time_value,
            opponent=opponent.value,
            venue=venue.value if venue else self.config.default_venue,
            round=round_match.value,
            raw_text=_clean(text),
        )


class Strategy:
    """One way of finding games in a parsed page."""

    name = "base"
    # Only run when every earlier strategy came back empty
    fallback_only = False

    def scan(self, soup: BeautifulSoup, ctx: ScanContext) -> list[GameCandidate]:
        raise NotImplementedError


def _row_text(row: Tag) -> str:
    cells = row.find_all(["td", "th"])
    if cells:
        return " ".join(c.get_text(" ", strip=True) for c in cells)
    return row.get_text(" ", strip=True)


def _attr_text(tag: Tag) -> str:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    return " ".join([*classes, tag.get("id") or "", tag.get("itemtype") or ""]).lower()


def _round_context(table: Tag) -> str:
    """Caption, nearest heading and round/phase wrapper of a table."""
    parts = []
    caption = table.find("caption")
    if caption:
        parts.append(caption.get_text(" ", strip=True))
    heading = table.find_previous(["h1", "h2", "h3", "h4"])
    if heading:
        parts.append(heading.get_text(" ", strip=True))
    wrapper = table.find_parent(
        lambda t: isinstance(t, Tag) and any(k in _attr_text(t) for k in CONTEXT_KEYWORDS)
    )
    if wrapper:
        parts.append(_attr_text(wrapper))
    return " ".join(parts)


class TableStrategy(Strategy):
    """Strategy 1: schedule tables, one candidate per tracked-team row."""

    name = "table"

    def scan(self, soup: BeautifulSoup, ctx: ScanContext) -> list[GameCandidate]:
        games: list[GameCandidate] = []
        year = ctx.config.year

        for table in soup.find_all("table"):
            if not looks_like_schedule(table.get_text(" ", strip=True), year):
                continue

            row_texts = [_row_text(row) for row in table.find_all("tr")]
            context = _round_context(table)

            for i, text in enumerate(row_texts):
                if not ctx.mentions_team(text):
                    continue
                # Date and time often sit on a header row above the game
                date_str = None
                if not extract_date(text, year):
                    date_str = self._preceding_date(row_texts, i, year)
                time_str = None
                if not extract_time(text):
                    time_str = self._adjacent_time(row_texts, i, ctx)

                game = ctx.candidate_from_text(text, context, date_str, time_str)
                if game:
                    games.append(game)

        return games

    @staticmethod
    def _preceding_date(row_texts: list[str], index: int, year: int) -> str | None:
        for text in reversed(row_texts[:index]):
            found = extract_date(text, year)
            if found:
                return found.value
        return None

    @staticmethod
    def _adjacent_time(row_texts: list[str], index: int, ctx: ScanContext) -> str | None:
        for j in (index - 1, index + 1):
            if 0 <= j < len(row_texts) and not ctx.mentions_team(row_texts[j]):
                found = extract_time(row_texts[j])
                if found:
                    return found.value
        return None


def _is_labeled(tag: Tag) -> bool:
    # Tables belong to the table strategy; their rows may still be labelled
    if tag.name in SKIP_TAGS or tag.name in CONTAINER_SKIP_TAGS:
        return False
    attrs = _attr_text(tag)
    return any(k in attrs for k in LABEL_KEYWORDS)


class LabeledContainerStrategy(Strategy):
    """Strategy 2: elements labelled as games, innermost match only."""

    name = "labeled-container"

    def scan(self, soup: BeautifulSoup, ctx: ScanContext) -> list[GameCandidate]:
        found: list[tuple[Tag, GameCandidate]] = []
        for elem in soup.find_all(_is_labeled):
            text = elem.get_text(" ", strip=True)
            if not ctx.mentions_team(text):
                continue
            # Several kickoff times means a list of games, not one game
            if len({t.value for t in extract_times(text)}) > 1:
                continue
            game = ctx.candidate_from_text(text, _attr_text(elem))
            if game:
                found.append((elem, game))

        productive = {id(elem) for elem, _ in found}
        games = []
        for elem, game in found:
            if any(id(d) in productive for d in elem.find_all(True)):
                continue
            games.append(game)
        return games


def _ld_items(data: object) -> Iterator[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _ld_items(item)
    elif isinstance(data, dict):
        yield data
        if "@graph" in data:
            yield from _ld_items(data["@graph"])


def _ld_types(item: dict) -> set[str]:
    kind = item.get("@type")
    if isinstance(kind, str):
        return {kind}
    if isinstance(kind, list):
        return {k for k in kind if isinstance(k, str)}
    return set()


def _ld_name(value: object) -> str:
    if isinstance(value, dict):
        return str(value.get("name") or "").strip()
    if isinstance(value, str):
        return value.strip()
    return ""


class StructuredDataStrategy(Strategy):
    """Strategy 3: JSON-LD event records, read from their typed fields."""

    name = "structured-data"

    def scan(self, soup: BeautifulSoup, ctx: ScanContext) -> list[GameCandidate]:
        games: list[GameCandidate] = []
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            raw = script.string or script.get_text()
            try:
                data = json.loads(raw)
            except (TypeError, ValueError) as exc:
                LOGGER.debug("Skipping unreadable JSON-LD block: %s", exc)
                continue
            for item in _ld_items(data):
                if _ld_types(item) & EVENT_TYPES:
                    game = self._from_item(item, ctx)
                    if game:
                        games.append(game)
        return games

    @staticmethod
    def _from_item(item: dict, ctx: ScanContext) -> GameCandidate | None:
        name = _ld_name(item.get("name"))

        competitors: list[str] = []
        for key in ("homeTeam", "awayTeam", "competitor"):
            value = item.get(key)
            for entry in value if isinstance(value, list) else [value]:
                team_name = _ld_name(entry)
                if team_name:
                    competitors.append(team_name)

        involved = ctx.mentions_team(name) or any(ctx.is_tracked(c) for c in competitors)
        if not involved:
            return None

        opponent = next((c for c in competitors if not ctx.is_tracked(c)), None)
        if not opponent:
            found = ctx.find_opponent(name, loose=True)
            opponent = found.value if found else None

        raw_start = str(item.get("startDate") or item.get("startTime") or "")
        # A date-only startDate carries no kickoff time
        if not _HAS_TIME_RE.search(raw_start):
            return None
        start = parse_timestamp(raw_start)
        if not opponent or start is None:
            return None
        if start.tzinfo is not None:
            start = start.astimezone(pytz.timezone(ctx.config.timezone))
        if start.year != ctx.config.year:
            return None

        location = item.get("location")
        if isinstance(location, list):
            location = location[0] if location else None
        venue = _ld_name(location) or ctx.config.default_venue

        description = _ld_name(item.get("description"))
        return GameCandidate(
            date_str=f"{start.day:02d}/{start.month:02d}/{start.year}",
            time_str=f"{start.hour:02d}:{start.minute:02d}",
            opponent=opponent,
            venue=venue,
            round=extract_round(f"{name} {description}").value,
            raw_text=name,
        )


def _walk_text(node: Tag, parts: list[str]) -> None:
    for child in node.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
            continue
        if not isinstance(child, Tag) or child.name in SKIP_TAGS:
            continue
        sep = "\n" if child.name in BLOCK_TAGS else " "
        parts.append(sep)
        _walk_text(child, parts)
        parts.append(sep)


def text_lines(soup: BeautifulSoup) -> list[str]:
    """Visible text of a page, one line per block element."""
    parts: list[str] = []
    _walk_text(soup, parts)
    lines = (_clean(line) for line in "".join(parts).splitlines())
    return [line for line in lines if line]


def _nearest(lines: list[str], index: int, extract: Callable[[str], FieldMatch | None]) -> FieldMatch | None:
    """Run ``extract`` on the line and then outwards, earlier lines first."""
    order = [index]
    for step in range(1, PROXIMITY + 1):
        order.extend((index - step, index + step))
    for j in order:
        if 0 <= j < len(lines):
            found = extract(lines[j])
            if found:
                return found
    return None


class FreeTextStrategy(Strategy):
    """Strategy 4: team mention plus a nearby date and time in page text."""

    name = "free-text"
    fallback_only = True

    def scan(self, soup: BeautifulSoup, ctx: ScanContext) -> list[GameCandidate]:
        games: list[GameCandidate] = []
        year = ctx.config.year
        lines = text_lines(soup)

        for i, line in enumerate(lines):
            if not ctx.mentions_team(line):
                continue
            opponent = ctx.find_opponent(line, loose=True)
            if not opponent:
                continue
            date = _nearest(lines, i, lambda t: extract_date(t, year))
            time = _nearest(lines, i, extract_time)
            if not (date and time):
                continue

            window = " ".join(lines[max(0, i - PROXIMITY):i + PROXIMITY + 1])
            venue = extract_venue(line) or extract_venue(window)
            games.append(GameCandidate(
                date_str=date.value,
                time_str=time.value,
                opponent=opponent.value,
                venue=venue.value if venue else ctx.config.default_venue,
                round=extract_round(line, window).value,
                raw_text=line,
            ))

        return games


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    TableStrategy(),
    LabeledContainerStrategy(),
    StructuredDataStrategy(),
    FreeTextStrategy(),
)


def collect_diagnostics(soup: BeautifulSoup, ctx: ScanContext) -> dict:
    """Structural counts that help explain an empty scan."""
    text = soup.get_text(" ", strip=True)
    tables = soup.find_all("table")
    return {
        "tables": len(tables),
        "tables_with_team": sum(
            1 for t in tables if ctx.mentions_team(t.get_text(" ", strip=True))
        ),
        "team_mentions": ctx.team_mentions(text),
        "dates": re.findall(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{4}\b", text)[:5],
    }


def scan_document(
    soup: BeautifulSoup,
    ctx: ScanContext,
    strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
) -> list[GameCandidate]:
    """Run the strategy cascade over a parsed page."""
    candidates: list[GameCandidate] = []
    for strategy in strategies:
        if strategy.fallback_only and candidates:
            continue
        found = strategy.scan(soup, ctx)
        LOGGER.info("Strategy %s found %d candidate(s)", strategy.name, len(found))
        candidates.extend(found)

    if not candidates and ctx.mentions_team(soup.get_text(" ", strip=True)):
        LOGGER.warning(
            "No games found although the page mentions %s: %s",
            ctx.config.team_code,
            collect_diagnostics(soup, ctx),
        )
    return candidates


def scan_html(
    html: str,
    config: TournamentConfig,
    source_kind: str | None = None,
    source_url: str = "",
) -> list[GameCandidate]:
    """Parse an HTML page and return every candidate game for the tracked team.

    ``source_kind`` wins over the kind guessed from ``source_url``.
    """
    soup = BeautifulSoup(html, "html.parser")
    ctx = ScanContext(config, source_kind or detect_source_kind(source_url))
    LOGGER.info(
        "Scanning %d bytes from %s as %s", len(html), source_url or "unknown source", ctx.source_kind
    )
    return scan_document(soup, ctx)
