"""Team code and name lookups."""

from __future__ import annotations

from types import MappingProxyType

TEAM_NAMES = MappingProxyType({
    "AUT": "Austria",
    "CAN": "Canada",
    "CHN": "China",
    "CZE": "Czechia",
    "DEN": "Denmark",
    "FIN": "Finland",
    "FRA": "France",
    "GBR": "Great Britain",
    "GER": "Germany",
    "HUN": "Hungary",
    "ITA": "Italy",
    "JPN": "Japan",
    "KAZ": "Kazakhstan",
    "KOR": "South Korea",
    "LAT": "Latvia",
    "NOR": "Norway",
    "POL": "Poland",
    "ROC": "ROC",
    "RUS": "ROC",
    "SLO": "Slovenia",
    "SUI": "Switzerland",
    "SVK": "Slovakia",
    "SWE": "Sweden",
    "USA": "United States",
})

# Alternate spellings seen on schedule pages, keyed lowercase
TEAM_ALIASES = MappingProxyType({
    "czech republic": "Czechia",
    "czech rep.": "Czechia",
    "united states of america": "United States",
    "usa": "United States",
    "us": "United States",
    "u.s.": "United States",
    "uk": "Great Britain",
    "britain": "Great Britain",
    "russia": "ROC",
    "russian federation": "ROC",
    "korea": "South Korea",
    "republic of korea": "South Korea",
    "swiss": "Switzerland",
})

_CANONICAL = MappingProxyType({name.lower(): name for name in TEAM_NAMES.values()})


def is_team_code(token: str) -> bool:
    """Return True if ``token`` is a known 3-letter team code."""
    return token.strip().upper() in TEAM_NAMES


def expand(code: str) -> str:
    """Return the display name for a team code, or the code unchanged."""
    return TEAM_NAMES.get(code.strip().upper(), code)


def normalize(name: str) -> str:
    """Map a free-text team name or code to its canonical display name.

    Unknown names are returned unchanged.
    """
    stripped = name.strip()
    if len(stripped) == 3 and is_team_code(stripped):
        return expand(stripped)

    lower = stripped.lower()
    if lower in TEAM_ALIASES:
        return TEAM_ALIASES[lower]
    if lower in _CANONICAL:
        return _CANONICAL[lower]
    return name


def known_names() -> list[str]:
    """All canonical names and aliases, longest first."""
    names = {*TEAM_NAMES.values(), *(a for a in TEAM_ALIASES if len(a) > 3)}
    return sorted(names, key=len, reverse=True)
