"""Last-good calendar cache used when a scrape fails."""

from __future__ import annotations

from pathlib import Path


def _cache_file(cache_dir: Path, key: str) -> Path:
    return cache_dir / f"{key.lower()}.ics"


def save_to_cache(cache_dir: Path, key: str, ics_data: bytes) -> None:
    """Save ICS data to cache directory."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    _cache_file(cache_dir, key).write_bytes(ics_data)


def load_cached_calendar(cache_dir: Path, key: str) -> bytes | None:
    """Load the cached calendar. Returns None if missing or invalid."""
    cache_file = _cache_file(cache_dir, key)
    if not cache_file.exists():
        return None
    data = cache_file.read_bytes()
    return data if validate_ics(data) else None


def validate_ics(data: bytes) -> bool:
    """Well-formed calendar holding at least one event."""
    text = data.decode("utf-8", errors="replace")
    return (
        text.startswith("BEGIN:VCALENDAR")
        and "END:VCALENDAR" in text
        and "BEGIN:VEVENT" in text
    )
