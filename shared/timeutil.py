from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(s: Optional[str]) -> Optional[datetime]:
    """
    Parse ISO-8601 ('...Z' or '+00:00'); returns an aware UTC datetime,
    or None if s is falsy, not a string, or invalid.
    """
    if not s or not isinstance(s, str):
        return None
    try:
        dt = datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return as_utc(dt)


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with Z (e.g. 2025-09-27T14:03:21Z)."""
    return as_utc(dt).isoformat(timespec="seconds").replace("+00:00", "Z")


def iso_to_local_str(ts: Optional[str], fmt: str = "%Y-%m-%d %H:%M") -> str:
    """
    Convert ISO-8601 UTC to local time string.
    Returns '—' if ts is falsy or invalid.
    """
    dt = parse_iso(ts)
    if dt is None:
        return "—"
    return dt.astimezone().strftime(fmt)
