"""
UTC timestamp utilities (stdlib-only).

Every row the scheduler writes carries a timestamp, and the due-job query
compares them as strings. This module keeps one canonical encoding so that
lexical order in the database equals chronological order:

    - **utc_now():** Timezone-aware UTC datetime
    - **ensure_utc():** Normalize naive (assumed UTC) or offset datetimes
    - **to_iso8601() / from_iso8601():** Second-precision ``+00:00`` round-trip

Tags:
    timestamps, utc, datetime, uptimer-core, stdlib-only, serialization

Doc-Types:
    - API Reference
    - Utility Documentation

STDLIB ONLY - NO PYDANTIC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Return *dt* as an aware UTC datetime. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to the storage form, e.g. ``2024-01-01T11:00:00+00:00``."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat(timespec="seconds")


def from_iso8601(s: str | None) -> datetime | None:
    """Parse a stored ISO 8601 string back to an aware UTC datetime."""
    if s is None:
        return None
    return ensure_utc(datetime.fromisoformat(s))
