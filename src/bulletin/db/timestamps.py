"""Timestamp normalization at the database boundary.

SQLite hands DateTime columns back without tzinfo, and callers may pass
naive values in. Every timestamp crossing the database layer goes through
ensure_utc so the rest of the package only ever sees aware UTC datetimes.
"""

from datetime import UTC, datetime


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Return dt as an aware UTC datetime. Naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
