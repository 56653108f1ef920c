"""Date/time helpers.

- Always store and operate on timezone-aware UTC datetimes.
- Render track durations for display.

This module is intentionally dependency-free and safe to use in any layer.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return a timezone-aware datetime in UTC."""
    return datetime.now(UTC)


def format_duration(seconds: int | float | None) -> str:
    """Format seconds as M:SS, or H:MM:SS past the hour."""
    if seconds is None:
        return "Unknown"

    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
