"""
UTC clock and timestamp rendering for the stamping hooks.

The created/modified hooks store one of three shapes, chosen per model by
``date_format``:

    ``"int"``       → 1760745600            (epoch seconds)
    ``"datetime"``  → "2025-10-18 00:00:00"
    ``"date"``      → "2025-10-18"

STDLIB ONLY.
"""

from __future__ import annotations

from datetime import UTC, datetime

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def render_stamp(date_format: str, when: datetime | None = None) -> int | str:
    """Render ``when`` (default: now) in the given stamp format."""
    when = when or utc_now()
    if date_format == "int":
        return int(when.timestamp())
    if date_format == "datetime":
        return when.strftime(DATETIME_FORMAT)
    if date_format == "date":
        return when.strftime(DATE_FORMAT)
    raise ValueError(f"Unknown date format: {date_format!r}")
