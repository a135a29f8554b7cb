"""
Formatting helpers for the Visnet E-Learning API.
"""

import re
from datetime import datetime, timezone
from typing import Optional


def slugify(value: str) -> str:
    """
    Derive a URL slug from a title.

    Lower-cases, replaces every run of non-alphanumerics with a single
    hyphen and trims leading/trailing hyphens.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return slug.strip("-")


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_relative_time(value: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Render a timestamp as "just now", "5 minutes ago", "2 days ago"...

    Anything a week or older falls back to the plain date.
    """
    if value is None:
        return "N/A"

    value = _as_naive_utc(value)
    now = _as_naive_utc(now) if now is not None else datetime.utcnow()

    diff_seconds = (now - value).total_seconds()
    diff_mins = int(diff_seconds // 60)
    diff_hours = int(diff_seconds // 3600)
    diff_days = int(diff_seconds // 86400)

    if diff_mins < 1:
        return "just now"
    if diff_mins < 60:
        return f"{diff_mins} minute{'s' if diff_mins > 1 else ''} ago"
    if diff_hours < 24:
        return f"{diff_hours} hour{'s' if diff_hours > 1 else ''} ago"
    if diff_days < 7:
        return f"{diff_days} day{'s' if diff_days > 1 else ''} ago"

    return value.strftime("%Y-%m-%d")


def format_audit_timestamp(value: Optional[datetime]) -> str:
    """Format an audit timestamp as ``YYYY-MM-DD HH:MM:SS``."""
    if value is None:
        return "N/A"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Treat empty or whitespace-only strings as missing."""
    if value is None:
        return None
    value = value.strip()
    return value or None
