"""Timestamp parsing and normalization to ISO 8601 UTC instants."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import re
import time

from dateutil import parser as dateparser

# Free text needs at least two numeric groups before dateutil sees it.
_HAS_DIGITS_RE = re.compile(r"\d{1,4}\D+\d{1,4}")


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO 8601 timestamp string into a timezone-aware datetime."""
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO 8601, RFC 2822 or free-text date.

    Returns a timezone-aware datetime, or None when nothing sensible parses.
    Naive values are taken as UTC.
    """
    if not value:
        return None
    raw = " ".join(value.split())
    if not raw or not _HAS_DIGITS_RE.search(raw):
        return None

    try:
        return parse_iso8601(raw)
    except ValueError:
        pass

    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is not None:
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    try:
        parsed = dateparser.parse(raw, fuzzy=True)
    except (ValueError, OverflowError):
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso_instant(moment: datetime) -> str:
    """Format a datetime as YYYY-MM-DDTHH:MM:SS.mmmZ in UTC."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def normalize_timestamp(value: str | None) -> str | None:
    """Parse value and return it as an ISO 8601 UTC instant, or None."""
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return to_iso_instant(parsed)


def struct_time_to_iso(value: time.struct_time | None) -> str | None:
    """Convert a UTC struct_time (as produced by feedparser) to an ISO instant."""
    if value is None:
        return None
    return to_iso_instant(datetime(*value[:6], tzinfo=timezone.utc))
