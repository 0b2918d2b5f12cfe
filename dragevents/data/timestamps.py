"""
Best-effort timestamp parsing over the formats SQLite hands back.

Values are stored as text, so the same column can hold "2025-10-03 08:00:00",
"2025-10-03T08:00:00Z" or a driver-written "2025-10-03 08:00:00.123456789+00:00".
"""
from __future__ import annotations

import datetime as dt
import re
from typing import NamedTuple, Optional

from dragevents.config import TIMESTAMP_FORMATS

# Zero value used when nothing parses (0001-01-01T00:00:00Z)
ZERO_TIMESTAMP = dt.datetime.min.replace(tzinfo=dt.timezone.utc)

# strptime's %f stops at microseconds
_LONG_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class ParsedTimestamp(NamedTuple):
    value: dt.datetime
    raw: str
    fallback: bool


def _normalize(raw: str) -> str:
    return _LONG_FRACTION_RE.sub(r"\1", raw.strip())


def try_parse_timestamp(raw: str) -> Optional[dt.datetime]:
    """Return the first successful parse over TIMESTAMP_FORMATS, else None.

    Zone-less values are taken as UTC.
    """
    text = _normalize(raw)
    for fmt in TIMESTAMP_FORMATS:
        try:
            value = dt.datetime.strptime(text, fmt)
        except ValueError:
            continue
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        return value
    return None


def parse_timestamp(raw: str) -> ParsedTimestamp:
    """Parse ``raw``, tagging the result when the zero value had to be used."""
    value = try_parse_timestamp(raw)
    if value is None:
        return ParsedTimestamp(ZERO_TIMESTAMP, raw, True)
    return ParsedTimestamp(value, raw, False)
