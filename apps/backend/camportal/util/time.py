from __future__ import annotations

import datetime as dt
import re

# The backend sends trimmed nanosecond fractions; fromisoformat wants exactly six digits.
_FRACTION_RE = re.compile(r"\.(\d+)")


def _microseconds(match: re.Match[str]) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def parse_iso8601(value: str | None) -> dt.datetime | None:
    if not value:
        return None
    text = _FRACTION_RE.sub(_microseconds, value.strip().replace("Z", "+00:00"), count=1)
    try:
        parsed = dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc)


def elapsed_seconds(start: str | None, end: str | None, now: dt.datetime | None = None) -> float | None:
    """Seconds between start and end; an open event is measured up to now."""
    started = parse_iso8601(start)
    if started is None:
        return None
    finished = parse_iso8601(end) or now or now_utc()
    return max(0.0, (finished - started).total_seconds())
