"""Timestamp and severity extraction for raw log and journal lines."""

import re
from datetime import datetime, timezone

# 2024-01-15 10:00:00, 2024-01-15T10:00:00.123+0000, 2024-01-15T10:00:00Z
TIMESTAMP_PATTERN = re.compile(
    r"^\[?(\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?)(Z|[+-]\d{2}:?\d{2})?\]?"
)

# Earliest severity token in the line wins.
LEVEL_PATTERN = re.compile(
    r"\b(FATAL|PANIC|CRITICAL|CRIT|ERROR|ERR|WARNING|WARN|INFO|NOTICE|DEBUG|TRACE)\b"
)
LEVEL_ALIASES = {
    "FATAL": "ERROR",
    "PANIC": "ERROR",
    "CRITICAL": "ERROR",
    "CRIT": "ERROR",
    "ERR": "ERROR",
    "WARN": "WARNING",
    "NOTICE": "INFO",
    "TRACE": "DEBUG",
}


def parse_timestamp(line: str) -> datetime | None:
    """Parse a leading ISO-like timestamp. Naive stamps are taken as local time."""
    match = TIMESTAMP_PATTERN.match(line.strip())
    if not match:
        return None
    stamp, offset = match.group(1), match.group(2)
    stamp = stamp.replace(",", ".").replace(" ", "T")
    if "." in stamp:
        # fromisoformat only accepts 3 or 6 fractional digits on older interpreters
        head, frac = stamp.split(".", 1)
        stamp = f"{head}.{frac[:6].ljust(6, '0')}"
    if offset == "Z":
        offset = "+00:00"
    elif offset and ":" not in offset:
        offset = f"{offset[:3]}:{offset[3:]}"
    try:
        parsed = datetime.fromisoformat(stamp + (offset or ""))
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        # shifting to UTC can leave the supported year range at its edges
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def detect_level(line: str) -> str:
    """Return the normalized severity mentioned in *line*, or "" when none is found."""
    match = LEVEL_PATTERN.search(line)
    if not match:
        return ""
    token = match.group(1)
    return LEVEL_ALIASES.get(token, token)


def parse_journal_line(line: str) -> tuple[datetime | None, str]:
    """Split a ``journalctl -o short-iso`` line into (timestamp, message).

    Example input::

        2024-01-15T10:00:00+0000 host app[123]: Started worker

    gives the message ``app[123]: Started worker``; the hostname is dropped.
    Lines that do not start with a timestamp are returned whole with no
    timestamp.
    """
    parts = line.split(" ", 2)
    ts = parse_timestamp(parts[0])
    if ts is None:
        return None, line
    return ts, parts[2] if len(parts) > 2 else ""
