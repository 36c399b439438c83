"""System journal collection via ``journalctl`` with a hard timeout."""

import logging
import shutil
import subprocess
from datetime import datetime, timedelta, timezone

from supportbundle.errors import JournalNotAvailableError, SourceError
from supportbundle.models import LogEntry, LogSourceDiagnostics
from supportbundle.parsers import detect_level, parse_journal_line
from supportbundle.privacy import scrub_message

logger = logging.getLogger(__name__)

JOURNAL_SOURCE = "journal"
JOURNAL_LOG_NAME = "journal.log"
NO_ENTRIES_MARKER = "-- No entries --"

# journalctl stderr fragments meaning "nothing to query here" rather than a fault
_UNAVAILABLE_MARKERS = (
    "no journal files were found",
    "failed to get journal",
    "not found",
    "no such file or directory",
)


def build_command(service: str, duration: timedelta, verbose: bool = False) -> list[str]:
    seconds = max(int(duration.total_seconds()), 0)
    return [
        "journalctl",
        "-u", service,
        "--since", f"{seconds} seconds ago",
        "--no-pager",
        "-o", "short-iso-precise" if verbose else "short-iso",
    ]


def _run_journalctl(cmd: list[str], timeout: float) -> str:
    """Run journalctl and return stdout, mapping failures onto the error taxonomy."""
    if shutil.which(cmd[0]) is None:
        raise JournalNotAvailableError("journalctl is not installed on this host")
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise JournalNotAvailableError("journalctl is not installed on this host") from exc
    except subprocess.TimeoutExpired as exc:
        # subprocess.run kills the child before raising
        raise SourceError(f"journal query timed out after {timeout:g}s") from exc
    except OSError as exc:
        raise SourceError(f"failed to run journalctl: {exc}") from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        if any(marker in stderr.lower() for marker in _UNAVAILABLE_MARKERS):
            raise JournalNotAvailableError(f"system journal not available: {stderr}")
        raise SourceError(
            f"journalctl exited with status {result.returncode}: {stderr or 'no output'}"
        )
    return result.stdout


def unit_exists(service: str, timeout: float) -> bool:
    """Ask systemd whether *service* has a unit file. Unanswerable checks count as present."""
    if shutil.which("systemctl") is None:
        return True
    try:
        result = subprocess.run(
            ["systemctl", "list-unit-files", service, "--no-legend"],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, OSError) as exc:
        logger.debug("Cannot check unit %s: %s", service, exc)
        return True
    return bool(result.stdout.strip())


def parse_journal_output(output: str, max_bytes: int | None = None,
                         now: datetime | None = None) -> tuple[list[LogEntry], bool]:
    """Turn journalctl stdout into scrubbed entries.

    Returns (entries, truncated). Lines are admitted against *max_bytes*
    until the first one that does not fit.
    """
    now = now or datetime.now(timezone.utc)
    entries = []
    used = 0
    for line in output.splitlines():
        if not line.strip() or line.startswith("-- "):
            continue
        size = len(line.encode("utf-8")) + 1
        if max_bytes is not None and used + size > max_bytes:
            return entries, True
        used += size
        ts, message = parse_journal_line(line)
        text = f"{line.split(' ', 1)[0]} {message}" if ts else line
        entries.append(LogEntry(
            source=JOURNAL_SOURCE,
            timestamp=ts or now,
            text=scrub_message(text),
            level=detect_level(message),
        ))
    return entries, False


def collect_journal_logs(duration: timedelta, verbose: bool, diagnostics: LogSourceDiagnostics,
                         *, service: str, timeout: float = 30.0,
                         max_bytes: int | None = None) -> list[LogEntry]:
    """Query the journal for *service* over the last *duration*.

    Diagnostics are written on every path. Raises JournalNotAvailableError
    when the journal or unit does not exist, SourceError for other failures.
    """
    diagnostics.start()
    cmd = build_command(service, duration, verbose)
    diagnostics.details.update(command=" ".join(cmd), service=service, timeout=timeout)
    try:
        output = _run_journalctl(cmd, timeout)
        # journalctl -u reports an unknown unit the same way as an idle one
        if NO_ENTRIES_MARKER in output and not unit_exists(service, timeout):
            raise JournalNotAvailableError(f"unit {service} does not exist on this host")
    except SourceError as exc:
        diagnostics.fail(exc)
        logger.warning("Journal collection failed: %s", exc)
        raise

    if NO_ENTRIES_MARKER in output:
        diagnostics.details["no_entries"] = True
    entries, truncated = parse_journal_output(output, max_bytes)
    diagnostics.details["truncated"] = truncated
    diagnostics.succeed(len(entries))
    logger.info("Collected %d journal entries for %s", len(entries), service)
    return entries
