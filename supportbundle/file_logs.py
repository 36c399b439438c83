"""File log collection bounded by modification-time window and total byte budget."""

import logging
import os
from datetime import datetime, timedelta, timezone

from supportbundle.journal import JOURNAL_LOG_NAME
from supportbundle.models import LogEntry, LogSourceDiagnostics, SearchedPath
from supportbundle.parsers import detect_level, parse_timestamp
from supportbundle.privacy import scrub_message

logger = logging.getLogger(__name__)

NO_LOGS_NOTE = "No log files were found or all logs were older than the specified duration."


class LogFileCollector:
    """Collects scrubbed log lines from a list of directories.

    One instance serves a single collection call: ``total_size`` and the
    exhausted flag only ever grow, so a rejected file ends collection for
    the rest of the call.
    """

    def __init__(self, log_duration: timedelta, max_size: int, now: datetime | None = None):
        now = now or datetime.now(timezone.utc)
        self.cutoff_time = now - log_duration
        self.max_size = max_size
        self.total_size = 0
        self.exhausted = False
        self._stats = {
            "files_collected": 0,
            "skipped_name": 0,
            "skipped_old": 0,
            "skipped_size": 0,
        }
        self._used_names = {JOURNAL_LOG_NAME}

    @staticmethod
    def is_log_file(name: str) -> bool:
        """True if the lowercased base name ends with "log" (``app.log``, ``mylog``, ``x.debuglog``)."""
        return os.path.basename(name).lower().endswith("log")

    def is_within_time_range(self, mod_time: datetime) -> bool:
        """Only the lower bound is enforced; future timestamps are kept."""
        return mod_time >= self.cutoff_time

    def can_add_file(self, size: int) -> bool:
        return self.total_size + size <= self.max_size

    def admit(self, size: int) -> bool:
        """Reserve *size* bytes of budget. The first rejection is final."""
        if self.exhausted:
            return False
        if not self.can_add_file(size):
            self.exhausted = True
            return False
        self.total_size += size
        return True

    def collect(self, paths: list[str], diagnostics: LogSourceDiagnostics) -> list[LogEntry]:
        """Scan each directory in *paths* and return scrubbed entries.

        Every directory visited is recorded in ``diagnostics.paths_searched``.
        Per-directory and per-file errors are recorded, never raised.
        """
        diagnostics.start()
        entries: list[LogEntry] = []
        errors: list[str] = []

        for path in paths:
            entries.extend(self._scan_directory(path, diagnostics, errors))

        diagnostics.details.update(
            cutoff_time=self.cutoff_time.isoformat(),
            max_size=self.max_size,
            total_size=self.total_size,
            **self._stats,
        )
        if entries or not errors:
            diagnostics.succeed(len(entries))
            diagnostics.error = "; ".join(errors)
        else:
            diagnostics.fail("; ".join(errors))

        logger.info(
            "Searched %d log path(s): %d entries from %d file(s), %d/%d bytes",
            len(paths), len(entries), self._stats["files_collected"],
            self.total_size, self.max_size,
        )
        return entries

    def _scan_directory(self, path: str, diagnostics: LogSourceDiagnostics,
                        errors: list[str]) -> list[LogEntry]:
        searched = SearchedPath(path=path, exists=os.path.exists(path))
        diagnostics.paths_searched.append(searched)
        if not searched.exists:
            logger.debug("Log path does not exist: %s", path)
            return []

        try:
            with os.scandir(path) as it:
                candidates = [e for e in it if e.is_file(follow_symlinks=True)]
        except NotADirectoryError:
            errors.append(f"{path}: not a directory")
            return []
        except OSError as exc:
            logger.warning("Cannot read log directory %s: %s", path, exc)
            errors.append(f"{path}: {exc.strerror or exc}")
            return []

        searched.accessible = True
        log_files = []
        for entry in candidates:
            if not self.is_log_file(entry.name):
                self._stats["skipped_name"] += 1
                continue
            try:
                st = entry.stat()
            except OSError as exc:
                errors.append(f"{entry.path}: {exc.strerror or exc}")
                continue
            log_files.append((entry.path, st))
        searched.file_count = len(log_files)

        # Newest first so the byte budget goes to the most recent logs.
        log_files.sort(key=lambda item: item[1].st_mtime, reverse=True)

        entries = []
        for file_path, st in log_files:
            mod_time = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
            if not self.is_within_time_range(mod_time):
                self._stats["skipped_old"] += 1
                logger.debug("Skipping %s: modified %s before cutoff", file_path, mod_time)
                continue
            if not self.admit(st.st_size):
                self._stats["skipped_size"] += 1
                logger.debug("Skipping %s: %d bytes exceeds remaining budget", file_path, st.st_size)
                continue
            try:
                entries.extend(self._read_file(file_path, st.st_size, mod_time))
            except OSError as exc:
                logger.warning("Cannot read log file %s: %s", file_path, exc)
                errors.append(f"{file_path}: {exc.strerror or exc}")
                continue
            self._stats["files_collected"] += 1
        return entries

    def _read_file(self, file_path: str, size: int, mod_time: datetime) -> list[LogEntry]:
        """Read at most *size* bytes (the admitted amount) and scrub each line."""
        with open(file_path, "rb") as f:
            data = f.read(size)
        source = self._source_name(file_path)
        entries = []
        # continuation lines (tracebacks) inherit the previous timestamp
        last_ts = mod_time
        for line in data.decode("utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            last_ts = parse_timestamp(line) or last_ts
            entries.append(LogEntry(
                source=source,
                timestamp=last_ts,
                text=scrub_message(line),
                level=detect_level(line),
            ))
        return entries

    def _source_name(self, file_path: str) -> str:
        """Archive-unique name for a file: ``app.log``, then ``app-2.log`` for a second ``app.log``."""
        name = os.path.basename(file_path)
        stem, ext = os.path.splitext(name)
        candidate, n = name, 1
        while candidate in self._used_names:
            n += 1
            candidate = f"{stem}-{n}{ext}"
        self._used_names.add(candidate)
        return candidate
