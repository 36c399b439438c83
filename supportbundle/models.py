"""Data model for collected logs, per-source diagnostics, and the final bundle."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any

from supportbundle.errors import ConfigurationError


def _jsonable(value: Any) -> Any:
    """Convert datetimes and timedeltas nested anywhere in *value* to JSON-safe forms."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class LogEntry:
    source: str          # file base name or "journal"
    timestamp: datetime
    text: str            # always scrubbed
    level: str = ""      # ERROR, WARNING, INFO, DEBUG or "" when unknown

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


@dataclass
class SearchedPath:
    path: str
    exists: bool = False
    accessible: bool = False
    file_count: int = 0


@dataclass
class LogSourceDiagnostics:
    attempted: bool = False
    successful: bool = False
    entries_found: int = 0
    error: str = ""
    paths_searched: list[SearchedPath] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    def start(self) -> None:
        self.attempted = True

    def succeed(self, entries_found: int) -> None:
        self.successful = True
        self.entries_found = entries_found

    def fail(self, error: str | BaseException, entries_found: int = 0) -> None:
        self.successful = False
        self.entries_found = entries_found
        self.error = str(error)


@dataclass
class TimeRange:
    start: datetime | None = None
    end: datetime | None = None


@dataclass
class DiagnosticSummary:
    total_entries: int = 0
    time_range: TimeRange = field(default_factory=TimeRange)


@dataclass
class DiagnosticInfo:
    attempted: bool = False
    successful: bool = False
    error: str = ""


@dataclass
class LogCollectionDiagnostics:
    journal_logs: LogSourceDiagnostics = field(default_factory=LogSourceDiagnostics)
    file_logs: LogSourceDiagnostics = field(default_factory=LogSourceDiagnostics)
    summary: DiagnosticSummary = field(default_factory=DiagnosticSummary)


@dataclass
class CollectionDiagnostics:
    log_collection: LogCollectionDiagnostics = field(default_factory=LogCollectionDiagnostics)
    config_collection: DiagnosticInfo = field(default_factory=DiagnosticInfo)
    system_collection: DiagnosticInfo = field(default_factory=DiagnosticInfo)

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


@dataclass(frozen=True)
class CollectorOptions:
    include_logs: bool = True
    include_config: bool = True
    include_system_info: bool = True
    log_duration: timedelta = timedelta(hours=24)
    max_log_size: int = 10 * 1024 * 1024  # 10 MB

    def validate(self) -> None:
        """Raise ConfigurationError unless at least one section is requested."""
        if not (self.include_logs or self.include_config or self.include_system_info):
            raise ConfigurationError(
                "at least one of logs, config or system info must be requested"
            )
        if self.max_log_size < 0:
            raise ConfigurationError(f"max_log_size must be >= 0, got {self.max_log_size}")
        if self.log_duration < timedelta(0):
            raise ConfigurationError("log_duration must not be negative")

    def to_dict(self) -> dict:
        return _jsonable(asdict(self))


@dataclass
class Bundle:
    id: str
    timestamp: datetime
    version: str
    system_id: str
    logs: list[LogEntry] = field(default_factory=list)
    config: dict | None = None
    system_info: dict | None = None
    diagnostics: CollectionDiagnostics = field(default_factory=CollectionDiagnostics)
    archive_path: str | None = None

    def metadata(self) -> dict:
        """Manifest written alongside the bundle contents."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "system_id": self.system_id,
            "log_entries": len(self.logs),
            "has_config": self.config is not None,
            "has_system_info": self.system_info is not None,
        }
