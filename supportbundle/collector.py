"""Collector: orchestrates log, config and system collection into a diagnosed bundle."""

import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Callable

import yaml

from supportbundle.archive import BundleAssembler
from supportbundle.config import DEFAULT_SENSITIVE_KEYS, Settings
from supportbundle.errors import JournalNotAvailableError, SourceError
from supportbundle.file_logs import LogFileCollector
from supportbundle.journal import collect_journal_logs
from supportbundle.models import (
    Bundle,
    CollectionDiagnostics,
    CollectorOptions,
    DiagnosticInfo,
    LogCollectionDiagnostics,
    LogEntry,
    TimeRange,
)
from supportbundle.paths import log_search_paths, unique_paths
from supportbundle.scrubber import scrub_config
from supportbundle.sysinfo import collect_system_info, system_id

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"

# Failures a config loader or system info provider may raise; anything else is a bug.
COLLABORATOR_ERRORS = (OSError, ValueError, yaml.YAMLError, SourceError)


def load_config_file(config_path: str) -> dict:
    """Load ``config.yaml`` from *config_path*. Raises FileNotFoundError / ValueError."""
    path = os.path.join(config_path, CONFIG_FILENAME)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


class Collector:
    """Builds support bundles for one application.

    Holds only static configuration; every call to :meth:`collect` keeps its
    own counters and diagnostics, so one instance can serve concurrent calls.
    """

    def __init__(self, config_path: str, data_path: str, *,
                 app_name: str = "app",
                 version: str = "0.1.0",
                 service_name: str | None = None,
                 sensitive_keys=DEFAULT_SENSITIVE_KEYS,
                 output_dir: str = ".",
                 journal_timeout: float = 30.0,
                 config_loader: Callable[[str], dict] | None = None,
                 system_info_provider: Callable[[], dict] | None = None,
                 assembler: BundleAssembler | None = None):
        self.config_path = config_path
        self.data_path = data_path
        self.app_name = app_name
        self.version = version
        self.service_name = service_name or f"{app_name}.service"
        self.sensitive_keys = tuple(sensitive_keys)
        self.output_dir = output_dir
        self.journal_timeout = journal_timeout
        self._config_loader = config_loader or load_config_file
        self._system_info_provider = system_info_provider or (
            lambda: collect_system_info(self.data_path)
        )
        self._assembler = assembler or BundleAssembler()

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "Collector":
        return cls(
            settings.config_path,
            settings.data_path,
            app_name=settings.app_name,
            version=settings.version,
            service_name=settings.journal_unit,
            sensitive_keys=settings.sensitive_keys,
            output_dir=settings.output_dir,
            journal_timeout=settings.journal_timeout,
            **kwargs,
        )

    def log_search_paths(self) -> list[str]:
        return log_search_paths(self.config_path, self.data_path, self.app_name)

    def unique_log_paths(self) -> list[str]:
        return unique_paths(self.log_search_paths())

    def scrub_config(self, config: dict) -> dict:
        return scrub_config(config, self.sensitive_keys)

    def collect(self, options: CollectorOptions, output_path: str | None = None,
                verbose: bool = False, timeout: float | None = None) -> Bundle:
        """Collect the requested sections and write the bundle archive.

        *timeout* bounds the journal query for this call only and defaults
        to ``journal_timeout``.

        Raises ConfigurationError if nothing was requested and AssemblyError
        if the archive cannot be written. Every other failure is recorded in
        ``bundle.diagnostics``.
        """
        options.validate()

        now = datetime.now(timezone.utc)
        bundle = Bundle(
            id=str(uuid.uuid4()),
            timestamp=now,
            version=self.version,
            system_id=system_id(),
            diagnostics=CollectionDiagnostics(),
        )
        logger.info("Collecting support bundle %s", bundle.id)

        if options.include_logs:
            bundle.logs = self._collect_logs(options, bundle.diagnostics.log_collection,
                                             now, verbose, timeout)
        if options.include_config:
            bundle.config = self._collect_config(bundle.diagnostics.config_collection)
        if options.include_system_info:
            bundle.system_info = self._collect_system_info(bundle.diagnostics.system_collection)

        if output_path is None:
            stamp = now.strftime("%Y%m%dT%H%M%SZ")
            output_path = os.path.join(
                self.output_dir, f"support-bundle-{stamp}-{bundle.id[:8]}.zip"
            )
        bundle.archive_path = self._assembler.write(bundle, output_path, options)
        return bundle

    def _collect_logs(self, options: CollectorOptions, diag: LogCollectionDiagnostics,
                      now: datetime, verbose: bool,
                      timeout: float | None = None) -> list[LogEntry]:
        file_collector = LogFileCollector(options.log_duration, options.max_log_size, now=now)
        logs = file_collector.collect(self.unique_log_paths(), diag.file_logs)

        remaining = max(options.max_log_size - file_collector.total_size, 0)
        try:
            logs.extend(collect_journal_logs(
                options.log_duration, verbose, diag.journal_logs,
                service=self.service_name,
                timeout=self.journal_timeout if timeout is None else timeout,
                max_bytes=remaining,
            ))
        except JournalNotAvailableError as exc:
            logger.info("Skipping journal logs: %s", exc)
        except SourceError as exc:
            logger.warning("Journal logs not collected: %s", exc)

        diag.summary.total_entries = len(logs)
        diag.summary.time_range = TimeRange(start=now - options.log_duration, end=now)
        return logs

    def _collect_config(self, diag: DiagnosticInfo) -> dict | None:
        diag.attempted = True
        try:
            raw = self._config_loader(self.config_path)
        except FileNotFoundError as exc:
            diag.error = f"config file not found: {exc.filename}"
            logger.warning("Configuration not collected: %s", diag.error)
            return None
        except COLLABORATOR_ERRORS as exc:
            diag.error = f"failed to load config: {exc}"
            logger.warning("Configuration not collected: %s", diag.error)
            return None
        scrubbed = self.scrub_config(raw)
        diag.successful = True
        return scrubbed

    def _collect_system_info(self, diag: DiagnosticInfo) -> dict | None:
        diag.attempted = True
        try:
            info = self._system_info_provider()
        except COLLABORATOR_ERRORS as exc:
            diag.error = f"failed to collect system info: {exc}"
            logger.warning("System info not collected: %s", diag.error)
            return None
        diag.successful = True
        return info
