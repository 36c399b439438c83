"""Tests for journal collection, error classification and output parsing."""

import subprocess
from datetime import timedelta
from unittest import mock

import pytest

from supportbundle.errors import JournalNotAvailableError, SourceError
from supportbundle.journal import (
    JOURNAL_SOURCE,
    build_command,
    collect_journal_logs,
    parse_journal_output,
)
from supportbundle.models import LogSourceDiagnostics

SAMPLE_OUTPUT = (
    "2024-01-15T10:00:00+0000 birdhost app[123]: Started worker\n"
    "2024-01-15T10:00:01+0000 birdhost app[123]: ERROR upload to 192.168.1.50 failed for bob@example.com\n"
)


def _completed(stdout="", stderr="", returncode=0):
    return subprocess.CompletedProcess(args=["journalctl"], returncode=returncode,
                                       stdout=stdout, stderr=stderr)


def _collect(diagnostics, **kwargs):
    kwargs.setdefault("service", "app.service")
    kwargs.setdefault("timeout", 5.0)
    return collect_journal_logs(timedelta(hours=1), False, diagnostics, **kwargs)


@pytest.fixture()
def journalctl_present():
    with mock.patch("supportbundle.journal.shutil.which", return_value="/usr/bin/journalctl"):
        yield


class TestBuildCommand:
    def test_restricts_to_service_and_window(self):
        cmd = build_command("app.service", timedelta(hours=2))
        assert cmd[:3] == ["journalctl", "-u", "app.service"]
        assert "7200 seconds ago" in cmd
        assert "--no-pager" in cmd
        assert cmd[-1] == "short-iso"

    def test_verbose_uses_precise_timestamps(self):
        assert build_command("x", timedelta(minutes=1), verbose=True)[-1] == "short-iso-precise"


class TestJournalNotAvailable:
    def test_journalctl_missing(self):
        diag = LogSourceDiagnostics()
        with mock.patch("supportbundle.journal.shutil.which", return_value=None):
            with pytest.raises(JournalNotAvailableError):
                _collect(diag)
        assert diag.attempted
        assert diag.successful is False
        assert "journalctl" in diag.error
        assert diag.entries_found == 0

    def test_binary_vanishes_between_lookup_and_run(self, journalctl_present):
        diag = LogSourceDiagnostics()
        with mock.patch("supportbundle.journal.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(JournalNotAvailableError):
                _collect(diag)
        assert diag.successful is False

    def test_no_journal_files(self, journalctl_present):
        diag = LogSourceDiagnostics()
        result = _completed(stderr="No journal files were found.", returncode=1)
        with mock.patch("supportbundle.journal.subprocess.run", return_value=result):
            with pytest.raises(JournalNotAvailableError):
                _collect(diag)
        assert "not available" in diag.error

    def test_sentinel_is_a_source_error(self):
        assert issubclass(JournalNotAvailableError, SourceError)


class TestJournalFailures:
    def test_other_nonzero_exit_is_not_sentinel(self, journalctl_present):
        diag = LogSourceDiagnostics()
        result = _completed(stderr="Permission denied", returncode=1)
        with mock.patch("supportbundle.journal.subprocess.run", return_value=result):
            with pytest.raises(SourceError) as excinfo:
                _collect(diag)
        assert not isinstance(excinfo.value, JournalNotAvailableError)
        assert diag.attempted and not diag.successful
        assert "Permission denied" in diag.error

    def test_timeout(self, journalctl_present):
        diag = LogSourceDiagnostics()
        err = subprocess.TimeoutExpired(cmd=["journalctl"], timeout=5.0)
        with mock.patch("supportbundle.journal.subprocess.run", side_effect=err):
            with pytest.raises(SourceError) as excinfo:
                _collect(diag)
        assert not isinstance(excinfo.value, JournalNotAvailableError)
        assert "timed out" in diag.error

    def test_timeout_is_passed_to_subprocess(self, journalctl_present):
        with mock.patch("supportbundle.journal.subprocess.run",
                        return_value=_completed()) as run:
            _collect(LogSourceDiagnostics(), timeout=2.5)
        assert run.call_args.kwargs["timeout"] == 2.5


class TestJournalSuccess:
    def test_entries_parsed_and_scrubbed(self, journalctl_present):
        diag = LogSourceDiagnostics()
        with mock.patch("supportbundle.journal.subprocess.run",
                        return_value=_completed(SAMPLE_OUTPUT)):
            entries = _collect(diag)

        assert len(entries) == 2
        assert all(e.source == JOURNAL_SOURCE for e in entries)
        assert entries[0].timestamp.hour == 10
        assert entries[1].level == "ERROR"
        text = entries[1].text
        assert "192.168.1.50" not in text
        assert "bob@example.com" not in text
        assert "birdhost" not in text
        assert "app[123]:" in text
        assert diag.successful
        assert diag.entries_found == 2
        assert diag.details["service"] == "app.service"

    def test_no_entries_for_existing_unit_is_empty_success(self, journalctl_present):
        diag = LogSourceDiagnostics()
        responses = [
            _completed("-- No entries --\n"),
            _completed("app.service enabled enabled\n"),
        ]
        with mock.patch("supportbundle.journal.subprocess.run", side_effect=responses) as run:
            entries = _collect(diag)
        assert entries == []
        assert diag.successful
        assert diag.details["no_entries"] is True
        assert run.call_args.args[0][:3] == ["systemctl", "list-unit-files", "app.service"]

    def test_no_entries_for_missing_unit_is_sentinel(self, journalctl_present):
        diag = LogSourceDiagnostics()
        responses = [_completed("-- No entries --\n"), _completed("", returncode=1)]
        with mock.patch("supportbundle.journal.subprocess.run", side_effect=responses):
            with pytest.raises(JournalNotAvailableError):
                _collect(diag)
        assert diag.attempted and not diag.successful
        assert "app.service" in diag.error

    def test_unit_check_skipped_without_systemctl(self):
        which = {"journalctl": "/usr/bin/journalctl", "systemctl": None}
        with mock.patch("supportbundle.journal.shutil.which", side_effect=which.get), \
                mock.patch("supportbundle.journal.subprocess.run",
                           return_value=_completed("-- No entries --\n")) as run:
            entries = _collect(LogSourceDiagnostics())
        assert entries == []
        assert run.call_count == 1


class TestParseJournalOutput:
    def test_byte_budget_truncates(self):
        first_line = SAMPLE_OUTPUT.splitlines()[0]
        entries, truncated = parse_journal_output(SAMPLE_OUTPUT, max_bytes=len(first_line) + 1)
        assert len(entries) == 1
        assert truncated is True

    def test_zero_budget(self):
        entries, truncated = parse_journal_output(SAMPLE_OUTPUT, max_bytes=0)
        assert entries == []
        assert truncated

    def test_unbounded(self):
        entries, truncated = parse_journal_output(SAMPLE_OUTPUT)
        assert len(entries) == 2
        assert truncated is False

    def test_line_without_timestamp_kept(self):
        entries, _ = parse_journal_output("free form line\n")
        assert entries[0].text == "free form line"
