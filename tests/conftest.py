"""Shared pytest fixtures for the support bundle test suite."""

from __future__ import annotations

import os
import time
import zipfile

import pytest

from supportbundle.collector import Collector


def write_log(directory, name: str, content: str, age_seconds: float = 0.0) -> str:
    """Create a log file under *directory* with its mtime pushed *age_seconds* into the past."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(str(directory), name)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    if age_seconds:
        stamp = time.time() - age_seconds
        os.utime(path, (stamp, stamp))
    return path


def read_archive(path: str) -> dict[str, str]:
    """Return {member name: text content} for a bundle archive."""
    with zipfile.ZipFile(path) as zf:
        return {name: zf.read(name).decode("utf-8") for name in zf.namelist()}


@pytest.fixture()
def no_platform_paths(monkeypatch):
    """Restrict log discovery to the cwd, data and config roots."""
    monkeypatch.setattr("supportbundle.paths._platform_paths", lambda app_name: [])


@pytest.fixture()
def no_journal(monkeypatch):
    """Make journalctl look absent regardless of the host."""
    monkeypatch.setattr("supportbundle.journal.shutil.which", lambda name: None)


@pytest.fixture()
def workspace(tmp_path, monkeypatch, no_platform_paths):
    """Fresh cwd plus empty config, data and output directories."""
    monkeypatch.chdir(tmp_path)
    dirs = {name: tmp_path / name for name in ("config", "data", "out")}
    for d in dirs.values():
        d.mkdir()
    return dirs


@pytest.fixture()
def make_collector(workspace):
    """Factory building a Collector rooted in the test workspace."""
    def _make(**kwargs) -> Collector:
        kwargs.setdefault("app_name", "bundle-test-app")
        kwargs.setdefault("output_dir", str(workspace["out"]))
        kwargs.setdefault("system_info_provider", lambda: {"os": "TestOS", "cpu_count": 2})
        return Collector(str(workspace["config"]), str(workspace["data"]), **kwargs)
    return _make
