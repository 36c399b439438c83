"""Tests for log search path generation and deduplication."""

import os

from supportbundle.collector import Collector
from supportbundle.paths import log_search_paths, unique_paths


class TestLogSearchPaths:
    def test_base_paths_present(self):
        paths = log_search_paths("/etc/birdnet", "/var/lib/birdnet")
        for expected in ("logs", "/var/lib/birdnet/logs", "/etc/birdnet/logs"):
            assert expected in paths

    def test_order(self):
        paths = log_search_paths("/etc/app", "/var/lib/app")
        assert paths[:3] == ["logs", "/var/lib/app/logs", "/etc/app/logs"]

    def test_empty_roots_skipped(self, no_platform_paths):
        assert log_search_paths("", "") == ["logs"]

    def test_platform_extras_appended(self, monkeypatch):
        monkeypatch.setattr("supportbundle.paths._platform_paths", lambda app_name: [f"/opt/{app_name}"])
        assert log_search_paths("/c", "/d", app_name="demo")[-1] == "/opt/demo"


class TestUniquePaths:
    def test_same_directory_two_spellings(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        alias = os.path.join(str(tmp_path), "..", tmp_path.name)
        result = unique_paths([str(tmp_path), alias])
        assert result == [os.path.realpath(str(tmp_path))]

    def test_relative_and_absolute_collapse(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "logs").mkdir()
        result = unique_paths(["logs", str(tmp_path / "logs")])
        assert len(result) == 1
        assert os.path.isabs(result[0])

    def test_preserves_first_seen_order(self, tmp_path):
        a, b, c = (str(tmp_path / n) for n in ("a", "b", "c"))
        assert unique_paths([b, a, b, c, a]) == [
            os.path.realpath(b), os.path.realpath(a), os.path.realpath(c)
        ]

    def test_collector_roots_resolving_to_same_directory(self, workspace):
        data = str(workspace["data"])
        collector = Collector(os.path.join(data, "..", "data"), data)
        paths = collector.unique_log_paths()
        data_logs = os.path.realpath(os.path.join(data, "logs"))
        assert paths.count(data_logs) == 1
        assert len(paths) == len(set(paths))

    def test_empty(self):
        assert unique_paths([]) == []
