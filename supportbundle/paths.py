"""Candidate log directory discovery and absolute-path deduplication."""

import logging
import os
import sys

logger = logging.getLogger(__name__)

CONTAINER_MARKER = "/.dockerenv"


def _platform_paths(app_name: str) -> list[str]:
    """Extra log locations that only exist on some platforms."""
    extras = []
    if sys.platform.startswith("linux"):
        extras.append(os.path.join("/var/log", app_name))
        if os.path.exists(CONTAINER_MARKER):
            extras.extend(["/data/logs", "/config/logs"])
    elif sys.platform == "darwin":
        extras.append(os.path.expanduser(os.path.join("~/Library/Logs", app_name)))
    elif sys.platform == "win32":
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            extras.append(os.path.join(local_app_data, app_name, "logs"))
    return extras


def log_search_paths(config_path: str, data_path: str, app_name: str = "app") -> list[str]:
    """Ordered candidate log directories: cwd-relative ``logs``, data, config, platform extras."""
    paths = ["logs"]
    if data_path:
        paths.append(os.path.join(data_path, "logs"))
    if config_path:
        paths.append(os.path.join(config_path, "logs"))
    paths.extend(_platform_paths(app_name))
    return paths


def unique_paths(paths: list[str]) -> list[str]:
    """Resolve each path to absolute form and drop later duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for path in paths:
        resolved = os.path.realpath(os.path.abspath(path))
        if resolved in seen:
            logger.debug("Skipping duplicate log path %s (resolves to %s)", path, resolved)
            continue
        seen.add(resolved)
        result.append(resolved)
    return result
