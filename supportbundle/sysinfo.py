"""Default system information collaborator: OS, runtime and disk facts with no host identifiers."""

import hashlib
import os
import platform
import shutil
import socket
from datetime import datetime, timezone

from supportbundle.paths import CONTAINER_MARKER


def system_id() -> str:
    """Stable, non-reversible identifier for this host."""
    return hashlib.sha256(socket.gethostname().encode("utf-8")).hexdigest()[:12]


def _disk_usage(path: str) -> dict:
    usage = shutil.disk_usage(path)
    return {
        "total_mb": usage.total // (1024 * 1024),
        "free_mb": usage.free // (1024 * 1024),
        "used_percent": round(usage.used / usage.total * 100, 1) if usage.total else 0.0,
    }


def collect_system_info(data_path: str = ".") -> dict:
    """Gather basic platform facts. Raises OSError if the data path cannot be inspected."""
    return {
        "collected_at": datetime.now(timezone.utc).isoformat(),
        "os": platform.system(),
        "os_release": platform.release(),
        "arch": platform.machine(),
        "python_version": platform.python_version(),
        "cpu_count": os.cpu_count(),
        "in_container": os.path.exists(CONTAINER_MARKER),
        "disk": _disk_usage(data_path),
    }
