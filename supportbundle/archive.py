"""Bundle assembly: writes logs, config, system info and diagnostics into one zip archive."""

import json
import logging
import os
import tempfile
import zipfile

import yaml

from supportbundle.errors import AssemblyError
from supportbundle.file_logs import NO_LOGS_NOTE
from supportbundle.journal import JOURNAL_LOG_NAME, JOURNAL_SOURCE
from supportbundle.models import Bundle, CollectorOptions, LogEntry

logger = logging.getLogger(__name__)

LOGS_README = "logs/README.txt"
NO_CONFIG_NOTE = "Configuration was requested but could not be collected. See diagnostics.json."
NO_SYSTEM_INFO_NOTE = "System information was requested but could not be collected. See diagnostics.json."


def add_no_logs_note(zf: zipfile.ZipFile) -> None:
    zf.writestr(LOGS_README, NO_LOGS_NOTE)


def group_by_source(entries: list[LogEntry]) -> dict[str, list[str]]:
    """Map archive file name -> scrubbed lines, preserving collection order."""
    grouped: dict[str, list[str]] = {}
    for entry in entries:
        name = JOURNAL_LOG_NAME if entry.source == JOURNAL_SOURCE else entry.source
        grouped.setdefault(name, []).append(entry.text)
    return grouped


class BundleAssembler:
    """Serializes a collected Bundle into the on-disk archive layout."""

    def write(self, bundle: Bundle, output_path: str, options: CollectorOptions) -> str:
        """Write *bundle* to *output_path* atomically and return the path.

        Raises AssemblyError if the archive cannot be produced.
        """
        out_dir = os.path.dirname(os.path.abspath(output_path))
        tmp = None
        try:
            os.makedirs(out_dir, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=out_dir, suffix=".zip.tmp")
            with os.fdopen(fd, "wb") as raw, \
                    zipfile.ZipFile(raw, "w", zipfile.ZIP_DEFLATED) as zf:
                self._write_contents(zf, bundle, options)
            os.replace(tmp, output_path)
        except (OSError, zipfile.BadZipFile, yaml.YAMLError, TypeError, ValueError) as exc:
            if tmp and os.path.exists(tmp):
                os.unlink(tmp)
            raise AssemblyError(f"cannot write bundle archive {output_path}: {exc}") from exc

        logger.info("Support bundle written to %s", output_path)
        return output_path

    def _write_contents(self, zf: zipfile.ZipFile, bundle: Bundle,
                        options: CollectorOptions) -> None:
        metadata = bundle.metadata()
        metadata["options"] = options.to_dict()
        zf.writestr("metadata.json", json.dumps(metadata, indent=2))
        zf.writestr("diagnostics.json", json.dumps(bundle.diagnostics.to_dict(), indent=2))

        if options.include_logs:
            self._write_logs(zf, bundle.logs)

        if options.include_config:
            if bundle.config is not None:
                zf.writestr(
                    "config/config.yaml",
                    yaml.safe_dump(bundle.config, sort_keys=False, allow_unicode=True),
                )
            else:
                zf.writestr("config/README.txt", NO_CONFIG_NOTE)

        if options.include_system_info:
            if bundle.system_info:
                zf.writestr(
                    "system/system_info.json",
                    json.dumps(bundle.system_info, indent=2, default=str),
                )
            else:
                zf.writestr("system/README.txt", NO_SYSTEM_INFO_NOTE)

    def _write_logs(self, zf: zipfile.ZipFile, entries: list[LogEntry]) -> None:
        if not entries:
            add_no_logs_note(zf)
            return
        for name, lines in group_by_source(entries).items():
            zf.writestr(f"logs/{name}", "\n".join(lines) + "\n")
