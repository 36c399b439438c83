#!/usr/bin/env python3
"""Support bundle CLI: collect scrubbed logs, config and system info into one archive."""

import argparse
import logging
import sys
from dataclasses import replace
from datetime import timedelta

from supportbundle.collector import Collector
from supportbundle.config import load_yaml_settings
from supportbundle.errors import BundleError
from supportbundle.models import CollectorOptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="support-bundle",
        description="Collect a scrubbed diagnostic bundle for support staff.",
    )
    parser.add_argument("--output", default=None,
                        help="Archive path (default: <output_dir>/support-bundle-<time>-<id>.zip)")
    parser.add_argument("--settings", default=None,
                        help="Optional YAML file overriding SUPPORT_* settings")
    parser.add_argument("--config-path", default=None, help="Application config directory")
    parser.add_argument("--data-path", default=None, help="Application data directory")
    parser.add_argument("--duration", type=float, default=None,
                        help="Hours of logs to collect (default: from settings, 24)")
    parser.add_argument("--max-log-size", type=float, default=None,
                        help="Log byte budget in MB (default: from settings, 10)")
    parser.add_argument("--no-logs", action="store_true", help="Skip log collection")
    parser.add_argument("--no-config", action="store_true", help="Skip configuration")
    parser.add_argument("--no-system-info", action="store_true", help="Skip system information")
    parser.add_argument("--verbose", action="store_true", help="Debug logging and precise journal stamps")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [support-bundle] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = load_yaml_settings(args.settings)
    except BundleError as exc:
        logger.error("Cannot load settings: %s", exc)
        return 2
    overrides = {}
    if args.config_path:
        overrides["config_path"] = args.config_path
    if args.data_path:
        overrides["data_path"] = args.data_path
    if overrides:
        settings = replace(settings, **overrides)

    duration_hours = args.duration if args.duration is not None else settings.log_duration_hours
    max_size = (int(args.max_log_size * 1024 * 1024) if args.max_log_size is not None
                else settings.max_log_size_bytes)
    options = CollectorOptions(
        include_logs=not args.no_logs,
        include_config=settings.include_config and not args.no_config,
        include_system_info=settings.include_system_info and not args.no_system_info,
        log_duration=timedelta(hours=duration_hours),
        max_log_size=max_size,
    )

    collector = Collector.from_settings(settings)
    try:
        bundle = collector.collect(options, output_path=args.output, verbose=args.verbose)
    except BundleError as exc:
        logger.error("Support bundle not created: %s", exc)
        return 1

    summary = bundle.diagnostics.log_collection.summary
    logger.info("Bundle %s: %d log entries -> %s",
                bundle.id, summary.total_entries, bundle.archive_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
