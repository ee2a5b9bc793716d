#!/usr/bin/env python3
"""Guild Defense Log Exporter entry point."""

import sys
import os
import time
import signal
import argparse
import logging

from watchdog.observers import Observer

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from defense_log_exporter.capture import CaptureWatcher, replay_file
from defense_log_exporter.config import FileConfigProvider
from defense_log_exporter.handler import DefenseLogExporter
from defense_log_exporter.host import ProxyHost

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [DEFENSE-LOG] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

_running = True


def _signal_handler(sig, frame):
    global _running
    logger.info("Shutdown signal received, stopping...")
    _running = False


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Guild Defense Log Exporter")
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file (re-read for every API call)",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--replay", nargs="+", metavar="FILE",
        help="Captured API exchange files to replay once",
    )
    source.add_argument(
        "--watch-dir", metavar="DIR",
        help="Directory to watch for new capture files",
    )
    return parser


def main(argv=None):
    args = build_cli_parser().parse_args(argv)

    proxy = ProxyHost()
    exporter = DefenseLogExporter(FileConfigProvider(args.config))
    exporter.init(proxy)

    if args.replay:
        total = sum(replay_file(proxy, path) for path in args.replay)
        logger.info("Replayed %d exchange(s) from %d file(s)", total, len(args.replay))
        return

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    os.makedirs(args.watch_dir, exist_ok=True)
    observer = Observer()
    observer.schedule(CaptureWatcher(proxy), args.watch_dir, recursive=False)
    observer.start()
    logger.info("Guild Defense Log Exporter running. Watching: %s", args.watch_dir)

    try:
        while _running:
            time.sleep(1)
    except KeyboardInterrupt:
        pass

    logger.info("Shutting down...")
    observer.stop()
    observer.join(timeout=5)
    logger.info("Guild Defense Log Exporter stopped.")


if __name__ == "__main__":
    main()
