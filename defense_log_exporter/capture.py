"""Replay of captured proxy traffic into the exporter.

Capture files are JSON: a single exchange object or an array of them. An
exchange carries ``request``/``response`` or, as written by mitmproxy
capture addons, ``request_body``/``response_body``.
"""

import json
import logging
import time

from watchdog.events import FileSystemEventHandler

from defense_log_exporter.host import API_COMMAND_EVENT

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5


def _exchange_pair(item) -> tuple[dict, dict] | None:
    if not isinstance(item, dict):
        return None
    request = item.get("request", item.get("request_body"))
    response = item.get("response", item.get("response_body"))
    if not isinstance(request, dict) or not isinstance(response, dict):
        return None
    return request, response


def load_exchanges(path: str) -> list[tuple[dict, dict]]:
    """Read (request, response) pairs from a capture file, skipping malformed items."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.error("Failed to read capture %s: %s", path, e)
        return []

    items = data if isinstance(data, list) else [data]
    exchanges = []
    for item in items:
        pair = _exchange_pair(item)
        if pair is not None:
            exchanges.append(pair)
    if len(exchanges) < len(items):
        logger.debug("Skipped %d non-exchange item(s) in %s", len(items) - len(exchanges), path)
    return exchanges


def replay_file(proxy, path: str) -> int:
    """Emit every exchange of *path* as an apiCommand event. Returns the count."""
    exchanges = load_exchanges(path)
    for request, response in exchanges:
        proxy.emit(API_COMMAND_EVENT, request, response)
    logger.info("Replayed %d exchange(s) from %s", len(exchanges), path)
    return len(exchanges)


class CaptureWatcher(FileSystemEventHandler):
    """Replays capture files as they appear in a watched directory."""

    def __init__(self, proxy):
        super().__init__()
        self._proxy = proxy
        self._last_processed: dict[str, float] = {}

    def on_created(self, event):
        if not event.is_directory and event.src_path.endswith(".json"):
            self._handle(event.src_path)

    def on_modified(self, event):
        if not event.is_directory and event.src_path.endswith(".json"):
            self._handle(event.src_path)

    def _handle(self, filepath: str):
        now = time.time()
        last = self._last_processed.get(filepath, 0)
        if now - last < DEBOUNCE_SECONDS:
            return
        self._last_processed[filepath] = now
        replay_file(self._proxy, filepath)
