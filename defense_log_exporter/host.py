"""Event-subscription host: the proxy side the exporter plugs into."""

import logging
from collections import defaultdict

logger = logging.getLogger(__name__)

API_COMMAND_EVENT = "apiCommand"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ProxyHost:
    """Delivers intercepted API calls to subscribers and collects their log lines."""

    def __init__(self):
        self._subscribers: dict[str, list] = defaultdict(list)

    def on(self, event: str, callback) -> None:
        self._subscribers[event].append(callback)

    def emit(self, event: str, *args) -> int:
        """Invoke every subscriber of *event*. Returns how many were called."""
        callbacks = list(self._subscribers.get(event, ()))
        for callback in callbacks:
            try:
                callback(*args)
            except Exception:
                logger.exception("Subscriber %r failed on %s", callback, event)
        return len(callbacks)

    def log(self, entry: dict) -> None:
        level = LOG_LEVELS.get(str(entry.get("type", "info")).lower(), logging.INFO)
        logger.log(level, "[%s] %s: %s",
                   entry.get("source", "plugin"), entry.get("name", "-"), entry.get("message", ""))
