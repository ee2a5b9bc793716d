"""Structured (JSON) and tabular (CSV) persistence of defense records."""

import json
import logging
import os
import tempfile
import threading
from contextlib import ExitStack
from dataclasses import dataclass

from defense_log_exporter.merger import merge
from defense_log_exporter.models import (
    RECORD_FIELDS,
    NormalizedRecord,
    record_from_dict,
    record_to_dict,
)

logger = logging.getLogger(__name__)

_locks_guard = threading.Lock()
_path_locks: dict[str, threading.Lock] = {}


def _lock_for(path: str) -> threading.Lock:
    """Return the process-wide lock serializing writers of *path*."""
    key = os.path.abspath(path)
    with _locks_guard:
        lock = _path_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _path_locks[key] = lock
        return lock


@dataclass
class WriteResult:
    record_count: int
    structured_path: str
    tabular_path: str
    structured_error: str | None = None
    tabular_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.structured_error is None and self.tabular_error is None


def load_records(path: str) -> list[NormalizedRecord]:
    """Load the saved structured collection. Unreadable state counts as empty."""
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable defense log file %s: %s", path, e)
        return []

    if not isinstance(data, list):
        logger.warning("Ignoring defense log file %s: expected a JSON array, got %s",
                       path, type(data).__name__)
        return []

    records = []
    skipped = 0
    for item in data:
        record = record_from_dict(item)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.warning("Skipped %d malformed item(s) in %s", skipped, path)
    return records


def _format_cell(value) -> str:
    if isinstance(value, (list, tuple)):
        value = ",".join(str(v) for v in value)
    elif value is None:
        value = ""
    cell = str(value).replace('"', '""')
    return f'"{cell}"'


def render_tabular(records) -> str:
    """Render records as CSV: fixed header, every field quoted, no trailing newline."""
    lines = [",".join(header for _, _, header in RECORD_FIELDS)]
    for record in records:
        row = record_to_dict(record)
        lines.append(",".join(_format_cell(row[key]) for _, key, _ in RECORD_FIELDS))
    return "\n".join(lines)


def render_structured(records) -> str:
    return json.dumps([record_to_dict(r) for r in records], indent=2, ensure_ascii=False)


def atomic_write_text(path: str, text: str) -> None:
    """Write *text* to a temp file beside *path*, then move it into place."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class RecordStore:
    """Owner of the persisted defense log collection.

    A write is read-modify-write under per-path locks, so concurrent writers
    targeting the same files are strictly ordered and never lose each
    other's records. The JSON and CSV files are written independently: one
    failing does not stop the other, and a crash between them can leave the
    two out of step.
    """

    def __init__(self, structured_path: str, tabular_path: str):
        self.structured_path = structured_path
        self.tabular_path = tabular_path

    def load(self) -> list[NormalizedRecord]:
        with _lock_for(self.structured_path):
            return load_records(self.structured_path)

    def write(self, records, append: bool = True) -> WriteResult:
        paths = sorted({os.path.abspath(self.structured_path), os.path.abspath(self.tabular_path)})
        with ExitStack() as stack:
            for path in paths:
                stack.enter_context(_lock_for(path))

            existing = load_records(self.structured_path) if append else []
            merged = merge(existing, records)
            result = WriteResult(
                record_count=len(merged),
                structured_path=self.structured_path,
                tabular_path=self.tabular_path,
            )

            try:
                atomic_write_text(self.structured_path, render_structured(merged))
            except (OSError, TypeError, ValueError) as e:
                logger.error("Failed to write %s: %s", self.structured_path, e)
                result.structured_error = str(e)

            try:
                atomic_write_text(self.tabular_path, render_tabular(merged))
            except (OSError, TypeError, ValueError) as e:
                logger.error("Failed to write %s: %s", self.tabular_path, e)
                result.tabular_error = str(e)

        logger.debug("Wrote %d record(s) (existing=%d, incoming=%d)",
                     len(merged), len(existing), len(records))
        return result
