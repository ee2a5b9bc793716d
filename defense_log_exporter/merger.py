"""Merge new defense records into the previously saved collection."""

from defense_log_exporter.models import NormalizedRecord


def merge(existing, incoming) -> list[NormalizedRecord]:
    """Concatenate existing + incoming and drop exact duplicates.

    Two records are duplicates when every field is equal. The first
    occurrence wins, so prior records keep their place and genuinely new
    records are appended after them.
    """
    combined = list(existing or []) + list(incoming or [])
    return list(dict.fromkeys(combined))
