"""Selection of defense entries from a siege battle-log batch."""

from defense_log_exporter.decoder import DeckDecoder
from defense_log_exporter.models import NormalizedRecord
from defense_log_exporter.normalizer import normalize

DEFENSE_LOG_TYPES = (2, 4)


def is_defense_log(entry) -> bool:
    if not isinstance(entry, dict):
        return False
    log_type = entry.get("log_type")
    return not isinstance(log_type, bool) and log_type in DEFENSE_LOG_TYPES


def filter_defense_logs(batch, decoder: DeckDecoder | None = None) -> list[NormalizedRecord]:
    """Normalize the defense entries (log_type 2 or 4) of *batch*, in order.

    Other entries are dropped without diagnostics; an empty or missing batch
    yields an empty list.
    """
    if decoder is None:
        decoder = DeckDecoder()
    return [normalize(entry, decoder) for entry in batch or [] if is_defense_log(entry)]
