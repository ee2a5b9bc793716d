"""Raw battle-log entry → NormalizedRecord."""

import logging
from datetime import datetime

from defense_log_exporter.decoder import DeckDecoder
from defense_log_exporter.models import (
    DRAW_OTHER,
    LOSS,
    NOT_AVAILABLE,
    WIN,
    NormalizedRecord,
    clean_text,
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DECK_POSITION = "1"

_RESULTS = {1: WIN, 2: LOSS}


def result_label(win_lose) -> str:
    """Map the win/lose code: 1 → Win, 2 → Loss, anything else → Draw/Other."""
    try:
        return _RESULTS.get(int(win_lose), DRAW_OTHER)
    except (TypeError, ValueError, OverflowError):
        return DRAW_OTHER


def parse_timestamp(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return None


def format_siege_date(timestamp: int | None) -> str:
    """Format unix seconds as yyyy-MM-dd in the host's local timezone."""
    if timestamp is None:
        return NOT_AVAILABLE
    try:
        return datetime.fromtimestamp(timestamp).strftime(DATE_FORMAT)
    except (OverflowError, OSError, ValueError):
        logger.debug("Timestamp %r out of range", timestamp)
        return NOT_AVAILABLE


def deck_unit_ids(deck_info) -> list:
    """Extract the unit id list stored at deck position 1.

    The payload is loosely typed: a mapping keyed "1" (or 1), or an array
    whose index 1 holds the units. Anything else is an empty deck.
    """
    units = None
    if isinstance(deck_info, dict):
        units = deck_info.get(DECK_POSITION, deck_info.get(int(DECK_POSITION)))
    elif isinstance(deck_info, list) and len(deck_info) > int(DECK_POSITION):
        units = deck_info[int(DECK_POSITION)]
    if not isinstance(units, (list, tuple)):
        return []
    return list(units)


def normalize(entry: dict, decoder: DeckDecoder | None = None) -> NormalizedRecord:
    """Build the canonical record for one raw battle-log entry.

    Pure: the entry is only read. Missing fields never raise, they take the
    record defaults.
    """
    if decoder is None:
        decoder = DeckDecoder()
    if not isinstance(entry, dict):
        entry = {}

    timestamp = parse_timestamp(entry.get("log_timestamp"))
    deck = decoder.decode_deck(deck_unit_ids(entry.get("view_battle_deck_info")))

    return NormalizedRecord(
        wizard_name=clean_text(entry.get("wizard_name")),
        opponent_wizard_name=clean_text(entry.get("opp_wizard_name")),
        siege_date=format_siege_date(timestamp),
        defending_guild=clean_text(entry.get("guild_name")),
        attacking_guild=clean_text(entry.get("opp_guild_name")),
        result=result_label(entry.get("win_lose")),
        deck_info=tuple(deck),
        timestamp=timestamp if timestamp is not None else 0,
    )
