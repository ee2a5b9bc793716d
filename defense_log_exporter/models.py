"""Canonical guild siege defense record and its persisted form."""

from dataclasses import dataclass, field

NOT_AVAILABLE = "N/A"

WIN = "Win"
LOSS = "Loss"
DRAW_OTHER = "Draw/Other"

# (record attribute, json key, tabular header) in output order
RECORD_FIELDS = (
    ("wizard_name", "wizardName", "Wizard Name"),
    ("opponent_wizard_name", "opponentWizardName", "Opponent Wizard"),
    ("siege_date", "siegeDate", "Siege Date"),
    ("defending_guild", "defendingGuild", "Defending Guild"),
    ("attacking_guild", "attackingGuild", "Attacking Guild"),
    ("result", "result", "Result"),
    ("deck_info", "deckInfo", "Deck Info"),
    ("timestamp", "timestamp", "Timestamp"),
)

_JSON_KEYS = frozenset(key for _, key, _ in RECORD_FIELDS)


@dataclass(frozen=True)
class NormalizedRecord:
    wizard_name: str = NOT_AVAILABLE
    opponent_wizard_name: str = NOT_AVAILABLE
    siege_date: str = NOT_AVAILABLE       # yyyy-MM-dd, host-local
    defending_guild: str = NOT_AVAILABLE
    attacking_guild: str = NOT_AVAILABLE
    result: str = DRAW_OTHER
    deck_info: tuple[str, ...] = field(default_factory=tuple)   # sorted unit names
    timestamp: int = 0                    # unix seconds


def record_to_dict(record: NormalizedRecord) -> dict:
    data = {key: getattr(record, attr) for attr, key, _ in RECORD_FIELDS}
    data["deckInfo"] = list(record.deck_info)
    return data


def clean_text(value) -> str:
    """Stringify and strip *value*; absent or blank becomes N/A."""
    if value is None:
        return NOT_AVAILABLE
    text = str(value).strip()
    return text or NOT_AVAILABLE


def _int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def record_from_dict(data) -> NormalizedRecord | None:
    """Rebuild a record from its persisted JSON object.

    Returns None when *data* is not an object or shares no key with the
    record layout. Missing keys fall back to the same defaults the
    normalizer uses.
    """
    if not isinstance(data, dict) or _JSON_KEYS.isdisjoint(data):
        return None

    deck = data.get("deckInfo")
    if isinstance(deck, (list, tuple)):
        deck_info = tuple(str(unit) for unit in deck)
    else:
        deck_info = ()

    result = data.get("result")
    return NormalizedRecord(
        wizard_name=clean_text(data.get("wizardName")),
        opponent_wizard_name=clean_text(data.get("opponentWizardName")),
        siege_date=clean_text(data.get("siegeDate")),
        defending_guild=clean_text(data.get("defendingGuild")),
        attacking_guild=clean_text(data.get("attackingGuild")),
        result=result if isinstance(result, str) and result else DRAW_OTHER,
        deck_info=deck_info,
        timestamp=_int(data.get("timestamp")),
    )
