"""Unit identifier → display name decoding for battle decks."""

import json
import logging

import yaml

logger = logging.getLogger(__name__)


class TableMonsterLookup:
    """Read-only unit-name reference table.

    Mirrors the host's monster mapping module: unknown ids raise KeyError.
    """

    def __init__(self, names: dict):
        self._names: dict[int, str] = {int(k): str(v) for k, v in names.items()}

    @classmethod
    def from_file(cls, path: str) -> "TableMonsterLookup":
        """Load a YAML or JSON mapping of unit id to name."""
        with open(path, "r", encoding="utf-8") as f:
            if path.endswith(".json"):
                data = json.load(f)
            else:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid monster table {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Monster table {path} is not a mapping")
        try:
            table = cls(data)
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"Monster table {path} has a non-numeric unit id: {e}") from e
        logger.info("Loaded monster table from %s (%d units)", path, len(table))
        return table

    def __len__(self) -> int:
        return len(self._names)

    def get_monster_name(self, unit_id) -> str:
        return self._names[int(unit_id)]


class DeckDecoder:
    def __init__(self, lookup=None):
        self._lookup = lookup

    def decode(self, unit_id) -> str:
        """Return the display name for *unit_id*, or its string form if unknown.

        Never raises: a missing table entry or a failing lookup is masked by
        the fallback so that no battle log is lost over a cosmetic name.
        """
        if self._lookup is None:
            return str(unit_id)
        try:
            name = self._lookup.get_monster_name(unit_id)
        except Exception as e:
            logger.debug("Unit %r not decoded: %s", unit_id, e)
            return str(unit_id)
        if not name:
            return str(unit_id)
        return str(name)

    def decode_deck(self, unit_ids) -> list[str]:
        """Decode every unit and sort the names for stable comparison."""
        return sorted(self.decode(unit_id) for unit_id in unit_ids)
