"""Configuration loading from an optional YAML file plus env var overrides."""

import os
import logging
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

PLUGIN_NAME = "Guild Defense Log Exporter"


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _section(value) -> dict:
    """Treat a missing or non-mapping YAML section as empty."""
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class PluginConfig:
    enabled: bool = True
    output_filename: str = "guild_defense_logs.json"
    tabular_filename: str = "guild_defense_logs.csv"
    append_logs: bool = True
    files_path: str = "./files"        # host-provided base directory
    monster_table: str | None = None   # YAML/JSON unit id → name table

    @property
    def structured_path(self) -> str:
        return os.path.join(self.files_path, self.output_filename)

    @property
    def tabular_path(self) -> str:
        return os.path.join(self.files_path, self.tabular_filename)


def load_yaml_config(path: str | None) -> dict:
    """Load the host-style YAML config. Returns empty dict if unavailable."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Invalid config file %s, using defaults: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    return data


def load_config(yaml_data: dict | None = None) -> PluginConfig:
    """Build PluginConfig from parsed YAML data, then env vars on top.

    YAML layout follows the host config::

        app:
          files_path: ./files
        plugins:
          Guild Defense Log Exporter:
            enabled: true
            outputFilename: guild_defense_logs.json
            tabularFilename: guild_defense_logs.csv
            appendLogs: true
            monsterTable: monsters.yaml
    """
    yaml_data = yaml_data or {}
    app = _section(yaml_data.get("app"))
    plugin = _section(_section(yaml_data.get("plugins")).get(PLUGIN_NAME))

    enabled = os.environ.get("EXPORTER_ENABLED", plugin.get("enabled", PluginConfig.enabled))
    append_logs = os.environ.get("APPEND_LOGS", plugin.get("appendLogs", PluginConfig.append_logs))

    return PluginConfig(
        enabled=_parse_bool(enabled),
        output_filename=os.environ.get(
            "OUTPUT_FILENAME", plugin.get("outputFilename") or PluginConfig.output_filename
        ),
        tabular_filename=os.environ.get(
            "TABULAR_FILENAME", plugin.get("tabularFilename") or PluginConfig.tabular_filename
        ),
        append_logs=_parse_bool(append_logs),
        files_path=os.environ.get("FILES_PATH", app.get("files_path") or PluginConfig.files_path),
        monster_table=os.environ.get("MONSTER_TABLE", plugin.get("monsterTable")),
    )


class FileConfigProvider:
    """Callable that re-reads the config file on every call."""

    def __init__(self, path: str | None):
        self._path = path

    def __call__(self) -> PluginConfig:
        return load_config(load_yaml_config(self._path))
