"""Guild siege defense log exporter: the per-API-call entry point."""

import logging

from defense_log_exporter.config import PLUGIN_NAME, PluginConfig
from defense_log_exporter.decoder import DeckDecoder, TableMonsterLookup
from defense_log_exporter.filters import filter_defense_logs
from defense_log_exporter.host import API_COMMAND_EVENT
from defense_log_exporter.persistence import RecordStore

logger = logging.getLogger(__name__)

SIEGE_LOG_COMMAND = "GetGuildSiegeBattleLog"
SIEGE_LOG_TYPE = 2


def extract_battle_logs(response) -> list:
    """Return response["log_list"][0]["battle_log_list"], or [] if any level is missing."""
    if not isinstance(response, dict):
        return []
    log_list = response.get("log_list")
    if not isinstance(log_list, list) or not log_list:
        return []
    first = log_list[0]
    if not isinstance(first, dict):
        return []
    battles = first.get("battle_log_list")
    if not isinstance(battles, list):
        return []
    return battles


class DefenseLogExporter:
    def __init__(self, config_provider, decoder: DeckDecoder | None = None):
        self._config_provider = config_provider
        self._decoder = decoder
        self._table_path = None
        self._table_decoder = None
        self._proxy = None

    def init(self, proxy) -> None:
        self._proxy = proxy
        proxy.on(API_COMMAND_EVENT, self.on_api_event)

    def _log(self, level: str, message: str) -> None:
        if self._proxy is None:
            logger.info("%s", message)
            return
        self._proxy.log({
            "type": level,
            "source": "plugin",
            "name": PLUGIN_NAME,
            "message": message,
        })

    def _decoder_for(self, config: PluginConfig) -> DeckDecoder:
        if self._decoder is not None:
            return self._decoder
        if config.monster_table != self._table_path:
            lookup = None
            if config.monster_table:
                try:
                    lookup = TableMonsterLookup.from_file(config.monster_table)
                except (OSError, ValueError) as e:
                    self._log("warning", f"Monster table {config.monster_table} unavailable: {e}")
            self._table_path = config.monster_table
            self._table_decoder = DeckDecoder(lookup)
        if self._table_decoder is None:
            self._table_decoder = DeckDecoder()
        return self._table_decoder

    def on_api_event(self, request, response) -> None:
        """Handle one intercepted API call. Never raises into the host."""
        try:
            config = self._config_provider()
            if not config.enabled:
                return
            if not isinstance(request, dict):
                return
            if request.get("command") != SIEGE_LOG_COMMAND or request.get("log_type") != SIEGE_LOG_TYPE:
                return

            self._log("info", f"Detected {SIEGE_LOG_COMMAND} (log_type {SIEGE_LOG_TYPE}) response.")
            self.export_defense_logs(request, response, config)
        except Exception as e:
            logger.exception("Unexpected failure handling siege battle log")
            self._log("error", f"Failed to process siege battle log: {e}")

    def export_defense_logs(self, request: dict, response, config: PluginConfig) -> None:
        wizard_id = request.get("wizard_id")
        battles = extract_battle_logs(response)
        if not battles:
            self._log("info", f"No siege battle logs in response for wizard {wizard_id}.")
            return

        records = filter_defense_logs(battles, self._decoder_for(config))
        if not records:
            self._log("info", "Received siege logs, but found no new defense logs to save.")
            return

        logger.debug("Wizard %s: %d defense log(s) of %d entries", wizard_id, len(records), len(battles))
        store = RecordStore(config.structured_path, config.tabular_path)
        result = store.write(records, append=config.append_logs)

        if result.structured_error is None:
            self._log("success", f"Saved {result.record_count} defense logs to {result.structured_path}")
        else:
            self._log("error", f"Failed to save defense logs to json: {result.structured_error}")
        if result.tabular_error is None:
            self._log("success", f"Saved {result.record_count} defense logs to {result.tabular_path}")
        else:
            self._log("error", f"Failed to save defense logs to csv: {result.tabular_error}")
