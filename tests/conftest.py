import pytest

from defense_log_exporter.config import PluginConfig
from defense_log_exporter.decoder import DeckDecoder, TableMonsterLookup


def make_entry(**overrides) -> dict:
    entry = {
        "wizard_name": "Defender",
        "opp_wizard_name": "Raider",
        "guild_name": "Home Guild",
        "opp_guild_name": "Away Guild",
        "win_lose": 1,
        "log_timestamp": 1700000000,
        "log_type": 2,
        "view_battle_deck_info": {"1": [14313, 15105, 13413]},
    }
    entry.update(overrides)
    return entry


def make_response(*entries) -> dict:
    return {"log_list": [{"battle_log_list": list(entries)}]}


@pytest.fixture
def lookup():
    return TableMonsterLookup({14313: "Lushen", 15105: "Veromos", 13413: "Bernard"})


@pytest.fixture
def decoder(lookup):
    return DeckDecoder(lookup)


@pytest.fixture
def plugin_config(tmp_path):
    return PluginConfig(files_path=str(tmp_path / "files"))
