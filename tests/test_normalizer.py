"""Tests for raw entry normalization."""

import copy
from datetime import datetime

from conftest import make_entry
from defense_log_exporter.normalizer import (
    deck_unit_ids,
    format_siege_date,
    normalize,
    parse_timestamp,
    result_label,
)


class TestResultLabel:
    def test_codes(self):
        assert result_label(1) == "Win"
        assert result_label(2) == "Loss"
        assert result_label(0) == "Draw/Other"
        assert result_label(3) == "Draw/Other"

    def test_absent_or_garbage(self):
        assert result_label(None) == "Draw/Other"
        assert result_label("x") == "Draw/Other"
        assert result_label(float("inf")) == "Draw/Other"


class TestTimestamps:
    def test_parse(self):
        assert parse_timestamp(1700000000) == 1700000000
        assert parse_timestamp("1700000000") == 1700000000
        assert parse_timestamp(1700000000.7) == 1700000000

    def test_parse_invalid(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp(float("inf")) is None
        assert parse_timestamp(float("-inf")) is None
        assert parse_timestamp("soon") is None
        assert parse_timestamp(True) is None

    def test_date_is_local_zero_padded(self):
        ts = 1704196800  # early January 2024
        expected = datetime.fromtimestamp(ts).strftime("%Y-%m-%d")
        assert format_siege_date(ts) == expected
        assert len(expected) == 10
        assert expected[4] == "-" and expected[7] == "-"

    def test_date_missing(self):
        assert format_siege_date(None) == "N/A"

    def test_date_out_of_range(self):
        assert format_siege_date(10 ** 20) == "N/A"


class TestDeckUnitIds:
    def test_string_key(self):
        assert deck_unit_ids({"1": [1, 2]}) == [1, 2]

    def test_int_key(self):
        assert deck_unit_ids({1: [3]}) == [3]

    def test_array_form(self):
        assert deck_unit_ids([[9], [1, 2]]) == [1, 2]

    def test_missing_or_malformed(self):
        assert deck_unit_ids(None) == []
        assert deck_unit_ids({}) == []
        assert deck_unit_ids({"2": [1]}) == []
        assert deck_unit_ids({"1": 14313}) == []
        assert deck_unit_ids([[1]]) == []


class TestNormalize:
    def test_full_entry(self, decoder):
        record = normalize(make_entry(), decoder)
        assert record.wizard_name == "Defender"
        assert record.opponent_wizard_name == "Raider"
        assert record.defending_guild == "Home Guild"
        assert record.attacking_guild == "Away Guild"
        assert record.result == "Win"
        assert record.deck_info == ("Bernard", "Lushen", "Veromos")
        assert record.timestamp == 1700000000
        assert record.siege_date == datetime.fromtimestamp(1700000000).strftime("%Y-%m-%d")

    def test_missing_names_default(self):
        entry = make_entry()
        for key in ("wizard_name", "opp_wizard_name", "guild_name", "opp_guild_name"):
            del entry[key]
        record = normalize(entry)
        assert record.wizard_name == "N/A"
        assert record.opponent_wizard_name == "N/A"
        assert record.defending_guild == "N/A"
        assert record.attacking_guild == "N/A"

    def test_empty_and_blank_names_default(self):
        record = normalize(make_entry(wizard_name="", opp_guild_name="  ", guild_name=None))
        assert record.wizard_name == "N/A"
        assert record.attacking_guild == "N/A"
        assert record.defending_guild == "N/A"

    def test_names_trimmed(self):
        assert normalize(make_entry(wizard_name="  Spaced  ")).wizard_name == "Spaced"

    def test_empty_entry_never_raises(self):
        record = normalize({})
        assert record.wizard_name == "N/A"
        assert record.result == "Draw/Other"
        assert record.deck_info == ()
        assert record.timestamp == 0
        assert record.siege_date == "N/A"

    def test_non_mapping_entry(self):
        assert normalize(None).wizard_name == "N/A"

    def test_loss(self):
        assert normalize(make_entry(win_lose=2)).result == "Loss"

    def test_timestamp_kept_in_seconds(self):
        assert normalize(make_entry(log_timestamp=1600000000)).timestamp == 1600000000

    def test_without_decoder_uses_ids(self):
        record = normalize(make_entry(view_battle_deck_info={"1": [300, 20, 1000]}))
        assert record.deck_info == ("1000", "20", "300")

    def test_infinite_timestamp(self):
        record = normalize(make_entry(log_timestamp=float("inf")))
        assert record.timestamp == 0
        assert record.siege_date == "N/A"

    def test_nan_timestamp(self):
        record = normalize(make_entry(log_timestamp=float("nan")))
        assert record.timestamp == 0
        assert record.siege_date == "N/A"

    def test_infinite_win_lose(self):
        assert normalize(make_entry(win_lose=float("inf"))).result == "Draw/Other"

    def test_input_not_mutated(self, decoder):
        entry = make_entry()
        snapshot = copy.deepcopy(entry)
        normalize(entry, decoder)
        assert entry == snapshot
