# context/tests/test_defense_normalizer.py
"""Tests for the defense-ranking schema normalizer."""

import json

import pytest

from context.defense import (
    DefenseRankEntry,
    coerce_payload,
    coerce_rows,
    index_by_team,
    normalize_defense_ranks,
    parse_defense_csv,
    pick_team_abbr,
    pick_value,
    to_number,
)


class TestPayloadShapes:
    """Each supported layout yields the same entries."""

    def test_plain_json_array(self):
        payload = json.dumps([{"teamAbbr": "BAL", "overall": 1, "QB": 3, "RB": 2, "WR": 5, "TE": 7}])
        entries = normalize_defense_ranks(payload)
        assert entries == [DefenseRankEntry("BAL", 1.0, 3.0, 2.0, 5.0, 7.0)]

    @pytest.mark.parametrize("wrapper", ["data", "results", "ranks", "rankings", "list"])
    def test_wrapped_json_array(self, wrapper):
        payload = {wrapper: [{"team": "SF", "rank": 2}]}
        entries = normalize_defense_ranks(payload)
        assert [e.team_abbr for e in entries] == ["SF"]
        assert entries[0].overall == 2.0

    def test_csv_text(self):
        text = "Team,Overall,QB,RB,WR,TE\nCLE,3,4,5,6,7\nPIT,4,1,2,3,4\n"
        entries = normalize_defense_ranks(text)
        assert [e.team_abbr for e in entries] == ["CLE", "PIT"]
        assert entries[0].QB == 4.0

    def test_csv_with_quoted_commas(self):
        rows = parse_defense_csv('team,name,overall\nNYJ,"Jets, New York",5\n')
        assert rows[0]["name"] == "Jets, New York"
        assert rows[0]["overall"] == "5"

    def test_bytes_payload(self):
        entries = normalize_defense_ranks(b'[{"abbr": "kc", "overall": 6}]')
        assert entries[0].team_abbr == "KC"

    def test_empty_and_garbage_payloads(self):
        assert normalize_defense_ranks("") == []
        assert normalize_defense_ranks(None) == []
        assert normalize_defense_ranks({"unexpected": 1}) == []


class TestWeightedOverallFallback:
    """Overall rank derived from positional ranks when absent."""

    def test_default_weights(self):
        """QB 10, RB 20, WR 5, TE 30 under defaults -> 14.5."""
        entries = normalize_defense_ranks([{"team": "DAL", "QB": 10, "RB": 20, "WR": 5, "TE": 30}])
        assert entries[0].overall == pytest.approx(14.5)

    def test_missing_positions_excluded(self):
        """Only present positions contribute; absent ones are filled with 16."""
        entries = normalize_defense_ranks([{"team": "DAL", "QB": 10, "RB": 20}])
        assert entries[0].overall == pytest.approx((10 * 0.2 + 20 * 0.4) / 0.6)
        assert entries[0].WR == 16.0
        assert entries[0].TE == 16.0

    def test_no_ranks_at_all(self):
        entries = normalize_defense_ranks([{"team": "DAL"}])
        assert entries[0].overall == 16.0

    def test_custom_weights(self):
        weights = {"QB": 1.0, "RB": 0.0, "WR": 0.0, "TE": 0.0}
        entries = normalize_defense_ranks([{"team": "DAL", "QB": 9, "RB": 30}], weights)
        assert entries[0].overall == pytest.approx(9.0)


class TestRecordFiltering:
    """Malformed records are dropped individually."""

    def test_record_without_team_dropped(self):
        payload = [
            {"overall": 1, "QB": 1, "RB": 1, "WR": 1, "TE": 1},
            {"team": "MIA", "overall": 2},
        ]
        entries = normalize_defense_ranks(payload)
        assert [e.team_abbr for e in entries] == ["MIA"]

    def test_non_mapping_records_dropped(self):
        entries = normalize_defense_ranks([None, "BUF", 5, {"team": "BUF", "overall": 8}])
        assert [e.team_abbr for e in entries] == ["BUF"]

    def test_non_numeric_rank_treated_as_missing(self):
        entries = normalize_defense_ranks([{"team": "NO", "overall": "n/a", "QB": "x", "RB": 4}])
        assert entries[0].overall == pytest.approx(4.0)
        assert entries[0].QB == 16.0


class TestOrdering:
    """Output is sorted toughest defense first."""

    def test_sorted_by_overall(self):
        payload = [{"team": "A", "overall": 3}, {"team": "B", "overall": 1}, {"team": "C", "overall": 2}]
        assert [e.team_abbr for e in normalize_defense_ranks(payload)] == ["B", "C", "A"]

    def test_ties_keep_source_order(self):
        payload = [{"team": "A", "overall": 5}, {"team": "B", "overall": 5}]
        assert [e.team_abbr for e in normalize_defense_ranks(payload)] == ["A", "B"]


class TestFieldProbing:
    """Alias lookups are ordered and case-insensitive."""

    def test_pick_value_case_insensitive(self):
        assert pick_value({"TEAM_ABBR": "GB"}, ["team_abbr"]) == "GB"

    def test_pick_value_skips_blank(self):
        assert pick_value({"teamAbbr": "", "team": "GB"}, ["teamAbbr", "team"]) == "GB"

    def test_nested_team_object(self):
        assert pick_team_abbr({"team": {"abbreviation": "DET", "name": "Lions"}}) == "DET"

    def test_positional_aliases(self):
        entries = normalize_defense_ranks([{"team": "TB", "rank": 11, "qbRank": 3, "rb_rank": 4}])
        assert entries[0].QB == 3.0
        assert entries[0].RB == 4.0

    def test_non_numeric_value_falls_through_to_next_alias(self):
        entries = normalize_defense_ranks([{"team": "NO", "QB": "N/A", "qb_rank": 10, "Overall": "-", "rank": 9}])
        assert entries[0].QB == 10.0
        assert entries[0].overall == 9.0

    def test_to_number(self):
        assert to_number("12") == 12.0
        assert to_number(" 7.5 ") == 7.5
        assert to_number(True) is None
        assert to_number("nan") is None
        assert to_number("") is None


class TestHelpers:

    def test_coerce_payload_invalid_json_falls_back_to_csv(self):
        rows = coerce_payload("team,overall\nHOU,9")
        assert rows == [{"team": "HOU", "overall": "9"}]

    def test_coerce_rows_on_scalar(self):
        assert coerce_rows(42) == []

    def test_index_by_team_first_wins(self):
        first = DefenseRankEntry("ARI", 1.0)
        second = DefenseRankEntry("ARI", 2.0)
        assert index_by_team([first, second])["ARI"] is first

    def test_rank_for_falls_back_to_overall(self):
        entry = DefenseRankEntry("ARI", 12.0, QB=3.0)
        assert entry.rank_for("qb") == 3.0
        assert entry.rank_for("DST") == 12.0

    def test_to_dict_shape(self):
        entry = DefenseRankEntry("ARI", 12.0)
        assert entry.to_dict() == {"teamAbbr": "ARI", "overall": 12.0, "QB": 16.0, "RB": 16.0, "WR": 16.0, "TE": 16.0}
