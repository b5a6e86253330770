# context/tests/test_market_context.py
"""Tests for implied totals and spreads from a scoreboard payload."""

import pytest

from context.market import (
    DEFAULT_OVER_UNDER,
    find_market_context,
    parse_spread_descriptor,
    resolve_game,
    resolve_market_contexts,
    signed_home_spread,
)
from context.providers.espn_scoreboard import SAMPLE_SCOREBOARD


def _event(home="KC", away="BUF", odds=None, **competition):
    comp = {
        "competitors": [
            {"homeAway": "home", "team": {"abbreviation": home}},
            {"homeAway": "away", "team": {"abbreviation": away}},
        ],
    }
    if odds is not None:
        comp["odds"] = [odds]
    comp.update(competition)
    return {"id": "401", "competitions": [comp]}


class TestSpreadDescriptor:

    def test_team_descriptor(self):
        assert parse_spread_descriptor("KC -3.5") == ("KC", 3.5)

    def test_numeric_descriptor_keeps_sign(self):
        assert parse_spread_descriptor(-3.5) == (None, -3.5)
        assert parse_spread_descriptor("2.5") == (None, 2.5)

    @pytest.mark.parametrize("text", ["EVEN", "PK", "pick"])
    def test_pick_em(self, text):
        assert parse_spread_descriptor(text) == (None, 0.0)

    def test_unparseable(self):
        assert parse_spread_descriptor("off the board") == (None, 0.0)
        assert parse_spread_descriptor(None) == (None, 0.0)

    def test_home_favored(self):
        assert signed_home_spread("KC -3", "KC", "BUF") == -3.0

    def test_away_favored(self):
        assert signed_home_spread("BUF -3", "KC", "BUF") == 3.0

    def test_unknown_token_reads_as_home_favored(self):
        assert signed_home_spread("XYZ -3", "KC", "BUF") == -3.0


class TestResolveGame:

    def test_home_favorite_implied_totals(self):
        contexts = resolve_game(_event(odds={"details": "KC -2.5", "overUnder": 48.5}))
        home, away = contexts

        assert home.team == "KC" and home.is_home
        assert home.implied_total == 25.5
        assert away.implied_total == 23.0
        assert home.spread == -2.5
        assert away.spread == 2.5
        assert home.opponent == "BUF"
        assert away.opponent_implied_total == 25.5

    def test_away_favorite(self):
        home, away = resolve_game(_event("MIA", "NYJ", odds={"details": "NYJ -1", "overUnder": 41.5}))
        assert home.implied_total == 20.25
        assert away.implied_total == 21.25
        assert away.spread == -1.0

    def test_totals_and_spreads_are_symmetric_for_sample_slate(self):
        """Implied totals sum to the over/under and spreads mirror."""
        index = resolve_market_contexts(SAMPLE_SCOREBOARD)
        for team, context in index.items():
            opponent = index[context.opponent]
            assert context.implied_total + opponent.implied_total == pytest.approx(context.over_under, abs=0.1)
            assert context.spread == -opponent.spread

    def test_pick_em_has_no_negative_zero(self):
        home, away = resolve_game(_event(odds={"details": "EVEN", "overUnder": 44}))
        assert str(home.spread) == "0.0"
        assert str(away.spread) == "0.0"
        assert home.implied_total == away.implied_total == 22.0

    def test_missing_total_uses_default(self):
        home, _ = resolve_game(_event(odds={"details": "KC -3", "overUnder": "TBD"}))
        assert home.over_under == DEFAULT_OVER_UNDER

    def test_spread_field_used_when_details_missing(self):
        home, away = resolve_game(_event(odds={"spread": -4.0, "overUnder": 40}))
        assert home.spread == -4.0
        assert away.implied_total == 18.0

    def test_game_without_odds_skipped(self):
        assert resolve_game(_event()) == []

    def test_game_without_competitor_side_skipped(self):
        event = _event(odds={"details": "KC -3", "overUnder": 45})
        event["competitions"][0]["competitors"].pop()
        assert resolve_game(event) == []

    def test_metadata(self):
        event = _event(
            odds={"details": "KC -3", "overUnder": 45, "provider": {"name": "ESPN BET"}},
            date="2025-11-16T21:25Z",
            venue={"fullName": "Arrowhead"},
            geoBroadcasts=[{"media": {"shortName": "CBS"}}],
        )
        home, _ = resolve_game(event)
        assert home.kickoff == "2025-11-16T21:25:00+00:00"
        assert home.venue == "Arrowhead"
        assert home.broadcast == "CBS"
        assert home.odds_provider == "ESPN BET"
        assert home.game_id == "401"


class TestMalformedGames:
    """Structurally broken games are dropped one at a time."""

    def test_string_team_skipped(self):
        event = _event(odds={"details": "PHI -3", "overUnder": 44})
        event["competitions"][0]["competitors"][0]["team"] = "PHI"
        assert resolve_game(event) == []

    def test_string_venue_and_provider_ignored(self):
        event = _event(
            odds={"details": "KC -3", "overUnder": 45, "provider": "ESPN BET"},
            venue="Arrowhead",
            geoBroadcasts=[{"media": "CBS"}],
        )
        home, away = resolve_game(event)
        assert home.implied_total == 24.0
        assert home.venue is None
        assert home.odds_provider is None
        assert away.broadcast is None

    def test_non_list_competitors_skipped(self):
        event = _event(odds={"details": "KC -3", "overUnder": 45}, competitors="KC vs BUF")
        assert resolve_game(event) == []

    def test_bad_game_does_not_drop_the_slate(self):
        bad = _event(home="PHI", away="DAL", odds={"details": "PHI -6", "overUnder": 46})
        bad["competitions"][0]["competitors"][1]["team"] = "DAL"
        good = _event(odds={"details": "KC -2.5", "overUnder": 48.5})
        index = resolve_market_contexts({"events": [bad, good, "junk"]})
        assert sorted(index) == ["BUF", "KC"]
        assert index["KC"].implied_total == 25.5


class TestIndexLookup:

    def test_lookup_is_case_insensitive(self):
        index = resolve_market_contexts(SAMPLE_SCOREBOARD)
        assert find_market_context(index, "kc").team == "KC"

    def test_unknown_team_returns_none(self):
        index = resolve_market_contexts(SAMPLE_SCOREBOARD)
        assert find_market_context(index, "ZZZ") is None
        assert find_market_context(index, "") is None

    def test_non_mapping_scoreboard(self):
        assert resolve_market_contexts(["not", "a", "scoreboard"]) == {}

    def test_to_dict_is_camel_case(self):
        index = resolve_market_contexts(SAMPLE_SCOREBOARD)
        data = index["BUF"].to_dict()
        assert data["impliedTotal"] == 23.0
        assert data["isHome"] is False
        assert data["overUnder"] == 48.5
