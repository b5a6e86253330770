# context/tests/test_defense_weights.py
"""Tests for positional weight resolution and the weighted overall."""

import math

import pytest

from context.weights import DEFAULT_WEIGHTS, resolve_weights, weighted_overall


class TestResolveWeights:

    def test_defaults_sum_to_one(self):
        weights = resolve_weights()
        assert weights == pytest.approx(DEFAULT_WEIGHTS)
        assert sum(weights.values()) == pytest.approx(1.0)

    def test_override_is_renormalized(self):
        """Doubling RB's weight shifts the split and keeps the total at 1."""
        weights = resolve_weights({"RB": 0.8})
        assert sum(weights.values()) == pytest.approx(1.0)
        assert weights["RB"] == pytest.approx(0.8 / 1.4)
        assert weights["QB"] == pytest.approx(0.2 / 1.4)

    def test_invalid_override_uses_default(self):
        weights = resolve_weights({"QB": "heavy", "WR": -1})
        assert weights == pytest.approx(DEFAULT_WEIGHTS)

    def test_all_zero_falls_back_to_defaults(self):
        weights = resolve_weights({"QB": 0, "RB": 0, "WR": 0, "TE": 0})
        assert weights == DEFAULT_WEIGHTS

    def test_unknown_positions_ignored(self):
        assert resolve_weights({"K": 5}) == pytest.approx(DEFAULT_WEIGHTS)


class TestWeightedOverall:

    def test_all_positions(self):
        ranks = {"QB": 10, "RB": 20, "WR": 5, "TE": 30}
        assert weighted_overall(ranks) == pytest.approx(14.5)

    def test_nan_excluded(self):
        ranks = {"QB": 10.0, "RB": math.nan, "WR": None, "TE": 30.0}
        assert weighted_overall(ranks) == pytest.approx((10 * 0.2 + 30 * 0.1) / 0.3)

    def test_nothing_present_returns_league_average(self):
        assert weighted_overall({}) == 16.0
