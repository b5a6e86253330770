# app/tests/test_config.py
"""Tests for configuration management and startup validation."""
import logging
import os
from unittest.mock import patch

import pytest

from app.config import (
    DEFAULT_DEFENSE_TTL_SECONDS,
    DEFAULT_SCOREBOARD_TTL_SECONDS,
    DEFAULT_WEATHER_TTL_SECONDS,
    AppConfig,
    load_config,
    log_config_snapshot,
)
from context.providers.defense_rankings import BUNDLED_RANKINGS_PATH
from context.weights import DEFAULT_WEIGHTS


class TestLoadConfig:
    """Tests for load_config function."""

    def test_default_values(self):
        """Config loads with sensible defaults when no env vars set."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.service_name == "waiver-context"
        assert config.environment == "development"
        assert config.live_data_enabled is False
        assert config.weather_ttl_seconds == DEFAULT_WEATHER_TTL_SECONDS
        assert config.scoreboard_ttl_seconds == DEFAULT_SCOREBOARD_TTL_SECONDS
        assert config.defense_rankings_source is None
        assert config.defense_rankings_path == str(BUNDLED_RANKINGS_PATH)
        assert config.defense_weights == pytest.approx(DEFAULT_WEIGHTS)
        assert config.warnings == []

    def test_live_data_flag(self):
        with patch.dict(os.environ, {"WAIVER_CONTEXT_LIVE": "yes"}, clear=True):
            config = load_config()

        assert config.live_data_enabled is True

    def test_defense_source_and_path(self):
        env = {
            "DEFENSE_RANKINGS_SOURCE": " https://example.com/ranks.csv ",
            "DEFENSE_RANKINGS_PATH": "/tmp/ranks.json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()

        assert config.defense_rankings_source == "https://example.com/ranks.csv"
        assert config.defense_rankings_path == "/tmp/ranks.json"

    def test_refresh_interval_defaults_to_defense_ttl(self):
        with patch.dict(os.environ, {"DEFENSE_TTL_SECONDS": "600"}, clear=True):
            config = load_config()

        assert config.defense_ttl_seconds == 600
        assert config.defense_refresh_interval_seconds == 600


class TestTTLValidation:
    """Tests for TTL environment validation."""

    def test_valid_ttl_accepted(self):
        with patch.dict(os.environ, {"WEATHER_TTL_SECONDS": "900"}, clear=True):
            config = load_config()

        assert config.weather_ttl_seconds == 900
        assert config.warnings == []

    def test_non_integer_ttl_uses_default(self):
        with patch.dict(os.environ, {"SCOREBOARD_TTL_SECONDS": "soon"}, clear=True):
            config = load_config()

        assert config.scoreboard_ttl_seconds == DEFAULT_SCOREBOARD_TTL_SECONDS
        assert any("SCOREBOARD_TTL_SECONDS" in w for w in config.warnings)

    def test_zero_ttl_uses_default(self):
        with patch.dict(os.environ, {"DEFENSE_TTL_SECONDS": "0"}, clear=True):
            config = load_config()

        assert config.defense_ttl_seconds == DEFAULT_DEFENSE_TTL_SECONDS
        assert any("below minimum" in w for w in config.warnings)

    def test_warnings_logged_with_prefix(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.config"):
            with patch.dict(os.environ, {"NEWS_TTL_SECONDS": "-5"}, clear=True):
                load_config()

        assert any(r.message.startswith("[CONFIG]") for r in caplog.records)


class TestDefenseWeights:
    """Tests for DEFENSE_WEIGHT_* overrides."""

    def test_override_renormalized(self):
        with patch.dict(os.environ, {"DEFENSE_WEIGHT_RB": "0.8"}, clear=True):
            config = load_config()

        assert sum(config.defense_weights.values()) == pytest.approx(1.0)
        assert config.defense_weights["RB"] == pytest.approx(0.8 / 1.4)

    def test_invalid_weight_warns(self):
        with patch.dict(os.environ, {"DEFENSE_WEIGHT_QB": "lots"}, clear=True):
            config = load_config()

        assert config.defense_weights == pytest.approx(DEFAULT_WEIGHTS)
        assert any("DEFENSE_WEIGHT_QB" in w for w in config.warnings)

    def test_negative_weight_warns(self):
        with patch.dict(os.environ, {"DEFENSE_WEIGHT_TE": "-1"}, clear=True):
            config = load_config()

        assert config.defense_weights == pytest.approx(DEFAULT_WEIGHTS)
        assert len(config.warnings) == 1

    def test_all_zero_weights_fall_back(self):
        env = {name: "0" for name in ("DEFENSE_WEIGHT_QB", "DEFENSE_WEIGHT_RB", "DEFENSE_WEIGHT_WR", "DEFENSE_WEIGHT_TE")}
        with patch.dict(os.environ, env, clear=True):
            config = load_config()

        assert config.defense_weights == DEFAULT_WEIGHTS
        assert any("zero" in w for w in config.warnings)


class TestConfigSnapshot:
    """Tests for the startup snapshot line."""

    def test_snapshot_contents(self):
        config = AppConfig(live_data_enabled=True, defense_rankings_source="https://x?token=secret")
        snapshot = log_config_snapshot(config)

        assert snapshot.startswith("[STARTUP]")
        assert "live_data_enabled=True" in snapshot
        assert "defense_source_present=True" in snapshot
        assert "defense_weights=QB=0.20,RB=0.40,WR=0.30,TE=0.10" in snapshot

    def test_snapshot_hides_source_value(self):
        config = AppConfig(defense_rankings_source="https://x?token=secret")
        snapshot = log_config_snapshot(config)

        assert "secret" not in snapshot
        assert "https://" not in snapshot
