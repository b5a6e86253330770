# app/config.py
"""
Centralized configuration management with startup validation.

All settings are OPTIONAL: without any environment variables the service
runs on bundled sample data and the bundled defense rankings file.
Invalid values fall back to defaults with a logged warning.
"""
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Optional

from context.providers.defense_rankings import BUNDLED_RANKINGS_PATH
from context.weights import resolve_weights

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "waiver-context"
SERVICE_VERSION = "0.1.0"

# Freshness windows per data class (seconds)
DEFAULT_WEATHER_TTL_SECONDS = 30 * 60
DEFAULT_SCOREBOARD_TTL_SECONDS = 3 * 60
DEFAULT_PLAYER_DIRECTORY_TTL_SECONDS = 12 * 60 * 60
DEFAULT_NEWS_TTL_SECONDS = 10 * 60
DEFAULT_TRENDING_TTL_SECONDS = 10 * 60
DEFAULT_DEFENSE_TTL_SECONDS = 6 * 60 * 60

DEFAULT_HTTP_TIMEOUT_SECONDS = 10
MIN_TTL_SECONDS = 1

DEFENSE_WEIGHT_ENV = {
    "QB": "DEFENSE_WEIGHT_QB",
    "RB": "DEFENSE_WEIGHT_RB",
    "WR": "DEFENSE_WEIGHT_WR",
    "TE": "DEFENSE_WEIGHT_TE",
}


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    # Service info
    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    # Upstream access
    live_data_enabled: bool = False
    http_timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS

    # Cache TTLs
    weather_ttl_seconds: int = DEFAULT_WEATHER_TTL_SECONDS
    scoreboard_ttl_seconds: int = DEFAULT_SCOREBOARD_TTL_SECONDS
    player_directory_ttl_seconds: int = DEFAULT_PLAYER_DIRECTORY_TTL_SECONDS
    news_ttl_seconds: int = DEFAULT_NEWS_TTL_SECONDS
    trending_ttl_seconds: int = DEFAULT_TRENDING_TTL_SECONDS
    defense_ttl_seconds: int = DEFAULT_DEFENSE_TTL_SECONDS

    # Defense rankings
    defense_rankings_source: Optional[str] = None
    defense_rankings_path: str = str(BUNDLED_RANKINGS_PATH)
    defense_refresh_interval_seconds: int = DEFAULT_DEFENSE_TTL_SECONDS
    defense_weights: dict = field(default_factory=resolve_weights)

    # Warnings collected during config load
    warnings: list = field(default_factory=list)


# =============================================================================
# Configuration Loading
# =============================================================================


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def _parse_float_env(name: str) -> tuple[Optional[float], Optional[str]]:
    """Parse an optional non-negative float; (None, warning) when invalid."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None, None

    try:
        value = float(raw)
    except ValueError:
        return None, f"{name}='{raw}' is not a valid number; using default weight"

    if not math.isfinite(value) or value < 0:
        return None, f"{name}={raw} must be a non-negative number; using default weight"

    return value, None


def _parse_bool_env(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    raw = os.environ.get(name, "").lower()
    if raw in ("true", "1", "yes", "on"):
        return True
    if raw in ("false", "0", "no", "off", ""):
        return default
    return default


def _parse_optional_str_env(name: str) -> Optional[str]:
    raw = os.environ.get(name, "").strip()
    return raw or None


def load_config() -> AppConfig:
    """
    Load and validate application configuration from environment.

    Returns:
        AppConfig instance with validated configuration. Problems are
        recorded in AppConfig.warnings and logged, never raised.
    """
    warnings = []

    def int_setting(name: str, default: int, min_value: int = MIN_TTL_SECONDS) -> int:
        value, warning = _parse_int_env(name, default, min_value=min_value)
        if warning:
            warnings.append(warning)
        return value

    environment = os.environ.get("ENVIRONMENT", "development")
    live_data_enabled = _parse_bool_env("WAIVER_CONTEXT_LIVE", False)

    weight_overrides = {}
    for position, env_name in DEFENSE_WEIGHT_ENV.items():
        value, warning = _parse_float_env(env_name)
        if warning:
            warnings.append(warning)
        if value is not None:
            weight_overrides[position] = value
    if len(weight_overrides) == len(DEFENSE_WEIGHT_ENV) and not any(weight_overrides.values()):
        warnings.append("All DEFENSE_WEIGHT_* values are zero; using default weights")

    defense_ttl = int_setting("DEFENSE_TTL_SECONDS", DEFAULT_DEFENSE_TTL_SECONDS)

    config = AppConfig(
        environment=environment,
        live_data_enabled=live_data_enabled,
        http_timeout_seconds=int_setting("HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS),
        weather_ttl_seconds=int_setting("WEATHER_TTL_SECONDS", DEFAULT_WEATHER_TTL_SECONDS),
        scoreboard_ttl_seconds=int_setting("SCOREBOARD_TTL_SECONDS", DEFAULT_SCOREBOARD_TTL_SECONDS),
        player_directory_ttl_seconds=int_setting(
            "PLAYER_DIRECTORY_TTL_SECONDS", DEFAULT_PLAYER_DIRECTORY_TTL_SECONDS
        ),
        news_ttl_seconds=int_setting("NEWS_TTL_SECONDS", DEFAULT_NEWS_TTL_SECONDS),
        trending_ttl_seconds=int_setting("TRENDING_TTL_SECONDS", DEFAULT_TRENDING_TTL_SECONDS),
        defense_ttl_seconds=defense_ttl,
        defense_rankings_source=_parse_optional_str_env("DEFENSE_RANKINGS_SOURCE"),
        defense_rankings_path=_parse_optional_str_env("DEFENSE_RANKINGS_PATH") or str(BUNDLED_RANKINGS_PATH),
        defense_refresh_interval_seconds=int_setting("DEFENSE_REFRESH_INTERVAL_SECONDS", defense_ttl),
        defense_weights=resolve_weights(weight_overrides),
        warnings=warnings,
    )

    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return config


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a safe configuration snapshot.

    Returns the snapshot string for testing purposes. The defense source
    is reported by presence only, since URLs may carry access tokens.
    """
    weights = ",".join(f"{pos}={weight:.2f}" for pos, weight in config.defense_weights.items())
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"live_data_enabled={config.live_data_enabled} "
        f"defense_source_present={config.defense_rankings_source is not None} "
        f"defense_weights={weights} "
        f"scoreboard_ttl={config.scoreboard_ttl_seconds} "
        f"weather_ttl={config.weather_ttl_seconds}"
    )
    logger.info(snapshot)
    return snapshot
