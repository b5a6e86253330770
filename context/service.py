# context/service.py
"""
Context Service - Orchestrates providers and caching.

This is the main entry point for context data. Routes, scripts and the
scoring path use this service rather than calling providers directly.

Features:
- One TTLCache per data class, owned by a process-wide service
- Graceful degradation: stale cache, persisted file, then bundled data
- Defense rankings: bootstrap from file, background refresh timer,
  explicit force refresh, JSON write-back after each successful refresh
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from context.cache import TTLCache
from context.defense import DefenseRankEntry, index_by_team
from context.errors import ContextError
from context.market import MarketContext, find_market_context
from context.players import PlayerDirectoryEntry, PlayerMatch, best_match, match_players
from context.providers.defense_rankings import (
    DefenseRankingsProvider,
    load_rankings_file,
    write_rankings_file,
)
from context.providers.espn_scoreboard import ScoreboardProvider
from context.providers.news import (
    SAMPLE_NEWS,
    SAMPLE_TRENDING,
    NewsItem,
    NewsProvider,
    TrendingPlayer,
    TrendingProvider,
)
from context.providers.open_meteo import WeatherProvider
from context.providers.sleeper_players import PlayerDirectoryProvider, sample_directory
from context.weather import canonical_team
from scoring.engine import score_player
from scoring.models import (
    LEAGUE_AVERAGE_IMPLIED_TOTAL,
    PlayerRecord,
    ProjectionMode,
    ScoredPlayer,
    ScoringContext,
)

if TYPE_CHECKING:
    from app.config import AppConfig

_logger = logging.getLogger(__name__)

SCOREBOARD_KEY = "scoreboard"
DIRECTORY_KEY = "directory"
NEWS_KEY = "news"
TRENDING_KEY = "trending"
DEFENSE_KEY = "rankings"


def parse_matchup(opponent: Optional[str]) -> tuple[Optional[str], Optional[bool]]:
    """
    Split a matchup string into (opponent code, is_home).

    "@BUF" -> ("BUF", False); "vs BUF" -> ("BUF", True); "BUF" -> ("BUF", None)
    """
    text = (opponent or "").strip().upper()
    if not text:
        return None, None
    if text.startswith("@"):
        return canonical_team(text[1:]) or None, False
    if text.startswith("VS"):
        return canonical_team(text[2:].lstrip(". ")) or None, True
    return canonical_team(text), None


class ContextService:
    """
    Central service for context data management.

    Handles:
    - Provider wiring from AppConfig
    - Caching with per-data-class TTLs
    - Fallback to persisted or bundled data on failure
    """

    def __init__(
        self,
        config: "AppConfig",
        scoreboard_provider: Optional[ScoreboardProvider] = None,
        weather_provider: Optional[WeatherProvider] = None,
        defense_provider: Optional[DefenseRankingsProvider] = None,
        player_provider: Optional[PlayerDirectoryProvider] = None,
        news_provider: Optional[NewsProvider] = None,
        trending_provider: Optional[TrendingProvider] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize context service.

        Args:
            config: Loaded application configuration
            *_provider: Provider overrides (default: built from config)
            clock: Time source shared by all caches
        """
        self._config = config
        live = config.live_data_enabled
        timeout = config.http_timeout_seconds

        self._scoreboard_provider = scoreboard_provider or ScoreboardProvider(live, timeout)
        self._weather_provider = weather_provider or WeatherProvider(live, timeout)
        self._defense_provider = defense_provider or DefenseRankingsProvider(
            config.defense_rankings_source, config.defense_weights, timeout
        )
        self._player_provider = player_provider or PlayerDirectoryProvider(live, max(timeout, 30))
        self._news_provider = news_provider or NewsProvider(live, timeout)
        self._trending_provider = trending_provider or TrendingProvider(live, timeout)

        self.scoreboard_cache = TTLCache("scoreboard", config.scoreboard_ttl_seconds, clock)
        self.weather_cache = TTLCache("weather", config.weather_ttl_seconds, clock)
        self.directory_cache = TTLCache("players", config.player_directory_ttl_seconds, clock)
        self.news_cache = TTLCache("news", config.news_ttl_seconds, clock)
        self.trending_cache = TTLCache("trending", config.trending_ttl_seconds, clock)
        self.defense_cache = TTLCache("defense", config.defense_ttl_seconds, clock)

        self._rankings_path = Path(config.defense_rankings_path)
        self._unconfigured_logged = False
        self._refresh_task: Optional[asyncio.Task] = None

        self._bootstrap_defense_ranks()

    # =========================================================================
    # Defense Rankings
    # =========================================================================

    def _bootstrap_defense_ranks(self) -> None:
        """Seed the defense cache from the persisted file."""
        entries = load_rankings_file(self._rankings_path, self._config.defense_weights)
        if entries:
            self.defense_cache.set(DEFENSE_KEY, entries)
            _logger.info(f"Loaded {len(entries)} defense rankings from {self._rankings_path}")

    def _log_unconfigured_once(self) -> None:
        if not self._unconfigured_logged:
            _logger.warning(
                "DEFENSE_RANKINGS_SOURCE is not set; serving bundled defense rankings"
            )
            self._unconfigured_logged = True

    async def _load_defense_ranks(self) -> list[DefenseRankEntry]:
        if not self._defense_provider.is_configured:
            self._log_unconfigured_once()
            return await asyncio.to_thread(
                load_rankings_file, self._rankings_path, self._config.defense_weights
            )

        entries = await self._defense_provider.fetch()
        try:
            await asyncio.to_thread(write_rankings_file, self._rankings_path, entries)
        except OSError as e:
            _logger.warning(f"Could not persist defense rankings to {self._rankings_path}: {e}")
        return entries

    async def get_defense_ranks(self, force_refresh: bool = False) -> list[DefenseRankEntry]:
        """
        Get defense rankings sorted toughest first.

        Args:
            force_refresh: If True, bypass cache and refetch (errors are logged)
        """
        if force_refresh:
            try:
                return await self.refresh_defense_ranks()
            except ContextError as e:
                _logger.warning(f"Forced defense refresh failed: {e}")

        try:
            return await self.defense_cache.get(DEFENSE_KEY, self._load_defense_ranks)
        except ContextError as e:
            _logger.warning(f"Defense rankings unavailable ({e}); using rankings file")
            return await asyncio.to_thread(
                load_rankings_file, self._rankings_path, self._config.defense_weights
            )

    async def refresh_defense_ranks(self) -> list[DefenseRankEntry]:
        """
        Force a refresh from the configured source.

        Raises:
            ContextError: if the source is missing, unreachable or malformed.
                          Previously cached rankings are left in place.
        """
        entries = await self._load_defense_ranks()
        if not entries:
            raise ContextError("Defense rankings refresh produced no entries")
        self.defense_cache.set(DEFENSE_KEY, entries)
        return entries

    async def find_defense_rank(self, team: Optional[str]) -> Optional[DefenseRankEntry]:
        """Look up one team's defensive ranking; None when unknown."""
        if not team:
            return None
        index = index_by_team(await self.get_defense_ranks())
        return index.get(team.strip().upper()) or index.get(canonical_team(team))

    async def _refresh_loop(self, interval_seconds: float) -> None:
        while True:
            try:
                entries = await self.refresh_defense_ranks()
                _logger.info(f"Background refresh stored {len(entries)} defense rankings")
            except ContextError as e:
                _logger.warning(f"Background defense refresh failed: {e}")
            except Exception as e:
                _logger.error(f"Background defense refresh crashed: {e}")
            await asyncio.sleep(interval_seconds)

    def start_background_refresh(self) -> Optional[asyncio.Task]:
        """
        Start the periodic defense refresh on the running event loop.

        Does nothing (beyond a one-time log) when no source is configured.
        """
        if not self._defense_provider.is_configured:
            self._log_unconfigured_once()
            return None
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(
                self._refresh_loop(self._config.defense_refresh_interval_seconds)
            )
        return self._refresh_task

    async def stop_background_refresh(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # =========================================================================
    # Market Context
    # =========================================================================

    async def get_market_contexts(self) -> dict[str, MarketContext]:
        """All market contexts for the current scoreboard, keyed by team."""
        try:
            return await self.scoreboard_cache.get(SCOREBOARD_KEY, self._scoreboard_provider.fetch)
        except ContextError as e:
            _logger.warning(f"Scoreboard unavailable: {e}")
            return {}

    async def get_market_context(self, team: str) -> Optional[MarketContext]:
        """One team's market context; None when it has no game with odds."""
        index = await self.get_market_contexts()
        return find_market_context(index, team) or find_market_context(index, canonical_team(team))

    # =========================================================================
    # Weather
    # =========================================================================

    async def get_weather(self, team: str, kickoff: Optional[str] = None) -> Optional[str]:
        """
        Weather summary at a team's stadium, e.g. "41°F / 65% rain".

        Returns None for unknown stadiums or when no forecast is available.
        """
        location = canonical_team(team)
        if not location:
            return None
        key = f"{location}@{kickoff[:13] if kickoff else 'default'}"

        async def load() -> Optional[str]:
            reading = await self._weather_provider.fetch(location, kickoff)
            return reading.summary if reading is not None else None

        try:
            return await self.weather_cache.get(key, load)
        except ContextError as e:
            _logger.warning(f"Weather unavailable for {location}: {e}")
            return None

    # =========================================================================
    # Players
    # =========================================================================

    async def get_player_directory(self) -> list[PlayerDirectoryEntry]:
        try:
            return await self.directory_cache.get(DIRECTORY_KEY, self._player_provider.fetch)
        except ContextError as e:
            _logger.warning(f"Player directory unavailable ({e}); using sample directory")
            return sample_directory()

    async def search_players(
        self,
        query: str,
        limit: int = 10,
        position: Optional[str] = None,
        team: Optional[str] = None,
    ) -> list[PlayerMatch]:
        directory = await self.get_player_directory()
        return match_players(query, directory, limit=limit, position=position, team=team)

    async def find_player(self, query: str, position: Optional[str] = None) -> Optional[PlayerDirectoryEntry]:
        return best_match(query, await self.get_player_directory(), position=position)

    # =========================================================================
    # News / Trending
    # =========================================================================

    async def get_news(self) -> list[NewsItem]:
        try:
            return await self.news_cache.get(NEWS_KEY, self._news_provider.fetch)
        except ContextError as e:
            _logger.warning(f"News unavailable ({e}); using bundled headlines")
            return list(SAMPLE_NEWS)

    async def get_trending(self) -> list[TrendingPlayer]:
        """Trending adds, enriched with names from the player directory."""
        try:
            trending = await self.trending_cache.get(TRENDING_KEY, self._trending_provider.fetch)
        except ContextError as e:
            _logger.warning(f"Trending unavailable ({e}); using bundled list")
            trending = list(SAMPLE_TRENDING)

        directory = {entry.id: entry for entry in await self.get_player_directory()}
        enriched = []
        for item in trending:
            entry = directory.get(item.player_id)
            if entry is not None:
                item = dataclasses.replace(item, name=entry.full_name, team=entry.team, position=entry.position)
            enriched.append(item)
        return enriched

    # =========================================================================
    # Scoring
    # =========================================================================

    async def build_scoring_context(
        self,
        player: PlayerRecord,
        mode: ProjectionMode = ProjectionMode.WEEKLY,
    ) -> tuple[PlayerRecord, ScoringContext]:
        """
        Resolve market, defense and weather context for a player.

        Returns the player (with opponent filled from the scoreboard when
        missing) and its ScoringContext.
        """
        team = canonical_team(player.team or "")
        opponent, is_home = parse_matchup(player.opponent)
        market = await self.get_market_context(team) if team else None

        if market is not None:
            opponent = market.opponent
            is_home = market.is_home

        defense = await self.find_defense_rank(opponent)
        weather_site = team if is_home is not False else opponent
        weather = (
            await self.get_weather(weather_site, market.kickoff if market else None)
            if weather_site
            else None
        )

        implied = market.implied_total if market and market.implied_total is not None else None
        context = ScoringContext(
            def_rank=defense.rank_for(player.position) if defense else ScoringContext.def_rank,
            implied_total=implied if implied is not None else LEAGUE_AVERAGE_IMPLIED_TOTAL,
            over_under=market.over_under if market else None,
            spread=market.spread if market else None,
            weather=weather,
            mode=mode,
        )
        if opponent and not player.opponent:
            player = dataclasses.replace(player, opponent=opponent)
        return player, context

    async def score_player(
        self,
        player: PlayerRecord,
        mode: ProjectionMode = ProjectionMode.WEEKLY,
    ) -> ScoredPlayer:
        player, context = await self.build_scoring_context(player, mode)
        return score_player(player, context)

    async def score_players(
        self,
        players: Iterable[PlayerRecord],
        mode: ProjectionMode = ProjectionMode.WEEKLY,
    ) -> list[ScoredPlayer]:
        """Score a batch concurrently; results sorted by descending score."""
        scored = await asyncio.gather(*(self.score_player(p, mode) for p in players))
        return sorted(scored, key=lambda p: p.score, reverse=True)

    # =========================================================================
    # Monitoring
    # =========================================================================

    def clear_cache(self, name: Optional[str] = None) -> None:
        """
        Clear cached data.

        Args:
            name: Specific cache to clear ("scoreboard", "weather", ...), or None for all
        """
        for cache in self._caches():
            if name is None or cache.name == name:
                cache.reset()

    def get_cache_status(self) -> dict:
        """Get cache status for monitoring."""
        status = {cache.name: cache.status() for cache in self._caches()}
        status["sources"] = {
            "scoreboard": self._scoreboard_provider.source_name,
            "weather": self._weather_provider.source_name,
            "defense": "configured" if self._defense_provider.is_configured else "bundled-defaults",
            "players": self._player_provider.source_name,
            "news": self._news_provider.source_name,
            "trending": self._trending_provider.source_name,
        }
        return status

    def _caches(self) -> tuple[TTLCache, ...]:
        return (
            self.scoreboard_cache,
            self.weather_cache,
            self.directory_cache,
            self.news_cache,
            self.trending_cache,
            self.defense_cache,
        )


# Singleton instance for app-wide use
_service_instance: Optional[ContextService] = None


def get_context_service() -> ContextService:
    """Get the singleton context service instance."""
    global _service_instance
    if _service_instance is None:
        from app.config import load_config

        _service_instance = ContextService(load_config())
    return _service_instance
