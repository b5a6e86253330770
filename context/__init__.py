# context/__init__.py
"""
Waiver Context Module

Aggregates external context (betting markets, defensive matchups, weather,
player identity, news) behind freshness-bounded caches.

Module Structure:
- defense.py: schema normalizer for heterogeneous defense-rank payloads
- weights.py: weighted fallback for a missing overall rank
- market.py: implied totals and spreads from a scoreboard
- players.py: player directory and fuzzy name matching
- weather.py: stadium table and hourly forecast sampling
- cache.py: TTL cache with stale-on-error serving
- providers/: upstream data sources
- service.py: orchestrates providers and caching
"""

from context.cache import TTLCache
from context.defense import DefenseRankEntry, normalize_defense_ranks
from context.market import MarketContext, resolve_market_contexts
from context.players import PlayerDirectoryEntry, PlayerMatch, match_players
from context.weights import DEFAULT_WEIGHTS, weighted_overall

__all__ = [
    "DEFAULT_WEIGHTS",
    "DefenseRankEntry",
    "MarketContext",
    "PlayerDirectoryEntry",
    "PlayerMatch",
    "TTLCache",
    "match_players",
    "normalize_defense_ranks",
    "resolve_market_contexts",
    "weighted_overall",
]
