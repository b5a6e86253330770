# context/providers/__init__.py
"""
Context Data Providers

Each provider fetches data from a specific upstream (or bundled sample
data) and normalizes it into the context data model.
"""

from context.providers.base import ContextProvider
from context.providers.defense_rankings import DefenseRankingsProvider
from context.providers.espn_scoreboard import ScoreboardProvider
from context.providers.news import NewsProvider, TrendingProvider
from context.providers.open_meteo import WeatherProvider
from context.providers.sleeper_players import PlayerDirectoryProvider

__all__ = [
    "ContextProvider",
    "DefenseRankingsProvider",
    "NewsProvider",
    "PlayerDirectoryProvider",
    "ScoreboardProvider",
    "TrendingProvider",
    "WeatherProvider",
]
