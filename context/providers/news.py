# context/providers/news.py
"""
Optional enrichment feeds: league news and trending waiver adds.

Each feed is cached on its own and falls back to a bundled static dataset
when the upstream is unavailable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from context.errors import MalformedPayloadError
from context.providers.base import ContextProvider, fetch_json

ESPN_NEWS_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/news"
SLEEPER_TRENDING_URL = "https://api.sleeper.app/v1/players/nfl/trending/add"


@dataclass(frozen=True)
class NewsItem:
    headline: str
    description: Optional[str] = None
    published: Optional[str] = None
    link: Optional[str] = None
    source: str = "espn"

    def to_dict(self) -> dict:
        return {
            "headline": self.headline,
            "description": self.description,
            "published": self.published,
            "link": self.link,
            "source": self.source,
        }


@dataclass(frozen=True)
class TrendingPlayer:
    player_id: str
    count: int
    name: Optional[str] = None
    team: Optional[str] = None
    position: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "count": self.count,
            "name": self.name,
            "team": self.team,
            "position": self.position,
        }


# =============================================================================
# Sample Data (fallback when live data unavailable)
# =============================================================================

SAMPLE_NEWS = (
    NewsItem(
        headline="Waiver wire: backfield committees shift after bye weeks",
        description="Snap shares moved in several backfields; monitor usage before bidding.",
        source="sample",
    ),
    NewsItem(
        headline="Weather watch: wind and rain expected in northern outdoor stadiums",
        description="Passing volume tends to dip in heavy precipitation.",
        source="sample",
    ),
    NewsItem(
        headline="Injury report: several starting tight ends limited in practice",
        description="Backup tight ends could see expanded route participation.",
        source="sample",
    ),
)

SAMPLE_TRENDING = (
    TrendingPlayer(player_id="9493", count=1200),
    TrendingPlayer(player_id="9488", count=950),
    TrendingPlayer(player_id="8150", count=700),
)


# =============================================================================
# Parsing
# =============================================================================


def parse_news(payload: Any) -> list[NewsItem]:
    """Parse an ESPN news payload; articles without a headline are dropped."""
    articles = payload.get("articles") if isinstance(payload, Mapping) else None
    items = []
    for article in articles or []:
        if not isinstance(article, Mapping) or not article.get("headline"):
            continue
        links = article.get("links")
        web = links.get("web") if isinstance(links, Mapping) else None
        items.append(
            NewsItem(
                headline=str(article["headline"]),
                description=article.get("description"),
                published=article.get("published"),
                link=web.get("href") if isinstance(web, Mapping) else None,
            )
        )
    return items


def parse_trending(payload: Any) -> list[TrendingPlayer]:
    """Parse a Sleeper trending payload ([{"player_id", "count"}])."""
    items = []
    for row in payload if isinstance(payload, list) else []:
        if not isinstance(row, Mapping) or not row.get("player_id"):
            continue
        try:
            count = int(row.get("count") or 0)
        except (TypeError, ValueError):
            count = 0
        items.append(TrendingPlayer(player_id=str(row["player_id"]), count=count))
    return items


# =============================================================================
# Providers
# =============================================================================


class NewsProvider(ContextProvider):
    """League headlines from ESPN."""

    @property
    def source_name(self) -> str:
        return "espn-news" if self._use_live_data else "sample-news"

    async def fetch(self) -> list[NewsItem]:
        if not self._use_live_data:
            return list(SAMPLE_NEWS)
        items = parse_news(await fetch_json(ESPN_NEWS_URL, timeout=self._timeout))
        if not items:
            raise MalformedPayloadError("News payload contained no articles")
        return items


class TrendingProvider(ContextProvider):
    """Most-added players over the lookback window (Sleeper)."""

    def __init__(self, use_live_data: bool = False, timeout: float = 10.0, lookback_hours: int = 24, limit: int = 25):
        super().__init__(use_live_data=use_live_data, timeout=timeout)
        self._params = {"lookback_hours": lookback_hours, "limit": limit}

    @property
    def source_name(self) -> str:
        return "sleeper-trending" if self._use_live_data else "sample-trending"

    async def fetch(self) -> list[TrendingPlayer]:
        if not self._use_live_data:
            return list(SAMPLE_TRENDING)
        items = parse_trending(
            await fetch_json(SLEEPER_TRENDING_URL, params=self._params, timeout=self._timeout)
        )
        if not items:
            raise MalformedPayloadError("Trending payload contained no players")
        return items
