# context/providers/espn_scoreboard.py
"""
NFL scoreboard / odds provider.

Fetches the ESPN scoreboard, which carries the odds block per game, and
resolves it into MarketContext records. Sample data is served when live
data is disabled.
"""

from __future__ import annotations

from typing import Any

from context.errors import MalformedPayloadError
from context.market import MarketContext, resolve_market_contexts
from context.providers.base import ContextProvider, fetch_json

ESPN_SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"


def _competitor(abbr: str, side: str) -> dict:
    return {"homeAway": side, "team": {"abbreviation": abbr}}


def _sample_event(event_id: str, home: str, away: str, details: str, total: float, date: str, venue: str, network: str) -> dict:
    return {
        "id": event_id,
        "date": date,
        "competitions": [
            {
                "date": date,
                "venue": {"fullName": venue},
                "broadcasts": [{"names": [network]}],
                "competitors": [_competitor(home, "home"), _competitor(away, "away")],
                "odds": [{"details": details, "overUnder": total, "provider": {"name": "sample"}}],
            }
        ],
    }


# =============================================================================
# Sample Data (fallback when live data unavailable)
# =============================================================================

SAMPLE_SCOREBOARD = {
    "events": [
        _sample_event("sample-1", "KC", "BUF", "KC -2.5", 48.5, "2025-11-16T21:25Z", "GEHA Field at Arrowhead Stadium", "CBS"),
        _sample_event("sample-2", "PHI", "DAL", "PHI -6.5", 46.0, "2025-11-16T18:00Z", "Lincoln Financial Field", "FOX"),
        _sample_event("sample-3", "SF", "SEA", "SF -4", 44.5, "2025-11-16T21:05Z", "Levi's Stadium", "FOX"),
        _sample_event("sample-4", "DET", "GB", "DET -3", 50.5, "2025-11-17T01:20Z", "Ford Field", "NBC"),
        _sample_event("sample-5", "MIA", "NYJ", "NYJ -1", 41.5, "2025-11-16T18:00Z", "Hard Rock Stadium", "CBS"),
        _sample_event("sample-6", "BAL", "CIN", "BAL -7", 51.0, "2025-11-16T18:00Z", "M&T Bank Stadium", "CBS"),
    ]
}


class ScoreboardProvider(ContextProvider):
    """Scoreboard + odds provider backed by the ESPN public API."""

    def __init__(self, use_live_data: bool = False, timeout: float = 10.0, url: str = ESPN_SCOREBOARD_URL):
        super().__init__(use_live_data=use_live_data, timeout=timeout)
        self._url = url

    @property
    def source_name(self) -> str:
        return "espn-scoreboard" if self._use_live_data else "sample-scoreboard"

    async def fetch_raw(self) -> Any:
        if not self._use_live_data:
            return SAMPLE_SCOREBOARD
        return await fetch_json(self._url, timeout=self._timeout)

    async def fetch(self) -> dict[str, MarketContext]:
        """
        Fetch the scoreboard and index market context by team.

        Raises:
            MalformedPayloadError: if no game yields a usable context
        """
        index = resolve_market_contexts(await self.fetch_raw())
        if not index:
            raise MalformedPayloadError("Scoreboard contained no games with odds")
        return index
