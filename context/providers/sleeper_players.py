# context/providers/sleeper_players.py
"""
Player directory provider (Sleeper public API).

The full NFL player map is large (~10k entries), so it is cached for hours
and filtered down to fantasy positions on every refresh.
"""

from __future__ import annotations

from context.errors import MalformedPayloadError
from context.players import PlayerDirectoryEntry, build_directory
from context.providers.base import ContextProvider, fetch_json

SLEEPER_PLAYERS_URL = "https://api.sleeper.app/v1/players/nfl"


# =============================================================================
# Sample Data (fallback when live data unavailable)
# =============================================================================

SAMPLE_PLAYERS = {
    "4046": {"first_name": "Patrick", "last_name": "Mahomes", "team": "KC", "position": "QB"},
    "4984": {"first_name": "Josh", "last_name": "Allen", "team": "BUF", "position": "QB"},
    "6904": {"first_name": "Jalen", "last_name": "Hurts", "team": "PHI", "position": "QB"},
    "4034": {"first_name": "Christian", "last_name": "McCaffrey", "team": "SF", "position": "RB"},
    "9509": {"first_name": "Bijan", "last_name": "Robinson", "team": "ATL", "position": "RB"},
    "8150": {"first_name": "Kyren", "last_name": "Williams", "team": "LAR", "position": "RB"},
    "9221": {"first_name": "Jahmyr", "last_name": "Gibbs", "team": "DET", "position": "RB"},
    "6794": {"first_name": "Justin", "last_name": "Jefferson", "team": "MIN", "position": "WR"},
    "7564": {"first_name": "Ja'Marr", "last_name": "Chase", "team": "CIN", "position": "WR"},
    "8146": {"first_name": "Garrett", "last_name": "Wilson", "team": "NYJ", "position": "WR"},
    "9488": {"first_name": "Jaxon", "last_name": "Smith-Njigba", "team": "SEA", "position": "WR"},
    "9493": {"first_name": "Puka", "last_name": "Nacua", "team": "LAR", "position": "WR"},
    "4866": {"first_name": "Saquon", "last_name": "Barkley", "team": "PHI", "position": "RB"},
    "1466": {"first_name": "Travis", "last_name": "Kelce", "team": "KC", "position": "TE"},
    "7553": {"first_name": "Kyle", "last_name": "Pitts", "team": "ATL", "position": "TE"},
    "11604": {"first_name": "Brock", "last_name": "Bowers", "team": "LV", "position": "TE"},
    "5272": {"first_name": "Justin", "last_name": "Tucker", "team": "BAL", "position": "K"},
    "KC": {"first_name": "Kansas City", "last_name": "Chiefs", "team": "KC", "position": "DEF"},
}


class PlayerDirectoryProvider(ContextProvider):
    """Builds the fantasy player directory."""

    def __init__(self, use_live_data: bool = False, timeout: float = 30.0, url: str = SLEEPER_PLAYERS_URL):
        super().__init__(use_live_data=use_live_data, timeout=timeout)
        self._url = url

    @property
    def source_name(self) -> str:
        return "sleeper-players" if self._use_live_data else "sample-players"

    async def fetch(self) -> list[PlayerDirectoryEntry]:
        """
        Raises:
            MalformedPayloadError: payload is not a mapping or has no fantasy players
        """
        raw = await fetch_json(self._url, timeout=self._timeout) if self._use_live_data else SAMPLE_PLAYERS
        if not isinstance(raw, dict):
            raise MalformedPayloadError("Player directory payload is not an object")
        directory = build_directory(raw)
        if not directory:
            raise MalformedPayloadError("Player directory contained no fantasy players")
        return directory


def sample_directory() -> list[PlayerDirectoryEntry]:
    """Bundled directory used when the live source fails."""
    return build_directory(SAMPLE_PLAYERS)
