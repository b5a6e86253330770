# context/market.py
"""
Market context resolver.

Turns a league scoreboard payload (ESPN layout) into one MarketContext per
team: implied team total, signed spread, kickoff, venue and broadcast.

Formulas (home_spread is negative when home is favored):
    implied_home = total / 2 - home_spread / 2
    implied_away = total / 2 + home_spread / 2

For every game: implied_home + implied_away == total and
spread_home == -spread_away.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from context.defense import to_number

_logger = logging.getLogger(__name__)

DEFAULT_OVER_UNDER = 45.0

_DESCRIPTOR_PATTERN = re.compile(r"^\s*([A-Za-z]{2,4})\s+([+-]?\d+(?:\.\d+)?)\s*$")
_PICK_EM = {"EVEN", "PK", "PICK", "PICKEM", "PICK'EM"}


@dataclass(frozen=True)
class MarketContext:
    """Betting-market context for one team in one game."""

    team: str
    opponent: str
    implied_total: Optional[float]
    opponent_implied_total: Optional[float]
    over_under: float
    spread: float
    opponent_spread: float
    kickoff: Optional[str] = None
    venue: Optional[str] = None
    broadcast: Optional[str] = None
    is_home: bool = False
    game_id: Optional[str] = None
    odds_provider: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "team": self.team,
            "opponent": self.opponent,
            "impliedTotal": self.implied_total,
            "opponentImpliedTotal": self.opponent_implied_total,
            "overUnder": self.over_under,
            "spread": self.spread,
            "opponentSpread": self.opponent_spread,
            "kickoff": self.kickoff,
            "venue": self.venue,
            "broadcast": self.broadcast,
            "isHome": self.is_home,
            "gameId": self.game_id,
            "oddsProvider": self.odds_provider,
        }


# =============================================================================
# Odds Parsing
# =============================================================================


def parse_spread_descriptor(details: Any) -> tuple[Optional[str], Optional[float]]:
    """
    Split an odds descriptor into (favored team token, spread).

    "KC -3.5" -> ("KC", 3.5)   magnitude only
    -3.5      -> (None, -3.5)  numeric values keep their sign
    "EVEN"    -> (None, 0.0)
    """
    numeric = to_number(details)
    if numeric is not None:
        return None, numeric

    if not isinstance(details, str):
        return None, 0.0

    text = details.strip()
    if text.upper() in _PICK_EM:
        return None, 0.0

    match = _DESCRIPTOR_PATTERN.match(text)
    if not match:
        return None, 0.0
    return match.group(1).upper(), abs(float(match.group(2)))


def signed_home_spread(
    details: Any,
    home_abbr: str,
    away_abbr: str,
) -> float:
    """
    Resolve the home team's signed spread from an odds descriptor.

    Numeric descriptors are taken as the home spread. For "TEAM -X" the
    favored side gets -X. A token matching neither team is read as home
    favored.
    """
    token, magnitude = parse_spread_descriptor(details)
    if token is None:
        return magnitude or 0.0
    if token == away_abbr:
        return magnitude
    if token != home_abbr:
        _logger.debug(
            f"Favored token '{token}' matches neither {home_abbr} nor {away_abbr}; "
            "treating home as favored"
        )
    return -magnitude


# =============================================================================
# Scoreboard Resolution
# =============================================================================


def _mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _abbr(competitor: Mapping) -> str:
    team = _mapping(competitor.get("team"))
    return str(team.get("abbreviation") or "").strip().upper()


def _find_side(competitors: list, side: str) -> Optional[Mapping]:
    for competitor in competitors:
        if isinstance(competitor, Mapping) and competitor.get("homeAway") == side:
            return competitor
    return None


def _first(items: Any) -> Optional[Mapping]:
    if isinstance(items, list) and items and isinstance(items[0], Mapping):
        return items[0]
    return None


def _kickoff(raw: Any) -> Optional[str]:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return datetime.fromisoformat(raw.strip().replace("Z", "+00:00")).isoformat()
    except ValueError:
        return raw.strip()


def _broadcast(competition: Mapping) -> Optional[str]:
    broadcast = _first(competition.get("broadcasts"))
    if broadcast:
        names = broadcast.get("names")
        if isinstance(names, list) and names:
            return str(names[0])
    geo = _first(competition.get("geoBroadcasts"))
    if geo:
        media = _mapping(geo.get("media"))
        if media.get("shortName"):
            return str(media["shortName"])
    return None


def resolve_game(event: Mapping) -> list[MarketContext]:
    """
    Build the two MarketContext records for one scoreboard event.

    Returns an empty list when the game has no odds block, lacks a home
    or away competitor, or is structurally malformed. Non-object venue and
    provider blocks are ignored.
    """
    competition = _first(event.get("competitions"))
    if competition is None:
        return []

    competitors = competition.get("competitors")
    if not isinstance(competitors, list):
        return []
    home = _find_side(competitors, "home")
    away = _find_side(competitors, "away")
    if home is None or away is None:
        return []

    home_abbr, away_abbr = _abbr(home), _abbr(away)
    if not home_abbr or not away_abbr:
        return []

    odds = _first(competition.get("odds"))
    if odds is None:
        return []

    total = to_number(odds.get("overUnder"))
    if total is None:
        total = DEFAULT_OVER_UNDER

    details = odds.get("details")
    if details is None:
        details = odds.get("spread")
    home_spread = signed_home_spread(details, home_abbr, away_abbr)

    implied_home = round(total / 2 - home_spread / 2, 2)
    implied_away = round(total / 2 + home_spread / 2, 2)

    venue = _mapping(competition.get("venue")).get("fullName")
    provider = _mapping(odds.get("provider")).get("name")
    shared = {
        "over_under": total,
        "kickoff": _kickoff(competition.get("date") or event.get("date")),
        "venue": venue,
        "broadcast": _broadcast(competition),
        "game_id": str(event["id"]) if event.get("id") is not None else None,
        "odds_provider": provider,
    }

    # Normalize -0.0 so pick'em games serialize as 0.0 on both sides
    home_spread = home_spread + 0.0
    away_spread = -home_spread + 0.0

    return [
        MarketContext(
            team=home_abbr,
            opponent=away_abbr,
            implied_total=implied_home,
            opponent_implied_total=implied_away,
            spread=home_spread,
            opponent_spread=away_spread,
            is_home=True,
            **shared,
        ),
        MarketContext(
            team=away_abbr,
            opponent=home_abbr,
            implied_total=implied_away,
            opponent_implied_total=implied_home,
            spread=away_spread,
            opponent_spread=home_spread,
            is_home=False,
            **shared,
        ),
    ]


def resolve_market_contexts(scoreboard: Any) -> dict[str, MarketContext]:
    """
    Index every resolvable team in a scoreboard payload by team code.

    Args:
        scoreboard: Decoded scoreboard JSON ({"events": [...]})

    Returns:
        Mapping of uppercase team code -> MarketContext
    """
    index: dict[str, MarketContext] = {}
    if not isinstance(scoreboard, Mapping):
        return index

    for event in scoreboard.get("events") or []:
        if not isinstance(event, Mapping):
            continue
        for context in resolve_game(event):
            index.setdefault(context.team, context)
    return index


def find_market_context(
    index: Mapping[str, MarketContext],
    team: str,
) -> Optional[MarketContext]:
    """Look up a team's context (case-insensitive); None when not playing."""
    if not team:
        return None
    return index.get(team.strip().upper())
