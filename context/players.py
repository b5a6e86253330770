# context/players.py
"""
Player directory and fuzzy name matching.

Match scores (higher wins, ties keep directory order):
    5  exact match on full name
    4  full name starts with the query, or last name equals it
    3  last name starts with the query
    2  full name contains the query
    1  any query token appears in the full name
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

FANTASY_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DST")

# Directory sources use a few spellings for team defenses
_POSITION_ALIASES = {"DEF": "DST", "D/ST": "DST", "DST": "DST", "PK": "K"}

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class PlayerDirectoryEntry:
    """One fantasy-relevant player in the directory."""

    id: str
    full_name: str
    team: str
    position: str
    search_key: str
    last_name_key: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "team": self.team,
            "position": self.position,
        }


@dataclass(frozen=True)
class PlayerMatch:
    """A directory entry with its match score."""

    player: PlayerDirectoryEntry
    score: int

    def to_dict(self) -> dict:
        result = self.player.to_dict()
        result["matchScore"] = self.score
        return result


def normalize_name(name: str) -> str:
    """Lowercase and collapse whitespace."""
    return _WHITESPACE.sub(" ", (name or "").strip().lower())


def normalize_position(raw: Any) -> Optional[str]:
    """Map a raw position onto FANTASY_POSITIONS, None if irrelevant."""
    if not isinstance(raw, str):
        return None
    pos = raw.strip().upper()
    pos = _POSITION_ALIASES.get(pos, pos)
    return pos if pos in FANTASY_POSITIONS else None


def make_entry(
    player_id: str,
    full_name: str,
    team: Optional[str],
    position: str,
) -> PlayerDirectoryEntry:
    """Build an entry with precomputed search keys."""
    search_key = normalize_name(full_name)
    parts = search_key.split(" ")
    return PlayerDirectoryEntry(
        id=str(player_id),
        full_name=full_name.strip(),
        team=(team or "FA").strip().upper(),
        position=position,
        search_key=search_key,
        last_name_key=parts[-1] if parts else "",
    )


def _raw_position(attrs: Mapping) -> Any:
    position = attrs.get("position")
    if position:
        return position
    fantasy = attrs.get("fantasy_positions")
    if isinstance(fantasy, list) and fantasy:
        return fantasy[0]
    return None


def _raw_full_name(player_id: str, attrs: Mapping, position: str) -> str:
    full = attrs.get("full_name")
    if isinstance(full, str) and full.strip():
        return full
    first = str(attrs.get("first_name") or "").strip()
    last = str(attrs.get("last_name") or "").strip()
    name = f"{first} {last}".strip()
    if not name and position == "DST":
        return str(attrs.get("team") or player_id)
    return name


def build_directory(raw_players: Mapping[str, Any]) -> list[PlayerDirectoryEntry]:
    """
    Build directory entries from a player id -> attributes mapping.

    Entries outside the fantasy positions or without a usable name are
    skipped. Source order is preserved.
    """
    entries = []
    for player_id, attrs in (raw_players or {}).items():
        if not isinstance(attrs, Mapping):
            continue
        position = normalize_position(_raw_position(attrs))
        if position is None:
            continue
        full_name = _raw_full_name(str(player_id), attrs, position)
        if not full_name:
            continue
        entries.append(make_entry(str(player_id), full_name, attrs.get("team"), position))
    return entries


def match_score(query_key: str, tokens: Sequence[str], entry: PlayerDirectoryEntry) -> int:
    """Score one entry against a normalized query; 0 means no match."""
    if entry.search_key == query_key:
        return 5
    if entry.search_key.startswith(query_key) or entry.last_name_key == query_key:
        return 4
    if entry.last_name_key.startswith(query_key):
        return 3
    if query_key in entry.search_key:
        return 2
    if any(token in entry.search_key for token in tokens):
        return 1
    return 0


def match_players(
    query: str,
    directory: Iterable[PlayerDirectoryEntry],
    limit: int = 10,
    position: Optional[str] = None,
    team: Optional[str] = None,
) -> list[PlayerMatch]:
    """
    Rank directory entries against a free-text name query.

    Args:
        query: Name fragment, e.g. "mahomes" or "pat mah"
        directory: Entries in directory order
        limit: Maximum matches returned
        position: Optional position filter
        team: Optional team filter

    Returns:
        Matches ordered by descending score, ties in directory order
    """
    query_key = normalize_name(query)
    if not query_key or limit <= 0:
        return []

    tokens = [token for token in query_key.split(" ") if token]
    position = position.upper() if position else None
    team = team.upper() if team else None

    matches = []
    for entry in directory:
        if position and entry.position != position:
            continue
        if team and entry.team != team:
            continue
        score = match_score(query_key, tokens, entry)
        if score > 0:
            matches.append(PlayerMatch(player=entry, score=score))

    # Stable sort: equal scores keep directory order
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[:limit]


def best_match(
    query: str,
    directory: Iterable[PlayerDirectoryEntry],
    position: Optional[str] = None,
) -> Optional[PlayerDirectoryEntry]:
    """Return the single best entry for query, or None."""
    matches = match_players(query, directory, limit=1, position=position)
    return matches[0].player if matches else None
