# context/defense.py
"""
Defense-ranking schema normalizer.

Accepts whatever a rankings source hands back (a JSON array, a JSON object
wrapping the array, or CSV text) and converts it into DefenseRankEntry
records sorted toughest defense first.

Malformed records are dropped one at a time; the batch only fails when
nothing usable is left, and that decision belongs to the caller.
"""

from __future__ import annotations

import csv
import io
import json
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from context.aliases import (
    ARRAY_CANDIDATE_KEYS,
    DEFAULT_DEFENSE_RANK,
    NESTED_TEAM_KEYS,
    POSITION_KEYS,
    RANK_KEYS,
    TEAM_KEYS,
)
from context.weights import weighted_overall


@dataclass(frozen=True)
class DefenseRankEntry:
    """Normalized defensive ranking for one team (1 = toughest)."""

    team_abbr: str
    overall: float
    QB: float = DEFAULT_DEFENSE_RANK
    RB: float = DEFAULT_DEFENSE_RANK
    WR: float = DEFAULT_DEFENSE_RANK
    TE: float = DEFAULT_DEFENSE_RANK

    def rank_for(self, position: str) -> float:
        """Positional rank, or overall for positions without one (K, DST)."""
        pos = position.upper()
        if pos in POSITION_KEYS:
            return getattr(self, pos)
        return self.overall

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape."""
        return {
            "teamAbbr": self.team_abbr,
            "overall": self.overall,
            "QB": self.QB,
            "RB": self.RB,
            "WR": self.WR,
            "TE": self.TE,
        }


# =============================================================================
# Payload Coercion
# =============================================================================


def parse_defense_csv(text: str) -> list[dict]:
    """
    Parse CSV text into row dicts.

    Quoted fields may contain commas and doubled quotes. Every value is
    reachable by its original header and by the lowercase header.
    """
    if not text or not text.strip():
        return []

    reader = csv.reader(io.StringIO(text.strip()), skipinitialspace=True)
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if not rows:
        return []

    headers = [header.strip() for header in rows[0]]
    records = []
    for row in rows[1:]:
        record: dict[str, str] = {}
        for index, header in enumerate(headers):
            value = row[index].strip() if index < len(row) else ""
            record[header] = value
            record.setdefault(header.lower(), value)
        records.append(record)
    return records


def coerce_payload(raw: Any) -> Any:
    """Decode text payloads: JSON first, CSV when JSON parsing fails."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        trimmed = raw.strip()
        if not trimmed:
            return []
        try:
            return json.loads(trimmed)
        except ValueError:
            return parse_defense_csv(trimmed)
    return raw


def coerce_rows(payload: Any) -> list:
    """Find the list of records inside a decoded payload."""
    if not payload:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in ARRAY_CANDIDATE_KEYS:
            candidate = payload.get(key)
            if isinstance(candidate, list):
                return candidate
    return []


# =============================================================================
# Field Probing
# =============================================================================


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def pick_value(record: Any, keys: Sequence[str]) -> Any:
    """
    Return the first non-blank value found under any of keys.

    Each key is tried verbatim, then case-insensitively against a lowercase
    map of the record's own keys.
    """
    if not isinstance(record, Mapping):
        return None

    lower_map: dict[str, Any] = {}
    for key, value in record.items():
        lower_map.setdefault(str(key).lower(), value)

    for key in keys:
        value = record.get(key)
        if not _is_blank(value):
            return value
        value = lower_map.get(key.lower())
        if not _is_blank(value):
            return value
    return None


def pick_team_abbr(record: Any) -> Optional[str]:
    """Resolve the team code, looking one level into a nested team object."""
    direct = pick_value(record, TEAM_KEYS)
    if isinstance(direct, str) and direct.strip():
        return direct.strip()
    if isinstance(direct, Mapping):
        nested = pick_value(direct, NESTED_TEAM_KEYS)
        if isinstance(nested, str) and nested.strip():
            return nested.strip()
    return None


def to_number(value: Any) -> Optional[float]:
    """Coerce a rank-like value to a finite float, else None."""
    if isinstance(value, bool) or _is_blank(value):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def pick_rank(record: Any, keys: Sequence[str]) -> Optional[float]:
    """Return the first finite number under any of keys; non-numeric values are skipped."""
    if not isinstance(record, Mapping):
        return None

    lower_map: dict[str, Any] = {}
    for key, value in record.items():
        lower_map.setdefault(str(key).lower(), value)

    for key in keys:
        for value in (record.get(key), lower_map.get(key.lower())):
            num = to_number(value)
            if num is not None:
                return num
    return None


# =============================================================================
# Normalization
# =============================================================================


def normalize_record(
    record: Any,
    weights: Optional[Mapping[str, float]] = None,
) -> Optional[DefenseRankEntry]:
    """Normalize a single record; None when it has no team code."""
    team_abbr = pick_team_abbr(record)
    if not team_abbr:
        return None

    positional = {pos: pick_rank(record, RANK_KEYS[pos]) for pos in POSITION_KEYS}
    overall = pick_rank(record, RANK_KEYS["overall"])
    if overall is None:
        overall = weighted_overall(positional, weights)

    return DefenseRankEntry(
        team_abbr=team_abbr.upper(),
        overall=overall,
        **{
            pos: value if value is not None else DEFAULT_DEFENSE_RANK
            for pos, value in positional.items()
        },
    )


def normalize_defense_ranks(
    raw_payload: Any,
    weights: Optional[Mapping[str, float]] = None,
) -> list[DefenseRankEntry]:
    """
    Normalize any supported payload into entries sorted by overall rank.

    Args:
        raw_payload: JSON text, CSV text, bytes, list or dict
        weights: Normalized positional weights for the overall fallback

    Returns:
        Entries sorted ascending by overall (ties keep source order).
        Records without a resolvable team are left out.
    """
    rows = coerce_rows(coerce_payload(raw_payload))
    entries = [normalize_record(row, weights) for row in rows]
    return sorted((e for e in entries if e is not None), key=lambda e: e.overall)


def index_by_team(entries: Iterable[DefenseRankEntry]) -> dict[str, DefenseRankEntry]:
    """Build a team code -> entry lookup (first entry wins on duplicates)."""
    index: dict[str, DefenseRankEntry] = {}
    for entry in entries:
        index.setdefault(entry.team_abbr, entry)
    return index
