# scoring/models.py
"""
Scoring data model.

PlayerRecord is supplied by the caller. ScoringContext carries the
resolved external signals. ScoredPlayer is the record plus context plus
the computed score.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from context.aliases import DEFAULT_DEFENSE_RANK

LEAGUE_AVERAGE_IMPLIED_TOTAL = 22.5


class ProjectionMode(Enum):
    """Projection horizon."""

    WEEKLY = "weekly"        # Short-term: this week's matchup
    ROS = "ros"              # Rest of season: favors season-long role

    @classmethod
    def parse(cls, value: object) -> "ProjectionMode":
        """Parse a mode name, defaulting to WEEKLY for unknown input."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text in ("ros", "rest-of-season", "rest_of_season", "season"):
            return cls.ROS
        return cls.WEEKLY


@dataclass(frozen=True)
class PlayerRecord:
    """Externally supplied player with raw stats."""

    name: str
    position: str
    team: Optional[str] = None
    opponent: Optional[str] = None
    stats: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoringContext:
    """Resolved external context for one player."""

    def_rank: float = DEFAULT_DEFENSE_RANK
    implied_total: float = LEAGUE_AVERAGE_IMPLIED_TOTAL
    over_under: Optional[float] = None
    spread: Optional[float] = None
    weather: Optional[str] = None
    mode: ProjectionMode = ProjectionMode.WEEKLY


@dataclass(frozen=True)
class ScoreBreakdown:
    """Intermediate values behind a score, for transparency."""

    buckets: Mapping[str, float]
    base: float
    position_multiplier: float
    adjustments: Mapping[str, float]
    score: float

    def to_dict(self) -> dict:
        return {
            "buckets": dict(self.buckets),
            "base": self.base,
            "positionMultiplier": self.position_multiplier,
            "adjustments": dict(self.adjustments),
            "score": self.score,
        }


@dataclass(frozen=True)
class ScoredPlayer:
    """Player record augmented with context and the composite score."""

    name: str
    position: str
    team: Optional[str]
    opponent: Optional[str]
    stats: Mapping[str, object]
    weather: Optional[str]
    def_rank: float
    implied_total: float
    over_under: Optional[float]
    spread: Optional[float]
    score: float
    mode: ProjectionMode = ProjectionMode.WEEKLY

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "name": self.name,
            "position": self.position,
            "team": self.team,
            "opponent": self.opponent,
            "stats": dict(self.stats),
            "weather": self.weather,
            "defRank": self.def_rank,
            "impliedTotal": self.implied_total,
            "overUnder": self.over_under,
            "spread": self.spread,
            "score": self.score,
            "mode": self.mode.value,
        }
