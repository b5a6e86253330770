# scoring/rules.py
"""
Stat rule table.

Each stat name is matched against STAT_RULES in order; the first rule whose
pattern is a case-insensitive substring of the name wins. Order is part of
the contract: "redZoneTargets" must hit the red-zone rule before the
generic "target" rule, "ydsRoute" must hit yards-per-route before "yds",
and "points" must hit the production rule before "ints".
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence


class Bucket(Enum):
    OPPORTUNITY = "opportunity"
    EFFICIENCY = "efficiency"
    LEVERAGE = "leverage"
    PRODUCTION = "production"


class Normalize(Enum):
    NONE = "none"
    PERCENT = "percent"    # 65 -> 0.65; values already <= 1 are kept
    PER_TEN = "per_ten"    # route and yardage counts


class Transform(Enum):
    NONE = "none"
    INVERT = "invert"      # rate where lower is better: 1 - v
    RANK = "rank"          # ordinal where 1 is best: 1 - rank / 100


@dataclass(frozen=True)
class StatRule:
    patterns: tuple[str, ...]
    bucket: Bucket
    weight: float
    normalize: Normalize = Normalize.NONE
    transform: Transform = Transform.NONE

    def matches(self, stat_key: str) -> bool:
        return any(pattern in stat_key for pattern in self.patterns)

    def value(self, raw: float) -> float:
        """Apply normalization then transform to a raw stat value."""
        value = raw
        if self.normalize is Normalize.PERCENT and value > 1:
            value = value / 100
        elif self.normalize is Normalize.PER_TEN:
            value = value / 10

        if self.transform is Transform.INVERT:
            value = 1 - value
        elif self.transform is Transform.RANK:
            value = 1 - value / 100
        return value


B = Bucket
N = Normalize
T = Transform

STAT_RULES: tuple[StatRule, ...] = (
    # Leverage: scoring-area usage, checked before the generic target/carry rules
    StatRule(("redzone", "red_zone", "rz"), B.LEVERAGE, 0.3),
    StatRule(("endzone", "end_zone", "ezt"), B.LEVERAGE, 0.5),
    StatRule(("goalline", "goal_line", "inside5"), B.LEVERAGE, 0.5),
    StatRule(("deep",), B.LEVERAGE, 0.2),
    StatRule(("adot",), B.LEVERAGE, 0.05),
    # Efficiency
    StatRule(("tprr", "targetsperroute", "targets_per_route"), B.EFFICIENCY, 4.0, N.PERCENT),
    StatRule(("yprr", "ydsroute", "yardsperroute", "yards_per_route"), B.EFFICIENCY, 0.5),
    StatRule(("droprate", "drop_rate", "drop"), B.EFFICIENCY, 0.5, N.PERCENT, T.INVERT),
    StatRule(("catch",), B.EFFICIENCY, 1.0, N.PERCENT),
    StatRule(("completion", "comp_pct", "comppct"), B.EFFICIENCY, 1.0, N.PERCENT),
    StatRule(("ypc", "yardspercarry", "yards_per_carry", "ypa"), B.EFFICIENCY, 0.2),
    StatRule(("airyards", "air_yards", "air"), B.EFFICIENCY, 0.1, N.PER_TEN),
    StatRule(("yac",), B.EFFICIENCY, 0.1, N.PER_TEN),
    # Opportunity
    StatRule(("snap",), B.OPPORTUNITY, 1.0, N.PERCENT),
    StatRule(("routepct", "route_pct", "routeparticipation", "route_participation"), B.OPPORTUNITY, 1.0, N.PERCENT),
    StatRule(("share",), B.OPPORTUNITY, 3.0, N.PERCENT),
    StatRule(("route",), B.OPPORTUNITY, 0.2, N.PER_TEN),
    StatRule(("target", "tgt"), B.OPPORTUNITY, 1.0, N.PER_TEN),
    StatRule(("carries", "rushatt", "rush_att", "attempts", "touches"), B.OPPORTUNITY, 0.6, N.PER_TEN),
    # Production
    StatRule(("proj",), B.PRODUCTION, 1.0),
    StatRule(("fantasypoints", "fantasy_points", "fpts", "ppg", "points"), B.PRODUCTION, 1.0),
    StatRule(("ecr", "rank"), B.PRODUCTION, 5.0, transform=T.RANK),
    StatRule(("adp",), B.PRODUCTION, 2.0, transform=T.RANK),
    StatRule(("interception", "ints"), B.PRODUCTION, -2.0),
    StatRule(("fumble",), B.PRODUCTION, -2.0),
    StatRule(("touchdown", "td"), B.PRODUCTION, 4.0),
    StatRule(("passyard", "passyds", "pass_yards", "pass_yds"), B.PRODUCTION, 0.1, N.PER_TEN),
    StatRule(("yard", "yds"), B.PRODUCTION, 0.3, N.PER_TEN),
    StatRule(("reception", "rec"), B.PRODUCTION, 0.5),
)


def normalize_stat_key(name: str) -> str:
    return str(name or "").strip().lower()


def match_rule(stat_name: str, rules: Sequence[StatRule] = STAT_RULES) -> Optional[StatRule]:
    """Return the first rule matching stat_name, or None."""
    key = normalize_stat_key(stat_name)
    if not key:
        return None
    for rule in rules:
        if rule.matches(key):
            return rule
    return None


def is_usable(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)
