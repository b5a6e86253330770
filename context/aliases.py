# context/aliases.py
"""
Field-name aliases for defense-ranking payloads.

Sources disagree on key names, so each canonical field is resolved by
probing these lists in order (exact key first, then case-insensitive).
Edit the lists to support a new source layout; no parsing code changes.
"""

from __future__ import annotations

DEFAULT_DEFENSE_RANK = 16.0

POSITION_KEYS = ("QB", "RB", "WR", "TE")

# Keys that may hold the rankings array when the payload is an object
ARRAY_CANDIDATE_KEYS = ("data", "results", "ranks", "rankings", "list")

TEAM_KEYS = (
    "teamAbbr",
    "team_abbr",
    "team",
    "abbr",
    "teamAbbreviation",
    "team_abbreviation",
    "teamAbbrev",
    "team_abbrev",
    "teamShort",
    "shortName",
)

# Probed inside a nested team object, e.g. {"team": {"abbr": "KC"}}
NESTED_TEAM_KEYS = ("abbr", "abbreviation", "team", "teamAbbr", "team_abbr")

RANK_KEYS = {
    "overall": ("overall", "overallRank", "overall_rank", "rank", "rankOverall", "rank_overall", "ovr"),
    "QB": ("QB", "qbRank", "rankQB", "rank_qb", "qb_rank"),
    "RB": ("RB", "rbRank", "rankRB", "rank_rb", "rb_rank"),
    "WR": ("WR", "wrRank", "rankWR", "rank_wr", "wr_rank"),
    "TE": ("TE", "teRank", "rankTE", "rank_te", "te_rank"),
}
