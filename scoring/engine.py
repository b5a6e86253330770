# scoring/engine.py
"""
Composite Scoring Engine - Deterministic waiver score computation.

Pure functions: a player record plus resolved context in, a score out.
No shared state is read or written.

Canonical Formulas:
- bucket_ratio = clamp(Σ(rule.weight × rule.value(stat)) / BUCKET_NORMALIZERS[bucket], 0, 1)
- base = 100 × Σ(BUCKET_WEIGHTS[bucket] × bucket_ratio)
- score = base × POSITION_MULTIPLIERS[position] + Σ(adjustments)
- ros_score = 0.8 × score + 0.2 × (100 × production_ratio)
- final = round(clamp(score, 0, 100), 1); non-finite -> 0

Adjustments (each delta clamped before scaling):
- implied total vs 22.5, over/under vs 45, favorite bonus for spread < 0
- defensive matchup vs rank 16 (higher rank number = softer defense)
- rain: > 70% heavy penalty, > 40% light penalty
- temperature: <= 32°F freezing, >= 90°F heat
"""
from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence

from context.aliases import DEFAULT_DEFENSE_RANK
from context.defense import to_number
from context.market import DEFAULT_OVER_UNDER
from context.weather import parse_weather_summary
from scoring.models import (
    LEAGUE_AVERAGE_IMPLIED_TOTAL,
    PlayerRecord,
    ProjectionMode,
    ScoreBreakdown,
    ScoredPlayer,
    ScoringContext,
)
from scoring.rules import STAT_RULES, Bucket, StatRule, is_usable, match_rule

BUCKET_NORMALIZERS = {
    Bucket.OPPORTUNITY: 4.0,
    Bucket.EFFICIENCY: 3.0,
    Bucket.LEVERAGE: 3.0,
    Bucket.PRODUCTION: 25.0,
}

BUCKET_WEIGHTS = {
    Bucket.OPPORTUNITY: 0.35,
    Bucket.EFFICIENCY: 0.25,
    Bucket.LEVERAGE: 0.15,
    Bucket.PRODUCTION: 0.25,
}

POSITION_MULTIPLIERS = {
    "QB": 1.05,
    "RB": 1.0,
    "WR": 1.0,
    "TE": 0.95,
    "K": 0.9,
    "DST": 0.9,
}

# (clamp bound on the raw delta, scale applied after clamping)
IMPLIED_TOTAL_ADJ = (10.0, 0.8)
OVER_UNDER_ADJ = (10.0, 0.3)
FAVORITE_ADJ = (10.0, 0.3)
MATCHUP_ADJ = (16.0, 0.4)

HEAVY_RAIN_PCT = 70.0
LIGHT_RAIN_PCT = 40.0
HEAVY_RAIN_PENALTY = -6.0
LIGHT_RAIN_PENALTY = -3.0

FREEZING_F = 32.0
EXTREME_HEAT_F = 90.0
FREEZING_PENALTY = -3.0
HEAT_PENALTY = -2.0

ROS_SCORE_WEIGHT = 0.8
ROS_FLOOR_WEIGHT = 0.2


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _bounded(delta: float, bound_and_scale: tuple[float, float]) -> float:
    bound, scale = bound_and_scale
    return _clamp(delta, -bound, bound) * scale


# =============================================================================
# Buckets
# =============================================================================


def bucket_totals(
    stats: Mapping[str, object],
    rules: Sequence[StatRule] = STAT_RULES,
) -> dict[Bucket, float]:
    """Sum weighted stat values per bucket; unmatched or non-numeric stats are ignored."""
    totals = {bucket: 0.0 for bucket in Bucket}
    for name, raw in (stats or {}).items():
        value = to_number(raw)
        if not is_usable(value):
            continue
        rule = match_rule(name, rules)
        if rule is None:
            continue
        totals[rule.bucket] += rule.weight * rule.value(value)
    return totals


def bucket_ratios(totals: Mapping[Bucket, float]) -> dict[Bucket, float]:
    """Normalize bucket totals into [0, 1]."""
    return {
        bucket: _clamp(totals.get(bucket, 0.0) / BUCKET_NORMALIZERS[bucket], 0.0, 1.0)
        for bucket in Bucket
    }


def base_score(ratios: Mapping[Bucket, float]) -> float:
    return 100.0 * sum(BUCKET_WEIGHTS[bucket] * ratios[bucket] for bucket in Bucket)


def position_multiplier(position: str) -> float:
    return POSITION_MULTIPLIERS.get((position or "").strip().upper(), 1.0)


# =============================================================================
# Context Adjustments
# =============================================================================


def rain_penalty(rain_pct: Optional[float]) -> float:
    if rain_pct is None:
        return 0.0
    if rain_pct > HEAVY_RAIN_PCT:
        return HEAVY_RAIN_PENALTY
    if rain_pct > LIGHT_RAIN_PCT:
        return LIGHT_RAIN_PENALTY
    return 0.0


def temperature_penalty(temperature_f: Optional[float]) -> float:
    if temperature_f is None:
        return 0.0
    if temperature_f <= FREEZING_F:
        return FREEZING_PENALTY
    if temperature_f >= EXTREME_HEAT_F:
        return HEAT_PENALTY
    return 0.0


def context_adjustments(context: ScoringContext) -> dict[str, float]:
    """Compute every additive adjustment for a context."""
    implied = to_number(context.implied_total)
    over_under = to_number(context.over_under)
    spread = to_number(context.spread)
    def_rank = to_number(context.def_rank)
    temperature, rain = parse_weather_summary(context.weather)

    return {
        "impliedTotal": _bounded(
            (implied if implied is not None else LEAGUE_AVERAGE_IMPLIED_TOTAL) - LEAGUE_AVERAGE_IMPLIED_TOTAL,
            IMPLIED_TOTAL_ADJ,
        ),
        "overUnder": _bounded(over_under - DEFAULT_OVER_UNDER, OVER_UNDER_ADJ) if over_under is not None else 0.0,
        "favorite": _bounded(-spread, FAVORITE_ADJ) if spread is not None and spread < 0 else 0.0,
        "matchup": _bounded(
            (def_rank if def_rank is not None else DEFAULT_DEFENSE_RANK) - DEFAULT_DEFENSE_RANK,
            MATCHUP_ADJ,
        ),
        "rain": rain_penalty(rain),
        "temperature": temperature_penalty(temperature),
    }


# =============================================================================
# Composite Score
# =============================================================================


def finalize_score(value: float) -> float:
    """Clamp to [0, 100] and round to one decimal; non-finite becomes 0."""
    if not math.isfinite(value):
        return 0.0
    return round(_clamp(value, 0.0, 100.0), 1)


def compute_breakdown(player: PlayerRecord, context: ScoringContext) -> ScoreBreakdown:
    """
    Compute the composite score with every intermediate value.

    Args:
        player: Player record with raw stats
        context: Resolved external context and projection mode

    Returns:
        ScoreBreakdown whose score is in [0, 100]
    """
    ratios = bucket_ratios(bucket_totals(player.stats))
    base = base_score(ratios)
    multiplier = position_multiplier(player.position)
    adjustments = context_adjustments(context)

    score = base * multiplier + sum(adjustments.values())
    if context.mode is ProjectionMode.ROS:
        floor = 100.0 * ratios[Bucket.PRODUCTION]
        score = ROS_SCORE_WEIGHT * score + ROS_FLOOR_WEIGHT * floor

    return ScoreBreakdown(
        buckets={bucket.value: round(ratio, 4) for bucket, ratio in ratios.items()},
        base=round(base, 2),
        position_multiplier=multiplier,
        adjustments={name: round(value, 2) for name, value in adjustments.items()},
        score=finalize_score(score),
    )


def compute_score(player: PlayerRecord, context: Optional[ScoringContext] = None) -> float:
    """Composite score in [0, 100] for a player under context."""
    return compute_breakdown(player, context or ScoringContext()).score


def score_player(player: PlayerRecord, context: Optional[ScoringContext] = None) -> ScoredPlayer:
    """Score a player and return the augmented record."""
    context = context or ScoringContext()
    return ScoredPlayer(
        name=player.name,
        position=player.position,
        team=player.team,
        opponent=player.opponent,
        stats=dict(player.stats),
        weather=context.weather,
        def_rank=context.def_rank,
        implied_total=context.implied_total,
        over_under=context.over_under,
        spread=context.spread,
        score=compute_score(player, context),
        mode=context.mode,
    )


def rank_players(
    scored: Iterable[tuple[PlayerRecord, ScoringContext]],
) -> list[ScoredPlayer]:
    """Score a batch and sort by descending score (stable for ties)."""
    results = [score_player(player, context) for player, context in scored]
    results.sort(key=lambda p: p.score, reverse=True)
    return results
