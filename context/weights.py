# context/weights.py
"""
Weighted fallback for the overall defense rank.

Used when a source publishes positional ranks but no overall rank.

Formula:
    overall = Σ(rank_pos × weight_pos) / Σ(weight_pos for finite rank_pos)
"""

from __future__ import annotations

import math
from typing import Mapping, Optional

from context.aliases import DEFAULT_DEFENSE_RANK, POSITION_KEYS

DEFAULT_WEIGHTS = {"QB": 0.20, "RB": 0.40, "WR": 0.30, "TE": 0.10}


def _as_weight(value: object, fallback: float) -> float:
    """Parse a single weight; negative or non-numeric values use fallback."""
    try:
        num = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(num) or num < 0:
        return fallback
    return num


def resolve_weights(overrides: Optional[Mapping[str, object]] = None) -> dict[str, float]:
    """
    Merge named overrides onto the defaults and re-normalize to sum to 1.

    Args:
        overrides: Mapping of position -> weight. Missing or invalid
                   positions keep their default weight.

    Returns:
        Normalized weights keyed by QB/RB/WR/TE. If every weight ends up
        zero, the default split is returned.
    """
    overrides = overrides or {}
    raw = {
        pos: _as_weight(overrides[pos], DEFAULT_WEIGHTS[pos]) if pos in overrides else DEFAULT_WEIGHTS[pos]
        for pos in POSITION_KEYS
    }
    total = sum(raw.values())
    if total <= 0:
        return dict(DEFAULT_WEIGHTS)
    return {pos: raw[pos] / total for pos in POSITION_KEYS}


def weighted_overall(
    ranks: Mapping[str, Optional[float]],
    weights: Optional[Mapping[str, float]] = None,
) -> float:
    """
    Compute the weighted overall rank from the positional ranks present.

    Positions whose rank is missing or non-finite are excluded from both
    the numerator and the weight total.
    """
    weights = weights or DEFAULT_WEIGHTS
    total_weight = 0.0
    weighted_sum = 0.0
    for pos in POSITION_KEYS:
        value = ranks.get(pos)
        if value is None or not math.isfinite(value):
            continue
        weighted_sum += value * weights[pos]
        total_weight += weights[pos]

    if total_weight > 0:
        return weighted_sum / total_weight
    return DEFAULT_DEFENSE_RANK
