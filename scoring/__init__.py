# scoring/__init__.py
"""
Composite waiver scoring.

Module Structure:
- models.py: PlayerRecord, ScoringContext, ScoredPlayer
- rules.py: ordered stat rule table (first match wins)
- engine.py: bucket math, context adjustments, final score
"""

from scoring.engine import compute_breakdown, compute_score, rank_players, score_player
from scoring.models import PlayerRecord, ProjectionMode, ScoredPlayer, ScoringContext

__all__ = [
    "PlayerRecord",
    "ProjectionMode",
    "ScoredPlayer",
    "ScoringContext",
    "compute_breakdown",
    "compute_score",
    "rank_players",
    "score_player",
]
