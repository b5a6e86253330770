# app/schemas/waiver.py
"""
Pydantic schemas for the waiver context API.

Request bodies use snake_case; responses are the camelCase dicts produced
by the domain models' to_dict().
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from scoring.models import PlayerRecord, ProjectionMode


# =============================================================================
# Request Schemas
# =============================================================================


class PlayerSchema(BaseModel):
    """One player to score."""
    name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    team: Optional[str] = None
    opponent: Optional[str] = Field(default=None, description="BUF, @BUF or vs BUF")
    stats: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("position")
    @classmethod
    def upper_position(cls, v: str) -> str:
        return v.strip().upper()

    def to_record(self) -> PlayerRecord:
        return PlayerRecord(
            name=self.name,
            position=self.position,
            team=self.team.strip().upper() if self.team else None,
            opponent=self.opponent,
            stats=dict(self.stats),
        )


class ScoreRequest(BaseModel):
    """Batch scoring request."""
    players: List[PlayerSchema] = Field(..., min_length=1, max_length=200)
    mode: str = Field(default=ProjectionMode.WEEKLY.value, description="weekly or ros")

    @field_validator("mode")
    @classmethod
    def known_mode(cls, v: str) -> str:
        if v.strip().lower() not in ("weekly", "ros"):
            raise ValueError("mode must be 'weekly' or 'ros'")
        return v.strip().lower()


# =============================================================================
# Response Schemas
# =============================================================================


class ScoreResponse(BaseModel):
    mode: str
    count: int
    players: List[Dict[str, Any]]
