# app/routers/waiver.py
"""
Waiver context endpoints.

All handlers go through the ContextService singleton so every route shares
the same caches. Unknown teams or players return 404 with an error body
rather than fabricated defaults.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.correlation import get_request_id
from app.schemas.waiver import ScoreRequest, ScoreResponse
from context.service import ContextService, get_context_service
from context.weather import canonical_team, stadium_location
from scoring.models import ProjectionMode

router = APIRouter(prefix="/api", tags=["context"])


def _not_found(request: Request, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "request_id": get_request_id(request),
            "error": "not_found",
            "detail": detail,
        },
    )


# =============================================================================
# Defense Rankings
# =============================================================================


@router.get("/defense-rankings")
async def defense_rankings(
    refresh: bool = False,
    service: ContextService = Depends(get_context_service),
):
    """
    Normalized defense rankings, toughest defense first.

    Query:
        refresh: bypass the cache and refetch from the configured source
    """
    entries = await service.get_defense_ranks(force_refresh=refresh)
    return {
        "count": len(entries),
        "rankings": [entry.to_dict() for entry in entries],
    }


@router.get("/defense-rankings/{team}")
async def defense_ranking_for_team(
    team: str,
    request: Request,
    service: ContextService = Depends(get_context_service),
):
    entry = await service.find_defense_rank(team)
    if entry is None:
        return _not_found(request, f"No defense ranking for {team.upper()}")
    return entry.to_dict()


# =============================================================================
# Market Context
# =============================================================================


@router.get("/vegas-implied")
async def all_market_contexts(service: ContextService = Depends(get_context_service)):
    index = await service.get_market_contexts()
    return {
        "count": len(index),
        "teams": {team: context.to_dict() for team, context in sorted(index.items())},
    }


@router.get("/vegas-implied/{team}")
async def market_context_for_team(
    team: str,
    request: Request,
    service: ContextService = Depends(get_context_service),
):
    """Implied total, spread and game metadata for one team."""
    context = await service.get_market_context(team)
    if context is None:
        return _not_found(request, f"No game with odds for {team.upper()}")
    return context.to_dict()


# =============================================================================
# Weather
# =============================================================================


@router.get("/weather/{team}")
async def weather_for_team(
    team: str,
    request: Request,
    kickoff: Optional[str] = None,
    service: ContextService = Depends(get_context_service),
):
    if stadium_location(team) is None:
        return _not_found(request, f"Unknown stadium for {team.upper()}")
    summary = await service.get_weather(team, kickoff)
    return {"team": canonical_team(team), "kickoff": kickoff, "weather": summary}


# =============================================================================
# Players / News
# =============================================================================


@router.get("/players/search")
async def search_players(
    q: str = Query(..., min_length=1),
    limit: int = Query(default=10, ge=1, le=50),
    position: Optional[str] = None,
    team: Optional[str] = None,
    service: ContextService = Depends(get_context_service),
):
    matches = await service.search_players(q, limit=limit, position=position, team=team)
    return {
        "query": q,
        "count": len(matches),
        "results": [match.to_dict() for match in matches],
    }


@router.get("/news")
async def news(service: ContextService = Depends(get_context_service)):
    items = await service.get_news()
    return {"count": len(items), "items": [item.to_dict() for item in items]}


@router.get("/trending")
async def trending(service: ContextService = Depends(get_context_service)):
    items = await service.get_trending()
    return {"count": len(items), "players": [item.to_dict() for item in items]}


# =============================================================================
# Scoring
# =============================================================================


@router.post("/score", response_model=ScoreResponse)
async def score_players(
    body: ScoreRequest,
    service: ContextService = Depends(get_context_service),
):
    """
    Score a batch of players with live context.

    Players are returned sorted by descending score.
    """
    mode = ProjectionMode.parse(body.mode)
    scored = await service.score_players([p.to_record() for p in body.players], mode)
    return ScoreResponse(
        mode=mode.value,
        count=len(scored),
        players=[player.to_dict() for player in scored],
    )


# =============================================================================
# Monitoring
# =============================================================================


@router.get("/cache/status")
async def cache_status(service: ContextService = Depends(get_context_service)):
    return service.get_cache_status()


@router.post("/cache/clear")
async def clear_cache(
    name: Optional[str] = None,
    service: ContextService = Depends(get_context_service),
):
    service.clear_cache(name)
    return {"cleared": name or "all"}
