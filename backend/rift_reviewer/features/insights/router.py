from typing import Optional

from fastapi import APIRouter, Query

from rift_reviewer.features.insights.dependencies import InsightServiceDep
from rift_reviewer.features.insights.schemas import (
    InsightResponse,
    TimelineInsightResponse,
)

router = APIRouter(prefix="/insights", tags=["insights"])


@router.post("/players/{puuid}", response_model=InsightResponse)
async def generate_player_insights(
    puuid: str, service: InsightServiceDep
) -> InsightResponse:
    """Generate coaching insights for a player's recent history"""
    insight = await service.player_insights(puuid)
    return InsightResponse(available=insight is not None, insight=insight)


@router.post("/players/{puuid}/matches/{match_id}", response_model=InsightResponse)
async def generate_match_insights(
    puuid: str, match_id: str, service: InsightServiceDep
) -> InsightResponse:
    """Generate coaching insights for one match"""
    insight = await service.match_insights(puuid, match_id)
    return InsightResponse(available=insight is not None, insight=insight)


@router.post("/matches/{match_id}/timeline", response_model=TimelineInsightResponse)
async def generate_timeline_insights(
    match_id: str,
    service: InsightServiceDep,
    platform: Optional[str] = Query(None, description="Platform or region routing hint"),
) -> TimelineInsightResponse:
    """Generate key-moment insights for a match timeline"""
    insights = await service.timeline_insights(match_id, platform)
    return TimelineInsightResponse(
        available=insights is not None, insights=insights or []
    )
