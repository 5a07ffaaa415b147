from typing import Optional

from fastapi import APIRouter, Query

from rift_reviewer.features.matches.schemas import IngestionSummary, IngestRequest
from rift_reviewer.features.players.dependencies import PlayerHistoryServiceDep
from rift_reviewer.features.players.schemas import (
    AccountResponse,
    AggregationResult,
    PlayerAggregate,
    PlayerHistoryResponse,
)

router = APIRouter(prefix="/players", tags=["players"])


@router.get("/search", response_model=AccountResponse)
async def search_player(
    service: PlayerHistoryServiceDep,
    game_name: str = Query(..., min_length=1, description="Riot ID game name"),
    tag_line: str = Query(..., min_length=1, description="Riot ID tag line"),
    region: Optional[str] = Query(None, description="Platform or region routing hint"),
) -> AccountResponse:
    """Resolve a Riot ID to a PUUID"""
    return await service.search_player(game_name, tag_line, region)


@router.get("/{puuid}/matches", response_model=PlayerHistoryResponse)
async def get_player_matches(
    puuid: str,
    service: PlayerHistoryServiceDep,
    platform: Optional[str] = Query(None, description="Platform or region routing hint"),
    refresh: bool = Query(False, description="Re-ingest even if history exists"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> PlayerHistoryResponse:
    """Get a player's match history, ingesting on first lookup"""
    return await service.get_history(
        puuid, routing_hint=platform, refresh=refresh, limit=limit, offset=offset
    )


@router.get("/{puuid}/stats", response_model=PlayerAggregate)
async def get_player_stats(
    puuid: str, service: PlayerHistoryServiceDep
) -> PlayerAggregate:
    """Get a player's stored aggregate statistics"""
    return await service.get_stats(puuid)


@router.post("/{puuid}/ingest", response_model=IngestionSummary)
async def ingest_player_matches(
    puuid: str, request: IngestRequest, service: PlayerHistoryServiceDep
) -> IngestionSummary:
    """Ingest matches for a player and refresh the aggregate"""
    return await service.ingest(
        puuid,
        matches=request.matches,
        match_ids=request.match_ids,
        count=request.count,
        routing_hint=request.platform,
    )


@router.post("/{puuid}/aggregate", response_model=AggregationResult)
async def aggregate_player(
    puuid: str,
    service: PlayerHistoryServiceDep,
    platform: Optional[str] = Query(None, description="Platform or region routing hint"),
) -> AggregationResult:
    """Recompute a player's aggregate statistics"""
    return await service.aggregate(puuid, platform)
