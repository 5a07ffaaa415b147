from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query

from rift_reviewer.features.matches.dependencies import (
    IngestionPipelineDep,
    ResolverDep,
)
from rift_reviewer.features.matches.schemas import MatchOutcome, ResolvedMatchResponse

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("/{match_id}", response_model=ResolvedMatchResponse)
async def get_match(
    match_id: str,
    resolver: ResolverDep,
    platform: Optional[str] = Query(None, description="Platform or region routing hint"),
) -> ResolvedMatchResponse:
    """Resolve a match blob through the cache tiers"""
    data, source = await resolver.resolve_match_with_source(match_id, platform)
    return ResolvedMatchResponse(match_id=match_id, source=source, data=data)


@router.get("/{match_id}/timeline", response_model=ResolvedMatchResponse)
async def get_match_timeline(
    match_id: str,
    resolver: ResolverDep,
    platform: Optional[str] = Query(None, description="Platform or region routing hint"),
) -> ResolvedMatchResponse:
    """Resolve a match timeline blob"""
    data, source = await resolver.resolve_timeline_with_source(match_id, platform)
    return ResolvedMatchResponse(match_id=match_id, source=source, data=data)


@router.post("/process", response_model=MatchOutcome)
async def process_match(
    pipeline: IngestionPipelineDep,
    match: Dict[str, Any] = Body(..., description="Raw match blob"),
) -> MatchOutcome:
    """Ingest one match blob without refreshing player aggregates"""
    return await pipeline.ingest_match(match)
