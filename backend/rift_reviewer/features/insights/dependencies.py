"""Dependencies for the insights feature."""

from typing import Annotated, Optional

from fastapi import Depends

from rift_reviewer.core.config import get_global_settings
from rift_reviewer.features.matches.dependencies import (
    MatchRecordRepositoryDep,
    ParticipantRepositoryDep,
    ResolverDep,
)
from rift_reviewer.features.players.dependencies import PlayerAggregateRepositoryDep

from .generator import BedrockInsightGenerator, InsightGenerator
from .service import InsightService

_generator: Optional[BedrockInsightGenerator] = None


def get_insight_generator() -> Optional[InsightGenerator]:
    """Get the shared generator, or None when insights are disabled."""
    global _generator
    settings = get_global_settings()
    if not settings.insights_enabled:
        return None
    if _generator is None:
        _generator = BedrockInsightGenerator(
            model_id=settings.bedrock_model_id,
            region_name=settings.bedrock_region,
        )
    return _generator


async def get_insight_service(
    generator: Annotated[Optional[InsightGenerator], Depends(get_insight_generator)],
    participant_store: ParticipantRepositoryDep,
    aggregate_store: PlayerAggregateRepositoryDep,
    match_store: MatchRecordRepositoryDep,
    resolver: ResolverDep,
) -> InsightService:
    """Get insight service instance."""
    return InsightService(
        generator,
        participant_store,
        aggregate_store,
        match_store,
        resolver,
        enabled=get_global_settings().insights_enabled,
    )


# Type aliases for cleaner dependency injection
InsightServiceDep = Annotated[InsightService, Depends(get_insight_service)]

__all__ = ["get_insight_generator", "get_insight_service", "InsightServiceDep"]
