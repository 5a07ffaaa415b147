"""Dependencies for the matches feature.

Injects repositories, the object cache and the gateway into the resolver and
the ingestion pipeline.
"""

from typing import Annotated, Optional

from fastapi import Depends

from rift_reviewer.core.config import get_global_settings
from rift_reviewer.core.dependencies import (
    DatabaseManagerDep,
    RiotClientDep,
    SideTaskQueueDep,
)

from .gateway import RiotMatchGateway
from .ingestion import MatchIngestionPipeline
from .object_cache import ObjectCache, create_object_cache
from .repository import (
    MatchRecordRepositoryInterface,
    ParticipantIndexRepositoryInterface,
    SQLAlchemyMatchRecordRepository,
    SQLAlchemyParticipantIndexRepository,
)
from .resolver import CacheResolutionOrchestrator

_object_cache: Optional[ObjectCache] = None


def get_object_cache() -> ObjectCache:
    """Get the shared Fast Object Cache backend."""
    global _object_cache
    if _object_cache is None:
        _object_cache = create_object_cache()
    return _object_cache


async def close_object_cache() -> None:
    """Release the shared object cache."""
    global _object_cache
    if _object_cache is not None:
        await _object_cache.close()
        _object_cache = None


async def get_match_record_repository(
    db: DatabaseManagerDep,
) -> MatchRecordRepositoryInterface:
    """Get match record repository instance."""
    return SQLAlchemyMatchRecordRepository(db)


async def get_participant_repository(
    db: DatabaseManagerDep,
) -> ParticipantIndexRepositoryInterface:
    """Get participant index repository instance."""
    return SQLAlchemyParticipantIndexRepository(db)


async def get_riot_match_gateway(riot_client: RiotClientDep) -> RiotMatchGateway:
    """Get Riot match gateway instance.

    :param riot_client: Riot API client
    :returns: Riot match gateway
    """
    settings = get_global_settings()
    return RiotMatchGateway(
        riot_client,
        history_days=settings.match_history_days,
        default_count=settings.default_match_count,
    )


async def get_resolver(
    match_store: Annotated[
        MatchRecordRepositoryInterface, Depends(get_match_record_repository)
    ],
    object_cache: Annotated[ObjectCache, Depends(get_object_cache)],
    gateway: Annotated[RiotMatchGateway, Depends(get_riot_match_gateway)],
    side_tasks: SideTaskQueueDep,
) -> CacheResolutionOrchestrator:
    """Get the cache-resolution orchestrator."""
    return CacheResolutionOrchestrator(
        match_store,
        object_cache,
        gateway,
        side_tasks,
        record_ttl_days=get_global_settings().match_record_ttl_days,
    )


async def get_ingestion_pipeline(
    match_store: Annotated[
        MatchRecordRepositoryInterface, Depends(get_match_record_repository)
    ],
    participant_store: Annotated[
        ParticipantIndexRepositoryInterface, Depends(get_participant_repository)
    ],
    resolver: Annotated[CacheResolutionOrchestrator, Depends(get_resolver)],
    gateway: Annotated[RiotMatchGateway, Depends(get_riot_match_gateway)],
) -> MatchIngestionPipeline:
    """Get an ingestion pipeline that does not refresh aggregates."""
    settings = get_global_settings()
    return MatchIngestionPipeline(
        match_store,
        participant_store,
        resolver,
        gateway,
        concurrency=settings.ingest_concurrency,
        record_ttl_days=settings.match_record_ttl_days,
    )


# Type aliases for cleaner dependency injection
MatchRecordRepositoryDep = Annotated[
    MatchRecordRepositoryInterface, Depends(get_match_record_repository)
]
ParticipantRepositoryDep = Annotated[
    ParticipantIndexRepositoryInterface, Depends(get_participant_repository)
]
ObjectCacheDep = Annotated[ObjectCache, Depends(get_object_cache)]
RiotMatchGatewayDep = Annotated[RiotMatchGateway, Depends(get_riot_match_gateway)]
ResolverDep = Annotated[CacheResolutionOrchestrator, Depends(get_resolver)]
IngestionPipelineDep = Annotated[
    MatchIngestionPipeline, Depends(get_ingestion_pipeline)
]

__all__ = [
    "get_object_cache",
    "close_object_cache",
    "get_match_record_repository",
    "get_participant_repository",
    "get_riot_match_gateway",
    "get_resolver",
    "get_ingestion_pipeline",
    "MatchRecordRepositoryDep",
    "ParticipantRepositoryDep",
    "ObjectCacheDep",
    "RiotMatchGatewayDep",
    "ResolverDep",
    "IngestionPipelineDep",
]
