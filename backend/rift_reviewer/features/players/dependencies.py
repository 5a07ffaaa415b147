"""Dependencies for the players feature."""

from typing import Annotated

from fastapi import Depends

from rift_reviewer.core.config import get_global_settings
from rift_reviewer.core.dependencies import DatabaseManagerDep, RiotClientDep
from rift_reviewer.features.matches.dependencies import (
    MatchRecordRepositoryDep,
    ParticipantRepositoryDep,
    ResolverDep,
    RiotMatchGatewayDep,
)
from rift_reviewer.features.matches.ingestion import MatchIngestionPipeline

from .aggregation import AggregationEngine
from .gateway import RiotAccountGateway
from .repository import (
    PlayerAggregateRepositoryInterface,
    SQLAlchemyPlayerAggregateRepository,
)
from .service import PlayerHistoryService


async def get_player_aggregate_repository(
    db: DatabaseManagerDep,
) -> PlayerAggregateRepositoryInterface:
    """Get player aggregate repository instance."""
    return SQLAlchemyPlayerAggregateRepository(db)


async def get_account_gateway(riot_client: RiotClientDep) -> RiotAccountGateway:
    """Get Riot account gateway instance."""
    return RiotAccountGateway(riot_client)


async def get_aggregation_engine(
    participant_store: ParticipantRepositoryDep,
    aggregate_store: Annotated[
        PlayerAggregateRepositoryInterface, Depends(get_player_aggregate_repository)
    ],
    account_gateway: Annotated[RiotAccountGateway, Depends(get_account_gateway)],
) -> AggregationEngine:
    """Get aggregation engine instance."""
    return AggregationEngine(participant_store, aggregate_store, account_gateway)


async def get_player_history_service(
    match_store: MatchRecordRepositoryDep,
    participant_store: ParticipantRepositoryDep,
    aggregate_store: Annotated[
        PlayerAggregateRepositoryInterface, Depends(get_player_aggregate_repository)
    ],
    resolver: ResolverDep,
    match_gateway: RiotMatchGatewayDep,
    account_gateway: Annotated[RiotAccountGateway, Depends(get_account_gateway)],
    engine: Annotated[AggregationEngine, Depends(get_aggregation_engine)],
) -> PlayerHistoryService:
    """Get player history service with an aggregating ingestion pipeline."""
    settings = get_global_settings()
    pipeline = MatchIngestionPipeline(
        match_store,
        participant_store,
        resolver,
        match_gateway,
        aggregator=engine,
        concurrency=settings.ingest_concurrency,
        record_ttl_days=settings.match_record_ttl_days,
    )
    return PlayerHistoryService(
        participant_store, aggregate_store, pipeline, engine, account_gateway
    )


# Type aliases for cleaner dependency injection
PlayerAggregateRepositoryDep = Annotated[
    PlayerAggregateRepositoryInterface, Depends(get_player_aggregate_repository)
]
AccountGatewayDep = Annotated[RiotAccountGateway, Depends(get_account_gateway)]
AggregationEngineDep = Annotated[AggregationEngine, Depends(get_aggregation_engine)]
PlayerHistoryServiceDep = Annotated[
    PlayerHistoryService, Depends(get_player_history_service)
]

__all__ = [
    "get_player_aggregate_repository",
    "get_account_gateway",
    "get_aggregation_engine",
    "get_player_history_service",
    "PlayerAggregateRepositoryDep",
    "AccountGatewayDep",
    "AggregationEngineDep",
    "PlayerHistoryServiceDep",
]
