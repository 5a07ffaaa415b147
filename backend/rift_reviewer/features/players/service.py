"""Player service: the per-player view state machine.

States move NO_DATA -> INGESTING -> READY, with READY -> INGESTING on a
forced refresh. A READY read with an existing aggregate performs no writes.
Ingestion runs synchronously from the caller's point of view.
"""

from typing import Optional

import structlog

from rift_reviewer.core.enums import PlayerViewState
from rift_reviewer.core.exceptions import PlayerNotFoundError, ServiceException
from rift_reviewer.features.matches.ingestion import MatchIngestionPipeline
from rift_reviewer.features.matches.repository import (
    ParticipantIndexRepositoryInterface,
)
from rift_reviewer.features.matches.schemas import (
    IngestionSummary,
    ParticipantIndexResponse,
)

from .aggregation import AggregationEngine
from .gateway import RiotAccountGateway
from .repository import PlayerAggregateRepositoryInterface
from .schemas import (
    AccountResponse,
    AggregationResult,
    PlayerAggregate,
    PlayerHistoryResponse,
)

logger = structlog.get_logger(__name__)


class PlayerHistoryService:
    """Thin orchestration over ingestion, aggregation and the stores."""

    def __init__(
        self,
        participant_store: ParticipantIndexRepositoryInterface,
        aggregate_store: PlayerAggregateRepositoryInterface,
        pipeline: MatchIngestionPipeline,
        engine: AggregationEngine,
        account_gateway: RiotAccountGateway,
    ):
        self.participant_store = participant_store
        self.aggregate_store = aggregate_store
        self.pipeline = pipeline
        self.engine = engine
        self.account_gateway = account_gateway

    async def get_history(
        self,
        puuid: str,
        routing_hint: Optional[str] = None,
        refresh: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> PlayerHistoryResponse:
        """Return a player's history page, ingesting first when needed."""
        log = logger.bind(puuid=puuid)
        total = await self.participant_store.count_for_player(puuid)

        if total and not refresh:
            return await self._ready(puuid, total, limit, offset, routing_hint)

        previous = PlayerViewState.READY if total else PlayerViewState.NO_DATA
        log.info(
            "player_view_transition",
            from_state=previous.value,
            to_state=PlayerViewState.INGESTING.value,
        )
        summary = await self.pipeline.ingest_for_player(puuid, routing_hint=routing_hint)

        total = await self.participant_store.count_for_player(puuid)
        if not total:
            log.info(
                "player_view_transition",
                from_state=PlayerViewState.INGESTING.value,
                to_state=PlayerViewState.NO_DATA.value,
                error_code=summary.error_code.value if summary.error_code else None,
            )
            return PlayerHistoryResponse(
                puuid=puuid,
                state=PlayerViewState.NO_DATA,
                limit=limit,
                offset=offset,
                ingestion=summary,
                message=summary.message,
                error_code=summary.error_code,
                retriable=summary.retriable,
            )

        log.info(
            "player_view_transition",
            from_state=PlayerViewState.INGESTING.value,
            to_state=PlayerViewState.READY.value,
        )
        response = await self._ready(puuid, total, limit, offset, routing_hint)
        response.ingestion = summary
        response.error_code = summary.error_code
        response.retriable = summary.retriable
        return response

    async def _ready(
        self,
        puuid: str,
        total: int,
        limit: int,
        offset: int,
        routing_hint: Optional[str],
    ) -> PlayerHistoryResponse:
        entries = await self.participant_store.list_for_player(
            puuid, limit=limit, offset=offset
        )
        stored = await self.aggregate_store.get(puuid)
        aggregate = PlayerAggregate.model_validate(stored) if stored else None

        if aggregate is None:
            # Only happens for histories written before any aggregation ran
            try:
                result = await self.engine.aggregate(puuid, routing_hint)
                aggregate = result.aggregate
            except ServiceException as e:
                logger.warning(
                    "lazy_aggregation_failed", puuid=puuid, error=e.message
                )

        return PlayerHistoryResponse(
            puuid=puuid,
            state=PlayerViewState.READY,
            matches=[ParticipantIndexResponse.model_validate(e) for e in entries],
            total=total,
            limit=limit,
            offset=offset,
            aggregate=aggregate,
        )

    async def get_stats(self, puuid: str) -> PlayerAggregate:
        """Return the stored aggregate.

        Raises:
            PlayerNotFoundError: No aggregate has been computed for the player
        """
        stored = await self.aggregate_store.get(puuid)
        if stored is None:
            raise PlayerNotFoundError(
                f"No statistics for player {puuid}", details={"puuid": puuid}
            )
        return PlayerAggregate.model_validate(stored)

    async def ingest(
        self,
        puuid: str,
        matches=None,
        match_ids=None,
        count: Optional[int] = None,
        routing_hint: Optional[str] = None,
    ) -> IngestionSummary:
        """Run an explicit ingestion for the player."""
        return await self.pipeline.ingest_for_player(
            puuid,
            matches=matches,
            match_ids=match_ids,
            count=count,
            routing_hint=routing_hint,
        )

    async def aggregate(
        self, puuid: str, routing_hint: Optional[str] = None
    ) -> AggregationResult:
        """Recompute the player's aggregate now."""
        return await self.engine.aggregate(puuid, routing_hint)

    async def search_player(
        self, game_name: str, tag_line: str, routing_hint: Optional[str] = None
    ) -> AccountResponse:
        """Resolve a Riot ID to an account."""
        return await self.account_gateway.find_by_riot_id(
            game_name.strip(), tag_line.strip().lstrip("#"), routing_hint
        )
