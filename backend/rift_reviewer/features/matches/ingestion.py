"""Match ingestion pipeline.

Turns raw match blobs into one match record plus one participant entry per
identified participant and writes them with put-if-absent semantics. A
duplicate is a skip, never a failure, so re-running an ingestion is always
safe. Per-match failures are reported as structured outcomes and never abort
sibling matches. The player's aggregate is recomputed once every write of
the batch has completed.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional, Protocol

import structlog

from rift_reviewer.core.enums import ErrorCode
from rift_reviewer.core.exceptions import ServiceException, StoreError
from rift_reviewer.core.validation import extract_match_id

from .gateway import RiotMatchGateway
from .repository import (
    MatchRecordRepositoryInterface,
    ParticipantIndexRepositoryInterface,
)
from .resolver import CacheResolutionOrchestrator
from .schemas import (
    AggregationStatus,
    IngestionSummary,
    MatchOutcome,
    ParticipantIndexCreate,
    ProcessedMatch,
)
from .transformers import process_match_data

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


class PlayerAggregator(Protocol):
    """Anything that can recompute a player's rollup."""

    async def aggregate(self, puuid: str, routing_hint: Optional[str] = None) -> Any:
        ...


class MatchIngestionPipeline:
    """Idempotent ingestion of match blobs for a player."""

    def __init__(
        self,
        match_store: MatchRecordRepositoryInterface,
        participant_store: ParticipantIndexRepositoryInterface,
        resolver: CacheResolutionOrchestrator,
        gateway: RiotMatchGateway,
        aggregator: Optional[PlayerAggregator] = None,
        concurrency: int = 5,
        record_ttl_days: int = 30,
    ):
        """
        Initialize the pipeline.

        Args:
            match_store: Match Record Store
            participant_store: Participant Index Store
            resolver: Cache-resolution orchestrator used for match IDs
            gateway: Match gateway used to list a player's match IDs
            aggregator: Rollup engine run after each batch
            concurrency: Maximum matches resolved and written at once
            record_ttl_days: Freshness window of match records
        """
        self.match_store = match_store
        self.participant_store = participant_store
        self.resolver = resolver
        self.gateway = gateway
        self.aggregator = aggregator
        self.concurrency = concurrency
        self.record_ttl_days = record_ttl_days

    async def ingest_for_player(
        self,
        puuid: str,
        matches: Optional[List[Dict[str, Any]]] = None,
        match_ids: Optional[List[str]] = None,
        count: Optional[int] = None,
        routing_hint: Optional[str] = None,
    ) -> IngestionSummary:
        """
        Ingest a player's matches and refresh the player's aggregate.

        Explicit blobs win over explicit IDs, which win over listing the
        player's recent history upstream.
        """
        log = logger.bind(puuid=puuid)

        if matches is None and match_ids is None:
            try:
                match_ids = await self.gateway.fetch_player_match_ids(
                    puuid, count=count, routing_hint=routing_hint
                )
            except ServiceException as e:
                log.warning("match_listing_failed", code=e.code.value, error=e.message)
                return IngestionSummary(
                    success=False,
                    puuid=puuid,
                    message=e.message,
                    error_code=e.code,
                    retriable=e.retriable,
                )

        if matches is not None:
            log.info("ingestion_started", source="explicit_matches", total=len(matches))
            work = [self._bounded(blob=blob, routing_hint=routing_hint) for blob in matches]
        else:
            match_ids = list(dict.fromkeys(match_ids or []))
            log.info("ingestion_started", source="match_ids", total=len(match_ids))
            work = [
                self._bounded(match_id=match_id, routing_hint=routing_hint)
                for match_id in match_ids
            ]

        if not work:
            log.info("ingestion_no_matches")
            return IngestionSummary(
                success=True, puuid=puuid, processed=0, message="No matches found"
            )

        semaphore = asyncio.Semaphore(self.concurrency)
        outcomes = await asyncio.gather(*(self._with_limit(semaphore, w) for w in work))

        summary = self._summarize(puuid, outcomes)
        summary.aggregation = await self._run_aggregation(puuid, routing_hint)

        log.info(
            "ingestion_completed",
            processed=summary.processed,
            failed=summary.failed,
            participants_processed=summary.participants_processed,
            participants_skipped=summary.participants_skipped,
            aggregation=summary.aggregation.status,
        )
        return summary

    async def ingest_match(self, blob: Dict[str, Any]) -> MatchOutcome:
        """Ingest a single blob without refreshing any aggregate."""
        return await self._bounded(blob=blob)

    @staticmethod
    async def _with_limit(semaphore: asyncio.Semaphore, coro) -> MatchOutcome:
        async with semaphore:
            return await coro

    async def _bounded(
        self,
        blob: Optional[Dict[str, Any]] = None,
        match_id: Optional[str] = None,
        routing_hint: Optional[str] = None,
    ) -> MatchOutcome:
        """Resolve (if needed), transform and write one match."""
        if match_id is None and isinstance(blob, dict):
            match_id = extract_match_id(blob)

        try:
            if blob is None:
                blob = await self.resolver.resolve_match(match_id, routing_hint)
            processed = process_match_data(blob, ttl_days=self.record_ttl_days)
            return await self._write(processed)
        except ServiceException as e:
            logger.warning(
                "match_ingestion_failed",
                match_id=match_id,
                code=e.code.value,
                error=e.message,
            )
            return MatchOutcome(
                match_id=match_id,
                success=False,
                error_code=e.code,
                error=e.message,
                retriable=e.retriable,
            )

    async def _write(self, processed: ProcessedMatch) -> MatchOutcome:
        record_created = await self._write_record(processed)

        results = await asyncio.gather(
            *(self._write_participant(entry) for entry in processed.participants),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            raise errors[0]

        created = sum(1 for r in results if r is True)
        return MatchOutcome(
            match_id=processed.match_id,
            success=True,
            record_created=record_created,
            participants_processed=created,
            participants_skipped=len(results) - created,
            participants_missing_id=processed.participants_missing_id,
        )

    async def _write_record(self, processed: ProcessedMatch) -> bool:
        try:
            await self.match_store.create(processed.record)
            return True
        except StoreError as e:
            if not e.is_duplicate:
                raise

        logger.debug("match_record_exists", match_id=processed.match_id)
        now = time.time()
        try:
            await self.match_store.refresh_ttl(
                processed.match_id,
                expires_at=int(now) + self.record_ttl_days * SECONDS_PER_DAY,
                processed_at=int(now * 1000),
            )
        except StoreError as e:
            logger.warning(
                "match_record_ttl_refresh_failed",
                match_id=processed.match_id,
                error=e.message,
            )
        return False

    async def _write_participant(self, entry: ParticipantIndexCreate) -> bool:
        """Return True when created, False when the entry already existed."""
        try:
            await self.participant_store.create(entry)
            return True
        except StoreError as e:
            if e.is_duplicate:
                return False
            raise

    @staticmethod
    def _summarize(puuid: str, outcomes: List[MatchOutcome]) -> IngestionSummary:
        succeeded = [o for o in outcomes if o.success]
        failures = [o for o in outcomes if not o.success]
        failed = len(failures)

        # Nothing landed: surface why, preferring a failure worth retrying
        error_code = None
        retriable = False
        if failures and not succeeded:
            retriable = any(o.retriable for o in failures)
            first = next((o for o in failures if o.retriable), failures[0])
            error_code = first.error_code

        return IngestionSummary(
            success=failed == 0 or bool(succeeded),
            puuid=puuid,
            processed=len(succeeded),
            failed=failed,
            total_matches=len(outcomes),
            participants_processed=sum(o.participants_processed for o in succeeded),
            participants_skipped=sum(o.participants_skipped for o in succeeded),
            participants_missing_id=sum(o.participants_missing_id for o in succeeded),
            results=outcomes,
            message=f"Processed {len(succeeded)} of {len(outcomes)} matches",
            error_code=error_code,
            retriable=retriable,
        )

    async def _run_aggregation(
        self, puuid: str, routing_hint: Optional[str]
    ) -> AggregationStatus:
        if self.aggregator is None:
            return AggregationStatus(status="skipped")

        try:
            result = await self.aggregator.aggregate(puuid, routing_hint=routing_hint)
        except Exception as e:
            logger.warning(
                "aggregation_failed_after_ingestion",
                puuid=puuid,
                error=str(e),
                error_type=type(e).__name__,
            )
            return AggregationStatus(
                status="failed",
                message=str(e),
                error_code=ErrorCode.AGGREGATION_FAILURE,
            )

        aggregate = getattr(result, "aggregate", None)
        return AggregationStatus(
            status=result.status,
            message=result.message,
            total_matches=aggregate.total_matches if aggregate is not None else None,
        )
