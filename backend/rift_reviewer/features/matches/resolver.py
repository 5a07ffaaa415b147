"""Cache-resolution orchestrator.

Matches resolve through three tiers in order: the Match Record Store, the
Fast Object Cache, then the upstream API. A tier whose payload fails shape
validation is a miss, not an error. Tiers that missed are backfilled through
the side task queue; the read never waits on a backfill and never fails
because of one. Timelines resolve through the object cache and the upstream
API only.
"""

import time
from typing import Any, Dict, Optional, Tuple

import structlog

from rift_reviewer.core.background import SideTaskQueue
from rift_reviewer.core.enums import CacheTier
from rift_reviewer.core.exceptions import InvalidUpstreamPayloadError, StoreError
from rift_reviewer.core.validation import extract_game_creation, is_valid_riot_payload

from .gateway import RiotMatchGateway
from .object_cache import ObjectCache
from .repository import MatchRecordRepositoryInterface
from .schemas import MatchRecordCreate

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


class CacheResolutionOrchestrator:
    """Resolve match and timeline blobs through the cache tiers."""

    def __init__(
        self,
        match_store: MatchRecordRepositoryInterface,
        object_cache: ObjectCache,
        gateway: RiotMatchGateway,
        side_tasks: SideTaskQueue,
        record_ttl_days: int = 30,
    ):
        self.match_store = match_store
        self.object_cache = object_cache
        self.gateway = gateway
        self.side_tasks = side_tasks
        self.record_ttl_seconds = record_ttl_days * SECONDS_PER_DAY

    def _freshness(self) -> Tuple[int, int]:
        """Return (expires_at in epoch seconds, processed_at in epoch millis)."""
        now = time.time()
        return int(now) + self.record_ttl_seconds, int(now * 1000)

    async def resolve_match(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Dict[str, Any]:
        """Resolve a match blob, most local tier first."""
        blob, _ = await self.resolve_match_with_source(match_id, routing_hint)
        return blob

    async def resolve_match_with_source(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Tuple[Dict[str, Any], CacheTier]:
        """
        Resolve a match blob and report which tier served it.

        Raises:
            MatchNotFoundError: Upstream reported 404
            InvalidUpstreamPayloadError: Upstream answered with a malformed blob
            UpstreamUnavailableError: Upstream failed otherwise
        """
        record = await self._read_match_store(match_id)
        if record is not None and is_valid_riot_payload(record.match_data):
            if record.is_expired():
                self._dispatch_ttl_refresh(match_id)
            logger.debug("match_resolved", match_id=match_id, tier=CacheTier.MATCH_STORE.value)
            return record.match_data, CacheTier.MATCH_STORE
        if record is not None:
            logger.warning("match_store_payload_invalid", match_id=match_id)

        cached = await self.object_cache.get_match(match_id)
        if is_valid_riot_payload(cached):
            self._dispatch_record_backfill(match_id, cached)
            logger.debug("match_resolved", match_id=match_id, tier=CacheTier.OBJECT_CACHE.value)
            return cached, CacheTier.OBJECT_CACHE
        if cached is not None:
            logger.warning("object_cache_payload_invalid", match_id=match_id)

        blob = await self.gateway.fetch_match(match_id, routing_hint)
        if not is_valid_riot_payload(blob):
            logger.warning("upstream_match_payload_invalid", match_id=match_id)
            raise InvalidUpstreamPayloadError(
                f"Upstream returned a malformed match blob for {match_id}",
                details={"match_id": match_id},
            )

        self._dispatch_record_backfill(match_id, blob)
        self.side_tasks.submit(
            "object_cache_match_backfill",
            lambda: self.object_cache.put_match(match_id, blob),
            match_id=match_id,
        )
        logger.debug("match_resolved", match_id=match_id, tier=CacheTier.UPSTREAM.value)
        return blob, CacheTier.UPSTREAM

    async def resolve_timeline(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Dict[str, Any]:
        """Resolve a timeline blob."""
        blob, _ = await self.resolve_timeline_with_source(match_id, routing_hint)
        return blob

    async def resolve_timeline_with_source(
        self, match_id: str, routing_hint: Optional[str] = None
    ) -> Tuple[Dict[str, Any], CacheTier]:
        """Resolve a timeline blob: object cache, then upstream."""
        cached = await self.object_cache.get_timeline(match_id)
        if is_valid_riot_payload(cached):
            return cached, CacheTier.OBJECT_CACHE
        if cached is not None:
            logger.warning("object_cache_timeline_invalid", match_id=match_id)

        blob = await self.gateway.fetch_timeline(match_id, routing_hint)
        if not is_valid_riot_payload(blob):
            logger.warning("upstream_timeline_payload_invalid", match_id=match_id)
            raise InvalidUpstreamPayloadError(
                f"Upstream returned a malformed timeline blob for {match_id}",
                details={"match_id": match_id},
            )

        self.side_tasks.submit(
            "object_cache_timeline_backfill",
            lambda: self.object_cache.put_timeline(match_id, blob),
            match_id=match_id,
        )
        return blob, CacheTier.UPSTREAM

    async def _read_match_store(self, match_id: str):
        try:
            return await self.match_store.get(match_id)
        except StoreError as e:
            logger.warning(
                "match_store_read_failed", match_id=match_id, error=e.message
            )
            return None

    def _dispatch_record_backfill(self, match_id: str, blob: Dict[str, Any]) -> None:
        self.side_tasks.submit(
            "match_store_backfill",
            lambda: self._backfill_record(match_id, blob),
            match_id=match_id,
        )

    def _dispatch_ttl_refresh(self, match_id: str) -> None:
        expires_at, processed_at = self._freshness()
        self.side_tasks.submit(
            "match_store_ttl_refresh",
            lambda: self.match_store.refresh_ttl(match_id, expires_at, processed_at),
            match_id=match_id,
        )

    async def _backfill_record(self, match_id: str, blob: Dict[str, Any]) -> None:
        expires_at, processed_at = self._freshness()
        record = MatchRecordCreate(
            match_id=match_id,
            game_creation=extract_game_creation(blob),
            match_data=blob,
            expires_at=expires_at,
            processed_at=processed_at,
        )
        try:
            await self.match_store.create(record)
        except StoreError as e:
            if not e.is_duplicate:
                raise
            logger.debug("match_store_backfill_duplicate", match_id=match_id)
