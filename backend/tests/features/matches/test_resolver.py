"""Tests for tiered match and timeline resolution."""

import time
from unittest.mock import AsyncMock

import pytest

from rift_reviewer.core.enums import CacheTier, StoreErrorKind
from rift_reviewer.core.exceptions import (
    InvalidUpstreamPayloadError,
    MatchNotFoundError,
    StoreError,
)
from rift_reviewer.features.matches.ingestion import MatchIngestionPipeline
from rift_reviewer.features.matches.object_cache import MemoryObjectCache
from rift_reviewer.features.matches.resolver import CacheResolutionOrchestrator
from rift_reviewer.features.matches.schemas import MatchRecordCreate

BLOB = {"metadata": {"matchId": "NA1_1"}, "info": {"gameCreation": 1000, "participants": []}}
TIMELINE = {"metadata": {"matchId": "NA1_1"}, "info": {"frames": []}}


@pytest.fixture
def gateway():
    gateway = AsyncMock()
    gateway.fetch_match.return_value = BLOB
    gateway.fetch_timeline.return_value = TIMELINE
    return gateway


@pytest.fixture
def object_cache():
    return MemoryObjectCache()


@pytest.fixture
def resolver(match_store, object_cache, gateway, side_tasks):
    return CacheResolutionOrchestrator(
        match_store=match_store,
        object_cache=object_cache,
        gateway=gateway,
        side_tasks=side_tasks,
        record_ttl_days=30,
    )


async def store_record(match_store, blob=BLOB, expires_at=None):
    await match_store.create(
        MatchRecordCreate(
            match_id="NA1_1",
            game_creation=1000,
            match_data=blob,
            expires_at=expires_at if expires_at is not None else int(time.time()) + 3600,
            processed_at=1,
        )
    )


async def test_match_store_hit_skips_other_tiers(resolver, match_store, gateway):
    await store_record(match_store)

    blob, source = await resolver.resolve_match_with_source("NA1_1")

    assert blob == BLOB
    assert source == CacheTier.MATCH_STORE
    gateway.fetch_match.assert_not_awaited()


async def test_expired_record_is_served_and_refreshed(
    resolver, match_store, side_tasks
):
    await store_record(match_store, expires_at=10)

    _, source = await resolver.resolve_match_with_source("NA1_1")
    await side_tasks.join()

    assert source == CacheTier.MATCH_STORE
    record = await match_store.get("NA1_1")
    assert record.expires_at > time.time()


async def test_object_cache_hit_backfills_match_store(
    resolver, match_store, object_cache, gateway, side_tasks
):
    await object_cache.put_match("NA1_1", BLOB)

    blob, source = await resolver.resolve_match_with_source("NA1_1")
    await side_tasks.join()

    assert source == CacheTier.OBJECT_CACHE
    assert blob == BLOB
    gateway.fetch_match.assert_not_awaited()
    record = await match_store.get("NA1_1")
    assert record.game_creation == 1000


async def test_upstream_hit_backfills_both_tiers(
    resolver, match_store, object_cache, gateway, side_tasks
):
    blob, source = await resolver.resolve_match_with_source("NA1_1", "na1")
    await side_tasks.join()

    assert source == CacheTier.UPSTREAM
    gateway.fetch_match.assert_awaited_once_with("NA1_1", "na1")
    assert await match_store.get("NA1_1") is not None
    assert await object_cache.get_match("NA1_1") == BLOB

    gateway.fetch_match.reset_mock()
    _, source = await resolver.resolve_match_with_source("NA1_1")
    assert source == CacheTier.MATCH_STORE
    gateway.fetch_match.assert_not_awaited()


async def test_invalid_cached_payload_falls_through(
    resolver, object_cache, gateway, side_tasks
):
    await object_cache.put_match("NA1_1", {"garbage": True})

    _, source = await resolver.resolve_match_with_source("NA1_1")
    await side_tasks.join()

    assert source == CacheTier.UPSTREAM
    assert await object_cache.get_match("NA1_1") == BLOB


async def test_invalid_upstream_payload_is_rejected(resolver, gateway, object_cache):
    gateway.fetch_match.return_value = {"status": "weird"}

    with pytest.raises(InvalidUpstreamPayloadError):
        await resolver.resolve_match("NA1_1")

    assert await object_cache.get_match("NA1_1") is None


async def test_upstream_not_found_propagates(resolver, gateway):
    gateway.fetch_match.side_effect = MatchNotFoundError("match not found")

    with pytest.raises(MatchNotFoundError):
        await resolver.resolve_match("NA1_404")


async def test_store_read_failure_counts_as_miss(object_cache, gateway, side_tasks):
    match_store = AsyncMock()
    match_store.get.side_effect = StoreError(StoreErrorKind.UNAVAILABLE, "down")
    match_store.create.side_effect = StoreError(StoreErrorKind.UNAVAILABLE, "down")
    resolver = CacheResolutionOrchestrator(match_store, object_cache, gateway, side_tasks)

    blob, source = await resolver.resolve_match_with_source("NA1_1")
    await side_tasks.join()

    assert blob == BLOB
    assert source == CacheTier.UPSTREAM
    assert side_tasks.stats["failed"] == 1


async def test_timeline_resolution(resolver, object_cache, gateway, side_tasks):
    blob, source = await resolver.resolve_timeline_with_source("NA1_1")
    await side_tasks.join()

    assert blob == TIMELINE
    assert source == CacheTier.UPSTREAM
    assert await object_cache.get_timeline("NA1_1") == TIMELINE

    _, source = await resolver.resolve_timeline_with_source("NA1_1")
    assert source == CacheTier.OBJECT_CACHE
    gateway.fetch_timeline.assert_awaited_once()


async def test_ingested_flattened_blob_is_served_from_match_store(
    resolver, match_store, participant_store, gateway
):
    flat = {
        "matchId": "NA1_1",
        "gameCreation": 1000,
        "gameMode": "CLASSIC",
        "participants": [{"puuid": "P1", "kills": 3, "deaths": 1, "assists": 2}],
    }
    pipeline = MatchIngestionPipeline(match_store, participant_store, resolver, gateway)
    await pipeline.ingest_match(flat)

    for _ in range(2):
        blob, source = await resolver.resolve_match_with_source("NA1_1")
        assert source == CacheTier.MATCH_STORE

    assert blob["metadata"]["matchId"] == "NA1_1"
    assert blob["info"]["gameMode"] == "CLASSIC"
    gateway.fetch_match.assert_not_awaited()
