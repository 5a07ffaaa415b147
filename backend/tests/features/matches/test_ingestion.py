"""Tests for MatchIngestionPipeline against real SQLite-backed stores."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from rift_reviewer.core.enums import ErrorCode
from rift_reviewer.core.exceptions import MatchNotFoundError, UpstreamUnavailableError
from rift_reviewer.features.matches.ingestion import MatchIngestionPipeline


@pytest.fixture
def resolver():
    return AsyncMock()


@pytest.fixture
def gateway():
    gateway = AsyncMock()
    gateway.fetch_player_match_ids.return_value = []
    return gateway


@pytest.fixture
def aggregator():
    aggregator = AsyncMock()
    aggregator.aggregate.return_value = SimpleNamespace(
        status="success",
        message=None,
        aggregate=SimpleNamespace(total_matches=1),
    )
    return aggregator


@pytest.fixture
def pipeline(match_store, participant_store, resolver, gateway, aggregator):
    return MatchIngestionPipeline(
        match_store=match_store,
        participant_store=participant_store,
        resolver=resolver,
        gateway=gateway,
        aggregator=aggregator,
        concurrency=2,
    )


async def test_explicit_blobs_are_written(pipeline, participant_store, match_store, sample_match):
    summary = await pipeline.ingest_for_player("P1", matches=[sample_match])

    assert summary.success is True
    assert summary.processed == 1
    assert summary.participants_processed == 2
    assert summary.participants_skipped == 0
    assert summary.participants_missing_id == 1
    assert summary.results[0].record_created is True
    assert summary.aggregation.status == "success"
    assert summary.aggregation.total_matches == 1
    assert await match_store.get("NA1_100") is not None
    assert await participant_store.count_for_player("P2") == 1


async def test_second_run_is_idempotent(pipeline, participant_store, sample_match):
    await pipeline.ingest_for_player("P1", matches=[sample_match])

    summary = await pipeline.ingest_for_player("P1", matches=[sample_match])

    assert summary.success is True
    assert summary.participants_processed == 0
    assert summary.participants_skipped == 2
    assert summary.results[0].record_created is False
    assert await participant_store.count_for_player("P1") == 1


async def test_invalid_blob_does_not_block_siblings(pipeline, participant_store, sample_match):
    broken = {"metadata": {"matchId": "NA1_BAD"}, "info": {"participants": []}}

    summary = await pipeline.ingest_for_player("P1", matches=[broken, sample_match])

    assert summary.success is True
    assert summary.processed == 1
    assert summary.failed == 1
    failed = [r for r in summary.results if not r.success][0]
    assert failed.match_id == "NA1_BAD"
    assert failed.error_code == ErrorCode.INVALID_MATCH_DATA
    assert await participant_store.count_for_player("P1") == 1


async def test_match_ids_are_resolved(pipeline, resolver, participant_store, match_factory):
    blobs = {
        "NA1_1": match_factory("NA1_1", 1000, [{"puuid": "P1", "kills": 1}]),
        "NA1_2": match_factory("NA1_2", 2000, [{"puuid": "P1", "kills": 2}]),
    }
    resolver.resolve_match.side_effect = lambda match_id, hint: blobs[match_id]

    summary = await pipeline.ingest_for_player(
        "P1", match_ids=["NA1_1", "NA1_2", "NA1_1"], routing_hint="na1"
    )

    assert summary.total_matches == 2
    assert summary.processed == 2
    assert await participant_store.count_for_player("P1") == 2


async def test_unresolvable_match_is_reported(pipeline, resolver):
    resolver.resolve_match.side_effect = MatchNotFoundError("match not found")

    summary = await pipeline.ingest_for_player("P1", match_ids=["NA1_404"])

    assert summary.success is False
    assert summary.failed == 1
    assert summary.results[0].error_code == ErrorCode.NOT_FOUND
    assert summary.error_code == ErrorCode.NOT_FOUND
    assert summary.retriable is False


async def test_oversized_match_id_does_not_abort_batch(
    pipeline, participant_store, round_trip_match, sample_match
):
    round_trip_match["metadata"]["matchId"] = "NA1_" + "9" * 80

    summary = await pipeline.ingest_for_player("P1", matches=[round_trip_match, sample_match])

    assert summary.processed == 1
    assert summary.failed == 1
    assert summary.results[0].success is False
    assert summary.results[0].error_code == ErrorCode.INVALID_MATCH_DATA
    assert summary.results[1].match_id == "NA1_100"
    assert await participant_store.count_for_player("P1") == 1


async def test_all_matches_failing_surfaces_retriable_code(pipeline, gateway, resolver):
    gateway.fetch_player_match_ids.return_value = ["NA1_1", "NA1_2"]
    resolver.resolve_match.side_effect = UpstreamUnavailableError("down", status_code=503)

    summary = await pipeline.ingest_for_player("P1")

    assert summary.success is False
    assert summary.error_code == ErrorCode.UPSTREAM_UNAVAILABLE
    assert summary.retriable is True
    assert [r.retriable for r in summary.results] == [True, True]


async def test_partial_failure_keeps_summary_code_empty(pipeline, resolver, match_factory):
    blob = match_factory("NA1_1", 1000, [{"puuid": "P1"}])

    async def resolve(match_id, hint):
        if match_id == "NA1_2":
            raise UpstreamUnavailableError("down", status_code=503)
        return blob

    resolver.resolve_match.side_effect = resolve

    summary = await pipeline.ingest_for_player("P1", match_ids=["NA1_1", "NA1_2"])

    assert summary.success is True
    assert summary.failed == 1
    assert summary.error_code is None


async def test_history_listing_used_when_nothing_given(pipeline, gateway, resolver, match_factory):
    gateway.fetch_player_match_ids.return_value = ["NA1_1"]
    resolver.resolve_match.return_value = match_factory("NA1_1", 1000, [{"puuid": "P1"}])

    summary = await pipeline.ingest_for_player("P1", count=5, routing_hint="kr")

    gateway.fetch_player_match_ids.assert_awaited_once_with("P1", count=5, routing_hint="kr")
    assert summary.processed == 1


async def test_empty_history(pipeline, aggregator):
    summary = await pipeline.ingest_for_player("P1")

    assert summary.success is True
    assert summary.processed == 0
    assert summary.message == "No matches found"
    aggregator.aggregate.assert_not_awaited()


async def test_listing_failure_is_structured(pipeline, gateway):
    gateway.fetch_player_match_ids.side_effect = UpstreamUnavailableError("down", status_code=503)

    summary = await pipeline.ingest_for_player("P1")

    assert summary.success is False
    assert summary.error_code == ErrorCode.UPSTREAM_UNAVAILABLE
    assert summary.retriable is True


async def test_aggregation_failure_does_not_fail_ingestion(pipeline, aggregator, sample_match):
    aggregator.aggregate.side_effect = RuntimeError("rollup exploded")

    summary = await pipeline.ingest_for_player("P1", matches=[sample_match])

    assert summary.success is True
    assert summary.aggregation.status == "failed"
    assert summary.aggregation.error_code == ErrorCode.AGGREGATION_FAILURE


async def test_ingest_single_match_skips_aggregation(pipeline, aggregator, round_trip_match):
    outcome = await pipeline.ingest_match(round_trip_match)

    assert outcome.success is True
    assert outcome.match_id == "NA1_1"
    assert outcome.participants_processed == 1
    aggregator.aggregate.assert_not_awaited()
