"""HTTP tests for the players, matches and insights routers."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from rift_reviewer.core.enums import CacheTier, ErrorCode, PlayerViewState
from rift_reviewer.core.exceptions import (
    MatchNotFoundError,
    PlayerNotFoundError,
    UpstreamUnavailableError,
)
from rift_reviewer.features.insights.dependencies import get_insight_service
from rift_reviewer.features.insights.schemas import Insight
from rift_reviewer.features.matches.dependencies import get_ingestion_pipeline, get_resolver
from rift_reviewer.features.matches.schemas import IngestionSummary, MatchOutcome
from rift_reviewer.features.players.dependencies import get_player_history_service
from rift_reviewer.features.players.schemas import (
    AccountResponse,
    AggregationResult,
    PlayerHistoryResponse,
)
from rift_reviewer.main import app


@pytest.fixture
def service():
    return AsyncMock()


@pytest.fixture
def resolver():
    return AsyncMock()


@pytest.fixture
def pipeline():
    return AsyncMock()


@pytest.fixture
def insight_service():
    return AsyncMock()


@pytest.fixture
def client(service, resolver, pipeline, insight_service):
    app.dependency_overrides[get_player_history_service] = lambda: service
    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_ingestion_pipeline] = lambda: pipeline
    app.dependency_overrides[get_insight_service] = lambda: insight_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_search_player(client, service):
    service.search_player.return_value = AccountResponse(
        puuid="P1", game_name="Faker", tag_line="KR1"
    )

    response = client.get(
        "/api/v1/players/search", params={"game_name": "Faker", "tag_line": "KR1"}
    )

    assert response.status_code == 200
    assert response.json()["puuid"] == "P1"
    service.search_player.assert_called_once_with("Faker", "KR1", None)


def test_search_unknown_player_is_404(client, service):
    service.search_player.side_effect = PlayerNotFoundError("Player not found: x#y")

    response = client.get("/players/search", params={"game_name": "x", "tag_line": "y"})

    assert response.status_code == 404
    assert response.json()["code"] == ErrorCode.NOT_FOUND.value


def test_player_matches(client, service):
    service.get_history.return_value = PlayerHistoryResponse(
        puuid="P1", state=PlayerViewState.NO_DATA, message="No matches found"
    )

    response = client.get(
        "/api/v1/players/P1/matches", params={"platform": "euw1", "limit": 5}
    )

    assert response.status_code == 200
    assert response.json()["state"] == PlayerViewState.NO_DATA.value
    service.get_history.assert_called_once_with(
        "P1", routing_hint="euw1", refresh=False, limit=5, offset=0
    )


def test_player_matches_rejects_large_page(client):
    response = client.get("/api/v1/players/P1/matches", params={"limit": 500})

    assert response.status_code == 422


def test_ingest_endpoint(client, service):
    service.ingest.return_value = IngestionSummary(success=True, puuid="P1", processed=2)

    response = client.post(
        "/api/v1/players/P1/ingest", json={"match_ids": ["NA1_1", "NA1_2"], "platform": "na1"}
    )

    assert response.status_code == 200
    assert response.json()["processed"] == 2
    service.ingest.assert_called_once_with(
        "P1", matches=None, match_ids=["NA1_1", "NA1_2"], count=None, routing_hint="na1"
    )


def test_aggregate_endpoint(client, service):
    service.aggregate.return_value = AggregationResult(
        puuid="P1", status="no_data", message="No participants found"
    )

    response = client.post("/api/v1/players/P1/aggregate")

    assert response.status_code == 200
    assert response.json()["status"] == "no_data"


def test_get_match(client, resolver):
    resolver.resolve_match_with_source.return_value = (
        {"metadata": {"matchId": "NA1_1"}},
        CacheTier.OBJECT_CACHE,
    )

    response = client.get("/api/v1/matches/NA1_1")

    assert response.status_code == 200
    assert response.json()["source"] == CacheTier.OBJECT_CACHE.value
    resolver.resolve_match_with_source.assert_called_once_with("NA1_1", None)


def test_get_missing_match_is_404(client, resolver):
    resolver.resolve_match_with_source.side_effect = MatchNotFoundError("match not found")

    response = client.get("/api/v1/matches/NA1_404")

    assert response.status_code == 404


def test_upstream_outage_is_503(client, resolver):
    resolver.resolve_timeline_with_source.side_effect = UpstreamUnavailableError("down")

    response = client.get("/api/v1/matches/NA1_1/timeline")

    assert response.status_code == 503
    assert response.json()["retriable"] is True


def test_process_match(client, pipeline, round_trip_match):
    pipeline.ingest_match.return_value = MatchOutcome(
        match_id="NA1_1", success=True, record_created=True, participants_processed=1
    )

    response = client.post("/api/v1/matches/process", json=round_trip_match)

    assert response.status_code == 200
    assert response.json()["participants_processed"] == 1
    pipeline.ingest_match.assert_called_once_with(round_trip_match)


def test_player_insights(client, insight_service):
    insight_service.player_insights.return_value = Insight(
        severity="info", summary="Steady", analysis="Consistent games."
    )

    response = client.post("/api/v1/insights/players/P1")

    assert response.status_code == 200
    assert response.json()["available"] is True
    assert response.json()["insight"]["summary"] == "Steady"


def test_timeline_insights_unavailable(client, insight_service):
    insight_service.timeline_insights.return_value = None

    response = client.post("/api/v1/insights/matches/NA1_1/timeline", params={"platform": "na1"})

    assert response.status_code == 200
    assert response.json() == {"available": False, "insights": []}
    insight_service.timeline_insights.assert_called_once_with("NA1_1", "na1")
