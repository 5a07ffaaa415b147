"""Tests for the Riot API client using an in-process httpx transport."""

import httpx
import pytest
import pytest_asyncio

from rift_reviewer.core.riot_api.client import RiotAPIClient
from rift_reviewer.core.riot_api.constants import Region
from rift_reviewer.core.riot_api.errors import (
    AuthenticationError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
)
from rift_reviewer.core.riot_api.models import AccountDTO


class RecordingHandler:
    """Serves queued responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(handler, **kwargs):
    return RiotAPIClient(
        api_key="test_api_key",
        region=Region.AMERICAS,
        timeout=1.0,
        max_rate_limit_retries=kwargs.pop("retries", 2),
        max_match_count=100,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def sample_account():
    return {"puuid": "P1", "gameName": "Faker", "tagLine": "KR1"}


class TestRiotAPIClient:
    """Test cases for RiotAPIClient."""

    @pytest_asyncio.fixture
    async def ok_handler(self, sample_account):
        return RecordingHandler(httpx.Response(200, json=sample_account))

    async def test_api_key_header_is_sent(self, ok_handler):
        async with make_client(ok_handler) as client:
            account = await client.get_account_by_riot_id("Faker", "KR1")

        assert isinstance(account, AccountDTO)
        assert account.game_name == "Faker"
        request = ok_handler.requests[0]
        assert request.headers["X-Riot-Token"] == "test_api_key"
        assert request.url.host == "americas.api.riotgames.com"
        assert request.url.path.endswith("/by-riot-id/Faker/KR1")

    async def test_platform_hint_routes_to_regional_host(self, ok_handler):
        async with make_client(ok_handler) as client:
            await client.get_account_by_puuid("P1", region="euw1")

        assert ok_handler.requests[0].url.host == "europe.api.riotgames.com"

    async def test_match_ids_params(self):
        handler = RecordingHandler(httpx.Response(200, json=["NA1_2", "NA1_1"]))
        async with make_client(handler) as client:
            ids = await client.get_match_ids_by_puuid(
                "P1", count=500, start_time=1700000000, queue=420
            )

        assert ids == ["NA1_2", "NA1_1"]
        params = handler.requests[0].url.params
        assert params["start"] == "0"
        assert params["count"] == "100"
        assert params["startTime"] == "1700000000"
        assert params["queue"] == "420"
        assert "endTime" not in params

    async def test_rate_limit_is_retried(self):
        handler = RecordingHandler(
            httpx.Response(429, headers={"Retry-After": "0"}),
            httpx.Response(200, json={"metadata": {"matchId": "NA1_1"}}),
        )
        async with make_client(handler) as client:
            blob = await client.get_match("NA1_1")

        assert blob["metadata"]["matchId"] == "NA1_1"
        assert len(handler.requests) == 2

    async def test_rate_limit_exhausts_retries(self):
        handler = RecordingHandler(
            *[httpx.Response(429, headers={"Retry-After": "0"}) for _ in range(3)]
        )
        async with make_client(handler, retries=2) as client:
            with pytest.raises(RateLimitError):
                await client.get_match("NA1_1")

        assert len(handler.requests) == 3

    async def test_not_found(self):
        handler = RecordingHandler(httpx.Response(404, json={"status": {}}))
        async with make_client(handler) as client:
            with pytest.raises(NotFoundError) as exc_info:
                await client.get_match("NA1_404")

        assert exc_info.value.status_code == 404
        assert len(handler.requests) == 1

    async def test_invalid_key(self):
        handler = RecordingHandler(httpx.Response(401))
        async with make_client(handler) as client:
            with pytest.raises(AuthenticationError):
                await client.get_match("NA1_1")

    async def test_server_error_is_not_retried(self):
        handler = RecordingHandler(httpx.Response(503), httpx.Response(200, json={}))
        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailableError):
                await client.get_match_timeline("NA1_1")

        assert len(handler.requests) == 1

    async def test_timeout_is_unavailable(self):
        handler = RecordingHandler(httpx.ReadTimeout("too slow"))
        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailableError):
                await client.get_match("NA1_1")

    async def test_transport_error_is_unavailable(self):
        handler = RecordingHandler(httpx.ConnectError("refused"))
        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailableError):
                await client.get_match("NA1_1")
