"""Tests for the fast object cache backends."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from rift_reviewer.features.matches.object_cache import (
    MemoryObjectCache,
    S3ObjectCache,
    match_key,
    timeline_key,
)


def test_key_layout():
    assert match_key("NA1_1") == "matches/NA1_1.json"
    assert timeline_key("NA1_1") == "timelines/NA1_1.json"


class TestMemoryObjectCache:
    async def test_put_and_get(self):
        cache = MemoryObjectCache()
        blob = {"metadata": {"matchId": "NA1_1"}}

        await cache.put_match("NA1_1", blob)
        blob["metadata"]["matchId"] = "mutated"

        assert await cache.get_match("NA1_1") == {"metadata": {"matchId": "NA1_1"}}
        assert await cache.get_timeline("NA1_1") is None

    async def test_expired_entry_is_a_miss(self):
        cache = MemoryObjectCache(ttl=0)

        await cache.put_match("NA1_1", {"info": {}})

        assert await cache.get_match("NA1_1") is None
        assert len(cache) == 0

    async def test_oldest_entry_is_evicted(self):
        cache = MemoryObjectCache(maxsize=2)

        for i in range(3):
            await cache.put_match(f"NA1_{i}", {"info": {"i": i}})

        assert await cache.get_match("NA1_0") is None
        assert await cache.get_match("NA1_2") == {"info": {"i": 2}}


def client_context(client):
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=client)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def s3_body(payload):
    body = MagicMock()
    body.read = AsyncMock(return_value=json.dumps(payload).encode("utf-8"))
    return body


class TestS3ObjectCache:
    @pytest.fixture
    def s3_client(self):
        return MagicMock()

    @pytest.fixture
    def cache(self, s3_client):
        cache = S3ObjectCache(bucket="rift-cache", prefix="/lol/", max_age_days=365)
        with patch.object(cache, "_get_client", return_value=client_context(s3_client)):
            yield cache

    async def test_read_hit(self, cache, s3_client):
        s3_client.get_object = AsyncMock(
            return_value={
                "Body": s3_body({"metadata": {"matchId": "NA1_1"}}),
                "LastModified": datetime.now(timezone.utc),
            }
        )

        blob = await cache.get_match("NA1_1")

        assert blob == {"metadata": {"matchId": "NA1_1"}}
        s3_client.get_object.assert_awaited_once_with(
            Bucket="rift-cache", Key="lol/matches/NA1_1.json"
        )

    async def test_object_older_than_max_age_is_a_miss(self, cache, s3_client):
        s3_client.get_object = AsyncMock(
            return_value={
                "Body": s3_body({"info": {}}),
                "LastModified": datetime.now(timezone.utc) - timedelta(days=400),
            }
        )

        assert await cache.get_match("NA1_1") is None

    async def test_missing_key_is_a_miss(self, cache, s3_client):
        s3_client.get_object = AsyncMock(
            side_effect=ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        )

        assert await cache.get_timeline("NA1_1") is None

    async def test_write_uses_json_content(self, cache, s3_client):
        s3_client.put_object = AsyncMock()

        await cache.put_timeline("NA1_1", {"info": {"frames": []}})

        kwargs = s3_client.put_object.await_args.kwargs
        assert kwargs["Key"] == "lol/timelines/NA1_1.json"
        assert kwargs["ContentType"] == "application/json"
        assert json.loads(kwargs["Body"]) == {"info": {"frames": []}}

    async def test_write_failure_propagates(self, cache, s3_client):
        s3_client.put_object = AsyncMock(
            side_effect=ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")
        )

        with pytest.raises(ClientError):
            await cache.put_match("NA1_1", {"info": {}})
