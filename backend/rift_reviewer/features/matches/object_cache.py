"""
Fast Object Cache for match and timeline blobs.

Blobs are addressed as ``matches/{match_id}.json`` and
``timelines/{match_id}.json``. Expiry is coarse and time based: objects
older than the configured age read as misses. Read failures are misses;
write failures propagate to the caller.
"""

import json
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import aioboto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from rift_reviewer.core.config import Settings, get_global_settings

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


def match_key(match_id: str) -> str:
    """Object key of a match blob."""
    return f"matches/{match_id}.json"


def timeline_key(match_id: str) -> str:
    """Object key of a timeline blob."""
    return f"timelines/{match_id}.json"


class ObjectCache(ABC):
    """JSON blob cache addressed by string keys."""

    @abstractmethod
    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """Read and decode a JSON object, or None on a miss."""
        pass

    @abstractmethod
    async def put_json(self, key: str, payload: Dict[str, Any]) -> None:
        """Encode and write a JSON object."""
        pass

    async def get_match(self, match_id: str) -> Optional[Dict[str, Any]]:
        return await self.get_json(match_key(match_id))

    async def put_match(self, match_id: str, payload: Dict[str, Any]) -> None:
        await self.put_json(match_key(match_id), payload)

    async def get_timeline(self, match_id: str) -> Optional[Dict[str, Any]]:
        return await self.get_json(timeline_key(match_id))

    async def put_timeline(self, match_id: str, payload: Dict[str, Any]) -> None:
        await self.put_json(timeline_key(match_id), payload)

    async def close(self) -> None:
        """Release backend resources."""
        return None


class MemoryObjectCache(ObjectCache):
    """In-process TTL cache, used in development and tests."""

    def __init__(self, maxsize: int = 5000, ttl: int = 365 * SECONDS_PER_DAY):
        """
        Initialize memory cache.

        Args:
            maxsize: Maximum number of entries
            ttl: Time to live in seconds
        """
        self.maxsize = maxsize
        self.ttl = ttl
        self.cache: Dict[str, Tuple[str, float]] = {}
        self.lock = threading.RLock()

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        with self.lock:
            if key not in self.cache:
                return None
            body, expiry = self.cache[key]
            if time.time() >= expiry:
                del self.cache[key]
                logger.debug("Object cache entry expired", key=key)
                return None

        try:
            return json.loads(body)
        except ValueError:
            logger.warning("Object cache entry is not valid JSON", key=key)
            return None

    async def put_json(self, key: str, payload: Dict[str, Any]) -> None:
        # Serialized copies keep callers from mutating cached blobs
        body = json.dumps(payload)
        with self.lock:
            if len(self.cache) >= self.maxsize and key not in self.cache:
                oldest_key = next(iter(self.cache))
                del self.cache[oldest_key]
                logger.debug("Object cache eviction", key=oldest_key, reason="full")
            self.cache[key] = (body, time.time() + self.ttl)

    def __len__(self) -> int:
        return len(self.cache)


class S3ObjectCache(ObjectCache):
    """Async S3 object cache using aioboto3."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        max_age_days: int = 365,
    ):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.max_age_seconds = max_age_days * SECONDS_PER_DAY
        self._session: Optional[aioboto3.Session] = None

    def _get_client(self):
        """Get an aioboto3 S3 client context manager."""
        if self._session is None:
            self._session = aioboto3.Session()
        return self._session.client(
            "s3",
            region_name=self.region_name,
            endpoint_url=self.endpoint_url,
        )

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def _is_stale(self, last_modified: Optional[datetime]) -> bool:
        if last_modified is None:
            return False
        if last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=timezone.utc)
        age = (datetime.now(timezone.utc) - last_modified).total_seconds()
        return age > self.max_age_seconds

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        full_key = self._full_key(key)
        try:
            async with self._get_client() as client:
                response = await client.get_object(Bucket=self.bucket, Key=full_key)
                if self._is_stale(response.get("LastModified")):
                    logger.debug("Object cache entry too old", key=full_key)
                    return None
                body = await response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404", "NotFound"):
                logger.debug("Object cache miss", key=full_key)
            else:
                logger.warning("Object cache read failed", key=full_key, error=str(e))
            return None
        except BotoCoreError as e:
            logger.warning("Object cache read failed", key=full_key, error=str(e))
            return None

        try:
            return json.loads(body)
        except ValueError:
            logger.warning("Object cache entry is not valid JSON", key=full_key)
            return None

    async def put_json(self, key: str, payload: Dict[str, Any]) -> None:
        full_key = self._full_key(key)
        body = json.dumps(payload).encode("utf-8")
        async with self._get_client() as client:
            await client.put_object(
                Bucket=self.bucket,
                Key=full_key,
                Body=body,
                ContentType="application/json",
            )
        logger.debug("Object cache write", key=full_key, size=len(body))

    async def close(self) -> None:
        self._session = None


def create_object_cache(settings: Optional[Settings] = None) -> ObjectCache:
    """Build the configured object cache backend."""
    settings = settings or get_global_settings()
    if settings.object_cache_backend == "s3":
        logger.info(
            "Using S3 object cache",
            bucket=settings.object_cache_bucket,
            prefix=settings.object_cache_prefix,
        )
        return S3ObjectCache(
            bucket=settings.object_cache_bucket,
            prefix=settings.object_cache_prefix,
            region_name=settings.aws_region,
            endpoint_url=settings.object_cache_endpoint_url,
            max_age_days=settings.object_cache_max_age_days,
        )

    return MemoryObjectCache(
        maxsize=settings.object_cache_memory_maxsize,
        ttl=settings.object_cache_max_age_days * SECONDS_PER_DAY,
    )
