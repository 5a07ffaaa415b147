"""Core dependencies for FastAPI application.

The database manager, Riot API client and side task queue are process-wide
resources created lazily and released in the application lifespan.
"""

from typing import Annotated, Optional

from fastapi import Depends

from .background import SideTaskQueue
from .config import get_global_settings
from .database import DatabaseManager, get_db_manager
from .riot_api import RiotAPIClient

_riot_client: Optional[RiotAPIClient] = None
_side_task_queue: Optional[SideTaskQueue] = None


def get_database_manager() -> DatabaseManager:
    """Get the process-wide database manager."""
    return get_db_manager()


def get_riot_client() -> RiotAPIClient:
    """Get the shared Riot API client instance."""
    global _riot_client
    if _riot_client is None:
        _riot_client = RiotAPIClient()
    return _riot_client


def get_side_task_queue() -> SideTaskQueue:
    """Get the shared best-effort side task queue."""
    global _side_task_queue
    if _side_task_queue is None:
        settings = get_global_settings()
        _side_task_queue = SideTaskQueue(
            workers=settings.side_task_workers,
            maxsize=settings.side_task_queue_size,
        )
    return _side_task_queue


async def close_shared_resources() -> None:
    """Stop the queue and close clients created by this module."""
    global _riot_client, _side_task_queue
    if _side_task_queue is not None:
        await _side_task_queue.stop()
        _side_task_queue = None
    if _riot_client is not None:
        await _riot_client.close()
        _riot_client = None


# Type aliases for cleaner dependency injection
DatabaseManagerDep = Annotated[DatabaseManager, Depends(get_database_manager)]
RiotClientDep = Annotated[RiotAPIClient, Depends(get_riot_client)]
SideTaskQueueDep = Annotated[SideTaskQueue, Depends(get_side_task_queue)]

__all__ = [
    "get_database_manager",
    "get_riot_client",
    "get_side_task_queue",
    "close_shared_resources",
    "DatabaseManagerDep",
    "RiotClientDep",
    "SideTaskQueueDep",
]
