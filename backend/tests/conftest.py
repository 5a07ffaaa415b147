"""Shared fixtures: a throwaway SQLite database, the side task queue and sample blobs."""

import copy

import pytest
import pytest_asyncio

from rift_reviewer.core.background import SideTaskQueue
from rift_reviewer.core.database import DatabaseManager

# Register every table on the declarative base
from rift_reviewer.features.matches import orm_models as _match_orm  # noqa: F401
from rift_reviewer.features.matches import participants_orm as _participant_orm  # noqa: F401
from rift_reviewer.features.players import orm_models as _player_orm  # noqa: F401
from rift_reviewer.features.matches.repository import (
    SQLAlchemyMatchRecordRepository,
    SQLAlchemyParticipantIndexRepository,
)
from rift_reviewer.features.players.repository import (
    SQLAlchemyPlayerAggregateRepository,
)


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    """Database manager backed by a fresh SQLite file."""
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def match_store(db_manager):
    return SQLAlchemyMatchRecordRepository(db_manager)


@pytest.fixture
def participant_store(db_manager):
    return SQLAlchemyParticipantIndexRepository(db_manager)


@pytest.fixture
def aggregate_store(db_manager):
    return SQLAlchemyPlayerAggregateRepository(db_manager)


@pytest_asyncio.fixture
async def side_tasks():
    """Running side task queue, drained and stopped after the test."""
    queue = SideTaskQueue(workers=2, maxsize=100)
    await queue.start()
    yield queue
    await queue.stop()


ROUND_TRIP_MATCH = {
    "metadata": {"matchId": "NA1_1"},
    "info": {
        "gameCreation": 1000,
        "gameDuration": 1500,
        "queueId": 420,
        "gameMode": "CLASSIC",
        "participants": [
            {
                "puuid": "P1",
                "kills": 10,
                "deaths": 2,
                "assists": 5,
                "championId": 99,
                "championName": "Lux",
                "win": True,
                "teamPosition": "MIDDLE",
            }
        ],
    },
}


def make_match(match_id, game_creation, participants):
    """Build a Riot-shaped match blob."""
    return {
        "metadata": {"matchId": match_id, "participants": [p.get("puuid") for p in participants]},
        "info": {
            "gameCreation": game_creation,
            "gameDuration": 1800,
            "queueId": 420,
            "gameMode": "CLASSIC",
            "platformId": "NA1",
            "participants": participants,
        },
    }


@pytest.fixture
def round_trip_match():
    return copy.deepcopy(ROUND_TRIP_MATCH)


@pytest.fixture
def sample_match():
    """A two-player match with one participant missing its PUUID."""
    return make_match(
        "NA1_100",
        1710000000000,
        [
            {
                "puuid": "P1",
                "teamId": 100,
                "win": True,
                "championId": 238,
                "championName": "Zed",
                "kills": 12,
                "deaths": 2,
                "assists": 6,
                "teamPosition": "MIDDLE",
                "totalMinionsKilled": 200,
                "neutralMinionsKilled": 50,
                "totalDamageDealtToChampions": 30000,
                "visionScore": 25,
                "goldEarned": 15000,
            },
            {
                "puuid": "P2",
                "teamId": 200,
                "win": False,
                "championId": 103,
                "championName": "Ahri",
                "kills": 3,
                "deaths": 8,
                "assists": 4,
                "teamPosition": "MIDDLE",
            },
            {
                "teamId": 200,
                "win": False,
                "championId": 1,
                "kills": 0,
                "deaths": 5,
                "assists": 1,
            },
        ],
    )


@pytest.fixture
def match_factory():
    return make_match
