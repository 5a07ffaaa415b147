"""Repository pattern implementation for the Player Aggregate Store."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError

from rift_reviewer.core.database import DatabaseManager, dialect_insert
from rift_reviewer.core.enums import StoreErrorKind
from rift_reviewer.core.exceptions import StoreError

from .orm_models import PlayerAggregateORM
from .schemas import PlayerAggregate

logger = structlog.get_logger(__name__)

# Written from the incoming aggregate on every upsert
_REPLACED_COLUMNS = (
    "total_matches",
    "wins",
    "losses",
    "win_rate",
    "avg_kda",
    "avg_cs",
    "avg_damage",
    "avg_vision_score",
    "champion_stats",
    "role_stats",
    "last_updated",
    "last_match_fetched",
)

# Keep the stored value when the incoming one is null
_IDENTITY_COLUMNS = ("game_name", "tag_line")


class PlayerAggregateRepositoryInterface(ABC):
    """Interface for the Player Aggregate Store."""

    @abstractmethod
    async def get(self, puuid: str) -> Optional[PlayerAggregateORM]:
        """Get a player's aggregate by PUUID."""
        pass

    @abstractmethod
    async def upsert(self, aggregate: PlayerAggregate) -> None:
        """Insert the aggregate, or replace the stored one in the same write.

        Cached identity survives a null incoming identity, and attached
        insights are never cleared.
        """
        pass

    @abstractmethod
    async def attach_insights(self, puuid: str, insights: Dict[str, Any]) -> None:
        """Attach generated insights to an existing aggregate."""
        pass


class SQLAlchemyPlayerAggregateRepository(PlayerAggregateRepositoryInterface):
    """SQLAlchemy implementation of the Player Aggregate Store."""

    def __init__(self, db: DatabaseManager):
        """Initialize repository with a database manager."""
        self.db = db

    async def get(self, puuid: str) -> Optional[PlayerAggregateORM]:
        try:
            async with self.db.get_session() as session:
                return await session.get(PlayerAggregateORM, puuid)
        except SQLAlchemyError as e:
            logger.error("aggregate_get_failed", puuid=puuid, error=str(e))
            raise StoreError(
                StoreErrorKind.UNAVAILABLE, f"Reading aggregate failed: {e}"
            ) from e

    async def upsert(self, aggregate: PlayerAggregate) -> None:
        values = aggregate.model_dump(mode="json", exclude={"ai_insights"})
        try:
            async with self.db.get_session() as session:
                stmt = dialect_insert(session, PlayerAggregateORM).values(**values)
                set_ = {column: stmt.excluded[column] for column in _REPLACED_COLUMNS}
                for column in _IDENTITY_COLUMNS:
                    set_[column] = func.coalesce(
                        stmt.excluded[column], getattr(PlayerAggregateORM, column)
                    )
                stmt = stmt.on_conflict_do_update(index_elements=["puuid"], set_=set_)
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("aggregate_upsert_failed", puuid=aggregate.puuid, error=str(e))
            raise StoreError(
                StoreErrorKind.UNAVAILABLE,
                f"Writing aggregate failed: {e}",
                details={"puuid": aggregate.puuid},
            ) from e

        logger.debug(
            "aggregate_upserted",
            puuid=aggregate.puuid,
            total_matches=aggregate.total_matches,
        )

    async def attach_insights(self, puuid: str, insights: Dict[str, Any]) -> None:
        try:
            async with self.db.get_session() as session:
                result = await session.execute(
                    update(PlayerAggregateORM)
                    .where(PlayerAggregateORM.puuid == puuid)
                    .values(ai_insights=insights)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(
                StoreErrorKind.UNAVAILABLE, f"Attaching insights failed: {e}"
            ) from e

        if result.rowcount == 0:
            raise StoreError(
                StoreErrorKind.NOT_FOUND,
                f"Aggregate for {puuid} does not exist",
                details={"puuid": puuid},
            )
