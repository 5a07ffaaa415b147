"""Repository pattern implementation for the Match Record and Participant Index stores.

Each operation opens its own short-lived session so that parallel ingestion
fan-out and background backfills never share one. Creates are conditional
writes: a row that already exists is reported as
``StoreError(DUPLICATE_KEY)`` instead of being overwritten.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from rift_reviewer.core.database import DatabaseManager, dialect_insert
from rift_reviewer.core.enums import StoreErrorKind
from rift_reviewer.core.exceptions import StoreError

from .orm_models import MatchRecordORM
from .participants_orm import ParticipantIndexORM
from .schemas import MatchRecordCreate, ParticipantIndexCreate

logger = structlog.get_logger(__name__)


def _translate_error(error: SQLAlchemyError, operation: str, **context: Any) -> StoreError:
    """Map a SQLAlchemy failure onto a storage error kind."""
    if isinstance(error, IntegrityError):
        kind = StoreErrorKind.VALIDATION_FAILED
    else:
        kind = StoreErrorKind.UNAVAILABLE
    logger.error(
        "store_operation_failed",
        operation=operation,
        kind=kind.value,
        error=str(error),
        **context,
    )
    return StoreError(kind, f"{operation} failed: {error}", details=context)


class MatchRecordRepositoryInterface(ABC):
    """Interface for the Match Record Store."""

    @abstractmethod
    async def get(self, match_id: str) -> Optional[MatchRecordORM]:
        """Get a match record by ID.

        Args:
            match_id: Match identifier

        Returns:
            MatchRecordORM if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, record: MatchRecordCreate) -> MatchRecordORM:
        """Insert a match record if absent.

        Raises:
            StoreError: DUPLICATE_KEY when the record already exists
        """
        pass

    @abstractmethod
    async def refresh_ttl(
        self, match_id: str, expires_at: int, processed_at: int
    ) -> bool:
        """Refresh the freshness marker of an existing record.

        Returns:
            True if a record was updated, False if none exists
        """
        pass

    @abstractmethod
    async def attach_insights(self, match_id: str, insights: Dict[str, Any]) -> None:
        """Merge generated insights into an existing record.

        Keys already stored under ``ai_insights`` and absent from
        ``insights`` are kept.

        Raises:
            StoreError: NOT_FOUND when the record does not exist
        """
        pass


class SQLAlchemyMatchRecordRepository(MatchRecordRepositoryInterface):
    """SQLAlchemy implementation of the Match Record Store."""

    def __init__(self, db: DatabaseManager):
        """Initialize repository with a database manager.

        Args:
            db: Database manager providing short-lived sessions
        """
        self.db = db

    async def get(self, match_id: str) -> Optional[MatchRecordORM]:
        """Get a match record by ID."""
        try:
            async with self.db.get_session() as session:
                record = await session.get(MatchRecordORM, match_id)
        except SQLAlchemyError as e:
            raise _translate_error(e, "match_record_get", match_id=match_id) from e

        if record:
            logger.debug("match_record_retrieved", match_id=match_id)
        return record

    async def create(self, record: MatchRecordCreate) -> MatchRecordORM:
        """Insert a match record if absent."""
        values = record.model_dump()
        try:
            async with self.db.get_session() as session:
                stmt = (
                    dialect_insert(session, MatchRecordORM)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=["match_id"])
                )
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise _translate_error(
                e, "match_record_create", match_id=record.match_id
            ) from e

        if result.rowcount == 0:
            raise StoreError(
                StoreErrorKind.DUPLICATE_KEY,
                f"Match record {record.match_id} already exists",
                details={"match_id": record.match_id},
            )

        logger.debug("match_record_created", match_id=record.match_id)
        return MatchRecordORM(**values)

    async def refresh_ttl(
        self, match_id: str, expires_at: int, processed_at: int
    ) -> bool:
        """Refresh the freshness marker of an existing record."""
        try:
            async with self.db.get_session() as session:
                stmt = (
                    update(MatchRecordORM)
                    .where(MatchRecordORM.match_id == match_id)
                    .values(expires_at=expires_at, processed_at=processed_at)
                )
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise _translate_error(e, "match_record_refresh_ttl", match_id=match_id) from e

        updated = result.rowcount > 0
        logger.debug("match_record_ttl_refreshed", match_id=match_id, updated=updated)
        return updated

    async def attach_insights(self, match_id: str, insights: Dict[str, Any]) -> None:
        """Merge generated insights into the record's stored insights."""
        try:
            async with self.db.get_session() as session:
                record = await session.get(MatchRecordORM, match_id, with_for_update=True)
                if record is not None:
                    record.ai_insights = {**(record.ai_insights or {}), **insights}
                    await session.commit()
        except SQLAlchemyError as e:
            raise _translate_error(
                e, "match_record_attach_insights", match_id=match_id
            ) from e

        if record is None:
            raise StoreError(
                StoreErrorKind.NOT_FOUND,
                f"Match record {match_id} does not exist",
                details={"match_id": match_id},
            )


class ParticipantIndexRepositoryInterface(ABC):
    """Interface for the Participant Index Store."""

    @abstractmethod
    async def create(self, entry: ParticipantIndexCreate) -> ParticipantIndexORM:
        """Insert a participant entry if absent.

        Raises:
            StoreError: DUPLICATE_KEY when (puuid, match_id) already exists
        """
        pass

    @abstractmethod
    async def get(self, puuid: str, match_id: str) -> Optional[ParticipantIndexORM]:
        """Get one participant entry."""
        pass

    @abstractmethod
    async def list_for_player(
        self, puuid: str, limit: Optional[int] = None, offset: int = 0
    ) -> List[ParticipantIndexORM]:
        """List a player's entries, most recent game first.

        Args:
            puuid: Player PUUID
            limit: Maximum number of entries, None for the full history
            offset: Offset for pagination
        """
        pass

    @abstractmethod
    async def count_for_player(self, puuid: str) -> int:
        """Count a player's entries."""
        pass

    @abstractmethod
    async def attach_insights(
        self, puuid: str, match_id: str, insights: Dict[str, Any]
    ) -> None:
        """Attach generated insights to an existing entry."""
        pass


class SQLAlchemyParticipantIndexRepository(ParticipantIndexRepositoryInterface):
    """SQLAlchemy implementation of the Participant Index Store."""

    def __init__(self, db: DatabaseManager):
        """Initialize repository with a database manager."""
        self.db = db

    async def create(self, entry: ParticipantIndexCreate) -> ParticipantIndexORM:
        """Insert a participant entry if absent."""
        values = entry.model_dump()
        context = {"puuid": entry.puuid, "match_id": entry.match_id}
        try:
            async with self.db.get_session() as session:
                stmt = (
                    dialect_insert(session, ParticipantIndexORM)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=["puuid", "match_id"])
                )
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise _translate_error(e, "participant_create", **context) from e

        if result.rowcount == 0:
            raise StoreError(
                StoreErrorKind.DUPLICATE_KEY,
                f"Participant entry ({entry.puuid}, {entry.match_id}) already exists",
                details=context,
            )

        return ParticipantIndexORM(**values)

    async def get(self, puuid: str, match_id: str) -> Optional[ParticipantIndexORM]:
        """Get one participant entry."""
        try:
            async with self.db.get_session() as session:
                return await session.get(ParticipantIndexORM, (puuid, match_id))
        except SQLAlchemyError as e:
            raise _translate_error(
                e, "participant_get", puuid=puuid, match_id=match_id
            ) from e

    async def list_for_player(
        self, puuid: str, limit: Optional[int] = None, offset: int = 0
    ) -> List[ParticipantIndexORM]:
        """List a player's entries, most recent game first."""
        stmt = (
            select(ParticipantIndexORM)
            .where(ParticipantIndexORM.puuid == puuid)
            .order_by(
                desc(ParticipantIndexORM.game_creation),
                desc(ParticipantIndexORM.match_id),
            )
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self.db.get_session() as session:
                result = await session.execute(stmt)
                entries = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise _translate_error(e, "participant_list", puuid=puuid) from e

        logger.debug("participants_listed", puuid=puuid, count=len(entries))
        return entries

    async def count_for_player(self, puuid: str) -> int:
        """Count a player's entries."""
        stmt = select(func.count()).where(ParticipantIndexORM.puuid == puuid)
        try:
            async with self.db.get_session() as session:
                result = await session.execute(stmt)
                return int(result.scalar() or 0)
        except SQLAlchemyError as e:
            raise _translate_error(e, "participant_count", puuid=puuid) from e

    async def attach_insights(
        self, puuid: str, match_id: str, insights: Dict[str, Any]
    ) -> None:
        """Attach generated insights to an existing entry."""
        try:
            async with self.db.get_session() as session:
                stmt = (
                    update(ParticipantIndexORM)
                    .where(
                        ParticipantIndexORM.puuid == puuid,
                        ParticipantIndexORM.match_id == match_id,
                    )
                    .values(ai_insights=insights)
                )
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise _translate_error(
                e, "participant_attach_insights", puuid=puuid, match_id=match_id
            ) from e

        if result.rowcount == 0:
            raise StoreError(
                StoreErrorKind.NOT_FOUND,
                f"Participant entry ({puuid}, {match_id}) does not exist",
                details={"puuid": puuid, "match_id": match_id},
            )
