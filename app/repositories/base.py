"""Generic async CRUD access over one mapped root type.

Every write commits its own transaction. On failure the session is rolled back;
a stale optimistic-lock version is surfaced as ConcurrencyConflictError, while
storage constraint violations and write-time validation errors are re-raised
unchanged.
"""
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.sql import Select

from app.core.app_logger import get_logger
from app.core.exceptions import ConcurrencyConflictError, EntityNotFoundError, EntityValidationError

ModelT = TypeVar("ModelT")

logger = get_logger("repositories")


class CrudRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # --- Query building ---

    def _criteria(self) -> Sequence[Any]:
        """Extra WHERE clauses applied to every read."""
        return ()

    def _load_options(self) -> Sequence[Any]:
        """Eager loads applied to every read, so callers can walk relationships without lazy IO."""
        return ()

    def _id_column(self):
        return self.model.id

    def _select(self) -> Select:
        stmt = select(self.model)
        criteria = self._criteria()
        if criteria:
            stmt = stmt.where(*criteria)
        options = self._load_options()
        if options:
            stmt = stmt.options(*options)
        return stmt

    # --- Reads ---

    async def get(self, entity_id: int) -> Optional[ModelT]:
        result = await self.db.execute(self._select().where(self._id_column() == entity_id))
        return result.scalar_one_or_none()

    async def get_or_raise(self, entity_id: int) -> ModelT:
        entity = await self.get(entity_id)
        if entity is None:
            raise EntityNotFoundError(f"{self.model.__name__} {entity_id} not found")
        return entity

    async def list_all(self) -> List[ModelT]:
        result = await self.db.execute(self._select().order_by(self._id_column()))
        return list(result.scalars().all())

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        criteria = self._criteria()
        if criteria:
            stmt = stmt.where(*criteria)
        return (await self.db.execute(stmt)).scalar_one()

    async def exists(self, entity_id: int) -> bool:
        stmt = select(self._id_column()).where(self._id_column() == entity_id)
        criteria = self._criteria()
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    # --- Writes ---

    async def save(self, entity: ModelT) -> ModelT:
        """Insert or update the entity and everything reachable through its save-update cascades."""
        self.db.add(entity)
        await self._commit(f"save {entity!r}")
        return entity

    async def save_all(self, entities: Iterable[ModelT]) -> List[ModelT]:
        items = list(entities)
        self.db.add_all(items)
        await self._commit(f"save {len(items)} {self.model.__name__} row(s)")
        return items

    async def delete(self, entity: ModelT) -> None:
        """Delete the entity; owned rows follow through the relationship cascades."""
        action = f"delete {entity!r}"
        await self.db.delete(entity)
        await self._commit(action)

    async def delete_by_id(self, entity_id: int) -> bool:
        entity = await self.get(entity_id)
        if entity is None:
            return False
        await self.delete(entity)
        return True

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning("Version conflict on %s", action)
            raise ConcurrencyConflictError(
                f"{self.model.__name__} was modified by another transaction; reload it and retry"
            ) from e
        except IntegrityError:
            await self.db.rollback()
            logger.warning("Constraint violation on %s", action)
            raise
        except EntityValidationError:
            await self.db.rollback()
            logger.warning("Rejected %s", action)
            raise
        logger.debug("Committed %s", action)
