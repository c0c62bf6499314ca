"""
Generic async repository (Data Access Layer).

Implements the Repository pattern on top of SQLAlchemy's ``AsyncSession``.
Concrete repositories inherit from ``BaseRepository[T]`` and add
entity-specific queries.

Two styles of write are offered:

- ``create`` / ``update`` / ``delete`` commit immediately.  Plain CRUD
  services use these; one request equals one statement.
- ``add`` / ``remove`` / ``commit`` / ``rollback`` only stage
  work in the session so that a service can group several writes into one
  atomic unit (the ledger does this).  Repositories sharing the same
  session share the same unit of work.

**IntegrityError** is not caught here; each service maps it to its own
domain error.  **OperationalError** during commit rolls the session back
before re-raising so a dirty session never leaks.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlmodel import SQLModel

from apex_backoffice.core.resilience import db_circuit_breaker

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic CRUD repository for SQLModel entities.

    Parameters
    ----------
    model : Type[ModelType]
        The SQLModel class this repository manages.
    db : AsyncSession
        An active async database session (injected per-request).

    Every database round-trip goes through the global ``db_circuit_breaker``
    so a database outage fails fast instead of exhausting the pool.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def _execute_with_circuit_breaker(self, func: Any, *args: Any, **kwargs: Any) -> Any:
        async with db_circuit_breaker.guard():
            return await func(*args, **kwargs)

    # ── Reads ──

    async def get(self, id: Any) -> Optional[ModelType]:
        """Fetch a single entity by primary key.  Returns ``None`` if not found."""

        async def _get() -> Optional[ModelType]:
            return await self.db.get(self.model, id)

        return await self._execute_with_circuit_breaker(_get)

    async def get_all(
        self, skip: int = 0, limit: int = 100, order_by: Any = None
    ) -> List[ModelType]:
        """
        Return a page of entities.

        Defaults to primary-key order so pagination is deterministic; callers
        pass ``order_by`` for a user-facing sort (newest first, etc.).
        """

        async def _get_all() -> List[ModelType]:
            if order_by is None:
                ordering = list(self.model.__table__.primary_key.columns)
            elif isinstance(order_by, (list, tuple)):
                ordering = list(order_by)
            else:
                ordering = [order_by]
            stmt = select(self.model).order_by(*ordering).offset(skip).limit(limit)
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._execute_with_circuit_breaker(_get_all)

    # ── Immediate writes (one statement, one commit) ──

    async def create(self, obj_in: ModelType) -> ModelType:
        """Insert a new entity, commit, and return the refreshed instance."""

        async def _create() -> ModelType:
            self.db.add(obj_in)
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error("OperationalError during create for %s", self.model.__name__)
                raise
            await self.db.refresh(obj_in)
            return obj_in

        return await self._execute_with_circuit_breaker(_create)

    async def update(self, entity: ModelType) -> ModelType:
        """Persist attribute changes made by the caller on ``entity``."""

        async def _update() -> ModelType:
            merged = await self.db.merge(entity)
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error("OperationalError during update for %s", self.model.__name__)
                raise
            await self.db.refresh(merged)
            return merged

        return await self._execute_with_circuit_breaker(_update)

    async def delete(self, id: Any) -> bool:
        """
        Delete an entity by primary key.

        Returns ``True`` if the entity existed and was deleted.
        """

        async def _delete() -> bool:
            entity = await self.db.get(self.model, id)
            if entity is None:
                return False
            await self.db.delete(entity)
            try:
                await self.db.commit()
            except OperationalError:
                await self.db.rollback()
                logger.error(
                    "OperationalError during delete for %s id=%s", self.model.__name__, id
                )
                raise
            return True

        return await self._execute_with_circuit_breaker(_delete)

    # ── Unit-of-work helpers (no commit) ──

    def add(self, obj_in: ModelType) -> None:
        """Stage ``obj_in`` for insertion in the current unit of work."""
        self.db.add(obj_in)

    async def remove(self, entity: ModelType) -> None:
        """Stage ``entity`` for deletion in the current unit of work."""
        await self._execute_with_circuit_breaker(self.db.delete, entity)

    async def commit(self) -> None:
        await self._execute_with_circuit_breaker(self.db.commit)

    async def rollback(self) -> None:
        await self.db.rollback()
