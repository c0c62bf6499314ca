"""
Investor repository — data-access layer for the ``investors`` table.

Adds the locking read used by the ledger and the directory's default
listing order.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.future import select

from apex_backoffice.models.investor import Investor
from apex_backoffice.repositories.base import BaseRepository


class InvestorRepository(BaseRepository[Investor]):
    """Concrete repository for :class:`Investor` entities."""

    async def get_for_update(self, investor_id: UUID) -> Optional[Investor]:
        """
        Load an investor and lock its row until the current transaction ends.

        On PostgreSQL this issues ``SELECT … FOR UPDATE``, so a second
        ledger write for the same investor (from any replica) blocks until
        the first commits or rolls back.  SQLite has no row locks and the
        clause is omitted; in-process serialization covers that case.

        ``populate_existing`` makes sure an instance already in the identity
        map is overwritten with the locked row's values.
        """

        async def _get_for_update() -> Optional[Investor]:
            stmt = (
                select(self.model)
                .where(self.model.id == investor_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._execute_with_circuit_breaker(_get_for_update)

    async def list_recent(self, skip: int = 0, limit: int = 100) -> List[Investor]:
        """Investors ordered by join date, newest first."""
        return await self.get_all(
            skip=skip,
            limit=limit,
            order_by=[self.model.date_joined.desc(), self.model.created_at.desc()],
        )
