"""
Client and renewal repositories — data access for ``clients`` / ``renewals``.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.future import select

from apex_backoffice.models.client import Client, Renewal
from apex_backoffice.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """Concrete repository for :class:`Client` entities."""

    async def get_for_update(self, client_id: UUID) -> Optional[Client]:
        """Load a client and lock its row until the current transaction ends."""

        async def _get_for_update() -> Optional[Client]:
            stmt = (
                select(self.model)
                .where(self.model.id == client_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._execute_with_circuit_breaker(_get_for_update)

    async def list_recent(self, skip: int = 0, limit: int = 100) -> List[Client]:
        return await self.get_all(skip=skip, limit=limit, order_by=self.model.created_at.desc())


class RenewalRepository(BaseRepository[Renewal]):
    """Concrete repository for :class:`Renewal` entities."""

    async def list_for_client(self, client_id: UUID) -> List[Renewal]:
        """Renewals for one client, latest renewal date first."""

        async def _list_for_client() -> List[Renewal]:
            stmt = (
                select(self.model)
                .where(self.model.client_id == client_id)
                .order_by(self.model.renewal_date.desc())
            )
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._execute_with_circuit_breaker(_list_for_client)

    async def get_for_client(self, client_id: UUID, renewal_id: UUID) -> Optional[Renewal]:
        """Return the renewal only if it belongs to ``client_id``."""

        async def _get_for_client() -> Optional[Renewal]:
            stmt = select(self.model).where(
                self.model.id == renewal_id, self.model.client_id == client_id
            )
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._execute_with_circuit_breaker(_get_for_client)
