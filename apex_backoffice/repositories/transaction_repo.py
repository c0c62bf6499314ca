"""
Transaction repository — data-access layer for the ``transactions`` table.

The log is append-only: there is no update method, and rows are removed
only in bulk when their investor is deleted.
"""

from decimal import Decimal
from typing import Dict, List
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.future import select

from apex_backoffice.models.transaction import Transaction, TransactionType
from apex_backoffice.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Concrete repository for :class:`Transaction` entities."""

    async def sum_by_type(self, investor_id: UUID) -> Dict[TransactionType, Decimal]:
        """
        Total amount per transaction type for one investor.

        Runs ``SELECT transaction_type, SUM(amount) … GROUP BY
        transaction_type``.  Every type is present in the result; a type
        with no rows maps to ``Decimal("0")``.
        """

        async def _sum_by_type() -> Dict[TransactionType, Decimal]:
            stmt = (
                select(self.model.transaction_type, func.sum(self.model.amount))
                .where(self.model.investor_id == investor_id)
                .group_by(self.model.transaction_type)
            )
            result = await self.db.execute(stmt)
            totals = {tx_type: Decimal("0") for tx_type in TransactionType}
            for tx_type, total in result.all():
                # SQLite hands back floats for SUM(); go through str() so
                # the Decimal carries no binary noise.
                totals[TransactionType(tx_type)] = Decimal(str(total or 0))
            return totals

        return await self._execute_with_circuit_breaker(_sum_by_type)

    async def list_for_investor(self, investor_id: UUID) -> List[Transaction]:
        """All transactions for an investor, most recent first."""

        async def _list_for_investor() -> List[Transaction]:
            stmt = (
                select(self.model)
                .where(self.model.investor_id == investor_id)
                .order_by(self.model.transaction_date.desc(), self.model.id)
            )
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._execute_with_circuit_breaker(_list_for_investor)

    async def delete_for_investor(self, investor_id: UUID) -> int:
        """
        Stage deletion of every transaction owned by ``investor_id``.

        Does not commit; returns the number of rows removed.
        """

        async def _delete_for_investor() -> int:
            stmt = delete(self.model).where(self.model.investor_id == investor_id)
            result = await self.db.execute(stmt)
            return result.rowcount or 0

        return await self._execute_with_circuit_breaker(_delete_for_investor)
