"""
Investor service — business logic for the investor directory.

Creates, lists and edits investor metadata.  Balances are owned by the
ledger: they start at zero here and are never accepted from a request.
The one exception is ``current_balance`` after an ROI change, which is
recomputed from the unchanged principal so the snapshot stays consistent
with the new rate.

Caching:
    Investors are not cached.  A cached list would show stale
    balances right after a deposit or withdrawal.
"""

import logging
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError

from apex_backoffice.core.exceptions import BusinessRuleViolation, NotFoundException
from apex_backoffice.core.locks import KeyedLock, investor_locks
from apex_backoffice.models.investor import Investor, InvestorStatus
from apex_backoffice.repositories.investor_repo import InvestorRepository
from apex_backoffice.schemas.investor import InvestorCreate, InvestorUpdate
from apex_backoffice.services.balance_calculator import (
    BalanceSnapshot,
    apply_interest,
    ensure_storable,
)
from apex_backoffice.services.ledger_service import parse_investor_id

logger = logging.getLogger(__name__)


class InvestorService:
    """Encapsulates CRUD + business rules for :class:`Investor`."""

    def __init__(self, investor_repo: InvestorRepository, locks: Optional[KeyedLock] = None):
        self._repo = investor_repo
        self._locks = locks if locks is not None else investor_locks

    # ── Queries ──

    async def list_investors(self, skip: int = 0, limit: int = 100) -> List[Investor]:
        """Return a page of investors, most recently joined first."""
        return await self._repo.list_recent(skip=skip, limit=limit)

    async def get_investor(self, investor_id: Any) -> Investor:
        """
        Fetch a single investor by ID.

        Raises :class:`NotFoundException` if the investor does not exist.
        """
        investor_id = parse_investor_id(investor_id)
        investor = await self._repo.get(investor_id)
        if not investor:
            raise NotFoundException("Investor", investor_id)
        return investor

    # ── Commands ──

    async def create_investor(self, investor_in: InvestorCreate) -> Investor:
        """
        Register a new investor with zero balances and Active status.

        ``date_joined`` defaults to today when the request omits it.
        """
        data = investor_in.model_dump(exclude_none=True)
        investor = Investor(
            **data,
            status=InvestorStatus.ACTIVE,
            account_balance=Decimal("0.00"),
            current_balance=Decimal("0.00"),
        )
        try:
            created = await self._repo.create(investor)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError creating investor '%s': %s", investor_in.name, exc)
            raise BusinessRuleViolation("Investor data violates a database constraint")

        logger.info("Created investor %s (%s)", created.id, created.name)
        return created

    async def update_investor(self, investor_id: Any, patch: InvestorUpdate) -> Investor:
        """
        Apply a partial update.

        Only fields present in the request body are written, so an explicit
        ``0`` or ``null`` is honoured while omitted fields stay untouched.
        When ``roi`` changes, ``current_balance`` is recomputed from the
        current ``account_balance``.

        Parameters
        ----------
        investor_id : UUID | str
            Investor to update.
        patch : InvestorUpdate
            Fields to change.
        """
        investor_id = parse_investor_id(investor_id)
        changes = patch.model_dump(exclude_unset=True)

        # Same lock as the ledger: the ROI recompute reads account_balance.
        async with self._locks.hold(investor_id):
            investor = await self.get_investor(investor_id)
            if not changes:
                return investor

            if "roi" in changes:
                account_balance = Decimal(str(investor.account_balance))
                snapshot = ensure_storable(
                    BalanceSnapshot(
                        account_balance, apply_interest(account_balance, Decimal(str(changes["roi"])))
                    )
                )
                changes["current_balance"] = snapshot.current_balance

            for field, value in changes.items():
                setattr(investor, field, value)

            try:
                updated = await self._repo.update(investor)
            except IntegrityError as exc:
                await self._repo.db.rollback()
                logger.warning("IntegrityError updating investor %s: %s", investor_id, exc)
                raise BusinessRuleViolation("Investor data violates a database constraint")

        logger.info("Updated investor %s (fields: %s)", updated.id, ", ".join(sorted(changes)))
        return updated
