"""
Ledger service — records deposits and withdrawals for investors.

This is the only code path that changes an investor's balances.  Each
``record_transaction`` call is one atomic unit:

1. validate the transaction type and amount (no I/O yet);
2. take the in-process lock for the investor;
3. load the investor row ``FOR UPDATE`` and the log's per-type totals;
4. compute the new balances (rejecting over-withdrawals);
5. stage the new transaction row and the updated investor snapshot;
6. commit once.

Any failure before the commit rolls the session back, so the log and the
cached balances can never disagree.  Storage errors are logged with full
detail and surfaced as an opaque :class:`StorageFailureException`; nothing
is retried here, and because nothing was committed the caller may retry.

The in-process lock covers SQLite and a single worker; the row lock covers
several workers or replicas on PostgreSQL.  Together they stop two
concurrent withdrawals from both passing the balance check.
"""

import logging
import math
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from apex_backoffice.core.exceptions import (
    InsufficientFundsException,
    InvalidInputException,
    NotFoundException,
    StorageFailureException,
)
from apex_backoffice.core.locks import KeyedLock, investor_locks
from apex_backoffice.models.transaction import MAX_MONEY, Transaction, TransactionType
from apex_backoffice.repositories.investor_repo import InvestorRepository
from apex_backoffice.repositories.transaction_repo import TransactionRepository
from apex_backoffice.services.balance_calculator import (
    BalanceSnapshot,
    compute_balances,
    to_cents,
)

logger = logging.getLogger(__name__)


# ── Input parsing ──


def parse_investor_id(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InvalidInputException(f"Invalid investor id: {value!r}")


def parse_transaction_type(value: Any) -> TransactionType:
    """Accept exactly ``"Deposit"`` or ``"Withdrawal"`` (case-sensitive)."""
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in TransactionType)
        raise InvalidInputException(
            f"Invalid transaction type {value!r}; expected one of: {allowed}"
        )


def parse_amount(value: Any) -> Decimal:
    """
    Parse a positive, finite amount and round it to cents.

    Booleans, NaN, infinities, non-numeric strings, values above
    ``MAX_MONEY`` and anything that rounds to zero or below are rejected.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputException("Amount is required and must be a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInputException("Amount must be a finite number")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInputException(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidInputException("Amount must be a finite number")
    if amount > MAX_MONEY:
        raise InvalidInputException(f"Amount exceeds the maximum of {MAX_MONEY}")

    try:
        amount = to_cents(amount)
    except InvalidOperation:
        raise InvalidInputException(f"Amount out of range: {value!r}")
    if amount <= 0:
        raise InvalidInputException("Amount must be greater than zero")
    return amount


class LedgerService:
    """
    Records transactions and keeps investor balance snapshots in step.

    Both repositories must share one ``AsyncSession``: the transaction insert
    and the investor update are committed together through it.
    """

    def __init__(
        self,
        investor_repo: InvestorRepository,
        transaction_repo: TransactionRepository,
        locks: Optional[KeyedLock] = None,
    ):
        self._investor_repo = investor_repo
        self._transaction_repo = transaction_repo
        self._locks = locks if locks is not None else investor_locks

    # ── Queries ──

    async def list_transactions(self, investor_id: Any) -> List[Transaction]:
        """
        An investor's transactions, most recent first.

        Returns an empty list when there are none, including for an investor
        that has been deleted.
        """
        return await self._transaction_repo.list_for_investor(parse_investor_id(investor_id))

    # ── Commands ──

    async def record_transaction(
        self, investor_id: Any, transaction_type: Any, amount: Any
    ) -> BalanceSnapshot:
        """
        Append a deposit or withdrawal and return the new balances.

        Raises
        ------
        InvalidInputException
            Bad investor id, unknown type, or non-positive / non-numeric amount.
        NotFoundException
            No investor with this id.
        InsufficientFundsException
            Withdrawal larger than the current principal.
        StorageFailureException
            The database failed; nothing was written.
        """
        investor_id = parse_investor_id(investor_id)
        tx_type = parse_transaction_type(transaction_type)
        value = parse_amount(amount)

        async with self._locks.hold(investor_id):
            try:
                investor = await self._investor_repo.get_for_update(investor_id)
                if investor is None:
                    raise NotFoundException("Investor", investor_id)

                totals = await self._transaction_repo.sum_by_type(investor_id)
                snapshot = compute_balances(
                    existing_deposits=totals[TransactionType.DEPOSIT],
                    existing_withdrawals=totals[TransactionType.WITHDRAWAL],
                    roi=Decimal(str(investor.roi)),
                    transaction_type=tx_type,
                    amount=value,
                )

                self._transaction_repo.add(
                    Transaction(investor_id=investor_id, transaction_type=tx_type, amount=value)
                )
                investor.account_balance = snapshot.account_balance
                investor.current_balance = snapshot.current_balance
                await self._investor_repo.commit()
            except InsufficientFundsException as exc:
                await self._investor_repo.rollback()
                logger.warning(
                    "Rejected withdrawal of %s for investor %s: %s",
                    value,
                    investor_id,
                    exc.details,
                )
                raise
            except SQLAlchemyError as exc:
                await self._investor_repo.rollback()
                logger.error(
                    "Storage failure recording %s of %s for investor %s: %s",
                    tx_type.value,
                    value,
                    investor_id,
                    exc,
                )
                raise StorageFailureException() from exc
            except Exception:
                await self._investor_repo.rollback()
                raise

        logger.info(
            "%s of %s recorded for investor %s (account=%s, current=%s)",
            tx_type.value,
            value,
            investor_id,
            snapshot.account_balance,
            snapshot.current_balance,
        )
        return snapshot

    async def delete_investor(self, investor_id: Any) -> None:
        """
        Delete an investor and its whole transaction log in one commit.

        Raises :class:`NotFoundException` if the investor does not exist.
        """
        investor_id = parse_investor_id(investor_id)

        async with self._locks.hold(investor_id):
            try:
                investor = await self._investor_repo.get_for_update(investor_id)
                if investor is None:
                    raise NotFoundException("Investor", investor_id)

                removed = await self._transaction_repo.delete_for_investor(investor_id)
                await self._investor_repo.remove(investor)
                await self._investor_repo.commit()
            except SQLAlchemyError as exc:
                await self._investor_repo.rollback()
                logger.error("Storage failure deleting investor %s: %s", investor_id, exc)
                raise StorageFailureException() from exc
            except Exception:
                await self._investor_repo.rollback()
                raise

        logger.info("Deleted investor %s and %d transactions", investor_id, removed)
