"""
Transaction domain model.

One row per deposit or withdrawal.  Rows are append-only: nothing in the
application updates or deletes an individual transaction; they disappear
only with their investor (FK ``ON DELETE CASCADE``).
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, Index
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from apex_backoffice.models.investor import Investor


class TransactionType(str, Enum):
    """The two kinds of ledger entry."""

    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"


# Largest value a DECIMAL(20,2) money column holds.
MAX_MONEY = Decimal("999999999999999999.99")


class Transaction(SQLModel, table=True):
    """
    SQLModel / SQLAlchemy table definition for ledger transactions.

    The composite index ``ix_transactions_investor_date`` serves the
    history query (``WHERE investor_id = ? ORDER BY transaction_date DESC``)
    and the per-investor SUM aggregation.
    """

    __tablename__ = "transactions"  # type: ignore[assignment]

    __table_args__ = (
        Index("ix_transactions_investor_date", "investor_id", "transaction_date"),
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_id: uuid.UUID = Field(
        foreign_key="investors.id",
        index=True,
        ondelete="CASCADE",
    )
    transaction_type: TransactionType
    amount: Decimal = Field(max_digits=20, decimal_places=2)
    transaction_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    investor: Optional["Investor"] = Relationship(back_populates="transactions")

    def __repr__(self) -> str:
        return (
            f"<Transaction id={self.id} investor={self.investor_id} "
            f"{self.transaction_type.value} {self.amount}>"
        )
