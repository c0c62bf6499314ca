"""
Investor domain model.

An investor holds a principal balance and earns a simple rate of return.
``account_balance`` and ``current_balance`` are a cached view of the
investor's transaction log; only the ledger service writes them.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from apex_backoffice.models.transaction import Transaction


class InvestorStatus(str, Enum):
    """Account status label.  Set at creation; the ledger never changes it."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Investor(SQLModel, table=True):
    """
    SQLModel / SQLAlchemy table definition for investors.

    Monetary columns use DECIMAL(20,2); ``roi`` is a percentage with four
    decimal places (``7.5`` means 7.5%).
    """

    __tablename__ = "investors"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_investors_name_not_empty"),
        CheckConstraint("roi >= 0", name="ck_investors_roi_non_negative"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    account_type: str = Field(max_length=100)
    status: InvestorStatus = Field(default=InvestorStatus.ACTIVE)
    investment_term: str = Field(max_length=100)
    roi: Decimal = Field(max_digits=7, decimal_places=4)
    account_balance: Decimal = Field(default=Decimal("0.00"), max_digits=20, decimal_places=2)
    current_balance: Decimal = Field(default=Decimal("0.00"), max_digits=20, decimal_places=2)
    date_joined: date = Field(default_factory=date.today, index=True)
    date_payable: Optional[date] = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    # ── Relationships ──
    # passive_deletes lets the FK's ON DELETE CASCADE remove the log rows
    # instead of the ORM loading them first.
    transactions: List["Transaction"] = Relationship(
        back_populates="investor",
        sa_relationship_kwargs={"passive_deletes": True},
    )

    def __repr__(self) -> str:
        return (
            f"<Investor id={self.id} name='{self.name}' "
            f"balance={self.account_balance} roi={self.roi}%>"
        )
