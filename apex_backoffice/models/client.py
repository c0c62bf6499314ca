"""
Insurance client and policy renewal models.

A client is a policy holder; each renewal records one renewal of that
policy together with the uploaded policy document.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Index
from sqlmodel import Field, Relationship, SQLModel


class Client(SQLModel, table=True):
    """SQLModel / SQLAlchemy table definition for insurance clients."""

    __tablename__ = "clients"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    policy_number: Optional[str] = Field(default=None, index=True, max_length=100)
    vehicle_number: Optional[str] = Field(default=None, max_length=50)
    premium_paid: Optional[Decimal] = Field(default=None, max_digits=20, decimal_places=2)
    paid_to_apex: Optional[Decimal] = Field(default=None, max_digits=20, decimal_places=2)
    payment_number: Optional[str] = Field(default=None, max_length=100)
    premium: Optional[Decimal] = Field(default=None, max_digits=20, decimal_places=2)
    insurer: Optional[str] = Field(default=None, max_length=255)
    renewal_date: Optional[date] = None
    policy_type: Optional[str] = Field(default=None, max_length=100)
    policy_document: Optional[str] = Field(default=None, max_length=1024)
    additional_attachments: List[str] = Field(
        default_factory=list,
        sa_type=JSON,  # type: ignore[arg-type]
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
        index=True,
    )

    renewals: List["Renewal"] = Relationship(
        back_populates="client",
        sa_relationship_kwargs={"passive_deletes": True},
    )

    def __repr__(self) -> str:
        return f"<Client id={self.id} name='{self.name}' policy={self.policy_number}>"


class Renewal(SQLModel, table=True):
    """SQLModel / SQLAlchemy table definition for policy renewals."""

    __tablename__ = "renewals"  # type: ignore[assignment]

    __table_args__ = (Index("ix_renewals_client_date", "client_id", "renewal_date"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    client_id: uuid.UUID = Field(foreign_key="clients.id", index=True, ondelete="CASCADE")
    renewal_date: date
    next_renewal_date: Optional[date] = None
    policy_document: str = Field(max_length=1024)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    client: Optional[Client] = Relationship(back_populates="renewals")

    def __repr__(self) -> str:
        return f"<Renewal id={self.id} client={self.client_id} date={self.renewal_date}>"
