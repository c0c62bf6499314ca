"""
Ferry-pass models: customers, fare tables, registered vehicles and bookings.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    REFUNDED = "Refunded"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FerryCustomer(SQLModel, table=True):
    """A person who books ferry crossings."""

    __tablename__ = "customers"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    contact: str = Field(max_length=100)
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )


class VehicleType(SQLModel, table=True):
    """Fare for carrying one vehicle of this type."""

    __tablename__ = "vehicle_types"  # type: ignore[assignment]
    __table_args__ = (CheckConstraint("cost > 0", name="ck_vehicle_types_cost_positive"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, max_length=100)
    cost: Decimal = Field(max_digits=12, decimal_places=2)


class PassengerType(SQLModel, table=True):
    """Fare for one passenger of this category (adult, child, ...)."""

    __tablename__ = "passenger_types"  # type: ignore[assignment]
    __table_args__ = (CheckConstraint("cost > 0", name="ck_passenger_types_cost_positive"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(unique=True, max_length=100)
    cost: Decimal = Field(max_digits=12, decimal_places=2)


class VehicleNumber(SQLModel, table=True):
    """A registration plate remembered for quick booking entry."""

    __tablename__ = "vehicle_numbers"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    vehicle_number: str = Field(index=True, max_length=50)
    vehicle_type_id: uuid.UUID = Field(foreign_key="vehicle_types.id", ondelete="CASCADE")
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )


class Booking(SQLModel, table=True):
    """
    A ferry booking.

    ``passengers`` is stored as JSON: a list of ``{"type": ..., "count": ...}``
    objects, mirroring what the booking form submits.
    """

    __tablename__ = "bookings"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    customer_name: str = Field(max_length=255)
    booking_number: Optional[str] = Field(default=None, index=True, max_length=100)
    payment_number: Optional[str] = Field(default=None, max_length=100)
    vehicle_number: Optional[str] = Field(default=None, max_length=50)
    vehicle_type: Optional[str] = Field(default=None, max_length=100)
    passengers: List[dict] = Field(default_factory=list, sa_type=JSON)  # type: ignore[arg-type]
    mode_of_travel: Optional[str] = Field(default=None, max_length=50)
    travel_date: Optional[date] = None
    admin_charge: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    net_cost: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    booking_status: BookingStatus = Field(default=BookingStatus.PENDING)
    payment_status: PaymentStatus = Field(default=PaymentStatus.UNPAID)
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Booking id={self.id} number={self.booking_number} "
            f"status={self.booking_status.value}/{self.payment_status.value}>"
        )
