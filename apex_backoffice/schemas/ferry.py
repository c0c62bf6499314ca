"""
Pydantic schemas for the ferry-pass endpoints.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from apex_backoffice.models.ferry import BookingStatus, PaymentStatus
from apex_backoffice.schemas.common import decimal_to_float


# ── Customers ──


class FerryCustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Ama Owusu"])
    contact: str = Field(..., min_length=1, max_length=100, examples=["+233 24 555 0101"])


class FerryCustomerResponse(FerryCustomerCreate):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ── Fare tables ──


class FareTypeCreate(BaseModel):
    """Body for ``POST /vehicle-types`` and ``POST /passenger-types``."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Saloon car"])
    cost: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, examples=[150.00])


class FareTypeResponse(FareTypeCreate):
    id: UUID

    @field_serializer("cost")
    def serialize_cost(self, v: Decimal) -> float:
        return decimal_to_float(v)

    model_config = ConfigDict(from_attributes=True)


# ── Vehicle numbers ──


class VehicleNumberCreate(BaseModel):
    vehicle_number: str = Field(..., min_length=1, max_length=50, examples=["GT 1234-21"])
    vehicle_type_id: UUID


class VehicleNumberResponse(VehicleNumberCreate):
    """A registered plate with the name of its vehicle type."""

    id: UUID
    vehicle_type_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ── Bookings ──


class PassengerCount(BaseModel):
    type: str = Field(..., min_length=1, max_length=100, examples=["Adult"])
    count: int = Field(..., ge=1, examples=[2])


class BookingCreate(BaseModel):
    """
    Schema for ``POST /bookings`` and the full edit ``PUT /bookings/{id}``.

    New bookings start ``Pending`` / ``Unpaid`` unless told otherwise.
    """

    customer_name: str = Field(..., min_length=1, max_length=255)
    booking_number: Optional[str] = Field(default=None, max_length=100)
    payment_number: Optional[str] = Field(default=None, max_length=100)
    vehicle_number: Optional[str] = Field(default=None, max_length=50)
    vehicle_type: Optional[str] = Field(default=None, max_length=100)
    passengers: List[PassengerCount] = Field(default_factory=list)
    mode_of_travel: Optional[str] = Field(default=None, max_length=50, examples=["Return"])
    travel_date: Optional[date] = None
    admin_charge: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)
    net_cost: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)
    booking_status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID


class BookingStatusUpdate(BaseModel):
    """Body for ``PUT /bookings/{id}/status``; at least one field is required."""

    booking_status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None


class BookingPaymentUpdate(BaseModel):
    """Body for ``PUT /bookings/{id}/payment``."""

    payment_status: PaymentStatus
    payment_number: Optional[str] = Field(default=None, max_length=100)


class BookingResponse(BaseModel):
    id: UUID
    customer_name: str
    booking_number: Optional[str] = None
    payment_number: Optional[str] = None
    vehicle_number: Optional[str] = None
    vehicle_type: Optional[str] = None
    passengers: List[PassengerCount]
    mode_of_travel: Optional[str] = None
    travel_date: Optional[date] = None
    admin_charge: Decimal
    net_cost: Decimal
    booking_status: BookingStatus
    payment_status: PaymentStatus
    created_at: datetime

    @field_serializer("admin_charge", "net_cost")
    def serialize_decimal_as_number(self, v: Decimal) -> float:
        return decimal_to_float(v)

    model_config = ConfigDict(from_attributes=True)
