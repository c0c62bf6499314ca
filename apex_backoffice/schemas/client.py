"""
Pydantic schemas for insurance clients and policy renewals.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from apex_backoffice.schemas.common import decimal_to_float


class ClientBase(BaseModel):
    """Fields common to client creation and responses."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Kwame Asante"])
    policy_number: Optional[str] = Field(default=None, max_length=100, examples=["POL-2024-0113"])
    vehicle_number: Optional[str] = Field(default=None, max_length=50, examples=["GR 4471-22"])
    premium_paid: Optional[Decimal] = Field(default=None, ge=0, examples=[1250.00])
    paid_to_apex: Optional[Decimal] = Field(default=None, ge=0, examples=[1100.00])
    payment_number: Optional[str] = Field(default=None, max_length=100)
    premium: Optional[Decimal] = Field(default=None, ge=0, examples=[1250.00])
    insurer: Optional[str] = Field(default=None, max_length=255, examples=["Enterprise Insurance"])
    renewal_date: Optional[date] = None
    policy_type: Optional[str] = Field(default=None, max_length=100, examples=["Comprehensive"])
    policy_document: Optional[str] = Field(default=None, max_length=1024)

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class ClientCreate(ClientBase):
    """Schema for ``POST /clients``."""

    additional_attachments: List[str] = Field(default_factory=list)


class ClientUpdate(BaseModel):
    """
    Schema for ``PUT /clients/{id}``.

    Merge semantics: only fields present in the body are written.  Sending
    ``"premium": 0`` or ``"insurer": ""`` stores that value; leaving a field
    out keeps what is there.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    policy_number: Optional[str] = Field(default=None, max_length=100)
    vehicle_number: Optional[str] = Field(default=None, max_length=50)
    premium_paid: Optional[Decimal] = Field(default=None, ge=0)
    paid_to_apex: Optional[Decimal] = Field(default=None, ge=0)
    payment_number: Optional[str] = Field(default=None, max_length=100)
    premium: Optional[Decimal] = Field(default=None, ge=0)
    insurer: Optional[str] = Field(default=None, max_length=255)
    renewal_date: Optional[date] = None
    policy_type: Optional[str] = Field(default=None, max_length=100)
    policy_document: Optional[str] = Field(default=None, max_length=1024)
    additional_attachments: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()

    @field_validator("additional_attachments")
    @classmethod
    def validate_attachments_not_null(cls, v: Optional[List[str]]) -> List[str]:
        if v is None:
            raise ValueError("additional_attachments cannot be null; send [] to clear")
        return v


class ClientResponse(ClientBase):
    """Schema returned by client endpoints."""

    id: UUID
    additional_attachments: List[str]
    created_at: datetime

    @field_serializer("premium_paid", "paid_to_apex", "premium")
    def serialize_decimal_as_number(self, v: Optional[Decimal]) -> Optional[float]:
        return decimal_to_float(v)

    model_config = ConfigDict(from_attributes=True)


class RenewalResponse(BaseModel):
    """Schema returned by renewal endpoints."""

    id: UUID
    client_id: UUID
    renewal_date: date
    next_renewal_date: Optional[date] = None
    policy_document: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
