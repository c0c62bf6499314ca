"""
Pydantic schemas for Investor API request / response serialisation.

Balances never appear on request schemas: they are written only by the
ledger.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from apex_backoffice.models.investor import InvestorStatus
from apex_backoffice.schemas.common import decimal_to_float


def _strip_not_blank(value: str, field_name: str) -> str:
    if not value.strip():
        raise ValueError(f"{field_name} must not be blank")
    return value.strip()


class InvestorBase(BaseModel):
    """Fields common to investor creation and responses."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Full name of the investor",
        examples=["Jane Mensah"],
    )
    account_type: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Account classification label",
        examples=["Fixed Deposit"],
    )
    investment_term: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Agreed investment term",
        examples=["12 months"],
    )
    roi: Decimal = Field(
        ...,
        ge=0,
        max_digits=7,
        decimal_places=4,
        description="Rate of return in percent (10 means 10%)",
        examples=[10],
    )
    date_payable: Optional[date] = Field(
        default=None,
        description="Next payout date, if scheduled",
    )

    @field_validator("name", "account_type", "investment_term")
    @classmethod
    def validate_not_blank(cls, v: str, info) -> str:
        return _strip_not_blank(v, info.field_name)


class InvestorCreate(InvestorBase):
    """
    Schema for ``POST /investors``.

    ``date_joined`` defaults to today when omitted.  New investors always
    start Active with zero balances.
    """

    date_joined: Optional[date] = Field(
        default=None,
        description="Date the investor joined (defaults to today)",
        examples=["2025-01-15"],
    )


class InvestorUpdate(BaseModel):
    """
    Schema for ``PATCH /investors/{id}``.

    Every field is optional.  Only fields present in the request body are
    applied, so ``{"roi": 0}`` sets the ROI to zero while leaving every
    other field alone.  ``null`` is accepted only for ``date_payable``.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    account_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    investment_term: Optional[str] = Field(default=None, min_length=1, max_length=100)
    roi: Optional[Decimal] = Field(default=None, ge=0, max_digits=7, decimal_places=4)
    status: Optional[InvestorStatus] = None
    date_joined: Optional[date] = None
    date_payable: Optional[date] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "account_type", "investment_term")
    @classmethod
    def validate_not_blank(cls, v: Optional[str], info) -> Optional[str]:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return _strip_not_blank(v, info.field_name)

    @field_validator("roi", "status", "date_joined")
    @classmethod
    def validate_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class InvestorResponse(InvestorBase):
    """Investor snapshot including cached balances."""

    id: UUID
    status: InvestorStatus
    account_balance: Decimal
    current_balance: Decimal
    date_joined: date
    created_at: datetime

    @field_serializer("roi", "account_balance", "current_balance")
    def serialize_decimal_as_number(self, v: Decimal) -> float:
        return decimal_to_float(v)

    model_config = ConfigDict(from_attributes=True)
