"""
Pydantic schemas for the ledger endpoints.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from apex_backoffice.models.transaction import MAX_MONEY, TransactionType
from apex_backoffice.schemas.common import decimal_to_float


class TransactionProcessRequest(BaseModel):
    """
    Schema for ``POST /transactions/process``.

    ``transaction_type`` is case-sensitive.  ``amount`` must be a finite
    positive number that fits a DECIMAL(20,2) column; it is rounded to
    cents before being recorded.
    """

    investor_id: UUID = Field(..., description="UUID of the investor")
    transaction_type: TransactionType = Field(
        ...,
        description="Either ``Deposit`` or ``Withdrawal``",
        examples=["Deposit"],
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        le=MAX_MONEY,
        allow_inf_nan=False,
        description="Amount to deposit or withdraw",
        examples=[100.00],
    )


class TransactionProcessResponse(BaseModel):
    """Balances after the transaction was recorded."""

    message: str = Field(..., examples=["Deposit successful"])
    account_balance: Decimal
    current_balance: Decimal

    @field_serializer("account_balance", "current_balance")
    def serialize_decimal_as_number(self, v: Decimal) -> float:
        return decimal_to_float(v)


class TransactionResponse(BaseModel):
    """One entry of an investor's transaction history."""

    transaction_date: datetime
    transaction_type: TransactionType
    amount: Decimal

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> float:
        return decimal_to_float(v)

    model_config = ConfigDict(from_attributes=True)
