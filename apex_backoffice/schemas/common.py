"""
Shared Pydantic schemas used across endpoints.

Error envelopes are declared so the OpenAPI document shows the error
contract, not only the happy path.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


def decimal_to_float(value: Optional[Decimal]) -> Optional[float]:
    """
    Serialize money as a JSON number.

    Pydantic v2 emits Decimal as a string by default, which breaks clients
    that do arithmetic on the response.
    """
    return float(value) if value is not None else None


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all non-validation error handlers."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(
        ...,
        description="Human-readable error description",
        examples=["Insufficient funds for withdrawal"],
    )


class ValidationErrorDetail(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(
        ...,
        description="Path to the invalid field",
        examples=["body -> amount"],
    )
    message: str = Field(
        ...,
        description="Explanation of the validation failure",
        examples=["Input should be greater than 0"],
    )


class ValidationErrorResponse(BaseModel):
    """Response body for 400 request-validation failures."""

    error: bool = Field(default=True, description="Always ``true`` for errors")
    message: str = Field(default="Validation failed", description="Summary message")
    details: List[ValidationErrorDetail] = Field(..., description="Per-field validation failures")


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. after a delete."""

    message: str = Field(..., examples=["Investor deleted successfully"])


class FileUploadResponse(BaseModel):
    """URL of a document stored in blob storage."""

    file_url: str = Field(
        ...,
        examples=["https://apex-docs.s3.us-east-1.amazonaws.com/uploads/1718000000000_policy.pdf"],
    )
