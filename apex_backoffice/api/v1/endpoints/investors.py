"""
Investor API endpoints.

- GET     /investors       — List investors, most recently joined first
- GET     /investors/{id}  — Fetch one investor with its balances
- POST    /investors       — Register a new investor
- PATCH   /investors/{id}  — Partially update investor details
- DELETE  /investors/{id}  — Delete an investor and its transaction log
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apex_backoffice.api.v1.endpoints.transactions import _get_ledger_service
from apex_backoffice.db.session import get_db
from apex_backoffice.models.investor import Investor
from apex_backoffice.repositories.investor_repo import InvestorRepository
from apex_backoffice.schemas.common import (
    ErrorResponse,
    MessageResponse,
    ValidationErrorResponse,
)
from apex_backoffice.schemas.investor import InvestorCreate, InvestorResponse, InvestorUpdate
from apex_backoffice.services.investor_service import InvestorService
from apex_backoffice.services.ledger_service import LedgerService

router = APIRouter()


# ── Dependency injection ──


def _get_investor_service(db: AsyncSession = Depends(get_db)) -> InvestorService:
    """Build an InvestorService wired to the current request's DB session."""
    return InvestorService(InvestorRepository(Investor, db))


# ── Endpoints ──


@router.get(
    "",
    response_model=List[InvestorResponse],
    summary="List investors",
    description=(
        "Returns a paginated list of investors ordered by join date, newest "
        "first.  An empty directory yields an empty list."
    ),
)
async def list_investors(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: InvestorService = Depends(_get_investor_service),
) -> List[InvestorResponse]:
    return await service.list_investors(skip=skip, limit=limit)


@router.get(
    "/{investor_id}",
    response_model=InvestorResponse,
    summary="Get an investor by ID",
    responses={404: {"model": ErrorResponse, "description": "Investor not found"}},
)
async def get_investor(
    investor_id: UUID,
    service: InvestorService = Depends(_get_investor_service),
) -> InvestorResponse:
    return await service.get_investor(investor_id)


@router.post(
    "",
    response_model=InvestorResponse,
    status_code=201,
    summary="Register a new investor",
    description=(
        "Creates an Active investor with zero balances.  ``date_joined`` "
        "defaults to today."
    ),
    responses={400: {"model": ValidationErrorResponse, "description": "Validation error"}},
)
async def create_investor(
    investor: InvestorCreate,
    service: InvestorService = Depends(_get_investor_service),
) -> InvestorResponse:
    return await service.create_investor(investor)


@router.patch(
    "/{investor_id}",
    response_model=InvestorResponse,
    summary="Update investor details",
    description=(
        "Only fields present in the body are changed.  Balances cannot be "
        "set here; changing ``roi`` recomputes ``current_balance``."
    ),
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation error"},
        404: {"model": ErrorResponse, "description": "Investor not found"},
    },
)
async def update_investor(
    investor_id: UUID,
    patch: InvestorUpdate,
    service: InvestorService = Depends(_get_investor_service),
) -> InvestorResponse:
    return await service.update_investor(investor_id, patch)


@router.delete(
    "/{investor_id}",
    response_model=MessageResponse,
    summary="Delete an investor",
    description="Removes the investor together with every transaction in its log.",
    responses={404: {"model": ErrorResponse, "description": "Investor not found"}},
)
async def delete_investor(
    investor_id: UUID,
    service: LedgerService = Depends(_get_ledger_service),
) -> MessageResponse:
    await service.delete_investor(investor_id)
    return MessageResponse(message="Investor deleted successfully")
