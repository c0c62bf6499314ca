"""
Ledger API endpoints.

- POST  /transactions/process        — Record a deposit or withdrawal
- GET   /transactions/{investor_id}  — Transaction history, most recent first
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apex_backoffice.db.session import get_db
from apex_backoffice.models.investor import Investor
from apex_backoffice.models.transaction import Transaction
from apex_backoffice.repositories.investor_repo import InvestorRepository
from apex_backoffice.repositories.transaction_repo import TransactionRepository
from apex_backoffice.schemas.common import ErrorResponse, ValidationErrorResponse
from apex_backoffice.schemas.transaction import (
    TransactionProcessRequest,
    TransactionProcessResponse,
    TransactionResponse,
)
from apex_backoffice.services.ledger_service import LedgerService

router = APIRouter()


# ── Dependency injection ──


def _get_ledger_service(db: AsyncSession = Depends(get_db)) -> LedgerService:
    """
    Build a LedgerService wired to the current request's DB session.

    Both repositories share ``db`` so the transaction insert and the
    balance update commit together.
    """
    return LedgerService(
        investor_repo=InvestorRepository(Investor, db),
        transaction_repo=TransactionRepository(Transaction, db),
    )


# ── Endpoints ──


@router.post(
    "/process",
    response_model=TransactionProcessResponse,
    summary="Record a deposit or withdrawal",
    description=(
        "Appends a transaction to the investor's log and returns the updated "
        "balances.  A withdrawal larger than the account balance is rejected "
        "with 400 and nothing is written."
    ),
    responses={
        400: {
            "model": ValidationErrorResponse,
            "description": "Invalid input or insufficient funds",
        },
        404: {"model": ErrorResponse, "description": "Investor not found"},
        500: {"model": ErrorResponse, "description": "Storage failure; nothing was written"},
    },
)
async def process_transaction(
    transaction: TransactionProcessRequest,
    service: LedgerService = Depends(_get_ledger_service),
) -> TransactionProcessResponse:
    snapshot = await service.record_transaction(
        transaction.investor_id, transaction.transaction_type, transaction.amount
    )
    return TransactionProcessResponse(
        message=f"{transaction.transaction_type.value} successful",
        account_balance=snapshot.account_balance,
        current_balance=snapshot.current_balance,
    )


@router.get(
    "/{investor_id}",
    response_model=List[TransactionResponse],
    summary="Transaction history for an investor",
    description="Most recent first.  An investor with no transactions yields an empty list.",
)
async def list_transactions(
    investor_id: UUID,
    service: LedgerService = Depends(_get_ledger_service),
) -> List[TransactionResponse]:
    return await service.list_transactions(investor_id)
