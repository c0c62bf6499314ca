"""
Insurance client and renewal API endpoints.

- GET     /clients                                     — List clients
- POST    /clients                                     — Create a client
- GET     /clients/{client_id}                         — Fetch one client
- PUT     /clients/{client_id}                         — Merge-update a client
- DELETE  /clients/{client_id}                         — Delete a client and its renewals
- POST    /clients/{client_id}/upload                  — Attach a document to a client
- GET     /clients/{client_id}/renewals                — List a client's renewals
- POST    /renewals                                    — Record a renewal (multipart)
- DELETE  /clients/{client_id}/renewals/{renewal_id}   — Delete a renewal
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from apex_backoffice.core.exceptions import InvalidInputException
from apex_backoffice.core.storage import DocumentStorage, get_document_storage
from apex_backoffice.db.session import get_db
from apex_backoffice.models.client import Client, Renewal
from apex_backoffice.repositories.client_repo import ClientRepository, RenewalRepository
from apex_backoffice.schemas.client import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    RenewalResponse,
)
from apex_backoffice.schemas.common import ErrorResponse, MessageResponse
from apex_backoffice.services.client_service import ClientService

router = APIRouter()


# ── Dependency injection ──


def _get_client_service(
    db: AsyncSession = Depends(get_db),
    storage: DocumentStorage = Depends(get_document_storage),
) -> ClientService:
    """Build a ClientService wired to the request's DB session and the document store."""
    return ClientService(
        client_repo=ClientRepository(Client, db),
        renewal_repo=RenewalRepository(Renewal, db),
        storage=storage,
    )


async def read_upload(file: Optional[UploadFile]) -> bytes:
    """Return the uploaded bytes, rejecting a missing or unnamed file with 400."""
    if file is None or not file.filename:
        raise InvalidInputException("No file uploaded")
    return await file.read()


# ── Clients ──


@router.get(
    "/clients",
    response_model=List[ClientResponse],
    summary="List clients",
    description="Newest first.  Use ``skip`` and ``limit`` to paginate.",
)
async def list_clients(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: ClientService = Depends(_get_client_service),
) -> List[ClientResponse]:
    return await service.list_clients(skip=skip, limit=limit)


@router.post(
    "/clients",
    response_model=ClientResponse,
    status_code=201,
    summary="Create a client",
)
async def create_client(
    client: ClientCreate,
    service: ClientService = Depends(_get_client_service),
) -> ClientResponse:
    return await service.create_client(client)


@router.get(
    "/clients/{client_id}",
    response_model=ClientResponse,
    summary="Get a client by ID",
    responses={404: {"model": ErrorResponse, "description": "Client not found"}},
)
async def get_client(
    client_id: UUID,
    service: ClientService = Depends(_get_client_service),
) -> ClientResponse:
    return await service.get_client(client_id)


@router.put(
    "/clients/{client_id}",
    response_model=ClientResponse,
    summary="Update a client",
    description="Fields omitted from the body keep their stored values.",
    responses={404: {"model": ErrorResponse, "description": "Client not found"}},
)
async def update_client(
    client_id: UUID,
    patch: ClientUpdate,
    service: ClientService = Depends(_get_client_service),
) -> ClientResponse:
    return await service.update_client(client_id, patch)


@router.delete(
    "/clients/{client_id}",
    response_model=MessageResponse,
    summary="Delete a client",
    responses={404: {"model": ErrorResponse, "description": "Client not found"}},
)
async def delete_client(
    client_id: UUID,
    service: ClientService = Depends(_get_client_service),
) -> MessageResponse:
    await service.delete_client(client_id)
    return MessageResponse(message="Client deleted successfully")


@router.post(
    "/clients/{client_id}/upload",
    response_model=ClientResponse,
    summary="Attach a document to a client",
    responses={
        400: {"model": ErrorResponse, "description": "No file uploaded"},
        404: {"model": ErrorResponse, "description": "Client not found"},
        500: {"model": ErrorResponse, "description": "Upload failed"},
    },
)
async def upload_client_attachment(
    client_id: UUID,
    file: Optional[UploadFile] = File(None),
    service: ClientService = Depends(_get_client_service),
) -> ClientResponse:
    body = await read_upload(file)
    return await service.add_attachment(client_id, file.filename, body, file.content_type)


# ── Renewals ──


@router.get(
    "/clients/{client_id}/renewals",
    response_model=List[RenewalResponse],
    summary="List a client's renewals",
    description="Latest renewal date first; empty when the client has none.",
)
async def list_renewals(
    client_id: UUID,
    service: ClientService = Depends(_get_client_service),
) -> List[RenewalResponse]:
    return await service.list_renewals(client_id)


@router.post(
    "/renewals",
    response_model=RenewalResponse,
    status_code=201,
    summary="Record a policy renewal",
    description="Multipart form: the renewed policy document is uploaded, then the renewal saved.",
    responses={
        400: {"model": ErrorResponse, "description": "No file uploaded"},
        404: {"model": ErrorResponse, "description": "Client not found"},
        500: {"model": ErrorResponse, "description": "Upload failed"},
    },
)
async def create_renewal(
    client_id: UUID = Form(...),
    renewal_date: date = Form(...),
    next_renewal_date: Optional[date] = Form(None),
    file: Optional[UploadFile] = File(None),
    service: ClientService = Depends(_get_client_service),
) -> RenewalResponse:
    body = await read_upload(file)
    return await service.create_renewal(
        client_id,
        renewal_date,
        next_renewal_date,
        file.filename,
        body,
        file.content_type,
    )


@router.delete(
    "/clients/{client_id}/renewals/{renewal_id}",
    response_model=MessageResponse,
    summary="Delete a renewal",
    responses={404: {"model": ErrorResponse, "description": "Renewal not found for this client"}},
)
async def delete_renewal(
    client_id: UUID,
    renewal_id: UUID,
    service: ClientService = Depends(_get_client_service),
) -> MessageResponse:
    await service.delete_renewal(client_id, renewal_id)
    return MessageResponse(message="Renewal deleted successfully")
