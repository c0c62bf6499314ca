"""
Standalone document upload.

- POST  /upload  — Store a file and return its URL
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from apex_backoffice.api.v1.endpoints.clients import read_upload
from apex_backoffice.core.storage import DocumentStorage, get_document_storage
from apex_backoffice.schemas.common import ErrorResponse, FileUploadResponse

router = APIRouter()


@router.post(
    "/upload",
    response_model=FileUploadResponse,
    summary="Upload a document",
    description="Stores the file in blob storage and returns its URL for use on other records.",
    responses={
        400: {"model": ErrorResponse, "description": "No file uploaded"},
        500: {"model": ErrorResponse, "description": "Upload failed"},
    },
)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    storage: DocumentStorage = Depends(get_document_storage),
) -> FileUploadResponse:
    body = await read_upload(file)
    url = await storage.upload(file.filename, body, file.content_type)
    return FileUploadResponse(file_url=url)
