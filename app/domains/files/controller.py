"""File API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile

from app.core.dependencies import get_current_user, get_file_storage_service, validate_token
from app.domains.files.service import FileStorageService
from app.domains.files.staging import stage_upload
from app.schemas.base import ResponseSchema
from app.schemas.files import StagedFileResponse, StoredFileResponse, StoreFilesRequest
from models.stored_file import FileStatus
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/files",
    tags=["files"],
    dependencies=[Depends(validate_token)],
)


@router.post("/upload", response_model=ResponseSchema)
async def upload_file(
    file: UploadFile = File(..., description="File to stage"),
    filename: str | None = Form(None, description="Display filename, overrides the part name"),
    current_user: User = Depends(get_current_user),
):
    """Validate an upload and return its staging record.

    Nothing is stored: the returned record (including the base64 payload) is
    what the client later attaches to a chat or sends to ``/store``.
    """
    content = await file.read()
    staged = stage_upload(
        content=content,
        content_type=file.content_type,
        filename=filename or file.filename,
    )
    logger.info(f"User {current_user.id} staged {staged.filename} ({staged.size} bytes)")

    return ResponseSchema(
        status="success",
        message="File validated and staged",
        data=StagedFileResponse.model_validate(staged.model_dump()).model_dump(),
    )


@router.post("/store", response_model=ResponseSchema)
async def store_files(
    store_request: StoreFilesRequest = Body(...),
    current_user: User = Depends(get_current_user),
    service: FileStorageService = Depends(get_file_storage_service),
):
    """Promote staged files to durable storage."""
    result = await service.store_files(
        store_request.files,
        client_name=store_request.client_name,
        uploaded_by=current_user.id,
    )

    return ResponseSchema(
        status="success" if result.success else "error",
        message=result.message,
        data=result.model_dump(mode="json"),
    )


@router.get("", response_model=ResponseSchema)
async def list_files(
    client_name: str | None = Query(None, description="Filter by client name (case-insensitive)"),
    status: FileStatus | None = Query(None, description="Filter by assignment status"),
    limit: int = Query(50, ge=1, le=200),
    _current_user: User = Depends(get_current_user),
    service: FileStorageService = Depends(get_file_storage_service),
):
    """List stored files, newest first."""
    files = await service.list_files(client_name=client_name, status=status, limit=limit)

    return ResponseSchema(
        status="success",
        message="Files retrieved successfully",
        data={
            "files": [StoredFileResponse.model_validate(f).model_dump(mode="json") for f in files],
            "total": len(files),
        },
    )
