"""File staging, storage and AI-context schemas."""

from __future__ import annotations

from enum import Enum
from uuid import UUID

from pydantic import AliasChoices, ConfigDict, Field

from models.stored_file import FileStatus

from .base import BaseModelSchema, BaseSchema, CamelSchema


class FilePayload(CamelSchema):
    """A staged-file-shaped payload as handed to the storage writer.

    Every field is optional: payloads come from the web client or the
    language model and are filtered by the writer, not rejected up front.
    """

    temp_id: str | None = None
    filename: str | None = None
    content_type: str | None = Field(
        None, validation_alias=AliasChoices("content_type", "contentType", "type")
    )
    size: int | None = None
    file_buffer: str | None = Field(
        None, validation_alias=AliasChoices("file_buffer", "fileBuffer", "buffer")
    )


class StagedFile(FilePayload):
    """A validated upload held in memory until promoted to durable storage."""

    temp_id: str
    filename: str
    content_type: str = Field(
        ..., validation_alias=AliasChoices("content_type", "contentType", "type")
    )
    size: int = Field(..., ge=0)
    file_buffer: str = Field(
        ..., validation_alias=AliasChoices("file_buffer", "fileBuffer", "buffer")
    )


class StagedFileResponse(BaseSchema):
    """Response for a staged upload (no payload echo beyond what the client needs)."""

    temp_id: str
    filename: str
    content_type: str
    size: int
    file_buffer: str


class StoredFileResponse(BaseModelSchema):
    """Schema for a durably stored file."""

    client_name: str
    status: FileStatus
    file_name: str
    file_type: str | None = None
    file_size: int
    file_url: str
    storage_path: str
    uploaded_by: UUID | None = None

    model_config = ConfigDict(from_attributes=True)


class StoreFilesRequest(CamelSchema):
    """Schema for an explicit storage request."""

    files: list[FilePayload] | None = None
    client_name: str | None = None


class StoreFilesResult(BaseSchema):
    """Outcome of promoting a batch of staged files."""

    success: bool
    message: str
    stored_files: list[StoredFileResponse] = Field(default_factory=list)
    client_name: str | None = None
    status: FileStatus | None = None


class FileReference(CamelSchema):
    """Lightweight description of a file already known to the conversation."""

    file_name: str = Field(
        "", validation_alias=AliasChoices("file_name", "fileName", "filename", "name")
    )
    file_type: str | None = Field(
        None, validation_alias=AliasChoices("file_type", "fileType", "content_type", "type")
    )
    file_url: str | None = Field(None, validation_alias=AliasChoices("file_url", "fileUrl", "url"))
    client_name: str | None = Field(None, validation_alias=AliasChoices("client_name", "clientName"))


class ContextSource(str, Enum):
    """Where the bridge found the files it reports on."""

    DATABASE = "database"
    EXISTING_CONTEXT = "existing_context"
    STAGED = "staged"
    NONE = "none"


class FileContextResult(BaseSchema):
    """Ground-truth file status handed to the assistant."""

    success: bool
    has_existing_files: bool = False
    message: str
    stored_files: list[FileReference] = Field(default_factory=list)
    client_name: str | None = None
    source: ContextSource = ContextSource.NONE


class FileContextSyncRequest(CamelSchema):
    """Staged files the web client has attached to a chat."""

    chat_id: UUID
    files: list[StagedFile] = Field(default_factory=list)
    client_name: str | None = None


class FileContextSyncResponse(BaseSchema):
    """Result of syncing staged files into a chat."""

    chat_id: UUID
    file_count: int
    expires_in_seconds: int


class ClientAssociationResult(BaseSchema):
    """Outcome of matching a free-text client hint against the registry."""

    client_name: str
    matched: bool = False
    degraded: bool = False
