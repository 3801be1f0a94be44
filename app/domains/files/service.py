"""Durable file store writer.

Promotes staged-file payloads to the blob store and records a metadata row
for each. Batches have partial-failure semantics: an invalid payload, a
failed upload or a failed insert drops that one file and the loop moves on.
"""

import base64
import binascii
import logging
import re
import uuid
from collections.abc import Sequence
from datetime import timedelta
from pathlib import PurePosixPath
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.config import settings
from app.core.logging import log_event
from app.domains.client.service import ClientService
from app.domains.files.resolver import ClientAssociationResolver
from app.domains.files.storage import BlobStore
from app.exceptions.files import StorageConfigurationError
from app.schemas.files import (
    ClientAssociationResult,
    FilePayload,
    StoredFileResponse,
    StoreFilesResult,
)
from models.base import utcnow
from models.stored_file import FileStatus, StoredFile

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

NO_FILES_ATTACHED_MESSAGE = (
    "No files to store. Please ensure you have uploaded a file and it is attached to your message."
)
EMPTY_BATCH_MESSAGE = "No files to store"
NO_VALID_FILES_MESSAGE = "No valid files to store. Please upload a real file."
STORAGE_COMPLETED_MESSAGE = "File storage completed."


def durable_file_id(temp_id: str | None) -> UUID:
    """Reuse a canonical UUID staging id, otherwise mint a fresh one."""
    if temp_id and UUID_PATTERN.match(temp_id):
        return uuid.UUID(temp_id)
    return uuid.uuid4()


def is_storable(payload: FilePayload) -> bool:
    """Whether a payload is a real upload worth storing.

    Rejects missing names or buffers, non-positive sizes and anything named
    like a test fixture (``test*``).
    """
    name = payload.filename
    return bool(
        name
        and payload.file_buffer
        and name != "test1.txt"
        and not name.startswith("test")
        and payload.size is not None
        and payload.size > 0
    )


def _coerce_payload(item: Any) -> FilePayload | None:
    if isinstance(item, FilePayload):
        return item
    try:
        return FilePayload.model_validate(item)
    except PydanticValidationError:
        return None


class FileStorageService:
    """Service class for promoting staged files to durable storage."""

    def __init__(
        self,
        db: AsyncSession,
        blob_store: BlobStore | None,
        resolver: ClientAssociationResolver | None = None,
        upload_prefix: str | None = None,
    ):
        self.db = db
        self.blob_store = blob_store
        self.resolver = resolver or ClientAssociationResolver(
            ClientService(db).search_clients_precise
        )
        self.upload_prefix = (upload_prefix or settings.storage_upload_prefix).strip("/")

    async def store_files(
        self,
        files: Sequence[Any] | None,
        client_name: str | None = None,
        uploaded_by: UUID | None = None,
    ) -> StoreFilesResult:
        """Promote a batch of staged files.

        Args:
            files: StagedFile-shaped payloads (models or dicts). ``None`` means
                nothing was attached at all, ``[]`` an empty batch.
            client_name: Free-text client hint.
            uploaded_by: ID of the user performing the promotion.

        Returns:
            StoreFilesResult; ``success`` is true iff at least one file was stored.

        Raises:
            StorageConfigurationError: No blob store is configured.
        """
        if self.blob_store is None:
            log_event(logger, "store_files", "misconfigured", level=logging.ERROR)
            raise StorageConfigurationError(
                "File storage is not configured: set S3 or R2 credentials and bucket name"
            )

        if files is None:
            return StoreFilesResult(success=False, message=NO_FILES_ATTACHED_MESSAGE)
        if len(files) == 0:
            return StoreFilesResult(success=False, message=EMPTY_BATCH_MESSAGE)

        valid_files: list[FilePayload] = []
        for item in files:
            payload = _coerce_payload(item)
            if payload is None or not is_storable(payload):
                log_event(
                    logger, "filter", "skipped",
                    file_name=getattr(payload, "filename", None) or "unnamed",
                )
                continue
            valid_files.append(payload)

        if not valid_files:
            return StoreFilesResult(success=False, message=NO_VALID_FILES_MESSAGE)

        log_event(
            logger, "store_files", "started",
            valid_count=len(valid_files), total_count=len(files), client_hint=client_name,
        )

        association = await self.resolve_client(client_name)
        status = FileStatus.ASSIGNED if association.matched else FileStatus.TEMP_QUEUE

        stored: list[StoredFileResponse] = []
        for payload in valid_files:
            record = await self._store_one(payload, association, status, uploaded_by)
            if record is not None:
                stored.append(StoredFileResponse.model_validate(record))

        if not stored:
            log_event(
                logger, "store_files", "failed", level=logging.ERROR, total_count=len(valid_files)
            )
            return StoreFilesResult(
                success=False,
                message=f"Failed to store any of the {len(valid_files)} file(s)",
            )

        log_event(
            logger, "store_files", "completed",
            stored_count=len(stored), total_count=len(valid_files),
            client_name=association.client_name, status=status.value,
        )
        return StoreFilesResult(
            success=True,
            message=STORAGE_COMPLETED_MESSAGE,
            stored_files=stored,
            client_name=association.client_name if client_name and client_name.strip() else None,
            status=status,
        )

    async def list_files(
        self,
        client_name: str | None = None,
        status: FileStatus | None = None,
        limit: int = 50,
    ) -> list[StoredFile]:
        """List stored files, newest first."""
        stmt = select(StoredFile)
        if client_name:
            stmt = stmt.where(func.lower(StoredFile.client_name) == client_name.strip().lower())
        if status:
            stmt = stmt.where(StoredFile.status == status)
        stmt = stmt.order_by(desc(StoredFile.created_at)).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def recent_files_for_client(
        self,
        client_name: str,
        window_minutes: int | None = None,
        limit: int | None = None,
        aliases: Sequence[str] = (),
    ) -> list[StoredFile]:
        """Files stored for a client within the recent window, newest first.

        ``aliases`` are other names the same client may be filed under, such
        as the canonical registry name a hint resolved to.
        """
        window_minutes = window_minutes or settings.recent_files_window_minutes
        limit = limit or settings.recent_files_limit
        since = utcnow() - timedelta(minutes=window_minutes)
        names = {n.strip().lower() for n in (client_name, *aliases) if n and n.strip()}
        stmt = (
            select(StoredFile)
            .where(
                func.lower(StoredFile.client_name).in_(names),
                StoredFile.created_at >= since,
            )
            .order_by(desc(StoredFile.created_at))
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def resolve_client(self, client_name: str | None) -> ClientAssociationResult:
        """Resolve a client hint the same way a batch promotion does."""
        association = await self.resolver.resolve(client_name)
        if association.degraded:
            # A failed lookup can leave the session in an aborted transaction
            await self.db.rollback()
        return association

    # Private helper methods

    async def _store_one(
        self,
        payload: FilePayload,
        association: ClientAssociationResult,
        status: FileStatus,
        uploaded_by: UUID | None,
    ) -> StoredFile | None:
        filename = payload.filename

        try:
            data = base64.b64decode(payload.file_buffer, validate=True)
        except (binascii.Error, ValueError) as e:
            log_event(
                logger, "decode", "failed", level=logging.WARNING, file_name=filename, error=str(e)
            )
            return None

        if len(data) != payload.size:
            log_event(
                logger, "decode", "size_mismatch", level=logging.WARNING,
                file_name=filename, declared_size=payload.size, decoded_size=len(data),
            )

        file_id = durable_file_id(payload.temp_id)
        key = f"{self.upload_prefix}/{PurePosixPath(filename).name}"

        try:
            await self.blob_store.upload(key, data, payload.content_type)
            file_url = self.blob_store.public_url(key)
        except Exception as e:
            log_event(
                logger, "blob_upload", "failed", level=logging.ERROR,
                file_name=filename, storage_path=key, error=str(e),
            )
            return None

        record = StoredFile(
            id=file_id,
            client_name=association.client_name,
            status=status,
            file_name=filename,
            file_type=payload.content_type,
            file_size=len(data),
            file_url=file_url,
            storage_path=key,
            uploaded_by=uploaded_by,
        )
        try:
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            log_event(
                logger, "metadata_write", "failed", level=logging.ERROR,
                file_name=filename, file_id=str(file_id), error=str(e),
            )
            return None

        log_event(
            logger, "store_file", "ok",
            file_name=filename, file_id=str(record.id), status=status.value,
        )
        return record
