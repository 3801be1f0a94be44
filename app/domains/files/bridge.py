"""AI context bridge.

Works out the real file state for a conversation and phrases it as the
status message the assistant must repeat. Durable state is consulted before
the ephemeral chat cache so a chat whose staged files were just promoted
(and cleared) is still reported as having files.
"""

import logging
from collections.abc import Sequence
from typing import Any
from uuid import UUID

from app.core.logging import log_event
from app.domains.files.context_store import FileContextStore
from app.domains.files.service import (
    EMPTY_BATCH_MESSAGE,
    NO_FILES_ATTACHED_MESSAGE,
    NO_VALID_FILES_MESSAGE,
    STORAGE_COMPLETED_MESSAGE,
    FileStorageService,
    is_storable,
)
from app.schemas.files import (
    ContextSource,
    FileContextResult,
    FilePayload,
    FileReference,
    StoredFileResponse,
)
from models.stored_file import UNASSIGNED_CLIENT, FileStatus

logger = logging.getLogger(__name__)

NO_TEMP_FILES_MESSAGE = "No temp files found for this chat"

_DOCUMENT_MARKERS = ("word", "document", "sheet", "excel", "msword", "csv", "presentation")


def file_category(content_type: str | None) -> str:
    """Human category for a MIME type: PDF, image, document, text or file."""
    content_type = (content_type or "").lower()
    if "pdf" in content_type:
        return "PDF"
    if content_type.startswith("image/"):
        return "image"
    if any(marker in content_type for marker in _DOCUMENT_MARKERS):
        return "document"
    if content_type.startswith("text/"):
        return "text"
    return "file"


def format_file_list(files: Sequence[FileReference]) -> str:
    return "\n".join(
        f"• {f.file_name or 'unnamed file'} ({file_category(f.file_type)})" for f in files
    )


def _client_suffix(client_name: str | None) -> str:
    if client_name and client_name != UNASSIGNED_CLIENT:
        return f' for client "{client_name}"'
    return ""


def _reference(stored: StoredFileResponse) -> FileReference:
    return FileReference(
        file_name=stored.file_name,
        file_type=stored.file_type,
        file_url=stored.file_url,
        client_name=stored.client_name,
    )


class FileContextBridge:
    """Produce the ground-truth file status for a chat turn."""

    def __init__(self, storage: FileStorageService, context_store: FileContextStore):
        self.storage = storage
        self.context_store = context_store

    async def describe(
        self,
        chat_id: UUID | str | None = None,
        client_name: str | None = None,
        existing_files: Sequence[Any] | None = None,
        files: Sequence[Any] | None = None,
        persist: bool = True,
        uploaded_by: UUID | None = None,
    ) -> FileContextResult:
        """Report what files the conversation really has.

        Decision order, first hit wins:

        1. A known client with no explicit context, no files and nothing staged
           for the chat: recently stored files for that client.
        2. Caller-supplied ``existing_files``.
        3. Staged files (``files``, else the chat's cached staged files):
           promoted when ``persist`` is true, reported as pending otherwise.
        4. Nothing: a negative result the assistant must not contradict.
        """
        chat_key = str(chat_id) if chat_id else None
        existing = [
            f if isinstance(f, FileReference) else FileReference.model_validate(f)
            for f in (existing_files or [])
        ]
        cached = await self.context_store.get(chat_key) if chat_key else None
        client_name = (client_name or "").strip() or (cached.client_name if cached else None)

        if client_name and not existing and files is None and cached is None:
            # Promotion files under the registry name the hint resolves to
            association = await self.storage.resolve_client(client_name)
            recent = await self.storage.recent_files_for_client(
                client_name, aliases=[association.client_name]
            )
            if recent:
                if association.matched:
                    client_name = association.client_name
                references = [_reference(StoredFileResponse.model_validate(r)) for r in recent]
                return self._already_stored(
                    references, client_name, ContextSource.DATABASE, chat_key
                )

        if existing:
            return self._already_stored(
                existing, client_name, ContextSource.EXISTING_CONTEXT, chat_key
            )

        staged = list(files) if files is not None else (list(cached.files) if cached else None)
        if staged:
            if not persist:
                return self._pending(staged, client_name, chat_key)
            return await self._promote(staged, client_name, chat_key, uploaded_by)

        if files is not None:
            # explicit empty batch
            message = EMPTY_BATCH_MESSAGE
        else:
            message = NO_TEMP_FILES_MESSAGE if chat_key else NO_FILES_ATTACHED_MESSAGE
        log_event(logger, "context_bridge", "empty", chat_id=chat_key, client_name=client_name)
        return FileContextResult(success=False, message=message, client_name=client_name)

    def _already_stored(
        self,
        references: list[FileReference],
        client_name: str | None,
        source: ContextSource,
        chat_key: str | None,
    ) -> FileContextResult:
        message = (
            f"{len(references)} file(s) already stored{_client_suffix(client_name)}:\n"
            f"{format_file_list(references)}"
        )
        log_event(
            logger, "context_bridge", "already_stored",
            chat_id=chat_key, source=source.value, file_count=len(references),
        )
        return FileContextResult(
            success=True,
            has_existing_files=True,
            message=message,
            stored_files=references,
            client_name=client_name,
            source=source,
        )

    def _pending(
        self, staged: list[Any], client_name: str | None, chat_key: str | None
    ) -> FileContextResult:
        references = []
        rejected = []
        for item in staged:
            payload = item if isinstance(item, FilePayload) else FilePayload.model_validate(item)
            reference = FileReference(file_name=payload.filename or "", file_type=payload.content_type)
            # Only list what a promotion would actually accept
            (references if is_storable(payload) else rejected).append(reference)

        if not references:
            log_event(
                logger, "context_bridge", "nothing_storable",
                chat_id=chat_key, file_count=len(rejected),
            )
            return FileContextResult(
                success=False,
                message=NO_VALID_FILES_MESSAGE,
                client_name=client_name,
                source=ContextSource.STAGED,
            )

        message = (
            f"{len(references)} file(s) attached and ready to store{_client_suffix(client_name)}:\n"
            f"{format_file_list(references)}"
        )
        if rejected:
            message += (
                f"\n{len(rejected)} attached file(s) cannot be stored:\n"
                f"{format_file_list(rejected)}"
            )
        log_event(
            logger, "context_bridge", "pending", chat_id=chat_key, file_count=len(references)
        )
        return FileContextResult(
            success=True,
            has_existing_files=False,
            message=message,
            stored_files=references,
            client_name=client_name,
            source=ContextSource.STAGED,
        )

    async def _promote(
        self,
        staged: list[Any],
        client_name: str | None,
        chat_key: str | None,
        uploaded_by: UUID | None,
    ) -> FileContextResult:
        result = await self.storage.store_files(
            staged, client_name=client_name, uploaded_by=uploaded_by
        )
        if not result.success:
            log_event(
                logger, "context_bridge", "store_failed", level=logging.WARNING,
                chat_id=chat_key, reason=result.message,
            )
            return FileContextResult(
                success=False,
                message=result.message,
                client_name=result.client_name or client_name,
                source=ContextSource.STAGED,
            )

        if chat_key:
            await self.context_store.clear(chat_key)

        references = [_reference(f) for f in result.stored_files]
        if result.status == FileStatus.ASSIGNED:
            where = f' for client "{result.client_name}"'
        elif result.client_name:
            where = (
                f' under "{result.client_name}" (no registered client matched; '
                "queued for assignment)"
            )
        else:
            where = " without a client (queued for assignment)"
        message = (
            f"{STORAGE_COMPLETED_MESSAGE} {len(references)} file(s) now stored{where}:\n"
            f"{format_file_list(references)}"
        )
        log_event(
            logger, "context_bridge", "stored",
            chat_id=chat_key, file_count=len(references), status=result.status.value,
        )
        return FileContextResult(
            success=True,
            has_existing_files=True,
            message=message,
            stored_files=references,
            client_name=result.client_name,
            source=ContextSource.STAGED,
        )
