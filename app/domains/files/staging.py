"""Temporary upload staging.

Validates a raw upload and hands back a StagedFile carrying the payload as
base64. Nothing is written anywhere: the staged file lives only in the
caller's hands (or the chat file-context store) until it is promoted.
"""

import base64
import logging
import time
import uuid

from app.core.config import settings
from app.core.logging import log_event
from app.exceptions.files import FileValidationError
from app.schemas.files import StagedFile

logger = logging.getLogger(__name__)

_MISSING_FILENAMES = {"", "null", "undefined"}


def _fallback_filename(content_type: str) -> str:
    subtype = content_type.split("/", 1)[1] if "/" in content_type else ""
    return f"temp_{int(time.time() * 1000)}.{subtype or 'bin'}"


def stage_upload(
    content: bytes,
    content_type: str | None,
    filename: str | None = None,
    max_size: int | None = None,
    allowed_types: list[str] | None = None,
) -> StagedFile:
    """Validate an upload and build its staging record.

    Args:
        content: Raw file bytes.
        content_type: MIME type declared by the client.
        filename: Client-supplied filename; missing, ``"null"`` and
            ``"undefined"`` are replaced by a generated ``temp_<ms>.<subtype>``.
        max_size: Size limit in bytes, inclusive. Defaults to settings.
        allowed_types: Content-type allow-list. Defaults to settings.

    Returns:
        StagedFile with a fresh UUID4 ``temp_id``.

    Raises:
        FileValidationError: ``kind="type"`` for a disallowed content type,
            ``kind="size"`` when the payload exceeds ``max_size``.
    """
    max_size = settings.max_upload_size if max_size is None else max_size
    allowed_types = allowed_types or settings.allowed_upload_types_list
    content_type = (content_type or "").split(";", 1)[0].strip().lower()
    size = len(content)

    if content_type not in allowed_types:
        log_event(
            logger, "staging", "rejected", level=logging.WARNING,
            constraint="type", content_type=content_type,
        )
        raise FileValidationError(
            "File type should be JPEG, PNG, PDF, DOC, DOCX, XLS, XLSX, or CSV",
            kind="type",
            details={"content_type": content_type, "allowed_types": allowed_types},
        )

    if size > max_size:
        log_event(
            logger, "staging", "rejected", level=logging.WARNING,
            constraint="size", size=size, max_size=max_size,
        )
        raise FileValidationError(
            f"File size should be at most {max_size // (1024 * 1024)}MB",
            kind="size",
            details={"size": size, "max_size": max_size},
        )

    name = (filename or "").strip()
    if name in _MISSING_FILENAMES:
        name = _fallback_filename(content_type)

    staged = StagedFile(
        temp_id=str(uuid.uuid4()),
        filename=name,
        content_type=content_type,
        size=size,
        file_buffer=base64.b64encode(content).decode("ascii"),
    )
    log_event(logger, "staging", "ok", temp_id=staged.temp_id, file_name=name, size=size)
    return staged
