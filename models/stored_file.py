"""
Stored file model for durably persisted uploads.
"""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Integer, String

from .base import UUID, BaseModel


class FileStatus(str, enum.Enum):
    """Whether a stored file is linked to a registered client."""

    ASSIGNED = "assigned"
    TEMP_QUEUE = "temp_queue"


UNASSIGNED_CLIENT = "Unassigned"


class StoredFile(BaseModel):
    """
    Metadata row for a file written to the blob store.

    ``id`` reuses the staging id when it was a canonical UUID. Rows are
    insert-only; ``client_name`` holds the canonical registry name when
    ``status`` is ``assigned``, otherwise the raw hint or ``"Unassigned"``.
    """

    __tablename__ = "files"

    client_name = Column(String(255), nullable=False, default=UNASSIGNED_CLIENT, index=True)
    status = Column(
        Enum(FileStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=FileStatus.TEMP_QUEUE,
    )
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(150), nullable=True)
    file_size = Column(Integer, nullable=False)
    file_url = Column(String(1000), nullable=False)
    storage_path = Column(String(500), nullable=False)
    uploaded_by = Column(UUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
