# ruff: noqa: D107
"""File staging and storage exceptions."""

from typing import Any

from .base import BaseAppException, NotFoundError, ValidationError


class FileValidationError(ValidationError):
    """Raised when an upload violates the size or content-type constraints.

    ``kind`` is ``"size"`` or ``"type"`` and is echoed as ``details.constraint``.
    """

    def __init__(
        self,
        message: str,
        kind: str,
        details: dict[str, Any] | None = None,
    ):
        self.kind = kind
        details = {"constraint": kind, **(details or {})}
        super().__init__(message=message, details=details)
        self.error_code = "FILE_VALIDATION_ERROR"
        self.detail["error_code"] = self.error_code


class StorageConfigurationError(BaseAppException):
    """Raised when blob storage credentials are missing."""

    def __init__(
        self,
        message: str = "File storage is not configured",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code="STORAGE_CONFIGURATION_ERROR",
            details=details,
        )


class BlobStoreError(Exception):
    """Raised by blob store implementations when an object write fails."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class ClientNotFoundError(NotFoundError):
    """Exception raised when a client record is not found."""

    def __init__(
        self,
        message: str = "Client not found",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, details=details)
        self.error_code = "CLIENT_NOT_FOUND"
        self.detail["error_code"] = self.error_code


class ClientAlreadyExistsError(BaseAppException):
    """Exception raised when a client with the same name already exists."""

    def __init__(
        self,
        message: str = "Client already exists",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CLIENT_ALREADY_EXISTS",
            details=details,
        )
