# ruff: noqa: D107
"""AI service exceptions."""

from typing import Any

from .base import BaseAppException


class AIServiceError(BaseAppException):
    """Base exception for AI service errors."""

    def __init__(
        self,
        message: str = "AI service error occurred",
        error_code: str = "AI_SERVICE_ERROR",
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message, status_code=status_code, error_code=error_code, details=details)


class AIServiceUnavailableError(AIServiceError):
    """Exception raised when AI service is unavailable."""

    def __init__(
        self,
        message: str = "AI service is temporarily unavailable",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_SERVICE_UNAVAILABLE", details, status_code=503)


class AIQuotaExceededError(AIServiceError):
    """Exception raised when AI service quota is exceeded."""

    def __init__(
        self,
        message: str = "AI service quota exceeded",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_QUOTA_EXCEEDED", details, status_code=429)


class AITimeoutError(AIServiceError):
    """Exception raised when AI service request times out."""

    def __init__(
        self,
        message: str = "AI service request timed out",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_TIMEOUT", details, status_code=504)


class AIConfigurationError(AIServiceError):
    """Exception raised when AI service is not properly configured."""

    def __init__(
        self,
        message: str = "AI service is not properly configured",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, "AI_CONFIGURATION_ERROR", details, status_code=503)


class AIRateLimitError(AIServiceError):
    """Exception raised when AI service rate limit is hit."""

    def __init__(
        self,
        message: str = "AI service rate limit exceeded",
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        if details is None:
            details = {}
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__(message, "AI_RATE_LIMITED", details, status_code=429)


# Map common error patterns to exceptions
AI_ERROR_MAPPING = {
    "quota_exceeded": AIQuotaExceededError,
    "service_unavailable": AIServiceUnavailableError,
    "timeout": AITimeoutError,
    "configuration_error": AIConfigurationError,
    "rate_limited": AIRateLimitError,
}


def map_ai_error(error_message: str) -> AIServiceError:
    """Map a raw provider error message to the matching exception."""
    lowered = error_message.lower()
    if "quota" in lowered:
        return AI_ERROR_MAPPING["quota_exceeded"](error_message)
    if "rate limit" in lowered or "429" in lowered or "resource_exhausted" in lowered:
        return AI_ERROR_MAPPING["rate_limited"](error_message)
    if "unavailable" in lowered or "503" in lowered:
        return AI_ERROR_MAPPING["service_unavailable"](error_message)
    if "timeout" in lowered or "deadline" in lowered:
        return AI_ERROR_MAPPING["timeout"](error_message)
    return AIServiceError(f"AI generation failed: {error_message}")
