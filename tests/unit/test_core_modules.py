"""Unit tests for configuration, logging, exceptions and security helpers."""

import json
import logging

import jwt
import pytest
from fastapi import HTTPException

from app.core.config import ConfigValidator, Settings, get_config_summary, settings
from app.core.logging import (
    CorrelationIdFilter,
    JsonFormatter,
    correlation_id_var,
    log_event,
    setup_logging,
)
from app.core.security import ClerkAuthenticator, user_type_from_claims
from app.exceptions.ai import (
    AIConfigurationError,
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    AIServiceUnavailableError,
    AITimeoutError,
    map_ai_error,
)
from app.exceptions.base import NotFoundError, ValidationError
from app.exceptions.files import (
    ClientNotFoundError,
    FileValidationError,
    StorageConfigurationError,
)


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        config = Settings(_env_file=None)
        assert config.max_upload_size == 10 * 1024 * 1024
        assert "application/pdf" in config.allowed_upload_types_list
        assert "application/zip" not in config.allowed_upload_types_list
        assert config.client_match_threshold == 0.6

    def test_environment_aliases(self):
        assert Settings(_env_file=None, environment="prod").is_production
        assert Settings(_env_file=None, environment="dev").is_development

    def test_storage_type(self):
        config = Settings(
            _env_file=None,
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            s3_bucket_name="case-files",
        )
        assert config.has_file_storage is True
        assert config.storage_type == "aws_s3"

    def test_r2_storage_type(self):
        config = Settings(
            _env_file=None,
            cloudflare_access_key_id="r2",
            cloudflare_secret_access_key="secret",
            cloudflare_bucket_name="case-files",
        )
        assert config.storage_type == "cloudflare_r2"

    def test_upload_size_limit(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, max_upload_size=200 * 1024 * 1024)

    def test_match_threshold_bounds(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, client_match_threshold=1.5)

    def test_allowed_origins_list(self):
        config = Settings(_env_file=None, allowed_origins="https://a.example, https://b.example")
        assert config.allowed_origins_list == ["https://a.example", "https://b.example"]

    def test_config_summary(self):
        summary = get_config_summary()
        assert summary["app_name"] == settings.app_name
        assert "storage_type" in summary["features"]

    def test_required_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "clerk_secret_key", None)
        with pytest.raises(ValueError, match="CLERK_SECRET_KEY"):
            ConfigValidator.validate_required_settings()


class TestLogging:
    """Test cases for structured logging."""

    def test_log_event_fields(self, caplog):
        logger = logging.getLogger("app.domains.files.service")
        token = correlation_id_var.set("req-123")
        try:
            with caplog.at_level(logging.INFO, logger="app.domains.files.service"):
                log_event(logger, "blob_upload", "failed", file_name="motion.pdf", filename="x")
        finally:
            correlation_id_var.reset(token)

        record = caplog.records[-1]
        assert record.stage == "blob_upload"
        assert record.outcome == "failed"
        assert record.correlation_id == "req-123"
        assert record.file_name == "motion.pdf"
        assert record.getMessage() == "blob_upload failed"
        # reserved LogRecord attributes are never overwritten
        assert record.filename != "x"

    def test_log_event_level(self, caplog):
        logger = logging.getLogger("app.domains.files.bridge")
        with caplog.at_level(logging.INFO, logger="app.domains.files.bridge"):
            log_event(logger, "context_bridge", "store_failed", level=logging.WARNING)
        assert caplog.records[-1].levelno == logging.WARNING

    def test_json_formatter(self):
        record = logging.makeLogRecord(
            {"name": "app", "levelname": "INFO", "msg": "staging ok", "stage": "staging"}
        )
        CorrelationIdFilter().filter(record)
        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "staging ok"
        assert payload["stage"] == "staging"
        assert payload["correlation_id"] is None

    def test_setup_logging_is_idempotent(self):
        root = logging.getLogger()
        level = root.level
        try:
            setup_logging(level="DEBUG", log_format="simple")
            setup_logging(level="INFO", log_format="json")
            tagged = [h for h in root.handlers if getattr(h, "_case_assistant", False)]
            assert len(tagged) == 1
            assert isinstance(tagged[0].formatter, JsonFormatter)
        finally:
            for handler in [h for h in root.handlers if getattr(h, "_case_assistant", False)]:
                root.removeHandler(handler)
            root.setLevel(level)


class TestExceptions:
    """Test cases for application exceptions."""

    def test_file_validation_error(self):
        error = FileValidationError("too big", kind="size", details={"size": 11})
        assert error.status_code == 400
        assert error.detail == {
            "message": "too big",
            "error_code": "FILE_VALIDATION_ERROR",
            "details": {"constraint": "size", "size": 11},
        }
        assert str(error) == "too big"

    def test_storage_configuration_error(self):
        error = StorageConfigurationError()
        assert error.status_code == 500
        assert error.error_code == "STORAGE_CONFIGURATION_ERROR"

    def test_not_found_errors(self):
        assert NotFoundError().status_code == 404
        error = ClientNotFoundError()
        assert error.status_code == 404
        assert error.detail["error_code"] == "CLIENT_NOT_FOUND"

    def test_validation_error_is_400(self):
        assert ValidationError().status_code == 400

    def test_ai_error_codes(self):
        assert AIServiceError("boom").status_code == 500
        assert AIServiceError("boom").error_code == "AI_SERVICE_ERROR"
        assert AIConfigurationError().status_code == 503
        assert AITimeoutError().status_code == 504

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("429 Resource has been exhausted", AIRateLimitError),
            ("Quota exceeded for requests", AIQuotaExceededError),
            ("503 Service Unavailable", AIServiceUnavailableError),
            ("Deadline exceeded", AITimeoutError),
            ("something else", AIServiceError),
        ],
    )
    def test_map_ai_error(self, message, expected):
        assert type(map_ai_error(message)) is expected


class TestSecurity:
    """Test cases for token helpers."""

    def test_user_type_from_claims(self):
        assert user_type_from_claims({"user_type": "attorney"}) == "attorney"
        assert user_type_from_claims({"public_metadata": {"user_type": "admin"}}) == "admin"
        assert user_type_from_claims({}) == settings.default_user_type

    @pytest.mark.asyncio
    async def test_verify_token_without_signature(self):
        token = jwt.encode({"sub": "user_1", "user_type": "attorney"}, "k" * 32, algorithm="HS256")
        payload = await ClerkAuthenticator().verify_token(token)
        assert payload["sub"] == "user_1"

    @pytest.mark.asyncio
    async def test_verify_garbage_token(self):
        with pytest.raises(HTTPException) as exc_info:
            await ClerkAuthenticator().verify_token("not-a-jwt")
        assert exc_info.value.status_code == 401
