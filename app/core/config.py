# python
# app/core/config.py
"""Configuration settings for the Case Assistant API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_UPLOAD_TYPES = (
    "image/jpeg,"
    "image/png,"
    "application/pdf,"
    "application/msword,"
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document,"
    "application/vnd.ms-excel,"
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet,"
    "text/csv"
)


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Case Assistant API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Authentication (Clerk) =====
    clerk_secret_key: str | None = Field(default=None, description="Clerk secret key")
    clerk_api_url: AnyHttpUrl = Field(default="https://api.clerk.com", description="Clerk API URL")
    default_user_type: str = Field(default="staff", description="User type when the token has none")
    auth_verify_signature: bool = Field(
        default=True, description="Verify Clerk token signatures against the JWKS"
    )

    # ===== AI Service (Gemini) =====
    gemini_api_key: str | None = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model to use")
    gemini_max_tokens: int = Field(default=2048, description="Maximum tokens for Gemini")
    ai_request_timeout: int = Field(default=30, description="AI request timeout in seconds")
    ai_max_retry_attempts: int = Field(default=3, description="Retries on rate limit or quota errors")
    ai_retry_backoff_factor: float = Field(default=2.0, description="Exponential backoff multiplier")
    ai_retry_min_wait: int = Field(default=2, description="Minimum wait between retries in seconds")
    ai_retry_max_wait: int = Field(default=30, description="Maximum wait between retries in seconds")
    chat_history_limit: int = Field(default=10, description="Messages of history sent to the model")

    # ===== File Storage Settings =====
    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    s3_bucket_name: str | None = Field(default=None, description="S3 bucket name")
    s3_region: str = Field(default="us-east-1", description="S3 region")
    s3_endpoint_url: str | None = Field(default=None, description="S3 endpoint URL")

    cloudflare_account_id: str | None = Field(default=None, description="CloudFlare account ID")
    cloudflare_access_key_id: str | None = Field(
        default=None, description="CloudFlare R2 access key"
    )
    cloudflare_secret_access_key: str | None = Field(
        default=None, description="CloudFlare R2 secret key"
    )
    cloudflare_bucket_name: str | None = Field(
        default=None, description="CloudFlare R2 bucket name"
    )

    storage_public_base_url: str | None = Field(
        default=None, description="Public base URL for stored objects (CDN or bucket domain)"
    )
    storage_upload_prefix: str = Field(default="uploads", description="Object key prefix for uploads")

    # ===== File Handling Limits =====
    max_upload_size: int = Field(
        default=10 * 1024 * 1024, description="Maximum staged upload size in bytes (10MB)"
    )
    allowed_upload_types: str = Field(
        default=DEFAULT_ALLOWED_UPLOAD_TYPES,
        description="Allowed upload content types (comma-separated)",
    )
    client_match_threshold: float = Field(
        default=0.6, description="Minimum similarity for fuzzy client name matches"
    )
    file_context_ttl_seconds: int = Field(
        default=300, description="Lifetime of staged files synced for a chat"
    )
    recent_files_window_minutes: int = Field(
        default=30, description="How far back stored files count as recent for a chat"
    )
    recent_files_limit: int = Field(default=10, description="Maximum recent files reported")

    @property
    def allowed_upload_types_list(self) -> list[str]:
        """Parse allowed upload types from comma-separated string."""
        return [t.strip() for t in self.allowed_upload_types.split(",") if t.strip()]

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(self.allowed_origins, str):
            return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]
        return self.allowed_origins if isinstance(self.allowed_origins, list) else []

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def has_ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def has_file_storage(self) -> bool:
        return bool(
            (self.aws_access_key_id and self.aws_secret_access_key and self.s3_bucket_name)
            or (
                self.cloudflare_access_key_id
                and self.cloudflare_secret_access_key
                and self.cloudflare_bucket_name
            )
        )

    @property
    def storage_type(self) -> str:
        if self.cloudflare_access_key_id:
            return "cloudflare_r2"
        if self.aws_access_key_id:
            return "aws_s3"
        return "none"

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
        return v

    @field_validator("max_upload_size")
    @classmethod
    def validate_upload_size(cls, v):
        if v > 100 * 1024 * 1024:
            raise ValueError("Maximum upload size cannot exceed 100MB")
        return v

    @field_validator("client_match_threshold")
    @classmethod
    def validate_match_threshold(cls, v):
        if not 0.0 < v <= 1.0:
            raise ValueError("Client match threshold must be between 0 and 1")
        return v


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if not settings.database_url:
            errors.append("DATABASE_URL is required")
        if not settings.clerk_secret_key:
            errors.append("CLERK_SECRET_KEY is required")
        if settings.is_production and not settings.gemini_api_key:
            errors.append("GEMINI_API_KEY is required in production")
        if settings.is_production and not settings.has_file_storage:
            errors.append("Storage credentials are required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "ai_enabled": settings.has_ai_enabled,
            "file_storage": settings.has_file_storage,
            "storage_type": settings.storage_type,
            "environment": settings.environment,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
        "auth_configured": bool(settings.clerk_secret_key),
        "storage_type": settings.storage_type,
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
]
