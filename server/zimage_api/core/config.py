from __future__ import annotations

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    app_name: str = Field(default="Z-Image API", alias="APP_NAME")
    description: str = "Unified image generation gateway for Gitee AI, HuggingFace and ModelScope"
    version: str = "1.0.0"

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT", ge=1, le=65535)
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Comma-separated list, e.g. "https://example.com,http://localhost:5173"
    cors_origins: str = Field(default=DEFAULT_CORS_ORIGINS, alias="CORS_ORIGINS")

    # Outbound calls to providers
    upstream_timeout: float = Field(
        default=120.0, alias="UPSTREAM_TIMEOUT", gt=0,
        description="Read/write timeout in seconds for provider requests"
    )
    upstream_connect_timeout: float = Field(
        default=15.0, alias="UPSTREAM_CONNECT_TIMEOUT", gt=0,
        description="Connect timeout in seconds for provider requests"
    )
    upstream_max_attempts: int = Field(
        default=3, alias="UPSTREAM_MAX_ATTEMPTS", ge=1, le=10,
        description="Attempts for Gradio queue calls when the transport fails"
    )
    upstream_retry_backoff: float = Field(
        default=1.0, alias="UPSTREAM_RETRY_BACKOFF", ge=0.0, le=30.0,
        description="Base delay in seconds between Gradio retry attempts"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def normalize_cors_origins(cls, value: object) -> str:
        """Accept either a comma-separated string or a list of origins."""
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ",".join(str(origin) for origin in value)
        return str(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate log level name."""
        if not value:
            return "INFO"
        normalized = str(value).strip().upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL '{value}'")
        return normalized

    @property
    def allowed_origins(self) -> List[str]:
        """Parsed CORS origin list."""
        return [
            origin.strip()
            for origin in self.cors_origins.split(",")
            if origin.strip()
        ]


settings = Settings()
