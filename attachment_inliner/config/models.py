"""
Configuration models for the attachment inliner.

This module defines Pydantic models for configuration validation.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttachmentConfig(BaseModel):
    """Pydantic model for DocumentReference attachment handling."""

    model_config = ConfigDict(frozen=True)

    download_attachments: bool = Field(default=True)
    # Largest attachment, in bytes, that may be inlined
    inline_attachments: int = Field(default=0, ge=0)
    inline_attachment_types: Tuple[str, ...] = Field(
        default=("text/plain", "application/pdf")
    )
    pdf_to_text: bool = Field(default=False)
    base_url: str = Field(default="")

    @field_validator("inline_attachment_types")
    @classmethod
    def validate_inline_types(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """Drop blank prefixes, which would match every content type, and fold case."""
        return tuple(prefix.strip().lower() for prefix in v if prefix and prefix.strip())

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate that the base URL, when given, is an http(s) URL."""
        v = v.strip()
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must be an http(s) URL: {v}")
        return v


class RetryConfig(BaseModel):
    """Pydantic model for attachment download retries."""

    max_attempts: int = Field(default=4, ge=1)
    delay: float = Field(default=5.0, ge=0)
    fatal_status_codes: List[int] = Field(default_factory=lambda: [500, 422])


class HttpConfig(BaseModel):
    """Pydantic model for the HTTP client."""

    timeout: float = Field(default=60.0, gt=0)
    headers: Dict[str, str] = Field(default_factory=dict)


class StorageConfig(BaseModel):
    """Pydantic model for the local attachment storage."""

    destination: Optional[str] = None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the destination is a directory, creating it if needed."""
        if v is None:
            return v
        path = Path(v).resolve()
        if not path.exists():
            path.mkdir(parents=True, exist_ok=True)
        elif not path.is_dir():
            raise ValueError(f"Not a directory: {path}")
        return str(path)


class LoggingConfig(BaseModel):
    """Pydantic model for logging configuration."""

    level: str = Field(default="INFO")
    structured: bool = Field(default=True)

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class MainConfig(BaseModel):
    """Pydantic model for the main configuration file."""

    attachments: AttachmentConfig = Field(default_factory=AttachmentConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
