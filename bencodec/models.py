"""Pydantic models for bencodec.

Provides validated configuration models.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CodecConfig(BaseModel):
    """Decoder and encoder options."""

    max_depth: int = Field(
        default=256,
        ge=1,
        le=10000,
        description="Maximum list/dictionary nesting accepted when decoding",
    )
    read_chunk_size: int = Field(
        default=64 * 1024,
        ge=1,
        le=64 * 1024 * 1024,
        description="Bytes requested per read from stream sources",
    )
    reject_trailing_data: bool = Field(
        default=False,
        description="Fail when bytes follow the top-level dictionary",
    )
    strict_encode: bool = Field(
        default=True,
        description="Raise on unsupported values instead of skipping them",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Use structured (JSON) logging",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class Config(BaseModel):
    """Main configuration model."""

    codec: CodecConfig = Field(
        default_factory=CodecConfig,
        description="Codec configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
