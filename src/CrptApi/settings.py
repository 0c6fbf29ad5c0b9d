"""Pydantic v2 settings for the CrptApi client.

Values layer as explicit keyword arguments > ``CRPT_*`` environment variables >
defaults. The limiter's constructor surface stays ``(time_unit,
request_limit)``; everything here tunes how the client waits, talks HTTP, and
logs.
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from CrptApi.version import __version__

DOCUMENT_CREATE_URL = "https://ismp.crpt.ru/api/v3/lk/documents/create"


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Supported log output formats."""

    CONSOLE = "console"
    JSON = "json"


class CrptSettings(BaseSettings):
    """Client configuration resolved from the ``CRPT_`` environment namespace."""

    model_config = SettingsConfigDict(
        env_prefix="CRPT_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(DOCUMENT_CREATE_URL, description="Create-document endpoint")

    # Admission
    window_units: int = Field(
        1, ge=1, description="Window length as a multiple of the client's time unit"
    )
    rate_limit_strategy: Literal["fixed", "sliding"] = Field(
        "fixed", description="fixed windows or a rolling window (pyrate-limiter)"
    )
    poll_interval_s: float = Field(
        0.01, gt=0, description="Sleep between permit attempts (seconds)"
    )

    # HTTP
    timeout_connect_s: float = Field(5.0, description="Connect timeout (seconds)")
    timeout_read_s: float = Field(30.0, description="Read timeout (seconds)")
    timeout_write_s: float = Field(30.0, description="Write timeout (seconds)")
    timeout_pool_s: float = Field(5.0, description="Pool acquire timeout (seconds)")
    max_connections: int = Field(16, ge=1, description="Max connections")
    max_keepalive_connections: int = Field(8, ge=1, description="Max keepalive connections")
    http2: bool = Field(False, description="Negotiate HTTP/2 when h2 is installed")
    verify_tls: bool = Field(True, description="Verify TLS certificates against certifi")
    user_agent: str = Field(f"crpt-api/{__version__}", description="User-Agent header")

    # Logging
    log_level: LogLevel = Field(LogLevel.INFO, description="Logging level for the CLI")
    log_format: LogFormat = Field(LogFormat.CONSOLE, description="Console text or JSON lines")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.lower().startswith(("https://", "http://")):
            raise ValueError(f"url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("timeout_connect_s", "timeout_read_s", "timeout_write_s", "timeout_pool_s")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("All timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def validate_read_timeout_vs_write_timeout(self) -> "CrptSettings":
        """Ensure timeout_read_s is at least as large as timeout_write_s."""
        if self.timeout_read_s < self.timeout_write_s:
            raise ValueError("timeout_read_s must be >= timeout_write_s")
        if self.max_keepalive_connections > self.max_connections:
            raise ValueError("max_keepalive_connections must be <= max_connections")
        return self

    def config_hash(self) -> str:
        """Stable digest of the effective settings."""
        payload = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


__all__ = ["CrptSettings", "DOCUMENT_CREATE_URL", "LogFormat", "LogLevel"]
