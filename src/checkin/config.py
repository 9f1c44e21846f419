"""Application configuration for the check-in analyzer.

Values come from ``CHECKIN_*`` environment variables. The Gemini key also
accepts the conventional ``GEMINI_API_KEY`` / ``GOOGLE_API_KEY`` names.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_temp_root() -> Path:
    return Path(tempfile.gettempdir())


class AppConfig(BaseSettings):
    """Pydantic settings container for the analysis pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="CHECKIN_",
        populate_by_name=True,
        extra="ignore",
    )

    temp_root: Path = Field(
        default_factory=_default_temp_root,
        description="Directory for short-lived upload copies; deletes never leave it.",
    )
    provider: str = Field(
        default="gemini",
        description="Remote analysis provider identifier.",
    )
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "CHECKIN_GEMINI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"
        ),
        description="API key for the Gemini REST API.",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        min_length=1,
        description="Model used for the clinical analysis request.",
    )
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Base URL of the Gemini REST API.",
    )
    request_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout applied to each provider HTTP request.",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay between remote file status checks.",
    )
    max_poll_attempts: int = Field(
        default=30,
        ge=1,
        le=600,
        description="Maximum status checks before the upload is considered stuck.",
    )
    poll_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional overall bound on waiting for the remote file.",
    )
    max_upload_bytes: int = Field(
        default=100 * 1024 * 1024,
        ge=1,
        description="Largest accepted check-in video.",
    )

    @classmethod
    def build_default(cls) -> "AppConfig":
        """Construct configuration from the current environment."""

        return cls()


__all__ = ["AppConfig"]
