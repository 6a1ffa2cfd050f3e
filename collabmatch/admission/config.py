"""Configuration settings for request admission control."""

from __future__ import annotations

import json
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdmissionConfig(BaseSettings):
    """Admission queue configuration settings.

    Overridable via environment variables with the `ADMISSION_` prefix
    or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ADMISSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        enable_decoding=False,
        extra="ignore",
    )

    max_concurrent: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Maximum tasks running at once per named queue",
    )
    max_queued: Annotated[int, Field(gt=0)] | None = Field(
        default=None,
        description="Maximum tasks waiting per named queue (None = unbounded)",
    )
    bypass_paths: list[str] = Field(
        default_factory=lambda: ["/health", "/"],
        description="Request paths that skip admission control",
    )

    @field_validator("bypass_paths", mode="before")
    @classmethod
    def parse_bypass_paths(cls, v: object) -> object:
        """Accept a JSON list or a comma-separated string as well as a list."""
        if not isinstance(v, str):
            return v

        raw = v.strip()
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]

        return [part.strip() for part in raw.split(",") if part.strip()]


# Singleton instance for easy import
_admission_config: AdmissionConfig | None = None


def get_admission_config() -> AdmissionConfig:
    """Get the admission configuration singleton."""
    global _admission_config
    if _admission_config is None:
        _admission_config = AdmissionConfig()
    return _admission_config


def reset_admission_config() -> None:
    """Reset the admission configuration singleton (useful for testing)."""
    global _admission_config
    _admission_config = None
