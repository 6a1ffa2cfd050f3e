"""Configuration settings for code submission evaluation."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EvaluationConfig(BaseSettings):
    """Code evaluation configuration settings.

    Overridable via environment variables with the `EVALUATION_` prefix
    or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EVALUATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    min_passing_score: Annotated[int, Field(ge=0, le=100)] = Field(
        default=70,
        description="Minimum score for a submission to pass",
    )
    min_code_length: Annotated[int, Field(ge=0)] = Field(
        default=10,
        description="Submissions shorter than this (after trimming) score 0",
    )
    default_language: str = Field(
        default="JavaScript",
        description="Language assumed when neither challenge nor project names one",
    )
    max_attempts: Annotated[int, Field(gt=0)] = Field(
        default=8,
        description="Maximum attempts per user and challenge",
    )


# Singleton instance for easy import
_evaluation_config: EvaluationConfig | None = None


def get_evaluation_config() -> EvaluationConfig:
    """Get the evaluation configuration singleton."""
    global _evaluation_config
    if _evaluation_config is None:
        _evaluation_config = EvaluationConfig()
    return _evaluation_config


def reset_evaluation_config() -> None:
    """Reset the evaluation configuration singleton (useful for testing)."""
    global _evaluation_config
    _evaluation_config = None
