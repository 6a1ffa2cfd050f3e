"""Configuration settings for the skill matching and recommendation engine."""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchingConfig(BaseSettings):
    """Recommendation engine configuration settings.

    Every tunable of the scoring model lives here so it can be retuned
    through environment variables with the `MATCHING_` prefix (or a .env
    file) without code changes.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        enable_decoding=False,
        extra="ignore",
    )

    # Threshold settings (0-100 scale)
    recommendation_threshold: Annotated[float, Field(ge=0.0, le=100.0)] = Field(
        default=60.0,
        description="Minimum aggregate score for a project to be recommended",
    )
    display_threshold: Annotated[float, Field(ge=0.0, le=100.0)] = Field(
        default=50.0,
        description="Minimum score for showing a match summary in project views",
    )

    # Scoring weights (must sum to at most 1.0)
    topic_weight: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.30,
        description="Weight for topic coverage",
    )
    language_weight: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.35,
        description="Weight for language proficiency",
    )
    difficulty_weight: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.20,
        description="Weight for difficulty alignment",
    )

    # Requirement weighting
    primary_boost: Annotated[float, Field(ge=1.0)] = Field(
        default=1.5,
        description="Multiplier applied to primary topic/language requirements",
    )
    difficulty_penalty: Annotated[float, Field(ge=18.0, le=22.0)] = Field(
        default=18.0,
        description="Points lost per experience level below the project requirement",
    )

    # Diversity re-ranking
    diversity_lambda: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.25,
        description="MMR trade-off between relevance (0) and diversity (1)",
    )
    diversity_window_factor: Annotated[int, Field(ge=1)] = Field(
        default=2,
        description="Re-rank the top (factor x limit) candidates before truncating",
    )
    default_limit: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Number of recommendations returned when no limit is given",
    )

    # Candidate pool
    cache_duration_ms: Annotated[int, Field(ge=0)] = Field(
        default=60_000,
        description="Time-to-live of the cached candidate project pool (0 disables)",
    )
    candidate_statuses: list[str] = Field(
        default_factory=lambda: ["recruiting"],
        description="Project statuses considered recruitable",
    )
    candidate_visibility: str | None = Field(
        default=None,
        description="Restrict candidates to one visibility (None = any)",
    )

    @field_validator("candidate_statuses", mode="before")
    @classmethod
    def parse_candidate_statuses(cls, v: object) -> object:
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

    @model_validator(mode="after")
    def validate_weights_sum(self) -> MatchingConfig:
        """Ensure scoring weights sum to at most 1.0 (within tolerance)."""
        weight_sum = self.topic_weight + self.language_weight + self.difficulty_weight
        if weight_sum > 1.0 + 1e-6:
            raise ValueError(
                "Scoring weights must sum to at most 1.0. "
                f"Got {weight_sum:.6f} "
                f"(topic={self.topic_weight}, language={self.language_weight}, "
                f"difficulty={self.difficulty_weight})."
            )
        return self

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_duration_ms / 1000.0

    def thresholds(self) -> dict[str, Any]:
        """Active thresholds, boost, penalty and weights."""
        return {
            "recommendation_threshold": self.recommendation_threshold,
            "display_threshold": self.display_threshold,
            "primary_boost": self.primary_boost,
            "difficulty_penalty": self.difficulty_penalty,
            "weights": {
                "topic": self.topic_weight,
                "language": self.language_weight,
                "difficulty": self.difficulty_weight,
            },
        }


# Singleton instance for easy import
_matching_config: MatchingConfig | None = None


def get_matching_config() -> MatchingConfig:
    """Get the matching configuration singleton."""
    global _matching_config
    if _matching_config is None:
        _matching_config = MatchingConfig()
    return _matching_config


def reset_matching_config() -> None:
    """Reset the matching configuration singleton (useful for testing)."""
    global _matching_config
    _matching_config = None
