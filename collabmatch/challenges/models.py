"""Data models for coding challenges, attempts and skill ratings."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from collabmatch.matching.models import Identifier

DifficultyLevel = Literal["easy", "medium", "hard", "expert"]
AttemptStatus = Literal["passed", "completed"]


class Challenge(BaseModel):
    """A coding challenge, optionally scoped to one project."""

    id: Identifier = Field(..., description="Challenge identifier")
    title: str = Field(default="")
    description: str = Field(default="")
    language_name: str | None = Field(
        default=None, description="Target programming language"
    )
    difficulty_level: DifficultyLevel = Field(default="medium")
    project_id: Identifier | None = Field(default=None)
    is_active: bool = Field(default=True)

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def lowercase_difficulty(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> Challenge:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


@dataclass
class AttemptRecord:
    """One evaluated submission of a challenge."""

    user_id: str
    challenge_id: str
    score: int
    passed: bool
    feedback: str
    submitted_code: str = ""
    language_name: str | None = None
    project_id: str | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def status(self) -> AttemptStatus:
        return "passed" if self.passed else "completed"


@dataclass
class AttemptStats:
    """Aggregate attempt statistics for one user."""

    total_attempts: int = 0
    passed: int = 0
    failed: int = 0
    average_score: int = 0

    @classmethod
    def from_attempts(cls, attempts: Iterable[tuple[str, int | None]]) -> AttemptStats:
        """Build stats from (status, score) pairs.

        Failed counts attempts that completed without passing; the average
        is rounded half up and 0 when there are no attempts.
        """
        rows = list(attempts)
        if not rows:
            return cls()
        total = sum(score or 0 for _, score in rows)
        return cls(
            total_attempts=len(rows),
            passed=sum(1 for status, _ in rows if status == "passed"),
            failed=sum(1 for status, _ in rows if status == "completed"),
            average_score=int(total / len(rows) + 0.5),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SkillRating:
    """A user's ELO rating in one language."""

    rating: int = 1200
    attempts: int = 0


@dataclass
class ChallengeRating:
    """A challenge's ELO rating and pass history."""

    rating: int
    attempts: int = 0
    pass_count: int = 0
